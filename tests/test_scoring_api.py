"""
API tests: scoring ingest/retrieval, mapping dry-run, auth gate and the
WebSocket channel end to end.
"""
from config.settings import settings


# =============================================================================
# Ingest and retrieval
# =============================================================================

def test_ingest_then_retrieve(client, auth_headers, scenario_payload):
    """Scenario: nested payload ingested, scoreboard retrieved by match ID"""
    response = client.post("/scoring/update", json=scenario_payload, headers=auth_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["matchId"] == "m1"
    assert body["updatedAt"] == body["scoreboardData"]["lastUpdate"]

    data = client.get("/scoring/scoreboard/m1", headers=auth_headers).json()
    assert data["success"] is True
    scoreboard = data["data"]
    assert scoreboard["side1Player"] == "John Doe"
    assert scoreboard["side2Player"] == "Jane Smith"
    assert scoreboard["side1Points"] == "30"
    assert scoreboard["side2Points"] == "15"
    assert scoreboard["status"] == "IN_PROGRESS"
    assert scoreboard["sets"][0]["isCompleted"] is True
    assert scoreboard["rawData"] == scenario_payload


def test_ingest_without_match_id(client, auth_headers):
    """Scenario: no match ID anywhere -> soft fail, nothing stored"""
    response = client.post(
        "/scoring/update",
        json={"data": {"matchStatus": "IN_PROGRESS"}},
        headers=auth_headers,
    )
    assert response.status_code == 200
    assert response.json() == {"success": False, "error": "Match ID not found in scoring data"}

    lookup = client.get("/scoring/scoreboard/m1", headers=auth_headers).json()
    assert lookup["success"] is False
    assert lookup["error"].startswith("No scoring data found")
    assert client.get("/health").json()["matches"] == 0


def test_ingest_malformed_payload_is_soft_fail(client, auth_headers):
    response = client.post(
        "/scoring/update",
        json={"data": {"matchId": "m2", "score": {"sets": "6-4"}}},
        headers=auth_headers,
    )
    body = response.json()
    assert response.status_code == 200
    assert body["success"] is False
    assert "sets" in body["error"]
    assert "timestamp" in body

    lookup = client.get("/scoring/scoreboard/m2", headers=auth_headers).json()
    assert lookup["success"] is False


def test_failed_ingest_keeps_previous_snapshot(client, auth_headers, payload_factory):
    client.post("/scoring/update", json=payload_factory(side1_points="15"), headers=auth_headers)
    client.post(
        "/scoring/update",
        json={"data": {"matchId": "m1", "score": {"sets": "six-love"}}},
        headers=auth_headers,
    )

    scoreboard = client.get("/scoring/scoreboard/m1", headers=auth_headers).json()["data"]
    assert scoreboard["side1Points"] == "15"


def test_odd_field_shapes_still_ingest(client, auth_headers):
    response = client.post(
        "/scoring/update",
        json={"data": {
            "matchId": "m3",
            "score": {"server": "A", "side1PointScore": {"p": 1}},
            "sides": {},
            "courtId": {"id": 1},
            "winningSide": "",
        }},
        headers=auth_headers,
    )
    body = response.json()
    assert body["success"] is True
    assert body["scoreboardData"]["side1Points"] == "0"
    assert body["scoreboardData"]["side1Player"] == "Unknown Player"
    assert "court" not in body["scoreboardData"]


def test_ingest_invalid_json_body(client, auth_headers):
    response = client.post(
        "/scoring/update",
        content=b"{not json",
        headers={**auth_headers, "Content-Type": "application/json"},
    )
    body = response.json()
    assert response.status_code == 200
    assert body["success"] is False
    assert "timestamp" in body


def test_later_update_replaces_snapshot(client, auth_headers, payload_factory):
    client.post("/scoring/update", json=payload_factory(status="IN_PROGRESS"), headers=auth_headers)
    client.post("/scoring/update", json=payload_factory(status="FINISHED", side1_points="0"), headers=auth_headers)

    scoreboard = client.get("/scoring/scoreboard/m1", headers=auth_headers).json()["data"]
    assert scoreboard["status"] == "COMPLETED"
    assert scoreboard["side1Points"] == "0"
    assert client.get("/health").json()["matches"] == 1


# =============================================================================
# Mapping dry-run
# =============================================================================

def test_test_mapping_returns_both_views(client, auth_headers, scenario_payload):
    body = client.post("/scoring/test-mapping", json=scenario_payload, headers=auth_headers).json()

    assert body["success"] is True
    assert body["mappedScoreUpdate"]["matchId"] == "m1"
    assert body["mappedScoreUpdate"]["matchStatus"] == "IN_PROGRESS"
    assert "timestamp" in body["mappedScoreUpdate"]
    assert body["scoreboardData"]["side1Player"] == "John Doe"
    assert body["originalDataSize"] > 0
    assert body["simplifiedDataSize"] > 0


def test_test_mapping_does_not_store(client, auth_headers, scenario_payload):
    client.post("/scoring/test-mapping", json=scenario_payload, headers=auth_headers)

    lookup = client.get("/scoring/scoreboard/m1", headers=auth_headers).json()
    assert lookup["success"] is False


def test_test_mapping_without_match_id(client, auth_headers):
    body = client.post("/scoring/test-mapping", json={"foo": "bar"}, headers=auth_headers).json()
    assert body == {"success": False, "error": "Match ID not found in scoring data"}


# =============================================================================
# Auth gate
# =============================================================================

def test_missing_api_key_is_rejected(client, scenario_payload):
    response = client.post("/scoring/update", json=scenario_payload)
    assert response.status_code == 401
    assert response.json()["detail"] == "API key is required"


def test_invalid_api_key_is_rejected(client):
    response = client.get("/scoring/scoreboard/m1", headers={"X-API-Key": "sk_wrong"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid API key"


def test_bearer_token_is_accepted(client, auth_headers):
    token = auth_headers["X-API-Key"]
    response = client.get("/scoring/scoreboard/m1", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200


# =============================================================================
# WebSocket channel
# =============================================================================

def test_subscriber_receives_one_update_matching_snapshot(client, auth_headers, scenario_payload):
    """Scenario: client joins match:m1, ingest publishes, client sees the snapshot"""
    with client.websocket_connect(settings.ws_path) as ws:
        ws.send_json({"event": "join_match", "data": {"matchId": "m1"}})
        ack = ws.receive_json()
        assert ack["event"] == "joined_match"
        assert ack["data"]["matchId"] == "m1"

        client.post("/scoring/update", json=scenario_payload, headers=auth_headers)

        update = ws.receive_json()
        assert update["event"] == "score_update"
        assert update["data"]["matchId"] == "m1"

        snapshot = client.get("/scoring/scoreboard/m1", headers=auth_headers).json()["data"]
        for key, value in update["data"].items():
            assert snapshot[key] == value

        # The next frame is the court ack, so no second score_update was queued
        ws.send_json({"event": "join_court", "data": {"courtId": "1"}})
        assert ws.receive_json()["event"] == "joined_court"


def test_unsubscribed_client_gets_global_update(client, auth_headers, scenario_payload):
    with client.websocket_connect(settings.ws_path) as ws:
        # Round trip so the session is registered before publishing
        ws.send_json({"event": "join_court", "data": {"courtId": "1"}})
        assert ws.receive_json()["event"] == "joined_court"

        client.post("/scoring/update", json=scenario_payload, headers=auth_headers)

        update = ws.receive_json()
        assert update["event"] == "score_update"
        assert update["data"]["matchId"] == "m1"
        assert update["data"]["side2Player"] == "Jane Smith"


def test_left_client_falls_back_to_global_channel(client, auth_headers, scenario_payload):
    with client.websocket_connect(settings.ws_path) as ws:
        ws.send_json({"event": "join_match", "data": {"matchId": "m1"}})
        ws.receive_json()
        ws.send_json({"event": "leave_match", "data": {"matchId": "m1"}})
        ws.send_json({"event": "join_court", "data": {"courtId": "1"}})
        ws.receive_json()

        client.post("/scoring/update", json=scenario_payload, headers=auth_headers)

        assert ws.receive_json()["event"] == "score_update"
        stats = client.get("/stats").json()
        assert stats["dispatcher"]["publishes"] == 1


def test_bad_frame_gets_error_event(client):
    with client.websocket_connect(settings.ws_path) as ws:
        ws.send_text("hello")
        reply = ws.receive_json()
        assert reply["event"] == "error"

        ws.send_json({"event": "join_match", "data": {"matchId": "m1"}})
        assert ws.receive_json()["event"] == "joined_match"


def test_disconnect_unregisters_client(client):
    with client.websocket_connect(settings.ws_path) as ws:
        ws.send_json({"event": "join_match", "data": {"matchId": "m1"}})
        ws.receive_json()
        assert client.get("/health").json()["clients"] == 1

    assert client.get("/health").json()["clients"] == 0


def test_binary_frames_do_not_end_the_session(client):
    with client.websocket_connect(settings.ws_path) as ws:
        ws.send_bytes(b"\xff\x00")
        assert ws.receive_json()["event"] == "error"

        ws.send_bytes(b'{"event": "join_match", "data": {"matchId": "m1"}}')
        assert ws.receive_json()["event"] == "joined_match"
        assert client.get("/health").json()["clients"] == 1
