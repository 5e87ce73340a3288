"""
Shared fixtures: sample scoring payloads and a fresh app per test.
"""
import pytest
from fastapi.testclient import TestClient

from app.main import create_app

TEST_API_KEY = "sk_test_key"
AUTH_HEADERS = {"X-API-Key": TEST_API_KEY}


def make_payload(match_id="m1", status="IN_PROGRESS", side1_points="30", side2_points="15"):
    """Scoring payload in the nested {"data": {...}} shape."""
    return {
        "data": {
            "matchId": match_id,
            "matchStatus": status,
            "score": {
                "side1PointScore": side1_points,
                "side2PointScore": side2_points,
                "sets": [
                    {"setNumber": 1, "side1Score": 6, "side2Score": 4, "isCompleted": True},
                ],
            },
            "sides": [
                {"players": [{"participant": {"first_name": "John", "last_name": "Doe"}}]},
                {"players": [{"participant": {"first_name": "Jane", "last_name": "Smith"}}]},
            ],
        }
    }


@pytest.fixture
def scenario_payload():
    return make_payload()


@pytest.fixture
def client():
    """TestClient over a fresh app; one event loop shared by HTTP and WebSocket."""
    application = create_app()
    application.state.api_keys = [TEST_API_KEY]
    with TestClient(application) as test_client:
        yield test_client


@pytest.fixture
def payload_factory():
    return make_payload


@pytest.fixture
def auth_headers():
    return dict(AUTH_HEADERS)
