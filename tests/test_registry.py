"""
Unit tests for the subscription registry.
"""
import pytest

from app.realtime.registry import (
    DuplicateConnectError,
    SubscriptionRegistry,
    UnknownClientError,
    court_topic,
    match_topic,
)


@pytest.fixture
def registry():
    reg = SubscriptionRegistry()
    reg.connect("c1")
    reg.connect("c2")
    return reg


def test_topic_helpers():
    assert match_topic("m1") == "match:m1"
    assert court_topic("7") == "court:7"


def test_connect_starts_with_no_topics(registry):
    assert registry.is_connected("c1")
    assert registry.topics_for("c1") == frozenset()
    assert registry.connected_clients() == ["c1", "c2"]


def test_duplicate_connect_raises_and_keeps_state(registry):
    registry.join("c1", match_topic("m1"))

    with pytest.raises(DuplicateConnectError):
        registry.connect("c1")

    assert registry.topics_for("c1") == {match_topic("m1")}


def test_join_twice_holds_topic_once(registry):
    assert registry.join("c1", match_topic("m1")) is True
    assert registry.join("c1", match_topic("m1")) is False

    assert registry.topics_for("c1") == {match_topic("m1")}
    assert registry.subscribers(match_topic("m1")) == {"c1"}


def test_leave_is_idempotent(registry):
    registry.join("c1", match_topic("m1"))

    assert registry.leave("c1", match_topic("m1")) is True
    assert registry.leave("c1", match_topic("m1")) is False
    assert registry.leave("c1", match_topic("never-joined")) is False
    assert registry.subscribers(match_topic("m1")) == frozenset()


def test_namespaces_are_independent(registry):
    registry.join("c1", match_topic("1"))
    registry.join("c1", court_topic("1"))

    assert registry.topics_for("c1") == {"match:1", "court:1"}
    registry.leave("c1", match_topic("1"))
    assert registry.topics_for("c1") == {"court:1"}


def test_subscribers_per_topic(registry):
    registry.join("c1", match_topic("m1"))
    registry.join("c2", match_topic("m1"))
    registry.join("c2", match_topic("m2"))

    assert registry.subscribers(match_topic("m1")) == {"c1", "c2"}
    assert registry.subscribers(match_topic("m2")) == {"c2"}
    assert registry.subscribers(match_topic("m3")) == frozenset()


def test_disconnect_removes_memberships(registry):
    registry.join("c1", match_topic("m1"))
    registry.join("c2", match_topic("m1"))

    registry.disconnect("c1")

    assert not registry.is_connected("c1")
    assert registry.subscribers(match_topic("m1")) == {"c2"}
    assert registry.topics_for("c1") == frozenset()


def test_disconnect_unknown_client_is_silent(registry):
    registry.join("c1", match_topic("m1"))
    before = (registry.connected_clients(), registry.topics_for("c1"), registry.topics_for("c2"))

    registry.disconnect("ghost")
    registry.disconnect("ghost")

    after = (registry.connected_clients(), registry.topics_for("c1"), registry.topics_for("c2"))
    assert before == after


def test_disconnect_twice_is_silent(registry):
    registry.disconnect("c1")
    registry.disconnect("c1")
    assert registry.connected_clients() == ["c2"]


def test_reconnect_after_disconnect_starts_fresh(registry):
    registry.join("c1", match_topic("m1"))
    registry.disconnect("c1")
    registry.connect("c1")
    assert registry.topics_for("c1") == frozenset()


def test_join_unknown_client_raises(registry):
    with pytest.raises(UnknownClientError):
        registry.join("ghost", match_topic("m1"))
    assert registry.subscribers(match_topic("m1")) == frozenset()


def test_leave_unknown_client_raises(registry):
    with pytest.raises(UnknownClientError):
        registry.leave("ghost", match_topic("m1"))


def test_stats(registry):
    registry.join("c1", match_topic("m1"))
    registry.join("c2", court_topic("1"))

    assert registry.get_stats() == {
        "clients": 2,
        "topics": 2,
        "match_topics": 1,
        "court_topics": 1,
    }
