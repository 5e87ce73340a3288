"""
Subscription registry: which topics each connected client has joined.

Topics are opaque strings partitioned by prefix ("match:" / "court:").
The registry is the only owner of the client -> topics mapping; the
dispatcher asks it who to deliver to.
"""
import threading
import logging
from typing import Dict, FrozenSet, List, Set, Any

logger = logging.getLogger("realtime.registry")

MATCH_PREFIX = "match:"
COURT_PREFIX = "court:"


def match_topic(match_id: str) -> str:
    """Topic for room-scoped updates of one match."""
    return f"{MATCH_PREFIX}{match_id}"


def court_topic(court_id: str) -> str:
    """Topic for one court (venue)."""
    return f"{COURT_PREFIX}{court_id}"


# ============================================================================
# Custom Exceptions
# ============================================================================

class RegistryError(Exception):
    """Raised on registry contract violations."""
    pass


class DuplicateConnectError(RegistryError):
    """Raised when a client ID is connected twice."""
    pass


class UnknownClientError(RegistryError):
    """Raised when joining or leaving topics for a client that is not connected."""
    pass


# ============================================================================
# Registry
# ============================================================================

class SubscriptionRegistry:
    """
    Tracks connected clients and their topic memberships.

    Keeps a reverse index (topic -> clients) so room-scoped lookups cost
    the size of the room, not the number of connected clients.
    Thread-safe via a single lock around every mutation.
    """

    def __init__(self):
        self._client_topics: Dict[str, Set[str]] = {}
        self._topic_clients: Dict[str, Set[str]] = {}
        self._lock = threading.Lock()

    def connect(self, client_id: str) -> None:
        """
        Register a client with an empty topic set.

        Raises:
            DuplicateConnectError: If the client is already registered
        """
        with self._lock:
            if client_id in self._client_topics:
                raise DuplicateConnectError(f"Client {client_id} is already connected")
            self._client_topics[client_id] = set()
        logger.info(f"Client connected: {client_id}")

    def disconnect(self, client_id: str) -> None:
        """Remove a client and all of its memberships. Unknown clients are ignored."""
        with self._lock:
            topics = self._client_topics.pop(client_id, None)
            if topics is None:
                return
            for topic in topics:
                self._remove_from_topic(topic, client_id)
        logger.info(f"Client disconnected: {client_id}")

    def join(self, client_id: str, topic: str) -> bool:
        """
        Add a topic to a client's set. Idempotent.

        Returns:
            True if the topic was newly added, False if already held

        Raises:
            UnknownClientError: If the client is not connected
        """
        with self._lock:
            topics = self._require(client_id)
            if topic in topics:
                return False
            topics.add(topic)
            self._topic_clients.setdefault(topic, set()).add(client_id)
        logger.info(f"Client {client_id} joined room: {topic}")
        return True

    def leave(self, client_id: str, topic: str) -> bool:
        """
        Remove a topic from a client's set. Idempotent.

        Returns:
            True if the topic was held and removed, False otherwise

        Raises:
            UnknownClientError: If the client is not connected
        """
        with self._lock:
            topics = self._require(client_id)
            if topic not in topics:
                return False
            topics.discard(topic)
            self._remove_from_topic(topic, client_id)
        logger.info(f"Client {client_id} left room: {topic}")
        return True

    def subscribers(self, topic: str) -> FrozenSet[str]:
        """Client IDs currently subscribed to a topic."""
        with self._lock:
            return frozenset(self._topic_clients.get(topic, ()))

    def topics_for(self, client_id: str) -> FrozenSet[str]:
        """Topics held by a client (empty for unknown clients)."""
        with self._lock:
            return frozenset(self._client_topics.get(client_id, ()))

    def connected_clients(self) -> List[str]:
        """All connected client IDs, in connect order."""
        with self._lock:
            return list(self._client_topics.keys())

    def is_connected(self, client_id: str) -> bool:
        with self._lock:
            return client_id in self._client_topics

    def get_stats(self) -> Dict[str, Any]:
        """Get registry statistics."""
        with self._lock:
            return {
                "clients": len(self._client_topics),
                "topics": len(self._topic_clients),
                "match_topics": sum(1 for t in self._topic_clients if t.startswith(MATCH_PREFIX)),
                "court_topics": sum(1 for t in self._topic_clients if t.startswith(COURT_PREFIX)),
            }

    def _require(self, client_id: str) -> Set[str]:
        # Caller holds the lock
        topics = self._client_topics.get(client_id)
        if topics is None:
            raise UnknownClientError(f"Client {client_id} is not connected")
        return topics

    def _remove_from_topic(self, topic: str, client_id: str) -> None:
        # Caller holds the lock
        members = self._topic_clients.get(topic)
        if members is None:
            return
        members.discard(client_id)
        if not members:
            del self._topic_clients[topic]
