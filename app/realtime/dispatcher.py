"""
Broadcast dispatcher: fans accepted score updates out to connected clients.

Two channels per publish:
- room-scoped: clients subscribed to "match:<id>" receive the projection
- global: every other connected client receives {matchId, ...projection}

Each client gets at most one copy per publish call. There is no
acknowledgment tracking, retry or redelivery.
"""
import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Protocol

from .registry import SubscriptionRegistry, match_topic

logger = logging.getLogger("realtime.dispatcher")

SCORE_UPDATE_EVENT = "score_update"


class Subscriber(Protocol):
    """Outbound sink for one client (see ClientConnection)."""

    client_id: str

    def offer(self, event: str, data: Dict[str, Any]) -> bool:
        """Enqueue an event without blocking; False if it was dropped."""
        ...


@dataclass
class DeliveryReport:
    """Outcome of one publish call."""
    match_id: str
    topic: str
    room_delivered: int = 0
    global_delivered: int = 0
    dropped: int = 0

    @property
    def total_delivered(self) -> int:
        return self.room_delivered + self.global_delivered

    def to_dict(self) -> dict:
        return {
            "matchId": self.match_id,
            "topic": self.topic,
            "roomDelivered": self.room_delivered,
            "globalDelivered": self.global_delivered,
            "dropped": self.dropped,
        }


class BroadcastDispatcher:
    """
    Delivers events to client sinks selected through the registry.

    The registry decides who is subscribed to what; the dispatcher only owns
    the mapping from client ID to its outbound sink.
    """

    def __init__(self, registry: SubscriptionRegistry):
        self._registry = registry
        self._sinks: Dict[str, Subscriber] = {}
        self._lock = threading.Lock()
        self._stats = {"publishes": 0, "deliveries": 0, "dropped": 0}

    # ---------------------------------------------------------
    # Sink management
    # ---------------------------------------------------------

    def attach(self, sink: Subscriber) -> None:
        with self._lock:
            self._sinks[sink.client_id] = sink

    def detach(self, client_id: str) -> None:
        """Forget a client's sink. Unknown clients are ignored."""
        with self._lock:
            self._sinks.pop(client_id, None)

    def _sink(self, client_id: str) -> Optional[Subscriber]:
        with self._lock:
            return self._sinks.get(client_id)

    # ---------------------------------------------------------
    # Delivery
    # ---------------------------------------------------------

    def emit(self, client_id: str, event: str, data: Dict[str, Any]) -> bool:
        """
        Send one event to a single client.

        Returns:
            True if queued, False if the client is gone or its queue is full
        """
        sink = self._sink(client_id)
        if sink is None:
            logger.debug(f"No sink for client {client_id}, '{event}' not sent")
            return False
        return sink.offer(event, data)

    def publish(self, match_id: str, projection: Mapping[str, Any]) -> DeliveryReport:
        """
        Fan a score update out on both channels.

        Args:
            match_id: The match the update belongs to
            projection: Serialized scoreboard projection

        Returns:
            DeliveryReport with per-channel counts
        """
        topic = match_topic(match_id)
        report = DeliveryReport(match_id=match_id, topic=topic)

        room_payload = dict(projection)
        room = self._registry.subscribers(topic)
        for client_id in room:
            if self.emit(client_id, SCORE_UPDATE_EVENT, room_payload):
                report.room_delivered += 1
            else:
                report.dropped += 1

        global_payload = {"matchId": match_id, **projection}
        for client_id in self._registry.connected_clients():
            if client_id in room:
                continue
            if self.emit(client_id, SCORE_UPDATE_EVENT, global_payload):
                report.global_delivered += 1
            else:
                report.dropped += 1

        with self._lock:
            self._stats["publishes"] += 1
            self._stats["deliveries"] += report.total_delivered
            self._stats["dropped"] += report.dropped

        logger.info(
            f"Broadcasted score update for match {match_id} to room {topic} "
            f"(room={report.room_delivered}, global={report.global_delivered}, "
            f"dropped={report.dropped})"
        )
        return report

    def get_stats(self) -> Dict[str, Any]:
        """Get dispatcher statistics."""
        with self._lock:
            return {**self._stats, "attached": len(self._sinks)}
