"""
Per-client outbound buffering.

Each connected client owns one bounded FIFO queue. The dispatcher enqueues
without awaiting; a sender task drains the queue onto the socket. A slow
socket therefore only fills its own queue and never blocks fanout to the
other clients.
"""
import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

logger = logging.getLogger("realtime.connection")


@dataclass(frozen=True)
class OutboundMessage:
    """A server -> client event."""
    event: str
    data: Dict[str, Any]

    def to_frame(self) -> Dict[str, Any]:
        """JSON frame sent over the socket."""
        return {"event": self.event, "data": self.data}


class ClientConnection:
    """
    Outbound side of one real-time client.

    Delivery is at-most-once: when the queue is full the event is dropped
    and counted, never retried.
    """

    def __init__(self, client_id: Optional[str] = None, max_queue: int = 256):
        """
        Initialize the connection.

        Args:
            client_id: Stable ID for the client, generated when omitted
            max_queue: Max undelivered events before new ones are dropped
        """
        self.client_id = client_id or uuid.uuid4().hex
        self._queue: "asyncio.Queue[OutboundMessage]" = asyncio.Queue(maxsize=max_queue)
        self.dropped = 0

    def offer(self, event: str, data: Dict[str, Any]) -> bool:
        """
        Enqueue an event without waiting.

        Returns:
            True if queued, False if dropped because the queue is full
        """
        try:
            self._queue.put_nowait(OutboundMessage(event=event, data=data))
            return True
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(
                f"Outbound queue full for client {self.client_id}, "
                f"dropped '{event}' (total dropped: {self.dropped})"
            )
            return False

    async def get(self) -> OutboundMessage:
        """Wait for the next queued event."""
        return await self._queue.get()

    @property
    def pending(self) -> int:
        """Number of queued, undelivered events."""
        return self._queue.qsize()

    async def pump(self, send: Callable[[Dict[str, Any]], Awaitable[None]]) -> None:
        """
        Drain the queue onto the transport until cancelled or send fails.

        Args:
            send: Coroutine function writing one JSON frame to the socket
        """
        while True:
            message = await self.get()
            await send(message.to_frame())
