"""
WebSocket gateway for the real-time scoring channel.

Frames are JSON objects of the form {"event": <name>, "data": {...}}, sent
as text or as UTF-8 binary frames.

client -> server: join_match{matchId}, leave_match{matchId}, join_court{courtId}
server -> client: joined_match, joined_court, score_update, error

The channel carries no credential check.
"""
import asyncio
import json
import logging
from typing import Any, Callable, Dict, Optional

from fastapi import WebSocket, WebSocketDisconnect
from pydantic import BaseModel, ValidationError

from .connection import ClientConnection
from .dispatcher import BroadcastDispatcher
from .registry import RegistryError, SubscriptionRegistry, court_topic, match_topic

logger = logging.getLogger("realtime.gateway")

JOINED_MATCH_MESSAGE = "Joined match room. Waiting for scoring data..."
JOINED_COURT_MESSAGE = "Joined court room. Waiting for scoring data..."


class ClientMessage(BaseModel):
    """Control frame sent by a client."""
    event: str
    data: Dict[str, Any] = {}


class GatewayError(Exception):
    """Raised when a control frame cannot be handled."""
    pass


def _required_id(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None or isinstance(value, (dict, list)) or not str(value).strip():
        raise GatewayError(f"{key} is required")
    return str(value).strip()


class RealtimeGateway:
    """
    Drives the registry and dispatcher from client connections and frames.
    """

    def __init__(
        self,
        registry: SubscriptionRegistry,
        dispatcher: BroadcastDispatcher,
        max_queue: int = 256,
    ):
        self._registry = registry
        self._dispatcher = dispatcher
        self._max_queue = max_queue
        self._handlers: Dict[str, Callable[[str, Dict[str, Any]], None]] = {
            "join_match": self.join_match,
            "leave_match": self.leave_match,
            "join_court": self.join_court,
        }

    # ---------------------------------------------------------
    # Connection lifecycle
    # ---------------------------------------------------------

    def open(self, client_id: Optional[str] = None) -> ClientConnection:
        """
        Register a new client and attach its outbound queue.

        Raises:
            DuplicateConnectError: If client_id is already connected
        """
        connection = ClientConnection(client_id=client_id, max_queue=self._max_queue)
        self._registry.connect(connection.client_id)
        self._dispatcher.attach(connection)
        return connection

    def close(self, client_id: str) -> None:
        """Tear down a client. Safe to call more than once."""
        self._dispatcher.detach(client_id)
        self._registry.disconnect(client_id)

    # ---------------------------------------------------------
    # Control messages
    # ---------------------------------------------------------

    def join_match(self, client_id: str, data: Dict[str, Any]) -> None:
        match_id = _required_id(data, "matchId")
        self._registry.join(client_id, match_topic(match_id))
        # Acknowledge even when already joined; scoring data follows on publish
        self._dispatcher.emit(
            client_id, "joined_match", {"matchId": match_id, "message": JOINED_MATCH_MESSAGE}
        )

    def leave_match(self, client_id: str, data: Dict[str, Any]) -> None:
        match_id = _required_id(data, "matchId")
        self._registry.leave(client_id, match_topic(match_id))

    def join_court(self, client_id: str, data: Dict[str, Any]) -> None:
        court_id = _required_id(data, "courtId")
        self._registry.join(client_id, court_topic(court_id))
        self._dispatcher.emit(
            client_id, "joined_court", {"courtId": court_id, "message": JOINED_COURT_MESSAGE}
        )

    def handle_text(self, client_id: str, text: str) -> None:
        """
        Handle one raw text frame from a client.

        Faults are reported back to that client as an "error" event; the
        connection and every other client's state are left untouched.
        """
        try:
            message = ClientMessage.model_validate(json.loads(text))
            handler = self._handlers.get(message.event)
            if handler is None:
                raise GatewayError(f"Unknown event: {message.event}")
            handler(client_id, message.data)
        except (ValueError, ValidationError, GatewayError, RegistryError) as e:
            logger.warning(f"Rejected frame from client {client_id}: {e}")
            self._dispatcher.emit(client_id, "error", {"message": str(e)})

    def handle_frame(self, client_id: str, text: Optional[str] = None, data: Optional[bytes] = None) -> None:
        """
        Handle one received frame, text or binary.

        Binary frames are read as UTF-8 JSON; undecodable ones get an
        "error" event like any other bad frame.
        """
        if text is None and data is not None:
            try:
                text = data.decode("utf-8")
            except UnicodeDecodeError as e:
                logger.warning(f"Rejected binary frame from client {client_id}: {e}")
                self._dispatcher.emit(client_id, "error", {"message": "Binary frame is not UTF-8 text"})
                return
        if text is None:
            self._dispatcher.emit(client_id, "error", {"message": "Empty frame"})
            return
        self.handle_text(client_id, text)

    # ---------------------------------------------------------
    # WebSocket session
    # ---------------------------------------------------------

    async def serve(self, websocket: WebSocket) -> None:
        """Run one WebSocket session until the client disconnects."""
        await websocket.accept()
        connection = self.open()
        client_id = connection.client_id
        sender = asyncio.create_task(connection.pump(websocket.send_json))

        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
                self.handle_frame(client_id, message.get("text"), message.get("bytes"))
        except WebSocketDisconnect:
            pass
        finally:
            self.close(client_id)
            sender.cancel()
            try:
                await sender
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.debug(f"Sender for client {client_id} ended with error: {e}")
