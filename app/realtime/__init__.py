"""
Real-time module: topic subscriptions and score update fanout.
"""
from .registry import (
    SubscriptionRegistry,
    RegistryError,
    DuplicateConnectError,
    UnknownClientError,
    match_topic,
    court_topic,
)
from .connection import ClientConnection, OutboundMessage
from .dispatcher import BroadcastDispatcher, DeliveryReport, SCORE_UPDATE_EVENT
from .gateway import RealtimeGateway

__all__ = [
    # Registry
    "SubscriptionRegistry",
    "RegistryError",
    "DuplicateConnectError",
    "UnknownClientError",
    "match_topic",
    "court_topic",
    # Delivery
    "ClientConnection",
    "OutboundMessage",
    "BroadcastDispatcher",
    "DeliveryReport",
    "SCORE_UPDATE_EVENT",
    # Transport
    "RealtimeGateway",
]
