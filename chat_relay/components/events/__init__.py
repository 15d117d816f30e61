"""
Event handling components.

Event types, wire codec, and routing.
"""

from chat_relay.components.events.types import (
    InboundEventType,
    OutboundEventType,
    RESERVED_EVENT_NAMES,
    VALID_INBOUND_TYPES,
    SetUsername,
    SendMessage,
    Disconnect,
    UsernameAnnouncement,
    ChatMessage,
    parse_inbound,
    encode_frame,
)
from chat_relay.components.events.router import EventRouter, RoutingResult

__all__ = [
    # Event types
    "InboundEventType",
    "OutboundEventType",
    "RESERVED_EVENT_NAMES",
    "VALID_INBOUND_TYPES",
    "SetUsername",
    "SendMessage",
    "Disconnect",
    "UsernameAnnouncement",
    "ChatMessage",
    "parse_inbound",
    "encode_frame",
    # Event router
    "EventRouter",
    "RoutingResult",
]
