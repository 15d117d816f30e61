"""
Event Value Objects for the chat relay.

Inbound events are parsed from JSON text frames and validated at
construction; outbound events know how to serialize themselves once for
fan-out.

Wire envelope (both directions):
    {"type": "<event name>", "payload": <payload>}
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Self

from shared.utils.exceptions import InvalidInputError


class InboundEventType(str, Enum):
    """Events a client may send."""

    SET_USERNAME = "set-username"
    SEND_MESSAGE = "send-message"


class OutboundEventType(str, Enum):
    """Events the relay broadcasts."""

    NEW_USER = "new-user"
    NEW_MESSAGE = "new-message"


# Lifecycle signals come from the transport, never from a client frame
RESERVED_EVENT_NAMES: frozenset[str] = frozenset({"connect", "disconnect"})

VALID_INBOUND_TYPES: frozenset[str] = frozenset(e.value for e in InboundEventType)


def require_text(value: Any, field_name: str, connection_id: str | None) -> str:
    """Return value if it is a non-blank string, else raise InvalidInputError."""
    if not isinstance(value, str):
        raise InvalidInputError(
            f"{field_name} must be a string",
            connection_id=connection_id,
            received=type(value).__name__,
        )
    if not value.strip():
        raise InvalidInputError(f"{field_name} must not be empty", connection_id=connection_id)
    return value


# =============================================================================
# Inbound events
# =============================================================================


@dataclass(frozen=True, slots=True)
class SetUsername:
    """Client asks to bind (or rebind) its display name."""

    name: str

    @classmethod
    def from_payload(cls, payload: Any, connection_id: str | None = None) -> Self:
        name = require_text(payload, "username", connection_id)
        return cls(name=name.strip())


@dataclass(frozen=True, slots=True)
class SendMessage:
    """
    Client sends a chat message.

    user_name is whatever the client claimed; the relay never trusts it.
    """

    body: str
    user_name: str | None = None

    @classmethod
    def from_payload(cls, payload: Any, connection_id: str | None = None) -> Self:
        if not isinstance(payload, dict):
            raise InvalidInputError(
                "send-message payload must be an object",
                connection_id=connection_id,
                received=type(payload).__name__,
            )
        body = require_text(payload.get("message"), "message", connection_id)
        user_name = payload.get("userName")
        return cls(body=body, user_name=user_name if isinstance(user_name, str) else None)


@dataclass(frozen=True, slots=True)
class Disconnect:
    """Transport reported the link closed."""

    reason: str = "client_disconnect"


InboundEvent = SetUsername | SendMessage | Disconnect


def parse_inbound(raw: str, connection_id: str | None = None) -> SetUsername | SendMessage:
    """
    Parse one client text frame.

    Raises:
        InvalidInputError: Not JSON, not an object, missing/unknown/reserved
            type, or a payload that fails validation.
    """
    try:
        data = json.loads(raw)
    except (ValueError, TypeError):
        raise InvalidInputError("Frame is not valid JSON", connection_id=connection_id) from None

    if not isinstance(data, dict):
        raise InvalidInputError("Frame must be a JSON object", connection_id=connection_id)

    event_type = data.get("type")
    if not isinstance(event_type, str) or not event_type:
        raise InvalidInputError("Frame missing 'type' field", connection_id=connection_id)

    if event_type in RESERVED_EVENT_NAMES:
        raise InvalidInputError(
            "Lifecycle events cannot be sent as frames",
            connection_id=connection_id,
            event_type=event_type,
        )

    if event_type not in VALID_INBOUND_TYPES:
        raise InvalidInputError(
            "Unknown event type",
            connection_id=connection_id,
            event_type=event_type[:64],
        )

    payload = data.get("payload")
    if event_type == InboundEventType.SET_USERNAME:
        return SetUsername.from_payload(payload, connection_id)
    return SendMessage.from_payload(payload, connection_id)


# =============================================================================
# Outbound events
# =============================================================================


@dataclass(frozen=True, slots=True)
class UsernameAnnouncement:
    """Broadcast when a client sets its name."""

    display_name: str

    event_type = OutboundEventType.NEW_USER

    def to_wire(self) -> dict[str, Any]:
        return {"type": self.event_type.value, "payload": self.display_name}


@dataclass(frozen=True, slots=True)
class ChatMessage:
    """Broadcast for each accepted message. Never retained."""

    sender_display_name: str
    body: str

    event_type = OutboundEventType.NEW_MESSAGE

    def to_wire(self) -> dict[str, Any]:
        return {
            "type": self.event_type.value,
            "payload": {"userName": self.sender_display_name, "message": self.body},
        }


OutboundEvent = UsernameAnnouncement | ChatMessage


def encode_frame(event: OutboundEvent) -> str:
    """Serialize an outbound event to the text frame sent to every recipient."""
    return json.dumps(event.to_wire(), ensure_ascii=False, separators=(",", ":"))
