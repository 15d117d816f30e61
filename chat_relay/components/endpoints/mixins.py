"""
Frame and handshake checks shared by relay endpoints.

    MessageValidationMixin: drops binary and oversized frames
    OriginValidationMixin: checks the Origin header before the upgrade

Both are combined with WebSocketEndpointBase, as ChatEndpoint does.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

from fastapi import WebSocket

from chat_relay.components.core.constants import validate_websocket_origin
from shared.config.logging import get_logger
from shared.config.settings import settings
from shared.utils.exceptions import InvalidInputError

if TYPE_CHECKING:
    from chat_relay.relay_manager import RelayManager

logger = get_logger(__name__)


# =============================================================================
# Protocols for mixin dependencies
# =============================================================================


class HasWebSocket(Protocol):
    """Anything holding the WebSocket being served."""

    websocket: WebSocket
    endpoint_name: str
    connection_id: str | None


class HasManager(Protocol):
    """Anything holding the relay manager."""

    manager: "RelayManager"


# =============================================================================
# MessageValidationMixin
# =============================================================================


class MessageValidationMixin:
    """
    Mixin for inbound frame validation.

    Oversized and binary frames are rejected as InvalidInput and dropped;
    the connection stays open.

    Requires:
        - self.manager: RelayManager
        - self.connection_id: str | None
    """

    def validate_message_size(self: "HasWebSocket & HasManager", data: str) -> bool:
        """
        Validate frame size against the configured limit.

        Returns:
            True if valid, False if too large (frame dropped).
        """
        max_size = settings.relay_max_message_size
        if len(data) > max_size:
            error = InvalidInputError(
                "Frame size exceeded limit",
                connection_id=self.connection_id,
                size=len(data),
                max_size=max_size,
            )
            self.manager.metrics.record_rejection(error.kind)
            return False
        return True

    def extract_text(self: "HasWebSocket & HasManager", message: dict[str, Any]) -> str | None:
        """
        Pull the text out of an ASGI websocket.receive message.

        Returns:
            The text payload, or None for binary frames (rejected).
        """
        text = message.get("text")
        if text is not None:
            return text
        error = InvalidInputError(
            "Binary frames are not supported",
            connection_id=self.connection_id,
        )
        self.manager.metrics.record_rejection(error.kind)
        return None


# =============================================================================
# OriginValidationMixin
# =============================================================================


class OriginValidationMixin:
    """
    Mixin for WebSocket origin validation.

    Requires:
        - self.websocket: WebSocket
    """

    def validate_origin(self: HasWebSocket) -> bool:
        """
        Validate the Origin header against allowed origins.

        Returns:
            True if origin is allowed, False otherwise.
        """
        origin = self.websocket.headers.get("origin")
        return validate_websocket_origin(origin, settings)
