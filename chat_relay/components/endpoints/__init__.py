"""
WebSocket endpoint components.

Base class, mixins, and concrete endpoint handlers.
"""

from chat_relay.components.endpoints.base import WebSocketEndpointBase
from chat_relay.components.endpoints.mixins import (
    MessageValidationMixin,
    OriginValidationMixin,
)
from chat_relay.components.endpoints.handlers import ChatEndpoint

__all__ = [
    # Base classes
    "WebSocketEndpointBase",
    # Mixins
    "MessageValidationMixin",
    "OriginValidationMixin",
    # Handlers
    "ChatEndpoint",
]
