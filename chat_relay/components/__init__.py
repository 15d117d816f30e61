"""
Chat Relay Components.

Organized into domain-specific modules:
- core/       - Foundational components (constants, log sanitizing)
- connection/ - Connection registry and state machine
- events/     - Event types, wire codec and routing
- endpoints/  - WebSocket endpoints (base, mixins, handlers)
- metrics/    - Internal counters

New code should import from specific submodules for clarity.
"""

from chat_relay.components.core.constants import (
    WSCloseCode,
    RelayConstants,
    DEFAULT_ALLOWED_ORIGINS,
    validate_websocket_origin,
)
from chat_relay.components.core.context import sanitize_log_data
from chat_relay.components.connection.registry import (
    Connection,
    ConnectionRegistry,
    ConnectionState,
)
from chat_relay.components.events.types import (
    InboundEventType,
    OutboundEventType,
    SetUsername,
    SendMessage,
    Disconnect,
    UsernameAnnouncement,
    ChatMessage,
    parse_inbound,
    encode_frame,
)
from chat_relay.components.events.router import EventRouter, RoutingResult
from chat_relay.components.metrics.collector import MetricsCollector
from chat_relay.components.endpoints.handlers import ChatEndpoint

__all__ = [
    # Core
    "WSCloseCode",
    "RelayConstants",
    "DEFAULT_ALLOWED_ORIGINS",
    "validate_websocket_origin",
    "sanitize_log_data",
    # Connection
    "Connection",
    "ConnectionRegistry",
    "ConnectionState",
    # Events
    "InboundEventType",
    "OutboundEventType",
    "SetUsername",
    "SendMessage",
    "Disconnect",
    "UsernameAnnouncement",
    "ChatMessage",
    "parse_inbound",
    "encode_frame",
    "EventRouter",
    "RoutingResult",
    # Metrics
    "MetricsCollector",
    # Endpoints
    "ChatEndpoint",
]
