"""
Core relay components.

Foundational components: constants and log sanitizing.
"""

from chat_relay.components.core.constants import (
    WSCloseCode,
    RelayConstants,
    DEFAULT_ALLOWED_ORIGINS,
    validate_websocket_origin,
)
from chat_relay.components.core.context import sanitize_log_data

__all__ = [
    # Constants
    "WSCloseCode",
    "RelayConstants",
    "DEFAULT_ALLOWED_ORIGINS",
    "validate_websocket_origin",
    # Context
    "sanitize_log_data",
]
