"""
Connection management components.

Registry of live connections and their naming state machine.
"""

from chat_relay.components.connection.registry import (
    ALLOWED_TRANSITIONS,
    Connection,
    ConnectionRegistry,
    ConnectionState,
    can_transition,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "Connection",
    "ConnectionRegistry",
    "ConnectionState",
    "can_transition",
]
