"""
Chat Relay Core Module.

- connection/: Connection lifecycle, broadcasting, stats
"""

from chat_relay.core.connection import (
    ConnectionLifecycle,
    BroadcastResult,
    ConnectionBroadcaster,
    ConnectionStats,
)

__all__ = [
    "ConnectionLifecycle",
    "BroadcastResult",
    "ConnectionBroadcaster",
    "ConnectionStats",
]
