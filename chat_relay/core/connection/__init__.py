"""
Connection Management Module.

Components composed by RelayManager:
- lifecycle.py: Connection accept/register/disconnect
- broadcaster.py: Single and fan-out delivery
- stats.py: Statistics aggregation
"""

from chat_relay.core.connection.lifecycle import ConnectionLifecycle
from chat_relay.core.connection.broadcaster import BroadcastResult, ConnectionBroadcaster
from chat_relay.core.connection.stats import ConnectionStats

__all__ = [
    "ConnectionLifecycle",
    "BroadcastResult",
    "ConnectionBroadcaster",
    "ConnectionStats",
]
