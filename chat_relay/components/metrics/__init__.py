"""
Metrics components.

Internal counters surfaced through the health endpoint.
"""

from chat_relay.components.metrics.collector import (
    MetricsCollector,
    BroadcastMetrics,
    ConnectionMetrics,
    EventMetrics,
)

__all__ = [
    "MetricsCollector",
    "BroadcastMetrics",
    "ConnectionMetrics",
    "EventMetrics",
]
