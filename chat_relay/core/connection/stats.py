"""
Connection Statistics.

Aggregates statistics from the registry and metrics collector for the
health endpoint.
"""

from __future__ import annotations

from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from chat_relay.components.connection.registry import ConnectionRegistry
    from chat_relay.components.metrics.collector import MetricsCollector


class ConnectionStats:
    """Aggregates connection statistics from components."""

    def __init__(
        self,
        registry: "ConnectionRegistry",
        metrics: "MetricsCollector",
        outbox_size: int,
    ) -> None:
        self._registry = registry
        self._metrics = metrics
        self._outbox_size = outbox_size

    def get_stats(self) -> dict[str, Any]:
        """Current connection counts, outbox pressure and metrics snapshot."""
        registry_stats = self._registry.get_stats()
        backlogs = [c.outbox.qsize() for c in list(self._registry.connections.values())]

        return {
            "total_connections": registry_stats["total"],
            "named_connections": registry_stats["named"],
            "pending_connections": registry_stats["pending"],
            "outbox_size": self._outbox_size,
            "outbox_max_backlog": max(backlogs, default=0),
            "metrics": self._metrics.get_snapshot(),
        }
