"""
Metrics Collector for the chat relay.

Centralizes counters for observability. Counter updates happen on the
broadcast hot path, so they are synchronous and guarded by a threading.Lock
(safe from the event loop and from worker threads alike).
"""

from __future__ import annotations

import threading
from collections import Counter
from dataclasses import dataclass
from typing import Any


@dataclass
class BroadcastMetrics:
    """Metrics for fan-out operations."""
    total: int = 0
    with_failures: int = 0
    recipients_sent: int = 0
    recipients_failed: int = 0


@dataclass
class ConnectionMetrics:
    """Metrics for connection lifecycle."""
    opened: int = 0
    closed: int = 0
    rejected_origin: int = 0
    rejected_shutdown: int = 0
    send_timeouts: int = 0


@dataclass
class EventMetrics:
    """Metrics for inbound event processing."""
    received: int = 0
    routed: int = 0


class MetricsCollector:
    """
    Thread-safe metrics collector for the relay.

    Usage:
        metrics = MetricsCollector()
        metrics.increment_broadcast(sent=3, failed=1)
        metrics.record_rejection("NotNamed")
        stats = metrics.get_snapshot()
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._broadcast = BroadcastMetrics()
        self._connection = ConnectionMetrics()
        self._event = EventMetrics()
        # error kind -> count (InvalidInput, NotNamed, UnknownConnection, DeliveryFailed)
        self._rejections: Counter[str] = Counter()

    # ==========================================================================
    # Broadcast Metrics
    # ==========================================================================

    def increment_broadcast(self, sent: int, failed: int) -> None:
        """Record one fan-out and its per-recipient outcome."""
        with self._lock:
            self._broadcast.total += 1
            self._broadcast.recipients_sent += sent
            self._broadcast.recipients_failed += failed
            if failed:
                self._broadcast.with_failures += 1

    # ==========================================================================
    # Connection Metrics
    # ==========================================================================

    def increment_connections_opened(self) -> None:
        with self._lock:
            self._connection.opened += 1

    def increment_connections_closed(self) -> None:
        with self._lock:
            self._connection.closed += 1

    def increment_rejected_origin(self) -> None:
        with self._lock:
            self._connection.rejected_origin += 1

    def increment_rejected_shutdown(self) -> None:
        with self._lock:
            self._connection.rejected_shutdown += 1

    def increment_send_timeouts(self) -> None:
        with self._lock:
            self._connection.send_timeouts += 1

    # ==========================================================================
    # Event Metrics
    # ==========================================================================

    def increment_events_received(self) -> None:
        with self._lock:
            self._event.received += 1

    def increment_events_routed(self) -> None:
        with self._lock:
            self._event.routed += 1

    def record_rejection(self, kind: str) -> None:
        """Count a handled relay error by kind."""
        with self._lock:
            self._rejections[kind] += 1

    def rejections(self, kind: str) -> int:
        """Current count for one error kind."""
        with self._lock:
            return self._rejections[kind]

    # ==========================================================================
    # Snapshot
    # ==========================================================================

    def get_snapshot(self) -> dict[str, Any]:
        """
        Get a snapshot of all metrics.

        Metric names follow {category}_{metric}; rejection counters are
        named rejected_{kind}.
        """
        with self._lock:
            return {
                "broadcasts_total": self._broadcast.total,
                "broadcasts_with_failures": self._broadcast.with_failures,
                "broadcasts_recipients_sent": self._broadcast.recipients_sent,
                "broadcasts_recipients_failed": self._broadcast.recipients_failed,
                "connections_opened": self._connection.opened,
                "connections_closed": self._connection.closed,
                "connections_rejected_origin": self._connection.rejected_origin,
                "connections_rejected_shutdown": self._connection.rejected_shutdown,
                "connections_send_timeouts": self._connection.send_timeouts,
                "events_received": self._event.received,
                "events_routed": self._event.routed,
                **{f"rejected_{kind}": count for kind, count in sorted(self._rejections.items())},
            }

    def reset(self) -> dict[str, Any]:
        """Reset all metrics and return the previous values."""
        snapshot = self.get_snapshot()
        with self._lock:
            self._broadcast = BroadcastMetrics()
            self._connection = ConnectionMetrics()
            self._event = EventMetrics()
            self._rejections.clear()
        return snapshot
