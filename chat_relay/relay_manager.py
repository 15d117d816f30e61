"""
Relay Manager.

Thin orchestrator that composes the relay components:
- ConnectionRegistry: connection state (the only shared mutable state)
- ConnectionBroadcaster: single and fan-out delivery
- ConnectionLifecycle: accept/register/disconnect
- EventRouter: inbound event dispatch
- ConnectionStats: statistics aggregation

Endpoints and the application talk to this class only.
"""

from __future__ import annotations

from typing import Any, TYPE_CHECKING

from chat_relay.components.connection.registry import Connection, ConnectionRegistry
from chat_relay.components.events.router import EventRouter, RoutingResult
from chat_relay.components.events.types import Disconnect, InboundEvent, OutboundEvent
from chat_relay.components.metrics.collector import MetricsCollector
from chat_relay.core.connection import (
    BroadcastResult,
    ConnectionBroadcaster,
    ConnectionLifecycle,
    ConnectionStats,
)
from shared.config.logging import get_logger
from shared.config.settings import settings

if TYPE_CHECKING:
    from fastapi import WebSocket

logger = get_logger(__name__)

__all__ = ["RelayManager"]


class RelayManager:
    """
    Manages relay connections and event flow.

    Configuration from settings:
    - relay_outbox_size: Frames buffered per recipient (default: 256)
    - relay_max_username_length: Longest display name (default: 64)
    - relay_send_timeout: Bound for a single socket send (default: 5s)
    """

    def __init__(
        self,
        outbox_size: int | None = None,
        max_username_length: int | None = None,
        send_timeout: float | None = None,
    ) -> None:
        """Initialize the relay manager with composed components."""
        if outbox_size is None:
            outbox_size = settings.relay_outbox_size
        if max_username_length is None:
            max_username_length = settings.relay_max_username_length
        if send_timeout is None:
            send_timeout = settings.relay_send_timeout
        self.outbox_size = outbox_size
        self.send_timeout = send_timeout

        self._metrics = MetricsCollector()
        self._registry = ConnectionRegistry(outbox_size=self.outbox_size)
        self._broadcaster = ConnectionBroadcaster(
            registry=self._registry,
            metrics=self._metrics,
        )
        self._lifecycle = ConnectionLifecycle(
            registry=self._registry,
            metrics=self._metrics,
        )
        self._router = EventRouter(
            registry=self._registry,
            broadcaster=self._broadcaster,
            lifecycle=self._lifecycle,
            metrics=self._metrics,
            max_username_length=max_username_length,
        )
        self._stats = ConnectionStats(
            registry=self._registry,
            metrics=self._metrics,
            outbox_size=self.outbox_size,
        )

    # =========================================================================
    # Public properties
    # =========================================================================

    @property
    def registry(self) -> ConnectionRegistry:
        return self._registry

    @property
    def metrics(self) -> MetricsCollector:
        return self._metrics

    @property
    def total_connections(self) -> int:
        """Total number of registered connections."""
        return len(self._registry)

    @property
    def is_shutdown(self) -> bool:
        return self._lifecycle.is_shutdown

    def get_connection(self, connection_id: str) -> Connection | None:
        return self._registry.get(connection_id)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def connect(self, websocket: "WebSocket") -> str:
        """Accept and register a WebSocket. Raises ConnectionError on failure."""
        return await self._lifecycle.connect(websocket)

    async def open(self) -> str:
        """Register a connection without a socket (tests and in-process clients)."""
        return await self._lifecycle.open()

    async def disconnect(self, connection_id: str, reason: str = "client_disconnect") -> RoutingResult:
        """Route a Disconnect event for a connection. Idempotent."""
        return await self._router.route(connection_id, Disconnect(reason=reason))

    def begin_shutdown(self) -> None:
        """Refuse new connections; existing ones drain as clients leave."""
        self._lifecycle.set_shutdown(True)
        logger.info("Relay shutting down", online=self.total_connections)

    # =========================================================================
    # Events
    # =========================================================================

    async def handle_frame(self, connection_id: str, raw: str) -> RoutingResult:
        """Parse and route one client text frame."""
        return await self._router.route_frame(connection_id, raw)

    async def handle_event(self, connection_id: str, event: InboundEvent) -> RoutingResult:
        """Route one already-parsed event."""
        return await self._router.route(connection_id, event)

    async def broadcast(self, event: OutboundEvent) -> BroadcastResult:
        """Deliver an event to every connection."""
        return await self._broadcaster.deliver_to_all(event)

    # =========================================================================
    # Statistics
    # =========================================================================

    def get_stats(self) -> dict[str, Any]:
        return self._stats.get_stats()

    def record_send_timeout(self) -> None:
        self._metrics.increment_send_timeouts()

    def record_origin_rejection(self) -> None:
        self._metrics.increment_rejected_origin()
