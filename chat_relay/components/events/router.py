"""
Event Router - Dispatches inbound client events.

Separates event validation from delivery:
- set-username: validate, bind the name in the registry, announce to all
- send-message: validate, require a named sender, broadcast to all
- disconnect:   hand over to the lifecycle manager, nothing is broadcast

Every relay error is handled here: logged (by the error itself), counted,
and reported on the RoutingResult. Nothing propagates to the connection task.

Usage:
    router = EventRouter(registry, broadcaster, lifecycle, metrics)
    result = await router.route_frame(connection_id, raw_text)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from chat_relay.components.core.context import sanitize_log_data
from chat_relay.components.events.types import (
    ChatMessage,
    Disconnect,
    InboundEvent,
    SendMessage,
    SetUsername,
    UsernameAnnouncement,
    parse_inbound,
    require_text,
)
from shared.config.logging import get_logger
from shared.config.settings import settings
from shared.utils.exceptions import (
    InvalidInputError,
    NotNamedError,
    RelayError,
    UnknownConnectionError,
)

if TYPE_CHECKING:
    from chat_relay.components.connection.registry import ConnectionRegistry
    from chat_relay.components.metrics.collector import MetricsCollector
    from chat_relay.core.connection.broadcaster import BroadcastResult, ConnectionBroadcaster

logger = get_logger(__name__)


class LifecycleProtocol(Protocol):
    """Protocol for the lifecycle manager to avoid circular imports."""

    async def disconnect(self, connection_id: str, reason: str = ...) -> bool: ...


@dataclass
class RoutingResult:
    """Result of routing one inbound event."""

    event_kind: str
    broadcast: "BroadcastResult | None" = None
    error: RelayError | None = None

    @property
    def success(self) -> bool:
        """Whether the event was accepted."""
        return self.error is None

    @property
    def total_sent(self) -> int:
        """Number of connections that received the resulting broadcast."""
        return self.broadcast.sent if self.broadcast else 0


class EventRouter:
    """
    Routes inbound events from one connection.

    Ordering: events of a single connection are routed in the order the
    connection's reader loop awaits them; nothing is promised across
    connections.

    Broadcasts go to every connection, the sender included. Clients render
    their own echo.
    """

    def __init__(
        self,
        registry: "ConnectionRegistry",
        broadcaster: "ConnectionBroadcaster",
        lifecycle: LifecycleProtocol,
        metrics: "MetricsCollector",
        max_username_length: int = settings.relay_max_username_length,
    ) -> None:
        """
        Initialize event router.

        Args:
            registry: Connection registry (name binding, sender lookup)
            broadcaster: Fan-out delivery
            lifecycle: Receives disconnect events
            metrics: Counts routed and rejected events
            max_username_length: Longest accepted display name
        """
        self._registry = registry
        self._broadcaster = broadcaster
        self._lifecycle = lifecycle
        self._metrics = metrics
        self._max_username_length = max_username_length

    async def route_frame(self, connection_id: str, raw: str) -> RoutingResult:
        """
        Parse a client text frame and route it.

        Malformed frames are rejected as InvalidInput without affecting
        the connection.
        """
        self._metrics.increment_events_received()
        try:
            event = parse_inbound(raw, connection_id)
        except InvalidInputError as e:
            self._metrics.record_rejection(e.kind)
            return RoutingResult(event_kind="invalid", error=e)
        return await self.route(connection_id, event)

    async def route(self, connection_id: str, event: InboundEvent) -> RoutingResult:
        """
        Route an already-parsed event.

        Returns:
            RoutingResult with the broadcast outcome or the handled error.
        """
        result = RoutingResult(event_kind=type(event).__name__)
        try:
            if isinstance(event, SetUsername):
                result.broadcast = await self._handle_set_username(connection_id, event)
            elif isinstance(event, SendMessage):
                result.broadcast = await self._handle_send_message(connection_id, event)
            elif isinstance(event, Disconnect):
                await self._lifecycle.disconnect(connection_id, reason=event.reason)
            else:
                raise InvalidInputError(
                    "Unsupported event",
                    connection_id=connection_id,
                    event_kind=result.event_kind,
                )
        except RelayError as e:
            self._metrics.record_rejection(e.kind)
            result.error = e
            return result

        self._metrics.increment_events_routed()
        return result

    async def _handle_set_username(
        self,
        connection_id: str,
        event: SetUsername,
    ) -> "BroadcastResult":
        name = require_text(event.name, "username", connection_id).strip()
        if len(name) > self._max_username_length:
            raise InvalidInputError(
                "Username too long",
                connection_id=connection_id,
                length=len(name),
                max_length=self._max_username_length,
            )

        connection = await self._registry.set_name(connection_id, name)
        logger.info(
            "Username set",
            connection_id=connection_id,
            username=sanitize_log_data(name),
        )
        return await self._broadcaster.deliver_to_all(
            UsernameAnnouncement(display_name=connection.display_name)
        )

    async def _handle_send_message(
        self,
        connection_id: str,
        event: SendMessage,
    ) -> "BroadcastResult":
        body = require_text(event.body, "message", connection_id)
        connection = self._registry.get(connection_id)
        if connection is None:
            raise UnknownConnectionError(connection_id, operation="send_message")
        if not connection.is_named:
            raise NotNamedError(connection_id)

        # Name is read at send time, so a rename applies to later messages
        sender_name = connection.display_name
        if event.user_name is not None and event.user_name != sender_name:
            logger.debug(
                "Ignoring client-supplied userName",
                connection_id=connection_id,
                claimed=sanitize_log_data(event.user_name),
                tracked=sanitize_log_data(sender_name),
            )

        return await self._broadcaster.deliver_to_all(
            ChatMessage(sender_display_name=sender_name, body=body)
        )
