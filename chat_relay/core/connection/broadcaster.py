"""
Connection Broadcaster.

Delivers outbound events to one or all connections. Delivery is a
non-blocking enqueue onto the recipient's bounded outbox; each connection's
writer task performs the actual socket send. A slow or dead peer therefore
only fills its own outbox and never stalls the broadcasting task.

Best-effort: no acknowledgment, no retry.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from chat_relay.components.events.types import OutboundEvent, encode_frame
from shared.config.logging import get_logger
from shared.utils.exceptions import DeliveryFailedError

if TYPE_CHECKING:
    from chat_relay.components.connection.registry import ConnectionRegistry
    from chat_relay.components.metrics.collector import MetricsCollector

logger = get_logger(__name__)


@dataclass
class BroadcastResult:
    """Outcome of one fan-out."""

    recipients: int = 0
    sent: int = 0
    failed_ids: list[str] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failed_ids)


class ConnectionBroadcaster:
    """
    Handles delivering frames to connections.

    Responsibilities:
    - Enqueue a frame for a single connection
    - Fan out to a registry snapshot with per-recipient failure isolation
    """

    def __init__(
        self,
        registry: "ConnectionRegistry",
        metrics: "MetricsCollector",
    ) -> None:
        """
        Initialize broadcaster with dependencies.

        Args:
            registry: Source of recipients (looked up by id per delivery)
            metrics: Collects broadcast metrics
        """
        self._registry = registry
        self._metrics = metrics

    async def deliver_to_one(self, connection_id: str, frame: str) -> None:
        """
        Enqueue one serialized frame for one connection.

        Never blocks: a full outbox is a failed delivery.

        Raises:
            DeliveryFailedError: The connection is gone, closed, or backlogged.
        """
        connection = self._registry.get(connection_id)
        if connection is None or connection.is_closed:
            raise DeliveryFailedError(connection_id, "connection gone")
        try:
            connection.outbox.put_nowait(frame)
        except asyncio.QueueFull:
            raise DeliveryFailedError(
                connection_id,
                "outbox full",
                backlog=connection.outbox.qsize(),
            ) from None

    async def deliver_event_to_one(self, connection_id: str, event: OutboundEvent) -> None:
        """Serialize an event and deliver it to one connection."""
        await self.deliver_to_one(connection_id, encode_frame(event))

    async def deliver_to_all(self, event: OutboundEvent) -> BroadcastResult:
        """
        Send an event to every connection registered at the time of the call.

        The recipient list is a snapshot taken under the registry lock; the
        lock is released before any delivery. Connections that join during
        the fan-out do not receive the event; connections that leave are
        counted as failed.
        """
        frame = encode_frame(event)
        recipients = await self._registry.all_ids()
        result = BroadcastResult(recipients=len(recipients))

        for connection_id in recipients:
            try:
                await self.deliver_to_one(connection_id, frame)
            except DeliveryFailedError as e:
                result.failed_ids.append(connection_id)
                self._metrics.record_rejection(e.kind)
                continue
            result.sent += 1

        self._metrics.increment_broadcast(sent=result.sent, failed=result.failed)
        if result.failed:
            logger.debug(
                "Broadcast completed with failures",
                event_type=event.event_type.value,
                sent=result.sent,
                failed=result.failed,
                total=result.recipients,
            )
        return result
