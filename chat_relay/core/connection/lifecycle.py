"""
Connection Lifecycle Management.

Drives the per-connection state machine:

    pending --set-username--> named
    pending --disconnect----> closed
    named   --disconnect----> closed

Accepting the WebSocket and registering it is the only way into PENDING;
disconnect is the only way into CLOSED and removes the registry entry.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from chat_relay.components.core.constants import RelayConstants
from shared.config.logging import get_logger

if TYPE_CHECKING:
    from fastapi import WebSocket
    from chat_relay.components.connection.registry import ConnectionRegistry
    from chat_relay.components.metrics.collector import MetricsCollector

logger = get_logger(__name__)


class ConnectionLifecycle:
    """
    Manages the lifecycle of relay connections.

    Responsibilities:
    - Register new connections as PENDING, then accept the WebSocket
    - Disconnect and clean up connections (CLOSED), idempotently
    """

    def __init__(
        self,
        registry: "ConnectionRegistry",
        metrics: "MetricsCollector",
    ) -> None:
        """
        Bind the lifecycle to the registry it mutates.

        Args:
            registry: Owner of connection state
            metrics: Counts connects, disconnects and refusals
        """
        self._registry = registry
        self._metrics = metrics
        self._shutdown = False

    @property
    def online_count(self) -> int:
        """Number of connections currently registered."""
        return len(self._registry)

    @property
    def is_shutdown(self) -> bool:
        """Whether shutdown has been initiated."""
        return self._shutdown

    def set_shutdown(self, value: bool) -> None:
        """Set shutdown state."""
        self._shutdown = value

    async def open(self) -> str:
        """
        Register a new connection in PENDING state.

        Returns:
            The new connection id.

        Raises:
            ConnectionError: If shutdown has begun.
        """
        if self._shutdown:
            self._metrics.increment_rejected_shutdown()
            raise ConnectionError("Server is shutting down")

        connection_id = await self._registry.register()
        self._metrics.increment_connections_opened()
        logger.info(
            "Client connected",
            connection_id=connection_id,
            online=self.online_count,
        )
        return connection_id

    async def connect(
        self,
        websocket: "WebSocket",
        timeout: float = RelayConstants.WS_ACCEPT_TIMEOUT,
    ) -> str:
        """
        Register a connection and accept its WebSocket.

        The entry exists before the client sees the handshake complete, so
        any broadcast the client can observe afterwards includes it.

        Args:
            websocket: The WebSocket to accept.
            timeout: Timeout for completing the handshake.

        Returns:
            The new connection id.

        Raises:
            ConnectionError: If shutting down or the handshake fails.
        """
        connection_id = await self.open()

        accepted = False
        try:
            await asyncio.wait_for(websocket.accept(), timeout=timeout)
            accepted = True
        except asyncio.TimeoutError:
            raise ConnectionError("WebSocket accept timed out") from None
        except Exception as e:
            raise ConnectionError(f"WebSocket accept failed: {e}") from e
        finally:
            if not accepted:
                await self.disconnect(connection_id, reason="accept_failed")

        return connection_id

    async def disconnect(self, connection_id: str, reason: str = "client_disconnect") -> bool:
        """
        Close a connection and remove it from the registry.

        A repeated or raced disconnect for the same id is a silent no-op.

        Returns:
            True if this call removed the connection, False if it was already gone.
        """
        connection = await self._registry.remove(connection_id)
        if connection is None:
            logger.debug("Disconnect for unknown or closed connection", connection_id=connection_id)
            return False

        self._metrics.increment_connections_closed()
        logger.info(
            "Client disconnected",
            connection_id=connection_id,
            username=connection.display_name,
            reason=reason,
            online=self.online_count,
        )
        return True
