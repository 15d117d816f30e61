"""
WebSocket Endpoint Base Class.

Provides the connection lifecycle shared by relay endpoints:
handshake validation, registration, a reader loop that routes inbound
frames, a writer loop that drains the connection's outbox, and
unregistration when either side stops.

The reader and writer run as sibling tasks in an anyio task group, so a slow
socket send never blocks routing for other connections, and cancelling the
endpoint cancels both.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import anyio
from fastapi import WebSocket, WebSocketDisconnect

from chat_relay.components.core.constants import WSCloseCode
from chat_relay.components.core.context import sanitize_log_data
from chat_relay.components.endpoints.mixins import MessageValidationMixin
from shared.config.logging import get_logger
from shared.infrastructure.correlation import bind_connection_id, reset_connection_id

if TYPE_CHECKING:
    from chat_relay.relay_manager import RelayManager

logger = get_logger(__name__)


class WebSocketEndpointBase(MessageValidationMixin, ABC):
    """
    Base class for relay WebSocket endpoints.

    Subclasses implement:
    - validate_handshake(): Accept or refuse the upgrade (closes on refusal)
    - handle_message(): Process one inbound text frame

    Usage:
        endpoint = ChatEndpoint(websocket, manager)
        await endpoint.run()
    """

    def __init__(
        self,
        websocket: WebSocket,
        manager: "RelayManager",
        endpoint_name: str,
        send_timeout: float | None = None,
    ):
        """
        Initialize the endpoint handler.

        Args:
            websocket: The WebSocket connection.
            manager: RelayManager instance.
            endpoint_name: Name for logging (e.g., "/ws").
            send_timeout: Bound for a single socket send.
        """
        self.websocket = websocket
        self.manager = manager
        self.endpoint_name = endpoint_name
        self.send_timeout = manager.send_timeout if send_timeout is None else send_timeout

        self.connection_id: str | None = None
        self.close_reason = "client_disconnect"

    @abstractmethod
    async def validate_handshake(self) -> bool:
        """
        Validate the upgrade request.

        Returns:
            True to accept. On False the WebSocket is already closed.
        """

    @abstractmethod
    async def handle_message(self, data: str) -> None:
        """Handle one inbound text frame."""

    async def run(self) -> None:
        """
        Main entry point - run the WebSocket endpoint.

        1. Validate handshake
        2. Accept and register
        3. Reader and writer loops until either ends
        4. Unregister
        """
        if not await self.validate_handshake():
            return

        try:
            self.connection_id = await self.manager.connect(self.websocket)
        except ConnectionError as e:
            logger.warning(
                "Connection rejected",
                endpoint=self.endpoint_name,
                error=str(e),
            )
            await self._safe_close(WSCloseCode.SERVER_OVERLOADED, "Server unavailable")
            return

        token = bind_connection_id(self.connection_id)
        try:
            await self._serve()
        finally:
            reset_connection_id(token)

    async def _serve(self) -> None:
        connection_id = self.connection_id
        try:
            async with anyio.create_task_group() as tg:
                tg.start_soon(self._run_loop, self._message_loop, tg.cancel_scope)
                tg.start_soon(self._run_loop, self._outbox_loop, tg.cancel_scope)
        finally:
            with anyio.CancelScope(shield=True):
                await self.manager.disconnect(connection_id, reason=self.close_reason)

    async def _run_loop(self, loop, scope: anyio.CancelScope) -> None:
        """Run one side of the connection; when it ends, stop the other."""
        try:
            await loop()
        except Exception as e:
            self.close_reason = "server_error"
            logger.error(
                "Connection task failed",
                endpoint=self.endpoint_name,
                task=loop.__name__,
                error=str(e),
                exc_info=True,
            )
        finally:
            scope.cancel()

    async def _message_loop(self) -> None:
        """
        Read frames until the client disconnects.

        Frames are routed one at a time, which keeps each sender's messages
        in order.
        """
        while True:
            message = await self.websocket.receive()
            if message["type"] == "websocket.disconnect":
                self.close_reason = "client_disconnect"
                logger.debug(
                    "Client closed connection",
                    endpoint=self.endpoint_name,
                    code=message.get("code"),
                )
                return

            data = self.extract_text(message)
            if data is None:
                continue
            if not self.validate_message_size(data):
                continue

            await self.handle_message(data)

    async def _outbox_loop(self) -> None:
        """
        Drain the connection's outbox onto the socket.

        A send that exceeds the timeout closes the connection as a slow
        consumer.
        """
        connection = self.manager.get_connection(self.connection_id)
        if connection is None:
            return

        while True:
            frame = await connection.outbox.get()
            try:
                with anyio.fail_after(self.send_timeout):
                    await self.websocket.send_text(frame)
            except TimeoutError:
                self.manager.record_send_timeout()
                self.close_reason = "send_timeout"
                logger.warning(
                    "Send timed out, closing slow consumer",
                    endpoint=self.endpoint_name,
                    timeout=self.send_timeout,
                    backlog=connection.outbox.qsize(),
                )
                await self._safe_close(WSCloseCode.SLOW_CONSUMER, "Send timeout")
                return
            except (WebSocketDisconnect, RuntimeError, OSError) as e:
                self.close_reason = "send_failed"
                logger.debug(
                    "Send failed",
                    endpoint=self.endpoint_name,
                    frame=sanitize_log_data(frame),
                    error=str(e),
                )
                return

    async def _safe_close(self, code: int, reason: str) -> None:
        """Close the socket, tolerating one that is already gone."""
        try:
            with anyio.fail_after(self.send_timeout):
                await self.websocket.close(code=code, reason=reason)
        except (TimeoutError, RuntimeError, OSError) as e:
            logger.debug(
                "Close failed",
                endpoint=self.endpoint_name,
                code=code,
                error=str(e),
            )
