"""
Concrete WebSocket Endpoint Implementations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import WebSocket

from chat_relay.components.core.constants import RelayConstants, WSCloseCode
from chat_relay.components.core.context import sanitize_log_data
from chat_relay.components.endpoints.base import WebSocketEndpointBase
from chat_relay.components.endpoints.mixins import OriginValidationMixin
from shared.config.logging import audit_ws_connection

if TYPE_CHECKING:
    from chat_relay.relay_manager import RelayManager


class ChatEndpoint(OriginValidationMixin, WebSocketEndpointBase):
    """
    WebSocket endpoint for chat clients.

    Features:
    - Origin check before the upgrade is accepted
    - Every text frame is routed through the relay manager
    """

    def __init__(
        self,
        websocket: WebSocket,
        manager: "RelayManager",
        **kwargs,
    ):
        super().__init__(
            websocket=websocket,
            manager=manager,
            endpoint_name=RelayConstants.WS_ENDPOINT,
            **kwargs,
        )

    async def validate_handshake(self) -> bool:
        """Reject disallowed origins with 4003."""
        if self.validate_origin():
            return True

        audit_ws_connection(
            event_type="ORIGIN_REJECTED",
            endpoint=self.endpoint_name,
            origin=sanitize_log_data(self.websocket.headers.get("origin") or ""),
            reason="invalid_origin",
        )
        self.manager.record_origin_rejection()
        await self.websocket.close(
            code=WSCloseCode.FORBIDDEN,
            reason="Origin not allowed",
        )
        return False

    async def handle_message(self, data: str) -> None:
        """Route the frame. Rejections are logged and counted by the router."""
        await self.manager.handle_frame(self.connection_id, data)
