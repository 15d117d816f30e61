"""
Chat Relay Constants.

Centralized constants with documentation explaining the value of each.
"""

from enum import IntEnum
from typing import TYPE_CHECKING, Final

from shared.config.logging import get_logger

if TYPE_CHECKING:
    from shared.config.settings import Settings

__all__ = [
    "WSCloseCode",
    "RelayConstants",
    "DEFAULT_ALLOWED_ORIGINS",
    "allowed_websocket_origins",
    "validate_websocket_origin",
]

logger = get_logger(__name__)


class WSCloseCode(IntEnum):
    """
    WebSocket close codes used by the relay.

    Standard codes (1000-1999) from RFC 6455.
    Custom codes (4000-4999) for application-specific errors.
    """

    # Standard codes (RFC 6455)
    NORMAL = 1000  # Normal closure
    GOING_AWAY = 1001  # Server shutting down or client navigating away
    SERVER_ERROR = 1011  # Unexpected server error
    SERVER_OVERLOADED = 1013  # Server refusing new connections

    # Custom application codes (4000-4999)
    FORBIDDEN = 4003  # Origin not allowed
    SLOW_CONSUMER = 4008  # Outbound send did not complete within relay_send_timeout


class RelayConstants:
    """
    Relay operational constants.

    These are internal defaults; tunable limits live in
    shared.config.settings and take precedence at runtime.
    """

    # WS_ACCEPT_TIMEOUT: 5 seconds
    # WebSocket handshake should complete within TCP timeout.
    # 5 seconds handles slow networks while rejecting stuck connections.
    WS_ACCEPT_TIMEOUT: Final[float] = 5.0

    # WS_ENDPOINT: single relay endpoint, all clients share one room
    WS_ENDPOINT: Final[str] = "/ws"

    # SERVICE_NAME: reported by the health endpoint and in startup logs
    SERVICE_NAME: Final[str] = "chat-relay"


# Default development origins: the Vite dev server the chat client runs on
DEFAULT_ALLOWED_ORIGINS: Final[tuple[str, ...]] = (
    "http://localhost:5173",
    "http://127.0.0.1:5173",
)


def allowed_websocket_origins(settings: "Settings") -> list[str]:
    """Configured origins, or the development defaults when none are set."""
    return settings.allowed_origin_list or list(DEFAULT_ALLOWED_ORIGINS)


def validate_websocket_origin(origin: str | None, settings: "Settings") -> bool:
    """
    Check a handshake's Origin header.

    CORSMiddleware covers HTTP routes only; WebSocket upgrades are checked
    here. Clients that send no Origin (CLIs, bots) are let through in
    development and refused elsewhere.
    """
    if not origin:
        if settings.environment == "development":
            logger.debug("Handshake without Origin header accepted (development)")
            return True
        logger.warning("Handshake without Origin header refused", environment=settings.environment)
        return False

    allowed = allowed_websocket_origins(settings)
    if origin in allowed:
        return True

    logger.warning("Handshake origin not allowed", allowed_count=len(allowed))
    return False
