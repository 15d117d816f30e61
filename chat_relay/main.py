"""
Chat Relay main application.

Accepts WebSocket clients on /ws, lets each pick a display name, and
relays every chat message to all connected clients.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware

from chat_relay import __version__
from chat_relay.components.core.constants import DEFAULT_ALLOWED_ORIGINS, RelayConstants
from chat_relay.components.endpoints.handlers import ChatEndpoint
from chat_relay.relay_manager import RelayManager
from shared.config.logging import relay_logger as logger, setup_logging
from shared.config.settings import settings


def get_cors_origins() -> list[str]:
    """Allowed HTTP origins: configured list, or the defaults with HTTPS variants."""
    if settings.allowed_origin_list:
        return settings.allowed_origin_list
    return list(DEFAULT_ALLOWED_ORIGINS) + [
        origin.replace("http://", "https://") for origin in DEFAULT_ALLOWED_ORIGINS
    ]


def create_app(manager: RelayManager | None = None) -> FastAPI:
    """
    Build the FastAPI application around a relay manager.

    Args:
        manager: Relay manager to serve. A fresh one is created if omitted.
    """
    relay = manager or RelayManager()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan handler.

        Startup: logging, configuration check.
        Shutdown: refuse new connections.
        """
        setup_logging()

        for problem in settings.validate_production_config():
            logger.error("Configuration problem", problem=problem)

        logger.info(
            "Starting chat relay",
            port=settings.relay_port,
            env=settings.environment,
        )

        yield

        relay.begin_shutdown()
        logger.info("Chat relay stopped", stats=relay.get_stats())

    app = FastAPI(
        title="Chat Relay",
        description="Real-time chat relay over WebSocket",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.manager = relay

    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins(),
        allow_credentials=True,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get("/health")
    def health_check():
        """Basic health check endpoint with connection stats."""
        return {
            "status": "shutting_down" if relay.is_shutdown else "healthy",
            "service": RelayConstants.SERVICE_NAME,
            "version": app.version,
            "environment": settings.environment,
            **relay.get_stats(),
        }

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket(RelayConstants.WS_ENDPOINT)
    async def chat_websocket(websocket: WebSocket):
        """
        WebSocket endpoint for chat clients.

        Client frames: set-username, send-message.
        Broadcast frames: new-user, new-message.
        """
        endpoint = ChatEndpoint(websocket, relay)
        await endpoint.run()

    return app


manager = RelayManager()
app = create_app(manager)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "chat_relay.main:app",
        host=settings.relay_host,
        port=settings.relay_port,
        reload=settings.debug,
    )
