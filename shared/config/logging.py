"""
Structured logging for the relay.

Loggers obtained through get_logger() accept keyword context:

    logger.info("Client connected", online=3)

The context travels on the record as ``extra_data`` and is rendered as JSON
in production or as ``key=value`` pairs in development. Records also carry
the id of the connection whose task emitted them (see
shared.infrastructure.correlation).
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from shared.config.settings import settings

_NO_CONNECTION = "-"


def _connection_of(record: logging.LogRecord) -> str | None:
    connection_id = getattr(record, "connection_id", None)
    if not connection_id or connection_id == _NO_CONNECTION:
        return None
    return connection_id


class StructuredFormatter(logging.Formatter):
    """
    One JSON object per line, for log aggregation in production.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        connection_id = _connection_of(record)
        if connection_id:
            entry["connection_id"] = connection_id

        context = getattr(record, "extra_data", None)
        if context:
            entry["data"] = context

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        if settings.debug:
            entry["source"] = f"{record.filename}:{record.lineno}"

        return json.dumps(entry, default=str)


class DevelopmentFormatter(logging.Formatter):
    """Colored single-line output for a terminal."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"
    DIM = "\033[2m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, "")
        clock = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        parts = [f"{color}{clock} {record.levelname:<8}{self.RESET}"]

        connection_id = _connection_of(record)
        if connection_id:
            parts.append(f"{self.DIM}[{connection_id[:8]}]{self.RESET}")

        parts.append(f"{record.name}: {record.getMessage()}")

        context = getattr(record, "extra_data", None)
        if context:
            parts.append(" ".join(f"{key}={value}" for key, value in context.items()))

        line = " ".join(parts)
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class StructuredLogger(logging.Logger):
    """
    Logger whose level methods take arbitrary keyword context.

    The standard keywords (exc_info, extra, stack_info, stacklevel) keep
    their usual meaning; every other keyword becomes extra_data.
    """

    def _log(  # type: ignore[override]
        self,
        level: int,
        msg: object,
        args: Any,
        exc_info: Any = None,
        extra: dict[str, Any] | None = None,
        stack_info: bool = False,
        stacklevel: int = 1,
        **context: Any,
    ) -> None:
        merged = dict(extra) if extra else {}
        merged["extra_data"] = context or None
        super()._log(
            level,
            msg,
            args,
            exc_info=exc_info,
            extra=merged,
            stack_info=stack_info,
            stacklevel=stacklevel + 1,
        )


logging.setLoggerClass(StructuredLogger)


def setup_logging(level: int | None = None, json_output: bool | None = None) -> None:
    """
    Configure the root logger. Call once at application startup.

    Args:
        level: Log level; DEBUG when settings.debug, INFO otherwise.
        json_output: JSON lines; defaults to True in production.
    """
    from shared.infrastructure.correlation import ConnectionIdFilter

    if level is None:
        level = logging.DEBUG if settings.debug else logging.INFO
    if json_output is None:
        json_output = settings.environment == "production"

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(ConnectionIdFilter())
    handler.setFormatter(StructuredFormatter() if json_output else DevelopmentFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    # Third-party noise
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)
    logging.getLogger("websockets").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str) -> StructuredLogger:
    """
    Get a logger instance with the given name.

    Usage:
        from shared.config.logging import get_logger
        logger = get_logger(__name__)

        logger.info("Username set", connection_id=cid, username=sanitize_log_data(name))
        logger.error("Connection task failed", error=str(e), exc_info=True)
    """
    return logging.getLogger(name)  # type: ignore[return-value]


relay_logger = get_logger("chat_relay")
security_audit_logger = get_logger("security.audit")


def audit_ws_connection(
    event_type: str,
    endpoint: str,
    origin: str | None = None,
    reason: str | None = None,
    **extra: Any,
) -> None:
    """
    Record a refused WebSocket handshake on the security audit logger.

    Args:
        event_type: Audit event name (e.g. ORIGIN_REJECTED).
        endpoint: WebSocket path.
        origin: Origin header as received.
        reason: Short machine-readable reason.
    """
    security_audit_logger.warning(
        f"WS_{event_type}",
        audit_event=event_type,
        endpoint=endpoint,
        origin=origin,
        reason=reason,
        **extra,
    )
