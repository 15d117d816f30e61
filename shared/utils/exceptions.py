"""
Relay error taxonomy with automatic logging.

Every error the relay core can produce is handled locally (see the event
router and the broadcaster); none of them ever closes a connection or stops
the process. Constructing an error logs it once with its context, so handlers
only need to count and drop.

Usage:
    from shared.utils.exceptions import NotNamedError, InvalidInputError

    raise NotNamedError(connection_id)
    raise InvalidInputError("Username must not be empty", connection_id=cid)
"""

from typing import Any

from shared.config.logging import get_logger

logger = get_logger(__name__)


class RelayError(Exception):
    """
    Base exception with automatic logging.

    Attributes:
        kind: Stable error kind name used in metrics and routing results.
        detail: Human-readable description.
        context: Structured context passed at construction.
    """

    kind: str = "RelayError"
    default_log_level: str = "warning"

    def __init__(
        self,
        detail: str,
        log_level: str | None = None,
        **log_context: Any,
    ):
        # Log the error with context
        log_fn = getattr(logger, log_level or self.default_log_level, logger.warning)
        log_fn(detail, error_kind=self.kind, **log_context)

        super().__init__(detail)
        self.detail = detail
        self.context = log_context


class UnknownConnectionError(RelayError):
    """
    Operation referenced a connection id that is not registered.

    Usually a benign race with disconnect.

    Usage:
        raise UnknownConnectionError(connection_id)
    """

    kind = "UnknownConnection"
    default_log_level = "info"

    def __init__(self, connection_id: str, **log_context: Any):
        super().__init__(
            f"Connection {connection_id} is not registered",
            connection_id=connection_id,
            **log_context,
        )
        self.connection_id = connection_id


class InvalidInputError(RelayError):
    """
    Inbound event was malformed or carried an empty/oversized value.

    The event is dropped; the connection stays open.
    """

    kind = "InvalidInput"

    def __init__(self, detail: str, connection_id: str | None = None, **log_context: Any):
        super().__init__(detail, connection_id=connection_id, **log_context)
        self.connection_id = connection_id


class NotNamedError(RelayError):
    """Message sent by a connection that has not set a username yet."""

    kind = "NotNamed"
    default_log_level = "info"

    def __init__(self, connection_id: str, **log_context: Any):
        super().__init__(
            "Message dropped: sender has no username",
            connection_id=connection_id,
            **log_context,
        )
        self.connection_id = connection_id


class DeliveryFailedError(RelayError):
    """
    One recipient could not take an outbound frame.

    Raised by a single delivery; fan-out catches it per recipient.
    """

    kind = "DeliveryFailed"
    default_log_level = "debug"

    def __init__(self, connection_id: str, reason: str, **log_context: Any):
        super().__init__(
            f"Delivery to {connection_id} failed: {reason}",
            connection_id=connection_id,
            reason=reason,
            **log_context,
        )
        self.connection_id = connection_id
        self.reason = reason
