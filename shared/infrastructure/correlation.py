"""
Connection Correlation for logging.

Each connection's reader/writer tasks run with their connection id bound in a
context variable, so every log line they emit can be traced back to one client.
Tasks created while the id is bound inherit it (asyncio copies the context).
"""

from contextvars import ContextVar, Token

# Context variable for the current connection id (task-local)
connection_id_var: ContextVar[str] = ContextVar("connection_id", default="")


def get_connection_id() -> str:
    """Get the connection id bound to the current task, or empty string."""
    return connection_id_var.get()


def bind_connection_id(connection_id: str) -> Token:
    """
    Bind a connection id to the current context.

    Returns the token needed by reset_connection_id().
    """
    return connection_id_var.set(connection_id)


def reset_connection_id(token: Token) -> None:
    """Restore the connection id that was bound before bind_connection_id()."""
    connection_id_var.reset(token)


class ConnectionIdFilter:
    """
    Logging filter that adds connection_id to log records.

    Usage:
        import logging
        handler = logging.StreamHandler()
        handler.addFilter(ConnectionIdFilter())
    """

    def filter(self, record) -> bool:
        record.connection_id = connection_id_var.get() or "-"
        return True
