"""
Infrastructure module: runtime plumbing shared by relay components.
"""

from shared.infrastructure.correlation import (
    ConnectionIdFilter,
    bind_connection_id,
    get_connection_id,
    reset_connection_id,
)

__all__ = [
    "ConnectionIdFilter",
    "bind_connection_id",
    "get_connection_id",
    "reset_connection_id",
]
