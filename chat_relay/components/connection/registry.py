"""
Connection Registry - the relay's single piece of shared mutable state.

Tracks every open client connection and the display name bound to it.
Connections are owned here; other components hold ids and look them up.

Concurrency:
- register / set_name / remove and the all_ids() snapshot are serialized
  by one asyncio.Lock.
- get() is a plain dict lookup and needs no lock on the event loop.
- Fan-out must iterate the snapshot returned by all_ids(), never the live
  mapping, and must not hold the lock while delivering.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from shared.config.logging import get_logger
from shared.utils.exceptions import UnknownConnectionError

logger = get_logger(__name__)


class ConnectionState(str, Enum):
    """Per-connection state machine."""

    PENDING = "pending"
    NAMED = "named"
    CLOSED = "closed"


# Allowed transitions. NAMED -> NAMED is a rename (last write wins).
ALLOWED_TRANSITIONS: MappingProxyType[ConnectionState, frozenset[ConnectionState]] = MappingProxyType({
    ConnectionState.PENDING: frozenset({ConnectionState.NAMED, ConnectionState.CLOSED}),
    ConnectionState.NAMED: frozenset({ConnectionState.NAMED, ConnectionState.CLOSED}),
    ConnectionState.CLOSED: frozenset(),
})


def can_transition(current: ConnectionState, target: ConnectionState) -> bool:
    """Check whether the state machine allows current -> target."""
    return target in ALLOWED_TRANSITIONS[current]


@dataclass(eq=False)
class Connection:
    """
    One live client link.

    Attributes:
        id: Opaque unique identifier, never reused.
        outbox: Bounded queue of serialized frames awaiting send.
        display_name: Username, None until the client sets one.
        state: Current lifecycle state.
        connected_at: Unix timestamp of registration.
    """

    id: str
    outbox: asyncio.Queue[str] = field(repr=False)
    display_name: str | None = None
    state: ConnectionState = ConnectionState.PENDING
    connected_at: float = field(default_factory=time.time)

    @property
    def is_named(self) -> bool:
        return self.state is ConnectionState.NAMED

    @property
    def is_closed(self) -> bool:
        return self.state is ConnectionState.CLOSED


class ConnectionRegistry:
    """
    Maps connection id to Connection.

    Invariant: an entry exists iff its transport link is open or closing.

    Usage:
        registry = ConnectionRegistry(outbox_size=256)
        cid = await registry.register()
        await registry.set_name(cid, "alice")
        for cid in await registry.all_ids():
            ...
        await registry.remove(cid)
    """

    def __init__(self, outbox_size: int = 256) -> None:
        """
        Initialize an empty registry.

        Args:
            outbox_size: Capacity of each connection's outbound queue.
        """
        if outbox_size <= 0:
            raise ValueError("outbox_size must be positive")
        self._connections: dict[str, Connection] = {}
        self._lock = asyncio.Lock()
        self._outbox_size = outbox_size
        self._registered_total = 0
        self._removed_total = 0

    # =========================================================================
    # Read-only views
    # =========================================================================

    @property
    def connections(self) -> MappingProxyType[str, Connection]:
        """Live connections (immutable view, do not iterate across awaits)."""
        return MappingProxyType(self._connections)

    def __len__(self) -> int:
        return len(self._connections)

    def __contains__(self, connection_id: object) -> bool:
        return connection_id in self._connections

    def get(self, connection_id: str) -> Connection | None:
        """Look up a connection; None if absent (e.g. raced with removal)."""
        return self._connections.get(connection_id)

    def get_stats(self) -> dict[str, int]:
        """Counts by state plus lifetime totals."""
        named = sum(1 for c in self._connections.values() if c.is_named)
        total = len(self._connections)
        return {
            "total": total,
            "named": named,
            "pending": total - named,
            "registered_total": self._registered_total,
            "removed_total": self._removed_total,
        }

    # =========================================================================
    # Mutations (serialized by the registry lock)
    # =========================================================================

    async def register(self) -> str:
        """
        Allocate a new connection in PENDING state.

        Returns:
            The new connection id.
        """
        async with self._lock:
            connection_id = uuid.uuid4().hex
            while connection_id in self._connections:
                connection_id = uuid.uuid4().hex
            self._connections[connection_id] = Connection(
                id=connection_id,
                outbox=asyncio.Queue(maxsize=self._outbox_size),
            )
            self._registered_total += 1
        return connection_id

    async def set_name(self, connection_id: str, name: str) -> Connection:
        """
        Bind a display name and move the connection to NAMED.

        Re-setting overwrites the previous name.

        Raises:
            UnknownConnectionError: If the id is not registered.
        """
        async with self._lock:
            connection = self._connections.get(connection_id)
            if connection is None or not can_transition(connection.state, ConnectionState.NAMED):
                raise UnknownConnectionError(connection_id, operation="set_name")
            connection.display_name = name
            connection.state = ConnectionState.NAMED
            return connection

    async def remove(self, connection_id: str) -> Connection | None:
        """
        Delete a connection, marking it CLOSED.

        Returns:
            The removed connection, or None if it was already gone
            (duplicate close signals are expected).
        """
        async with self._lock:
            connection = self._connections.pop(connection_id, None)
            if connection is None:
                return None
            connection.state = ConnectionState.CLOSED
            self._removed_total += 1
            return connection

    async def all_ids(self) -> list[str]:
        """Point-in-time copy of current membership for fan-out."""
        async with self._lock:
            return list(self._connections)
