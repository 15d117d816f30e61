"""
Tests for the connection registry and its state machine.
"""

import asyncio

import pytest

from chat_relay.components.connection.registry import (
    ConnectionRegistry,
    ConnectionState,
    can_transition,
)
from shared.utils.exceptions import UnknownConnectionError


class TestStateMachine:
    """Allowed transitions between connection states."""

    def test_pending_can_be_named_or_closed(self):
        assert can_transition(ConnectionState.PENDING, ConnectionState.NAMED)
        assert can_transition(ConnectionState.PENDING, ConnectionState.CLOSED)

    def test_rename_is_allowed(self):
        assert can_transition(ConnectionState.NAMED, ConnectionState.NAMED)

    def test_closed_is_terminal(self):
        for target in ConnectionState:
            assert not can_transition(ConnectionState.CLOSED, target)

    def test_named_cannot_return_to_pending(self):
        assert not can_transition(ConnectionState.NAMED, ConnectionState.PENDING)


class TestRegistry:
    """Register, name, look up and remove connections."""

    def test_rejects_non_positive_outbox(self):
        with pytest.raises(ValueError):
            ConnectionRegistry(outbox_size=0)

    @pytest.mark.asyncio
    async def test_register_creates_pending_entry(self, registry):
        cid = await registry.register()

        connection = registry.get(cid)
        assert connection is not None
        assert connection.state is ConnectionState.PENDING
        assert connection.display_name is None
        assert connection.outbox.maxsize == 4
        assert cid in registry
        assert len(registry) == 1

    @pytest.mark.asyncio
    async def test_ids_are_unique(self, registry):
        ids = await asyncio.gather(*(registry.register() for _ in range(50)))

        assert len(set(ids)) == 50
        assert len(registry) == 50

    @pytest.mark.asyncio
    async def test_set_name_moves_to_named(self, registry):
        cid = await registry.register()

        connection = await registry.set_name(cid, "alice")

        assert connection.display_name == "alice"
        assert connection.is_named

    @pytest.mark.asyncio
    async def test_set_name_twice_keeps_latest(self, registry):
        cid = await registry.register()
        await registry.set_name(cid, "alice")
        await registry.set_name(cid, "alicia")

        assert registry.get(cid).display_name == "alicia"

    @pytest.mark.asyncio
    async def test_set_name_unknown_id_raises(self, registry):
        with pytest.raises(UnknownConnectionError) as exc_info:
            await registry.set_name("missing", "ghost")

        assert exc_info.value.kind == "UnknownConnection"
        assert exc_info.value.connection_id == "missing"

    @pytest.mark.asyncio
    async def test_remove_marks_closed_and_deletes(self, registry):
        cid = await registry.register()
        connection = registry.get(cid)

        removed = await registry.remove(cid)

        assert removed is connection
        assert connection.is_closed
        assert registry.get(cid) is None
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_remove_twice_is_noop(self, registry):
        cid = await registry.register()

        assert await registry.remove(cid) is not None
        assert await registry.remove(cid) is None
        assert registry.get_stats()["removed_total"] == 1

    @pytest.mark.asyncio
    async def test_set_name_after_remove_raises(self, registry):
        cid = await registry.register()
        await registry.remove(cid)

        with pytest.raises(UnknownConnectionError):
            await registry.set_name(cid, "late")

    @pytest.mark.asyncio
    async def test_all_ids_is_a_snapshot(self, registry):
        first = await registry.register()
        snapshot = await registry.all_ids()

        await registry.register()
        await registry.remove(first)

        assert snapshot == [first]

    @pytest.mark.asyncio
    async def test_stats_count_states(self, registry):
        a = await registry.register()
        await registry.register()
        await registry.set_name(a, "alice")

        stats = registry.get_stats()

        assert stats["total"] == 2
        assert stats["named"] == 1
        assert stats["pending"] == 1
        assert stats["registered_total"] == 2

    @pytest.mark.asyncio
    async def test_connections_view_is_read_only(self, registry):
        cid = await registry.register()

        with pytest.raises(TypeError):
            registry.connections[cid] = None
