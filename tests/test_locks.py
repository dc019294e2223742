"""Tests for per-chat locks."""

import asyncio

import pytest

from quiz_bridge.core.locks import ChatLocks


class TestChatLocks:
    """Tests for ChatLocks."""

    @pytest.mark.asyncio
    async def test_released_lock_is_dropped(self):
        locks = ChatLocks()
        async with locks.hold("G1@g.us"):
            assert len(locks) == 1
        assert len(locks) == 0

    @pytest.mark.asyncio
    async def test_dropped_after_error(self):
        locks = ChatLocks()
        with pytest.raises(RuntimeError):
            async with locks.hold("G1@g.us"):
                raise RuntimeError("boom")
        assert len(locks) == 0

    @pytest.mark.asyncio
    async def test_same_chat_serialized(self):
        locks = ChatLocks()
        order: list[str] = []

        async def worker(name: str) -> None:
            async with locks.hold("G1@g.us"):
                order.append(f"{name}-in")
                await asyncio.sleep(0.01)
                order.append(f"{name}-out")

        await asyncio.gather(worker("a"), worker("b"), worker("c"))

        assert order == ["a-in", "a-out", "b-in", "b-out", "c-in", "c-out"]
        assert len(locks) == 0

    @pytest.mark.asyncio
    async def test_kept_while_waiters_remain(self):
        locks = ChatLocks()
        entered = asyncio.Event()
        release = asyncio.Event()

        async def holder() -> None:
            async with locks.hold("G1@g.us"):
                entered.set()
                await release.wait()

        async def waiter() -> None:
            async with locks.hold("G1@g.us"):
                pass

        first = asyncio.create_task(holder())
        await entered.wait()
        second = asyncio.create_task(waiter())
        await asyncio.sleep(0)
        release.set()
        await first
        # Waiter still queued on the same lock
        assert len(locks) == 1
        await second
        assert len(locks) == 0

    @pytest.mark.asyncio
    async def test_chats_independent(self):
        locks = ChatLocks()
        async with locks.hold("G1@g.us"):
            async with locks.hold("G2@g.us"):
                assert len(locks) == 2
