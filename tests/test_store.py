"""Tests for the single-consumer GameStore."""

import asyncio

import pytest

from chronos.core.events import ConfidenceLayerToggled, NoticePosted
from chronos.core.models import GameState
from chronos.core.store import GameStore


@pytest.fixture
async def store():
    s = GameStore(name="test")
    yield s
    await s.stop()


class TestGameStore:
    async def test_events_applied_in_enqueue_order(self, store):
        for i in range(5):
            store.dispatch(NoticePosted(f"n{i}"))
        state = await store.drain()
        assert state.notices == ["n0", "n1", "n2", "n3", "n4"]
        assert store.applied == 5

    async def test_apply_returns_state_after_event(self, store):
        store.dispatch(NoticePosted("first"))
        state = await store.apply(NoticePosted("second"))
        assert state.notices == ["first", "second"]
        assert store.state is state

    async def test_concurrent_producers_keep_each_order(self, store):
        async def produce(tag):
            for i in range(3):
                store.dispatch(NoticePosted(f"{tag}{i}"))
                await asyncio.sleep(0)

        await asyncio.gather(produce("a"), produce("b"))
        notices = (await store.drain()).notices
        assert [n for n in notices if n.startswith("a")] == ["a0", "a1", "a2"]
        assert [n for n in notices if n.startswith("b")] == ["b0", "b1", "b2"]

    async def test_bad_event_fails_its_caller_only(self, store):
        with pytest.raises(TypeError):
            await store.apply(object())
        state = await store.apply(NoticePosted("still running"))
        assert state.notices == ["still running"]
        assert store.running

    async def test_initial_state(self):
        s = GameStore(GameState(show_confidence_layer=True))
        assert s.state.show_confidence_layer is True
        state = await s.apply(ConfidenceLayerToggled())
        assert state.show_confidence_layer is False
        await s.stop()

    async def test_stop_flushes_queue(self):
        s = GameStore()
        s.dispatch(NoticePosted("x"))
        s.dispatch(NoticePosted("y"))
        await s.stop()
        assert s.state.notices == ["x", "y"]
        assert not s.running

    async def test_drain_without_consumer(self):
        s = GameStore()
        assert await s.drain() is s.state
        await s.stop()
