"""Tests for the per-category media URI cache."""

import asyncio

import pytest

from chronos.enums import MediaCategory
from chronos.media.cache import MISS, MediaCache, MediaLibrary


class Counter:
    """Factory that counts invocations and can be held open."""

    def __init__(self, result="/api/game/media/s/event_video/a.mp4", gate=None):
        self.calls = 0
        self.result = result
        self.gate = gate

    async def __call__(self):
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


class TestMediaCache:
    async def test_miss_then_hit(self):
        cache = MediaCache(MediaCategory.EVENT_VIDEO)
        assert cache.resolve("event-1-0") is MISS
        factory = Counter()

        first = await cache.get_or_generate("event-1-0", factory)
        second = await cache.get_or_generate("event-1-0", factory)

        assert first == second == factory.result
        assert factory.calls == 1
        assert "event-1-0" in cache
        assert cache.resolve("event-1-0") == factory.result

    async def test_concurrent_requests_share_one_generation(self):
        cache = MediaCache(MediaCategory.NPC_VIDEO)
        gate = asyncio.Event()
        factory = Counter(result="/npc.mp4", gate=gate)

        tasks = [asyncio.create_task(cache.get_or_generate("npc-1-0", factory)) for _ in range(3)]
        await asyncio.sleep(0)
        assert cache.is_pending("npc-1-0")
        gate.set()

        assert await asyncio.gather(*tasks) == ["/npc.mp4"] * 3
        assert factory.calls == 1
        assert not cache.is_pending("npc-1-0")

    async def test_failure_is_not_cached(self):
        cache = MediaCache(MediaCategory.EVENT_VIDEO)
        failing = Counter(result=None)
        assert await cache.get_or_generate("event-1-0", failing) is None
        assert "event-1-0" not in cache

        working = Counter()
        assert await cache.get_or_generate("event-1-0", working) == working.result
        assert working.calls == 1

    async def test_exception_propagates_and_clears_inflight(self):
        cache = MediaCache(MediaCategory.TIME_LAPSE)
        with pytest.raises(RuntimeError):
            await cache.get_or_generate("Forum", Counter(result=RuntimeError("boom")))
        assert not cache.is_pending("Forum")
        assert len(cache) == 0

    async def test_waiters_see_the_same_failure(self):
        cache = MediaCache(MediaCategory.EVENT_VIDEO)
        gate = asyncio.Event()
        factory = Counter(result=None, gate=gate)
        tasks = [asyncio.create_task(cache.get_or_generate("k", factory)) for _ in range(2)]
        await asyncio.sleep(0)
        gate.set()
        assert await asyncio.gather(*tasks) == [None, None]
        assert factory.calls == 1

    def test_store_and_clear(self):
        cache = MediaCache(MediaCategory.LOCATION_VISUAL)
        cache.store("Temple", "data:image/png;base64,AA")
        assert len(cache) == 1
        cache.clear()
        assert cache.resolve("Temple") is MISS

    async def test_generation_running_across_clear_is_not_cached(self):
        cache = MediaCache(MediaCategory.LOCATION_VISUAL)
        gate = asyncio.Event()
        stale = Counter(result="data:image/png;base64,OLD", gate=gate)
        task = asyncio.create_task(cache.get_or_generate("loc-1-0", stale))
        await asyncio.sleep(0)
        assert cache.is_pending("loc-1-0")

        cache.clear()
        assert not cache.is_pending("loc-1-0")
        fresh = Counter(result="data:image/png;base64,NEW")
        assert await cache.get_or_generate("loc-1-0", fresh) == fresh.result

        gate.set()
        assert await task == stale.result
        assert cache.resolve("loc-1-0") == fresh.result


class TestMediaLibrary:
    def test_one_cache_per_category(self):
        library = MediaLibrary()
        library[MediaCategory.EVENT_VIDEO].store("x", "/event.mp4")
        assert "x" not in library[MediaCategory.NPC_VIDEO]
        assert library[MediaCategory.EVENT_VIDEO].category == MediaCategory.EVENT_VIDEO

    def test_clear_empties_all(self):
        library = MediaLibrary()
        for category in MediaCategory:
            library[category].store("x", "/u")
        library.clear()
        assert all(len(library[c]) == 0 for c in MediaCategory)

    def test_miss_is_falsy(self):
        assert not MISS
        assert repr(MISS) == "MISS"
