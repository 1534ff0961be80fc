"""
Media resolution cache.

Memoizes generated media URIs per owning entity id so the same event,
NPC, or map location is never sent to the generator twice. One cache
exists per MediaCategory because ids are only unique within a category.

Concurrent requests for the same key share one in-flight generation.
Failed generations (None) are not cached, so a user can re-trigger.
"""

import asyncio
import logging
from typing import Awaitable, Callable

from ..enums import MediaCategory

logger = logging.getLogger(__name__)


class _Miss:
    """Sentinel type for a cache miss."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISS"

    def __bool__(self) -> bool:
        return False


MISS = _Miss()


class MediaCache:
    """URI cache for one media category."""

    def __init__(self, category: MediaCategory):
        self.category = category
        self._uris: dict[str, str] = {}
        self._inflight: dict[str, asyncio.Future] = {}
        self._epoch = 0

    def __contains__(self, key: str) -> bool:
        return key in self._uris

    def __len__(self) -> int:
        return len(self._uris)

    def resolve(self, key: str) -> str | _Miss:
        """Return the cached URI for ``key`` or MISS."""
        uri = self._uris.get(key)
        if uri is None:
            return MISS
        logger.debug(f"Cache hit: {self.category}:{key}")
        return uri

    def store(self, key: str, uri: str) -> None:
        self._uris[key] = uri

    def is_pending(self, key: str) -> bool:
        return key in self._inflight

    async def get_or_generate(
        self,
        key: str,
        factory: Callable[[], Awaitable[str | None]],
    ) -> str | None:
        """Return the cached URI, or run ``factory`` once and cache its result.

        A second caller arriving while the first generation is running awaits
        the same result instead of issuing another request.
        """
        cached = self.resolve(key)
        if cached is not MISS:
            return cached

        pending = self._inflight.get(key)
        if pending is not None:
            return await asyncio.shield(pending)

        epoch = self._epoch
        future = asyncio.get_running_loop().create_future()
        self._inflight[key] = future
        try:
            uri = await factory()
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as exc:
            future.set_exception(exc)
            # Mark retrieved so an unobserved failure does not warn at GC
            future.exception()
            raise
        else:
            # A clear() while generating means the result belongs to an old era
            if uri is not None and epoch == self._epoch:
                self.store(key, uri)
            future.set_result(uri)
            return uri
        finally:
            if self._inflight.get(key) is future:
                del self._inflight[key]

    def clear(self) -> None:
        """Forget every URI and detach generations still running."""
        self._uris.clear()
        self._inflight.clear()
        self._epoch += 1


class MediaLibrary:
    """One MediaCache per category."""

    def __init__(self):
        self._caches = {category: MediaCache(category) for category in MediaCategory}

    def __getitem__(self, category: MediaCategory) -> MediaCache:
        return self._caches[category]

    def clear(self) -> None:
        for cache in self._caches.values():
            cache.clear()
