import asyncio

import pytest

from catalog.cache import InMemoryResponseCache, RedisResponseCache, ResponseCache, build_response_cache


class BrokenCache(ResponseCache):
    cache_type = "broken"

    async def _get(self, key):
        raise ConnectionError("cache down")

    async def _set(self, key, value, ttl_seconds):
        raise ConnectionError("cache down")

    async def _invalidate(self, prefix):
        raise ConnectionError("cache down")


@pytest.mark.asyncio
async def test_in_memory_cache_round_trip_and_prefix_invalidation():
    cache = InMemoryResponseCache(max_entries=8, ttl_seconds=60)
    await cache.set("search:a", b"A", 60)
    await cache.set("search:b", b"B", 60)
    await cache.set("status:c", b"C", 60)

    assert await cache.get("search:a") == b"A"
    assert await cache.invalidate("search:") == 2
    assert await cache.get("search:a") is None
    assert await cache.get("status:c") == b"C"


@pytest.mark.asyncio
async def test_in_memory_cache_honours_per_entry_expiry():
    cache = InMemoryResponseCache(max_entries=8, ttl_seconds=3600)

    await cache.set("search:a", b"A", 1)
    await asyncio.sleep(1.05)

    assert await cache.get("search:a") is None


@pytest.mark.asyncio
async def test_non_positive_ttl_is_not_stored():
    cache = InMemoryResponseCache(max_entries=8, ttl_seconds=60)

    await cache.set("search:a", b"A", 0)

    assert await cache.get("search:a") is None


@pytest.mark.asyncio
async def test_backend_failures_degrade_to_misses():
    cache = BrokenCache()

    assert await cache.get("search:a") is None
    await cache.set("search:a", b"A", 60)
    assert await cache.invalidate("search:") == 0


def test_build_response_cache_picks_backend():
    assert isinstance(build_response_cache(""), InMemoryResponseCache)
    assert isinstance(build_response_cache("redis://localhost:6379/0"), RedisResponseCache)
