"""
Short-lived response cache for search results.

Best effort: every backend failure is logged and reported as a miss, never
raised to the caller.

Backends:
- RedisResponseCache: shared cache via redis.asyncio (REDIS_URL)
- InMemoryResponseCache: per-process cachetools.TTLCache fallback
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from abc import ABC, abstractmethod
from typing import Optional, Tuple

import redis.asyncio as redis
from cachetools import TTLCache

from config import env_int
from observability.metrics import cache_errors_total, cache_hits_total, cache_misses_total

logger = logging.getLogger(__name__)

REDIS_URL = os.getenv("REDIS_URL", "")
SEARCH_CACHE_TTL_SECONDS = env_int("SEARCH_CACHE_TTL_SECONDS", 3600)
SEARCH_CACHE_MAX_ENTRIES = env_int("SEARCH_CACHE_MAX_ENTRIES", 1024)


class ResponseCache(ABC):
    cache_type: str = "response"

    @abstractmethod
    async def _get(self, key: str) -> Optional[bytes]:
        pass

    @abstractmethod
    async def _set(self, key: str, value: bytes, ttl_seconds: int) -> None:
        pass

    @abstractmethod
    async def _invalidate(self, prefix: str) -> int:
        pass

    async def get(self, key: str) -> Optional[bytes]:
        try:
            value = await self._get(key)
        except Exception as e:
            cache_errors_total.labels(cache_type=self.cache_type, operation="get").inc()
            logger.warning("Cache get failed, treating as miss", extra={"cache_key": key, "error": str(e)})
            value = None

        if value is None:
            cache_misses_total.labels(cache_type=self.cache_type).inc()
        else:
            cache_hits_total.labels(cache_type=self.cache_type).inc()
        return value

    async def set(self, key: str, value: bytes, ttl_seconds: int = SEARCH_CACHE_TTL_SECONDS) -> None:
        if ttl_seconds <= 0:
            return
        try:
            await self._set(key, value, ttl_seconds)
        except Exception as e:
            cache_errors_total.labels(cache_type=self.cache_type, operation="set").inc()
            logger.warning("Cache set failed", extra={"cache_key": key, "error": str(e)})

    async def invalidate(self, prefix: str) -> int:
        """Drop every key starting with `prefix`. Returns the number removed (0 on failure)."""
        try:
            removed = await self._invalidate(prefix)
        except Exception as e:
            cache_errors_total.labels(cache_type=self.cache_type, operation="invalidate").inc()
            logger.warning("Cache invalidation failed", extra={"prefix": prefix, "error": str(e)})
            return 0
        logger.info("Cache invalidated", extra={"prefix": prefix, "removed": removed})
        return removed

    async def close(self) -> None:
        pass


class InMemoryResponseCache(ResponseCache):
    """TTLCache bounds size and the maximum lifetime; each entry also carries its own expiry."""

    cache_type = "memory"

    def __init__(self, max_entries: int = SEARCH_CACHE_MAX_ENTRIES, ttl_seconds: int = SEARCH_CACHE_TTL_SECONDS):
        self._cache: TTLCache[str, Tuple[float, bytes]] = TTLCache(maxsize=max_entries, ttl=max(ttl_seconds, 1))
        self._lock = asyncio.Lock()

    async def _get(self, key: str) -> Optional[bytes]:
        async with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if expires_at <= time.monotonic():
                self._cache.pop(key, None)
                return None
            return value

    async def _set(self, key: str, value: bytes, ttl_seconds: int) -> None:
        async with self._lock:
            self._cache[key] = (time.monotonic() + ttl_seconds, value)

    async def _invalidate(self, prefix: str) -> int:
        async with self._lock:
            keys = [key for key in list(self._cache.keys()) if key.startswith(prefix)]
            for key in keys:
                self._cache.pop(key, None)
            return len(keys)


class RedisResponseCache(ResponseCache):
    cache_type = "redis"

    def __init__(self, client: "redis.Redis"):
        self.client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisResponseCache":
        return cls(redis.from_url(url))

    async def _get(self, key: str) -> Optional[bytes]:
        return await self.client.get(key)

    async def _set(self, key: str, value: bytes, ttl_seconds: int) -> None:
        await self.client.setex(key, ttl_seconds, value)

    async def _invalidate(self, prefix: str) -> int:
        removed = 0
        async for key in self.client.scan_iter(match=f"{prefix}*"):
            removed += await self.client.delete(key)
        return removed

    async def close(self) -> None:
        await self.client.aclose()


def build_response_cache(redis_url: str = REDIS_URL) -> ResponseCache:
    if redis_url:
        logger.info("Using Redis response cache")
        return RedisResponseCache.from_url(redis_url)
    logger.info("REDIS_URL not set, using in-memory response cache")
    return InMemoryResponseCache()
