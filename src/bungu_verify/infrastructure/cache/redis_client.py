import asyncio
import json
import time
from typing import Any, Optional

import redis.asyncio as redis_asyncio

from ...logging_config import get_logger

logger = get_logger(__name__)


def _record_cache_operation(operation: str, cache_type: str, duration: float | None = None):
    """Record cache metrics (lazy import to avoid circular dependency)."""
    from ...metrics import CACHE_OPERATION_DURATION, CACHE_OPERATIONS

    if CACHE_OPERATIONS is not None:
        CACHE_OPERATIONS.labels(operation=operation, cache_type=cache_type).inc()
    if duration is not None and CACHE_OPERATION_DURATION is not None:
        CACHE_OPERATION_DURATION.labels(operation=operation, cache_type=cache_type).observe(
            duration
        )


class InMemoryCache:
    def __init__(self, clock=time.time):
        # store: key -> (value: Any, expire_at: Optional[float])
        self.store: dict[str, tuple[Any, Optional[float]]] = {}
        self.lock = asyncio.Lock()
        self.clock = clock

    def _live(self, key: str) -> Optional[tuple[Any, Optional[float]]]:
        entry = self.store.get(key)
        if entry is None:
            return None
        _, expire_at = entry
        if expire_at is not None and self.clock() >= expire_at:
            del self.store[key]
            return None
        return entry

    async def get(self, key: str) -> Optional[Any]:
        start = time.time()
        async with self.lock:
            entry = self._live(key)
        _record_cache_operation("get", "in_memory", time.time() - start)
        return entry[0] if entry else None

    async def set(self, key: str, value: Any, ex: Optional[int] = None) -> None:
        start = time.time()
        expire_at = None
        if ex is not None:
            expire_at = self.clock() + int(ex)
        async with self.lock:
            self.store[key] = (value, expire_at)
        _record_cache_operation("set", "in_memory", time.time() - start)

    async def incr(self, key: str) -> int:
        start = time.time()
        async with self.lock:
            entry = self._live(key)
            if entry is None:
                v, expire_at = 1, None
            else:
                value, expire_at = entry
                try:
                    v = int(value) + 1
                except (TypeError, ValueError) as e:
                    logger.debug("in_memory_incr_parse_failed", key=key, error=str(e))
                    v = 1
            self.store[key] = (str(v), expire_at)
        _record_cache_operation("incr", "in_memory", time.time() - start)
        return v

    async def expire(self, key: str, seconds: int) -> None:
        start = time.time()
        async with self.lock:
            entry = self._live(key)
            if entry is not None:
                self.store[key] = (entry[0], self.clock() + int(seconds))
        _record_cache_operation("expire", "in_memory", time.time() - start)

    async def delete(self, key: str) -> None:
        start = time.time()
        async with self.lock:
            self.store.pop(key, None)
        _record_cache_operation("delete", "in_memory", time.time() - start)

    async def close(self) -> None:
        return None


class AioredisClient:
    def __init__(self, url: str):
        self.client = redis_asyncio.from_url(url, decode_responses=False)

    async def get(self, key: str) -> Optional[Any]:
        start = time.time()
        v = await self.client.get(key)
        _record_cache_operation("get", "redis", time.time() - start)
        if v is None:
            return None
        text = v.decode()
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            # plain strings written by other clients
            return text

    async def set(self, key: str, value: Any, ex: Optional[int] = None) -> None:
        start = time.time()
        await self.client.set(key, json.dumps(value), ex=ex)
        _record_cache_operation("set", "redis", time.time() - start)

    async def incr(self, key: str) -> int:
        start = time.time()
        result: int = await self.client.incr(key)
        _record_cache_operation("incr", "redis", time.time() - start)
        return result

    async def expire(self, key: str, seconds: int) -> None:
        start = time.time()
        await self.client.expire(key, seconds)
        _record_cache_operation("expire", "redis", time.time() - start)

    async def delete(self, key: str) -> None:
        start = time.time()
        await self.client.delete(key)
        _record_cache_operation("delete", "redis", time.time() - start)

    async def close(self) -> None:
        await self.client.aclose()
