"""Expiring key-value stores backing the server status cache.

Values are opaque strings (serialized ``ServerStatus``). A miss is ``None``,
never an exception; only an unreachable backend raises
:class:`CacheUnavailable`.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

import redis.asyncio as redis
from redis.exceptions import RedisError

logger = logging.getLogger("gamestatus.cache")


class CacheUnavailable(Exception):
    """Raised when the cache backend cannot be reached."""

    def __init__(self, operation: str, cause: BaseException | None = None) -> None:
        self.operation = operation
        reason = cause.__class__.__name__ if cause is not None else "unavailable"
        super().__init__(f"Status cache {operation} failed ({reason})")


class StatusCache(Protocol):
    async def get(self, key: str) -> Optional[str]:
        ...

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        ...


@dataclass(frozen=True)
class CacheEntry:
    value: str
    expires_at: float


class InMemoryStatusCache:
    """Process-local TTL cache, used when no Redis URL is configured."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    async def get(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            self._entries.pop(key, None)
            return None
        return entry.value

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        now = self._clock()
        self._prune(now)
        self._entries[key] = CacheEntry(value=value, expires_at=now + ttl_seconds)

    def _prune(self, now: float) -> None:
        expired = [key for key, entry in self._entries.items() if now >= entry.expires_at]
        for key in expired:
            del self._entries[key]

    def __len__(self) -> int:
        now = self._clock()
        return sum(1 for entry in self._entries.values() if now < entry.expires_at)


class RedisStatusCache:
    """Redis-backed cache shared by every API worker."""

    def __init__(self, client: redis.Redis):
        self._redis = client

    async def get(self, key: str) -> Optional[str]:
        try:
            raw = await self._redis.get(key)
        except (RedisError, OSError) as exc:
            raise CacheUnavailable("get", exc) from exc
        if raw is None:
            return None
        if isinstance(raw, bytes):
            return raw.decode("utf-8", errors="replace")
        return str(raw)

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            await self._redis.set(key, value, ex=max(1, int(ttl_seconds)))
        except (RedisError, OSError) as exc:
            raise CacheUnavailable("put", exc) from exc

    async def close(self) -> None:
        await self._redis.aclose()


def build_status_cache(redis_url: str) -> InMemoryStatusCache | RedisStatusCache:
    if not redis_url:
        logger.info("REDIS_URL is not set; using in-process status cache")
        return InMemoryStatusCache()
    # get() decodes the raw bytes leniently.
    client = redis.Redis.from_url(redis_url)
    return RedisStatusCache(client)
