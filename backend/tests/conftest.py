import asyncio

import pytest

from gamestatus.cache import CacheUnavailable, InMemoryStatusCache
from gamestatus.models import ServerStatus
from gamestatus.services import QueryError, QueryErrorKind


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingCache:
    """In-memory cache that records every call and can simulate an outage."""

    def __init__(self, clock=None, fail_reads: bool = False, fail_writes: bool = False):
        self.inner = InMemoryStatusCache(clock=clock or FakeClock())
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.gets = []
        self.puts = []

    async def get(self, key):
        self.gets.append(key)
        if self.fail_reads:
            raise CacheUnavailable("get", ConnectionError("down"))
        return await self.inner.get(key)

    async def put(self, key, value, ttl_seconds):
        self.puts.append((key, value, ttl_seconds))
        if self.fail_writes:
            raise CacheUnavailable("put", ConnectionError("down"))
        await self.inner.put(key, value, ttl_seconds)


class CountingQuerier:
    def __init__(self, status=None, error_kind=None, delay: float = 0.0):
        self.status = status or ServerStatus(name="Dust Arena", player_count=12, max_player_count=24)
        self.error_kind = error_kind
        self.delay = delay
        self.calls = []

    async def query(self, address, timeout):
        self.calls.append((address, timeout))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error_kind is not None:
            raise QueryError(self.error_kind, address, "simulated")
        return self.status


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return RecordingCache(clock=clock)


@pytest.fixture
def querier():
    return CountingQuerier()


@pytest.fixture
def failing_querier():
    return CountingQuerier(error_kind=QueryErrorKind.TIMEOUT)
