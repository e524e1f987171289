"""Shared fixtures: a fixed clock, a seeded registry and a virtual sleep."""

import asyncio
import heapq
import itertools
from datetime import datetime, timedelta

import pytest

from guardwatch.registry import LocalRegistry, MemoryStore, seeded_store

NOW = datetime(2026, 1, 15, 12, 0, 0)


class Clock:
    """Manually advanced replacement for datetime.utcnow."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class VirtualSleep:
    """
    Drop-in for asyncio.sleep driven by advance().

    Sleepers wake in deadline order; the loop is given a few turns after
    each wake-up so the woken task can run until its next sleep.
    """

    def __init__(self):
        self.now = 0.0
        self._waiters = []
        self._seq = itertools.count()

    async def sleep(self, delay: float) -> None:
        future = asyncio.get_running_loop().create_future()
        heapq.heappush(self._waiters, (self.now + delay, next(self._seq), future))
        await future

    async def _settle(self) -> None:
        for _ in range(20):
            await asyncio.sleep(0)

    async def advance(self, seconds: float) -> None:
        target = self.now + seconds
        await self._settle()
        while self._waiters and self._waiters[0][0] <= target:
            deadline, _, future = heapq.heappop(self._waiters)
            self.now = deadline
            if not future.done():
                future.set_result(None)
            await self._settle()
        self.now = target


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def virtual_sleep():
    return VirtualSleep()


def make_registry(store, clock, **kwargs) -> LocalRegistry:
    kwargs.setdefault("usage_meter", lambda cameras: (42.0, 12.5))
    return LocalRegistry(
        store,
        clock=clock,
        recordings_dir="data/recordings",
        media_base_url="https://media.test",
        stream_base_url="https://stream.test",
        **kwargs,
    )


@pytest.fixture
def registry(clock):
    """LocalRegistry over the demo site: cam-001..003, zone-001/002, two events."""
    return make_registry(seeded_store(now=clock()), clock)


@pytest.fixture
def empty_registry(clock):
    return make_registry(MemoryStore(), clock)
