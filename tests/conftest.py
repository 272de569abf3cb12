"""Shared fixtures: a controllable clock and a scripted page scraper."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from linkmeta.models import OpenGraphData, PageMetadata
from linkmeta.store import MemoryStore

T0 = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class FakeScraper:
    """Records calls and returns scripted metadata or raises a scripted error.

    When gated, every call blocks until release() is called.
    """

    def __init__(self, metadata: PageMetadata | None = None, error: Exception | None = None):
        self.metadata = metadata or PageMetadata(
            title="Example Domain",
            description="Example description",
            keywords=("example", "domain"),
            favicon="https://example.com/favicon.ico",
            open_graph=OpenGraphData(title="Example", image="https://example.com/og.png"),
        )
        self.error = error
        self.calls: list[str] = []
        self._gate: asyncio.Event | None = None

    def hold(self):
        self._gate = asyncio.Event()

    def release(self):
        if self._gate is not None:
            self._gate.set()

    async def fetch_and_extract(self, url: str) -> PageMetadata:
        self.calls.append(url)
        if self._gate is not None:
            await self._gate.wait()
        if self.error is not None:
            raise self.error
        return self.metadata


async def run_pending(rounds: int = 5):
    """Let scheduled tasks run up to their next suspension point."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scraper():
    return FakeScraper()


@pytest.fixture
def store():
    return MemoryStore()
