"""Fetch coordinator: cached metadata with one in-flight fetch per URL."""

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from functools import partial

from .core.protocols import PageScraper, Store
from .errors import ExtractionFailed, FetchFailed, LinkMetaError
from .freshness import is_fresh, to_max_age
from .ids import new_id
from .models import LinkRecord
from .urls import canonical_url

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE = timedelta(hours=1)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FetchCoordinator:
    """Serve link records from a store, refreshing stale ones on demand.

    Concurrent callers asking for the same stale or missing URL share a
    single fetch: the first caller starts a task and registers it under the
    canonical URL, later callers await that same task. The task runs to
    completion even if every caller waiting on it is cancelled, so the store
    still receives the refreshed record.
    """

    def __init__(
        self,
        store: Store,
        scraper: PageScraper,
        *,
        default_max_age: float | timedelta = DEFAULT_MAX_AGE,
        clock: Callable[[], datetime] = utcnow,
        id_factory: Callable[[], str] = new_id,
        max_concurrency: int | None = None,
    ):
        self.store = store
        self.scraper = scraper
        self.default_max_age = to_max_age(default_max_age)
        self._clock = clock
        self._new_id = id_factory
        self._in_flight: dict[str, asyncio.Task] = {}
        self._semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None

    @classmethod
    def from_settings(cls, settings, store: Store | None = None, scraper: PageScraper | None = None):
        """Wire the default store and HTTP scraper from LinkMetaSettings."""
        from .core import HttpFetcher
        from .scraper import HttpPageScraper
        from .store import open_store

        return cls(
            store if store is not None else open_store(settings.database),
            scraper if scraper is not None else HttpPageScraper(HttpFetcher.from_settings(settings.fetcher)),
            default_max_age=settings.cache.max_age,
            max_concurrency=settings.app.worker_count or None,
        )

    @property
    def in_flight(self) -> frozenset[str]:
        """Canonical URLs with a fetch currently running."""
        return frozenset(self._in_flight)

    async def get_or_refresh(
        self,
        url: str,
        max_age: float | timedelta | None = None,
        *,
        allow_stale: bool = False,
    ) -> LinkRecord:
        """Return the record for url, fetching it if absent or older than max_age.

        Raises InvalidInput before any I/O for a malformed URL or a negative
        max_age. Fetch and extraction failures are raised to every caller
        sharing the fetch; with allow_stale=True a caller that already had a
        cached record gets it back instead.
        """
        key = canonical_url(url)
        target = url.strip()
        max_age = self.default_max_age if max_age is None else to_max_age(max_age)

        cached = self.store.get(key)
        if cached is not None and is_fresh(cached.last_scraped, max_age, self._clock()):
            logger.debug("Cache hit for %s", key)
            return cached

        # No await between the lookup and the registration below.
        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.create_task(self._refresh(key, target, max_age), name=f"refresh {key}")
            self._in_flight[key] = task
            task.add_done_callback(partial(self._settle, key))
        else:
            logger.debug("Joining in-flight fetch for %s", key)

        try:
            return await asyncio.shield(task)
        except (FetchFailed, ExtractionFailed) as exc:
            if allow_stale and cached is not None:
                logger.warning("Serving stale record for %s after failed refresh: %s", key, exc)
                return cached
            raise

    async def _refresh(self, url: str, target: str, max_age: timedelta) -> LinkRecord:
        """Refresh the record stored under url by scraping target, the URL as requested."""
        current = self.store.get(url)
        if current is not None and is_fresh(current.last_scraped, max_age, self._clock()):
            # A fetch that settled just before this one started already refreshed it
            logger.debug("Record for %s already refreshed", url)
            return current

        if self._semaphore is not None:
            async with self._semaphore:
                metadata = await self._scrape(target)
        else:
            metadata = await self._scrape(target)

        now = self._clock()
        if current is None:
            record = LinkRecord.from_metadata(self._new_id(), url, metadata, now)
        else:
            record = current.refreshed(metadata, now)

        self.store.upsert(record)
        logger.info("Refreshed metadata for %s (id %s)", url, record.id)
        return record

    async def _scrape(self, url: str):
        try:
            return await self.scraper.fetch_and_extract(url)
        except LinkMetaError as exc:
            logger.warning("Refresh failed for %s: %s", url, exc)
            raise
        except Exception as exc:
            logger.warning("Refresh failed for %s: %r", url, exc)
            raise FetchFailed(f"Fetch failed for {url}: {exc}", url=url) from exc

    def _settle(self, key: str, task: asyncio.Task):
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        # Mark the outcome retrieved when every caller has gone away
        if not task.cancelled():
            task.exception()

    async def wait_idle(self):
        """Wait for every in-flight fetch to settle, ignoring their outcomes."""
        while self._in_flight:
            await asyncio.gather(*self._in_flight.values(), return_exceptions=True)

    async def close(self):
        await self.wait_idle()
        close = getattr(self.scraper, "close", None)
        if close is not None:
            await close()
        close = getattr(self.store, "close", None)
        if close is not None:
            close()
