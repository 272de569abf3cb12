"""Protocol definitions for the collaborators of the fetch coordinator."""

from dataclasses import dataclass
from typing import Protocol

from ..models import LinkRecord, PageMetadata


@dataclass
class Response:
    """HTTP response container."""

    url: str
    status: int
    content: bytes
    headers: dict[str, str]

    @property
    def text(self) -> str:
        """Decode content as UTF-8."""
        return self.content.decode("utf-8", errors="replace")

    @property
    def content_type(self) -> str:
        """Media type without parameters, lowercased."""
        value = self.headers.get("content-type", "")
        return value.split(";", 1)[0].strip().lower()


class Fetcher(Protocol):
    """Protocol for URL fetchers."""

    async def fetch(self, url: str) -> Response:
        """Fetch a URL, raising FetchFailed on transport errors or HTTP >= 400."""
        ...


class PageScraper(Protocol):
    """Fetches a page and extracts its metadata."""

    async def fetch_and_extract(self, url: str) -> PageMetadata:
        """Return metadata for url or raise FetchFailed/ExtractionFailed."""
        ...


class Store(Protocol):
    """Persistent link records keyed by URL."""

    def get(self, url: str) -> LinkRecord | None:
        """Return the record for url, or None if absent."""
        ...

    def upsert(self, record: LinkRecord) -> None:
        """Insert or replace the record for record.url."""
        ...
