"""Fetch-and-extract adapter used by the coordinator."""

import logging

from .core.protocols import Fetcher
from .errors import ExtractionFailed
from .extract import MetadataExtractor
from .models import PageMetadata

logger = logging.getLogger(__name__)

HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml")


class HttpPageScraper:
    """Fetch a page over HTTP and extract its metadata."""

    def __init__(self, fetcher: Fetcher, extractor: MetadataExtractor | None = None):
        self.fetcher = fetcher
        self.extractor = extractor or MetadataExtractor()

    async def fetch_and_extract(self, url: str) -> PageMetadata:
        """Fetch url and extract its metadata.

        FetchFailed from the fetcher propagates unchanged. Non-HTML or empty
        responses and parser errors raise ExtractionFailed.
        """
        response = await self.fetcher.fetch(url)

        content_type = response.content_type
        # Servers that omit the header are given the benefit of the doubt
        if content_type and content_type not in HTML_CONTENT_TYPES:
            raise ExtractionFailed(f"Not an HTML page ({content_type}): {url}", url=url)
        if not response.content.strip():
            raise ExtractionFailed(f"Empty response body: {url}", url=url)

        try:
            metadata = self.extractor.extract(response.text, response.url)
        except Exception as exc:
            raise ExtractionFailed(f"Could not parse metadata from {url}: {exc}", url=url) from exc

        logger.debug("Extracted metadata from %s (final url %s)", url, response.url)
        return metadata

    async def close(self):
        close = getattr(self.fetcher, "close", None)
        if close is not None:
            await close()
