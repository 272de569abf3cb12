"""HTTP page fetcher using httpx."""

import asyncio
import logging

import httpx

from ..errors import FetchFailed
from .protocols import Response

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "linkmeta/0.1 (+https://github.com/linkmeta)"
ACCEPT_HTML = "text/html,application/xhtml+xml;q=0.9,*/*;q=0.5"
# Page metadata lives in <head>, so the tail of a huge document is never needed
DEFAULT_MAX_BYTES = 2 * 1024 * 1024


class HttpFetcher:
    """Fetch HTML pages over a shared httpx client.

    Redirects are followed and the reported URL is the final one. Transport
    failures, timeouts and 4xx/5xx statuses raise FetchFailed. Bodies longer
    than max_bytes are cut off at that size.
    """

    def __init__(
        self,
        timeout: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
        max_connections: int = 100,
        max_keepalive_connections: int = 20,
        max_bytes: int = DEFAULT_MAX_BYTES,
    ):
        self.timeout = httpx.Timeout(timeout)
        self.user_agent = user_agent
        self.max_bytes = max_bytes
        self.limits = httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=max_keepalive_connections,
        )
        self._client: httpx.AsyncClient | None = None
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings) -> "HttpFetcher":
        """Build a fetcher from FetcherSettings."""
        return cls(
            timeout=settings.timeout,
            user_agent=settings.user_agent,
            max_connections=settings.max_connections,
            max_keepalive_connections=settings.max_keepalive_connections,
            max_bytes=settings.max_content_bytes,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            async with self._lock:
                if self._client is None:
                    self._client = httpx.AsyncClient(
                        timeout=self.timeout,
                        limits=self.limits,
                        headers={"User-Agent": self.user_agent, "Accept": ACCEPT_HTML},
                        follow_redirects=True,
                    )
        return self._client

    async def fetch(self, url: str) -> Response:
        """Fetch url, raising FetchFailed unless the server answered below 400."""
        client = await self._get_client()
        try:
            async with client.stream("GET", url) as resp:
                if resp.status_code >= 400:
                    raise FetchFailed(f"HTTP {resp.status_code} for {url}", url=url)
                content = await self._read_capped(resp)
        except httpx.TimeoutException as exc:
            raise FetchFailed(f"Timed out fetching {url}", url=url) from exc
        except httpx.HTTPError as exc:
            raise FetchFailed(f"Error fetching {url}: {exc}", url=url) from exc

        return Response(
            url=str(resp.url),
            status=resp.status_code,
            content=content,
            headers=dict(resp.headers),
        )

    async def _read_capped(self, resp: httpx.Response) -> bytes:
        chunks = []
        size = 0
        async for chunk in resp.aiter_bytes():
            chunks.append(chunk)
            size += len(chunk)
            if size >= self.max_bytes:
                logger.debug("Truncated %s at %d bytes", resp.url, self.max_bytes)
                break
        return b"".join(chunks)[: self.max_bytes]

    async def close(self):
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
