"""Core collaborator protocols and the HTTP fetcher."""

from .fetcher import HttpFetcher
from .protocols import Fetcher, PageScraper, Response, Store

__all__ = ["Fetcher", "HttpFetcher", "PageScraper", "Response", "Store"]
