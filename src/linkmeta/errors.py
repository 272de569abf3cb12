"""Exception hierarchy for the metadata service."""


class LinkMetaError(Exception):
    """Base class for every error raised by linkmeta."""

    def __init__(self, message: str, url: str | None = None):
        super().__init__(message)
        self.url = url


class InvalidInput(LinkMetaError, ValueError):
    """Malformed URL or negative max-age, rejected before any I/O."""


class FetchFailed(LinkMetaError):
    """The page could not be retrieved (transport error, timeout, HTTP error)."""


class ExtractionFailed(LinkMetaError):
    """The page was retrieved but its metadata could not be parsed."""


class StoreUnavailable(LinkMetaError):
    """The persistence layer failed on lookup or upsert."""


class ConfigError(LinkMetaError):
    """Configuration file missing, malformed or invalid."""
