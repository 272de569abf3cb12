"""URL validation and canonicalisation for cache keys."""

from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from .errors import InvalidInput

ALLOWED_SCHEMES = ("http", "https")


def normalize_url(url: str) -> str:
    """Normalize URL for cache keys (remove fragment, sort query params)."""
    parsed = urlparse(url)

    query_params = parse_qsl(parsed.query, keep_blank_values=True)
    sorted_query = urlencode(sorted(query_params))

    # Normalize path (remove trailing slash except for root)
    path = parsed.path.rstrip("/") or "/"

    return urlunparse((
        parsed.scheme.lower(),
        parsed.netloc.lower(),
        path,
        parsed.params,
        sorted_query,
        "",
    ))


def canonical_url(url: str) -> str:
    """Validate an absolute http(s) URL and return its canonical form."""
    if not isinstance(url, str) or not url.strip():
        raise InvalidInput("URL must be a non-empty string", url=url if isinstance(url, str) else None)

    candidate = url.strip()
    if any(ch.isspace() for ch in candidate):
        raise InvalidInput(f"URL contains whitespace: {url!r}", url=url)

    parsed = urlparse(candidate)
    if parsed.scheme.lower() not in ALLOWED_SCHEMES:
        raise InvalidInput(f"Unsupported URL scheme: {url!r}", url=url)
    if not parsed.hostname:
        raise InvalidInput(f"URL has no host: {url!r}", url=url)

    try:
        parsed.port
    except ValueError as exc:
        raise InvalidInput(f"Invalid port in URL: {url!r}", url=url) from exc

    return normalize_url(candidate)
