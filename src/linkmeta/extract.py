"""Page metadata extraction using selectolax."""

from urllib.parse import urljoin

from selectolax.lexbor import LexborHTMLParser

from .models import OpenGraphData, PageMetadata

OG_FIELDS = ("title", "description", "image", "url")


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = " ".join(value.split())
    return value or None


class Extractor:
    """Read title, meta tags, favicon and Open Graph data from HTML."""

    def __init__(self, html: str):
        self.tree = LexborHTMLParser(html)

    def css(self, selector: str, attribute: str | None = None) -> list[str]:
        """Extract data using CSS selector."""
        results = []
        for node in self.tree.css(selector):
            if attribute:
                attr_val = node.attributes.get(attribute)
                if attr_val:
                    results.append(attr_val)
            else:
                text = node.text(strip=True)
                if text:
                    results.append(text)
        return results

    def css_first(self, selector: str, attribute: str | None = None) -> str | None:
        """Extract first match using CSS selector."""
        results = self.css(selector, attribute)
        return results[0] if results else None

    def get_meta(self) -> dict[str, str]:
        """Get meta tags as dictionary, names lowercased, first occurrence wins."""
        meta: dict[str, str] = {}
        for attr in ("name", "property"):
            for node in self.tree.css(f"meta[{attr}]"):
                key = (node.attributes.get(attr) or "").strip().lower()
                content = node.attributes.get("content")
                if key and content is not None and key not in meta:
                    meta[key] = content
        return meta

    def get_title(self) -> str | None:
        return _clean(self.css_first("title"))

    def get_favicon(self) -> str | None:
        """Return the href of the first <link> whose rel includes "icon"."""
        for node in self.tree.css("link[rel]"):
            rel = (node.attributes.get("rel") or "").lower().split()
            href = node.attributes.get("href")
            if "icon" in rel and href:
                return href.strip()
        return None


class MetadataExtractor:
    """Build PageMetadata from raw HTML."""

    def __init__(self, default_favicon: str | None = "/favicon.ico"):
        self.default_favicon = default_favicon

    def extract(self, html: str, base_url: str) -> PageMetadata:
        extractor = Extractor(html)
        meta = extractor.get_meta()

        keywords = tuple(
            word.strip()
            for word in meta.get("keywords", "").split(",")
            if word.strip()
        )

        favicon = extractor.get_favicon() or self.default_favicon
        if favicon:
            favicon = urljoin(base_url, favicon)

        og = {name: _clean(meta.get(f"og:{name}")) for name in OG_FIELDS}
        if og["image"]:
            og["image"] = urljoin(base_url, og["image"])

        return PageMetadata(
            title=extractor.get_title(),
            description=_clean(meta.get("description")),
            keywords=keywords,
            favicon=favicon,
            open_graph=OpenGraphData(**og),
        )
