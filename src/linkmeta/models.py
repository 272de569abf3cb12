"""Link metadata records."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone


@dataclass(frozen=True)
class OpenGraphData:
    """Open Graph fields used for social previews."""

    title: str | None = None
    description: str | None = None
    image: str | None = None
    url: str | None = None

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "image": self.image,
            "url": self.url,
        }

    @classmethod
    def from_dict(cls, data: dict | None) -> "OpenGraphData":
        data = data or {}
        return cls(
            title=data.get("title"),
            description=data.get("description"),
            image=data.get("image"),
            url=data.get("url"),
        )


@dataclass(frozen=True)
class PageMetadata:
    """Metadata extracted from a page, without identity or timestamp."""

    title: str | None = None
    description: str | None = None
    keywords: tuple[str, ...] = ()
    favicon: str | None = None
    open_graph: OpenGraphData = field(default_factory=OpenGraphData)


@dataclass(frozen=True)
class LinkRecord:
    """Stored metadata for one URL.

    Records are immutable: a refresh builds a new record and the store swaps
    it in whole, so readers never see a mix of old and new fields.
    """

    id: str
    url: str
    last_scraped: datetime
    title: str | None = None
    description: str | None = None
    keywords: tuple[str, ...] = ()
    favicon: str | None = None
    open_graph: OpenGraphData = field(default_factory=OpenGraphData)

    @classmethod
    def from_metadata(
        cls,
        record_id: str,
        url: str,
        metadata: PageMetadata,
        last_scraped: datetime,
    ) -> "LinkRecord":
        """Build a full record from freshly extracted metadata."""
        return cls(
            id=record_id,
            url=url,
            last_scraped=last_scraped,
            title=metadata.title,
            description=metadata.description,
            keywords=tuple(metadata.keywords),
            favicon=metadata.favicon,
            open_graph=metadata.open_graph,
        )

    def refreshed(self, metadata: PageMetadata, last_scraped: datetime) -> "LinkRecord":
        """Return a copy with content replaced; id and url are kept."""
        return replace(
            self,
            last_scraped=max(self.last_scraped, last_scraped),
            title=metadata.title,
            description=metadata.description,
            keywords=tuple(metadata.keywords),
            favicon=metadata.favicon,
            open_graph=metadata.open_graph,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "url": self.url,
            "title": self.title,
            "description": self.description,
            "keywords": list(self.keywords),
            "favicon": self.favicon,
            "openGraph": self.open_graph.to_dict(),
            "lastScraped": self.last_scraped.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LinkRecord":
        last_scraped = datetime.fromisoformat(data["lastScraped"])
        if last_scraped.tzinfo is None:
            last_scraped = last_scraped.replace(tzinfo=timezone.utc)
        return cls(
            id=data["id"],
            url=data["url"],
            last_scraped=last_scraped,
            title=data.get("title"),
            description=data.get("description"),
            keywords=tuple(data.get("keywords") or ()),
            favicon=data.get("favicon"),
            open_graph=OpenGraphData.from_dict(data.get("openGraph")),
        )
