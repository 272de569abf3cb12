"""Link record stores: in-memory and SQLite."""

import json
import logging
import sqlite3
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path

from .errors import ConfigError, StoreUnavailable
from .models import LinkRecord, OpenGraphData

logger = logging.getLogger(__name__)

SQLITE_PREFIX = "sqlite:///"
MEMORY_URL = "memory://"


class MemoryStore:
    """Dict-backed store. Records are frozen, so replacement is atomic."""

    def __init__(self):
        self._records: dict[str, LinkRecord] = {}

    def get(self, url: str) -> LinkRecord | None:
        return self._records.get(url)

    def upsert(self, record: LinkRecord) -> None:
        current = self._records.get(record.url)
        if current is not None:
            if current.last_scraped > record.last_scraped:
                return
            if current.id != record.id:
                record = replace(record, id=current.id)
        self._records[record.url] = record

    def delete(self, url: str) -> None:
        self._records.pop(url, None)

    def count(self) -> int:
        return len(self._records)

    def close(self):
        pass


def _timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


class SQLiteStore:
    """Link records in a SQLite table with one row per URL."""

    COLUMNS = (
        "id", "url", "title", "description", "keywords", "favicon",
        "og_title", "og_description", "og_image", "og_url", "last_scraped",
    )

    def __init__(self, db_path: str | Path = ":memory:", timeout: float = 5.0):
        self.db_path = str(db_path)
        try:
            if self.db_path != ":memory:":
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            self.conn = sqlite3.connect(self.db_path, timeout=timeout)
            self._init_db()
        except (OSError, sqlite3.Error) as exc:
            raise StoreUnavailable(f"Cannot open SQLite store {self.db_path}: {exc}") from exc

    def _init_db(self):
        """Initialize SQLite tables."""
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS links (
                id TEXT PRIMARY KEY,
                url TEXT UNIQUE NOT NULL,
                title TEXT,
                description TEXT,
                keywords TEXT NOT NULL DEFAULT '[]',
                favicon TEXT,
                og_title TEXT,
                og_description TEXT,
                og_image TEXT,
                og_url TEXT,
                last_scraped TEXT NOT NULL
            )
        """)
        self.conn.commit()

    def get(self, url: str) -> LinkRecord | None:
        try:
            cursor = self.conn.execute(
                f"SELECT {', '.join(self.COLUMNS)} FROM links WHERE url = ?", (url,)
            )
            row = cursor.fetchone()
        except sqlite3.Error as exc:
            raise StoreUnavailable(f"Lookup failed for {url}: {exc}", url=url) from exc

        if row is None:
            return None
        return self._from_row(row)

    def upsert(self, record: LinkRecord) -> None:
        """Insert or update by URL. The stored id and newer timestamps win."""
        og = record.open_graph
        params = (
            record.id,
            record.url,
            record.title,
            record.description,
            json.dumps(list(record.keywords), ensure_ascii=False),
            record.favicon,
            og.title,
            og.description,
            og.image,
            og.url,
            _timestamp(record.last_scraped),
        )
        try:
            with self.conn:
                self.conn.execute(
                    """INSERT INTO links (id, url, title, description, keywords, favicon,
                                          og_title, og_description, og_image, og_url, last_scraped)
                       VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                       ON CONFLICT(url) DO UPDATE SET
                           title = excluded.title,
                           description = excluded.description,
                           keywords = excluded.keywords,
                           favicon = excluded.favicon,
                           og_title = excluded.og_title,
                           og_description = excluded.og_description,
                           og_image = excluded.og_image,
                           og_url = excluded.og_url,
                           last_scraped = excluded.last_scraped
                       WHERE excluded.last_scraped >= links.last_scraped""",
                    params,
                )
        except sqlite3.Error as exc:
            raise StoreUnavailable(f"Upsert failed for {record.url}: {exc}", url=record.url) from exc

    def delete(self, url: str) -> None:
        try:
            with self.conn:
                self.conn.execute("DELETE FROM links WHERE url = ?", (url,))
        except sqlite3.Error as exc:
            raise StoreUnavailable(f"Delete failed for {url}: {exc}", url=url) from exc

    def count(self) -> int:
        try:
            cursor = self.conn.execute("SELECT COUNT(*) FROM links")
            return cursor.fetchone()[0]
        except sqlite3.Error as exc:
            raise StoreUnavailable(f"Count failed: {exc}") from exc

    def _from_row(self, row: tuple) -> LinkRecord:
        (record_id, url, title, description, keywords, favicon,
         og_title, og_description, og_image, og_url, last_scraped) = row
        return LinkRecord(
            id=record_id,
            url=url,
            last_scraped=datetime.fromisoformat(last_scraped),
            title=title,
            description=description,
            keywords=tuple(json.loads(keywords)),
            favicon=favicon,
            open_graph=OpenGraphData(
                title=og_title,
                description=og_description,
                image=og_image,
                url=og_url,
            ),
        )

    def close(self):
        """Close database connection."""
        self.conn.close()


def open_store(database) -> MemoryStore | SQLiteStore:
    """Open the store named by DatabaseSettings.url."""
    url = database.url
    if url == MEMORY_URL:
        logger.info("Using in-memory link store")
        return MemoryStore()
    if url.startswith(SQLITE_PREFIX):
        path = url[len(SQLITE_PREFIX):] or ":memory:"
        logger.info("Using SQLite link store at %s", path)
        return SQLiteStore(path, timeout=database.connect_timeout)
    raise ConfigError(f"Unsupported database url: {url!r} (expected sqlite:/// or memory://)")
