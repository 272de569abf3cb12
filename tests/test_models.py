"""Tests for link records."""

import dataclasses
from datetime import datetime, timedelta, timezone

import pytest

from linkmeta.models import LinkRecord, OpenGraphData, PageMetadata

T0 = datetime(2024, 1, 1, 8, 30, tzinfo=timezone.utc)


@pytest.fixture
def record():
    return LinkRecord(
        id="01HV0000000000000000000000",
        url="https://example.com/",
        last_scraped=T0,
        title="Old title",
        description="Old description",
        keywords=("a", "b"),
        favicon="https://example.com/favicon.ico",
        open_graph=OpenGraphData(title="Old OG", image="https://example.com/old.png"),
    )


class TestLinkRecord:
    def test_is_immutable(self, record):
        """Records should be frozen."""
        with pytest.raises(dataclasses.FrozenInstanceError):
            record.title = "changed"

    def test_from_metadata(self):
        """from_metadata should copy every content field."""
        metadata = PageMetadata(title="T", keywords=["x", "x"], open_graph=OpenGraphData(url="u"))
        record = LinkRecord.from_metadata("ID", "https://example.com/", metadata, T0)

        assert record.id == "ID"
        assert record.title == "T"
        assert record.keywords == ("x", "x")
        assert record.open_graph.url == "u"
        assert record.last_scraped == T0

    def test_refreshed_replaces_content_keeps_identity(self, record):
        """refreshed should replace all content but keep id and url."""
        metadata = PageMetadata(title="New title", keywords=("c",))
        later = T0 + timedelta(hours=1)

        updated = record.refreshed(metadata, later)

        assert updated.id == record.id
        assert updated.url == record.url
        assert updated.title == "New title"
        assert updated.description is None
        assert updated.favicon is None
        assert updated.keywords == ("c",)
        assert updated.open_graph == OpenGraphData()
        assert updated.last_scraped == later
        assert record.title == "Old title"

    def test_refreshed_never_moves_timestamp_back(self, record):
        """last_scraped should not decrease."""
        updated = record.refreshed(PageMetadata(), T0 - timedelta(minutes=5))
        assert updated.last_scraped == T0


class TestSerialisation:
    def test_to_dict_shape(self, record):
        """to_dict should use the service's JSON field names."""
        data = record.to_dict()

        assert data == {
            "id": "01HV0000000000000000000000",
            "url": "https://example.com/",
            "title": "Old title",
            "description": "Old description",
            "keywords": ["a", "b"],
            "favicon": "https://example.com/favicon.ico",
            "openGraph": {
                "title": "Old OG",
                "description": None,
                "image": "https://example.com/old.png",
                "url": None,
            },
            "lastScraped": "2024-01-01T08:30:00+00:00",
        }

    def test_from_dict_restores_record(self, record):
        assert LinkRecord.from_dict(record.to_dict()) == record

    def test_from_dict_assumes_utc_for_naive_timestamps(self):
        data = {"id": "X", "url": "https://example.com/", "lastScraped": "2024-01-01T08:30:00"}
        restored = LinkRecord.from_dict(data)
        assert restored.last_scraped == T0
        assert restored.open_graph == OpenGraphData()
        assert restored.keywords == ()
