"""Unit tests for storage module."""

import pytest
from datetime import datetime, timedelta

from readmaster.errors import SourceNotFoundError
from readmaster.ingestion.interfaces import Content, ContentType, FilterRule, Source, SyncStatus
from readmaster.storage.database import SourceStorage


def make_content(source_id, i=0, **overrides):
    data = dict(
        source_id=source_id,
        title=f"Article {i}",
        url=f"https://example.com/article-{i}",
        processed_content="body",
        raw_content="body",
        published_at=datetime(2024, 1, 1) + timedelta(days=i),
    )
    data.update(overrides)
    return Content(**data)


class TestSources:
    """Tests for source persistence."""

    def test_create_and_get_source(self, storage, sample_rss_source):
        sample_rss_source.filter_rules = FilterRule(exclude=["spam"])
        created = storage.create_source(sample_rss_source)

        assert created.id is not None
        assert created.created_at is not None

        retrieved = storage.get_source(created.id)
        assert retrieved.name == "Example Feed"
        assert retrieved.config == {"url": "https://example.com/feed.xml"}
        assert retrieved.filter_rules.exclude == ["spam"]
        assert retrieved.last_sync_status is None

    def test_get_missing_source(self, storage):
        assert storage.get_source(999) is None

    def test_get_sources_by_owner(self, storage):
        storage.create_source(Source(name="A", type="rss", config={"url": "https://a.example"}, user_id=1))
        storage.create_source(Source(name="B", type="rss", config={"url": "https://b.example"}, user_id=2))

        assert [s.name for s in storage.get_sources(1)] == ["A"]
        assert [s.name for s in storage.get_sources(2)] == ["B"]

    def test_update_sync_state(self, storage, sample_rss_source):
        source = storage.create_source(sample_rss_source)
        synced_at = datetime(2024, 5, 1, 8, 30)

        storage.update_sync_state(source.id, SyncStatus.SUCCESS, synced_at=synced_at)

        retrieved = storage.get_source(source.id)
        assert retrieved.last_sync_status == SyncStatus.SUCCESS
        assert retrieved.last_sync_at == synced_at

    def test_update_sync_state_missing_source(self, storage):
        with pytest.raises(SourceNotFoundError):
            storage.update_sync_state(42, SyncStatus.FAILED)

    def test_update_source(self, storage, sample_rss_source):
        source = storage.create_source(sample_rss_source)
        updated = storage.update_source(source.id, name="Renamed", filter_rules={"keywords": ["python"]})

        assert updated.name == "Renamed"
        assert storage.get_source(source.id).filter_rules.keywords == ["python"]

    def test_update_source_rejects_sync_fields(self, storage, sample_rss_source):
        source = storage.create_source(sample_rss_source)
        with pytest.raises(ValueError):
            storage.update_source(source.id, last_sync_status="success")

    def test_due_sources(self, storage):
        now = datetime(2024, 6, 1, 12, 0)
        never = storage.create_source(Source(name="Never", type="rss", config={}))
        recent = storage.create_source(Source(name="Recent", type="rss", config={}, sync_interval=3600))
        stale = storage.create_source(Source(name="Stale", type="rss", config={}, sync_interval=3600))
        storage.create_source(Source(name="Off", type="rss", config={}, is_active=False))

        storage.update_sync_state(recent.id, SyncStatus.SUCCESS, synced_at=now - timedelta(minutes=10))
        storage.update_sync_state(stale.id, SyncStatus.SUCCESS, synced_at=now - timedelta(hours=2))

        due = storage.get_due_sources(now=now)
        assert [s.id for s in due] == [never.id, stale.id]


class TestContents:
    """Tests for content persistence."""

    def test_create_content(self, storage, sample_rss_source):
        source = storage.create_source(sample_rss_source)
        saved = storage.create_content(make_content(source.id, tags=["python"]))

        assert saved.id > 0
        assert saved.tags == ["python"]
        assert saved.content_type == ContentType.TEXT
        assert saved.is_read is False

    def test_duplicate_url_returns_none(self, storage, sample_rss_source):
        source = storage.create_source(sample_rss_source)
        assert storage.create_content(make_content(source.id)) is not None
        assert storage.create_content(make_content(source.id)) is None

    def test_empty_url_never_duplicates(self, storage, sample_rss_source):
        source = storage.create_source(sample_rss_source)
        assert storage.create_content(make_content(source.id, url="")) is not None
        assert storage.create_content(make_content(source.id, url="")) is not None

    def test_same_url_in_different_sources(self, storage):
        a = storage.create_source(Source(name="A", type="rss", config={}))
        b = storage.create_source(Source(name="B", type="rss", config={}))
        assert storage.create_content(make_content(a.id)) is not None
        assert storage.create_content(make_content(b.id)) is not None

    def test_content_requires_existing_source(self, storage):
        with pytest.raises(SourceNotFoundError):
            storage.create_content(make_content(12345))

    def test_get_contents_newest_first(self, storage, sample_rss_source):
        source = storage.create_source(sample_rss_source)
        for i in range(3):
            storage.create_content(make_content(source.id, i))

        contents = storage.get_contents(source.id, limit=2)
        assert [c.title for c in contents] == ["Article 2", "Article 1"]

    def test_set_content_flags(self, storage, sample_rss_source):
        source = storage.create_source(sample_rss_source)
        saved = storage.create_content(make_content(source.id))

        updated = storage.set_content_flags(saved.id, is_read=True, is_starred=True)
        assert updated.is_read is True
        assert updated.is_starred is True
        assert updated.is_archived is False

        with pytest.raises(ValueError):
            storage.set_content_flags(saved.id, is_deleted=True)

        assert storage.set_content_flags(999, is_read=True) is None

    def test_delete_source_cascades(self, storage, sample_rss_source):
        source = storage.create_source(sample_rss_source)
        saved = storage.create_content(make_content(source.id))

        assert storage.delete_source(source.id) is True
        assert storage.get_source(source.id) is None
        assert storage.get_content(saved.id) is None
        assert storage.delete_source(source.id) is False

    def test_stats(self, storage, sample_rss_source):
        source = storage.create_source(sample_rss_source)
        storage.create_content(make_content(source.id, 0))
        storage.create_content(make_content(source.id, 1))
        storage.update_sync_state(source.id, SyncStatus.FAILED)

        stats = storage.get_stats()
        assert stats["total_sources"] == 1
        assert stats["active_sources"] == 1
        assert stats["failed_sources"] == 1
        assert stats["total_contents"] == 2
        assert stats["unread_contents"] == 2


def test_storage_creates_data_directory(tmp_path):
    """SQLite parent directories are created on demand."""
    db_path = tmp_path / "nested" / "dir" / "readmaster.db"
    SourceStorage(f"sqlite:///{db_path}")
    assert db_path.parent.exists()
