"""Interface definitions for content ingestion."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any
from enum import Enum


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (the storage convention)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class ContentType(Enum):
    """Kinds of content a source can produce."""
    TEXT = "text"
    VIDEO = "video"
    AUDIO = "audio"
    DESIGN = "design"
    CODE = "code"


class SyncStatus(Enum):
    """Outcome of the most recent sync of a source."""
    SUCCESS = "success"
    FAILED = "failed"
    IN_PROGRESS = "in_progress"


def _as_terms(value: Any) -> List[str]:
    if not value:
        return []
    if not isinstance(value, (list, tuple, set)):
        value = [value]
    return [str(term) for term in value if term not in (None, "")]


def _as_length(value: Any) -> Optional[int]:
    # Stored rules may carry lengths as strings; unreadable values impose nothing.
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


@dataclass
class FilterRule:
    """Per-source rules gating which content is persisted."""
    keywords: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=list)
    min_length: Optional[int] = None
    max_length: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["FilterRule"]:
        """Build from a stored dict. Unknown keys are ignored."""
        if not data:
            return None
        return cls(
            keywords=_as_terms(data.get("keywords")),
            exclude=_as_terms(data.get("exclude")),
            min_length=_as_length(data.get("min_length")),
            max_length=_as_length(data.get("max_length")),
        )

    def to_dict(self) -> dict:
        data: Dict[str, Any] = {}
        if self.keywords:
            data["keywords"] = list(self.keywords)
        if self.exclude:
            data["exclude"] = list(self.exclude)
        if self.min_length is not None:
            data["min_length"] = self.min_length
        if self.max_length is not None:
            data["max_length"] = self.max_length
        return data


@dataclass
class RawItem:
    """An item fetched by an adapter, before normalization."""
    title: str
    content: str = ""
    url: str = ""
    author: str = ""
    published_at: Optional[datetime] = None
    media_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    duration: Optional[int] = None  # seconds


@dataclass
class FetchResult:
    """Items from one fetch, plus the reason it failed (if it did)."""
    items: List[RawItem] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class Source:
    """A configured external feed."""
    name: str
    type: str
    config: Dict[str, Any] = field(default_factory=dict)
    id: Optional[int] = None
    user_id: int = 1
    filter_rules: Optional[FilterRule] = None
    sync_interval: int = 3600  # seconds
    last_sync_at: Optional[datetime] = None
    last_sync_status: Optional[SyncStatus] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def is_due(self, now: datetime = None) -> bool:
        """True if the sync interval has elapsed since the last sync."""
        if not self.is_active:
            return False
        if self.last_sync_at is None:
            return True
        now = now or utcnow()
        return (now - self.last_sync_at).total_seconds() >= self.sync_interval

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "type": self.type,
            "config": dict(self.config),
            "filter_rules": self.filter_rules.to_dict() if self.filter_rules else None,
            "sync_interval": self.sync_interval,
            "last_sync_at": self.last_sync_at.isoformat() if self.last_sync_at else None,
            "last_sync_status": self.last_sync_status.value if self.last_sync_status else None,
            "is_active": self.is_active,
        }


@dataclass
class Content:
    """A normalized content item. `id` is None until persisted."""
    source_id: int
    title: str
    summary: str = ""
    url: str = ""
    author: str = ""
    content_type: ContentType = ContentType.TEXT
    raw_content: str = ""
    processed_content: str = ""
    media_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    duration: Optional[int] = None
    tags: List[str] = field(default_factory=list)
    language: Optional[str] = None
    published_at: Optional[datetime] = None
    fetched_at: datetime = field(default_factory=utcnow)
    is_read: bool = False
    is_starred: bool = False
    is_archived: bool = False
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "source_id": self.source_id,
            "title": self.title,
            "summary": self.summary,
            "url": self.url,
            "author": self.author,
            "content_type": self.content_type.value,
            "raw_content": self.raw_content,
            "processed_content": self.processed_content,
            "media_url": self.media_url,
            "thumbnail_url": self.thumbnail_url,
            "duration": self.duration,
            "tags": list(self.tags),
            "language": self.language,
            "published_at": self.published_at.isoformat() if self.published_at else None,
            "fetched_at": self.fetched_at.isoformat() if self.fetched_at else None,
            "is_read": self.is_read,
            "is_starred": self.is_starred,
            "is_archived": self.is_archived,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class StorageInterface:
    """Interface for the repository the sync pipeline writes through."""

    def create_content(self, content: Content) -> Optional[Content]:
        """Persist content, return the stored row or None if duplicate."""
        raise NotImplementedError

    def get_source(self, source_id: int) -> Optional[Source]:
        """Get a source by id."""
        raise NotImplementedError

    def get_sources(self, user_id: int) -> List[Source]:
        """Get all sources owned by a user."""
        raise NotImplementedError

    def get_due_sources(self, now: datetime = None, user_id: int = None) -> List[Source]:
        """Active sources whose sync interval has elapsed."""
        now = now or utcnow()
        return [s for s in self.get_sources(user_id) if s.is_due(now)]

    def update_sync_state(
        self,
        source_id: int,
        status: SyncStatus,
        synced_at: datetime = None
    ) -> None:
        """Record the outcome of a sync."""
        raise NotImplementedError
