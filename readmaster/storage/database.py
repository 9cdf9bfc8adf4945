"""Database operations for sources and content."""

import json
from datetime import datetime
from typing import Optional, List
from pathlib import Path

from sqlalchemy.orm import sessionmaker
from sqlalchemy.exc import IntegrityError
import structlog

from .models import SourceModel, ContentModel, init_db
from ..errors import SourceNotFoundError
from ..ingestion.interfaces import (
    Content, ContentType, FilterRule, Source, StorageInterface, SyncStatus, utcnow
)
from ..config.settings import settings

logger = structlog.get_logger()

_SOURCE_FIELDS = {"name", "type", "config", "filter_rules", "sync_interval", "is_active"}
_CONTENT_FLAGS = {"is_read", "is_starred", "is_archived"}


class SourceStorage(StorageInterface):
    """SQLAlchemy storage for sources and their content."""

    def __init__(self, database_url: str = None):
        if database_url is None:
            database_url = settings.database_url

        # Ensure data directory exists
        if database_url.startswith("sqlite:///"):
            db_path = database_url.replace("sqlite:///", "")
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        self.engine = init_db(database_url)
        self.Session = sessionmaker(bind=self.engine, expire_on_commit=False)

    # ------------------------------------------------------------------
    # Sources
    # ------------------------------------------------------------------

    def create_source(self, source: Source) -> Source:
        """Save a new source, return it with id and timestamps set."""
        session = self.Session()
        try:
            model = SourceModel(
                user_id=source.user_id,
                name=source.name,
                type=source.type,
                config=json.dumps(source.config or {}),
                filter_rules=_dump_rules(source.filter_rules),
                sync_interval=source.sync_interval,
                is_active=source.is_active,
            )
            session.add(model)
            session.commit()
            logger.info("source_created", id=model.id, type=source.type, name=source.name)
            return self._model_to_source(model)
        finally:
            session.close()

    def get_source(self, source_id: int) -> Optional[Source]:
        """Get a source by id."""
        session = self.Session()
        try:
            model = session.get(SourceModel, source_id)
            return self._model_to_source(model) if model else None
        finally:
            session.close()

    def get_sources(self, user_id: int) -> List[Source]:
        """Get all sources owned by a user."""
        session = self.Session()
        try:
            models = session.query(SourceModel)\
                .filter(SourceModel.user_id == user_id)\
                .order_by(SourceModel.id)\
                .all()
            return [self._model_to_source(m) for m in models]
        finally:
            session.close()

    def get_active_sources(self, user_id: int = None) -> List[Source]:
        """Get active sources, optionally for one user."""
        session = self.Session()
        try:
            query = session.query(SourceModel)\
                .filter(SourceModel.is_active == True)  # noqa: E712
            if user_id is not None:
                query = query.filter(SourceModel.user_id == user_id)
            return [self._model_to_source(m) for m in query.order_by(SourceModel.id).all()]
        finally:
            session.close()

    def get_due_sources(self, now: datetime = None, user_id: int = None) -> List[Source]:
        """Active sources whose sync interval has elapsed."""
        now = now or utcnow()
        return [s for s in self.get_active_sources(user_id) if s.is_due(now)]

    def update_source(self, source_id: int, **fields) -> Source:
        """Edit user-editable fields of a source."""
        unknown = set(fields) - _SOURCE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update source fields: {sorted(unknown)}")

        session = self.Session()
        try:
            model = session.get(SourceModel, source_id)
            if not model:
                raise SourceNotFoundError(source_id)
            for name, value in fields.items():
                if name == "config":
                    value = json.dumps(value or {})
                elif name == "filter_rules":
                    value = _dump_rules(value)
                setattr(model, name, value)
            session.commit()
            logger.debug("source_updated", id=source_id, fields=sorted(fields))
            return self._model_to_source(model)
        finally:
            session.close()

    def delete_source(self, source_id: int) -> bool:
        """Delete a source and, by cascade, its content."""
        session = self.Session()
        try:
            model = session.get(SourceModel, source_id)
            if not model:
                return False
            session.delete(model)
            session.commit()
            logger.info("source_deleted", id=source_id)
            return True
        finally:
            session.close()

    def update_sync_state(
        self,
        source_id: int,
        status: SyncStatus,
        synced_at: datetime = None
    ) -> None:
        """Record the outcome of a sync."""
        session = self.Session()
        try:
            model = session.get(SourceModel, source_id)
            if not model:
                raise SourceNotFoundError(source_id)
            model.last_sync_status = SyncStatus(status).value
            if synced_at is not None:
                model.last_sync_at = synced_at
            session.commit()
            logger.debug("sync_state_updated", id=source_id, status=model.last_sync_status)
        finally:
            session.close()

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    def create_content(self, content: Content) -> Optional[Content]:
        """Save content, return the stored row or None if duplicate."""
        session = self.Session()
        try:
            if session.get(SourceModel, content.source_id) is None:
                raise SourceNotFoundError(content.source_id)

            model = ContentModel(
                source_id=content.source_id,
                title=content.title,
                summary=content.summary,
                url=content.url or None,
                author=content.author or None,
                content_type=ContentType(content.content_type).value,
                raw_content=content.raw_content,
                processed_content=content.processed_content,
                media_url=content.media_url,
                thumbnail_url=content.thumbnail_url,
                duration=content.duration,
                tags=json.dumps(list(content.tags or [])),
                language=content.language,
                published_at=content.published_at,
                fetched_at=content.fetched_at,
                is_read=content.is_read,
                is_starred=content.is_starred,
                is_archived=content.is_archived,
            )
            session.add(model)
            session.commit()
            logger.debug("content_saved", id=model.id, source_id=content.source_id)
            return self._model_to_content(model)
        except IntegrityError:
            session.rollback()
            logger.debug("content_duplicate", source_id=content.source_id, url=(content.url or "")[:50])
            return None
        finally:
            session.close()

    def get_content(self, content_id: int) -> Optional[Content]:
        """Get a content item by id."""
        session = self.Session()
        try:
            model = session.get(ContentModel, content_id)
            return self._model_to_content(model) if model else None
        finally:
            session.close()

    def get_contents(self, source_id: int = None, limit: int = 50) -> List[Content]:
        """Get content, newest published first."""
        session = self.Session()
        try:
            query = session.query(ContentModel)
            if source_id is not None:
                query = query.filter(ContentModel.source_id == source_id)
            models = query\
                .order_by(ContentModel.published_at.desc(), ContentModel.id.desc())\
                .limit(limit)\
                .all()
            return [self._model_to_content(m) for m in models]
        finally:
            session.close()

    def set_content_flags(self, content_id: int, **flags: bool) -> Optional[Content]:
        """Toggle is_read / is_starred / is_archived."""
        unknown = set(flags) - _CONTENT_FLAGS
        if unknown:
            raise ValueError(f"Unknown content flags: {sorted(unknown)}")

        session = self.Session()
        try:
            model = session.get(ContentModel, content_id)
            if not model:
                return None
            for name, value in flags.items():
                setattr(model, name, bool(value))
            session.commit()
            return self._model_to_content(model)
        finally:
            session.close()

    def get_stats(self) -> dict:
        """Get database statistics."""
        session = self.Session()
        try:
            total_sources = session.query(SourceModel).count()
            active_sources = session.query(SourceModel)\
                .filter(SourceModel.is_active == True).count()  # noqa: E712
            failed_sources = session.query(SourceModel)\
                .filter(SourceModel.last_sync_status == SyncStatus.FAILED.value).count()
            total_contents = session.query(ContentModel).count()
            unread = session.query(ContentModel)\
                .filter(ContentModel.is_read == False).count()  # noqa: E712

            return {
                "total_sources": total_sources,
                "active_sources": active_sources,
                "failed_sources": failed_sources,
                "total_contents": total_contents,
                "unread_contents": unread,
            }
        finally:
            session.close()

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def _model_to_source(self, model: SourceModel) -> Source:
        """Convert database model to Source."""
        return Source(
            id=model.id,
            user_id=model.user_id,
            name=model.name,
            type=model.type,
            config=json.loads(model.config or "{}"),
            filter_rules=FilterRule.from_dict(json.loads(model.filter_rules or "null")),
            sync_interval=model.sync_interval,
            last_sync_at=model.last_sync_at,
            last_sync_status=SyncStatus(model.last_sync_status) if model.last_sync_status else None,
            is_active=bool(model.is_active),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _model_to_content(self, model: ContentModel) -> Content:
        """Convert database model to Content."""
        return Content(
            id=model.id,
            source_id=model.source_id,
            title=model.title,
            summary=model.summary or "",
            url=model.url or "",
            author=model.author or "",
            content_type=ContentType(model.content_type),
            raw_content=model.raw_content or "",
            processed_content=model.processed_content or "",
            media_url=model.media_url,
            thumbnail_url=model.thumbnail_url,
            duration=model.duration,
            tags=json.loads(model.tags or "[]"),
            language=model.language,
            published_at=model.published_at,
            fetched_at=model.fetched_at,
            is_read=bool(model.is_read),
            is_starred=bool(model.is_starred),
            is_archived=bool(model.is_archived),
            created_at=model.created_at,
        )


def _dump_rules(rules) -> Optional[str]:
    if rules is None:
        return None
    if isinstance(rules, FilterRule):
        rules = rules.to_dict()
    return json.dumps(rules) if rules else None
