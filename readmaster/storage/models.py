"""SQLAlchemy models for the ReadMaster database."""

from sqlalchemy import (
    create_engine, event, Column, Integer, String, Text, Boolean, DateTime,
    ForeignKey, Index, UniqueConstraint
)
from sqlalchemy.orm import declarative_base, relationship

from ..ingestion.interfaces import utcnow

Base = declarative_base()


class SourceModel(Base):
    """Database model for configured sources."""
    __tablename__ = "sources"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, default=1)

    name = Column(String(255), nullable=False)
    type = Column(String(50), nullable=False)
    config = Column(Text, nullable=False, default="{}")  # JSON object
    filter_rules = Column(Text)  # JSON object

    # Sync state
    sync_interval = Column(Integer, default=3600)
    last_sync_at = Column(DateTime)
    last_sync_status = Column(String(20))
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    contents = relationship(
        "ContentModel",
        back_populates="source",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index('idx_sources_user', 'user_id'),
        Index('idx_sources_active', 'is_active'),
    )


class ContentModel(Base):
    """Database model for normalized content items."""
    __tablename__ = "contents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    source_id = Column(
        Integer,
        ForeignKey("sources.id", ondelete="CASCADE"),
        nullable=False
    )

    # Content
    title = Column(Text, nullable=False)
    summary = Column(Text)
    url = Column(String(2048))
    author = Column(String(255))
    content_type = Column(String(20), nullable=False, default="text")
    raw_content = Column(Text)
    processed_content = Column(Text)

    # Media
    media_url = Column(String(2048))
    thumbnail_url = Column(String(2048))
    duration = Column(Integer)

    # Metadata
    tags = Column(Text, default="[]")  # JSON array
    language = Column(String(20))

    # Timestamps
    published_at = Column(DateTime)
    fetched_at = Column(DateTime, default=utcnow)
    created_at = Column(DateTime, default=utcnow)

    # Reader state
    is_read = Column(Boolean, default=False)
    is_starred = Column(Boolean, default=False)
    is_archived = Column(Boolean, default=False)

    source = relationship("SourceModel", back_populates="contents")

    __table_args__ = (
        UniqueConstraint('source_id', 'url', name='uq_contents_source_url'),
        Index('idx_contents_source', 'source_id'),
        Index('idx_contents_published', 'published_at'),
    )


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def init_db(database_url: str):
    """Initialize database and create all tables."""
    engine = create_engine(database_url, echo=False)
    if database_url.startswith("sqlite"):
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    Base.metadata.create_all(engine)
    return engine
