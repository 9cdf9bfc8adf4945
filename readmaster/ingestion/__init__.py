"""Content ingestion - fetching, parsing, normalizing and filtering feeds."""

from .interfaces import (
    ContentType, SyncStatus, FilterRule, RawItem, FetchResult,
    Source, Content, StorageInterface
)
from .parser import FeedEntry, ParsedFeed, parse_feed, parse_timestamp
from .normalizer import ContentNormalizer, generate_summary
from .filters import passes
from .base import BaseSourceAdapter
from .rss import RSSAdapter
from .youtube import YouTubeAdapter
from .registry import AdapterRegistry, build_default_registry, validate_source_config

__all__ = [
    "ContentType", "SyncStatus", "FilterRule", "RawItem", "FetchResult",
    "Source", "Content", "StorageInterface",
    "FeedEntry", "ParsedFeed", "parse_feed", "parse_timestamp",
    "ContentNormalizer", "generate_summary", "passes",
    "BaseSourceAdapter", "RSSAdapter", "YouTubeAdapter",
    "AdapterRegistry", "build_default_registry", "validate_source_config",
]
