"""Factory functions to create storage instances.

The database URL is read from DATABASE_URL, then RM_DATABASE_URL, and
falls back to the SQLite file configured in settings.
"""

import os
from functools import lru_cache

import structlog

logger = structlog.get_logger()


def get_database_url() -> str:
    """Get database URL from environment, with fallback to SQLite."""
    # Check for DATABASE_URL first (standard for cloud platforms)
    url = os.environ.get('DATABASE_URL')
    if url:
        return url

    url = os.environ.get('RM_DATABASE_URL')
    if url:
        return url

    # Default to SQLite for local development
    from ..config.settings import settings
    return settings.database_url


@lru_cache(maxsize=1)
def get_storage():
    """Get the process-wide storage instance."""
    from .database import SourceStorage

    url = get_database_url()
    logger.info("using_storage", url=url[:40] + "...")
    return SourceStorage(url)


def clear_cache():
    """Clear cached instances (useful for testing)."""
    get_storage.cache_clear()
