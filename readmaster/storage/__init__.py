"""Database storage and models."""

from .database import SourceStorage
from .models import SourceModel, ContentModel, init_db
from .factory import get_storage, clear_cache

__all__ = ["SourceStorage", "SourceModel", "ContentModel", "init_db", "get_storage", "clear_cache"]
