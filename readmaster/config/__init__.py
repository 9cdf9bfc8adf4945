"""Configuration - settings and source seed files."""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
