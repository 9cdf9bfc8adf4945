"""Lookup table from source type to adapter."""

from typing import Dict, List, Optional

import structlog

from .base import BaseSourceAdapter
from .rss import RSSAdapter
from .youtube import YouTubeAdapter
from ..errors import InvalidSourceConfigError, UnsupportedSourceTypeError

logger = structlog.get_logger()


class AdapterRegistry:
    """Maps a source-type tag to its adapter. Last registration wins."""

    def __init__(self):
        self._adapters: Dict[str, BaseSourceAdapter] = {}

    def register(self, adapter: BaseSourceAdapter) -> None:
        if adapter.type in self._adapters:
            logger.debug("adapter_replaced", type=adapter.type)
        self._adapters[adapter.type] = adapter

    def get(self, source_type: str) -> Optional[BaseSourceAdapter]:
        return self._adapters.get(source_type)

    def list(self) -> List[BaseSourceAdapter]:
        return list(self._adapters.values())

    def supported_types(self) -> List[str]:
        return list(self._adapters.keys())

    def describe_types(self) -> List[dict]:
        """Type listing as served to the web UI."""
        return [adapter.describe() for adapter in self._adapters.values()]

    def __contains__(self, source_type: str) -> bool:
        return source_type in self._adapters


def build_default_registry(**adapter_kwargs) -> AdapterRegistry:
    """Registry with every built-in adapter. Build once at startup."""
    registry = AdapterRegistry()
    registry.register(RSSAdapter(**adapter_kwargs))
    registry.register(YouTubeAdapter(**adapter_kwargs))
    return registry


def validate_source_config(
    registry: AdapterRegistry,
    source_type: str,
    config: dict
) -> BaseSourceAdapter:
    """Resolve and validate before a source is created.

    Raises UnsupportedSourceTypeError or InvalidSourceConfigError.
    """
    adapter = registry.get(source_type)
    if adapter is None:
        raise UnsupportedSourceTypeError(source_type)
    if not adapter.validate(config or {}):
        raise InvalidSourceConfigError(source_type, config)
    return adapter
