"""Source seed file loader."""

import json
from pathlib import Path
from typing import List

import structlog

from .settings import settings
from ..ingestion.interfaces import FilterRule, Source
from ..ingestion.registry import AdapterRegistry, validate_source_config

logger = structlog.get_logger()


def load_sources(config_path: str = None, registry: AdapterRegistry = None) -> List[Source]:
    """Load source definitions from a JSON file.

    When a registry is given, each source is validated against its adapter
    and invalid entries raise before anything is stored.
    """
    if config_path is None:
        config_path = settings.sources_file

    with open(config_path) as f:
        data = json.load(f)

    defaults = data.get("settings", {})
    sources = []
    for source_data in data.get("sources", []):
        source = Source(
            name=source_data["name"],
            type=source_data["type"],
            config=source_data.get("config", {}),
            user_id=source_data.get("user_id", defaults.get("user_id", settings.default_user_id)),
            filter_rules=FilterRule.from_dict(source_data.get("filter_rules")),
            sync_interval=source_data.get(
                "sync_interval",
                defaults.get("default_sync_interval", settings.default_sync_interval_seconds)
            ),
            is_active=source_data.get("is_active", True),
        )
        if registry is not None:
            validate_source_config(registry, source.type, source.config)
        sources.append(source)

    logger.info("sources_loaded", path=str(Path(config_path)), count=len(sources))
    return sources
