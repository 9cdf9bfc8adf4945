"""Base class for source adapters."""

import asyncio
import time
from typing import Any, Dict, List, Optional

import aiohttp
import structlog

from .interfaces import Content, ContentType, FetchResult, RawItem
from .normalizer import ContentNormalizer
from ..config.settings import settings

logger = structlog.get_logger()


class BaseSourceAdapter:
    """Fetches one kind of source and normalizes what it finds.

    Subclasses implement `validate`, `resolve_url` and `parse`. Fetching
    never raises: network errors, timeouts and bad responses come back as an
    empty FetchResult carrying the error message.
    """

    type: str = ""
    name: str = ""
    description: str = ""
    content_type: ContentType = ContentType.TEXT

    def __init__(
        self,
        timeout: float = None,
        normalizer: ContentNormalizer = None,
        user_agent: str = None
    ):
        self.timeout = timeout or settings.fetch_timeout_seconds
        self.normalizer = normalizer or ContentNormalizer()
        self.user_agent = user_agent or settings.user_agent

    def validate(self, config: Dict[str, Any]) -> bool:
        """Check configuration shape. Must not perform I/O."""
        raise NotImplementedError

    def resolve_url(self, config: Dict[str, Any]) -> str:
        """Endpoint to fetch for a validated configuration."""
        raise NotImplementedError

    def parse(self, markup: str) -> List[RawItem]:
        """Turn a response body into raw items. Must not raise."""
        raise NotImplementedError

    async def fetch(self, config: Dict[str, Any]) -> List[RawItem]:
        """Fetch items; an empty list on any failure."""
        result = await self.fetch_result(config)
        return result.items

    async def fetch_result(self, config: Dict[str, Any]) -> FetchResult:
        """Fetch items, keeping the failure reason when there is one."""
        if not self.validate(config or {}):
            logger.warning("source_config_invalid", type=self.type)
            return FetchResult(error="invalid source configuration")

        url = self.resolve_url(config)
        start_time = time.monotonic()

        try:
            markup = await asyncio.wait_for(self._fetch_text(url), timeout=self.timeout)
            items = self.parse(markup)
        except asyncio.TimeoutError:
            logger.warning("feed_fetch_timeout", type=self.type, url=url, timeout=self.timeout)
            return FetchResult(error=f"timed out after {self.timeout}s")
        except Exception as e:
            logger.error("feed_fetch_failed", type=self.type, url=url, error=str(e))
            return FetchResult(error=str(e) or e.__class__.__name__)

        elapsed_ms = int((time.monotonic() - start_time) * 1000)
        logger.info(
            "feed_fetched",
            type=self.type,
            url=url,
            items=len(items),
            time_ms=elapsed_ms
        )
        return FetchResult(items=items)

    def transform(
        self,
        raw: RawItem,
        source_id: int,
        content_type: Optional[ContentType] = None
    ) -> Content:
        """Normalize a raw item. Pure apart from the fetch timestamp."""
        return self.normalizer.normalize(raw, source_id, content_type)

    def describe(self) -> dict:
        return {
            "type": self.type,
            "name": self.name or self.type.upper(),
            "description": self.description or f"{self.type} source adapter",
        }

    async def _fetch_text(self, url: str) -> str:
        async with aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.timeout),
            headers={"User-Agent": self.user_agent}
        ) as session:
            async with session.get(url) as response:
                response.raise_for_status()
                return await response.text(errors="replace")
