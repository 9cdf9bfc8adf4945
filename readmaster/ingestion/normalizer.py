"""Normalize adapter items into content records."""

from datetime import datetime
from typing import Callable, Optional, Union

from .interfaces import Content, ContentType, RawItem, utcnow
from ..config.settings import settings

TRUNCATION_MARKER = "..."


def generate_summary(text: Optional[str], max_length: int = 200) -> str:
    """Truncate text to max_length characters, marking the cut."""
    text = text or ""
    if len(text) <= max_length:
        return text
    return text[:max_length] + TRUNCATION_MARKER


class _MonotonicClock:
    """Wraps a clock so successive readings never go backwards."""

    def __init__(self, clock: Callable[[], datetime]):
        self._clock = clock
        self._last: Optional[datetime] = None

    def __call__(self) -> datetime:
        now = self._clock()
        if self._last is not None and now < self._last:
            now = self._last
        self._last = now
        return now


class ContentNormalizer:
    """Turns a RawItem into a Content ready for storage.

    The summary is the only derived field; everything else is copied from
    the raw item or set to its default.
    """

    def __init__(
        self,
        summary_max_length: int = None,
        clock: Callable[[], datetime] = utcnow
    ):
        self.summary_max_length = summary_max_length or settings.summary_max_length
        self._clock = _MonotonicClock(clock)

    def normalize(
        self,
        raw: RawItem,
        source_id: int,
        content_type: Union[ContentType, str, None] = None
    ) -> Content:
        body = raw.content or ""
        return Content(
            source_id=source_id,
            title=raw.title or "",
            summary=generate_summary(body, self.summary_max_length),
            url=raw.url or "",
            author=raw.author or "",
            content_type=_coerce_content_type(content_type),
            raw_content=body,
            processed_content=body,
            media_url=raw.media_url,
            thumbnail_url=raw.thumbnail_url,
            duration=raw.duration,
            tags=[],
            published_at=raw.published_at,
            fetched_at=self._clock(),
        )


def _coerce_content_type(value: Union[ContentType, str, None]) -> ContentType:
    if isinstance(value, ContentType):
        return value
    try:
        return ContentType(value) if value else ContentType.TEXT
    except ValueError:
        return ContentType.TEXT
