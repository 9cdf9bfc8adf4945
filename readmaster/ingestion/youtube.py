"""YouTube source adapter, backed by the public channel/playlist feeds."""

from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from .base import BaseSourceAdapter
from .interfaces import ContentType, RawItem
from .parser import extract_attribute, extract_tag, iter_blocks, parse_timestamp
from ..config.settings import settings

WATCH_URL = "https://www.youtube.com/watch?v={video_id}"
THUMBNAIL_URL = "https://i.ytimg.com/vi/{video_id}/hqdefault.jpg"

# Config keys per identifier mode; camelCase variants come from the web UI.
CHANNEL_KEYS = ("channel_id", "channelId")
PLAYLIST_KEYS = ("playlist_id", "playlistId")


def _lookup(config: Dict[str, Any], keys) -> Optional[str]:
    for key in keys:
        value = config.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _parse_duration(value: str) -> Optional[int]:
    try:
        return int(float(value)) if value else None
    except (ValueError, OverflowError):
        return None


class YouTubeAdapter(BaseSourceAdapter):
    """Videos from a channel or a playlist (one or the other, not both)."""

    type = "youtube"
    name = "YouTube"
    description = "YouTube channel or playlist"
    content_type = ContentType.VIDEO

    def __init__(self, feed_base_url: str = None, **kwargs):
        super().__init__(**kwargs)
        self.feed_base_url = feed_base_url or settings.youtube_feed_base_url

    def validate(self, config: Dict[str, Any]) -> bool:
        config = config or {}
        channel = _lookup(config, CHANNEL_KEYS)
        playlist = _lookup(config, PLAYLIST_KEYS)
        return bool(channel) != bool(playlist)

    def resolve_url(self, config: Dict[str, Any]) -> str:
        channel = _lookup(config, CHANNEL_KEYS)
        if channel:
            query = {"channel_id": channel}
        else:
            query = {"playlist_id": _lookup(config, PLAYLIST_KEYS)}
        return f"{self.feed_base_url}?{urlencode(query)}"

    def parse(self, markup: str) -> List[RawItem]:
        items = []
        for block in iter_blocks(markup or "", tags=("entry",)):
            item = self._parse_entry(block)
            if item:
                items.append(item)
        return items

    def _parse_entry(self, block: str) -> Optional[RawItem]:
        video_id = extract_tag(block, "yt:videoId")
        title = extract_tag(block, "title")
        if not (video_id and title):
            return None

        watch_url = WATCH_URL.format(video_id=video_id)
        thumbnail = extract_attribute(block, "media:thumbnail", "url")
        duration = (
            extract_attribute(block, "media:content", "duration")
            or extract_attribute(block, "yt:duration", "seconds")
        )

        return RawItem(
            title=title,
            content=extract_tag(block, "media:description") or title,
            url=watch_url,
            author=extract_tag(block, "name"),
            published_at=parse_timestamp(extract_tag(block, "published")),
            media_url=watch_url,
            thumbnail_url=thumbnail or THUMBNAIL_URL.format(video_id=video_id),
            duration=_parse_duration(duration),
        )
