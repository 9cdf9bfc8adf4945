"""RSS / Atom source adapter."""

from typing import Any, Dict, List

from .base import BaseSourceAdapter
from .interfaces import ContentType, RawItem
from .parser import parse_feed, parse_timestamp


class RSSAdapter(BaseSourceAdapter):
    """Any RSS 2.0 or Atom feed reachable over HTTP(S)."""

    type = "rss"
    name = "RSS"
    description = "RSS or Atom feed"
    content_type = ContentType.TEXT

    def validate(self, config: Dict[str, Any]) -> bool:
        url = (config or {}).get("url")
        return isinstance(url, str) and url.startswith(("http://", "https://"))

    def resolve_url(self, config: Dict[str, Any]) -> str:
        return config["url"]

    def parse(self, markup: str) -> List[RawItem]:
        return [
            RawItem(
                title=entry.title,
                content=entry.description,
                url=entry.link,
                author=entry.author,
                published_at=parse_timestamp(entry.published),
            )
            for entry in parse_feed(markup)
        ]
