"""Tolerant RSS/Atom parser.

Real-world feeds are frequently malformed, so nothing here validates
structure. Item blocks and fields are located with case-insensitive regular
expressions, and every lookup degrades to an empty value instead of raising.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterator, Optional, Tuple, Union

from dateutil import parser as date_parser

ITEM_TAGS = ("item", "entry")

_CDATA = re.compile(r"<!\[CDATA\[(.*?)\]\]>", re.DOTALL)
_ENTITY = re.compile(r"&(amp|lt|gt|quot|apos|nbsp|#\d+|#[xX][0-9a-fA-F]+);")
_MARKUP = re.compile(r"<[a-zA-Z/!?][^>]*>")
_WHITESPACE = re.compile(r"\s+")

_NAMED_ENTITIES = {
    "amp": "&",
    "lt": "<",
    "gt": ">",
    "quot": '"',
    "apos": "'",
    "nbsp": " ",
}


@dataclass(frozen=True)
class FeedEntry:
    """One item/entry block, loosely structured. Only `title` is required."""
    title: str
    link: str = ""
    description: str = ""
    published: str = ""
    author: str = ""


def _block_pattern(tags: Tuple[str, ...]) -> "re.Pattern":
    names = "|".join(re.escape(t) for t in tags)
    return re.compile(
        rf"<({names})(?:\s[^>]*?)?(?<!/)>(.*?)</\1\s*>",
        re.IGNORECASE | re.DOTALL,
    )


def _tag_pattern(tag: str) -> "re.Pattern":
    return re.compile(
        rf"<{re.escape(tag)}(?:\s[^>]*?)?(?<!/)>(.*?)</{re.escape(tag)}\s*>",
        re.IGNORECASE | re.DOTALL,
    )


def strip_cdata(text: str) -> str:
    """Remove CDATA wrappers, including nested ones."""
    previous = None
    while previous != text:
        previous = text
        text = _CDATA.sub(r"\1", text)
    return text


def _replace_entity(match: "re.Match") -> str:
    name = match.group(1)
    if name.startswith("#"):
        try:
            code = int(name[2:], 16) if name[1] in "xX" else int(name[1:])
            return chr(code)
        except (ValueError, OverflowError):
            return match.group(0)
    return _NAMED_ENTITIES[name]


def unescape_entities(text: str) -> str:
    """Unescape the XML entities, &nbsp; and numeric references in one pass."""
    return _ENTITY.sub(_replace_entity, text)


def strip_markup(text: str) -> str:
    """Drop markup tags and collapse whitespace, leaving plain text."""
    return _WHITESPACE.sub(" ", _MARKUP.sub(" ", text)).strip()


def extract_tag(block: str, tag: str) -> str:
    """Text of the first `<tag>` in block, CDATA-stripped then unescaped."""
    match = _tag_pattern(tag).search(block)
    if not match:
        return ""
    return unescape_entities(strip_cdata(match.group(1).strip())).strip()


def extract_attribute(block: str, tag: str, attr: str) -> str:
    """Value of `attr` on the first `<tag ...>` element carrying it."""
    pattern = re.compile(
        rf"<{re.escape(tag)}\s[^>]*?\b{re.escape(attr)}\s*=\s*([\"'])(.*?)\1",
        re.IGNORECASE | re.DOTALL,
    )
    match = pattern.search(block)
    return unescape_entities(match.group(2).strip()) if match else ""


def iter_blocks(markup: str, tags: Tuple[str, ...] = ITEM_TAGS) -> Iterator[str]:
    """Yield the inner markup of every item-delimiting block, in order."""
    for match in _block_pattern(tags).finditer(markup):
        yield match.group(2)


def _first(block: str, *tags: str) -> str:
    for tag in tags:
        value = extract_tag(block, tag)
        if value:
            return value
    return ""


def _extract_author(block: str) -> str:
    author = extract_tag(block, "author")
    if "<" in author:
        # Atom: <author><name>...</name><uri>...</uri></author>
        author = extract_tag(author, "name") or strip_markup(author)
    return author or extract_tag(block, "dc:creator")


def _extract_link(block: str) -> str:
    link = extract_tag(block, "link")
    if link:
        return link
    return extract_attribute(block, "link", "href")


def parse_entry(block: str) -> Optional[FeedEntry]:
    """Parse one block. Returns None when the block has no title."""
    title = strip_markup(extract_tag(block, "title"))
    if not title:
        return None

    description = _first(block, "description", "content:encoded", "content", "summary")

    return FeedEntry(
        title=title,
        link=_extract_link(block),
        description=strip_markup(description),
        published=_first(block, "pubDate", "published", "updated", "dc:date"),
        author=_extract_author(block),
    )


class ParsedFeed:
    """Lazy, restartable sequence of entries parsed from one document.

    Each iteration rescans the markup, so iterating twice yields the same
    entries and nothing is cached between passes.
    """

    def __init__(self, markup: str):
        self.markup = markup

    def __iter__(self) -> Iterator[FeedEntry]:
        for block in iter_blocks(self.markup):
            entry = parse_entry(block)
            if entry is not None:
                yield entry

    def __repr__(self) -> str:
        return f"ParsedFeed({len(self.markup)} chars)"


def _coerce_markup(markup: Union[str, bytes, None]) -> str:
    if isinstance(markup, bytes):
        return markup.decode("utf-8", errors="replace")
    if isinstance(markup, str):
        return markup
    return ""


def parse_feed(markup: Union[str, bytes, None]) -> ParsedFeed:
    """Parse RSS/Atom markup. Never raises; garbage in yields no entries."""
    return ParsedFeed(_coerce_markup(markup))


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an RFC 822 or ISO 8601 date to naive UTC, or None."""
    if not value:
        return None
    try:
        parsed = date_parser.parse(value)
    except (ValueError, OverflowError, TypeError):
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed
