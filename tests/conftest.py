"""Pytest configuration and shared fixtures."""

import pytest
import tempfile
import os
from pathlib import Path

# Add project root to path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))


RSS_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:dc="http://purl.org/dc/elements/1.1/">
<channel>
  <title>Example Feed</title>
  <link>https://example.com/</link>
  <item>
    <title>Python 3.13 released</title>
    <link>https://example.com/python-313</link>
    <description><![CDATA[<p>The <b>new</b> release &amp; its features.</p>]]></description>
    <pubDate>Mon, 01 Jan 2024 12:00:00 GMT</pubDate>
    <author>alice@example.com (Alice)</author>
  </item>
  <item>
    <title>Buy cheap spam now</title>
    <link>https://example.com/spam</link>
    <description>Limited offer on canned goods</description>
    <dc:creator>Bob</dc:creator>
  </item>
  <item>
    <link>https://example.com/untitled</link>
    <description>This entry has no title and is dropped</description>
  </item>
</channel>
</rss>
"""

YOUTUBE_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns:yt="http://www.youtube.com/xml/schemas/2015" xmlns:media="http://search.yahoo.com/mrss/" xmlns="http://www.w3.org/2005/Atom">
  <title>PyCon US</title>
  <author><name>PyCon US</name></author>
  <entry>
    <id>yt:video:abc123</id>
    <yt:videoId>abc123</yt:videoId>
    <title>Async Python in Practice</title>
    <link rel="alternate" href="https://www.youtube.com/watch?v=abc123"/>
    <author><name>PyCon US</name></author>
    <published>2024-03-01T10:00:00+00:00</published>
    <media:group>
      <media:title>Async Python in Practice</media:title>
      <media:content url="https://www.youtube.com/v/abc123?version=3" type="application/x-shockwave-flash" width="640" height="390"/>
      <media:thumbnail url="https://i1.ytimg.com/vi/abc123/hqdefault.jpg" width="480" height="360"/>
      <media:description>A talk about asyncio &amp; structured concurrency.</media:description>
    </media:group>
  </entry>
  <entry>
    <id>yt:video:xyz789</id>
    <yt:videoId>xyz789</yt:videoId>
    <title>Lightning Talks</title>
    <author><name>PyCon US</name></author>
    <published>2024-03-02T18:30:00+00:00</published>
  </entry>
  <entry>
    <title>Entry without a video id</title>
  </entry>
</feed>
"""


@pytest.fixture
def temp_db():
    """Provide a temporary database file."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name
    yield f"sqlite:///{db_path}"
    # Cleanup
    try:
        os.unlink(db_path)
    except FileNotFoundError:
        pass


@pytest.fixture
def rss_feed():
    """RSS document with three items, one of them untitled."""
    return RSS_FEED


@pytest.fixture
def youtube_feed():
    """YouTube channel feed with two videos and one malformed entry."""
    return YOUTUBE_FEED


@pytest.fixture
def storage(temp_db):
    """Provide a SourceStorage backed by a temporary database."""
    from readmaster.storage.database import SourceStorage
    return SourceStorage(temp_db)


@pytest.fixture
def registry():
    """Provide a registry with the built-in adapters."""
    from readmaster.ingestion.registry import build_default_registry
    return build_default_registry()


@pytest.fixture
def sample_rss_source():
    """Provide an unsaved RSS Source."""
    from readmaster.ingestion.interfaces import Source
    return Source(
        name="Example Feed",
        type="rss",
        config={"url": "https://example.com/feed.xml"},
    )


@pytest.fixture
def sample_raw_item():
    """Provide a sample RawItem."""
    from datetime import datetime
    from readmaster.ingestion.interfaces import RawItem
    return RawItem(
        title="Python 3.13 released",
        content="The new release and its features.",
        url="https://example.com/python-313",
        author="Alice",
        published_at=datetime(2024, 1, 1, 12, 0, 0),
    )
