"""
Tests for feed fetching, parsing and discovery.

Network tests run against a local aiohttp server.
"""

import asyncio
from datetime import datetime, timezone

import pytest
from aiohttp import test_utils, web

from feedwise.dates import http_date
from feedwise.exceptions import FeedUnparsable, FeedUnreachable
from feedwise.feeds import PLACEHOLDER_FAVICON, FeedParser, parse_feed_sync
from feedwise.normalizer import extract_author, normalize_item

RSS = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:dc="http://purl.org/dc/elements/1.1/">
  <channel>
    <title>Example RSS</title>
    <link>https://example.com/</link>
    <description>An example channel</description>
    <item>
      <title>First post</title>
      <link>https://example.com/posts/1</link>
      <description>&lt;p&gt;Hello &lt;b&gt;world&lt;/b&gt;&lt;/p&gt;</description>
      <pubDate>Tue, 30 Apr 2024 08:15:00 GMT</pubDate>
      <dc:creator>Jane Doe</dc:creator>
      <enclosure url="https://cdn.example.com/1.jpg" type="image/jpeg" length="100"/>
    </item>
    <item>
      <title>Second post</title>
      <link>https://example.com/posts/2</link>
    </item>
  </channel>
</rss>
"""

ATOM = """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Example Atom</title>
  <subtitle>Atom subtitle</subtitle>
  <id>urn:example</id>
  <updated>2024-05-01T10:00:00Z</updated>
  <entry>
    <title>Atom entry</title>
    <link href="https://example.org/entry"/>
    <id>urn:example:1</id>
    <updated>2024-05-01T10:00:00Z</updated>
    <author><name>Ann Author</name></author>
    <summary>Short atom summary</summary>
  </entry>
</feed>
"""

PAGE = '<html><head><link rel="alternate" type="application/rss+xml" href="/rss"></head><body>Blog</body></html>'


class TestParse:
    """FeedParser.parse()"""

    def test_rss(self):
        parsed = parse_feed_sync(RSS, url="https://example.com/rss")

        assert parsed.title == "Example RSS"
        assert parsed.description == "An example channel"
        assert len(parsed.items) == 2

        first = parsed.items[0]
        assert first.title == "First post"
        assert first.link == "https://example.com/posts/1"
        assert first.snippet == "Hello world"
        assert first.enclosure_url == "https://cdn.example.com/1.jpg"
        assert extract_author(first.author, first.creator) == "Jane Doe"

        draft = normalize_item(first, [], datetime(2024, 5, 1, tzinfo=timezone.utc))
        assert draft.published_at == datetime(2024, 4, 30, 8, 15, tzinfo=timezone.utc)

    def test_missing_fields_stay_none(self):
        second = parse_feed_sync(RSS).items[1]
        assert second.snippet is None
        assert second.published_raw is None
        assert second.enclosure_url is None

    def test_atom(self):
        parsed = parse_feed_sync(ATOM, url="https://example.org/atom")

        assert parsed.title == "Example Atom"
        assert parsed.description == "Atom subtitle"
        entry = parsed.items[0]
        assert entry.link == "https://example.org/entry"
        assert entry.snippet == "Short atom summary"
        assert extract_author(entry.author, entry.creator) == "Ann Author"

    def test_html_page_is_unparsable(self):
        with pytest.raises(FeedUnparsable) as exc_info:
            parse_feed_sync("<html><body><p>Not a feed</p></body></html>", url="https://example.com/")
        assert exc_info.value.url == "https://example.com/"

    def test_empty_valid_feed_has_no_items(self):
        empty = '<?xml version="1.0"?><rss version="2.0"><channel><title>Empty</title></channel></rss>'
        parsed = parse_feed_sync(empty)
        assert parsed.items == []
        assert parsed.title == "Empty"


class TestDiscovery:
    """FeedParser.discover_feed_from_html()"""

    def test_relative_link_resolved(self):
        html = '<html><head><link rel="alternate" type="application/rss+xml" href="/feed.xml"></head></html>'
        assert FeedParser.discover_feed_from_html(html, "https://example.com/blog/") == "https://example.com/feed.xml"

    def test_atom_link(self):
        html = '<link rel="alternate" type="application/atom+xml" href="https://example.com/atom">'
        assert FeedParser.discover_feed_from_html(html, "https://example.com/") == "https://example.com/atom"

    def test_ignores_other_alternates(self):
        html = '<link rel="alternate" hreflang="de" href="/de/"><link rel="stylesheet" href="/s.css">'
        assert FeedParser.discover_feed_from_html(html, "https://example.com/") is None


def test_http_date():
    assert http_date(datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)) == "Wed, 01 May 2024 12:00:00 GMT"


@pytest.fixture
async def feed_server():
    """Local aiohttp server; yields it with the If-Modified-Since values it received."""
    seen: list[str | None] = []

    async def rss(request):
        since = request.headers.get("If-Modified-Since")
        seen.append(since)
        if since:
            return web.Response(status=304)
        return web.Response(text=RSS, content_type="application/rss+xml")

    async def page(request):
        return web.Response(text=PAGE, content_type="text/html")

    async def missing(request):
        return web.Response(status=404)

    async def slow(request):
        await asyncio.sleep(1)
        return web.Response(text=RSS, content_type="application/rss+xml")

    async def favicon(request):
        return web.Response(body=b"icon", content_type="image/x-icon")

    app = web.Application()
    app.router.add_get("/rss", rss)
    app.router.add_get("/page", page)
    app.router.add_get("/missing", missing)
    app.router.add_get("/slow", slow)
    app.router.add_get("/favicon.ico", favicon)

    server = test_utils.TestServer(app)
    await server.start_server()
    yield server, seen
    await server.close()


class TestFetch:
    """FeedParser.fetch() over HTTP."""

    async def test_fetch_parses_document(self, feed_server):
        server, seen = feed_server
        parsed = await FeedParser().fetch(str(server.make_url("/rss")))

        assert parsed.title == "Example RSS"
        assert len(parsed.items) == 2
        assert seen == [None]

    async def test_conditional_fetch_not_modified(self, feed_server):
        server, seen = feed_server
        since = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

        result = await FeedParser().fetch(str(server.make_url("/rss")), modified_since=since)

        assert result is None
        assert seen == ["Wed, 01 May 2024 12:00:00 GMT"]

    async def test_http_error_is_unreachable(self, feed_server):
        server, _ = feed_server
        with pytest.raises(FeedUnreachable) as exc_info:
            await FeedParser().fetch(str(server.make_url("/missing")))
        assert "404" in str(exc_info.value)

    async def test_html_page_is_unparsable(self, feed_server):
        server, _ = feed_server
        with pytest.raises(FeedUnparsable):
            await FeedParser().fetch(str(server.make_url("/page")))

    async def test_timeout_is_unreachable(self, feed_server):
        server, _ = feed_server
        with pytest.raises(FeedUnreachable):
            await FeedParser(timeout=0.1).fetch(str(server.make_url("/slow")))

    async def test_connection_refused_is_unreachable(self):
        with pytest.raises(FeedUnreachable):
            await FeedParser(timeout=5).fetch("http://127.0.0.1:1/rss")

    async def test_malformed_url_is_unreachable(self):
        with pytest.raises(FeedUnreachable):
            await FeedParser().fetch("not a url")

    async def test_discover_feed(self, feed_server):
        server, _ = feed_server
        found = await FeedParser().discover_feed(str(server.make_url("/page")))
        assert found == str(server.make_url("/rss"))

    async def test_discover_feed_on_error_page(self, feed_server):
        server, _ = feed_server
        assert await FeedParser().discover_feed(str(server.make_url("/missing"))) is None

    async def test_resolve_favicon(self, feed_server):
        server, _ = feed_server
        favicon = await FeedParser().resolve_favicon(str(server.make_url("/rss")))
        assert favicon == str(server.make_url("/favicon.ico"))

    async def test_resolve_favicon_placeholder(self):
        assert await FeedParser(timeout=5).resolve_favicon("http://127.0.0.1:1/rss") == PLACEHOLDER_FAVICON
