"""
Feed Parser - Fetch and parse RSS/Atom feeds.

Handles:
- RSS 2.0 and Atom 1.0 formats
- Conditional fetches (If-Modified-Since / 304 Not Modified)
- Feed autodiscovery from HTML pages
- Favicon resolution for new subscriptions

Items are returned raw: fields a feed leaves out stay None and are filled in
later by the normalizer. A fetch that fails raises FeedUnreachable, a document
that is not a feed raises FeedUnparsable; neither is reported as "zero items".
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from urllib.parse import urljoin, urlparse

import aiohttp
import feedparser
from bs4 import BeautifulSoup

from .dates import http_date, utc_now
from .exceptions import FeedUnparsable, FeedUnreachable

logger = logging.getLogger(__name__)

PLACEHOLDER_FAVICON = "/placeholder.svg"


@dataclass
class RawFeedItem:
    """A single item/entry from a feed, before normalization."""
    title: str | None = None
    snippet: str | None = None          # plain text
    content_html: str | None = None
    link: str | None = None
    author: Any = None                  # str | {"name": str | list} | list | None
    creator: str | None = None
    published_raw: Any = None           # struct_time | str | None
    enclosure_url: str | None = None


@dataclass
class ParsedFeed:
    """Represents a parsed feed document."""
    url: str
    title: str | None
    description: str | None
    items: list[RawFeedItem] = field(default_factory=list)
    fetched_at: datetime = field(default_factory=utc_now)


class FeedParser:
    """Fetches and parses RSS/Atom feeds."""

    def __init__(self, timeout: int = 30, user_agent: str | None = None):
        self.timeout = timeout
        self.user_agent = user_agent or "FeedWise/1.0 (+https://github.com/feedwise)"

    async def fetch(self, url: str, modified_since: datetime | None = None) -> ParsedFeed | None:
        """
        Fetch and parse a feed URL.

        Args:
            url: Feed URL
            modified_since: When given, send If-Modified-Since and return None
                if the server answers 304 Not Modified

        Raises:
            FeedUnreachable: network error, timeout or HTTP error status
            FeedUnparsable: the response is not an RSS/Atom document
        """
        headers = {"User-Agent": self.user_agent}
        if modified_since is not None:
            headers["If-Modified-Since"] = http_date(modified_since)

        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    url,
                    headers=headers,
                    timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as resp:
                    if resp.status == 304:
                        logger.debug(f"Feed not modified since {modified_since}: {url}")
                        return None
                    if resp.status >= 400:
                        raise FeedUnreachable(f"HTTP {resp.status} fetching feed", url=url)
                    content = await resp.read()
        except asyncio.TimeoutError as e:
            raise FeedUnreachable(f"Timed out after {self.timeout}s", url=url) from e
        except aiohttp.ClientError as e:
            raise FeedUnreachable(f"Network error: {e}", url=url) from e
        except ValueError as e:
            # aiohttp rejects malformed URLs with ValueError subclasses
            raise FeedUnreachable(f"Invalid URL: {e}", url=url) from e

        return self.parse(url, content)

    def parse(self, url: str, content: bytes | str) -> ParsedFeed:
        """Parse feed content using feedparser."""
        parsed = feedparser.parse(content)

        if not parsed.entries and (parsed.bozo or not parsed.get("version")):
            reason = parsed.get("bozo_exception") or "not an RSS/Atom document"
            raise FeedUnparsable(f"Failed to parse feed: {reason}", url=url)

        items = [self._to_raw_item(entry) for entry in parsed.entries]

        return ParsedFeed(
            url=url,
            title=parsed.feed.get("title"),
            description=parsed.feed.get("description") or parsed.feed.get("subtitle"),
            items=items,
        )

    def _to_raw_item(self, entry) -> RawFeedItem:
        # Full content first, then summary/description
        content_html = None
        if entry.get("content"):
            content_html = entry.content[0].get("value")
        if not content_html:
            content_html = entry.get("summary") or entry.get("description")

        snippet = None
        if content_html:
            snippet = BeautifulSoup(content_html, "html.parser").get_text(separator=" ", strip=True)

        link = entry.get("link")
        if not link:
            for candidate in entry.get("links", []):
                if candidate.get("rel") == "alternate" or candidate.get("type") == "text/html":
                    link = candidate.get("href")
                    break

        author: Any = entry.get("author")
        if not author:
            author = entry.get("author_detail") or entry.get("authors")

        published_raw = (
            entry.get("published_parsed")
            or entry.get("updated_parsed")
            or entry.get("published")
            or entry.get("updated")
        )

        enclosure_url = None
        for enclosure in entry.get("enclosures", []):
            if enclosure.get("href"):
                enclosure_url = enclosure["href"]
                break

        return RawFeedItem(
            title=entry.get("title"),
            snippet=snippet,
            content_html=content_html,
            link=link,
            author=author,
            creator=entry.get("dc_creator") or entry.get("creator"),
            published_raw=published_raw,
            enclosure_url=enclosure_url,
        )

    async def discover_feed(self, url: str) -> str | None:
        """
        Find feed URL from HTML page (autodiscovery).

        Returns the discovered feed URL or None if not found.
        """
        headers = {"User-Agent": self.user_agent}

        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    url,
                    headers=headers,
                    timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as resp:
                    if resp.status != 200:
                        return None
                    html = await resp.text()
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.debug(f"Feed discovery failed for {url}: {e}")
            return None

        return self.discover_feed_from_html(html, url)

    @staticmethod
    def discover_feed_from_html(html: str, base_url: str) -> str | None:
        """Extract feed URL from HTML <link rel="alternate"> tags."""
        soup = BeautifulSoup(html, "html.parser")

        for link in soup.find_all("link", rel="alternate"):
            link_type = link.get("type", "")
            if "rss" in link_type or "atom" in link_type or "xml" in link_type:
                href = link.get("href")
                if href:
                    return urljoin(base_url, href)

        return None

    async def resolve_favicon(self, url: str) -> str:
        """Return the site's /favicon.ico if it answers, else the placeholder."""
        parsed = urlparse(url)
        if not parsed.scheme or not parsed.netloc:
            return PLACEHOLDER_FAVICON

        favicon = f"{parsed.scheme}://{parsed.netloc}/favicon.ico"
        try:
            async with aiohttp.ClientSession() as session:
                async with session.head(
                    favicon,
                    headers={"User-Agent": self.user_agent},
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                    allow_redirects=True,
                ) as resp:
                    if resp.status < 400:
                        return favicon
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError):
            pass
        return PLACEHOLDER_FAVICON


def parse_feed_sync(content: str | bytes, url: str = "") -> ParsedFeed:
    """
    Synchronous feed parsing (for use when content is already fetched).

    Useful for testing or when you already have the feed content.
    """
    return FeedParser().parse(url, content)
