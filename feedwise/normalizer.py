"""
Item normalizer - turn one raw feed item into a canonical article draft.

Pure functions only: no network or database access, and the current time is
passed in so results are deterministic under test.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from bs4 import BeautifulSoup

from .dates import parse_datetime
from .feeds import RawFeedItem

UNKNOWN_AUTHOR = "Unknown"
UNTITLED = "No title"
NO_DESCRIPTION = "No description available"


@dataclass
class ArticleDraft:
    """A normalized article ready to be persisted."""
    title: str
    description: str
    url: str
    author: str
    published_at: datetime
    image_url: str
    tags: list[str] = field(default_factory=list)


def _first_text(value: Any) -> str | None:
    """Unwrap a list to its first entry and a {"name": ...} dict to its name."""
    if isinstance(value, (list, tuple)):
        if not value:
            return None
        value = value[0]
    if isinstance(value, dict):
        return _first_text(value.get("name"))
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def extract_author(author: Any, creator: str | None = None) -> str:
    """
    Resolve an author name from the irregular shapes feeds use.

    string -> as is; {"name": str | [str, ...]} -> name (first if list);
    [entry, ...] -> first entry; otherwise creator; otherwise "Unknown".
    """
    name = None
    if isinstance(author, str):
        name = author.strip() or None
    elif isinstance(author, (dict, list, tuple)):
        name = _first_text(author)

    if not name and creator:
        name = creator.strip() or None

    return name or UNKNOWN_AUTHOR


def _html_to_text(html: str) -> str:
    return BeautifulSoup(html, "html.parser").get_text(separator=" ", strip=True)


def build_description(snippet: str | None, content_html: str | None, title: str | None) -> str:
    """
    Pick a description that is never empty.

    Prefers the plain-text snippet, then the HTML body, then a sentence built
    from the title, then a fixed placeholder. The result is always stripped.
    """
    if snippet and snippet.strip():
        return snippet.strip()

    if content_html and content_html.strip():
        text = _html_to_text(content_html)
        if text:
            return text

    if title and title.strip():
        return f"Article about {title.strip()}"

    return NO_DESCRIPTION


def normalize_item(
    item: RawFeedItem,
    feed_tags: list[str],
    now: datetime,
    fallback_url: str = "",
) -> ArticleDraft:
    """
    Convert a raw feed item into an ArticleDraft.

    Args:
        item: Raw item from the feed parser
        feed_tags: Tags of the owning feed at ingestion time (copied)
        now: Ingestion time, used when the item has no usable date
        fallback_url: URL to use when the item has no link (the feed URL)
    """
    title = (item.title or "").strip() or UNTITLED

    return ArticleDraft(
        title=title,
        description=build_description(item.snippet, item.content_html, item.title),
        url=(item.link or "").strip() or fallback_url,
        author=extract_author(item.author, item.creator),
        published_at=parse_datetime(item.published_raw) or now,
        image_url=(item.enclosure_url or "").strip(),
        tags=list(feed_tags),
    )
