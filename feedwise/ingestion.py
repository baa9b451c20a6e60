"""
Ingestion engine - fetch, normalize, deduplicate and persist feed items.

The engine holds no per-request state besides one asyncio.Lock per feed, so
concurrent refreshes of the same feed run one after the other while different
feeds proceed independently. The UNIQUE (owner_id, url) index remains the
final authority on duplicates; the pre-insert lookup only avoids needless work.
"""

import asyncio
import logging
from collections import defaultdict
from dataclasses import dataclass, field

from .database import Database
from .database.models import DBFeed
from .dates import parse_datetime, utc_now
from .exceptions import (
    DuplicateFeedSubscription,
    FeedUnparsable,
    FeedUnreachable,
    FeedWiseError,
    InvalidFeedSource,
    require_feed,
)
from .feeds import PLACEHOLDER_FAVICON, FeedParser, ParsedFeed
from .normalizer import normalize_item

logger = logging.getLogger(__name__)

DEFAULT_PROBE_ITEMS = 5


@dataclass
class IngestResult:
    """Outcome of one ingestion run."""
    feed: DBFeed
    new_article_count: int


@dataclass
class BatchIngestResult:
    """Outcome of ingesting every feed of an owner."""
    results: list[IngestResult] = field(default_factory=list)
    errors: dict[int, str] = field(default_factory=dict)

    @property
    def new_article_count(self) -> int:
        return sum(r.new_article_count for r in self.results)


class IngestionEngine:
    """Runs ingestion for feeds using injected persistence and parser."""

    def __init__(
        self,
        db: Database,
        feed_parser: FeedParser,
        probe_items: int = DEFAULT_PROBE_ITEMS,
        resolve_favicons: bool = True,
    ):
        self.db = db
        self.feed_parser = feed_parser
        self.probe_items = probe_items
        self.resolve_favicons = resolve_favicons
        self._locks: defaultdict[int, asyncio.Lock] = defaultdict(asyncio.Lock)

    def _lock_for(self, feed_id: int) -> asyncio.Lock:
        return self._locks[feed_id]

    def forget(self, feed_id: int) -> None:
        """Drop the lock of a removed feed unless an ingestion still holds it."""
        lock = self._locks.get(feed_id)
        if lock is not None and not lock.locked():
            del self._locks[feed_id]

    # ─────────────────────────────────────────────────────────────
    # Ingestion
    # ─────────────────────────────────────────────────────────────

    async def ingest(
        self,
        owner_id: int,
        feed_id: int,
        parsed: ParsedFeed | None = None,
    ) -> IngestResult:
        """
        Fetch a feed and store the items not seen before.

        Args:
            owner_id: Owner of the feed
            feed_id: Feed to ingest
            parsed: Already-fetched document (skips the network fetch)

        Returns:
            IngestResult with the refreshed feed and the number of new articles

        Raises:
            FeedNotFound: feed does not exist for this owner
            InvalidFeedSource: the parser failed; nothing was written
        """
        async with self._lock_for(feed_id):
            feed = require_feed(self.db.get_feed(feed_id, owner_id), feed_id)

            if parsed is None:
                try:
                    parsed = await self.feed_parser.fetch(feed.url)
                except (FeedUnreachable, FeedUnparsable) as e:
                    logger.warning(f"Ingestion of feed {feed_id} aborted: {e.context()}")
                    raise InvalidFeedSource(e, feed_id=feed_id, url=feed.url) from e

            now = utc_now()
            drafts = [
                normalize_item(item, feed.tags, now, fallback_url=feed.url)
                for item in (parsed.items if parsed else [])
            ]

            # Items sharing a URL (e.g. several without links) collapse to one
            unique = {}
            for draft in drafts:
                unique.setdefault(draft.url, draft)

            existing = self.db.get_existing_article_urls(owner_id, list(unique))
            candidates = [d for url, d in unique.items() if url not in existing]

            inserted = self.db.insert_articles(owner_id, feed_id, candidates) if candidates else []
            created = len(inserted)

            self.db.update_feed_sync(feed_id, now, created)
            refreshed = self.db.get_feed(feed_id, owner_id) or feed

            logger.info(
                f"Ingested feed {feed_id} ({feed.url}): {len(drafts)} items, "
                f"{created} new"
            )
            return IngestResult(feed=refreshed, new_article_count=created)

    async def ingest_all(self, owner_id: int) -> BatchIngestResult:
        """Ingest every feed of an owner concurrently, collecting failures."""
        feeds = self.db.get_feeds(owner_id)
        outcomes = await asyncio.gather(
            *(self.ingest(owner_id, feed.id) for feed in feeds),
            return_exceptions=True,
        )

        batch = BatchIngestResult()
        for feed, outcome in zip(feeds, outcomes):
            if isinstance(outcome, FeedWiseError):
                batch.errors[feed.id] = outcome.public_message
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                batch.results.append(outcome)

        logger.info(
            f"Refreshed {len(feeds)} feeds for owner {owner_id}: "
            f"{batch.new_article_count} new articles, {len(batch.errors)} failed"
        )
        return batch

    # ─────────────────────────────────────────────────────────────
    # New-content probe
    # ─────────────────────────────────────────────────────────────

    async def has_new_content(self, owner_id: int, feed_id: int) -> bool:
        """
        Cheaply check whether a feed has items not yet ingested.

        Sends If-Modified-Since with the last sync time; a 304 means no.
        Otherwise the newest few items are compared against the last sync time
        and the stored URLs. Any failure answers True so the UI offers a
        refresh rather than hiding new content.
        """
        feed = require_feed(self.db.get_feed(feed_id, owner_id), feed_id)

        try:
            parsed = await self.feed_parser.fetch(feed.url, modified_since=feed.last_synced_at)
            if parsed is None:
                return False
            found = self._probe(owner_id, feed, parsed)
        except Exception as e:
            logger.warning(f"New-content probe failed for feed {feed_id} ({feed.url}), assuming new content: {e}")
            found = True

        if found:
            self.db.set_feed_has_new_content(feed_id, True)
        return found

    def _probe(self, owner_id: int, feed: DBFeed, parsed: ParsedFeed) -> bool:
        items = parsed.items[:self.probe_items]
        if not items:
            return False

        if feed.last_synced_at is None:
            return True

        dates = [d for d in (parse_datetime(item.published_raw) for item in items) if d]
        if dates and max(dates) > feed.last_synced_at:
            return True

        links = [(item.link or "").strip() or feed.url for item in items]
        known = self.db.get_existing_article_urls(owner_id, links, feed_id=feed.id)
        return any(link not in known for link in links)

    # ─────────────────────────────────────────────────────────────
    # Subscription
    # ─────────────────────────────────────────────────────────────

    async def subscribe(
        self,
        owner_id: int,
        url: str,
        category: str | None = None,
        tags: list[str] | None = None,
        title: str | None = None,
    ) -> IngestResult:
        """
        Create a feed for a URL and run its first ingestion.

        When the URL is a web page rather than a feed, the page's advertised
        feed is used instead.

        Raises:
            DuplicateFeedSubscription: the owner already follows this URL
            InvalidFeedSource: no feed could be fetched from the URL
        """
        url = url.strip()
        if self.db.get_feed_by_url(owner_id, url):
            raise DuplicateFeedSubscription(f"Owner {owner_id} already subscribed", url=url)

        try:
            parsed = await self.feed_parser.fetch(url)
        except FeedUnparsable as e:
            discovered = await self.feed_parser.discover_feed(url)
            if not discovered or discovered == url:
                raise InvalidFeedSource(e, url=url) from e
            logger.info(f"Discovered feed {discovered} from page {url}")
            if self.db.get_feed_by_url(owner_id, discovered):
                raise DuplicateFeedSubscription(f"Owner {owner_id} already subscribed", url=discovered) from e
            url = discovered
            try:
                parsed = await self.feed_parser.fetch(url)
            except (FeedUnreachable, FeedUnparsable) as inner:
                raise InvalidFeedSource(inner, url=url) from inner
        except FeedUnreachable as e:
            raise InvalidFeedSource(e, url=url) from e

        favicon = PLACEHOLDER_FAVICON
        if self.resolve_favicons:
            favicon = await self.feed_parser.resolve_favicon(url)

        feed_title = (title or "").strip() or (parsed.title if parsed else None) or url
        feed_id = self.db.add_feed(
            owner_id,
            url,
            feed_title,
            category=category,
            tags=tags or [],
            favicon_url=favicon,
        )
        logger.info(f"Owner {owner_id} subscribed to feed {feed_id} ({url})")

        return await self.ingest(owner_id, feed_id, parsed=parsed)
