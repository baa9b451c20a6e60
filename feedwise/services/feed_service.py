"""
Feed service: business logic for feed management operations.

Handles subscription, edits, refresh and the new-content probe. Fetching and
deduplication are delegated to the IngestionEngine.
"""

from typing import TYPE_CHECKING

from fastapi import HTTPException

from ..database import Database
from ..database.models import DBFeed
from ..exceptions import require_feed

if TYPE_CHECKING:
    from ..ingestion import BatchIngestResult, IngestionEngine, IngestResult


def clean_tags(tags: list[str] | None) -> list[str]:
    """Lowercase, strip and drop empty tag names, keeping order."""
    cleaned = [t.strip().lower() for t in tags or []]
    return list(dict.fromkeys(t for t in cleaned if t))


class FeedService:
    """Service for feed-related business logic."""

    def __init__(
        self,
        db: Database,
        ingestion: "IngestionEngine | None" = None,
    ):
        self.db = db
        self.ingestion = ingestion

    def _require_ingestion(self) -> "IngestionEngine":
        if not self.ingestion:
            raise HTTPException(status_code=500, detail="Ingestion engine not initialized")
        return self.ingestion

    # ─────────────────────────────────────────────────────────────
    # Feed Management
    # ─────────────────────────────────────────────────────────────

    def list_feeds(self, user_id: int) -> list[DBFeed]:
        """List all feeds of a user."""
        return self.db.get_feeds(user_id)

    def get_feed(self, user_id: int, feed_id: int) -> DBFeed:
        return require_feed(self.db.get_feed(feed_id, user_id), feed_id)

    async def subscribe(
        self,
        user_id: int,
        url: str,
        title: str | None = None,
        category: str | None = None,
        tags: list[str] | None = None,
    ) -> "IngestResult":
        """
        Subscribe to a new feed and ingest its current items.

        Raises:
            DuplicateFeedSubscription: already subscribed to this URL
            InvalidFeedSource: the URL does not yield a feed
        """
        return await self._require_ingestion().subscribe(
            user_id,
            url,
            category=category,
            tags=clean_tags(tags),
            title=title,
        )

    def update_feed(
        self,
        user_id: int,
        feed_id: int,
        title: str | None = None,
        category: str | None = None,
        tags: list[str] | None = None,
    ) -> DBFeed:
        """
        Update a feed's title, category or tags.

        Tag changes apply to articles ingested from now on; existing
        articles keep the tags they were created with.
        """
        require_feed(self.db.get_feed(feed_id, user_id), feed_id)

        self.db.update_feed(
            feed_id,
            user_id,
            title=title.strip() if title else None,
            category=category,
            tags=clean_tags(tags) if tags is not None else None,
        )
        return require_feed(self.db.get_feed(feed_id, user_id), feed_id)

    def unsubscribe(self, user_id: int, feed_id: int) -> None:
        """Delete a feed together with its articles."""
        require_feed(self.db.get_feed(feed_id, user_id), feed_id)
        self.db.delete_feed(feed_id, user_id)
        if self.ingestion:
            self.ingestion.forget(feed_id)

    # ─────────────────────────────────────────────────────────────
    # Refresh
    # ─────────────────────────────────────────────────────────────

    async def refresh_feed(self, user_id: int, feed_id: int) -> "IngestResult":
        """Ingest one feed now."""
        return await self._require_ingestion().ingest(user_id, feed_id)

    async def refresh_all(self, user_id: int) -> "BatchIngestResult":
        """Ingest every feed of the user; failures are reported per feed."""
        return await self._require_ingestion().ingest_all(user_id)

    async def has_new_content(self, user_id: int, feed_id: int) -> bool:
        """Probe a feed for items not yet ingested."""
        return await self._require_ingestion().has_new_content(user_id, feed_id)
