"""
Tag service: tag management and retroactive tagging.
"""

import logging
import random

from ..database import Database
from ..database.models import DBTag
from ..exceptions import DuplicateTag, require_tag

logger = logging.getLogger(__name__)

TAG_COLORS = [
    "#3b82f6", "#10b981", "#6366f1", "#f59e0b",
    "#ef4444", "#8b5cf6", "#ec4899", "#14b8a6",
]


class TagService:
    """Service for tag-related business logic."""

    def __init__(self, db: Database):
        self.db = db

    def list_tags(self, user_id: int) -> list[DBTag]:
        return self.db.get_tags(user_id)

    def get_tag(self, user_id: int, tag_id: int) -> DBTag:
        return require_tag(self.db.tags.get(tag_id, user_id), tag_id)

    def create_tag(self, user_id: int, name: str, color: str | None = None) -> DBTag:
        """Create a tag; names are lowercased and unique per user."""
        if self.db.tags.get_by_name(user_id, name):
            raise DuplicateTag(f"Tag already exists: {name}")
        tag_id = self.db.tags.add(user_id, name, color)
        return require_tag(self.db.tags.get(tag_id, user_id), tag_id)

    def update_tag(
        self,
        user_id: int,
        tag_id: int,
        name: str | None = None,
        color: str | None = None,
    ) -> DBTag:
        require_tag(self.db.tags.get(tag_id, user_id), tag_id)
        self.db.tags.update(tag_id, user_id, name=name, color=color)
        return require_tag(self.db.tags.get(tag_id, user_id), tag_id)

    def delete_tag(self, user_id: int, tag_id: int) -> None:
        require_tag(self.db.tags.get(tag_id, user_id), tag_id)
        self.db.tags.delete(tag_id, user_id)

    def scan_articles(self, user_id: int, tag_name: str) -> tuple[DBTag, list[int], int]:
        """
        Tag every article whose title or description mentions the tag name.

        Creates the tag with a random palette colour if it does not exist.
        Running the sweep again changes nothing.

        Returns:
            (tag, ids of all matching articles, number newly tagged)
        """
        name = tag_name.strip().lower()
        tag = self.db.tags.get_by_name(user_id, name)
        if not tag:
            logger.debug(f"Tag '{name}' does not exist for owner {user_id}, creating it")
            tag_id = self.db.tags.add(user_id, name, random.choice(TAG_COLORS))
            tag = require_tag(self.db.tags.get(tag_id, user_id), tag_id)

        matched: list[int] = []
        newly_tagged = 0
        for article in self.db.get_articles(user_id, limit=None):
            if name not in article.title.lower() and name not in article.description.lower():
                continue
            matched.append(article.id)
            if name not in article.tags:
                self.db.update_article_tags(article.id, user_id, [*article.tags, name])
                newly_tagged += 1

        logger.info(
            f"Tag scan '{name}' for owner {user_id}: {len(matched)} matching, "
            f"{newly_tagged} newly tagged"
        )
        return tag, matched, newly_tagged
