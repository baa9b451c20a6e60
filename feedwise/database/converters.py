"""
Database row converters - convert SQLite rows to dataclasses.
"""

import json
import sqlite3

from ..dates import from_db, utc_now
from .models import DBArticle, DBArticleSummary, DBFeed, DBSavedArticle, DBTag


def _load_tags(value: str | None) -> list[str]:
    if not value:
        return []
    try:
        tags = json.loads(value)
    except json.JSONDecodeError:
        return []
    return [str(t) for t in tags] if isinstance(tags, list) else []


def dump_tags(tags: list[str] | None) -> str:
    """Serialize a tag list, dropping duplicates but keeping order."""
    return json.dumps(list(dict.fromkeys(tags or [])))


def row_to_feed(row: sqlite3.Row) -> DBFeed:
    """Convert a database row to a DBFeed."""
    return DBFeed(
        id=row["id"],
        owner_id=row["owner_id"],
        url=row["url"],
        title=row["title"],
        category=row["category"],
        favicon_url=row["favicon_url"],
        tags=_load_tags(row["tags"]),
        last_synced_at=from_db(row["last_synced_at"]),
        unread_count=row["unread_count"] or 0,
        has_new_content=bool(row["has_new_content"]),
    )


def row_to_article(row: sqlite3.Row) -> DBArticle:
    """Convert a database row to a DBArticle."""
    return DBArticle(
        id=row["id"],
        owner_id=row["owner_id"],
        feed_id=row["feed_id"],
        url=row["url"],
        title=row["title"],
        description=row["description"],
        author=row["author"],
        published_at=from_db(row["published_at"]) or utc_now(),
        tags=_load_tags(row["tags"]),
        image_url=row["image_url"] or "",
        is_read=bool(row["is_read"]),
        is_saved=bool(row["is_saved"]),
        relevance_score=float(row["relevance_score"]),
        created_at=from_db(row["created_at"]),
    )


def row_to_saved_article(row: sqlite3.Row) -> DBSavedArticle:
    """Convert a database row to a DBSavedArticle."""
    return DBSavedArticle(
        article_id=row["article_id"],
        owner_id=row["owner_id"],
        saved_at=from_db(row["saved_at"]) or utc_now(),
    )


def row_to_tag(row: sqlite3.Row) -> DBTag:
    """Convert a database row to a DBTag."""
    return DBTag(
        id=row["id"],
        owner_id=row["owner_id"],
        name=row["name"],
        color=row["color"],
    )


def row_to_summary(row: sqlite3.Row) -> DBArticleSummary:
    """Convert a database row to a DBArticleSummary."""
    return DBArticleSummary(
        article_id=row["article_id"],
        owner_id=row["owner_id"],
        summary=row["summary"],
        created_at=from_db(row["created_at"]),
    )
