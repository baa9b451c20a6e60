"""
Database connection management and schema initialization.
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator


class DatabaseConnection:
    """Manages database connection and schema."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    @contextmanager
    def conn(self) -> Iterator[sqlite3.Connection]:
        """
        Get database connection with row factory.

        Everything executed inside one `with` block commits together, or not
        at all if the block raises.
        """
        connection = sqlite3.connect(self.db_path, timeout=30)
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA foreign_keys = ON")
        try:
            yield connection
            connection.commit()
        finally:
            connection.close()

    def _init_schema(self):
        """Initialize database schema."""
        with self.conn() as connection:
            connection.executescript("""
                CREATE TABLE IF NOT EXISTS feeds (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    owner_id INTEGER NOT NULL,
                    url TEXT NOT NULL,
                    title TEXT NOT NULL,
                    favicon_url TEXT,
                    category TEXT,
                    tags TEXT NOT NULL DEFAULT '[]',
                    last_synced_at TIMESTAMP,
                    unread_count INTEGER NOT NULL DEFAULT 0 CHECK(unread_count >= 0),
                    has_new_content BOOLEAN NOT NULL DEFAULT FALSE,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    UNIQUE(owner_id, url)
                );

                -- (owner_id, url) is the dedup key for ingestion
                CREATE TABLE IF NOT EXISTS articles (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    owner_id INTEGER NOT NULL,
                    feed_id INTEGER NOT NULL REFERENCES feeds(id) ON DELETE CASCADE,
                    url TEXT NOT NULL,
                    title TEXT NOT NULL,
                    description TEXT NOT NULL CHECK(length(trim(description)) > 0),
                    author TEXT NOT NULL DEFAULT 'Unknown',
                    published_at TIMESTAMP NOT NULL,
                    tags TEXT NOT NULL DEFAULT '[]',
                    image_url TEXT NOT NULL DEFAULT '',
                    is_read BOOLEAN NOT NULL DEFAULT FALSE,
                    is_saved BOOLEAN NOT NULL DEFAULT FALSE,
                    relevance_score REAL NOT NULL DEFAULT 0.5,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    UNIQUE(owner_id, url)
                );

                CREATE TABLE IF NOT EXISTS saved_articles (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    owner_id INTEGER NOT NULL,
                    article_id INTEGER NOT NULL REFERENCES articles(id) ON DELETE CASCADE,
                    saved_at TIMESTAMP NOT NULL,
                    UNIQUE(owner_id, article_id)
                );

                CREATE TABLE IF NOT EXISTS tags (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    owner_id INTEGER NOT NULL,
                    name TEXT NOT NULL,
                    color TEXT NOT NULL DEFAULT '#3b82f6',
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    UNIQUE(owner_id, name)
                );

                CREATE TABLE IF NOT EXISTS article_summaries (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    owner_id INTEGER NOT NULL,
                    article_id INTEGER NOT NULL REFERENCES articles(id) ON DELETE CASCADE,
                    summary TEXT NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    UNIQUE(owner_id, article_id)
                );

                CREATE INDEX IF NOT EXISTS idx_feeds_owner ON feeds(owner_id);
                CREATE INDEX IF NOT EXISTS idx_articles_feed ON articles(feed_id);
                CREATE INDEX IF NOT EXISTS idx_articles_owner_published ON articles(owner_id, published_at DESC);
                CREATE INDEX IF NOT EXISTS idx_articles_owner_unread ON articles(owner_id, is_read, published_at DESC);
                CREATE INDEX IF NOT EXISTS idx_saved_owner_saved_at ON saved_articles(owner_id, saved_at DESC);
            """)
