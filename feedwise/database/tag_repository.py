"""
Tag repository - CRUD operations for tags.

Names are stored lowercased and are unique per owner.
"""

import sqlite3

from ..exceptions import DuplicateTag
from .connection import DatabaseConnection
from .converters import row_to_tag
from .models import DBTag

DEFAULT_TAG_COLOR = "#3b82f6"


class TagRepository:
    """Repository for tag operations."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    def add(self, owner_id: int, name: str, color: str | None = None) -> int:
        """Add a new tag. Returns tag ID."""
        with self._db.conn() as conn:
            try:
                cursor = conn.execute(
                    "INSERT INTO tags (owner_id, name, color) VALUES (?, ?, ?)",
                    (owner_id, name.strip().lower(), color or DEFAULT_TAG_COLOR)
                )
            except sqlite3.IntegrityError as e:
                raise DuplicateTag(f"Tag already exists: {name}") from e
            return cursor.lastrowid

    def get(self, tag_id: int, owner_id: int) -> DBTag | None:
        """Get single tag by ID."""
        with self._db.conn() as conn:
            row = conn.execute(
                "SELECT * FROM tags WHERE id = ? AND owner_id = ?",
                (tag_id, owner_id)
            ).fetchone()
            return row_to_tag(row) if row else None

    def get_by_name(self, owner_id: int, name: str) -> DBTag | None:
        """Get tag by name (case-insensitive)."""
        with self._db.conn() as conn:
            row = conn.execute(
                "SELECT * FROM tags WHERE owner_id = ? AND name = ?",
                (owner_id, name.strip().lower())
            ).fetchone()
            return row_to_tag(row) if row else None

    def get_all(self, owner_id: int) -> list[DBTag]:
        """Get all tags of an owner."""
        with self._db.conn() as conn:
            rows = conn.execute(
                "SELECT * FROM tags WHERE owner_id = ? ORDER BY name",
                (owner_id,)
            ).fetchall()
            return [row_to_tag(row) for row in rows]

    def update(
        self,
        tag_id: int,
        owner_id: int,
        name: str | None = None,
        color: str | None = None,
    ):
        """Rename and/or recolor a tag. Renaming onto another tag's name is rejected."""
        with self._db.conn() as conn:
            if name:
                new_name = name.strip().lower()
                clash = conn.execute(
                    "SELECT id FROM tags WHERE owner_id = ? AND name = ? AND id != ?",
                    (owner_id, new_name, tag_id)
                ).fetchone()
                if clash:
                    raise DuplicateTag(f"Another tag with this name already exists: {new_name}")
                conn.execute(
                    "UPDATE tags SET name = ? WHERE id = ? AND owner_id = ?",
                    (new_name, tag_id, owner_id)
                )
            if color:
                conn.execute(
                    "UPDATE tags SET color = ? WHERE id = ? AND owner_id = ?",
                    (color, tag_id, owner_id)
                )

    def delete(self, tag_id: int, owner_id: int):
        """Delete a tag. Articles keep the tag name in their own tag lists."""
        with self._db.conn() as conn:
            conn.execute(
                "DELETE FROM tags WHERE id = ? AND owner_id = ?",
                (tag_id, owner_id)
            )
