# repository/tag_repository.py
# Version 01.00.00.00 dated 20261019
# Repository for tags and picture_tags operations

import sqlite3
from datetime import datetime
from typing import Optional, List, Dict, Any, Sequence, Tuple

from .base_repository import BaseRepository
from logging_config import get_logger

logger = get_logger(__name__)


def _placeholders(count: int) -> str:
    return ','.join('?' * count)


class TagRepository(BaseRepository):
    """
    Repository for tags and their picture memberships.

    Tag names are compared exactly (case-sensitive). Membership is a set:
    (picture_path, tag_name) is the primary key of picture_tags.
    """

    def _table_name(self) -> str:
        return "tags"

    def _key_column(self) -> str:
        return "name"

    # ========================================================================
    # TAGS
    # ========================================================================

    def get_by_name(self, name: str) -> Optional[Dict[str, Any]]:
        return self.find_by_key(name)

    def get_all(self) -> List[Dict[str, Any]]:
        return self.find_all(order_by="category, name")

    def get_all_with_counts(self) -> List[Dict[str, Any]]:
        """
        Get all tags with the number of pictures carrying each.

        Returns:
            List of tag dicts with 'picture_count' field
        """
        sql = """
            SELECT
                t.name,
                t.category,
                t.color,
                t.created_at,
                COUNT(pt.picture_path) as picture_count
            FROM tags t
            LEFT JOIN picture_tags pt ON pt.tag_name = t.name
            GROUP BY t.name
            ORDER BY t.category, t.name
        """

        with self.connection(read_only=True) as conn:
            cur = conn.cursor()
            cur.execute(sql)
            return cur.fetchall()

    def create(self, name: str, category: str, color: str) -> str:
        """
        Insert a new tag.

        Raises:
            sqlite3.IntegrityError: If a tag with this name already exists
        """
        sql = "INSERT INTO tags (name, category, color, created_at) VALUES (?, ?, ?, ?)"

        with self.connection() as conn:
            cur = conn.cursor()
            cur.execute(sql, (name, category, color, datetime.now().isoformat()))
            conn.commit()

        self.logger.info(f"Created tag: {name} ({category})")
        return name

    def update(self, name: str, category: str, color: str) -> bool:
        """
        Replace category and color of an existing tag.

        Returns:
            True if the tag existed
        """
        sql = "UPDATE tags SET category = ?, color = ? WHERE name = ?"

        with self.connection() as conn:
            cur = conn.cursor()
            cur.execute(sql, (category, color, name))
            conn.commit()
            updated = cur.rowcount > 0

        if updated:
            self.logger.info(f"Updated tag: {name} ({category}, {color})")
        return updated

    # ========================================================================
    # MEMBERSHIP
    # ========================================================================

    def add_to_picture(self, picture_path: str, tag_name: str) -> bool:
        """
        Associate a tag with a picture.

        Returns:
            True if a new association was created, False if it already existed
        """
        sql = """
            INSERT OR IGNORE INTO picture_tags (picture_path, tag_name, created_at)
            VALUES (?, ?, ?)
        """

        with self.connection() as conn:
            cur = conn.cursor()
            cur.execute(sql, (picture_path, tag_name, datetime.now().isoformat()))
            conn.commit()
            created = cur.rowcount > 0

        if created:
            self.logger.debug(f"Tagged {picture_path} with {tag_name}")
        return created

    def remove_from_picture(self, picture_path: str, tag_name: str) -> bool:
        """
        Remove one association.

        Returns:
            True if the association existed
        """
        with self.connection() as conn:
            cur = conn.cursor()
            cur.execute(
                "DELETE FROM picture_tags WHERE picture_path = ? AND tag_name = ?",
                (picture_path, tag_name)
            )
            conn.commit()
            removed = cur.rowcount > 0

        if removed:
            self.logger.debug(f"Untagged {picture_path} from {tag_name}")
        return removed

    def get_tags_for_picture(self, picture_path: str) -> List[Dict[str, Any]]:
        sql = """
            SELECT t.*
            FROM tags t
            JOIN picture_tags pt ON pt.tag_name = t.name
            WHERE pt.picture_path = ?
            ORDER BY t.category, t.name
        """

        with self.connection(read_only=True) as conn:
            cur = conn.cursor()
            cur.execute(sql, (picture_path,))
            return cur.fetchall()

    def count_pictures_for_tag(self, tag_name: str) -> int:
        with self.connection(read_only=True) as conn:
            cur = conn.cursor()
            cur.execute("SELECT COUNT(*) as count FROM picture_tags WHERE tag_name = ?", (tag_name,))
            return cur.fetchone()['count']

    def delete_associations_for_tag(self, tag_name: str, conn: sqlite3.Connection) -> int:
        """Remove every membership of a tag. Runs inside the caller's transaction."""
        deleted = conn.execute("DELETE FROM picture_tags WHERE tag_name = ?", (tag_name,)).rowcount
        self.logger.debug(f"Removed {deleted} associations of tag {tag_name}")
        return deleted

    def delete_associations_for_picture(self, picture_path: str, conn: sqlite3.Connection) -> int:
        """Remove every membership of a picture. Runs inside the caller's transaction."""
        deleted = conn.execute(
            "DELETE FROM picture_tags WHERE picture_path = ?", (picture_path,)
        ).rowcount
        self.logger.debug(f"Removed {deleted} associations of picture {picture_path}")
        return deleted

    # ========================================================================
    # SET-MEMBERSHIP QUERY SHAPES
    # ========================================================================

    @staticmethod
    def any_tag_paths_sql(tag_names: Sequence[str]) -> Tuple[str, tuple]:
        """
        Paths associated with at least one of the tags.

        Returns:
            (sql, params) selecting a single 'picture_path' column
        """
        sql = (
            "SELECT DISTINCT picture_path FROM picture_tags "
            f"WHERE tag_name IN ({_placeholders(len(tag_names))})"
        )
        return sql, tuple(tag_names)

    @staticmethod
    def all_tags_paths_sql(tag_names: Sequence[str]) -> Tuple[str, tuple]:
        """
        Paths associated with every one of the tags.

        tag_names must be free of duplicates: the HAVING clause compares the
        distinct tag count against len(tag_names).

        Returns:
            (sql, params) selecting a single 'picture_path' column
        """
        sql = (
            "SELECT picture_path FROM picture_tags "
            f"WHERE tag_name IN ({_placeholders(len(tag_names))}) "
            "GROUP BY picture_path HAVING COUNT(DISTINCT tag_name) = ?"
        )
        return sql, tuple(tag_names) + (len(tag_names),)

    def paths_with_any_tag(self, tag_names: Sequence[str]) -> List[str]:
        if not tag_names:
            return []
        return self._fetch_paths(*self.any_tag_paths_sql(tag_names))

    def paths_with_all_tags(self, tag_names: Sequence[str]) -> List[str]:
        names = list(dict.fromkeys(tag_names))
        if not names:
            return []
        return self._fetch_paths(*self.all_tags_paths_sql(names))

    def _fetch_paths(self, sql: str, params: tuple) -> List[str]:
        with self.connection(read_only=True) as conn:
            cur = conn.cursor()
            cur.execute(sql, params)
            return [row['picture_path'] for row in cur.fetchall()]
