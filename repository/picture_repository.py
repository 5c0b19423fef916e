# repository/picture_repository.py
# Version 02.00.00.00 dated 20261019
# Repository for pictures table operations

import sqlite3
import time
from typing import Optional, List, Dict, Any

from .base_repository import BaseRepository
from logging_config import get_logger

logger = get_logger(__name__)


class PictureRepository(BaseRepository):
    """
    Repository for pictures operations.

    Handles all database operations related to indexed pictures:
    - Lookup by path
    - Upsert keyed by path
    - Listing, counting, and resolving path sets
    - Deletion
    """

    def _table_name(self) -> str:
        return "pictures"

    def _key_column(self) -> str:
        return "path"

    def get_by_path(self, path: str) -> Optional[Dict[str, Any]]:
        """
        Get picture by absolute file path.

        Args:
            path: Full file path

        Returns:
            Picture dict or None
        """
        return self.find_by_key(path)

    def get_all(self) -> List[Dict[str, Any]]:
        """Return every indexed picture ordered by path."""
        return self.find_all()

    def get_mtime_ns(self, path: str) -> Optional[int]:
        """
        Get the stored modification stamp used for change detection.

        Args:
            path: Full file path

        Returns:
            Nanosecond mtime, or None if the picture is not indexed
        """
        with self.connection(read_only=True) as conn:
            cur = conn.cursor()
            cur.execute("SELECT mtime_ns FROM pictures WHERE path = ?", (path,))
            row = cur.fetchone()
            return row['mtime_ns'] if row else None

    def upsert(self,
               path: str,
               filename: str,
               size: int,
               width: Optional[int],
               height: Optional[int],
               created_at: Optional[str],
               modified_at: Optional[str],
               mtime_ns: Optional[int],
               thumbnail_path: Optional[str] = None) -> str:
        """
        Insert or fully replace the mutable fields of a picture.

        Args:
            path: Full file path (identity)
            filename: Base name of the file
            size: File size in bytes
            width: Image width in pixels
            height: Image height in pixels
            created_at: File creation time (ISO-8601)
            modified_at: File modification time (ISO-8601)
            mtime_ns: File modification time in nanoseconds
            thumbnail_path: Path of the thumbnail artifact, if any

        Returns:
            The picture path
        """
        now = time.strftime("%Y-%m-%d %H:%M:%S")

        sql = """
            INSERT INTO pictures
                (path, filename, size, width, height, created_at, modified_at,
                 mtime_ns, indexed_at, thumbnail_path)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(path) DO UPDATE SET
                filename = excluded.filename,
                size = excluded.size,
                width = excluded.width,
                height = excluded.height,
                created_at = excluded.created_at,
                modified_at = excluded.modified_at,
                mtime_ns = excluded.mtime_ns,
                indexed_at = excluded.indexed_at,
                thumbnail_path = excluded.thumbnail_path
        """

        with self.connection() as conn:
            cur = conn.cursor()
            cur.execute(sql, (path, filename, size, width, height, created_at,
                              modified_at, mtime_ns, now, thumbnail_path))
            conn.commit()

        self.logger.debug(f"Upserted picture: {path}")
        return path

    def get_by_paths_query(self, path_query: str, params: tuple) -> List[Dict[str, Any]]:
        """
        Resolve a path-producing subquery to full picture rows.

        Args:
            path_query: SELECT statement returning a single column of paths
            params: Parameters for the subquery

        Returns:
            Matching pictures ordered by path
        """
        sql = f"SELECT * FROM pictures WHERE path IN ({path_query}) ORDER BY path"

        with self.connection(read_only=True) as conn:
            cur = conn.cursor()
            cur.execute(sql, params)
            return cur.fetchall()

    def count_all(self) -> int:
        return self.count()

    def delete_by_path(self, path: str, conn: Optional[sqlite3.Connection] = None) -> bool:
        """
        Delete a picture row by file path.

        Associations must already be gone (see TagRepository.delete_associations_for_picture).

        Args:
            path: Full file path
            conn: Optional connection of an enclosing TransactionContext

        Returns:
            True if deleted, False if not found
        """
        deleted = self.delete_by_key(path, conn=conn)
        if not deleted:
            self.logger.warning(f"Picture not found for deletion: {path}")
        return deleted
