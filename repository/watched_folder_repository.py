# repository/watched_folder_repository.py
# Version 01.00.00.00 dated 20261019
# Repository for watched_folders table operations

from datetime import datetime
from typing import Optional, List, Dict, Any

from .base_repository import BaseRepository
from logging_config import get_logger

logger = get_logger(__name__)


class WatchedFolderRepository(BaseRepository):
    """
    Repository for watched_folders operations.

    Folders are keyed by absolute path. Removing a folder never touches the
    pictures indexed from it.
    """

    def _table_name(self) -> str:
        return "watched_folders"

    def _key_column(self) -> str:
        return "path"

    @staticmethod
    def _to_record(row: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        if row is not None:
            row['auto_reindex'] = bool(row['auto_reindex'])
        return row

    def get_by_path(self, path: str) -> Optional[Dict[str, Any]]:
        return self._to_record(self.find_by_key(path))

    def get_all(self) -> List[Dict[str, Any]]:
        """Return all watched folders, oldest registration first."""
        return [self._to_record(row) for row in self.find_all(order_by="added_at, path")]

    def get_auto_reindex(self) -> List[Dict[str, Any]]:
        return [
            self._to_record(row)
            for row in self.find_all(where_clause="auto_reindex = 1", order_by="added_at, path")
        ]

    def upsert(self, path: str, name: str, auto_reindex: bool) -> str:
        """
        Register a folder, or replace name/auto_reindex of an existing one.

        Registration time and index statistics survive a re-registration.

        Returns:
            The folder path
        """
        sql = """
            INSERT INTO watched_folders (path, name, added_at, picture_count, auto_reindex)
            VALUES (?, ?, ?, 0, ?)
            ON CONFLICT(path) DO UPDATE SET
                name = excluded.name,
                auto_reindex = excluded.auto_reindex
        """

        with self.connection() as conn:
            cur = conn.cursor()
            cur.execute(sql, (path, name, datetime.now().isoformat(), int(bool(auto_reindex))))
            conn.commit()

        self.logger.info(f"Registered watched folder: {path} (name={name}, auto={auto_reindex})")
        return path

    def update(self, path: str, name: str, auto_reindex: bool) -> bool:
        """
        Replace the mutable fields of a watched folder.

        Returns:
            True if the folder exists
        """
        with self.connection() as conn:
            cur = conn.cursor()
            cur.execute(
                "UPDATE watched_folders SET name = ?, auto_reindex = ? WHERE path = ?",
                (name, int(bool(auto_reindex)), path)
            )
            conn.commit()
            return cur.rowcount > 0

    def update_index_stats(self, path: str, picture_count: int) -> bool:
        """
        Record the outcome of an index pass.

        Args:
            path: Folder path
            picture_count: Number of pictures indexed in the pass

        Returns:
            True if the folder exists
        """
        with self.connection() as conn:
            cur = conn.cursor()
            cur.execute(
                "UPDATE watched_folders SET last_indexed_at = ?, picture_count = ? WHERE path = ?",
                (datetime.now().isoformat(), picture_count, path)
            )
            conn.commit()
            updated = cur.rowcount > 0

        self.logger.debug(f"Updated index stats for {path}: {picture_count} pictures")
        return updated
