# services/watched_folder_service.py
# Version 01.00.00.00 dated 20261019
# Business logic for watched folder registrations

import os
from pathlib import Path
from typing import Optional, List, Dict, Any

from errors import InvalidPathError, NotFoundError
from repository import WatchedFolderRepository
from logging_config import get_logger

logger = get_logger(__name__)


class WatchedFolderService:
    """
    CRUD over watched folders.

    Paths are canonicalized (absolute, symlinks resolved) before they reach
    the store, so every lookup uses the same key the folder was registered
    under. Indexing itself lives in PhotoScanService.
    """

    def __init__(self, folder_repo: WatchedFolderRepository):
        self._folder_repo = folder_repo

    @staticmethod
    def canonicalize(path: str) -> str:
        return str(Path(path).expanduser().resolve())

    def add_folder(self, path: str, name: str = "", auto_reindex: bool = False) -> Dict[str, Any]:
        """
        Register a folder for repeated indexing (insert or replace by path).

        Args:
            path: Existing directory
            name: Friendly name; defaults to the last path segment
            auto_reindex: Include the folder in automatic re-index passes

        Returns:
            The stored folder record

        Raises:
            InvalidPathError: If path is not an existing directory
        """
        if not path:
            raise InvalidPathError("Folder path is empty")

        canonical = self.canonicalize(path)
        if not os.path.isdir(canonical):
            raise InvalidPathError(f"Not an existing directory: {path}")

        name = (name or "").strip() or Path(canonical).name or canonical
        self._folder_repo.upsert(canonical, name, auto_reindex)
        return self._folder_repo.get_by_path(canonical)

    def remove_folder(self, path: str):
        """
        Unregister a folder. Indexed pictures are kept.

        Raises:
            NotFoundError: If the folder is not registered
        """
        canonical = self.canonicalize(path)
        if not self._folder_repo.delete_by_key(canonical):
            raise NotFoundError(f"Watched folder not found: {canonical}")
        logger.info(f"Removed watched folder: {canonical}")

    def update_folder(self, path: str, name: str, auto_reindex: bool) -> Dict[str, Any]:
        """
        Replace name and auto_reindex of a registered folder.

        Raises:
            NotFoundError: If the folder is not registered
        """
        canonical = self.canonicalize(path)
        existing = self._folder_repo.get_by_path(canonical)
        if existing is None:
            raise NotFoundError(f"Watched folder not found: {canonical}")

        name = (name or "").strip() or existing['name']
        self._folder_repo.update(canonical, name, auto_reindex)
        logger.info(f"Updated watched folder {canonical}: name={name}, auto={auto_reindex}")
        return self._folder_repo.get_by_path(canonical)

    def get_folder(self, path: str) -> Optional[Dict[str, Any]]:
        return self._folder_repo.get_by_path(self.canonicalize(path))

    def get_folders(self) -> List[Dict[str, Any]]:
        return self._folder_repo.get_all()
