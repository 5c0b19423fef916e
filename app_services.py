# app_services.py
# Version 10.00.00.00 dated 20261019
# Application facade - the public operation surface used by UI and CLI

import threading
from pathlib import Path
from typing import Optional, List, Dict, Any, Callable, Union

from errors import NotFoundError
from logging_config import get_logger
from repository import (
    DatabaseConnection,
    PictureRepository,
    TagRepository,
    WatchedFolderRepository,
)
from services import (
    PhotoScanService,
    ScanResult,
    ScanProgress,
    ThumbnailService,
    WatchedFolderService,
    TagService,
    SearchService,
    SearchCriteria,
    PhotoDeletionService,
    DeletionResult,
)
from settings_manager import SettingsManager

logger = get_logger(__name__)

DB_NAME = "easygallery.db"
THUMBNAIL_DIR_NAME = "thumbnails"


class GalleryServices:
    """
    Wires repositories and services around one explicitly constructed store.

    Every public method delegates to a service; nothing is cached between
    calls, so each operation can be retried independently. Store readiness
    is enforced by DatabaseConnection: any call made before initialize()
    raises StoreUnavailableError.

    Usage:
        gallery = GalleryServices.create("/home/me/.easygallery")
        gallery.add_watched_folder("/home/me/Pictures")
        gallery.index_watched_folder("/home/me/Pictures")
        gallery.search_pictures_advanced({"persons": {"tags": ["Clara"], "operator": "OR"}})
    """

    def __init__(self,
                 db: DatabaseConnection,
                 thumbnail_dir: str,
                 thumbnail_size: int = 256,
                 skip_unchanged: bool = True,
                 ignore_hidden_folders: bool = False):
        self.db = db

        self.picture_repo = PictureRepository(db)
        self.tag_repo = TagRepository(db)
        self.folder_repo = WatchedFolderRepository(db)

        self.thumbnail_service = ThumbnailService(thumbnail_dir, size=thumbnail_size)
        self.scan_service = PhotoScanService(
            picture_repo=self.picture_repo,
            folder_repo=self.folder_repo,
            thumbnail_service=self.thumbnail_service,
            skip_unchanged=skip_unchanged,
            ignore_hidden_folders=ignore_hidden_folders,
        )
        self.folder_service = WatchedFolderService(self.folder_repo)
        self.tag_service = TagService(self.tag_repo, self.picture_repo)
        self.search_service = SearchService(self.picture_repo)
        self.deletion_service = PhotoDeletionService(self.picture_repo, self.tag_repo, self.thumbnail_service)

    @classmethod
    def create(cls, data_dir: str, initialize: bool = True, **kwargs) -> "GalleryServices":
        """
        Build the service graph under a data folder.

        Args:
            data_dir: Folder holding the database and the thumbnail store
            initialize: Create the schema right away
            **kwargs: Forwarded to __init__ (thumbnail_size, skip_unchanged, ...)
        """
        data_path = Path(data_dir).expanduser()
        db = DatabaseConnection(str(data_path / DB_NAME))
        if initialize:
            db.initialize()
        return cls(db, str(data_path / THUMBNAIL_DIR_NAME), **kwargs)

    @classmethod
    def from_settings(cls, settings: SettingsManager, initialize: bool = True) -> "GalleryServices":
        db = DatabaseConnection(str(settings.database_path()))
        if initialize:
            db.initialize()
        return cls(
            db,
            str(settings.thumbnail_dir()),
            thumbnail_size=int(settings.get("thumbnail_size", 256)),
            skip_unchanged=bool(settings.get("skip_unchanged_photos", True)),
            ignore_hidden_folders=bool(settings.get("ignore_hidden_folders", False)),
        )

    # ========================================================================
    # INDEXING
    # ========================================================================

    def index_folder(self,
                     folder_path: str,
                     progress_callback: Optional[Callable[[ScanProgress], None]] = None,
                     cancel_event: Optional[threading.Event] = None) -> ScanResult:
        return self.scan_service.index_folder(folder_path, progress_callback, cancel_event)

    def index_watched_folder(self,
                             folder_path: str,
                             progress_callback: Optional[Callable[[ScanProgress], None]] = None,
                             cancel_event: Optional[threading.Event] = None) -> ScanResult:
        return self.scan_service.index_watched_folder(folder_path, progress_callback, cancel_event)

    def reindex_all_watched_folders(self, only_auto: bool = False) -> int:
        return self.scan_service.reindex_all_watched_folders(only_auto=only_auto)

    def cancel_indexing(self):
        """Cancel every scan running now. Use a cancel_event to stop one scan only."""
        self.scan_service.cancel()

    # ========================================================================
    # WATCHED FOLDERS
    # ========================================================================

    def add_watched_folder(self, folder_path: str, name: str = "", auto_reindex: bool = False) -> Dict[str, Any]:
        return self.folder_service.add_folder(folder_path, name, auto_reindex)

    def remove_watched_folder(self, folder_path: str):
        self.folder_service.remove_folder(folder_path)

    def update_watched_folder(self, folder_path: str, name: str, auto_reindex: bool) -> Dict[str, Any]:
        return self.folder_service.update_folder(folder_path, name, auto_reindex)

    def get_watched_folders(self) -> List[Dict[str, Any]]:
        return self.folder_service.get_folders()

    # ========================================================================
    # PICTURES
    # ========================================================================

    def get_indexed_pictures(self) -> List[Dict[str, Any]]:
        return self.picture_repo.get_all()

    def get_picture_count(self) -> int:
        return self.picture_repo.count_all()

    def get_picture(self, path: str) -> Dict[str, Any]:
        picture = self.picture_repo.get_by_path(path)
        if picture is None:
            raise NotFoundError(f"Picture not found: {path}")
        return picture

    def delete_picture(self, path: str, delete_from_disk: bool = False) -> DeletionResult:
        return self.deletion_service.delete_picture(path, delete_from_disk)

    # ========================================================================
    # TAGS
    # ========================================================================

    def create_tag(self, name: str, category: str, color: str = "") -> Dict[str, Any]:
        return self.tag_service.create_tag(name, category, color)

    def update_tag(self, name: str, category: str, color: str) -> Dict[str, Any]:
        return self.tag_service.update_tag(name, category, color)

    def delete_tag(self, name: str) -> int:
        return self.tag_service.delete_tag(name)

    def get_all_tags(self) -> List[Dict[str, Any]]:
        return self.tag_service.get_all_tags()

    def get_all_tags_with_count(self) -> List[Dict[str, Any]]:
        return self.tag_service.get_all_tags_with_count()

    def add_tag_to_picture(self, picture_path: str, tag_name: str) -> bool:
        return self.tag_service.add_tag_to_picture(picture_path, tag_name)

    def remove_tag_from_picture(self, picture_path: str, tag_name: str):
        self.tag_service.remove_tag_from_picture(picture_path, tag_name)

    def get_tags_for_picture(self, picture_path: str) -> List[Dict[str, Any]]:
        return self.tag_service.get_tags_for_picture(picture_path)

    # ========================================================================
    # SEARCH
    # ========================================================================

    def search_pictures_advanced(self,
                                 criteria: Union[SearchCriteria, Dict[str, Any], None]) -> List[Dict[str, Any]]:
        return self.search_service.search_advanced(criteria)
