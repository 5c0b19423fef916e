# services/photo_scan_service.py
# Version 02.00.00.00 dated 20261019
# Folder indexing service - walks folders, detects changes, upserts pictures

import os
import sqlite3
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, List, Callable, Dict, Iterator

from errors import GalleryError, InvalidPathError, NotWatchedError
from repository import PictureRepository, WatchedFolderRepository
from logging_config import get_logger
from .metadata_service import MetadataService
from .thumbnail_service import ThumbnailService

logger = get_logger(__name__)


@dataclass
class ScanResult:
    """Results from indexing one folder."""
    folder: str
    files_found: int = 0
    photos_indexed: int = 0
    photos_skipped: int = 0
    photos_failed: int = 0
    thumbnails_failed: int = 0
    duration_seconds: float = 0.0
    interrupted: bool = False
    warnings: List[str] = field(default_factory=list)
    # Set when indexing succeeded but the watched-folder statistics could not be saved
    stats_error: Optional[str] = None

    @property
    def count(self) -> int:
        """Pictures inserted or updated; excludes skipped and failed files."""
        return self.photos_indexed

    @property
    def photos_present(self) -> int:
        """Pictures observed in the folder and present in the catalog after the pass."""
        return self.photos_indexed + self.photos_skipped


@dataclass
class ScanProgress:
    """Progress information during scanning."""
    current: int
    total: int
    percent: int
    message: str
    current_file: Optional[str] = None


@dataclass
class _FolderLock:
    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


class PhotoScanService:
    """
    Service for indexing photo folders into the catalog.

    Responsibilities:
    - Recursive file system traversal filtered by image extension
    - Change detection (exact mtime match skips a file)
    - Metadata extraction and best-effort thumbnail provisioning
    - Upserting pictures keyed by absolute path
    - Watched-folder statistics after each pass
    - Progress reporting and cancellation between files

    Per-file failures are logged and counted, never raised. Scans of the same
    folder are serialized with a per-folder lock; different folders may scan
    in parallel. Every scan has its own cancel event: pass one in to cancel
    that scan alone, or call cancel() to stop every scan running right now.
    """

    # Supported image extensions (compared lower-case)
    IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.gif', '.bmp', '.webp'}

    def __init__(self,
                 picture_repo: PictureRepository,
                 folder_repo: WatchedFolderRepository,
                 thumbnail_service: ThumbnailService,
                 metadata_service: Optional[MetadataService] = None,
                 skip_unchanged: bool = True,
                 ignore_hidden_folders: bool = False):
        """
        Initialize scan service.

        Args:
            picture_repo: Picture repository
            folder_repo: Watched folder repository
            thumbnail_service: Thumbnail provisioner
            metadata_service: Metadata extractor (creates default if None)
            skip_unchanged: Skip files whose stored mtime equals the current one
            ignore_hidden_folders: Do not descend into folders starting with "."
        """
        self.picture_repo = picture_repo
        self.folder_repo = folder_repo
        self.thumbnail_service = thumbnail_service
        self.metadata_service = metadata_service or MetadataService()

        self.skip_unchanged = skip_unchanged
        self.ignore_hidden_folders = ignore_hidden_folders

        self._active_scans: List[threading.Event] = []
        self._locks: Dict[str, _FolderLock] = {}
        self._locks_guard = threading.Lock()

    # ========================================================================
    # PUBLIC OPERATIONS
    # ========================================================================

    def index_folder(self,
                     folder_path: str,
                     progress_callback: Optional[Callable[[ScanProgress], None]] = None,
                     cancel_event: Optional[threading.Event] = None) -> ScanResult:
        """
        Recursively index every supported image below folder_path.

        Args:
            folder_path: Folder to scan
            progress_callback: Optional callback, called once per candidate file
            cancel_event: Set it to stop this scan before its next file

        Returns:
            ScanResult; photos_indexed counts inserted or updated pictures only

        Raises:
            InvalidPathError: If folder_path does not exist or is not a directory
            StoreUnavailableError: If the catalog is not initialized
        """
        root_path = self._validate_folder(folder_path)
        self.picture_repo.db_connection.ensure_ready()

        if cancel_event is None:
            cancel_event = threading.Event()
        with self._tracked(cancel_event), self._folder_lock(str(root_path)):
            return self._scan(root_path, progress_callback, cancel_event)

    def index_watched_folder(self,
                             folder_path: str,
                             progress_callback: Optional[Callable[[ScanProgress], None]] = None,
                             cancel_event: Optional[threading.Event] = None) -> ScanResult:
        """
        Index a registered watched folder and record its statistics.

        If saving the statistics fails, the scan result is still returned with
        stats_error set.

        Raises:
            NotWatchedError: If the folder is not registered
            InvalidPathError: If the folder no longer exists
        """
        canonical = str(Path(folder_path).expanduser().resolve())
        if self.folder_repo.get_by_path(canonical) is None:
            raise NotWatchedError(f"Folder is not watched: {canonical}")

        result = self.index_folder(canonical, progress_callback, cancel_event)

        try:
            self.folder_repo.update_index_stats(canonical, result.photos_present)
        except (GalleryError, sqlite3.Error) as e:
            result.stats_error = f"Indexed {result.photos_indexed} pictures but could not update folder statistics: {e}"
            logger.warning(result.stats_error)

        return result

    def reindex_all_watched_folders(self,
                                    only_auto: bool = False,
                                    progress_callback: Optional[Callable[[ScanProgress], None]] = None,
                                    cancel_event: Optional[threading.Event] = None) -> int:
        """
        Re-index every watched folder.

        A failing folder is logged and skipped; the batch continues.

        Args:
            only_auto: Restrict to folders flagged auto_reindex
            progress_callback: Optional per-file progress callback
            cancel_event: Set it to stop the batch and the folder being scanned

        Returns:
            Sum of photos_indexed over the folders that succeeded
        """
        folders = self.folder_repo.get_auto_reindex() if only_auto else self.folder_repo.get_all()
        logger.info(f"Re-indexing {len(folders)} watched folders (only_auto={only_auto})")

        if cancel_event is None:
            cancel_event = threading.Event()
        total = 0
        failed = 0
        with self._tracked(cancel_event):
            for folder in folders:
                if cancel_event.is_set():
                    logger.info("Batch re-index cancelled")
                    break

                try:
                    result = self.index_watched_folder(folder['path'], progress_callback, cancel_event)
                except (GalleryError, OSError, sqlite3.Error) as e:
                    failed += 1
                    logger.warning(f"Skipping watched folder {folder['path']}: {e}")
                    continue

                total += result.photos_indexed

        logger.info(f"Batch re-index complete: {total} pictures indexed, {failed} folders failed")
        return total

    def cancel(self):
        """Cancel every scan running now; scans started later are unaffected."""
        with self._locks_guard:
            active = list(self._active_scans)
        for event in active:
            event.set()
        logger.info(f"Cancellation requested for {len(active)} running scans")

    # ========================================================================
    # SCAN
    # ========================================================================

    def _validate_folder(self, folder_path: str) -> Path:
        if not folder_path:
            raise InvalidPathError("Folder path is empty")

        root_path = Path(folder_path).expanduser().resolve()
        if not root_path.exists():
            raise InvalidPathError(f"Folder does not exist: {folder_path}")
        if not root_path.is_dir():
            raise InvalidPathError(f"Path is not a directory: {folder_path}")
        return root_path

    @contextmanager
    def _tracked(self, cancel_event: threading.Event) -> Iterator[None]:
        with self._locks_guard:
            self._active_scans.append(cancel_event)
        try:
            yield
        finally:
            with self._locks_guard:
                self._active_scans.remove(cancel_event)

    @contextmanager
    def _folder_lock(self, key: str) -> Iterator[None]:
        """Hold the lock of one folder; the entry is dropped when its last user leaves."""
        with self._locks_guard:
            entry = self._locks.setdefault(key, _FolderLock())
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._locks_guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._locks[key]

    def _scan(self,
              root_path: Path,
              progress_callback: Optional[Callable[[ScanProgress], None]],
              cancel_event: threading.Event) -> ScanResult:
        start_time = time.time()
        result = ScanResult(folder=str(root_path))

        logger.info(f"Starting scan: {root_path} (skip_unchanged={self.skip_unchanged})")

        all_files = self._discover_files(root_path, result)
        total_files = len(all_files)
        result.files_found = total_files
        logger.info(f"Discovered {total_files} candidate image files")

        for i, file_path in enumerate(all_files, 1):
            if cancel_event.is_set():
                logger.info(f"Scan of {root_path} cancelled")
                result.interrupted = True
                break

            if progress_callback:
                progress_callback(ScanProgress(
                    current=i,
                    total=total_files,
                    percent=int((i / total_files) * 100),
                    message=f"Indexing {i}/{total_files}",
                    current_file=file_path.name
                ))

            self._process_file(file_path, result)

        result.duration_seconds = time.time() - start_time
        logger.info(
            f"Scan complete: {result.photos_indexed} indexed, "
            f"{result.photos_skipped} skipped, "
            f"{result.photos_failed} failed in {result.duration_seconds:.1f}s"
        )
        return result

    def _discover_files(self, root_path: Path, result: ScanResult) -> List[Path]:
        """
        Discover all supported image files in directory tree.

        Folders and files are visited in sorted order so enumeration is stable.

        Args:
            root_path: Root directory
            result: Scan result collecting walk warnings

        Returns:
            List of image file paths
        """
        image_files = []

        def on_walk_error(error: OSError):
            message = f"Cannot read folder {error.filename}: {error.strerror}"
            logger.warning(message)
            result.warnings.append(message)

        for dirpath, dirnames, filenames in os.walk(root_path, onerror=on_walk_error):
            if self.ignore_hidden_folders:
                dirnames[:] = [d for d in dirnames if not d.startswith(".")]
            dirnames.sort()

            for filename in sorted(filenames):
                ext = Path(filename).suffix.lower()
                if ext in self.IMAGE_EXTENSIONS:
                    image_files.append(Path(dirpath) / filename)

        return image_files

    def _process_file(self, file_path: Path, result: ScanResult):
        """
        Index a single image file, recording the outcome in result.

        Skip when the stored mtime equals the current one; otherwise extract
        metadata, provision a thumbnail (best effort), and upsert.
        """
        path_str = str(file_path)

        try:
            current_mtime_ns = self.metadata_service.get_mtime_ns(path_str)
        except GalleryError as e:
            self._record_failure(result, path_str, e)
            return

        if self.skip_unchanged:
            try:
                stored_mtime_ns = self.picture_repo.get_mtime_ns(path_str)
            except sqlite3.Error as e:
                self._record_failure(result, path_str, e)
                return

            if stored_mtime_ns is not None and stored_mtime_ns == current_mtime_ns:
                result.photos_skipped += 1
                return

        try:
            metadata = self.metadata_service.extract(path_str)
        except GalleryError as e:
            self._record_failure(result, path_str, e)
            return

        thumbnail = self.thumbnail_service.ensure_thumbnail(path_str)
        if not thumbnail.ok:
            result.thumbnails_failed += 1
            result.warnings.append(thumbnail.error)
            logger.warning(thumbnail.error)

        try:
            self.picture_repo.upsert(
                path=path_str,
                filename=file_path.name,
                size=metadata.size,
                width=metadata.width,
                height=metadata.height,
                created_at=metadata.created_at.isoformat(),
                modified_at=metadata.modified_at.isoformat(),
                mtime_ns=metadata.mtime_ns,
                thumbnail_path=thumbnail.thumbnail_path
            )
        except sqlite3.Error as e:
            logger.error(f"Failed to write picture {path_str}: {e}", exc_info=True)
            self._record_failure(result, path_str, e)
            return

        result.photos_indexed += 1

    @staticmethod
    def _record_failure(result: ScanResult, path: str, error: Exception):
        message = f"Failed to index {path}: {error}"
        logger.warning(message)
        result.photos_failed += 1
        result.warnings.append(message)
