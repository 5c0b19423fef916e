# workers/index_worker.py
# Version 1.0.0 dated 2026-10-19
# Background worker for folder indexing

import threading
from typing import Optional

from PySide6.QtCore import QObject, Signal, QRunnable, Slot

from errors import GalleryError
from logging_config import get_logger
from services.photo_scan_service import PhotoScanService, ScanProgress

logger = get_logger(__name__)


class IndexWorkerSignals(QObject):
    """
    Signals for folder indexing worker.

    Signals:
        progress: (current, total, filename) - Per-file progress
        finished: (indexed, skipped, failed) - Completion signal
        error: (folder_path, error_message) - Indexing could not run
    """
    progress = Signal(int, int, str)   # current, total, filename
    finished = Signal(int, int, int)   # indexed, skipped, failed
    error = Signal(str, str)           # folder_path, error_message


class IndexWorker(QRunnable):
    """
    Runs one folder scan on a QThreadPool thread.

    Usage:
        worker = IndexWorker(scan_service, "/photos", watched=True)
        worker.signals.progress.connect(on_progress)
        worker.signals.finished.connect(on_finished)
        QThreadPool.globalInstance().start(worker)
    """

    def __init__(self, scan_service: PhotoScanService, folder_path: str, watched: bool = False):
        """
        Args:
            scan_service: Scanner to run
            folder_path: Folder to index
            watched: Index as a watched folder (updates its statistics)
        """
        super().__init__()
        self.scan_service = scan_service
        self.folder_path = folder_path
        self.watched = watched
        self.signals = IndexWorkerSignals()
        self.result = None
        self.error_message: Optional[str] = None
        self._cancel_event = threading.Event()

    def cancel(self):
        """Stop this worker's scan before its next file; other scans keep running."""
        self._cancel_event.set()
        logger.info(f"[IndexWorker] Cancellation requested for {self.folder_path}")

    def _on_progress(self, progress: ScanProgress):
        self.signals.progress.emit(progress.current, progress.total, progress.current_file or "")

    @Slot()
    def run(self):
        logger.info(f"[IndexWorker] Starting for {self.folder_path} (watched={self.watched})")

        try:
            if self.watched:
                self.result = self.scan_service.index_watched_folder(
                    self.folder_path, self._on_progress, self._cancel_event
                )
            else:
                self.result = self.scan_service.index_folder(
                    self.folder_path, self._on_progress, self._cancel_event
                )
        except GalleryError as e:
            self.error_message = str(e)
            logger.error(f"[IndexWorker] Failed for {self.folder_path}: {e}")
            self.signals.error.emit(self.folder_path, self.error_message)
            return

        logger.info(
            f"[IndexWorker] Complete: {self.result.photos_indexed} indexed, "
            f"{self.result.photos_skipped} skipped, {self.result.photos_failed} failed"
        )
        self.signals.finished.emit(
            self.result.photos_indexed,
            self.result.photos_skipped,
            self.result.photos_failed
        )
