# services/photo_deletion_service.py
# Version 02.00.00.00 dated 20261019
# Removing pictures from the catalog and, optionally, from disk

import os
from dataclasses import dataclass

from errors import IOFailureError, NotFoundError
from repository import PictureRepository, TagRepository, TransactionContext
from logging_config import get_logger
from .thumbnail_service import ThumbnailService

logger = get_logger(__name__)


@dataclass
class DeletionResult:
    """Outcome of deleting one picture."""
    path: str
    tags_removed: int = 0
    file_deleted: bool = False
    thumbnail_deleted: bool = False


class PhotoDeletionService:
    """
    Deletes a picture record, its tag memberships, and its thumbnail.

    With delete_from_disk the source file goes first: if it cannot be removed
    the catalog is left untouched.
    """

    def __init__(self,
                 picture_repo: PictureRepository,
                 tag_repo: TagRepository,
                 thumbnail_service: ThumbnailService):
        self._picture_repo = picture_repo
        self._tag_repo = tag_repo
        self._thumbnail_service = thumbnail_service

    def delete_picture(self, path: str, delete_from_disk: bool = False) -> DeletionResult:
        """
        Delete a picture.

        Args:
            path: Catalogued picture path
            delete_from_disk: Also remove the image file

        Returns:
            DeletionResult

        Raises:
            NotFoundError: The path is not catalogued
            IOFailureError: The file exists but could not be removed
        """
        if not self._picture_repo.exists(path):
            raise NotFoundError(f"Picture not found: {path}")

        result = DeletionResult(path=path)

        if delete_from_disk:
            try:
                os.remove(path)
                result.file_deleted = True
                logger.info(f"Deleted file from disk: {path}")
            except FileNotFoundError:
                logger.warning(f"File already missing on disk: {path}")
            except OSError as e:
                raise IOFailureError(f"Cannot delete {path}: {e}") from e

        with TransactionContext(self._picture_repo.db_connection) as conn:
            result.tags_removed = self._tag_repo.delete_associations_for_picture(path, conn)
            self._picture_repo.delete_by_path(path, conn=conn)

        result.thumbnail_deleted = self._thumbnail_service.remove_thumbnail(path)

        logger.info(f"Deleted picture {path} (tags removed={result.tags_removed}, "
                    f"file deleted={result.file_deleted})")
        return result
