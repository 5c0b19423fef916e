# services/tag_service.py
# Version 02.00.00.00 dated 20261019
# Business logic for categorized tags and picture tagging

import sqlite3
from typing import List, Dict, Any

from errors import AlreadyExistsError, InvalidArgumentError, NotFoundError
from repository import PictureRepository, TagRepository, TransactionContext
from repository.schema import TAG_CATEGORIES
from logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_TAG_COLOR = "#3B82F6"


class TagService:
    """
    Tag CRUD and picture-tag membership.

    Tag names are trimmed on creation and otherwise compared exactly.
    Deleting a tag removes its memberships first, in the same transaction.
    """

    def __init__(self, tag_repo: TagRepository, picture_repo: PictureRepository):
        self._tag_repo = tag_repo
        self._picture_repo = picture_repo

    @staticmethod
    def _validate_category(category: str) -> str:
        normalized = (category or "").strip().lower()
        if normalized not in TAG_CATEGORIES:
            raise InvalidArgumentError(
                f"Invalid tag category: {category!r} (expected one of {', '.join(TAG_CATEGORIES)})"
            )
        return normalized

    # ========================================================================
    # TAG CRUD
    # ========================================================================

    def create_tag(self, name: str, category: str, color: str = "") -> Dict[str, Any]:
        """
        Create a new tag.

        Args:
            name: Tag name (trimmed, must not be empty)
            category: person, location, event or other
            color: Display color, e.g. "#3B82F6"

        Returns:
            The stored tag record

        Raises:
            InvalidArgumentError: Empty name or unknown category
            AlreadyExistsError: A tag with this name exists (left unchanged)
        """
        name = (name or "").strip()
        if not name:
            raise InvalidArgumentError("Tag name cannot be empty")
        category = self._validate_category(category)
        color = (color or "").strip() or DEFAULT_TAG_COLOR

        if self._tag_repo.exists(name):
            raise AlreadyExistsError(f"Tag '{name}' already exists")

        try:
            self._tag_repo.create(name, category, color)
        except sqlite3.IntegrityError as e:
            # Lost a race with a concurrent create
            raise AlreadyExistsError(f"Tag '{name}' already exists") from e

        return self._tag_repo.get_by_name(name)

    def update_tag(self, name: str, category: str, color: str) -> Dict[str, Any]:
        """
        Replace category and color of an existing tag.

        Raises:
            InvalidArgumentError: Unknown category
            NotFoundError: No tag with this name
        """
        category = self._validate_category(category)
        color = (color or "").strip() or DEFAULT_TAG_COLOR

        if not self._tag_repo.update(name, category, color):
            raise NotFoundError(f"Tag '{name}' not found")
        return self._tag_repo.get_by_name(name)

    def delete_tag(self, name: str) -> int:
        """
        Delete a tag after removing all its picture associations.

        Returns:
            Number of associations removed

        Raises:
            NotFoundError: No tag with this name
        """
        with TransactionContext(self._tag_repo.db_connection) as conn:
            removed = self._tag_repo.delete_associations_for_tag(name, conn)
            if not self._tag_repo.delete_by_key(name, conn=conn):
                raise NotFoundError(f"Tag '{name}' not found")

        logger.info(f"Deleted tag {name} ({removed} associations)")
        return removed

    def get_tag(self, name: str) -> Dict[str, Any]:
        tag = self._tag_repo.get_by_name(name)
        if tag is None:
            raise NotFoundError(f"Tag '{name}' not found")
        return tag

    def get_all_tags(self) -> List[Dict[str, Any]]:
        return self._tag_repo.get_all()

    def get_all_tags_with_count(self) -> List[Dict[str, Any]]:
        return self._tag_repo.get_all_with_counts()

    # ========================================================================
    # PICTURE TAGGING
    # ========================================================================

    def add_tag_to_picture(self, picture_path: str, tag_name: str) -> bool:
        """
        Tag a picture. Tagging twice is a no-op.

        Returns:
            True if a new association was created

        Raises:
            NotFoundError: Picture or tag absent
        """
        if not self._picture_repo.exists(picture_path):
            raise NotFoundError(f"Picture not found: {picture_path}")
        if not self._tag_repo.exists(tag_name):
            raise NotFoundError(f"Tag not found: {tag_name}")

        return self._tag_repo.add_to_picture(picture_path, tag_name)

    def remove_tag_from_picture(self, picture_path: str, tag_name: str):
        """
        Untag a picture.

        Raises:
            NotFoundError: The picture does not carry this tag
        """
        if not self._tag_repo.remove_from_picture(picture_path, tag_name):
            raise NotFoundError(f"Picture {picture_path} is not tagged with '{tag_name}'")

    def get_tags_for_picture(self, picture_path: str) -> List[Dict[str, Any]]:
        return self._tag_repo.get_tags_for_picture(picture_path)
