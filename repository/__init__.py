# repository/__init__.py
# Version 02.00.00.00 dated 20261019
# Repository package for data access layer

from .base_repository import (
    BaseRepository,
    DatabaseConnection,
    TransactionContext
)

from .picture_repository import PictureRepository
from .tag_repository import TagRepository
from .watched_folder_repository import WatchedFolderRepository

__all__ = [
    # Base classes
    'BaseRepository',
    'DatabaseConnection',
    'TransactionContext',

    # Concrete repositories
    'PictureRepository',
    'TagRepository',
    'WatchedFolderRepository',
]
