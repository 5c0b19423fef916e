# errors.py
# Version 01.00.00.00 dated 20261019
# Error taxonomy shared by the repository and service layers

"""
Exception hierarchy for EasyGallery.

Single-entity operations (CRUD, search) raise these unchanged to the caller.
Per-file failures inside a folder scan and per-folder failures inside a batch
reindex are caught by the scanner, logged, and counted instead.
"""


class GalleryError(Exception):
    """Base class for all EasyGallery errors."""


class InvalidPathError(GalleryError):
    """Input path is missing or is not a directory."""


class NotFoundError(GalleryError):
    """Entity is absent (picture, tag, watched folder, association, file)."""


class NotWatchedError(NotFoundError):
    """Folder is not registered as a watched folder."""


class AlreadyExistsError(GalleryError):
    """Entity with the same identity already exists."""


class UnsupportedFormatError(GalleryError):
    """Pixel dimensions could not be decoded from the file."""


# Same failure seen from the decoder's side
DecodeFailureError = UnsupportedFormatError


class StoreUnavailableError(GalleryError):
    """Catalog store is not initialized or cannot be opened."""


class IOFailureError(GalleryError):
    """Filesystem write or delete failed."""


class InvalidArgumentError(GalleryError, ValueError):
    """Malformed argument (empty tag name, unknown category or operator)."""
