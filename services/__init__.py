# services/__init__.py
# Version 02.00.00.00 dated 20261019
# Service layer package - Business logic separated from UI and data access

from .photo_scan_service import (
    PhotoScanService,
    ScanResult,
    ScanProgress
)

from .metadata_service import (
    MetadataService,
    ImageMetadata
)

from .thumbnail_service import (
    ThumbnailService,
    ThumbnailResult
)

from .watched_folder_service import WatchedFolderService

from .tag_service import TagService

from .photo_deletion_service import (
    PhotoDeletionService,
    DeletionResult
)

from .search_service import (
    SearchService,
    SearchCriteria,
    TagGroup,
    TagUnion,
    TagIntersection
)

__all__ = [
    # Scanning
    'PhotoScanService',
    'ScanResult',
    'ScanProgress',

    # Metadata
    'MetadataService',
    'ImageMetadata',

    # Thumbnails
    'ThumbnailService',
    'ThumbnailResult',

    # Watched folders
    'WatchedFolderService',

    # Tags
    'TagService',

    # Deletion
    'PhotoDeletionService',
    'DeletionResult',

    # Search
    'SearchService',
    'SearchCriteria',
    'TagGroup',
    'TagUnion',
    'TagIntersection',
]
