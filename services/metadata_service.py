# services/metadata_service.py
# Version 02.00.00.00 dated 20261019
# Image metadata extraction (dimensions + filesystem facts)

import os
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from PIL import Image, UnidentifiedImageError

from errors import NotFoundError, UnsupportedFormatError
from logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class ImageMetadata:
    """
    Facts captured for one image file.

    created_at is the filesystem birth time where the platform reports one
    (macOS, BSD, Windows). Elsewhere it is the modification time, and
    created_is_approximate is True. This is a known platform limitation.
    """
    path: str
    width: int
    height: int
    size: int
    created_at: datetime
    modified_at: datetime
    mtime_ns: int
    created_is_approximate: bool = False
    format: Optional[str] = None


class MetadataService:
    """
    Read-only metadata extractor.

    Dimensions are read from the image header via Pillow (no full decode).
    Size and timestamps come from os.stat.
    """

    def extract(self, path: str) -> ImageMetadata:
        """
        Extract dimensions, byte size, and timestamps of an image.

        Args:
            path: Image file path

        Returns:
            ImageMetadata

        Raises:
            NotFoundError: If the file cannot be opened
            UnsupportedFormatError: If pixel dimensions cannot be decoded
        """
        try:
            stat_result = os.stat(path)
        except OSError as e:
            raise NotFoundError(f"Cannot open image {path}: {e}") from e

        try:
            with Image.open(path) as img:
                width, height = img.size
                image_format = img.format
        except (FileNotFoundError, PermissionError, IsADirectoryError) as e:
            raise NotFoundError(f"Cannot open image {path}: {e}") from e
        except Image.DecompressionBombError as e:
            raise UnsupportedFormatError(f"Image too large to decode safely {path}: {e}") from e
        except (UnidentifiedImageError, OSError, ValueError, SyntaxError) as e:
            # Pillow raises SyntaxError/ValueError from some malformed headers
            raise UnsupportedFormatError(f"Cannot decode image dimensions of {path}: {e}") from e

        if not width or not height:
            raise UnsupportedFormatError(f"Image has no pixel dimensions: {path}")

        modified_at = datetime.fromtimestamp(stat_result.st_mtime_ns / 1e9)

        birth_time = getattr(stat_result, "st_birthtime", None)
        if birth_time:
            created_at = datetime.fromtimestamp(birth_time)
            approximate = False
        else:
            created_at = modified_at
            approximate = True

        metadata = ImageMetadata(
            path=path,
            width=int(width),
            height=int(height),
            size=int(stat_result.st_size),
            created_at=created_at,
            modified_at=modified_at,
            mtime_ns=int(stat_result.st_mtime_ns),
            created_is_approximate=approximate,
            format=image_format,
        )
        logger.debug(f"Extracted metadata for {path}: {width}x{height}, {metadata.size} bytes")
        return metadata

    def get_mtime_ns(self, path: str) -> int:
        """
        Current modification stamp of a file, for change detection.

        Raises:
            NotFoundError: If the file cannot be stat'ed
        """
        try:
            return os.stat(path).st_mtime_ns
        except OSError as e:
            raise NotFoundError(f"Cannot stat {path}: {e}") from e
