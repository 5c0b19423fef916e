# services/thumbnail_service.py
# Version 02.00.00.00 dated 20261019
# Thumbnail artifact provisioning on disk (Pillow)

import hashlib
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from PIL import Image, ImageOps

from logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_THUMBNAIL_SIZE = 256


@dataclass
class ThumbnailResult:
    """
    Outcome of a best-effort thumbnail request.

    Exactly one of thumbnail_path / error is set. Callers log the error and
    carry on; a picture stays valid without a thumbnail.
    """
    source_path: str
    thumbnail_path: Optional[str] = None
    error: Optional[str] = None
    reused: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and self.thumbnail_path is not None


class ThumbnailService:
    """
    Ensures one PNG thumbnail artifact per source image under a root folder.

    Artifacts are named by the SHA-1 of the normalized absolute source path,
    so same-named files in different folders never collide. Each artifact
    carries the mtime of the source it was made from and is reused only while
    the source still has exactly that mtime; any drift, backwards included,
    regenerates it.
    """

    def __init__(self, thumbnail_dir: str, size: int = DEFAULT_THUMBNAIL_SIZE):
        """
        Args:
            thumbnail_dir: Root folder of the thumbnail store (created on demand)
            size: Longest side of generated thumbnails in pixels
        """
        self.thumbnail_dir = Path(thumbnail_dir)
        self.size = int(size)
        logger.info(f"ThumbnailService initialized (dir={self.thumbnail_dir}, size={self.size})")

    def _normalize_path(self, path: str) -> str:
        """
        Normalize path for consistent artifact names.

        Args:
            path: File path

        Returns:
            Normalized path
        """
        return os.path.normcase(os.path.abspath(os.path.normpath(str(path).strip())))

    def thumbnail_path_for(self, source_path: str) -> Path:
        """Deterministic artifact path for a source image."""
        digest = hashlib.sha1(self._normalize_path(source_path).encode("utf-8", errors="surrogatepass")).hexdigest()
        return self.thumbnail_dir / f"{digest}.png"

    def ensure_thumbnail(self, source_path: str) -> ThumbnailResult:
        """
        Make sure a thumbnail artifact exists for source_path.

        Never raises for I/O or decode problems; they are reported in the result.

        Args:
            source_path: Image file path

        Returns:
            ThumbnailResult
        """
        target = self.thumbnail_path_for(source_path)

        try:
            self.thumbnail_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return ThumbnailResult(source_path, error=f"Cannot create thumbnail folder {self.thumbnail_dir}: {e}")

        try:
            source_mtime_ns = os.stat(source_path).st_mtime_ns
            if target.exists() and target.stat().st_mtime_ns == source_mtime_ns:
                logger.debug(f"Thumbnail up to date: {source_path}")
                return ThumbnailResult(source_path, thumbnail_path=str(target), reused=True)
        except OSError as e:
            return ThumbnailResult(source_path, error=f"Cannot stat {source_path}: {e}")

        error = self._generate_thumbnail(source_path, target, source_mtime_ns)
        if error:
            return ThumbnailResult(source_path, error=error)

        logger.debug(f"Generated thumbnail for {source_path}: {target}")
        return ThumbnailResult(source_path, thumbnail_path=str(target))

    def _generate_thumbnail(self, source_path: str, target: Path, source_mtime_ns: int) -> Optional[str]:
        """
        Downscale source_path into target as PNG.

        Handles:
        - EXIF orientation
        - Multi-frame images (first frame)
        - CMYK, palette, and grayscale modes (converted to RGB/RGBA)

        The artifact is stamped with source_mtime_ns as its own mtime.

        Returns:
            None on success, an error message otherwise
        """
        tmp_target = target.with_suffix(".tmp")
        try:
            with Image.open(source_path) as img:
                try:
                    if getattr(img, "n_frames", 1) > 1:
                        img.seek(0)
                except EOFError as e:
                    logger.debug(f"Could not seek to first frame for {source_path}: {e}")

                img = ImageOps.exif_transpose(img) or img

                if img.mode == 'CMYK':
                    img = img.convert('RGB')
                elif img.mode in ('P', 'PA'):
                    img = img.convert('RGBA' if 'transparency' in img.info or img.mode == 'PA' else 'RGB')
                elif img.mode in ('L', 'LA'):
                    img = img.convert('RGBA' if img.mode == 'LA' else 'RGB')
                elif img.mode not in ("RGB", "RGBA"):
                    img = img.convert("RGB")

                img.thumbnail((self.size, self.size), Image.Resampling.LANCZOS)
                img.save(tmp_target, format="PNG")

            os.utime(tmp_target, ns=(source_mtime_ns, source_mtime_ns))
            os.replace(tmp_target, target)
            return None

        except (Image.DecompressionBombError, OSError, ValueError, SyntaxError) as e:
            try:
                tmp_target.unlink(missing_ok=True)
            except OSError as cleanup_error:
                logger.debug(f"Could not remove partial thumbnail {tmp_target}: {cleanup_error}")
            return f"Cannot generate thumbnail for {source_path}: {e}"

    def remove_thumbnail(self, source_path: str) -> bool:
        """
        Delete the artifact of a source image, if any.

        Returns:
            True if an artifact was removed
        """
        target = self.thumbnail_path_for(source_path)
        try:
            target.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning(f"Could not remove thumbnail {target}: {e}")
            return False

        logger.info(f"Removed thumbnail: {target}")
        return True
