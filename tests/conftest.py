import os
import struct
import zlib
from pathlib import Path

import pytest
from PIL import Image

from app_services import GalleryServices
from repository import DatabaseConnection


def make_image(path: Path, size=(40, 30), color=(200, 120, 40)) -> Path:
    """Write a small valid image; format follows the extension."""
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, color).save(path)
    return path


def make_corrupt_image(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"this is definitely not an image" * 10)
    return path


def make_oversized_png(path: Path, size=(20000, 10000)) -> Path:
    """Tiny PNG whose header declares more pixels than Pillow agrees to decode."""
    def chunk(kind: bytes, data: bytes) -> bytes:
        return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", zlib.crc32(kind + data))

    header = struct.pack(">IIBBBBB", size[0], size[1], 8, 2, 0, 0, 0)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", header) + chunk(b"IDAT", b"") + chunk(b"IEND", b""))
    return path


def bump_mtime(path: Path, seconds: int = 5):
    st = os.stat(path)
    os.utime(path, ns=(st.st_atime_ns, st.st_mtime_ns + seconds * 1_000_000_000))


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture
def db(data_dir):
    conn = DatabaseConnection(str(data_dir / "test.db"))
    conn.initialize()
    return conn


@pytest.fixture
def gallery(data_dir):
    return GalleryServices.create(str(data_dir))


@pytest.fixture
def photo_dir(tmp_path):
    """Folder with three valid pictures, one of them in a sub-folder."""
    root = tmp_path / "photos"
    make_image(root / "a.jpg", size=(64, 48))
    make_image(root / "b.png", size=(20, 10))
    make_image(root / "trip" / "c.jpeg", size=(30, 30))
    (root / "notes.txt").write_text("not a picture")
    return root.resolve()


@pytest.fixture
def tagged_gallery(gallery, photo_dir):
    """
    Gallery with pictures A, B, C indexed and the tags used by search tests.

    Returns:
        (gallery, {"A": path, "B": path, "C": path})
    """
    gallery.index_folder(str(photo_dir))
    paths = {
        "A": str(photo_dir / "a.jpg"),
        "B": str(photo_dir / "b.png"),
        "C": str(photo_dir / "trip" / "c.jpeg"),
    }
    gallery.create_tag("Clara", "person")
    gallery.create_tag("Romaric", "person")
    gallery.create_tag("Paris", "location")
    gallery.create_tag("Compiegne", "location")
    gallery.create_tag("Wedding", "event")
    return gallery, paths
