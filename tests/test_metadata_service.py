import os

import pytest

from errors import NotFoundError, UnsupportedFormatError, DecodeFailureError
from services.metadata_service import MetadataService

from conftest import make_image, make_corrupt_image, make_oversized_png


def test_extract_reads_dimensions_and_file_facts(tmp_path):
    path = make_image(tmp_path / "pic.png", size=(123, 45))

    meta = MetadataService().extract(str(path))

    st = os.stat(path)
    assert (meta.width, meta.height) == (123, 45)
    assert meta.size == st.st_size
    assert meta.mtime_ns == st.st_mtime_ns
    assert meta.format == "PNG"


@pytest.mark.parametrize("name", ["pic.jpg", "pic.gif", "pic.bmp"])
def test_extract_supports_common_formats(tmp_path, name):
    path = make_image(tmp_path / name, size=(16, 8))
    meta = MetadataService().extract(str(path))
    assert (meta.width, meta.height) == (16, 8)


def test_created_time_falls_back_to_modification_time(tmp_path):
    path = make_image(tmp_path / "pic.jpg")
    if getattr(os.stat(path), "st_birthtime", None):
        pytest.skip("platform reports a real creation time")

    meta = MetadataService().extract(str(path))

    assert meta.created_is_approximate
    assert meta.created_at == meta.modified_at


def test_missing_file_raises_not_found(tmp_path):
    with pytest.raises(NotFoundError):
        MetadataService().extract(str(tmp_path / "nope.jpg"))


def test_undecodable_file_raises_unsupported_format(tmp_path):
    path = make_corrupt_image(tmp_path / "broken.jpg")
    with pytest.raises(UnsupportedFormatError):
        MetadataService().extract(str(path))
    assert DecodeFailureError is UnsupportedFormatError


def test_get_mtime_ns(tmp_path):
    path = make_image(tmp_path / "pic.jpg")
    assert MetadataService().get_mtime_ns(str(path)) == os.stat(path).st_mtime_ns
    with pytest.raises(NotFoundError):
        MetadataService().get_mtime_ns(str(tmp_path / "missing.jpg"))


def test_oversized_image_raises_unsupported_format(tmp_path):
    path = make_oversized_png(tmp_path / "panorama.png")

    with pytest.raises(UnsupportedFormatError, match="panorama.png"):
        MetadataService().extract(str(path))
