import os
from pathlib import Path

from PIL import Image

from services.thumbnail_service import ThumbnailService

from conftest import make_image, make_corrupt_image, make_oversized_png, bump_mtime


def test_creates_missing_store_and_downscaled_artifact(tmp_path):
    source = make_image(tmp_path / "src" / "big.jpg", size=(800, 400))
    store = tmp_path / "store" / "nested" / "thumbs"
    service = ThumbnailService(str(store), size=100)

    result = service.ensure_thumbnail(str(source))

    assert result.ok
    assert store.is_dir()
    assert Path(result.thumbnail_path).parent == store
    with Image.open(result.thumbnail_path) as thumb:
        assert max(thumb.size) == 100
        assert thumb.size == (100, 50)


def test_same_filename_in_different_folders_does_not_collide(tmp_path):
    first = make_image(tmp_path / "one" / "IMG_0001.jpg")
    second = make_image(tmp_path / "two" / "IMG_0001.jpg")
    service = ThumbnailService(str(tmp_path / "thumbs"))

    first_result = service.ensure_thumbnail(str(first))
    second_result = service.ensure_thumbnail(str(second))

    assert first_result.ok and second_result.ok
    assert first_result.thumbnail_path != second_result.thumbnail_path


def test_up_to_date_artifact_is_reused(tmp_path):
    source = make_image(tmp_path / "pic.png")
    service = ThumbnailService(str(tmp_path / "thumbs"))

    assert not service.ensure_thumbnail(str(source)).reused
    assert service.ensure_thumbnail(str(source)).reused

    bump_mtime(source)
    assert not service.ensure_thumbnail(str(source)).reused


def test_failure_is_reported_not_raised(tmp_path):
    source = make_corrupt_image(tmp_path / "broken.png")
    service = ThumbnailService(str(tmp_path / "thumbs"))

    result = service.ensure_thumbnail(str(source))

    assert not result.ok
    assert result.thumbnail_path is None
    assert "broken.png" in result.error
    assert not service.thumbnail_path_for(str(source)).exists()


def test_missing_source_is_reported(tmp_path):
    service = ThumbnailService(str(tmp_path / "thumbs"))
    result = service.ensure_thumbnail(str(tmp_path / "gone.jpg"))
    assert not result.ok


def test_remove_thumbnail(tmp_path):
    source = make_image(tmp_path / "pic.png")
    service = ThumbnailService(str(tmp_path / "thumbs"))
    service.ensure_thumbnail(str(source))

    assert service.remove_thumbnail(str(source))
    assert not service.remove_thumbnail(str(source))


def test_artifact_carries_source_mtime(tmp_path):
    source = make_image(tmp_path / "pic.png")
    service = ThumbnailService(str(tmp_path / "thumbs"))

    result = service.ensure_thumbnail(str(source))

    assert os.stat(result.thumbnail_path).st_mtime_ns == os.stat(source).st_mtime_ns


def test_replacement_with_older_mtime_regenerates(tmp_path):
    source = make_image(tmp_path / "pic.png", size=(20, 10))
    service = ThumbnailService(str(tmp_path / "thumbs"))
    service.ensure_thumbnail(str(source))

    make_image(source, size=(10, 90))
    hour_ago = os.stat(source).st_mtime_ns - 3600 * 1_000_000_000
    os.utime(source, ns=(hour_ago, hour_ago))

    result = service.ensure_thumbnail(str(source))

    assert result.ok and not result.reused
    with Image.open(result.thumbnail_path) as thumb:
        assert thumb.size == (10, 90)


def test_oversized_image_is_reported_not_raised(tmp_path):
    source = make_oversized_png(tmp_path / "panorama.png")
    service = ThumbnailService(str(tmp_path / "thumbs"))

    result = service.ensure_thumbnail(str(source))

    assert not result.ok
    assert "panorama.png" in result.error
    assert not service.thumbnail_path_for(str(source)).exists()
