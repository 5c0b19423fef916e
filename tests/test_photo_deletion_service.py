import os

import pytest

from errors import IOFailureError, NotFoundError


def test_delete_picture_from_catalog_only(tagged_gallery):
    gallery, p = tagged_gallery
    gallery.add_tag_to_picture(p["A"], "Clara")
    gallery.add_tag_to_picture(p["A"], "Paris")
    thumbnail = gallery.get_picture(p["A"])['thumbnail_path']

    result = gallery.delete_picture(p["A"])

    assert result.tags_removed == 2
    assert not result.file_deleted
    assert result.thumbnail_deleted
    assert not os.path.exists(thumbnail)
    assert os.path.exists(p["A"])
    assert gallery.get_picture_count() == 2
    assert {t['name']: t['picture_count'] for t in gallery.get_all_tags_with_count()}["Clara"] == 0


def test_delete_picture_from_disk(tagged_gallery):
    gallery, p = tagged_gallery

    result = gallery.delete_picture(p["B"], delete_from_disk=True)

    assert result.file_deleted
    assert not os.path.exists(p["B"])
    with pytest.raises(NotFoundError):
        gallery.get_picture(p["B"])


def test_delete_unknown_picture(gallery, tmp_path):
    with pytest.raises(NotFoundError):
        gallery.delete_picture(str(tmp_path / "never-indexed.jpg"))


def test_disk_failure_keeps_catalog_entry(tagged_gallery, monkeypatch):
    gallery, p = tagged_gallery

    def refuse(path):
        raise PermissionError(13, "Permission denied", path)

    monkeypatch.setattr(os, "remove", refuse)

    with pytest.raises(IOFailureError):
        gallery.delete_picture(p["C"], delete_from_disk=True)

    assert gallery.get_picture(p["C"])['path'] == p["C"]


def test_file_already_gone_from_disk(tagged_gallery):
    gallery, p = tagged_gallery
    os.remove(p["C"])

    result = gallery.delete_picture(p["C"], delete_from_disk=True)

    assert not result.file_deleted
    assert gallery.get_picture_count() == 2
