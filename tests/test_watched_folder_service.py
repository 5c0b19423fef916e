import pytest

from errors import InvalidPathError, NotFoundError

from conftest import make_image


def test_add_canonicalizes_and_defaults_name(gallery, tmp_path, monkeypatch):
    folder = tmp_path / "Holidays"
    folder.mkdir()
    monkeypatch.chdir(tmp_path)

    record = gallery.add_watched_folder("Holidays")

    assert record['path'] == str(folder.resolve())
    assert record['name'] == "Holidays"
    assert record['auto_reindex'] is False
    assert record['picture_count'] == 0
    assert record['added_at']


def test_add_rejects_missing_or_non_directory(gallery, tmp_path):
    with pytest.raises(InvalidPathError):
        gallery.add_watched_folder(str(tmp_path / "missing"))
    with pytest.raises(InvalidPathError):
        gallery.add_watched_folder(str(make_image(tmp_path / "x.jpg")))


def test_re_adding_replaces_name_and_flag_but_keeps_stats(gallery, photo_dir):
    gallery.add_watched_folder(str(photo_dir), "Photos", False)
    gallery.index_watched_folder(str(photo_dir))

    record = gallery.add_watched_folder(str(photo_dir), "Family", True)

    assert len(gallery.get_watched_folders()) == 1
    assert record['name'] == "Family"
    assert record['auto_reindex'] is True
    assert record['picture_count'] == 3


def test_update_folder(gallery, photo_dir):
    gallery.add_watched_folder(str(photo_dir), "Photos")

    record = gallery.update_watched_folder(str(photo_dir), "Renamed", True)

    assert (record['name'], record['auto_reindex']) == ("Renamed", True)
    with pytest.raises(NotFoundError):
        gallery.update_watched_folder(str(photo_dir / "trip"), "x", False)


def test_remove_folder_keeps_pictures(gallery, photo_dir):
    gallery.add_watched_folder(str(photo_dir))
    gallery.index_watched_folder(str(photo_dir))

    gallery.remove_watched_folder(str(photo_dir))

    assert gallery.get_watched_folders() == []
    assert gallery.get_picture_count() == 3
    with pytest.raises(NotFoundError):
        gallery.remove_watched_folder(str(photo_dir))


def test_list_is_stable(gallery, tmp_path):
    for name in ("one", "two", "three"):
        (tmp_path / name).mkdir()
        gallery.add_watched_folder(str(tmp_path / name))

    first = [f['path'] for f in gallery.get_watched_folders()]
    second = [f['path'] for f in gallery.get_watched_folders()]

    assert first == second
    assert len(first) == 3
