import sqlite3

import pytest

from errors import StoreUnavailableError
from repository import DatabaseConnection, TransactionContext, PictureRepository, TagRepository
from repository.schema import get_expected_tables, get_expected_indexes


def test_initialize_creates_schema(db):
    with db.get_connection(read_only=True) as conn:
        tables = {r['name'] for r in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
        indexes = {r['name'] for r in conn.execute("SELECT name FROM sqlite_master WHERE type='index'")}

    assert set(get_expected_tables()) <= tables
    assert set(get_expected_indexes()) <= indexes


def test_initialize_is_idempotent(db):
    db.initialize()
    assert db.is_ready


def test_store_unavailable_before_initialize(tmp_path):
    db = DatabaseConnection(str(tmp_path / "x.db"))

    assert not db.is_ready
    with pytest.raises(StoreUnavailableError):
        with db.get_connection():
            pass
    with pytest.raises(StoreUnavailableError):
        PictureRepository(db).count_all()


def test_initialize_failure_is_store_unavailable(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a folder")

    with pytest.raises(StoreUnavailableError):
        DatabaseConnection(str(blocker / "x.db")).initialize()


def test_read_only_connection_refuses_writes(db):
    with pytest.raises(sqlite3.OperationalError):
        with db.get_connection(read_only=True) as conn:
            conn.execute("INSERT INTO tags (name, category, color, created_at) VALUES ('x', 'other', '', '')")


def test_transaction_rolls_back_on_error(db):
    tags = TagRepository(db)

    with pytest.raises(RuntimeError):
        with TransactionContext(db) as conn:
            conn.execute("INSERT INTO tags (name, category, color, created_at) VALUES ('x', 'other', '', '')")
            raise RuntimeError("boom")

    assert not tags.exists("x")


def test_category_is_checked(db):
    with pytest.raises(sqlite3.IntegrityError):
        TagRepository(db).create("x", "animal", "#000000")


def test_any_and_all_tag_paths(db):
    pictures = PictureRepository(db)
    tags = TagRepository(db)
    for path in ("/p/1.jpg", "/p/2.jpg"):
        pictures.upsert(path=path, filename=path[-5:], size=1, width=1, height=1,
                        created_at="", modified_at="", mtime_ns=1)
    tags.create("a", "other", "")
    tags.create("b", "other", "")
    tags.add_to_picture("/p/1.jpg", "a")
    tags.add_to_picture("/p/1.jpg", "b")
    tags.add_to_picture("/p/2.jpg", "a")

    assert sorted(tags.paths_with_any_tag(["a", "b"])) == ["/p/1.jpg", "/p/2.jpg"]
    assert tags.paths_with_all_tags(["a", "b", "a"]) == ["/p/1.jpg"]
    assert tags.paths_with_any_tag([]) == []
