import json
import logging

import pytest

import main


@pytest.fixture
def cli(tmp_path):
    """Run the CLI against a private data folder with console logging off."""
    settings_file = tmp_path / "settings.json"
    settings_file.write_text(json.dumps({
        "data_dir": str(tmp_path / "data"),
        "log_to_console": False,
        "log_file_name": "",
    }))

    app_logger = logging.getLogger("easygallery")
    saved = (list(app_logger.handlers), app_logger.propagate, app_logger.level)

    def run(*argv):
        return main.main(["--settings", str(settings_file), *argv])

    yield run

    app_logger.handlers[:] = saved[0]
    app_logger.propagate = saved[1]
    app_logger.setLevel(saved[2])


def test_index_tag_and_search(cli, photo_dir, capsys):
    assert cli("index", str(photo_dir), "--quiet") == 0
    assert "Indexed 3 pictures" in capsys.readouterr().out

    assert cli("tag", "create", "Clara", "person") == 0
    assert cli("tag", "create", "Paris", "location") == 0
    assert cli("tag", "add", str(photo_dir / "a.jpg"), "Clara") == 0
    assert cli("tag", "add", str(photo_dir / "a.jpg"), "Paris") == 0
    assert cli("tag", "add", str(photo_dir / "b.png"), "Clara") == 0
    capsys.readouterr()

    assert cli("search", "--persons", "Clara", "--locations", "Paris") == 0
    found = json.loads(capsys.readouterr().out)
    assert [p['filename'] for p in found] == ["a.jpg"]

    criteria = json.dumps({"persons": {"tags": ["Clara"], "operator": "OR"}})
    assert cli("search", "--json", criteria) == 0
    found = json.loads(capsys.readouterr().out)
    assert sorted(p['filename'] for p in found) == ["a.jpg", "b.png"]


def test_errors_map_to_exit_codes(cli, tmp_path, capsys):
    assert cli("index", str(tmp_path / "missing")) == 1
    assert "error:" in capsys.readouterr().err

    assert cli("tag", "delete", "Nobody") == 1
    assert cli("search", "--json", "{not json") == 2
    assert cli("search", "--json", "[]") == 2
    assert cli("search", "--json", "\"Clara\"") == 2
    assert cli("search", "--json", '{"persons": {"tags": "Clara"}}') == 1
    assert cli("search", "--persons", "Clara", "--persons-op", "or") == 0


def test_watch_commands(cli, photo_dir, capsys):
    assert cli("watch", "add", str(photo_dir), "--name", "Family", "--auto") == 0
    capsys.readouterr()

    assert cli("reindex", "--auto-only") == 0
    assert "Indexed 3 pictures" in capsys.readouterr().out

    assert cli("watch", "list") == 0
    [folder] = json.loads(capsys.readouterr().out)
    assert folder['name'] == "Family"
    assert folder['picture_count'] == 3

    assert cli("pictures", "--count") == 0
    assert capsys.readouterr().out.strip() == "3"


def test_delete_command(cli, photo_dir, capsys):
    cli("index", str(photo_dir), "--quiet")
    capsys.readouterr()

    assert cli("delete", str(photo_dir / "b.png")) == 0
    result = json.loads(capsys.readouterr().out)
    assert result['file_deleted'] is False
    assert (photo_dir / "b.png").exists()

    assert cli("delete", str(photo_dir / "b.png")) == 1
