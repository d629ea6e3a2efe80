"""Unit tests for FileLocalStorage."""
import json

from snippetvault.repositories.storage_repository import FileLocalStorage


def test_file_storage_missing_file_is_empty(tmp_path):
    """Reading before anything is written returns None."""
    storage = FileLocalStorage(tmp_path / "store.json")
    assert storage.get_item("sv_user") is None


def test_file_storage_set_get_remove(tmp_path):
    """Values persist across instances and removal is durable."""
    path = tmp_path / "nested" / "store.json"
    storage = FileLocalStorage(path)
    storage.set_item("sv_access_token", "tok")
    storage.set_item("sv_theme_mode", "dark")

    reopened = FileLocalStorage(path)
    assert reopened.get_item("sv_access_token") == "tok"
    assert reopened.get_item("sv_theme_mode") == "dark"

    reopened.remove_item("sv_access_token")
    reopened.remove_item("never-set")
    assert FileLocalStorage(path).get_item("sv_access_token") is None
    assert json.loads(path.read_text(encoding="utf-8")) == {"sv_theme_mode": "dark"}


def test_file_storage_corrupt_file_reads_empty_and_recovers(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("{broken", encoding="utf-8")
    storage = FileLocalStorage(path)
    assert storage.get_item("sv_user") is None
    storage.set_item("sv_user", "{}")
    assert storage.get_item("sv_user") == "{}"


def test_file_storage_ignores_non_string_values(tmp_path):
    path = tmp_path / "store.json"
    path.write_text(json.dumps({"ok": "1", "bad": 2}), encoding="utf-8")
    storage = FileLocalStorage(path)
    assert storage.get_item("ok") == "1"
    assert storage.get_item("bad") is None
