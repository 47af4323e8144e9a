"""Tests for the key-value stores."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from bookmark_keeper.storage import JsonFileStore, MemoryStore, StorageError

if TYPE_CHECKING:
    from pathlib import Path


def test_memory_store() -> None:
    store = MemoryStore({"a": "1"})
    store.set_item("b", "2")
    if store.get_item("a") != "1" or store.get_item("b") != "2" or store.get_item("c") is not None:
        raise AssertionError("MemoryStore get/set mismatch")
    if sorted(store.keys()) != ["a", "b"]:
        raise AssertionError("Unexpected keys")


def test_json_file_store_persists_across_instances(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "store.json"
    JsonFileStore(path).set_item("bookmarks", "[]")
    if JsonFileStore(path).get_item("bookmarks") != "[]":
        raise AssertionError("Value should survive a new store instance")
    if json.loads(path.read_text(encoding="utf-8")) != {"bookmarks": "[]"}:
        raise AssertionError("File should hold a single JSON object")
    if list(path.parent.glob("*.tmp")):
        raise AssertionError("Temporary file should be replaced atomically")


def test_json_file_store_ignores_corrupt_file(tmp_path: Path) -> None:
    path = tmp_path / "store.json"
    path.write_text("not json", encoding="utf-8")
    store = JsonFileStore(path)
    if store.get_item("bookmarks") is not None:
        raise AssertionError("Corrupt file should read as empty")
    store.set_item("bookmarks", "[]")
    if JsonFileStore(path).get_item("bookmarks") != "[]":
        raise AssertionError("Store should recover by rewriting the file")


def test_json_file_store_write_failure(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    store = JsonFileStore(blocker / "store.json")
    with pytest.raises(StorageError):
        store.set_item("bookmarks", "[]")
