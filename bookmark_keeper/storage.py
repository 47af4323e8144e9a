"""Synchronous string-keyed storage backing the bookmark repository."""

from __future__ import annotations

import json
import logging
import os
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:  # pragma: no cover
    from pathlib import Path

LOGGER = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the underlying store cannot be read or written."""


class KeyValueStore(Protocol):
    """Minimal get/set contract, modelled on browser local storage."""

    def get_item(self, key: str) -> str | None:
        """Return the raw string stored under ``key`` or None."""
        ...

    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, raising StorageError on failure."""
        ...


class MemoryStore:
    """In-process store, used for tests and ephemeral sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        """Initialise the store with optional pre-seeded items."""
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        """Return the stored value for ``key``."""
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``."""
        self._items[key] = value

    def keys(self) -> list[str]:
        """List the keys currently held."""
        return list(self._items)


class JsonFileStore:
    """Store every key as a string entry of a single JSON object on disk.

    The whole file is rewritten on each ``set_item`` through a temporary
    sibling file and ``os.replace`` so that a crash never leaves a half
    written document behind.
    """

    def __init__(self, path: Path) -> None:
        """Bind the store to ``path``; the file is created on first write."""
        self.path = path
        self._items: dict[str, str] | None = None

    def get_item(self, key: str) -> str | None:
        """Return the stored value for ``key``."""
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key`` and rewrite the backing file."""
        items = dict(self._load())
        items[key] = value
        self._write(items)
        self._items = items

    def _load(self) -> dict[str, str]:
        if self._items is not None:
            return self._items
        if not self.path.exists():
            self._items = {}
            return self._items
        try:
            raw_text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            msg = f"Unable to read store at {self.path}: {exc}"
            raise StorageError(msg) from exc
        try:
            payload = json.loads(raw_text) if raw_text.strip() else {}
        except json.JSONDecodeError as exc:
            LOGGER.warning("Store at %s is not valid JSON (%s); starting empty", self.path, exc)
            payload = {}
        if not isinstance(payload, dict):
            LOGGER.warning("Store at %s is not a JSON object; starting empty", self.path)
            payload = {}
        self._items = {str(k): v for k, v in payload.items() if isinstance(v, str)}
        return self._items

    def _write(self, items: dict[str, str]) -> None:
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(items, ensure_ascii=False, indent=2), encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as exc:
            msg = f"Unable to write store at {self.path}: {exc}"
            raise StorageError(msg) from exc
        LOGGER.debug("Wrote %d keys to %s", len(items), self.path)
