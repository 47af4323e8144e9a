"""Shared pytest fixtures for bookmark keeper tests."""

from __future__ import annotations

import itertools
from typing import TYPE_CHECKING

import pytest

from bookmark_keeper.repository import BookmarkRepository
from bookmark_keeper.storage import MemoryStore, StorageError

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


SAMPLE_EXPORT = """<!DOCTYPE NETSCAPE-Bookmark-file-1>
<!-- This is an automatically generated file.
     It will be read and overwritten.
     DO NOT EDIT! -->
<META HTTP-EQUIV="Content-Type" CONTENT="text/html; charset=UTF-8">
<TITLE>Bookmarks</TITLE>
<H1>Bookmarks</H1>
<DL><p>
    <DT><H3 ADD_DATE="1700000000">Work</H3>
    <DL><p>
        <DT><A HREF="https://example.com" ADD_DATE="1700000000">Example</A>
    </DL><p>
    <DT><A HREF="https://home.test">Home</A>
</DL><p>
"""


class FlakyStore(MemoryStore):
    """Memory store whose writes can be switched off to simulate a full disk."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_writes = False

    def set_item(self, key: str, value: str) -> None:
        if self.fail_writes:
            msg = "quota exceeded"
            raise StorageError(msg)
        super().set_item(key, value)


@pytest.fixture
def clock() -> Callable[[], int]:
    """Monotonic fake clock returning 1000, 2000, 3000, ..."""
    ticks = itertools.count(1)
    return lambda: next(ticks) * 1000


@pytest.fixture
def id_factory() -> Callable[[], str]:
    """Deterministic ids: id-1, id-2, ..."""
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def store() -> FlakyStore:
    """Empty store that can be told to fail."""
    return FlakyStore()


@pytest.fixture
def repo(
    store: FlakyStore, clock: Callable[[], int], id_factory: Callable[[], str],
) -> BookmarkRepository:
    """Freshly initialised repository holding only the default category."""
    return BookmarkRepository(store, clock=clock, id_factory=id_factory).load()


@pytest.fixture
def sample_export_html(tmp_path: Path) -> Path:
    """Write the sample bookmark export to disk."""
    p = tmp_path / "bookmarks.html"
    p.write_text(SAMPLE_EXPORT, encoding="utf-8")
    return p


@pytest.fixture
def sample_export() -> str:
    """Netscape export with a "Work" folder holding one link, plus one top-level link."""
    return SAMPLE_EXPORT
