"""Parse a Netscape bookmark file (browser HTML export) into categories and bookmarks."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from bs4 import BeautifulSoup, Tag

from .config import IMPORT_ROOT_NAME, UNTITLED_BOOKMARK, UNTITLED_FOLDER
from .models import Bookmark, BookmarkCollection, Category, new_id, now_millis

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Callable
    from pathlib import Path

LOGGER = logging.getLogger(__name__)

NETSCAPE_MARKER = "NETSCAPE-Bookmark-file-1"
_LIST_TAG = re.compile(r"<dl[\s>]", re.IGNORECASE)
_ITEM_TAG = re.compile(r"<dt[\s>]", re.IGNORECASE)


def is_bookmark_file(text: str) -> bool:
    """Cheap check for bookmark HTML: the Netscape marker, or both <DL> and <DT> tags."""
    if NETSCAPE_MARKER in text:
        return True
    return bool(_LIST_TAG.search(text) and _ITEM_TAG.search(text))


def parse_bookmark_file(html_path: Path) -> BookmarkCollection:
    """Read a bookmark export from disk and parse it."""
    LOGGER.debug("Parsing bookmark export from %s", html_path)
    return parse_bookmark_html(html_path.read_text(encoding="utf-8"))


def parse_bookmark_html(
    html_text: str,
    clock: Callable[[], int] = now_millis,
    id_factory: Callable[[], str] = new_id,
) -> BookmarkCollection:
    """Parse bookmark HTML into a fresh collection.

    A synthetic root category is always created first; top-level links are
    filed under it, and so is a top-level folder carrying the root's name,
    which earlier exports of an import produce. Other top-level folders
    become roots of their own. Every id is newly minted and every timestamp
    is the decode-time clock.
    """
    soup = BeautifulSoup(html_text, "html.parser")
    walker = _FolderWalker(clock=clock, id_factory=id_factory)
    walker.walk(soup)

    collection = walker.collection
    LOGGER.info(
        "Extracted %d bookmarks in %d categories",
        len(collection.bookmarks),
        len(collection.categories),
    )
    return collection


class _FolderWalker:
    """One pre-order pass over the parsed document.

    html.parser leaves <DT>, <DD> and <p> unclosed, so a folder's items and
    its nested <DL> can sit any number of levels below it. A <DL> belongs to
    the last <H3> seen since the most recent <DT>; links and headings belong
    to their nearest enclosing <DL>.
    """

    def __init__(self, clock: Callable[[], int], id_factory: Callable[[], str]) -> None:
        self._clock = clock
        self._id_factory = id_factory
        self.root = Category(
            id=id_factory(), name=IMPORT_ROOT_NAME, parent_id=None, created_at=clock(),
        )
        self.collection = BookmarkCollection(categories=[self.root])

    def walk(self, document: Tag) -> None:
        pending: Category | None = None
        # (node, inside a list, owning category id); explicit stack since
        # unclosed <DT> tags nest one level deeper per link.
        stack: list[tuple[Tag, bool, str | None]] = [(document, False, None)]
        while stack:
            node, in_list, owner = stack.pop()
            if node.name == "dl":
                if pending is not None:
                    owner = pending.id
                in_list, pending = True, None
            elif node.name == "dt":
                pending = None
            elif in_list and node.name == "a":
                self._add_bookmark(node, owner)
                continue
            elif in_list and node.name == "h3":
                pending = self._folder(node, owner)
                continue
            children = [child for child in node.children if isinstance(child, Tag)]
            stack.extend((child, in_list, owner) for child in reversed(children))

    def _add_bookmark(self, anchor: Tag, parent_id: str | None) -> None:
        href = anchor.get("href")
        self.collection.bookmarks.append(
            Bookmark(
                id=self._id_factory(),
                title=anchor.get_text(strip=True) or UNTITLED_BOOKMARK,
                url=href if isinstance(href, str) else "",
                category_id=parent_id or self.root.id,
                created_at=self._clock(),
            ),
        )

    def _folder(self, heading: Tag, parent_id: str | None) -> Category:
        name = heading.get_text(strip=True) or UNTITLED_FOLDER
        if parent_id is None and name == IMPORT_ROOT_NAME:
            return self.root
        category = Category(
            id=self._id_factory(),
            name=name,
            parent_id=parent_id,
            created_at=self._clock(),
        )
        self.collection.categories.append(category)
        return category
