"""Bookmark and category repository: the single owner of both collections.

Every mutating operation follows the same sequence: validate, mutate the
in-memory lists, persist. When persisting fails the in-memory lists are
restored to their previous state, so memory and storage never diverge.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from .config import BOOKMARKS_STORAGE_KEY, CATEGORIES_STORAGE_KEY, DEFAULT_CATEGORY_NAME
from .html_writer import render_html
from .models import (
    BOOKMARK_LIST,
    CATEGORY_LIST,
    Bookmark,
    BookmarkCollection,
    Category,
    CategoryTreeNode,
    new_id,
    now_millis,
)
from .parser import is_bookmark_file, parse_bookmark_html
from .storage import StorageError

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Callable

    from pydantic import TypeAdapter

    from .storage import KeyValueStore

LOGGER = logging.getLogger(__name__)

_BOOKMARK_FIELDS = frozenset({"title", "url", "category_id"})
_CATEGORY_FIELDS = frozenset({"name", "parent_id"})


class Outcome(str, Enum):
    """Result of a mutating repository operation. Only OK is truthy."""

    OK = "ok"
    NOT_FOUND = "not-found"
    HAS_CHILDREN = "has-children"
    LAST_CATEGORY = "last-category"
    INVALID_PAYLOAD = "invalid-payload"
    STORAGE_ERROR = "storage-error"

    def __bool__(self) -> bool:
        return self is Outcome.OK


class BookmarkRepository:
    """In-memory bookmarks and categories, persisted to a key-value store."""

    def __init__(
        self,
        store: KeyValueStore,
        clock: Callable[[], int] = now_millis,
        id_factory: Callable[[], str] = new_id,
    ) -> None:
        """Bind the repository to ``store``; call ``load`` before use."""
        self._store = store
        self._clock = clock
        self._id_factory = id_factory
        self._bookmarks: list[Bookmark] = []
        self._categories: list[Category] = []

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------
    def load(self) -> BookmarkRepository:
        """Load both collections, synthesising the default category if needed."""
        self._bookmarks = self._read(BOOKMARKS_STORAGE_KEY, BOOKMARK_LIST)
        self._categories = self._read(CATEGORIES_STORAGE_KEY, CATEGORY_LIST)
        if not self._categories:
            self._categories.append(self._default_category())
            if not self._persist(categories=True):
                LOGGER.warning("Default category could not be persisted; kept in memory only")
        LOGGER.debug(
            "Loaded %d bookmarks and %d categories",
            len(self._bookmarks),
            len(self._categories),
        )
        return self

    def flush(self) -> Outcome:
        """Write both collections to the store again."""
        if self._persist(bookmarks=True, categories=True):
            return Outcome.OK
        return Outcome.STORAGE_ERROR

    @property
    def bookmarks(self) -> list[Bookmark]:
        """Snapshot of the bookmark collection in stored order."""
        return [b.model_copy() for b in self._bookmarks]

    @property
    def categories(self) -> list[Category]:
        """Snapshot of the category collection in stored order."""
        return [c.model_copy() for c in self._categories]

    # ------------------------------------------------------------------
    # bookmarks
    # ------------------------------------------------------------------
    def add_bookmark(self, title: str, url: str, category_id: str) -> Bookmark | None:
        """Create a bookmark; returns None only when it could not be persisted."""
        bookmark = Bookmark(
            id=self._id_factory(),
            title=title,
            url=url,
            category_id=category_id,
            created_at=self._clock(),
        )
        with self._transaction() as txn:
            self._bookmarks.append(bookmark)
            txn.commit(bookmarks=True)
        if not txn.ok:
            return None
        LOGGER.info("Added bookmark %s (%s)", bookmark.id, bookmark.url)
        return bookmark.model_copy()

    def update_bookmark(self, bookmark_id: str, **fields: Any) -> Outcome:
        """Merge ``fields`` (title, url, category_id) into an existing bookmark."""
        index = _index_of(self._bookmarks, bookmark_id)
        if index is None:
            return Outcome.NOT_FOUND
        changes = {k: v for k, v in fields.items() if k in _BOOKMARK_FIELDS}
        try:
            updated = Bookmark.model_validate({**self._bookmarks[index].model_dump(), **changes})
        except ValidationError as exc:
            LOGGER.warning("Rejected update of bookmark %s: %s", bookmark_id, exc)
            return Outcome.INVALID_PAYLOAD
        with self._transaction() as txn:
            self._bookmarks[index] = updated
            txn.commit(bookmarks=True)
        return txn.outcome

    def delete_bookmark(self, bookmark_id: str) -> Outcome:
        """Remove a bookmark by id."""
        index = _index_of(self._bookmarks, bookmark_id)
        if index is None:
            return Outcome.NOT_FOUND
        with self._transaction() as txn:
            del self._bookmarks[index]
            txn.commit(bookmarks=True)
        return txn.outcome

    # ------------------------------------------------------------------
    # categories
    # ------------------------------------------------------------------
    def add_category(self, name: str, parent_id: str | None = None) -> Category | None:
        """Create a category; returns None only when it could not be persisted."""
        category = Category(
            id=self._id_factory(),
            name=name,
            parent_id=parent_id,
            created_at=self._clock(),
        )
        with self._transaction() as txn:
            self._categories.append(category)
            txn.commit(categories=True)
        if not txn.ok:
            return None
        LOGGER.info("Added category %s (%s)", category.id, category.name)
        return category.model_copy()

    def update_category(self, category_id: str, **fields: Any) -> Outcome:
        """Merge ``fields`` (name, parent_id) into an existing category.

        Parent chains are not checked for cycles here.
        """
        index = _index_of(self._categories, category_id)
        if index is None:
            return Outcome.NOT_FOUND
        changes = {k: v for k, v in fields.items() if k in _CATEGORY_FIELDS}
        try:
            updated = Category.model_validate({**self._categories[index].model_dump(), **changes})
        except ValidationError as exc:
            LOGGER.warning("Rejected update of category %s: %s", category_id, exc)
            return Outcome.INVALID_PAYLOAD
        with self._transaction() as txn:
            self._categories[index] = updated
            txn.commit(categories=True)
        return txn.outcome

    def delete_category(self, category_id: str) -> Outcome:
        """Delete a leaf category, moving its bookmarks to the fallback category."""
        if any(c.parent_id == category_id for c in self._categories):
            return Outcome.HAS_CHILDREN
        if len(self._categories) <= 1:
            return Outcome.LAST_CATEGORY
        index = _index_of(self._categories, category_id)
        if index is None:
            return Outcome.NOT_FOUND

        fallback_id = next(c.id for c in self._categories if c.id != category_id)
        with self._transaction() as txn:
            moved = 0
            for pos, bookmark in enumerate(self._bookmarks):
                if bookmark.category_id == category_id:
                    self._bookmarks[pos] = bookmark.model_copy(update={"category_id": fallback_id})
                    moved += 1
            del self._categories[index]
            txn.commit(bookmarks=True, categories=True)
        if txn.ok:
            LOGGER.info(
                "Deleted category %s; moved %d bookmarks to %s", category_id, moved, fallback_id,
            )
        return txn.outcome

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------
    def all_bookmarks(self) -> list[Bookmark]:
        """Every bookmark, newest first."""
        return sorted(self.bookmarks, key=lambda b: b.created_at, reverse=True)

    def bookmarks_in_category(self, category_id: str) -> list[Bookmark]:
        """Bookmarks whose category id matches exactly, in stored order."""
        return [b.model_copy() for b in self._bookmarks if b.category_id == category_id]

    def get_bookmark(self, bookmark_id: str) -> Bookmark | None:
        """Look a bookmark up by id."""
        index = _index_of(self._bookmarks, bookmark_id)
        return None if index is None else self._bookmarks[index].model_copy()

    def search_bookmarks(self, query: str) -> list[Bookmark]:
        """Bookmarks whose title or url contains every term of ``query``."""
        terms = query.lower().split()
        return [
            b
            for b in self.all_bookmarks()
            if all(term in f"{b.title}\n{b.url}".lower() for term in terms)
        ]

    def get_category(self, category_id: str) -> Category | None:
        """Look a category up by id."""
        index = _index_of(self._categories, category_id)
        return None if index is None else self._categories[index].model_copy()

    def child_categories(self, parent_id: str | None) -> list[Category]:
        """Direct children of ``parent_id``; None selects the roots."""
        return [c.model_copy() for c in self._categories if c.parent_id == parent_id]

    def category_path(self, category_id: str) -> list[Category]:
        """Categories from the root down to ``category_id``.

        Stops at a missing parent, and at the first category already visited
        so a cyclic parent chain cannot loop forever.
        """
        by_id = {c.id: c for c in self._categories}
        path: list[Category] = []
        visited: set[str] = set()
        current = by_id.get(category_id)
        while current is not None and current.id not in visited:
            visited.add(current.id)
            path.insert(0, current.model_copy())
            if current.parent_id is None:
                break
            current = by_id.get(current.parent_id)
        return path

    def default_category_id(self) -> str:
        """Id of the first category, or an empty string if there is none."""
        return self._categories[0].id if self._categories else ""

    def category_tree(self) -> list[CategoryTreeNode]:
        """Forest of categories reachable from a root, with bookmark counts."""
        counts: dict[str, int] = {}
        for bookmark in self._bookmarks:
            counts[bookmark.category_id] = counts.get(bookmark.category_id, 0) + 1

        def _build(category: Category) -> CategoryTreeNode:
            return CategoryTreeNode(
                category=category.model_copy(),
                children=[
                    _build(child) for child in self._categories if child.parent_id == category.id
                ],
                bookmark_count=counts.get(category.id, 0),
            )

        return [_build(root) for root in self._categories if root.parent_id is None]

    # ------------------------------------------------------------------
    # import / export
    # ------------------------------------------------------------------
    def export_data(self) -> BookmarkCollection:
        """Both collections as one payload, suitable for a JSON export."""
        return BookmarkCollection(bookmarks=self.bookmarks, categories=self.categories)

    def import_data(self, data: BookmarkCollection | Mapping[str, Any]) -> Outcome:
        """Replace both collections with ``data``.

        ``data`` must provide ``bookmarks`` and ``categories`` lists; anything
        else is rejected without touching the current collections.
        """
        if isinstance(data, BookmarkCollection):
            bookmarks = [b.model_copy() for b in data.bookmarks]
            categories = [c.model_copy() for c in data.categories]
        else:
            raw_bookmarks = data.get("bookmarks") if isinstance(data, Mapping) else None
            raw_categories = data.get("categories") if isinstance(data, Mapping) else None
            if not isinstance(raw_bookmarks, list) or not isinstance(raw_categories, list):
                LOGGER.warning("Rejected import: bookmarks and categories must both be lists")
                return Outcome.INVALID_PAYLOAD
            try:
                bookmarks = BOOKMARK_LIST.validate_python(raw_bookmarks)
                categories = CATEGORY_LIST.validate_python(raw_categories)
            except ValidationError as exc:
                LOGGER.warning("Rejected import: %s", exc)
                return Outcome.INVALID_PAYLOAD

        if not categories:
            categories.append(self._default_category())

        with self._transaction() as txn:
            self._bookmarks = bookmarks
            self._categories = categories
            txn.commit(bookmarks=True, categories=True)
        if txn.ok:
            LOGGER.info(
                "Imported %d bookmarks and %d categories", len(bookmarks), len(categories),
            )
        return txn.outcome

    def import_html(self, html_text: str) -> Outcome:
        """Replace both collections with the contents of a bookmark HTML file."""
        if not is_bookmark_file(html_text):
            LOGGER.warning("Rejected import: text is not a bookmark HTML file")
            return Outcome.INVALID_PAYLOAD
        parsed = parse_bookmark_html(html_text, clock=self._clock, id_factory=self._id_factory)
        return self.import_data(parsed)

    def export_html(self) -> str:
        """Current collections rendered as bookmark HTML."""
        return render_html(self.export_data())

    # ------------------------------------------------------------------
    # persistence
    # ------------------------------------------------------------------
    def _default_category(self) -> Category:
        return Category(
            id=self._id_factory(),
            name=DEFAULT_CATEGORY_NAME,
            parent_id=None,
            created_at=self._clock(),
        )

    def _read(self, key: str, adapter: TypeAdapter[Any]) -> list[Any]:
        try:
            raw_text = self._store.get_item(key)
        except StorageError as exc:
            LOGGER.warning("Could not read %r from storage: %s", key, exc)
            return []
        if not raw_text:
            return []
        try:
            return list(adapter.validate_json(raw_text))
        except ValidationError as exc:
            LOGGER.warning("Discarding unreadable %r collection: %s", key, exc)
            return []

    def _persist(self, *, bookmarks: bool = False, categories: bool = False) -> bool:
        try:
            if bookmarks:
                self._store.set_item(BOOKMARKS_STORAGE_KEY, _dump(self._bookmarks))
            if categories:
                self._store.set_item(CATEGORIES_STORAGE_KEY, _dump(self._categories))
        except StorageError as exc:
            LOGGER.warning("Failed to persist collections: %s", exc)
            return False
        return True

    def _transaction(self) -> _Transaction:
        return _Transaction(self)


class _Transaction:
    """Snapshot the collections; restore them unless ``commit`` persists."""

    def __init__(self, repository: BookmarkRepository) -> None:
        self._repository = repository
        self._bookmarks = list(repository._bookmarks)
        self._categories = list(repository._categories)
        self.ok = False

    @property
    def outcome(self) -> Outcome:
        return Outcome.OK if self.ok else Outcome.STORAGE_ERROR

    def commit(self, *, bookmarks: bool = False, categories: bool = False) -> None:
        self.ok = self._repository._persist(bookmarks=bookmarks, categories=categories)

    def __enter__(self) -> _Transaction:
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        if self.ok:
            return
        self._repository._bookmarks = self._bookmarks
        self._repository._categories = self._categories
        # A partial write (bookmarks saved, categories not) is undone too.
        self._repository._persist(bookmarks=True, categories=True)


def _index_of(items: list[Bookmark] | list[Category], item_id: str) -> int | None:
    for index, item in enumerate(items):
        if item.id == item_id:
            return index
    return None


def _dump(items: list[Bookmark] | list[Category]) -> str:
    return json.dumps([item.to_json_dict() for item in items], ensure_ascii=False)
