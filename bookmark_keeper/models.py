"""Data models for bookmarks, categories and their serialised forms."""

from __future__ import annotations

import time
import uuid
from typing import TYPE_CHECKING, Any

from attrs import Factory, define
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Iterator


def new_id() -> str:
    """Mint an opaque unique identifier."""
    return str(uuid.uuid4())


def now_millis() -> int:
    """Current wall clock as integer epoch milliseconds."""
    return int(time.time() * 1000)


class Bookmark(BaseModel):
    """A saved link owned by a category.

    Attributes use snake_case; the persisted and exported JSON uses the
    camelCase aliases (``categoryId``, ``createdAt``).
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str = ""
    url: str = ""
    category_id: str = Field(default="", alias="categoryId")
    created_at: int = Field(alias="createdAt")

    def to_json_dict(self) -> dict[str, Any]:
        """Return the camelCase mapping used in storage and exports."""
        return self.model_dump(by_alias=True)


class Category(BaseModel):
    """A named folder; ``parent_id`` of None marks a root."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = ""
    parent_id: str | None = Field(default=None, alias="parentId")
    created_at: int = Field(alias="createdAt")

    @field_validator("parent_id", mode="before")
    @classmethod
    def _blank_parent_is_root(cls, value: object) -> object:
        return None if value == "" else value

    def to_json_dict(self) -> dict[str, Any]:
        """Return the camelCase mapping used in storage and exports."""
        return self.model_dump(by_alias=True)


BOOKMARK_LIST = TypeAdapter(list[Bookmark])
CATEGORY_LIST = TypeAdapter(list[Category])


class BookmarkCollection(BaseModel):
    """Both collections together: the JSON export payload and the codec output."""

    bookmarks: list[Bookmark] = Field(default_factory=list)
    categories: list[Category] = Field(default_factory=list)

    def to_json_dict(self) -> dict[str, list[dict[str, Any]]]:
        """Return the ``{bookmarks, categories}`` mapping written to JSON exports."""
        return {
            "bookmarks": [b.to_json_dict() for b in self.bookmarks],
            "categories": [c.to_json_dict() for c in self.categories],
        }


@define(slots=True)
class CategoryTreeNode:
    """Category plus its children, used when rendering the folder tree."""

    category: Category
    children: list[CategoryTreeNode] = Factory(list)
    bookmark_count: int = 0

    def walk(self, depth: int = 0) -> Iterator[tuple[int, CategoryTreeNode]]:
        """Yield ``(depth, node)`` pairs in depth-first, pre-order."""
        yield depth, self
        for child in self.children:
            yield from child.walk(depth + 1)
