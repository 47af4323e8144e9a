"""Global configuration constants for bookmark keeper."""

from __future__ import annotations

from pathlib import Path

# Storage keys. Each key holds one JSON document.
BOOKMARKS_STORAGE_KEY: str = "bookmarks"
CATEGORIES_STORAGE_KEY: str = "categories"
THEME_STORAGE_KEY: str = "browser-bookmarks-theme-settings"
LAYOUT_STORAGE_KEY: str = "bookmark-layout-settings"
LANGUAGE_STORAGE_KEY: str = "bookmark-language"

# Category synthesised whenever the collection would otherwise be empty.
DEFAULT_CATEGORY_NAME: str = "My Bookmarks"

# Names used by the HTML importer.
IMPORT_ROOT_NAME: str = "Imported Bookmarks"
UNTITLED_BOOKMARK: str = "Untitled Bookmark"
UNTITLED_FOLDER: str = "Untitled Folder"

# Environment variable overriding the on-disk store location.
STORE_ENV_VAR: str = "BOOKMARKS_STORE"
DEFAULT_STORE_PATH: Path = Path.home() / ".bookmark_keeper.json"

DEFAULT_BOOKMARKS_PER_ROW: int = 3
