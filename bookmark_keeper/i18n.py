"""User-facing strings keyed by flat dotted ids, in Chinese and English."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from .config import LANGUAGE_STORAGE_KEY
from .storage import StorageError

if TYPE_CHECKING:  # pragma: no cover
    from .storage import KeyValueStore

LOGGER = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "cn"

TRANSLATIONS: dict[str, dict[str, str]] = {
    "cn": {
        "app.title": "书签管理器",
        "nav.categories": "分类",
        "nav.all_bookmarks": "全部书签",
        "bookmark.title": "标题",
        "bookmark.url": "网址",
        "bookmark.category": "分类",
        "bookmark.added": "已添加书签",
        "bookmark.updated": "已更新书签",
        "bookmark.deleted": "已删除书签",
        "bookmark.not_found": "未找到书签",
        "bookmark.noCategory": "无分类",
        "category.added": "已添加分类",
        "category.updated": "已更新分类",
        "category.deleted": "已删除分类",
        "category.not_found": "未找到分类",
        "category.delete_error": "删除分类失败",
        "category.has_children": "该分类包含子分类，无法删除",
        "category.last_category": "至少需要保留一个分类",
        "category.cycle": "不能将分类移动到其子分类下",
        "settings.importSuccess": "导入成功",
        "settings.importError": "导入失败",
        "export.success": "导出成功",
        "export.error": "导出失败",
        "storage.error": "无法保存到本地存储",
        "theme.title": "主题模式",
        "theme.light_mode": "浅色模式",
        "theme.dark_mode": "深色模式",
        "theme.system": "跟随系统",
        "theme.colorScheme": "配色方案",
        "theme.wallpaperBlur": "模糊效果",
        "language.title": "语言",
        "language.cn": "中文",
        "language.en": "英文",
        "common.no_data": "暂无数据",
    },
    "en": {
        "app.title": "Bookmark Manager",
        "nav.categories": "Categories",
        "nav.all_bookmarks": "All Bookmarks",
        "bookmark.title": "Title",
        "bookmark.url": "URL",
        "bookmark.category": "Category",
        "bookmark.added": "Bookmark added",
        "bookmark.updated": "Bookmark updated",
        "bookmark.deleted": "Bookmark deleted",
        "bookmark.not_found": "Bookmark not found",
        "bookmark.noCategory": "No Category",
        "category.added": "Category added",
        "category.updated": "Category updated",
        "category.deleted": "Category deleted",
        "category.not_found": "Category not found",
        "category.delete_error": "Failed to delete category",
        "category.has_children": "Category has subcategories and cannot be deleted",
        "category.last_category": "At least one category must remain",
        "category.cycle": "A category cannot be moved under its own subcategory",
        "settings.importSuccess": "Import Successful",
        "settings.importError": "Import Failed",
        "export.success": "Export Successful",
        "export.error": "Export Failed",
        "storage.error": "Could not write to local storage",
        "theme.title": "Theme Mode",
        "theme.light_mode": "Light Mode",
        "theme.dark_mode": "Dark Mode",
        "theme.system": "System Theme",
        "theme.colorScheme": "Color Scheme",
        "theme.wallpaperBlur": "Blur Effect",
        "language.title": "Language",
        "language.cn": "Chinese",
        "language.en": "English",
        "common.no_data": "No Data",
    },
}


class Translator:
    """Resolve string ids for the current language, persisting the choice."""

    def __init__(self, store: KeyValueStore) -> None:
        """Load the saved language from ``store`` (Chinese when unset)."""
        self._store = store
        self.language = self._load()

    def translate(self, key: str) -> str:
        """Return the string for ``key``, or ``key`` itself when it is unknown."""
        text = TRANSLATIONS.get(self.language, {}).get(key)
        if text:
            return text
        LOGGER.warning("Missing translation for %r (%s)", key, self.language)
        return key

    t = translate

    def set_language(self, language: str) -> None:
        """Switch to ``language`` and save it."""
        if language not in TRANSLATIONS:
            msg = f"Unsupported language: {language!r} (expected one of {sorted(TRANSLATIONS)})"
            raise ValueError(msg)
        self.language = language
        try:
            self._store.set_item(LANGUAGE_STORAGE_KEY, json.dumps(language))
        except StorageError as exc:
            LOGGER.warning("Unable to save language preference: %s", exc)

    def toggle_language(self) -> str:
        """Flip between Chinese and English; returns the new language."""
        self.set_language("en" if self.language == "cn" else "cn")
        return self.language

    def _load(self) -> str:
        try:
            raw_text = self._store.get_item(LANGUAGE_STORAGE_KEY)
            language = json.loads(raw_text) if raw_text else DEFAULT_LANGUAGE
        except (StorageError, json.JSONDecodeError) as exc:
            LOGGER.warning("Unable to load language preference (%s)", exc)
            return DEFAULT_LANGUAGE
        if not isinstance(language, str) or language not in TRANSLATIONS:
            LOGGER.warning("Ignoring unknown stored language %r", language)
            return DEFAULT_LANGUAGE
        return language
