"""Functions for rendering bookmarks as Netscape bookmark HTML."""

from __future__ import annotations

import html
import logging
from collections import defaultdict
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from pathlib import Path

    from .models import Bookmark, BookmarkCollection, Category

LOGGER = logging.getLogger(__name__)

HTML_HEADER = """<!DOCTYPE NETSCAPE-Bookmark-file-1>
<!-- This is an automatically generated file.
     It will be read and overwritten.
     DO NOT EDIT! -->
<META HTTP-EQUIV="Content-Type" CONTENT="text/html; charset=UTF-8">
<TITLE>Bookmarks</TITLE>
<H1>Bookmarks</H1>
"""

INDENT = "    "

# Bookmarks whose category could not be resolved carry this id.
UNCATEGORISED_ID = ""


def escape_html(text: str) -> str:
    """Escape &, <, >, " and ' (in that order) for safe embedding in markup."""
    return html.escape(text, quote=True).replace("&#x27;", "&#039;")


def render_html(collection: BookmarkCollection) -> str:
    """Render both collections as a bookmark file browsers can import."""
    by_category: dict[str, list[Bookmark]] = defaultdict(list)
    for bookmark in collection.bookmarks:
        by_category[bookmark.category_id].append(bookmark)

    lines: list[str] = [HTML_HEADER.strip(), "<DL><p>"]
    _render_level(collection.categories, by_category, None, lines, 1)
    lines.append("</DL><p>")
    return "\n".join(lines)


def _render_level(
    categories: list[Category],
    by_category: dict[str, list[Bookmark]],
    parent_id: str | None,
    output: list[str],
    depth: int,
) -> None:
    indent = INDENT * depth
    for category in categories:
        if category.parent_id != parent_id:
            continue
        output.append(f"{indent}<DT><H3>{escape_html(category.name)}</H3>")
        output.append(f"{indent}<DL><p>")
        for bookmark in by_category.get(category.id, []):
            output.append(_link_line(bookmark, depth + 1))
        _render_level(categories, by_category, category.id, output, depth + 1)
        output.append(f"{indent}</DL><p>")

    if parent_id is None:
        for bookmark in by_category.get(UNCATEGORISED_ID, []):
            output.append(_link_line(bookmark, depth))


def _link_line(bookmark: Bookmark, depth: int) -> str:
    href = escape_html(bookmark.url)
    title = escape_html(bookmark.title)
    return f'{INDENT * depth}<DT><A HREF="{href}">{title}</A>'


def write_bookmark_html(collection: BookmarkCollection, output_path: Path) -> None:
    """Write the bookmarks to an HTML file."""
    html_text = render_html(collection)
    output_path.write_text(html_text + "\n", encoding="utf-8")
    LOGGER.info("Wrote %d bookmarks to %s", len(collection.bookmarks), output_path)
