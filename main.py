"""CLI entry point for bookmark keeper.

Manages bookmarks and categories in a local JSON store, imports and exports
browser bookmark HTML or JSON, and edits theme and language preferences.
Each subcommand maps onto one handler that talks to the repository.
"""

from __future__ import annotations

# Standard library imports (alphabetical within groups)
import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING

# Third-party imports
from dotenv import load_dotenv

# Internal imports
from bookmark_keeper.config import DEFAULT_STORE_PATH, STORE_ENV_VAR
from bookmark_keeper.favicon import extract_domain
from bookmark_keeper.html_writer import write_bookmark_html
from bookmark_keeper.i18n import TRANSLATIONS, Translator
from bookmark_keeper.parser import is_bookmark_file
from bookmark_keeper.repository import BookmarkRepository, Outcome
from bookmark_keeper.settings import SettingsStore, resolve_theme
from bookmark_keeper.storage import JsonFileStore

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Callable, Sequence

    from bookmark_keeper.models import Bookmark

OUTCOME_MESSAGES: dict[Outcome, str] = {
    Outcome.HAS_CHILDREN: "category.has_children",
    Outcome.LAST_CATEGORY: "category.last_category",
    Outcome.INVALID_PAYLOAD: "settings.importError",
    Outcome.STORAGE_ERROR: "storage.error",
}


class App:
    """Collaborators shared by every subcommand handler."""

    def __init__(self, store_path: Path) -> None:
        """Open the store at ``store_path`` and load the repository from it."""
        store = JsonFileStore(store_path)
        self.repository = BookmarkRepository(store).load()
        self.settings = SettingsStore(store)
        self.translator = Translator(store)

    def t(self, key: str) -> str:
        """Translate ``key`` in the current language."""
        return self.translator.translate(key)

    def report(self, outcome: Outcome, success_key: str, not_found_key: str) -> int:
        """Print the localised result of ``outcome`` and return an exit status."""
        if outcome:
            print(self.t(success_key))
            return 0
        key = not_found_key if outcome is Outcome.NOT_FOUND else OUTCOME_MESSAGES[outcome]
        print(self.t(key), file=sys.stderr)
        return 1


def configure_logging(*, verbose: bool) -> None:
    """Configure root logging (debug when verbose, warnings otherwise)."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def _resolve_store(path_arg: str | None) -> Path:
    resolved = path_arg or os.getenv(STORE_ENV_VAR)
    return Path(resolved).expanduser() if resolved else DEFAULT_STORE_PATH


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Organise bookmarks into nested categories")
    parser.add_argument(
        "--store",
        help=f"Path to the JSON store (default: ${STORE_ENV_VAR} or {DEFAULT_STORE_PATH})",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("list", help="List bookmarks, newest first")
    p.add_argument("--category", help="Only bookmarks in this category id")
    p.add_argument("--json", action="store_true", help="Emit JSON")
    p.set_defaults(handler=_handle_list)

    p = sub.add_parser("search", help="Find bookmarks by title or url")
    p.add_argument("query")
    p.set_defaults(handler=_handle_search)

    p = sub.add_parser("add", help="Add a bookmark")
    p.add_argument("url")
    p.add_argument("--title", help="Title (defaults to the url's host)")
    p.add_argument("--category", help="Category id (defaults to the first category)")
    p.set_defaults(handler=_handle_add)

    p = sub.add_parser("edit", help="Change a bookmark")
    p.add_argument("id")
    p.add_argument("--title")
    p.add_argument("--url")
    p.add_argument("--category")
    p.set_defaults(handler=_handle_edit)

    p = sub.add_parser("rm", help="Delete a bookmark")
    p.add_argument("id")
    p.set_defaults(handler=_handle_rm)

    p = sub.add_parser("tree", help="Show the category tree")
    p.set_defaults(handler=_handle_tree)

    p = sub.add_parser("category-add", help="Add a category")
    p.add_argument("name")
    p.add_argument("--parent", help="Parent category id")
    p.set_defaults(handler=_handle_category_add)

    p = sub.add_parser("category-edit", help="Rename or move a category")
    p.add_argument("id")
    p.add_argument("--name")
    p.add_argument("--parent", help="New parent id ('' makes it a root)")
    p.set_defaults(handler=_handle_category_edit)

    p = sub.add_parser("category-rm", help="Delete a category without subcategories")
    p.add_argument("id")
    p.set_defaults(handler=_handle_category_rm)

    p = sub.add_parser("import", help="Replace all data with an HTML or JSON export")
    p.add_argument("file", type=Path)
    p.set_defaults(handler=_handle_import)

    p = sub.add_parser("export", help="Write all data to a file")
    p.add_argument("file", type=Path)
    p.add_argument("--format", choices=("html", "json"), default="html")
    p.set_defaults(handler=_handle_export)

    p = sub.add_parser("theme", help="Show or change theme settings")
    mode = p.add_mutually_exclusive_group()
    mode.add_argument("--dark", action="store_true", help="Force dark mode")
    mode.add_argument("--light", action="store_true", help="Force light mode")
    mode.add_argument("--system", action="store_true", help="Follow the system theme")
    p.add_argument("--scheme", choices=("ocean", "sunset", "forest"))
    p.add_argument("--blur", type=int)
    p.add_argument("--wallpaper", help="Wallpaper image url ('' removes it)")
    p.set_defaults(handler=_handle_theme)

    p = sub.add_parser("language", help="Show or change the interface language")
    p.add_argument("language", nargs="?", choices=sorted(TRANSLATIONS))
    p.set_defaults(handler=_handle_language)
    return parser


def _format_bookmark(app: App, bookmark: Bookmark) -> str:
    category = app.repository.get_category(bookmark.category_id)
    folder = category.name if category else app.t("bookmark.noCategory")
    return f"{bookmark.id}  [{folder}] {bookmark.title} <{bookmark.url}>"


def _print_bookmarks(app: App, bookmarks: list[Bookmark], *, as_json: bool = False) -> None:
    if as_json:
        print(json.dumps([b.to_json_dict() for b in bookmarks], ensure_ascii=False))
        return
    if not bookmarks:
        print(app.t("common.no_data"))
    for bookmark in bookmarks:
        print(_format_bookmark(app, bookmark))


def _handle_list(app: App, args: argparse.Namespace) -> int:
    if args.category:
        bookmarks = app.repository.bookmarks_in_category(args.category)
    else:
        bookmarks = app.repository.all_bookmarks()
    _print_bookmarks(app, bookmarks, as_json=args.json)
    return 0


def _handle_search(app: App, args: argparse.Namespace) -> int:
    _print_bookmarks(app, app.repository.search_bookmarks(args.query))
    return 0


def _handle_add(app: App, args: argparse.Namespace) -> int:
    category_id = args.category or app.repository.default_category_id()
    if app.repository.get_category(category_id) is None:
        print(app.t("category.not_found"), file=sys.stderr)
        return 1
    title = args.title or extract_domain(args.url)
    bookmark = app.repository.add_bookmark(title=title, url=args.url, category_id=category_id)
    if bookmark is None:
        print(app.t("storage.error"), file=sys.stderr)
        return 1
    print(f"{app.t('bookmark.added')}: {bookmark.id}")
    return 0


def _handle_edit(app: App, args: argparse.Namespace) -> int:
    fields = {
        key: value
        for key, value in (("title", args.title), ("url", args.url), ("category_id", args.category))
        if value is not None
    }
    if "category_id" in fields and app.repository.get_category(fields["category_id"]) is None:
        print(app.t("category.not_found"), file=sys.stderr)
        return 1
    outcome = app.repository.update_bookmark(args.id, **fields)
    return app.report(outcome, "bookmark.updated", "bookmark.not_found")


def _handle_rm(app: App, args: argparse.Namespace) -> int:
    outcome = app.repository.delete_bookmark(args.id)
    return app.report(outcome, "bookmark.deleted", "bookmark.not_found")


def _handle_tree(app: App, _args: argparse.Namespace) -> int:
    for root in app.repository.category_tree():
        for depth, node in root.walk():
            indent = "  " * depth
            print(f"{indent}{node.category.name} ({node.bookmark_count})  {node.category.id}")
    return 0


def _handle_category_add(app: App, args: argparse.Namespace) -> int:
    if args.parent and app.repository.get_category(args.parent) is None:
        print(app.t("category.not_found"), file=sys.stderr)
        return 1
    category = app.repository.add_category(name=args.name, parent_id=args.parent or None)
    if category is None:
        print(app.t("storage.error"), file=sys.stderr)
        return 1
    print(f"{app.t('category.added')}: {category.id}")
    return 0


def _would_cycle(app: App, category_id: str, parent_id: str) -> bool:
    return any(c.id == category_id for c in app.repository.category_path(parent_id))


def _handle_category_edit(app: App, args: argparse.Namespace) -> int:
    fields: dict[str, str | None] = {}
    if args.name is not None:
        fields["name"] = args.name
    if args.parent is not None:
        parent_id = args.parent or None
        if parent_id is not None:
            if app.repository.get_category(parent_id) is None:
                print(app.t("category.not_found"), file=sys.stderr)
                return 1
            if _would_cycle(app, args.id, parent_id):
                print(app.t("category.cycle"), file=sys.stderr)
                return 1
        fields["parent_id"] = parent_id
    outcome = app.repository.update_category(args.id, **fields)
    return app.report(outcome, "category.updated", "category.not_found")


def _handle_category_rm(app: App, args: argparse.Namespace) -> int:
    outcome = app.repository.delete_category(args.id)
    return app.report(outcome, "category.deleted", "category.not_found")


def _handle_import(app: App, args: argparse.Namespace) -> int:
    try:
        text = args.file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        print(f"{app.t('settings.importError')}: {exc}", file=sys.stderr)
        return 1
    if is_bookmark_file(text):
        outcome = app.repository.import_html(text)
    else:
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            logging.getLogger("bookmark_keeper").warning("Import file is not JSON: %s", exc)
            outcome = Outcome.INVALID_PAYLOAD
        else:
            outcome = app.repository.import_data(payload)
    return app.report(outcome, "settings.importSuccess", "settings.importError")


def _handle_export(app: App, args: argparse.Namespace) -> int:
    data = app.repository.export_data()
    try:
        if args.format == "html":
            write_bookmark_html(data, args.file)
        else:
            args.file.write_text(
                json.dumps(data.to_json_dict(), ensure_ascii=False, indent=2) + "\n",
                encoding="utf-8",
            )
    except OSError as exc:
        print(f"{app.t('export.error')}: {exc}", file=sys.stderr)
        return 1
    print(app.t("export.success"))
    return 0


def _handle_theme(app: App, args: argparse.Namespace) -> int:
    theme = app.settings.load_theme()
    if args.system:
        theme.use_system_theme = True
    elif args.dark or args.light:
        theme.use_system_theme = False
        theme.dark_mode = bool(args.dark)
    if args.scheme is not None:
        theme.color_scheme = args.scheme
    if args.blur is not None:
        theme.wallpaper_blur = max(0, args.blur)
    if args.wallpaper is not None:
        theme.custom_wallpaper = args.wallpaper
    changed = theme != app.settings.load_theme()
    if changed and not app.settings.save_theme(theme):
        print(app.t("storage.error"), file=sys.stderr)
        return 1
    print(json.dumps(theme.model_dump(by_alias=True), ensure_ascii=False))
    for name, value in resolve_theme(theme).items():
        print(f"{name}: {value}")
    return 0


def _handle_language(app: App, args: argparse.Namespace) -> int:
    if args.language:
        app.translator.set_language(args.language)
    print(f"{app.t('language.title')}: {app.t('language.' + app.translator.language)}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the bookmark keeper CLI."""
    load_dotenv()
    args = _build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose)
    app = App(_resolve_store(args.store))
    handler: Callable[[App, argparse.Namespace], int] = args.handler
    return handler(app, args)


if __name__ == "__main__":
    sys.exit(main())
