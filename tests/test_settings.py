"""Tests for theme and layout preferences."""

from __future__ import annotations

import json

from bookmark_keeper.config import LAYOUT_STORAGE_KEY, THEME_STORAGE_KEY
from bookmark_keeper.settings import (
    LayoutSettings,
    SettingsStore,
    ThemeSettings,
    hex_to_rgb,
    resolve_theme,
)
from bookmark_keeper.storage import MemoryStore


def test_defaults_when_nothing_stored() -> None:
    settings = SettingsStore(MemoryStore())
    if settings.load_theme() != ThemeSettings():
        raise AssertionError("Empty store should give default theme")
    if settings.load_layout().bookmarks_per_row != 3:
        raise AssertionError("Default layout should have three bookmarks per row")


def test_stored_values_merge_over_defaults() -> None:
    store = MemoryStore({THEME_STORAGE_KEY: json.dumps({"darkMode": True, "legacyKey": 1})})
    theme = SettingsStore(store).load_theme()
    if not theme.dark_mode:
        raise AssertionError("Stored value should win")
    if theme.color_scheme != "ocean" or theme.wallpaper_blur != 5:
        raise AssertionError("Missing keys should come from defaults")


def test_invalid_stored_values_fall_back() -> None:
    store = MemoryStore(
        {
            THEME_STORAGE_KEY: json.dumps({"colorScheme": "neon"}),
            LAYOUT_STORAGE_KEY: "][",
        },
    )
    settings = SettingsStore(store)
    if settings.load_theme().color_scheme != "ocean":
        raise AssertionError("Unknown scheme should fall back to defaults")
    if settings.load_layout() != LayoutSettings():
        raise AssertionError("Corrupt layout should fall back to defaults")


def test_save_and_reload() -> None:
    store = MemoryStore()
    settings = SettingsStore(store)
    theme = ThemeSettings(color_scheme="forest", use_system_theme=False, dark_mode=True)
    if not settings.save_theme(theme):
        raise AssertionError("Save should succeed")
    if json.loads(store.get_item(THEME_STORAGE_KEY) or "{}")["colorScheme"] != "forest":
        raise AssertionError("Theme should be stored with camelCase keys")
    if settings.load_theme() != theme:
        raise AssertionError("Reloaded theme should match what was saved")


def test_resolve_theme() -> None:
    light = resolve_theme(ThemeSettings(use_system_theme=False))
    if light["--primary-color"] != "#1a73e8" or light["color-scheme"] != "light":
        raise AssertionError("Ocean light palette expected")
    if light["--primary-color-rgb"] != "26, 115, 232":
        raise AssertionError("RGB triple not computed")
    if "--wallpaper-url" in light:
        raise AssertionError("No wallpaper variables without a wallpaper")

    dark = resolve_theme(
        ThemeSettings(color_scheme="sunset", custom_wallpaper="bg.png", wallpaper_blur=8),
        system_dark=True,
    )
    if dark["--primary-color"] != "#ff9b44" or dark["color-scheme"] != "dark":
        raise AssertionError("System dark mode should select the dark palette")
    if dark["--wallpaper-url"] != "url(bg.png)" or dark["--wallpaper-blur"] != "8px":
        raise AssertionError("Wallpaper variables missing")


def test_hex_to_rgb() -> None:
    if hex_to_rgb("#ff6b6b") != (255, 107, 107) or hex_to_rgb("42b883") != (66, 184, 131):
        raise AssertionError("Hex conversion failed")
    if hex_to_rgb("red") is not None:
        raise AssertionError("Invalid colours should give None")
