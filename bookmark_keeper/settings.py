"""Theme and layout preferences: persisted presentation state."""

from __future__ import annotations

import json
import logging
import re
from typing import TYPE_CHECKING, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .config import DEFAULT_BOOKMARKS_PER_ROW, LAYOUT_STORAGE_KEY, THEME_STORAGE_KEY
from .storage import StorageError

if TYPE_CHECKING:  # pragma: no cover
    from .storage import KeyValueStore

LOGGER = logging.getLogger(__name__)

SettingsT = TypeVar("SettingsT", bound=BaseModel)

WallpaperPosition = Literal["cover", "contain", "100% 100%"]
ColorScheme = Literal["ocean", "sunset", "forest"]

DEFAULT_SCHEME = "ocean"

# Primary and danger colours per scheme and mode.
COLOR_SCHEMES: dict[str, dict[str, dict[str, str]]] = {
    "ocean": {
        "light": {"primary": "#1a73e8", "danger": "#e53935"},
        "dark": {"primary": "#4ecdc4", "danger": "#ff6b6b"},
    },
    "sunset": {
        "light": {"primary": "#f43b47", "danger": "#e53935"},
        "dark": {"primary": "#ff9b44", "danger": "#f43b47"},
    },
    "forest": {
        "light": {"primary": "#42b883", "danger": "#e53935"},
        "dark": {"primary": "#42b883", "danger": "#ff6b6b"},
    },
}

_HEX_COLOUR = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)


class ThemeSettings(BaseModel):
    """Theme preferences; stored with camelCase keys."""

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    dark_mode: bool = Field(default=False, alias="darkMode")
    use_system_theme: bool = Field(default=True, alias="useSystemTheme")
    custom_wallpaper: str = Field(default="", alias="customWallpaper")
    wallpaper_position: WallpaperPosition = Field(default="cover", alias="wallpaperPosition")
    wallpaper_blur: int = Field(default=5, ge=0, alias="wallpaperBlur")
    color_scheme: ColorScheme = Field(default="ocean", alias="colorScheme")

    def is_dark(self, *, system_dark: bool = False) -> bool:
        """Effective dark mode once the system preference is taken into account."""
        return system_dark if self.use_system_theme else self.dark_mode


class LayoutSettings(BaseModel):
    """Grid layout preferences."""

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    bookmarks_per_row: int = Field(
        default=DEFAULT_BOOKMARKS_PER_ROW, ge=1, alias="bookmarksPerRow",
    )


def hex_to_rgb(value: str) -> tuple[int, int, int] | None:
    """Convert ``#rrggbb`` (hash optional) to an RGB triple."""
    match = _HEX_COLOUR.match(value)
    if match is None:
        return None
    red, green, blue = (int(part, 16) for part in match.groups())
    return red, green, blue


def resolve_theme(settings: ThemeSettings, *, system_dark: bool = False) -> dict[str, str]:
    """Compute the CSS custom properties a front end applies for ``settings``."""
    mode = "dark" if settings.is_dark(system_dark=system_dark) else "light"
    palette = COLOR_SCHEMES.get(settings.color_scheme, COLOR_SCHEMES[DEFAULT_SCHEME])[mode]

    variables = {
        "color-scheme": mode,
        "--primary-color": palette["primary"],
        "--danger-color": palette["danger"],
    }
    for name in ("primary", "danger"):
        rgb = hex_to_rgb(palette[name])
        if rgb is not None:
            variables[f"--{name}-color-rgb"] = ", ".join(str(part) for part in rgb)

    if settings.custom_wallpaper:
        variables["--wallpaper-url"] = f"url({settings.custom_wallpaper})"
        variables["--wallpaper-position"] = settings.wallpaper_position
        variables["--wallpaper-blur"] = f"{settings.wallpaper_blur}px"
    return variables


class SettingsStore:
    """Load and save preferences, filling gaps from the defaults."""

    def __init__(self, store: KeyValueStore) -> None:
        """Bind to the key-value store shared with the repository."""
        self._store = store

    def load_theme(self) -> ThemeSettings:
        """Stored theme merged over the defaults."""
        return self._load(THEME_STORAGE_KEY, ThemeSettings)

    def save_theme(self, settings: ThemeSettings) -> bool:
        """Persist theme settings; False when the store rejected the write."""
        return self._save(THEME_STORAGE_KEY, settings)

    def load_layout(self) -> LayoutSettings:
        """Stored layout merged over the defaults."""
        return self._load(LAYOUT_STORAGE_KEY, LayoutSettings)

    def save_layout(self, settings: LayoutSettings) -> bool:
        """Persist layout settings; False when the store rejected the write."""
        return self._save(LAYOUT_STORAGE_KEY, settings)

    def _load(self, key: str, model: type[SettingsT]) -> SettingsT:
        defaults = model().model_dump(by_alias=True)
        try:
            raw_text = self._store.get_item(key)
            stored = json.loads(raw_text) if raw_text else {}
        except (StorageError, json.JSONDecodeError) as exc:
            LOGGER.warning("Unable to load %s (%s); using defaults", key, exc)
            return model()
        if not isinstance(stored, dict):
            LOGGER.warning("Ignoring malformed %s; using defaults", key)
            return model()

        merged = {**defaults, **{k: v for k, v in stored.items() if k in defaults}}
        try:
            return model.model_validate(merged)
        except ValidationError as exc:
            LOGGER.warning("Invalid values in %s (%s); using defaults", key, exc)
            return model()

    def _save(self, key: str, settings: BaseModel) -> bool:
        try:
            self._store.set_item(key, settings.model_dump_json(by_alias=True))
        except StorageError as exc:
            LOGGER.warning("Unable to save %s: %s", key, exc)
            return False
        return True
