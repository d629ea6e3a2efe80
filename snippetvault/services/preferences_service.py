"""Presentation preferences: theme mode and accent palette, persisted in LocalStorage."""
import logging
from typing import List, Optional

from snippetvault.repositories.protocols import LocalStorage
from snippetvault.services.protocols import SystemThemeProvider

logger = logging.getLogger(__name__)

MODE_KEY = "sv_theme_mode"
ACCENT_KEY = "sv_theme_accent"

MODES = [
    {"id": "light", "label": "Light"},
    {"id": "dark", "label": "Dark"},
    {"id": "auto", "label": "System"},
]
PALETTES = [
    {"id": "indigo", "label": "Indigo"},
    {"id": "emerald", "label": "Emerald"},
    {"id": "amber", "label": "Amber"},
    {"id": "rose", "label": "Rose"},
    {"id": "slate", "label": "Slate"},
]

DEFAULT_MODE = "light"
DEFAULT_ACCENT = "indigo"


def _ids(options: List[dict]) -> List[str]:
    return [o["id"] for o in options]


def _dark_system_theme() -> str:
    return "dark"


class ThemePreferences:
    def __init__(self, storage: LocalStorage, system_theme: Optional[SystemThemeProvider] = None) -> None:
        self._storage = storage
        self._system_theme = system_theme or _dark_system_theme
        self._mode = self._load(MODE_KEY, _ids(MODES), DEFAULT_MODE)
        self._accent = self._load(ACCENT_KEY, _ids(PALETTES), DEFAULT_ACCENT)

    def _load(self, key: str, allowed: List[str], default: str) -> str:
        stored = self._storage.get_item(key)
        if stored in allowed:
            return stored
        if stored is not None:
            logger.info("Ignoring unknown %s value %r", key, stored)
        return default

    @property
    def modes(self) -> List[dict]:
        return list(MODES)

    @property
    def palettes(self) -> List[dict]:
        return list(PALETTES)

    @property
    def mode(self) -> str:
        return self._mode

    @property
    def accent(self) -> str:
        return self._accent

    @property
    def resolved_theme(self) -> str:
        """Concrete "light"/"dark"; "auto" follows the system theme."""
        if self._mode == "auto":
            return "dark" if self._system_theme() == "dark" else "light"
        return self._mode

    @property
    def is_dark(self) -> bool:
        return self.resolved_theme == "dark"

    def set_mode(self, mode: str) -> None:
        if mode not in _ids(MODES):
            raise ValueError(f"Unknown theme mode: {mode!r}")
        self._mode = mode
        self._storage.set_item(MODE_KEY, mode)

    def set_accent(self, accent: str) -> None:
        if accent not in _ids(PALETTES):
            raise ValueError(f"Unknown accent palette: {accent!r}")
        self._accent = accent
        self._storage.set_item(ACCENT_KEY, accent)

    def toggle(self) -> str:
        """Switch between dark and light (auto counts as light). Returns the new mode."""
        self.set_mode("light" if self._mode == "dark" else "dark")
        return self._mode
