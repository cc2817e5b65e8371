"""
studio/config.py -- Session configuration.

One ``StudioConfig`` is created at start-up and handed to the persistence
engine and the session.  Tests build their own pointing at a temporary
directory.
"""

from __future__ import annotations

from dataclasses import dataclass

from studio.paths import get_storage_dir

PROJECT_KEY = "conlang_studio_autosave"
SETTINGS_KEY = "conlang_studio_settings"
PANEL_KEY = "console_panel"

DEFAULT_DEBOUNCE_MS = 300


@dataclass(frozen=True)
class StudioConfig:
    """Where and how the session persists its state.

    Attributes
    ----------
    storage_dir : str
        Directory of the key-value records.
    project_key, settings_key, panel_key : str
        Fixed storage keys of the three independent records.
    debounce_ms : int
        Delay before a change is written.  ``0`` writes synchronously.
    """

    storage_dir: str
    project_key: str = PROJECT_KEY
    settings_key: str = SETTINGS_KEY
    panel_key: str = PANEL_KEY
    debounce_ms: int = DEFAULT_DEBOUNCE_MS

    @classmethod
    def default(cls, **overrides) -> StudioConfig:
        """Config rooted in the platform user data directory."""
        storage_dir = overrides.pop("storage_dir", None) or get_storage_dir()
        return cls(storage_dir=storage_dir, **overrides)
