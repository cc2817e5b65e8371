"""
conlang/models/ -- Pydantic v2 models for persisted studio records.

Submodules:
    base        StudioModel (frozen, camelCase aliases).
    project     ProjectData and its parts.
    settings    AppSettings, CustomPalette, PanelPreferences.
    reconcile   Merging of loaded records over defaults.
    validators  Lexicon constraint checks and error humanization.
"""

from conlang.models.project import CURRENT_SCHEMA_VERSION, LexiconEntry, ProjectData
from conlang.models.settings import AppSettings, CustomPalette, PanelPreferences

__all__ = [
    "CURRENT_SCHEMA_VERSION",
    "AppSettings",
    "CustomPalette",
    "LexiconEntry",
    "PanelPreferences",
    "ProjectData",
]
