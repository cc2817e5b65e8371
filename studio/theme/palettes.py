"""
studio/theme/palettes.py -- Theme presets and palette resolution.

Each preset is a complete :class:`CustomPalette`.  Selecting a preset copies
its colors into the user's custom palette so that a custom theme can be
derived from it.

Usage::

    from studio.theme.palettes import resolve_palette

    palette = resolve_palette(store.settings)
    palette.background   # "#121212"
"""

from __future__ import annotations

import logging

from conlang.models.settings import AppSettings, CustomPalette

logger = logging.getLogger(__name__)

THEME_PRESETS: dict[str, CustomPalette] = {
    "dark": CustomPalette.model_validate({
        "primary": "#6B8AFF",
        "secondary": "#0A0A0A",
        "accent": "#3B82F6",
        "background": "#121212",
        "surface": "#1E1E1E",
        "elevated": "#2A2A2A",
        "textPrimary": "#F1F5F9",
        "textSecondary": "#94A3B8",
        "textTertiary": "#64748B",
        "border": "#2A2A2A",
        "divider": "#1E1E1E",
        "success": "#10B981",
        "warning": "#F59E0B",
        "error": "#EF4444",
        "info": "#3B82F6",
        "hover": "#5B7BFF",
        "active": "#4B6BEF",
        "disabled": "#404040",
    }),
    "cappuccino": CustomPalette.model_validate({
        "primary": "#CC9B7A",
        "secondary": "#191918",
        "accent": "#D97757",
        "background": "#F4F1ED",
        "surface": "#FFFFFF",
        "elevated": "#FFFFFF",
        "textPrimary": "#191918",
        "textSecondary": "#5C5C5A",
        "textTertiary": "#8E8E8C",
        "border": "#E6E3DE",
        "divider": "#D4CFC7",
        "success": "#2D9F7C",
        "warning": "#E89C3F",
        "error": "#D14343",
        "info": "#5B8DBE",
        "hover": "#B88762",
        "active": "#A67756",
        "disabled": "#BFBBB5",
    }),
    "tokyo-night": CustomPalette.model_validate({
        "primary": "#7AA2F7",
        "secondary": "#16161E",
        "accent": "#7AA2F7",
        "background": "#1A1B26",
        "surface": "#24283B",
        "elevated": "#414868",
        "textPrimary": "#A9B1D6",
        "textSecondary": "#565F89",
        "textTertiary": "#3B4261",
        "border": "#292E42",
        "divider": "#1F2335",
        "success": "#9ECE6A",
        "warning": "#E0AF68",
        "error": "#F7768E",
        "info": "#7AA2F7",
        "hover": "#5B7FD7",
        "active": "#4B6FC7",
        "disabled": "#3B4261",
    }),
}

# Fills missing slots of partial palettes and stands in when no custom
# palette has been set yet.
DEFAULT_CUSTOM: CustomPalette = THEME_PRESETS["dark"]


def resolve_palette(settings: AppSettings) -> CustomPalette:
    """Return the palette the UI should currently paint with."""
    if settings.theme == "custom":
        if settings.custom_theme is not None:
            return settings.custom_theme
        logger.debug("Custom theme selected without a palette; using default")
        return DEFAULT_CUSTOM
    return THEME_PRESETS.get(settings.theme, THEME_PRESETS["dark"])
