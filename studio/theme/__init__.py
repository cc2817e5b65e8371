"""
studio/theme/ -- Theme presets and palette resolution.
"""

from studio.theme.palettes import DEFAULT_CUSTOM, THEME_PRESETS, resolve_palette

__all__ = ["DEFAULT_CUSTOM", "THEME_PRESETS", "resolve_palette"]
