"""
conlang/models/settings.py -- Application settings and UI preferences.
"""

from __future__ import annotations

from typing import Annotated, Literal, Optional

from pydantic import AfterValidator, ConfigDict, Field, field_validator

from conlang.models.base import StudioModel

ThemeName = Literal["dark", "cappuccino", "tokyo-night", "custom"]

# The fixed color slots of a custom palette, in display order.
PALETTE_KEYS: tuple[str, ...] = (
    "primary",
    "secondary",
    "accent",
    "background",
    "surface",
    "elevated",
    "textPrimary",
    "textSecondary",
    "textTertiary",
    "border",
    "divider",
    "success",
    "warning",
    "error",
    "info",
    "hover",
    "active",
    "disabled",
)

Color = Annotated[str, Field(min_length=1)]

MIN_PANEL_HEIGHT = 120
DEFAULT_PANEL_HEIGHT = 320


class CustomPalette(StudioModel):
    """A complete user palette.  Unknown color slots are rejected."""

    model_config = ConfigDict(extra="forbid")

    primary: Color
    secondary: Color
    accent: Color
    background: Color
    surface: Color
    elevated: Color
    text_primary: Color
    text_secondary: Color
    text_tertiary: Color
    border: Color
    divider: Color
    success: Color
    warning: Color
    error: Color
    info: Color
    hover: Color
    active: Color
    disabled: Color

    def with_color(self, color_key: str, value: str) -> CustomPalette:
        """Return a copy with one slot (by its JSON key) replaced."""
        data = self.to_record()
        data[color_key] = value
        return CustomPalette.model_validate(data)


def validate_language_code(v: str) -> str:
    """Accept codes like ``en``, ``fr``, ``pt-BR``, ``zh_Hant``."""
    v = v.strip()
    if not v or len(v) > 16 or not v.replace("-", "").replace("_", "").isalnum():
        raise ValueError(f"'{v}' is not a language code")
    return v


class AppSettings(StudioModel):
    theme: ThemeName = "dark"
    custom_theme: Optional[CustomPalette] = None
    enable_ai: bool = Field(default=False, alias="enableAI")
    api_key: str = ""
    language: Annotated[str, AfterValidator(validate_language_code)] = "en"


class PanelPreferences(StudioModel):
    """Console panel layout, stored apart from the project."""

    height: int = DEFAULT_PANEL_HEIGHT
    minimized: bool = False

    @field_validator("height")
    @classmethod
    def _clamp_height(cls, v: int) -> int:
        return max(MIN_PANEL_HEIGHT, v)
