"""
conlang/models/project.py -- The ProjectData aggregate and its parts.

Structured parts the core reasons about (lexicon entries, phonemes,
constraints) are typed.  Parts the core only stores and hands back
(morphology paradigms, sound-change rules, glyphs) stay as opaque
records.  Every model keeps unknown keys so that data written by a newer
editor survives a load/save cycle.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import ConfigDict, Field, field_validator

from conlang.models.base import StudioModel

CURRENT_SCHEMA_VERSION = "1.1"

# Top-level fields merged key by key over their defaults on load, rather
# than replaced wholesale.
KEYWISE_MERGE_FIELDS = frozenset({"constraints"})


# ------------------------------------------------------------------
# Lexicon
# ------------------------------------------------------------------

class LexiconEntry(StudioModel):
    """One word of the lexicon."""

    model_config = ConfigDict(extra="allow")

    id: str = ""
    word: str
    ipa: str = ""
    pos: str = ""

    @field_validator("word")
    @classmethod
    def _word_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("word must not be blank")
        return v


# ------------------------------------------------------------------
# Phonology
# ------------------------------------------------------------------

class Phoneme(StudioModel):
    """A consonant (manner/place/voiced) or vowel (height/backness/rounded)."""

    model_config = ConfigDict(extra="allow")

    symbol: str
    type: Optional[Literal["consonant", "vowel"]] = None
    manner: Optional[str] = None
    place: Optional[str] = None
    voiced: Optional[bool] = None
    height: Optional[str] = None
    backness: Optional[str] = None
    rounded: Optional[bool] = None


class PhonologyConfig(StudioModel):
    model_config = ConfigDict(extra="allow")

    name: str = "Default Phonology"
    description: str = ""
    consonants: list[Phoneme] = Field(default_factory=list)
    vowels: list[Phoneme] = Field(default_factory=list)
    syllable_structure: str = ""
    banned_combinations: list[str] = Field(default_factory=list)


# ------------------------------------------------------------------
# Morphology, script, constraints
# ------------------------------------------------------------------

class MorphologyState(StudioModel):
    model_config = ConfigDict(extra="allow")

    dimensions: list[dict[str, Any]] = Field(default_factory=list)
    paradigms: list[dict[str, Any]] = Field(default_factory=list)


class ScriptConfig(StudioModel):
    model_config = ConfigDict(extra="allow")

    name: str = "Standard Script"
    direction: Literal["ltr", "rtl", "ttb"] = "ltr"
    glyphs: list[dict[str, Any]] = Field(default_factory=list)
    spacing_mode: str = "proportional"


class ProjectConstraints(StudioModel):
    """Rules every lexicon entry must satisfy.

    ``allowed_graphemes`` is a whitespace- or comma-separated inventory;
    empty means any character is allowed.
    """

    model_config = ConfigDict(extra="allow")

    allow_duplicates: bool = True
    case_sensitive: bool = False
    banned_sequences: list[str] = Field(default_factory=list)
    allowed_graphemes: str = ""
    phonotactic_structure: str = ""
    must_start_with: list[str] = Field(default_factory=list)
    must_end_with: list[str] = Field(default_factory=list)


# ------------------------------------------------------------------
# Root aggregate
# ------------------------------------------------------------------

class ProjectData(StudioModel):
    """The whole persisted project."""

    version: str = CURRENT_SCHEMA_VERSION
    name: str = "Untitled"
    author: str = "Unknown"
    description: str = ""
    lexicon: list[LexiconEntry] = Field(default_factory=list)
    phonology: PhonologyConfig = Field(default_factory=PhonologyConfig)
    grammar: str = ""
    notebook: str = ""
    morphology: MorphologyState = Field(default_factory=MorphologyState)
    evolution_rules: list[dict[str, Any]] = Field(default_factory=list)
    constraints: ProjectConstraints = Field(default_factory=ProjectConstraints)
    script_config: ScriptConfig = Field(default_factory=ScriptConfig)
    last_modified: int = 0

    def find_entry(self, entry_id: str) -> LexiconEntry | None:
        for entry in self.lexicon:
            if entry.id == entry_id:
                return entry
        return None
