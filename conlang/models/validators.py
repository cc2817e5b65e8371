"""
conlang/models/validators.py -- Lexicon rules and error humanization.

These checks go beyond structural validation: they compare a candidate
lexicon entry against the project's constraints and the existing lexicon.

Usage::

    from conlang.models.validators import validate_lexicon_entry

    issues = validate_lexicon_entry(entry, project.lexicon, project.constraints)
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from conlang.models.project import LexiconEntry, ProjectConstraints

logger = logging.getLogger(__name__)

_INVENTORY_SPLIT_RE = re.compile(r"[\s,]+")


# ------------------------------------------------------------------
# Lexicon constraint validation
# ------------------------------------------------------------------

def parse_grapheme_inventory(allowed: str) -> list[str]:
    """Split an inventory like ``"a, e, sh th"`` into graphemes, longest first."""
    graphemes = {g for g in _INVENTORY_SPLIT_RE.split(allowed.strip()) if g}
    return sorted(graphemes, key=lambda g: (-len(g), g))


def segment_word(word: str, graphemes: Sequence[str]) -> list[str] | None:
    """Greedily segment *word* into *graphemes* (longest match first).

    Returns the segments, or ``None`` at the first position no grapheme
    matches.  Spaces and hyphens are treated as separators.
    """
    segments: list[str] = []
    i = 0
    while i < len(word):
        if word[i] in " -":
            i += 1
            continue
        for g in graphemes:
            if word.startswith(g, i):
                segments.append(g)
                i += len(g)
                break
        else:
            return None
    return segments


def validate_lexicon_entry(
    entry: LexiconEntry,
    lexicon: Sequence[LexiconEntry],
    constraints: ProjectConstraints,
) -> list[str]:
    """Check *entry* against the project constraints.

    Parameters
    ----------
    entry : LexiconEntry
        The candidate entry.  An existing entry with the same id is not
        counted as a duplicate of itself.
    lexicon : sequence of LexiconEntry
        The current lexicon.
    constraints : ProjectConstraints
        The rules to enforce.

    Returns
    -------
    list[str]
        Human-readable problems; empty if the entry is acceptable.
    """
    issues: list[str] = []
    word = entry.word.strip()

    def norm(s: str) -> str:
        return s if constraints.case_sensitive else s.casefold()

    if not constraints.allow_duplicates:
        for other in lexicon:
            if other.id != entry.id and norm(other.word.strip()) == norm(word):
                issues.append(f"'{word}' already exists in the lexicon.")
                break

    for seq in constraints.banned_sequences:
        if seq and norm(seq) in norm(word):
            issues.append(f"'{word}' contains the banned sequence '{seq}'.")

    prefixes = [p for p in constraints.must_start_with if p]
    if prefixes and not any(norm(word).startswith(norm(p)) for p in prefixes):
        issues.append(f"'{word}' must start with one of: {', '.join(prefixes)}.")

    suffixes = [s for s in constraints.must_end_with if s]
    if suffixes and not any(norm(word).endswith(norm(s)) for s in suffixes):
        issues.append(f"'{word}' must end with one of: {', '.join(suffixes)}.")

    if constraints.allowed_graphemes.strip():
        inventory = parse_grapheme_inventory(norm(constraints.allowed_graphemes))
        if segment_word(norm(word), inventory) is None:
            issues.append(f"'{word}' uses graphemes outside the allowed inventory.")

    return issues


# ------------------------------------------------------------------
# Pydantic error humanization
# ------------------------------------------------------------------

def humanize_validation_error(err: dict, command: str) -> str:
    """Convert a single pydantic error dict into a message for *command*.

    Pydantic error dicts look like::

        {
            "type": "missing",
            "loc": ("language",),
            "msg": "Field required",
        }
    """
    loc = err.get("loc", ())
    msg = err.get("msg", "Validation error")
    err_type = err.get("type", "")

    field_path = ".".join(str(part) for part in loc if part != "__root__")
    if not field_path:
        field_path = "(payload)"

    if err_type == "missing":
        return f"'{field_path}' is required by {command}."
    if err_type == "extra_forbidden":
        return f"'{field_path}' is not a recognized field for {command}."
    if err_type == "literal_error":
        return f"'{field_path}' has an invalid value. {msg}."
    if err_type.endswith("_type") or err_type.endswith("_parsing"):
        return f"'{field_path}' has the wrong type. {msg}."
    return f"'{field_path}': {msg}."
