"""
Tests for conlang/models/validators.py -- lexicon constraint checks and
pydantic error humanization.
"""

import pytest

from conlang.models.project import LexiconEntry, ProjectConstraints
from conlang.models.validators import (
    humanize_validation_error,
    parse_grapheme_inventory,
    segment_word,
    validate_lexicon_entry,
)


@pytest.fixture
def lexicon():
    return [
        LexiconEntry(id="1", word="Kora"),
        LexiconEntry(id="2", word="shel"),
    ]


class TestGraphemes:
    def test_inventory_sorted_longest_first(self):
        assert parse_grapheme_inventory("a, sh k  tch") == ["tch", "sh", "a", "k"]

    def test_segment_prefers_longest_match(self):
        assert segment_word("shak", ["sh", "a", "k", "s", "h"]) == ["sh", "a", "k"]

    def test_segment_skips_separators(self):
        assert segment_word("ka-ka ka", ["k", "a"]) == ["k", "a"] * 3

    def test_segment_fails_on_unknown(self):
        assert segment_word("kaz", ["k", "a"]) is None


class TestValidateLexiconEntry:
    def test_no_constraints_no_issues(self, lexicon):
        assert validate_lexicon_entry(LexiconEntry(word="kora"), lexicon, ProjectConstraints()) == []

    def test_duplicate_is_case_insensitive_by_default(self, lexicon):
        constraints = ProjectConstraints(allow_duplicates=False)
        issues = validate_lexicon_entry(LexiconEntry(id="9", word="kora"), lexicon, constraints)
        assert len(issues) == 1
        assert "already exists" in issues[0]

    def test_duplicate_respects_case_sensitivity(self, lexicon):
        constraints = ProjectConstraints(allow_duplicates=False, case_sensitive=True)
        assert validate_lexicon_entry(LexiconEntry(id="9", word="kora"), lexicon, constraints) == []

    def test_entry_is_not_its_own_duplicate(self, lexicon):
        constraints = ProjectConstraints(allow_duplicates=False)
        assert validate_lexicon_entry(LexiconEntry(id="1", word="kora"), lexicon, constraints) == []

    def test_banned_sequence(self, lexicon):
        constraints = ProjectConstraints(banned_sequences=["xx"])
        issues = validate_lexicon_entry(LexiconEntry(word="waXXa"), lexicon, constraints)
        assert issues == ["'waXXa' contains the banned sequence 'xx'."]

    def test_prefix_and_suffix_rules(self, lexicon):
        constraints = ProjectConstraints(must_start_with=["ka"], must_end_with=["n"])
        assert validate_lexicon_entry(LexiconEntry(word="kaan"), lexicon, constraints) == []
        issues = validate_lexicon_entry(LexiconEntry(word="tora"), lexicon, constraints)
        assert len(issues) == 2

    def test_grapheme_inventory(self, lexicon):
        constraints = ProjectConstraints(allowed_graphemes="k o r a sh")
        assert validate_lexicon_entry(LexiconEntry(word="kosha"), lexicon, constraints) == []
        issues = validate_lexicon_entry(LexiconEntry(word="kozha"), lexicon, constraints)
        assert "allowed inventory" in issues[0]


class TestHumanizeValidationError:
    def test_missing(self):
        msg = humanize_validation_error({"type": "missing", "loc": ("language",)}, "setLanguage")
        assert msg == "'language' is required by setLanguage."

    def test_extra_forbidden(self):
        msg = humanize_validation_error({"type": "extra_forbidden", "loc": ("bogus",)}, "setTheme")
        assert "not a recognized field for setTheme" in msg

    def test_wrong_type(self):
        msg = humanize_validation_error(
            {"type": "bool_type", "loc": ("aiEnabled",), "msg": "Input should be a valid boolean"},
            "setAIEnabled",
        )
        assert msg.startswith("'aiEnabled' has the wrong type.")

    def test_empty_location(self):
        msg = humanize_validation_error({"type": "value_error", "loc": (), "msg": "bad"}, "x")
        assert msg == "'(payload)': bad."
