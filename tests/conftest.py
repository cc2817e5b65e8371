"""
Shared pytest fixtures for the KoreLang Studio test suite.

Provides:
    - qapp: a QCoreApplication for signal/slot and timer machinery
    - storage_dir: an empty temporary record directory
    - config: a StudioConfig on that directory with synchronous writes
    - sample_project_record: a realistic stored project (JSON keys)
    - session: a started Session, shut down after the test
"""

import sys
from pathlib import Path

import pytest
from PySide6.QtCore import QCoreApplication

# ---------------------------------------------------------------------------
# Ensure the packages are importable regardless of where pytest is invoked
# ---------------------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parent.parent

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from studio.config import StudioConfig  # noqa: E402
from studio.services.session_manager import Session  # noqa: E402


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def qapp():
    """Make sure a QCoreApplication exists for signal/slot machinery."""
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    yield app


@pytest.fixture
def storage_dir(tmp_path):
    path = tmp_path / "storage"
    path.mkdir()
    return str(path)


@pytest.fixture
def config(storage_dir):
    """Config writing synchronously so tests can read records right away."""
    return StudioConfig(storage_dir=storage_dir, debounce_ms=0)


@pytest.fixture
def sample_project_record():
    """Return a stored project record as the editor writes it."""
    return {
        "version": "1.1",
        "name": "Vyrsk",
        "author": "Ana",
        "description": "A northern trade language",
        "lexicon": [
            {
                "id": "w-0001",
                "word": "kora",
                "ipa": "ˈko.ra",
                "pos": "noun",
                "definition": "river",
            },
            {
                "id": "w-0002",
                "word": "shel",
                "ipa": "ʃel",
                "pos": "verb",
            },
        ],
        "phonology": {
            "name": "Vyrsk Phonology",
            "description": "",
            "consonants": [
                {"symbol": "k", "type": "consonant", "manner": "plosive",
                 "place": "velar", "voiced": False},
                {"symbol": "ʃ", "type": "consonant", "manner": "fricative",
                 "place": "postalveolar", "voiced": False},
            ],
            "vowels": [
                {"symbol": "a", "type": "vowel", "height": "open",
                 "backness": "central", "rounded": False},
            ],
            "syllableStructure": "(C)V(C)",
            "bannedCombinations": ["kʃ"],
        },
        "grammar": "SOV word order.",
        "notebook": "Ideas for the numeral system.",
        "morphology": {
            "dimensions": [{"name": "case", "values": ["nom", "acc"]}],
            "paradigms": [],
        },
        "evolutionRules": [{"id": "r1", "rule": "k > x / V_V"}],
        "constraints": {
            "allowDuplicates": False,
            "caseSensitive": False,
            "bannedSequences": ["xx"],
            "allowedGraphemes": "",
            "phonotacticStructure": "",
            "mustStartWith": [],
            "mustEndWith": [],
        },
        "scriptConfig": {
            "name": "Vyrsk Runes",
            "direction": "rtl",
            "glyphs": [{"char": "k", "svg": "<path/>"}],
            "spacingMode": "mono",
        },
        "lastModified": 1700000000000,
    }


@pytest.fixture
def session(qapp, config):
    """A started session on the temporary storage directory."""
    s = Session(config)
    s.start()
    yield s
    s.shutdown()
