"""
studio/paths.py -- Platform data directory resolution.

Uses platformdirs so project autosaves live in the usual per-user data
location on every OS.
"""

from __future__ import annotations

import os

from platformdirs import user_data_dir

_APP_NAME = "KoreLangStudio"
_APP_AUTHOR = "KoreLang"


def get_user_data_dir() -> str:
    """Return the platform-appropriate user data directory."""
    path = user_data_dir(_APP_NAME, _APP_AUTHOR)
    os.makedirs(path, exist_ok=True)
    return path


def get_storage_dir() -> str:
    """Return the directory holding the key-value records."""
    path = os.path.join(get_user_data_dir(), "storage")
    os.makedirs(path, exist_ok=True)
    return path
