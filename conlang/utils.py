"""
Shared file helpers for the studio core.

All writes use atomic temp-file-then-os.replace() so that a reader never
observes a partially written record, even if the process dies mid-write.
"""

import json
import os
import tempfile
import time

from conlang.errors import PersistenceLoadCorrupt

# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------

def now_ms() -> int:
    """Return the current wall-clock time in milliseconds since the epoch."""
    return int(time.time() * 1000)


# ---------------------------------------------------------------------------
# Text / JSON I/O (atomic writes)
# ---------------------------------------------------------------------------

def atomic_write_text(path, text):
    """Atomically write *text* to *path*.

    Uses a temporary file in the same directory followed by
    ``os.replace()``.  Parent directories are created if they do not
    exist.

    Parameters
    ----------
    path : str or pathlib.Path
        Absolute path to the target file.
    text : str
        Content to write (UTF-8).
    """
    path = str(path)
    parent = os.path.dirname(path) or "."
    os.makedirs(parent, exist_ok=True)

    fd, tmp_path = tempfile.mkstemp(dir=parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(text)
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def safe_write_json(path, data, *, indent=2):
    """Atomically write *data* as JSON to *path*."""
    atomic_write_text(path, json.dumps(data, indent=indent, ensure_ascii=False))


def read_json_file(path):
    """Read and parse a user-supplied JSON file.

    Failures are reported rather than defaulted, because the caller asked
    for this specific file.

    Raises
    ------
    PersistenceLoadCorrupt
        If the file cannot be opened or does not contain valid JSON.
    """
    try:
        with open(path, "r", encoding="utf-8") as fh:
            return json.load(fh)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise PersistenceLoadCorrupt(f"{path} is not valid JSON: {exc}") from exc
    except OSError as exc:
        raise PersistenceLoadCorrupt(f"Cannot read {path}: {exc}") from exc
