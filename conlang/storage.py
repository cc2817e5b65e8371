"""
conlang/storage.py -- Key-value record storage on disk.

Each storage key maps to one ``<key>.json`` file inside a data directory.
A record is always written as a whole, so readers see either the previous
record or the new one, never a mix.

Usage::

    from conlang.storage import KeyValueStorage

    storage = KeyValueStorage("/path/to/data")
    storage.write("conlang_studio_autosave", text)
    text = storage.read("conlang_studio_autosave")   # None if absent
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

from conlang.errors import PersistenceLoadCorrupt, PersistenceWriteFailure
from conlang.utils import atomic_write_text

logger = logging.getLogger(__name__)

_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


class KeyValueStorage:
    """Directory-backed storage of text records keyed by name.

    Parameters
    ----------
    root : str or pathlib.Path
        Directory holding the record files.  Created lazily on first write.
    """

    def __init__(self, root):
        self.root = Path(root)

    def path_for(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.root / f"{key}.json"

    def read(self, key: str) -> str | None:
        """Return the stored text for *key*, or ``None`` if there is none.

        Raises
        ------
        PersistenceLoadCorrupt
            If the record exists but cannot be read as UTF-8 text.
        """
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise PersistenceLoadCorrupt(f"Cannot read record {key!r}: {exc}") from exc

    def write(self, key: str, text: str) -> None:
        """Replace the record for *key* with *text*.

        Raises
        ------
        PersistenceWriteFailure
            If the record cannot be written (disk full, permissions, ...).
        """
        path = self.path_for(key)
        try:
            atomic_write_text(path, text)
        except OSError as exc:
            raise PersistenceWriteFailure(f"Cannot write record {key!r}: {exc}") from exc
        logger.debug("Wrote record %s (%d chars)", key, len(text))

    def remove(self, key: str) -> bool:
        """Delete the record for *key*.  Returns True if one existed."""
        try:
            os.unlink(self.path_for(key))
            return True
        except FileNotFoundError:
            return False

    def keys(self) -> list[str]:
        if not self.root.is_dir():
            return []
        return sorted(p.stem for p in self.root.glob("*.json"))
