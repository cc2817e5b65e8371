"""
studio/services/persistence.py -- Durable snapshots of the project store.

The engine keeps key-value storage consistent with the ProjectStore:

    - it subscribes to the store's change signals (no polling);
    - every write is a full snapshot of one record under a fixed key;
    - writes are best-effort: failures are logged and reported on the
      event bus, never raised, and the in-memory state stays authoritative;
    - with a debounce interval, a single-shot timer per record is restarted
      on each change and the *current* state is written when it fires, so
      an older state can never overwrite a newer one.

It also owns the start-up load (exactly once), panel preferences, and the
theme and project file interchange used by import/export actions.

Usage::

    engine = PersistenceEngine(storage, config, bus)
    project, settings = engine.load_initial()
    store = ProjectStore(project, settings)
    engine.attach(store)
    ...
    engine.shutdown()    # flushes pending writes
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError
from PySide6.QtCore import QObject, QTimer

from conlang.errors import (
    PersistenceLoadCorrupt,
    PersistenceWriteFailure,
    ThemeImportInvalid,
)
from conlang.models.project import ProjectData
from conlang.models.reconcile import merge_model
from conlang.models.settings import PALETTE_KEYS, AppSettings, CustomPalette, PanelPreferences
from conlang.storage import KeyValueStorage
from conlang.utils import read_json_file, safe_write_json
from studio.config import StudioConfig
from studio.services.event_bus import EventBus
from studio.services.project_store import ProjectStore
from studio.theme.palettes import DEFAULT_CUSTOM

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Theme payload validation
# ------------------------------------------------------------------

def parse_theme_payload(data: Any) -> CustomPalette:
    """Validate an imported theme mapping and return a complete palette.

    Accepted: a non-empty mapping whose keys are all known palette slots
    and whose values are non-empty strings.  Missing slots are filled from
    ``DEFAULT_CUSTOM``.  Anything else is rejected as a whole.

    Raises
    ------
    ThemeImportInvalid
    """
    if not isinstance(data, Mapping):
        raise ThemeImportInvalid("Invalid theme file: expected a JSON object of colors.")
    if not data:
        raise ThemeImportInvalid("Invalid theme file: no colors found.")

    unknown = sorted(str(k) for k in data if k not in PALETTE_KEYS)
    if unknown:
        raise ThemeImportInvalid(
            f"Invalid theme file: unknown color key(s) {', '.join(unknown)}."
        )
    bad = sorted(k for k, v in data.items() if not isinstance(v, str) or not v.strip())
    if bad:
        raise ThemeImportInvalid(
            f"Invalid theme file: {', '.join(bad)} must be color strings."
        )

    merged = {**DEFAULT_CUSTOM.to_record(), **data}
    try:
        return CustomPalette.model_validate(merged)
    except ValidationError as exc:
        raise ThemeImportInvalid(f"Invalid theme file: {exc.error_count()} error(s).") from exc


# ------------------------------------------------------------------
# Engine
# ------------------------------------------------------------------

class PersistenceEngine(QObject):
    """Writes store snapshots to key-value storage.

    Parameters
    ----------
    storage : KeyValueStorage
        Record storage.
    config : StudioConfig
        Storage keys and debounce interval.
    bus : EventBus, optional
        Receives ``record_saved`` / ``persistence_failed`` notifications.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        config: StudioConfig,
        bus: EventBus | None = None,
        parent: QObject | None = None,
    ):
        super().__init__(parent)
        self._storage = storage
        self._config = config
        self._bus = bus
        self._store: ProjectStore | None = None
        self._loaded = False
        self._pending: set[str] = set()
        self._timers: dict[str, QTimer] = {}

        for key in (config.project_key, config.settings_key):
            timer = QTimer(self)
            timer.setSingleShot(True)
            timer.setInterval(max(0, config.debounce_ms))
            timer.timeout.connect(lambda k=key: self._write_pending(k))
            self._timers[key] = timer

    # ------------------------------------------------------------------
    # Start-up load
    # ------------------------------------------------------------------

    def load_initial(self) -> tuple[ProjectData, AppSettings]:
        """Load the project and settings records.  Allowed once per engine.

        A missing or corrupt record yields defaults; this is logged but is
        not an error for the caller.
        """
        if self._loaded:
            raise RuntimeError("PersistenceEngine.load_initial() may only run once.")
        self._loaded = True

        project = ProjectStore.load(self._read(self._config.project_key))
        settings = ProjectStore.load_settings(self._read(self._config.settings_key))
        logger.info(
            "Loaded project '%s' (%d entries, schema %s)",
            project.name, len(project.lexicon), project.version,
        )
        return project, settings

    def _read(self, key: str) -> str | None:
        try:
            return self._storage.read(key)
        except PersistenceLoadCorrupt:
            logger.warning("Record %s unreadable; using defaults", key, exc_info=True)
            return None

    # ------------------------------------------------------------------
    # Store subscription
    # ------------------------------------------------------------------

    def attach(self, store: ProjectStore) -> None:
        """Start persisting every change of *store*."""
        if self._store is not None:
            self.detach()
        self._store = store
        store.project_changed.connect(self._on_project_changed)
        store.settings_changed.connect(self._on_settings_changed)

    def detach(self) -> None:
        if self._store is None:
            return
        self._store.project_changed.disconnect(self._on_project_changed)
        self._store.settings_changed.disconnect(self._on_settings_changed)
        self._store = None

    def _on_project_changed(self, _project) -> None:
        self._schedule(self._config.project_key)

    def _on_settings_changed(self, _settings) -> None:
        self._schedule(self._config.settings_key)

    def _schedule(self, key: str) -> None:
        if self._config.debounce_ms <= 0:
            self._write_record(key)
            return
        self._pending.add(key)
        self._timers[key].start()

    @property
    def has_pending_writes(self) -> bool:
        return bool(self._pending)

    def flush(self) -> None:
        """Write every pending record now."""
        for key in list(self._pending):
            self._timers[key].stop()
            self._write_pending(key)

    def shutdown(self) -> None:
        """Flush pending writes and stop listening to the store."""
        self.flush()
        self.detach()

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def _write_pending(self, key: str) -> None:
        if key in self._pending:
            self._pending.discard(key)
            self._write_record(key)

    def _write_record(self, key: str) -> bool:
        """Serialize the current state of one record and write it."""
        if self._store is None:
            return False
        try:
            if key == self._config.project_key:
                record = self._store.snapshot().to_record()
            else:
                record = self._store.settings.to_record()
            text = json.dumps(record, ensure_ascii=False)
            self._storage.write(key, text)
        except (PersistenceWriteFailure, TypeError, ValueError) as exc:
            logger.warning("Auto-save of %s failed: %s", key, exc)
            if self._bus is not None:
                self._bus.persistence_failed.emit(f"Auto-save failed: {exc}")
            return False
        if self._bus is not None:
            self._bus.record_saved.emit(key)
        return True

    # ------------------------------------------------------------------
    # Panel preferences (independent record)
    # ------------------------------------------------------------------

    def load_panel_preferences(self) -> PanelPreferences:
        raw = self._read(self._config.panel_key)
        if not raw:
            return PanelPreferences()
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Panel preferences corrupt; using defaults")
            return PanelPreferences()
        if not isinstance(data, Mapping):
            return PanelPreferences()
        return merge_model(PanelPreferences(), data)

    def save_panel_preferences(self, prefs: PanelPreferences) -> bool:
        try:
            self._storage.write(self._config.panel_key, json.dumps(prefs.to_record()))
        except PersistenceWriteFailure as exc:
            logger.warning("Saving panel preferences failed: %s", exc)
            return False
        return True

    # ------------------------------------------------------------------
    # Theme interchange
    # ------------------------------------------------------------------

    def export_theme(self, path, settings: AppSettings) -> None:
        """Write the custom palette (or the default one) to *path*."""
        palette = settings.custom_theme or DEFAULT_CUSTOM
        try:
            safe_write_json(path, palette.to_record())
        except OSError as exc:
            raise PersistenceWriteFailure(f"Cannot export theme to {path}: {exc}") from exc
        logger.info("Exported theme to %s", path)

    def import_theme(self, path) -> CustomPalette:
        """Read and validate a theme file.  Does not touch any state.

        Raises
        ------
        ThemeImportInvalid
            If the file is unreadable or not a palette mapping.
        """
        try:
            data = read_json_file(path)
        except PersistenceLoadCorrupt as exc:
            raise ThemeImportInvalid("Invalid theme file: not readable JSON.") from exc
        palette = parse_theme_payload(data)
        logger.info("Imported theme from %s", path)
        return palette

    # ------------------------------------------------------------------
    # Project file interchange
    # ------------------------------------------------------------------

    def export_project(self, path, project: ProjectData) -> None:
        """Write a full project snapshot to a user-chosen file."""
        try:
            safe_write_json(path, project.to_record())
        except OSError as exc:
            raise PersistenceWriteFailure(f"Cannot export project to {path}: {exc}") from exc
        logger.info("Exported project '%s' to %s", project.name, path)

    def read_project_file(self, path) -> dict:
        """Read a project file for the ``loadProject`` command.

        Raises
        ------
        PersistenceLoadCorrupt
            If the file cannot be read or is not a JSON object.
        """
        data = read_json_file(path)
        if not isinstance(data, dict):
            raise PersistenceLoadCorrupt(f"{path} does not contain a project object.")
        return data
