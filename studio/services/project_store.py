"""
studio/services/project_store.py -- Reactive owner of the project and settings.

The store is the single point of truth for domain state.  It holds one
``ProjectData`` and one ``AppSettings``; both are frozen models replaced
wholesale by a single assignment, after which a Qt signal announces the
new value.  Only the command executor calls the replace setters; the
persistence engine listens to the signals.

Usage::

    from studio.services.project_store import ProjectStore

    store = ProjectStore(project, settings)
    store.project_changed.connect(on_project)

    store.project.lexicon
    store.snapshot()          # stamped with lastModified
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping

from PySide6.QtCore import QObject, Signal

from conlang.models.project import KEYWISE_MERGE_FIELDS, ProjectData
from conlang.models.reconcile import merge_model, reconcile_project
from conlang.models.settings import AppSettings
from conlang.utils import now_ms

logger = logging.getLogger(__name__)


def _parse_record(raw, what: str) -> Mapping | None:
    """Decode a stored record into a mapping, or None if it is unusable."""
    if raw is None:
        return None
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            logger.warning("Stored %s record is not UTF-8; using defaults", what)
            return None
    if isinstance(raw, Mapping):
        return raw
    if not isinstance(raw, str) or not raw.strip():
        return None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.warning("Stored %s record is corrupt (%s); using defaults", what, exc)
        return None
    if not isinstance(data, Mapping):
        logger.warning("Stored %s record is not an object; using defaults", what)
        return None
    return data


class ProjectStore(QObject):
    """Reactive holder of the current ProjectData and AppSettings.

    Signals
    -------
    project_changed(object)
        Emitted with the new ProjectData after every replacement.
    settings_changed(object)
        Emitted with the new AppSettings after every replacement.
    """

    project_changed = Signal(object)
    settings_changed = Signal(object)

    def __init__(
        self,
        project: ProjectData | None = None,
        settings: AppSettings | None = None,
        parent: QObject | None = None,
    ):
        super().__init__(parent)
        self._project = project if project is not None else ProjectData()
        self._settings = settings if settings is not None else AppSettings()

    # ------------------------------------------------------------------
    # Loading and reconciliation
    # ------------------------------------------------------------------

    @staticmethod
    def load(raw) -> ProjectData:
        """Parse a stored project record.

        Never raises: an absent, corrupt or non-object record yields the
        default project.
        """
        data = _parse_record(raw, "project")
        if data is None:
            return ProjectData()
        return reconcile_project(data)

    @staticmethod
    def merge(defaults: ProjectData, loaded: Mapping) -> ProjectData:
        """Merge a loaded record over *defaults* field by field."""
        return merge_model(defaults, loaded, keywise=KEYWISE_MERGE_FIELDS)

    @staticmethod
    def load_settings(raw) -> AppSettings:
        """Parse a stored settings record; never raises."""
        data = _parse_record(raw, "settings")
        if data is None:
            return AppSettings()
        return merge_model(AppSettings(), data)

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def project(self) -> ProjectData:
        return self._project

    @property
    def settings(self) -> AppSettings:
        return self._settings

    def snapshot(self) -> ProjectData:
        """Return the full project stamped with ``lastModified = now``."""
        return self._project.model_copy(update={"last_modified": now_ms()})

    # ------------------------------------------------------------------
    # Replacement (command executor only)
    # ------------------------------------------------------------------

    def replace_project(self, project: ProjectData) -> None:
        if not isinstance(project, ProjectData):
            raise TypeError(f"Expected ProjectData, got {type(project).__name__}")
        self._project = project
        self.project_changed.emit(project)

    def replace_settings(self, settings: AppSettings) -> None:
        if not isinstance(settings, AppSettings):
            raise TypeError(f"Expected AppSettings, got {type(settings).__name__}")
        self._settings = settings
        self.settings_changed.emit(settings)
