"""
studio/services/session_manager.py -- Session lifecycle.

A ``Session`` owns every service for one running studio:

    - loads the stored project and settings once on start;
    - creates the ProjectStore and attaches the persistence engine;
    - exposes the command executor and the console to consumers;
    - flushes pending writes on shutdown.

There are no process-wide singletons; tests create a session per case and
shut it down afterwards.
"""

from __future__ import annotations

import logging
from typing import Any

from PySide6.QtCore import QObject, Signal

from conlang.models.settings import CustomPalette, PanelPreferences
from conlang.storage import KeyValueStorage
from studio.config import StudioConfig
from studio.services.command_executor import CommandExecutor, CommandKind
from studio.services.event_bus import EventBus
from studio.services.persistence import PersistenceEngine
from studio.services.project_store import ProjectStore
from studio.services.terminal import TerminalInterpreter
from studio.theme.palettes import resolve_palette

logger = logging.getLogger(__name__)


class Session(QObject):
    """Wires storage, store, persistence, executor and console together.

    Signals
    -------
    session_started()
        Emitted once the stored state is loaded and persistence is live.
    """

    session_started = Signal()

    def __init__(self, config: StudioConfig, parent: QObject | None = None):
        super().__init__(parent)
        self.config = config
        self.bus = EventBus(self)
        self.storage = KeyValueStorage(config.storage_dir)
        self.persistence = PersistenceEngine(self.storage, config, self.bus, parent=self)
        self.store: ProjectStore | None = None
        self.executor: CommandExecutor | None = None
        self.terminal: TerminalInterpreter | None = None
        self._started = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Load stored state and go live.  A shut-down session may start again."""
        if self._started:
            return
        if self.store is not None:
            # Engines load once; a restart reloads through a fresh one.
            self.persistence.deleteLater()
            self.persistence = PersistenceEngine(
                self.storage, self.config, self.bus, parent=self
            )
        project, settings = self.persistence.load_initial()
        self.store = ProjectStore(project, settings, parent=self)
        self.persistence.attach(self.store)
        self.executor = CommandExecutor(self.store, self.bus)
        self.terminal = TerminalInterpreter(self.executor, author=project.author, parent=self)
        self._started = True
        logger.info("Session started (storage: %s)", self.config.storage_dir)
        self.session_started.emit()

    def shutdown(self) -> None:
        if not self._started:
            return
        self.persistence.shutdown()
        self._started = False
        logger.info("Session shut down")

    @property
    def is_running(self) -> bool:
        return self._started

    def execute(self, name: str, payload: dict[str, Any] | None = None) -> None:
        """Shortcut for ``session.executor.execute``."""
        self._require_started()
        self.executor.execute(name, payload)

    def _require_started(self) -> None:
        if not self._started:
            raise RuntimeError("Session.start() must be called first.")

    # ------------------------------------------------------------------
    # Theme
    # ------------------------------------------------------------------

    def active_palette(self) -> CustomPalette:
        self._require_started()
        return resolve_palette(self.store.settings)

    def export_theme(self, path) -> None:
        self._require_started()
        self.persistence.export_theme(path, self.store.settings)

    def import_theme(self, path) -> None:
        """Import a theme file and make it the active custom theme.

        Raises ``ThemeImportInvalid`` with no state change on a bad file.
        """
        self._require_started()
        palette = self.persistence.import_theme(path)
        self.executor.execute(
            CommandKind.SET_THEME.value,
            {"theme": "custom", "customTheme": palette.to_record()},
        )

    # ------------------------------------------------------------------
    # Project files
    # ------------------------------------------------------------------

    def export_project(self, path) -> None:
        self._require_started()
        self.persistence.export_project(path, self.store.snapshot())

    def import_project(self, path) -> None:
        """Replace the project with the contents of a project file.

        Raises ``PersistenceLoadCorrupt`` with no state change on a bad file.
        """
        self._require_started()
        data = self.persistence.read_project_file(path)
        self.executor.execute(CommandKind.LOAD_PROJECT.value, {"project": data})

    # ------------------------------------------------------------------
    # Console panel preferences
    # ------------------------------------------------------------------

    def panel_preferences(self) -> PanelPreferences:
        return self.persistence.load_panel_preferences()

    def set_panel_preferences(self, height: int | None = None, minimized: bool | None = None) -> PanelPreferences:
        current = self.persistence.load_panel_preferences()
        prefs = PanelPreferences(
            height=current.height if height is None else height,
            minimized=current.minimized if minimized is None else minimized,
        )
        self.persistence.save_panel_preferences(prefs)
        return prefs
