"""
studio/services/terminal.py -- Text console over the command vocabulary.

The console keeps an append-only transcript.  Each submitted line is
recorded as a ``command`` entry and then answered:

    CLEAR / CLS   reset the transcript to the banner
    HELP          list the console and studio commands
    ABOUT         console version

Any other line whose first word names an executor command (matched without
regard to case) is handed to the CommandExecutor, with the rest of the line
as payload: either a JSON object or ``key=value`` words.  Validation and
error messages are therefore the executor's own.

Usage::

    terminal = TerminalInterpreter(executor, author="ana")
    terminal.start()                         # banner + HELP
    terminal.submit('setTheme theme=custom')
    for entry in terminal.transcript: ...
"""

from __future__ import annotations

import json
import logging
import shlex
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from PySide6.QtCore import QObject, Signal

from conlang.errors import CommandError, InvalidPayload
from studio.services.command_executor import CommandExecutor

logger = logging.getLogger(__name__)

CONSOLE_VERSION = "1.1"

BANNER = f"KoreLang kernel_v{CONSOLE_VERSION} -- conlang studio console"


class EntryKind(str, Enum):
    COMMAND = "command"
    OUTPUT = "output"
    ERROR = "error"
    INFO = "info"
    SUCCESS = "success"


@dataclass(frozen=True)
class LogEntry:
    """One transcript line.  ``attachment`` carries optional rendered content."""

    kind: EntryKind
    text: str
    timestamp: str
    attachment: Any = None


def parse_arguments(command: str, text: str) -> dict[str, Any]:
    """Parse the argument part of a delegated console line.

    ``{"theme": "dark"}`` is read as a JSON object.  Otherwise the text is
    split shell-style into ``key=value`` words; each value is decoded as
    JSON when possible (``true``, ``42``, ``["a"]``) and kept as a string
    otherwise.

    Raises
    ------
    InvalidPayload
        If the arguments cannot be parsed.
    """
    text = text.strip()
    if not text:
        return {}
    if text.startswith("{"):
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise InvalidPayload(command, [f"arguments are not valid JSON ({exc.msg})."]) from exc
        if not isinstance(data, dict):
            raise InvalidPayload(command, ["arguments must be a JSON object."])
        return data

    try:
        words = shlex.split(text)
    except ValueError as exc:
        raise InvalidPayload(command, [f"cannot parse arguments ({exc})."]) from exc

    payload: dict[str, Any] = {}
    for word in words:
        key, sep, raw = word.partition("=")
        if not sep or not key:
            raise InvalidPayload(command, [f"'{word}' is not a key=value argument."])
        try:
            payload[key] = json.loads(raw)
        except json.JSONDecodeError:
            payload[key] = raw
    return payload


class TerminalInterpreter(QObject):
    """Console command interpreter with an append-only transcript.

    Signals
    -------
    transcript_changed()
        Emitted after each submission or clear.
    """

    transcript_changed = Signal()

    def __init__(
        self,
        executor: CommandExecutor | None = None,
        author: str = "user",
        parent: QObject | None = None,
    ):
        super().__init__(parent)
        self._executor = executor
        self.author = author
        self._transcript: list[LogEntry] = []

        self._builtins = {
            "CLEAR": self._cmd_clear,
            "CLS": self._cmd_clear,
            "HELP": self._cmd_help,
            "ABOUT": self._cmd_about,
        }

    # ------------------------------------------------------------------
    # Transcript
    # ------------------------------------------------------------------

    @property
    def transcript(self) -> tuple[LogEntry, ...]:
        return tuple(self._transcript)

    @property
    def prompt(self) -> str:
        return f"KoreLang-@{self.author}:~$"

    def _log(self, kind: EntryKind, text: str, attachment: Any = None) -> None:
        stamp = datetime.now().strftime("%H:%M:%S")
        self._transcript.append(LogEntry(kind, text, stamp, attachment))

    def start(self) -> None:
        """First render: write the banner and run HELP, once."""
        if self._transcript:
            return
        self._reset_to_banner()
        self.submit("HELP")

    def _reset_to_banner(self) -> None:
        self._transcript = [LogEntry(EntryKind.INFO, BANNER, "")]

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def submit(self, line: str) -> None:
        """Record and answer one console line.  Blank lines are ignored."""
        if not line.strip():
            return
        self._log(EntryKind.COMMAND, line)

        stripped = line.strip()
        builtin = self._builtins.get(stripped.upper())
        if builtin is not None:
            builtin()
        elif not self._delegate(stripped):
            self._log(EntryKind.ERROR, f"Command not recognized: {line}")

        self.transcript_changed.emit()

    def _delegate(self, stripped: str) -> bool:
        """Hand the line to the executor if it names a command."""
        if self._executor is None:
            return False
        name, _, rest = stripped.partition(" ")
        kind = CommandExecutor.lookup(name, ignore_case=True)
        if kind is None:
            return False

        try:
            payload = parse_arguments(kind.value, rest)
        except InvalidPayload as exc:
            self._executor.report_rejection(exc)
            self._log(EntryKind.ERROR, exc.message)
            return True

        try:
            self._executor.execute(kind.value, payload)
        except CommandError as exc:
            self._log(EntryKind.ERROR, exc.message)
            return True
        self._log(EntryKind.SUCCESS, f"{kind.value}: OK")
        return True

    # ------------------------------------------------------------------
    # Built-in commands
    # ------------------------------------------------------------------

    def _cmd_clear(self) -> None:
        self._reset_to_banner()

    def _cmd_help(self) -> None:
        self._log(EntryKind.OUTPUT, "AVAILABLE COMMANDS:")
        self._log(EntryKind.OUTPUT, "CLEAR - Clears the terminal.")
        self._log(EntryKind.OUTPUT, "HELP - Shows this help message.")
        self._log(EntryKind.OUTPUT, "ABOUT - Shows info about this console.")
        if self._executor is not None:
            self._log(
                EntryKind.OUTPUT,
                "STUDIO COMMANDS (<name> key=value ... or <name> {json}):",
            )
            self._log(EntryKind.OUTPUT, ", ".join(CommandExecutor.vocabulary()))

    def _cmd_about(self) -> None:
        self._log(EntryKind.OUTPUT, f"KoreLang Console v{CONSOLE_VERSION}")
