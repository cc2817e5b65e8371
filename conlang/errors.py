"""
conlang/errors.py -- Exception taxonomy for the studio core.

Command errors (``UnknownCommand``, ``InvalidPayload``) surface to whichever
consumer issued the command.  Persistence errors are raised by the storage
layer and recovered inside the persistence engine.  ``ThemeImportInvalid``
is shown to the user and leaves state untouched.
"""

from __future__ import annotations


class StudioError(Exception):
    """Base class for every error raised by the studio core."""


# ------------------------------------------------------------------
# Command errors
# ------------------------------------------------------------------

class CommandError(StudioError):
    """A command could not be applied.  State is left unchanged."""

    def __init__(self, command: str, message: str):
        super().__init__(message)
        self.command = command
        self.message = message


class UnknownCommand(CommandError):
    """The command name is not part of the command vocabulary."""

    def __init__(self, command: str):
        super().__init__(command, f"Unknown command: {command}")


class InvalidPayload(CommandError):
    """A known command received malformed arguments.

    Attributes
    ----------
    errors : list[str]
        One human-readable message per problem found.
    """

    def __init__(self, command: str, errors: list[str]):
        self.errors = list(errors)
        detail = "; ".join(self.errors) or "invalid payload"
        super().__init__(command, f"Invalid payload for {command}: {detail}")


# ------------------------------------------------------------------
# Persistence errors
# ------------------------------------------------------------------

class PersistenceError(StudioError):
    """Durable storage could not be read or written."""


class PersistenceWriteFailure(PersistenceError):
    """A record could not be serialized or written."""


class PersistenceLoadCorrupt(PersistenceError):
    """A stored record or file exists but cannot be parsed."""


# ------------------------------------------------------------------
# Theme interchange
# ------------------------------------------------------------------

class ThemeImportInvalid(StudioError):
    """An imported theme file is not a mapping of palette colors."""
