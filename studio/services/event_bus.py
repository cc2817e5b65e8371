"""
studio/services/event_bus.py -- Session event bus using Qt signals.

One bus per session.  The command executor and the persistence engine
report outcomes here, and UI consumers (settings panel, status bar,
console) connect to it rather than to each other.

Usage::

    from studio.services.event_bus import EventBus

    bus = EventBus()
    bus.command_failed.connect(show_inline_error)
"""

from __future__ import annotations

from PySide6.QtCore import QObject, Signal


class EventBus(QObject):
    """Signal hub for one studio session.

    Signals
    -------
    command_executed(str)
        A command was applied.  Payload is the command name.
    command_failed(str, str)
        A command was rejected.  Payload is the command name and the
        message shown to the user.
    record_saved(str)
        A storage record was written.  Payload is the storage key.
    persistence_failed(str)
        A write was dropped.  In-memory state stays authoritative.
    status_message(str)
        Free-form status bar text.
    """

    command_executed = Signal(str)
    command_failed = Signal(str, str)

    record_saved = Signal(str)
    persistence_failed = Signal(str)

    status_message = Signal(str)
