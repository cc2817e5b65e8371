"""
studio/main.py -- Console entry point.

Starts a studio session and runs the KoreLang console over stdin/stdout.
Every line goes through the same command vocabulary the settings panel
uses; changes are autosaved to the platform data directory before the next
prompt is shown.

Usage::

    korelang
    korelang --data-dir ./my-lang --debounce-ms 0
    python -m studio.main
"""

from __future__ import annotations

import argparse
import logging
import sys
import traceback

from PySide6.QtCore import QCoreApplication

from studio.config import DEFAULT_DEBOUNCE_MS, StudioConfig
from studio.services.session_manager import Session
from studio.services.terminal import EntryKind, LogEntry


def _setup_logging(verbose: bool = False) -> None:
    """Configure logging for the console application."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def _global_exception_hook(exc_type, exc_value, exc_tb):
    """Last-resort handler for uncaught exceptions."""
    logger = logging.getLogger("studio")
    logger.critical(
        "Uncaught exception: %s",
        "".join(traceback.format_exception(exc_type, exc_value, exc_tb)),
    )


def _render(entry: LogEntry, prompt: str) -> str:
    if entry.kind is EntryKind.COMMAND:
        return f"{prompt} {entry.text}"
    if entry.kind is EntryKind.ERROR:
        return f"! {entry.text}"
    return entry.text


def _parse_args(argv):
    parser = argparse.ArgumentParser(description="KoreLang Studio console")
    parser.add_argument("--data-dir", help="Directory for autosaved records")
    parser.add_argument(
        "--debounce-ms",
        type=int,
        default=DEFAULT_DEBOUNCE_MS,
        help="Delay before changes are written (0 = immediately)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Run the KoreLang console until end of input."""
    args = _parse_args(argv)
    _setup_logging(args.verbose)
    sys.excepthook = _global_exception_hook

    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])

    config = StudioConfig.default(storage_dir=args.data_dir, debounce_ms=args.debounce_ms)
    session = Session(config)
    session.start()
    terminal = session.terminal

    shown = 0

    def _print_new(echoed: bool = False):
        nonlocal shown
        entries = terminal.transcript
        if len(entries) < shown:
            shown = 0  # transcript was cleared
        for entry in entries[shown:]:
            if echoed and entry.kind is EntryKind.COMMAND:
                # The typed line is already on screen.
                echoed = False
                continue
            print(_render(entry, terminal.prompt))
        shown = len(entries)

    terminal.start()
    _print_new()

    try:
        while True:
            try:
                line = input(f"{terminal.prompt} ")
            except EOFError:
                break
            terminal.submit(line)
            _print_new(echoed=True)
            app.processEvents()
            # Timers cannot fire while input() blocks; each line is a save point.
            session.persistence.flush()
    except KeyboardInterrupt:
        print()
    finally:
        session.shutdown()

    return 0


if __name__ == "__main__":
    sys.exit(main())
