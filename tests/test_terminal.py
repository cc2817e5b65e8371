"""
Tests for studio/services/terminal.py -- transcript, built-in commands,
delegation to the command executor and argument parsing.
"""

from unittest.mock import MagicMock

import pytest

from conlang.errors import InvalidPayload
from conlang.models.settings import AppSettings
from studio.services.command_executor import CommandExecutor
from studio.services.event_bus import EventBus
from studio.services.project_store import ProjectStore
from studio.services.terminal import (
    BANNER,
    EntryKind,
    TerminalInterpreter,
    parse_arguments,
)


@pytest.fixture
def store(qapp):
    return ProjectStore()


@pytest.fixture
def terminal(store):
    term = TerminalInterpreter(CommandExecutor(store), author="ana")
    term.start()
    return term


def _after_last_command(terminal):
    """Entries answering the most recent command line, as (kind, text)."""
    entries = list(terminal.transcript)
    last = max(i for i, e in enumerate(entries) if e.kind is EntryKind.COMMAND)
    return [(e.kind, e.text) for e in entries[last + 1:]]


# ======================================================================
# Transcript basics
# ======================================================================


class TestStart:
    def test_banner_then_help(self, terminal):
        entries = terminal.transcript
        assert entries[0].kind is EntryKind.INFO
        assert entries[0].text == BANNER
        assert entries[0].timestamp == ""
        assert (entries[1].kind, entries[1].text) == (EntryKind.COMMAND, "HELP")
        assert entries[2].text == "AVAILABLE COMMANDS:"

    def test_start_is_idempotent(self, terminal):
        count = len(terminal.transcript)
        terminal.start()
        assert len(terminal.transcript) == count

    def test_prompt_uses_author(self, terminal):
        assert terminal.prompt == "KoreLang-@ana:~$"

    def test_entries_are_timestamped(self, terminal):
        assert all(len(e.timestamp) == 8 for e in terminal.transcript[1:])


class TestSubmit:
    def test_blank_lines_ignored(self, terminal):
        receiver = MagicMock()
        terminal.transcript_changed.connect(receiver)
        count = len(terminal.transcript)
        terminal.submit("")
        terminal.submit("   \t ")
        assert len(terminal.transcript) == count
        receiver.assert_not_called()

    def test_submission_emits_change(self, terminal):
        receiver = MagicMock()
        terminal.transcript_changed.connect(receiver)
        terminal.submit("ABOUT")
        receiver.assert_called_once_with()

    def test_help_is_case_insensitive(self, terminal):
        terminal.submit("help")
        lower = _after_last_command(terminal)
        terminal.submit("HELP")
        upper = _after_last_command(terminal)
        assert lower == upper
        assert all(kind is EntryKind.OUTPUT for kind, _ in upper)

    def test_help_lists_studio_commands(self, terminal):
        terminal.submit("HELP")
        texts = [text for _, text in _after_last_command(terminal)]
        assert "CLEAR - Clears the terminal." in texts
        assert any("setTheme" in text for text in texts)

    def test_about(self, terminal):
        terminal.submit("about")
        assert _after_last_command(terminal) == [(EntryKind.OUTPUT, "KoreLang Console v1.1")]

    @pytest.mark.parametrize("word", ["CLEAR", "cls", "  Clear  "])
    def test_clear_resets_to_banner(self, terminal, word):
        terminal.submit("ABOUT")
        terminal.submit(word)
        entries = terminal.transcript
        assert len(entries) == 1
        assert (entries[0].kind, entries[0].text) == (EntryKind.INFO, BANNER)

    def test_unknown_command_echoes_raw_line(self, terminal):
        terminal.submit("Foo bar")
        last_two = terminal.transcript[-2:]
        assert (last_two[0].kind, last_two[0].text) == (EntryKind.COMMAND, "Foo bar")
        assert (last_two[1].kind, last_two[1].text) == (
            EntryKind.ERROR,
            "Command not recognized: Foo bar",
        )


# ======================================================================
# Delegation
# ======================================================================


class TestDelegation:
    def test_key_value_arguments(self, terminal, store):
        terminal.submit("setlanguage language=fr")
        assert store.settings.language == "fr"
        assert _after_last_command(terminal) == [(EntryKind.SUCCESS, "setLanguage: OK")]

    def test_json_arguments(self, terminal, store):
        terminal.submit('setTheme {"theme": "cappuccino"}')
        assert store.settings.theme == "cappuccino"

    def test_typed_values(self, terminal, store):
        terminal.submit("setAIEnabled aiEnabled=true")
        assert store.settings.enable_ai is True

    def test_quoted_values(self, terminal, store):
        terminal.submit('setGrammar grammar="Verb final, postpositions."')
        assert store.project.grammar == "Verb final, postpositions."

    def test_invalid_payload_reported(self, terminal, store):
        settings = store.settings
        terminal.submit("setLanguage")
        [(kind, text)] = _after_last_command(terminal)
        assert kind is EntryKind.ERROR
        assert text == "Invalid payload for setLanguage: 'language' is required by setLanguage."
        assert store.settings is settings

    def test_unparseable_arguments_reported(self, terminal):
        terminal.submit("setLanguage oops")
        [(kind, text)] = _after_last_command(terminal)
        assert kind is EntryKind.ERROR
        assert "'oops' is not a key=value argument." in text

    def test_argument_errors_reach_the_bus(self, store):
        bus = EventBus()
        failed = MagicMock()
        bus.command_failed.connect(failed)
        term = TerminalInterpreter(CommandExecutor(store, bus))
        term.submit("setLanguage oops")
        failed.assert_called_once()
        name, message = failed.call_args[0]
        assert name == "setLanguage"
        assert message == term.transcript[-1].text

    def test_payload_errors_reported_once(self, store):
        bus = EventBus()
        failed = MagicMock()
        bus.command_failed.connect(failed)
        term = TerminalInterpreter(CommandExecutor(store, bus))
        term.submit("setLanguage")
        failed.assert_called_once()

    def test_without_executor_nothing_delegates(self, qapp):
        term = TerminalInterpreter()
        term.submit("setLanguage language=fr")
        assert term.transcript[-1].kind is EntryKind.ERROR
        assert term.transcript[-1].text == "Command not recognized: setLanguage language=fr"

    def test_help_without_executor_lists_builtins_only(self, qapp):
        term = TerminalInterpreter()
        term.submit("HELP")
        texts = [text for _, text in _after_last_command(term)]
        assert len(texts) == 4


# ======================================================================
# parse_arguments
# ======================================================================


class TestParseArguments:
    def test_empty(self):
        assert parse_arguments("x", "   ") == {}

    def test_key_values(self):
        assert parse_arguments("x", 'a=1 b="two words" c=true d=plain e=[1,2]') == {
            "a": 1,
            "b": "two words",
            "c": True,
            "d": "plain",
            "e": [1, 2],
        }

    def test_json_object(self):
        assert parse_arguments("x", '{"theme": "dark"}') == {"theme": "dark"}

    @pytest.mark.parametrize("text", ['{"theme": ', "noequals", "=value", 'a="unterminated'])
    def test_rejected(self, text):
        with pytest.raises(InvalidPayload) as excinfo:
            parse_arguments("setTheme", text)
        assert excinfo.value.command == "setTheme"


class TestDefaults:
    def test_settings_untouched_by_builtins(self, terminal, store):
        terminal.submit("HELP")
        terminal.submit("CLEAR")
        assert store.settings.to_record() == AppSettings().to_record()
