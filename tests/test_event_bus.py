"""
Tests for studio/services/event_bus.py -- signal declarations and delivery.
"""

from unittest.mock import MagicMock

from studio.services.event_bus import EventBus


class TestSignals:
    def test_declared_signals(self, qapp):
        bus = EventBus()
        for name in (
            "command_executed",
            "command_failed",
            "record_saved",
            "persistence_failed",
            "status_message",
        ):
            assert hasattr(bus, name)

    def test_command_executed(self, qapp):
        bus = EventBus()
        receiver = MagicMock()
        bus.command_executed.connect(receiver)
        bus.command_executed.emit("setTheme")
        receiver.assert_called_once_with("setTheme")

    def test_command_failed_carries_message(self, qapp):
        bus = EventBus()
        receiver = MagicMock()
        bus.command_failed.connect(receiver)
        bus.command_failed.emit("setLanguage", "Invalid payload for setLanguage: ...")
        receiver.assert_called_once_with("setLanguage", "Invalid payload for setLanguage: ...")

    def test_persistence_signals(self, qapp):
        bus = EventBus()
        saved, failed = MagicMock(), MagicMock()
        bus.record_saved.connect(saved)
        bus.persistence_failed.connect(failed)
        bus.record_saved.emit("conlang_studio_autosave")
        bus.persistence_failed.emit("Auto-save failed: disk full")
        saved.assert_called_once_with("conlang_studio_autosave")
        failed.assert_called_once_with("Auto-save failed: disk full")


class TestIsolation:
    def test_buses_are_independent(self, qapp):
        first, second = EventBus(), EventBus()
        receiver = MagicMock()
        first.status_message.connect(receiver)
        second.status_message.emit("Saved")
        receiver.assert_not_called()
