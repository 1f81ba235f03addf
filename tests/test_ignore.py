"""Tests for the ignore gate."""

from mirror_backup.sync.events import InfoEvent
from mirror_backup.sync.ignore import ALWAYS_IGNORED, IgnoreGate


class TestIgnoreGate:
    """Test suite for IgnoreGate decisions."""

    def test_root_always_accepted(self):
        gate = IgnoreGate(["*"])

        assert gate.accept(()) is True

    def test_builtin_patterns_always_present(self):
        gate = IgnoreGate(["*.log", "node_modules"])

        assert gate.patterns[:2] == ALWAYS_IGNORED
        assert gate.patterns == ("node_modules", ".git", "*.log")

    def test_node_modules_and_git_rejected_at_any_depth(self):
        gate = IgnoreGate()

        assert gate.accept(("node_modules",)) is False
        assert gate.accept(("pkg", "node_modules")) is False
        assert gate.accept(("node_modules", "pkg", "index.js")) is False
        assert gate.accept((".git",)) is False
        assert gate.accept(("src", "main.py")) is True
        assert gate.accept((".gitignore",)) is True

    def test_custom_glob_pattern(self):
        gate = IgnoreGate(["*.log"])

        assert gate.accept(("debug.log",)) is False
        assert gate.accept(("a", "b", "trace.log")) is False
        assert gate.accept(("notes.txt",)) is True

    def test_directory_only_pattern(self):
        gate = IgnoreGate(["build/"])

        assert gate.accept(("build",), is_dir=True) is False
        assert gate.accept(("build",), is_dir=False) is True
        assert gate.accept(("build", "out.bin")) is False

    def test_negated_pattern(self):
        gate = IgnoreGate(["*.log", "!keep.log"])

        assert gate.accept(("drop.log",)) is False
        assert gate.accept(("keep.log",)) is True

    def test_every_decision_is_emitted(self, bus, events):
        gate = IgnoreGate(bus=bus)

        gate.accept(())
        gate.accept(("node_modules",))
        gate.accept(("readme.md",))

        assert events.info == [
            InfoEvent("accept", ()),
            InfoEvent("reject", ("node_modules",)),
            InfoEvent("accept", ("readme.md",)),
        ]

    def test_failing_sink_does_not_change_decision(self, bus):
        def broken(event):
            raise RuntimeError("sink is down")

        bus.on_info(broken)
        gate = IgnoreGate(bus=bus)

        assert gate.accept(("node_modules",)) is False
        assert gate.accept(("a.txt",)) is True

    def test_is_ignored_emits_nothing(self, bus, events):
        gate = IgnoreGate(bus=bus)

        assert gate.is_ignored((".git",)) is True
        assert events.info == []
