"""Tests for the session audit log.

The logger records structured entries for every command and system
call, and can mirror them to a sink as they happen.
"""

import pytest

from py_shell.logging import LogEntry, Logger, LogLevel


class TestLogLevel:
    """Verify log level ordering and parsing."""

    def test_levels_are_ordered(self) -> None:
        """DEBUG < INFO < WARNING < ERROR."""
        assert LogLevel.DEBUG < LogLevel.INFO
        assert LogLevel.INFO < LogLevel.WARNING
        assert LogLevel.WARNING < LogLevel.ERROR

    @pytest.mark.parametrize(
        ("name", "level"),
        [("debug", LogLevel.DEBUG), ("INFO", LogLevel.INFO), (" Error ", LogLevel.ERROR)],
    )
    def test_parse(self, name: str, level: LogLevel) -> None:
        """Names parse regardless of case and surrounding spaces."""
        assert LogLevel.parse(name) is level

    def test_parse_unknown(self) -> None:
        """An unknown name raises ValueError."""
        with pytest.raises(ValueError, match="Unknown log level"):
            LogLevel.parse("verbose")


class TestLogEntry:
    """Verify log entry structure."""

    def test_entry_has_fields(self) -> None:
        """A log entry should store level, message, and source."""
        entry = LogEntry(level=LogLevel.INFO, message="pwd", source="shell")
        assert entry.level is LogLevel.INFO
        assert entry.message == "pwd"
        assert entry.source == "shell"

    def test_entry_str(self) -> None:
        """String form is ``[LEVEL] source: message``."""
        entry = LogEntry(level=LogLevel.WARNING, message="unrecognized: foo", source="shell")
        assert str(entry) == "[WARNING] shell: unrecognized: foo"


class TestLogger:
    """Verify the logger."""

    def test_log_stores_entries(self) -> None:
        """Logged entries should be retrievable."""
        logger = Logger()
        logger.log(LogLevel.INFO, "cwd is now /tmp", source="session")
        assert len(logger.entries) == 1
        assert logger.entries[0].message == "cwd is now /tmp"

    def test_entries_are_ordered(self) -> None:
        """Entries should be in chronological order."""
        logger = Logger()
        logger.log(LogLevel.INFO, "first", source="test")
        logger.log(LogLevel.INFO, "second", source="test")
        assert [e.message for e in logger.entries] == ["first", "second"]

    def test_entries_is_a_copy(self) -> None:
        """Mutating the returned list must not touch the log."""
        logger = Logger()
        logger.log(LogLevel.INFO, "kept", source="test")
        logger.entries.clear()
        assert len(logger.entries) == 1

    def test_filter_by_level(self) -> None:
        """filter(min_level=...) drops lower severities."""
        logger = Logger()
        logger.log(LogLevel.DEBUG, "noise", source="syscall")
        logger.log(LogLevel.ERROR, "failed", source="shell")
        assert [e.message for e in logger.filter(min_level=LogLevel.WARNING)] == ["failed"]

    def test_filter_by_source(self) -> None:
        """filter(source=...) keeps only that subsystem."""
        logger = Logger()
        logger.log(LogLevel.DEBUG, "SYS_STAT", source="syscall")
        logger.log(LogLevel.INFO, "stat f", source="shell")
        assert [e.message for e in logger.filter(source="syscall")] == ["SYS_STAT"]

    def test_filter_without_criteria_is_a_copy(self) -> None:
        """An unfiltered result is still a fresh list."""
        logger = Logger()
        logger.log(LogLevel.INFO, "x", source="test")
        logger.filter().clear()
        assert len(logger.entries) == 1

    def test_clear(self) -> None:
        """clear() removes every entry."""
        logger = Logger()
        logger.log(LogLevel.INFO, "x", source="test")
        logger.clear()
        assert logger.entries == []


class TestEchoSink:
    """Verify mirroring entries to a sink."""

    def test_no_sink_by_default(self) -> None:
        """Without a sink, logging only records."""
        logger = Logger()
        logger.log(LogLevel.ERROR, "quiet", source="test")
        assert len(logger.entries) == 1

    def test_sink_receives_entries_at_or_above_level(self) -> None:
        """Only entries at or above the echo level reach the sink."""
        seen: list[LogEntry] = []
        logger = Logger(echo_level=LogLevel.INFO, sink=seen.append)
        logger.log(LogLevel.DEBUG, "hidden", source="syscall")
        logger.log(LogLevel.INFO, "shown", source="shell")
        logger.log(LogLevel.ERROR, "also shown", source="shell")
        assert [e.message for e in seen] == ["shown", "also shown"]
        assert len(logger.entries) == 3

    def test_attach_after_creation(self) -> None:
        """attach() starts echoing from then on."""
        seen: list[LogEntry] = []
        logger = Logger()
        logger.log(LogLevel.ERROR, "before", source="test")
        logger.attach(seen.append, echo_level=LogLevel.DEBUG)
        logger.log(LogLevel.DEBUG, "after", source="test")
        assert [e.message for e in seen] == ["after"]
