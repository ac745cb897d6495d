"""Session audit log.

Every command the shell runs and every system call it makes leaves an
entry here, an in-memory trail similar to the kernel ring buffer that
``dmesg`` reads on Linux:

- **LogLevel** — severity levels ordered for filtering (DEBUG < ERROR).
- **LogEntry** — a single structured record (level, message, source).
- **Logger** — an append-only log with filtering, clearing, and an
  optional *echo sink* that mirrors entries at or above a chosen level
  (the REPL points it at standard error when ``PYSHELL_LOG_LEVEL`` is
  set).
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum


class LogLevel(IntEnum):
    """Severity levels for log entries.

    Using IntEnum means levels compare with ``<`` / ``>`` naturally,
    which makes minimum-level filtering trivial.
    """

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3

    @classmethod
    def parse(cls, name: str) -> "LogLevel":
        """Return the level called *name* (case-insensitive).

        Raises:
            ValueError: If *name* is not a level name.

        """
        try:
            return cls[name.strip().upper()]
        except KeyError:
            msg = f"Unknown log level: {name!r}"
            raise ValueError(msg) from None


@dataclass(frozen=True)
class LogEntry:
    """A single structured log record.

    Attributes:
        level: The severity of this event.
        message: A human-readable description of what happened.
        source: The subsystem that generated the event (e.g. "syscall").

    """

    level: LogLevel
    message: str
    source: str

    def __str__(self) -> str:
        """Format as ``[LEVEL] source: message``."""
        return f"[{self.level.name}] {self.source}: {self.message}"


_Sink = Callable[[LogEntry], None]


class Logger:
    """Append-only log buffer with filtering."""

    def __init__(self, *, echo_level: LogLevel | None = None, sink: _Sink | None = None) -> None:
        """Create an empty logger.

        Args:
            echo_level: Entries at or above this level are also passed
                to *sink*.  ``None`` disables echoing.
            sink: Callable receiving echoed entries.

        """
        self._entries: list[LogEntry] = []
        self._echo_level = echo_level
        self._sink = sink

    @property
    def entries(self) -> list[LogEntry]:
        """Return all log entries in chronological order."""
        return list(self._entries)

    def attach(self, sink: _Sink, *, echo_level: LogLevel) -> None:
        """Start mirroring entries at or above *echo_level* to *sink*."""
        self._sink = sink
        self._echo_level = echo_level

    def log(self, level: LogLevel, message: str, *, source: str) -> None:
        """Append a new entry to the log.

        Args:
            level: Severity of the event.
            message: Human-readable event description.
            source: Subsystem that generated the event.

        """
        entry = LogEntry(level=level, message=message, source=source)
        self._entries.append(entry)
        if self._sink is not None and self._echo_level is not None and level >= self._echo_level:
            self._sink(entry)

    def filter(
        self,
        *,
        min_level: LogLevel | None = None,
        source: str | None = None,
    ) -> list[LogEntry]:
        """Return entries matching the given criteria.

        Args:
            min_level: If set, only return entries at or above this level.
            source: If set, only return entries from this source.

        Returns:
            A filtered list of log entries.

        """
        result = self._entries
        if min_level is not None:
            result = [e for e in result if e.level >= min_level]
        if source is not None:
            result = [e for e in result if e.source == source]
        return result if result is not self._entries else list(result)

    def clear(self) -> None:
        """Remove all log entries."""
        self._entries.clear()
