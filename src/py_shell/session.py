"""The session — all state the interpreter carries between commands.

A traditional shell leans on process-wide state: the OS current directory, plus
global buffers shared by every builtin.  The session replaces both with
explicit, owned fields:

- **cwd** — the working directory.  Only ``change_directory()``
  mutates it; the prompt, path resolution, ``ls`` and ``pwd`` read it.
  The Python process's own current directory is left alone, so several
  sessions (or a test suite) can coexist in one process.
- **fd_table** — every descriptor currently open on the session's
  behalf.  ``opened()`` guarantees each one is closed on every exit
  path.
- **logger** — the audit log; every syscall is recorded at DEBUG.

Transfer buffers are not session state at all: each transfer allocates
its own.
"""

import os
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from py_shell.config import Settings
from py_shell.fs.fd import FdTable, FileMode
from py_shell.logging import Logger, LogLevel
from py_shell.syscalls import SyscallNumber, dispatch_syscall


class Session:
    """Working directory, settings, descriptor table, and audit log."""

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        cwd: str | None = None,
        home: str | None = None,
        logger: Logger | None = None,
    ) -> None:
        """Create a session.

        Args:
            settings: Shell settings (defaults when omitted).
            cwd: Initial working directory; the process's current
                directory when omitted.
            home: Target of a bare ``cd``; the user's home directory
                when omitted.
            logger: Audit log to record into (a fresh one when omitted).

        """
        self._settings = settings if settings is not None else Settings()
        self._cwd = os.path.realpath(cwd if cwd is not None else os.getcwd())
        self._home = home if home is not None else os.path.expanduser("~")
        self._logger = logger if logger is not None else Logger()
        self._fd_table = FdTable()

    @property
    def settings(self) -> Settings:
        """Return the session settings."""
        return self._settings

    @property
    def cwd(self) -> str:
        """Return the absolute working directory."""
        return self._cwd

    @property
    def home(self) -> str:
        """Return the directory a bare ``cd`` moves to."""
        return self._home

    @property
    def logger(self) -> Logger:
        """Return the audit log."""
        return self._logger

    @property
    def fd_table(self) -> FdTable:
        """Return the table of descriptors currently open."""
        return self._fd_table

    def resolve(self, path: str) -> str:
        """Return *path* made absolute against the working directory."""
        return os.path.join(self._cwd, path)

    def syscall(self, number: SyscallNumber, **kwargs: Any) -> Any:
        """Execute a system call through the gateway.

        Args:
            number: The syscall number identifying the operation.
            **kwargs: Arguments specific to the syscall.

        Returns:
            The syscall result (type depends on the operation).

        Raises:
            SyscallError: If the syscall fails.

        """
        shown = " ".join(f"{key}={value!r}" for key, value in kwargs.items())
        self._logger.log(LogLevel.DEBUG, f"{number.name} {shown}".rstrip(), source="syscall")
        return dispatch_syscall(self, number, **kwargs)

    def change_directory(self, path: str = "") -> str:
        """Move the working directory; an empty *path* means home.

        Returns:
            The new working directory.

        Raises:
            PathError: If *path* is missing, not a directory, or not
                searchable.  The working directory is unchanged.

        """
        target = path or self._home
        new_cwd: str = self.syscall(SyscallNumber.SYS_CHDIR, path=target)
        self._cwd = new_cwd
        self._logger.log(LogLevel.INFO, f"cwd is now {new_cwd}", source="session")
        return new_cwd

    @contextmanager
    def opened(self, path: str, mode: FileMode = FileMode.READ) -> Iterator[int]:
        """Open *path* and yield its descriptor, closing it on exit.

        ``FileMode.CREATE`` creates or truncates the file with the
        configured file mode, like ``creat()``.

        Raises:
            PathError: If the file cannot be opened or created.

        """
        if mode is FileMode.CREATE:
            fd: int = self.syscall(
                SyscallNumber.SYS_CREATE_FILE, path=path, mode=self._settings.file_mode
            )
        else:
            fd = self.syscall(SyscallNumber.SYS_OPEN, path=path)
        try:
            yield fd
        finally:
            self.syscall(SyscallNumber.SYS_CLOSE, fd=fd)

    def dmesg(self) -> list[str]:
        """Return the audit log as formatted lines."""
        return [str(entry) for entry in self._logger.entries]
