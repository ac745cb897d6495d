"""File descriptors — tracking every descriptor the shell holds open.

Builtins reach files through **file descriptors**, the small integers
``os.open()`` hands back.  The workflow is:

1. ``open(path)`` → the OS allocates the lowest available fd number.
2. ``read(fd)`` / ``write(fd)`` → move bytes through the descriptor.
3. ``close(fd)`` → releases the number for reuse.

The interpreter runs until the user types ``exit``, so a descriptor
that is not closed on an error path stays open for the rest of the
session; enough of them and ``open()`` starts failing with
``EMFILE``.  The session therefore registers every descriptor it opens
in an ``FdTable`` and removes it on close, which makes a leak
observable: after any command the table must be empty.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class FdError(Exception):
    """Raise when a file descriptor bookkeeping operation fails."""


class FileMode(StrEnum):
    """Access mode for an open file.

    - READ   — read-only access (``O_RDONLY``).
    - CREATE — write-only, created or truncated (``creat()``).
    """

    READ = "r"
    CREATE = "w"


@dataclass(frozen=True)
class OpenFileDescription:
    """Record which path a descriptor refers to and how it was opened."""

    path: str
    mode: FileMode


class FdTable:
    """Mapping from open fd numbers to their descriptions.

    Numbers come from the OS, so unlike a kernel fd table this one never
    allocates; it only records and forgets.
    """

    def __init__(self) -> None:
        """Create an empty fd table."""
        self._fds: dict[int, OpenFileDescription] = {}

    def register(self, fd: int, ofd: OpenFileDescription) -> None:
        """Record that *fd* is open.

        Raises:
            FdError: If *fd* is already registered.

        """
        if fd in self._fds:
            msg = f"File descriptor already open: {fd}"
            raise FdError(msg)
        self._fds[fd] = ofd

    def lookup(self, fd: int) -> OpenFileDescription:
        """Return the open file description for a given fd.

        Raises:
            FdError: If the fd is not open.

        """
        ofd = self._fds.get(fd)
        if ofd is None:
            msg = f"Bad file descriptor: {fd}"
            raise FdError(msg)
        return ofd

    def release(self, fd: int) -> OpenFileDescription:
        """Forget *fd* and return what it referred to.

        Raises:
            FdError: If the fd is not open.

        """
        ofd = self.lookup(fd)
        del self._fds[fd]
        return ofd

    def list_fds(self) -> dict[int, OpenFileDescription]:
        """Return a snapshot of all open fds."""
        return dict(self._fds)

    def __len__(self) -> int:
        """Return the number of open fds."""
        return len(self._fds)

    def __contains__(self, fd: object) -> bool:
        """Return whether *fd* is currently registered."""
        return fd in self._fds
