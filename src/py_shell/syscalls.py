"""System call gateway — the one place the shell touches the OS.

Builtins never call ``os.*`` themselves.  They ask the session to make
a system call, and the session routes the request through
``dispatch_syscall()``:

1. ``SyscallNumber`` — an enum of every operation the shell needs.
   The numbering mirrors the syscall table idea (``__NR_open``,
   ``__NR_rename``, ...); only the grouping is meaningful.

2. ``SyscallError`` — the only exception callers ever see.  Handlers
   catch ``OSError`` and re-raise it as ``PathError`` (or, in the
   transfer primitive, ``TransferError``) so the builtin that reports
   it can say *which* operation failed on *which* path, with the
   OS-provided reason.

3. ``dispatch_syscall()`` — resolves relative paths against the
   session's working directory and calls the handler.  The process's
   own current directory is never consulted or changed.
"""

import errno as errno_codes
import os
import stat
from enum import IntEnum
from typing import Any

from py_shell.fs.fd import FileMode, OpenFileDescription


# How each failed operation is reported to the user.
_DESCRIPTIONS: dict[str, str] = {
    "cd": "cd: {path}: {reason}",
    "list": "Could not open directory {path}: {reason}",
    "open": "Unable to open {path}: {reason}",
    "create": "Unable to create {path}: {reason}",
    "read": "Unable to read file {path}: {reason}",
    "write": "Unable to write {path}: {reason}",
    "close": "Unable to close {path}: {reason}",
    "stat": "Could not stat file {path}: {reason}",
    "rename": "Unable to rename file {path}: {reason}",
    "unlink": "Unable to remove file {path}: {reason}",
    "mkdir": "Unable to make directory {path}: {reason}",
    "rmdir": "Unable to remove directory {path}: {reason}",
}


class SyscallNumber(IntEnum):
    """Enumerate every system call the shell makes."""

    # Working directory
    SYS_CHDIR = 1
    SYS_GETCWD = 2

    # Descriptors
    SYS_OPEN = 10
    SYS_CREATE_FILE = 11
    SYS_CLOSE = 12

    # Directory and metadata operations
    SYS_LIST_DIR = 20
    SYS_STAT = 21
    SYS_RENAME = 22
    SYS_UNLINK = 23
    SYS_MKDIR = 24
    SYS_RMDIR = 25


class SyscallError(Exception):
    """Raised when a system call fails.

    Attributes:
        reason: The OS-provided failure description (``strerror``).
        path: The path as the user typed it, when one applies.
        errno: The OS error number, when one applies.
        operation: Short name of what was attempted (``"open"``,
            ``"create"``, ``"read"``, ``"rename"``, ...).

    """

    def __init__(
        self,
        reason: str,
        *,
        path: str | None = None,
        errno: int | None = None,
        operation: str = "",
    ) -> None:
        """Create the error from its parts."""
        super().__init__(reason)
        self.reason = reason
        self.path = path
        self.errno = errno
        self.operation = operation

    def __str__(self) -> str:
        """Format as ``path: reason`` (or just the reason)."""
        if self.path is None:
            return self.reason
        return f"{self.path}: {self.reason}"

    def describe(self) -> str:
        """Return the one-line message a builtin prints for this error."""
        template = _DESCRIPTIONS.get(self.operation)
        if template is None or self.path is None:
            return str(self)
        return template.format(path=self.path, reason=self.reason)

    @classmethod
    def from_os_error(cls, exc: OSError, *, path: str | None, operation: str) -> "SyscallError":
        """Wrap an ``OSError`` raised by the OS."""
        reason = exc.strerror or str(exc)
        return cls(reason, path=path, errno=exc.errno, operation=operation)


class PathError(SyscallError):
    """A path could not be opened, inspected, or changed."""


class TransferError(SyscallError):
    """Reading from or writing to a descriptor failed mid-transfer.

    Attributes:
        transferred: Bytes successfully moved before the failure.

    """

    def __init__(
        self,
        reason: str,
        *,
        path: str | None = None,
        errno: int | None = None,
        operation: str = "",
        transferred: int = 0,
    ) -> None:
        """Create the error, recording how far the transfer got."""
        super().__init__(reason, path=path, errno=errno, operation=operation)
        self.transferred = transferred


def dispatch_syscall(
    session: Any,
    number: SyscallNumber,
    **kwargs: Any,
) -> Any:
    """Dispatch a system call to its handler.

    Args:
        session: The session whose working directory and fd table apply.
        number: The syscall number identifying the operation.
        **kwargs: Arguments specific to the syscall.

    Returns:
        The syscall result (type depends on the operation).

    Raises:
        SyscallError: If the syscall fails or the number is unknown.

    """
    handlers: dict[SyscallNumber, Any] = {
        SyscallNumber.SYS_CHDIR: _sys_chdir,
        SyscallNumber.SYS_GETCWD: _sys_getcwd,
        SyscallNumber.SYS_OPEN: _sys_open,
        SyscallNumber.SYS_CREATE_FILE: _sys_create_file,
        SyscallNumber.SYS_CLOSE: _sys_close,
        SyscallNumber.SYS_LIST_DIR: _sys_list_dir,
        SyscallNumber.SYS_STAT: _sys_stat,
        SyscallNumber.SYS_RENAME: _sys_rename,
        SyscallNumber.SYS_UNLINK: _sys_unlink,
        SyscallNumber.SYS_MKDIR: _sys_mkdir,
        SyscallNumber.SYS_RMDIR: _sys_rmdir,
    }
    handler = handlers.get(number)
    if handler is None:
        msg = f"Unknown syscall number: {number}"
        raise SyscallError(msg)
    return handler(session, **kwargs)


# -- Working directory -------------------------------------------------------


def _sys_chdir(session: Any, **kwargs: Any) -> str:
    """Validate a new working directory and return its absolute path.

    The session stores the result; nothing here touches ``os.chdir``.
    """
    path: str = kwargs["path"]
    target = session.resolve(path)
    try:
        info = os.stat(target)
    except OSError as e:
        raise PathError.from_os_error(e, path=path, operation="cd") from e
    if not stat.S_ISDIR(info.st_mode):
        code = errno_codes.ENOTDIR
        raise PathError(os.strerror(code), path=path, errno=code, operation="cd")
    if not os.access(target, os.X_OK):
        code = errno_codes.EACCES
        raise PathError(os.strerror(code), path=path, errno=code, operation="cd")
    return os.path.realpath(target)


def _sys_getcwd(session: Any, **_kwargs: Any) -> str:
    """Return the session's working directory."""
    cwd: str = session.cwd
    return cwd


# -- Descriptors ---------------------------------------------------------------


def _sys_open(session: Any, **kwargs: Any) -> int:
    """Open a file read-only and register the descriptor."""
    path: str = kwargs["path"]
    try:
        fd = os.open(session.resolve(path), os.O_RDONLY)
    except OSError as e:
        raise PathError.from_os_error(e, path=path, operation="open") from e
    session.fd_table.register(fd, OpenFileDescription(path=path, mode=FileMode.READ))
    return fd


def _sys_create_file(session: Any, **kwargs: Any) -> int:
    """Create (or truncate) a file for writing, like ``creat()``."""
    path: str = kwargs["path"]
    mode: int = kwargs["mode"]
    flags = os.O_WRONLY | os.O_CREAT | os.O_TRUNC
    try:
        fd = os.open(session.resolve(path), flags, mode)
    except OSError as e:
        raise PathError.from_os_error(e, path=path, operation="create") from e
    session.fd_table.register(fd, OpenFileDescription(path=path, mode=FileMode.CREATE))
    return fd


def _sys_close(session: Any, **kwargs: Any) -> None:
    """Close a descriptor; it is forgotten even if ``close()`` fails."""
    fd: int = kwargs["fd"]
    ofd = session.fd_table.release(fd)
    try:
        os.close(fd)
    except OSError as e:
        raise PathError.from_os_error(e, path=ofd.path, operation="close") from e


# -- Directory and metadata operations ------------------------------------------


def _sys_list_dir(session: Any, **kwargs: Any) -> list[str]:
    """Return entry names in the order the OS yields them."""
    path: str = kwargs["path"]
    try:
        with os.scandir(session.resolve(path)) as entries:
            return [entry.name for entry in entries]
    except OSError as e:
        raise PathError.from_os_error(e, path=path, operation="list") from e


def _sys_stat(session: Any, **kwargs: Any) -> os.stat_result:
    """Return metadata for a path (following symlinks)."""
    path: str = kwargs["path"]
    try:
        return os.stat(session.resolve(path))
    except OSError as e:
        raise PathError.from_os_error(e, path=path, operation="stat") from e


def _sys_rename(session: Any, **kwargs: Any) -> None:
    """Rename *old* to *new* atomically."""
    old: str = kwargs["old"]
    new: str = kwargs["new"]
    try:
        os.rename(session.resolve(old), session.resolve(new))
    except OSError as e:
        raise PathError.from_os_error(e, path=old, operation="rename") from e


def _sys_unlink(session: Any, **kwargs: Any) -> None:
    """Remove a file."""
    path: str = kwargs["path"]
    try:
        os.unlink(session.resolve(path))
    except OSError as e:
        raise PathError.from_os_error(e, path=path, operation="unlink") from e


def _sys_mkdir(session: Any, **kwargs: Any) -> None:
    """Create a directory with the given permission bits."""
    path: str = kwargs["path"]
    mode: int = kwargs["mode"]
    try:
        os.mkdir(session.resolve(path), mode)
    except OSError as e:
        raise PathError.from_os_error(e, path=path, operation="mkdir") from e


def _sys_rmdir(session: Any, **kwargs: Any) -> None:
    """Remove an empty directory."""
    path: str = kwargs["path"]
    try:
        os.rmdir(session.resolve(path))
    except OSError as e:
        raise PathError.from_os_error(e, path=path, operation="rmdir") from e
