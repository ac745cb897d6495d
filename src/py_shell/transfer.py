"""Buffered file transfer — the copy loop every byte-moving builtin uses.

``cat``, ``head``, ``cp`` and the standalone ``pycopy`` tool all do the
same thing: read a fixed-size chunk from one descriptor, write it to
another, repeat until a read returns nothing.  ``transfer()`` is that
loop, with an optional cap on the number of chunks (``head`` uses it
to print roughly the first few "lines" of a file).

Each call allocates its own buffer, so nothing survives from one
command to the next.

A write that stores fewer bytes than were read is treated as a failure
(``TransferError``) rather than silently dropping the remainder.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from py_shell.config import DEFAULT_CHUNK_SIZE
from py_shell.fs.fd import FileMode
from py_shell.syscalls import PathError, SyscallNumber, TransferError

if TYPE_CHECKING:
    from py_shell.session import Session


def transfer(
    source_fd: int,
    dest_fd: int,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    max_chunks: int | None = None,
) -> int:
    """Copy bytes from *source_fd* to *dest_fd* chunk by chunk.

    Args:
        source_fd: Readable descriptor.
        dest_fd: Writable descriptor.
        chunk_size: Bytes requested per read.
        max_chunks: Stop after this many chunks even if data remains.
            ``None`` means run until end of data.

    Returns:
        The total number of bytes transferred.

    Raises:
        ValueError: If *chunk_size* is not positive or *max_chunks* is
            negative.
        TransferError: If a read or write fails, or a write is short.
            ``operation`` is ``"read"`` or ``"write"``.

    """
    if chunk_size <= 0:
        msg = f"chunk_size must be positive, got {chunk_size}"
        raise ValueError(msg)
    if max_chunks is not None and max_chunks < 0:
        msg = f"max_chunks must not be negative, got {max_chunks}"
        raise ValueError(msg)

    buffer = bytearray(chunk_size)
    total = 0
    chunks = 0
    view = memoryview(buffer)
    while max_chunks is None or chunks < max_chunks:
        try:
            count = os.readv(source_fd, [buffer])
        except OSError as e:
            reason = e.strerror or str(e)
            raise TransferError(reason, errno=e.errno, operation="read", transferred=total) from e
        if count == 0:
            break

        try:
            written = os.write(dest_fd, view[:count])
        except OSError as e:
            reason = e.strerror or str(e)
            raise TransferError(reason, errno=e.errno, operation="write", transferred=total) from e
        if written != count:
            msg = f"short write ({written} of {count} bytes)"
            raise TransferError(msg, operation="write", transferred=total + written)

        total += count
        chunks += 1
    return total


def stream_file(
    session: Session,
    path: str,
    dest_fd: int,
    *,
    chunk_size: int,
    max_chunks: int | None = None,
    dest_name: str = "standard output",
) -> int:
    """Open *path* through *session* and transfer it to *dest_fd*.

    Raises:
        PathError: If *path* cannot be opened.
        TransferError: If the transfer fails; ``path`` is *path* for
            read failures and *dest_name* for write failures.

    """
    with session.opened(path) as source_fd:
        try:
            return transfer(source_fd, dest_fd, chunk_size=chunk_size, max_chunks=max_chunks)
        except TransferError as e:
            e.path = path if e.operation == "read" else dest_name
            raise


def copy_file(session: Session, source: str, destination: str) -> int:
    """Copy *source* to *destination*, creating or truncating it.

    The source is opened first, so a missing source never creates an
    empty destination.  A failure after the destination is created
    leaves a partial file behind.

    Returns:
        The number of bytes copied.

    Raises:
        PathError: If the source cannot be opened, the destination
            cannot be created, or both name the same file.
        TransferError: If the transfer fails; ``path`` names the side
            that failed.

    """
    with session.opened(source) as source_fd:
        _refuse_same_file(session, source, destination)
        with session.opened(destination, FileMode.CREATE) as dest_fd:
            try:
                return transfer(
                    source_fd,
                    dest_fd,
                    chunk_size=session.settings.chunk_size,
                )
            except TransferError as e:
                e.path = source if e.operation == "read" else destination
                raise


def _refuse_same_file(session: Session, source: str, destination: str) -> None:
    """Raise if *destination* already exists and is *source* itself.

    Creating the destination truncates it, which would destroy the
    source before a single byte is read.
    """
    try:
        dest_info = session.syscall(SyscallNumber.SYS_STAT, path=destination)
    except PathError:
        return
    source_info = session.syscall(SyscallNumber.SYS_STAT, path=source)
    if os.path.samestat(source_info, dest_info):
        msg = "source and destination are the same file"
        raise PathError(msg, path=destination, operation="create")
