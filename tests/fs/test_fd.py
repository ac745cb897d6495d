"""Tests for file descriptor bookkeeping.

The shell runs for as long as the user keeps typing, so a descriptor
leaked on an error path is leaked for good.  ``FdTable`` records every
descriptor the session opens; ``Session.opened()`` must leave the table
empty whether the body succeeds or raises.
"""

import os
from pathlib import Path

import pytest

from py_shell.fs.fd import FdError, FdTable, FileMode, OpenFileDescription
from py_shell.session import Session
from py_shell.syscalls import PathError


class TestFdDataStructures:
    """Verify the enum, error, and OpenFileDescription dataclass."""

    def test_fd_error_is_an_exception(self) -> None:
        """FdError should be a standard exception."""
        with pytest.raises(FdError, match="bad fd"):
            raise FdError("bad fd")

    def test_file_mode_values(self) -> None:
        """FileMode should have r and w members."""
        assert len(FileMode) == 2
        assert FileMode.READ == "r"
        assert FileMode.CREATE == "w"

    def test_open_file_description_is_frozen(self) -> None:
        """An open file description never changes once recorded."""
        ofd = OpenFileDescription(path="notes.txt", mode=FileMode.READ)
        with pytest.raises(AttributeError):
            ofd.path = "other.txt"  # type: ignore[misc]


class TestFdTable:
    """Verify registering, looking up, and releasing descriptors."""

    def test_new_table_is_empty(self) -> None:
        """A fresh table tracks nothing."""
        table = FdTable()
        assert len(table) == 0
        assert table.list_fds() == {}

    def test_register_and_lookup(self) -> None:
        """A registered fd should be found with its description."""
        table = FdTable()
        ofd = OpenFileDescription(path="a.txt", mode=FileMode.READ)
        table.register(7, ofd)
        assert table.lookup(7) is ofd
        assert 7 in table
        assert len(table) == 1

    def test_register_twice_fails(self) -> None:
        """The same number cannot be open twice."""
        table = FdTable()
        table.register(3, OpenFileDescription(path="a", mode=FileMode.READ))
        with pytest.raises(FdError, match="already open"):
            table.register(3, OpenFileDescription(path="b", mode=FileMode.READ))

    def test_release_forgets_fd(self) -> None:
        """Releasing returns the description and removes the entry."""
        table = FdTable()
        ofd = OpenFileDescription(path="out", mode=FileMode.CREATE)
        table.register(4, ofd)
        assert table.release(4) is ofd
        assert 4 not in table

    def test_lookup_unknown_fd_fails(self) -> None:
        """Looking up a number that is not open raises FdError."""
        with pytest.raises(FdError, match="Bad file descriptor"):
            FdTable().lookup(99)

    def test_list_fds_is_a_snapshot(self) -> None:
        """Mutating the snapshot must not touch the table."""
        table = FdTable()
        table.register(5, OpenFileDescription(path="x", mode=FileMode.READ))
        snapshot = table.list_fds()
        snapshot.clear()
        assert len(table) == 1


class TestSessionOpened:
    """Verify Session.opened() closes descriptors on every exit path."""

    def test_fd_registered_while_open(self, tmp_path: Path) -> None:
        """Inside the block the fd is registered under the typed path."""
        (tmp_path / "f.txt").write_text("data")
        session = Session(cwd=str(tmp_path))
        with session.opened("f.txt") as fd:
            ofd = session.fd_table.lookup(fd)
            assert ofd.path == "f.txt"
            assert ofd.mode is FileMode.READ
        assert len(session.fd_table) == 0

    def test_fd_closed_after_exception(self, tmp_path: Path) -> None:
        """An exception in the body still closes and forgets the fd."""
        (tmp_path / "f.txt").write_text("data")
        session = Session(cwd=str(tmp_path))
        with pytest.raises(RuntimeError), session.opened("f.txt") as fd:
            raise RuntimeError("boom")
        assert fd not in session.fd_table
        with pytest.raises(OSError):  # noqa: PT011
            os.fstat(fd)

    def test_open_failure_registers_nothing(self, tmp_path: Path) -> None:
        """A failed open leaves the table untouched."""
        session = Session(cwd=str(tmp_path))
        with pytest.raises(PathError), session.opened("missing.txt"):
            pass
        assert len(session.fd_table) == 0

    def test_create_mode_truncates(self, tmp_path: Path) -> None:
        """CREATE mode truncates an existing file, like creat()."""
        target = tmp_path / "out.txt"
        target.write_text("old contents")
        session = Session(cwd=str(tmp_path))
        with session.opened("out.txt", FileMode.CREATE) as fd:
            assert session.fd_table.lookup(fd).mode is FileMode.CREATE
        assert target.read_bytes() == b""
