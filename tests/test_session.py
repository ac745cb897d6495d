"""Tests for the session — the explicit owner of the working directory.

The session replaces process-wide state: the working directory is a
field, so changing it never touches ``os.getcwd()`` and a failed change
leaves it exactly as it was.
"""

import os
from pathlib import Path

import pytest

from py_shell.config import Settings
from py_shell.logging import Logger, LogLevel
from py_shell.session import Session
from py_shell.syscalls import PathError


class TestSessionCreation:
    """Verify defaults and explicit arguments."""

    def test_defaults_to_process_cwd(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Without a cwd argument the session starts where the process is."""
        monkeypatch.chdir(tmp_path)
        assert Session().cwd == os.path.realpath(tmp_path)

    def test_home_defaults_to_user_home(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """The default home comes from the user's home directory."""
        monkeypatch.setenv("HOME", str(tmp_path))
        assert Session(cwd="/").home == str(tmp_path)

    def test_default_settings(self) -> None:
        """A session without settings uses the defaults."""
        assert Session(cwd="/").settings == Settings()

    def test_shares_given_logger(self) -> None:
        """An injected logger receives the session's entries."""
        logger = Logger()
        session = Session(cwd="/", logger=logger)
        assert session.logger is logger

    def test_resolve(self, tmp_path: Path) -> None:
        """resolve() joins relative paths onto the working directory."""
        session = Session(cwd=str(tmp_path))
        assert session.resolve("x/y") == os.path.join(os.path.realpath(tmp_path), "x/y")
        assert session.resolve("/etc") == "/etc"


class TestChangeDirectory:
    """Verify cd semantics on the session."""

    def test_change_to_existing_dir(self, tmp_path: Path) -> None:
        """cd into an existing directory updates cwd."""
        (tmp_path / "sub").mkdir()
        session = Session(cwd=str(tmp_path))
        assert session.change_directory("sub") == os.path.realpath(tmp_path / "sub")
        assert session.cwd == os.path.realpath(tmp_path / "sub")

    def test_empty_path_goes_home(self, tmp_path: Path) -> None:
        """An empty argument means the home directory."""
        home = tmp_path / "home"
        home.mkdir()
        session = Session(cwd="/", home=str(home))
        session.change_directory()
        assert session.cwd == os.path.realpath(home)

    def test_failed_change_leaves_cwd(self, tmp_path: Path) -> None:
        """A missing directory raises and the cwd stays put."""
        session = Session(cwd=str(tmp_path))
        before = session.cwd
        with pytest.raises(PathError):
            session.change_directory("does-not-exist")
        assert session.cwd == before

    def test_process_cwd_untouched(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Changing the session directory never calls os.chdir()."""
        monkeypatch.chdir(tmp_path)
        (tmp_path / "sub").mkdir()
        session = Session()
        session.change_directory("sub")
        assert os.getcwd() == os.path.realpath(tmp_path)

    def test_change_is_logged(self, tmp_path: Path) -> None:
        """A successful cd leaves an INFO entry."""
        session = Session(cwd=str(tmp_path))
        session.change_directory(".")
        infos = session.logger.filter(min_level=LogLevel.INFO, source="session")
        assert len(infos) == 1
        assert "cwd is now" in infos[0].message

    def test_dmesg_formats_entries(self, tmp_path: Path) -> None:
        """dmesg() returns formatted ``[LEVEL] source: message`` lines."""
        session = Session(cwd=str(tmp_path))
        session.change_directory(".")
        lines = session.dmesg()
        assert lines[0].startswith("[DEBUG] syscall: SYS_CHDIR")
        assert lines[-1].startswith("[INFO] session: cwd is now")
