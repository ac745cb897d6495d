"""The shell — builtin commands and the dispatcher that selects them.

The shell reads a command line, matches it against an ordered table of
builtins, and runs the winner.  Every builtin is implemented with
direct system calls made through the session; nothing is ever
executed as an external program.

Design choices:
    - **Writes to descriptors, not strings.**  ``cat`` and ``head``
      stream file contents of any size straight to the output
      descriptor, so every builtin writes its output the same way.
      Tests capture the descriptors.
    - **Ordered dispatch table.**  Each row pairs a verb with the
      argument counts it accepts and its handler.  Rows are tried in
      order and the first match wins, so the order is the priority:
      the loop-intercepted verbs first, then the builtins.  Matching is
      on whole tokens, so ``rm`` can never swallow ``rmdir``.
    - **Errors never escape a builtin.**  Each handler catches
      ``SyscallError``, reports it on the error descriptor, and returns
      a non-zero status.  The loop keeps going.
"""

import os

from py_shell.logging import LogLevel
from py_shell.parser import Command, CommandSpec, match_command, strip_trailing_whitespace
from py_shell.session import Session
from py_shell.syscalls import SyscallError, SyscallNumber, TransferError
from py_shell.transfer import copy_file, stream_file

STATUS_OK = 0
STATUS_ERROR = 1


def write_text(fd: int, text: str) -> None:
    """Write all of *text* to *fd*, retrying after partial writes.

    Text is encoded the way file names are, so a name that is not valid
    UTF-8 is written back as the bytes it came from.

    Raises:
        OSError: If the descriptor cannot be written.

    """
    data = memoryview(os.fsencode(text))
    while data:
        written = os.write(fd, data)
        data = data[written:]


class Shell:
    """Command interpreter bound to a session."""

    def __init__(
        self,
        *,
        session: Session,
        stdout: int = 1,
        stderr: int = 2,
    ) -> None:
        """Create a shell.

        Args:
            session: The session providing working directory and syscalls.
            stdout: Descriptor receiving command output.
            stderr: Descriptor receiving error reports.

        """
        self._session = session
        self._stdout = stdout
        self._stderr = stderr
        self._exit_requested = False

        # Dispatch table, in priority order.
        self._commands: tuple[CommandSpec, ...] = (
            CommandSpec("cd", 0, 1, self._cmd_cd),
            CommandSpec("exit", 0, 0, self._cmd_exit),
            CommandSpec("cat", 1, 1, self._cmd_cat),
            CommandSpec("stat", 1, 1, self._cmd_stat),
            CommandSpec("mkdir", 1, 1, self._cmd_mkdir),
            CommandSpec("rmdir", 1, 1, self._cmd_rmdir),
            CommandSpec("rm", 1, 1, self._cmd_rm),
            CommandSpec("cp", 2, 2, self._cmd_cp),
            CommandSpec("mv", 2, 2, self._cmd_mv),
            CommandSpec("head", 1, 1, self._cmd_head),
            CommandSpec("ls", 0, 1, self._cmd_ls),
            CommandSpec("pwd", 0, 0, self._cmd_pwd),
        )

    @property
    def session(self) -> Session:
        """Return the session this shell operates on."""
        return self._session

    @property
    def commands(self) -> tuple[CommandSpec, ...]:
        """Return the dispatch table in priority order."""
        return self._commands

    @property
    def exit_requested(self) -> bool:
        """Return whether ``exit`` has been dispatched."""
        return self._exit_requested

    @property
    def stdout(self) -> int:
        """Return the output descriptor."""
        return self._stdout

    def parse(self, line: str) -> tuple[Command, CommandSpec] | None:
        """Match *line* against the dispatch table."""
        return match_command(line, self._commands)

    def execute(self, line: str) -> int:
        """Parse and run one command line.

        Args:
            line: The raw line (trailing whitespace is ignored).

        Returns:
            The builtin's status; ``STATUS_ERROR`` for an unrecognised
            line and ``STATUS_OK`` for an empty one.

        """
        stripped = strip_trailing_whitespace(line)
        parsed = self.parse(stripped)
        if parsed is None:
            return self.report_unrecognized(stripped)
        command, spec = parsed
        return self.run(command, spec)

    def log_command(self, command: Command) -> None:
        """Record a dispatched command in the audit log."""
        self._session.logger.log(
            LogLevel.INFO, " ".join((command.verb, *command.args)), source="shell"
        )

    def run(self, command: Command, spec: CommandSpec) -> int:
        """Invoke the handler of an already matched command."""
        self.log_command(command)
        try:
            return spec.handler(command)
        except SyscallError as e:
            # Output failures surface after the handler's own syscalls.
            return self.report_error(e)

    def report_unrecognized(self, line: str) -> int:
        """Report a line no builtin accepts; empty lines are ignored."""
        if not line.strip():
            return STATUS_OK
        self._session.logger.log(LogLevel.WARNING, f"unrecognized: {line}", source="shell")
        self._error(f"{line}: No such file or directory")
        return STATUS_ERROR

    def change_directory(self, path: str = "") -> int:
        """Move the working directory; an empty *path* means home."""
        try:
            self._session.change_directory(path)
        except SyscallError as e:
            return self.report_error(e)
        return STATUS_OK

    def write_output(self, text: str) -> None:
        """Write *text* to the output descriptor.

        Raises:
            TransferError: If the output descriptor cannot be written
                (for example ``EPIPE`` after the reader went away).

        """
        try:
            write_text(self._stdout, text)
        except OSError as e:
            raise TransferError.from_os_error(
                e, path="standard output", operation="write"
            ) from e

    def report_error(self, error: SyscallError) -> int:
        """Report *error* and return the failure status."""
        message = error.describe()
        self._session.logger.log(LogLevel.ERROR, message, source="shell")
        self._error(message)
        return STATUS_ERROR

    # -- Output helpers ----------------------------------------------------

    def _print(self, text: str) -> None:
        self.write_output(text + "\n")

    def _error(self, text: str) -> None:
        try:
            write_text(self._stderr, text + "\n")
        except OSError as e:
            # The audit log is the only place left to record it.
            reason = e.strerror or str(e)
            self._session.logger.log(
                LogLevel.ERROR, f"Unable to write standard error: {reason}", source="shell"
            )

    # -- Command handlers ------------------------------------------------

    def _cmd_cd(self, command: Command) -> int:
        """Change the working directory."""
        return self.change_directory(command.arg(0))

    def _cmd_exit(self, _command: Command) -> int:
        """Signal the loop to stop."""
        self._exit_requested = True
        return STATUS_OK

    def _cmd_ls(self, command: Command) -> int:
        """List directory entries in the order the OS returns them."""
        path = command.arg(0, ".")
        try:
            entries: list[str] = self._session.syscall(SyscallNumber.SYS_LIST_DIR, path=path)
        except SyscallError as e:
            return self.report_error(e)
        # readdir() reports the self and parent links too.
        self._print("\n".join([".", "..", *entries]))
        return STATUS_OK

    def _cmd_cat(self, command: Command) -> int:
        """Stream a whole file to standard output."""
        try:
            stream_file(
                self._session,
                command.arg(0),
                self._stdout,
                chunk_size=self._session.settings.chunk_size,
            )
        except SyscallError as e:
            return self.report_error(e)
        return STATUS_OK

    def _cmd_head(self, command: Command) -> int:
        """Stream the first few fixed-size chunks of a file.

        This is a chunk count, not a line count: with the defaults it
        prints at most five 80-byte "lines", wherever the newlines are.
        """
        settings = self._session.settings
        try:
            stream_file(
                self._session,
                command.arg(0),
                self._stdout,
                chunk_size=settings.head_chunk_size,
                max_chunks=settings.head_max_chunks,
            )
        except SyscallError as e:
            return self.report_error(e)
        return STATUS_OK

    def _cmd_cp(self, command: Command) -> int:
        """Copy a file, creating or truncating the destination."""
        source, destination = command.args
        try:
            copy_file(self._session, source, destination)
        except SyscallError as e:
            return self.report_error(e)
        self._print(f"Copied {source} to {destination}.")
        return STATUS_OK

    def _cmd_mv(self, command: Command) -> int:
        """Rename a file."""
        old, new = command.args
        try:
            self._session.syscall(SyscallNumber.SYS_RENAME, old=old, new=new)
        except SyscallError as e:
            return self.report_error(e)
        self._print(f"Renamed file {old} to {new}")
        return STATUS_OK

    def _cmd_rm(self, command: Command) -> int:
        """Remove (unlink) a file."""
        try:
            self._session.syscall(SyscallNumber.SYS_UNLINK, path=command.arg(0))
        except SyscallError as e:
            return self.report_error(e)
        return STATUS_OK

    def _cmd_mkdir(self, command: Command) -> int:
        """Create a directory."""
        try:
            self._session.syscall(
                SyscallNumber.SYS_MKDIR,
                path=command.arg(0),
                mode=self._session.settings.dir_mode,
            )
        except SyscallError as e:
            return self.report_error(e)
        return STATUS_OK

    def _cmd_rmdir(self, command: Command) -> int:
        """Remove a directory, which must be empty."""
        try:
            self._session.syscall(SyscallNumber.SYS_RMDIR, path=command.arg(0))
        except SyscallError as e:
            return self.report_error(e)
        return STATUS_OK

    def _cmd_stat(self, command: Command) -> int:
        """Display size, link count, inode number and block count."""
        path = command.arg(0)
        try:
            info: os.stat_result = self._session.syscall(SyscallNumber.SYS_STAT, path=path)
        except SyscallError as e:
            return self.report_error(e)

        lines = [
            f"File name: {path}",
            f"File size: {info.st_size}",
            f"Number of links: {info.st_nlink}",
            f"Inode: {info.st_ino}",
            f"Number of blocks: {info.st_blocks}",
        ]
        self._print("\n".join(lines))
        return STATUS_OK

    def _cmd_pwd(self, _command: Command) -> int:
        """Print the working directory."""
        cwd: str = self._session.syscall(SyscallNumber.SYS_GETCWD)
        self._print(cwd)
        return STATUS_OK
