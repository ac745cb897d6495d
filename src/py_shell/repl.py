"""Interactive REPL (Read-Eval-Print Loop) for the shell.

The loop is a two-state machine plus a terminal state:

    AWAITING_LINE  →  PROCESSING  →  AWAITING_LINE  →  ...  →  EXITED

1. **AWAITING_LINE** — print the ``<cwd>>`` prompt and block on one
   line of input.
2. **PROCESSING** — strip trailing junk, parse, and run.  ``cd`` and
   ``exit`` are intercepted here, before the generic dispatcher: ``cd``
   changes the directory the next prompt shows, ``exit`` ends the loop.
3. **EXITED** — reached through ``exit`` or end of input.  Nothing more
   is written.

``build_prompt`` is pure and testable; ``Repl`` takes its input stream
and the shell (which owns the output descriptors) as arguments, so the
whole loop runs under test without a terminal.
"""

import contextlib
import io
import sys
from enum import StrEnum
from typing import TextIO

from py_shell.config import Settings
from py_shell.logging import LogEntry
from py_shell.parser import strip_trailing_whitespace
from py_shell.session import Session
from py_shell.shell import STATUS_OK, Shell, write_text
from py_shell.syscalls import SyscallError


class LoopState(StrEnum):
    """Represent the phases of the input loop."""

    AWAITING_LINE = "awaiting_line"
    PROCESSING = "processing"
    EXITED = "exited"


def build_prompt(session: Session) -> str:
    """Build the prompt string: the working directory followed by ``>``.

    Args:
        session: The session whose working directory is shown.

    Returns:
        A prompt like ``/home/alice>`` (no trailing newline).

    """
    return f"{session.cwd}>"


def tolerant_input(stream: TextIO) -> TextIO:
    """Let *stream* decode bytes that are not valid text.

    Undecodable bytes become lone surrogates, exactly as the OS layer
    decodes file names, so a typed name reaches ``os.open()`` unchanged.
    Streams that are already text (``StringIO``) are returned as-is.
    """
    if isinstance(stream, io.TextIOWrapper):
        stream.reconfigure(errors="surrogateescape")
    return stream


class Repl:
    """Drive a shell from a line-oriented input stream."""

    def __init__(self, shell: Shell, *, stdin: TextIO) -> None:
        """Create a loop reading from *stdin* and running on *shell*."""
        self._shell = shell
        self._stdin = stdin
        self._state = LoopState.AWAITING_LINE

    @property
    def state(self) -> LoopState:
        """Return the current loop state."""
        return self._state

    def read_line(self) -> str | None:
        """Show the prompt and read one line; ``None`` at end of input."""
        self._state = LoopState.AWAITING_LINE
        self._show(build_prompt(self._shell.session))
        line = self._stdin.readline()
        return line if line else None

    def process_line(self, line: str) -> int:
        """Run one input line, intercepting ``cd`` and ``exit``.

        Returns:
            The status of the command (``STATUS_OK`` for ``exit`` and
            empty lines).

        """
        self._state = LoopState.PROCESSING
        stripped = strip_trailing_whitespace(line)
        parsed = self._shell.parse(stripped)
        if parsed is None:
            return self._shell.report_unrecognized(stripped)

        command, spec = parsed
        match command.verb:
            case "exit":
                self._shell.log_command(command)
                self._state = LoopState.EXITED
                return STATUS_OK
            case "cd":
                self._shell.log_command(command)
                return self._shell.change_directory(command.arg(0))
            case _:
                return self._shell.run(command, spec)

    def run(self) -> int:
        """Loop until ``exit`` or end of input.

        Ctrl+C abandons the line being typed (or the command running)
        and shows a fresh prompt.

        Returns:
            The process exit code (always 0).

        """
        while self._state is not LoopState.EXITED:
            try:
                line = self.read_line()
                if line is None:
                    # Ctrl+D behaves like exit.
                    self._state = LoopState.EXITED
                    break
                self.process_line(line)
            except KeyboardInterrupt:
                self._show("\n")
        return 0

    def _show(self, text: str) -> None:
        """Write loop chrome (prompt, newline); report failures and go on."""
        try:
            self._shell.write_output(text)
        except SyscallError as e:
            self._shell.report_error(e)


def run(
    settings: Settings | None = None,
    *,
    stdin: TextIO | None = None,
    stdout: int = 1,
    stderr: int = 2,
) -> int:
    """Create a session and shell, then run the interactive loop.

    When ``settings.log_level`` is set, audit entries at or above that
    level are echoed to *stderr* as they are recorded.

    Returns:
        The process exit code.

    """
    session = Session(settings=settings)
    if session.settings.log_level is not None:

        def _echo(entry: LogEntry) -> None:
            # A broken stderr must not turn logging into a failure.
            with contextlib.suppress(OSError):
                write_text(stderr, f"{entry}\n")

        session.logger.attach(_echo, echo_level=session.settings.log_level)

    shell = Shell(session=session, stdout=stdout, stderr=stderr)
    repl = Repl(shell, stdin=tolerant_input(stdin if stdin is not None else sys.stdin))
    return repl.run()
