"""Command-line parsing — from a raw line to a ``Command``.

A line is a verb followed by whitespace-separated filename arguments.
Which verbs exist, and how many arguments each accepts, is described by
an ordered table of ``CommandSpec`` rows; ``match_command()`` walks the
table and returns the first row that accepts the line.

Every ``Command`` is built fresh from its own line and is immutable, so
an argument from a previous command can never leak into the next one.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass

# Whitespace plus the ASCII control characters a terminal can leave at
# the end of a line (``\r`` from a CRLF paste, a stray ``\x00``, DEL).
_TRAILING_JUNK = "".join(chr(code) for code in range(0x21)) + "\x7f"


@dataclass(frozen=True)
class Command:
    """A verb and its filename arguments."""

    verb: str
    args: tuple[str, ...] = ()

    def arg(self, index: int, default: str = "") -> str:
        """Return argument *index*, or *default* if it was not given."""
        return self.args[index] if index < len(self.args) else default


Handler = Callable[[Command], int]


@dataclass(frozen=True)
class CommandSpec:
    """One row of the dispatch table.

    Attributes:
        verb: The leading token that selects this row.
        min_args: Fewest filename arguments accepted.
        max_args: Most filename arguments accepted.
        handler: Builtin invoked with the parsed command; returns a
            status (0 on success).

    """

    verb: str
    min_args: int
    max_args: int
    handler: Handler

    def accepts(self, tokens: list[str]) -> bool:
        """Return whether *tokens* (verb first) match this row."""
        return (
            bool(tokens)
            and tokens[0] == self.verb
            and self.min_args <= len(tokens) - 1 <= self.max_args
        )


def strip_trailing_whitespace(line: str) -> str:
    """Remove trailing whitespace and control characters."""
    return line.rstrip(_TRAILING_JUNK)


def tokenize(line: str) -> list[str]:
    """Split a line into whitespace-separated tokens."""
    return line.split()


def match_command(line: str, table: Iterable[CommandSpec]) -> tuple[Command, CommandSpec] | None:
    """Find the first table row that accepts *line*.

    Rows are tried in order, so earlier rows take priority.

    Returns:
        The parsed command and the row that accepted it, or ``None`` if
        no row matches (including an empty line).

    """
    tokens = tokenize(line)
    for spec in table:
        if spec.accepts(tokens):
            return Command(verb=tokens[0], args=tuple(tokens[1:])), spec
    return None
