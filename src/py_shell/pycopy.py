"""``pycopy`` — copy one file to another and report the byte count.

The non-interactive sibling of the shell's ``cp`` builtin, built on the
same transfer primitive::

    $ pycopy notes.txt backup.txt
    copied 1234 bytes from notes.txt to backup.txt

Exit status is 0 on success and 1 on a wrong argument count or any
open, create, or transfer failure.
"""

import sys

from py_shell.config import ConfigurationError, load_settings
from py_shell.session import Session
from py_shell.syscalls import SyscallError
from py_shell.transfer import copy_file

USAGE = "Invalid number of arguments\n usage: pycopy <sourcefile> <destinationfile>"

_EXPECTED_ARGS = 2


def main(argv: list[str] | None = None) -> int:
    """Copy ``argv[0]`` to ``argv[1]``.

    Args:
        argv: Arguments after the program name (``sys.argv[1:]`` when
            omitted).

    Returns:
        The process exit code.

    """
    args = sys.argv[1:] if argv is None else argv
    if len(args) != _EXPECTED_ARGS:
        print(USAGE)  # noqa: T201
        return 1

    source, destination = args
    try:
        session = Session(settings=load_settings())
        copied = copy_file(session, source, destination)
    except ConfigurationError as e:
        print(f"pycopy: {e}", file=sys.stderr)  # noqa: T201
        return 1
    except SyscallError as e:
        print(e.describe(), file=sys.stderr)  # noqa: T201
        return 1

    print(f"copied {copied} bytes from {source} to {destination}")  # noqa: T201
    return 0
