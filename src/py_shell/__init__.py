"""py-shell — an interactive shell built from direct system calls.

Re-exports the main entry points so callers can write::

    from py_shell import Session, Shell, run
"""

from py_shell.config import Settings, load_settings
from py_shell.repl import Repl, run
from py_shell.session import Session
from py_shell.shell import Shell
from py_shell.syscalls import PathError, SyscallError, TransferError
from py_shell.transfer import copy_file, transfer

__all__ = [
    "PathError",
    "Repl",
    "Session",
    "Settings",
    "Shell",
    "SyscallError",
    "TransferError",
    "copy_file",
    "load_settings",
    "run",
    "transfer",
]
