"""File descriptor bookkeeping.

Re-exports public symbols so callers can write::

    from py_shell.fs import FdTable, FileMode
"""

from py_shell.fs.fd import FdError, FdTable, FileMode, OpenFileDescription

__all__ = [
    "FdError",
    "FdTable",
    "FileMode",
    "OpenFileDescription",
]
