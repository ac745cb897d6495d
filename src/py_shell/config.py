"""Configuration settings for the shell.

Values come from ``PYSHELL_*`` environment variables; a ``.env`` file is
loaded first (without overriding variables already set) so a project
directory can pin its own chunk sizes or log level.
"""

import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

from py_shell.logging import LogLevel

# Buffer size of the reference tools; also the cp/cat chunk size.
DEFAULT_CHUNK_SIZE = 256
# head reads "lines" of a standard terminal width.
DEFAULT_HEAD_CHUNK_SIZE = 80
DEFAULT_HEAD_MAX_CHUNKS = 5
DEFAULT_DIR_MODE = 0o755
# rw-r--r--
DEFAULT_FILE_MODE = 0o644


class ConfigurationError(Exception):
    """Raised when a setting has an invalid value."""


@dataclass(frozen=True)
class Settings:
    """Shell settings.

    Attributes:
        chunk_size: Transfer chunk size for ``cat`` and ``cp``.
        head_chunk_size: Chunk size for ``head``.
        head_max_chunks: Number of chunks ``head`` emits at most.
        dir_mode: Permission bits for ``mkdir``.
        file_mode: Permission bits for ``cp`` destinations.
        log_level: Echo audit entries at or above this level, or ``None``.

    """

    chunk_size: int = DEFAULT_CHUNK_SIZE
    head_chunk_size: int = DEFAULT_HEAD_CHUNK_SIZE
    head_max_chunks: int = DEFAULT_HEAD_MAX_CHUNKS
    dir_mode: int = DEFAULT_DIR_MODE
    file_mode: int = DEFAULT_FILE_MODE
    log_level: LogLevel | None = None


def _get_int(key: str, default: int, *, base: int = 10, minimum: int = 1) -> int:
    """Get an integer environment variable, raise error if malformed."""
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip(), base)
    except ValueError:
        msg = f"Environment variable {key} must be an integer, got {raw!r}"
        raise ConfigurationError(msg) from None
    if value < minimum:
        msg = f"Environment variable {key} must be at least {minimum}, got {value}"
        raise ConfigurationError(msg)
    return value


def _get_mode(key: str, default: int) -> int:
    """Get an octal permission mode such as ``755``."""
    value = _get_int(key, default, base=8, minimum=0)
    if value > 0o7777:  # noqa: PLR2004
        msg = f"Environment variable {key} is not a permission mode: {oct(value)}"
        raise ConfigurationError(msg)
    return value


def _get_level(key: str) -> LogLevel | None:
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return None
    try:
        return LogLevel.parse(raw)
    except ValueError as e:
        raise ConfigurationError(str(e)) from e


def load_settings(env_file: str | None = None) -> Settings:
    """Build settings from the environment.

    Args:
        env_file: Optional path of a dotenv file.  When omitted,
            ``find_dotenv`` searches for ``.env`` from the working
            directory upwards.

    Raises:
        ConfigurationError: If any variable holds an invalid value.

    """
    _ = load_dotenv(env_file or find_dotenv(usecwd=True))
    return Settings(
        chunk_size=_get_int("PYSHELL_CHUNK_SIZE", DEFAULT_CHUNK_SIZE),
        head_chunk_size=_get_int("PYSHELL_HEAD_CHUNK_SIZE", DEFAULT_HEAD_CHUNK_SIZE),
        head_max_chunks=_get_int("PYSHELL_HEAD_MAX_CHUNKS", DEFAULT_HEAD_MAX_CHUNKS, minimum=0),
        dir_mode=_get_mode("PYSHELL_DIR_MODE", DEFAULT_DIR_MODE),
        file_mode=_get_mode("PYSHELL_FILE_MODE", DEFAULT_FILE_MODE),
        log_level=_get_level("PYSHELL_LOG_LEVEL"),
    )
