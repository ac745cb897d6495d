"""Command-line entry point for the interactive shell."""

import argparse
import dataclasses
import sys

from py_shell.config import ConfigurationError, load_settings
from py_shell.logging import LogLevel
from py_shell.repl import run


def main(argv: list[str] | None = None) -> int:
    """Parse options, load settings, and run the shell.

    Returns:
        The process exit code: 0 after ``exit`` or end of input, 2 if
        the configuration is invalid.

    """
    parser = argparse.ArgumentParser(
        prog="py-shell",
        description="A small interactive shell whose commands are all builtins.",
    )
    parser.add_argument(
        "--env-file",
        default=None,
        help="dotenv file to load settings from (default: nearest .env)",
    )
    parser.add_argument(
        "--log-level",
        choices=[level.name.lower() for level in LogLevel],
        default=None,
        help="echo audit entries at or above this level to stderr",
    )
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.env_file)
    except ConfigurationError as e:
        print(f"py-shell: {e}", file=sys.stderr)  # noqa: T201
        return 2

    if args.log_level is not None:
        settings = dataclasses.replace(settings, log_level=LogLevel.parse(args.log_level))
    return run(settings)
