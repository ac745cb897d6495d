"""Allow ``python -m py_shell``."""

from py_shell.cli import main

raise SystemExit(main())
