"""Infrastructure: child re-entry detection.

A program wrapped with :func:`argdeck.run_parser` launches *itself* as
the child.  The reserved environment variable below tells the re-entered
process to skip the interactive runtime and go straight to its own
argument parser.
"""

from __future__ import annotations

import os
import sys
from collections.abc import MutableMapping

CHILD_APP_ENV_VAR: str = "ARGDECK_CHILD_APP"


def child_marker() -> tuple[str, str]:
    """Environment override that marks a spawned process as the child."""
    return (CHILD_APP_ENV_VAR, "1")


def consume_child_marker(environ: MutableMapping[str, str] | None = None) -> bool:
    """Return whether the marker is present, removing it either way.

    Checked once at start; clearing it keeps the marker from leaking
    into grandchildren launched by the wrapped program.
    """
    env = os.environ if environ is None else environ
    return env.pop(CHILD_APP_ENV_VAR, None) is not None


def current_launcher() -> list[str]:
    """Return the command prefix that re-runs the current program.

    Uses :data:`sys.orig_argv` to keep interpreter options and ``-m``
    module invocations intact, falling back to the interpreter plus
    the script path.
    """
    orig_argv: list[str] = list(getattr(sys, "orig_argv", []))
    user_args = len(sys.argv) - 1
    if orig_argv and len(orig_argv) > user_args:
        return orig_argv[: len(orig_argv) - user_args]
    return [sys.executable, sys.argv[0]]
