"""Infrastructure layer — external system integration.

This layer wraps all interaction with :mod:`argparse` internals, the
operating system environment and :mod:`subprocess`.  Every raw OS
exception must be caught here and re-raised as an
:class:`~argdeck.exceptions.ArgdeckError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from argdeck.infra.argparse_schema import arg_spec_from_action, command_spec_from_parser
from argdeck.infra.argparse_validation import ParserValidator, validate_argv
from argdeck.infra.child_mode import CHILD_APP_ENV_VAR, child_marker, consume_child_marker, current_launcher
from argdeck.infra.supervisor import ChildProcess, OutputBuffer, spawn

__all__: list[str] = [
    "CHILD_APP_ENV_VAR",
    "ChildProcess",
    "OutputBuffer",
    "ParserValidator",
    "arg_spec_from_action",
    "child_marker",
    "command_spec_from_parser",
    "consume_child_marker",
    "current_launcher",
    "spawn",
]
