"""CLI application entry points for argdeck.

Two ways in:

* :func:`run_parser` — the library hook a host program calls from its
  own ``main``.  When re-entered as the child it behaves exactly like
  the plain program; otherwise it opens the interactive front-end.
* :func:`cli` — the ``argdeck`` console script, which loads a parser
  named ``module:attribute`` and drives it the same way.

:func:`cli` is the **sole error boundary** for the console script.  It
catches :class:`~argdeck.exceptions.ArgdeckError`, ``KeyboardInterrupt``,
and any unexpected ``Exception``, rendering user-friendly messages and
returning well-defined exit codes.
"""

from __future__ import annotations

import argparse
import importlib
import shlex
import sys
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

from loguru import logger

from argdeck.cli import exit_codes
from argdeck.cli.console import console
from argdeck.config import Settings
from argdeck.core.command_state import CommandState
from argdeck.core.orchestrator import RunOrchestrator
from argdeck.exceptions import ArgdeckError, TargetLoadError
from argdeck.infra.argparse_schema import command_spec_from_parser
from argdeck.infra.argparse_validation import ParserValidator
from argdeck.infra.child_mode import child_marker, consume_child_marker, current_launcher
from argdeck.infra.supervisor import ChildProcess
from argdeck.logging_utils import configure_logging
from argdeck.version import __version__

if TYPE_CHECKING:
    from argdeck.cli.session import InteractiveSession


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------

def build_session(
    parser: argparse.ArgumentParser,
    program: Sequence[str],
    settings: Settings,
) -> InteractiveSession:
    """Wire schema, state tree, validator and supervisor into a session.

    Every child is marked so a program wrapped with :func:`run_parser`
    goes straight to its own parser instead of reopening the front-end.
    """
    from argdeck.cli.session import InteractiveSession

    spec = command_spec_from_parser(parser)
    orchestrator = RunOrchestrator(
        CommandState.from_spec(spec),
        program,
        ChildProcess,
        validator=ParserValidator(parser),
        child_marker=child_marker(),
    )
    return InteractiveSession(orchestrator, settings)


def run_parser(
    parser: argparse.ArgumentParser,
    func: Callable[[argparse.Namespace], Any],
    settings: Settings | None = None,
) -> None:
    """Run *func* with parsed arguments, or open the interactive front-end.

    Call this from the host program's entry point instead of
    ``func(parser.parse_args())``.  The front-end re-launches the same
    program as its child; in that child this function parses
    ``sys.argv`` and calls *func* directly.

    Parameters
    ----------
    parser:
        The host program's fully configured parser.
    func:
        Receives the parsed namespace in the child.
    settings:
        Optional features and labels; defaults to :class:`Settings`.
    """
    if consume_child_marker():
        func(parser.parse_args())
        return

    settings = settings if settings is not None else Settings()
    configure_logging(settings.log_level)
    build_session(parser, current_launcher(), settings).run()


# ---------------------------------------------------------------------------
# Target loading
# ---------------------------------------------------------------------------

def load_target(target: str) -> argparse.ArgumentParser:
    """Resolve ``module:attribute`` to an ``ArgumentParser``.

    The attribute may be a parser or a zero-argument callable that
    returns one.

    Raises
    ------
    TargetLoadError
        On a malformed target, an import failure, a missing attribute
        or an attribute that does not yield a parser.
    """
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        raise TargetLoadError(
            f"Invalid target {target!r}.",
            hint="Use the form 'package.module:parser_or_factory'.",
        )

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as exc:
        raise TargetLoadError(f"Cannot import {module_name!r}: {exc}") from exc

    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as exc:
            raise TargetLoadError(f"{module_name!r} has no attribute {attr_path!r}.") from exc

    if callable(obj) and not isinstance(obj, argparse.ArgumentParser):
        obj = obj()
    if not isinstance(obj, argparse.ArgumentParser):
        raise TargetLoadError(
            f"{target!r} is not an ArgumentParser.",
            hint="Point at a parser or a function returning one.",
        )
    logger.debug("Loaded parser from {}", target)
    return obj


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Construct the ``argdeck`` argument parser.

    * ``argdeck module:parser``  — interactive front-end for a parser
    * ``argdeck doctor``         — environment diagnostics
    * ``argdeck --version``
    """
    parser = argparse.ArgumentParser(
        prog="argdeck",
        description="Interactive terminal front-end for argparse programs.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "target",
        nargs="?",
        default=None,
        help="Parser to drive as 'module:attribute', or 'doctor' to run diagnostics.",
    )
    parser.add_argument(
        "--exec",
        dest="exec_command",
        metavar="CMD",
        default=None,
        help="Command that runs the program (default: python -m MODULE).",
    )
    parser.add_argument("--env", action="store_true", help="Enable the environment variables editor.")
    parser.add_argument("--stdin", action="store_true", help="Enable the stdin editor.")
    parser.add_argument("--workdir", action="store_true", help="Enable the working directory editor.")
    return parser


def _program_for(target: str, exec_command: str | None) -> list[str]:
    if exec_command:
        program = shlex.split(exec_command)
        if not program:
            raise TargetLoadError("--exec must name a command.")
        return program
    return [sys.executable, "-m", target.partition(":")[0]]


def _handle_doctor() -> int:
    """Dispatch the ``doctor`` diagnostics command."""
    from argdeck.cli.doctor import run_doctor

    return run_doctor()


def _handle_target(args: argparse.Namespace) -> int:
    settings = Settings(
        enable_env="" if args.env else None,
        enable_stdin="" if args.stdin else None,
        enable_working_dir="" if args.workdir else None,
    )
    configure_logging(settings.log_level)

    parser = load_target(args.target)
    program = _program_for(args.target, args.exec_command)
    build_session(parser, program, settings).run()
    return exit_codes.SUCCESS


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the argdeck CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.target is None:
        parser.print_help()
        return exit_codes.SUCCESS

    if args.target.lower() == "doctor":
        return _handle_doctor()

    return _handle_target(args)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    Wraps :func:`main` and guarantees the process never exits with a
    raw stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except ArgdeckError as exc:
        console.error(f"Error: {exc}")
        if exc.hint:
            console.print(f"[yellow]Hint:[/yellow] {exc.hint}")
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        logger.opt(exception=exc).debug("Unexpected error")
        console.error(
            "Unexpected error. Please report this issue.\n"
            f"  {type(exc).__name__}: {exc}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
