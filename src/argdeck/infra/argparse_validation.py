"""Infrastructure: check an assembled vector against the host parser.

argparse reports problems by printing usage and calling
:func:`sys.exit`.  :func:`validate_argv` temporarily switches every
parser in the tree to raise instead, parses the vector, and maps the
outcome onto typed :mod:`argdeck.exceptions`.  Parser objects are
restored afterwards whatever happens.

The parse records which action rejected its value, so an option
spelled the same way in a sub-command and in its parent is blamed on
the right argument.  The host's ``type=`` converters run during
validation; files opened by :class:`argparse.FileType` are closed again
before returning.
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from typing import IO, Any, NoReturn

from argdeck.exceptions import ParserRejectedError, ValueRejectedError


class _ParserExit(Exception):
    """Internal signal replacing ``ArgumentParser.error``."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class _ParseRecord:
    """What one validation parse touched."""

    def __init__(self) -> None:
        self.failed: argparse.Action | None = None
        self.opened: list[IO[Any]] = []

    def recording_get_value(self, method: Callable[..., Any]) -> Callable[..., Any]:
        def get_value(action: argparse.Action, arg_string: str) -> Any:
            try:
                value = method(action, arg_string)
            except argparse.ArgumentError:
                self.failed = action
                raise
            if isinstance(action.type, argparse.FileType) and not _is_std_stream(value):
                self.opened.append(value)
            return value

        return get_value

    def recording_check_value(self, method: Callable[..., Any]) -> Callable[..., Any]:
        def check_value(action: argparse.Action, value: Any) -> None:
            try:
                method(action, value)
            except argparse.ArgumentError:
                self.failed = action
                raise

        return check_value

    def close_opened(self) -> None:
        for stream in self.opened:
            stream.close()
        self.opened.clear()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def validate_argv(parser: argparse.ArgumentParser, args: Sequence[str]) -> None:
    """Parse *args* with *parser* without letting it exit.

    Raises
    ------
    ValueRejectedError
        When a type converter or choice check rejects one argument.
    ParserRejectedError
        For parser-level problems (unrecognized or missing arguments),
        and for errors that cannot be tied to a single argument.
    """
    with _raising_errors(parser) as record:
        try:
            parser.parse_args(list(args))
        except argparse.ArgumentError as exc:
            arg_id = _blamed_dest(parser, record.failed, exc.argument_name)
            if arg_id is None:
                raise ParserRejectedError(str(exc)) from exc
            raise ValueRejectedError(arg_id, exc.message) from exc
        except _ParserExit as exc:
            raise ParserRejectedError(exc.message) from exc


class ParserValidator:
    """:class:`~argdeck.core.protocols.ArgvValidator` bound to one parser."""

    def __init__(self, parser: argparse.ArgumentParser) -> None:
        self._parser = parser

    def __call__(self, args: Sequence[str]) -> None:
        validate_argv(self._parser, args)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _iter_parsers(parser: argparse.ArgumentParser) -> Iterator[argparse.ArgumentParser]:
    seen: set[int] = set()
    pending = [parser]
    while pending:
        current = pending.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        yield current
        for action in current._actions:
            if isinstance(action, argparse._SubParsersAction):
                pending.extend(action.choices.values())


def _is_std_stream(value: object) -> bool:
    streams = (sys.stdin, sys.stdout)
    return any(value is stream or value is getattr(stream, "buffer", None) for stream in streams)


def _action_name(action: argparse.Action) -> str | None:
    # Mirrors how argparse names an action in ArgumentError.
    if action.option_strings:
        return "/".join(action.option_strings)
    if action.metavar not in (None, argparse.SUPPRESS):
        return str(action.metavar)
    if action.dest not in (None, argparse.SUPPRESS):
        return action.dest
    return None


def _blamed_dest(
    parser: argparse.ArgumentParser,
    failed: argparse.Action | None,
    argument_name: str | None,
) -> str | None:
    """Return the dest of the rejected argument, or ``None`` if unclear."""
    if failed is not None:
        if isinstance(failed, argparse._SubParsersAction):
            return None
        return failed.dest
    # Errors raised outside value conversion carry only a name; accept it
    # when exactly one argument in the tree is spelled that way.
    dests = {
        action.dest
        for current in _iter_parsers(parser)
        for action in current._actions
        if not isinstance(action, argparse._SubParsersAction)
        and _action_name(action) == argument_name
    }
    return dests.pop() if len(dests) == 1 else None


def _raise_parser_exit(message: str) -> NoReturn:
    raise _ParserExit(message)


@contextmanager
def _raising_errors(parser: argparse.ArgumentParser) -> Iterator[_ParseRecord]:
    record = _ParseRecord()
    saved: list[tuple[argparse.ArgumentParser, bool]] = []
    for current in _iter_parsers(parser):
        saved.append((current, current.exit_on_error))
        current.exit_on_error = False
        current.error = _raise_parser_exit  # type: ignore[method-assign]
        current._get_value = record.recording_get_value(current._get_value)  # type: ignore[method-assign]
        current._check_value = record.recording_check_value(current._check_value)  # type: ignore[method-assign]
    try:
        yield record
    finally:
        record.close_opened()
        for current, exit_on_error in saved:
            current.exit_on_error = exit_on_error
            del current.error
            del current._get_value
            del current._check_value
