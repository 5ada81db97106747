"""Infrastructure: derive a :class:`CommandSpec` from an argparse parser.

This module walks an already-built :class:`argparse.ArgumentParser` and
its sub-parsers.  It never parses command-line text.

Action mapping
--------------
* ``store`` → SINGLE, or MULTIPLE when ``nargs`` asks for several values
* ``append`` / ``extend`` → MULTIPLE
* ``store_true`` / ``store_false`` / ``store_const`` /
  :class:`argparse.BooleanOptionalAction` → FLAG
* ``count`` / ``append_const`` → COUNTER
* ``help`` / ``version`` → skipped
* sub-parsers → sub-command alternatives
"""

from __future__ import annotations

import argparse
import pathlib
from collections.abc import Iterable

from loguru import logger

from argdeck.core.models import ArgSpec, Cardinality, CommandSpec, PathHint
from argdeck.core.naming import to_sentence_case
from argdeck.exceptions import SchemaError

_MANY_NARGS = (argparse.ONE_OR_MORE, argparse.ZERO_OR_MORE)

_FLAG_ACTIONS: tuple[type[argparse.Action], ...] = (
    argparse._StoreTrueAction,
    argparse._StoreFalseAction,
    argparse._StoreConstAction,
    argparse.BooleanOptionalAction,
)
_COUNTER_ACTIONS: tuple[type[argparse.Action], ...] = (
    argparse._CountAction,
    argparse._AppendConstAction,
)
_MULTIPLE_ACTIONS: tuple[type[argparse.Action], ...] = (
    argparse._AppendAction,
    argparse._ExtendAction,
)
_SKIPPED_ACTIONS: tuple[type[argparse.Action], ...] = (
    argparse._HelpAction,
    argparse._VersionAction,
)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def command_spec_from_parser(
    parser: argparse.ArgumentParser,
    name: str | None = None,
    help_text: str | None = None,
) -> CommandSpec:
    """Build the schema for *parser* and, recursively, its sub-parsers.

    Parameters
    ----------
    parser:
        The host program's parser.
    name:
        Command name; defaults to ``parser.prog``.
    help_text:
        Description; defaults to ``parser.description``.

    Raises
    ------
    SchemaError
        When the parser declares something that cannot be represented,
        such as more than one sub-parsers group.
    """
    command_name = name if name is not None else parser.prog
    args: list[ArgSpec] = []
    subcommands: tuple[CommandSpec, ...] = ()
    subcommand_required = False
    seen_subparsers = False

    for action in parser._actions:
        if isinstance(action, _SKIPPED_ACTIONS):
            continue
        if isinstance(action, argparse._SubParsersAction):
            if seen_subparsers:
                raise SchemaError(f"{command_name!r} declares more than one sub-parsers group")
            seen_subparsers = True
            subcommands = tuple(_subcommand_specs(action))
            subcommand_required = bool(action.required)
            continue
        args.append(arg_spec_from_action(action))

    spec = CommandSpec(
        name=command_name,
        display_name=to_sentence_case(command_name),
        help_text=help_text if help_text is not None else parser.description,
        args=tuple(args),
        subcommands=subcommands,
        subcommand_required=subcommand_required,
    )
    logger.debug(
        "Built schema for {!r}: {} argument(s), {} sub-command(s)",
        command_name,
        len(spec.args),
        len(spec.subcommands),
    )
    return spec


def arg_spec_from_action(action: argparse.Action) -> ArgSpec:
    """Translate a single argparse action into an :class:`ArgSpec`."""
    token = _invocation_token(action.option_strings)
    cardinality = _cardinality(action)

    return ArgSpec(
        id=action.dest,
        display_name=to_sentence_case(action.dest),
        cardinality=cardinality,
        invocation_token=token,
        help_text=_help_text(action.help),
        required=bool(action.required),
        default_values=_default_values(action, cardinality),
        allowed_values=_stringify(action.choices) if action.choices is not None else (),
        path_hint=_path_hint(action.type),
        group_values=(
            token is not None
            and cardinality is Cardinality.MULTIPLE
            and not isinstance(action, _MULTIPLE_ACTIONS)
        ),
    )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _subcommand_specs(action: argparse._SubParsersAction) -> Iterable[CommandSpec]:  # type: ignore[type-arg]
    help_by_name = {choice.dest: choice.help for choice in action._choices_actions}
    seen: set[int] = set()
    # Aliases map to the same parser object; the primary name comes first.
    for choice_name, subparser in action.choices.items():
        if id(subparser) in seen:
            continue
        seen.add(id(subparser))
        yield command_spec_from_parser(
            subparser,
            name=choice_name,
            help_text=_help_text(help_by_name.get(choice_name)) or subparser.description,
        )


def _invocation_token(option_strings: list[str]) -> str | None:
    for option in option_strings:
        if option.startswith("--"):
            return option
    return option_strings[0] if option_strings else None


def _cardinality(action: argparse.Action) -> Cardinality:
    if isinstance(action, _FLAG_ACTIONS):
        return Cardinality.FLAG
    if isinstance(action, _COUNTER_ACTIONS):
        return Cardinality.COUNTER
    if isinstance(action, _MULTIPLE_ACTIONS):
        return Cardinality.MULTIPLE
    nargs = action.nargs
    if nargs in _MANY_NARGS or (isinstance(nargs, int) and nargs > 1):
        return Cardinality.MULTIPLE
    return Cardinality.SINGLE


def _help_text(text: str | None) -> str | None:
    if text is None or text == argparse.SUPPRESS:
        return None
    return text


def _default_values(action: argparse.Action, cardinality: Cardinality) -> tuple[str, ...]:
    if cardinality not in (Cardinality.SINGLE, Cardinality.MULTIPLE):
        return ()
    default = action.default
    if default is None or default == argparse.SUPPRESS:
        return ()
    if isinstance(default, (list, tuple)):
        return _stringify(default)
    return (str(default),)


def _stringify(values: Iterable[object]) -> tuple[str, ...]:
    return tuple(str(value) for value in values)


def _path_hint(converter: object) -> PathHint:
    if isinstance(converter, argparse.FileType):
        return PathHint.FILE
    if isinstance(converter, type) and issubclass(converter, pathlib.PurePath):
        return PathHint.EITHER
    return PathHint.NONE
