"""Pure argument-vector assembly.

Walks a :class:`~argdeck.core.command_state.CommandState` tree and
produces the ordered list of tokens to hand to the child process.

Rules (per argument, in declaration order)
------------------------------------------
* SINGLE — empty and optional: nothing; empty and required: fail with
  :class:`MissingRequiredError`; otherwise ``token=value``,
  ``token value`` or a bare ``value`` for positionals.
* MULTIPLE — each entry by the SINGLE rule; no required check.
* FLAG — the token when enabled.  COUNTER — the token *count* times.

Then the selected sub-command's name followed by its own tokens,
recursively.  The root command's name is never emitted.

The only state this module writes is the ``validation_error`` of the
argument that caused a failure.
"""

from __future__ import annotations

from argdeck import messages
from argdeck.core.arg_state import ArgState, CounterValue, FlagValue, MultipleValue, SingleValue
from argdeck.core.command_state import CommandState
from argdeck.core.models import ArgSpec, Notice
from argdeck.exceptions import MissingRequiredError, MissingSubcommandError, SchemaError


def assemble(state: CommandState) -> list[str]:
    """Return the argument vector for the active branch of *state*.

    Raises
    ------
    MissingRequiredError
        When a required single-value argument is empty.  The offending
        argument's ``validation_error`` is set before raising.
    MissingSubcommandError
        When a command requires a sub-command and none is selected.
    SchemaError
        When a FLAG or COUNTER argument has no invocation token.
    """
    tokens: list[str] = []
    _assemble_node(state, (), tokens)
    return tokens


def _assemble_node(node: CommandState, path: tuple[str, ...], tokens: list[str]) -> None:
    for arg in node.args.values():
        tokens.extend(_assemble_arg(arg))

    if node.choice is not None:
        tokens.append(node.choice.name)
        _assemble_node(node.choice.node, (*path, node.choice.name), tokens)
    elif node.spec.subcommand_required:
        raise MissingSubcommandError(path)


def _assemble_arg(arg: ArgState) -> list[str]:
    spec = arg.spec
    value = arg.value

    if isinstance(value, SingleValue):
        if not value.text:
            if spec.required:
                arg.validation_error = Notice(messages.REQUIRED_FIELD_MISSING, arg_id=spec.id)
                raise MissingRequiredError(spec.id)
            return []
        return _with_token(spec, value.text)

    if isinstance(value, MultipleValue):
        texts = value.texts
        if not texts:
            return []
        if spec.group_values and spec.invocation_token is not None:
            return [spec.invocation_token, *texts]
        return [token for text in texts for token in _with_token(spec, text)]

    if isinstance(value, FlagValue):
        return [_require_token(spec)] if value.enabled else []

    if isinstance(value, CounterValue):
        return [_require_token(spec)] * value.count if value.count else []

    raise SchemaError(f"argument {spec.id!r} has an unsupported value {value!r}")


def _with_token(spec: ArgSpec, text: str) -> list[str]:
    token = spec.invocation_token
    if token is None:
        return [text]
    if spec.use_equals:
        return [f"{token}={text}"]
    return [token, text]


def _require_token(spec: ArgSpec) -> str:
    if spec.invocation_token is None:
        raise SchemaError(f"argument {spec.id!r} has no invocation token")
    return spec.invocation_token
