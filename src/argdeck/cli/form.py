"""Interactive argument editing for the CLI layer.

This module is responsible for:

* Prompting for every argument of the selected command branch via
  questionary, one prompt per argument kind.
* Letting the user pick (or clear) sub-commands, recursing into them.
* Editing the optional run inputs: environment variables, stdin and
  the working directory.

All state changes go through the tree operations of
:class:`~argdeck.core.command_state.CommandState` and
:class:`~argdeck.core.models.RunInputs`; nothing is assembled or
validated here.  A cancelled prompt (Ctrl+C, which questionary turns
into ``None``) leaves the current value untouched.
"""

from __future__ import annotations

from typing import Any, cast

from argdeck.cli.console import console
from argdeck.core.arg_state import ArgState, CounterValue, FlagValue, MultipleValue, SingleValue
from argdeck.core.command_state import CommandState
from argdeck.core.models import Cardinality, FileInput, InlineText, PathHint, RunInputs
from argdeck.exceptions import EnvironmentError, ValueNotAllowedError
from argdeck.localization import Localization


def _import_questionary() -> Any:
    """Import questionary lazily for interactive prompts."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "questionary is not installed. Install with: pip install questionary",
        ) from exc
    return questionary


# ---------------------------------------------------------------------------
# Labels
# ---------------------------------------------------------------------------

def argument_label(arg: ArgState, localization: Localization) -> str:
    """Return the prompt label: display name, optional marker and help."""
    spec = arg.spec
    label = spec.display_name
    if not spec.required and spec.cardinality in (Cardinality.SINGLE, Cardinality.MULTIPLE):
        label = f"{label} {localization.optional}"
    if spec.help_text:
        label = f"{label}: {spec.help_text}"
    return label


def _show_error(arg: ArgState, localization: Localization) -> None:
    if arg.validation_error is not None:
        text = localization.render(arg.validation_error, arg.spec.display_name)
        console.error(text)


def _digits_only(text: str) -> bool | str:
    return text.isdigit() or "Enter a whole number"


# ---------------------------------------------------------------------------
# Per-kind editors
# ---------------------------------------------------------------------------

def _ask_text(
    questionary: Any,
    message: str,
    current: str,
    path_hint: PathHint,
    placeholder: str | None = None,
) -> str | None:
    if path_hint is PathHint.NONE:
        return questionary.text(message, default=current, instruction=placeholder).ask()
    return questionary.path(
        message,
        default=current,
        only_directories=path_hint is PathHint.DIRECTORY,
    ).ask()


def _edit_single(node: CommandState, arg: ArgState, localization: Localization, questionary: Any) -> None:
    spec = arg.spec
    current = cast(SingleValue, arg.value).text
    message = argument_label(arg, localization)

    if spec.allowed_values:
        choices = []
        if not spec.required:
            choices.append(questionary.Choice(title=localization.none, value=""))
        choices.extend(questionary.Choice(title=value, value=value) for value in spec.allowed_values)
        default = current if (current in spec.allowed_values or not spec.required) else None
        answer = questionary.select(message, choices=choices, default=default).ask()
    else:
        placeholder = ", ".join(spec.default_values) or None
        answer = _ask_text(questionary, message, current, spec.path_hint, placeholder)

    if answer is not None and answer != current:
        node.set_single(arg.id, answer)


def _edit_multiple(node: CommandState, arg: ArgState, localization: Localization, questionary: Any) -> None:
    spec = arg.spec
    reset_label = localization.reset_to_default if spec.default_values else localization.reset

    while True:
        texts = cast(MultipleValue, arg.value).texts
        shown = ", ".join(texts) if texts else localization.none
        actions = [localization.new_value]
        if texts:
            actions.append(localization.remove_value)
        actions.extend([reset_label, localization.done])

        action = questionary.select(
            f"{argument_label(arg, localization)} [{shown}]",
            choices=actions,
        ).ask()
        if action is None or action == localization.done:
            return

        if action == localization.new_value:
            answer = _ask_text(questionary, localization.new_value, "", spec.path_hint)
            if answer is None:
                continue
            try:
                node.add_multiple(arg.id, answer)
            except ValueNotAllowedError as exc:
                console.error(str(exc))
        elif action == localization.remove_value:
            choices = [
                questionary.Choice(title=f"{index + 1}. {text}", value=index)
                for index, text in enumerate(texts)
            ]
            index = questionary.select(localization.remove_value, choices=choices).ask()
            if index is not None:
                node.remove_multiple(arg.id, index)
        else:
            node.reset_multiple_to_default(arg.id)


def _edit_flag(node: CommandState, arg: ArgState, localization: Localization, questionary: Any) -> None:
    current = cast(FlagValue, arg.value).enabled
    answer = questionary.confirm(argument_label(arg, localization), default=current).ask()
    if answer is not None and answer != current:
        node.toggle_flag(arg.id)


def _edit_counter(node: CommandState, arg: ArgState, localization: Localization, questionary: Any) -> None:
    answer = questionary.text(
        argument_label(arg, localization),
        default=str(cast(CounterValue, arg.value).count),
        validate=_digits_only,
    ).ask()
    if answer is None:
        return
    count = cast(CounterValue, arg.value).count
    target = int(answer)
    for _ in range(target - count):
        node.increment_counter(arg.id)
    for _ in range(count - target):
        node.decrement_counter(arg.id)


_EDITORS = {
    Cardinality.SINGLE: _edit_single,
    Cardinality.MULTIPLE: _edit_multiple,
    Cardinality.FLAG: _edit_flag,
    Cardinality.COUNTER: _edit_counter,
}


def edit_argument(node: CommandState, arg_id: str, localization: Localization) -> None:
    """Prompt for one argument of *node* and apply the answer."""
    questionary = _import_questionary()
    arg = node.arg(arg_id)
    _show_error(arg, localization)
    try:
        _EDITORS[arg.spec.cardinality](node, arg, localization, questionary)
    except ValueNotAllowedError as exc:
        console.error(str(exc))


# ---------------------------------------------------------------------------
# Command tree
# ---------------------------------------------------------------------------

def _choose_subcommand(state: CommandState, path: tuple[str, ...], localization: Localization) -> str | None:
    """Prompt for the sub-command at *path*; return the selected name."""
    questionary = _import_questionary()
    node = state.node_at(path)
    spec = node.spec
    current = node.choice.name if node.choice is not None else None

    choices = []
    if not spec.subcommand_required:
        choices.append(questionary.Choice(title=localization.none, value=""))
    for sub in spec.subcommands:
        title = f"{sub.name}: {sub.help_text}" if sub.help_text else sub.name
        choices.append(questionary.Choice(title=title, value=sub.name))

    default = current if current is not None else (None if spec.subcommand_required else "")
    answer = questionary.select(spec.display_name, choices=choices, default=default).ask()
    if answer is None:
        return current
    if answer == "":
        state.clear_subcommand(path)
        return None
    # Re-selecting the active branch keeps its edits.
    if answer != current:
        state.select_subcommand(path, answer)
    return answer


def edit_command(state: CommandState, localization: Localization, path: tuple[str, ...] = ()) -> None:
    """Walk the arguments of the node at *path*, then its sub-command."""
    node = state.node_at(path)
    for arg_id in node.args:
        edit_argument(node, arg_id, localization)
    if not node.spec.subcommands:
        return
    chosen = _choose_subcommand(state, path, localization)
    if chosen is not None:
        edit_command(state, localization, (*path, chosen))


# ---------------------------------------------------------------------------
# Run inputs
# ---------------------------------------------------------------------------

def edit_env(inputs: RunInputs, localization: Localization, description: str = "") -> None:
    """Add and remove ``KEY=VALUE`` overrides until the user is done."""
    questionary = _import_questionary()
    if description:
        console.print(description)

    while True:
        shown = ", ".join(f"{key}={value}" for key, value in inputs.env) or localization.none
        actions = [localization.new_value]
        if inputs.env:
            actions.append(localization.remove_value)
        actions.append(localization.done)

        action = questionary.select(f"{localization.env_variables} [{shown}]", choices=actions).ask()
        if action is None or action == localization.done:
            return

        if action == localization.new_value:
            key = questionary.text("Key").ask()
            if key is None:
                continue
            value = questionary.text("Value").ask()
            inputs.add_env(key, value or "")
        else:
            choices = [
                questionary.Choice(title=f"{key}={value}", value=index)
                for index, (key, value) in enumerate(inputs.env)
            ]
            index = questionary.select(localization.remove_value, choices=choices).ask()
            if index is not None:
                inputs.remove_env(index)


def edit_stdin(inputs: RunInputs, localization: Localization, description: str = "") -> None:
    """Choose between no input, inline text and a file."""
    questionary = _import_questionary()
    if description:
        console.print(description)

    choice = questionary.select(
        localization.input,
        choices=[localization.no_input, localization.text, localization.file],
    ).ask()
    if choice is None:
        return
    if choice == localization.no_input:
        inputs.stdin = None
    elif choice == localization.text:
        current = inputs.stdin.text if isinstance(inputs.stdin, InlineText) else ""
        text = questionary.text(localization.text, default=current, multiline=True).ask()
        if text is not None:
            inputs.use_inline_stdin(text)
    else:
        current = inputs.stdin.path if isinstance(inputs.stdin, FileInput) else ""
        path = questionary.path(localization.select_file, default=current).ask()
        if path is not None:
            inputs.use_file_stdin(path)


def edit_working_directory(inputs: RunInputs, localization: Localization, description: str = "") -> None:
    """Set the child's working directory; empty means inherit."""
    questionary = _import_questionary()
    if description:
        console.print(description)
    path = questionary.path(
        localization.working_directory,
        default=inputs.working_directory,
        only_directories=True,
    ).ask()
    if path is not None:
        inputs.working_directory = path
