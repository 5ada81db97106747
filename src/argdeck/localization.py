"""User-facing strings, keyed by fixed message identifiers.

The core layer only ever produces :class:`~argdeck.core.models.Notice`
objects.  This table turns them (and the UI labels) into text; hosts
replace any field to translate the interface.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from argdeck import messages
from argdeck.core.models import Notice


def _default_messages() -> dict[str, str]:
    return {
        messages.REQUIRED_FIELD_MISSING: "Argument '{name}' is required",
        messages.SUBCOMMAND_MISSING: "A sub-command must be selected ({detail})",
        messages.ENV_KEY_EMPTY: "Environment variable can't be empty",
        messages.VALUE_NOT_ALLOWED: "'{detail}' is not a valid choice for '{name}'",
        messages.VALUE_REJECTED: "Invalid value for '{name}': {detail}",
        messages.ARGUMENTS_REJECTED: "Invalid arguments: {detail}",
        messages.SPAWN_FAILED: "Could not start the program: {detail}",
    }


@dataclass
class Localization:
    """Labels and message templates shown by the terminal front-end."""

    optional: str = "(Optional)"
    select_file: str = "Select file..."
    select_directory: str = "Select directory..."
    new_value: str = "New value"
    remove_value: str = "Remove value"
    reset: str = "Reset"
    reset_to_default: str = "Reset to default"
    done: str = "Done"
    none: str = "None"
    arguments: str = "Arguments"
    env_variables: str = "Environment variables"
    input: str = "Input"
    text: str = "Text"
    file: str = "File"
    no_input: str = "No input"
    working_directory: str = "Working directory"
    run: str = "Run"
    kill: str = "Kill"
    running: str = "Running"
    exited: str = "Exited with code {code}"
    killed: str = "Killed"
    quit: str = "Quit"

    messages: dict[str, str] = field(default_factory=_default_messages)
    """Templates keyed by :mod:`argdeck.messages` identifiers.

    Placeholders: ``{name}`` (argument label) and ``{detail}``.
    """

    def render(self, notice: Notice, display_name: str | None = None) -> str:
        """Format *notice*, falling back to its identifier when untranslated."""
        template = self.messages.get(notice.message_id)
        if template is None:
            return notice.message_id
        return template.format(
            name=display_name or notice.arg_id or "",
            detail=notice.detail or "",
        )
