"""Fixed message identifiers.

The core never carries display text.  Every user-facing condition is
described by one of these identifiers plus a structured payload, and
the presentation layer maps the identifier to a localized template
(see :class:`argdeck.localization.Localization`).
"""

from __future__ import annotations

REQUIRED_FIELD_MISSING: str = "required-field-missing"
"""A required single-value argument is empty."""

SUBCOMMAND_MISSING: str = "subcommand-missing"
"""A command requires a sub-command but none is selected."""

ENV_KEY_EMPTY: str = "env-key-empty"
"""An environment override has an empty key."""

VALUE_NOT_ALLOWED: str = "value-not-allowed"
"""A value outside a closed choice set was offered."""

VALUE_REJECTED: str = "value-rejected"
"""The host parser rejected the value of one argument."""

ARGUMENTS_REJECTED: str = "arguments-rejected"
"""The host parser rejected the argument vector as a whole."""

SPAWN_FAILED: str = "spawn-failed"
"""The child process could not be started."""

ALL: tuple[str, ...] = (
    REQUIRED_FIELD_MISSING,
    SUBCOMMAND_MISSING,
    ENV_KEY_EMPTY,
    VALUE_NOT_ALLOWED,
    VALUE_REJECTED,
    ARGUMENTS_REJECTED,
    SPAWN_FAILED,
)
