"""Custom exception hierarchy for argdeck.

All exceptions that cross layer boundaries must inherit from
:class:`ArgdeckError`.  Raw OS exceptions (e.g. from :mod:`subprocess`)
must NEVER propagate beyond the infrastructure layer — they must be
caught and re-raised as a typed subclass defined here.

Hierarchy
---------
ArgdeckError
├── ValidationError
│   ├── MissingRequiredError
│   ├── MissingSubcommandError
│   ├── EmptyEnvKeyError
│   ├── ValueNotAllowedError
│   ├── ValueRejectedError
│   └── ParserRejectedError
├── SpawnError
├── SchemaError
│   ├── UnknownArgumentError
│   ├── ArgumentKindError
│   └── StatePathError
├── TargetLoadError
└── EnvironmentError
"""

from __future__ import annotations

from collections.abc import Sequence

from argdeck import messages


class ArgdeckError(Exception):
    """Base exception for all argdeck errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- User validation -------------------------------------------------------

class ValidationError(ArgdeckError):
    """User-fixable problem detected before a process is spawned.

    Carries a fixed :attr:`message_id` and a structured payload instead
    of display text; the presentation layer localizes it.
    """

    message_id: str = messages.ARGUMENTS_REJECTED

    def __init__(
        self,
        message: str,
        *,
        arg_id: str | None = None,
        detail: str | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.arg_id: str | None = arg_id
        self.detail: str | None = detail


class MissingRequiredError(ValidationError):
    """Raised when a required single-value argument is left empty."""

    message_id = messages.REQUIRED_FIELD_MISSING

    def __init__(self, arg_id: str) -> None:
        super().__init__(f"missing required argument: {arg_id}", arg_id=arg_id)


class MissingSubcommandError(ValidationError):
    """Raised when a command requires a sub-command and none is chosen."""

    message_id = messages.SUBCOMMAND_MISSING

    def __init__(self, path: Sequence[str] = ()) -> None:
        self.path: tuple[str, ...] = tuple(path)
        where = " ".join(self.path) or "<root>"
        super().__init__(f"missing sub-command under {where}", detail=where)


class EmptyEnvKeyError(ValidationError):
    """Raised when an environment override has an empty key."""

    message_id = messages.ENV_KEY_EMPTY

    def __init__(self) -> None:
        super().__init__("environment variable key must not be empty")


class ValueNotAllowedError(ValidationError):
    """Raised when a value outside a closed choice set is offered."""

    message_id = messages.VALUE_NOT_ALLOWED

    def __init__(self, arg_id: str, value: str) -> None:
        super().__init__(
            f"value {value!r} is not allowed for {arg_id}",
            arg_id=arg_id,
            detail=value,
        )


class ValueRejectedError(ValidationError):
    """Raised when the host parser rejects the value of one argument."""

    message_id = messages.VALUE_REJECTED

    def __init__(self, arg_id: str, detail: str) -> None:
        super().__init__(f"{arg_id}: {detail}", arg_id=arg_id, detail=detail)


class ParserRejectedError(ValidationError):
    """Raised when the host parser rejects the argument vector as a whole."""

    message_id = messages.ARGUMENTS_REJECTED

    def __init__(self, detail: str) -> None:
        super().__init__(detail, detail=detail)


# --- Process supervision ---------------------------------------------------

class SpawnError(ArgdeckError):
    """Raised when the child process cannot be started."""


# --- Schema / internal -----------------------------------------------------

class SchemaError(ArgdeckError):
    """Raised for schema defects and caller bugs, never for user input."""


class UnknownArgumentError(SchemaError):
    """Raised when an argument id does not exist on a command node."""


class ArgumentKindError(SchemaError):
    """Raised when an operation does not fit the argument's cardinality."""


class StatePathError(SchemaError):
    """Raised when a sub-command path does not match the selected branch."""


# --- Bootstrap / tooling ---------------------------------------------------

class TargetLoadError(ArgdeckError):
    """Raised when a ``module:attribute`` target cannot be resolved."""


class EnvironmentError(ArgdeckError):
    """Raised when a required runtime dependency is not available."""
