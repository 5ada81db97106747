"""Domain models for argdeck.

The schema models (:class:`ArgSpec`, :class:`CommandSpec`) and the
execution-side value objects are **frozen** dataclasses — immutable,
built once, carrying zero I/O.  Mutable runtime state lives in
:mod:`argdeck.core.arg_state` and :mod:`argdeck.core.command_state`.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Union

from argdeck.exceptions import SchemaError, UnknownArgumentError, ValidationError


# ---------------------------------------------------------------------------
# Schema enums
# ---------------------------------------------------------------------------

class Cardinality(enum.Enum):
    """How many values an argument takes and how it is serialized."""

    SINGLE = "single"
    """One text value (``--name value``)."""

    MULTIPLE = "multiple"
    """An ordered, user-extendable list of text values."""

    FLAG = "flag"
    """Presence-only switch, emitted when enabled."""

    COUNTER = "counter"
    """Switch repeated *count* times (``-vvv``)."""


class PathHint(enum.Enum):
    """Which native picker the presentation layer may offer."""

    NONE = "none"
    FILE = "file"
    DIRECTORY = "directory"
    EITHER = "either"


# ---------------------------------------------------------------------------
# Argument schema
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ArgSpec:
    """Static description of one argument of one command."""

    id: str
    """Stable identifier, used for error correlation (argparse ``dest``)."""

    display_name: str
    """Human label, see :func:`argdeck.core.naming.to_sentence_case`."""

    cardinality: Cardinality

    invocation_token: str | None = None
    """Flag spelling prefixed to the value; ``None`` for positionals."""

    help_text: str | None = None

    required: bool = False

    use_equals: bool = False
    """Join token and value with ``=`` into a single argument."""

    default_values: tuple[str, ...] = ()
    """Placeholder / reset target.  Never submitted implicitly."""

    allowed_values: tuple[str, ...] = ()
    """Closed choice set; empty means free text."""

    path_hint: PathHint = PathHint.NONE

    group_values: bool = False
    """Emit the token once before all entries of a MULTIPLE argument."""

    def __post_init__(self) -> None:
        if not self.id:
            raise SchemaError("argument id must not be empty")
        if self.cardinality in (Cardinality.FLAG, Cardinality.COUNTER) and not self.invocation_token:
            raise SchemaError(
                f"argument {self.id!r} is a {self.cardinality.value} "
                "but has no invocation token",
            )

    @property
    def is_positional(self) -> bool:
        return self.invocation_token is None


@dataclass(frozen=True, slots=True)
class CommandSpec:
    """Static description of a command and its sub-command alternatives."""

    name: str
    """Command name; emitted as the leading token of a sub-command."""

    display_name: str
    help_text: str | None = None
    args: tuple[ArgSpec, ...] = ()
    subcommands: tuple[CommandSpec, ...] = ()
    subcommand_required: bool = False

    def arg(self, arg_id: str) -> ArgSpec:
        """Return the argument named *arg_id*.

        Raises
        ------
        UnknownArgumentError
            If this command declares no such argument.
        """
        for spec in self.args:
            if spec.id == arg_id:
                return spec
        raise UnknownArgumentError(f"command {self.name!r} has no argument {arg_id!r}")

    def subcommand(self, name: str) -> CommandSpec:
        """Return the sub-command alternative called *name*."""
        for spec in self.subcommands:
            if spec.name == name:
                return spec
        raise UnknownArgumentError(f"command {self.name!r} has no sub-command {name!r}")


# ---------------------------------------------------------------------------
# Notices (localizable, structured)
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Notice:
    """A user-facing condition, described without display text."""

    message_id: str
    """One of the identifiers in :mod:`argdeck.messages`."""

    arg_id: str | None = None
    detail: str | None = None

    @classmethod
    def from_error(cls, error: ValidationError) -> Notice:
        return cls(error.message_id, arg_id=error.arg_id, detail=error.detail)


# ---------------------------------------------------------------------------
# Execution request
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class InlineText:
    """Text written to the child's standard input, then closed."""

    text: str


@dataclass(frozen=True, slots=True)
class FileInput:
    """File whose contents become the child's standard input."""

    path: str


StdinSource = Union[InlineText, FileInput]


@dataclass(frozen=True, slots=True)
class ExecutionRequest:
    """Everything needed to launch one child process."""

    argv: tuple[str, ...]
    """Executable followed by its arguments."""

    env_overrides: tuple[tuple[str, str], ...] = ()
    """Applied in order on top of the inherited environment."""

    stdin_source: StdinSource | None = None

    working_directory: str | None = None
    """Empty or ``None`` means inherit the host's directory."""


# ---------------------------------------------------------------------------
# Process status
# ---------------------------------------------------------------------------

class ProcessState(enum.Enum):
    NOT_STARTED = "not-started"
    RUNNING = "running"
    EXITED = "exited"
    KILLED = "killed"
    SPAWN_FAILED = "spawn-failed"


@dataclass(frozen=True, slots=True)
class ProcessStatus:
    """Snapshot of a child process lifecycle.

    ``exit_code`` is set only for :attr:`ProcessState.EXITED`, ``error``
    only for :attr:`ProcessState.SPAWN_FAILED`.
    """

    state: ProcessState
    exit_code: int | None = None
    error: str | None = None

    @classmethod
    def not_started(cls) -> ProcessStatus:
        return cls(ProcessState.NOT_STARTED)

    @classmethod
    def running(cls) -> ProcessStatus:
        return cls(ProcessState.RUNNING)

    @classmethod
    def exited(cls, code: int) -> ProcessStatus:
        return cls(ProcessState.EXITED, exit_code=code)

    @classmethod
    def killed(cls) -> ProcessStatus:
        return cls(ProcessState.KILLED)

    @classmethod
    def spawn_failed(cls, error: str) -> ProcessStatus:
        return cls(ProcessState.SPAWN_FAILED, error=error)

    @property
    def is_terminal(self) -> bool:
        return self.state in (ProcessState.EXITED, ProcessState.KILLED, ProcessState.SPAWN_FAILED)


@dataclass(slots=True)
class RunInputs:
    """Mutable, user-edited extras for the next run attempt."""

    env: list[tuple[str, str]] = field(default_factory=list)
    stdin: StdinSource | None = None
    working_directory: str = ""

    def add_env(self, key: str = "", value: str = "") -> None:
        self.env.append((key, value))

    def set_env(self, index: int, key: str, value: str) -> None:
        self.env[index] = (key, value)

    def remove_env(self, index: int) -> None:
        del self.env[index]

    def use_inline_stdin(self, text: str = "") -> None:
        self.stdin = InlineText(text)

    def use_file_stdin(self, path: str = "") -> None:
        self.stdin = FileInput(path)

    def has_empty_env_key(self) -> bool:
        return any(not key for key, _ in self.env)
