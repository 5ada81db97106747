"""Core / service layer — pure argument modelling and run sequencing.

Rules
-----
* No ``print()`` calls.
* No filesystem, network or subprocess I/O.
* No imports from ``cli`` or ``infra``.
* All functions must be fully typed and deterministic.
"""

from argdeck.core.arg_state import ArgState, CounterValue, Entry, FlagValue, MultipleValue, SingleValue
from argdeck.core.assembler import assemble
from argdeck.core.command_state import CommandState, SubcommandChoice
from argdeck.core.models import (
    ArgSpec,
    Cardinality,
    CommandSpec,
    ExecutionRequest,
    FileInput,
    InlineText,
    Notice,
    PathHint,
    ProcessState,
    ProcessStatus,
    RunInputs,
)
from argdeck.core.orchestrator import RunOrchestrator
from argdeck.core.protocols import ArgvValidator, ChildHandle, ProcessFactory

__all__: list[str] = [
    "ArgSpec",
    "ArgState",
    "ArgvValidator",
    "Cardinality",
    "ChildHandle",
    "CommandSpec",
    "CommandState",
    "CounterValue",
    "Entry",
    "ExecutionRequest",
    "FileInput",
    "FlagValue",
    "InlineText",
    "MultipleValue",
    "Notice",
    "PathHint",
    "ProcessFactory",
    "ProcessState",
    "ProcessStatus",
    "RunInputs",
    "RunOrchestrator",
    "SingleValue",
    "SubcommandChoice",
    "assemble",
]
