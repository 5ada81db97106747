"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols — never on concrete
implementations — preserving the dependency inversion principle.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from argdeck.core.models import ExecutionRequest, ProcessStatus


class ChildHandle(Protocol):
    """Contract for one supervised child process.

    :class:`argdeck.infra.supervisor.ChildProcess` satisfies this
    protocol structurally.
    """

    @property
    def status(self) -> ProcessStatus:
        """Non-blocking snapshot of the lifecycle state."""
        ...  # pragma: no cover

    def start(self) -> None:
        """Spawn the process.

        Raises
        ------
        EmptyEnvKeyError
            Before spawning, when an environment key is empty.
        SpawnError
            When the executable or stdin file cannot be opened.
        """
        ...  # pragma: no cover

    def is_running(self) -> bool:
        ...  # pragma: no cover

    def kill(self) -> None:
        """Terminate the process; a no-op unless it is running."""
        ...  # pragma: no cover

    def output(self) -> str:
        """Snapshot of everything the process has written so far."""
        ...  # pragma: no cover

    def wait(self, timeout: float | None = None) -> ProcessStatus:
        """Block until the process ends; output readers get a bounded grace."""
        ...  # pragma: no cover


class ProcessFactory(Protocol):
    """Builds a not-yet-started :class:`ChildHandle` for a request."""

    def __call__(self, request: ExecutionRequest) -> ChildHandle:
        ...  # pragma: no cover


class ArgvValidator(Protocol):
    """Checks an assembled argument vector against the host parser.

    Raises
    ------
    ValueRejectedError
        When one argument's value is rejected.
    ParserRejectedError
        When the vector is rejected as a whole.
    """

    def __call__(self, args: Sequence[str]) -> None:
        ...  # pragma: no cover
