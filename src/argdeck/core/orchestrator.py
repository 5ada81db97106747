"""Core run orchestrator — sequences one run attempt.

This service wires the state tree, the assembler, an optional host
validator and a process factory injected at construction time.  It is
responsible for:

* Resetting validation errors and assembling the argument vector.
* Painting failures back onto the tree (fail-fast, no partial spawn).
* Rejecting empty environment keys with a standalone notice.
* Tracking exactly one child handle, replacing it on each run.

Guarantees
----------
* No I/O of its own, no ``print()``, no subprocess import.
* An old, still-running child is never implicitly killed.
"""

from __future__ import annotations

from collections.abc import Sequence

from loguru import logger

from argdeck import messages
from argdeck.core.assembler import assemble
from argdeck.core.command_state import CommandState
from argdeck.core.models import ExecutionRequest, Notice, RunInputs
from argdeck.core.protocols import ArgvValidator, ChildHandle, ProcessFactory
from argdeck.exceptions import (
    EmptyEnvKeyError,
    MissingSubcommandError,
    SpawnError,
    ValidationError,
    ValueRejectedError,
)


class RunOrchestrator:
    """Turns the current state tree into a running child process.

    Parameters
    ----------
    state:
        The command state tree edited by the presentation layer.
    program:
        Command prefix placed before the assembled arguments; its first
        token is the executable.
    process_factory:
        Any object satisfying the :class:`ProcessFactory` protocol.
    validator:
        Optional :class:`ArgvValidator` run after assembly.
    child_marker:
        Extra ``(key, value)`` environment override added to every
        request, used to let a re-entered program detect it is the child.
    """

    def __init__(
        self,
        state: CommandState,
        program: Sequence[str],
        process_factory: ProcessFactory,
        *,
        validator: ArgvValidator | None = None,
        inputs: RunInputs | None = None,
        child_marker: tuple[str, str] | None = None,
    ) -> None:
        if not program:
            raise ValueError("program must contain at least the executable")
        self.state: CommandState = state
        self.inputs: RunInputs = inputs if inputs is not None else RunInputs()
        self._program: tuple[str, ...] = tuple(program)
        self._process_factory: ProcessFactory = process_factory
        self._validator: ArgvValidator | None = validator
        self._child_marker: tuple[str, str] | None = child_marker

        self.process: ChildHandle | None = None
        """The single tracked child, replaced on every successful build."""

        self.notice: Notice | None = None
        """Standalone notice for failures not tied to one argument."""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build_request(self) -> ExecutionRequest:
        """Validate the current state and return the request to launch.

        Raises
        ------
        ValidationError
            Any user-fixable problem; the error is painted onto the tree
            or stored in :attr:`notice` before raising.
        """
        self.state.clear_validation_errors()
        self.notice = None

        # A missing required argument is painted by the assembler itself.
        try:
            args = assemble(self.state)
        except MissingSubcommandError as exc:
            self.notice = Notice.from_error(exc)
            raise

        if self._validator is not None:
            try:
                self._validator(args)
            except ValueRejectedError as exc:
                notice = Notice.from_error(exc)
                if exc.arg_id is None or not self.state.apply_validation_error(exc.arg_id, notice):
                    self.notice = notice
                raise
            except ValidationError as exc:
                self.notice = Notice.from_error(exc)
                raise

        if self.inputs.has_empty_env_key():
            self.notice = Notice(messages.ENV_KEY_EMPTY)
            raise EmptyEnvKeyError()

        env = list(self.inputs.env)
        if self._child_marker is not None:
            env.append(self._child_marker)

        return ExecutionRequest(
            argv=(*self._program, *args),
            env_overrides=tuple(env),
            stdin_source=self.inputs.stdin,
            working_directory=self.inputs.working_directory or None,
        )

    def run(self) -> ChildHandle:
        """Run one attempt end to end and return the started handle.

        Raises
        ------
        ValidationError
            When the attempt is rejected; nothing is spawned and the
            previously tracked handle is kept.
        SpawnError
            When spawning fails; the new handle is tracked in its
            ``SPAWN_FAILED`` state.
        """
        try:
            request = self.build_request()
        except ValidationError as exc:
            logger.info("Run rejected: {}", exc)
            raise

        process = self._process_factory(request)
        self.process = process
        try:
            process.start()
        except SpawnError as exc:
            self.notice = Notice(messages.SPAWN_FAILED, detail=str(exc))
            raise
        return process

    def is_running(self) -> bool:
        return self.process is not None and self.process.is_running()

    def kill(self) -> None:
        if self.process is not None:
            self.process.kill()
