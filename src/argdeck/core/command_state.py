"""Recursive, mutable state tree mirroring a :class:`CommandSpec`.

Built once from the schema and then mutated in place by user edits.
The tree shape always matches the schema; only argument values and the
selected sub-command branch ever change.

Selecting a sub-command always constructs a fresh child node — edits
made in a previously selected branch are discarded.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from loguru import logger

from argdeck.core.arg_state import ArgState
from argdeck.core.models import CommandSpec, Notice
from argdeck.exceptions import StatePathError, UnknownArgumentError


@dataclass(slots=True)
class SubcommandChoice:
    name: str
    node: CommandState


@dataclass(slots=True)
class CommandState:
    """One node of the tree: its own arguments plus the chosen branch."""

    spec: CommandSpec
    args: dict[str, ArgState] = field(default_factory=dict)
    """Insertion order is declaration order."""

    choice: SubcommandChoice | None = None

    @classmethod
    def from_spec(cls, spec: CommandSpec) -> CommandState:
        return cls(spec=spec, args={arg.id: ArgState.from_spec(arg) for arg in spec.args})

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def arg(self, arg_id: str) -> ArgState:
        try:
            return self.args[arg_id]
        except KeyError:
            raise UnknownArgumentError(
                f"command {self.spec.name!r} has no argument {arg_id!r}",
            ) from None

    def node_at(self, path: Sequence[str]) -> CommandState:
        """Follow the currently selected branches named by *path*.

        Raises
        ------
        StatePathError
            If any step of *path* is not the selected sub-command.
        """
        node = self
        for step in path:
            if node.choice is None or node.choice.name != step:
                raise StatePathError(
                    f"sub-command {step!r} is not selected under {node.spec.name!r}",
                )
            node = node.choice.node
        return node

    def walk(self) -> Iterator[tuple[tuple[str, ...], CommandState]]:
        """Yield ``(path, node)`` for this node and every selected descendant."""
        path: tuple[str, ...] = ()
        node: CommandState | None = self
        while node is not None:
            yield path, node
            if node.choice is None:
                return
            path = (*path, node.choice.name)
            node = node.choice.node

    @property
    def selected_path(self) -> tuple[str, ...]:
        """Names of the selected sub-commands from here to the deepest leaf."""
        *_, (path, _node) = self.walk()
        return path

    # ------------------------------------------------------------------
    # Argument mutation (delegates to ArgState)
    # ------------------------------------------------------------------

    def set_single(self, arg_id: str, text: str) -> None:
        self.arg(arg_id).set_single(text)

    def add_multiple(self, arg_id: str, text: str = "") -> None:
        self.arg(arg_id).add_multiple(text)

    def set_multiple(self, arg_id: str, index: int, text: str) -> None:
        self.arg(arg_id).set_multiple(index, text)

    def remove_multiple(self, arg_id: str, index: int) -> None:
        self.arg(arg_id).remove_multiple(index)

    def reset_multiple_to_default(self, arg_id: str) -> None:
        self.arg(arg_id).reset_multiple_to_default()

    def toggle_flag(self, arg_id: str) -> None:
        self.arg(arg_id).toggle_flag()

    def increment_counter(self, arg_id: str) -> None:
        self.arg(arg_id).increment_counter()

    def decrement_counter(self, arg_id: str) -> None:
        self.arg(arg_id).decrement_counter()

    # ------------------------------------------------------------------
    # Sub-command selection
    # ------------------------------------------------------------------

    def select_subcommand(self, path: Sequence[str], chosen: str) -> CommandState:
        """Replace the choice at *path* with a fresh node for *chosen*.

        Returns the new child node.  Any edits in the branch that was
        selected before are lost, even when *chosen* is the same name.
        """
        node = self.node_at(path)
        child = CommandState.from_spec(node.spec.subcommand(chosen))
        node.choice = SubcommandChoice(chosen, child)
        return child

    def clear_subcommand(self, path: Sequence[str]) -> None:
        self.node_at(path).choice = None

    # ------------------------------------------------------------------
    # Validation errors
    # ------------------------------------------------------------------

    def apply_validation_error(self, arg_id: str, notice: Notice) -> bool:
        """Paint *notice* onto every argument called *arg_id* in the active tree.

        Returns ``False`` when nothing matched.  An unmatched id is a
        caller bug, not a user-facing condition, so it is only logged.
        """
        painted = False
        for _path, node in self.walk():
            state = node.args.get(arg_id)
            if state is not None:
                state.validation_error = notice
                painted = True
        if not painted:
            logger.debug("Dropped validation error for unknown argument {!r}", arg_id)
        return painted

    def clear_validation_errors(self) -> None:
        for _path, node in self.walk():
            for state in node.args.values():
                state.validation_error = None

    def validation_errors(self) -> list[tuple[tuple[str, ...], ArgState]]:
        """Return every argument in the active tree that carries an error."""
        return [
            (path, state)
            for path, node in self.walk()
            for state in node.args.values()
            if state.validation_error is not None
        ]
