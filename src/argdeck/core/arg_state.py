"""Mutable runtime value of one argument.

The value is a closed variant with exactly one class per
:class:`~argdeck.core.models.Cardinality`.  Every consumer dispatches
with an explicit isinstance chain and treats an unrecognized variant as
a schema defect.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import TypeVar, Union

from argdeck.core.models import ArgSpec, Cardinality, Notice
from argdeck.exceptions import ArgumentKindError, SchemaError, ValueNotAllowedError


def _new_identity() -> str:
    return uuid.uuid4().hex


@dataclass(slots=True)
class Entry:
    """One text value plus a UI-only identity.

    The identity keeps selection widgets stable across redraws.  It has
    no business meaning and is never serialized into the argument vector.
    """

    text: str = ""
    identity: str = field(default_factory=_new_identity)


# ---------------------------------------------------------------------------
# Value variants
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class SingleValue:
    entry: Entry = field(default_factory=Entry)

    @property
    def text(self) -> str:
        return self.entry.text


@dataclass(slots=True)
class MultipleValue:
    entries: list[Entry] = field(default_factory=list)

    @property
    def texts(self) -> list[str]:
        return [entry.text for entry in self.entries]


@dataclass(slots=True)
class FlagValue:
    enabled: bool = False


@dataclass(slots=True)
class CounterValue:
    count: int = 0


ArgValue = Union[SingleValue, MultipleValue, FlagValue, CounterValue]

_V = TypeVar("_V", SingleValue, MultipleValue, FlagValue, CounterValue)


def empty_value(cardinality: Cardinality) -> ArgValue:
    """Return the "empty" representation for *cardinality*."""
    if cardinality is Cardinality.SINGLE:
        return SingleValue()
    if cardinality is Cardinality.MULTIPLE:
        return MultipleValue()
    if cardinality is Cardinality.FLAG:
        return FlagValue()
    if cardinality is Cardinality.COUNTER:
        return CounterValue()
    raise SchemaError(f"unsupported cardinality: {cardinality!r}")


# ---------------------------------------------------------------------------
# Argument state
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class ArgState:
    """An :class:`ArgSpec` together with its current value.

    Mutators clear :attr:`validation_error`; the next run attempt
    re-validates from scratch.
    """

    spec: ArgSpec
    value: ArgValue
    validation_error: Notice | None = None

    @classmethod
    def from_spec(cls, spec: ArgSpec) -> ArgState:
        return cls(spec=spec, value=empty_value(spec.cardinality))

    @property
    def id(self) -> str:
        return self.spec.id

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def set_single(self, text: str) -> None:
        value = self._expect(SingleValue)
        self._check_allowed(text)
        value.entry.text = text
        self.validation_error = None

    def add_multiple(self, text: str = "") -> None:
        value = self._expect(MultipleValue)
        self._check_allowed(text)
        value.entries.append(Entry(text))
        self.validation_error = None

    def set_multiple(self, index: int, text: str) -> None:
        value = self._expect(MultipleValue)
        self._check_allowed(text)
        value.entries[index].text = text
        self.validation_error = None

    def remove_multiple(self, index: int) -> None:
        value = self._expect(MultipleValue)
        del value.entries[index]
        self.validation_error = None

    def reset_multiple_to_default(self) -> None:
        value = self._expect(MultipleValue)
        value.entries = [Entry(text) for text in self.spec.default_values]
        self.validation_error = None

    def toggle_flag(self) -> None:
        value = self._expect(FlagValue)
        value.enabled = not value.enabled
        self.validation_error = None

    def increment_counter(self) -> None:
        value = self._expect(CounterValue)
        value.count += 1
        self.validation_error = None

    def decrement_counter(self) -> None:
        value = self._expect(CounterValue)
        if value.count > 0:
            value.count -= 1
            self.validation_error = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _expect(self, kind: type[_V]) -> _V:
        if not isinstance(self.value, kind):
            raise ArgumentKindError(
                f"argument {self.spec.id!r} is {self.spec.cardinality.value}, "
                f"not {kind.__name__}",
            )
        return self.value

    def _check_allowed(self, text: str) -> None:
        allowed = self.spec.allowed_values
        if text and allowed and text not in allowed:
            raise ValueNotAllowedError(self.spec.id, text)
