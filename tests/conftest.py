"""Shared pytest fixtures and configuration for the argdeck test suite.

Guidelines
----------
* No network access in any test.
* questionary is replaced by :class:`FakeQuestionary` at the
  ``argdeck.cli.form._import_questionary`` seam.
* Core tests must be pure — no side effects.
* Subprocess tests only launch ``sys.executable -c ...`` children.
"""

from __future__ import annotations

import argparse
from collections.abc import Callable, Iterable
from typing import Any

import pytest


# ---------------------------------------------------------------------------
# Parsers
# ---------------------------------------------------------------------------

def make_parser() -> argparse.ArgumentParser:
    """A small host parser touching every argument kind."""
    parser = argparse.ArgumentParser(prog="tool", description="Demo tool")
    parser.add_argument("source", help="Input file")
    parser.add_argument("--mode", choices=["fast", "slow"], default="fast")
    parser.add_argument("--tag", action="append", help="Repeatable tag")
    parser.add_argument("-v", "--verbose", action="count", default=0)
    parser.add_argument("--dry-run", action="store_true")
    parser.add_argument("--size", type=int)
    sub = parser.add_subparsers(dest="command", required=True)
    build = sub.add_parser("build", help="Build it", aliases=["b"])
    build.add_argument("--jobs", type=int, default=1)
    sub.add_parser("clean", help="Clean up")
    return parser


@pytest.fixture()
def parser() -> argparse.ArgumentParser:
    return make_parser()


# ---------------------------------------------------------------------------
# Scripted questionary
# ---------------------------------------------------------------------------

class _Question:
    def __init__(self, answer: Any) -> None:
        self._answer = answer

    def ask(self) -> Any:
        return self._answer


class FakeQuestionary:
    """Scripted stand-in for the ``questionary`` module.

    Each prompt pops the next answer; ``None`` plays a cancelled prompt.
    Every call is recorded as ``(kind, message, kwargs)``.
    """

    class Choice:
        def __init__(self, title: str, value: Any = None) -> None:
            self.title = title
            self.value = value

    def __init__(self, answers: Iterable[Any] = ()) -> None:
        self.answers: list[Any] = list(answers)
        self.calls: list[tuple[str, str, dict[str, Any]]] = []

    def _next(self, kind: str, message: str, kwargs: dict[str, Any]) -> _Question:
        self.calls.append((kind, message, kwargs))
        if not self.answers:
            raise AssertionError(f"unexpected {kind} prompt: {message!r}")
        return _Question(self.answers.pop(0))

    def text(self, message: str, **kwargs: Any) -> _Question:
        return self._next("text", message, kwargs)

    def path(self, message: str, **kwargs: Any) -> _Question:
        return self._next("path", message, kwargs)

    def confirm(self, message: str, **kwargs: Any) -> _Question:
        return self._next("confirm", message, kwargs)

    def select(self, message: str, choices: list[Any], **kwargs: Any) -> _Question:
        return self._next("select", message, {"choices": choices, **kwargs})

    @property
    def kinds(self) -> list[str]:
        return [kind for kind, _message, _kwargs in self.calls]


@pytest.fixture()
def fake_questionary(monkeypatch: pytest.MonkeyPatch) -> Callable[..., FakeQuestionary]:
    """Install a :class:`FakeQuestionary` scripted with the given answers."""

    def install(*answers: Any) -> FakeQuestionary:
        fake = FakeQuestionary(answers)
        monkeypatch.setattr("argdeck.cli.form._import_questionary", lambda: fake)
        return fake

    return install
