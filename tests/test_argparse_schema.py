"""Tests for the argparse → CommandSpec adapter (infra/argparse_schema.py)."""

from __future__ import annotations

import argparse
import pathlib

import pytest

from argdeck.core.models import Cardinality, PathHint
from argdeck.exceptions import SchemaError
from argdeck.infra.argparse_schema import arg_spec_from_action, command_spec_from_parser


def _action(*flags: str, **kwargs: object) -> argparse.Action:
    parser = argparse.ArgumentParser()
    return parser.add_argument(*flags, **kwargs)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Single actions
# ---------------------------------------------------------------------------

class TestArgSpecFromAction:
    def test_positional(self) -> None:
        spec = arg_spec_from_action(_action("source", help="Input file"))
        assert spec.id == "source"
        assert spec.display_name == "Source"
        assert spec.cardinality is Cardinality.SINGLE
        assert spec.invocation_token is None
        assert spec.required is True
        assert spec.help_text == "Input file"

    def test_prefers_long_option(self) -> None:
        spec = arg_spec_from_action(_action("-o", "--output-dir"))
        assert spec.invocation_token == "--output-dir"
        assert spec.id == "output_dir"
        assert spec.display_name == "Output dir"

    def test_short_only(self) -> None:
        assert arg_spec_from_action(_action("-o")).invocation_token == "-o"

    def test_choices_and_default(self) -> None:
        spec = arg_spec_from_action(_action("--level", type=int, choices=[1, 2, 3], default=2))
        assert spec.allowed_values == ("1", "2", "3")
        assert spec.default_values == ("2",)

    def test_none_default_is_empty(self) -> None:
        assert arg_spec_from_action(_action("--name")).default_values == ()

    def test_suppressed_help(self) -> None:
        assert arg_spec_from_action(_action("--hidden", help=argparse.SUPPRESS)).help_text is None

    @pytest.mark.parametrize(
        ("kwargs", "hint"),
        [
            ({"type": argparse.FileType("r")}, PathHint.FILE),
            ({"type": pathlib.Path}, PathHint.EITHER),
            ({"type": int}, PathHint.NONE),
        ],
    )
    def test_path_hint(self, kwargs: dict[str, object], hint: PathHint) -> None:
        assert arg_spec_from_action(_action("--p", **kwargs)).path_hint is hint


# ---------------------------------------------------------------------------
# Cardinality mapping
# ---------------------------------------------------------------------------

class TestCardinality:
    @pytest.mark.parametrize("action", ["store_true", "store_false"])
    def test_boolean_actions_are_flags(self, action: str) -> None:
        spec = arg_spec_from_action(_action("--x", action=action))
        assert spec.cardinality is Cardinality.FLAG
        assert spec.default_values == ()

    def test_store_const_is_flag(self) -> None:
        spec = arg_spec_from_action(_action("--x", action="store_const", const=1))
        assert spec.cardinality is Cardinality.FLAG

    def test_boolean_optional_action(self) -> None:
        spec = arg_spec_from_action(_action("--color", action=argparse.BooleanOptionalAction))
        assert spec.cardinality is Cardinality.FLAG
        assert spec.invocation_token == "--color"

    def test_count_is_counter(self) -> None:
        spec = arg_spec_from_action(_action("-v", "--verbose", action="count", default=0))
        assert spec.cardinality is Cardinality.COUNTER
        assert spec.default_values == ()

    def test_append_is_multiple_not_grouped(self) -> None:
        spec = arg_spec_from_action(_action("--tag", action="append", default=["a"]))
        assert spec.cardinality is Cardinality.MULTIPLE
        assert spec.group_values is False
        assert spec.default_values == ("a",)

    @pytest.mark.parametrize("nargs", ["+", "*", 2])
    def test_nargs_many_option_is_grouped(self, nargs: object) -> None:
        spec = arg_spec_from_action(_action("--nums", nargs=nargs))
        assert spec.cardinality is Cardinality.MULTIPLE
        assert spec.group_values is True

    def test_nargs_many_positional_not_grouped(self) -> None:
        spec = arg_spec_from_action(_action("files", nargs="+"))
        assert spec.cardinality is Cardinality.MULTIPLE
        assert spec.group_values is False

    def test_optional_nargs_is_single(self) -> None:
        assert arg_spec_from_action(_action("--x", nargs="?")).cardinality is Cardinality.SINGLE


# ---------------------------------------------------------------------------
# Whole parsers
# ---------------------------------------------------------------------------

class TestCommandSpecFromParser:
    def test_root(self, parser: argparse.ArgumentParser) -> None:
        spec = command_spec_from_parser(parser)
        assert spec.name == "tool"
        assert spec.help_text == "Demo tool"
        assert [arg.id for arg in spec.args] == ["source", "mode", "tag", "verbose", "dry_run", "size"]

    def test_help_and_version_skipped(self) -> None:
        p = argparse.ArgumentParser(prog="x")
        p.add_argument("--version", action="version", version="1")
        assert command_spec_from_parser(p).args == ()

    def test_subcommands(self, parser: argparse.ArgumentParser) -> None:
        spec = command_spec_from_parser(parser)
        assert spec.subcommand_required is True
        # The alias "b" points at the same parser and is not listed twice.
        assert [sub.name for sub in spec.subcommands] == ["build", "clean"]
        build = spec.subcommand("build")
        assert build.help_text == "Build it"
        assert [arg.id for arg in build.args] == ["jobs"]

    def test_optional_subparsers(self) -> None:
        p = argparse.ArgumentParser(prog="x")
        p.add_subparsers(dest="cmd").add_parser("go")
        spec = command_spec_from_parser(p)
        assert spec.subcommand_required is False
        assert spec.subcommands[0].name == "go"

    def test_second_subparsers_group_rejected(self) -> None:
        p = argparse.ArgumentParser(prog="x")
        p.add_subparsers(dest="a")
        # argparse itself refuses a second add_subparsers call, so append one.
        extra = argparse.ArgumentParser(prog="y").add_subparsers(dest="b")
        p._actions.append(extra)
        with pytest.raises(SchemaError):
            command_spec_from_parser(p)

    def test_name_override(self, parser: argparse.ArgumentParser) -> None:
        assert command_spec_from_parser(parser, name="other").name == "other"
