"""Smoke tests — verify package wiring.

These tests prove that:
* The CLI entry point is importable and callable.
* The exception hierarchy is correctly structured.
* Version is accessible.
* Exit codes are defined.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest

import argdeck
from argdeck import __version__, messages
from argdeck.cli import exit_codes
from argdeck.cli.app import main
from argdeck.exceptions import (
    ArgdeckError,
    ArgumentKindError,
    EmptyEnvKeyError,
    EnvironmentError,
    MissingRequiredError,
    MissingSubcommandError,
    ParserRejectedError,
    SchemaError,
    SpawnError,
    StatePathError,
    TargetLoadError,
    UnknownArgumentError,
    ValidationError,
    ValueNotAllowedError,
    ValueRejectedError,
)


# ---------------------------------------------------------------------------
# Version
# ---------------------------------------------------------------------------

class TestVersion:
    def test_version_is_string(self) -> None:
        assert isinstance(__version__, str)

    def test_version_is_semver_like(self) -> None:
        parts = __version__.split(".")
        assert len(parts) == 3
        assert all(part.isdigit() for part in parts)

    def test_public_api(self) -> None:
        assert callable(argdeck.run_parser)
        assert set(argdeck.__all__) == {"Localization", "Settings", "__version__", "run_parser"}


# ---------------------------------------------------------------------------
# Exception hierarchy
# ---------------------------------------------------------------------------

class TestExceptions:
    @pytest.mark.parametrize(
        "exc_class",
        [ValidationError, SpawnError, SchemaError, TargetLoadError, EnvironmentError],
    )
    def test_all_exceptions_inherit_from_base(self, exc_class: type[ArgdeckError]) -> None:
        assert issubclass(exc_class, ArgdeckError)

    @pytest.mark.parametrize(
        "exc_class",
        [
            MissingRequiredError,
            MissingSubcommandError,
            EmptyEnvKeyError,
            ValueNotAllowedError,
            ValueRejectedError,
            ParserRejectedError,
        ],
    )
    def test_validation_errors(self, exc_class: type[ValidationError]) -> None:
        assert issubclass(exc_class, ValidationError)
        assert exc_class.message_id in messages.ALL

    @pytest.mark.parametrize("exc_class", [UnknownArgumentError, ArgumentKindError, StatePathError])
    def test_schema_errors(self, exc_class: type[SchemaError]) -> None:
        assert issubclass(exc_class, SchemaError)

    def test_base_inherits_from_exception(self) -> None:
        assert issubclass(ArgdeckError, Exception)

    def test_hint_is_stored(self) -> None:
        err = ArgdeckError("boom", hint="try this")
        assert str(err) == "boom"
        assert err.hint == "try this"

    def test_hint_defaults_to_none(self) -> None:
        assert ArgdeckError("boom").hint is None

    def test_missing_required_payload(self) -> None:
        err = MissingRequiredError("source")
        assert err.arg_id == "source"
        assert err.message_id == messages.REQUIRED_FIELD_MISSING

    def test_missing_subcommand_payload(self) -> None:
        err = MissingSubcommandError(("remote", "add"))
        assert err.path == ("remote", "add")
        assert err.detail == "remote add"
        assert MissingSubcommandError().detail == "<root>"

    def test_value_not_allowed_payload(self) -> None:
        err = ValueNotAllowedError("mode", "turbo")
        assert err.arg_id == "mode"
        assert err.detail == "turbo"


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

class TestExitCodes:
    def test_success_is_zero(self) -> None:
        assert exit_codes.SUCCESS == 0

    def test_general_error_is_one(self) -> None:
        assert exit_codes.GENERAL_ERROR == 1

    def test_keyboard_interrupt_is_130(self) -> None:
        assert exit_codes.KEYBOARD_INTERRUPT == 130

    def test_unexpected_error_is_two(self) -> None:
        assert exit_codes.UNEXPECTED_ERROR == 2


# ---------------------------------------------------------------------------
# CLI routing
# ---------------------------------------------------------------------------

class TestCLIRouting:
    def test_no_args_returns_success(self, capsys: pytest.CaptureFixture[str]) -> None:
        """No arguments should print help and exit 0."""
        code = main([])
        assert code == exit_codes.SUCCESS
        assert "argdeck" in capsys.readouterr().out

    def test_version_flag(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0

    @patch("argdeck.cli.doctor.run_doctor", return_value=exit_codes.SUCCESS)
    def test_doctor_returns_success(self, _mock_doc: object) -> None:
        code = main(["doctor"])
        assert code == exit_codes.SUCCESS

    def test_target_routes_to_handler(self, monkeypatch: pytest.MonkeyPatch) -> None:
        from argdeck.cli import app as app_module

        seen: list[str] = []
        monkeypatch.setattr(
            app_module, "_handle_target", lambda args: seen.append(args.target) or exit_codes.SUCCESS,
        )
        code = main(["pkg.module:parser"])
        assert code == exit_codes.SUCCESS
        assert seen == ["pkg.module:parser"]
