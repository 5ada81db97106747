"""``argdeck doctor`` — environment diagnostics command.

Gathers system information and renders a Rich table summarising
whether the runtime environment can host the interactive front-end
and supervise child processes.

This module lives in the CLI layer — it may import from ``infra``
and ``core``, and it renders via Rich.  It only collects and displays
diagnostic data.
"""

from __future__ import annotations

import importlib
import platform
import subprocess
import sys
from importlib import metadata

from argdeck.cli import exit_codes
from argdeck.cli.console import console
from argdeck.core.models import ExecutionRequest, ProcessState
from argdeck.exceptions import SpawnError
from argdeck.infra.supervisor import spawn
from argdeck.version import __version__

_OK = "[green]OK[/green]"
_FAIL = "[red]FAIL[/red]"


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _python_version_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the Python version row."""
    version = platform.python_version()
    ok = sys.version_info[:2] >= (3, 10)
    status = _OK if ok else "[red]FAIL (>=3.10 required)[/red]"
    return "Python", version, status


def _package_check(label: str, module: str, distribution: str) -> tuple[str, str, str]:
    """Return (label, value, status) for an installed third-party package."""
    try:
        importlib.import_module(module)
    except ImportError:
        return label, "NOT INSTALLED", _FAIL
    try:
        version = metadata.version(distribution)
    except metadata.PackageNotFoundError:
        version = "unknown"
    return label, version, _OK


def _spawn_check() -> tuple[str, str, str]:
    """Return (label, value, status) after supervising a trivial child."""
    request = ExecutionRequest(argv=(sys.executable, "-c", "print('ok')"))
    try:
        process = spawn(request)
        status = process.wait(timeout=10)
    except SpawnError as exc:
        return "Subprocess", str(exc), _FAIL
    except subprocess.TimeoutExpired:
        process.kill()
        return "Subprocess", "timed out", "[yellow]WARN[/yellow]"
    if status.state is ProcessState.EXITED and status.exit_code == 0 and process.output().strip() == "ok":
        return "Subprocess", "spawn + capture", _OK
    return "Subprocess", f"unexpected: {status.state.value}", _FAIL


def _os_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the OS row."""
    system_raw = platform.system()
    system_display = {
        "Windows": "Windows",
        "Linux": "Linux",
        "Darwin": "macOS",
    }.get(system_raw, system_raw)
    value = f"{system_display} {platform.release()} ({platform.machine()})"
    return "OS", value, _OK


def _argdeck_version_check() -> tuple[str, str, str]:
    return "argdeck", __version__, _OK


def _status_plain(status: str) -> str:
    """Convert rich-markup status to plain text."""
    for word in ("FAIL", "WARN", "OK"):
        if word in status:
            return word
    return status


def _print_plain_doctor_table(checks: list[tuple[str, str, str]]) -> None:
    """Render doctor output without Rich."""
    print("\nargdeck doctor", file=sys.stderr)
    print("=" * 56, file=sys.stderr)
    print(f"{'Component':<12} {'Value':<32} {'Status':<8}", file=sys.stderr)
    print("-" * 56, file=sys.stderr)
    for label, value, status in checks:
        print(f"{label:<12} {value:<32} {_status_plain(status):<8}", file=sys.stderr)
    print(file=sys.stderr)


def collect_checks() -> list[tuple[str, str, str]]:
    """Run every diagnostic and return its rows in display order."""
    return [
        _argdeck_version_check(),
        _python_version_check(),
        _package_check("rich", "rich", "rich"),
        _package_check("questionary", "questionary", "questionary"),
        _package_check("loguru", "loguru", "loguru"),
        _spawn_check(),
        _os_check(),
    ]


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_doctor() -> int:
    """Execute all diagnostic checks and render a summary table.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when all critical checks pass,
        :data:`exit_codes.GENERAL_ERROR` if a critical check fails.
    """
    checks = collect_checks()
    has_failure = any("FAIL" in status for _, _, status in checks)

    rich_available = True
    try:
        from rich.table import Table
    except ModuleNotFoundError:
        rich_available = False

    if rich_available:
        table = Table(
            title="argdeck doctor",
            show_header=True,
            header_style="bold cyan",
            border_style="dim",
        )
        table.add_column("Component", style="bold", min_width=12)
        table.add_column("Value", min_width=20)
        table.add_column("Status", justify="center", min_width=8)
        for label, value, status in checks:
            table.add_row(label, value, status)

        console.print()
        console.print(table)
        console.print()
    else:
        _print_plain_doctor_table(checks)

    if has_failure:
        if rich_available:
            console.print("[bold red]Some checks failed.[/bold red]")
        else:
            print("Some checks failed.", file=sys.stderr)
        return exit_codes.GENERAL_ERROR

    if rich_available:
        console.print("[bold green]All checks passed.[/bold green]")
    else:
        print("All checks passed.", file=sys.stderr)
    return exit_codes.SUCCESS
