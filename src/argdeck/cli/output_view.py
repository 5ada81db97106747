"""Live view of a supervised child's output.

Polls the child's accumulated output at a fixed interval, echoes only
the new part, and reports the final status.  Ctrl+C while following
kills the child instead of aborting argdeck.
"""

from __future__ import annotations

import time
from collections.abc import Callable

from loguru import logger

from argdeck.cli.console import console
from argdeck.core.models import ProcessState, ProcessStatus
from argdeck.core.protocols import ChildHandle
from argdeck.localization import Localization


def status_line(status: ProcessStatus, localization: Localization) -> str:
    """Render a process status for display."""
    if status.state is ProcessState.RUNNING:
        return localization.running
    if status.state is ProcessState.EXITED:
        return localization.exited.format(code=status.exit_code)
    if status.state is ProcessState.KILLED:
        return localization.killed
    if status.state is ProcessState.SPAWN_FAILED:
        return status.error or ""
    return ""


class _Follower:
    """Tracks how much of the output has already been echoed."""

    def __init__(self, process: ChildHandle) -> None:
        self._process = process
        self._offset = 0

    def flush(self) -> None:
        text = self._process.output()
        new = text[self._offset:]
        self._offset = len(text)
        console.write_output(new)


def follow_output(
    process: ChildHandle,
    localization: Localization,
    *,
    poll_interval: float = 0.1,
    sleep: Callable[[float], None] = time.sleep,
) -> ProcessStatus:
    """Echo *process* output until it terminates and return its status.

    Parameters
    ----------
    process:
        A started child handle.
    poll_interval:
        Seconds between redraws.
    sleep:
        Injected for deterministic tests.
    """
    follower = _Follower(process)
    try:
        while process.is_running():
            follower.flush()
            sleep(poll_interval)
        status = process.wait()
    except KeyboardInterrupt:
        logger.info("Interrupted while following output; killing child")
        process.kill()
        status = process.wait()
    follower.flush()

    colour = "green" if status.state is ProcessState.EXITED and status.exit_code == 0 else "yellow"
    console.print(f"\n[{colour}]{status_line(status, localization)}[/{colour}]")
    return status
