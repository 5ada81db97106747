"""Interactive session loop: edit, run, watch, repeat.

The session owns no state of its own; it routes menu choices to the
form editors and to the :class:`~argdeck.core.orchestrator.RunOrchestrator`
and renders whatever notices the core layer produced.
"""

from __future__ import annotations

from typing import cast

from loguru import logger

from argdeck.cli import form
from argdeck.cli.console import console
from argdeck.cli.output_view import follow_output
from argdeck.config import Settings
from argdeck.core.models import Notice, ProcessStatus
from argdeck.core.orchestrator import RunOrchestrator
from argdeck.exceptions import SpawnError, ValidationError


class InteractiveSession:
    """Menu-driven front-end over one orchestrator."""

    def __init__(self, orchestrator: RunOrchestrator, settings: Settings | None = None) -> None:
        self.orchestrator = orchestrator
        self.settings = settings if settings is not None else Settings()

    # ------------------------------------------------------------------
    # Menu
    # ------------------------------------------------------------------

    def menu_choices(self) -> list[str]:
        """Menu entries in display order; optional editors follow settings."""
        loc = self.settings.localization
        choices = [loc.arguments]
        if self.settings.enable_env is not None:
            choices.append(loc.env_variables)
        if self.settings.enable_stdin is not None:
            choices.append(loc.input)
        if self.settings.enable_working_dir is not None:
            choices.append(loc.working_directory)
        choices.extend([loc.run, loc.quit])
        return choices

    def run(self) -> None:
        """Loop until the user quits (or cancels the menu)."""
        questionary = form._import_questionary()
        loc = self.settings.localization
        title = self.orchestrator.state.spec.display_name

        while True:
            action = questionary.select(title, choices=self.menu_choices()).ask()
            if action is None or action == loc.quit:
                logger.debug("Session closed")
                return
            self.dispatch(action)

    def dispatch(self, action: str) -> None:
        loc = self.settings.localization
        inputs = self.orchestrator.inputs
        if action == loc.arguments:
            form.edit_command(self.orchestrator.state, loc)
        elif action == loc.env_variables:
            form.edit_env(inputs, loc, self.settings.enable_env or "")
        elif action == loc.input:
            form.edit_stdin(inputs, loc, self.settings.enable_stdin or "")
        elif action == loc.working_directory:
            form.edit_working_directory(inputs, loc, self.settings.enable_working_dir or "")
        elif action == loc.run:
            self.run_once()

    # ------------------------------------------------------------------
    # Running
    # ------------------------------------------------------------------

    def run_once(self) -> ProcessStatus | None:
        """Attempt one run; return the final status, or ``None`` if rejected."""
        try:
            process = self.orchestrator.run()
        except (ValidationError, SpawnError):
            self.report_errors()
            return None
        return follow_output(
            process,
            self.settings.localization,
            poll_interval=self.settings.poll_interval,
        )

    def report_errors(self) -> None:
        """Print the standalone notice and every painted argument error."""
        loc = self.settings.localization
        notice = self.orchestrator.notice
        if notice is not None:
            console.error(loc.render(notice))
        for path, arg in self.orchestrator.state.validation_errors():
            text = loc.render(cast(Notice, arg.validation_error), arg.spec.display_name)
            console.error(f"{' '.join(path)}: {text}" if path else text)
