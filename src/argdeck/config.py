"""Runtime settings for the interactive front-end.

Settings are plain values chosen by the host program; there is no
configuration file.  Only the log level can come from the environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from argdeck.localization import Localization

LOG_LEVEL_ENV_VAR: str = "ARGDECK_LOG_LEVEL"
DEFAULT_LOG_LEVEL: str = "WARNING"


def _log_level_from_env() -> str:
    return os.getenv(LOG_LEVEL_ENV_VAR, DEFAULT_LOG_LEVEL).upper()


@dataclass
class Settings:
    """Optional features and presentation knobs.

    For ``enable_env``, ``enable_stdin`` and ``enable_working_dir``,
    ``None`` disables the feature and a string enables it, shown as a
    description above the editor (an empty string shows nothing).
    """

    enable_env: str | None = None
    enable_stdin: str | None = None
    enable_working_dir: str | None = None
    localization: Localization = field(default_factory=Localization)
    poll_interval: float = 0.1
    """Seconds between output redraws while a child is running."""

    log_level: str = field(default_factory=_log_level_from_env)
