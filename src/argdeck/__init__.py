"""argdeck — interactive terminal front-end for argparse programs.

Builds a live argument model from an :class:`argparse.ArgumentParser`,
assembles it into an argument vector, and supervises the resulting
child process while streaming its output back.
"""

from loguru import logger

from argdeck.cli.app import run_parser
from argdeck.config import Settings
from argdeck.localization import Localization
from argdeck.version import __version__

logger.disable("argdeck")

__all__: list[str] = ["Localization", "Settings", "__version__", "run_parser"]
