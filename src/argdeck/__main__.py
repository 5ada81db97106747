"""Allow ``python -m argdeck`` invocation.

Delegates to the CLI error-boundary entry point so that
``python -m argdeck`` behaves identically to the ``argdeck`` console
script.
"""

from __future__ import annotations

from argdeck.cli.app import cli

if __name__ == "__main__":
    cli()
