"""Exit-code constants used by the CLI layer.

Every exit path of the ``argdeck`` command returns one of these.
The supervised child's own exit code is reported, never forwarded.
"""

from __future__ import annotations

SUCCESS: int = 0
"""Session ended normally (the child's outcome does not matter)."""

GENERAL_ERROR: int = 1
"""An ArgdeckError reached the error boundary and was displayed."""

UNEXPECTED_ERROR: int = 2
"""An unhandled exception escaped all known error boundaries."""

KEYBOARD_INTERRUPT: int = 130
"""User pressed Ctrl+C outside a running child (128 + SIGINT)."""
