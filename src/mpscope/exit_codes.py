"""Standardized CLI exit codes for mpscope.

Exit code scheme:

    0  SUCCESS        -- command completed
    1  GENERAL_ERROR  -- unexpected failure, crash, unhandled exception
    2  USAGE_ERROR    -- invalid arguments, bad flags, unknown command (Click default)
    3  CONFIG_ERROR   -- no descriptor or no entry point could be resolved
    6  PARTIAL        -- command completed but some files could not be processed

Only a configuration error aborts an analysis.  Unresolvable references,
unreadable files and malformed alias configs are logged and the pass
continues, so one bad file never hides the state of the rest of the tree.
"""

from __future__ import annotations

import sys

import click

# ---------------------------------------------------------------------------
# Exit code constants
# ---------------------------------------------------------------------------

EXIT_ERROR: int = 1
EXIT_CONFIG: int = 3
EXIT_PARTIAL: int = 6

# ---------------------------------------------------------------------------
# Custom exceptions (caught by CLI error handler)
# ---------------------------------------------------------------------------


class MpscopeError(click.ClickException):
    """Base class for mpscope errors with exit codes."""

    def __init__(self, message: str, exit_code: int = EXIT_ERROR):
        super().__init__(message)
        self.exit_code = exit_code

    def format_message(self) -> str:
        return self.message


class ConfigurationError(MpscopeError):
    """Raised when the analysis cannot establish any entry point.

    Proceeding with an empty entry set would report the whole project
    as dead, so this always aborts.
    """

    def __init__(self, message: str = "No app descriptor or entry point could be resolved."):
        super().__init__(message, EXIT_CONFIG)


# ---------------------------------------------------------------------------
# Helper
# ---------------------------------------------------------------------------


def exit_with(code: int, message: str | None = None) -> None:
    """Print an optional message to stderr and exit with the given code."""
    if message:
        click.echo(f"Error: {message}", err=True)
    sys.exit(code)
