"""Data models for CLI operations."""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for CLI operations.

    - SUCCESS (0): Operation completed successfully (for can-view: visible)
    - GENERAL_ERROR (1): General error (config issues, missing page); for can-view: not visible
    - AUTH_ERROR (3): Credentials missing or rejected

    Example:
        >>> raise typer.Exit(ExitCode.SUCCESS)
    """
    SUCCESS = 0
    GENERAL_ERROR = 1
    AUTH_ERROR = 3
