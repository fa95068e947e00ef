"""Command-line interface for the access-controlled Confluence mirror.

This package provides the `confluence-mirror` CLI tool, which answers "what
can this user see" questions against a live Confluence site using an access
profile file.
"""

from .errors import CLIError, ProfileLoadError
from .models import ExitCode
from .profile_loader import ProfileLoader

__all__ = [
    'CLIError',
    'ExitCode',
    'ProfileLoadError',
    'ProfileLoader',
]
