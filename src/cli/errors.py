"""Typed exception hierarchy for CLI-related errors."""

from src.confluence_client.errors import MirrorError


class CLIError(MirrorError):
    """Base exception for all CLI-related errors."""
    pass


class ProfileLoadError(CLIError):
    """Raised when an access profile file cannot be read or parsed."""

    def __init__(self, profile_path: str, reason: str):
        super().__init__(f"Cannot load access profile {profile_path}: {reason}")
        self.profile_path = profile_path
        self.reason = reason
