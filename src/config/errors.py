"""Exceptions raised while loading mirror configuration."""

from typing import Optional

from src.confluence_client.errors import MirrorError


class ConfigError(MirrorError):
    """Raised when configuration is invalid or malformed."""

    def __init__(self, message: str, config_field: Optional[str] = None):
        if config_field:
            full_message = f"Configuration error in field '{config_field}': {message}"
        else:
            full_message = f"Configuration error: {message}"
        super().__init__(full_message)
        self.config_field = config_field
        self.original_message = message


class ConfigFileError(ConfigError):
    """Raised when the configuration file cannot be read."""

    def __init__(self, config_path: str, reason: str):
        super().__init__(f"Cannot read {config_path}: {reason}")
        self.config_path = config_path
        self.reason = reason
