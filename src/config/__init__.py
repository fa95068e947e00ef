"""Mirror configuration: YAML file plus environment overrides."""

from .config_loader import ConfigLoader
from .errors import ConfigError, ConfigFileError
from .models import CacheConfig, MirrorConfig

__all__ = ['ConfigLoader', 'ConfigError', 'ConfigFileError', 'CacheConfig', 'MirrorConfig']
