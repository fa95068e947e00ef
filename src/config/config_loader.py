"""YAML configuration loading and validation.

Settings come from an optional YAML file, then environment variables (a .env
file is honoured through python-dotenv) override individual values, so a
deployment can run from environment alone. Credentials are never read here;
see confluence_client.auth.
"""

import os
from typing import Any, Dict, Mapping, Optional

import yaml
from dotenv import load_dotenv

from .errors import ConfigError, ConfigFileError
from .models import CONNECTIONS, CONTENT_FORMATS, CacheConfig, MirrorConfig


class ConfigLoader:
    """Loads MirrorConfig from YAML and environment overrides.

    Configuration file structure:
        connection: direct            # or "mcp"
        content_format: markdown      # or "adf"
        cache:
          pages: 1800
          spaces: 1800
          user_pages: 300
        request_timeout: 30
        page_limit: 250
        search_limit: 100
        mcp:
          cloud_id: "abc-123"
          tool_prefix: "mcp__atlassian__"

    Every field is optional; missing fields take MirrorConfig defaults.
    """

    DEFAULT_CONFIG_PATH = '.confluence-mirror/config.yaml'

    # Environment variable -> (section, field)
    ENV_OVERRIDES = {
        'CONFLUENCE_CONNECTION': (None, 'connection'),
        'CONFLUENCE_CONTENT_FORMAT': (None, 'content_format'),
        'CONFLUENCE_CACHE_PAGES': ('cache', 'pages'),
        'CONFLUENCE_CACHE_SPACES': ('cache', 'spaces'),
        'CONFLUENCE_CACHE_USER_PAGES': ('cache', 'user_pages'),
        'CONFLUENCE_REQUEST_TIMEOUT': (None, 'request_timeout'),
        'CONFLUENCE_CLOUD_ID': ('mcp', 'cloud_id'),
        'CONFLUENCE_MCP_TOOL_PREFIX': ('mcp', 'tool_prefix'),
    }

    @classmethod
    def load(
        cls,
        config_path: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> MirrorConfig:
        """Load configuration.

        Args:
            config_path: YAML file to read. When omitted, the default path is
                read if it exists; an explicitly given path must exist.
            environ: Environment mapping (defaults to os.environ after loading .env)

        Returns:
            Validated MirrorConfig

        Raises:
            ConfigFileError: If the file cannot be read
            ConfigError: If the configuration is invalid
        """
        if environ is None:
            load_dotenv()
            environ = os.environ

        if config_path is None:
            config_dict = (
                cls._read_yaml(cls.DEFAULT_CONFIG_PATH)
                if os.path.exists(cls.DEFAULT_CONFIG_PATH)
                else {}
            )
        else:
            config_dict = cls._read_yaml(config_path)

        cls._apply_env_overrides(config_dict, environ)
        return cls._parse_config(config_dict)

    @classmethod
    def _read_yaml(cls, config_path: str) -> Dict[str, Any]:
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            raise ConfigFileError(config_path, 'Configuration file not found')
        except PermissionError:
            raise ConfigFileError(config_path, 'Permission denied')
        except OSError as e:
            raise ConfigFileError(config_path, str(e))

        try:
            config_dict = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML syntax: {str(e)}")

        if config_dict is None:
            return {}

        if not isinstance(config_dict, dict):
            raise ConfigError(
                f"Configuration must be a YAML dictionary, got {type(config_dict).__name__}"
            )
        return config_dict

    @classmethod
    def _apply_env_overrides(cls, config_dict: Dict[str, Any], environ: Mapping[str, str]) -> None:
        for env_name, (section, field_name) in cls.ENV_OVERRIDES.items():
            value = environ.get(env_name)
            if value is None or value == '':
                continue
            if section is None:
                config_dict[field_name] = value
                continue
            target = config_dict.get(section)
            if not isinstance(target, dict):
                target = {}
                config_dict[section] = target
            target[field_name] = value

    @classmethod
    def _parse_config(cls, config_dict: Dict[str, Any]) -> MirrorConfig:
        defaults = MirrorConfig()

        connection = cls._choice(config_dict, 'connection', CONNECTIONS, defaults.connection)
        content_format = cls._choice(
            config_dict, 'content_format', CONTENT_FORMATS, defaults.content_format
        )

        cache_dict = config_dict.get('cache') or {}
        if not isinstance(cache_dict, dict):
            raise ConfigError(
                f"must be a dictionary, got {type(cache_dict).__name__}", 'cache'
            )
        cache_defaults = CacheConfig()
        cache = CacheConfig(
            pages=cls._positive_int(cache_dict, 'pages', cache_defaults.pages, 'cache.pages'),
            spaces=cls._positive_int(cache_dict, 'spaces', cache_defaults.spaces, 'cache.spaces'),
            user_pages=cls._positive_int(
                cache_dict, 'user_pages', cache_defaults.user_pages, 'cache.user_pages'
            ),
        )

        mcp_dict = config_dict.get('mcp') or {}
        if not isinstance(mcp_dict, dict):
            raise ConfigError(f"must be a dictionary, got {type(mcp_dict).__name__}", 'mcp')

        cloud_id = mcp_dict.get('cloud_id')
        if cloud_id is not None and not isinstance(cloud_id, str):
            raise ConfigError(
                f"must be a string, got {type(cloud_id).__name__}", 'mcp.cloud_id'
            )
        tool_prefix = mcp_dict.get('tool_prefix', '') or ''
        if not isinstance(tool_prefix, str):
            raise ConfigError(
                f"must be a string, got {type(tool_prefix).__name__}", 'mcp.tool_prefix'
            )

        return MirrorConfig(
            connection=connection,
            content_format=content_format,
            cache=cache,
            request_timeout=cls._positive_int(
                config_dict, 'request_timeout', defaults.request_timeout
            ),
            page_limit=cls._positive_int(config_dict, 'page_limit', defaults.page_limit),
            search_limit=cls._positive_int(config_dict, 'search_limit', defaults.search_limit),
            cloud_id=cloud_id.strip() if cloud_id else None,
            mcp_tool_prefix=tool_prefix,
        )

    @staticmethod
    def _choice(config_dict: Dict[str, Any], name: str, allowed: tuple, default: str) -> str:
        value = config_dict.get(name, default)
        if not isinstance(value, str) or value.strip().lower() not in allowed:
            raise ConfigError(
                f"must be one of {', '.join(allowed)}, got {value!r}", name
            )
        return value.strip().lower()

    @staticmethod
    def _positive_int(
        config_dict: Dict[str, Any],
        name: str,
        default: int,
        label: Optional[str] = None,
    ) -> int:
        value = config_dict.get(name, default)
        # YAML booleans are ints in Python; they are never a valid duration or size
        if isinstance(value, bool):
            raise ConfigError(f"must be a positive integer, got {value!r}", label or name)
        if isinstance(value, str):
            try:
                value = int(value.strip())
            except ValueError:
                raise ConfigError(f"must be a positive integer, got {value!r}", label or name)
        if not isinstance(value, int) or value <= 0:
            raise ConfigError(f"must be a positive integer, got {value!r}", label or name)
        return value
