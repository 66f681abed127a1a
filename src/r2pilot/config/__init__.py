"""r2pilot configuration.

This module provides the public API for r2pilot configuration management,
including loading, validation, and typed access to configuration values.

Example:
    >>> from r2pilot.config import load_settings
    >>> settings = load_settings()
    >>> settings.radare2.executable_path
    'radare2'
"""

from r2pilot.exceptions import (
    ConfigError,
    ConfigLoadError,
    ConfigValidationError,
)

from ._load import load_settings, safe_load_settings, settings_from_dict
from ._loader import (
    ENV_PREFIX,
    deep_merge,
    parse_env_value,
    parse_env_vars,
    read_toml_file,
    set_nested_key,
)
from ._models import (
    DEFAULT_HTTP_PORT,
    HTTP_SERVER_ARG,
    LogFormat,
    LoggingConfig,
    LogLevel,
    Radare2Config,
    Settings,
    parse_launch_mode,
)

__all__ = [
    "DEFAULT_HTTP_PORT",
    "ENV_PREFIX",
    "HTTP_SERVER_ARG",
    "ConfigError",
    "ConfigLoadError",
    "ConfigValidationError",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "Radare2Config",
    "Settings",
    "deep_merge",
    "load_settings",
    "parse_env_value",
    "parse_env_vars",
    "parse_launch_mode",
    "read_toml_file",
    "safe_load_settings",
    "set_nested_key",
    "settings_from_dict",
]
