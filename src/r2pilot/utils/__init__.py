"""Utility helpers shared across r2pilot."""

from ._logging import (
    LogFormatType,
    create_cli_logger,
    create_logger,
    get_library_logger,
)
from ._paths import (
    get_cli_log_file,
    get_config_dir,
    get_log_dir,
    get_user_config_path,
    is_qualified,
    resolve_executable,
)

__all__ = [
    "LogFormatType",
    "create_cli_logger",
    "create_logger",
    "get_cli_log_file",
    "get_config_dir",
    "get_library_logger",
    "get_log_dir",
    "get_user_config_path",
    "is_qualified",
    "resolve_executable",
]
