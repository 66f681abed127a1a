from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from r2pilot.exceptions import ConfigError, ConfigValidationError
from r2pilot.utils import get_user_config_path

from ._loader import deep_merge, parse_env_vars, read_toml_file
from ._models import Settings

if TYPE_CHECKING:
    from pathlib import Path


def settings_from_dict(
    data: dict[str, Any],  # pyright: ignore[reportExplicitAny]
    *,
    source: str | None = None,
) -> Settings:
    """Validate a settings dictionary.

    Args:
        data: Merged configuration values.
        source: Description of where the values came from, for errors.

    Returns:
        The validated settings.

    Raises:
        ConfigValidationError: If any value fails validation. Only the first
            failing key is reported.
    """
    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        key = ".".join(str(part) for part in first["loc"])
        msg = f"Invalid configuration value for '{key}': {first['msg']}"
        raise ConfigValidationError(
            msg,
            key=key,
            value=first.get("input"),
            expected=first["msg"],
            source=source,
        ) from e


def load_settings(
    config_path: Path | None = None,
    *,
    include_env: bool = True,
    overrides: dict[str, Any] | None = None,  # pyright: ignore[reportExplicitAny]
) -> Settings:
    """Load settings from defaults, a TOML file and the environment.

    Precedence, lowest first: model defaults, the TOML file, R2PILOT_
    environment variables, then `overrides`.

    When config_path is None the user config file is used if it exists.
    An explicit config_path must exist.

    Args:
        config_path: Explicit path to a TOML config file.
        include_env: Whether to apply R2PILOT_ environment variables.
        overrides: Highest-precedence values, e.g. from CLI flags.

    Returns:
        The validated settings.

    Raises:
        FileNotFoundError: If an explicit config_path does not exist.
        ConfigLoadError: If the TOML file cannot be parsed.
        ConfigValidationError: If a value fails validation.
    """
    data: dict[str, Any] = {}  # pyright: ignore[reportExplicitAny]
    sources: list[str] = []

    path = config_path
    if path is None:
        default_path = get_user_config_path()
        if default_path.is_file():
            path = default_path
    elif not path.exists():
        msg = f"Config file not found: {path}"
        raise FileNotFoundError(msg)

    if path is not None:
        data = deep_merge(data, read_toml_file(path))
        sources.append(str(path))

    if include_env:
        env_values = parse_env_vars()
        if env_values:
            data = deep_merge(data, env_values)
            sources.append("env")

    if overrides:
        data = deep_merge(data, overrides)
        sources.append("cli")

    return settings_from_dict(data, source=", ".join(sources) or None)


def safe_load_settings(
    config_path: Path | None = None,
    *,
    overrides: dict[str, Any] | None = None,  # pyright: ignore[reportExplicitAny]
) -> tuple[Settings, str | None]:
    """Load settings, falling back to defaults on error.

    Args:
        config_path: Explicit path to a TOML config file.
        overrides: Highest-precedence values, e.g. from CLI flags.

    Returns:
        Tuple of (Settings, error_message). On success, error_message is None.
        On failure, returns default Settings with the error message.
    """
    try:
        settings = load_settings(config_path, overrides=overrides)
    except (ConfigError, OSError) as e:
        return Settings(), str(e)
    else:
        return settings, None
