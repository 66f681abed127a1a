# pyright: reportAny=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""Raw configuration sources: TOML files and R2PILOT_ environment variables.

Everything here works on plain dictionaries. Validation happens later, in
`_load`, once every source has been merged.
"""

from __future__ import annotations

import json
import os
import tomllib
from typing import TYPE_CHECKING, Any

from r2pilot.exceptions import ConfigLoadError

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

ENV_PREFIX = "R2PILOT_"

# Read by the logging helpers, never mapped onto a settings key.
_RESERVED_ENV_KEYS = frozenset({"DEBUG", "LOG_LEVEL"})

_BOOLEANS = {"true": True, "false": False}


def read_toml_file(path: Path) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Parse a TOML config file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigLoadError: If the file is not valid TOML.
    """
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Failed to parse TOML file: {e}"
        raise ConfigLoadError(
            msg,
            path=path,
            # lineno and colno exist from Python 3.14 on
            line=getattr(e, "lineno", None),
            column=getattr(e, "colno", None),
        ) from e


def copy_value(value: Any) -> Any:  # pyright: ignore[reportExplicitAny]
    """Copy the tables and arrays of a config value, sharing only scalars."""
    if isinstance(value, dict):
        return {key: copy_value(item) for key, item in value.items()}
    if isinstance(value, list):
        return [copy_value(item) for item in value]
    return value


def deep_merge(
    base: Mapping[str, Any],  # pyright: ignore[reportExplicitAny]
    override: Mapping[str, Any],  # pyright: ignore[reportExplicitAny]
) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Layer `override` on top of `base` and return a new dictionary.

    Tables present on both sides merge key by key. Anything else in
    `override`, arrays included, replaces the base value outright. Neither
    argument is modified and the result shares no tables or arrays with them.

    Example:
        >>> deep_merge({"radare2": {"http_port": 1, "save_output": True}},
        ...            {"radare2": {"http_port": 2}})
        {'radare2': {'http_port': 2, 'save_output': True}}
    """
    merged = copy_value(dict(base))
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = copy_value(value)
    return merged


def parse_env_value(value: str) -> Any:  # pyright: ignore[reportExplicitAny]
    """Turn an environment string into the most specific value it spells.

    Tried in order: true/false in any case, an integer, a float (only when
    the text has a decimal point), a JSON array or object. Anything else,
    malformed JSON included, stays a string.
    """
    boolean = _BOOLEANS.get(value.lower())
    if boolean is not None:
        return boolean

    try:
        return int(value)
    except ValueError:
        pass

    if "." in value:
        try:
            return float(value)
        except ValueError:
            pass

    if value[:1] + value[-1:] in ("[]", "{}"):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            pass

    return value


def set_nested_key(
    d: dict[str, Any],  # pyright: ignore[reportExplicitAny]
    key_path: str,
    value: Any,  # pyright: ignore[reportExplicitAny]
) -> None:
    """Store `value` at a dotted path, creating or replacing tables on the way.

    Example:
        >>> d = {}
        >>> set_nested_key(d, "radare2.http_port", 9000)
        >>> d
        {'radare2': {'http_port': 9000}}
    """
    *parents, leaf = key_path.split(".")
    table = d
    for part in parents:
        child = table.get(part)
        if not isinstance(child, dict):
            child = table[part] = {}
        table = child
    table[leaf] = value


def parse_env_vars(
    prefix: str = ENV_PREFIX,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Collect settings from prefixed environment variables.

    A double underscore separates table and key, so
    `R2PILOT_RADARE2__HTTP_PORT=9000` becomes `{"radare2": {"http_port": 9000}}`.
    R2PILOT_DEBUG and R2PILOT_LOG_LEVEL are left to the logging helpers.

    Args:
        prefix: Variable name prefix.
        environ: Variables to read. Defaults to os.environ.
    """
    source = os.environ if environ is None else environ
    result: dict[str, Any] = {}  # pyright: ignore[reportExplicitAny]

    for name, raw in source.items():
        key = name.removeprefix(prefix)
        if key == name or not key or key in _RESERVED_ENV_KEYS:
            continue
        set_nested_key(result, key.replace("__", ".").lower(), parse_env_value(raw))

    return result
