import os
import shutil
from pathlib import Path

import platformdirs

from r2pilot.exceptions import BinaryNotFoundError

APP_NAME = "r2pilot"


def is_qualified(executable: str) -> bool:
    """Return True if the executable reference already names a location."""
    if Path(executable).is_absolute():
        return True
    separators = {os.sep, "/"}
    if os.altsep:
        separators.add(os.altsep)
    return any(sep in executable for sep in separators)


def resolve_executable(executable: str) -> str:
    """Resolve an executable reference to a path that can be spawned.

    Absolute paths and paths containing a directory separator are returned
    unchanged. Bare names are looked up on PATH.

    Args:
        executable: Executable name or path, e.g. "radare2".

    Returns:
        The path to spawn.

    Raises:
        BinaryNotFoundError: If a bare name cannot be found on PATH.
    """
    if is_qualified(executable):
        return executable

    found = shutil.which(executable)
    if found is None:
        msg = f"Failed to look up radare2 binary '{executable}' on PATH"
        raise BinaryNotFoundError(msg, executable=executable)

    return found


def get_config_dir() -> Path:
    """Get the r2pilot user configuration directory.

    Platform-specific location:
    - Linux: ``$XDG_CONFIG_HOME/r2pilot`` (default ``~/.config/r2pilot``)
    - macOS: ``~/Library/Application Support/r2pilot``
    - Windows: ``%LOCALAPPDATA%\\r2pilot``
    """
    return platformdirs.user_config_path(APP_NAME, appauthor=False)


def get_user_config_path() -> Path:
    """Get the path to the user configuration file."""
    return get_config_dir() / "config.toml"


def get_log_dir() -> Path:
    """Get the r2pilot log directory.

    On Linux this is ``$XDG_STATE_HOME/r2pilot`` (default
    ``~/.local/state/r2pilot``).
    """
    return platformdirs.user_state_path(APP_NAME, appauthor=False)


def get_cli_log_file() -> Path:
    """Get the path to the CLI log file."""
    return get_log_dir() / "cli.log"
