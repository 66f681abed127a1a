"""r2pilot CLI commands."""
# pyright: reportUnusedCallResult=false

from __future__ import annotations

from typing import TYPE_CHECKING

from ._blocks import app as blocks_app
from ._config import app as config_app
from ._context import CLIContext
from ._exec import app as exec_app
from ._shared import (
    ExitCode,
    exit_code_for,
    exit_with_error,
    format_json,
    format_toml,
)

if TYPE_CHECKING:
    from cyclopts import App

__all__ = [
    "CLIContext",
    "ExitCode",
    "blocks_app",
    "config_app",
    "exec_app",
    "exit_code_for",
    "exit_with_error",
    "format_json",
    "format_toml",
    "register_commands",
]


def register_commands(app: App) -> None:
    app.command(blocks_app)
    app.command(config_app)
    app.command(exec_app)
