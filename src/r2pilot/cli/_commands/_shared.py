# pyright: reportExplicitAny=false
"""Exit codes and output helpers used by every r2pilot command."""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Never

import orjson
import tomli_w
from rich.console import Console
from rich.markup import escape

from r2pilot.exceptions import ConfigError, SupervisorError, TransportError

__all__ = [
    "ExitCode",
    "exit_code_for",
    "exit_with_error",
    "format_json",
    "format_toml",
]


class ExitCode(IntEnum):
    SUCCESS = 0
    CONFIG_ERROR = 1
    PROCESS_ERROR = 2
    TRANSPORT_ERROR = 3
    IO_ERROR = 4
    INTERNAL_ERROR = 5


def exit_code_for(error: BaseException) -> ExitCode:
    """Pick the exit code for a failure raised while running a command."""
    match error:
        case ConfigError():
            return ExitCode.CONFIG_ERROR
        case SupervisorError():
            return ExitCode.PROCESS_ERROR
        case TransportError():
            return ExitCode.TRANSPORT_ERROR
        case OSError():
            return ExitCode.IO_ERROR
        case _:
            return ExitCode.INTERNAL_ERROR


def format_json(data: Any, *, indent: bool = True) -> str:
    return orjson.dumps(data, option=orjson.OPT_INDENT_2 if indent else 0).decode()


def format_toml(data: dict[str, Any]) -> str:
    """Render a settings dump as TOML. tomli_w rejects None values."""
    return tomli_w.dumps(data)


def exit_with_error(
    message: str,
    code: ExitCode = ExitCode.INTERNAL_ERROR,
    *,
    console: Console | None = None,
) -> Never:
    """Report `message` on stderr and leave with `code`.

    The message is escaped, so brackets in radare2 output or file paths are
    printed literally instead of being read as Rich markup.
    """
    out = console if console is not None else Console(stderr=True)
    out.print(f"[red]Error:[/red] {escape(message)}", highlight=False, soft_wrap=True)
    raise SystemExit(code)
