# ruff: noqa: TC003  # Path needed at runtime for dataclass field
"""Per-invocation state shared between the meta command and subcommands."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from r2pilot.config import Settings

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

_active: contextvars.ContextVar[CLIContext | None] = contextvars.ContextVar(
    "r2pilot_cli_context", default=None
)


@dataclass(frozen=True, slots=True)
class CLIContext:
    """What the meta command resolved before dispatching.

    `config_error` holds the load failure message when settings fell back to
    defaults; commands that need real settings exit on it. `logger` writes to
    the CLI log file only, never to the terminal.
    """

    settings: Settings = field(default_factory=Settings, repr=False)
    verbose: bool = False
    config_path: Path | None = None
    config_error: str | None = None
    logger: FilteringBoundLogger | None = field(default=None, repr=False)

    @classmethod
    def get_current(cls) -> CLIContext:
        return _active.get() or cls()

    @classmethod
    def set_current(cls, ctx: CLIContext) -> None:
        _ = _active.set(ctx)

    @classmethod
    def reset(cls) -> None:
        _ = _active.set(None)
