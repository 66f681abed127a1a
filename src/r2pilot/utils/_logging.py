"""structlog loggers for the CLI and the supervisor library.

The CLI builds its own file-backed logger per invocation. Library code never
configures structlog globally: it uses whatever logger the caller injects, or
falls back to `get_library_logger`.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from os import getenv
from pathlib import Path
from typing import TYPE_CHECKING, Literal, cast

import structlog

from ._paths import get_cli_log_file

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger, Processor

LogFormatType = Literal["json", "text"]

_LEVELS = logging.getLevelNamesMapping()


def _debug_forced() -> bool:
    return bool(getenv("R2PILOT_DEBUG"))


def _env_log_level() -> int:
    """R2PILOT_DEBUG wins, then R2PILOT_LOG_LEVEL, then INFO."""
    if _debug_forced():
        return logging.DEBUG
    return _LEVELS.get(getenv("R2PILOT_LOG_LEVEL", "info").upper(), logging.INFO)


def _named_log_level(name: str) -> int:
    if _debug_forced():
        return logging.DEBUG
    return _LEVELS.get(name.upper(), logging.INFO)


def _rotating_sink(
    path: Path, level: int, max_bytes: int, backup_count: int
) -> logging.Logger:
    # One private, non-propagating stdlib logger per file; handlers never stack.
    sink = logging.getLogger(f"r2pilot.{path.stem}.{id(path)}")
    sink.handlers.clear()
    sink.propagate = False
    sink.setLevel(level)

    handler = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    sink.addHandler(handler)
    return sink


def _processors(log_format: LogFormatType) -> list[Processor]:
    chain: list[Processor] = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if log_format == "text":
        chain.append(structlog.dev.ConsoleRenderer(colors=False))
    else:
        chain.append(structlog.processors.dict_tracebacks)
        chain.append(structlog.processors.JSONRenderer())
    return chain


def create_logger(
    log_file_path: str,
    *,
    log_level: int | None = None,
    log_format: LogFormatType = "json",
    max_bytes: int | None = None,
    backup_count: int | None = None,
) -> FilteringBoundLogger:
    """Build a self-contained structlog logger appending to `log_file_path`.

    Missing parent directories are created. Without an explicit `log_level`
    the level comes from R2PILOT_DEBUG / R2PILOT_LOG_LEVEL. The file is rotated
    only when both `max_bytes` and `backup_count` are given.
    """
    path = Path(log_file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    level = _env_log_level() if log_level is None else log_level

    if max_bytes is not None and backup_count is not None:
        sink: object = _rotating_sink(path, level, max_bytes, backup_count)
    else:
        sink = structlog.WriteLoggerFactory(file=path.open("a"))()

    return cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            sink,
            processors=_processors(log_format),
            wrapper_class=structlog.make_filtering_bound_logger(level),
            context_class=dict,
        ),
    )


def create_cli_logger(
    *,
    level: str = "info",
    log_format: LogFormatType = "json",
    log_file: str = "",
    command: str = "",
) -> FilteringBoundLogger:
    """Logger for one CLI invocation.

    Args:
        level: Threshold name. R2PILOT_DEBUG forces debug.
        log_format: "json" or "text".
        log_file: Destination; empty means the default CLI log under the state dir.
        command: Bound to every entry as `command` when non-empty.
    """
    logger = create_logger(
        log_file or str(get_cli_log_file()),
        log_level=_named_log_level(level),
        log_format=log_format,
    )
    return logger.bind(command=command) if command else logger


def get_library_logger(name: str) -> FilteringBoundLogger:
    """Fallback logger for library code; output follows the host's structlog setup."""
    return cast("FilteringBoundLogger", structlog.get_logger(name))
