"""Entry point and global options of the r2pilot command line."""
# ruff: noqa: TC003  # Path needed at runtime for cyclopts parameter parsing

from pathlib import Path
from typing import Annotated

from cyclopts import App, Parameter
from rich.console import Console

from r2pilot.config import safe_load_settings
from r2pilot.utils import create_cli_logger

from ._commands import register_commands
from ._commands._context import CLIContext


def _build_context(command: str, *, verbose: bool, config: Path | None) -> CLIContext:
    settings, config_error = safe_load_settings(config)
    logger = create_cli_logger(
        level="debug" if verbose else settings.logging.level.value,
        log_format=settings.logging.format.value,  # type: ignore[arg-type]
        log_file=settings.logging.file,
        command=command,
    )
    if config_error is not None:
        logger.warning("config_load_failed", error=config_error)
    return CLIContext(
        settings=settings,
        verbose=verbose,
        config_path=config,
        config_error=config_error,
        logger=logger,
    )


def create_app(
    console: Console | None = None,
    error_console: Console | None = None,
    *,
    exit_on_error: bool = True,
) -> App:
    """Assemble the cyclopts app. Tests pass their own consoles."""
    app = App(
        name="r2pilot",
        help="Drive radare2 as a supervised child process.",
        help_on_error=True,
        console=console or Console(),
        error_console=error_console or Console(stderr=True),
        exit_on_error=exit_on_error,
    )

    @app.meta.default
    def _launch(  # pyright: ignore[reportUnusedFunction]
        *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
        verbose: Annotated[
            bool, Parameter(help="Log at debug level regardless of settings")
        ] = False,
        config: Annotated[
            Path | None, Parameter(name="--config", help="Path to config file")
        ] = None,
    ) -> None:
        command = tokens[0] if tokens else ""
        ctx = _build_context(command, verbose=verbose, config=config)
        CLIContext.set_current(ctx)
        try:
            app(tokens)
        finally:
            CLIContext.reset()

    register_commands(app)
    return app


app = create_app()


def main() -> None:
    create_app().meta()


if __name__ == "__main__":
    main()
