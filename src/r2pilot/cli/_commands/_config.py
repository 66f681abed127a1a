# pyright: reportUnusedCallResult=false
"""config command - shows the effective r2pilot settings."""

from enum import StrEnum
from typing import Annotated

from cyclopts import App, Parameter

from r2pilot.utils import get_user_config_path

from ._context import CLIContext
from ._shared import ExitCode, exit_with_error, format_json, format_toml

app = App(
    name="config",
    help="Show r2pilot configuration.",
    help_on_error=True,
)


class ConfigFormat(StrEnum):
    """Output formats for the config command."""

    JSON = "json"
    TOML = "toml"


@app.default
def show(
    *,
    format: Annotated[  # noqa: A002
        ConfigFormat,
        Parameter(name=["--format", "-f"], help="Output format."),
    ] = ConfigFormat.JSON,
) -> None:
    """Print the effective settings after merging every source."""
    ctx = CLIContext.get_current()
    if ctx.config_error is not None:
        exit_with_error(ctx.config_error, ExitCode.CONFIG_ERROR)

    data = ctx.settings.model_dump(mode="json", exclude_none=True)
    match format:
        case ConfigFormat.JSON:
            print(format_json(data))
        case ConfigFormat.TOML:
            print(format_toml(data).rstrip())


@app.command
def path() -> None:
    """Print the config file in effect, or the default location."""
    ctx = CLIContext.get_current()
    print(ctx.config_path or get_user_config_path())
