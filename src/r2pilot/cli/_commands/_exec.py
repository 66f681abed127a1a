# pyright: reportUnusedCallResult=false
"""exec command - runs commands against a fresh radare2 process."""

from typing import Annotated, Any

import anyio
from cyclopts import App, Parameter
from structlog.typing import FilteringBoundLogger

from r2pilot.config import Radare2Config
from r2pilot.enums import LaunchMode
from r2pilot.exceptions import R2PilotError
from r2pilot.transport import HttpServerApi, PipeApi, Radare2Api

from ._context import CLIContext
from ._shared import ExitCode, exit_code_for, exit_with_error, format_json

app = App(
    name="exec",
    help="Start radare2, run commands and print their output.",
    help_on_error=True,
)


def create_api(
    config: Radare2Config,
    mode: LaunchMode,
    logger: FilteringBoundLogger | None = None,
) -> Radare2Api:
    """Create the transport for a launch mode."""
    match mode:
        case LaunchMode.CLI:
            return PipeApi(config, logger=logger)
        case LaunchMode.HTTP:
            return HttpServerApi(config, logger=logger)


async def run_commands(
    config: Radare2Config,
    mode: LaunchMode,
    commands: tuple[str, ...],
    as_json: bool = False,
    logger: FilteringBoundLogger | None = None,
) -> list[Any]:  # pyright: ignore[reportExplicitAny]
    """Start radare2, run each command in order and kill it.

    Returns:
        One result per command: output text, or the decoded JSON value when
        as_json is set.
    """
    results: list[Any] = []  # pyright: ignore[reportExplicitAny]
    async with create_api(config, mode, logger) as api:
        await api.start()
        if isinstance(api, HttpServerApi):
            await api.wait_ready()

        for command in commands:
            if as_json:
                results.append(await api.execute_json(command))
            else:
                results.append(await api.execute(command))
    return results


@app.default
def exec_(
    *commands: str,
    mode: Annotated[
        LaunchMode,
        Parameter(help="Talk to radare2 over pipes (cli) or its HTTP server (http)."),
    ] = LaunchMode.CLI,
    json: Annotated[
        bool,
        Parameter(help="Decode each command's output as JSON and print it as JSON."),
    ] = False,
) -> None:
    """Run radare2 commands and print their output.

    Each command's output is printed in order. radare2 is started before the
    first command and killed after the last one.
    """
    ctx = CLIContext.get_current()
    if ctx.config_error is not None:
        exit_with_error(ctx.config_error, ExitCode.CONFIG_ERROR)
    if not commands:
        exit_with_error("No commands given", ExitCode.CONFIG_ERROR)

    logger = ctx.logger
    if logger is not None:
        logger.info("exec_started", mode=mode.value, commands=list(commands))

    try:
        results = anyio.run(
            run_commands, ctx.settings.radare2, mode, commands, json, logger
        )
    except R2PilotError as e:
        if logger is not None:
            logger.error("exec_failed", error=str(e), error_type=type(e).__name__)
        exit_with_error(str(e), exit_code_for(e))

    if json:
        payload = [
            {"command": command, "result": result}
            for command, result in zip(commands, results, strict=True)
        ]
        print(format_json(payload))
        return

    for output in results:
        print(output)
