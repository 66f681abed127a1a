"""Configuration models.

This module provides the Pydantic models for r2pilot settings:
- Radare2Config: How radare2 is located, launched and talked to
- LoggingConfig: Where and how CLI logs are written
- Settings: The root model combining both sections
"""

from enum import StrEnum
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

from r2pilot.enums import LaunchMode
from r2pilot.exceptions import ConfigValidationError, UnknownModeError

HTTP_SERVER_ARG = "-c=h"
DEFAULT_HTTP_PORT = 9090


def parse_launch_mode(mode: LaunchMode | str) -> LaunchMode:
    """Convert a mode value to a LaunchMode.

    Raises:
        UnknownModeError: If the value is not a known launch mode.
    """
    try:
        return LaunchMode(mode)
    except ValueError as e:
        msg = f"unknown mode '{mode}'"
        raise UnknownModeError(msg, mode=mode) from e


class LogLevel(StrEnum):
    """Log level threshold values.

    Values are ordered from most verbose (debug) to least verbose (error).
    """

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogFormat(StrEnum):
    """Log output format values."""

    JSON = "json"
    TEXT = "text"


class Radare2Config(BaseModel):
    """radare2 launch configuration.

    Attributes:
        executable_path: Executable name or path. Bare names are looked up
            on PATH when the process is started.
        custom_args: Replaces every generated argument when set.
        additional_args: Appended after the generated arguments.
        do_not_trim_output: Return command output exactly as received.
        save_output: Capture the process's output for TerminationInfo.
        debug_pid: Attach radare2's debugger to this process ID when > 0.
        disable_http_sandbox: Start the HTTP server with http.sandbox=false.
        http_port: Port the HTTP server listens on; 0 lets radare2 choose.
        detach_on_stop: Send "dp-" before killing so a debuggee survives.
        cwd: Working directory for the process.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="forbid")

    executable_path: str = "radare2"
    custom_args: tuple[str, ...] | None = None
    additional_args: tuple[str, ...] = ()
    do_not_trim_output: bool = False
    save_output: bool = False
    debug_pid: int = 0
    disable_http_sandbox: bool = False
    http_port: int = Field(default=DEFAULT_HTTP_PORT, ge=0, le=65535)
    detach_on_stop: bool = False
    cwd: str | None = None

    def check(self) -> None:
        """Validate the settings a launch depends on.

        Raises:
            ConfigValidationError: If the executable path is empty.
        """
        if not self.executable_path.strip():
            msg = "executable path is empty"
            raise ConfigValidationError(
                msg,
                key="radare2.executable_path",
                value=self.executable_path,
                expected="a non-empty executable name or path",
            )

    def args(self, mode: LaunchMode | str) -> list[str]:
        """Build the radare2 argument list for a launch mode.

        Args:
            mode: The launch mode.

        Returns:
            The arguments, not including the executable.

        Raises:
            UnknownModeError: If the mode is not a LaunchMode.
        """
        if self.custom_args is not None:
            return list(self.custom_args)

        args: list[str] = []
        match parse_launch_mode(mode):
            case LaunchMode.CLI:
                args.extend(["-q", "-0"])
            case LaunchMode.HTTP:
                if self.http_port > 0:
                    args.append(f"{HTTP_SERVER_ARG}{self.http_port}")
                else:
                    args.append(HTTP_SERVER_ARG)
                if self.disable_http_sandbox:
                    args.extend(["-e", "http.sandbox=false"])

        if self.debug_pid > 0:
            args.extend(["-d", str(self.debug_pid)])

        args.extend(self.additional_args)
        return args


class LoggingConfig(BaseModel):
    """Logging configuration section.

    Attributes:
        level: Log level threshold.
        format: Log output format.
        file: Path to log file (empty uses the default CLI log file).
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.JSON
    file: str = ""


class Settings(BaseModel):
    """Root r2pilot settings."""

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    radare2: Radare2Config = Field(default_factory=Radare2Config)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
