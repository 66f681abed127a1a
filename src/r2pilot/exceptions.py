"""r2pilot exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pathlib import Path


class R2PilotError(Exception):
    """Base exception for r2pilot errors."""


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigError(R2PilotError):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when configuration cannot be loaded or parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize with error message and optional location context."""
        super().__init__(message)
        self.path: Path | None = path
        self.line: int | None = line
        self.column: int | None = column


class ConfigValidationError(ConfigError):
    """Raised when configuration fails validation."""

    def __init__(
        self,
        message: str,
        *,
        key: str,
        value: Any,  # pyright: ignore[reportAny,reportExplicitAny]
        expected: str,
        source: str | None = None,
    ) -> None:
        """Initialize with error message and validation context."""
        super().__init__(message)
        self.key: str = key
        self.value: Any = value  # pyright: ignore[reportExplicitAny]
        self.expected: str = expected
        self.source: str | None = source


class UnknownModeError(ConfigError, ValueError):
    """Raised when a launch mode is not one radare2 can be started in.

    Attributes:
        mode: The rejected mode value.
    """

    def __init__(self, message: str, *, mode: object) -> None:
        """Initialize with error message and the rejected mode.

        Args:
            message: Human-readable error message.
            mode: The rejected mode value.
        """
        super().__init__(message)
        self.mode: object = mode


class BinaryNotFoundError(ConfigError, FileNotFoundError):
    """Raised when the radare2 executable cannot be located.

    Attributes:
        executable: The executable name or path that was looked up.
    """

    def __init__(self, message: str, *, executable: str) -> None:
        """Initialize with error message and executable context.

        Args:
            message: Human-readable error message.
            executable: The executable name or path that was looked up.
        """
        super().__init__(message)
        self.executable: str = executable


# =============================================================================
# Supervisor Exceptions
# =============================================================================


class SupervisorError(R2PilotError):
    """Base exception for supervisor errors."""


class AlreadyRunningError(SupervisorError):
    """Raised when starting a supervisor whose process is already running.

    Attributes:
        pid: Process ID of the process that is already running.
    """

    def __init__(self, message: str, *, pid: int | None = None) -> None:
        """Initialize with error message and process context.

        Args:
            message: Human-readable error message.
            pid: Process ID of the process that is already running.
        """
        super().__init__(message)
        self.pid: int | None = pid


class NotRunningError(SupervisorError):
    """Raised when an operation needs a running process and there is none.

    Attributes:
        state: The lifecycle state observed when the operation was attempted.
    """

    def __init__(self, message: str, *, state: str | None = None) -> None:
        """Initialize with error message and state context.

        Args:
            message: Human-readable error message.
            state: The lifecycle state observed when the operation was attempted.
        """
        super().__init__(message)
        self.state: str | None = state


class SpawnError(SupervisorError):
    """Raised when the operating system refuses to create the process.

    Attributes:
        executable: The executable that failed to start.
        cause: The underlying exception that caused the failure.
    """

    def __init__(
        self,
        message: str,
        *,
        executable: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message and spawn context.

        Args:
            message: Human-readable error message.
            executable: The executable that failed to start.
            cause: The underlying exception that caused the failure.
        """
        super().__init__(message)
        self.executable: str | None = executable
        self.cause: Exception | None = cause


class InterruptError(SupervisorError):
    """Raised when a graceful interrupt could not be delivered.

    Attributes:
        pid: Process ID the interrupt was aimed at.
        cause: The underlying exception, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        pid: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message and interrupt context.

        Args:
            message: Human-readable error message.
            pid: Process ID the interrupt was aimed at.
            cause: The underlying exception, if any.
        """
        super().__init__(message)
        self.pid: int | None = pid
        self.cause: Exception | None = cause


class ProcessExitError(SupervisorError):
    """Reported when the process ended on its own with a failure status.

    Never raised by the supervisor; carried in TerminationInfo.error.

    Attributes:
        exit_code: The process exit code (negative for a signal on POSIX).
        pid: Process ID of the process that exited.
    """

    def __init__(
        self,
        message: str,
        *,
        exit_code: int | None = None,
        pid: int | None = None,
    ) -> None:
        """Initialize with error message and exit context.

        Args:
            message: Human-readable error message.
            exit_code: The process exit code.
            pid: Process ID of the process that exited.
        """
        super().__init__(message)
        self.exit_code: int | None = exit_code
        self.pid: int | None = pid


# =============================================================================
# Transport Exceptions
# =============================================================================


class TransportError(R2PilotError):
    """Raised when a command could not be exchanged with radare2.

    Attributes:
        command: The command being executed, if any.
        cause: The underlying exception, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        command: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message and command context.

        Args:
            message: Human-readable error message.
            command: The command being executed, if any.
            cause: The underlying exception, if any.
        """
        super().__init__(message)
        self.command: str | None = command
        self.cause: Exception | None = cause


class HttpStatusError(TransportError):
    """Raised when the radare2 HTTP server answers with a non-200 status.

    Attributes:
        status_code: The HTTP status code returned.
        body: The response body, possibly empty.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        body: str = "",
        command: str | None = None,
    ) -> None:
        """Initialize with error message and response context.

        Args:
            message: Human-readable error message.
            status_code: The HTTP status code returned.
            body: The response body, possibly empty.
            command: The command being executed.
        """
        super().__init__(message, command=command)
        self.status_code: int = status_code
        self.body: str = body


class ResponseDecodeError(TransportError, ValueError):
    """Raised when a command's output cannot be decoded as the requested type."""
