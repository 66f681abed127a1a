"""Data models for the process supervisor.

This module defines the core data types for supervising radare2:
- ProcessState: Lifecycle states of the supervised process
- TerminationInfo: Immutable record produced once per process lifetime
- PipeHandles: Live stdin/stdout handles handed to the pipe transport
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from anyio.abc import ByteSendStream
    from anyio.streams.buffered import BufferedByteReceiveStream


class ProcessState(StrEnum):
    """Process lifecycle states.

    - STOPPED: No process, or the last one was stopped by request
    - RUNNING: Process spawned and watched
    - DEAD: Process exited on its own, without a stop request
    """

    STOPPED = "stopped"
    RUNNING = "running"
    DEAD = "dead"


@dataclass(frozen=True, slots=True)
class TerminationInfo:
    """Immutable record of how a process lifetime ended.

    Produced exactly once per lifetime by the watcher and offered to the
    subscriber, if any.

    Attributes:
        state: The terminal state committed before the record was offered.
        error: Non-None only when the process ended abnormally or could not
            be waited on. A requested kill leaves this as None.
        output: Captured combined output, empty when capture was off.
        exit_code: Exit code reported by the operating system.
        pid: Process ID of the process that ended.
        stopped_at: ISO 8601 timestamp of when the end was recorded.
    """

    state: ProcessState
    error: Exception | None = None
    output: str = ""
    exit_code: int | None = None
    pid: int | None = None
    stopped_at: str | None = None

    def err(self) -> Exception | None:
        """Return the error, if the process ended abnormally."""
        return self.error

    def combined_output(self) -> str:
        """Return the captured output text."""
        return self.output


@dataclass(frozen=True, slots=True)
class PipeHandles:
    """Live handles to a process started in CLI mode.

    Valid only while the supervisor reports RUNNING. Exactly one consumer,
    the pipe transport, should use them.

    Attributes:
        stdin: Stream that carries commands into the process.
        stdout: Buffered stream of the process's responses. When output
            capture is on, everything received here is also captured.
    """

    stdin: ByteSendStream
    stdout: BufferedByteReceiveStream
