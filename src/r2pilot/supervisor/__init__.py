"""Supervisor package for managing a radare2 child process.

This package owns the lifecycle of one radare2 process at a time, with
structured concurrency, graceful interrupts and a single termination record
per process lifetime.

Key Components:
    - ProcessState: Lifecycle state enumeration
    - TerminationInfo: Record produced when a process ends
    - PipeHandles: stdin/stdout handles for the pipe transport
    - OutputCapture: Thread-safe sink for captured output
    - InterruptStrategy: Protocol for graceful interrupts
    - ExecutableResolver: Protocol for locating the executable
    - ProcessSupervisor: The process lifecycle manager

Example:
    >>> from r2pilot.config import Radare2Config
    >>> from r2pilot.supervisor import ProcessSupervisor
    >>> async with ProcessSupervisor(Radare2Config()) as supervisor:
    ...     handles = await supervisor.start("cli")
    ...     await supervisor.kill()
"""

from ._interrupt import default_interrupt_strategy, posix_interrupt, windows_interrupt
from ._models import PipeHandles, ProcessState, TerminationInfo
from ._output import OutputCapture, RelayReceiveStream
from ._protocol import ExecutableResolver, InterruptStrategy
from ._supervisor import ProcessSupervisor

__all__ = [
    "ExecutableResolver",
    "InterruptStrategy",
    "OutputCapture",
    "PipeHandles",
    "ProcessState",
    "ProcessSupervisor",
    "RelayReceiveStream",
    "TerminationInfo",
    "default_interrupt_strategy",
    "posix_interrupt",
    "windows_interrupt",
]
