"""Protocol definitions for the supervisor.

This module defines the capabilities the supervisor is given rather than
hard-coding:
- InterruptStrategy: Delivers a graceful interrupt to a running process
- ExecutableResolver: Turns an executable reference into a runnable path
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from anyio.abc import Process


@runtime_checkable
class InterruptStrategy(Protocol):
    """Protocol for platform-specific graceful interrupts.

    Implementations ask the process to end itself (SIGINT on POSIX, a
    console control event on Windows). They must not force termination and
    must raise InterruptError on failure instead of aborting the host.
    """

    async def __call__(self, process: Process) -> None:
        """Deliver the interrupt.

        Args:
            process: The live process to interrupt.

        Raises:
            InterruptError: If the interrupt could not be delivered.
        """
        ...


@runtime_checkable
class ExecutableResolver(Protocol):
    """Protocol for resolving the radare2 executable."""

    def __call__(self, executable: str) -> str:
        """Resolve an executable reference to a path that can be spawned.

        Args:
            executable: Executable name or path from configuration.

        Returns:
            The path to spawn.

        Raises:
            BinaryNotFoundError: If the executable cannot be found.
        """
        ...
