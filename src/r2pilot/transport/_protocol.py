"""Protocol shared by the radare2 transports."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, Self, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from anyio.streams.memory import MemoryObjectReceiveStream

    from r2pilot.supervisor import ProcessState, TerminationInfo


@runtime_checkable
class Radare2Api(Protocol):
    """A running radare2 instance that accepts commands.

    Implementations own a ProcessSupervisor and are async context managers;
    leaving the context kills the process.
    """

    async def __aenter__(self) -> Self: ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool | None: ...

    async def start(self) -> None:
        """Start radare2 in this transport's launch mode."""
        ...

    async def restart(self) -> None:
        """Kill the running process, if any, and start a new one."""
        ...

    async def interrupt(self) -> None:
        """Ask radare2 to abandon the current command."""
        ...

    async def kill(self) -> None:
        """Forcibly stop radare2."""
        ...

    async def status(self) -> ProcessState:
        """Return the lifecycle state of the process."""
        ...

    def subscribe(self) -> MemoryObjectReceiveStream[TerminationInfo]:
        """Return the stream TerminationInfo records are offered on."""
        ...

    async def execute(self, command: str) -> str:
        """Run a command and return its output as text."""
        ...

    async def execute_bytes(self, command: str) -> bytes:
        """Run a command and return its raw output."""
        ...

    async def execute_json(self, command: str, type_: Any = Any) -> Any:  # pyright: ignore[reportExplicitAny]
        """Run a command and decode its output as JSON."""
        ...
