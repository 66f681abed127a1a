"""Lifecycle plumbing shared by the supervised transports."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar, Self

import anyio

from r2pilot.exceptions import NotRunningError, R2PilotError
from r2pilot.supervisor import ProcessState, ProcessSupervisor
from r2pilot.utils import get_library_logger

from ._decode import decode_json

if TYPE_CHECKING:
    from types import TracebackType

    from anyio.streams.memory import MemoryObjectReceiveStream
    from structlog.typing import FilteringBoundLogger

    from r2pilot.config import Radare2Config
    from r2pilot.enums import LaunchMode
    from r2pilot.supervisor import (
        ExecutableResolver,
        InterruptStrategy,
        PipeHandles,
        TerminationInfo,
    )

# Command that makes radare2 detach from a debugged process.
DETACH_COMMAND = "dp-"
DETACH_TIMEOUT_SECONDS = 2.0


class SupervisedApi(ABC):
    """Base class for transports that own their radare2 process.

    Subclasses set `mode` and implement `execute_bytes`, plus `_on_started`
    and `_on_stopped` when they hold per-process state.
    """

    mode: ClassVar[LaunchMode]

    def __init__(
        self,
        config: Radare2Config,
        *,
        interrupt_strategy: InterruptStrategy | None = None,
        resolver: ExecutableResolver | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        self.config = config
        self._logger: FilteringBoundLogger = logger or get_library_logger(
            type(self).__module__
        )
        self._supervisor = ProcessSupervisor(
            config,
            interrupt_strategy=interrupt_strategy,
            resolver=resolver,
            logger=self._logger,
        )

    async def __aenter__(self) -> Self:
        _ = await self._supervisor.__aenter__()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool | None:
        with anyio.CancelScope(shield=True):
            await self.kill()
        return await self._supervisor.__aexit__(exc_type, exc_val, exc_tb)

    @property
    def supervisor(self) -> ProcessSupervisor:
        """The supervisor that owns the radare2 process."""
        return self._supervisor

    async def start(self) -> None:
        """Start radare2 in this transport's launch mode.

        Raises:
            AlreadyRunningError: If radare2 is already running.
            ConfigError: If the configuration is invalid.
            SpawnError: If the process could not be created.
        """
        handles = await self._supervisor.start(self.mode)
        await self._on_started(handles)

    async def restart(self) -> None:
        """Kill the running process, if any, and start a new one."""
        await self.kill()
        await self.start()

    async def interrupt(self) -> None:
        """Ask radare2 to abandon the current command."""
        await self._supervisor.interrupt()

    async def kill(self) -> None:
        """Forcibly stop radare2, detaching from a debuggee first if configured."""
        if self.config.detach_on_stop:
            await self._detach()
        await self._supervisor.kill()
        self._on_stopped()

    async def status(self) -> ProcessState:
        return await self._supervisor.status()

    def subscribe(self) -> MemoryObjectReceiveStream[TerminationInfo]:
        return self._supervisor.subscribe()

    async def execute(self, command: str) -> str:
        """Run a command and return its output as text.

        Raises:
            NotRunningError: If radare2 is not running.
            TransportError: If the command could not be exchanged.
        """
        raw = await self.execute_bytes(command)
        return raw.decode("utf-8", errors="replace")

    @abstractmethod
    async def execute_bytes(self, command: str) -> bytes:
        """Run a command and return its raw output."""

    async def execute_json(self, command: str, type_: Any = Any) -> Any:  # pyright: ignore[reportExplicitAny]
        """Run a command and decode its output as JSON.

        Args:
            command: The command, typically one ending in "j".
            type_: Type to validate the decoded value against.

        Raises:
            NotRunningError: If radare2 is not running.
            TransportError: If the command could not be exchanged.
            ResponseDecodeError: If the output does not decode as the type.
        """
        raw = await self.execute_bytes(command)
        return decode_json(raw, type_, command=command)

    async def _ensure_running(self) -> None:
        state = await self._supervisor.status()
        if state is not ProcessState.RUNNING:
            msg = f"cannot execute command - state is {state}"
            raise NotRunningError(msg, state=state)

    async def _detach(self) -> None:
        """Best-effort detach from a debugged process before a kill."""
        if await self._supervisor.status() is not ProcessState.RUNNING:
            return
        with anyio.move_on_after(DETACH_TIMEOUT_SECONDS) as scope:
            try:
                _ = await self.execute_bytes(DETACH_COMMAND)
            except R2PilotError as e:
                self._logger.warning("radare2_detach_failed", error=str(e))
        if scope.cancelled_caught:
            self._logger.warning(
                "radare2_detach_failed",
                error="timed out",
                timeout=DETACH_TIMEOUT_SECONDS,
            )

    async def _on_started(self, handles: PipeHandles | None) -> None:
        """Hook run after the process has been spawned."""

    def _on_stopped(self) -> None:
        """Hook run after the process has been killed."""
