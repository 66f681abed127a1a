"""Pipe transport: commands over stdin, NUL-terminated responses on stdout."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar, final, override

import anyio

from r2pilot.enums import LaunchMode
from r2pilot.exceptions import TransportError

from ._base import SupervisedApi

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from r2pilot.config import Radare2Config
    from r2pilot.supervisor import ExecutableResolver, InterruptStrategy, PipeHandles

# radare2 started with -0 ends every response with a NUL byte.
RESPONSE_TERMINATOR = b"\x00"
MAX_RESPONSE_BYTES = 256 * 1024 * 1024

_PIPE_ERRORS = (
    anyio.EndOfStream,
    anyio.IncompleteRead,
    anyio.DelimiterNotFound,
    anyio.BrokenResourceError,
    anyio.ClosedResourceError,
)


def trim_output(raw: bytes) -> bytes:
    """Strip the trailing terminator, newlines and surrounding whitespace."""
    return raw.rstrip(b"\n\x00").strip()


@final
class PipeApi(SupervisedApi):
    """Talks to radare2 over its standard streams.

    Commands are serialized: each one is written as a line and its response
    read up to the NUL terminator before the next command is sent.

    Example:
        >>> async with PipeApi(Radare2Config()) as r2:
        ...     await r2.start()
        ...     print(await r2.execute("?V"))
    """

    mode: ClassVar[LaunchMode] = LaunchMode.CLI

    def __init__(
        self,
        config: Radare2Config,
        *,
        interrupt_strategy: InterruptStrategy | None = None,
        resolver: ExecutableResolver | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        super().__init__(
            config,
            interrupt_strategy=interrupt_strategy,
            resolver=resolver,
            logger=logger,
        )
        self._handles: PipeHandles | None = None
        self._command_lock = anyio.Lock()

    @override
    async def execute_bytes(self, command: str) -> bytes:
        """Run a command and return its raw output.

        Raises:
            NotRunningError: If radare2 is not running.
            TransportError: If the pipes broke or radare2 exited mid-response.
        """
        async with self._command_lock:
            await self._ensure_running()
            handles = self._handles
            if handles is None:
                msg = "pipe transport has no open handles"
                raise TransportError(msg, command=command)

            try:
                await handles.stdin.send(command.encode() + b"\n")
                raw = await handles.stdout.receive_until(
                    RESPONSE_TERMINATOR, MAX_RESPONSE_BYTES
                )
            except _PIPE_ERRORS as e:
                msg = f"failed to execute '{command}' - {type(e).__name__}"
                raise TransportError(msg, command=command, cause=e) from e

        if self.config.do_not_trim_output:
            return raw
        return trim_output(raw)

    @override
    async def _on_started(self, handles: PipeHandles | None) -> None:
        if handles is None:
            msg = "radare2 was not started with pipes"
            raise TransportError(msg)

        # radare2 announces readiness with a lone NUL byte.
        try:
            _ = await handles.stdout.receive_exactly(1)
        except _PIPE_ERRORS as e:
            await self._supervisor.kill()
            msg = "radare2 exited before becoming ready"
            raise TransportError(msg, cause=e) from e

        self._handles = handles

    @override
    def _on_stopped(self) -> None:
        self._handles = None
