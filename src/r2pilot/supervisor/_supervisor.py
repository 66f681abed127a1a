"""Process supervisor for a long-lived radare2 child.

This module provides the ProcessSupervisor class, which owns the radare2
process handle, tracks its lifecycle state under a single anyio lock, and
runs a watcher task per process lifetime using anyio for structured
concurrency.

The watcher races two events: the child exiting on its own, and a stop
request handed over by kill(). kill() holds the lock from the moment it marks
the process STOPPED until the watcher acknowledges, so the watcher can never
relabel a requested stop as DEAD, and exactly one TerminationInfo is
produced per lifetime.
"""

from __future__ import annotations

import contextlib
import math
import os
import signal
import subprocess
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Self, final

import anyio
import anyio.abc
from anyio.streams.buffered import BufferedByteReceiveStream

from r2pilot.config import parse_launch_mode
from r2pilot.enums import LaunchMode
from r2pilot.exceptions import (
    AlreadyRunningError,
    ProcessExitError,
    SpawnError,
    SupervisorError,
)
from r2pilot.utils import get_library_logger, resolve_executable

from ._interrupt import IS_WINDOWS, default_interrupt_strategy
from ._models import PipeHandles, ProcessState, TerminationInfo
from ._output import OutputCapture, RelayReceiveStream

if TYPE_CHECKING:
    from types import TracebackType

    from anyio.streams.memory import (
        MemoryObjectReceiveStream,
        MemoryObjectSendStream,
    )
    from structlog.typing import FilteringBoundLogger

    from r2pilot.config import Radare2Config

    from ._protocol import ExecutableResolver, InterruptStrategy


def _get_timestamp() -> str:
    """Get current timestamp in ISO 8601 format."""
    import pendulum  # noqa: PLC0415

    return pendulum.now("UTC").to_iso8601_string()


def _isolation_kwargs() -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Build platform-specific process creation kwargs.

    POSIX children get their own session so a terminal Ctrl+C reaches only
    us, and kill() can take down anything radare2 spawned. Windows children
    get a hidden window.
    """
    if IS_WINDOWS:
        startupinfo = subprocess.STARTUPINFO()  # pyright: ignore[reportAttributeAccessIssue]
        startupinfo.dwFlags |= subprocess.STARTF_USESHOWWINDOW  # pyright: ignore[reportAttributeAccessIssue]
        startupinfo.wShowWindow = 0  # SW_HIDE
        return {"startupinfo": startupinfo}
    return {"start_new_session": True}


def _terminate(process: anyio.abc.Process) -> None:
    """Forcibly terminate the process and its process group."""
    if IS_WINDOWS:
        with contextlib.suppress(ProcessLookupError):
            process.kill()
        return

    try:
        os.killpg(process.pid, signal.SIGKILL)
    except ProcessLookupError:
        # Already exited and reaped
        return
    except OSError:
        with contextlib.suppress(ProcessLookupError):
            process.kill()


@dataclass(slots=True, eq=False)
class _Lifetime:
    """Everything that belongs to one spawned process."""

    process: anyio.abc.Process
    stop_send: MemoryObjectSendStream[anyio.Event]
    stop_receive: MemoryObjectReceiveStream[anyio.Event]
    capture: OutputCapture | None
    # Streams read to EOF by the watcher, each with an optional relay for a reader.
    drains: list[
        tuple[anyio.abc.ByteReceiveStream, MemoryObjectSendStream[bytes] | None]
    ]
    drained: anyio.Event = field(default_factory=anyio.Event)
    pending_drains: int = 0


@final
class ProcessSupervisor:
    """Supervises one radare2 process at a time.

    The supervisor is an async context manager: entering it opens the task
    group that watcher tasks run in, leaving it kills any running process.

    Example:
        >>> async with ProcessSupervisor(Radare2Config()) as supervisor:
        ...     handles = await supervisor.start(LaunchMode.CLI)
        ...     ...
        ...     await supervisor.kill()

    Attributes:
        config: Launch configuration for radare2.
    """

    __slots__ = (
        "_closed",
        "_handles",
        "_interrupt",
        "_lifetime",
        "_lock",
        "_logger",
        "_notify_receive",
        "_notify_send",
        "_resolve",
        "_state",
        "_task_group",
        "config",
    )

    def __init__(
        self,
        config: Radare2Config,
        *,
        interrupt_strategy: InterruptStrategy | None = None,
        resolver: ExecutableResolver | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the supervisor.

        Args:
            config: Launch configuration for radare2.
            interrupt_strategy: Delivers graceful interrupts. Defaults to the
                host platform's strategy.
            resolver: Resolves the executable path. Defaults to a PATH lookup.
            logger: Logger for lifecycle events. Defaults to a structlog logger.
        """
        self.config = config
        self._interrupt: InterruptStrategy = (
            interrupt_strategy or default_interrupt_strategy()
        )
        self._resolve: ExecutableResolver = resolver or resolve_executable
        self._logger: FilteringBoundLogger = logger or get_library_logger(__name__)
        self._lock = anyio.Lock()
        self._state = ProcessState.STOPPED
        self._lifetime: _Lifetime | None = None
        self._handles: PipeHandles | None = None
        self._task_group: anyio.abc.TaskGroup | None = None
        self._closed = False
        # One slot: the watcher offers without blocking and the record
        # waits there until someone receives it.
        self._notify_send, self._notify_receive = anyio.create_memory_object_stream[
            TerminationInfo
        ](1)

    async def __aenter__(self) -> Self:
        if self._closed:
            msg = "supervisor is closed"
            raise SupervisorError(msg)
        if self._task_group is not None:
            msg = "supervisor is already open"
            raise SupervisorError(msg)

        task_group = anyio.create_task_group()
        _ = await task_group.__aenter__()
        self._task_group = task_group
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool | None:
        with anyio.CancelScope(shield=True):
            await self.kill()

        task_group = self._task_group
        self._task_group = None
        self._closed = True
        try:
            # Watchers have all finished or are finishing after the kill, and
            # the body's own exception must propagate unwrapped.
            if task_group is not None:
                _ = await task_group.__aexit__(None, None, None)
        finally:
            self._notify_send.close()
            self._notify_receive.close()

    @property
    def pid(self) -> int | None:
        """Return the process ID if running, None otherwise."""
        lifetime = self._lifetime
        return lifetime.process.pid if lifetime is not None else None

    async def status(self) -> ProcessState:
        """Return the current lifecycle state."""
        async with self._lock:
            return self._state

    def subscribe(self) -> MemoryObjectReceiveStream[TerminationInfo]:
        """Return the stream on which TerminationInfo records are offered.

        Every call returns the same stream. One record is offered per
        process lifetime, however many callers hold the stream; callers that
        need fan-out must relay it themselves.
        """
        return self._notify_receive

    async def wait_stopped(self) -> TerminationInfo:
        """Wait for the next TerminationInfo record.

        Waits forever if the process never ends.
        """
        return await self._notify_receive.receive()

    async def start(
        self, mode: LaunchMode | str = LaunchMode.CLI
    ) -> PipeHandles | None:
        """Spawn radare2 and start watching it.

        Args:
            mode: CLI to talk over stdin/stdout, HTTP to launch radare2's
                web server.

        Returns:
            Live pipe handles in CLI mode, None in HTTP mode.

        Raises:
            AlreadyRunningError: If a process is already running.
            ConfigValidationError: If the configuration is invalid.
            UnknownModeError: If the mode is not a LaunchMode.
            BinaryNotFoundError: If the executable cannot be resolved.
            SpawnError: If the operating system refuses to create the process.
            SupervisorError: If the supervisor is not open.
        """
        async with self._lock:
            if self._state is ProcessState.RUNNING:
                msg = "radare2 process is already running"
                raise AlreadyRunningError(msg, pid=self.pid)

            task_group = self._require_open()
            self.config.check()
            launch_mode = parse_launch_mode(mode)
            args = self.config.args(launch_mode)
            executable = self._resolve(self.config.executable_path)

            lifetime, handles = await self._spawn(executable, args, launch_mode)

            self._discard_stale_notification()
            self._state = ProcessState.RUNNING
            self._lifetime = lifetime
            self._handles = handles
            task_group.start_soon(
                self._watch, lifetime, name=f"r2pilot-watcher-{lifetime.process.pid}"
            )

            self._logger.debug(
                "radare2_started",
                pid=lifetime.process.pid,
                mode=launch_mode.value,
                executable=executable,
            )
            return handles

    async def interrupt(self) -> None:
        """Ask the running process to stop what it is doing.

        Does nothing if no process is running. Never changes the lifecycle
        state; the process may or may not exit as a result.

        Raises:
            InterruptError: If the interrupt strategy fails.
        """
        async with self._lock:
            lifetime = self._lifetime
            if self._state is not ProcessState.RUNNING or lifetime is None:
                return
            await self._interrupt(lifetime.process)

    async def kill(self) -> None:
        """Forcibly stop the running process.

        Does nothing if no process is running. Otherwise marks the process
        STOPPED, hands a rejoin token to the watcher, kills the process group
        and returns once the watcher has recorded the stop.
        """
        with anyio.CancelScope(shield=True):
            async with self._lock:
                lifetime = self._lifetime
                if self._state is not ProcessState.RUNNING or lifetime is None:
                    return

                self._state = ProcessState.STOPPED
                rejoin = anyio.Event()
                await lifetime.stop_send.send(rejoin)
                _terminate(lifetime.process)
                await rejoin.wait()

    def _require_open(self) -> anyio.abc.TaskGroup:
        if self._task_group is None:
            msg = "supervisor is not open; use 'async with ProcessSupervisor(...)'"
            raise SupervisorError(msg)
        return self._task_group

    async def _spawn(
        self,
        executable: str,
        args: list[str],
        mode: LaunchMode,
    ) -> tuple[_Lifetime, PipeHandles | None]:
        pipe_mode = mode is LaunchMode.CLI
        save_output = self.config.save_output

        try:
            process = await anyio.open_process(
                [executable, *args],
                stdin=subprocess.PIPE if pipe_mode else subprocess.DEVNULL,
                stdout=(
                    subprocess.PIPE if pipe_mode or save_output else subprocess.DEVNULL
                ),
                stderr=subprocess.PIPE if save_output else subprocess.DEVNULL,
                cwd=self.config.cwd,
                **_isolation_kwargs(),
            )
        except OSError as e:
            msg = f"failed to start radare2 - {e}"
            raise SpawnError(msg, executable=executable, cause=e) from e

        capture = OutputCapture() if save_output else None
        drains: list[
            tuple[anyio.abc.ByteReceiveStream, MemoryObjectSendStream[bytes] | None]
        ] = []
        if process.stderr is not None:
            drains.append((process.stderr, None))

        handles: PipeHandles | None = None
        if pipe_mode:
            if process.stdin is None or process.stdout is None:
                msg = "radare2 process has no stdin/stdout pipes"
                raise SpawnError(msg, executable=executable)
            relay_send, relay_receive = anyio.create_memory_object_stream[bytes](
                math.inf
            )
            drains.append((process.stdout, relay_send))
            handles = PipeHandles(
                stdin=process.stdin,
                stdout=BufferedByteReceiveStream(RelayReceiveStream(relay_receive)),
            )
        elif process.stdout is not None:
            drains.append((process.stdout, None))

        stop_send, stop_receive = anyio.create_memory_object_stream[anyio.Event]()
        lifetime = _Lifetime(
            process=process,
            stop_send=stop_send,
            stop_receive=stop_receive,
            capture=capture,
            drains=drains,
            pending_drains=len(drains),
        )
        return lifetime, handles

    def _discard_stale_notification(self) -> None:
        """Drop an unread record left over from the previous lifetime."""
        with contextlib.suppress(anyio.WouldBlock):
            _ = self._notify_receive.receive_nowait()

    async def _watch(self, lifetime: _Lifetime) -> None:
        """Watch one process lifetime until it ends by either path."""
        async with anyio.create_task_group() as tg:
            for stream, relay in lifetime.drains:
                tg.start_soon(self._drain, stream, relay, lifetime)
            if lifetime.pending_drains == 0:
                lifetime.drained.set()

            async with anyio.create_task_group() as race:
                race.start_soon(self._await_exit, lifetime, race.cancel_scope)
                race.start_soon(self._await_stop, lifetime, race.cancel_scope)

        with anyio.CancelScope(shield=True):
            lifetime.stop_send.close()
            lifetime.stop_receive.close()
            await lifetime.process.aclose()

        self._logger.debug(
            "radare2_watcher_finished",
            pid=lifetime.process.pid,
            returncode=lifetime.process.returncode,
        )

    async def _drain(
        self,
        stream: anyio.abc.ByteReceiveStream,
        relay: MemoryObjectSendStream[bytes] | None,
        lifetime: _Lifetime,
    ) -> None:
        """Read a child stream until EOF, capturing it and relaying it onward.

        Reading never waits on the relay's reader, so a transport that stops
        reading cannot stall the child or hide its exit.
        """
        forward = relay
        try:
            async for chunk in stream:
                if lifetime.capture is not None:
                    _ = lifetime.capture.write(chunk)
                if forward is not None:
                    try:
                        forward.send_nowait(chunk)
                    except anyio.BrokenResourceError:
                        # Reader went away; keep draining for the capture.
                        forward = None
        except (anyio.ClosedResourceError, anyio.BrokenResourceError):
            # Stream closed, which is expected on process exit
            pass
        finally:
            if relay is not None:
                relay.close()
            lifetime.pending_drains -= 1
            if lifetime.pending_drains == 0:
                lifetime.drained.set()

    async def _reap(self, process: anyio.abc.Process) -> int:
        """Wait for the process to exit and return its exit code."""
        return await process.wait()

    async def _await_exit(self, lifetime: _Lifetime, race: anyio.CancelScope) -> None:
        """Record a spontaneous exit, unless a stop request got there first."""
        error: Exception | None = None
        exit_code: int | None = None
        try:
            exit_code = await self._reap(lifetime.process)
        except OSError as e:
            error = e

        await lifetime.drained.wait()

        async with self._lock:
            race.cancel()
            if self._lifetime is not lifetime:
                return

            if self._state is ProcessState.RUNNING:
                self._state = ProcessState.DEAD
                if error is None and exit_code != 0:
                    msg = f"radare2 exited with code {exit_code}"
                    error = ProcessExitError(
                        msg, exit_code=exit_code, pid=lifetime.process.pid
                    )
            self._finish(lifetime, error=error, exit_code=exit_code)

    async def _await_stop(self, lifetime: _Lifetime, race: anyio.CancelScope) -> None:
        """Complete a stop request handed over by kill().

        kill() holds the lock until the rejoin event is set, so everything
        here runs on its behalf.
        """
        rejoin = await lifetime.stop_receive.receive()
        race.cancel()
        try:
            with anyio.CancelScope(shield=True):
                exit_code = await lifetime.process.wait()
                await lifetime.drained.wait()
                self._finish(lifetime, error=None, exit_code=exit_code)
        finally:
            rejoin.set()

    def _finish(
        self,
        lifetime: _Lifetime,
        *,
        error: Exception | None,
        exit_code: int | None,
    ) -> None:
        """Clear the handle and offer the TerminationInfo. Lock must be held."""
        info = TerminationInfo(
            state=self._state,
            error=error,
            output=lifetime.capture.snapshot() if lifetime.capture is not None else "",
            exit_code=exit_code,
            pid=lifetime.process.pid,
            stopped_at=_get_timestamp(),
        )
        self._lifetime = None
        self._handles = None

        # Slot still full from an unread record: drop this one.
        with contextlib.suppress(anyio.WouldBlock):
            self._notify_send.send_nowait(info)
