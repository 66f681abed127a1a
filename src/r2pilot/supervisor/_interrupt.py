"""Graceful interrupt strategies.

radare2 treats an interrupt as "stop what you are doing", which lets it
detach from a debugged process cleanly before it is killed. Delivering one is
platform specific:

- POSIX: send SIGINT to the process.
- Windows: there is no way to signal a foreign console process directly.
  The caller detaches from its own console, attaches to the child's,
  disables its own Ctrl+C handling, raises CTRL_C_EVENT on that console and
  then detaches again. Based on https://stackoverflow.com/a/15281070.
"""

from __future__ import annotations

import ctypes
import signal
import sys
from typing import TYPE_CHECKING

import anyio

from r2pilot.exceptions import InterruptError

if TYPE_CHECKING:
    from anyio.abc import Process

    from ._protocol import InterruptStrategy

IS_WINDOWS = sys.platform == "win32"

# Windows needs a moment to deliver the control event before our own
# handler is re-enabled, otherwise we receive the Ctrl+C ourselves.
CONSOLE_EVENT_SETTLE_SECONDS = 1.0

_CTRL_C_EVENT = 0


async def posix_interrupt(process: Process) -> None:
    """Send SIGINT to the process.

    Args:
        process: The live process to interrupt.

    Raises:
        InterruptError: If the signal could not be sent.
    """
    try:
        process.send_signal(signal.SIGINT)
    except (ProcessLookupError, OSError) as e:
        msg = f"Failed to send SIGINT to pid {process.pid}: {e}"
        raise InterruptError(msg, pid=process.pid, cause=e) from e


def _console_call(pid: int, name: str, *args: object) -> None:
    """Call a kernel32 console function, raising on a FALSE result."""
    kernel32 = ctypes.WinDLL("kernel32", use_last_error=True)  # pyright: ignore[reportAttributeAccessIssue]
    result = getattr(kernel32, name)(*args)
    if not result:
        code = ctypes.get_last_error()  # pyright: ignore[reportAttributeAccessIssue]
        msg = f"{name} failed for pid {pid}: {ctypes.FormatError(code)}"  # pyright: ignore[reportAttributeAccessIssue]
        raise InterruptError(msg, pid=pid, cause=OSError(code, msg))


async def windows_interrupt(process: Process) -> None:
    """Raise CTRL_C_EVENT on the process's console.

    Args:
        process: The live process to interrupt.

    Raises:
        InterruptError: If any of the console calls fail.
    """
    pid = process.pid
    _console_call(pid, "FreeConsole")
    _console_call(pid, "AttachConsole", pid)
    _console_call(pid, "SetConsoleCtrlHandler", None, True)
    _console_call(pid, "GenerateConsoleCtrlEvent", _CTRL_C_EVENT, 0)
    _console_call(pid, "FreeConsole")

    # TODO: Wait for the child to acknowledge the event instead of sleeping.
    await anyio.sleep(CONSOLE_EVENT_SETTLE_SECONDS)

    _console_call(pid, "SetConsoleCtrlHandler", None, False)


def default_interrupt_strategy() -> InterruptStrategy:
    """Return the interrupt strategy for the host platform."""
    return windows_interrupt if IS_WINDOWS else posix_interrupt
