"""Output capture for supervised processes.

This module provides the OutputCapture sink that accumulates everything a
process writes while it runs, and RelayReceiveStream, through which the
pipe transport reads the stdout chunks the supervisor pumps.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, final

from anyio.abc import ByteReceiveStream

if TYPE_CHECKING:
    from anyio.streams.memory import MemoryObjectReceiveStream


@final
class OutputCapture:
    """Thread-safe append-only byte sink.

    Writes may come from whichever task or thread is draining the child's
    streams while the owner takes snapshots. Growth is unbounded.
    """

    __slots__ = ("_buffer", "_lock")

    def __init__(self) -> None:
        self._buffer = bytearray()
        self._lock = threading.Lock()

    def write(self, data: bytes) -> int:
        """Append bytes to the capture.

        Args:
            data: The bytes to append.

        Returns:
            The number of bytes appended.
        """
        with self._lock:
            self._buffer.extend(data)
        return len(data)

    def snapshot(self) -> str:
        """Return the accumulated output as text.

        Invalid UTF-8 is replaced rather than rejected, since radare2 happily
        prints raw bytes.
        """
        with self._lock:
            return self._buffer.decode("utf-8", errors="replace")

    def __len__(self) -> int:
        with self._lock:
            return len(self._buffer)


@final
class RelayReceiveStream(ByteReceiveStream):
    """Byte stream fed from a memory object stream by a pump task.

    The supervisor's pump reads the child's stdout to EOF whether or not
    anyone reads here, so the child never blocks on a full pipe and its exit
    is always observed. Chunks larger than `max_bytes` are handed out in
    pieces.
    """

    __slots__ = ("_pending", "_receive")

    def __init__(self, receive: MemoryObjectReceiveStream[bytes]) -> None:
        self._receive = receive
        self._pending = b""

    async def receive(self, max_bytes: int = 65536) -> bytes:
        if not self._pending:
            self._pending = await self._receive.receive()
        data = self._pending[:max_bytes]
        self._pending = self._pending[max_bytes:]
        return data

    async def aclose(self) -> None:
        self._pending = b""
        self._receive.close()
