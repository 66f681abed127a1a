"""HTTP transports for radare2's built-in web server.

radare2 started with `-c=h<port>` serves `GET /cmd/<command>` and answers
with the command's output as the response body. HttpServerApi launches and
supervises such a server; HttpCommandClient talks to one that is already
running.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, Self, final, override

import anyio
import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from r2pilot.enums import LaunchMode
from r2pilot.exceptions import HttpStatusError, TransportError

from ._base import SupervisedApi
from ._decode import decode_json

if TYPE_CHECKING:
    from types import TracebackType

    from structlog.typing import FilteringBoundLogger

    from r2pilot.config import Radare2Config
    from r2pilot.supervisor import ExecutableResolver, InterruptStrategy

CMD_SUB_PATH = "/cmd"
DEFAULT_SERVER_TIMEOUT = 5.0
DEFAULT_CLIENT_TIMEOUT = 10.0
READY_PROBE_COMMAND = "?V"


def build_command_url(base_url: str, command: str) -> str:
    """Join a server base URL and a command into a request URL."""
    return f"{base_url.rstrip('/')}{CMD_SUB_PATH}/{command}"


async def execute_http_call(
    client: httpx.AsyncClient,
    base_url: str,
    command: str,
    *,
    trim: bool = True,
) -> bytes:
    """Run one command against a radare2 HTTP server.

    Args:
        client: The httpx client to use.
        base_url: Server address, e.g. "http://127.0.0.1:9090".
        command: The radare2 command.
        trim: Strip surrounding whitespace from the output.

    Returns:
        The response body.

    Raises:
        HttpStatusError: If the server answers with a non-200 status.
        TransportError: If the request fails.
    """
    try:
        response = await client.get(build_command_url(base_url, command))
    except httpx.HTTPError as e:
        msg = f"http request for '{command}' failed - {e}"
        raise TransportError(msg, command=command, cause=e) from e

    raw = response.content
    if response.status_code != httpx.codes.OK:
        body = response.text
        msg = f"request failed with code {response.status_code}"
        if body:
            msg = f"{msg} - details - {body}"
        raise HttpStatusError(
            msg, status_code=response.status_code, body=body, command=command
        )

    return raw.strip() if trim else raw


@final
class HttpServerApi(SupervisedApi):
    """Launches radare2 as an HTTP server and sends it commands.

    radare2's web server has no authentication. Anything that can reach the
    port can run commands, including shell commands when the sandbox is
    disabled.

    Example:
        >>> async with HttpServerApi(Radare2Config(http_port=9090)) as r2:
        ...     await r2.start()
        ...     await r2.wait_ready()
        ...     print(await r2.execute("?V"))
    """

    mode: ClassVar[LaunchMode] = LaunchMode.HTTP

    def __init__(
        self,
        config: Radare2Config,
        *,
        base_url: str | None = None,
        client: httpx.AsyncClient | None = None,
        interrupt_strategy: InterruptStrategy | None = None,
        resolver: ExecutableResolver | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            config: Launch configuration for radare2.
            base_url: Server address. Defaults to 127.0.0.1 on config.http_port.
            client: httpx client to send requests with. The transport closes
                a client it created itself, never one passed in.
            interrupt_strategy: Delivers graceful interrupts.
            resolver: Resolves the executable path.
            logger: Logger for transport events.
        """
        super().__init__(
            config,
            interrupt_strategy=interrupt_strategy,
            resolver=resolver,
            logger=logger,
        )
        self.base_url = base_url or f"http://127.0.0.1:{config.http_port}"
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=DEFAULT_SERVER_TIMEOUT)

    @override
    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool | None:
        try:
            return await super().__aexit__(exc_type, exc_val, exc_tb)
        finally:
            if self._owns_client:
                with anyio.CancelScope(shield=True):
                    await self._client.aclose()

    @override
    async def execute_bytes(self, command: str) -> bytes:
        """Run a command and return its raw output.

        Raises:
            NotRunningError: If radare2 is not running.
            HttpStatusError: If the server answers with a non-200 status.
            TransportError: If the request fails.
        """
        await self._ensure_running()
        return await execute_http_call(
            self._client,
            self.base_url,
            command,
            trim=not self.config.do_not_trim_output,
        )

    async def wait_ready(self, attempts: int = 10) -> None:
        """Wait until the server accepts connections.

        Only connection failures and timeouts are retried, with exponential
        backoff between attempts.

        Args:
            attempts: Maximum number of probes.

        Raises:
            NotRunningError: If radare2 is not running.
            TransportError: If the server is still unreachable after the
                last attempt.
        """
        await self._ensure_running()
        url = build_command_url(self.base_url, READY_PROBE_COMMAND)
        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception_type(
                    (httpx.ConnectError, httpx.TimeoutException)
                ),
                stop=stop_after_attempt(attempts),
                wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
                sleep=anyio.sleep,
                reraise=True,
            ):
                with attempt:
                    _ = await self._client.get(url)
        except httpx.HTTPError as e:
            msg = f"radare2 http server at {self.base_url} is not reachable - {e}"
            raise TransportError(msg, command=READY_PROBE_COMMAND, cause=e) from e

        self._logger.debug("radare2_http_ready", base_url=self.base_url)


@final
class HttpCommandClient:
    """Client for a radare2 HTTP server that is already running.

    Example:
        >>> async with HttpCommandClient("http://127.0.0.1:9090") as r2:
        ...     print(await r2.execute("?V"))
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_CLIENT_TIMEOUT,
        trim: bool = True,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url
        self.trim = trim
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def execute(self, command: str) -> str:
        """Run a command and return its output as text.

        Raises:
            HttpStatusError: If the server answers with a non-200 status.
            TransportError: If the request fails.
        """
        raw = await self.execute_bytes(command)
        return raw.decode("utf-8", errors="replace")

    async def execute_bytes(self, command: str) -> bytes:
        return await execute_http_call(
            self._client, self.base_url, command, trim=self.trim
        )

    async def execute_json(self, command: str, type_: Any = Any) -> Any:  # pyright: ignore[reportExplicitAny]
        raw = await self.execute_bytes(command)
        return decode_json(raw, type_, command=command)
