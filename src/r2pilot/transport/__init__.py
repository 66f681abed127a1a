"""Transports that send commands to radare2.

Key Components:
    - Radare2Api: Protocol shared by the supervised transports
    - PipeApi: Commands over stdin/stdout (radare2 -q -0)
    - HttpServerApi: Launches radare2's HTTP server and sends it requests
    - HttpCommandClient: Client for an HTTP server that is already running
    - decode_json: Validates JSON command output with pydantic
"""

from ._base import DETACH_COMMAND, SupervisedApi
from ._decode import decode_json
from ._http import (
    CMD_SUB_PATH,
    DEFAULT_CLIENT_TIMEOUT,
    DEFAULT_SERVER_TIMEOUT,
    HttpCommandClient,
    HttpServerApi,
    build_command_url,
    execute_http_call,
)
from ._pipe import PipeApi, trim_output
from ._protocol import Radare2Api

__all__ = [
    "CMD_SUB_PATH",
    "DEFAULT_CLIENT_TIMEOUT",
    "DEFAULT_SERVER_TIMEOUT",
    "DETACH_COMMAND",
    "HttpCommandClient",
    "HttpServerApi",
    "PipeApi",
    "Radare2Api",
    "SupervisedApi",
    "build_command_url",
    "decode_json",
    "execute_http_call",
    "trim_output",
]
