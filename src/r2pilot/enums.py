"""Enumeration types for r2pilot."""

from enum import StrEnum


class LaunchMode(StrEnum):
    """How radare2 is launched and talked to.

    - CLI: commands over stdin, NUL-terminated responses over stdout
    - HTTP: radare2 runs its built-in web server, commands go over HTTP
    """

    CLI = "cli"
    HTTP = "http"
