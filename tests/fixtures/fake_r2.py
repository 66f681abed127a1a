"""Stand-in for `radare2 -q -0` used by the pipe transport tests.

Prints a NUL byte when ready, then answers one command per line with the
response followed by a newline and a NUL byte.

Options:
    --no-ready      Exit immediately without announcing readiness.
    --log PATH      Append every received command to PATH.
    --stderr TEXT   Write TEXT to stderr on startup.
"""

import json
import sys


def respond(command: str) -> str:
    if command == "ij":
        return json.dumps({"core": {"file": "stub", "size": 42}})
    if command.startswith("?e "):
        return command[3:]
    if command == "dp-":
        return ""
    return f"unknown command: {command}"


def main(argv: list[str]) -> int:
    log_path = None
    if "--no-ready" in argv:
        return 0
    if "--log" in argv:
        log_path = argv[argv.index("--log") + 1]
    if "--stderr" in argv:
        sys.stderr.write(argv[argv.index("--stderr") + 1])
        sys.stderr.flush()

    out = sys.stdout.buffer
    out.write(b"\x00")
    out.flush()

    for raw in sys.stdin.buffer:
        command = raw.decode().rstrip("\n")
        if log_path is not None:
            with open(log_path, "a", encoding="utf-8") as log:
                log.write(command + "\n")
        if command == "q":
            return 0
        if command == "crash":
            return 7
        out.write(respond(command).encode() + b"\n\x00")
        out.flush()

    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
