"""JSON decoding of command output."""

from typing import Any

from pydantic import TypeAdapter, ValidationError

from r2pilot.exceptions import ResponseDecodeError


def decode_json[T](
    raw: bytes | str,
    type_: type[T] | Any = Any,  # pyright: ignore[reportExplicitAny]
    *,
    command: str | None = None,
) -> T:
    """Decode command output as JSON and validate it against a type.

    Args:
        raw: The command output.
        type_: Any type pydantic can validate. Defaults to Any, which yields
            plain dicts, lists and scalars.
        command: The command that produced the output, for errors.

    Returns:
        The decoded value.

    Raises:
        ResponseDecodeError: If the output is not valid JSON for the type.
    """
    adapter: TypeAdapter[T] = TypeAdapter(type_)
    try:
        return adapter.validate_json(raw)
    except ValidationError as e:
        count = e.error_count()
        msg = f"failed to decode output of '{command}' as JSON - {count} error(s)"
        raise ResponseDecodeError(msg, command=command, cause=e) from e
