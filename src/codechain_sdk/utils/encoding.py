"""Display-form helpers — 0x hex for fixed-width values, decimal strings for amounts."""

from __future__ import annotations

from codechain_sdk.errors.core_errors import MalformedInputError


def to_hex(data: bytes) -> str:
    """Render bytes as a ``0x``-prefixed lowercase hex string."""
    return "0x" + data.hex()


def parse_hex(value: str | bytes, size: int | None = None, *, name: str = "value") -> bytes:
    """Parse a (optionally ``0x``-prefixed) hex string, checking its byte width.

    Raises:
        MalformedInputError: If *value* is not hex or not *size* bytes long.
    """
    if isinstance(value, (bytes, bytearray)):
        raw = bytes(value)
    elif isinstance(value, str):
        body = value[2:] if value.startswith(("0x", "0X")) else value
        try:
            raw = bytes.fromhex(body)
        except ValueError as exc:
            msg = f"{name} is not valid hex: {value!r}"
            raise MalformedInputError(msg) from exc
    else:
        msg = f"{name} must be a hex string, got {type(value).__name__}"
        raise MalformedInputError(msg)
    if size is not None and len(raw) != size:
        msg = f"{name} must be {size} bytes, got {len(raw)}"
        raise MalformedInputError(msg)
    return raw


def parse_uint(value: int | str, *, name: str = "value") -> int:
    """Parse an unsigned integer given as int, decimal string or 0x hex string."""
    if isinstance(value, bool):
        msg = f"{name} must be an integer, got bool"
        raise MalformedInputError(msg)
    if isinstance(value, int):
        result = value
    elif isinstance(value, str):
        try:
            result = int(value, 16) if value.startswith(("0x", "0X")) else int(value, 10)
        except ValueError as exc:
            msg = f"{name} is not an integer: {value!r}"
            raise MalformedInputError(msg) from exc
    else:
        msg = f"{name} must be an integer, got {type(value).__name__}"
        raise MalformedInputError(msg)
    if result < 0:
        msg = f"{name} must be non-negative, got {result}"
        raise MalformedInputError(msg)
    return result


def bytes_to_list(data: bytes) -> list[int]:
    """Byte string → list of ints (the JSON form of scripts and parameters)."""
    return list(data)


def list_to_bytes(values: list[int] | str | bytes, *, name: str = "value") -> bytes:
    """Inverse of :func:`bytes_to_list`; hex strings are accepted as well."""
    if isinstance(values, (str, bytes, bytearray)):
        return parse_hex(values, name=name)
    try:
        return bytes(values)
    except (TypeError, ValueError) as exc:
        msg = f"{name} must be a list of byte values"
        raise MalformedInputError(msg) from exc
