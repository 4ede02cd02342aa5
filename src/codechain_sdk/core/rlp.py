"""Canonical encoding — Recursive Length Prefix (RLP).

Every hash and every signature payload in the SDK is computed over the RLP
encoding of an "encode object":
- ``bytes`` — raw byte string
- ``int`` — unsigned integer, encoded as its minimal big-endian bytes
- ``str`` — text (network ids), encoded as its UTF-8 bytes
- ``list`` / ``tuple`` — nested list of encode objects

Decoding returns ``bytes`` and ``list`` only and accepts canonical forms only.
"""

from __future__ import annotations

from typing import Union

from codechain_sdk.errors.core_errors import MalformedInputError

EncodeObject = Union[bytes, int, str, list["EncodeObject"], tuple["EncodeObject", ...]]
Decoded = Union[bytes, list["Decoded"]]

# Prefix bases
_SHORT_STRING = 0x80
_LONG_STRING = 0xB7
_SHORT_LIST = 0xC0
_LONG_LIST = 0xF7

# Longest payload that fits in a single-byte header
_SHORT_LIMIT = 55


# ---------------------------------------------------------------------------
# Integer helpers
# ---------------------------------------------------------------------------


def int_to_bytes(n: int) -> bytes:
    """Minimal big-endian encoding of a non-negative integer (0 → ``b""``)."""
    if isinstance(n, bool) or not isinstance(n, int):
        msg = f"expected an integer, got {type(n).__name__}"
        raise MalformedInputError(msg)
    if n < 0:
        msg = f"cannot encode negative integer: {n}"
        raise MalformedInputError(msg)
    return n.to_bytes((n.bit_length() + 7) // 8, "big")


def bytes_to_int(data: bytes) -> int:
    """Decode a minimal big-endian integer (leading zeros are not canonical)."""
    if data[:1] == b"\x00":
        msg = "integer has leading zero bytes"
        raise MalformedInputError(msg)
    return int.from_bytes(data, "big")


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def _encode_length(length: int, short_base: int, long_base: int) -> bytes:
    if length <= _SHORT_LIMIT:
        return bytes([short_base + length])
    length_bytes = int_to_bytes(length)
    return bytes([long_base + len(length_bytes)]) + length_bytes


def encode(obj: EncodeObject) -> bytes:
    """Encode *obj* to its unique RLP byte sequence.

    Raises:
        MalformedInputError: If *obj* contains an unsupported type or a negative integer.
    """
    if isinstance(obj, (list, tuple)):
        payload = b"".join(encode(item) for item in obj)
        return _encode_length(len(payload), _SHORT_LIST, _LONG_LIST) + payload
    if isinstance(obj, str):
        data = obj.encode("utf-8")
    elif isinstance(obj, (bytes, bytearray)):
        data = bytes(obj)
    elif isinstance(obj, int) and not isinstance(obj, bool):
        data = int_to_bytes(obj)
    else:
        msg = f"cannot RLP-encode value of type {type(obj).__name__}"
        raise MalformedInputError(msg)
    if len(data) == 1 and data[0] < _SHORT_STRING:
        return data
    return _encode_length(len(data), _SHORT_STRING, _LONG_STRING) + data


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def _read_length(data: bytes, offset: int, size: int) -> int:
    """Read a *size*-byte big-endian length following a long-form header."""
    raw = data[offset : offset + size]
    if len(raw) != size:
        msg = "unexpected end of data reading length"
        raise MalformedInputError(msg)
    if raw[0] == 0:
        msg = "length has leading zero bytes"
        raise MalformedInputError(msg)
    length = int.from_bytes(raw, "big")
    if length <= _SHORT_LIMIT:
        msg = "long-form length used for a short payload"
        raise MalformedInputError(msg)
    return length


def _decode_item(data: bytes, offset: int) -> tuple[Decoded, int]:
    """Decode one item starting at *offset*; return it and the next offset."""
    if offset >= len(data):
        msg = "unexpected end of data"
        raise MalformedInputError(msg)
    prefix = data[offset]

    if prefix < _SHORT_STRING:
        return data[offset : offset + 1], offset + 1

    if prefix < _SHORT_LIST:
        if prefix <= _LONG_STRING:
            length = prefix - _SHORT_STRING
            start = offset + 1
        else:
            size = prefix - _LONG_STRING
            length = _read_length(data, offset + 1, size)
            start = offset + 1 + size
        end = start + length
        if end > len(data):
            msg = "string payload runs past end of data"
            raise MalformedInputError(msg)
        value = data[start:end]
        if length == 1 and value[0] < _SHORT_STRING:
            msg = "single byte below 0x80 must not carry a string header"
            raise MalformedInputError(msg)
        return value, end

    if prefix <= _LONG_LIST:
        length = prefix - _SHORT_LIST
        start = offset + 1
    else:
        size = prefix - _LONG_LIST
        length = _read_length(data, offset + 1, size)
        start = offset + 1 + size
    end = start + length
    if end > len(data):
        msg = "list payload runs past end of data"
        raise MalformedInputError(msg)
    items: list[Decoded] = []
    cursor = start
    while cursor < end:
        item, cursor = _decode_item(data, cursor)
        items.append(item)
    if cursor != end:
        msg = "list item overruns list payload"
        raise MalformedInputError(msg)
    return items, end


def decode(data: bytes) -> Decoded:
    """Decode a complete RLP byte sequence.

    Raises:
        MalformedInputError: If *data* is not a single canonical RLP item.
    """
    item, end = _decode_item(bytes(data), 0)
    if end != len(data):
        msg = f"trailing bytes after RLP item ({len(data) - end} bytes)"
        raise MalformedInputError(msg)
    return item
