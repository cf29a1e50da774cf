"""
Recursive Length Prefix (RLP) Encoding
======================================

RLP is the execution layer's serialization for nested binary data. BFT
genesis blocks use it for the `extraData` field: the validator set and
the round metadata are packed into one RLP list.

Encoding Rules
--------------

An item is either a byte string or a list of items. The first byte tells
the decoder which one it is and how long the payload runs:

+-------------+-----------------------------------------------------------+
| First byte  | Payload                                                   |
+=============+===========================================================+
| [0x00-0x7f] | The byte itself (single byte below 0x80)                  |
+-------------+-----------------------------------------------------------+
| [0x80-0xb7] | Byte string of 0-55 bytes, length = first - 0x80          |
+-------------+-----------------------------------------------------------+
| [0xb8-0xbf] | Longer byte string, first - 0xb7 = size of length field   |
+-------------+-----------------------------------------------------------+
| [0xc0-0xf7] | List with 0-55 payload bytes, length = first - 0xc0       |
+-------------+-----------------------------------------------------------+
| [0xf8-0xff] | Longer list, first - 0xf7 = size of length field          |
+-------------+-----------------------------------------------------------+

References:
----------
- Ethereum Yellow Paper, Appendix B
- https://ethereum.org/en/developers/docs/data-structures-and-encoding/rlp/
"""

from __future__ import annotations

from typing import TypeAlias

RLPItem: TypeAlias = bytes | list["RLPItem"]
"""A byte string or an arbitrarily nested list of byte strings."""

SINGLE_BYTE_MAX = 0x7F
"""Largest byte value that encodes as itself."""

STRING_OFFSET = 0x80
"""Offset added to the length of a short byte string."""

LIST_OFFSET = 0xC0
"""Offset added to the payload length of a short list."""

SHORT_PAYLOAD_MAX = 55
"""Largest payload that fits the short (single prefix byte) form."""

_LONG_FORM_DELTA = SHORT_PAYLOAD_MAX
"""Distance from the short offset to the long-form base (0xb7, 0xf7)."""


class RLPDecodingError(Exception):
    """Error during RLP decoding."""


def encode_rlp(item: RLPItem) -> bytes:
    """
    Encode an item using RLP.

    Raises:
        TypeError: If item (or any nested element) is neither bytes nor list.
    """
    if isinstance(item, bytes):
        if len(item) == 1 and item[0] <= SINGLE_BYTE_MAX:
            return item
        return _prefixed(STRING_OFFSET, item)

    if isinstance(item, list):
        return _prefixed(LIST_OFFSET, b"".join(encode_rlp(child) for child in item))

    raise TypeError(f"Cannot RLP encode type: {type(item).__name__}")


def _prefixed(offset: int, payload: bytes) -> bytes:
    """Prepend the short or long length header for a string or list payload."""
    length = len(payload)
    if length <= SHORT_PAYLOAD_MAX:
        return bytes([offset + length]) + payload

    length_bytes = length.to_bytes((length.bit_length() + 7) // 8, "big")
    return bytes([offset + _LONG_FORM_DELTA + len(length_bytes)]) + length_bytes + payload


def decode_rlp(data: bytes) -> RLPItem:
    """
    Decode a single RLP item that spans all of data.

    Raises:
        RLPDecodingError: If data is empty, malformed, non-canonical, or
            followed by trailing bytes.
    """
    if not data:
        raise RLPDecodingError("Empty RLP data")

    item, end = _decode_at(data, 0)
    if end != len(data):
        raise RLPDecodingError(f"Trailing data: decoded {end} of {len(data)} bytes")
    return item


def _decode_at(data: bytes, offset: int) -> tuple[RLPItem, int]:
    """Decode the item starting at offset. Returns (item, end offset)."""
    if offset >= len(data):
        raise RLPDecodingError("Unexpected end of data")

    first = data[offset]
    if first <= SINGLE_BYTE_MAX:
        return data[offset : offset + 1], offset + 1

    is_list = first >= LIST_OFFSET
    base = LIST_OFFSET if is_list else STRING_OFFSET
    start, end = _payload_bounds(data, offset, first - base)

    if not is_list:
        return data[start:end], end

    items: list[RLPItem] = []
    cursor = start
    while cursor < end:
        child, cursor = _decode_at(data, cursor)
        items.append(child)
    if cursor != end:
        raise RLPDecodingError("List payload length mismatch")
    return items, end


def _payload_bounds(data: bytes, offset: int, header: int) -> tuple[int, int]:
    """Resolve the payload span for a header value relative to its offset base."""
    if header <= SHORT_PAYLOAD_MAX:
        start = offset + 1
        end = start + header
    else:
        size = header - SHORT_PAYLOAD_MAX
        length_start = offset + 1
        _check_bounds(data, length_start + size)
        if data[length_start] == 0:
            raise RLPDecodingError("Non-canonical: leading zeros in length encoding")

        length = int.from_bytes(data[length_start : length_start + size], "big")
        if length <= SHORT_PAYLOAD_MAX:
            raise RLPDecodingError("Non-canonical: long form used for short payload")

        start = length_start + size
        end = start + length

    _check_bounds(data, end)
    return start, end


def _check_bounds(data: bytes, end: int) -> None:
    """Verify end offset is within data bounds."""
    if end > len(data):
        raise RLPDecodingError(f"Data too short: need {end}, have {len(data)}")
