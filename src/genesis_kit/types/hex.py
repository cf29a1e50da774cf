"""
Hex string helpers.

Genesis documents carry every scalar as a 0x-prefixed hex string.
Three shapes appear:

- **Hex scalars** (`0x0`, `0x1`, `0x1fffffffffffff`): any number of digits.
- **Hex bytes** (`0x`, `0x00000000`): an even number of digits.
- **Addresses**: 20 bytes, rendered in EIP-55 mixed-case checksum form.

References:
----------
- https://eips.ethereum.org/EIPS/eip-55
"""

from __future__ import annotations

import re
from typing import Annotated

from Crypto.Hash import keccak
from pydantic import AfterValidator

from .exceptions import InvalidInputError

HEX_PREFIX = "0x"
"""Prefix carried by every hex value in the genesis document."""

ADDRESS_LENGTH = 20
"""Length of an account address in bytes."""

_HEX_PATTERN = re.compile(r"^0x[0-9a-fA-F]*$")


def is_hex(value: object) -> bool:
    """Check for a 0x-prefixed string made only of hex digits."""
    return isinstance(value, str) and _HEX_PATTERN.fullmatch(value) is not None


def ensure_hex_scalar(value: str, field: str = "hex value") -> str:
    """
    Validate a hex scalar such as `0x0` or `0x446c3b15`.

    Raises:
        InvalidInputError: If value is not 0x-prefixed hex or has no digits.
    """
    if not is_hex(value) or len(value) == len(HEX_PREFIX):
        raise InvalidInputError(field, f"{value!r} is not a 0x-prefixed hex scalar")
    return value


def ensure_hex_bytes(value: str, field: str = "hex bytes") -> str:
    """
    Validate a hex byte string. `0x` is the empty byte string.

    Raises:
        InvalidInputError: If value is not 0x-prefixed hex of even length.
    """
    if not is_hex(value):
        raise InvalidInputError(field, f"{value!r} is not a 0x-prefixed hex string")
    if len(value) % 2 != 0:
        raise InvalidInputError(field, f"{value!r} has an odd number of hex digits")
    return value


def hex_to_bytes(value: str, field: str = "hex bytes") -> bytes:
    """Decode a validated hex byte string."""
    return bytes.fromhex(ensure_hex_bytes(value, field)[len(HEX_PREFIX) :])


def to_checksum_address(value: str, field: str = "address") -> str:
    """
    Render an address in EIP-55 checksum case.

    Each hex letter is upper-cased when the matching nibble of
    keccak256(lowercase hex address) is 8 or more.

    Raises:
        InvalidInputError: If value is not a 20-byte hex address, or is
            mixed-case with a wrong checksum.
    """
    if not is_hex(value) or len(value) != len(HEX_PREFIX) + 2 * ADDRESS_LENGTH:
        raise InvalidInputError(field, f"{value!r} is not a 20-byte hex address")

    digits = value[len(HEX_PREFIX) :]
    lowered = digits.lower()

    k = keccak.new(digest_bits=256)
    k.update(lowered.encode("ascii"))
    digest = k.hexdigest()

    checksummed = "".join(
        char.upper() if char.isalpha() and int(digest[i], 16) >= 8 else char
        for i, char in enumerate(lowered)
    )

    # All-lower and all-upper inputs carry no checksum. Mixed case must match.
    if digits not in (lowered, digits.upper()) and digits != checksummed:
        raise InvalidInputError(field, f"{value!r} has an invalid EIP-55 checksum")

    return HEX_PREFIX + checksummed


def addresses_equal(left: str, right: str) -> bool:
    """Compare two addresses ignoring checksum case."""
    return left.lower() == right.lower()


HexScalar = Annotated[str, AfterValidator(ensure_hex_scalar)]
"""Pydantic type for hex scalars."""

HexBytes = Annotated[str, AfterValidator(ensure_hex_bytes)]
"""Pydantic type for hex byte strings."""

ChecksumAddress = Annotated[str, AfterValidator(to_checksum_address)]
"""Pydantic type that normalizes an address to checksum case."""
