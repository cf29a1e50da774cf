"""
Validator extra-data encoding.

BFT engines read the initial validator set from the genesis `extraData`
field. The field is the RLP encoding of a five element list::

    IBFT 2.0: [vanity, validators, vote="",  round=0x00000000, seals=[]]
    QBFT:     [vanity, validators, votes=[], round="",         seals=[]]

Vanity is 32 zero bytes. Votes and seals are empty at genesis.

Validator order is significant. Nodes compare extraData byte for byte, so
callers must pass addresses in an order every operator agrees on, such as
key generation order. The encoder never sorts.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Final

from genesis_kit.types import RLPItem, encode_rlp, hex_to_bytes

from .consensus import Algorithm

VANITY: Final[bytes] = b"\x00" * 32
"""Leading vanity field."""

ROUND_ZERO: Final[bytes] = b"\x00" * 4
"""IBFT 2.0 round number at genesis."""


def compute_extra_data(algorithm: Algorithm | str, validator_addresses: Sequence[str]) -> str:
    """
    Encode the validator set for the genesis `extraData` field.

    Every address is decoded before anything is encoded, so a malformed
    entry fails the whole call and no partial output is produced.

    Args:
        algorithm: Consensus engine; selects the trailing element layout.
        validator_addresses: 0x-prefixed, even-length hex addresses in
            agreed order. Duplicates are encoded as given.

    Returns:
        0x-prefixed hex of the RLP list.

    Raises:
        InvalidInputError: If the algorithm is unknown or an address is not
            well-formed hex.
    """
    algorithm = Algorithm.parse(algorithm)
    validators: list[RLPItem] = [
        hex_to_bytes(address, f"validator address #{i}")
        for i, address in enumerate(validator_addresses)
    ]

    match algorithm:
        case Algorithm.IBFT2:
            fields: list[RLPItem] = [VANITY, validators, b"", ROUND_ZERO, []]
        case Algorithm.QBFT:
            fields = [VANITY, validators, [], b"", []]

    return "0x" + encode_rlp(fields).hex()
