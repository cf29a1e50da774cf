"""Reusable type definitions for genesis assembly and artifact exchange."""

from .base import CamelModel, ImmutableModel
from .exceptions import (
    CompileGenesisError,
    GenesisKitError,
    InvalidInputError,
    PaginationProtocolError,
    PermissionProbeError,
    PublishError,
    RecordConflictError,
    StoreConnectionError,
    StoreError,
    StoreResponseError,
    StoreStatusError,
    SyncError,
)
from .hex import (
    ChecksumAddress,
    HexBytes,
    HexScalar,
    addresses_equal,
    hex_to_bytes,
    to_checksum_address,
)
from .rlp import RLPDecodingError, RLPItem, decode_rlp, encode_rlp

__all__ = [
    # Models
    "CamelModel",
    "ImmutableModel",
    # Hex
    "ChecksumAddress",
    "HexBytes",
    "HexScalar",
    "addresses_equal",
    "hex_to_bytes",
    "to_checksum_address",
    # RLP
    "RLPItem",
    "RLPDecodingError",
    "encode_rlp",
    "decode_rlp",
    # Exceptions
    "GenesisKitError",
    "InvalidInputError",
    "StoreError",
    "StoreConnectionError",
    "StoreResponseError",
    "StoreStatusError",
    "PermissionProbeError",
    "RecordConflictError",
    "PublishError",
    "SyncError",
    "PaginationProtocolError",
    "CompileGenesisError",
]
