"""Default object names and data keys for published artifacts."""

from __future__ import annotations

from typing import Final

from genesis_kit.types import ImmutableModel

GENESIS_DATA_KEY: Final = "genesis.json"
STATIC_NODES_DATA_KEY: Final = "static-nodes.json"
ALLOCATION_DATA_KEY: Final = "alloc.json"
EXTERNAL_INDEX_DATA_KEY: Final = "SUBGRAPH_HASH"

EXTERNAL_INDEX_FILE_PREFIX: Final = "kit:"
"""Prefix on the subgraph hash in the filesystem target only."""

ALLOCATION_NAME_PREFIX: Final = "alloc-"


class ArtifactNames(ImmutableModel):
    """Object names and prefixes used when building records."""

    validator_prefix: str = "besu-node-validator"
    faucet_prefix: str = "besu-faucet"
    genesis_name: str = "besu-genesis"
    static_nodes_name: str = "besu-static-nodes"
    external_index_name: str = "besu-subgraph"


def allocation_object_name(address: str) -> str:
    """
    Name of the record holding one account's allocation.

    The address is lower-cased and stripped of `0x` so that every casing of
    the same account maps to one name.
    """
    return ALLOCATION_NAME_PREFIX + address.lower().removeprefix("0x")
