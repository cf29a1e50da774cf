"""
Genesis document assembly.

Every node in a BFT network loads the same genesis file at start. If two
nodes disagree on a single byte, they compute different genesis hashes
and never agree on block zero. Assembly is therefore a pure function of
its inputs: no clocks, no randomness, and a fixed key order on output.

Shape
-----
::

    {
      "config": { chainId, <fork markers>, zeroBaseFee, ..., "qbft": {...} },
      "nonce": "0x0",
      "timestamp": "0x0",
      "gasLimit": ...,
      "difficulty": "0x1",
      "mixHash": ...,
      "coinbase": ...,
      "alloc": { <address>: { balance, code?, storage? } },
      "extraData": ""
    }

`extraData` is left empty here and filled once the validator set is
known (see `genesis_kit.genesis.extra_data`).
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, Final

from pydantic import PositiveInt, field_validator, model_validator

from genesis_kit.types import HexBytes, HexScalar, ImmutableModel
from genesis_kit.types.hex import ensure_hex_bytes, to_checksum_address

from .config import AllocationAccount, Allocations, NetworkConfig, parse_allocations
from .consensus import Algorithm, Ibft2Config, QbftConfig, build_consensus_config

ZERO_HASH: Final = "0x" + "00" * 32
"""32 zero bytes. Used for eip150Hash and the extra-data vanity field."""

MIX_HASH: Final = "0x63746963616c2062797a616e74696e65206661756c7420746f6c6572616e6365"
"""BFT magic mix hash ("ctical byzantine fault tolerance")."""

COINBASE_ZERO: Final = "0x" + "00" * 20
"""Zero coinbase; BFT engines pay block rewards elsewhere."""

FAUCET_BALANCE: Final = "0x446c3b15f9926687d2c40534fdb564000000000000"
"""Starting balance granted to the faucet account."""

ZERO_BALANCE: Final = "0x0"
"""Placeholder balance for allocations published separately."""


def _check_extra_data(value: str) -> str:
    return value if value == "" else ensure_hex_bytes(value, "extraData")


class GenesisChainConfig(ImmutableModel):
    """The `config` block: chain id, fork schedule, and consensus parameters."""

    chain_id: PositiveInt
    homestead_block: int = 0
    eip150_block: int = 0
    eip150_hash: HexBytes = ZERO_HASH
    eip155_block: int = 0
    eip158_block: int = 0
    byzantium_block: int = 0
    constantinople_block: int = 0
    petersburg_block: int = 0
    istanbul_block: int = 0
    muir_glacier_block: int = 0
    berlin_block: int = 0
    london_block: int = 0
    shanghai_time: int = 0
    cancun_time: int = 0

    zero_base_fee: bool
    """Fee market exception for networks with a fixed gas price."""

    contract_size_limit: int | None = None
    evm_stack_size: int | None = None

    ibft2: Ibft2Config | None = None
    qbft: QbftConfig | None = None

    @model_validator(mode="after")
    def exactly_one_consensus(self) -> GenesisChainConfig:
        """Reject documents carrying neither or both consensus blocks."""
        if (self.ibft2 is None) == (self.qbft is None):
            raise ValueError("config must contain exactly one of ibft2 or qbft")
        return self

    @property
    def algorithm(self) -> Algorithm:
        """Engine selected by the populated consensus block."""
        return Algorithm.IBFT2 if self.ibft2 is not None else Algorithm.QBFT


class GenesisDocument(ImmutableModel):
    """Complete genesis definition for a Besu BFT network."""

    config: GenesisChainConfig
    nonce: HexScalar = "0x0"
    timestamp: HexScalar = "0x0"
    gas_limit: HexScalar
    difficulty: HexScalar = "0x1"
    mix_hash: HexBytes = MIX_HASH
    coinbase: HexBytes = COINBASE_ZERO
    alloc: Allocations
    extra_data: str = ""

    @field_validator("extra_data")
    @classmethod
    def empty_or_hex(cls, v: str) -> str:
        """Extra data is either unset (empty string) or RLP bytes in hex."""
        return _check_extra_data(v)

    def with_extra_data(self, extra_data: str) -> GenesisDocument:
        """Return a copy carrying the encoded validator set."""
        return self.model_copy(update={"extra_data": _check_extra_data(extra_data)})

    def with_alloc(self, alloc: Mapping[str, AllocationAccount]) -> GenesisDocument:
        """Return a copy with the allocation map replaced."""
        return self.model_copy(update={"alloc": parse_allocations(dict(alloc))})

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready mapping with wire key names and absent fields dropped."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        """Serialize with two-space indentation and field-definition key order."""
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_json(cls, raw: str | bytes) -> GenesisDocument:
        """Parse a document previously produced by `to_json`."""
        return cls.model_validate_json(raw)


def _build_alloc(
    faucet_address: str,
    extra_allocations: Mapping[str, AllocationAccount | Mapping[str, Any]],
) -> dict[str, AllocationAccount]:
    # Last write wins: an extra allocation for the faucet replaces its balance.
    alloc = {to_checksum_address(faucet_address): AllocationAccount(balance=FAUCET_BALANCE)}
    alloc.update(parse_allocations(dict(extra_allocations)))
    return alloc


def assemble(
    algorithm: Algorithm | str,
    network_config: NetworkConfig | Mapping[str, Any],
    extra_allocations: Mapping[str, AllocationAccount | Mapping[str, Any]] | None = None,
) -> GenesisDocument:
    """
    Build the genesis document for a network.

    Args:
        algorithm: Consensus engine; selects the `ibft2` or `qbft` block.
        network_config: Chain parameters, validated if passed as a mapping.
        extra_allocations: Additional pre-funded accounts, merged over the
            faucet allocation.

    Returns:
        A document with empty `extraData`.

    Raises:
        InvalidInputError: If the algorithm is unknown.
        pydantic.ValidationError: If the chain id is not positive or any hex
            scalar is malformed.
    """
    algorithm = Algorithm.parse(algorithm)
    if not isinstance(network_config, NetworkConfig):
        network_config = NetworkConfig.model_validate(network_config)

    consensus = build_consensus_config(algorithm, network_config.seconds_per_block)

    chain_config = GenesisChainConfig(
        chain_id=network_config.chain_id,
        zero_base_fee=network_config.effective_gas_price == 0,
        contract_size_limit=network_config.contract_size_limit,
        evm_stack_size=network_config.evm_stack_size,
        ibft2=consensus if isinstance(consensus, Ibft2Config) else None,
        qbft=consensus if isinstance(consensus, QbftConfig) else None,
    )

    return GenesisDocument(
        config=chain_config,
        gas_limit=network_config.gas_limit,
        alloc=_build_alloc(network_config.faucet_wallet_address, extra_allocations or {}),
    )
