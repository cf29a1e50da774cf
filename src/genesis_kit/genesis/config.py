"""
Network configuration and allocation inputs.

Network settings are usually collected interactively by the caller and
arrive here already typed. They can also be loaded from YAML using the
same camelCase keys the genesis document uses::

    chainId: 47261
    faucetWalletAddress: "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
    gasLimit: "0x1fffffffffffff"
    gasPrice: 0
    secondsPerBlock: 2
    evmStackSize: 2048
    contractSizeLimit: 2147483647
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import (
    Field,
    NonNegativeInt,
    PositiveInt,
    TypeAdapter,
    ValidationInfo,
    field_validator,
)

from genesis_kit.types import ChecksumAddress, HexBytes, HexScalar, ImmutableModel, InvalidInputError


class AllocationAccount(ImmutableModel):
    """Pre-funded account in the genesis `alloc` map."""

    balance: HexScalar
    """Starting balance in wei."""

    code: HexBytes | None = None
    """Contract bytecode deployed at genesis."""

    storage: dict[HexScalar, HexScalar] | None = None
    """Contract storage slots. An empty map is normalized to absent."""

    @field_validator("storage", mode="before")
    @classmethod
    def drop_empty_storage(cls, v: Any) -> Any:
        """Treat `{}` the same as a missing storage map."""
        if isinstance(v, dict) and not v:
            return None
        return v


Allocations = dict[ChecksumAddress, AllocationAccount]
"""Allocation map keyed by checksum address."""

_ALLOCATIONS_ADAPTER: TypeAdapter[dict[str, AllocationAccount]] = TypeAdapter(Allocations)


class NetworkConfig(ImmutableModel):
    """
    Operator-chosen chain parameters.

    Everything here is echoed into the genesis document verbatim or used
    to derive a value that is. Two nodes fed the same NetworkConfig build
    the same genesis.
    """

    chain_id: PositiveInt
    """EIP-155 chain identifier."""

    faucet_wallet_address: ChecksumAddress
    """Account that receives the faucet allocation."""

    gas_limit: HexScalar
    """Block gas limit."""

    gas_price: NonNegativeInt | None = None
    """Fixed gas price. Zero or absent enables the zero base fee exception."""

    seconds_per_block: PositiveInt
    """Target block period."""

    evm_stack_size: PositiveInt | None = Field(default=None)
    """Optional EVM stack size override."""

    contract_size_limit: PositiveInt | None = Field(default=None)
    """Optional contract code size limit override."""

    @field_validator("faucet_wallet_address", "gas_limit", mode="before")
    @classmethod
    def hex_from_yaml_int(cls, v: Any, info: ValidationInfo) -> Any:
        """YAML parsers read unquoted 0x-prefixed values as integers."""
        if isinstance(v, int) and not isinstance(v, bool):
            return f"0x{v:040x}" if info.field_name == "faucet_wallet_address" else hex(v)
        return v

    @property
    def effective_gas_price(self) -> int:
        """Gas price with absent treated as zero."""
        return self.gas_price or 0

    @classmethod
    def from_yaml(cls, content: str) -> NetworkConfig:
        """Load configuration from a YAML string."""
        return cls.model_validate(yaml.safe_load(content))

    @classmethod
    def from_yaml_file(cls, path: Path | str) -> NetworkConfig:
        """
        Load configuration from a YAML file.

        Raises:
            FileNotFoundError: If the file does not exist.
            yaml.YAMLError: If the file is not valid YAML.
            pydantic.ValidationError: If the data fails validation.
        """
        with Path(path).open(encoding="utf-8") as f:
            return cls.model_validate(yaml.safe_load(f))


def parse_allocations(data: Any) -> dict[str, AllocationAccount]:
    """
    Validate a decoded allocation mapping.

    Keys are normalized to checksum case. Two keys differing only in case
    collapse into one entry, the later one winning.
    """
    return _ALLOCATIONS_ADAPTER.validate_python(data)


def load_allocations(path: Path | str) -> dict[str, AllocationAccount]:
    """
    Load extra genesis allocations from a JSON file.

    Raises:
        InvalidInputError: If the path is not an existing .json file or does
            not contain valid JSON.
        pydantic.ValidationError: If an address or account entry is malformed.
    """
    path = Path(path)
    if path.suffix != ".json":
        raise InvalidInputError("allocations file", "must be a .json file")
    if not path.is_file():
        raise InvalidInputError("allocations file", f"not found at {path}")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise InvalidInputError("allocations file", f"is not valid JSON: {e}") from e

    return parse_allocations(data)
