"""Shared fixtures for genesis-kit tests."""

from __future__ import annotations

import pytest

from genesis_kit.artifacts import BootstrapResult
from genesis_kit.genesis import Algorithm, GenesisDocument, NetworkConfig, assemble, compute_extra_data
from genesis_kit.nodes import IndexedNode, NodeKey, create_static_node_entries
from tests.genesis_kit.helpers import (
    EXTRA_ADDRESS,
    FAUCET_ADDRESS,
    VALIDATOR_ADDRESSES,
    FakeStore,
    make_node_key,
    make_validator,
)


@pytest.fixture
def network_config() -> NetworkConfig:
    """Small QBFT-ready network with a zero gas price."""
    return NetworkConfig(
        chain_id=1337,
        faucet_wallet_address=FAUCET_ADDRESS,
        gas_limit="0x1fffffffffffff",
        gas_price=0,
        seconds_per_block=2,
    )


@pytest.fixture
def faucet() -> NodeKey:
    return make_node_key(FAUCET_ADDRESS, 0x01)


@pytest.fixture
def validators() -> list[IndexedNode]:
    return [make_validator(i, address) for i, address in enumerate(VALIDATOR_ADDRESSES, start=1)]


@pytest.fixture
def genesis(network_config: NetworkConfig, validators: list[IndexedNode]) -> GenesisDocument:
    """QBFT genesis with one extra allocation and the validator set encoded."""
    document = assemble(
        Algorithm.QBFT,
        network_config,
        {EXTRA_ADDRESS: {"balance": "0x1234", "code": "0x6000", "storage": {"0x1": "0x2"}}},
    )
    addresses = [node.address for node in validators]
    return document.with_extra_data(compute_extra_data(Algorithm.QBFT, addresses))


@pytest.fixture
def bootstrap_result(
    faucet: NodeKey, validators: list[IndexedNode], genesis: GenesisDocument
) -> BootstrapResult:
    return BootstrapResult(
        faucet=faucet,
        validators=validators,
        genesis=genesis,
        static_nodes=create_static_node_entries(validators, namespace="atk"),
    )


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()
