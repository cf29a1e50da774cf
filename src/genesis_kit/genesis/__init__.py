"""Genesis document assembly for Besu BFT networks."""

from .config import AllocationAccount, NetworkConfig, load_allocations, parse_allocations
from .consensus import (
    Algorithm,
    BftConfig,
    ConsensusConfig,
    Ibft2Config,
    QbftConfig,
    build_consensus_config,
    derive_request_timeout,
)
from .document import (
    FAUCET_BALANCE,
    ZERO_BALANCE,
    GenesisChainConfig,
    GenesisDocument,
    assemble,
)
from .extra_data import compute_extra_data

__all__ = [
    # Inputs
    "NetworkConfig",
    "AllocationAccount",
    "load_allocations",
    "parse_allocations",
    # Consensus
    "Algorithm",
    "BftConfig",
    "ConsensusConfig",
    "Ibft2Config",
    "QbftConfig",
    "build_consensus_config",
    "derive_request_timeout",
    # Document
    "GenesisChainConfig",
    "GenesisDocument",
    "FAUCET_BALANCE",
    "ZERO_BALANCE",
    "assemble",
    "compute_extra_data",
]
