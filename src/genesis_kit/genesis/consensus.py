"""
BFT consensus parameters.

Besu supports two Byzantine fault tolerant engines for permissioned
networks, IBFT 2.0 and QBFT. Both read the same four timing parameters
from the genesis `config` block; only the key they live under differs
(`ibft2` or `qbft`).

Only the block period is chosen by the operator. The round timeout is
derived from it so that slow and fast chains both leave room for a
round change.
"""

from __future__ import annotations

import math
from enum import StrEnum
from typing import ClassVar, Final, Self

from pydantic import Field

from genesis_kit.types import ImmutableModel, InvalidInputError

EPOCH_LENGTH: Final[int] = 30_000
"""Blocks between validator vote resets."""

MINIMUM_BLOCK_PERIOD_SECONDS: Final[int] = 60
"""Floor for the period term of the round timeout; also the empty-block period."""

MINIMUM_ROUND_BUFFER_SECONDS: Final[int] = 5
"""Floor for the buffer term of the round timeout."""

ROUND_TIMEOUT_MULTIPLIER: Final[float] = 1.33
"""Round-change multiplier applied to the block period."""


class Algorithm(StrEnum):
    """Consensus engine selected for the network."""

    IBFT2 = "IBFTv2"
    QBFT = "QBFT"

    @classmethod
    def parse(cls, value: str | Algorithm) -> Algorithm:
        """
        Resolve an algorithm from its wire name.

        Raises:
            InvalidInputError: If the name is not a supported engine.
        """
        try:
            return cls(value)
        except ValueError:
            choices = ", ".join(member.value for member in cls)
            raise InvalidInputError("algorithm", f"{value!r} is not one of {choices}") from None


def derive_request_timeout(block_period_seconds: int) -> int:
    """
    Compute the BFT round timeout for a block period.

    A round must outlast at least one minimum block period plus a buffer
    scaled by the round-change multiplier. The buffer never drops under
    five seconds so very fast chains still tolerate one retransmission::

        floor(max(60, period) + max(5, period * 1.33))
    """
    return math.floor(
        max(MINIMUM_BLOCK_PERIOD_SECONDS, block_period_seconds)
        + max(MINIMUM_ROUND_BUFFER_SECONDS, block_period_seconds * ROUND_TIMEOUT_MULTIPLIER)
    )


class BftConfig(ImmutableModel):
    """
    Timing parameters shared by both BFT engines.

    Besu expects these keys fully lower-cased, so they carry explicit aliases
    instead of the camelCase generator.
    """

    algorithm: ClassVar[Algorithm]

    block_period_seconds: int = Field(alias="blockperiodseconds", gt=0)
    """Target seconds between blocks; echoes the operator input."""

    epoch_length: int = Field(default=EPOCH_LENGTH, alias="epochlength")
    """Blocks between validator vote resets."""

    empty_block_period_seconds: int = Field(
        default=MINIMUM_BLOCK_PERIOD_SECONDS, alias="xemptyblockperiodseconds"
    )
    """Seconds to wait before producing a block with no transactions."""

    request_timeout_seconds: int = Field(alias="requesttimeoutseconds")
    """Round timeout derived from the block period."""

    @classmethod
    def for_block_period(cls, block_period_seconds: int) -> Self:
        """Build the config with every derived parameter filled in."""
        return cls(
            block_period_seconds=block_period_seconds,
            request_timeout_seconds=derive_request_timeout(block_period_seconds),
        )


class Ibft2Config(BftConfig):
    """Parameters stored under `config.ibft2`."""

    algorithm: ClassVar[Algorithm] = Algorithm.IBFT2


class QbftConfig(BftConfig):
    """Parameters stored under `config.qbft`."""

    algorithm: ClassVar[Algorithm] = Algorithm.QBFT


ConsensusConfig = Ibft2Config | QbftConfig
"""Exactly one variant is present on a genesis document."""


def build_consensus_config(algorithm: Algorithm, block_period_seconds: int) -> ConsensusConfig:
    """Select the consensus variant for an algorithm."""
    match algorithm:
        case Algorithm.IBFT2:
            return Ibft2Config.for_block_period(block_period_seconds)
        case Algorithm.QBFT:
            return QbftConfig.for_block_period(block_period_seconds)
