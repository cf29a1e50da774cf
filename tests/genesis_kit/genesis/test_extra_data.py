"""Tests for validator extra-data encoding."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from genesis_kit.genesis import Algorithm, compute_extra_data
from genesis_kit.types import InvalidInputError, decode_rlp, hex_to_bytes
from tests.genesis_kit.helpers import VALIDATOR_ADDRESSES

ONE = "0x" + "00" * 19 + "01"
VANITY_HEX = "a0" + "00" * 32
ONE_ENCODED = "d594" + "00" * 19 + "01"

addresses = st.lists(
    st.binary(min_size=20, max_size=20).map(lambda raw: "0x" + raw.hex()),
    max_size=8,
)


class TestKnownEncodings:
    """Byte-exact layouts for a single validator."""

    def test_qbft(self) -> None:
        expected = "0xf83a" + VANITY_HEX + ONE_ENCODED + "c0" + "80" + "c0"
        assert compute_extra_data(Algorithm.QBFT, [ONE]) == expected

    def test_ibft2(self) -> None:
        expected = "0xf83e" + VANITY_HEX + ONE_ENCODED + "80" + "8400000000" + "c0"
        assert compute_extra_data(Algorithm.IBFT2, [ONE]) == expected

    def test_accepts_wire_name(self) -> None:
        assert compute_extra_data("QBFT", [ONE]) == compute_extra_data(Algorithm.QBFT, [ONE])

    def test_empty_validator_set(self) -> None:
        decoded = decode_rlp(hex_to_bytes(compute_extra_data(Algorithm.QBFT, [])))
        assert decoded == [b"\x00" * 32, [], [], b"", []]


class TestStructure:
    """Decoded layout per algorithm."""

    def test_qbft_fields(self) -> None:
        decoded = decode_rlp(hex_to_bytes(compute_extra_data(Algorithm.QBFT, VALIDATOR_ADDRESSES)))
        vanity, validators, votes, round_, seals = decoded
        assert vanity == b"\x00" * 32
        assert validators == [hex_to_bytes(a) for a in VALIDATOR_ADDRESSES]
        assert (votes, round_, seals) == ([], b"", [])

    def test_ibft2_fields(self) -> None:
        decoded = decode_rlp(hex_to_bytes(compute_extra_data(Algorithm.IBFT2, VALIDATOR_ADDRESSES)))
        assert decoded[2:] == [b"", b"\x00\x00\x00\x00", []]

    def test_order_is_preserved(self) -> None:
        forward = compute_extra_data(Algorithm.QBFT, VALIDATOR_ADDRESSES)
        backward = compute_extra_data(Algorithm.QBFT, VALIDATOR_ADDRESSES[::-1])
        assert forward != backward

    def test_duplicates_are_encoded_as_given(self) -> None:
        decoded = decode_rlp(hex_to_bytes(compute_extra_data(Algorithm.QBFT, [ONE, ONE])))
        assert len(decoded[1]) == 2


class TestValidation:
    """Malformed addresses fail before anything is encoded."""

    @pytest.mark.parametrize("bad", ["0x123", "1234", "0xzz", ""])
    def test_malformed_address(self, bad: str) -> None:
        with pytest.raises(InvalidInputError, match="validator address #1"):
            compute_extra_data(Algorithm.QBFT, [ONE, bad])

    def test_unknown_algorithm(self) -> None:
        with pytest.raises(InvalidInputError, match="algorithm"):
            compute_extra_data("clique", [ONE])


class TestDeterminism:
    """Same inputs, same bytes."""

    @given(addresses, st.sampled_from(list(Algorithm)))
    def test_repeatable(self, validators: list[str], algorithm: Algorithm) -> None:
        assert compute_extra_data(algorithm, validators) == compute_extra_data(algorithm, validators)

    @given(addresses, st.sampled_from(list(Algorithm)))
    def test_validators_round_trip(self, validators: list[str], algorithm: Algorithm) -> None:
        decoded = decode_rlp(hex_to_bytes(compute_extra_data(algorithm, validators)))
        assert decoded[1] == [hex_to_bytes(a) for a in validators]
