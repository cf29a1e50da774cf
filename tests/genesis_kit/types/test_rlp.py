"""Tests for RLP encoding and decoding."""

from __future__ import annotations

import pytest

from genesis_kit.types import RLPDecodingError, decode_rlp, encode_rlp


class TestEncodeBytes:
    """Byte string encoding."""

    def test_empty_string(self) -> None:
        """Empty string encodes as the bare offset."""
        assert encode_rlp(b"") == b"\x80"

    def test_single_low_byte_is_itself(self) -> None:
        """Bytes below 0x80 encode as themselves."""
        assert encode_rlp(b"\x00") == b"\x00"
        assert encode_rlp(b"\x7f") == b"\x7f"

    def test_single_high_byte_is_prefixed(self) -> None:
        """A single byte at or above 0x80 gets a length prefix."""
        assert encode_rlp(b"\x80") == b"\x81\x80"

    def test_short_string(self) -> None:
        """'dog' is the Yellow Paper example."""
        assert encode_rlp(b"dog") == b"\x83dog"

    def test_fifty_five_bytes_stay_short(self) -> None:
        """55 bytes is the largest short-form payload."""
        payload = b"a" * 55
        assert encode_rlp(payload) == bytes([0x80 + 55]) + payload

    def test_fifty_six_bytes_use_long_form(self) -> None:
        """56 bytes switch to a one-byte length field."""
        payload = b"a" * 56
        assert encode_rlp(payload) == b"\xb8\x38" + payload

    def test_long_length_field_grows(self) -> None:
        """1024 bytes need a two-byte length field."""
        payload = b"x" * 1024
        assert encode_rlp(payload)[:3] == b"\xb9\x04\x00"


class TestEncodeLists:
    """List encoding."""

    def test_empty_list(self) -> None:
        assert encode_rlp([]) == b"\xc0"

    def test_list_of_strings(self) -> None:
        """['cat', 'dog'] from the Yellow Paper."""
        assert encode_rlp([b"cat", b"dog"]) == b"\xc8\x83cat\x83dog"

    def test_nested_set_theoretic_representation(self) -> None:
        """[ [], [[]], [ [], [[]] ] ] encodes to the canonical vector."""
        item = [[], [[]], [[], [[]]]]
        assert encode_rlp(item) == bytes.fromhex("c7c0c1c0c3c0c1c0")

    def test_rejects_unsupported_types(self) -> None:
        with pytest.raises(TypeError, match="Cannot RLP encode type: int"):
            encode_rlp(1)  # type: ignore[arg-type]


class TestDecode:
    """Decoding of hand-written vectors and rejection of malformed input."""

    @pytest.mark.parametrize(
        ("encoded", "expected"),
        [
            (b"\x80", b""),
            (b"\x0f", b"\x0f"),
            (b"\x83dog", b"dog"),
            (b"\xc0", []),
            (b"\xc8\x83cat\x83dog", [b"cat", b"dog"]),
            (bytes.fromhex("c7c0c1c0c3c0c1c0"), [[], [[]], [[], [[]]]]),
        ],
    )
    def test_known_vectors(self, encoded: bytes, expected: object) -> None:
        assert decode_rlp(encoded) == expected

    def test_long_string(self) -> None:
        payload = b"a" * 60
        assert decode_rlp(b"\xb8\x3c" + payload) == payload

    def test_empty_input(self) -> None:
        with pytest.raises(RLPDecodingError, match="Empty"):
            decode_rlp(b"")

    def test_trailing_bytes(self) -> None:
        with pytest.raises(RLPDecodingError, match="Trailing"):
            decode_rlp(b"\x80\x80")

    def test_truncated_payload(self) -> None:
        with pytest.raises(RLPDecodingError):
            decode_rlp(b"\x83do")
