"""Tests for node key material and static peer entries."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from genesis_kit.nodes import IndexedNode, KeyMaterial, create_static_node_entries, derive_node_id
from genesis_kit.types import InvalidInputError
from tests.genesis_kit.helpers import FAUCET_ADDRESS, VALIDATOR_ADDRESSES, make_node_key, public_key


def _key_yaml(address: str, seed: int) -> dict[str, str]:
    return make_node_key(address, seed).model_dump(by_alias=True)


class TestKeyMaterial:
    """Key file loading."""

    def test_validators_are_indexed_in_file_order(self, tmp_path: Path) -> None:
        path = tmp_path / "keys.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "faucet": _key_yaml(FAUCET_ADDRESS, 1),
                    "validators": [
                        _key_yaml(VALIDATOR_ADDRESSES[0], 2),
                        _key_yaml(VALIDATOR_ADDRESSES[1], 3),
                    ],
                }
            )
        )
        keys = KeyMaterial.from_yaml_file(path)
        assert keys.faucet.address == FAUCET_ADDRESS
        assert [node.index for node in keys.validators] == [1, 2]
        assert [node.ordinal for node in keys.validators] == [0, 1]
        assert keys.validator_addresses == list(VALIDATOR_ADDRESSES)

    def test_unquoted_hex_values(self, tmp_path: Path) -> None:
        """Unquoted 0x values are read as integers by YAML and restored."""
        key = make_node_key(FAUCET_ADDRESS, 1)
        path = tmp_path / "keys.yaml"
        path.write_text(
            "faucet:\n"
            f"  address: {key.address}\n"
            f"  publicKey: {key.public_key}\n"
            f"  privateKey: {key.private_key}\n"
            f"  enode: \"{key.enode}\"\n"
            "validators: []\n"
        )
        keys = KeyMaterial.from_yaml_file(path)
        assert keys.faucet == key
        assert keys.validators == []

    @pytest.mark.parametrize("content", ["", "- just\n- a list\n"])
    def test_rejects_non_mapping_document(self, tmp_path: Path, content: str) -> None:
        path = tmp_path / "keys.yaml"
        path.write_text(content)
        with pytest.raises(InvalidInputError, match="keys file"):
            KeyMaterial.from_yaml_file(path)

    def test_rejects_bad_address(self) -> None:
        with pytest.raises(ValidationError):
            IndexedNode(
                address="0x1234",
                public_key=public_key(1),
                private_key="0x01",
                enode="ab",
                index=1,
            )

    def test_index_is_one_based(self) -> None:
        with pytest.raises(ValidationError):
            IndexedNode(**make_node_key(FAUCET_ADDRESS, 1).model_dump(), index=0)


class TestNodeId:
    """Public key to node id."""

    def test_strips_uncompressed_prefix(self) -> None:
        assert derive_node_id(public_key(0xAB)) == "ab" * 64

    def test_keeps_other_keys(self) -> None:
        assert derive_node_id("0x02abcd") == "02abcd"


class TestStaticNodes:
    """Static peer entries for validator pods."""

    def test_default_host_and_ports(self, validators: list[IndexedNode]) -> None:
        entries = create_static_node_entries(validators)
        node_id = derive_node_id(validators[0].public_key)
        assert entries[0] == (
            f"enode://{node_id}@besu-node-validator-0.besu-node-validator:30303?discport=30303"
        )
        assert entries[1].split("@")[1].startswith("besu-node-validator-1.")

    def test_namespace_domain_and_ports(self, validators: list[IndexedNode]) -> None:
        entries = create_static_node_entries(
            validators[:1],
            namespace=" atk ",
            domain=".svc.cluster.local",
            port=40404,
            discovery_port=0,
        )
        assert entries[0].endswith(
            "@besu-node-validator-0.besu-node-validator.atk.svc.cluster.local:40404?discport=0"
        )

    def test_blank_namespace_is_ignored(self, validators: list[IndexedNode]) -> None:
        entries = create_static_node_entries(validators[:1], namespace="  ", domain="")
        assert "@besu-node-validator-0.besu-node-validator:" in entries[0]

    def test_empty_validator_set(self) -> None:
        assert create_static_node_entries([]) == []
