"""
Node key material and static peer entries.

Key pairs are generated by the caller. This module only carries them:
validators in generation order (their one-based index is kept, because
artifact names and pod ordinals are derived from it), plus the faucet.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Final

import yaml
from pydantic import PositiveInt, ValidationInfo, field_validator

from genesis_kit.types import ChecksumAddress, HexBytes, ImmutableModel, InvalidInputError

DEFAULT_STATIC_NODE_PORT: Final[int] = 30_303
"""Default devp2p TCP and discovery port."""

STATIC_NODE_POD_PREFIX: Final = "besu-node-validator"
"""StatefulSet name the validator pods run under."""

_UNCOMPRESSED_PUBLIC_KEY_PREFIX = "04"
_UNCOMPRESSED_PUBLIC_KEY_LENGTH = 130
_HEX_WIDTHS = {"address": 40, "public_key": 130, "private_key": 64}


class NodeKey(ImmutableModel):
    """Key pair plus the identifiers derived from it."""

    address: ChecksumAddress
    public_key: HexBytes
    private_key: HexBytes
    enode: str
    """Node id: the uncompressed public key without its `04` prefix."""

    @field_validator("address", "public_key", "private_key", mode="before")
    @classmethod
    def hex_from_yaml_int(cls, v: Any, info: ValidationInfo) -> Any:
        """
        Convert YAML integers back to hex.

        YAML parsers read unquoted 0x-prefixed values as integers.
        """
        if isinstance(v, int):
            return f"0x{v:0{_HEX_WIDTHS[info.field_name]}x}"
        return v


class IndexedNode(NodeKey):
    """A validator key with its one-based generation index."""

    index: PositiveInt

    @property
    def ordinal(self) -> int:
        """Zero-based ordinal matching StatefulSet pod numbering."""
        return self.index - 1


class KeyMaterial(ImmutableModel):
    """
    All generated keys for one bootstrap run.

    Loads from YAML::

        faucet: {address: ..., publicKey: ..., privateKey: ..., enode: ...}
        validators:
          - {address: ..., publicKey: ..., privateKey: ..., enode: ...}
    """

    faucet: NodeKey
    validators: list[IndexedNode]

    @classmethod
    def from_yaml_file(cls, path: Path | str) -> KeyMaterial:
        """
        Load keys, assigning validator indices in file order starting at 1.

        Raises:
            InvalidInputError: If the document is not a mapping.
            yaml.YAMLError: If the file is not valid YAML.
        """
        with Path(path).open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
        if not isinstance(data, dict):
            raise InvalidInputError("keys file", f"{path} must contain a faucet and validators mapping")

        validators = [
            {**entry, "index": position}
            for position, entry in enumerate(data.get("validators") or [], start=1)
        ]
        return cls.model_validate({"faucet": data.get("faucet"), "validators": validators})

    @property
    def validator_addresses(self) -> list[str]:
        """Validator addresses in generation order."""
        return [node.address for node in self.validators]


def derive_node_id(public_key: str) -> str:
    """Strip `0x` and, for uncompressed keys, the leading `04`."""
    trimmed = public_key.removeprefix("0x")
    if (
        trimmed.startswith(_UNCOMPRESSED_PUBLIC_KEY_PREFIX)
        and len(trimmed) == _UNCOMPRESSED_PUBLIC_KEY_LENGTH
    ):
        return trimmed[len(_UNCOMPRESSED_PUBLIC_KEY_PREFIX) :]
    return trimmed


def _clean(value: str | None, *, strip_leading_dot: bool = False) -> str | None:
    if value is None:
        return None
    value = value.strip()
    if strip_leading_dot:
        value = value.removeprefix(".")
    return value or None


def create_static_node_entries(
    validators: list[IndexedNode],
    *,
    namespace: str | None = None,
    domain: str | None = None,
    port: int = DEFAULT_STATIC_NODE_PORT,
    discovery_port: int = DEFAULT_STATIC_NODE_PORT,
) -> list[str]:
    """
    Build the static peer list for the validator set.

    Each validator is addressed through its StatefulSet pod DNS name::

        enode://<node id>@besu-node-validator-0.besu-node-validator[.ns][.domain]:30303?discport=30303
    """
    namespace = _clean(namespace)
    domain = _clean(domain, strip_leading_dot=True)

    entries = []
    for node in validators:
        segments = [f"{STATIC_NODE_POD_PREFIX}-{node.ordinal}", STATIC_NODE_POD_PREFIX]
        if namespace:
            segments.append(namespace)
        if domain:
            segments.append(domain)
        host = ".".join(segments)
        entries.append(
            f"enode://{derive_node_id(node.public_key)}@{host}:{port}?discport={discovery_port}"
        )
    return entries
