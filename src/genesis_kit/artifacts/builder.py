"""
Artifact record builder.

Turns a finished bootstrap (keys, genesis, peers, bundles) into a flat list
of ArtifactRecords. The list is target-agnostic: the publisher, the
filesystem writer and the terminal printer all consume the same records.

Naming
------
Validator records use the zero-based pod ordinal, so validator #1 (the
first generated) becomes `besu-node-validator-0-*`. This matches the pod
names a StatefulSet assigns, letting each pod mount its own key by name.

Minimal Mode
------------
The cluster target publishes a *minimal* genesis: every non-faucet
allocation is replaced by a zero-balance placeholder, and each real
allocation is published as its own immutable `alloc-<address>` record.
A later compile step merges them back (see `genesis_kit.artifacts.compile`).
This keeps pre-funded balances out of the one object every node reads and
lets allocations be added without touching the genesis record.
"""

from __future__ import annotations

import json
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum, auto

from genesis_kit.genesis import ZERO_BALANCE, AllocationAccount, GenesisDocument
from genesis_kit.nodes import IndexedNode, NodeKey
from genesis_kit.types import addresses_equal

from .bundles import InterfaceBundle
from .filter import ArtifactFilter
from .names import (
    ALLOCATION_DATA_KEY,
    EXTERNAL_INDEX_DATA_KEY,
    EXTERNAL_INDEX_FILE_PREFIX,
    GENESIS_DATA_KEY,
    STATIC_NODES_DATA_KEY,
    ArtifactNames,
    allocation_object_name,
)
from .records import (
    AnnotationValue,
    ArtifactCategory,
    ArtifactRecord,
    ConflictPolicy,
    RecordLayout,
    Sensitivity,
)


class PublishMode(Enum):
    """How much of the genesis allocation travels inside the genesis record."""

    FULL = auto()
    """Genesis carries every allocation. Used for terminal and filesystem."""

    MINIMAL = auto()
    """Genesis carries placeholders; allocations are separate records."""


@dataclass(frozen=True, slots=True)
class BootstrapResult:
    """Everything produced by one bootstrap run."""

    faucet: NodeKey
    validators: Sequence[IndexedNode]
    genesis: GenesisDocument
    static_nodes: Sequence[str] = ()
    interface_bundles: Sequence[InterfaceBundle] = ()
    external_index_hash: str | None = None
    names: ArtifactNames = field(default_factory=ArtifactNames)


def sparse_alloc(
    alloc: dict[str, AllocationAccount], faucet_address: str
) -> dict[str, AllocationAccount]:
    """Keep the faucet entry; replace every other balance with a placeholder."""
    return {
        address: account
        if addresses_equal(address, faucet_address)
        else AllocationAccount(balance=ZERO_BALANCE)
        for address, account in alloc.items()
    }


def _to_json(value: object) -> str:
    return json.dumps(value, indent=2) + "\n"


def validator_records(validators: Sequence[IndexedNode], prefix: str) -> Iterator[ArtifactRecord]:
    """Address, private key, enode and public key for each validator."""
    for node in validators:
        base = f"{prefix}-{node.ordinal}"
        yield ArtifactRecord(f"{base}-address", "address", node.address, ArtifactCategory.KEYS)
        yield ArtifactRecord(
            f"{base}-private-key",
            "privateKey",
            node.private_key,
            ArtifactCategory.KEYS,
            sensitivity=Sensitivity.SECRET,
        )
        yield ArtifactRecord(f"{base}-enode", "enode", node.enode, ArtifactCategory.KEYS)
        yield ArtifactRecord(f"{base}-pubkey", "publicKey", node.public_key, ArtifactCategory.KEYS)


def faucet_records(faucet: NodeKey, prefix: str, *, include_enode: bool) -> Iterator[ArtifactRecord]:
    """Faucet address and public key, its private key as a secret, optionally its enode."""
    yield ArtifactRecord(f"{prefix}-address", "address", faucet.address, ArtifactCategory.KEYS)
    yield ArtifactRecord(f"{prefix}-pubkey", "publicKey", faucet.public_key, ArtifactCategory.KEYS)
    yield ArtifactRecord(
        f"{prefix}-private-key",
        "privateKey",
        faucet.private_key,
        ArtifactCategory.KEYS,
        sensitivity=Sensitivity.SECRET,
    )
    if include_enode:
        yield ArtifactRecord(f"{prefix}-enode", "enode", faucet.enode, ArtifactCategory.KEYS)


def allocation_records(
    alloc: dict[str, AllocationAccount], faucet_address: str
) -> Iterator[ArtifactRecord]:
    """One immutable, annotated record per non-faucet allocation."""
    for address, account in alloc.items():
        if addresses_equal(address, faucet_address):
            continue
        yield ArtifactRecord(
            allocation_object_name(address),
            ALLOCATION_DATA_KEY,
            _to_json(account.model_dump(mode="json", by_alias=True, exclude_none=True)),
            ArtifactCategory.ALLOCATIONS,
            immutable=True,
            on_conflict=ConflictPolicy.SKIP,
            annotation=AnnotationValue.ALLOC,
        )


def bundle_records(bundles: Sequence[InterfaceBundle]) -> Iterator[ArtifactRecord]:
    """One immutable, annotated record per ABI file."""
    for bundle in bundles:
        yield ArtifactRecord(
            bundle.object_name,
            bundle.file_name,
            bundle.contents,
            ArtifactCategory.ABIS,
            immutable=True,
            on_conflict=ConflictPolicy.SKIP,
            annotation=AnnotationValue.ABI,
            layout=RecordLayout.DOCUMENT,
        )


def build_records(
    result: BootstrapResult,
    *,
    mode: PublishMode = PublishMode.FULL,
    artifact_filter: ArtifactFilter | None = None,
) -> list[ArtifactRecord]:
    """
    Map a bootstrap result to the records a target should write.

    Args:
        result: Keys, genesis and optional bundles from the run.
        mode: FULL keeps allocations inside the genesis record; MINIMAL
            splits them out.
        artifact_filter: Categories to emit. Defaults to all.

    Returns:
        Records in a stable order: validators, faucet, genesis, static
        peers, bundles, allocations, external index.
    """
    artifact_filter = artifact_filter or ArtifactFilter()
    names = result.names
    minimal = mode is PublishMode.MINIMAL

    genesis = result.genesis
    if minimal:
        genesis = genesis.with_alloc(sparse_alloc(genesis.alloc, result.faucet.address))

    records: list[ArtifactRecord] = [
        *validator_records(result.validators, names.validator_prefix),
        *faucet_records(result.faucet, names.faucet_prefix, include_enode=not minimal),
        ArtifactRecord(
            names.genesis_name,
            GENESIS_DATA_KEY,
            genesis.to_json() + "\n",
            ArtifactCategory.GENESIS,
            immutable=True,
            on_conflict=ConflictPolicy.SKIP,
            layout=RecordLayout.DOCUMENT,
        ),
        ArtifactRecord(
            names.static_nodes_name,
            STATIC_NODES_DATA_KEY,
            _to_json(list(result.static_nodes)),
            ArtifactCategory.KEYS,
            layout=RecordLayout.DOCUMENT,
        ),
        *bundle_records(result.interface_bundles),
    ]

    if minimal:
        records.extend(allocation_records(result.genesis.alloc, result.faucet.address))

    if result.external_index_hash:
        # Cluster consumers read the bare hash; file consumers expect `kit:<hash>`.
        records.append(
            ArtifactRecord(
                names.external_index_name,
                EXTERNAL_INDEX_DATA_KEY,
                result.external_index_hash
                if minimal
                else EXTERNAL_INDEX_FILE_PREFIX + result.external_index_hash,
                ArtifactCategory.SUBGRAPH,
                immutable=True,
                on_conflict=ConflictPolicy.SKIP,
                layout=RecordLayout.WRAPPED if minimal else RecordLayout.WRAPPED_DOCUMENT,
            )
        )

    return [record for record in records if artifact_filter.includes(record.category)]
