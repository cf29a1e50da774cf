"""
Artifact records.

A record is the unit of publication: one named object holding exactly one
key/value pair. Records never carry more than one entry so that each can
be created, skipped, or rejected independently.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, StrEnum, auto
from typing import Final

from genesis_kit.store import ConfigMap, ObjectMeta, Secret

ANNOTATION_KEY: Final = "settlemint.com/artifact"
"""Annotation that marks records meant for later discovery."""


class AnnotationValue(StrEnum):
    """Reserved discovery annotation values."""

    ABI = "abi"
    """Interface bundle (contract ABI) records."""

    ALLOC = "alloc"
    """Per-account allocation override records."""


class Sensitivity(Enum):
    """Which store primitive a record is routed to."""

    PUBLIC = auto()
    """Plain configuration object."""

    SECRET = auto()
    """Secret object. Only private keys are secret."""


class ConflictPolicy(StrEnum):
    """What to do when the target name already exists."""

    FAIL = "fail"
    """Abort the run."""

    SKIP = "skip"
    """Keep the existing object and carry on."""


class ArtifactCategory(StrEnum):
    """Selectable groups of records."""

    GENESIS = "genesis"
    KEYS = "keys"
    ABIS = "abis"
    SUBGRAPH = "subgraph"
    ALLOCATIONS = "allocations"


class RecordLayout(Enum):
    """How the filesystem target renders a record."""

    WRAPPED = auto()
    """`{"<key>": "<value>"}` in a file named after the record."""

    DOCUMENT = auto()
    """The value itself, already a JSON document, in `<name>.json`."""

    WRAPPED_DOCUMENT = auto()
    """`{"<key>": "<value>"}` in `<name>.json`."""


@dataclass(frozen=True, slots=True)
class ArtifactRecord:
    """One named key/value pair destined for a target store."""

    name: str
    """Target object name."""

    key: str
    """Data key inside the object."""

    value: str
    """Data value."""

    category: ArtifactCategory
    """Group the record belongs to, for filtering."""

    sensitivity: Sensitivity = Sensitivity.PUBLIC
    """Store primitive the record is written to."""

    immutable: bool = False
    """Ask the store to refuse in-place updates."""

    on_conflict: ConflictPolicy = ConflictPolicy.FAIL
    """Behaviour when the name is taken."""

    annotation: AnnotationValue | None = None
    """Discovery marker stored under ANNOTATION_KEY."""

    layout: RecordLayout = RecordLayout.WRAPPED
    """Filesystem rendering."""

    @property
    def object_kind(self) -> str:
        """Store object kind used in log and error messages."""
        return "Secret" if self.sensitivity is Sensitivity.SECRET else "ConfigMap"

    def to_config_map(self) -> ConfigMap:
        """Render as a ConfigMap body."""
        annotations = {ANNOTATION_KEY: self.annotation.value} if self.annotation else None
        return ConfigMap(
            metadata=ObjectMeta(name=self.name, annotations=annotations),
            data={self.key: self.value},
            immutable=self.immutable or None,
        )

    def to_secret(self) -> Secret:
        """Render as an Opaque Secret body."""
        return Secret(
            metadata=ObjectMeta(name=self.name),
            string_data={self.key: self.value},
        )
