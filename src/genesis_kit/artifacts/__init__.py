"""Artifact records and the targets that store, publish and retrieve them."""

from .builder import BootstrapResult, PublishMode, build_records, sparse_alloc
from .bundles import InterfaceBundle, load_external_index_hash, load_interface_bundles
from .compile import compile_genesis
from .filter import ArtifactFilter
from .names import ArtifactNames, allocation_object_name
from .output import OutputTarget, emit, print_to_screen, write_to_directory
from .publisher import ArtifactPublisher, PublishReport, RecordState
from .records import (
    ANNOTATION_KEY,
    AnnotationValue,
    ArtifactCategory,
    ArtifactRecord,
    ConflictPolicy,
    RecordLayout,
    Sensitivity,
)
from .sync import ArtifactSynchronizer, DirectorySink, PaginationCursor, SyncState, SyncTotals

__all__ = [
    # Records
    "ANNOTATION_KEY",
    "AnnotationValue",
    "ArtifactCategory",
    "ArtifactRecord",
    "ConflictPolicy",
    "RecordLayout",
    "Sensitivity",
    "ArtifactNames",
    "allocation_object_name",
    # Building
    "BootstrapResult",
    "PublishMode",
    "build_records",
    "sparse_alloc",
    "ArtifactFilter",
    "InterfaceBundle",
    "load_interface_bundles",
    "load_external_index_hash",
    # Targets
    "OutputTarget",
    "emit",
    "print_to_screen",
    "write_to_directory",
    "ArtifactPublisher",
    "PublishReport",
    "RecordState",
    # Retrieval
    "ArtifactSynchronizer",
    "DirectorySink",
    "PaginationCursor",
    "SyncState",
    "SyncTotals",
    "compile_genesis",
]
