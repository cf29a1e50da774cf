"""
Output targets for a bootstrap run.

Three targets consume the same bootstrap result:

- **screen**: grouped, human-readable listing on a text stream
- **file**: one file per record under a timestamped run directory
- **kubernetes**: records published to a control-plane store in minimal mode
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from collections.abc import Sequence
from datetime import datetime
from enum import StrEnum
from pathlib import Path
from typing import TextIO

from genesis_kit import config
from genesis_kit.nodes import IndexedNode, NodeKey
from genesis_kit.store import ControlPlaneStore

from .builder import BootstrapResult, PublishMode, build_records
from .filter import ArtifactFilter
from .publisher import ArtifactPublisher, PublishReport
from .records import ArtifactRecord, RecordLayout

logger = logging.getLogger(__name__)


class OutputTarget(StrEnum):
    """Where a bootstrap run writes its artifacts."""

    SCREEN = "screen"
    FILE = "file"
    KUBERNETES = "kubernetes"


# -------------------------------------------------------------------------
# Screen
# -------------------------------------------------------------------------


def _print_group(stream: TextIO, title: str, nodes: Sequence[IndexedNode]) -> None:
    if not nodes:
        return
    stream.write(f"{title}\n")
    for node in nodes:
        stream.write(f"  #{node.index}\n")
        stream.write(f"    address: {node.address}\n")
        stream.write(f"    publicKey: {node.public_key}\n")
        stream.write(f"    privateKey: {node.private_key}\n")
        stream.write(f"    enode: {node.enode}\n")
    stream.write("\n")


def _print_static_nodes(stream: TextIO, static_nodes: Sequence[str]) -> None:
    if not static_nodes:
        return
    stream.write("Static Nodes\n")
    stream.write(json.dumps(list(static_nodes), indent=2) + "\n\n")


def _print_faucet(stream: TextIO, faucet: NodeKey) -> None:
    stream.write("Faucet Account\n")
    stream.write(f"  address: {faucet.address}\n")
    stream.write(f"  publicKey: {faucet.public_key}\n")
    stream.write(f"  privateKey: {faucet.private_key}\n")
    stream.write(f"  enode: {faucet.enode}\n\n")


def print_to_screen(result: BootstrapResult, stream: TextIO | None = None) -> None:
    """Print the genesis, validators, static peers and faucet, in that order."""
    stream = stream or sys.stdout
    stream.write("\n\n")
    stream.write("Genesis\n")
    stream.write(result.genesis.to_json() + "\n\n")
    _print_group(stream, "Validator Nodes", result.validators)
    _print_static_nodes(stream, result.static_nodes)
    _print_faucet(stream, result.faucet)


# -------------------------------------------------------------------------
# Filesystem
# -------------------------------------------------------------------------


def run_directory_name(now: datetime) -> str:
    """Directory name for one run, e.g. `2024-05-01_13-04-05-007`."""
    return now.strftime("%Y-%m-%d_%H-%M-%S-") + f"{now.microsecond // 1000:03d}"


def render_file(record: ArtifactRecord) -> tuple[str, str]:
    """
    File name and contents for one record.

    Document records are written as-is to `<name>.json`. Wrapped records
    become `{"<key>": "<value>"}`, in `<name>.json` for WRAPPED_DOCUMENT and
    in a file called `<name>` otherwise.
    """
    wrapped = json.dumps({record.key: record.value}, indent=2) + "\n"
    match record.layout:
        case RecordLayout.DOCUMENT:
            return f"{record.name}.json", record.value
        case RecordLayout.WRAPPED_DOCUMENT:
            return f"{record.name}.json", wrapped
        case RecordLayout.WRAPPED:
            return record.name, wrapped


def _write_files(directory: Path, files: list[tuple[str, str]]) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    for file_name, contents in files:
        (directory / file_name).write_text(contents, encoding="utf-8")


async def write_to_directory(
    records: Sequence[ArtifactRecord],
    root: Path | str | None = None,
    *,
    now: datetime | None = None,
) -> Path:
    """
    Write records under a fresh timestamped directory.

    Returns:
        The run directory.
    """
    directory = Path(root or config.OUTPUT_DIR) / run_directory_name(now or datetime.now())
    files = [render_file(record) for record in records]
    for file_name, _ in files:
        logger.debug("Writing %s", file_name)
    await asyncio.to_thread(_write_files, directory, files)
    logger.info("Wrote %d bootstrap artifacts to %s", len(files), directory)
    return directory


# -------------------------------------------------------------------------
# Dispatch
# -------------------------------------------------------------------------


async def emit(
    target: OutputTarget,
    result: BootstrapResult,
    *,
    artifact_filter: ArtifactFilter | None = None,
    store: ControlPlaneStore | None = None,
    output_root: Path | str | None = None,
    stream: TextIO | None = None,
) -> Path | PublishReport | None:
    """
    Send a bootstrap result to one target.

    Returns:
        The run directory for the file target, the publish report for the
        kubernetes target, None for the screen.

    Raises:
        ValueError: If the kubernetes target is chosen without a store.
    """
    logger.info("Output mode: %s", target.value)
    match target:
        case OutputTarget.SCREEN:
            print_to_screen(result, stream)
            return None
        case OutputTarget.FILE:
            records = build_records(result, mode=PublishMode.FULL, artifact_filter=artifact_filter)
            return await write_to_directory(records, output_root)
        case OutputTarget.KUBERNETES:
            if store is None:
                raise ValueError("The kubernetes output target requires a store")
            logger.info("Using Kubernetes namespace %s", store.namespace)
            records = build_records(
                result, mode=PublishMode.MINIMAL, artifact_filter=artifact_filter
            )
            return await ArtifactPublisher(store).publish(records)
