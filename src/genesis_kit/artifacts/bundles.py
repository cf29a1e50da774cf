"""
Loaders for optional bootstrap inputs.

Interface bundles are contract ABI files shipped next to the chain so that
indexers and dApps can discover them later. The external index hash is the
IPFS hash of a deployed subgraph.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from multiformats import CID

from genesis_kit.types import InvalidInputError

logger = logging.getLogger(__name__)

ABI_NAME_PREFIX: Final = "abi-"


@dataclass(frozen=True, slots=True)
class InterfaceBundle:
    """One ABI file, normalized for publication."""

    object_name: str
    """Target object name: `abi-<lowercased file stem>`."""

    file_name: str
    """Original file name; used as the data key."""

    contents: str
    """JSON re-serialized with two-space indentation and a trailing newline."""


def bundle_object_name(file_name: str) -> str:
    """
    Derive the object name for an ABI file.

    Raises:
        InvalidInputError: If the stem is empty after trimming.
    """
    stem = Path(file_name).stem.strip().lower()
    if not stem:
        raise InvalidInputError(
            "ABI file name", "must contain at least one alphanumeric character"
        )
    return ABI_NAME_PREFIX + stem


def load_interface_bundles(directory: Path | str) -> list[InterfaceBundle]:
    """
    Load every `*.json` file below a directory, recursively.

    Returns:
        Bundles sorted by object name. Empty if no JSON files are found.

    Raises:
        InvalidInputError: If the directory is missing or not a directory, or
            a file is not valid JSON.
    """
    raw = str(directory).strip()
    if not raw:
        raise InvalidInputError("ABI directory", "must be provided")

    root = Path(raw)
    if not root.exists():
        raise InvalidInputError("ABI directory", f"not found at {directory}")
    if not root.is_dir():
        raise InvalidInputError("ABI directory", f"must be a directory, received {directory}")

    bundles = []
    for path in root.rglob("*"):
        if not path.is_file() or path.suffix.lower() != ".json":
            continue
        try:
            parsed = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise InvalidInputError("ABI file", f"{path.name} is not valid JSON: {e}") from e

        bundles.append(
            InterfaceBundle(
                object_name=bundle_object_name(path.name),
                file_name=path.name,
                contents=json.dumps(parsed, indent=2) + "\n",
            )
        )

    bundles.sort(key=lambda bundle: bundle.object_name)
    logger.info("Loaded %d ABI file(s) from %s", len(bundles), root)
    return bundles


def load_external_index_hash(path: Path | str) -> str:
    """
    Read a subgraph IPFS hash from a file.

    The trimmed contents must decode as a CID (v0 `Qm...` or multibase v1).

    Raises:
        InvalidInputError: If the file is missing or empty, or its contents
            are not a single valid CID.
    """
    raw = str(path).strip()
    if not raw:
        raise InvalidInputError("subgraph hash file", "path must be provided")

    file = Path(raw)
    if not file.is_file():
        raise InvalidInputError("subgraph hash file", f"not found at {path}")

    contents = file.read_text(encoding="utf-8").strip()
    if not contents:
        raise InvalidInputError("subgraph hash file", "is empty")
    if any(char.isspace() for char in contents):
        raise InvalidInputError("subgraph hash", f"{contents!r} is not a single IPFS hash")
    try:
        CID.decode(contents)
    except Exception as e:
        raise InvalidInputError(
            "subgraph hash", f"{contents!r} is not a valid IPFS hash: {e}"
        ) from e
    return contents
