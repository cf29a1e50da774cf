"""
Genesis compile step.

Rebuilds a full genesis file from a minimal genesis record and the
per-account `alloc-<address>` records published next to it. Accounts
without a matching record keep their placeholder.

Only the `alloc` section is validated. Every other key of the stored
genesis is carried over untouched so the output hashes the same way the
chain's nodes expect.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Final

from pydantic import ValidationError

from genesis_kit.genesis import AllocationAccount
from genesis_kit.store import ControlPlaneStore
from genesis_kit.types import CompileGenesisError

from .names import ALLOCATION_DATA_KEY, GENESIS_DATA_KEY, allocation_object_name

logger = logging.getLogger(__name__)

DEFAULT_COMPILE_OUTPUT_PATH: Final = Path("/data/atk-genesis.json")


def _parse_account(raw: Any, error: str) -> dict[str, Any]:
    try:
        account = AllocationAccount.model_validate(raw)
    except ValidationError as e:
        raise CompileGenesisError(error) from e
    return account.model_dump(mode="json", by_alias=True, exclude_none=True)


def parse_genesis_payload(raw: str) -> dict[str, Any]:
    """
    Decode a stored genesis and validate its allocation map.

    Raises:
        CompileGenesisError: If the payload is not a JSON object with an
            `alloc` object of valid accounts.
    """
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        raise CompileGenesisError(f"Genesis ConfigMap payload is not valid JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise CompileGenesisError("Genesis ConfigMap payload must be an object.")
    if "alloc" not in parsed:
        raise CompileGenesisError("Genesis payload does not contain an alloc section.")
    if not isinstance(parsed["alloc"], dict):
        raise CompileGenesisError("Genesis alloc must be an object.")

    parsed["alloc"] = {
        address: _parse_account(account, f"Genesis allocation for {address} is invalid.")
        for address, account in parsed["alloc"].items()
    }
    return parsed


def parse_allocation_payload(raw: str, source_name: str) -> dict[str, Any]:
    """
    Decode one `alloc.json` entry.

    Raises:
        CompileGenesisError: If it is not valid JSON or not a valid account.
    """
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        raise CompileGenesisError(f"ConfigMap {source_name} contains invalid JSON: {e}") from e
    return _parse_account(parsed, f"ConfigMap {source_name} does not contain a valid allocation.")


async def compile_genesis(
    store: ControlPlaneStore,
    genesis_name: str,
    output_path: Path | str = DEFAULT_COMPILE_OUTPUT_PATH,
) -> dict[str, Any]:
    """
    Merge allocation records into the stored genesis and write the result.

    Args:
        store: Store holding the genesis and allocation records.
        genesis_name: Name of the genesis ConfigMap.
        output_path: File to write the compiled genesis to.

    Returns:
        The compiled genesis.

    Raises:
        CompileGenesisError: If the genesis record is missing or malformed,
            or an allocation record is malformed.
    """
    genesis_map = await store.read_config_map(genesis_name)
    if genesis_map is None:
        raise CompileGenesisError(
            f"ConfigMap {genesis_name} not found in namespace {store.namespace}."
        )

    payload = (genesis_map.data or {}).get(GENESIS_DATA_KEY)
    if not payload:
        raise CompileGenesisError(f"ConfigMap {genesis_name} does not contain {GENESIS_DATA_KEY}.")

    genesis = parse_genesis_payload(payload)
    alloc: dict[str, Any] = genesis["alloc"]

    for address in list(alloc):
        name = allocation_object_name(address)
        record = await store.read_config_map(name)
        if record is None:
            logger.info("ConfigMap %s not found; keeping placeholder for %s.", name, address)
            continue

        entry = (record.data or {}).get(ALLOCATION_DATA_KEY)
        if not entry:
            logger.info(
                "ConfigMap %s missing %s; keeping placeholder for %s.",
                name,
                ALLOCATION_DATA_KEY,
                address,
            )
            continue

        alloc[address] = parse_allocation_payload(entry, name)
        logger.info("Merged allocation for %s from %s.", address, name)

    output = Path(output_path)
    await asyncio.to_thread(_write_json, output, genesis)
    logger.info("Wrote compiled genesis to %s.", output)
    return genesis


def _write_json(path: Path, document: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(document, indent=2) + "\n", encoding="utf-8")
