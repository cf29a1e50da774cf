"""Tests for the screen, file and kubernetes output targets."""

from __future__ import annotations

import asyncio
import io
import json
from dataclasses import replace
from datetime import datetime
from pathlib import Path

import pytest

from genesis_kit.artifacts import (
    ArtifactCategory,
    ArtifactFilter,
    ArtifactRecord,
    BootstrapResult,
    InterfaceBundle,
    OutputTarget,
    PublishReport,
    RecordLayout,
    emit,
    print_to_screen,
    write_to_directory,
)
from genesis_kit.artifacts.output import render_file, run_directory_name
from genesis_kit.genesis import GenesisDocument
from tests.genesis_kit.helpers import EXTRA_ADDRESS, FakeStore


class TestScreen:
    """Human-readable listing."""

    def test_group_order(self, bootstrap_result: BootstrapResult) -> None:
        stream = io.StringIO()
        print_to_screen(bootstrap_result, stream)
        text = stream.getvalue()

        positions = [
            text.index(title)
            for title in ("Genesis", "Validator Nodes", "Static Nodes", "Faucet Account")
        ]
        assert positions == sorted(positions)
        assert "  #1\n" in text
        assert "  #2\n" in text
        assert f"    privateKey: {bootstrap_result.validators[0].private_key}\n" in text

    def test_empty_groups_are_omitted(self, bootstrap_result: BootstrapResult) -> None:
        stream = io.StringIO()
        print_to_screen(replace(bootstrap_result, validators=[], static_nodes=[]), stream)
        text = stream.getvalue()
        assert "Validator Nodes" not in text
        assert "Static Nodes" not in text
        assert "Faucet Account" in text

    def test_genesis_is_printed_in_full(self, bootstrap_result: BootstrapResult) -> None:
        stream = io.StringIO()
        print_to_screen(bootstrap_result, stream)
        assert bootstrap_result.genesis.to_json() in stream.getvalue()


class TestFileLayout:
    """Per-record file rendering."""

    def test_run_directory_name(self) -> None:
        now = datetime(2024, 5, 1, 13, 4, 5, 7_000)
        assert run_directory_name(now) == "2024-05-01_13-04-05-007"

    def test_wrapped_record(self) -> None:
        record = ArtifactRecord("besu-faucet-address", "address", "0xabc", ArtifactCategory.KEYS)
        assert render_file(record) == (
            "besu-faucet-address",
            '{\n  "address": "0xabc"\n}\n',
        )

    def test_document_record(self) -> None:
        record = ArtifactRecord(
            "besu-genesis", "genesis.json", "{}\n", ArtifactCategory.GENESIS, layout=RecordLayout.DOCUMENT
        )
        assert render_file(record) == ("besu-genesis.json", "{}\n")

    def test_wrapped_document_record(self) -> None:
        record = ArtifactRecord(
            "besu-subgraph",
            "SUBGRAPH_HASH",
            "kit:Qm",
            ArtifactCategory.SUBGRAPH,
            layout=RecordLayout.WRAPPED_DOCUMENT,
        )
        assert render_file(record) == (
            "besu-subgraph.json",
            '{\n  "SUBGRAPH_HASH": "kit:Qm"\n}\n',
        )


class TestFileTarget:
    """Timestamped run directory output."""

    def test_writes_every_record(self, bootstrap_result: BootstrapResult, tmp_path: Path) -> None:
        bundle = InterfaceBundle("abi-token", "Token.json", "[]\n")
        result = replace(bootstrap_result, interface_bundles=[bundle])

        directory = asyncio.run(emit(OutputTarget.FILE, result, output_root=tmp_path))

        assert directory.parent == tmp_path
        files = {path.name for path in directory.iterdir()}
        assert {
            "besu-genesis.json",
            "besu-static-nodes.json",
            "abi-token.json",
            "besu-faucet-enode",
            "besu-faucet-private-key",
            "besu-node-validator-0-address",
            "besu-node-validator-1-pubkey",
        } <= files
        assert not any(name.startswith("alloc-") for name in files)

    def test_genesis_round_trips(self, bootstrap_result: BootstrapResult, tmp_path: Path) -> None:
        directory = asyncio.run(emit(OutputTarget.FILE, bootstrap_result, output_root=tmp_path))
        parsed = GenesisDocument.from_json((directory / "besu-genesis.json").read_text())
        assert parsed == bootstrap_result.genesis
        assert EXTRA_ADDRESS in parsed.alloc

    def test_wrapped_values(self, bootstrap_result: BootstrapResult, tmp_path: Path) -> None:
        directory = asyncio.run(emit(OutputTarget.FILE, bootstrap_result, output_root=tmp_path))
        wrapped = json.loads((directory / "besu-node-validator-0-address").read_text())
        assert wrapped == {"address": bootstrap_result.validators[0].address}

    def test_subgraph_hash_file(self, bootstrap_result: BootstrapResult, tmp_path: Path) -> None:
        result = replace(bootstrap_result, external_index_hash="QmHash")
        directory = asyncio.run(emit(OutputTarget.FILE, result, output_root=tmp_path))
        assert json.loads((directory / "besu-subgraph.json").read_text()) == {
            "SUBGRAPH_HASH": "kit:QmHash"
        }
        assert not (directory / "besu-subgraph").exists()

    def test_filter_applies(self, bootstrap_result: BootstrapResult, tmp_path: Path) -> None:
        directory = asyncio.run(
            emit(
                OutputTarget.FILE,
                bootstrap_result,
                artifact_filter=ArtifactFilter.parse("genesis"),
                output_root=tmp_path,
            )
        )
        assert [path.name for path in directory.iterdir()] == ["besu-genesis.json"]

    def test_explicit_timestamp(self, tmp_path: Path) -> None:
        record = ArtifactRecord("x", "k", "v", ArtifactCategory.KEYS)
        directory = asyncio.run(
            write_to_directory([record], tmp_path, now=datetime(2020, 1, 2, 3, 4, 5))
        )
        assert directory == tmp_path / "2020-01-02_03-04-05-000"
        assert (directory / "x").is_file()


class TestKubernetesTarget:
    """Minimal-mode publication."""

    def test_publishes_minimal_records(
        self, bootstrap_result: BootstrapResult, store: FakeStore
    ) -> None:
        report = asyncio.run(emit(OutputTarget.KUBERNETES, bootstrap_result, store=store))

        assert isinstance(report, PublishReport)
        assert "alloc-" + EXTRA_ADDRESS[2:].lower() in store.config_maps
        assert "besu-faucet-enode" not in store.config_maps
        genesis = json.loads(store.config_maps["besu-genesis"].data["genesis.json"])
        assert genesis["alloc"][EXTRA_ADDRESS] == {"balance": "0x0"}
        assert report.created_secrets == 3

    def test_requires_store(self, bootstrap_result: BootstrapResult) -> None:
        with pytest.raises(ValueError, match="requires a store"):
            asyncio.run(emit(OutputTarget.KUBERNETES, bootstrap_result))

    def test_screen_returns_nothing(
        self, bootstrap_result: BootstrapResult, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert asyncio.run(emit(OutputTarget.SCREEN, bootstrap_result)) is None
        assert "Faucet Account" in capsys.readouterr().out
