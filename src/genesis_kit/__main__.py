"""
genesis-kit CLI entry point.

Bootstraps a Besu BFT network and exchanges its artifacts with Kubernetes.

Usage::

    python -m genesis_kit bootstrap --network network.yaml --keys keys.yaml
    python -m genesis_kit bootstrap --network network.yaml --keys keys.yaml \\
        --consensus IBFTv2 --output kubernetes --abi-directory ./abis
    python -m genesis_kit download-abi --output-directory /data/abi
    python -m genesis_kit compile-genesis --output-path /data/atk-genesis.json

Subcommands:
    bootstrap        Assemble genesis and emit keys, genesis and peers
    download-abi     Copy ABI ConfigMaps from the current namespace to disk
    compile-genesis  Merge per-account allocation ConfigMaps into a genesis file
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

import yaml
from pydantic import ValidationError

from genesis_kit.artifacts import (
    ArtifactFilter,
    ArtifactNames,
    ArtifactSynchronizer,
    BootstrapResult,
    DirectorySink,
    OutputTarget,
    compile_genesis,
    emit,
    load_external_index_hash,
    load_interface_bundles,
)
from genesis_kit.artifacts.compile import DEFAULT_COMPILE_OUTPUT_PATH
from genesis_kit.genesis import Algorithm, NetworkConfig, assemble, compute_extra_data, load_allocations
from genesis_kit.nodes import DEFAULT_STATIC_NODE_PORT, KeyMaterial, create_static_node_entries
from genesis_kit.store import ClusterContext, KubernetesStore
from genesis_kit.types import GenesisKitError, InvalidInputError, addresses_equal

DEFAULT_ABI_DIRECTORY = Path("/data/abi")

_PACKAGE = "genesis_kit"
_HANDLER_NAME = "genesis-kit"

logger = logging.getLogger(__name__)


class ColoredFormatter(logging.Formatter):
    """
    Compact `LEVEL  logger: message` lines with an ANSI color per level.

    Logger names are shown relative to the package, so
    `genesis_kit.artifacts.sync` prints as `artifacts.sync`.
    """

    RESET = "\x1b[0m"
    DIM = "\x1b[2m"
    LEVEL_STYLES = {
        logging.DEBUG: "\x1b[38;5;244m",
        logging.INFO: "\x1b[38;5;40m",
        logging.WARNING: "\x1b[38;5;220m",
        logging.ERROR: "\x1b[38;5;196m",
        logging.CRITICAL: "\x1b[38;5;196;1m",
    }

    def __init__(self, *, color: bool = True) -> None:
        super().__init__(datefmt="%H:%M:%S")
        self.color = color

    def _paint(self, style: str, text: str) -> str:
        return f"{style}{text}{self.RESET}" if self.color else text

    def format(self, record: logging.LogRecord) -> str:
        name = record.name.removeprefix(f"{_PACKAGE}.")
        line = " ".join(
            [
                self._paint(self.DIM, self.formatTime(record, self.datefmt)),
                self._paint(self.LEVEL_STYLES.get(record.levelno, ""), f"{record.levelname:<7}"),
                f"{name}: {record.getMessage()}",
            ]
        )
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(verbose: bool = False, no_color: bool = False) -> None:
    """
    Route package logs to stderr.

    Calling it again replaces the handler installed by the previous call.
    HTTP client chatter stays at WARNING unless `verbose` is set.
    """
    level = logging.DEBUG if verbose else logging.INFO
    stream = sys.stderr

    handler = logging.StreamHandler(stream)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(ColoredFormatter(color=not no_color and stream.isatty()))

    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.DEBUG if verbose else logging.WARNING)


def open_store() -> KubernetesStore:
    """Connect to the API server with in-cluster credentials."""
    return KubernetesStore(ClusterContext.from_service_account())


# -------------------------------------------------------------------------
# bootstrap
# -------------------------------------------------------------------------


def build_bootstrap_result(args: argparse.Namespace) -> BootstrapResult:
    """Load inputs and assemble everything one bootstrap run emits."""
    algorithm = Algorithm.parse(args.consensus)
    network = NetworkConfig.from_yaml_file(args.network)
    keys = KeyMaterial.from_yaml_file(args.keys)
    if not addresses_equal(network.faucet_wallet_address, keys.faucet.address):
        raise InvalidInputError(
            "faucetWalletAddress",
            f"{network.faucet_wallet_address} does not match the faucet key address "
            f"{keys.faucet.address}",
        )
    extra_allocations = load_allocations(args.allocations) if args.allocations else None

    genesis = assemble(algorithm, network, extra_allocations)
    genesis = genesis.with_extra_data(compute_extra_data(algorithm, keys.validator_addresses))
    logger.info(
        "Assembled %s genesis for chain %d with %d validator(s)",
        algorithm.value,
        network.chain_id,
        len(keys.validators),
    )

    static_nodes = create_static_node_entries(
        keys.validators,
        namespace=args.static_node_namespace,
        domain=args.static_node_domain,
        port=args.static_node_port,
        discovery_port=args.static_node_discovery_port,
    )

    return BootstrapResult(
        faucet=keys.faucet,
        validators=keys.validators,
        genesis=genesis,
        static_nodes=static_nodes,
        interface_bundles=load_interface_bundles(args.abi_directory) if args.abi_directory else (),
        external_index_hash=(
            load_external_index_hash(args.subgraph_hash_file) if args.subgraph_hash_file else None
        ),
        names=ArtifactNames(
            validator_prefix=args.validator_prefix,
            faucet_prefix=args.faucet_prefix,
            genesis_name=args.genesis_configmap_name,
            static_nodes_name=args.static_nodes_configmap_name,
            external_index_name=args.subgraph_configmap_name,
        ),
    )


async def run_bootstrap(args: argparse.Namespace) -> None:
    result = build_bootstrap_result(args)
    artifact_filter = ArtifactFilter.parse(args.artifacts)
    target = OutputTarget(args.output)

    if target is not OutputTarget.KUBERNETES:
        await emit(target, result, artifact_filter=artifact_filter, output_root=args.output_dir)
        return

    async with open_store() as store:
        await emit(target, result, artifact_filter=artifact_filter, store=store)


# -------------------------------------------------------------------------
# download-abi
# -------------------------------------------------------------------------


async def run_download_abi(args: argparse.Namespace) -> None:
    directory = Path(str(args.output_directory).strip() or DEFAULT_ABI_DIRECTORY)
    async with open_store() as store:
        logger.info("Using namespace %s; writing to %s", store.namespace, directory)
        directory.mkdir(parents=True, exist_ok=True)
        totals = await ArtifactSynchronizer(store, DirectorySink(directory)).run()

    if totals.objects == 0:
        logger.info("No ABI ConfigMaps found.")
    else:
        logger.info("Synced %d ConfigMaps with %d files.", totals.objects, totals.entries)


# -------------------------------------------------------------------------
# compile-genesis
# -------------------------------------------------------------------------


async def run_compile_genesis(args: argparse.Namespace) -> None:
    async with open_store() as store:
        await compile_genesis(store, args.genesis_configmap_name, args.output_path)


def build_parser() -> argparse.ArgumentParser:
    """Argument parser with one subparser per command."""
    defaults = ArtifactNames()

    parser = argparse.ArgumentParser(
        prog="genesis-kit",
        description="Besu BFT network bootstrap and artifact exchange",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--no-color", action="store_true", help="Disable colored logging output")
    commands = parser.add_subparsers(dest="command", required=True)

    bootstrap = commands.add_parser("bootstrap", help="Assemble genesis and emit artifacts")
    bootstrap.add_argument("--network", required=True, type=Path, help="Network config YAML")
    bootstrap.add_argument("--keys", required=True, type=Path, help="Faucet and validator keys YAML")
    bootstrap.add_argument(
        "--consensus",
        default=Algorithm.QBFT.value,
        choices=[algorithm.value for algorithm in Algorithm],
        help="Consensus algorithm (default: QBFT)",
    )
    bootstrap.add_argument(
        "--output",
        default=OutputTarget.SCREEN.value,
        choices=[target.value for target in OutputTarget],
        help="Output target (default: screen)",
    )
    bootstrap.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Root directory for the file target (default: $GENESIS_KIT_OUTPUT_DIR or ./out)",
    )
    bootstrap.add_argument("--allocations", type=Path, default=None, help="Extra allocations JSON")
    bootstrap.add_argument("--abi-directory", type=Path, default=None, help="Directory of ABI JSON files")
    bootstrap.add_argument("--subgraph-hash-file", type=Path, default=None, help="Subgraph IPFS hash file")
    bootstrap.add_argument(
        "--artifacts",
        default=None,
        help="Comma-separated kinds to emit: genesis,keys,abis,subgraph,allocations (default: all)",
    )
    bootstrap.add_argument("--static-node-namespace", default=None, help="Namespace in static peer hostnames")
    bootstrap.add_argument("--static-node-domain", default=None, help="Cluster domain in static peer hostnames")
    bootstrap.add_argument("--static-node-port", type=int, default=DEFAULT_STATIC_NODE_PORT)
    bootstrap.add_argument("--static-node-discovery-port", type=int, default=DEFAULT_STATIC_NODE_PORT)
    bootstrap.add_argument("--validator-prefix", default=defaults.validator_prefix)
    bootstrap.add_argument("--faucet-prefix", default=defaults.faucet_prefix)
    bootstrap.add_argument("--genesis-configmap-name", default=defaults.genesis_name)
    bootstrap.add_argument("--static-nodes-configmap-name", default=defaults.static_nodes_name)
    bootstrap.add_argument("--subgraph-configmap-name", default=defaults.external_index_name)
    bootstrap.set_defaults(handler=run_bootstrap)

    download = commands.add_parser(
        "download-abi",
        help="Download ConfigMaps annotated settlemint.com/artifact=abi into a directory",
    )
    download.add_argument(
        "--output-directory",
        type=Path,
        default=DEFAULT_ABI_DIRECTORY,
        help=f"Directory to write ABI JSON files (default: {DEFAULT_ABI_DIRECTORY})",
    )
    download.set_defaults(handler=run_download_abi)

    compile_cmd = commands.add_parser(
        "compile-genesis",
        help="Merge per-account allocation ConfigMaps into a genesis file",
    )
    compile_cmd.add_argument(
        "--genesis-configmap-name",
        default=defaults.genesis_name,
        help=f"ConfigMap holding the base genesis (default: {defaults.genesis_name})",
    )
    compile_cmd.add_argument(
        "--output-path",
        type=Path,
        default=DEFAULT_COMPILE_OUTPUT_PATH,
        help=f"Compiled genesis path (default: {DEFAULT_COMPILE_OUTPUT_PATH})",
    )
    compile_cmd.set_defaults(handler=run_compile_genesis)

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose, args.no_color)

    try:
        asyncio.run(args.handler(args))
    except (GenesisKitError, ValidationError, yaml.YAMLError, OSError) as e:
        logger.error("%s", e)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
