"""
Command-line interface for the bloXroute bundle client.

Provides commands for submitting, simulating and tracing bundles.
"""

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
from typing import Any, Optional, Union

import structlog

from blxr_bundle import __version__
from blxr_bundle.config import BlockchainNetwork, RelayConfig, get_config, set_config
from blxr_bundle.core.fees import get_max_base_fee_in_future_block
from blxr_bundle.node.interface import BlockNotFoundError, NodeConnectionError
from blxr_bundle.node.web3_node import Web3NodeAdapter
from blxr_bundle.provider import BlxrBundleProvider
from blxr_bundle.tx.decoder import derive_tx_hash


def setup_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Configure structured logging."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if json_format
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Logs go to stderr, command output to stdout
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper()),
        stream=sys.stderr,
    )


def parse_block_tag(value: str) -> Union[int, str]:
    """Accept decimal or 0x block numbers, or a tag such as "latest"."""
    try:
        return int(value, 0)
    except ValueError:
        return value


def print_json(data: Any) -> None:
    if dataclasses.is_dataclass(data) and not isinstance(data, type):
        data = dataclasses.asdict(data)
    print(json.dumps(data, indent=2, default=str))


def _add_connection_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--network",
        choices=[n.value for n in BlockchainNetwork],
        help="Relay network (default: from config, Mainnet)",
    )
    parser.add_argument(
        "--api-key",
        help="bloXroute authorization header (default: BLXR_API_KEY)",
    )
    parser.add_argument(
        "--node-url",
        help="Chain node JSON-RPC URL (default: BLXR_NODE_RPC_URL)",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="blxr-bundle",
        description="Submit, simulate and trace bloXroute bundles",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Output logs in JSON format",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Submit command
    submit_parser = subparsers.add_parser("submit", help="Submit signed transactions as a bundle")
    _add_connection_args(submit_parser)
    submit_parser.add_argument(
        "--tx",
        action="append",
        required=True,
        help="Signed transaction hex (repeat for each bundle entry)",
    )
    submit_parser.add_argument(
        "--block",
        type=lambda v: int(v, 0),
        help="Target block number (default: next block)",
    )
    submit_parser.add_argument(
        "--blocks-count",
        type=int,
        help="Number of consecutive blocks to target",
    )
    submit_parser.add_argument(
        "--builder",
        action="append",
        help="MEV builder to route to (repeatable, default: all)",
    )

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Simulate signed transactions as a bundle")
    _add_connection_args(simulate_parser)
    simulate_parser.add_argument(
        "--tx",
        action="append",
        required=True,
        help="Signed transaction hex (repeat for each bundle entry)",
    )
    simulate_parser.add_argument(
        "--block",
        type=parse_block_tag,
        default="latest",
        help="Block number or tag to simulate on (default: latest)",
    )
    simulate_parser.add_argument(
        "--state-block",
        type=parse_block_tag,
        help="Block number or tag for the starting state (default: latest)",
    )
    simulate_parser.add_argument(
        "--timestamp",
        type=int,
        help="Block timestamp to simulate with",
    )

    # Trace command
    trace_parser = subparsers.add_parser("trace", help="Fetch the trace of a bundle")
    _add_connection_args(trace_parser)
    trace_parser.add_argument("bundle_hash", help="Bundle hash")

    # Tx hash command
    hash_parser = subparsers.add_parser("tx-hash", help="Derive the hash of a signed transaction")
    hash_parser.add_argument("signed_transaction", help="Signed transaction hex")

    # Max base fee command
    fee_parser = subparsers.add_parser("max-base-fee", help="Maximum base fee in a future block")
    _add_connection_args(fee_parser)
    fee_parser.add_argument(
        "--blocks-ahead",
        type=int,
        default=1,
        help="Number of blocks in the future (default: 1)",
    )
    fee_parser.add_argument(
        "--base-fee",
        type=int,
        help="Current base fee in wei (default: from the latest block)",
    )

    return parser


def build_config(args: argparse.Namespace) -> RelayConfig:
    """Overlay command-line options on the environment configuration."""
    overrides = {}
    if getattr(args, "network", None):
        overrides["network"] = BlockchainNetwork(args.network)
    if getattr(args, "api_key", None):
        overrides["api_key"] = args.api_key
    if getattr(args, "node_url", None):
        overrides["node_rpc_url"] = args.node_url
    config = get_config().model_copy(update=overrides)
    set_config(config)
    return config


async def submit_bundle(args: argparse.Namespace) -> Any:
    """Submit a signed bundle."""
    config = build_config(args)
    mev_builders: Optional[dict] = None
    if args.builder:
        mev_builders = {name: "" for name in args.builder}

    async with BlxrBundleProvider(config) as provider:
        target_block = args.block
        if target_block is None:
            target_block = await provider.node.get_block_number() + 1
        return await provider.send_raw_bundle(
            args.tx,
            target_block,
            blocks_count=args.blocks_count,
            mev_builders=mev_builders,
        )


async def simulate_bundle(args: argparse.Namespace) -> Any:
    """Simulate a signed bundle."""
    config = build_config(args)
    async with BlxrBundleProvider(config) as provider:
        return await provider.simulate(
            args.tx,
            args.block,
            state_block_tag=args.state_block,
            block_timestamp=args.timestamp,
        )


async def trace_bundle(args: argparse.Namespace) -> Any:
    """Fetch a bundle trace."""
    config = build_config(args)
    async with BlxrBundleProvider(config) as provider:
        return await provider.trace_bundle(args.bundle_hash)


async def max_base_fee(args: argparse.Namespace) -> Any:
    """Project the base fee a number of blocks ahead."""
    base_fee = args.base_fee
    if base_fee is None:
        node = Web3NodeAdapter(build_config(args))
        try:
            block = await node.get_block("latest")
        finally:
            await node.disconnect()
        if block is None or block.base_fee_per_gas is None:
            raise ValueError("Latest block has no base fee")
        base_fee = block.base_fee_per_gas

    return {
        "base_fee": base_fee,
        "blocks_ahead": args.blocks_ahead,
        "max_base_fee": get_max_base_fee_in_future_block(base_fee, args.blocks_ahead),
    }


def main() -> None:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    setup_logging(args.log_level, args.log_json)

    try:
        if args.command == "submit":
            print_json(asyncio.run(submit_bundle(args)))
        elif args.command == "simulate":
            print_json(asyncio.run(simulate_bundle(args)))
        elif args.command == "trace":
            print_json(asyncio.run(trace_bundle(args)))
        elif args.command == "tx-hash":
            print(derive_tx_hash(args.signed_transaction))
        elif args.command == "max-base-fee":
            print_json(asyncio.run(max_base_fee(args)))
    except (ValueError, NodeConnectionError, BlockNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
