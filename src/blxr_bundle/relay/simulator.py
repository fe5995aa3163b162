"""
Relay Simulator - simulates bundles against a given block.

Resolves block tags through the node and reshapes the relay's
simulation reply.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

import structlog

from blxr_bundle.config import BlockchainNetwork
from blxr_bundle.node.interface import BlockIdentifier, BlockNotFoundError, NodeInterface
from blxr_bundle.relay.client import (
    RelayClient,
    RelayMethod,
    is_error_response,
    to_relay_encoding,
)

logger = structlog.get_logger(__name__)


def _to_int(value: Any) -> int:
    """Parse ints given as numbers, decimal strings or 0x strings."""
    if value is None:
        return 0
    if isinstance(value, str):
        return int(value, 0) if value else 0
    return int(value)


@dataclass
class RelayError:
    """Error reported by the relay or the transport."""
    code: int
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"error": {"code": self.code, "message": self.message}}


@dataclass
class SimulationResult:
    """
    Reshaped blxr_simulate_bundle reply.

    Attributes:
        bundle_gas_price: Effective gas price of the bundle
        bundle_hash: Hash identifying the bundle
        coinbase_diff: Coinbase balance change
        eth_sent_to_coinbase: Direct payments to coinbase
        gas_fees: Total gas fees paid
        results: Per-transaction results, in bundle order
        state_block_number: Block whose state was used
        total_gas_used: Sum of gasUsed over results
        first_revert: First result carrying a revert or error, if any
    """
    bundle_gas_price: int
    bundle_hash: Optional[str]
    coinbase_diff: int
    eth_sent_to_coinbase: int
    gas_fees: int
    results: List[Dict[str, Any]] = field(default_factory=list)
    state_block_number: int = 0
    total_gas_used: int = 0
    first_revert: Optional[Dict[str, Any]] = None

    @classmethod
    def from_relay_result(cls, result: Dict[str, Any]) -> "SimulationResult":
        """Build a simulation result from the relay's "result" object."""
        results = list(result.get("results") or [])
        return cls(
            bundle_gas_price=_to_int(result.get("bundleGasPrice")),
            bundle_hash=result.get("bundleHash"),
            coinbase_diff=_to_int(result.get("coinbaseDiff")),
            eth_sent_to_coinbase=_to_int(result.get("ethSentToCoinbase")),
            gas_fees=_to_int(result.get("gasFees")),
            results=results,
            state_block_number=_to_int(result.get("stateBlockNumber")),
            total_gas_used=sum(_to_int(tx.get("gasUsed")) for tx in results),
            first_revert=next(
                (tx for tx in results if "revert" in tx or "error" in tx),
                None,
            ),
        )


class RelaySimulator:
    """Simulates bundles through the relay."""

    def __init__(
        self,
        client: RelayClient,
        node: NodeInterface,
        network: BlockchainNetwork,
    ):
        self.client = client
        self.node = node
        self.network = BlockchainNetwork(network)

    async def resolve_block_number(self, block_tag: BlockIdentifier) -> str:
        """
        Turn a block number or tag into a hex block number.

        Unknown tags fall back to the latest block.

        Raises:
            BlockNotFoundError: If the latest block cannot be fetched either
        """
        if isinstance(block_tag, int):
            return hex(block_tag)

        block = await self.node.get_block(block_tag)
        if block is None:
            block = await self.node.get_block("latest")
        if block is None:
            raise BlockNotFoundError("Unable to get latest block")
        return hex(block.number)

    @staticmethod
    def resolve_state_block(state_block_tag: Optional[BlockIdentifier]) -> str:
        if isinstance(state_block_tag, int):
            return hex(state_block_tag)
        if not state_block_tag:
            return "latest"
        return state_block_tag

    async def simulate(
        self,
        signed_bundle: Sequence[str],
        block_tag: BlockIdentifier,
        state_block_tag: Optional[BlockIdentifier] = None,
        block_timestamp: Optional[int] = None,
    ) -> Union[SimulationResult, RelayError]:
        """
        Simulate a signed bundle.

        Args:
            signed_bundle: Signed encodings, hex with or without 0x
            block_tag: Block number or tag to simulate on
            state_block_tag: Block number or tag for the starting state, "latest" by default
            block_timestamp: Timestamp to simulate the block at

        Returns:
            SimulationResult, or RelayError if the relay reported an error
        """
        params: Dict[str, Any] = {
            "transaction": to_relay_encoding(signed_bundle),
            "block_number": await self.resolve_block_number(block_tag),
            "state_block_number": self.resolve_state_block(state_block_tag),
            "blockchain_network": self.network.value,
        }
        if block_timestamp:
            params["timestamp"] = block_timestamp

        request = self.client.prepare_request(RelayMethod.SIMULATE_BUNDLE, params)
        response = await self.client.request(self.client.config.relay_url, "POST", request)

        if is_error_response(response):
            error = response["error"]
            if not isinstance(error, dict):
                error = {"code": -1, "message": str(error)}
            logger.warning("bundle_simulation_failed", error=error)
            return RelayError(code=error.get("code", -1), message=error.get("message", ""))

        if not isinstance(response, dict) or not isinstance(response.get("result"), dict):
            return RelayError(code=-1, message="rpc error: malformed simulation reply")

        simulation = SimulationResult.from_relay_result(response["result"])
        logger.info(
            "bundle_simulated",
            bundle_hash=simulation.bundle_hash,
            total_gas_used=simulation.total_gas_used,
            reverted=simulation.first_revert is not None,
        )
        return simulation
