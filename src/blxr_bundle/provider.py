"""
Main bundle provider.

Coordinates signing, submission, simulation and tracing behind one object.
"""

from typing import Any, Dict, List, Optional, Sequence, Union

import structlog

from blxr_bundle.config import BlockchainNetwork, RelayConfig, get_config
from blxr_bundle.core.bundle_signer import BundleSigner
from blxr_bundle.core.fees import get_max_base_fee_in_future_block
from blxr_bundle.core.items import BundleItem
from blxr_bundle.node.interface import BlockIdentifier, NodeInterface
from blxr_bundle.node.web3_node import Web3NodeAdapter
from blxr_bundle.relay.client import RelayClient
from blxr_bundle.relay.simulator import RelayError, RelaySimulator, SimulationResult
from blxr_bundle.relay.submitter import RelaySubmitter
from blxr_bundle.relay.trace import TraceFetcher
from blxr_bundle.tx.decoder import derive_tx_hash

logger = structlog.get_logger(__name__)


class BlxrBundleProvider:
    """
    bloXroute bundle provider.

    Coordinates the bundle components:
    - Nonce-consistent bundle signing
    - Bundle submission
    - Bundle simulation
    - Bundle tracing

    Usage:
        ```python
        node = Web3NodeAdapter(config)
        async with BlxrBundleProvider.create(api_key, node) as provider:
            signed = await provider.sign_bundle([
                UnsignedTransaction(transaction=tx, signer=signer),
                RawSignedTransaction("0x02f8..."),
            ])
            block = await node.get_block_number()
            await provider.send_raw_bundle(signed, block + 1)
        ```
    """

    def __init__(
        self,
        config: Optional[RelayConfig] = None,
        node: Optional[NodeInterface] = None,
        client: Optional[RelayClient] = None,
        network: Optional[BlockchainNetwork] = None,
    ):
        """
        Initialize the provider.

        Args:
            config: Client configuration
            node: Chain node (auto-created from config if not provided)
            client: Relay client (auto-created from config if not provided)
            network: Network override, config.network by default
        """
        self.config = config or get_config()
        self.network = BlockchainNetwork(network or self.config.network)
        self.node = node or Web3NodeAdapter(self.config)
        self.client = client or RelayClient(self.config)

        self.signer = BundleSigner(self.node)
        self.submitter = RelaySubmitter(self.client, self.network)
        self.simulator = RelaySimulator(self.client, self.node, self.network)
        self.tracer = TraceFetcher(self.client, self.network)

    @classmethod
    def create(
        cls,
        api_key: str,
        node: NodeInterface,
        network: BlockchainNetwork = BlockchainNetwork.MAINNET,
        config: Optional[RelayConfig] = None,
    ) -> "BlxrBundleProvider":
        """
        Create a provider for an API key and node.

        Args:
            api_key: bloXroute authorization header value
            node: Chain node
            network: Target network, Ethereum mainnet by default
            config: Base configuration for URLs and timeouts
        """
        config = config or get_config()
        client = RelayClient(config, api_key=api_key)
        return cls(config=config, node=node, client=client, network=network)

    async def close(self) -> None:
        """Close the relay client and node connection."""
        await self.client.disconnect()
        await self.node.disconnect()

    async def __aenter__(self) -> "BlxrBundleProvider":
        await self.client.connect()
        await self.node.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @staticmethod
    def get_max_base_fee_in_future_block(base_fee: int, blocks_in_future: int) -> int:
        """Upper bound of the base fee a number of blocks ahead."""
        return get_max_base_fee_in_future_block(base_fee, blocks_in_future)

    @staticmethod
    def derive_tx_hash(signed_transaction: str) -> str:
        """Transaction hash of a raw signed transaction."""
        return derive_tx_hash(signed_transaction)

    async def sign_bundle(self, items: Sequence[BundleItem]) -> List[str]:
        """Sign bundle items, keeping nonces consistent per sender."""
        return await self.signer.sign(items)

    async def send_raw_bundle(
        self,
        signed_bundle: Sequence[str],
        target_block_number: int,
        blocks_count: Optional[int] = None,
        mev_builders: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Submit an already signed bundle."""
        return await self.submitter.submit(
            signed_bundle,
            target_block_number,
            blocks_count=blocks_count,
            mev_builders=mev_builders,
        )

    async def send_bundle(
        self,
        items: Sequence[BundleItem],
        target_block_number: int,
        blocks_count: Optional[int] = None,
        mev_builders: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Sign bundle items and submit them."""
        signed_bundle = await self.sign_bundle(items)
        return await self.send_raw_bundle(
            signed_bundle,
            target_block_number,
            blocks_count=blocks_count,
            mev_builders=mev_builders,
        )

    async def simulate(
        self,
        signed_bundle: Sequence[str],
        block_tag: BlockIdentifier,
        state_block_tag: Optional[BlockIdentifier] = None,
        block_timestamp: Optional[int] = None,
    ) -> Union[SimulationResult, RelayError]:
        """Simulate a signed bundle."""
        return await self.simulator.simulate(
            signed_bundle,
            block_tag,
            state_block_tag=state_block_tag,
            block_timestamp=block_timestamp,
        )

    async def trace_bundle(self, bundle_hash: str) -> Any:
        """Get trace details of a bundle."""
        return await self.tracer.trace(bundle_hash)
