"""
Trace Fetcher - retrieves bundle traces from the relay tools endpoint.
"""

from typing import Any

import structlog

from blxr_bundle.config import BlockchainNetwork
from blxr_bundle.relay.client import RelayClient

logger = structlog.get_logger(__name__)

TRACE_ACTIONS = {
    BlockchainNetwork.MAINNET: "ethbundletrace",
    BlockchainNetwork.BSC_MAINNET: "bscbundletrace",
}


class TraceFetcher:
    """Fetches execution traces for submitted bundles."""

    def __init__(self, client: RelayClient, network: BlockchainNetwork):
        self.client = client
        self.network = BlockchainNetwork(network)

    @property
    def action(self) -> str:
        return TRACE_ACTIONS[self.network]

    def trace_url(self, bundle_hash: str) -> str:
        base_url = self.client.config.trace_url.rstrip("/")
        return f"{base_url}/{self.action}/{bundle_hash}"

    async def trace(self, bundle_hash: str) -> Any:
        """
        Get trace details of a bundle.

        Args:
            bundle_hash: Hash of the bundle

        Returns:
            Raw relay reply, or {"error": {...}} on failure
        """
        logger.debug("bundle_trace_requested", bundle_hash=bundle_hash, network=self.network.value)
        return await self.client.request(self.trace_url(bundle_hash), "GET")
