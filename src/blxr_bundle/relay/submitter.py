"""
Relay Submitter - sends signed bundles to the relay.
"""

from typing import Any, Dict, Optional, Sequence

import structlog

from blxr_bundle.config import BlockchainNetwork
from blxr_bundle.relay.client import (
    RelayClient,
    RelayMethod,
    is_error_response,
    to_relay_encoding,
)

logger = structlog.get_logger(__name__)

DEFAULT_MEV_BUILDERS = {"all": ""}


class RelaySubmitter:
    """Submits bundles targeting a specific block."""

    def __init__(self, client: RelayClient, network: BlockchainNetwork):
        self.client = client
        self.network = BlockchainNetwork(network)

    def build_params(
        self,
        signed_bundle: Sequence[str],
        target_block_number: int,
        blocks_count: Optional[int] = None,
        mev_builders: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Build blxr_submit_bundle params."""
        params: Dict[str, Any] = {
            "transaction": to_relay_encoding(signed_bundle),
            "blockchain_network": self.network.value,
            "block_number": hex(target_block_number),
            "mev_builders": mev_builders or dict(DEFAULT_MEV_BUILDERS),
        }
        if blocks_count:
            params["blocks_count"] = blocks_count
        return params

    async def submit(
        self,
        signed_bundle: Sequence[str],
        target_block_number: int,
        blocks_count: Optional[int] = None,
        mev_builders: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Send a signed bundle to the relay.

        Args:
            signed_bundle: Signed encodings, hex with or without 0x
            target_block_number: Block the bundle targets
            blocks_count: Number of consecutive blocks to keep trying
            mev_builders: Builder routing, all builders by default

        Returns:
            Relay reply, or {"error": {...}} on failure
        """
        request = self.client.prepare_request(
            RelayMethod.SUBMIT_BUNDLE,
            self.build_params(signed_bundle, target_block_number, blocks_count, mev_builders),
        )
        response = await self.client.request(self.client.config.relay_url, "POST", request)

        if is_error_response(response):
            logger.warning("bundle_submit_failed", block=target_block_number, error=response["error"])
        else:
            logger.info(
                "bundle_submitted",
                block=target_block_number,
                size=len(signed_bundle),
                request_id=request["id"],
            )
        return response
