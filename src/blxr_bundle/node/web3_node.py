"""
web3.py adapter for node integration.

Provides chain access through an asynchronous JSON-RPC HTTP provider.
"""

import asyncio
from typing import Any, Awaitable, Optional

import structlog
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.exceptions import BlockNotFound, Web3Exception
from web3.types import TxParams

from blxr_bundle.config import RelayConfig, get_config
from blxr_bundle.node.interface import (
    BlockIdentifier,
    BlockInfo,
    NodeConnectionError,
    NodeInterface,
)

logger = structlog.get_logger(__name__)


class Web3NodeAdapter(NodeInterface):
    """
    web3.py adapter.

    Implements the NodeInterface using AsyncWeb3 over HTTP.
    """

    def __init__(
        self,
        config: Optional[RelayConfig] = None,
        w3: Optional[AsyncWeb3] = None,
    ):
        """
        Initialize the web3 adapter.

        Args:
            config: Client configuration. Uses global config if not provided.
            w3: Pre-built AsyncWeb3 instance (skips provider creation)
        """
        self.config = config or get_config()
        self.rpc_url = self.config.node_rpc_url
        self._w3: Optional[AsyncWeb3] = w3

    async def connect(self) -> None:
        """Create the web3 instance."""
        if self._w3 is not None:
            return

        self._w3 = AsyncWeb3(AsyncHTTPProvider(self.rpc_url))
        logger.info("node_connected", rpc_url=self.rpc_url)

    async def disconnect(self) -> None:
        """Close the provider session and drop the web3 instance."""
        if self._w3 is not None:
            await self._w3.provider.disconnect()
            self._w3 = None
            logger.info("node_disconnected")

    async def _call(self, name: str, awaitable: Awaitable[Any]) -> Any:
        """Await a web3 call and map failures to NodeConnectionError."""
        try:
            return await awaitable
        except (Web3Exception, OSError, ValueError, asyncio.TimeoutError) as e:
            logger.error("node_request_failed", call=name, error=str(e))
            raise NodeConnectionError(f"Node request {name} failed: {e}") from e

    async def _eth(self):
        if self._w3 is None:
            await self.connect()
        return self._w3.eth

    async def get_transaction_count(
        self,
        address: str,
        block_identifier: BlockIdentifier = "pending",
    ) -> int:
        """Get the nonce of an address."""
        eth = await self._eth()
        count = await self._call(
            "get_transaction_count",
            eth.get_transaction_count(AsyncWeb3.to_checksum_address(address), block_identifier),
        )
        logger.debug("nonce_fetched", address=address, nonce=count)
        return int(count)

    async def estimate_gas(self, transaction: TxParams) -> int:
        """Estimate gas for a transaction."""
        eth = await self._eth()
        gas = await self._call("estimate_gas", eth.estimate_gas(transaction))
        return int(gas)

    async def get_block(self, block_identifier: BlockIdentifier) -> Optional[BlockInfo]:
        """Get a block, None if the node does not know it."""
        eth = await self._eth()
        try:
            block = await eth.get_block(block_identifier)
        except BlockNotFound:
            return None
        except (Web3Exception, OSError, ValueError, asyncio.TimeoutError) as e:
            logger.error("node_request_failed", call="get_block", error=str(e))
            raise NodeConnectionError(f"Node request get_block failed: {e}") from e

        if block is None:
            return None

        block_hash = block.get("hash")
        return BlockInfo(
            number=int(block["number"]),
            hash=block_hash.to_0x_hex() if hasattr(block_hash, "to_0x_hex") else str(block_hash),
            timestamp=int(block["timestamp"]),
            base_fee_per_gas=block.get("baseFeePerGas"),
        )

    async def get_block_number(self) -> int:
        """Get the latest block number."""
        eth = await self._eth()
        return int(await self._call("get_block_number", eth.block_number))
