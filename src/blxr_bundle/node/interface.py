"""
Abstract interface for chain node access.

Defines the contract for the node queries the bundle client depends on.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Union

from web3.types import TxParams

BlockIdentifier = Union[int, str]


@dataclass
class BlockInfo:
    """Subset of block header fields used by the client."""
    number: int
    hash: str
    timestamp: int
    base_fee_per_gas: Optional[int] = None   # None before London / on chains without it


class NodeInterface(ABC):
    """
    Abstract interface for chain node access.

    This interface defines the blockchain queries needed by the client:
    - Pending nonce lookup
    - Gas estimation
    - Block lookup by number or tag
    """

    async def connect(self) -> None:
        """Establish connection to the node."""

    async def disconnect(self) -> None:
        """Close connection to the node."""

    @abstractmethod
    async def get_transaction_count(
        self,
        address: str,
        block_identifier: BlockIdentifier = "pending",
    ) -> int:
        """
        Get the transaction count (nonce) of an address.

        Args:
            address: Checksum address
            block_identifier: Block number or tag, "pending" by default

        Returns:
            Number of transactions sent from the address
        """
        pass

    @abstractmethod
    async def estimate_gas(self, transaction: TxParams) -> int:
        """
        Estimate the gas limit for a transaction.

        Args:
            transaction: Transaction parameters, including "from"

        Returns:
            Estimated gas units
        """
        pass

    @abstractmethod
    async def get_block(self, block_identifier: BlockIdentifier) -> Optional[BlockInfo]:
        """
        Get a block by number or tag.

        Args:
            block_identifier: Block number, hash or tag ("latest", "pending", ...)

        Returns:
            Block details if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_block_number(self) -> int:
        """Get the number of the most recent block."""
        pass


class NodeConnectionError(Exception):
    """Raised when a node query fails."""
    pass


class BlockNotFoundError(Exception):
    """Raised when neither the requested nor the latest block can be fetched."""
    pass
