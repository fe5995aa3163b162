"""
Transaction Signer - signing authorities for bundle transactions.

Wraps eth-account keys behind an async interface so bundle assembly can
treat local keys and remote signers the same way.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import structlog
from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3.types import TxParams

from blxr_bundle.config import RelayConfig, get_config
from blxr_bundle.node.interface import NodeInterface

logger = structlog.get_logger(__name__)


class TransactionSigner(ABC):
    """
    Abstract signing authority.

    A signer knows its address, can ask the chain for a gas estimate and
    produces signed transaction encodings.
    """

    @abstractmethod
    async def get_address(self) -> str:
        """Return the checksum address of the signer."""
        pass

    @abstractmethod
    async def estimate_gas(self, transaction: TxParams) -> int:
        """Estimate gas for a transaction sent from this signer."""
        pass

    @abstractmethod
    async def sign_transaction(self, transaction: TxParams) -> bytes:
        """
        Sign a fully populated transaction.

        Args:
            transaction: Transaction with nonce, gas and fee fields set

        Returns:
            Signed transaction encoding
        """
        pass


class LocalAccountSigner(TransactionSigner):
    """
    Signs with a private key held in memory.

    Gas estimation is delegated to the node the signer was built with.
    """

    def __init__(self, account: LocalAccount, node: NodeInterface):
        """
        Initialize the signer.

        Args:
            account: eth-account local account
            node: Node used for gas estimation
        """
        self._account = account
        self.node = node

    @classmethod
    def from_key(cls, private_key: str, node: NodeInterface) -> "LocalAccountSigner":
        """Build a signer from a hex private key."""
        account = Account.from_key(private_key)
        logger.info("signing_key_loaded", address=account.address)
        return cls(account, node)

    @classmethod
    def from_config(
        cls,
        node: NodeInterface,
        config: Optional[RelayConfig] = None,
    ) -> "LocalAccountSigner":
        """Load the signing key from configuration."""
        config = config or get_config()
        if not config.wallet_private_key:
            raise ValueError("No signing key configured")
        return cls.from_key(config.wallet_private_key, node)

    @property
    def address(self) -> str:
        """Get the signer's address."""
        return self._account.address

    async def get_address(self) -> str:
        return self._account.address

    async def estimate_gas(self, transaction: TxParams) -> int:
        request: Dict[str, Any] = dict(transaction)
        request["from"] = self._account.address
        return await self.node.estimate_gas(request)

    async def sign_transaction(self, transaction: TxParams) -> bytes:
        tx: Dict[str, Any] = dict(transaction)

        # eth-account treats any explicit "type" as a typed envelope
        if tx.get("type") in (0, "0x0", "0x00"):
            del tx["type"]

        sender = tx.pop("from", None)
        if sender is not None and sender.lower() != self._account.address.lower():
            raise ValueError(
                f"Transaction from {sender} cannot be signed by {self._account.address}"
            )

        signed = self._account.sign_transaction(tx)
        logger.debug(
            "transaction_signed",
            address=self._account.address,
            nonce=tx.get("nonce"),
            tx_hash="0x" + bytes(signed.hash).hex(),
        )
        return bytes(signed.raw_transaction)


def generate_test_key(node: NodeInterface) -> LocalAccountSigner:
    """
    Generate a new random signing key for testing.

    WARNING: Do not use in production. The key is not persisted.

    Args:
        node: Node used for gas estimation

    Returns:
        LocalAccountSigner with a new random key
    """
    signer = LocalAccountSigner(Account.create(), node)
    logger.warning("test_key_generated", address=signer.address)
    return signer
