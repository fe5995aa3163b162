"""
Bundle Signer - turns bundle items into signed encodings.

Keeps nonces consistent for senders that appear several times in one
bundle, whether their earlier entries were pre-signed or signed here.
"""

import re
from typing import Any, Dict, List, Optional, Sequence

import structlog
from eth_utils import remove_0x_prefix

from blxr_bundle.core.items import BundleItem, RawSignedTransaction, UnsignedTransaction
from blxr_bundle.node.interface import NodeInterface
from blxr_bundle.tx.decoder import BundleSigningError, decode_transaction

logger = structlog.get_logger(__name__)

FEE_FIELDS = ("gasPrice", "maxFeePerGas", "maxPriorityFeePerGas")

DECIMAL_NONCE = re.compile(r"[0-9]+")
HEX_NONCE = re.compile(r"0[xX][0-9a-fA-F]+")


class InvalidNonceError(BundleSigningError):
    """Raised when an explicit nonce is not a non-negative integer."""
    pass


def parse_nonce(value: Any) -> int:
    """
    Validate an explicit nonce.

    Accepts integers, decimal strings ("7", "07") and 0x hex strings ("0x7").

    Raises:
        InvalidNonceError: For anything else
    """
    if isinstance(value, bool):
        raise InvalidNonceError(f"Bad nonce: {value!r}")

    if isinstance(value, int):
        nonce = value
    elif isinstance(value, str):
        text = value.strip()
        if DECIMAL_NONCE.fullmatch(text):
            nonce = int(text, 10)
        elif HEX_NONCE.fullmatch(text):
            nonce = int(text, 16)
        else:
            raise InvalidNonceError(f"Bad nonce: {value!r}")
    else:
        raise InvalidNonceError(f"Bad nonce: {value!r}")

    if nonce < 0:
        raise InvalidNonceError(f"Bad nonce: {value!r}")
    return nonce


def _needs_default_gas_price(transaction: Dict[str, Any]) -> bool:
    """Legacy request with no fee information at all."""
    tx_type = transaction.get("type")
    if tx_type is not None and int(str(tx_type), 0) != 0:
        return False
    if tx_type is not None:
        return transaction.get("gasPrice") is None
    return all(transaction.get(name) is None for name in FEE_FIELDS)


class BundleSigner:
    """
    Signs a bundle in order.

    The nonce table lives for a single sign() call. Items are processed
    strictly sequentially since each nonce depends on the ones before it.
    """

    def __init__(self, node: NodeInterface):
        """
        Initialize the bundle signer.

        Args:
            node: Node queried for pending nonces of unseen senders
        """
        self.node = node

    async def sign(self, items: Sequence[BundleItem]) -> List[str]:
        """
        Sign a bundle.

        Args:
            items: Raw signed and unsigned items, in execution order

        Returns:
            Signed encodings as hex without 0x, one per item, same order

        Raises:
            DecodeError: If a pre-signed transaction cannot be decoded
            InvalidNonceError: If an explicit nonce is malformed
        """
        nonces: Dict[str, int] = {}
        signed_transactions: List[str] = []

        for index, item in enumerate(items):
            if isinstance(item, RawSignedTransaction):
                signed = self._add_raw(item, nonces)
            elif isinstance(item, UnsignedTransaction):
                signed = await self._sign_unsigned(item, nonces)
            else:
                raise TypeError(f"Unsupported bundle item at index {index}: {type(item).__name__}")
            signed_transactions.append(signed)

        logger.debug("bundle_signed", size=len(signed_transactions), senders=len(nonces))
        return signed_transactions

    def _add_raw(self, item: RawSignedTransaction, nonces: Dict[str, int]) -> str:
        # Decoded only to keep the nonce table right for later unsigned items
        details = decode_transaction(item.signed_transaction)
        nonces[details.sender] = details.nonce + 1
        signed = item.signed_transaction
        if isinstance(signed, (bytes, bytearray)):
            return bytes(signed).hex()
        return remove_0x_prefix(signed)

    async def _sign_unsigned(self, item: UnsignedTransaction, nonces: Dict[str, int]) -> str:
        transaction: Dict[str, Any] = dict(item.transaction)
        explicit = transaction.get("nonce")
        explicit_nonce = parse_nonce(explicit) if explicit is not None else None
        address = await item.signer.get_address()

        nonce = await self._resolve_nonce(address, explicit_nonce, nonces)
        nonces[address] = nonce + 1
        transaction["nonce"] = nonce

        if _needs_default_gas_price(transaction):
            transaction["gasPrice"] = 0
        if transaction.get("gas") is None:
            # TODO: pass target block number and timestamp once eth_estimateGas supports them
            transaction["gas"] = await item.signer.estimate_gas(transaction)

        signed = await item.signer.sign_transaction(transaction)
        return bytes(signed).hex()

    async def _resolve_nonce(
        self,
        address: str,
        explicit: Optional[int],
        nonces: Dict[str, int],
    ) -> int:
        if explicit is not None:
            return explicit
        if address in nonces:
            return nonces[address]
        return await self.node.get_transaction_count(address, "pending")
