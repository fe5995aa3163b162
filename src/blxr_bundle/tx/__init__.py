"""
Transaction module.

Handles signing authorities and decoding of signed transactions.
"""

from blxr_bundle.tx.decoder import (
    BundleSigningError,
    DecodedTransaction,
    DecodeError,
    decode_transaction,
    derive_tx_hash,
)
from blxr_bundle.tx.signer import LocalAccountSigner, TransactionSigner

__all__ = [
    "BundleSigningError",
    "DecodedTransaction",
    "DecodeError",
    "decode_transaction",
    "derive_tx_hash",
    "LocalAccountSigner",
    "TransactionSigner",
]
