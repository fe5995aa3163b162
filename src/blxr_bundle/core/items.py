"""
Bundle item model.

A bundle mixes transactions that are already signed with transaction
requests that still need a signature.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from web3.types import TxParams

from blxr_bundle.tx.signer import TransactionSigner


class BundleItemKind(str, Enum):
    """Variant tag of a bundle item."""
    RAW_SIGNED = "raw_signed"    # Opaque signed encoding
    UNSIGNED = "unsigned"        # Request plus the authority that signs it


@dataclass(frozen=True)
class RawSignedTransaction:
    """
    A transaction signed elsewhere.

    Attributes:
        signed_transaction: Hex encoding, with or without 0x
    """
    signed_transaction: str
    kind: BundleItemKind = field(default=BundleItemKind.RAW_SIGNED, init=False)


@dataclass(frozen=True)
class UnsignedTransaction:
    """
    A transaction request to be signed while assembling the bundle.

    Attributes:
        transaction: web3-style transaction params (to, value, data,
            optional nonce/gas/fee fields)
        signer: Authority that owns the sending address
    """
    transaction: TxParams
    signer: TransactionSigner
    kind: BundleItemKind = field(default=BundleItemKind.UNSIGNED, init=False)


BundleItem = Union[RawSignedTransaction, UnsignedTransaction]
