"""
Core bundle components.

This module contains the bundle item model, nonce-consistent bundle
signing and fee helpers.
"""

from blxr_bundle.core.items import (
    BundleItem,
    BundleItemKind,
    RawSignedTransaction,
    UnsignedTransaction,
)
from blxr_bundle.core.bundle_signer import BundleSigner, InvalidNonceError
from blxr_bundle.core.fees import get_max_base_fee_in_future_block

__all__ = [
    "BundleItem",
    "BundleItemKind",
    "RawSignedTransaction",
    "UnsignedTransaction",
    "BundleSigner",
    "InvalidNonceError",
    "get_max_base_fee_in_future_block",
]
