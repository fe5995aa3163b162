"""
bloXroute Bundle Client

Formats, signs and submits transaction bundles to the bloXroute relay
and interprets its simulation results.
"""

__version__ = "0.1.0"

from blxr_bundle.config import BlockchainNetwork, RelayConfig
from blxr_bundle.core.items import RawSignedTransaction, UnsignedTransaction
from blxr_bundle.core.bundle_signer import BundleSigner, InvalidNonceError
from blxr_bundle.provider import BlxrBundleProvider
from blxr_bundle.tx.decoder import BundleSigningError, DecodeError

__all__ = [
    "BlockchainNetwork",
    "RelayConfig",
    "RawSignedTransaction",
    "UnsignedTransaction",
    "BundleSigner",
    "InvalidNonceError",
    "BlxrBundleProvider",
    "BundleSigningError",
    "DecodeError",
]
