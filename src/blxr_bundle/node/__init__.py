"""
Node Integration Layer.

Provides abstracted access to chain data needed while assembling bundles:
nonces, gas estimates and block lookups.
"""

from blxr_bundle.node.interface import (
    BlockInfo,
    BlockNotFoundError,
    NodeConnectionError,
    NodeInterface,
)
from blxr_bundle.node.web3_node import Web3NodeAdapter

__all__ = [
    "BlockInfo",
    "BlockNotFoundError",
    "NodeConnectionError",
    "NodeInterface",
    "Web3NodeAdapter",
]
