"""
Raw transaction decoder.

Recovers sender, nonce and hash from signed transaction encodings,
legacy and typed (EIP-2718) alike.
"""

from dataclasses import dataclass
from typing import Union

import rlp
from eth_account import Account
from eth_utils import big_endian_to_int, keccak, remove_0x_prefix

# First byte of a typed transaction envelope is the type, legacy RLP lists start at 0xc0
MAX_TRANSACTION_TYPE = 0x7F
BLOB_TRANSACTION_TYPE = 0x03


class BundleSigningError(ValueError):
    """Base class for bundle items rejected before anything is sent."""
    pass


class DecodeError(BundleSigningError):
    """Raised when a signed transaction cannot be decoded."""
    pass


@dataclass(frozen=True)
class DecodedTransaction:
    """Fields recovered from a signed transaction."""
    sender: str            # checksum address
    nonce: int
    hash: bytes            # 32-byte keccak hash
    transaction_type: int  # 0 for legacy

    @property
    def hash_hex(self) -> str:
        return "0x" + self.hash.hex()


def to_raw_bytes(signed_transaction: Union[str, bytes]) -> bytes:
    """Convert a hex encoding (with or without 0x) to bytes."""
    if isinstance(signed_transaction, (bytes, bytearray)):
        return bytes(signed_transaction)

    try:
        return bytes.fromhex(remove_0x_prefix(signed_transaction))
    except (AttributeError, TypeError, ValueError) as e:
        raise DecodeError(f"Signed transaction is not valid hex: {e}") from e


def _split_envelope(raw: bytes):
    """Return (type, payload fields, nonce index, hashed bytes)."""
    if raw[0] > MAX_TRANSACTION_TYPE:
        return 0, rlp.decode(raw), 0, raw

    tx_type = raw[0]
    fields = rlp.decode(raw[1:])

    # Blob transactions in network form wrap the payload with blobs/commitments/proofs
    if tx_type == BLOB_TRANSACTION_TYPE and fields and isinstance(fields[0], list):
        fields = fields[0]
        return tx_type, fields, 1, bytes([tx_type]) + rlp.encode(fields)

    return tx_type, fields, 1, raw


def decode_transaction(signed_transaction: Union[str, bytes]) -> DecodedTransaction:
    """
    Decode a signed transaction.

    Args:
        signed_transaction: Hex encoding (with or without 0x) or raw bytes

    Returns:
        DecodedTransaction with sender, nonce and hash

    Raises:
        DecodeError: If the encoding is malformed or the sender cannot be recovered
    """
    raw = to_raw_bytes(signed_transaction)
    if not raw:
        raise DecodeError("Signed transaction is empty")

    try:
        tx_type, fields, nonce_index, hashed = _split_envelope(raw)
    except rlp.exceptions.DecodingError as e:
        raise DecodeError(f"Could not decode signed transaction: {e}") from e

    if not isinstance(fields, list) or len(fields) <= nonce_index or not isinstance(fields[nonce_index], bytes):
        raise DecodeError("Could not decode signed transaction: unexpected field layout")

    try:
        sender = Account.recover_transaction(hashed)
    except Exception as e:
        raise DecodeError(f"Could not decode signed transaction: {e}") from e

    if not sender:
        raise DecodeError("Could not decode signed transaction")

    return DecodedTransaction(
        sender=sender,
        nonce=big_endian_to_int(fields[nonce_index]),
        hash=keccak(hashed),
        transaction_type=tx_type,
    )


def derive_tx_hash(signed_transaction: Union[str, bytes]) -> str:
    """
    Compute the transaction hash of a raw signed transaction.

    Args:
        signed_transaction: Hex encoding (with or without 0x) or raw bytes

    Returns:
        0x-prefixed keccak-256 hash
    """
    return decode_transaction(signed_transaction).hash_hex
