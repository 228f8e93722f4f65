"""
Codec module for transaction envelopes.

Binary and base64 XDR encoding plus network-scoped transaction identifiers.
"""

from .envelope import (
    TransactionEnvelope,
    SignatureEntry,
    TimeBounds,
    encode,
    encode_text,
    decode,
    decode_text,
)
from .hashes import (
    PUBLIC_NETWORK_PASSPHRASE,
    TESTNET_NETWORK_PASSPHRASE,
    sha256_bytes,
    network_id,
    signature_payload,
    transaction_identifier,
    transaction_identifier_hex,
)

__all__ = [
    "TransactionEnvelope",
    "SignatureEntry",
    "TimeBounds",
    "encode",
    "encode_text",
    "decode",
    "decode_text",
    "PUBLIC_NETWORK_PASSPHRASE",
    "TESTNET_NETWORK_PASSPHRASE",
    "sha256_bytes",
    "network_id",
    "signature_payload",
    "transaction_identifier",
    "transaction_identifier_hex",
]
