"""
Hash Functions

SHA-256 helpers and the network-scoped transaction identifier. The identifier
is the hash the ledger signs: the XDR of the signature payload made of the
network id and the tagged transaction body.
"""

import hashlib
from typing import Union

from stellar_sdk import xdr as stellar_xdr

from .envelope import TransactionEnvelope

PUBLIC_NETWORK_PASSPHRASE = "Public Global Stellar Network ; September 2015"
TESTNET_NETWORK_PASSPHRASE = "Test SDF Network ; September 2015"


def sha256_bytes(input_bytes: bytes) -> bytes:
    """
    Compute SHA-256 hash of input bytes.

    Args:
        input_bytes: Input bytes to hash

    Returns:
        SHA-256 hash as bytes (32 bytes)
    """
    return hashlib.sha256(input_bytes).digest()


def network_id(passphrase: Union[str, bytes]) -> bytes:
    """Network identifier: SHA-256 of the network passphrase."""
    if isinstance(passphrase, str):
        passphrase = passphrase.encode('utf-8')
    return sha256_bytes(passphrase)


def signature_payload(envelope: TransactionEnvelope, net_id: bytes) -> bytes:
    """
    Serialize the network-scoped signature payload for an envelope.

    Args:
        envelope: Decoded envelope
        net_id: 32-byte network identifier

    Returns:
        Canonical XDR bytes of the payload
    """
    if len(net_id) != 32:
        raise ValueError(f"Network id must be 32 bytes, got {len(net_id)}")
    payload = stellar_xdr.TransactionSignaturePayload(
        network_id=stellar_xdr.Hash(net_id),
        tagged_transaction=stellar_xdr.TransactionSignaturePayloadTaggedTransaction(
            type=stellar_xdr.EnvelopeType.ENVELOPE_TYPE_TX,
            tx=envelope.transaction(),
        ),
    )
    return payload.to_xdr_bytes()


def transaction_identifier(envelope: TransactionEnvelope, net_id: bytes) -> bytes:
    """
    Canonical 32-byte transaction identifier.

    Depends only on the transaction body and the network, never on the
    attached signatures.
    """
    return sha256_bytes(signature_payload(envelope, net_id))


def transaction_identifier_hex(envelope: TransactionEnvelope, net_id: bytes) -> str:
    return transaction_identifier(envelope, net_id).hex()
