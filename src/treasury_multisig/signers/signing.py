"""
Envelope signing for treasury signers.
"""

from __future__ import annotations

from ..codec.envelope import SignatureEntry, TransactionEnvelope
from ..codec.hashes import transaction_identifier
from ..crypto.ed25519 import Ed25519PrivateKey


def sign_envelope(envelope: TransactionEnvelope, private_key: Ed25519PrivateKey,
                  net_id: bytes) -> TransactionEnvelope:
    """
    Sign an envelope's transaction hash and append the signature.

    Args:
        envelope: Envelope to sign; it is left untouched
        private_key: Signer's key
        net_id: 32-byte network identifier

    Returns:
        New envelope carrying the additional signature
    """
    tx_hash = transaction_identifier(envelope, net_id)
    entry = SignatureEntry(
        hint=private_key.public_key().signature_hint(),
        signature=private_key.sign(tx_hash),
    )
    return envelope.with_signature(entry)
