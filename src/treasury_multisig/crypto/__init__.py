"""
Cryptographic primitives for treasury signers.
"""

from .ed25519 import Ed25519PublicKey, Ed25519PrivateKey, Ed25519Error, HINT_SIZE

__all__ = [
    "Ed25519PublicKey",
    "Ed25519PrivateKey",
    "Ed25519Error",
    "HINT_SIZE",
]
