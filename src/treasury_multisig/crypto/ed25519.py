r"""
Ed25519 cryptographic operations for treasury signers.

Provides Ed25519 verification against attached envelope signatures, signing
for proposers, and the ledger's signature hint derivation.
"""

from __future__ import annotations
import hashlib
from typing import Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey as CryptoEd25519PrivateKey,
    Ed25519PublicKey as CryptoEd25519PublicKey
)
from cryptography.hazmat.primitives import serialization

from ..runtime.address import AccountId

HINT_SIZE = 4


class Ed25519Error(Exception):
    """Base exception for Ed25519 operations."""
    pass


class Ed25519PublicKey:
    """
    Ed25519 public key.

    Provides verification operations and serialization.
    """

    def __init__(self, public_key_bytes: bytes):
        """
        Initialize from 32-byte public key.

        Args:
            public_key_bytes: 32-byte Ed25519 public key

        Raises:
            Ed25519Error: If key is invalid
        """
        if len(public_key_bytes) != 32:
            raise Ed25519Error(f"Ed25519 public key must be 32 bytes, got {len(public_key_bytes)}")

        self._key_bytes = bytes(public_key_bytes)
        try:
            self._crypto_key = CryptoEd25519PublicKey.from_public_bytes(self._key_bytes)
        except ValueError as e:
            raise Ed25519Error(f"Invalid Ed25519 public key: {e}")

    @classmethod
    def from_account_id(cls, account: Union[AccountId, str]) -> Ed25519PublicKey:
        """Create public key from a G... account address."""
        if not isinstance(account, AccountId):
            account = AccountId(account)
        return cls(account.raw_key)

    @classmethod
    def from_hex(cls, hex_string: str) -> Ed25519PublicKey:
        """Create public key from hex string."""
        try:
            key_bytes = bytes.fromhex(hex_string)
        except ValueError as e:
            raise Ed25519Error(f"Invalid hex string: {e}")
        return cls(key_bytes)

    def to_bytes(self) -> bytes:
        """Get the 32-byte public key."""
        return self._key_bytes

    def to_account_id(self) -> AccountId:
        return AccountId.from_raw(self._key_bytes)

    def signature_hint(self) -> bytes:
        """
        Fingerprint attached next to each signature on an envelope.

        The ledger uses the last four bytes of the key's XDR form, which are
        the last four bytes of the raw key.
        """
        return self._key_bytes[-HINT_SIZE:]

    def verify(self, signature: bytes, message: bytes) -> bool:
        """
        Verify a signature against a message.

        Args:
            signature: 64-byte Ed25519 signature
            message: Message that was signed

        Returns:
            True if signature is valid
        """
        if len(signature) != 64:
            return False

        try:
            self._crypto_key.verify(signature, message)
        except InvalidSignature:
            return False
        return True

    def __eq__(self, other) -> bool:
        if not isinstance(other, Ed25519PublicKey):
            return False
        return self._key_bytes == other._key_bytes

    def __hash__(self) -> int:
        return hash(self._key_bytes)

    def __str__(self) -> str:
        return str(self.to_account_id())

    def __repr__(self) -> str:
        return f"Ed25519PublicKey.from_account_id('{self.to_account_id()}')"


class Ed25519PrivateKey:
    """
    Ed25519 private key.

    Provides signing operations for proposers adding their signature.
    """

    def __init__(self, private_key_bytes: bytes):
        """
        Initialize from 32-byte private key seed.

        Args:
            private_key_bytes: 32-byte Ed25519 private key seed

        Raises:
            Ed25519Error: If key is invalid
        """
        if len(private_key_bytes) != 32:
            raise Ed25519Error(f"Ed25519 private key must be 32 bytes, got {len(private_key_bytes)}")

        self._key_bytes = bytes(private_key_bytes)
        self._crypto_key = CryptoEd25519PrivateKey.from_private_bytes(self._key_bytes)
        self._public_key = Ed25519PublicKey(
            self._crypto_key.public_key().public_bytes(
                encoding=serialization.Encoding.Raw,
                format=serialization.PublicFormat.Raw
            )
        )

    @classmethod
    def generate(cls) -> Ed25519PrivateKey:
        """Generate a new random Ed25519 private key."""
        crypto_key = CryptoEd25519PrivateKey.generate()
        private_bytes = crypto_key.private_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PrivateFormat.Raw,
            encryption_algorithm=serialization.NoEncryption()
        )
        return cls(private_bytes)

    @classmethod
    def from_seed(cls, seed: Union[bytes, str]) -> Ed25519PrivateKey:
        """
        Derive a private key deterministically from a seed.

        Seeds that are not exactly 32 bytes are hashed with SHA-256 first.
        """
        if isinstance(seed, str):
            seed = seed.encode('utf-8')
        if len(seed) != 32:
            seed = hashlib.sha256(seed).digest()
        return cls(seed)

    def public_key(self) -> Ed25519PublicKey:
        return self._public_key

    def sign(self, message: bytes) -> bytes:
        """Sign a message, returning the 64-byte signature."""
        return self._crypto_key.sign(message)

    def __repr__(self) -> str:
        return f"Ed25519PrivateKey(public={self._public_key.to_account_id()})"
