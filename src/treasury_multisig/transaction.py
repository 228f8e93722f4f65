"""
Validated transaction handle.

A ValidatedTransaction is an envelope that passed the policy guards for a
given purpose. Publication-sensitive operations only accept this type, never
a raw envelope.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

from .codec.envelope import TransactionEnvelope, encode, encode_text
from .runtime.address import AccountId


class Purpose(Enum):
    """Why a transaction was validated."""
    CREATION = "creation"
    UPDATE = "update"
    STORED = "stored"


@dataclass(frozen=True)
class ValidatedTransaction:
    envelope: TransactionEnvelope
    identifier: bytes
    source: AccountId
    purpose: Purpose

    @property
    def hex_id(self) -> str:
        return self.identifier.hex()

    def to_bytes(self) -> bytes:
        return encode(self.envelope)

    def to_text(self) -> str:
        return encode_text(self.envelope)

    def same_encoding(self, other: ValidatedTransaction) -> bool:
        """True if both carry byte-identical envelopes, signatures included."""
        return self.to_bytes() == other.to_bytes()

    def __repr__(self) -> str:
        return f"ValidatedTransaction({self.hex_id[:16]}..., purpose={self.purpose.value})"
