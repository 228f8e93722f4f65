"""
Treasury Multisig - transaction validation for a governed Stellar treasury

Validates proposed multi-signature transactions and the signatures added to
them over time: envelope decoding, source account and fee policy, signing
time windows, sequence freshness, weighted threshold accounting and the
amendment protocol for accepted proposals.
"""

from .config import TreasuryConfig
from .codec import (
    TransactionEnvelope,
    SignatureEntry,
    TimeBounds,
    encode,
    encode_text,
    decode,
    decode_text,
    network_id,
    transaction_identifier,
)
from .crypto import Ed25519PrivateKey, Ed25519PublicKey
from .engine import ReadinessReport, ValidationEngine
from .ledger import HorizonClient, LedgerAccount, LedgerClient, TransactionStatus
from .runtime.address import AccountId
from .runtime.errors import *
from .signers import AccountDirectory, AuthorizationPolicy, SignerRecord, sign_envelope
from .transaction import Purpose, ValidatedTransaction
from .update import UpdateProtocol, is_unchanged

__version__ = "0.3.0"
__all__ = [
    "TreasuryConfig",
    "TransactionEnvelope",
    "SignatureEntry",
    "TimeBounds",
    "encode",
    "encode_text",
    "decode",
    "decode_text",
    "network_id",
    "transaction_identifier",
    "Ed25519PrivateKey",
    "Ed25519PublicKey",
    "ReadinessReport",
    "ValidationEngine",
    "HorizonClient",
    "LedgerAccount",
    "LedgerClient",
    "TransactionStatus",
    "AccountId",
    "AccountDirectory",
    "AuthorizationPolicy",
    "SignerRecord",
    "sign_envelope",
    "Purpose",
    "ValidatedTransaction",
    "UpdateProtocol",
    "is_unchanged",

    # Errors
    "ErrorCode",
    "TreasuryError",
    "DecodeError",
    "AuthorizationError",
    "PolicyError",
    "FetchError",
    "UpdateError",
    "ErrorHandler",
]
