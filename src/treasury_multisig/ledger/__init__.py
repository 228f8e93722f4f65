"""
Ledger query service clients.
"""

from .client import (
    ED25519_SIGNER,
    LedgerAccount,
    LedgerClient,
    LedgerSigner,
    LedgerThresholds,
    TransactionStatus,
)
from .horizon import HorizonClient

__all__ = [
    "ED25519_SIGNER",
    "LedgerAccount",
    "LedgerClient",
    "LedgerSigner",
    "LedgerThresholds",
    "TransactionStatus",
    "HorizonClient",
]
