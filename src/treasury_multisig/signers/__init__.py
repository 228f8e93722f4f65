"""
Signer resolution, signature accounting and signing.
"""

from .directory import AccountDirectory, AuthorizationPolicy, SignerRecord, policy_from_account
from .accounting import (
    SignerMatch,
    SignatureReport,
    matched_signers,
    collected_weight,
    signature_report,
    verify_signatures,
    attribute_signatures,
    find_excess_signature,
    guard_excess_signatures,
)
from .signing import sign_envelope

__all__ = [
    "AccountDirectory",
    "AuthorizationPolicy",
    "SignerRecord",
    "policy_from_account",
    "SignerMatch",
    "SignatureReport",
    "matched_signers",
    "collected_weight",
    "signature_report",
    "verify_signatures",
    "attribute_signatures",
    "find_excess_signature",
    "guard_excess_signatures",
    "sign_envelope",
]
