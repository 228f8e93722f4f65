"""
Treasury Multisig Error Model

This module provides the error taxonomy for transaction validation. Every
guard and protocol step raises a specific failure kind; the message of each
kind is short enough to be shown to a human signer verbatim.
"""

from __future__ import annotations
from typing import Optional, Dict, Any
from enum import IntEnum


class ErrorCode(IntEnum):
    """Failure kinds grouped by family."""

    # General
    UNKNOWN = 1

    # Decode errors (100-199)
    MALFORMED_ENVELOPE = 100
    DEPRECATED_VERSION = 101
    UNSUPPORTED_TRANSACTION = 102

    # Fetch errors (200-299)
    FETCH_FAILED = 200
    FETCH_TIMEOUT = 201
    ACCOUNT_NOT_FOUND = 202

    # Authorization errors (300-399)
    WRONG_SOURCE_ACCOUNT = 300
    UNSUPPORTED_SIGNER_KEY = 301
    INVALID_SIGNATURE = 302

    # Update errors (400-499)
    CONTENT_CHANGED = 400
    SIGNATURE_REMOVED = 401
    NOT_CHANGED = 402

    # Policy errors (500-599)
    NON_STANDARD_FEE = 500
    INSUFFICIENT_TIME_WINDOW = 501
    STALE_SEQUENCE = 502
    EXCESS_SIGNATURES = 503


class TreasuryError(Exception):
    """
    Base class for all validation failures.

    Carries a failure code, a short message and optional details.
    """

    def __init__(self, message: str, code: ErrorCode = ErrorCode.UNKNOWN,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        """
        Initialize a treasury error.

        Args:
            message: Error message
            code: Error code
            details: Additional error details
            cause: Underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        parts = [f"[{self.code.name}] {self.message}"]
        if self.details:
            parts.append(f"Details: {self.details}")
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        result = {
            "code": self.code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.cause:
            result["cause"] = str(self.cause)
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TreasuryError':
        """Create error from dictionary representation."""
        code = ErrorCode(data.get("code", ErrorCode.UNKNOWN))
        message = data.get("message", "Unknown error")
        details = data.get("details")
        return cls(message, code, details)


# Decode family: fatal, never retried

class DecodeError(TreasuryError):
    """Envelope could not be decoded into a supported transaction."""

    def __init__(self, message: str = "Failed to decode transaction",
                 code: ErrorCode = ErrorCode.MALFORMED_ENVELOPE,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, code, details, cause)


class DeprecatedVersionError(DecodeError):
    """Legacy version 0 envelope."""

    def __init__(self, message: str = "Used version 0 transaction",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.DEPRECATED_VERSION, details, cause)


class UnsupportedTransactionError(DecodeError):
    """Envelope variant other than a plain signed transaction."""

    def __init__(self, message: str = "Unsupported transaction type",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.UNSUPPORTED_TRANSACTION, details, cause)


# Authorization family: fatal

class AuthorizationError(TreasuryError):
    """Transaction or signature is not authorized by the treasury."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.WRONG_SOURCE_ACCOUNT,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, code, details, cause)


class WrongSourceAccountError(AuthorizationError):
    """Source account is not treasury related."""

    def __init__(self, message: str = "Source account is not treasury related",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.WRONG_SOURCE_ACCOUNT, details, cause)


class UnsupportedSignerKeyError(AuthorizationError):
    """Treasury signer list holds a key type that cannot sign envelopes."""

    def __init__(self, message: str = "Unsupported signer key in treasury account",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.UNSUPPORTED_SIGNER_KEY, details, cause)


class InvalidSignatureError(AuthorizationError):
    """Attached signature does not verify against any treasury signer."""

    def __init__(self, message: str = "Transaction carries a signature not made by a treasury signer",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.INVALID_SIGNATURE, details, cause)


# Policy family: fatal, proposer must re-derive the transaction

class PolicyError(TreasuryError):
    """Transaction violates treasury signing policy."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.NON_STANDARD_FEE,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, code, details, cause)


class NonStandardFeeError(PolicyError):
    def __init__(self, message: str = "Transaction has non standard fee",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.NON_STANDARD_FEE, details, cause)


class InsufficientTimeWindowError(PolicyError):
    def __init__(self, message: str = "Transaction has too little time window for signing",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.INSUFFICIENT_TIME_WINDOW, details, cause)


class StaleSequenceError(PolicyError):
    def __init__(self, message: str = "Transaction has overdue sequence number",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.STALE_SEQUENCE, details, cause)


class ExcessSignaturesError(PolicyError):
    def __init__(self, message: str = "Transaction has more signatures than required",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.EXCESS_SIGNATURES, details, cause)


# Fetch family: transient, caller may retry

class FetchError(TreasuryError):
    """Ledger query failed."""

    def __init__(self, message: str = "Failed to request ledger service",
                 code: ErrorCode = ErrorCode.FETCH_FAILED,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, code, details, cause)


class FetchTimeoutError(FetchError):
    def __init__(self, message: str = "Ledger service request timed out",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.FETCH_TIMEOUT, details, cause)


class AccountNotFoundError(FetchError):
    def __init__(self, message: str = "Account not found on ledger",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.ACCOUNT_NOT_FOUND, details, cause)


# Update family: fatal to this amendment attempt

class UpdateError(TreasuryError):
    """Resubmitted transaction is not a legitimate amendment."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.CONTENT_CHANGED,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, code, details, cause)


class ContentChangedError(UpdateError):
    def __init__(self, message: str = "Updated transaction has different content",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.CONTENT_CHANGED, details, cause)


class SignatureRemovedError(UpdateError):
    def __init__(self, message: str = "Updated transaction removes existing signatures",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.SIGNATURE_REMOVED, details, cause)


class NotChangedError(UpdateError):
    def __init__(self, message: str = "Transaction not changed",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.NOT_CHANGED, details, cause)


class ErrorHandler:
    """
    Utility class for handling and categorizing errors.
    """

    @staticmethod
    def is_retryable(error: Exception) -> bool:
        """
        Check if an error is retryable.

        Args:
            error: Exception to check

        Returns:
            True if the error is a transient fetch failure
        """
        if isinstance(error, TreasuryError):
            # Only the fetch family is transient; an unknown account stays unknown
            return isinstance(error, FetchError) and error.code != ErrorCode.ACCOUNT_NOT_FOUND

        import socket
        import ssl
        if isinstance(error, (socket.timeout, socket.gaierror, ssl.SSLError, ConnectionError)):
            return True

        return False


__all__ = [
    "ErrorCode",
    "TreasuryError",
    "DecodeError",
    "DeprecatedVersionError",
    "UnsupportedTransactionError",
    "AuthorizationError",
    "WrongSourceAccountError",
    "UnsupportedSignerKeyError",
    "InvalidSignatureError",
    "PolicyError",
    "NonStandardFeeError",
    "InsufficientTimeWindowError",
    "StaleSequenceError",
    "ExcessSignaturesError",
    "FetchError",
    "FetchTimeoutError",
    "AccountNotFoundError",
    "UpdateError",
    "ContentChangedError",
    "SignatureRemovedError",
    "NotChangedError",
    "ErrorHandler",
]
