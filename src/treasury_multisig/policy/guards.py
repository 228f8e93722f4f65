"""
Policy guards for treasury transactions.

Each guard checks one property of a decoded envelope and raises a specific
failure. Guards never call each other; the validation engine composes them.
"""

from __future__ import annotations
import logging
from typing import Optional

from ..codec.envelope import TimeBounds, TransactionEnvelope
from ..config import TreasuryConfig
from ..ledger.client import LedgerClient
from ..runtime.address import AccountId, source_public_key
from ..runtime.errors import (
    InsufficientTimeWindowError,
    NonStandardFeeError,
    StaleSequenceError,
    WrongSourceAccountError,
)
from ..signers.directory import AccountDirectory

logger = logging.getLogger(__name__)


def guard_source_account(envelope: TransactionEnvelope, config: TreasuryConfig,
                         directory: AccountDirectory) -> AccountId:
    """
    Check that the transaction originates from a treasury-related account.

    Allowed are the configured treasury accounts and any account whose key is
    a voting signer of the treasury account. The treasury signer set is only
    fetched when the source is not on the allow-list.

    Returns:
        The source account

    Raises:
        WrongSourceAccountError: If the source is multiplexed or unrelated
        FetchError: If the treasury signer set cannot be fetched
    """
    source = source_public_key(envelope.source_account)
    if config.is_allowed_source(source):
        logger.debug(f"Source {source} is an allow-listed treasury account")
        return source

    treasury = directory.resolve(config.treasury_account)
    if treasury.has_voting_key(source):
        logger.debug(f"Source {source} is a voting signer of {config.treasury_account}")
        return source

    raise WrongSourceAccountError(details={"source": str(source)})


def guard_fee(envelope: TransactionEnvelope, min_fee: int, max_fee: int) -> None:
    """
    Check that the declared fee lies in the inclusive [min_fee, max_fee] range.

    Raises:
        NonStandardFeeError: If the fee is out of range
    """
    if envelope.fee < min_fee or envelope.fee > max_fee:
        raise NonStandardFeeError(details={"fee": envelope.fee, "min": min_fee, "max": max_fee})


def has_time_window(bounds: Optional[TimeBounds], window: int, current: int) -> bool:
    """
    Whether signers have at least `window` seconds left to sign.

    A transaction without time bounds, or without an upper bound, always has
    enough time.
    """
    if bounds is None:
        return True
    if bounds.min_time == 0 and bounds.max_time > 0:
        return bounds.max_time >= current + window
    if bounds.max_time > 0:
        adjust_min = max(current, bounds.min_time)
        return bounds.max_time >= adjust_min + window
    return True


def guard_time_window(envelope: TransactionEnvelope, window: int, current: int) -> None:
    """
    Raises:
        InsufficientTimeWindowError: If less than `window` seconds remain for signing
    """
    if not has_time_window(envelope.time_bounds, window, current):
        bounds = envelope.time_bounds
        raise InsufficientTimeWindowError(details={
            "min_time": bounds.min_time,
            "max_time": bounds.max_time,
            "now": current,
            "window": window,
        })


def guard_sequence(envelope: TransactionEnvelope, source: AccountId, ledger: LedgerClient) -> None:
    """
    Check that the transaction's sequence number has not been consumed.

    Raises:
        StaleSequenceError: If the account's next sequence number is ahead of the transaction's
        FetchError: If the sequence number cannot be fetched
    """
    next_sequence = ledger.fetch_next_sequence_number(source)
    if next_sequence > envelope.sequence:
        raise StaleSequenceError(details={"expected": next_sequence, "actual": envelope.sequence})
