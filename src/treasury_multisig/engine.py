"""
Validation engine for treasury transactions.

Orchestrates decoding, policy guards, signer resolution and signature
accounting into the create, update and publication-readiness checks exposed
to callers. Guards run in a fixed order and the first failure is returned
unchanged; nothing is retried or reclassified here.

Creation order: Source -> Fee -> TimeWindow -> Sequence -> Signatures -> Excess.
"""

from __future__ import annotations
import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Union

import requests

from .codec.envelope import TransactionEnvelope, decode
from .codec.hashes import transaction_identifier
from .config import TreasuryConfig
from .ledger.client import LedgerClient
from .ledger.horizon import HorizonClient
from .policy.guards import guard_fee, guard_sequence, guard_source_account, guard_time_window
from .runtime.address import source_public_key
from .runtime.errors import ContentChangedError, NotChangedError, TreasuryError
from .signers.accounting import SignerMatch, guard_excess_signatures, signature_report, verify_signatures
from .signers.directory import AccountDirectory
from .transaction import Purpose, ValidatedTransaction
from .update import UpdateProtocol, is_unchanged

logger = logging.getLogger(__name__)

RawTransaction = Union[bytes, bytearray, str, TransactionEnvelope]


@dataclass(frozen=True)
class ReadinessReport:
    """Whether enough weight has been collected to publish."""
    identifier: str
    collected_weight: int
    required_threshold: int
    signers: List[SignerMatch]
    unmatched_signatures: int = 0

    @property
    def ready(self) -> bool:
        return self.unmatched_signatures == 0 and self.collected_weight >= self.required_threshold

    @property
    def missing_weight(self) -> int:
        return max(0, self.required_threshold - self.collected_weight)


def _current_time() -> int:
    return int(time.time())


class ValidationEngine:
    """
    Validates treasury transactions against live ledger state.

    Example:
        ```python
        engine = ValidationEngine.from_config(TreasuryConfig())
        created = engine.validate_for_creation(base64_xdr)
        report = engine.validate_for_publication_readiness(created)
        ```
    """

    def __init__(self, config: TreasuryConfig, ledger: LedgerClient,
                 clock: Optional[Callable[[], int]] = None):
        """
        Initialize the engine.

        Args:
            config: Validation policy configuration
            ledger: Ledger query client; it owns timeout handling
            clock: Returns current unix time in seconds
        """
        self.config = config
        self.ledger = ledger
        self.directory = AccountDirectory(ledger)
        self.update_protocol = UpdateProtocol(self.directory, config.network_id)
        self._clock = clock or _current_time

    @classmethod
    def from_config(cls, config: TreasuryConfig, session: Optional[requests.Session] = None,
                    clock: Optional[Callable[[], int]] = None) -> ValidationEngine:
        """Engine querying the configured Horizon server within the configured timeout."""
        return cls(config, HorizonClient.from_config(config, session=session), clock=clock)

    def _decode(self, raw: RawTransaction) -> TransactionEnvelope:
        if isinstance(raw, TransactionEnvelope):
            return raw
        return decode(raw)

    def identifier(self, envelope: TransactionEnvelope) -> bytes:
        return transaction_identifier(envelope, self.config.network_id)

    def validate_for_creation(self, raw: RawTransaction) -> ValidatedTransaction:
        """
        Validate a newly proposed transaction.

        Under-signed transactions are accepted; malformed, unauthorized and
        over-signed ones are not.

        Raises:
            DecodeError, AuthorizationError, PolicyError: Definitive rejections
            FetchError: Transient ledger failures
        """
        try:
            envelope = self._decode(raw)
            source = guard_source_account(envelope, self.config, self.directory)
            guard_fee(envelope, self.config.min_fee, self.config.max_fee)
            guard_time_window(envelope, self.config.signing_window, self._clock())
            guard_sequence(envelope, source, self.ledger)
            policy = self.directory.resolve(source)
            verify_signatures(envelope, policy, self.config.network_id)
            guard_excess_signatures(envelope, policy, self.config.network_id)
        except TreasuryError as e:
            logger.warning(f"Rejected new transaction: {e}")
            raise

        validated = ValidatedTransaction(
            envelope=envelope,
            identifier=self.identifier(envelope),
            source=source,
            purpose=Purpose.CREATION,
        )
        logger.info(f"Accepted transaction {validated.hex_id} from {source}")
        return validated

    def validate_for_update(self, stored: ValidatedTransaction,
                            raw: RawTransaction) -> ValidatedTransaction:
        """
        Validate an amendment of a stored transaction.

        The time window is not re-checked: it shrinks naturally while
        signatures are being collected.

        Raises:
            DecodeError, AuthorizationError, PolicyError: Definitive rejections
            UpdateError: If the candidate is not a legitimate amendment
            FetchError: Transient ledger failures
        """
        if not isinstance(stored, ValidatedTransaction):
            raise TypeError("stored must be a ValidatedTransaction")

        try:
            envelope = self._decode(raw)
            source = guard_source_account(envelope, self.config, self.directory)
            guard_fee(envelope, self.config.min_fee, self.config.max_fee)
            guard_sequence(envelope, source, self.ledger)
            policy = self.directory.resolve(source)
            verify_signatures(envelope, policy, self.config.network_id)
            added = self.update_protocol.validate_update(stored, envelope)
            if is_unchanged(stored, envelope):
                raise NotChangedError(details={"txid": stored.hex_id})
        except TreasuryError as e:
            logger.warning(f"Rejected update of {stored.hex_id}: {e}")
            raise

        logger.info(f"Accepted update of {stored.hex_id} adding {len(added)} signatures")
        return ValidatedTransaction(
            envelope=envelope,
            identifier=stored.identifier,
            source=source,
            purpose=Purpose.UPDATE,
        )

    def validate_for_publication_readiness(self, validated: ValidatedTransaction) -> ReadinessReport:
        """
        Recompute signature weight against the live signer set.

        Every signature is verified again; those no current signer verifies
        are counted as unmatched and keep the transaction from being ready.

        Not being ready is an expected state while approvals are collected and
        is reported, not raised.

        Raises:
            FetchError: If the signer set cannot be fetched
        """
        if not isinstance(validated, ValidatedTransaction):
            raise TypeError("Readiness can only be computed for a ValidatedTransaction")

        policy = self.directory.resolve(validated.source)
        report = signature_report(validated.envelope, policy, self.config.network_id)
        return ReadinessReport(
            identifier=validated.hex_id,
            collected_weight=report.collected_weight,
            required_threshold=report.required_threshold,
            signers=[m for m in report.matches if m.signer.is_voting],
            unmatched_signatures=report.unmatched_signatures,
        )

    def is_published(self, validated: ValidatedTransaction) -> bool:
        """
        Whether the transaction was successfully applied on the ledger.

        Raises:
            FetchError: If the status query fails
        """
        if not isinstance(validated, ValidatedTransaction):
            raise TypeError("Publication status requires a ValidatedTransaction")
        return self.ledger.query_transaction_status(validated.identifier).successful

    def restore(self, raw: RawTransaction, identifier: Union[bytes, str]) -> ValidatedTransaction:
        """
        Wrap a previously accepted envelope loaded from storage.

        The decoded body must hash to the identifier it was stored under.
        Policy guards are not re-run; use this only for bodies that were
        validated before they were stored.

        Args:
            raw: Stored envelope
            identifier: Identifier the envelope was stored under, raw or hex

        Raises:
            DecodeError: If the stored data is not a supported envelope
            ContentChangedError: If the body does not match the identifier
            WrongSourceAccountError: If the source account is multiplexed
        """
        envelope = self._decode(raw)
        expected = bytes.fromhex(identifier) if isinstance(identifier, str) else bytes(identifier)
        actual = self.identifier(envelope)
        if actual != expected:
            raise ContentChangedError(
                "Stored transaction does not match its identifier",
                details={"expected": expected.hex(), "actual": actual.hex()},
            )
        return ValidatedTransaction(
            envelope=envelope,
            identifier=actual,
            source=source_public_key(envelope.source_account),
            purpose=Purpose.STORED,
        )
