"""
Update protocol for accepted transactions.

An update may only add signatures to a previously accepted transaction:
the transaction body must be unchanged, no signature may disappear, and a
new signature is rejected once the threshold was already covered without it.
"""

from __future__ import annotations
import logging
from typing import List

from .codec.envelope import SignatureEntry, TransactionEnvelope, encode
from .codec.hashes import transaction_identifier
from .runtime.errors import ContentChangedError, SignatureRemovedError
from .signers.accounting import attribute_signatures, guard_excess_signatures
from .signers.directory import AccountDirectory, AuthorizationPolicy
from .transaction import ValidatedTransaction

logger = logging.getLogger(__name__)


def is_unchanged(stored: ValidatedTransaction, candidate: TransactionEnvelope) -> bool:
    """Whether the candidate is byte-identical to the stored version."""
    return stored.to_bytes() == encode(candidate)


def accepted_prefix(stored: ValidatedTransaction, candidate: TransactionEnvelope,
                    policy: AuthorizationPolicy, net_id: bytes) -> int:
    """
    Number of stored signers exempt from the excess rule on the candidate.

    Only signatures that lead the candidate unchanged, in their stored order,
    are exempt. A candidate that reorders them, or puts new signatures in
    front of them, gets no exemption.
    """
    stored_signatures = stored.envelope.signatures
    if candidate.signatures[:len(stored_signatures)] != stored_signatures:
        return 0
    signers = attribute_signatures(stored.envelope, policy, net_id)
    return len({s.public_key for s in signers if s is not None})


class UpdateProtocol:
    """Validates amendments of stored transactions against live signer data."""

    def __init__(self, directory: AccountDirectory, net_id: bytes):
        self.directory = directory
        self.net_id = net_id

    def validate_update(self, stored: ValidatedTransaction,
                        candidate: TransactionEnvelope) -> List[SignatureEntry]:
        """
        Check that the candidate is a legitimate amendment of the stored transaction.

        Detecting a byte-identical resubmission is left to the caller, see
        is_unchanged.

        Returns:
            Signatures the candidate adds, in attachment order

        Raises:
            ContentChangedError: If the transaction body differs
            SignatureRemovedError: If a stored signature is missing from the candidate
            ExcessSignaturesError: If a new signature is superfluous
            FetchError: If the source account's signers cannot be fetched
        """
        if transaction_identifier(candidate, self.net_id) != stored.identifier:
            raise ContentChangedError(details={"txid": stored.hex_id})

        candidate_hints = candidate.signature_hints()
        stored_hints = stored.envelope.signature_hints()
        for hint in stored_hints:
            if hint not in candidate_hints:
                raise SignatureRemovedError(details={"txid": stored.hex_id, "hint": hint.hex()})

        policy = self.directory.resolve(stored.source)
        guard_excess_signatures(candidate, policy, self.net_id,
                                exempt_prefix=accepted_prefix(stored, candidate, policy, self.net_id))

        stored_entries = set(stored.envelope.signatures)
        added = [s for s in candidate.signatures if s not in stored_entries]
        logger.debug(f"Update of {stored.hex_id} adds {len(added)} signatures")
        return added
