r"""
Signature accounting for treasury transactions.

Matches the signatures attached to an envelope against an authorization
policy, verifies them cryptographically, sums collected weight and applies
the excess-signature rule.

Signature hints are only four bytes of the signing key, so distinct keys can
share a hint. A hint match is never trusted on its own: every attached
signature must verify against one of the keys its hint points to.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional
import logging

from ..codec.envelope import TransactionEnvelope
from ..codec.hashes import transaction_identifier
from ..runtime.errors import ExcessSignaturesError, InvalidSignatureError
from .directory import AuthorizationPolicy, SignerRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignerMatch:
    """A policy signer and whether the envelope carries its verified signature."""
    signer: SignerRecord
    is_signed: bool


@dataclass(frozen=True)
class SignatureReport:
    """Weight accounting of an envelope against a policy."""
    matches: List[SignerMatch]
    collected_weight: int
    required_threshold: int
    unmatched_signatures: int = 0

    @property
    def is_satisfied(self) -> bool:
        return self.collected_weight >= self.required_threshold

    @property
    def signed(self) -> List[SignerRecord]:
        return [m.signer for m in self.matches if m.is_signed]

    @property
    def missing_weight(self) -> int:
        return max(0, self.required_threshold - self.collected_weight)


def attribute_signatures(envelope: TransactionEnvelope, policy: AuthorizationPolicy,
                         net_id: bytes) -> List[Optional[SignerRecord]]:
    """
    Find the signer that actually made each attached signature.

    Every signer whose hint matches is tried; the one whose key verifies the
    signature over the transaction hash wins.

    Returns:
        One entry per attached signature in attachment order, None where no
        policy signer verifies it
    """
    tx_hash = transaction_identifier(envelope, net_id)
    attributed = []
    for entry in envelope.signatures:
        candidates = policy.candidates_for_hint(entry.hint)
        if len(candidates) > 1:
            logger.warning(
                f"Signature hint {entry.hint.hex()} matches {len(candidates)} signers of {policy.account}"
            )
        attributed.append(next(
            (c for c in candidates if c.public_key.verify(entry.signature, tx_hash)),
            None
        ))
    return attributed


def _matches_from(attributed: List[Optional[SignerRecord]],
                  policy: AuthorizationPolicy) -> List[SignerMatch]:
    seen = set()
    result = []
    for signer in attributed:
        if signer is None or signer.public_key in seen:
            continue
        seen.add(signer.public_key)
        result.append(SignerMatch(signer, True))

    for signer in policy.signers:
        if signer.public_key not in seen:
            result.append(SignerMatch(signer, False))
    return result


def matched_signers(envelope: TransactionEnvelope, policy: AuthorizationPolicy,
                    net_id: bytes) -> List[SignerMatch]:
    """
    Match attached signatures against the policy's signers.

    A signer counts as signed only when one of the attached signatures
    verifies against its key; sharing a hint is not enough. Signed records
    come first, in the order their signatures were attached, each signer once
    however many signatures it made. Unsigned records follow in policy order.
    """
    return _matches_from(attribute_signatures(envelope, policy, net_id), policy)


def collected_weight(matches: List[SignerMatch]) -> int:
    """Sum of weights of signed, voting signers."""
    return sum(m.signer.weight for m in matches if m.is_signed and m.signer.is_voting)


def signature_report(envelope: TransactionEnvelope, policy: AuthorizationPolicy,
                     net_id: bytes) -> SignatureReport:
    attributed = attribute_signatures(envelope, policy, net_id)
    matches = _matches_from(attributed, policy)
    return SignatureReport(
        matches=matches,
        collected_weight=collected_weight(matches),
        required_threshold=policy.required_threshold,
        unmatched_signatures=sum(1 for signer in attributed if signer is None),
    )


def verify_signatures(envelope: TransactionEnvelope, policy: AuthorizationPolicy,
                      net_id: bytes) -> List[SignerRecord]:
    """
    Verify every attached signature against the policy's keys.

    Returns:
        The verified signer for each signature, in attachment order

    Raises:
        InvalidSignatureError: If any signature fails to verify
    """
    attributed = attribute_signatures(envelope, policy, net_id)
    for index, (entry, signer) in enumerate(zip(envelope.signatures, attributed)):
        if signer is None:
            raise InvalidSignatureError(details={"index": index, "hint": entry.hint.hex()})

    logger.debug(f"Verified {len(attributed)} signatures")
    return attributed


def find_excess_signature(matches: List[SignerMatch], required: int,
                          exempt_prefix: int = 0) -> Optional[SignerRecord]:
    """
    Find the first signature added after the threshold was already met.

    Signed signers are walked in attachment order with a running total. A
    signature is excess when the total met the threshold before it and still
    meets it with its weight added.

    At creation nothing is exempt, so any over-signing is rejected. On update
    the signers of the stored version are exempt when they are the unchanged
    leading signatures of the candidate: earlier approvals are not
    re-litigated when live weights shift, but their weight still counts, so
    a new signature is rejected once the threshold was covered without it.

    Args:
        matches: Output of matched_signers
        required: Threshold to meet
        exempt_prefix: Number of leading signed signers that are never excess

    Returns:
        The first excess signer, or None
    """
    accum = 0
    signed = [m.signer for m in matches if m.is_signed]
    for position, signer in enumerate(signed):
        if not signer.is_voting:
            continue
        if position >= exempt_prefix and accum >= required and accum + signer.weight >= required:
            return signer
        accum += signer.weight
    return None


def guard_excess_signatures(envelope: TransactionEnvelope, policy: AuthorizationPolicy,
                            net_id: bytes, exempt_prefix: int = 0) -> None:
    """
    Check that the transaction has just enough signatures to authorize.

    Raises:
        ExcessSignaturesError: If a signature was added after the threshold was met
    """
    matches = matched_signers(envelope, policy, net_id)
    excess = find_excess_signature(matches, policy.required_threshold, exempt_prefix)
    if excess is not None:
        raise ExcessSignaturesError(details={
            "signer": str(excess.account_id),
            "required": policy.required_threshold,
        })
