r"""
Account directory for treasury authorization.

Resolves an account's live signer set and high threshold through the ledger
client. Policies are fetched fresh on every call and never cached.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union
import logging

from ..crypto.ed25519 import Ed25519PublicKey, Ed25519Error
from ..ledger.client import ED25519_SIGNER, LedgerAccount, LedgerClient
from ..runtime.address import AccountId
from ..runtime.errors import UnsupportedSignerKeyError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignerRecord:
    """One authorized party on an account."""
    public_key: Ed25519PublicKey
    weight: int

    def __post_init__(self):
        if self.weight < 0:
            raise ValueError(f"Signer weight must be non-negative, got {self.weight}")

    @property
    def is_voting(self) -> bool:
        """Zero weight signers have no voting power."""
        return self.weight > 0

    @property
    def hint(self) -> bytes:
        return self.public_key.signature_hint()

    @property
    def account_id(self) -> AccountId:
        return self.public_key.to_account_id()


@dataclass(frozen=True)
class AuthorizationPolicy:
    """Signer set plus the cumulative weight required to authorize."""
    account: AccountId
    signers: Tuple[SignerRecord, ...]
    required_threshold: int

    def voting_signers(self) -> List[SignerRecord]:
        """Signers with nonzero weight, as shown to humans."""
        return [s for s in self.signers if s.is_voting]

    def find(self, public_key: Union[Ed25519PublicKey, AccountId, str]) -> Optional[SignerRecord]:
        if not isinstance(public_key, Ed25519PublicKey):
            public_key = Ed25519PublicKey.from_account_id(public_key)
        for signer in self.signers:
            if signer.public_key == public_key:
                return signer
        return None

    def has_voting_key(self, public_key: Union[Ed25519PublicKey, AccountId, str]) -> bool:
        signer = self.find(public_key)
        return signer is not None and signer.is_voting

    def candidates_for_hint(self, hint: bytes) -> List[SignerRecord]:
        """All signers whose fingerprint matches; collisions are possible."""
        return [s for s in self.signers if s.hint == hint]

    @property
    def total_voting_weight(self) -> int:
        return sum(s.weight for s in self.signers if s.is_voting)


def policy_from_account(account: LedgerAccount) -> AuthorizationPolicy:
    """
    Build an authorization policy from a ledger account record.

    Raises:
        UnsupportedSignerKeyError: If a voting signer is not an Ed25519 key
    """
    signers = []
    for entry in account.signers:
        if entry.type != ED25519_SIGNER:
            if entry.weight == 0:
                continue
            raise UnsupportedSignerKeyError(details={"key": entry.key, "type": entry.type})
        try:
            public_key = Ed25519PublicKey.from_account_id(entry.key)
        except (ValueError, Ed25519Error) as e:
            raise UnsupportedSignerKeyError(details={"key": entry.key}, cause=e) from e
        signers.append(SignerRecord(public_key, entry.weight))

    return AuthorizationPolicy(
        account=AccountId(account.account_id),
        signers=tuple(signers),
        required_threshold=account.high_threshold,
    )


class AccountDirectory:
    """
    Resolves authorization policies from the live ledger.

    Holds no state besides the client; every resolve is a fresh fetch.
    """

    def __init__(self, ledger: LedgerClient):
        self.ledger = ledger

    def resolve(self, account_id: Union[AccountId, str]) -> AuthorizationPolicy:
        """
        Fetch the current signer set and high threshold of an account.

        Raises:
            FetchError: If the ledger query fails or times out
            UnsupportedSignerKeyError: If the signer set cannot be used for signing
        """
        account = self.ledger.fetch_account(account_id)
        policy = policy_from_account(account)
        logger.debug(
            f"Resolved {account_id}: {len(policy.voting_signers())} voting signers, "
            f"threshold {policy.required_threshold}"
        )
        return policy
