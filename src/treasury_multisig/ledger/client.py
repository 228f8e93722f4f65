"""
Ledger client interface and response models.

The validator only needs three queries from the ledger: account signers and
thresholds, the next sequence number, and the publication status of a
transaction. Each may fail with a FetchError.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List, Union

from pydantic import BaseModel, Field

from ..runtime.address import AccountId

ED25519_SIGNER = "ed25519_public_key"


class LedgerSigner(BaseModel):
    """Signer entry as reported by the ledger."""
    key: str
    weight: int = Field(ge=0)
    type: str = ED25519_SIGNER

    model_config = {"extra": "ignore"}


class LedgerThresholds(BaseModel):
    low_threshold: int = Field(default=0, ge=0, le=255)
    med_threshold: int = Field(default=0, ge=0, le=255)
    high_threshold: int = Field(default=0, ge=0, le=255)

    model_config = {"extra": "ignore"}


class LedgerAccount(BaseModel):
    """Account metadata needed for authorization."""
    account_id: str
    sequence: int
    thresholds: LedgerThresholds = Field(default_factory=LedgerThresholds)
    signers: List[LedgerSigner] = Field(default_factory=list)

    model_config = {"extra": "ignore"}

    @property
    def high_threshold(self) -> int:
        return self.thresholds.high_threshold


class TransactionStatus(BaseModel):
    """Publication status of a transaction on the ledger."""
    found: bool = True
    successful: bool = False

    model_config = {"extra": "ignore"}


class LedgerClient(ABC):
    """
    Abstract ledger query service.

    Implementations must honor their configured timeout and raise FetchError
    (or a subclass) on any transport failure.
    """

    @abstractmethod
    def fetch_account(self, account_id: Union[AccountId, str]) -> LedgerAccount:
        """Fetch signers and thresholds for an account."""
        pass

    @abstractmethod
    def fetch_next_sequence_number(self, account_id: Union[AccountId, str]) -> int:
        """Sequence number the account's next transaction must carry."""
        pass

    @abstractmethod
    def query_transaction_status(self, identifier: Union[bytes, str]) -> TransactionStatus:
        """Look up a transaction by its identifier (raw bytes or hex)."""
        pass
