"""
In-memory ledger for tests.
"""

from typing import Dict, Iterable, List, Optional, Tuple, Union

from treasury_multisig.crypto import Ed25519PrivateKey
from treasury_multisig.ledger import (
    LedgerAccount,
    LedgerClient,
    LedgerSigner,
    LedgerThresholds,
    TransactionStatus,
)
from treasury_multisig.runtime.address import AccountId
from treasury_multisig.runtime.errors import AccountNotFoundError, FetchError


class FakeLedgerClient(LedgerClient):
    """Ledger client serving canned accounts and recording every call."""

    def __init__(self):
        self.accounts: Dict[str, LedgerAccount] = {}
        self.transactions: Dict[str, TransactionStatus] = {}
        self.calls: List[Tuple[str, str]] = []
        self.failure: Optional[FetchError] = None

    def add_account(self, key: Ed25519PrivateKey,
                    signers: Iterable[Tuple[Ed25519PrivateKey, int]],
                    high_threshold: int, sequence: int = 1000,
                    extra_signers: Iterable[LedgerSigner] = ()) -> LedgerAccount:
        account_id = str(key.public_key().to_account_id())
        account = LedgerAccount(
            account_id=account_id,
            sequence=sequence,
            thresholds=LedgerThresholds(high_threshold=high_threshold),
            signers=[
                LedgerSigner(key=str(k.public_key().to_account_id()), weight=w)
                for k, w in signers
            ] + list(extra_signers),
        )
        self.accounts[account_id] = account
        return account

    def set_transaction(self, identifier: bytes, successful: bool) -> None:
        self.transactions[identifier.hex()] = TransactionStatus(found=True, successful=successful)

    def calls_to(self, method: str) -> List[str]:
        return [arg for name, arg in self.calls if name == method]

    def _record(self, method: str, arg: str) -> None:
        self.calls.append((method, arg))
        if self.failure is not None:
            raise self.failure

    def fetch_account(self, account_id: Union[AccountId, str]) -> LedgerAccount:
        self._record("fetch_account", str(account_id))
        account = self.accounts.get(str(account_id))
        if account is None:
            raise AccountNotFoundError(details={"account": str(account_id)})
        return account.model_copy(deep=True)

    def fetch_next_sequence_number(self, account_id: Union[AccountId, str]) -> int:
        self._record("fetch_next_sequence_number", str(account_id))
        account = self.accounts.get(str(account_id))
        if account is None:
            raise AccountNotFoundError(details={"account": str(account_id)})
        return account.sequence + 1

    def query_transaction_status(self, identifier: Union[bytes, str]) -> TransactionStatus:
        key = identifier.hex() if isinstance(identifier, bytes) else identifier
        self._record("query_transaction_status", key)
        return self.transactions.get(key, TransactionStatus(found=False, successful=False))
