"""
Proposal history, storage and coordination helpers.
"""

from .history import HistoryError, Proposal, ProposalHistory
from .store import (
    ProposalStore,
    InMemoryProposalStore,
    ProposalStoreError,
    ProposalExistsError,
    ProposalNotFoundError,
)
from .locks import EditLock, EditLockTable
from .contacts import ContactsError, SignerContacts

__all__ = [
    "HistoryError",
    "Proposal",
    "ProposalHistory",
    "ProposalStore",
    "InMemoryProposalStore",
    "ProposalStoreError",
    "ProposalExistsError",
    "ProposalNotFoundError",
    "EditLock",
    "EditLockTable",
    "ContactsError",
    "SignerContacts",
]
