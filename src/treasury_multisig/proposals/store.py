"""
Proposal storage.

Keyed history storage for accepted transactions. The validator never touches
storage itself; callers persist what the engine accepted through a
ProposalStore.
"""

import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Union

from ..codec.envelope import TransactionEnvelope
from ..codec.hashes import transaction_identifier
from .history import Proposal, ProposalHistory


logger = logging.getLogger(__name__)


class ProposalStoreError(Exception):
    """Proposal storage error."""
    pass


class ProposalExistsError(ProposalStoreError):
    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"Proposal {identifier} already exists")


class ProposalNotFoundError(ProposalStoreError):
    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"Proposal {identifier} not found")


def _key(identifier: Union[bytes, str]) -> str:
    return identifier.hex() if isinstance(identifier, (bytes, bytearray)) else identifier.lower()


class ProposalStore(ABC):
    """
    Abstract base class for proposal persistence.
    """

    @abstractmethod
    def create(self, proposal: Proposal) -> None:
        """Store a newly accepted proposal."""
        pass

    @abstractmethod
    def add_update(self, envelope: TransactionEnvelope, at: datetime) -> None:
        """Record an accepted amendment of an existing proposal."""
        pass

    @abstractmethod
    def get(self, identifier: Union[bytes, str]) -> Proposal:
        """Load a proposal with its full history, newest first."""
        pass

    @abstractmethod
    def list_since(self, moment: datetime) -> List[Proposal]:
        """Proposals created after a moment, loading only their latest version."""
        pass


class InMemoryProposalStore(ProposalStore):
    """In-memory implementation of proposal store."""

    def __init__(self, net_id: bytes):
        """
        Args:
            net_id: Network identifiers are scoped to
        """
        self.net_id = net_id
        self.proposals: Dict[str, Proposal] = {}
        self._lock = threading.Lock()

    def create(self, proposal: Proposal) -> None:
        key = proposal.hex_id
        with self._lock:
            if key in self.proposals:
                raise ProposalExistsError(key)
            self.proposals[key] = proposal
        logger.debug(f"Stored proposal {key}")

    def add_update(self, envelope: TransactionEnvelope, at: datetime) -> None:
        key = transaction_identifier(envelope, self.net_id).hex()
        with self._lock:
            proposal = self.proposals.get(key)
            if proposal is None:
                raise ProposalNotFoundError(key)
            proposal.record_update(envelope, at)
        logger.debug(f"Stored update of proposal {key}")

    def get(self, identifier: Union[bytes, str]) -> Proposal:
        key = _key(identifier)
        with self._lock:
            proposal = self.proposals.get(key)
        if proposal is None:
            raise ProposalNotFoundError(key)
        return proposal

    def list_since(self, moment: datetime) -> List[Proposal]:
        with self._lock:
            selected = [p for p in self.proposals.values() if p.created_at > moment]

        result = []
        for proposal in selected:
            versions = list(proposal.history)
            latest = versions[:1] if len(versions) > 1 else []
            history = ProposalHistory(proposal.identifier, self.net_id, latest + [versions[-1]])
            result.append(Proposal(
                title=proposal.title,
                description=proposal.description,
                history=history,
                created_at=proposal.created_at,
            ))
        return result
