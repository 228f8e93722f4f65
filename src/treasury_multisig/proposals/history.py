"""
Proposal history.

Ordered versions of one transaction, newest first. Every version shares the
same identifier and carries a superset of the previous version's signature
hints.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterator, List, Optional, Tuple

from ..codec.envelope import TransactionEnvelope
from ..codec.hashes import transaction_identifier


class HistoryError(ValueError):
    """Version does not belong to this history."""
    pass


class ProposalHistory:
    """
    Versions of one transaction, head is the current version.
    """

    def __init__(self, identifier: bytes, net_id: bytes,
                 entries: Optional[List[Tuple[TransactionEnvelope, datetime]]] = None):
        """
        Args:
            identifier: Canonical transaction identifier shared by all versions
            net_id: Network the identifier is scoped to
            entries: Initial versions, newest first
        """
        self.identifier = identifier
        self.net_id = net_id
        self._entries: List[Tuple[TransactionEnvelope, datetime]] = []
        for envelope, at in reversed(entries or []):
            self.append(envelope, at)

    def append(self, envelope: TransactionEnvelope, at: datetime) -> None:
        """
        Record a new current version.

        Raises:
            HistoryError: If the identifier differs or a signature was dropped
        """
        if transaction_identifier(envelope, self.net_id) != self.identifier:
            raise HistoryError("Version has a different transaction identifier")
        if self._entries:
            current_hints = set(envelope.signature_hints())
            previous = self._entries[0][0]
            if not set(previous.signature_hints()) <= current_hints:
                raise HistoryError("Version drops a previously present signature")
        self._entries.insert(0, (envelope, at))

    def current(self) -> Tuple[TransactionEnvelope, datetime]:
        if not self._entries:
            raise HistoryError("History is empty")
        return self._entries[0]

    def created(self) -> Tuple[TransactionEnvelope, datetime]:
        if not self._entries:
            raise HistoryError("History is empty")
        return self._entries[-1]

    def __iter__(self) -> Iterator[Tuple[TransactionEnvelope, datetime]]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class Proposal:
    """A proposed transaction with its human description and history."""
    title: str
    description: str
    history: ProposalHistory
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def identifier(self) -> bytes:
        return self.history.identifier

    @property
    def hex_id(self) -> str:
        return self.history.identifier.hex()

    def current(self) -> Tuple[TransactionEnvelope, datetime]:
        return self.history.current()

    def record_update(self, envelope: TransactionEnvelope, at: datetime) -> None:
        self.history.append(envelope, at)

    @classmethod
    def create(cls, title: str, description: str, envelope: TransactionEnvelope,
               net_id: bytes, at: datetime) -> Proposal:
        history = ProposalHistory(transaction_identifier(envelope, net_id), net_id)
        history.append(envelope, at)
        return cls(title=title, description=description, history=history, created_at=at)
