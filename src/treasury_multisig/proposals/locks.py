"""
Advisory edit locks for proposals.

Warns a signer that someone else is currently amending the same
transaction. Locks expire on their own; they are advisory and do not block
validation.
"""

from __future__ import annotations
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_LOCK_TTL = 300.0


@dataclass
class EditLock:
    holder: str
    expires_at: float


class EditLockTable:
    """
    Per-identifier advisory locks with expiry.

    One table is created by the owning service and injected where needed.
    """

    def __init__(self, ttl: float = DEFAULT_LOCK_TTL,
                 clock: Optional[Callable[[], float]] = None):
        if ttl <= 0:
            raise ValueError(f"Lock ttl must be positive, got {ttl}")
        self.ttl = ttl
        self._clock = clock or time.monotonic
        self._locks: Dict[str, EditLock] = {}
        self._mutex = threading.Lock()

    @staticmethod
    def _key(identifier: Union[bytes, str]) -> str:
        return identifier.hex() if isinstance(identifier, (bytes, bytearray)) else identifier

    def _live(self, key: str, now: float) -> Optional[EditLock]:
        lock = self._locks.get(key)
        if lock is not None and lock.expires_at <= now:
            del self._locks[key]
            return None
        return lock

    def acquire(self, identifier: Union[bytes, str], holder: str) -> bool:
        """
        Take or refresh the lock for a transaction.

        Returns:
            False if another holder has a live lock
        """
        key = self._key(identifier)
        with self._mutex:
            now = self._clock()
            lock = self._live(key, now)
            if lock is not None and lock.holder != holder:
                logger.debug(f"Edit lock on {key} held by {lock.holder}")
                return False
            self._locks[key] = EditLock(holder=holder, expires_at=now + self.ttl)
            return True

    def holder(self, identifier: Union[bytes, str]) -> Optional[str]:
        key = self._key(identifier)
        with self._mutex:
            lock = self._live(key, self._clock())
            return lock.holder if lock else None

    def release(self, identifier: Union[bytes, str], holder: str) -> bool:
        key = self._key(identifier)
        with self._mutex:
            lock = self._live(key, self._clock())
            if lock is None or lock.holder != holder:
                return False
            del self._locks[key]
            return True

    def purge_expired(self) -> int:
        """Drop expired locks, returning how many were removed."""
        with self._mutex:
            now = self._clock()
            expired = [k for k, lock in self._locks.items() if lock.expires_at <= now]
            for key in expired:
                del self._locks[key]
        return len(expired)
