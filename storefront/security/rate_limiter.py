"""
Login Rate Limiting Module

Counts failed sign-in attempts per identifier and locks the identifier out
for a fixed period once the limit is reached.

Policy defaults: 5 failed attempts, then a 15 minute lockout. A successful
sign-in clears the identifier's record. Lockout expiry is detected lazily on
the next can_attempt() or record_attempt() call; nothing fires exactly at
expiry.

Attempt records live behind an AttemptStore so tests and multi-instance
deployments can supply their own storage. Every read-modify-write is done
under the limiter's lock.
"""

import math
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from threading import Lock
from typing import Callable, Dict, Optional
from loguru import logger

from storefront.core.constants import (
    LOGIN_MAX_ATTEMPTS,
    LOGIN_LOCKOUT_MINUTES,
    LOGIN_IDENTIFIER_PREFIX,
    DEFAULT_STORE_IDENTIFIER,
)


@dataclass
class AttemptRecord:
    """
    Failed attempt bookkeeping for one identifier.

    Attributes:
        count: Number of failed attempts since the record was created
        first_attempt_time: Unix timestamp of the first failed attempt
        locked_until: Unix timestamp when the lockout ends (None = not locked)
    """
    count: int = 0
    first_attempt_time: float = 0.0
    locked_until: Optional[float] = None

    def is_locked(self, now: float) -> bool:
        """Check if the lockout is still running at `now`."""
        return self.locked_until is not None and now < self.locked_until

    def lockout_expired(self, now: float) -> bool:
        """Check if a lockout existed and has run out at `now`."""
        return self.locked_until is not None and now >= self.locked_until


class AttemptStore(ABC):
    """Storage for attempt records, keyed by identifier."""

    @abstractmethod
    def get(self, identifier: str) -> Optional[AttemptRecord]:
        """Return the record for identifier, or None."""

    @abstractmethod
    def set(self, identifier: str, record: AttemptRecord) -> None:
        """Store the record for identifier."""

    @abstractmethod
    def delete(self, identifier: str) -> None:
        """Remove the record for identifier if present."""


class InMemoryAttemptStore(AttemptStore):
    """Process-local attempt storage. Records are lost on restart."""

    def __init__(self):
        self._records: Dict[str, AttemptRecord] = {}

    def get(self, identifier: str) -> Optional[AttemptRecord]:
        record = self._records.get(identifier)
        # Hand out copies so records only change through the limiter
        return replace(record) if record else None

    def set(self, identifier: str, record: AttemptRecord) -> None:
        self._records[identifier] = replace(record)

    def delete(self, identifier: str) -> None:
        self._records.pop(identifier, None)

    def __len__(self) -> int:
        return len(self._records)


class LoginRateLimiter:
    """
    Failed-attempt limiter with lockout.

    Example:
        >>> limiter = LoginRateLimiter()
        >>> identifier = login_identifier('store1')
        >>> if limiter.can_attempt(identifier):
        ...     ok = await provider.sign_in(email, password)
        ...     limiter.record_attempt(identifier, success=ok)
        ... else:
        ...     minutes = limiter.get_remaining_time(identifier)
    """

    def __init__(
        self,
        max_attempts: int = LOGIN_MAX_ATTEMPTS,
        lockout_duration: float = LOGIN_LOCKOUT_MINUTES * 60,
        store: Optional[AttemptStore] = None,
        clock: Callable[[], float] = time.time
    ):
        """
        Initialize the limiter.

        Args:
            max_attempts: Failed attempts allowed before lockout
            lockout_duration: Lockout length in seconds
            store: Attempt record storage (default: in-memory)
            clock: Wall clock returning Unix seconds
        """
        if max_attempts <= 0:
            raise ValueError("max_attempts must be positive")
        if lockout_duration <= 0:
            raise ValueError("lockout_duration must be positive")

        self.max_attempts = max_attempts
        self.lockout_duration = lockout_duration
        self._store = store if store is not None else InMemoryAttemptStore()
        self._clock = clock
        self._lock = Lock()

    def can_attempt(self, identifier: str) -> bool:
        """
        Check whether identifier may try to sign in now.

        Clears the record as a side effect when a lockout has expired.

        Returns:
            True if no record exists, the lockout expired, or fewer than
            max_attempts failures are recorded; False otherwise
        """
        with self._lock:
            record = self._store.get(identifier)
            if record is None:
                return True

            now = self._clock()
            if record.is_locked(now):
                return False

            if record.lockout_expired(now):
                self._store.delete(identifier)
                logger.info(f"Lockout expired for '{identifier}', attempt record cleared")
                return True

            return record.count < self.max_attempts

    def record_attempt(self, identifier: str, success: bool) -> None:
        """
        Record the outcome of a sign-in attempt.

        A success deletes the record. A failure increments the count and
        starts the lockout once max_attempts is reached.
        """
        with self._lock:
            if success:
                self._store.delete(identifier)
                return

            now = self._clock()
            record = self._store.get(identifier)
            if record is None or record.lockout_expired(now):
                record = AttemptRecord(count=0, first_attempt_time=now)

            record.count += 1

            if record.count >= self.max_attempts:
                record.locked_until = now + self.lockout_duration
                logger.warning(
                    f"Identifier '{identifier}' locked out for "
                    f"{self.lockout_duration / 60:.0f} minutes after {record.count} failed attempts"
                )

            self._store.set(identifier, record)

    def get_remaining_time(self, identifier: str) -> int:
        """
        Minutes (rounded up) until the lockout for identifier ends.

        Returns:
            0 if the identifier is not locked
        """
        with self._lock:
            record = self._store.get(identifier)
            if record is None or record.locked_until is None:
                return 0

            remaining = record.locked_until - self._clock()
            return math.ceil(remaining / 60) if remaining > 0 else 0

    def get_attempts_left(self, identifier: str) -> int:
        """Failed attempts still allowed before lockout."""
        with self._lock:
            record = self._store.get(identifier)
            if record is None:
                return self.max_attempts
            return max(0, self.max_attempts - record.count)


def login_identifier(store_id: Optional[str]) -> str:
    """
    Build the rate limit identifier for sign-ins to a store.

    Example:
        >>> login_identifier('store1')
        'login_store1'
        >>> login_identifier('')
        'login_default'
    """
    return f"{LOGIN_IDENTIFIER_PREFIX}{store_id or DEFAULT_STORE_IDENTIFIER}"


# Process-wide default limiter shared by every session in this process
login_rate_limiter = LoginRateLimiter()
