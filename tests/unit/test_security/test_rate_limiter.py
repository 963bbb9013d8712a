"""
Unit tests for the login rate limiter.

Tests attempt counting, lockout, expiry and identifier isolation.
"""

import threading

import pytest
from storefront.security.rate_limiter import (
    AttemptRecord,
    InMemoryAttemptStore,
    LoginRateLimiter,
    login_identifier,
)


class FakeClock:
    """Manually advanced wall clock."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def limiter(clock):
    return LoginRateLimiter(store=InMemoryAttemptStore(), clock=clock)


class TestLoginIdentifier:
    """Tests for login_identifier function."""

    def test_store_identifier(self):
        """Test identifier for a configured store."""
        assert login_identifier("store1") == "login_store1"

    def test_default_identifier(self):
        """Test identifier when no store id is configured."""
        assert login_identifier("") == "login_default"
        assert login_identifier(None) == "login_default"


class TestLoginRateLimiter:
    """Tests for LoginRateLimiter class."""

    def test_fresh_identifier(self, limiter):
        """Test that an unknown identifier may attempt with full budget."""
        assert limiter.can_attempt("login_x") is True
        assert limiter.get_attempts_left("login_x") == 5
        assert limiter.get_remaining_time("login_x") == 0

    def test_lockout_after_five_failures(self, limiter):
        """Test that five failures lock the identifier."""
        for _ in range(5):
            limiter.record_attempt("login_x", success=False)

        assert limiter.can_attempt("login_x") is False
        assert limiter.get_attempts_left("login_x") == 0

    def test_success_resets(self, limiter):
        """Test that a success clears the record, even during lockout."""
        for _ in range(5):
            limiter.record_attempt("login_x", success=False)

        limiter.record_attempt("login_x", success=True)

        assert limiter.can_attempt("login_x") is True
        assert limiter.get_attempts_left("login_x") == 5

    def test_store1_scenario(self, limiter):
        """Test four failures, one more to lock, then remaining time."""
        identifier = "login_store1"
        for _ in range(4):
            limiter.record_attempt(identifier, success=False)

        assert limiter.get_attempts_left(identifier) == 1
        assert limiter.can_attempt(identifier) is True

        limiter.record_attempt(identifier, success=False)

        assert limiter.can_attempt(identifier) is False
        assert 1 <= limiter.get_remaining_time(identifier) <= 15

    def test_remaining_time_rounds_up(self, limiter, clock):
        """Test that remaining minutes are rounded up."""
        for _ in range(5):
            limiter.record_attempt("login_x", success=False)

        assert limiter.get_remaining_time("login_x") == 15
        clock.advance(14 * 60 + 1)
        assert limiter.get_remaining_time("login_x") == 1

    def test_lockout_expires(self, limiter, clock):
        """Test that an expired lockout is cleared on the next check."""
        for _ in range(5):
            limiter.record_attempt("login_x", success=False)

        clock.advance(15 * 60)

        assert limiter.get_remaining_time("login_x") == 0
        assert limiter.can_attempt("login_x") is True
        assert limiter.get_attempts_left("login_x") == 5

    def test_failure_after_expired_lockout_starts_fresh(self, limiter, clock):
        """Test that a failure after expiry counts from one again."""
        for _ in range(5):
            limiter.record_attempt("login_x", success=False)

        clock.advance(16 * 60)
        limiter.record_attempt("login_x", success=False)

        assert limiter.get_attempts_left("login_x") == 4
        assert limiter.can_attempt("login_x") is True

    def test_identifiers_isolated(self, limiter):
        """Test that identifiers do not share records."""
        for _ in range(5):
            limiter.record_attempt("login_a", success=False)

        assert limiter.can_attempt("login_a") is False
        assert limiter.can_attempt("login_b") is True

    def test_custom_policy(self, clock):
        """Test a limiter with three attempts and a one minute lockout."""
        limiter = LoginRateLimiter(max_attempts=3, lockout_duration=60, clock=clock)
        for _ in range(3):
            limiter.record_attempt("id", success=False)

        assert limiter.can_attempt("id") is False
        assert limiter.get_remaining_time("id") == 1

    def test_invalid_policy(self):
        """Test that non-positive limits are rejected."""
        with pytest.raises(ValueError):
            LoginRateLimiter(max_attempts=0)
        with pytest.raises(ValueError):
            LoginRateLimiter(lockout_duration=0)

    def test_concurrent_failures_counted(self, clock):
        """Test that failures from many threads are all counted."""
        limiter = LoginRateLimiter(max_attempts=1000, clock=clock)

        def fail_many():
            for _ in range(50):
                limiter.record_attempt("login_x", success=False)

        threads = [threading.Thread(target=fail_many) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert limiter.get_attempts_left("login_x") == 1000 - 400


class TestInMemoryAttemptStore:
    """Tests for InMemoryAttemptStore class."""

    def test_returns_copies(self):
        """Test that mutating a fetched record does not change the store."""
        store = InMemoryAttemptStore()
        store.set("id", AttemptRecord(count=1, first_attempt_time=1.0))

        record = store.get("id")
        record.count = 99

        assert store.get("id").count == 1

    def test_delete(self):
        """Test delete of present and missing identifiers."""
        store = InMemoryAttemptStore()
        store.set("id", AttemptRecord(count=1))
        store.delete("id")
        store.delete("missing")

        assert store.get("id") is None
        assert len(store) == 0


class TestAttemptRecord:
    """Tests for AttemptRecord lockout helpers."""

    def test_lock_window(self):
        """Test is_locked and lockout_expired around the boundary."""
        record = AttemptRecord(count=5, first_attempt_time=0.0, locked_until=100.0)

        assert record.is_locked(99.9) is True
        assert record.lockout_expired(99.9) is False
        assert record.is_locked(100.0) is False
        assert record.lockout_expired(100.0) is True

    def test_unlocked_record(self):
        """Test a record without lockout."""
        record = AttemptRecord(count=2)
        assert record.is_locked(0) is False
        assert record.lockout_expired(0) is False
