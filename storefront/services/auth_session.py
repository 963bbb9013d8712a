"""
Auth Session Module

The admin dashboard's authentication and authorization state machine.

    loading -> error | login | verifying
    verifying -> authenticated | not-owner
    authenticated | not-owner -> login (sign-out)

Sign-in goes through the login rate limiter and input screening before the
credential provider is contacted. The provider's auth-state notification,
not the sign-in call itself, drives the ownership check, so a session that
is restored by the provider is verified the same way as a fresh sign-in.

Regex attack screening is a blocklist. It is defense in depth and does not
replace output encoding or parameterized queries on the backend.
"""

import math
import time
from typing import Awaitable, Callable, Optional, Protocol

from storefront.core.constants import (
    STORAGE_KEY_USER_ID,
    STORAGE_KEY_PROJECT_ID,
    AUTH_ERROR_INVALID_CREDENTIAL,
    AUTH_ERROR_USER_NOT_FOUND,
    AUTH_ERROR_WRONG_PASSWORD,
    AUTH_ERROR_INVALID_EMAIL,
    AUTH_ERROR_TOO_MANY_REQUESTS,
    LOCKOUT_POLL_INTERVAL_SECONDS,
    MSG_INIT_FAILED,
    MSG_LOCKED_OUT,
    MSG_LOCKED_TRY_LATER,
    MSG_INVALID_INPUT,
    MSG_INVALID_CREDENTIALS,
    MSG_INVALID_EMAIL,
    MSG_LOGIN_FAILED,
    MSG_SIGN_IN_IN_PROGRESS,
    MSG_NOT_OWNER,
    MSG_OWNERSHIP_UNVERIFIED,
)
from storefront.core.exceptions import (
    CredentialError,
    OwnershipVerificationError,
    ProviderInitializationError,
    StorefrontException,
)
from storefront.core.logging_config import add_store_context, add_user_context
from storefront.models.auth import (
    AuthState,
    AuthUser,
    LoginOutcome,
    OwnershipFailurePolicy,
    SessionSnapshot,
)
from storefront.security.lockout_monitor import LockoutMonitor
from storefront.security.rate_limiter import (
    LoginRateLimiter,
    login_identifier,
    login_rate_limiter,
)
from storefront.security.sanitizers import sanitize_email
from storefront.security.validators import validate_credentials_input
from storefront.storage.local_storage import LocalStorage
from .payment_service import PaymentService


class CredentialProvider(Protocol):
    """What the session needs from the credential provider."""

    async def initialize(self) -> None: ...

    async def sign_in(self, email: str, password: str) -> AuthUser: ...

    async def sign_out(self) -> None: ...

    async def on_auth_state_changed(
        self, handler: Callable[[Optional[AuthUser]], Awaitable[None]]
    ) -> Callable[[], None]: ...


class OwnershipVerifier(Protocol):
    """Answers whether a user owns a store."""

    async def is_owner(self, user_id: str, project_id: str) -> bool: ...


# Provider codes that mean "wrong email or password"
BAD_CREDENTIAL_CODES = frozenset({
    AUTH_ERROR_USER_NOT_FOUND,
    AUTH_ERROR_WRONG_PASSWORD,
    AUTH_ERROR_INVALID_CREDENTIAL,
})


class AuthSession:
    """
    One admin dashboard session for one store.

    Example:
        >>> session = AuthSession('store1', firebase, backend, MemoryLocalStorage())
        >>> await session.initialize()
        >>> outcome = await session.sign_in('owner@example.com', 'secret')
        >>> session.state
        <AuthState.AUTHENTICATED: 'authenticated'>
        >>> await session.close()
    """

    def __init__(
        self,
        store_id: str,
        credential_provider: CredentialProvider,
        ownership_verifier: OwnershipVerifier,
        storage: LocalStorage,
        payment_service: Optional[PaymentService] = None,
        rate_limiter: Optional[LoginRateLimiter] = None,
        ownership_policy: OwnershipFailurePolicy = OwnershipFailurePolicy.FAIL_CLOSED,
        clock: Callable[[], float] = time.time,
        poll_interval: float = LOCKOUT_POLL_INTERVAL_SECONDS
    ):
        """
        Args:
            store_id: Store (project) id; "" when none is configured
            credential_provider: Sign-in provider (e.g. FirebaseAuthClient)
            ownership_verifier: Ownership check (e.g. StoreBackendClient)
            storage: Local storage for userId/projectId
            payment_service: Payment status checked after authentication
            rate_limiter: Login limiter (default: process-wide limiter)
            ownership_policy: Outcome when the ownership check itself fails
            clock: Wall clock used for provider-imposed lockouts
            poll_interval: Lockout re-check interval in seconds
        """
        self.store_id = store_id or ""
        self._provider = credential_provider
        self._verifier = ownership_verifier
        self._storage = storage
        self._payments = payment_service
        self._limiter = rate_limiter or login_rate_limiter
        self._policy = OwnershipFailurePolicy(ownership_policy)
        self._clock = clock
        self._monitor = LockoutMonitor(self.refresh_lockout, interval=poll_interval)
        self._log = add_store_context(self.store_id or "default")

        self._state = AuthState.LOADING
        self._user: Optional[AuthUser] = None
        self._is_owner = False
        self._message = ""
        self._locked = False
        self._lockout_minutes = 0
        self._lockout_message: Optional[str] = None

        self._generation = 0
        self._sign_in_in_flight = False
        self._provider_locked_until: Optional[float] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def user(self) -> Optional[AuthUser]:
        return self._user

    @property
    def is_owner(self) -> bool:
        return self._is_owner

    @property
    def rate_limit_identifier(self) -> str:
        return login_identifier(self.store_id)

    @property
    def monitor(self) -> LockoutMonitor:
        return self._monitor

    def snapshot(self) -> SessionSnapshot:
        """Current session state for the presentation layer."""
        return SessionSnapshot(
            state=self._state,
            user=self._user,
            is_owner=self._is_owner,
            message=self._message,
            locked=self._locked,
            lockout_minutes=self._lockout_minutes,
            store_id=self.store_id,
        )

    async def initialize(self) -> SessionSnapshot:
        """
        Initialize the credential provider and subscribe to its auth state.

        A provider failure is fatal: the session enters the error state and
        stays there. Calling initialize() after the loading state is a no-op.
        """
        if self._state != AuthState.LOADING:
            return self.snapshot()

        try:
            await self._provider.initialize()
        except ProviderInitializationError as e:
            self._log.error(f"Credential provider initialization failed: {e.message}")
            self._state = AuthState.ERROR
            self._message = MSG_INIT_FAILED
            return self.snapshot()

        self.refresh_lockout()
        self._unsubscribe = await self._provider.on_auth_state_changed(self._on_auth_state_changed)
        self._monitor.start()

        self._log.info(f"Admin session initialized (state: {self._state.value})")
        return self.snapshot()

    async def close(self) -> None:
        """Unsubscribe from the provider and stop the lockout monitor."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        await self._monitor.stop()

    async def sign_in(self, email: str, password: str) -> LoginOutcome:
        """
        Submit the sign-in form.

        Never raises for provider or network failures; they become the
        outcome's message.
        """
        if self._state == AuthState.ERROR:
            return self._outcome(MSG_INIT_FAILED)

        if self._sign_in_in_flight:
            return self._outcome(MSG_SIGN_IN_IN_PROGRESS)

        self._sign_in_in_flight = True
        try:
            return await self._sign_in(email, password)
        finally:
            self._sign_in_in_flight = False

    async def _sign_in(self, email: str, password: str) -> LoginOutcome:
        identifier = self.rate_limit_identifier
        self._message = ""

        if not self._limiter.can_attempt(identifier) or self._provider_lockout_active():
            minutes = self._lockout_remaining_minutes()
            self._set_locked(True, minutes)
            self._log.warning(f"Sign-in blocked for '{identifier}': locked for {minutes} more minutes")
            self._message = MSG_LOCKED_OUT.format(minutes=minutes)
            self._lockout_message = self._message
            return self._outcome(self._message)

        sanitized_email = sanitize_email(email)

        if not validate_credentials_input(email, password):
            self._limiter.record_attempt(identifier, success=False)
            return self._fail(MSG_INVALID_INPUT)

        try:
            await self._provider.sign_in(sanitized_email, password)
        except CredentialError as e:
            self._limiter.record_attempt(identifier, success=False)
            self._log.info(f"Sign-in failed for '{identifier}' ({e.code})")
            return self._fail(self._credential_message(e.code))
        except ProviderInitializationError as e:
            self._limiter.record_attempt(identifier, success=False)
            self._log.error(f"Sign-in failed: {e.message}")
            return self._fail(MSG_LOGIN_FAILED)

        self._limiter.record_attempt(identifier, success=True)
        self._set_locked(False, 0)
        return self._outcome(self._message, success=True)

    def _credential_message(self, code: str) -> str:
        if code in BAD_CREDENTIAL_CODES:
            attempts = self._limiter.get_attempts_left(self.rate_limit_identifier)
            return MSG_INVALID_CREDENTIALS.format(attempts=attempts)

        if code == AUTH_ERROR_INVALID_EMAIL:
            return MSG_INVALID_EMAIL

        if code == AUTH_ERROR_TOO_MANY_REQUESTS:
            self._provider_locked_until = self._clock() + self._limiter.lockout_duration
            self._log.warning("Credential provider throttled sign-in; locking the form")
            return MSG_LOCKED_TRY_LATER

        return MSG_LOGIN_FAILED

    def _fail(self, message: str) -> LoginOutcome:
        self._message = message
        attempts_left = self._limiter.get_attempts_left(self.rate_limit_identifier)
        if attempts_left == 0 or self._provider_lockout_active():
            self._set_locked(True, self._lockout_remaining_minutes())
            self._lockout_message = message
        return self._outcome(message)

    async def sign_out(self) -> None:
        """
        Sign out and clear the stored user and store ids.

        Errors are logged, not raised.
        """
        try:
            await self._provider.sign_out()
            self._storage.remove_item(STORAGE_KEY_USER_ID)
            self._storage.remove_item(STORAGE_KEY_PROJECT_ID)
        except StorefrontException as e:
            self._log.error(f"Sign-out failed: {e.message}")

    async def _on_auth_state_changed(self, user: Optional[AuthUser]) -> None:
        if self._state == AuthState.ERROR:
            return

        self._generation += 1
        generation = self._generation

        if user is None:
            if self._user is not None:
                self._message = ""
            self._user = None
            self._is_owner = False
            self._state = AuthState.LOGIN
            return

        self._user = user
        self._is_owner = False
        self._state = AuthState.VERIFYING
        user_log = add_user_context(user.uid, self._log)

        try:
            owner = await self._verifier.is_owner(user.uid, self.store_id)
        except OwnershipVerificationError as e:
            if generation != self._generation:
                return
            await self._resolve_verification_failure(user, e, user_log)
            return

        if generation != self._generation:
            user_log.debug(f"Discarding stale ownership result for {user.uid}")
            return

        if owner:
            await self._enter_authenticated(user, user_log)
        else:
            user_log.warning(f"User {user.uid} is not the owner of this store")
            self._state = AuthState.NOT_OWNER
            self._message = MSG_NOT_OWNER

    async def _resolve_verification_failure(
        self,
        user: AuthUser,
        error: OwnershipVerificationError,
        user_log
    ) -> None:
        if self._policy == OwnershipFailurePolicy.FAIL_OPEN:
            user_log.warning(
                f"Ownership check failed for {user.uid} ({error.message}); "
                f"granting access under fail-open policy"
            )
            await self._enter_authenticated(user, user_log)
            return

        user_log.error(f"Ownership check failed for {user.uid} ({error.message}); access denied")
        self._state = AuthState.NOT_OWNER
        self._message = MSG_OWNERSHIP_UNVERIFIED

    async def _enter_authenticated(self, user: AuthUser, user_log) -> None:
        self._is_owner = True
        self._state = AuthState.AUTHENTICATED
        self._message = ""

        self._storage.set_item(STORAGE_KEY_USER_ID, user.uid)
        if self.store_id:
            self._storage.set_item(STORAGE_KEY_PROJECT_ID, self.store_id)
        user_log.info(f"User {user.uid} authenticated as store owner")

        if self._payments is not None:
            try:
                await self._payments.check_status()
            except StorefrontException as e:
                user_log.error(f"Payment status check failed: {e.message}")

    def refresh_lockout(self) -> bool:
        """
        Recompute the lockout flag from the limiter and provider throttling.

        Returns:
            True while sign-in is locked
        """
        if self._provider_locked_until is not None and not self._provider_lockout_active():
            self._provider_locked_until = None

        locked = (
            not self._limiter.can_attempt(self.rate_limit_identifier)
            or self._provider_lockout_active()
        )

        if self._locked and not locked:
            self._log.info("Sign-in lockout ended")
            # Only the message shown for the lockout goes away with it
            if self._message == self._lockout_message:
                self._message = ""
            self._lockout_message = None

        self._set_locked(locked, self._lockout_remaining_minutes() if locked else 0)
        return locked

    def _provider_lockout_active(self) -> bool:
        return (
            self._provider_locked_until is not None
            and self._clock() < self._provider_locked_until
        )

    def _lockout_remaining_minutes(self) -> int:
        minutes = self._limiter.get_remaining_time(self.rate_limit_identifier)
        if self._provider_lockout_active():
            remaining = self._provider_locked_until - self._clock()
            minutes = max(minutes, math.ceil(remaining / 60))
        return minutes

    def _set_locked(self, locked: bool, minutes: int) -> None:
        self._locked = locked
        self._lockout_minutes = minutes

    def _outcome(self, message: str, success: bool = False) -> LoginOutcome:
        return LoginOutcome(
            state=self._state,
            success=success,
            message=message,
            locked=self._locked,
            lockout_minutes=self._lockout_minutes,
            attempts_left=self._limiter.get_attempts_left(self.rate_limit_identifier),
        )
