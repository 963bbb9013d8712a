"""
Firebase Auth Client Module

Credential provider backed by the Firebase Identity Toolkit REST API.

The web API key is not stored locally: initialize() fetches the Firebase
web config from the store backend, the same way the storefront's browser
code does.
"""

from typing import Awaitable, Callable, Dict, List, Optional

import httpx
from loguru import logger

from storefront.core.config import config
from storefront.core.constants import (
    DEFAULT_IDENTITY_TOOLKIT_URL,
    HTTP_OK,
    HTTP_TOO_MANY_REQUESTS,
    AUTH_ERROR_INVALID_CREDENTIAL,
    AUTH_ERROR_USER_NOT_FOUND,
    AUTH_ERROR_WRONG_PASSWORD,
    AUTH_ERROR_INVALID_EMAIL,
    AUTH_ERROR_TOO_MANY_REQUESTS,
    AUTH_ERROR_USER_DISABLED,
    AUTH_ERROR_NETWORK,
    AUTH_ERROR_UNKNOWN,
)
from storefront.core.exceptions import (
    BackendAPIError,
    CredentialError,
    ProviderInitializationError,
)
from storefront.models.auth import AuthUser
from storefront.observability.tracing import get_tracer
from .http_manager import HTTPManager, http_manager as default_http_manager
from .store_backend_client import StoreBackendClient, store_backend_client

tracer = get_tracer(__name__)

AuthStateHandler = Callable[[Optional[AuthUser]], Awaitable[None]]

# Identity Toolkit error messages -> normalized codes
FIREBASE_ERROR_CODES = {
    'EMAIL_NOT_FOUND': AUTH_ERROR_USER_NOT_FOUND,
    'INVALID_PASSWORD': AUTH_ERROR_WRONG_PASSWORD,
    'INVALID_LOGIN_CREDENTIALS': AUTH_ERROR_INVALID_CREDENTIAL,
    'INVALID_EMAIL': AUTH_ERROR_INVALID_EMAIL,
    'MISSING_PASSWORD': AUTH_ERROR_INVALID_CREDENTIAL,
    'TOO_MANY_ATTEMPTS_TRY_LATER': AUTH_ERROR_TOO_MANY_REQUESTS,
    'USER_DISABLED': AUTH_ERROR_USER_DISABLED,
}


def map_firebase_error(message: str) -> str:
    """
    Normalize an Identity Toolkit error message to an auth/* code.

    Messages may carry a detail suffix: 'TOO_MANY_ATTEMPTS_TRY_LATER : Access ...'.

    Example:
        >>> map_firebase_error('INVALID_PASSWORD')
        'auth/wrong-password'
    """
    key = (message or '').split(':', 1)[0].strip()
    return FIREBASE_ERROR_CODES.get(key, AUTH_ERROR_UNKNOWN)


class FirebaseAuthClient:
    """
    Email/password credential provider.

    Tracks the signed-in user and notifies subscribers on every sign-in and
    sign-out, and once on subscription with the current user.

    Example:
        >>> firebase = FirebaseAuthClient()
        >>> await firebase.initialize()
        >>> unsubscribe = await firebase.on_auth_state_changed(handler)
        >>> user = await firebase.sign_in('owner@example.com', 'secret')
    """

    def __init__(
        self,
        backend: Optional[StoreBackendClient] = None,
        http: Optional[HTTPManager] = None,
        identity_toolkit_url: Optional[str] = None
    ):
        """
        Args:
            backend: Store backend client used to fetch the Firebase web config
            http: HTTP client factory
            identity_toolkit_url: Identity Toolkit base URL (None = use config)
        """
        self._backend = backend or store_backend_client
        self._http = http or default_http_manager
        self._identity_toolkit_url = (
            identity_toolkit_url
            or config.get('firebase.identity_toolkit_url', default=DEFAULT_IDENTITY_TOOLKIT_URL)
        ).rstrip('/')
        self._api_key: Optional[str] = None
        self._current_user: Optional[AuthUser] = None
        self._handlers: List[AuthStateHandler] = []

    @property
    def initialized(self) -> bool:
        return self._api_key is not None

    @property
    def current_user(self) -> Optional[AuthUser]:
        return self._current_user

    async def initialize(self) -> None:
        """
        Load the Firebase web config. Safe to call more than once.

        Raises:
            ProviderInitializationError: If the config cannot be loaded
        """
        if self.initialized:
            return

        try:
            firebase_config = await self._backend.fetch_firebase_config()
        except BackendAPIError as e:
            logger.error(f"Failed to load Firebase config: {e.message}")
            raise ProviderInitializationError(
                "Failed to load Firebase config",
                details={"error": e.message}
            ) from e

        api_key = firebase_config.get('apiKey')
        if not api_key:
            raise ProviderInitializationError("Firebase config has no apiKey")

        self._api_key = api_key
        logger.info(
            f"Firebase auth initialized for project '{firebase_config.get('projectId', 'unknown')}'"
        )

    async def sign_in(self, email: str, password: str) -> AuthUser:
        """
        Sign in with email and password.

        Returns:
            The signed-in user

        Raises:
            ProviderInitializationError: If initialize() has not succeeded
            CredentialError: If Firebase rejects the credentials or is unreachable
        """
        if not self.initialized:
            raise ProviderInitializationError("Firebase auth is not initialized")

        with tracer.start_as_current_span("firebase.sign_in"):
            url = f"{self._identity_toolkit_url}/accounts:signInWithPassword"
            payload = {"email": email, "password": password, "returnSecureToken": True}

            try:
                async with self._http.get_client() as client:
                    response = await client.post(url, params={"key": self._api_key}, json=payload)
            except httpx.HTTPError as e:
                logger.error(f"Firebase sign-in request failed: {type(e).__name__}")
                raise CredentialError("Network error during sign-in", code=AUTH_ERROR_NETWORK) from e

            if response.status_code != HTTP_OK:
                code = self._error_code(response)
                logger.info(f"Firebase rejected sign-in ({code})")
                raise CredentialError("Sign-in rejected", code=code)

            try:
                data = response.json()
            except ValueError as e:
                raise CredentialError("Malformed sign-in response", code=AUTH_ERROR_UNKNOWN) from e

            user = AuthUser(
                uid=data.get('localId', ''),
                email=data.get('email', email),
                id_token=data.get('idToken'),
                refresh_token=data.get('refreshToken'),
                expires_in=int(data.get('expiresIn') or 0),
            )
            if not user.uid:
                raise CredentialError("Sign-in response has no user id", code=AUTH_ERROR_UNKNOWN)

        self._current_user = user
        logger.info(f"User {user.uid} signed in")
        await self._notify()
        return user

    async def sign_out(self) -> None:
        """Forget the current user and notify subscribers."""
        if self._current_user is not None:
            logger.info(f"User {self._current_user.uid} signed out")
        self._current_user = None
        await self._notify()

    async def on_auth_state_changed(self, handler: AuthStateHandler) -> Callable[[], None]:
        """
        Subscribe to sign-in/sign-out notifications.

        The handler is awaited immediately with the current user (or None).

        Returns:
            A function that removes the subscription
        """
        self._handlers.append(handler)
        await handler(self._current_user)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    async def _notify(self) -> None:
        user = self._current_user
        for handler in list(self._handlers):
            try:
                await handler(user)
            except Exception as e:
                logger.error(f"Auth state handler failed: {e}")

    @staticmethod
    def _error_code(response: httpx.Response) -> str:
        if response.status_code == HTTP_TOO_MANY_REQUESTS:
            return AUTH_ERROR_TOO_MANY_REQUESTS
        try:
            body = response.json()
        except ValueError:
            return AUTH_ERROR_UNKNOWN
        error: Dict = body.get('error') if isinstance(body, dict) else None
        if not isinstance(error, dict):
            return AUTH_ERROR_UNKNOWN
        return map_firebase_error(error.get('message', ''))
