"""
Unit tests for the Firebase credential provider.

Identity Toolkit calls are answered by an httpx.MockTransport and the
Firebase web config comes from a mocked store backend.
"""

import json
from unittest.mock import AsyncMock

import httpx
import pytest
from storefront.clients.firebase_client import FirebaseAuthClient, map_firebase_error
from storefront.clients.http_manager import HTTPManager
from storefront.clients.store_backend_client import StoreBackendClient
from storefront.core.constants import (
    AUTH_ERROR_INVALID_CREDENTIAL,
    AUTH_ERROR_INVALID_EMAIL,
    AUTH_ERROR_NETWORK,
    AUTH_ERROR_TOO_MANY_REQUESTS,
    AUTH_ERROR_UNKNOWN,
    AUTH_ERROR_WRONG_PASSWORD,
)
from storefront.core.exceptions import (
    BackendAPIError,
    CredentialError,
    ProviderInitializationError,
)

TOOLKIT_URL = "https://toolkit.test/v1"

SIGN_IN_BODY = {
    "localId": "uid-1",
    "email": "owner@example.com",
    "idToken": "id-token",
    "refreshToken": "refresh-token",
    "expiresIn": "3600",
}


def make_backend(firebase_config=None):
    backend = AsyncMock(spec=StoreBackendClient)
    backend.fetch_firebase_config.return_value = firebase_config or {"apiKey": "key-1", "projectId": "fb"}
    return backend


def make_client(handler, backend=None):
    return FirebaseAuthClient(
        backend=backend or make_backend(),
        http=HTTPManager(transport=httpx.MockTransport(handler)),
        identity_toolkit_url=TOOLKIT_URL,
    )


def error_response(message, status=400):
    return httpx.Response(status, json={"error": {"code": status, "message": message}})


class TestMapFirebaseError:
    """Tests for map_firebase_error function."""

    def test_known_messages(self):
        """Test the Identity Toolkit message mapping."""
        assert map_firebase_error("INVALID_PASSWORD") == AUTH_ERROR_WRONG_PASSWORD
        assert map_firebase_error("INVALID_LOGIN_CREDENTIALS") == AUTH_ERROR_INVALID_CREDENTIAL
        assert map_firebase_error("INVALID_EMAIL") == AUTH_ERROR_INVALID_EMAIL

    def test_message_with_detail(self):
        """Test that a detail suffix is ignored."""
        message = "TOO_MANY_ATTEMPTS_TRY_LATER : Access to this account has been temporarily disabled"
        assert map_firebase_error(message) == AUTH_ERROR_TOO_MANY_REQUESTS

    def test_unknown_message(self):
        """Test that unknown or empty messages map to the internal error code."""
        assert map_firebase_error("SOMETHING_ELSE") == AUTH_ERROR_UNKNOWN
        assert map_firebase_error("") == AUTH_ERROR_UNKNOWN
        assert map_firebase_error(None) == AUTH_ERROR_UNKNOWN


@pytest.mark.asyncio
class TestInitialize:
    """Tests for FirebaseAuthClient.initialize."""

    async def test_initialize(self):
        """Test that the API key is loaded once."""
        backend = make_backend()
        client = make_client(lambda request: httpx.Response(200), backend)

        await client.initialize()
        await client.initialize()

        assert client.initialized is True
        backend.fetch_firebase_config.assert_awaited_once()

    async def test_backend_failure(self):
        """Test that a config fetch failure raises ProviderInitializationError."""
        backend = make_backend()
        backend.fetch_firebase_config.side_effect = BackendAPIError("down", status_code=503)
        client = make_client(lambda request: httpx.Response(200), backend)

        with pytest.raises(ProviderInitializationError):
            await client.initialize()

        assert client.initialized is False

    async def test_missing_api_key(self):
        """Test that a config without apiKey is an initialization failure."""
        client = make_client(lambda request: httpx.Response(200), make_backend({"projectId": "fb"}))

        with pytest.raises(ProviderInitializationError):
            await client.initialize()

    async def test_sign_in_before_initialize(self):
        """Test that sign-in requires initialization."""
        client = make_client(lambda request: httpx.Response(200, json=SIGN_IN_BODY))

        with pytest.raises(ProviderInitializationError):
            await client.sign_in("owner@example.com", "secret")


@pytest.mark.asyncio
class TestSignIn:
    """Tests for FirebaseAuthClient.sign_in and sign_out."""

    async def test_sign_in(self):
        """Test a successful sign-in request and the returned user."""
        seen = {}

        def handler(request):
            seen['url'] = request.url
            seen['body'] = json.loads(request.content)
            return httpx.Response(200, json=SIGN_IN_BODY)

        client = make_client(handler)
        await client.initialize()

        user = await client.sign_in("owner@example.com", "secret")

        assert user.uid == "uid-1"
        assert user.id_token == "id-token"
        assert user.expires_in == 3600
        assert client.current_user == user
        assert seen['url'].path == "/v1/accounts:signInWithPassword"
        assert seen['url'].params["key"] == "key-1"
        assert seen['body']["returnSecureToken"] is True

    async def test_rejected_credentials(self):
        """Test that Identity Toolkit errors become CredentialError codes."""
        cases = [
            (error_response("INVALID_LOGIN_CREDENTIALS"), AUTH_ERROR_INVALID_CREDENTIAL),
            (error_response("INVALID_EMAIL"), AUTH_ERROR_INVALID_EMAIL),
            (error_response("TOO_MANY_ATTEMPTS_TRY_LATER"), AUTH_ERROR_TOO_MANY_REQUESTS),
            (httpx.Response(429, text="slow down"), AUTH_ERROR_TOO_MANY_REQUESTS),
            (httpx.Response(500, text="<html>"), AUTH_ERROR_UNKNOWN),
        ]

        for response, code in cases:
            client = make_client(lambda request, response=response: response)
            await client.initialize()

            with pytest.raises(CredentialError) as exc_info:
                await client.sign_in("owner@example.com", "wrong")

            assert exc_info.value.code == code
            assert client.current_user is None

    async def test_network_error(self):
        """Test that an unreachable provider gives the network error code."""
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        client = make_client(handler)
        await client.initialize()

        with pytest.raises(CredentialError) as exc_info:
            await client.sign_in("owner@example.com", "secret")

        assert exc_info.value.code == AUTH_ERROR_NETWORK

    async def test_notifications(self):
        """Test subscription, sign-in and sign-out notifications."""
        client = make_client(lambda request: httpx.Response(200, json=SIGN_IN_BODY))
        await client.initialize()
        events = []

        async def handler(user):
            events.append(user.uid if user else None)

        unsubscribe = await client.on_auth_state_changed(handler)
        await client.sign_in("owner@example.com", "secret")
        await client.sign_out()
        unsubscribe()
        await client.sign_in("owner@example.com", "secret")

        assert events == [None, "uid-1", None]

    async def test_failing_handler_does_not_break_sign_in(self):
        """Test that a handler exception is logged, not raised."""
        client = make_client(lambda request: httpx.Response(200, json=SIGN_IN_BODY))
        await client.initialize()
        calls = []

        async def handler(user):
            calls.append(user)
            if user is not None:
                raise RuntimeError("handler bug")

        await client.on_auth_state_changed(handler)
        user = await client.sign_in("owner@example.com", "secret")

        assert user.uid == "uid-1"
        assert len(calls) == 2
