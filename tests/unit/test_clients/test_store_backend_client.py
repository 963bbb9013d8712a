"""
Unit tests for the store backend client.

Requests are answered by an httpx.MockTransport; no network access.
"""

import json

import httpx
import pytest
from storefront.clients.http_manager import HTTPManager
from storefront.clients.retry_manager import RetryConfig, RetryManager
from storefront.clients.store_backend_client import StoreBackendClient
from storefront.core.exceptions import (
    BackendAPIError,
    OwnershipVerificationError,
    PaymentSetupError,
)

API_URL = "https://backend.test"


def make_client(handler, max_retries=0):
    return StoreBackendClient(
        api_url=API_URL + "/",
        http=HTTPManager(transport=httpx.MockTransport(handler)),
        retry_manager=RetryManager(RetryConfig(max_retries=max_retries, initial_backoff=0, jitter_factor=0)),
    )


@pytest.mark.asyncio
class TestOwnership:
    """Tests for StoreBackendClient.is_owner."""

    async def test_owner(self):
        """Test that isOwner true is ownership and the query is correct."""
        seen = {}

        def handler(request):
            seen['url'] = request.url
            return httpx.Response(200, json={"isOwner": True})

        assert await make_client(handler).is_owner("uid-1", "store1") is True
        assert seen['url'].path == "/api/verify-project-owner"
        assert seen['url'].params["userId"] == "uid-1"
        assert seen['url'].params["projectId"] == "store1"

    async def test_only_boolean_true_counts(self):
        """Test that truthy non-boolean answers are not ownership."""
        for body in ({"isOwner": False}, {"isOwner": "true"}, {"isOwner": 1}, {}):
            client = make_client(lambda request, body=body: httpx.Response(200, json=body))
            assert await client.is_owner("uid-1", "store1") is False

    async def test_server_error(self):
        """Test that a failed check raises OwnershipVerificationError."""
        client = make_client(lambda request: httpx.Response(500, text="boom"))

        with pytest.raises(OwnershipVerificationError):
            await client.is_owner("uid-1", "store1")

    async def test_network_error(self):
        """Test that a transport failure raises OwnershipVerificationError."""
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        with pytest.raises(OwnershipVerificationError):
            await make_client(handler).is_owner("uid-1", "store1")

    async def test_non_json_body(self):
        """Test that an HTML error page is treated as a failed check."""
        client = make_client(lambda request: httpx.Response(200, text="<html>oops</html>"))

        with pytest.raises(OwnershipVerificationError):
            await client.is_owner("uid-1", "store1")


@pytest.mark.asyncio
class TestFirebaseConfig:
    """Tests for StoreBackendClient.fetch_firebase_config."""

    async def test_fetch(self):
        """Test that the config dictionary is returned."""
        client = make_client(lambda request: httpx.Response(
            200, json={"success": True, "config": {"apiKey": "key-1", "projectId": "fb"}}
        ))

        firebase_config = await client.fetch_firebase_config()

        assert firebase_config["apiKey"] == "key-1"

    async def test_unsuccessful(self):
        """Test that success false raises BackendAPIError."""
        client = make_client(lambda request: httpx.Response(200, json={"success": False, "error": "nope"}))

        with pytest.raises(BackendAPIError):
            await client.fetch_firebase_config()

    async def test_retried_on_server_error(self):
        """Test that a transient 503 is retried."""
        calls = []

        def handler(request):
            calls.append(1)
            if len(calls) == 1:
                return httpx.Response(503, text="busy")
            return httpx.Response(200, json={"success": True, "config": {"apiKey": "key-1"}})

        firebase_config = await make_client(handler, max_retries=2).fetch_firebase_config()

        assert firebase_config["apiKey"] == "key-1"
        assert len(calls) == 2


@pytest.mark.asyncio
class TestPayments:
    """Tests for the Stripe Connect endpoints."""

    async def test_connect_status(self):
        """Test that the status fields are mapped."""
        seen = {}

        def handler(request):
            seen['path'] = request.url.path
            seen['body'] = json.loads(request.content)
            return httpx.Response(200, json={
                "success": True, "hasAccount": True, "chargesEnabled": False, "accountId": "acct_1"
            })

        status = await make_client(handler).check_connect_status("store1")

        assert seen == {'path': "/check-connect-status", 'body': {"projectId": "store1"}}
        assert status.loading is False
        assert status.connected is True
        assert status.charges_enabled is False
        assert status.account_id == "acct_1"

    async def test_connect_status_unsuccessful(self):
        """Test that success false gives a not-connected status."""
        client = make_client(lambda request: httpx.Response(200, json={"success": False}))

        status = await client.check_connect_status("store1")

        assert status.loading is False
        assert status.connected is False

    async def test_create_account(self):
        """Test that the onboarding URL is returned."""
        client = make_client(lambda request: httpx.Response(
            200, json={"success": True, "onboardingUrl": "https://connect.stripe.com/x"}
        ))

        assert await client.create_connect_account("store1", "uid-1") == "https://connect.stripe.com/x"

    async def test_create_account_without_url(self):
        """Test that a missing onboarding URL raises PaymentSetupError."""
        client = make_client(lambda request: httpx.Response(200, json={"success": True}))

        with pytest.raises(PaymentSetupError):
            await client.create_connect_account("store1", "uid-1")

    async def test_create_account_http_error(self):
        """Test that backend failures raise PaymentSetupError."""
        client = make_client(lambda request: httpx.Response(500, json={"error": "stripe down"}))

        with pytest.raises(PaymentSetupError):
            await client.create_connect_account("store1", "uid-1")


@pytest.mark.asyncio
class TestProductImages:
    """Tests for the image storage endpoints."""

    async def test_upload(self):
        """Test that the multipart upload returns the image URL."""
        seen = {}

        def handler(request):
            seen['content_type'] = request.headers["content-type"]
            seen['body'] = request.content
            return httpx.Response(200, json={
                "success": True, "driveUrl": "https://drive.test/img", "fileId": "file-1"
            })

        result = await make_client(handler).upload_product_image(
            "store1", "uid-1", "shoe.png", b"PNGDATA", "image/png", "Shoe"
        )

        assert result.url == "https://drive.test/img"
        assert result.file_id == "file-1"
        assert seen['content_type'].startswith("multipart/form-data")
        assert b"PNGDATA" in seen['body']
        assert b'name="productName"' in seen['body']

    async def test_upload_fallback_url(self):
        """Test that primaryUrl is used when there is no driveUrl."""
        client = make_client(lambda request: httpx.Response(
            200, json={"success": True, "primaryUrl": "https://cdn.test/img"}
        ))

        result = await client.upload_product_image("store1", "uid-1", "a.png", b"x", "image/png", "A")

        assert result.url == "https://cdn.test/img"

    async def test_upload_needs_connection(self):
        """Test that needsConnection is reported even on an error status."""
        client = make_client(lambda request: httpx.Response(
            400, json={"success": False, "needsConnection": True}
        ))

        result = await client.upload_product_image("store1", "uid-1", "a.png", b"x", "image/png", "A")

        assert result.needs_connection is True
        assert result.url == ""

    async def test_upload_failure(self):
        """Test that other failures raise BackendAPIError."""
        client = make_client(lambda request: httpx.Response(500, json={"success": False, "error": "quota"}))

        with pytest.raises(BackendAPIError) as exc_info:
            await client.upload_product_image("store1", "uid-1", "a.png", b"x", "image/png", "A")

        assert exc_info.value.message == "quota"

    async def test_delete(self):
        """Test image deletion."""
        seen = {}

        def handler(request):
            seen['body'] = json.loads(request.content)
            return httpx.Response(200, json={"success": True})

        assert await make_client(handler).delete_product_image("store1", "file-1") is True
        assert seen['body'] == {"projectId": "store1", "fileId": "file-1"}

    async def test_delete_http_error(self):
        """Test that a failed delete raises BackendAPIError with the status."""
        client = make_client(lambda request: httpx.Response(404, text="missing"))

        with pytest.raises(BackendAPIError) as exc_info:
            await client.delete_product_image("store1", "file-1")

        assert exc_info.value.status_code == 404
