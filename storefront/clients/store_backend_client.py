"""
Store Backend Client Module

Client for the store backend API: Firebase web config, ownership checks,
Stripe Connect onboarding and product image storage.
"""

from typing import Any, Dict, Optional

import httpx
from loguru import logger

from storefront.core.config import config
from storefront.core.constants import (
    DEFAULT_API_URL,
    HEADER_CONTENT_TYPE,
    CONTENT_TYPE_JSON,
)
from storefront.core.exceptions import (
    BackendAPIError,
    OwnershipVerificationError,
    PaymentSetupError,
)
from storefront.models.payment import ImageUploadResult, PaymentSetupStatus
from storefront.observability.tracing import get_tracer
from .http_manager import HTTPManager, http_manager as default_http_manager
from .retry_manager import RetryManager, default_retry_manager

tracer = get_tracer(__name__)


class StoreBackendClient:
    """
    Client for store backend operations.

    Only idempotent reads (Firebase config, connect status) go through the
    retry manager.

    Example:
        >>> backend = StoreBackendClient()
        >>> await backend.is_owner('uid-123', 'store1')
        True
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        http: Optional[HTTPManager] = None,
        retry_manager: Optional[RetryManager] = None
    ):
        """
        Initialize backend client.

        Args:
            api_url: Backend base URL (None = use config)
            http: HTTP client factory
            retry_manager: Retry policy for idempotent reads
        """
        self._api_url = api_url
        self._http = http or default_http_manager
        self._retry = retry_manager or default_retry_manager

    @property
    def api_url(self) -> str:
        url = self._api_url or config.get('backend.api_url', default=DEFAULT_API_URL)
        return url.rstrip('/')

    async def fetch_firebase_config(self) -> Dict[str, Any]:
        """
        Fetch the Firebase web config for the credential provider.

        Returns:
            Firebase config dictionary (apiKey, authDomain, projectId, ...)

        Raises:
            BackendAPIError: If the config cannot be fetched
        """
        with tracer.start_as_current_span("backend.fetch_firebase_config"):
            async def _fetch():
                data = await self._request("GET", "/api/firebase-config")
                if not data.get('success') or not isinstance(data.get('config'), dict):
                    raise BackendAPIError(
                        "Firebase config response was not successful",
                        status_code=None,
                        details={"error": data.get('error')}
                    )
                return data['config']

            return await self._retry.retry_async(_fetch)

    async def is_owner(self, user_id: str, project_id: str) -> bool:
        """
        Ask the backend whether a user owns a store.

        Only an explicit boolean true counts as ownership.

        Raises:
            OwnershipVerificationError: If the backend cannot be reached or
                returns an unusable response
        """
        with tracer.start_as_current_span("backend.verify_owner") as span:
            span.set_attribute("store.id", project_id)

            try:
                data = await self._request(
                    "GET",
                    "/api/verify-project-owner",
                    params={"userId": user_id, "projectId": project_id}
                )
            except BackendAPIError as e:
                raise OwnershipVerificationError(
                    f"Ownership check failed: {e.message}",
                    user_id=user_id,
                    details={"status_code": e.status_code}
                ) from e

            is_owner = data.get('isOwner') is True
            span.set_attribute("store.is_owner", is_owner)
            logger.debug(f"Ownership check for store '{project_id}': {is_owner}")
            return is_owner

    async def check_connect_status(self, project_id: str) -> PaymentSetupStatus:
        """
        Fetch the Stripe Connect status of a store.

        Raises:
            BackendAPIError: If the status cannot be fetched
        """
        with tracer.start_as_current_span("backend.check_connect_status") as span:
            span.set_attribute("store.id", project_id)

            async def _check():
                return await self._request(
                    "POST", "/check-connect-status", json={"projectId": project_id}
                )

            data = await self._retry.retry_async(_check)

            if not data.get('success'):
                return PaymentSetupStatus(loading=False)

            return PaymentSetupStatus(
                loading=False,
                connected=bool(data.get('hasAccount')),
                charges_enabled=bool(data.get('chargesEnabled')),
                account_id=data.get('accountId'),
            )

    async def create_connect_account(self, project_id: str, user_id: str) -> str:
        """
        Create (or resume) Stripe Connect onboarding for a store.

        Returns:
            Onboarding URL to send the owner to

        Raises:
            PaymentSetupError: If the backend does not return an onboarding URL
        """
        with tracer.start_as_current_span("backend.create_connect_account") as span:
            span.set_attribute("store.id", project_id)

            try:
                data = await self._request(
                    "POST",
                    "/create-connect-account",
                    json={"projectId": project_id, "userId": user_id}
                )
            except BackendAPIError as e:
                raise PaymentSetupError(
                    "Failed to create Stripe Connect account",
                    details={"error": e.message}
                ) from e

            url = data.get('onboardingUrl')
            if not data.get('success') or not url:
                raise PaymentSetupError(
                    "Backend did not return an onboarding URL",
                    details={"error": data.get('error')}
                )
            return url

    async def upload_product_image(
        self,
        project_id: str,
        user_id: str,
        filename: str,
        content: bytes,
        content_type: str,
        product_name: str
    ) -> ImageUploadResult:
        """
        Upload a product image to the store's media storage.

        Returns:
            ImageUploadResult; needs_connection is set when the store has not
            connected its storage yet

        Raises:
            BackendAPIError: If the upload fails for any other reason
        """
        with tracer.start_as_current_span("backend.upload_product_image") as span:
            span.set_attribute("store.id", project_id)
            span.set_attribute("image.size", len(content))

            data = await self._request(
                "POST",
                "/api/upload-product-image",
                data={"projectId": project_id, "userId": user_id, "productName": product_name},
                files={"image": (filename, content, content_type)},
                allow_error_body=True
            )

            if data.get('needsConnection'):
                logger.info(f"Store '{project_id}' has no media storage connected")
                return ImageUploadResult(needs_connection=True)

            url = data.get('driveUrl') or data.get('primaryUrl') or data.get('imageUrl')
            if not data.get('success') or not url:
                raise BackendAPIError(
                    data.get('error') or "Image upload failed",
                    details={"store_id": project_id}
                )

            return ImageUploadResult(url=url, file_id=data.get('fileId'))

    async def delete_product_image(self, project_id: str, file_id: str) -> bool:
        """
        Delete a previously uploaded product image.

        Returns:
            True if the backend reported success
        """
        with tracer.start_as_current_span("backend.delete_product_image") as span:
            span.set_attribute("store.id", project_id)

            data = await self._request(
                "POST",
                "/api/delete-product-image",
                json={"projectId": project_id, "fileId": file_id}
            )
            return bool(data.get('success'))

    async def _request(
        self,
        method: str,
        path: str,
        allow_error_body: bool = False,
        **kwargs
    ) -> Dict[str, Any]:
        """
        Send a request and decode the JSON body.

        Args:
            method: HTTP method
            path: Path relative to the API URL
            allow_error_body: Decode JSON bodies of non-2xx responses instead
                of raising (the upload endpoint reports needsConnection that way)

        Raises:
            BackendAPIError: On transport errors, unexpected status codes or
                non-JSON bodies
        """
        url = f"{self.api_url}{path}"
        headers = {}
        if 'json' in kwargs:
            headers[HEADER_CONTENT_TYPE] = CONTENT_TYPE_JSON

        try:
            async with self._http.get_client() as client:
                response = await client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Backend request {method} {path} failed: {type(e).__name__}: {e}")
            raise BackendAPIError(
                f"Backend request failed: {type(e).__name__}",
                details={"path": path}
            ) from e

        if response.is_success or allow_error_body:
            try:
                data = response.json()
            except ValueError as e:
                raise BackendAPIError(
                    "Backend returned a non-JSON response",
                    status_code=response.status_code,
                    response_body=response.text
                ) from e
            if isinstance(data, dict):
                return data
            raise BackendAPIError(
                "Backend returned an unexpected response",
                status_code=response.status_code,
                response_body=response.text
            )

        logger.warning(f"Backend {method} {path} returned {response.status_code}")
        raise BackendAPIError(
            f"Backend returned HTTP {response.status_code}",
            status_code=response.status_code,
            response_body=response.text
        )


# Global singleton instance
store_backend_client = StoreBackendClient()
