"""
Payment Service Module

Stripe Connect status and onboarding for the signed-in store owner.
"""

from dataclasses import replace
from typing import Mapping, Optional
from loguru import logger

from storefront.clients.store_backend_client import StoreBackendClient
from storefront.core.constants import (
    MSG_PAYMENT_SETUP_COMPLETE,
    MSG_PAYMENT_SETUP_INCOMPLETE,
    MSG_PAYMENT_SETUP_UNAVAILABLE,
)
from storefront.core.exceptions import BackendAPIError, PaymentSetupError
from storefront.models.auth import AuthUser
from storefront.models.payment import PaymentNotice, PaymentSetupStatus


class PaymentService:
    """
    Service for payment setup operations.

    Example:
        >>> payments = PaymentService('store1', backend)
        >>> status = await payments.check_status()
        >>> if not status.charges_enabled:
        ...     url = await payments.start_onboarding(session.user)
    """

    def __init__(self, store_id: str, backend: StoreBackendClient):
        self.store_id = store_id
        self._backend = backend
        self._status = PaymentSetupStatus()

    @property
    def status(self) -> PaymentSetupStatus:
        """Last known status (a copy)."""
        return replace(self._status)

    async def check_status(self) -> PaymentSetupStatus:
        """
        Refresh the Stripe Connect status.

        Backend failures are logged and leave the previous status in place
        with loading cleared.

        Returns:
            The refreshed status
        """
        if not self.store_id:
            self._status = replace(self._status, loading=False)
            return self.status

        try:
            self._status = await self._backend.check_connect_status(self.store_id)
        except BackendAPIError as e:
            logger.error(f"Failed to check payment status for store '{self.store_id}': {e.message}")
            self._status = replace(self._status, loading=False)

        logger.debug(
            f"Payment status for store '{self.store_id}': connected={self._status.connected}, "
            f"charges_enabled={self._status.charges_enabled}"
        )
        return self.status

    async def start_onboarding(self, user: Optional[AuthUser]) -> str:
        """
        Start Stripe Connect onboarding.

        Args:
            user: The signed-in owner

        Returns:
            Onboarding URL

        Raises:
            PaymentSetupError: If there is no store id or user, or the
                backend cannot start onboarding
        """
        if not self.store_id or user is None or not user.uid:
            raise PaymentSetupError(MSG_PAYMENT_SETUP_UNAVAILABLE)

        try:
            url = await self._backend.create_connect_account(self.store_id, user.uid)
        except PaymentSetupError as e:
            logger.error(f"Payment onboarding failed for store '{self.store_id}': {e.message}")
            raise PaymentSetupError(MSG_PAYMENT_SETUP_UNAVAILABLE, details=e.details) from e

        logger.info(f"Payment onboarding started for store '{self.store_id}'")
        return url

    async def handle_return(self, params: Mapping[str, str]) -> Optional[PaymentNotice]:
        """
        Handle the query parameters Stripe redirects back with.

        connect_success=true re-checks the status; connect_refresh=true means
        the owner left onboarding before finishing.

        Returns:
            Notice to show, or None if the parameters carry no onboarding result
        """
        if params.get('connect_success') == 'true':
            await self.check_status()
            return PaymentNotice(message=MSG_PAYMENT_SETUP_COMPLETE, success=True)

        if params.get('connect_refresh') == 'true':
            return PaymentNotice(message=MSG_PAYMENT_SETUP_INCOMPLETE, success=False)

        return None
