"""
Unit tests for the payment service.

Tests Stripe Connect status checks, onboarding and return handling.
"""

from unittest.mock import AsyncMock

import pytest
from storefront.clients.store_backend_client import StoreBackendClient
from storefront.core.constants import (
    MSG_PAYMENT_SETUP_COMPLETE,
    MSG_PAYMENT_SETUP_INCOMPLETE,
    MSG_PAYMENT_SETUP_UNAVAILABLE,
)
from storefront.core.exceptions import BackendAPIError, PaymentSetupError
from storefront.models.auth import AuthUser
from storefront.models.payment import PaymentSetupStatus
from storefront.services.payment_service import PaymentService


@pytest.fixture
def backend():
    mock = AsyncMock(spec=StoreBackendClient)
    mock.check_connect_status.return_value = PaymentSetupStatus(
        loading=False, connected=True, charges_enabled=True, account_id='acct_1'
    )
    mock.create_connect_account.return_value = 'https://connect.stripe.com/setup/abc'
    return mock


@pytest.fixture
def payments(backend):
    return PaymentService('store1', backend)


@pytest.mark.asyncio
class TestPaymentService:
    """Tests for PaymentService class."""

    async def test_initial_status_loading(self, payments):
        """Test that the status starts as loading."""
        assert payments.status.loading is True
        assert payments.status.connected is False

    async def test_check_status(self, payments, backend):
        """Test a successful status check."""
        status = await payments.check_status()

        assert status.charges_enabled is True
        assert status.account_id == 'acct_1'
        backend.check_connect_status.assert_awaited_once_with('store1')

    async def test_check_status_failure(self, payments, backend):
        """Test that a backend failure clears loading and keeps the rest."""
        backend.check_connect_status.side_effect = BackendAPIError("down", status_code=503)

        status = await payments.check_status()

        assert status.loading is False
        assert status.connected is False

    async def test_check_status_without_store(self, backend):
        """Test that no backend call is made without a store id."""
        payments = PaymentService('', backend)

        status = await payments.check_status()

        assert status.loading is False
        backend.check_connect_status.assert_not_awaited()

    async def test_status_is_a_copy(self, payments):
        """Test that callers cannot mutate the service's status."""
        payments.status.connected = True
        assert payments.status.connected is False

    async def test_start_onboarding(self, payments, backend):
        """Test that onboarding returns the backend URL."""
        url = await payments.start_onboarding(AuthUser(uid='uid-1'))

        assert url == 'https://connect.stripe.com/setup/abc'
        backend.create_connect_account.assert_awaited_once_with('store1', 'uid-1')

    async def test_onboarding_requires_user(self, payments, backend):
        """Test that onboarding without a user fails with the user message."""
        with pytest.raises(PaymentSetupError) as exc_info:
            await payments.start_onboarding(None)

        assert exc_info.value.message == MSG_PAYMENT_SETUP_UNAVAILABLE
        backend.create_connect_account.assert_not_awaited()

    async def test_onboarding_backend_failure(self, payments, backend):
        """Test that backend failures surface the user message."""
        backend.create_connect_account.side_effect = PaymentSetupError("no url")

        with pytest.raises(PaymentSetupError) as exc_info:
            await payments.start_onboarding(AuthUser(uid='uid-1'))

        assert exc_info.value.message == MSG_PAYMENT_SETUP_UNAVAILABLE

    async def test_return_success(self, payments, backend):
        """Test that connect_success re-checks the status."""
        notice = await payments.handle_return({'connect_success': 'true'})

        assert notice.success is True
        assert notice.message == MSG_PAYMENT_SETUP_COMPLETE
        backend.check_connect_status.assert_awaited_once()

    async def test_return_refresh(self, payments, backend):
        """Test that connect_refresh asks the owner to finish setup."""
        notice = await payments.handle_return({'connect_refresh': 'true'})

        assert notice.success is False
        assert notice.message == MSG_PAYMENT_SETUP_INCOMPLETE
        backend.check_connect_status.assert_not_awaited()

    async def test_return_without_params(self, payments):
        """Test that unrelated parameters give no notice."""
        assert await payments.handle_return({}) is None
        assert await payments.handle_return({'connect_success': 'false'}) is None
