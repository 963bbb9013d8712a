"""
Admin Context

Wires one admin session and its services for the HTTP layer.
"""

from dataclasses import dataclass
from typing import Optional

from storefront.clients.firebase_client import FirebaseAuthClient
from storefront.clients.store_backend_client import StoreBackendClient
from storefront.core.config import Config, config as default_config
from storefront.core.constants import (
    LOGIN_MAX_ATTEMPTS,
    LOGIN_LOCKOUT_MINUTES,
    LOCKOUT_POLL_INTERVAL_SECONDS,
    OWNERSHIP_POLICY_FAIL_CLOSED,
    DEFAULT_API_URL,
    DEFAULT_IDENTITY_TOOLKIT_URL,
)
from storefront.core.exceptions import ConfigurationError
from storefront.models.auth import OwnershipFailurePolicy
from storefront.security.rate_limiter import LoginRateLimiter
from storefront.services.auth_session import AuthSession
from storefront.services.payment_service import PaymentService
from storefront.services.product_service import ProductService
from storefront.storage.local_storage import JSONFileLocalStorage
from storefront.storage.product_store import InMemoryProductStore


@dataclass
class AdminContext:
    """Everything the routes need for one store."""
    session: AuthSession
    products: ProductService
    payments: PaymentService
    backend: StoreBackendClient

    @property
    def store_id(self) -> str:
        return self.session.store_id


def build_context(cfg: Optional[Config] = None) -> AdminContext:
    """
    Build the admin context from configuration.

    Raises:
        ConfigurationError: If a configured value is invalid
    """
    cfg = cfg or default_config

    store_id = cfg.get('store.project_id', default='', expected_type=str)
    policy_value = cfg.get(
        'auth.ownership_failure_policy', default=OWNERSHIP_POLICY_FAIL_CLOSED, expected_type=str
    )
    try:
        policy = OwnershipFailurePolicy(policy_value)
    except ValueError as e:
        raise ConfigurationError(
            f"Unknown ownership failure policy: {policy_value}",
            config_key='auth.ownership_failure_policy'
        ) from e

    rate_limiter = LoginRateLimiter(
        max_attempts=cfg.get('auth.max_attempts', default=LOGIN_MAX_ATTEMPTS, expected_type=int),
        lockout_duration=cfg.get(
            'auth.lockout_minutes', default=LOGIN_LOCKOUT_MINUTES, expected_type=float
        ) * 60,
    )

    backend = StoreBackendClient(
        api_url=cfg.get('backend.api_url', default=DEFAULT_API_URL, expected_type=str)
    )
    firebase = FirebaseAuthClient(
        backend=backend,
        identity_toolkit_url=cfg.get(
            'firebase.identity_toolkit_url', default=DEFAULT_IDENTITY_TOOLKIT_URL, expected_type=str
        ),
    )
    storage = JSONFileLocalStorage(
        cfg.get('storage.local_storage_path', default='.storefront/local_storage.json', expected_type=str)
    )
    payments = PaymentService(store_id, backend)

    session = AuthSession(
        store_id=store_id,
        credential_provider=firebase,
        ownership_verifier=backend,
        storage=storage,
        payment_service=payments,
        rate_limiter=rate_limiter,
        ownership_policy=policy,
        poll_interval=cfg.get(
            'auth.lockout_poll_interval', default=LOCKOUT_POLL_INTERVAL_SECONDS, expected_type=float
        ),
    )

    return AdminContext(
        session=session,
        products=ProductService(store_id, InMemoryProductStore(), backend),
        payments=payments,
        backend=backend,
    )
