"""
External service clients.

- StoreBackendClient: store backend API (ownership, payments, images)
- FirebaseAuthClient: email/password credential provider
"""

from .http_manager import HTTPManager, http_manager
from .retry_manager import RetryConfig, RetryManager, default_retry_manager
from .store_backend_client import StoreBackendClient, store_backend_client
from .firebase_client import FirebaseAuthClient, map_firebase_error

__all__ = [
    'HTTPManager',
    'http_manager',
    'RetryConfig',
    'RetryManager',
    'default_retry_manager',
    'StoreBackendClient',
    'store_backend_client',
    'FirebaseAuthClient',
    'map_firebase_error',
]
