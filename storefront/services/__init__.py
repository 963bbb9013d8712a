"""
Services Module

Business logic layer: the admin session, products and payment setup.
"""

from .payment_service import PaymentService
from .product_service import ProductService
from .auth_session import AuthSession, CredentialProvider, OwnershipVerifier

__all__ = [
    "AuthSession",
    "CredentialProvider",
    "OwnershipVerifier",
    "PaymentService",
    "ProductService",
]
