"""
Storefront Admin - secure product management for a single storefront.

This package provides the admin dashboard's security core: input
sanitization, login rate limiting, the owner sign-in state machine and
product form validation, exposed through a small FastAPI service.
"""

__version__ = "1.0.0"
__author__ = "Harivatsa G A"

from .services.auth_session import AuthSession
from .security.validators import ProductFormValidator

__all__ = [
    "AuthSession",
    "ProductFormValidator",
]
