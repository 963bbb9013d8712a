"""
Core Module

Provides foundational utilities including configuration management,
logging setup, custom exceptions, and application constants.
"""

from .exceptions import (
    StorefrontException,
    AuthenticationError,
    AuthorizationError,
    ValidationError,
    CredentialError,
    ProviderInitializationError,
    OwnershipVerificationError,
    BackendAPIError,
    PaymentSetupError,
    RateLimitExceeded,
    ProductNotFoundError,
    ConfigurationError,
)
from .config import Config, config
from .logging_config import setup_logging

__all__ = [
    "StorefrontException",
    "AuthenticationError",
    "AuthorizationError",
    "ValidationError",
    "CredentialError",
    "ProviderInitializationError",
    "OwnershipVerificationError",
    "BackendAPIError",
    "PaymentSetupError",
    "RateLimitExceeded",
    "ProductNotFoundError",
    "ConfigurationError",
    "Config",
    "config",
    "setup_logging",
]
