"""
Security Module

Provides input sanitization, attack detection, form validation, and login
rate limiting.
"""

from .sanitizers import (
    sanitize_text,
    sanitize_name,
    sanitize_description,
    sanitize_price,
    sanitize_url,
    sanitize_email,
    sanitize_category,
    detect_attack,
)
from .rate_limiter import (
    AttemptRecord,
    AttemptStore,
    InMemoryAttemptStore,
    LoginRateLimiter,
    login_identifier,
    login_rate_limiter,
)
from .lockout_monitor import LockoutMonitor
from .validators import (
    ProductFormValidator,
    ProductValidationResult,
    RejectionReason,
    validate_image_upload,
    validate_credentials_input,
)

__all__ = [
    "sanitize_text",
    "sanitize_name",
    "sanitize_description",
    "sanitize_price",
    "sanitize_url",
    "sanitize_email",
    "sanitize_category",
    "detect_attack",
    "AttemptRecord",
    "AttemptStore",
    "InMemoryAttemptStore",
    "LoginRateLimiter",
    "login_identifier",
    "login_rate_limiter",
    "LockoutMonitor",
    "ProductFormValidator",
    "ProductValidationResult",
    "RejectionReason",
    "validate_image_upload",
    "validate_credentials_input",
]
