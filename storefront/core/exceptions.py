"""
Custom Exceptions Module

Defines the exception hierarchy for the Storefront Admin service.

All application-specific exceptions inherit from StorefrontException
for easier error handling and filtering.
"""

from typing import Optional, Dict, Any


class StorefrontException(Exception):
    """
    Base exception for all Storefront Admin errors.

    All custom exceptions should inherit from this class.

    Attributes:
        message: Human-readable error message
        details: Optional dictionary with additional error context
        status_code: HTTP status code used when the error reaches the API
    """

    status_code: int = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize exception.

        Args:
            message: Error message
            details: Optional additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for API responses.

        Returns:
            Dictionary with error information
        """
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class AuthenticationError(StorefrontException):
    """
    Raised when an operation requires a signed-in store owner and there is none.

    Examples:
    - Product changes submitted while the session is in the login state
    - Payment onboarding started without an authenticated user
    """

    status_code = 401

    def __init__(self, message: str = "Authentication required", details: Optional[Dict] = None):
        super().__init__(message, details)


class AuthorizationError(StorefrontException):
    """Raised when the signed-in user does not own the store."""

    status_code = 403

    def __init__(self, message: str = "Not authorized for this store", details: Optional[Dict] = None):
        super().__init__(message, details)


class ValidationError(StorefrontException):
    """
    Raised when input validation fails.

    Attributes:
        reason: Machine-readable rejection reason (e.g. 'invalid-price')
    """

    def __init__(
        self,
        message: str,
        reason: Optional[str] = None,
        details: Optional[Dict] = None
    ):
        error_details = details or {}
        if reason:
            error_details['reason'] = reason

        super().__init__(message, error_details)
        self.reason = reason


class CredentialError(StorefrontException):
    """
    Raised by the credential provider when sign-in fails.

    Attributes:
        code: Normalized provider error code (e.g. 'auth/invalid-credential')
    """

    status_code = 401

    def __init__(
        self,
        message: str,
        code: str,
        details: Optional[Dict] = None
    ):
        error_details = details or {}
        error_details['code'] = code

        super().__init__(message, error_details)
        self.code = code


class ProviderInitializationError(StorefrontException):
    """
    Raised when the credential provider cannot be initialized.

    This is fatal for the session: it moves to the error state and only a
    full restart recovers it.
    """

    status_code = 503

    def __init__(self, message: str = "Credential provider initialization failed", details: Optional[Dict] = None):
        super().__init__(message, details)


class OwnershipVerificationError(StorefrontException):
    """
    Raised when the ownership verifier cannot be reached or answers garbage.

    An explicit "not owner" answer is NOT an error; it is a normal result.
    """

    status_code = 502

    def __init__(
        self,
        message: str = "Ownership verification failed",
        user_id: Optional[str] = None,
        details: Optional[Dict] = None
    ):
        error_details = details or {}
        if user_id:
            error_details['user_id'] = user_id

        super().__init__(message, error_details)


class BackendAPIError(StorefrontException):
    """
    Raised when a store backend request fails.

    Attributes:
        status_code: HTTP status code from the backend
        response_body: Response body from the backend (if available)
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        details: Optional[Dict] = None
    ):
        """
        Initialize backend API error.

        Args:
            message: Error message
            status_code: HTTP status code
            response_body: Response body from API
            details: Additional error details
        """
        error_details = details or {}
        if status_code:
            error_details['status_code'] = status_code
        if response_body:
            error_details['response_body'] = response_body[:500]

        super().__init__(message, error_details)
        self.status_code = status_code or 502
        self.response_body = response_body


class PaymentSetupError(StorefrontException):
    """Raised when Stripe Connect onboarding cannot be started."""

    status_code = 502


class RateLimitExceeded(StorefrontException):
    """
    Raised when the login rate limit is exceeded.

    Attributes:
        retry_after: Seconds to wait before retrying
    """

    status_code = 429

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        retry_after: Optional[float] = None,
        details: Optional[Dict] = None
    ):
        """
        Initialize rate limit exception.

        Args:
            message: Error message
            retry_after: Seconds to wait before retrying
            details: Additional error details
        """
        error_details = details or {}
        if retry_after:
            error_details['retry_after'] = retry_after

        super().__init__(message, error_details)
        self.retry_after = retry_after


class ProductNotFoundError(StorefrontException):
    """Raised when a product id does not exist in the product store."""

    status_code = 404

    def __init__(
        self,
        message: str,
        product_id: Optional[str] = None,
        details: Optional[Dict] = None
    ):
        error_details = details or {}
        if product_id:
            error_details['product_id'] = product_id

        super().__init__(message, error_details)


class ConfigurationError(StorefrontException):
    """
    Raised when configuration is invalid or missing.

    Examples:
    - Missing required configuration value
    - Invalid configuration format
    - Configuration file not found
    """

    status_code = 500

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        details: Optional[Dict] = None
    ):
        """
        Initialize configuration exception.

        Args:
            message: Error message
            config_key: Configuration key that caused the error
            details: Additional error details
        """
        error_details = details or {}
        if config_key:
            error_details['config_key'] = config_key

        super().__init__(message, error_details)
