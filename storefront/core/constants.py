"""
Application Constants

Centralized constants used throughout the application.
"""

# Application metadata
APP_NAME = "storefront-admin"
APP_VERSION = "1.0.0"
APP_DESCRIPTION = "Storefront Admin - secure product management and store sign-in"

# HTTP status codes
HTTP_OK = 200
HTTP_TOO_MANY_REQUESTS = 429

# Default timeouts (seconds)
DEFAULT_REQUEST_TIMEOUT = 30
DEFAULT_CONNECT_TIMEOUT = 5

# Retry configuration defaults
DEFAULT_MAX_RETRIES = 3
DEFAULT_INITIAL_BACKOFF = 1.0
DEFAULT_MAX_BACKOFF = 30.0
DEFAULT_BACKOFF_MULTIPLIER = 2.0
DEFAULT_JITTER_FACTOR = 0.3

# Connection pool limits
MAX_KEEPALIVE_CONNECTIONS = 10
MAX_CONNECTIONS = 20

# Store backend
DEFAULT_API_URL = "https://api.alimi.ai"
DEFAULT_IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"

# Login rate limiting
LOGIN_MAX_ATTEMPTS = 5
LOGIN_LOCKOUT_MINUTES = 15
LOCKOUT_POLL_INTERVAL_SECONDS = 10
LOGIN_IDENTIFIER_PREFIX = "login_"
DEFAULT_STORE_IDENTIFIER = "default"

# Ownership verification failure policies
OWNERSHIP_POLICY_FAIL_CLOSED = "fail-closed"
OWNERSHIP_POLICY_FAIL_OPEN = "fail-open"

# Local storage keys
STORAGE_KEY_USER_ID = "userId"
STORAGE_KEY_PROJECT_ID = "projectId"

# Sanitization limits
MAX_TEXT_LENGTH = 1000
MAX_NAME_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 5000
MAX_PRICE_LENGTH = 10
MAX_URL_LENGTH = 2000
MAX_EMAIL_LENGTH = 254
MAX_CATEGORY_LENGTH = 100
MAX_PASSWORD_LENGTH = 128

# Product image uploads
ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp")
ALLOWED_IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "gif", "webp")
MAX_IMAGE_SIZE_BYTES = 5 * 1024 * 1024

# HTTP headers
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_RETRY_AFTER = "Retry-After"

# Content types
CONTENT_TYPE_JSON = "application/json"

# Firebase error codes (normalized)
AUTH_ERROR_INVALID_CREDENTIAL = "auth/invalid-credential"
AUTH_ERROR_USER_NOT_FOUND = "auth/user-not-found"
AUTH_ERROR_WRONG_PASSWORD = "auth/wrong-password"
AUTH_ERROR_INVALID_EMAIL = "auth/invalid-email"
AUTH_ERROR_TOO_MANY_REQUESTS = "auth/too-many-requests"
AUTH_ERROR_USER_DISABLED = "auth/user-disabled"
AUTH_ERROR_NETWORK = "auth/network-request-failed"
AUTH_ERROR_UNKNOWN = "auth/internal-error"

# User-facing messages
MSG_INIT_FAILED = "Failed to initialize authentication. Please refresh the page."
MSG_LOCKED_OUT = "Too many failed attempts. Please try again in {minutes} minutes."
MSG_LOCKED_TRY_LATER = "Too many failed attempts. Please try again later."
MSG_INVALID_INPUT = "Invalid input detected."
MSG_INVALID_CREDENTIALS = "Invalid email or password. {attempts} attempts remaining."
MSG_INVALID_EMAIL = "Invalid email format"
MSG_LOGIN_FAILED = "Login failed. Please try again."
MSG_SIGN_IN_IN_PROGRESS = "Sign-in already in progress"
MSG_NOT_OWNER = (
    "You don't have permission to manage this store. "
    "Please sign in with the account that owns this website."
)
MSG_OWNERSHIP_UNVERIFIED = "Could not verify store ownership. Please try again later."
MSG_PAYMENT_SETUP_COMPLETE = "Payment setup completed successfully!"
MSG_PAYMENT_SETUP_INCOMPLETE = "Please complete your payment setup"
MSG_PAYMENT_SETUP_UNAVAILABLE = "Unable to set up payments. Please try again."
