"""
Models Module

Domain records (dataclasses) and pydantic models for request/response
validation and serialization.
"""

from .auth import (
    AuthState,
    AuthUser,
    LoginOutcome,
    OwnershipFailurePolicy,
    SessionSnapshot,
)
from .payment import ImageUploadResult, PaymentNotice, PaymentSetupStatus
from .product import Product, ProductDraft

from .requests import (
    LoginRequest,
    ProductRequest,
)

from .responses import (
    BaseResponse,
    ErrorResponse,
    HealthResponse,
    SessionResponse,
    LoginResponse,
    ProductModel,
    ProductResponse,
    ProductListResponse,
    PaymentStatusResponse,
    OnboardingResponse,
    PaymentNoticeResponse,
    ImageUploadResponse,
)

__all__ = [
    # Domain
    "AuthState",
    "AuthUser",
    "LoginOutcome",
    "OwnershipFailurePolicy",
    "SessionSnapshot",
    "ImageUploadResult",
    "PaymentNotice",
    "PaymentSetupStatus",
    "Product",
    "ProductDraft",
    # Requests
    "LoginRequest",
    "ProductRequest",
    # Responses
    "BaseResponse",
    "ErrorResponse",
    "HealthResponse",
    "SessionResponse",
    "LoginResponse",
    "ProductModel",
    "ProductResponse",
    "ProductListResponse",
    "PaymentStatusResponse",
    "OnboardingResponse",
    "PaymentNoticeResponse",
    "ImageUploadResponse",
]
