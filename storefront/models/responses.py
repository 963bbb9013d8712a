"""
Response Models

Pydantic models for API responses.
"""

from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field, ConfigDict


class BaseResponse(BaseModel):
    """Base response model for all API responses."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "success": True,
                    "message": "Operation completed successfully"
                }
            ]
        }
    )

    success: bool = Field(
        ...,
        description="Whether the operation was successful"
    )
    message: Optional[str] = Field(
        default=None,
        description="Human-readable message"
    )


class ErrorResponse(BaseModel):
    """Error response model."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "error": "ValidationError",
                    "message": "Please enter a valid price greater than 0",
                    "details": {"reason": "invalid-price"}
                }
            ]
        }
    )

    error: str = Field(
        ...,
        description="Error type"
    )
    message: str = Field(
        ...,
        description="Error message"
    )
    details: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Additional error details"
    )


class HealthResponse(BaseResponse):
    """Health check response."""

    version: str = Field(
        ...,
        description="Server version"
    )
    status: str = Field(
        default="ok",
        description="Server status"
    )
    auth_state: str = Field(
        ...,
        description="Admin session state"
    )


class SessionResponse(BaseResponse):
    """Admin session snapshot."""

    state: str = Field(..., description="loading, error, login, verifying, not-owner or authenticated")
    user_id: Optional[str] = Field(default=None, description="Signed-in user id")
    email: Optional[str] = Field(default=None, description="Signed-in user email")
    is_owner: bool = Field(default=False, description="Whether the user owns the store")
    locked: bool = Field(default=False, description="Whether sign-in is locked")
    lockout_minutes: int = Field(default=0, description="Minutes left in the lockout")
    store_id: str = Field(default="", description="Store (project) id")


class LoginResponse(SessionResponse):
    """Sign-in result."""

    attempts_left: int = Field(..., description="Failed attempts still allowed")


class ProductModel(BaseModel):
    """A stored product."""

    id: Optional[str] = None
    name: str
    price: float
    description: str = ""
    image: str = ""
    category: str = ""
    in_stock: bool = True
    external_payment_url: str = ""
    drive_file_id: Optional[str] = None


class ProductResponse(BaseResponse):
    """Single product response."""

    product: ProductModel


class ProductListResponse(BaseResponse):
    """Product catalog response."""

    products: List[ProductModel] = Field(default_factory=list)
    total: int = Field(..., description="Number of products")


class PaymentStatusResponse(BaseResponse):
    """Stripe Connect status."""

    loading: bool
    connected: bool
    charges_enabled: bool
    account_id: Optional[str] = None


class OnboardingResponse(BaseResponse):
    """Stripe Connect onboarding link."""

    onboarding_url: str


class PaymentNoticeResponse(BaseResponse):
    """Result of handling the onboarding return parameters."""

    notice: Optional[str] = Field(default=None, description="Message to show, if any")


class ImageUploadResponse(BaseResponse):
    """Product image upload result."""

    url: str = ""
    file_id: Optional[str] = None
    needs_connection: bool = False
