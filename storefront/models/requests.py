"""
Request Models

Pydantic models for API request parsing.

Field contents are deliberately loose: sanitization and validation happen in
the session and ProductFormValidator, which must see the raw values (for
attack detection, attempt counting and user-facing rejection messages).
"""

from typing import Any, Optional
from pydantic import BaseModel, Field, ConfigDict

from storefront.models.product import ProductDraft


class LoginRequest(BaseModel):
    """Request model for the admin sign-in form."""

    email: str = Field(
        ...,
        description="Account email",
        max_length=10000,
        examples=["owner@example.com"]
    )
    password: str = Field(
        ...,
        description="Account password (never logged)",
        max_length=10000
    )

    def __repr__(self) -> str:
        return f"LoginRequest(email={self.email!r})"


class ProductRequest(BaseModel):
    """Request model for adding or editing a product."""

    model_config = ConfigDict(populate_by_name=True)

    name: Any = Field(default="", description="Product name")
    description: Any = Field(default="", description="Product description (limited markup allowed)")
    price: Any = Field(default="", description="Price, as entered", examples=["19.99"])
    image: Any = Field(default="", description="Image URL from an earlier upload")
    category: Any = Field(default="", description="Category label")
    in_stock: Any = Field(default=True, alias="inStock", description="Availability flag")
    external_payment_url: Any = Field(
        default="",
        alias="externalPaymentUrl",
        description="Optional external checkout link (http/https only)"
    )
    drive_file_id: Optional[Any] = Field(
        default=None,
        alias="driveFileId",
        description="Uploaded image file id"
    )

    def to_draft(self) -> ProductDraft:
        """Convert to an untrusted ProductDraft."""
        return ProductDraft(
            name=self.name,
            description=self.description,
            price=self.price,
            image=self.image,
            category=self.category,
            in_stock=self.in_stock,
            external_payment_url=self.external_payment_url,
            drive_file_id=self.drive_file_id,
        )
