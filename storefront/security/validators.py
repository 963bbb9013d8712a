"""
Input Validation Module

Validates admin form submissions before anything is persisted:

- ProductFormValidator: sanitizes a product draft, rejects attack input and
  enforces the product business rules
- validate_image_upload: checks an image file before it is uploaded
- validate_credentials_input: pre-flight checks on sign-in input
"""

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Union

from loguru import logger

from storefront.core.constants import (
    ALLOWED_IMAGE_TYPES,
    ALLOWED_IMAGE_EXTENSIONS,
    MAX_IMAGE_SIZE_BYTES,
    MAX_PASSWORD_LENGTH,
)
from storefront.core.exceptions import ValidationError
from storefront.models.product import Product, ProductDraft
from storefront.security.sanitizers import (
    sanitize_text,
    sanitize_name,
    sanitize_description,
    sanitize_price,
    sanitize_url,
    sanitize_category,
    detect_attack,
    preview_for_logging,
)


class RejectionReason(str, Enum):
    """Why a product draft was rejected."""
    INVALID_INPUT = "invalid-input"
    NAME_REQUIRED = "name-required"
    INVALID_PRICE = "invalid-price"
    INVALID_PAYMENT_URL = "invalid-payment-url"

    @property
    def message(self) -> str:
        return REJECTION_MESSAGES[self]


REJECTION_MESSAGES = {
    RejectionReason.INVALID_INPUT: (
        "Invalid characters detected. Please remove special characters and try again."
    ),
    RejectionReason.NAME_REQUIRED: "Product name is required",
    RejectionReason.INVALID_PRICE: "Please enter a valid price",
    RejectionReason.INVALID_PAYMENT_URL: (
        "Invalid payment URL. Must start with http:// or https://"
    ),
}


@dataclass
class ProductValidationResult:
    """
    Either a validated product or the reason the draft was rejected.

    Attributes:
        product: Sanitized product (None when rejected)
        reason: Rejection reason (None when valid)
    """
    product: Optional[Product] = None
    reason: Optional[RejectionReason] = None

    @property
    def ok(self) -> bool:
        return self.reason is None

    def unwrap(self) -> Product:
        """
        Return the product or raise the rejection.

        Raises:
            ValidationError: If the draft was rejected
        """
        if self.reason is not None:
            raise ValidationError(self.reason.message, reason=self.reason.value)
        return self.product


class ProductFormValidator:
    """
    Validate product drafts from the admin form.

    Sanitization and attack detection are both applied: sanitized input that
    still looked like an attack in its raw form is rejected, not stored.

    Example:
        >>> validator = ProductFormValidator()
        >>> result = validator.validate({'name': 'Shoe', 'price': '19.99'})
        >>> result.ok
        True
        >>> validator.validate({'name': 'Shoe', 'price': '-5'}).reason
        <RejectionReason.INVALID_PRICE: 'invalid-price'>
    """

    def validate(self, draft: Union[ProductDraft, Mapping[str, Any]]) -> ProductValidationResult:
        """
        Sanitize and validate a draft.

        Args:
            draft: ProductDraft or a form mapping (snake_case or camelCase keys)

        Returns:
            ProductValidationResult with the sanitized product or a reason
        """
        if not isinstance(draft, ProductDraft):
            draft = ProductDraft.from_mapping(draft)

        name = sanitize_name(draft.name)
        description = sanitize_description(draft.description)
        price_text = sanitize_price(draft.price)
        category = sanitize_category(draft.category)
        image = sanitize_url(draft.image)
        external_payment_url = sanitize_url(draft.external_payment_url)
        drive_file_id = sanitize_text(draft.drive_file_id) or None

        for field_name in ('name', 'description', 'category'):
            raw = getattr(draft, field_name)
            if detect_attack(raw):
                logger.warning(
                    f"Attack pattern detected in product {field_name}: "
                    f"'{preview_for_logging(raw)}'"
                )
                return ProductValidationResult(reason=RejectionReason.INVALID_INPUT)

        if not name:
            return ProductValidationResult(reason=RejectionReason.NAME_REQUIRED)

        price = self._parse_price(draft.price, price_text)
        if price is None:
            return ProductValidationResult(reason=RejectionReason.INVALID_PRICE)

        if not _is_blank(draft.external_payment_url) and not external_payment_url:
            return ProductValidationResult(reason=RejectionReason.INVALID_PAYMENT_URL)

        product = Product(
            name=name,
            description=description,
            price=price,
            image=image,
            category=category,
            in_stock=bool(draft.in_stock),
            external_payment_url=external_payment_url,
            drive_file_id=drive_file_id,
        )
        return ProductValidationResult(product=product)

    @staticmethod
    def _parse_price(raw: Any, sanitized: str) -> Optional[float]:
        """
        Turn the sanitized price into a positive finite float.

        Sanitizing drops a minus sign, so negativity is read from the raw
        value: '-5' is rejected rather than becoming 5.
        """
        if isinstance(raw, (int, float)) and not isinstance(raw, bool) and raw <= 0:
            return None
        if isinstance(raw, str) and raw.strip().startswith('-'):
            return None

        try:
            price = float(sanitized)
        except ValueError:
            return None

        if not math.isfinite(price) or price <= 0:
            return None
        return price


def _is_blank(value: Any) -> bool:
    """True for None, non-strings and whitespace-only strings."""
    return not isinstance(value, str) or not value.strip()


# Characters allowed in uploaded file names; everything else becomes '_'
UNSAFE_FILENAME_CHARS = re.compile(r'[^a-zA-Z0-9._-]')


def validate_image_upload(filename: str, content_type: str, size: int) -> str:
    """
    Check an image before upload and return a safe file name.

    Args:
        filename: Original file name
        content_type: Declared MIME type
        size: File size in bytes

    Returns:
        File name with unsafe characters replaced by '_'

    Raises:
        ValidationError: If the type, extension or size is not allowed

    Example:
        >>> validate_image_upload('my shoe.png', 'image/png', 1024)
        'my_shoe.png'
    """
    if content_type not in ALLOWED_IMAGE_TYPES:
        raise ValidationError(
            "Only JPEG, PNG, GIF, and WebP images are allowed",
            reason="invalid-image-type",
            details={'content_type': content_type}
        )

    extension = filename.rsplit('.', 1)[-1].lower() if '.' in filename else ''
    if extension not in ALLOWED_IMAGE_EXTENSIONS:
        raise ValidationError("Invalid file extension", reason="invalid-image-extension")

    if size > MAX_IMAGE_SIZE_BYTES:
        raise ValidationError(
            "Image must be less than 5MB",
            reason="image-too-large",
            details={'size': size}
        )

    return UNSAFE_FILENAME_CHARS.sub('_', filename)


def validate_credentials_input(email: Any, password: Any) -> bool:
    """
    Pre-flight check of raw sign-in input.

    Returns:
        False if either value looks like an attack or the password is
        longer than the sign-in form allows
    """
    if detect_attack(email) or detect_attack(password):
        logger.warning(
            f"Attack pattern detected in sign-in input for '{preview_for_logging(email)}'"
        )
        return False

    if isinstance(password, str) and len(password) > MAX_PASSWORD_LENGTH:
        logger.warning("Sign-in rejected: password exceeds maximum length")
        return False

    return True
