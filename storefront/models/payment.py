"""
Payment and Media Models

Value objects returned by the store backend for Stripe Connect onboarding
and product image uploads.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class PaymentSetupStatus:
    """
    Stripe Connect status of a store.

    Attributes:
        loading: A status request is in flight
        connected: The store has a connected Stripe account
        charges_enabled: The account can accept card payments
        account_id: Stripe account id, if connected
    """
    loading: bool = True
    connected: bool = False
    charges_enabled: bool = False
    account_id: Optional[str] = None


@dataclass
class ImageUploadResult:
    """
    Outcome of a product image upload.

    Attributes:
        url: Public image URL ("" when the upload did not happen)
        file_id: Drive file id used to delete the image later
        needs_connection: The store has not connected Google Drive yet
    """
    url: str = ""
    file_id: Optional[str] = None
    needs_connection: bool = False


@dataclass
class PaymentNotice:
    """
    Message shown when the owner comes back from Stripe onboarding.

    Attributes:
        message: User-facing text
        success: True for a completed setup, False for an abandoned one
    """
    message: str
    success: bool
