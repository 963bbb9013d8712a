"""
Product Models

Internal product records: the raw draft submitted from the admin form and
the validated product that reaches the product store.
"""

from dataclasses import dataclass, asdict, field
from typing import Any, Dict, Mapping, Optional


# Admin form field names (camelCase) -> draft attribute names
DRAFT_FIELD_ALIASES = {
    'inStock': 'in_stock',
    'externalPaymentUrl': 'external_payment_url',
    'driveFileId': 'drive_file_id',
}


@dataclass
class ProductDraft:
    """
    Untrusted product data as submitted by the admin form.

    Every attribute may hold anything (missing values, numbers, markup);
    ProductFormValidator turns a draft into a Product or a rejection.
    """
    name: Any = ""
    description: Any = ""
    price: Any = ""
    image: Any = ""
    category: Any = ""
    in_stock: Any = True
    external_payment_url: Any = ""
    drive_file_id: Any = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ProductDraft":
        """
        Build a draft from form data, accepting snake_case or camelCase keys.

        Unknown keys are ignored.

        Example:
            >>> ProductDraft.from_mapping({'name': 'Shoe', 'externalPaymentUrl': 'https://pay'})
        """
        values: Dict[str, Any] = {}
        known = cls.__dataclass_fields__
        for key, value in data.items():
            attr = DRAFT_FIELD_ALIASES.get(key, key)
            if attr in known:
                values[attr] = value
        return cls(**values)


@dataclass
class Product:
    """
    A validated product.

    Attributes:
        name: Non-empty, at most 200 characters
        description: At most 5000 characters, no script/iframe blocks
        price: Finite, greater than zero
        image: http(s) image URL or ""
        category: At most 100 characters
        in_stock: Availability flag
        external_payment_url: "" or an http(s) checkout link
        drive_file_id: Id of the uploaded image in the store's Drive, if any
        id: Assigned by the product store
    """
    name: str
    price: float
    description: str = ""
    image: str = ""
    category: str = ""
    in_stock: bool = True
    external_payment_url: str = ""
    drive_file_id: Optional[str] = None
    id: Optional[str] = field(default=None)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dictionary."""
        return asdict(self)
