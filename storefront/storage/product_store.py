"""
Product Store Module

CRUD storage for validated products. Only ProductService writes to it, and
only with products that passed ProductFormValidator.
"""

import uuid
from abc import ABC, abstractmethod
from dataclasses import replace
from threading import Lock
from typing import Dict, List, Optional

from storefront.core.exceptions import ProductNotFoundError
from storefront.models.product import Product


class ProductStore(ABC):
    """Product persistence."""

    @abstractmethod
    def add(self, product: Product) -> Product:
        """Store a new product and return it with its assigned id."""

    @abstractmethod
    def update(self, product_id: str, product: Product) -> Product:
        """Replace an existing product."""

    @abstractmethod
    def delete(self, product_id: str) -> None:
        """Remove a product."""

    @abstractmethod
    def get(self, product_id: str) -> Optional[Product]:
        """Return a product by id, or None."""

    @abstractmethod
    def list(self) -> List[Product]:
        """Return all products in insertion order."""


class InMemoryProductStore(ProductStore):
    """
    Process-local product store.

    Example:
        >>> store = InMemoryProductStore()
        >>> saved = store.add(Product(name='Shoe', price=19.99))
        >>> store.get(saved.id).name
        'Shoe'
    """

    def __init__(self):
        self._products: Dict[str, Product] = {}
        self._lock = Lock()

    def add(self, product: Product) -> Product:
        with self._lock:
            saved = replace(product, id=uuid.uuid4().hex)
            self._products[saved.id] = saved
            return replace(saved)

    def update(self, product_id: str, product: Product) -> Product:
        with self._lock:
            if product_id not in self._products:
                raise ProductNotFoundError(
                    f"Product not found: {product_id}",
                    product_id=product_id
                )
            saved = replace(product, id=product_id)
            self._products[product_id] = saved
            return replace(saved)

    def delete(self, product_id: str) -> None:
        with self._lock:
            if self._products.pop(product_id, None) is None:
                raise ProductNotFoundError(
                    f"Product not found: {product_id}",
                    product_id=product_id
                )

    def get(self, product_id: str) -> Optional[Product]:
        with self._lock:
            product = self._products.get(product_id)
            return replace(product) if product else None

    def list(self) -> List[Product]:
        with self._lock:
            return [replace(p) for p in self._products.values()]
