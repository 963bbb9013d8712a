"""
Product Service Module

Business logic for managing the store's products. Every write goes through
ProductFormValidator first.
"""

import time
from typing import List, Mapping, Optional, Union, Any

from storefront.clients.store_backend_client import StoreBackendClient
from storefront.core.exceptions import (
    BackendAPIError,
    ProductNotFoundError,
    ValidationError,
)
from storefront.core.logging_config import add_store_context
from storefront.models.payment import ImageUploadResult
from storefront.models.product import Product, ProductDraft
from storefront.security.sanitizers import sanitize_name, sanitize_text
from storefront.security.validators import ProductFormValidator, validate_image_upload
from storefront.storage.product_store import ProductStore


class ProductService:
    """
    Service for product operations.

    Example:
        >>> products = ProductService('store1', InMemoryProductStore(), backend)
        >>> saved = await products.save({'name': 'Shoe', 'price': '19.99'})
        >>> await products.delete(saved.id)
    """

    def __init__(
        self,
        store_id: str,
        store: ProductStore,
        backend: StoreBackendClient,
        validator: Optional[ProductFormValidator] = None
    ):
        self.store_id = store_id
        self._store = store
        self._backend = backend
        self._validator = validator or ProductFormValidator()
        self._log = add_store_context(store_id or "default")

    def list(self) -> List[Product]:
        return self._store.list()

    def get(self, product_id: str) -> Product:
        """
        Raises:
            ProductNotFoundError: If the product does not exist
        """
        product = self._store.get(product_id)
        if product is None:
            raise ProductNotFoundError(f"Product not found: {product_id}", product_id=product_id)
        return product

    async def save(
        self,
        draft: Union[ProductDraft, Mapping[str, Any]],
        product_id: Optional[str] = None
    ) -> Product:
        """
        Validate a product form and store it.

        Args:
            draft: Raw form values
            product_id: Existing product to replace (None = add a new one)

        Returns:
            The stored product

        Raises:
            ValidationError: If the form is rejected (reason in .reason)
            ProductNotFoundError: If product_id does not exist
        """
        product = self._validator.validate(draft).unwrap()

        if product_id is None:
            saved = self._store.add(product)
            self._log.info(f"Product added: {saved.id}")
        else:
            saved = self._store.update(product_id, product)
            self._log.info(f"Product updated: {saved.id}")

        return saved

    async def delete(self, product_id: str) -> None:
        """
        Delete a product and, best effort, its uploaded image.

        Raises:
            ProductNotFoundError: If the product does not exist
        """
        product = self.get(product_id)

        if product.drive_file_id and self.store_id:
            try:
                deleted = await self._backend.delete_product_image(
                    sanitize_text(self.store_id),
                    sanitize_text(product.drive_file_id)
                )
                if deleted:
                    self._log.info(f"Image {product.drive_file_id} deleted for product {product_id}")
            except BackendAPIError as e:
                self._log.warning(f"Could not delete image for product {product_id}: {e.message}")

        self._store.delete(product_id)
        self._log.info(f"Product deleted: {product_id}")

    async def upload_image(
        self,
        user_id: str,
        filename: str,
        content_type: str,
        content: bytes,
        product_name: Optional[str] = None
    ) -> ImageUploadResult:
        """
        Validate and upload a product image.

        Returns:
            ImageUploadResult (needs_connection set when storage is not connected)

        Raises:
            ValidationError: If the file is rejected or no store is configured
            BackendAPIError: If the upload fails
        """
        safe_name = validate_image_upload(filename, content_type, len(content))

        if not self.store_id:
            raise ValidationError("No store is configured for uploads", reason="store-not-configured")

        name = sanitize_name(product_name) or f"product-{int(time.time() * 1000)}"
        result = await self._backend.upload_product_image(
            project_id=self.store_id,
            user_id=user_id,
            filename=safe_name,
            content=content,
            content_type=content_type,
            product_name=name,
        )
        if result.url:
            self._log.info(f"Image uploaded: {safe_name}")
        return result
