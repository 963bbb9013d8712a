"""
Unit tests for the product service.

Tests validated saves, deletion with image cleanup and image uploads.
"""

from unittest.mock import AsyncMock

import pytest
from storefront.clients.store_backend_client import StoreBackendClient
from storefront.core.exceptions import (
    BackendAPIError,
    ProductNotFoundError,
    ValidationError,
)
from storefront.models.payment import ImageUploadResult
from storefront.services.product_service import ProductService
from storefront.storage.product_store import InMemoryProductStore


@pytest.fixture
def backend():
    return AsyncMock(spec=StoreBackendClient)


@pytest.fixture
def store():
    return InMemoryProductStore()


@pytest.fixture
def service(store, backend):
    return ProductService("store1", store, backend)


@pytest.mark.asyncio
class TestProductSave:
    """Tests for ProductService.save."""

    async def test_add_product(self, service, store):
        """Test that a valid draft is stored with an id."""
        saved = await service.save({'name': 'Shoe', 'price': '19.99', 'inStock': False})

        assert saved.id
        assert saved.name == 'Shoe'
        assert saved.in_stock is False
        assert store.get(saved.id) == saved

    async def test_rejected_draft_not_stored(self, service, store):
        """Test that a rejected draft raises and stores nothing."""
        with pytest.raises(ValidationError) as exc_info:
            await service.save({'name': 'Shoe', 'price': '19.99', 'externalPaymentUrl': 'javascript:x'})

        assert exc_info.value.reason == 'invalid-payment-url'
        assert store.list() == []

    async def test_update_product(self, service):
        """Test that an update replaces the stored product."""
        saved = await service.save({'name': 'Shoe', 'price': '19.99'})

        updated = await service.save({'name': 'Boot', 'price': '29.99'}, product_id=saved.id)

        assert updated.id == saved.id
        assert service.get(saved.id).name == 'Boot'
        assert len(service.list()) == 1

    async def test_update_missing_product(self, service):
        """Test that updating an unknown id raises ProductNotFoundError."""
        with pytest.raises(ProductNotFoundError):
            await service.save({'name': 'Shoe', 'price': '1'}, product_id='missing')


@pytest.mark.asyncio
class TestProductDelete:
    """Tests for ProductService.delete."""

    async def test_delete_with_image(self, service, backend):
        """Test that the uploaded image is deleted with the product."""
        backend.delete_product_image.return_value = True
        saved = await service.save({'name': 'Shoe', 'price': '5', 'driveFileId': 'file-1'})

        await service.delete(saved.id)

        backend.delete_product_image.assert_awaited_once_with('store1', 'file-1')
        assert service.list() == []

    async def test_image_delete_failure_still_deletes(self, service, backend):
        """Test that an image cleanup failure does not block deletion."""
        backend.delete_product_image.side_effect = BackendAPIError("down", status_code=503)
        saved = await service.save({'name': 'Shoe', 'price': '5', 'driveFileId': 'file-1'})

        await service.delete(saved.id)

        assert service.list() == []

    async def test_delete_without_image(self, service, backend):
        """Test that products without an image skip the backend."""
        saved = await service.save({'name': 'Shoe', 'price': '5'})

        await service.delete(saved.id)

        backend.delete_product_image.assert_not_awaited()

    async def test_delete_missing(self, service):
        """Test that deleting an unknown id raises ProductNotFoundError."""
        with pytest.raises(ProductNotFoundError):
            await service.delete('missing')


@pytest.mark.asyncio
class TestImageUpload:
    """Tests for ProductService.upload_image."""

    async def test_upload(self, service, backend):
        """Test that a valid image is uploaded under a safe name."""
        backend.upload_product_image.return_value = ImageUploadResult(
            url='https://drive.example.com/img', file_id='file-9'
        )

        result = await service.upload_image(
            'uid-1', 'my shoe.png', 'image/png', b'\x89PNG', product_name='Blue Shoe'
        )

        assert result.file_id == 'file-9'
        backend.upload_product_image.assert_awaited_once_with(
            project_id='store1',
            user_id='uid-1',
            filename='my_shoe.png',
            content=b'\x89PNG',
            content_type='image/png',
            product_name='Blue Shoe',
        )

    async def test_default_product_name(self, service, backend):
        """Test the generated product name when none is given."""
        backend.upload_product_image.return_value = ImageUploadResult(needs_connection=True)

        result = await service.upload_image('uid-1', 'shoe.jpg', 'image/jpeg', b'jpg')

        assert result.needs_connection is True
        product_name = backend.upload_product_image.await_args.kwargs['product_name']
        assert product_name.startswith('product-')

    async def test_invalid_image_not_uploaded(self, service, backend):
        """Test that an invalid file never reaches the backend."""
        with pytest.raises(ValidationError):
            await service.upload_image('uid-1', 'page.html', 'text/html', b'<html>')

        backend.upload_product_image.assert_not_awaited()

    async def test_no_store_configured(self, store, backend):
        """Test that uploads need a store id."""
        service = ProductService("", store, backend)

        with pytest.raises(ValidationError) as exc_info:
            await service.upload_image('uid-1', 'shoe.png', 'image/png', b'png')

        assert exc_info.value.reason == 'store-not-configured'
