"""
API tests for product endpoints

The catalog service is replaced through FastAPI dependency overrides, so
these tests only check routing, status codes and response shape.
"""
import pytest
from unittest.mock import MagicMock

from gamestore.core.exceptions import NotFoundError, DuplicateError
from gamestore.main import app
from gamestore.services.catalog_service import get_catalog_service


@pytest.fixture
def catalog():
    service = MagicMock()
    app.dependency_overrides[get_catalog_service] = lambda: service
    return service


@pytest.fixture
def product_payload():
    return {
        'title_ar': 'إله الحرب راغناروك',
        'title_en': 'God of War Ragnarok',
        'description_ar': 'مغامرة ملحمية في عالم الأساطير',
        'description_en': 'Epic adventure through the Norse realms',
        'price': '19.990',
        'image': 'https://cdn.example.com/gow.jpg',
        'category': 'playstation',
        'sku': 'PS5-GOW-001',
        'tags': ['action'],
    }


class TestStorefront:

    def test_list_active_products(self, client, catalog, make_product):
        # Arrange
        catalog.list_active.return_value = [make_product()]

        # Act
        response = client.get("/api/v1/products/", params={'category': 'playstation'})

        # Assert
        assert response.status_code == 200
        body = response.json()
        assert body['status'] == 'success'
        assert body['count'] == 1
        assert body['data'][0]['price'] == 19.99
        assert body['data'][0]['savings_percentage'] == 20
        catalog.list_active.assert_called_once_with(category='playstation')

    def test_search_uses_search(self, client, catalog):
        catalog.search.return_value = []

        response = client.get("/api/v1/products/", params={'search': 'zelda'})

        assert response.status_code == 200
        catalog.search.assert_called_once_with('zelda', category=None)
        catalog.list_active.assert_not_called()

    def test_get_missing_product(self, client, catalog):
        catalog.get_product.side_effect = NotFoundError("Product", 99)

        response = client.get("/api/v1/products/99")

        assert response.status_code == 404
        assert response.json()['detail'] == "Product 99 not found"

    def test_unexpected_error_is_500(self, client, catalog):
        catalog.list_active.side_effect = RuntimeError("connection reset")

        response = client.get("/api/v1/products/")

        assert response.status_code == 500
        assert "connection reset" in response.json()['detail']


class TestAdminProducts:

    def test_admin_routes_require_token(self, client, catalog):
        response = client.get("/api/v1/products/admin/all")

        assert response.status_code == 401

    def test_create_product(self, client, as_admin, catalog, make_product, product_payload):
        # Arrange
        catalog.create_product.return_value = make_product()

        # Act
        response = client.post("/api/v1/products/", json=product_payload)

        # Assert
        assert response.status_code == 201
        created = catalog.create_product.call_args[0][0]
        assert created.sku == 'PS5-GOW-001'
        assert response.json()['data']['id'] == 1

    def test_create_rejects_unknown_category(self, client, as_admin, catalog, product_payload):
        response = client.post("/api/v1/products/", json={**product_payload, 'category': 'toys'})

        assert response.status_code == 422
        catalog.create_product.assert_not_called()

    def test_create_duplicate_sku(self, client, as_admin, catalog, product_payload):
        catalog.create_product.side_effect = DuplicateError("Product with SKU 'PS5-GOW-001' already exists")

        response = client.post("/api/v1/products/", json=product_payload)

        assert response.status_code == 400
        assert "PS5-GOW-001" in response.json()['detail']

    def test_admin_listing_passes_filters(self, client, as_admin, catalog, make_product):
        catalog.list_products.return_value = ([make_product(status='draft')], 1)

        response = client.get("/api/v1/products/admin/all", params={'status': 'draft', 'limit': 10})

        assert response.status_code == 200
        assert response.json()['total'] == 1
        assert catalog.list_products.call_args[1]['status'] == 'draft'
        assert catalog.list_products.call_args[1]['limit'] == 10

    def test_invalid_status(self, client, as_admin, catalog):
        catalog.set_status.side_effect = ValueError("Status must be one of: active, inactive, draft")

        response = client.patch("/api/v1/products/1/status", json={'status': 'archived'})

        assert response.status_code == 400

    def test_update_images(self, client, as_admin, catalog, make_product):
        images = ['https://cdn.example.com/b.jpg', 'https://cdn.example.com/a.jpg']
        catalog.update_images.return_value = make_product(image=images[0], images=images)

        response = client.put("/api/v1/products/1/images", json={'images': images})

        assert response.status_code == 200
        assert response.json()['data']['image'] == images[0]
        catalog.update_images.assert_called_once_with(1, images)

    def test_delete_product(self, client, as_admin, catalog):
        response = client.delete("/api/v1/products/1")

        assert response.status_code == 200
        catalog.delete_product.assert_called_once_with(1)
