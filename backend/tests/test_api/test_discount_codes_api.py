"""
API tests for discount code endpoints
"""
import pytest
from unittest.mock import MagicMock

from gamestore.core.exceptions import DuplicateError
from gamestore.domain.discount import DiscountValidation
from gamestore.main import app
from gamestore.services.discount_service import get_discount_service


@pytest.fixture
def discounts():
    service = MagicMock()
    app.dependency_overrides[get_discount_service] = lambda: service
    return service


class TestValidateCode:

    def test_valid_code(self, client, discounts, make_discount):
        # Arrange
        discounts.validate.return_value = DiscountValidation(code='WELCOME10', valid=True, discount=make_discount())

        # Act
        response = client.get("/api/v1/discount-codes/validate", params={'code': 'welcome10'})

        # Assert
        assert response.status_code == 200
        assert response.json()['data'] == {
            'code': 'WELCOME10', 'valid': True, 'reason': None, 'type': 'percentage', 'value': 10.0,
        }
        discounts.validate.assert_called_once_with('welcome10', None)

    def test_invalid_code_is_still_200(self, client, discounts):
        discounts.validate.return_value = DiscountValidation(
            code='NOPE', valid=False, reason='Discount code NOPE is invalid or inactive'
        )

        response = client.get("/api/v1/discount-codes/validate", params={'code': 'NOPE', 'email': 'a@b.com'})

        assert response.status_code == 200
        assert response.json()['data']['valid'] is False
        assert 'type' not in response.json()['data']


class TestManageCodes:

    def test_list_requires_admin(self, client, discounts):
        assert client.get("/api/v1/discount-codes/").status_code == 401

    def test_list(self, client, as_admin, discounts, make_discount):
        discounts.list_codes.return_value = [make_discount(), make_discount(id=2, code='EID25')]

        response = client.get("/api/v1/discount-codes/")

        assert response.json()['count'] == 2

    def test_create_duplicate(self, client, as_admin, discounts):
        discounts.create_code.side_effect = DuplicateError("Discount code 'EID25' already exists")

        response = client.post("/api/v1/discount-codes/", json={
            'code': 'EID25', 'type': 'percentage', 'value': '25', 'usage_limit': 50,
        })

        assert response.status_code == 400
