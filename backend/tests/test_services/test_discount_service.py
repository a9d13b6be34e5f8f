"""
Unit tests for DiscountService: validation and cart quotes
"""
import pytest
from decimal import Decimal
from unittest.mock import MagicMock

from gamestore.core.exceptions import NotFoundError, DiscountCodeError
from gamestore.domain.discount import DiscountCodeUpdate
from gamestore.domain.order import CheckoutItem
from gamestore.services.discount_service import (
    DiscountService, REASON_INVALID, REASON_EXHAUSTED, REASON_ALREADY_USED,
)


@pytest.fixture
def repos():
    return MagicMock(), MagicMock(), MagicMock()


@pytest.fixture
def service(repos):
    discounts, products, orders = repos
    return DiscountService(discount_repo=discounts, product_repo=products, order_repo=orders)


class TestValidate:

    def test_valid_code(self, service, repos, make_discount):
        # Arrange
        discounts, _, _ = repos
        discounts.find_by_code.return_value = make_discount()

        # Act
        result = service.validate(" welcome10 ")

        # Assert
        discounts.find_by_code.assert_called_once_with("WELCOME10")
        assert result.valid is True
        assert result.discount.code == "WELCOME10"

    def test_unknown_code(self, service, repos):
        repos[0].find_by_code.return_value = None

        result = service.validate("NOPE")

        assert result.valid is False
        assert result.reason == REASON_INVALID

    def test_inactive_code(self, service, repos, make_discount):
        repos[0].find_by_code.return_value = make_discount(is_active=False)

        assert service.validate("WELCOME10").reason == REASON_INVALID

    def test_exhausted_code(self, service, repos, make_discount):
        repos[0].find_by_code.return_value = make_discount(usage_limit=5, used_count=5)

        assert service.validate("WELCOME10").reason == REASON_EXHAUSTED

    def test_one_user_only_already_used(self, service, repos, make_discount):
        # Arrange
        discounts, _, orders = repos
        discounts.find_by_code.return_value = make_discount(one_user_only=True)
        orders.has_used_code.return_value = True

        # Act
        result = service.validate("WELCOME10", email="sara@example.com")

        # Assert
        orders.has_used_code.assert_called_once_with("sara@example.com", "WELCOME10")
        assert result.reason == REASON_ALREADY_USED

    def test_one_user_only_without_email_is_valid(self, service, repos, make_discount):
        discounts, _, orders = repos
        discounts.find_by_code.return_value = make_discount(one_user_only=True)

        assert service.validate("WELCOME10").valid is True
        orders.has_used_code.assert_not_called()

    def test_require_valid_raises(self, service, repos):
        repos[0].find_by_code.return_value = None

        with pytest.raises(DiscountCodeError):
            service.require_valid("NOPE")

    def test_redeem_exhausted_raises(self, service, repos):
        repos[0].redeem.return_value = False

        with pytest.raises(DiscountCodeError):
            service.redeem("welcome10")


class TestCrud:

    def test_update_rejects_percentage_over_100(self, service, repos, make_discount):
        # Arrange: stored code is a fixed 150 KWD discount switching to percentage
        repos[0].find_by_id.return_value = make_discount(type="fixed", value=Decimal("150"))

        # Act / Assert
        with pytest.raises(ValueError, match="cannot exceed 100"):
            service.update_code(1, DiscountCodeUpdate(type="percentage"))
        repos[0].update.assert_not_called()

    def test_delete_missing_code(self, service, repos):
        repos[0].delete.return_value = False

        with pytest.raises(NotFoundError):
            service.delete_code(9)


class TestQuote:

    def test_physical_cart_pays_shipping(self, service, repos, make_product):
        # Arrange
        _, products, _ = repos
        products.find_by_ids.return_value = {1: make_product()}

        # Act
        quote = service.quote([CheckoutItem(product_id=1, quantity=2)])

        # Assert
        assert quote.subtotal == Decimal("39.980")
        assert quote.shipping_cost == Decimal("2.000")
        assert quote.total == Decimal("41.980")
        assert quote.is_digital_only is False

    def test_digital_only_cart_ships_free(self, service, repos, make_product):
        _, products, _ = repos
        products.find_by_ids.return_value = {1: make_product(is_digital=True)}

        quote = service.quote([CheckoutItem(product_id=1, quantity=1)])

        assert quote.shipping_cost == Decimal("0")
        assert quote.total == Decimal("19.990")

    def test_duplicate_lines_are_merged(self, service, repos, make_product):
        _, products, _ = repos
        products.find_by_ids.return_value = {1: make_product()}

        quote = service.quote([CheckoutItem(product_id=1, quantity=1), CheckoutItem(product_id=1, quantity=2)])

        assert len(quote.items) == 1
        assert quote.items[0].quantity == 3

    def test_percentage_code_applied(self, service, repos, make_product, make_discount):
        # Arrange
        discounts, products, _ = repos
        products.find_by_ids.return_value = {1: make_product()}
        discounts.find_by_code.return_value = make_discount()

        # Act
        quote = service.quote([CheckoutItem(product_id=1, quantity=1)], promo_code="welcome10")

        # Assert
        assert quote.discount == Decimal("1.999")
        assert quote.total == Decimal("19.991")
        assert quote.promo_code == "WELCOME10"

    def test_total_never_negative(self, service, repos, make_product, make_discount):
        discounts, products, _ = repos
        products.find_by_ids.return_value = {1: make_product(is_digital=True)}
        discounts.find_by_code.return_value = make_discount(type="fixed", value=Decimal("50"))

        quote = service.quote([CheckoutItem(product_id=1, quantity=1)], promo_code="BIG")

        assert quote.total == Decimal("0")

    def test_invalid_code_fails_quote(self, service, repos, make_product):
        discounts, products, _ = repos
        products.find_by_ids.return_value = {1: make_product()}
        discounts.find_by_code.return_value = None

        with pytest.raises(DiscountCodeError):
            service.quote([CheckoutItem(product_id=1, quantity=1)], promo_code="NOPE")

    def test_unknown_product(self, service, repos):
        repos[1].find_by_ids.return_value = {}

        with pytest.raises(NotFoundError):
            service.quote([CheckoutItem(product_id=5, quantity=1)])

    def test_insufficient_stock(self, service, repos, make_product):
        repos[1].find_by_ids.return_value = {1: make_product(stock=1)}

        with pytest.raises(ValueError, match="Only 1 unit"):
            service.quote([CheckoutItem(product_id=1, quantity=2)])

    def test_inactive_product(self, service, repos, make_product):
        repos[1].find_by_ids.return_value = {1: make_product(status="draft")}

        with pytest.raises(ValueError, match="not available"):
            service.quote([CheckoutItem(product_id=1, quantity=1)])
