"""
Unit tests for OrderService
"""
import asyncio
import pytest
from decimal import Decimal
from unittest.mock import MagicMock, AsyncMock

from gamestore.core.exceptions import NotFoundError, DiscountCodeError
from gamestore.domain.cart import CartQuote
from gamestore.domain.order import CheckoutRequest, OrderItem
from gamestore.services.order_service import OrderService


@pytest.fixture
def order_repo():
    return MagicMock()


@pytest.fixture
def discounts():
    return MagicMock()


@pytest.fixture
def notifications():
    mock = MagicMock()
    mock.send_order_notification = AsyncMock(return_value=True)
    mock.send_order_confirmation = AsyncMock(return_value=False)
    return mock


@pytest.fixture
def service(order_repo, discounts, notifications):
    return OrderService(order_repo=order_repo, discount_service=discounts, notifications=notifications)


@pytest.fixture
def checkout_request():
    return CheckoutRequest(
        customer={
            'first_name': 'Fahad', 'last_name': 'Alenezi',
            'email': 'fahad@example.com', 'phone': '+96550000000',
        },
        shipping_address={'address': 'Block 4', 'city': 'Kuwait City', 'area': 'Salmiya'},
        items=[{'product_id': 1, 'quantity': 1}],
        promo_code='welcome10',
    )


@pytest.fixture
def quote():
    return CartQuote(
        items=[OrderItem(product_id=1, title='إله الحرب', price=Decimal('19.990'), quantity=1)],
        subtotal=Decimal('19.990'),
        shipping_cost=Decimal('2.000'),
        discount=Decimal('1.999'),
        total=Decimal('19.991'),
        promo_code='WELCOME10',
    )


class TestCheckout:

    def test_checkout_stores_server_side_totals(
        self, service, order_repo, discounts, notifications, checkout_request, quote, make_order
    ):
        # Arrange
        discounts.quote.return_value = quote
        order_repo.create.return_value = make_order(total=Decimal('19.991'))

        # Act
        order = asyncio.run(service.checkout(checkout_request))

        # Assert
        discounts.quote.assert_called_once_with(checkout_request.items, 'welcome10', 'fahad@example.com')
        data, kwargs = order_repo.create.call_args[0][0], order_repo.create.call_args[1]
        assert data['total'] == Decimal('19.991')
        assert data['promo_code'] == 'WELCOME10'
        assert data['payment_method'] == 'knet'
        assert kwargs == {'redeem_code': 'WELCOME10'}
        assert order.order_number == 'ORD-2025-0001'

        # E-mails carry the formatted KWD total
        args = notifications.send_order_notification.call_args[0]
        assert args[0] == 'ORD-2025-0001'
        assert args[3] == 'د.ك 19.991'
        notifications.send_order_confirmation.assert_awaited_once()

    def test_failed_email_does_not_fail_checkout(
        self, service, order_repo, discounts, notifications, checkout_request, quote, make_order
    ):
        # Arrange
        discounts.quote.return_value = quote
        order_repo.create.return_value = make_order()
        notifications.send_order_notification.return_value = False

        # Act
        order = asyncio.run(service.checkout(checkout_request))

        # Assert
        assert order.id == 1

    def test_invalid_code_stops_checkout(self, service, order_repo, discounts, checkout_request):
        # Arrange
        discounts.quote.side_effect = DiscountCodeError('WELCOME10', 'is invalid or inactive')

        # Act / Assert
        with pytest.raises(DiscountCodeError):
            asyncio.run(service.checkout(checkout_request))
        order_repo.create.assert_not_called()


class TestManagement:

    def test_search_rejects_inverted_dates(self, service):
        from datetime import date

        with pytest.raises(ValueError, match="date_from"):
            service.search(date_from=date(2025, 3, 1), date_to=date(2025, 2, 1))

    def test_update_status_validates(self, service, order_repo):
        with pytest.raises(ValueError):
            service.update_status(1, 'lost')
        order_repo.update_status.assert_not_called()

    def test_update_payment_status_missing_order(self, service, order_repo):
        order_repo.update_payment_status.return_value = None

        with pytest.raises(NotFoundError):
            service.update_payment_status(1, 'paid')

    def test_add_note_is_timestamped(self, service, order_repo, make_order):
        # Arrange
        order_repo.append_note.return_value = make_order()

        # Act
        service.add_note(1, '  Customer asked for evening delivery ', author='admin@store.com')

        # Assert
        line = order_repo.append_note.call_args[0][1]
        assert line.startswith('[')
        assert line.endswith('] admin@store.com: Customer asked for evening delivery')

    def test_empty_note(self, service):
        with pytest.raises(ValueError, match="empty"):
            service.add_note(1, '   ')
