"""
Tests for the admin chat store data tools
"""
import json
from datetime import date
from decimal import Decimal
from unittest.mock import patch, MagicMock

import pytest

from gamestore.domain.order import OrderItem
from gamestore.services.ai import admin_chat_tools
from gamestore.services.ai.admin_chat_tools import (
    execute_tool, rank_best_sellers, summarize_discount_codes,
)


@pytest.fixture
def orders():
    service = MagicMock()
    with patch('gamestore.services.ai.admin_chat_tools.get_order_service', return_value=service):
        yield service


@pytest.fixture
def discounts():
    service = MagicMock()
    with patch('gamestore.services.ai.admin_chat_tools.get_discount_service', return_value=service):
        yield service


def _item(product_id, quantity, price='5.000', title=None):
    return OrderItem(product_id=product_id, title=title or f"منتج {product_id}", price=Decimal(price), quantity=quantity)


class TestAnalysis:

    def test_discount_summary(self, make_discount):
        # Arrange
        codes = [
            make_discount(code='WELCOME10', used_count=3),
            make_discount(code='FLAT2', type='fixed', value=Decimal('2'), usage_limit=5, used_count=5),
            make_discount(code='OLD', is_active=False),
        ]

        # Act
        summary = summarize_discount_codes(codes)

        # Assert
        assert summary['total'] == 3
        assert summary['active'] == 2
        assert summary['inactive'] == 1
        assert summary['available'] == 1
        assert summary['exhausted'] == 1
        assert summary['total_usage'] == 8
        assert summary['fixed_discount_given'] == 10.0
        assert summary['by_type'] == {'percentage': 2, 'fixed': 1}
        assert [c['code'] for c in summary['most_used']] == ['FLAT2', 'WELCOME10']

    def test_best_sellers_skip_cancelled_orders(self, make_order):
        # Arrange
        orders = [
            make_order(items=[_item(1, 2), _item(2, 1)]),
            make_order(items=[_item(2, 4, price='1.500')]),
            make_order(items=[_item(3, 10)], status='cancelled'),
        ]

        # Act
        ranked = rank_best_sellers(orders)

        # Assert
        assert [(e['product_id'], e['units']) for e in ranked] == [(2, 5), (1, 2)]
        assert ranked[0]['revenue'] == 11.0


class TestTools:

    def test_revenue_counts_paid_orders_only(self, orders, make_order):
        # Arrange
        orders.search.return_value = ([
            make_order(payment_status='paid', total=Decimal('20.000'), discount=Decimal('2.000')),
            make_order(payment_status='paid', total=Decimal('10.000')),
            make_order(payment_status='pending', total=Decimal('99.000')),
        ], 3)

        # Act
        data = json.loads(admin_chat_tools.get_revenue(date_from='2025-03-01', date_to='2025-03-31'))

        # Assert
        assert orders.search.call_args[1]['date_from'] == date(2025, 3, 1)
        assert orders.search.call_args[1]['date_to'] == date(2025, 3, 31)
        assert data['orders'] == 3
        assert data['paid_orders'] == 2
        assert data['revenue'] == 30.0
        assert data['average_order_value'] == 15.0
        assert data['discounts_given'] == 2.0

    def test_search_orders_without_results(self, orders):
        orders.search.return_value = ([], 0)

        data = json.loads(admin_chat_tools.search_orders(status='shipped'))

        assert data == {'message': 'No orders match these filters'}

    def test_search_orders_rows(self, orders, make_order):
        orders.search.return_value = ([make_order()], 1)

        data = json.loads(admin_chat_tools.search_orders(query='ORD-2025-0001'))

        assert data['orders'][0]['customer'] == 'Fahad Alenezi'
        assert data['orders'][0]['total'] == 21.99
        assert data['orders'][0]['items'] == 1

    def test_discount_codes_by_state(self, discounts, make_discount):
        discounts.list_codes.return_value = [
            make_discount(code='NEW', used_count=0),
            make_discount(code='USED', used_count=2),
        ]

        data = json.loads(admin_chat_tools.get_discount_codes(state='unused'))

        assert [c['code'] for c in data['codes']] == ['NEW']
        assert data['summary']['total'] == 2

    def test_unknown_discount_state(self, discounts):
        data = json.loads(admin_chat_tools.get_discount_codes(state='expired-soon'))

        assert data['error'].startswith("Unknown state 'expired-soon'")
        discounts.list_codes.assert_not_called()

    def test_export_link(self):
        data = json.loads(admin_chat_tools.export_data('messages', status='unread'))

        assert data == {'action': 'export', 'kind': 'messages', 'url': '/api/v1/data/export/messages?status=unread'}

    def test_export_ignores_status_for_products(self):
        data = json.loads(admin_chat_tools.export_data('products', status='active'))

        assert data['url'] == '/api/v1/data/export/products'

    def test_unknown_export(self):
        assert 'error' in json.loads(admin_chat_tools.export_data('customers'))


class TestExecuteTool:

    def test_unknown_tool(self):
        assert json.loads(execute_tool('drop_tables', {})) == {'error': "Tool 'drop_tables' not found"}

    def test_invalid_parameters(self):
        data = json.loads(execute_tool('export_data', {'format': 'xlsx'}))

        assert data['error'].startswith('Invalid parameters for export_data')

    def test_service_failure_becomes_error_json(self, orders):
        orders.stats.side_effect = RuntimeError("connection refused")

        data = json.loads(execute_tool('get_order_stats', {}))

        assert data == {'error': 'Error executing get_order_stats: connection refused'}

    def test_bad_date_becomes_error_json(self, orders):
        data = json.loads(execute_tool('search_orders', {'date_from': 'last week'}))

        assert data['error'].startswith('Error executing search_orders')
        orders.search.assert_not_called()

    def test_arabic_is_not_escaped(self, orders):
        orders.stats.return_value = {'note': 'طلبات'}

        assert execute_tool('get_order_stats', {}) == '{"note": "طلبات"}'
