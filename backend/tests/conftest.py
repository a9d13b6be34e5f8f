"""
Pytest fixtures and configuration for Gaming Store backend tests

Shared fixtures for repository, service and API tests. Nothing here needs a
live database; connections are mocked per test.
"""
import pytest
from datetime import datetime
from decimal import Decimal
from unittest.mock import MagicMock

from gamestore.core.auth import TokenUser
from gamestore.domain.discount import DiscountCode
from gamestore.domain.message import Message
from gamestore.domain.order import Order, OrderCustomer, ShippingAddress, OrderItem
from gamestore.domain.product import Product


@pytest.fixture
def mock_db():
    """
    Provides a (connection, cursor) pair of MagicMocks

    Patch the repository's connection getter to return the connection:
        mock_get_conn.return_value = conn
    """
    conn = MagicMock()
    cursor = MagicMock()
    conn.cursor.return_value = cursor
    return conn, cursor


@pytest.fixture
def product_row():
    """A products table row as returned by RealDictCursor"""
    return {
        'id': 1,
        'sku': 'PS5-GOW-001',
        'title_ar': 'إله الحرب راغناروك',
        'title_en': 'God of War Ragnarok PS5',
        'description_ar': 'مغامرة ملحمية في عالم الأساطير الإسكندنافية',
        'description_en': 'Epic adventure through the Norse realms',
        'price': Decimal('19.990'),
        'original_price': Decimal('24.990'),
        'image': 'https://cdn.example.com/gow.jpg',
        'images': ['https://cdn.example.com/gow.jpg'],
        'category': 'playstation',
        'categories': ['preorders'],
        'tags': ['action', 'ps5'],
        'is_new': True,
        'is_limited': False,
        'is_digital': False,
        'stock': 12,
        'status': 'active',
        'created_at': datetime(2025, 3, 1, 10, 0),
        'updated_at': None,
    }


@pytest.fixture
def make_product(product_row):
    """Factory for Product models: make_product(id=2, stock=0)"""
    def _make(**overrides):
        return Product(**{**product_row, **overrides})
    return _make


@pytest.fixture
def make_discount():
    def _make(**overrides):
        data = {
            'id': 1,
            'code': 'WELCOME10',
            'type': 'percentage',
            'value': Decimal('10'),
            'usage_limit': 100,
            'used_count': 0,
            'one_user_only': False,
            'is_active': True,
            'created_at': datetime(2025, 1, 15, 9, 30),
        }
        data.update(overrides)
        return DiscountCode(**data)
    return _make


@pytest.fixture
def make_order():
    def _make(**overrides):
        data = {
            'id': 1,
            'order_number': 'ORD-2025-0001',
            'customer': OrderCustomer(
                first_name='Fahad', last_name='Alenezi',
                email='fahad@example.com', phone='+96550000000'
            ),
            'shipping_address': ShippingAddress(address='Block 4, Street 12', city='Kuwait City', area='Salmiya'),
            'items': [OrderItem(
                product_id=1, title='إله الحرب راغناروك', title_en='God of War Ragnarok PS5',
                price=Decimal('19.990'), quantity=1, category='playstation'
            )],
            'subtotal': Decimal('19.990'),
            'shipping_cost': Decimal('2.000'),
            'discount': Decimal('0'),
            'total': Decimal('21.990'),
            'created_at': datetime(2025, 3, 2, 18, 45),
        }
        data.update(overrides)
        return Order(**data)
    return _make


@pytest.fixture
def make_message():
    def _make(**overrides):
        data = {
            'id': 1,
            'message_number': 'MSG-2025-0001',
            'name': 'Sara',
            'email': 'sara@example.com',
            'subject': 'Order delivery time',
            'message': 'When will my order arrive in Hawalli?',
            'category': 'order_inquiry',
            'priority': 'medium',
            'status': 'unread',
            'created_at': datetime(2025, 3, 3, 12, 0),
        }
        data.update(overrides)
        return Message(**data)
    return _make


@pytest.fixture
def admin_user():
    return TokenUser(id="1", email="admin@store.com", name="Admin", role="admin")


@pytest.fixture
def client():
    """
    TestClient for the full app with a clean rate limiter

    Dependency overrides set by a test are removed afterwards.
    """
    from fastapi.testclient import TestClient
    from gamestore.core.rate_limit import rate_limiter
    from gamestore.main import app

    rate_limiter.reset()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def as_admin(admin_user):
    """Authenticate every admin-only route as admin_user"""
    from gamestore.core.auth import require_admin
    from gamestore.main import app

    app.dependency_overrides[require_admin] = lambda: admin_user
    return admin_user
