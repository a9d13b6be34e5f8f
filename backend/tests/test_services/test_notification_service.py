"""
Unit tests for EmailJS notifications
"""
import asyncio
import pytest
from unittest.mock import patch, MagicMock, AsyncMock

import httpx

from gamestore.core.config import settings
from gamestore.services.notification_service import NotificationService


@pytest.fixture
def emailjs_settings():
    with patch.object(settings, 'EMAILJS_SERVICE_ID', 'service_test'), \
         patch.object(settings, 'EMAILJS_PUBLIC_KEY', 'public_test'), \
         patch.object(settings, 'EMAILJS_PRIVATE_KEY', ''):
        yield


@pytest.fixture
def http_client():
    """Patch httpx.AsyncClient and return the client used inside `async with`"""
    with patch('gamestore.services.notification_service.httpx.AsyncClient') as mock_cls:
        client = MagicMock()
        client.post = AsyncMock(return_value=MagicMock())
        mock_cls.return_value.__aenter__.return_value = client
        yield client


class TestNotificationService:

    def test_skips_when_not_configured(self, http_client):
        with patch.object(settings, 'EMAILJS_SERVICE_ID', ''):
            sent = asyncio.run(NotificationService().send({'subject': 'x'}))

        assert sent is False
        http_client.post.assert_not_called()

    def test_order_notification_payload(self, emailjs_settings, http_client):
        # Act
        sent = asyncio.run(NotificationService().send_order_notification(
            'ORD-2025-0001', 'Fahad Alenezi', 'fahad@example.com', 'د.ك 21.990'
        ))

        # Assert
        assert sent is True
        url, kwargs = http_client.post.call_args[0][0], http_client.post.call_args[1]
        assert url == settings.EMAILJS_API_URL
        payload = kwargs['json']
        assert payload['service_id'] == 'service_test'
        assert 'accessToken' not in payload
        params = payload['template_params']
        assert params['subject'] == 'New Order Received - #ORD-2025-0001'
        assert params['to_email'] == settings.ADMIN_NOTIFICATION_EMAIL
        assert 'Total Amount: د.ك 21.990' in params['message']

    def test_http_error_returns_false(self, emailjs_settings, http_client):
        # Arrange
        http_client.post.side_effect = httpx.ConnectError("mail down")

        # Act
        sent = asyncio.run(NotificationService().send_custom('sara@example.com', 'Sara', 'Hi', 'Body'))

        # Assert
        assert sent is False
