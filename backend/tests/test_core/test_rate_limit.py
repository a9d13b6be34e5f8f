"""
Tests for the sliding window rate limiter
"""
import pytest
from unittest.mock import patch

from starlette.requests import Request

from gamestore.core.auth import create_access_token
from gamestore.core.config import settings
from gamestore.core.rate_limit import RateLimiter, client_key


class TestRateLimiter:

    def test_allows_up_to_limit(self):
        # Arrange
        limiter = RateLimiter()

        # Act
        results = [limiter.is_allowed("ip:1.2.3.4", max_requests=3) for _ in range(4)]

        # Assert
        assert [r[0] for r in results] == [True, True, True, False]
        assert results[0][1] == 2
        assert results[3][2] >= 1

    def test_identifiers_are_independent(self):
        limiter = RateLimiter()
        limiter.is_allowed("a", max_requests=1)

        assert limiter.is_allowed("a", max_requests=1)[0] is False
        assert limiter.is_allowed("b", max_requests=1)[0] is True

    @patch('gamestore.core.rate_limit.time.time')
    def test_window_slides(self, mock_time):
        # Arrange
        mock_time.return_value = 1000.0
        limiter = RateLimiter()
        limiter.is_allowed("a", max_requests=1, window_seconds=60)

        # Act: a minute later the old request is out of the window
        mock_time.return_value = 1061.0
        allowed, _, _ = limiter.is_allowed("a", max_requests=1, window_seconds=60)

        # Assert
        assert allowed is True

    def test_reset(self):
        limiter = RateLimiter()
        limiter.is_allowed("a", max_requests=1)

        limiter.reset("a")

        assert limiter.is_allowed("a", max_requests=1)[0] is True


def _request(authorization=None, forwarded_for=None):
    headers = []
    if authorization:
        headers.append((b'authorization', authorization.encode()))
    if forwarded_for:
        headers.append((b'x-forwarded-for', forwarded_for.encode()))
    return Request({
        'type': 'http', 'method': 'POST', 'path': '/api/v1/messages/',
        'headers': headers, 'client': ('10.0.0.7', 51000),
    })


class TestClientKey:

    @pytest.fixture(autouse=True)
    def auth_secret(self):
        with patch.object(settings, 'AUTH_SECRET', 'test-secret-key'):
            yield

    def test_anonymous_caller_is_keyed_by_ip(self):
        assert client_key(_request()) == ("ip:10.0.0.7", False)

    def test_forwarded_ip_wins(self):
        assert client_key(_request(forwarded_for="203.0.113.9, 10.0.0.1")) == ("ip:203.0.113.9", False)

    def test_unverifiable_token_falls_back_to_ip(self):
        first = client_key(_request(authorization="Bearer fake1"))
        second = client_key(_request(authorization="Bearer fake2"))

        assert first == second == ("ip:10.0.0.7", False)

    def test_valid_token_gets_user_bucket(self):
        token = create_access_token(5, "staff@store.com", role="admin")

        assert client_key(_request(authorization=f"Bearer {token}")) == ("user:5", True)
