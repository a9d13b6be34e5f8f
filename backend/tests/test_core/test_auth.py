"""
Tests for JWT issuing and role checks
"""
import asyncio
import pytest
from unittest.mock import patch

from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from gamestore.core.auth import (
    TokenUser, create_access_token, decode_access_token, get_current_user,
    get_current_user_optional, require_role,
)
from gamestore.core.config import settings


@pytest.fixture(autouse=True)
def auth_secret():
    with patch.object(settings, 'AUTH_SECRET', 'test-secret-key'):
        yield


def _bearer(token):
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestTokens:

    def test_round_trip_payload(self):
        # Act
        token = create_access_token(42, "admin@store.com", name="Admin", role="admin")
        payload = decode_access_token(token)

        # Assert
        assert payload["sub"] == "42"
        assert payload["email"] == "admin@store.com"
        assert payload["role"] == "admin"

    def test_expired_token(self):
        token = create_access_token(1, "a@b.com", expires_minutes=-1)

        with pytest.raises(HTTPException) as exc_info:
            decode_access_token(token)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Token has expired"

    def test_tampered_token(self):
        token = create_access_token(1, "a@b.com")

        with pytest.raises(HTTPException) as exc_info:
            decode_access_token(token + "x")
        assert exc_info.value.status_code == 401

    def test_missing_secret(self):
        with patch.object(settings, 'AUTH_SECRET', ''):
            with pytest.raises(ValueError, match="AUTH_SECRET"):
                create_access_token(1, "a@b.com")


class TestDependencies:

    def test_current_user_requires_credentials(self):
        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(get_current_user(None))
        assert exc_info.value.status_code == 401

    def test_current_user_from_token(self):
        token = create_access_token(7, "staff@store.com", role="user")

        user = asyncio.run(get_current_user(_bearer(token)))

        assert user == TokenUser(id="7", email="staff@store.com", role="user")

    def test_optional_user_ignores_bad_token(self):
        assert asyncio.run(get_current_user_optional(_bearer("not-a-jwt"))) is None

    def test_role_checker_denies_lower_role(self):
        checker = require_role("admin")

        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(checker(TokenUser(id="7", email="staff@store.com", role="user")))
        assert exc_info.value.status_code == 403

    def test_role_checker_allows_admin(self):
        admin = TokenUser(id="1", email="admin@store.com", role="admin")

        assert asyncio.run(require_role("user")(admin)) is admin
