"""Unit tests for the JWT adapter."""

from datetime import timedelta
from uuid import uuid4

import pytest
from jose import jwt

from rolegate.config import settings
from rolegate.core.auth.backend import create_access_token, decode_token


pytestmark = pytest.mark.unit


class TestJWTTokens:
    """Tests for JWT token functions."""

    def test_create_access_token_returns_string(self):
        """create_access_token should return a JWT string."""
        token = create_access_token(uuid4())

        assert isinstance(token, str)
        # JWT has three parts separated by dots
        assert token.count(".") == 2

    def test_decode_token_valid(self):
        """decode_token should recover the principal id and role hint."""
        user_id = uuid4()

        data = decode_token(create_access_token(user_id, role="productor"))

        assert data is not None
        assert data.user_id == user_id
        assert data.role == "productor"
        assert data.type == "access"

    def test_decode_token_without_role_hint(self):
        data = decode_token(create_access_token(uuid4()))

        assert data is not None
        assert data.role is None

    def test_decode_token_invalid(self):
        """decode_token should return None for invalid token."""
        assert decode_token("invalid.token.here") is None

    def test_decode_token_expired(self):
        """decode_token should return None for expired token."""
        token = create_access_token(uuid4(), expires_delta=timedelta(seconds=-10))

        assert decode_token(token) is None

    def test_decode_token_wrong_secret(self):
        token = jwt.encode(
            {"sub": str(uuid4()), "exp": 9999999999},
            "another-secret",
            algorithm=settings.jwt_algorithm,
        )

        assert decode_token(token) is None

    def test_decode_token_with_non_uuid_subject(self):
        token = jwt.encode(
            {"sub": "not-a-uuid", "exp": 9999999999},
            settings.secret_key,
            algorithm=settings.jwt_algorithm,
        )

        assert decode_token(token) is None
