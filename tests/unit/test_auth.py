"""Tests for bearer token utilities."""
import pytest
from datetime import timedelta
from jose import JWTError


class TestJWTTokens:
    """Tests for JWT token functions."""

    def test_verify_access_token_valid(self):
        """Test verifying a valid access token."""
        from app.utils.auth import create_access_token, verify_access_token

        token = create_access_token(user_id="user123")

        assert verify_access_token(token) == "user123"

    def test_verify_access_token_invalid(self):
        """Test verifying a malformed token."""
        from app.utils.auth import verify_access_token

        with pytest.raises(JWTError):
            verify_access_token("invalid.token.here")

    def test_verify_access_token_expired(self):
        """Test verifying an expired token."""
        from app.utils.auth import create_access_token, verify_access_token

        token = create_access_token(user_id="user123", expires_delta=timedelta(seconds=-1))

        with pytest.raises(JWTError):
            verify_access_token(token)

    def test_verify_access_token_wrong_secret(self):
        """Test tokens signed with another secret are rejected."""
        from jose import jwt
        from app.utils.auth import verify_access_token

        token = jwt.encode({"sub": "user123"}, "someone-else", algorithm="HS256")

        with pytest.raises(JWTError):
            verify_access_token(token)

    def test_verify_access_token_missing_sub(self):
        """Test tokens without a subject are rejected."""
        from jose import jwt
        from app.config import settings
        from app.utils.auth import verify_access_token

        token = jwt.encode({"role": "admin"}, settings.jwt_secret, algorithm=settings.jwt_algorithm)

        with pytest.raises(JWTError, match="sub"):
            verify_access_token(token)
