"""Unit tests for JWT authentication adapter (without database dependencies)."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import jwt
import pytest

from talawa.auth.adapters.base import AuthenticationError
from talawa.auth.adapters.jwt import JWTAuthAdapter


@pytest.fixture
def secret_key():
    return "test-secret-key-for-testing-only"


@pytest.fixture
def jwt_adapter(secret_key):
    return JWTAuthAdapter(
        secret_key=secret_key,
        algorithm="HS256",
        issuer="test-talawa",
        audience="test-api",
    )


@pytest.fixture
def user_id():
    return uuid4()


@pytest.fixture
def valid_token(secret_key, user_id):
    now = datetime.now(UTC)
    payload = {
        "iss": "test-talawa",
        "aud": "test-api",
        "sub": str(user_id),
        "email": "test@example.com",
        "name": "Test User",
        "iat": now,
        "nbf": now,
        "exp": now + timedelta(hours=1),
    }
    return jwt.encode(payload, secret_key, algorithm="HS256")


class TestJWTAdapter:
    """Test JWT authentication adapter."""

    @pytest.mark.asyncio
    async def test_verify_valid_token(self, jwt_adapter, valid_token, user_id):
        """Test verifying a valid JWT token."""
        principal = await jwt_adapter.verify_token(valid_token)

        assert principal["provider"] == "jwt"
        assert principal["subject"] == str(user_id)
        assert principal["email"] == "test@example.com"
        assert principal["display_name"] == "Test User"
        assert "claims" in principal

    @pytest.mark.asyncio
    async def test_verify_expired_token(self, jwt_adapter, secret_key):
        """Test verifying an expired JWT token fails."""
        past_time = datetime.now(UTC) - timedelta(hours=2)
        payload = {
            "iss": "test-talawa",
            "aud": "test-api",
            "sub": str(uuid4()),
            "exp": past_time + timedelta(minutes=30),
        }
        expired_token = jwt.encode(payload, secret_key, algorithm="HS256")

        with pytest.raises(AuthenticationError, match="Invalid token"):
            await jwt_adapter.verify_token(expired_token)

    @pytest.mark.asyncio
    async def test_verify_wrong_audience(self, jwt_adapter, secret_key):
        """Test tokens issued for another audience are rejected."""
        now = datetime.now(UTC)
        payload = {
            "iss": "test-talawa",
            "aud": "another-api",
            "sub": str(uuid4()),
            "exp": now + timedelta(hours=1),
        }
        token = jwt.encode(payload, secret_key, algorithm="HS256")

        with pytest.raises(AuthenticationError, match="Invalid token"):
            await jwt_adapter.verify_token(token)

    @pytest.mark.asyncio
    async def test_verify_missing_subject(self, jwt_adapter, secret_key):
        """Test tokens without a subject are rejected."""
        now = datetime.now(UTC)
        payload = {"iss": "test-talawa", "aud": "test-api", "exp": now + timedelta(hours=1)}
        token = jwt.encode(payload, secret_key, algorithm="HS256")

        with pytest.raises(AuthenticationError, match="Missing 'sub' claim"):
            await jwt_adapter.verify_token(token)

    @pytest.mark.asyncio
    async def test_issue_token(self, jwt_adapter, user_id):
        """Test issuing a new JWT token."""
        token = await jwt_adapter.issue_token(user_id=user_id, claims={"org": "test-org"})

        # Verify the issued token
        principal = await jwt_adapter.verify_token(token)
        assert principal["subject"] == str(user_id)
        assert principal["claims"]["org"] == "test-org"
