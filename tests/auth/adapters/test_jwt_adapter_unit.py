"""Unit tests for JWT authentication adapter (without database dependencies)."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import jwt
import pytest

from chatline.auth.adapters.base import AuthenticationError
from chatline.auth.adapters.jwt import JWTAuthAdapter


@pytest.fixture
def secret_key():
    return "test-secret-key-for-testing-only"


@pytest.fixture
def jwt_adapter(secret_key):
    return JWTAuthAdapter(
        secret_key=secret_key,
        algorithm="HS256",
        issuer="test-chatline",
        audience="test-api",
    )


def encode(secret_key: str, **overrides) -> str:
    now = datetime.now(UTC)
    payload = {
        "iss": "test-chatline",
        "aud": "test-api",
        "sub": "test-user-123",
        "iat": now,
        "nbf": now,
        "exp": now + timedelta(hours=1),
    }
    payload.update(overrides)
    return jwt.encode({k: v for k, v in payload.items() if v is not None}, secret_key, "HS256")


class TestJWTAdapter:
    """Test JWT authentication adapter."""

    @pytest.mark.asyncio
    async def test_verify_valid_token(self, jwt_adapter, secret_key):
        token = encode(
            secret_key,
            email="test@example.com",
            email_verified=True,
            name="Test User",
            preferred_username="tester",
            picture="https://example.com/avatar.jpg",
        )

        principal = await jwt_adapter.verify_token(token)

        assert principal["provider"] == "jwt"
        assert principal["subject"] == "test-user-123"
        assert principal["email"] == "test@example.com"
        assert principal["email_verified"] is True
        assert principal["display_name"] == "Test User"
        assert principal["username"] == "tester"
        assert principal["avatar_url"] == "https://example.com/avatar.jpg"
        assert principal["claims"]["sub"] == "test-user-123"

    @pytest.mark.asyncio
    async def test_optional_claims_absent(self, jwt_adapter, secret_key):
        principal = await jwt_adapter.verify_token(encode(secret_key))

        assert principal["subject"] == "test-user-123"
        assert "email" not in principal
        assert "username" not in principal

    @pytest.mark.asyncio
    async def test_verify_expired_token(self, jwt_adapter, secret_key):
        past = datetime.now(UTC) - timedelta(hours=2)
        token = encode(secret_key, iat=past, nbf=past, exp=past + timedelta(minutes=30))

        with pytest.raises(AuthenticationError, match="Invalid token"):
            await jwt_adapter.verify_token(token)

    @pytest.mark.asyncio
    async def test_wrong_audience(self, jwt_adapter, secret_key):
        with pytest.raises(AuthenticationError, match="Invalid token"):
            await jwt_adapter.verify_token(encode(secret_key, aud="someone-else"))

    @pytest.mark.asyncio
    async def test_wrong_secret(self, jwt_adapter):
        with pytest.raises(AuthenticationError, match="Invalid token"):
            await jwt_adapter.verify_token(encode("another-secret-key-for-testing"))

    @pytest.mark.asyncio
    async def test_missing_subject(self, jwt_adapter, secret_key):
        with pytest.raises(AuthenticationError, match="Missing 'sub' claim"):
            await jwt_adapter.verify_token(encode(secret_key, sub=None))

    @pytest.mark.asyncio
    async def test_malformed_token(self, jwt_adapter):
        with pytest.raises(AuthenticationError):
            await jwt_adapter.verify_token("not-a-jwt")

    @pytest.mark.asyncio
    async def test_issue_token_round_trip(self, jwt_adapter, secret_key):
        user_id = uuid4()

        token = await jwt_adapter.issue_token(user_id=user_id, claims={"email": "a@example.com"})

        principal = await jwt_adapter.verify_token(token)
        assert principal["subject"] == str(user_id)
        assert principal["email"] == "a@example.com"

    @pytest.mark.asyncio
    async def test_issue_token_with_subject_claim(self, jwt_adapter):
        token = await jwt_adapter.issue_token(claims={"sub": "alice"})

        principal = await jwt_adapter.verify_token(token)
        assert principal["subject"] == "alice"
