"""
Unit tests for token issuing and identity resolution.
"""

from datetime import timedelta

import pytest
from jose import jwt

from studynotes_chat.core.auth import IdentityResolver, create_access_token, extract_bearer_token
from studynotes_chat.core.exceptions import AuthenticationError
from studynotes_chat.models.user import User, UserRole


class TestExtractBearerToken:

    @pytest.mark.parametrize("header,expected", [
        ("Bearer abc.def.ghi", "abc.def.ghi"),
        ("bearer token", "token"),
        ("Basic dXNlcjpwYXNz", None),
        ("Bearer", None),
        ("", None),
        (None, None),
    ])
    def test_values(self, header, expected):
        assert extract_bearer_token(header) == expected


def test_access_token_claims(settings):
    token = create_access_token("user-1", settings=settings)

    payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])

    assert payload["sub"] == "user-1"
    assert payload["type"] == "access"
    assert payload["exp"] > payload["iat"]


@pytest.mark.asyncio
class TestIdentityResolver:

    async def test_resolves_active_user(self, init_test_db, settings):
        user = User(name="Admin User", email="admin@studyhub.com", role=UserRole.ADMIN)
        await user.insert()
        resolver = IdentityResolver(settings)

        identity = await resolver.resolve(create_access_token(user.id, settings=settings))

        assert identity.id == user.id
        assert identity.name == "Admin User"
        assert identity.is_admin is True

    @pytest.mark.parametrize("token", [None, "", "   "])
    async def test_missing_token(self, init_test_db, settings, token):
        with pytest.raises(AuthenticationError) as exc:
            await IdentityResolver(settings).resolve(token)
        assert exc.value.status_code == 401
        assert exc.value.detail == "Authentication token required"

    async def test_garbage_token(self, init_test_db, settings):
        with pytest.raises(AuthenticationError) as exc:
            await IdentityResolver(settings).resolve("not-a-jwt")
        assert exc.value.detail == "Invalid token"

    async def test_token_signed_with_other_secret(self, init_test_db, settings):
        forged = jwt.encode({"sub": "user-1"}, "another-secret", algorithm="HS256")
        with pytest.raises(AuthenticationError):
            await IdentityResolver(settings).resolve(forged)

    async def test_expired_token(self, init_test_db, settings):
        user = User(name="Alice", email="alice@studyhub.com")
        await user.insert()
        token = create_access_token(user.id, expires_delta=timedelta(seconds=-5), settings=settings)

        with pytest.raises(AuthenticationError) as exc:
            await IdentityResolver(settings).resolve(token)
        assert exc.value.detail == "Token expired"

    async def test_unknown_user(self, init_test_db, settings):
        token = create_access_token("ghost", settings=settings)
        with pytest.raises(AuthenticationError) as exc:
            await IdentityResolver(settings).resolve(token)
        assert exc.value.detail == "User not found"

    async def test_inactive_user(self, init_test_db, settings):
        user = User(name="Gone", email="gone@studyhub.com", is_active=False)
        await user.insert()

        with pytest.raises(AuthenticationError):
            await IdentityResolver(settings).resolve(create_access_token(user.id, settings=settings))
