"""
Identity lookup shared by the REST endpoints and the realtime handshake.

A bearer token (JWT signed with ``jwt_secret_key``) is resolved to an
``Identity``: the user id plus the display name and role currently stored
on the user record.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

import structlog
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from .config import Settings, get_settings
from .exceptions import AuthenticationError
from ..models.user import User, UserRole

logger = structlog.get_logger(__name__)

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    """Resolved caller identity."""
    id: str
    name: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None, settings: Optional[Settings] = None) -> str:
    """Issue an access token for ``user_id``."""
    settings = settings or get_settings()
    now = datetime.utcnow()
    expires_delta = expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes)

    payload = {
        "sub": user_id,
        "type": "access",
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer <token>`` header value."""
    if not authorization:
        return None
    try:
        scheme, token = authorization.split()
    except ValueError:
        return None
    if scheme.lower() != "bearer":
        return None
    return token


class IdentityResolver:
    """Resolves an opaque bearer token to an ``Identity``."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def decode(self, token: str) -> dict:
        try:
            return jwt.decode(
                token,
                self.settings.jwt_secret_key,
                algorithms=[self.settings.jwt_algorithm],
                options={"verify_exp": True},
            )
        except ExpiredSignatureError:
            logger.warning("JWT token expired")
            raise AuthenticationError("Token expired")
        except JWTError as exc:
            logger.warning("JWT token validation failed", error=str(exc))
            raise AuthenticationError("Invalid token")

    async def resolve(self, token: Optional[str]) -> Identity:
        if not token or not token.strip():
            raise AuthenticationError("Authentication token required")

        payload = self.decode(token.strip())
        user_id = payload.get("sub") or payload.get("user_id")
        if not user_id or not isinstance(user_id, str):
            raise AuthenticationError("Invalid token")

        user = await User.get(user_id)
        if user is None or not user.is_active:
            logger.warning("Token subject does not resolve to an active user", user_id=user_id)
            raise AuthenticationError("User not found")

        return Identity(id=user.id, name=user.name, role=user.role)


def get_identity_resolver(request: Request) -> IdentityResolver:
    return request.app.state.identity_resolver


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    resolver: IdentityResolver = Depends(get_identity_resolver),
) -> Identity:
    """
    Dependency to get the authenticated caller.

    Raises:
        AuthenticationError: 401 if the token is missing, invalid or expired
    """
    token = credentials.credentials if credentials else None
    return await resolver.resolve(token)
