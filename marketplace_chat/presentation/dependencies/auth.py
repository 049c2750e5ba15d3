"""
Authentication Dependency for FastAPI.

Tokens are issued by the platform's auth service; this service only
verifies them (HS256, issuer, audience, exp/iat required). The `sub` claim
is the user id.

- HTTP routes: `Authorization: Bearer <jwt>` via get_current_user
- WebSocket routes: `?token=<jwt>` via decode_token (browsers cannot set
  headers on a WebSocket handshake)
"""

from dataclasses import dataclass

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from marketplace_chat.config.settings import Config
from marketplace_chat.domain.value_objects.user_id import UserId


@dataclass
class AuthUser:
    user_id: UserId

    def __post_init__(self):
        if not self.user_id:
            raise ValueError("AuthUser must have a user id.")


class InvalidTokenError(Exception):
    """Token failed verification. The message is safe to return to the client."""


security = HTTPBearer()


def decode_token(token: str) -> AuthUser:
    try:
        claims = jwt.decode(
            token,
            Config.SERVICE_AUTH_SECRET,
            algorithms=["HS256"],
            audience=Config.SERVICE_AUTH_AUDIENCE,
            issuer=Config.SERVICE_AUTH_ISSUER,
            options={"require": ["exp", "iat", "aud", "iss", "sub"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise InvalidTokenError("Token has expired") from e
    except jwt.InvalidTokenError as e:
        raise InvalidTokenError(f"Invalid token: {str(e)}") from e

    try:
        return AuthUser(user_id=UserId(str(claims["sub"])))
    except ValueError as e:
        raise InvalidTokenError("Missing required claims in token") from e


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> AuthUser:
    """
    Extract and validate user from JWT token.

    Raises:
        HTTPException 401 if token is invalid, expired, or missing required claims
    """
    try:
        return decode_token(credentials.credentials)
    except InvalidTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
        ) from e
