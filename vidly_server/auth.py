"""
Authentication and authorization for the Vidly server.

Provides:
- Password hashing with bcrypt
- TokenService: JWT issuance and verification (PyJWT)
- FastAPI dependencies yielding the caller's Principal

Tokens travel in the x-auth-token header. A missing token is rejected with
401, an unreadable or expired one with 400, and a non-admin caller on an
admin route with 403.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any

import bcrypt
import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader

from .models import User

logger = logging.getLogger(__name__)

TOKEN_HEADER = "x-auth-token"

token_header = APIKeyHeader(name=TOKEN_HEADER, auto_error=False)


def hash_password(password: str, rounds: int = 10) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


@dataclass(frozen=True)
class Principal:
    """Verified caller identity."""

    user_id: str
    is_admin: bool = False


class InvalidTokenError(Exception):
    """Token could not be verified."""

    pass


class TokenService:
    """Issues and verifies signed access tokens.

    Attributes:
        algorithm: JWT signing algorithm
        expires_in: Token lifetime in seconds (0 = no expiry)
    """

    def __init__(self, private_key: str, algorithm: str = "HS256", expires_in: int = 0) -> None:
        if not private_key:
            raise ValueError("Token signing key must not be empty")
        self._private_key = private_key
        self.algorithm = algorithm
        self.expires_in = expires_in

    def issue(self, user: User) -> str:
        """Create a token for a user."""
        now = int(time.time())
        payload: dict[str, Any] = {"sub": user.id, "isAdmin": user.is_admin, "iat": now}
        if self.expires_in > 0:
            payload["exp"] = now + self.expires_in
        return jwt.encode(payload, self._private_key, algorithm=self.algorithm)

    def verify(self, token: str) -> Principal:
        """Decode a token into a Principal.

        Raises:
            InvalidTokenError: If the signature, expiry or claims are invalid
        """
        try:
            payload = jwt.decode(
                token,
                self._private_key,
                algorithms=[self.algorithm],
                options={"require": ["sub"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise InvalidTokenError("Token has expired.") from e
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError("Invalid token.") from e

        return Principal(user_id=str(payload["sub"]), is_admin=bool(payload.get("isAdmin", False)))


# =============================================================================
# Dependencies
# =============================================================================


def get_token_service(request: Request) -> TokenService:
    """Get token service from app state."""
    return request.app.state.token_service


async def require_user(
    token: str | None = Depends(token_header),
    tokens: TokenService = Depends(get_token_service),
) -> Principal:
    """Resolve the authenticated caller or reject the request."""
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access denied. No token provided.",
        )
    try:
        return tokens.verify(token)
    except InvalidTokenError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


async def require_admin(principal: Principal = Depends(require_user)) -> Principal:
    """Resolve the caller and require the admin role."""
    if not principal.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied.")
    return principal
