"""Shared-secret (HS256) JWT authentication for the to-do and admin routes.

Provides:
- TokenService: issue() / verify() bearer tokens
- hash_password() / verify_password(): bcrypt helpers
- get_current_user(): FastAPI dependency for an authenticated user context
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any

import bcrypt
import jwt
from fastapi import Depends, HTTPException, Request

from unifiedapi.observability.logging import get_logger

logger = get_logger(__name__)

_ALGORITHM = "HS256"


@dataclass
class CurrentUser:
    """Authenticated user context."""

    id: int
    username: str


class TokenService:
    """Signs and verifies HS256 tokens carrying the user id and username."""

    def __init__(self, secret: str | None, expires_seconds: int = 3600) -> None:
        self._secret = secret
        self._expires_seconds = expires_seconds

    def _require_secret(self) -> str:
        if not self._secret:
            raise HTTPException(status_code=503, detail="Auth not configured")
        return self._secret

    def issue(self, user_id: int, username: str) -> str:
        now = int(time.time())
        payload = {
            "sub": str(user_id),
            "id": user_id,
            "username": username,
            "iat": now,
            "exp": now + self._expires_seconds,
        }
        return jwt.encode(payload, self._require_secret(), algorithm=_ALGORITHM)

    def verify(self, token: str) -> dict[str, Any]:
        """Decode a token.

        Raises:
            jwt.InvalidTokenError: Bad signature, expired or malformed.
        """
        return jwt.decode(
            token,
            self._require_secret(),
            algorithms=[_ALGORITHM],
            options={"require": ["exp", "sub"]},
        )


def hash_password(password: str) -> str:
    """Hash a plain-text password using bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a password against a bcrypt hash. Malformed hashes never match."""
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        logger.warning("stored password hash is not a valid bcrypt hash")
        return False


def _extract_bearer_token(request: Request) -> str:
    """Extract Bearer token from Authorization header.

    Raises:
        HTTPException: 401 if header missing or malformed.
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise HTTPException(status_code=401, detail="No token")

    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(status_code=401, detail="Invalid token")

    return parts[1]


def get_current_user(request: Request) -> CurrentUser:
    """FastAPI dependency: get authenticated user.

    Raises:
        HTTPException: 401 if the header is missing/malformed, 403 if the
            token is invalid or expired.
    """
    token = _extract_bearer_token(request)
    tokens: TokenService = request.app.state.token_service

    try:
        payload = tokens.verify(token)
    except jwt.InvalidTokenError as exc:
        logger.info("token rejected", extra={"extra_fields": {"reason": type(exc).__name__}})
        raise HTTPException(status_code=403, detail="Invalid or expired token") from None

    try:
        user_id = int(payload.get("id", payload["sub"]))
    except (TypeError, ValueError):
        raise HTTPException(status_code=403, detail="Invalid or expired token") from None

    return CurrentUser(id=user_id, username=str(payload.get("username", "")))


# Dependency alias for cleaner imports
CurrentUserDep = Depends(get_current_user)
