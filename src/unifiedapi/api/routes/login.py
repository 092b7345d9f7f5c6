"""Session endpoint.

POST /api/auth/login {username, password} → {token}
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, ConfigDict

from unifiedapi.api.auth import TokenService, verify_password
from unifiedapi.api.deps import get_db
from unifiedapi.infra.db import Database
from unifiedapi.infra.repositories.users_repository import get_user_by_username
from unifiedapi.observability.logging import get_logger

router = APIRouter(prefix="/api/auth", tags=["auth"])

logger = get_logger(__name__)


class LoginRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    username: str = ""
    password: str = ""


@router.post("/login")
def login(body: LoginRequest, request: Request, db: Database = Depends(get_db)) -> dict:
    """Exchange credentials for a bearer token.

    Unknown users and wrong passwords get the same 401.
    """
    with db.txn() as cur:
        user = get_user_by_username(cur, body.username.strip())

    if user is None or not verify_password(body.password, user.password_hash):
        logger.info("login rejected")
        raise HTTPException(status_code=401, detail="Invalid credentials")

    tokens: TokenService = request.app.state.token_service
    return {"token": tokens.issue(user.id, user.username)}
