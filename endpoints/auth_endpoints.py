from __future__ import annotations

import logging
import time
from typing import Any

import jwt
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from persistence.repositories import Collections
from security import hash_password, is_legacy_hash, verify_password
from settings import Settings

from .common import bad_request, get_app_settings, get_collections, require_text

router = APIRouter(tags=["auth"])
logger = logging.getLogger(__name__)


class InvalidTokenError(Exception):
    pass


class TokenClaims(BaseModel):
    id: int
    email: str
    isAdmin: bool = False


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


# -------------------------------------------------------------------
# Token helpers
# -------------------------------------------------------------------
def _mask_token(token: str, *, head: int = 16, tail: int = 8) -> str:
    if not token:
        return ""
    if len(token) <= head + tail + 3:
        return token
    return f"{token[:head]}...{token[-tail:]}"


def issue_token(claims: TokenClaims, settings: Settings) -> str:
    now = int(time.time())
    payload: dict[str, Any] = {
        **claims.model_dump(),
        "iat": now,
        "exp": now + settings.token_ttl_seconds,
    }
    token = jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_alg)
    if settings.debug_log_tokens:
        # WARNING: This logs (masked) bearer tokens. Use only for local debugging.
        logger.debug("ISSUED JWT: id=%s admin=%s token=%s", claims.id, claims.isAdmin, _mask_token(token))
    return token


def decode_token(token: str, settings: Settings) -> TokenClaims:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_alg])
        return TokenClaims.model_validate(payload)
    except (jwt.PyJWTError, ValueError) as e:
        raise InvalidTokenError(str(e)) from e


def _bearer_token(request: Request) -> str | None:
    auth = request.headers.get("Authorization")
    if not auth:
        return None
    parts = auth.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1].strip() or None


def optional_claims(request: Request, settings: Settings = Depends(get_app_settings)) -> TokenClaims | None:
    token = _bearer_token(request)
    if token is None:
        return None
    try:
        return decode_token(token, settings)
    except InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token")


def current_claims(claims: TokenClaims | None = Depends(optional_claims)) -> TokenClaims:
    if claims is None:
        raise HTTPException(status_code=401, detail="Token not provided")
    return claims


def admin_claims(claims: TokenClaims = Depends(current_claims)) -> TokenClaims:
    if not claims.isAdmin:
        raise HTTPException(status_code=403, detail="Forbidden: Admin access required")
    return claims


# -------------------------------------------------------------------
# Routes
# -------------------------------------------------------------------
@router.post("/login")
async def login(
    body: LoginRequest,
    collections: Collections = Depends(get_collections),
    settings: Settings = Depends(get_app_settings),
) -> JSONResponse:
    email = require_text(body.email)
    password = body.password
    if not email or not password:
        raise bad_request("Email and password are required")

    found = await collections.users.find_one_by({"email": email})
    if not found or not verify_password(password, found.document.get("password")):
        raise bad_request("Invalid credentials")

    user = found.document
    if is_legacy_hash(user.get("password")):
        user["password"] = hash_password(password)
        await collections.users.save(user)
        logger.info("LOGIN: upgraded legacy password hash for user id=%s", user["id"])

    claims = TokenClaims(id=user["id"], email=user["email"], isAdmin=bool(user.get("isAdmin", False)))
    return JSONResponse({"token": issue_token(claims, settings)})
