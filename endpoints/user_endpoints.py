from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from persistence.repositories import Collections
from security import hash_password, verify_password
from settings import Settings

from .auth_endpoints import TokenClaims, admin_claims, current_claims, optional_claims
from .common import (
    bad_request,
    conflict,
    forbidden,
    get_app_settings,
    get_collections,
    not_found,
    paginate,
    require_text,
    resolve_limit,
)

router = APIRouter(prefix="/users", tags=["users"])
logger = logging.getLogger(__name__)


class CreateUserRequest(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    password: str | None = None
    isAdmin: bool = False


class UpdateUserRequest(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    new_password: str | None = None
    current_password: str | None = None


def public_user(user: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in user.items() if k != "password"}


def _list_item(user: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": user["id"],
        "first_name": user.get("first_name"),
        "last_name": user.get("last_name"),
        "email": user.get("email"),
    }


async def _visible_user(collections: Collections, user_id: int, claims: TokenClaims) -> dict[str, Any]:
    found = await collections.users.find(user_id)
    if not found or (found.document["id"] != claims.id and not claims.isAdmin):
        raise not_found("User not found or permission denied")
    return found.document


@router.post("", status_code=201)
async def create_user(
    body: CreateUserRequest,
    collections: Collections = Depends(get_collections),
    claims: TokenClaims | None = Depends(optional_claims),
) -> JSONResponse:
    first_name = require_text(body.first_name)
    last_name = require_text(body.last_name)
    email = require_text(body.email)
    if not first_name or not last_name or not email or not body.password:
        raise bad_request("All fields are required")

    if await collections.users.find_one_by({"email": email}):
        raise conflict("Email already exists")

    # The very first account may bootstrap itself as admin; afterwards only admins grant it.
    if body.isAdmin and not (claims and claims.isAdmin):
        if await collections.users.find_all():
            raise forbidden("Forbidden: Admin access required")

    created = await collections.users.save(
        {
            "first_name": first_name,
            "last_name": last_name,
            "email": email,
            "password": hash_password(body.password),
            "isAdmin": body.isAdmin,
        }
    )
    logger.info("USERS: created id=%s admin=%s", created["id"], created["isAdmin"])
    return JSONResponse(public_user(created), status_code=201)


@router.get("")
async def list_users(
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    name: str | None = None,
    claims: TokenClaims = Depends(admin_claims),
    collections: Collections = Depends(get_collections),
    settings: Settings = Depends(get_app_settings),
) -> dict[str, Any]:
    criteria = {"$or": [{"first_name": name}, {"last_name": name}]} if name else {}
    users = await collections.users.find_by(criteria)
    return paginate(users, page=page, limit=resolve_limit(limit, settings), view=_list_item)


@router.get("/{user_id}")
async def get_user(
    user_id: int,
    claims: TokenClaims = Depends(current_claims),
    collections: Collections = Depends(get_collections),
) -> dict[str, Any]:
    return public_user(await _visible_user(collections, user_id, claims))


@router.patch("/{user_id}")
async def update_user(
    user_id: int,
    body: UpdateUserRequest,
    claims: TokenClaims = Depends(current_claims),
    collections: Collections = Depends(get_collections),
) -> dict[str, Any]:
    user = await _visible_user(collections, user_id, claims)

    if body.new_password and (
        not body.current_password or not verify_password(body.current_password, user.get("password"))
    ):
        raise bad_request("Invalid current password")

    first_name = require_text(body.first_name)
    last_name = require_text(body.last_name)
    if first_name:
        user["first_name"] = first_name
    if last_name:
        user["last_name"] = last_name
    if body.new_password:
        user["password"] = hash_password(body.new_password)

    saved = await collections.users.save(user)
    return public_user(saved)


@router.delete("/{user_id}", status_code=204)
async def delete_user(
    user_id: int,
    claims: TokenClaims = Depends(admin_claims),
    collections: Collections = Depends(get_collections),
) -> Response:
    if not await collections.users.find(user_id):
        raise not_found("User not found")
    await collections.users.delete(user_id)
    logger.info("USERS: deleted id=%s by admin id=%s", user_id, claims.id)
    return Response(status_code=204)
