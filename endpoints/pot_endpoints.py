from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from persistence.repositories import Collections
from settings import Settings

from .auth_endpoints import TokenClaims, admin_claims, current_claims
from .common import (
    bad_request,
    conflict,
    get_app_settings,
    get_collections,
    not_found,
    paginate,
    require_text,
    resolve_limit,
)

router = APIRouter(prefix="/pots", tags=["pots"])
logger = logging.getLogger(__name__)


class CreatePotRequest(BaseModel):
    code: str | None = None
    pot_model_id: str | int | None = None
    user_id: int | None = None


class UpdatePotRequest(BaseModel):
    code: str | None = None
    pot_model_id: str | int | None = None
    user_id: int | None = None


def _list_item(pot: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": pot["id"],
        "code": pot.get("code"),
        "pot_model": pot.get("pot_model_id"),
        "user_id": pot.get("userId"),
    }


async def _require_user(collections: Collections, user_id: int) -> None:
    if not await collections.users.find(user_id):
        raise bad_request(f"Unknown user_id {user_id}")


@router.post("", status_code=201)
async def create_pot(
    body: CreatePotRequest,
    claims: TokenClaims = Depends(admin_claims),
    collections: Collections = Depends(get_collections),
) -> JSONResponse:
    code = require_text(body.code)
    if not code or body.pot_model_id in (None, ""):
        raise bad_request("Code and pot_model_id are required")

    if await collections.pots.find_one_by({"code": code}):
        raise conflict("Pot code already exists")

    pot: dict[str, Any] = {"code": code, "pot_model_id": body.pot_model_id}
    if body.user_id is not None:
        await _require_user(collections, body.user_id)
        pot["userId"] = body.user_id

    created = await collections.pots.save(pot)
    logger.info("POTS: created id=%s code=%s", created["id"], code)
    return JSONResponse(created, status_code=201)


@router.get("")
async def list_pots(
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    claims: TokenClaims = Depends(current_claims),
    collections: Collections = Depends(get_collections),
    settings: Settings = Depends(get_app_settings),
) -> dict[str, Any]:
    if claims.isAdmin:
        pots = await collections.pots.find_all()
    else:
        pots = await collections.pots.find_by({"userId": claims.id})
    return paginate(pots, page=page, limit=resolve_limit(limit, settings), view=_list_item)


@router.get("/{pot_id}")
async def get_pot(
    pot_id: int,
    claims: TokenClaims = Depends(current_claims),
    collections: Collections = Depends(get_collections),
) -> dict[str, Any]:
    found = await collections.pots.find(pot_id)
    if not found or (found.document.get("userId") != claims.id and not claims.isAdmin):
        raise not_found("Pot not found or permission denied")
    return found.document


@router.patch("/{pot_id}")
async def update_pot(
    pot_id: int,
    body: UpdatePotRequest,
    claims: TokenClaims = Depends(admin_claims),
    collections: Collections = Depends(get_collections),
) -> dict[str, Any]:
    found = await collections.pots.find(pot_id)
    if not found:
        raise not_found("Pot not found")
    pot = found.document

    code = require_text(body.code)
    if code and code != pot.get("code"):
        if await collections.pots.find_one_by({"code": code}):
            raise conflict("Pot code already exists")
        pot["code"] = code
    if body.pot_model_id not in (None, ""):
        pot["pot_model_id"] = body.pot_model_id
    if body.user_id is not None:
        await _require_user(collections, body.user_id)
        pot["userId"] = body.user_id

    return await collections.pots.save(pot)


@router.delete("/{pot_id}", status_code=204)
async def delete_pot(
    pot_id: int,
    claims: TokenClaims = Depends(admin_claims),
    collections: Collections = Depends(get_collections),
) -> Response:
    if not await collections.pots.find(pot_id):
        raise not_found("Pot not found")
    await collections.pots.delete(pot_id)
    logger.info("POTS: deleted id=%s by admin id=%s", pot_id, claims.id)
    return Response(status_code=204)
