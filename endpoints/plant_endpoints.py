from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from persistence.repositories import Collections
from settings import Settings

from .auth_endpoints import TokenClaims, current_claims
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

router = APIRouter(prefix="/plants", tags=["plants"])
logger = logging.getLogger(__name__)


class PlantRequest(BaseModel):
    name: str | None = None


async def _name_taken(collections: Collections, user_id: int, name: str) -> bool:
    return bool(await collections.plants.find_one_by({"userId": user_id, "name": name}))


async def _owned_plant(collections: Collections, plant_id: int, claims: TokenClaims) -> dict[str, Any]:
    found = await collections.plants.find(plant_id)
    if not found:
        raise not_found("Plant not found")
    if found.document.get("userId") != claims.id:
        raise forbidden()
    return found.document


@router.post("", status_code=201)
async def create_plant(
    body: PlantRequest,
    claims: TokenClaims = Depends(current_claims),
    collections: Collections = Depends(get_collections),
) -> JSONResponse:
    name = require_text(body.name)
    if not name:
        raise bad_request("Plant name is required")

    if await _name_taken(collections, claims.id, name):
        raise conflict("Plant name must be unique among user's plants")

    created = await collections.plants.save({"name": name, "userId": claims.id})
    logger.info("PLANTS: created id=%s for user id=%s", created["id"], claims.id)
    return JSONResponse(created, status_code=201)


@router.get("")
async def list_plants(
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    name: str | None = None,
    user_name: str | None = None,
    claims: TokenClaims = Depends(current_claims),
    collections: Collections = Depends(get_collections),
    settings: Settings = Depends(get_app_settings),
) -> dict[str, Any]:
    if claims.isAdmin:
        plants = await collections.plants.find_all()
    else:
        plants = await collections.plants.find_by({"userId": claims.id})

    if name:
        plants = [p for p in plants if name in str(p.get("name", ""))]

    if claims.isAdmin and user_name:
        owners = await collections.users.find_by({"$or": [{"first_name": user_name}, {"last_name": user_name}]})
        owner_ids = {u["id"] for u in owners}
        plants = [p for p in plants if p.get("userId") in owner_ids]

    return paginate(plants, page=page, limit=resolve_limit(limit, settings))


@router.get("/{plant_id}")
async def get_plant(
    plant_id: int,
    claims: TokenClaims = Depends(current_claims),
    collections: Collections = Depends(get_collections),
) -> dict[str, Any]:
    found = await collections.plants.find(plant_id)
    if not found:
        raise not_found("Plant not found")
    if found.document.get("userId") != claims.id and not claims.isAdmin:
        raise forbidden()
    return found.document


@router.patch("/{plant_id}")
async def update_plant(
    plant_id: int,
    body: PlantRequest,
    claims: TokenClaims = Depends(current_claims),
    collections: Collections = Depends(get_collections),
) -> dict[str, Any]:
    plant = await _owned_plant(collections, plant_id, claims)

    name = require_text(body.name)
    if name and name != plant.get("name"):
        if await _name_taken(collections, claims.id, name):
            raise conflict("Plant name must be unique among user's plants")
        plant["name"] = name

    return await collections.plants.save(plant)


@router.delete("/{plant_id}", status_code=204)
async def delete_plant(
    plant_id: int,
    claims: TokenClaims = Depends(current_claims),
    collections: Collections = Depends(get_collections),
) -> Response:
    await _owned_plant(collections, plant_id, claims)
    await collections.plants.delete(plant_id)
    return Response(status_code=204)
