"""bt_listing REST endpoints.

GET    /listings                    — ACTIVE listings, search + cursor pagination
POST   /listings                    — create (classifier + moderation gates)
GET    /listings/mine               — caller's listings, any status
GET    /listings/{listing_id}       — detail
PATCH  /listings/{listing_id}       — owner edit
DELETE /listings/{listing_id}       — owner delete
POST   /listings/{listing_id}/views — increment view counter
GET    /favorites                   — caller's favorite listings
POST   /favorites/{listing_id}      — add (idempotent)
DELETE /favorites/{listing_id}      — remove
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.bt_common.database import get_db_session
from src.bt_common.response import ApiResponse, success_response
from src.bt_gateway.auth.dependencies import get_current_user
from src.bt_gateway.user.db_models import UserModel
from src.bt_listing.application.schemas import CreateListingRequest, UpdateListingRequest
from src.bt_listing.application.service import get_listing_service

router = APIRouter(prefix="/listings", tags=["listings"])
favorites_router = APIRouter(prefix="/favorites", tags=["favorites"])

_service = get_listing_service()


@router.get("")
async def list_listings(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    search: str | None = Query(None, max_length=200),
    category: str | None = Query(None),
    location: str | None = Query(None),
    limit: int = Query(20, ge=1, le=100),
    cursor: str | None = Query(None),
) -> ApiResponse:
    result = await _service.list_listings(db, search, category, location, cursor, limit)
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("", status_code=201)
async def create_listing(
    body: CreateListingRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.create(db, str(current_user.id), body)
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/mine")
async def my_listings(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    items = await _service.list_for_user(db, str(current_user.id))
    resp = success_response({"items": [i.model_dump() for i in items]})
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{listing_id}")
async def get_listing(
    listing_id: str,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get(db, listing_id)
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.patch("/{listing_id}")
async def update_listing(
    listing_id: str,
    body: UpdateListingRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.update(db, listing_id, str(current_user.id), body)
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.delete("/{listing_id}")
async def delete_listing(
    listing_id: str,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    await _service.delete(db, listing_id, str(current_user.id))
    resp = success_response({"id": listing_id, "deleted": True})
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{listing_id}/views")
async def increment_views(
    listing_id: str,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.increment_views(db, listing_id)
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@favorites_router.get("")
async def list_favorites(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    items = await _service.list_favorites(db, str(current_user.id))
    resp = success_response({"items": [i.model_dump() for i in items]})
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@favorites_router.post("/{listing_id}", status_code=201)
async def add_favorite(
    listing_id: str,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.add_favorite(db, str(current_user.id), listing_id)
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@favorites_router.delete("/{listing_id}")
async def remove_favorite(
    listing_id: str,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    removed = await _service.remove_favorite(db, str(current_user.id), listing_id)
    resp = success_response({"listing_id": listing_id, "removed": removed})
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
