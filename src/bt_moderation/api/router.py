"""bt_moderation REST endpoints.

POST   /moderation/report                 — report a user
POST   /moderation/block                  — block a user (idempotent)
DELETE /moderation/block/{blocked_user_id} — unblock
GET    /moderation/blocks                 — ids the caller has blocked
POST   /listings/{listing_id}/report      — report a listing (admin queue)
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.bt_common.database import get_db_session
from src.bt_common.response import ApiResponse, success_response
from src.bt_gateway.auth.dependencies import get_current_user
from src.bt_gateway.user.db_models import UserModel
from src.bt_moderation.application.schemas import (
    BlockedUsersResponse,
    BlockOut,
    BlockUserRequest,
    ListingReportOut,
    ReportListingRequest,
    ReportUserRequest,
    UserReportOut,
)
from src.bt_moderation.application.service import get_moderation_service

router = APIRouter(tags=["moderation"])

_service = get_moderation_service()


@router.post("/moderation/report", status_code=201)
async def report_user(
    body: ReportUserRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    report = await _service.report_user(
        db, str(current_user.id), body.reported_user_id, body.reason
    )
    resp = success_response(UserReportOut.from_domain(report).model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/moderation/block", status_code=201)
async def block_user(
    body: BlockUserRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    block = await _service.block_user(db, str(current_user.id), body.blocked_user_id)
    resp = success_response(BlockOut.from_domain(block).model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.delete("/moderation/block/{blocked_user_id}")
async def unblock_user(
    blocked_user_id: str,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    removed = await _service.unblock_user(db, str(current_user.id), blocked_user_id)
    resp = success_response({"blocked_user_id": blocked_user_id, "removed": removed})
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/moderation/blocks")
async def list_blocks(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    ids = await _service.get_blocked_users(db, str(current_user.id))
    resp = success_response(BlockedUsersResponse(blocked_user_ids=ids).model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/listings/{listing_id}/report", status_code=201)
async def report_listing(
    listing_id: str,
    body: ReportListingRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    report = await _service.flag_listing(db, listing_id, str(current_user.id), body.reason)
    resp = success_response(ListingReportOut.from_domain(report).model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
