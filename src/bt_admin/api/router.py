"""Admin REST API — all endpoints require role=admin."""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from src.bt_admin.application.service import AdminService
from src.bt_common.database import get_db_session
from src.bt_common.response import ApiResponse, success_response
from src.bt_gateway.auth.dependencies import require_admin
from src.bt_gateway.user.db_models import UserModel

router = APIRouter(prefix="/admin", tags=["admin"])
_service = AdminService()


class ResolveRequest(BaseModel):
    action: Literal["APPROVED", "REJECTED"]


class BanRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)
    # None bans indefinitely
    duration_days: int | None = Field(7, ge=1)


@router.get("/moderation-queue")
async def moderation_queue(
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    items = await _service.get_moderation_queue(db)
    return success_response({"items": items})


@router.post("/reports/{report_id}/resolve")
async def resolve_report(
    report_id: str,
    body: ResolveRequest,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.resolve_report(report_id, body.action, str(admin.id), db)
    return success_response(result)


@router.get("/stats")
async def system_stats(
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    return success_response(await _service.get_system_stats(db))


@router.get("/users")
async def list_users(
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    banned: bool | None = Query(None),
    limit: int = Query(100, ge=1, le=500),
) -> ApiResponse:
    items = await _service.list_users(db, banned=banned, limit=limit)
    return success_response({"items": items})


@router.post("/users/{user_id}/ban")
async def ban_user(
    user_id: str,
    body: BanRequest,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.ban_user(user_id, body.reason, str(admin.id), body.duration_days, db)
    return success_response(result)


@router.post("/users/{user_id}/unban")
async def unban_user(
    user_id: str,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    return success_response(await _service.unban_user(user_id, db))
