"""bt_notification REST endpoints.

GET  /notifications                   — newest 50, with unread count
GET  /notifications/unread-count      — badge counter (polling fallback)
POST /notifications/{id}/read         — mark one as read
POST /notifications/read-all          — mark all as read
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.bt_common.database import get_db_session
from src.bt_common.response import ApiResponse, success_response
from src.bt_gateway.auth.dependencies import get_current_user
from src.bt_gateway.user.db_models import UserModel
from src.bt_notification.application.service import get_notification_service

router = APIRouter(prefix="/notifications", tags=["notifications"])

_service = get_notification_service()


@router.get("")
async def list_notifications(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    limit: int = Query(50, ge=1, le=100),
) -> ApiResponse:
    result = await _service.list_for_user(db, str(current_user.id), limit)
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/unread-count")
async def unread_count(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_unread_count(db, str(current_user.id))
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/read-all")
async def mark_all_read(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.mark_all_as_read(db, str(current_user.id))
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{notification_id}/read")
async def mark_read(
    notification_id: str,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    await _service.mark_as_read(db, notification_id, str(current_user.id))
    resp = success_response({"id": notification_id, "read": True})
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
