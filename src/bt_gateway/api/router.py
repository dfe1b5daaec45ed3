"""Identity endpoints (no bearer token required).

POST /auth/register  — name, email, password -> user
POST /auth/login     — email, password -> access + refresh token, user info
POST /auth/refresh   — refresh token -> new access token (role re-read)
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.bt_common.database import get_db_session
from src.bt_common.response import ApiResponse, success_response
from src.bt_gateway.user.schemas import (
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    RefreshResponse,
    RegisterRequest,
    RegisterResponse,
    UserInfo,
)
from src.bt_gateway.user.service import UserService

router = APIRouter(prefix="/auth", tags=["auth"])

_service = UserService()
_EXPIRES_IN = settings.JWT_EXPIRE_MINUTES * 60


def _respond(request: Request, data: dict, message: str) -> ApiResponse:
    resp = success_response(data)
    resp.message = message
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/register", status_code=201)
async def register(
    body: RegisterRequest,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    async with db.begin():
        user = await _service.register(body.name, body.email, body.password, db)
    data = RegisterResponse(
        user_id=str(user.id),
        name=user.name,
        email=user.email,
        created_at=user.created_at.isoformat(),
    )
    return _respond(request, data.model_dump(), "User registered successfully")


@router.post("/login")
async def login(
    body: LoginRequest,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    user, access_token, refresh_token = await _service.login(body.email, body.password, db)
    data = LoginResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_in=_EXPIRES_IN,
        user=UserInfo(user_id=str(user.id), name=user.name, email=user.email, role=user.role),
    )
    return _respond(request, data.model_dump(), "Login successful")


@router.post("/refresh")
async def refresh_token(
    body: RefreshRequest,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    access_token = await _service.refresh(body.refresh_token, db)
    data = RefreshResponse(access_token=access_token, expires_in=_EXPIRES_IN)
    return _respond(request, data.model_dump(), "Token refreshed")
