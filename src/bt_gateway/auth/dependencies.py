"""Auth dependencies for routers.

    current_user: Annotated[UserModel, Depends(get_current_user)]
    admin: Annotated[UserModel, Depends(require_admin)]

The acting user id every service receives is `str(current_user.id)`.
Bans are not checked here: a banned user can still read and is rejected
at the action itself (message send, listing creation).
"""

import uuid
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.bt_common.database import get_db_session
from src.bt_common.enums import UserRole
from src.bt_common.errors import AccountDisabledError, AdminRequiredError, InvalidCredentialsError
from src.bt_gateway.auth.jwt_handler import decode_token
from src.bt_gateway.user.db_models import UserModel

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> UserModel:
    """Resolve the bearer token to an active user (401 / 403 otherwise)."""
    try:
        payload = decode_token(token, expected_type="access")
        user_id = uuid.UUID(str(payload.get("sub", "")))
    except (InvalidCredentialsError, ValueError):
        raise _unauthorized() from None

    user = (
        await db.execute(select(UserModel).where(UserModel.id == user_id))
    ).scalar_one_or_none()
    if user is None:
        raise _unauthorized()
    if not user.is_active:
        raise AccountDisabledError()
    return user


async def require_admin(
    current_user: Annotated[UserModel, Depends(get_current_user)],
) -> UserModel:
    """Admin routes only. The role comes from the users row, not the token claim."""
    if current_user.role != UserRole.ADMIN.value:
        raise AdminRequiredError()
    return current_user
