"""Unit tests for user service (mocked DB)."""

import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from jose import jwt

from src.bt_common.errors import (
    AccountDisabledError,
    EmailExistsError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
)
from src.bt_gateway.auth.jwt_handler import create_access_token, create_refresh_token
from src.bt_gateway.user.db_models import UserModel
from src.bt_gateway.user.service import UserService


def _make_user(is_active: bool = True, role: str = "user") -> UserModel:
    user = UserModel()
    user.id = uuid.uuid4()
    user.name = "Alice"
    user.email = "alice@example.com"
    user.password_hash = "$2b$12$fakehash"
    user.role = role
    user.is_active = is_active
    return user


def _lookup(user: UserModel | None) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = user
    return result


@pytest.fixture
def mock_db() -> AsyncMock:
    db = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def service() -> UserService:
    return UserService()


class TestRegister:
    async def test_duplicate_email_raises_error(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_lookup(_make_user()))
        with pytest.raises(EmailExistsError):
            await service.register("Alice", "ALICE@example.com", "swap4life", mock_db)

    async def test_new_user_gets_user_role(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_lookup(None))

        user = await service.register("Alice", "Alice@Example.com", "swap4life", mock_db)

        assert user.role == "user"
        assert user.email == "alice@example.com"
        assert user.password_hash != "swap4life"
        mock_db.add.assert_called_once_with(user)
        mock_db.flush.assert_awaited_once()


class TestLogin:
    async def test_unknown_email_raises_credentials_error(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_lookup(None))
        with pytest.raises(InvalidCredentialsError):
            await service.login("nobody@example.com", "swap4life", mock_db)

    async def test_wrong_password_raises_credentials_error(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_lookup(_make_user()))
        with (
            patch("src.bt_gateway.user.service.verify_password", return_value=False),
            pytest.raises(InvalidCredentialsError),
        ):
            await service.login("alice@example.com", "wrong1234", mock_db)

    async def test_disabled_account_raises_error(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_lookup(_make_user(is_active=False)))
        with (
            patch("src.bt_gateway.user.service.verify_password", return_value=True),
            pytest.raises(AccountDisabledError),
        ):
            await service.login("alice@example.com", "swap4life", mock_db)

    async def test_success_returns_token_pair_with_role(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_lookup(_make_user(role="admin")))

        with patch("src.bt_gateway.user.service.verify_password", return_value=True):
            user, access, refresh = await service.login("alice@example.com", "swap4life", mock_db)

        assert user.name == "Alice"
        assert access != refresh
        assert jwt.get_unverified_claims(access)["role"] == "admin"


class TestRefresh:
    async def test_invalid_refresh_token_raises_error(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        with pytest.raises(InvalidRefreshTokenError):
            await service.refresh("not.a.real.token", mock_db)

    async def test_access_token_used_as_refresh_raises_error(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        with pytest.raises(InvalidRefreshTokenError):
            await service.refresh(create_access_token("user-123"), mock_db)

    async def test_refresh_rereads_role(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        user = _make_user(role="admin")
        mock_db.execute = AsyncMock(return_value=_lookup(user))

        access = await service.refresh(create_refresh_token(str(user.id)), mock_db)

        claims = jwt.get_unverified_claims(access)
        assert claims["sub"] == str(user.id)
        assert claims["role"] == "admin"

    async def test_refresh_for_disabled_user_rejected(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        user = _make_user(is_active=False)
        mock_db.execute = AsyncMock(return_value=_lookup(user))
        with pytest.raises(InvalidRefreshTokenError):
            await service.refresh(create_refresh_token(str(user.id)), mock_db)

    async def test_refresh_with_non_uuid_subject_rejected(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        with pytest.raises(InvalidRefreshTokenError):
            await service.refresh(create_refresh_token("user-123"), mock_db)
        mock_db.execute.assert_not_awaited()
