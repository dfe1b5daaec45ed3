# tests/unit/test_admin_service.py
"""Unit tests for AdminService (mocked DB for raw SQL, fakes for moderation)."""
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.bt_admin.application.service import AdminService
from src.bt_common.errors import (
    ModerationValidationError,
    ReportAlreadyResolvedError,
    ReportNotFoundError,
)
from src.bt_moderation.application.service import ModerationService
from tests.unit.fakes import FakeModerationRepo, FakeSession


def _result(row: object) -> MagicMock:
    result = MagicMock()
    result.fetchone.return_value = row
    return result


@pytest.fixture
def moderation_repo() -> FakeModerationRepo:
    return FakeModerationRepo()


@pytest.fixture
def service(moderation_repo: FakeModerationRepo) -> AdminService:
    return AdminService(moderation=ModerationService(repo=moderation_repo, tracker=MagicMock()))


class TestResolveReport:
    async def test_resolve_pending_report(self, service: AdminService) -> None:
        db = AsyncMock()
        resolved_at = datetime(2026, 3, 1, tzinfo=UTC)
        db.execute.side_effect = [
            _result(MagicMock(id="r1", status="PENDING")),
            _result(
                MagicMock(
                    id="r1",
                    listing_id="L1",
                    status="APPROVED",
                    resolved_by="admin-1",
                    resolved_at=resolved_at,
                )
            ),
        ]

        result = await service.resolve_report("r1", "APPROVED", "admin-1", db)

        assert result["status"] == "APPROVED"
        assert result["resolved_by"] == "admin-1"
        assert result["resolved_at"] == resolved_at.isoformat()
        db.commit.assert_awaited_once()

    async def test_unknown_report(self, service: AdminService) -> None:
        db = AsyncMock()
        db.execute.return_value = _result(None)
        with pytest.raises(ReportNotFoundError):
            await service.resolve_report("nope", "REJECTED", "admin-1", db)
        db.rollback.assert_awaited_once()

    async def test_already_resolved(self, service: AdminService) -> None:
        db = AsyncMock()
        db.execute.return_value = _result(MagicMock(id="r1", status="REJECTED"))
        with pytest.raises(ReportAlreadyResolvedError):
            await service.resolve_report("r1", "APPROVED", "admin-1", db)
        db.commit.assert_not_awaited()

    async def test_lost_race_reports_current_status(self, service: AdminService) -> None:
        db = AsyncMock()
        db.execute.side_effect = [
            _result(MagicMock(id="r1", status="PENDING")),
            _result(None),
            _result(MagicMock(id="r1", status="REJECTED")),
        ]
        with pytest.raises(ReportAlreadyResolvedError, match="REJECTED"):
            await service.resolve_report("r1", "APPROVED", "admin-1", db)

    async def test_invalid_action(self, service: AdminService) -> None:
        db = AsyncMock()
        with pytest.raises(ModerationValidationError):
            await service.resolve_report("r1", "PENDING", "admin-1", db)
        db.execute.assert_not_awaited()


class TestStats:
    async def test_stats_are_ints(self, service: AdminService) -> None:
        db = AsyncMock()
        db.execute.return_value = _result(
            MagicMock(total_users=4, active_listings=7, completed_trades=2, pending_reports=1)
        )
        stats = await service.get_system_stats(db)
        assert stats == {
            "total_users": 4,
            "active_listings": 7,
            "completed_trades": 2,
            "pending_reports": 1,
        }


class TestBans:
    async def test_admin_ban_records_admin(
        self, service: AdminService, moderation_repo: FakeModerationRepo
    ) -> None:
        result = await service.ban_user("bob", "harassment", "admin-1", 3, FakeSession())
        assert result["banned_by"] == "admin-1"
        assert result["banned_until"] is not None
        assert len(moderation_repo.bans) == 1

    async def test_indefinite_ban(self, service: AdminService) -> None:
        result = await service.ban_user("bob", "harassment", "admin-1", None, FakeSession())
        assert result["banned_until"] is None

    async def test_unban(self, service: AdminService) -> None:
        db = FakeSession()
        await service.ban_user("bob", "harassment", "admin-1", 3, db)
        result = await service.unban_user("bob", db)
        assert result == {"user_id": "bob", "lifted_bans": 1}
