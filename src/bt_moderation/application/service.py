"""ModerationService — reports, blocks and bans.

Report writes feed the AbuseTracker, which may ban the reported user once
enough reports accumulate. Ban checks are read-only and are called by the
messaging and listing services before they write anything.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.bt_common.datetime_utils import days_from_now
from src.bt_common.enums import ReportStatus
from src.bt_common.errors import (
    ListingNotFoundError,
    ModerationValidationError,
    UserBannedError,
    UserNotFoundError,
)
from src.bt_common.id_generator import generate_id
from src.bt_moderation.application.abuse_tracker import AbuseTracker, get_abuse_tracker
from src.bt_moderation.domain.constants import AUTO_BAN_DAYS
from src.bt_moderation.domain.models import ListingReport, UserBan, UserBlock, UserReport
from src.bt_moderation.domain.repository import ModerationRepositoryProtocol
from src.bt_moderation.infrastructure.persistence import ModerationRepository

logger = logging.getLogger(__name__)


class ModerationService:
    def __init__(
        self,
        repo: ModerationRepositoryProtocol | None = None,
        tracker: AbuseTracker | None = None,
    ) -> None:
        self._repo: ModerationRepositoryProtocol = repo or ModerationRepository()
        self._tracker = tracker

    @property
    def tracker(self) -> AbuseTracker:
        if self._tracker is None:
            self._tracker = get_abuse_tracker()
        return self._tracker

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    async def report_user(
        self, db: AsyncSession, reporter_id: str, reported_user_id: str, reason: str
    ) -> UserReport:
        if reporter_id == reported_user_id:
            raise ModerationValidationError("Cannot report yourself")
        if not await self._repo.user_exists(db, reported_user_id):
            raise UserNotFoundError(reported_user_id)
        report = UserReport(
            id=generate_id(),
            reporter_id=reporter_id,
            reported_user_id=reported_user_id,
            reason=reason,
            status=ReportStatus.PENDING.value,
        )
        try:
            await self._repo.insert_user_report(db, report)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("User report %s: %s -> %s", report.id, reporter_id, reported_user_id)
        await self.tracker.record_report(db, reported_user_id)
        return report

    async def flag_listing(
        self, db: AsyncSession, listing_id: str, reporter_id: str, reason: str
    ) -> ListingReport:
        if not reason.strip():
            raise ModerationValidationError("Report reason must not be blank")
        report = ListingReport(
            id=generate_id(),
            listing_id=listing_id,
            reporter_id=reporter_id,
            reason=reason,
            status=ReportStatus.PENDING.value,
        )
        try:
            if not await self._repo.listing_exists(db, listing_id):
                raise ListingNotFoundError(listing_id)
            await self._repo.insert_listing_report(db, report)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Listing %s reported by %s", listing_id, reporter_id)
        return report

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    async def block_user(
        self, db: AsyncSession, user_id: str, blocked_user_id: str
    ) -> UserBlock:
        if user_id == blocked_user_id:
            raise ModerationValidationError("Cannot block yourself")
        block = UserBlock(id=generate_id(), user_id=user_id, blocked_user_id=blocked_user_id)
        try:
            block = await self._repo.insert_block_if_absent(db, block)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return block

    async def unblock_user(
        self, db: AsyncSession, user_id: str, blocked_user_id: str
    ) -> bool:
        try:
            removed = await self._repo.delete_block(db, user_id, blocked_user_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return removed

    async def get_blocked_users(self, db: AsyncSession, user_id: str) -> list[str]:
        return await self._repo.list_blocked_ids(db, user_id)

    # ------------------------------------------------------------------
    # Bans
    # ------------------------------------------------------------------

    async def ban_user(
        self,
        db: AsyncSession,
        user_id: str,
        reason: str,
        banned_by: str | None = None,
        duration_days: int | None = AUTO_BAN_DAYS,
    ) -> UserBan:
        """Ban `user_id`. `duration_days=None` bans indefinitely."""
        if duration_days is not None and duration_days <= 0:
            raise ModerationValidationError("Ban duration must be positive")
        ban = UserBan(
            id=generate_id(),
            user_id=user_id,
            reason=reason,
            banned_by=banned_by,
            banned_until=days_from_now(duration_days) if duration_days is not None else None,
        )
        try:
            await self._repo.insert_ban(db, ban)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.warning("User %s banned by %s until %s", user_id, banned_by, ban.banned_until)
        return ban

    async def unban_user(self, db: AsyncSession, user_id: str) -> int:
        try:
            lifted = await self._repo.lift_bans(db, user_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("User %s unbanned (%d bans lifted)", user_id, lifted)
        return lifted

    async def is_banned(self, db: AsyncSession, user_id: str) -> bool:
        return await self._repo.has_active_ban(db, user_id)

    async def ensure_not_banned(self, db: AsyncSession, user_id: str) -> None:
        if await self.is_banned(db, user_id):
            raise UserBannedError()


_service: ModerationService | None = None


def get_moderation_service() -> ModerationService:
    global _service  # noqa: PLW0603
    if _service is None:
        _service = ModerationService()
    return _service
