"""ModerationRepository — raw SQL over user_reports, listing_reports,
user_blocks and user_bans.

Blocks are unique per (user_id, blocked_user_id); a repeated block is
absorbed by ON CONFLICT DO NOTHING and the existing row is returned.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bt_moderation.domain.models import ListingReport, UserBan, UserBlock, UserReport

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_INSERT_USER_REPORT_SQL = text("""
    INSERT INTO user_reports (id, reporter_id, reported_user_id, reason, status)
    VALUES (:id, :reporter_id, :reported_user_id, :reason, :status)
    RETURNING created_at
""")

_INSERT_LISTING_REPORT_SQL = text("""
    INSERT INTO listing_reports (id, listing_id, reporter_id, reason, status)
    VALUES (:id, :listing_id, :reporter_id, :reason, :status)
    RETURNING created_at
""")

_LISTING_EXISTS_SQL = text("SELECT EXISTS (SELECT 1 FROM listings WHERE id = :listing_id)")

_USER_EXISTS_SQL = text(
    "SELECT EXISTS (SELECT 1 FROM users WHERE CAST(id AS TEXT) = :user_id)"
)

_INSERT_BLOCK_SQL = text("""
    INSERT INTO user_blocks (id, user_id, blocked_user_id)
    VALUES (:id, :user_id, :blocked_user_id)
    ON CONFLICT (user_id, blocked_user_id) DO NOTHING
    RETURNING id, user_id, blocked_user_id, created_at
""")

_GET_BLOCK_SQL = text("""
    SELECT id, user_id, blocked_user_id, created_at
    FROM user_blocks
    WHERE user_id = :user_id AND blocked_user_id = :blocked_user_id
""")

_DELETE_BLOCK_SQL = text("""
    DELETE FROM user_blocks
    WHERE user_id = :user_id AND blocked_user_id = :blocked_user_id
    RETURNING id
""")

_LIST_BLOCKED_SQL = text("""
    SELECT blocked_user_id FROM user_blocks
    WHERE user_id = :user_id
    ORDER BY created_at DESC
""")

_INSERT_BAN_SQL = text("""
    INSERT INTO user_bans (id, user_id, reason, banned_by, banned_until)
    VALUES (:id, :user_id, :reason, :banned_by, :banned_until)
    RETURNING created_at
""")

_LIFT_BANS_SQL = text("""
    UPDATE user_bans SET lifted_at = NOW()
    WHERE user_id = :user_id
      AND lifted_at IS NULL
      AND (banned_until IS NULL OR banned_until > NOW())
""")

_HAS_ACTIVE_BAN_SQL = text("""
    SELECT EXISTS (
        SELECT 1 FROM user_bans
        WHERE user_id = :user_id
          AND lifted_at IS NULL
          AND (banned_until IS NULL OR banned_until > NOW())
    )
""")


def _row_to_block(row: Any) -> UserBlock:
    return UserBlock(
        id=row.id,
        user_id=row.user_id,
        blocked_user_id=row.blocked_user_id,
        created_at=row.created_at,
    )


class ModerationRepository:
    """Concrete implementation of ModerationRepositoryProtocol."""

    async def insert_user_report(self, db: AsyncSession, report: UserReport) -> UserReport:
        result = await db.execute(
            _INSERT_USER_REPORT_SQL,
            {
                "id": report.id,
                "reporter_id": report.reporter_id,
                "reported_user_id": report.reported_user_id,
                "reason": report.reason,
                "status": report.status,
            },
        )
        report.created_at = result.scalar_one()
        return report

    async def insert_listing_report(
        self, db: AsyncSession, report: ListingReport
    ) -> ListingReport:
        result = await db.execute(
            _INSERT_LISTING_REPORT_SQL,
            {
                "id": report.id,
                "listing_id": report.listing_id,
                "reporter_id": report.reporter_id,
                "reason": report.reason,
                "status": report.status,
            },
        )
        report.created_at = result.scalar_one()
        return report

    async def listing_exists(self, db: AsyncSession, listing_id: str) -> bool:
        result = await db.execute(_LISTING_EXISTS_SQL, {"listing_id": listing_id})
        return bool(result.scalar_one())

    async def user_exists(self, db: AsyncSession, user_id: str) -> bool:
        result = await db.execute(_USER_EXISTS_SQL, {"user_id": user_id})
        return bool(result.scalar_one())

    async def insert_block_if_absent(self, db: AsyncSession, block: UserBlock) -> UserBlock:
        params = {
            "id": block.id,
            "user_id": block.user_id,
            "blocked_user_id": block.blocked_user_id,
        }
        row = (await db.execute(_INSERT_BLOCK_SQL, params)).fetchone()
        if row is None:
            row = (await db.execute(_GET_BLOCK_SQL, params)).fetchone()
        return _row_to_block(row)

    async def delete_block(
        self, db: AsyncSession, user_id: str, blocked_user_id: str
    ) -> bool:
        result = await db.execute(
            _DELETE_BLOCK_SQL, {"user_id": user_id, "blocked_user_id": blocked_user_id}
        )
        return result.fetchone() is not None

    async def list_blocked_ids(self, db: AsyncSession, user_id: str) -> list[str]:
        result = await db.execute(_LIST_BLOCKED_SQL, {"user_id": user_id})
        return [row.blocked_user_id for row in result.fetchall()]

    async def insert_ban(self, db: AsyncSession, ban: UserBan) -> UserBan:
        result = await db.execute(
            _INSERT_BAN_SQL,
            {
                "id": ban.id,
                "user_id": ban.user_id,
                "reason": ban.reason,
                "banned_by": ban.banned_by,
                "banned_until": ban.banned_until,
            },
        )
        ban.created_at = result.scalar_one()
        return ban

    async def lift_bans(self, db: AsyncSession, user_id: str) -> int:
        result = await db.execute(_LIFT_BANS_SQL, {"user_id": user_id})
        return int(result.rowcount or 0)

    async def has_active_ban(self, db: AsyncSession, user_id: str) -> bool:
        result = await db.execute(_HAS_ACTIVE_BAN_SQL, {"user_id": user_id})
        return bool(result.scalar_one())
