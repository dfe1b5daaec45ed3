"""Admin application service — moderation queue, report resolution, stats, users.

Every caller is already gated by `require_admin` at the router.
"""

import logging
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bt_common.enums import ReportStatus
from src.bt_common.errors import (
    ModerationValidationError,
    ReportAlreadyResolvedError,
    ReportNotFoundError,
)
from src.bt_moderation.application.service import ModerationService, get_moderation_service

logger = logging.getLogger(__name__)

_MODERATION_QUEUE_SQL = text("""
    SELECT r.id, r.listing_id, r.reporter_id, r.reason, r.status, r.created_at,
           l.title AS listing_title, l.status AS listing_status,
           u.name AS reporter_name
    FROM listing_reports r
    LEFT JOIN listings l ON l.id = r.listing_id
    LEFT JOIN users u ON CAST(u.id AS TEXT) = r.reporter_id
    WHERE r.status = 'PENDING'
    ORDER BY r.created_at DESC, r.id DESC
""")
_GET_REPORT_SQL = text("SELECT id, status FROM listing_reports WHERE id = :report_id")
_RESOLVE_REPORT_SQL = text("""
    UPDATE listing_reports
    SET status = :status, resolved_by = :admin_id, resolved_at = NOW()
    WHERE id = :report_id AND status = 'PENDING'
    RETURNING id, listing_id, status, resolved_by, resolved_at
""")
_STATS_SQL = text("""
    SELECT
        (SELECT COUNT(*) FROM users) AS total_users,
        (SELECT COUNT(*) FROM listings WHERE status = 'ACTIVE') AS active_listings,
        (SELECT COUNT(*) FROM trades WHERE status = 'COMPLETED') AS completed_trades,
        (SELECT COUNT(*) FROM listing_reports WHERE status = 'PENDING') AS pending_reports
""")
_LIST_USERS_SQL = text("""
    SELECT * FROM (
        SELECT CAST(u.id AS TEXT) AS id, u.name, u.email, u.role, u.is_active, u.created_at,
               EXISTS (
                   SELECT 1 FROM user_bans b
                   WHERE b.user_id = CAST(u.id AS TEXT)
                     AND b.lifted_at IS NULL
                     AND (b.banned_until IS NULL OR b.banned_until > NOW())
               ) AS banned
        FROM users u
    ) AS x
    WHERE CAST(:banned AS BOOLEAN) IS NULL OR x.banned = CAST(:banned AS BOOLEAN)
    ORDER BY x.created_at DESC
    LIMIT :limit
""")

_RESOLUTIONS = frozenset({ReportStatus.APPROVED.value, ReportStatus.REJECTED.value})


class AdminService:
    def __init__(self, moderation: ModerationService | None = None) -> None:
        self._moderation = moderation or get_moderation_service()

    async def get_moderation_queue(self, db: AsyncSession) -> list[dict[str, Any]]:
        rows = (await db.execute(_MODERATION_QUEUE_SQL)).fetchall()
        return [
            {
                "id": r.id,
                "listing_id": r.listing_id,
                "listing_title": r.listing_title,
                "listing_status": r.listing_status,
                "reporter_id": r.reporter_id,
                "reporter_name": r.reporter_name,
                "reason": r.reason,
                "status": r.status,
                "created_at": r.created_at.isoformat() if r.created_at else None,
            }
            for r in rows
        ]

    async def resolve_report(
        self, report_id: str, action: str, admin_id: str, db: AsyncSession
    ) -> dict[str, Any]:
        if action not in _RESOLUTIONS:
            raise ModerationValidationError(
                f"Invalid resolution {action!r}; expected APPROVED or REJECTED"
            )
        try:
            row = (await db.execute(_GET_REPORT_SQL, {"report_id": report_id})).fetchone()
            if row is None:
                raise ReportNotFoundError(report_id)
            if row.status != ReportStatus.PENDING.value:
                raise ReportAlreadyResolvedError(report_id, row.status)
            resolved = (
                await db.execute(
                    _RESOLVE_REPORT_SQL,
                    {"report_id": report_id, "status": action, "admin_id": admin_id},
                )
            ).fetchone()
            if resolved is None:
                # Resolved concurrently between the read and the update.
                current = (
                    await db.execute(_GET_REPORT_SQL, {"report_id": report_id})
                ).fetchone()
                raise ReportAlreadyResolvedError(report_id, current.status if current else action)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Listing report %s resolved %s by admin %s", report_id, action, admin_id)
        return {
            "id": resolved.id,
            "listing_id": resolved.listing_id,
            "status": resolved.status,
            "resolved_by": resolved.resolved_by,
            "resolved_at": resolved.resolved_at.isoformat() if resolved.resolved_at else None,
        }

    async def get_system_stats(self, db: AsyncSession) -> dict[str, int]:
        stats = (await db.execute(_STATS_SQL)).fetchone()
        return {
            "total_users": int(stats.total_users) if stats else 0,
            "active_listings": int(stats.active_listings) if stats else 0,
            "completed_trades": int(stats.completed_trades) if stats else 0,
            "pending_reports": int(stats.pending_reports) if stats else 0,
        }

    async def list_users(
        self, db: AsyncSession, banned: bool | None = None, limit: int = 100
    ) -> list[dict[str, Any]]:
        rows = (
            await db.execute(_LIST_USERS_SQL, {"banned": banned, "limit": limit})
        ).fetchall()
        return [
            {
                "id": r.id,
                "name": r.name,
                "email": r.email,
                "role": r.role,
                "is_active": r.is_active,
                "banned": bool(r.banned),
                "created_at": r.created_at.isoformat() if r.created_at else None,
            }
            for r in rows
        ]

    async def ban_user(
        self,
        user_id: str,
        reason: str,
        admin_id: str,
        duration_days: int | None,
        db: AsyncSession,
    ) -> dict[str, Any]:
        ban = await self._moderation.ban_user(
            db, user_id, reason, banned_by=admin_id, duration_days=duration_days
        )
        return {
            "id": ban.id,
            "user_id": ban.user_id,
            "reason": ban.reason,
            "banned_by": ban.banned_by,
            "banned_until": ban.banned_until.isoformat() if ban.banned_until else None,
        }

    async def unban_user(self, user_id: str, db: AsyncSession) -> dict[str, Any]:
        lifted = await self._moderation.unban_user(db, user_id)
        return {"user_id": user_id, "lifted_bans": lifted}
