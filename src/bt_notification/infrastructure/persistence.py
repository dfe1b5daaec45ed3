"""NotificationRepository — raw SQL persistence implementation.

`data` and `metadata` are JSONB; they are bound as JSON strings and CAST on
the server side.
"""

import json
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bt_notification.domain.models import Notification

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_INSERT_SQL = text("""
    INSERT INTO notifications (id, user_id, type, title, message,
        data, metadata, read, related_listing_id)
    VALUES (:id, :user_id, :type, :title, :message,
        CAST(:data AS JSONB), CAST(:metadata AS JSONB), FALSE, :related_listing_id)
    RETURNING created_at
""")

_LIST_BY_USER_SQL = text("""
    SELECT n.id, n.user_id, n.type, n.title, n.message, n.data, n.metadata,
           n.read, n.related_listing_id, l.title AS related_listing_title,
           n.created_at
    FROM notifications n
    LEFT JOIN listings l ON l.id = n.related_listing_id
    WHERE n.user_id = :user_id
    ORDER BY n.created_at DESC, n.id DESC
    LIMIT :limit
""")

_COUNT_UNREAD_SQL = text("""
    SELECT COUNT(*) FROM notifications
    WHERE user_id = :user_id AND read = FALSE
""")

_MARK_READ_SQL = text("""
    UPDATE notifications SET read = TRUE
    WHERE id = :id AND user_id = :user_id
    RETURNING id
""")

_MARK_ALL_READ_SQL = text("""
    UPDATE notifications SET read = TRUE
    WHERE user_id = :user_id AND read = FALSE
""")


def _row_to_notification(row: Any) -> Notification:
    return Notification(
        id=row.id,
        user_id=row.user_id,
        type=row.type,
        title=row.title,
        message=row.message,
        data=row.data or {},
        metadata=row.metadata,
        read=row.read,
        related_listing_id=row.related_listing_id,
        related_listing_title=row.related_listing_title,
        created_at=row.created_at,
    )


class NotificationRepository:
    """Concrete implementation of NotificationRepositoryProtocol."""

    async def insert(self, db: AsyncSession, notification: Notification) -> Notification:
        result = await db.execute(
            _INSERT_SQL,
            {
                "id": notification.id,
                "user_id": notification.user_id,
                "type": notification.type,
                "title": notification.title,
                "message": notification.message,
                "data": json.dumps(notification.data),
                "metadata": (
                    json.dumps(notification.metadata)
                    if notification.metadata is not None else None
                ),
                "related_listing_id": notification.related_listing_id,
            },
        )
        notification.created_at = result.scalar_one()
        return notification

    async def list_by_user(
        self, db: AsyncSession, user_id: str, limit: int
    ) -> list[Notification]:
        result = await db.execute(_LIST_BY_USER_SQL, {"user_id": user_id, "limit": limit})
        return [_row_to_notification(row) for row in result.fetchall()]

    async def count_unread(self, db: AsyncSession, user_id: str) -> int:
        result = await db.execute(_COUNT_UNREAD_SQL, {"user_id": user_id})
        return int(result.scalar_one() or 0)

    async def mark_read(
        self, db: AsyncSession, notification_id: str, user_id: str
    ) -> bool:
        result = await db.execute(
            _MARK_READ_SQL, {"id": notification_id, "user_id": user_id}
        )
        return result.fetchone() is not None

    async def mark_all_read(self, db: AsyncSession, user_id: str) -> int:
        result = await db.execute(_MARK_ALL_READ_SQL, {"user_id": user_id})
        return int(result.rowcount or 0)
