"""NotificationService — the only writer of notification rows.

Other modules call `dispatch`, never `create`: dispatch runs the insert in
a SAVEPOINT and swallows any failure, so a notification that cannot be
written never rolls back or fails the caller's primary action. The caller
still owns the outer transaction and its commit.
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.bt_common.errors import NotificationNotFoundError
from src.bt_common.id_generator import generate_id
from src.bt_notification.application.schemas import (
    MarkAllReadResponse,
    NotificationListResponse,
    NotificationOut,
    UnreadCountResponse,
)
from src.bt_notification.domain.models import Notification
from src.bt_notification.domain.payloads import NotificationPayload
from src.bt_notification.domain.repository import NotificationRepositoryProtocol
from src.bt_notification.infrastructure.persistence import NotificationRepository

logger = logging.getLogger(__name__)

NOTIFICATION_PAGE_SIZE = 50


class NotificationService:
    def __init__(self, repo: NotificationRepositoryProtocol | None = None) -> None:
        self._repo: NotificationRepositoryProtocol = repo or NotificationRepository()

    async def create(
        self,
        db: AsyncSession,
        user_id: str,
        title: str,
        message: str,
        payload: NotificationPayload,
        related_listing_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Notification:
        notification = Notification(
            id=generate_id(),
            user_id=user_id,
            type=payload.type,
            title=title,
            message=message,
            data=payload.model_dump(mode="json"),
            metadata=metadata,
            read=False,
            related_listing_id=related_listing_id,
        )
        return await self._repo.insert(db, notification)

    async def dispatch(
        self,
        db: AsyncSession,
        user_id: str,
        title: str,
        message: str,
        payload: NotificationPayload,
        related_listing_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Notification | None:
        """Best-effort create. Returns None (and logs) on failure."""
        try:
            async with db.begin_nested():
                notification = await self.create(
                    db, user_id, title, message, payload, related_listing_id, metadata
                )
        except Exception:
            logger.warning(
                "Notification dispatch failed: user=%s type=%s",
                user_id,
                payload.type,
                exc_info=True,
            )
            return None
        logger.debug("Notification %s (%s) -> user %s", notification.id, payload.type, user_id)
        return notification

    async def list_for_user(
        self, db: AsyncSession, user_id: str, limit: int = NOTIFICATION_PAGE_SIZE
    ) -> NotificationListResponse:
        items = await self._repo.list_by_user(db, user_id, limit)
        unread = await self._repo.count_unread(db, user_id)
        return NotificationListResponse(
            items=[NotificationOut.from_domain(n) for n in items],
            unread_count=unread,
        )

    async def get_unread_count(self, db: AsyncSession, user_id: str) -> UnreadCountResponse:
        return UnreadCountResponse(unread_count=await self._repo.count_unread(db, user_id))

    async def mark_as_read(
        self, db: AsyncSession, notification_id: str, user_id: str
    ) -> None:
        try:
            found = await self._repo.mark_read(db, notification_id, user_id)
            if not found:
                raise NotificationNotFoundError(notification_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    async def mark_all_as_read(self, db: AsyncSession, user_id: str) -> MarkAllReadResponse:
        try:
            updated = await self._repo.mark_all_read(db, user_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return MarkAllReadResponse(updated=updated)


_service: NotificationService | None = None


def get_notification_service() -> NotificationService:
    global _service  # noqa: PLW0603
    if _service is None:
        _service = NotificationService()
    return _service
