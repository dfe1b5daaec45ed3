"""NotificationRepository Protocol — interface contract for persistence layer."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bt_notification.domain.models import Notification


class NotificationRepositoryProtocol(Protocol):
    async def insert(self, db: AsyncSession, notification: Notification) -> Notification: ...

    async def list_by_user(
        self, db: AsyncSession, user_id: str, limit: int
    ) -> list[Notification]: ...

    async def count_unread(self, db: AsyncSession, user_id: str) -> int: ...

    async def mark_read(
        self, db: AsyncSession, notification_id: str, user_id: str
    ) -> bool: ...

    async def mark_all_read(self, db: AsyncSession, user_id: str) -> int: ...
