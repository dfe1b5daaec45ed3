"""Pydantic schemas for bt_notification API responses."""

from typing import Any

from pydantic import BaseModel

from src.bt_notification.domain.models import Notification


class NotificationOut(BaseModel):
    id: str
    type: str
    title: str
    message: str
    data: dict[str, Any]
    metadata: dict[str, Any] | None
    read: bool
    related_listing_id: str | None
    related_listing_title: str | None
    created_at: str | None

    @classmethod
    def from_domain(cls, n: Notification) -> "NotificationOut":
        return cls(
            id=n.id,
            type=n.type,
            title=n.title,
            message=n.message,
            data=n.data,
            metadata=n.metadata,
            read=n.read,
            related_listing_id=n.related_listing_id,
            related_listing_title=n.related_listing_title,
            created_at=n.created_at.isoformat() if n.created_at else None,
        )


class NotificationListResponse(BaseModel):
    items: list[NotificationOut]
    unread_count: int


class UnreadCountResponse(BaseModel):
    unread_count: int


class MarkAllReadResponse(BaseModel):
    updated: int
