"""Domain model for bt_notification — pure dataclass."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class Notification:
    id: str
    user_id: str
    type: str                        # NotificationType value
    title: str
    message: str
    data: dict[str, Any] = field(default_factory=dict)
    metadata: dict[str, Any] | None = None
    read: bool = False
    related_listing_id: str | None = None
    related_listing_title: str | None = None   # joined on read, never stored
    created_at: datetime | None = None
