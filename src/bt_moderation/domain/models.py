"""Domain models for bt_moderation — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class UserReport:
    id: str
    reporter_id: str
    reported_user_id: str
    reason: str
    status: str = "PENDING"
    created_at: datetime | None = None


@dataclass
class ListingReport:
    id: str
    listing_id: str
    reporter_id: str
    reason: str
    status: str = "PENDING"
    resolved_by: str | None = None
    resolved_at: datetime | None = None
    created_at: datetime | None = None


@dataclass
class UserBlock:
    id: str
    user_id: str
    blocked_user_id: str
    created_at: datetime | None = None


@dataclass
class UserBan:
    id: str
    user_id: str
    reason: str
    banned_until: datetime | None    # None = indefinite
    banned_by: str | None = None     # None = automatic
    lifted_at: datetime | None = None
    created_at: datetime | None = None

    def is_active(self, now: datetime) -> bool:
        if self.lifted_at is not None:
            return False
        return self.banned_until is None or self.banned_until > now
