"""Domain models for bt_review — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class ReviewReply:
    id: str
    review_id: str
    user_id: str
    reply: str
    created_at: datetime | None = None
    user_name: str | None = None


@dataclass
class Review:
    """Free-form review of another member, optionally tied to a trade."""

    id: str
    reviewer_id: str
    target_user_id: str
    rating: int
    comment: str
    trade_id: str | None = None
    created_at: datetime | None = None
    # Joined on read
    reviewer_name: str | None = None
    replies: list[ReviewReply] = field(default_factory=list)

    def is_party(self, user_id: str) -> bool:
        return user_id in (self.reviewer_id, self.target_user_id)


@dataclass
class Rating:
    """Star rating one trade participant gives the other, once per trade."""

    id: str
    rater_id: str
    rated_id: str
    trade_id: str
    rating: int
    comment: str | None = None
    created_at: datetime | None = None
    rater_name: str | None = None


@dataclass
class RatingSummary:
    count: int
    average: float | None   # None when the user has no ratings
