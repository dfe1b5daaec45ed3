"""Pydantic request/response schemas for bt_review."""

from datetime import datetime

from pydantic import BaseModel, Field

from src.bt_review.domain.models import Rating, RatingSummary, Review, ReviewReply


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


class CreateReviewRequest(BaseModel):
    target_user_id: str = Field(..., min_length=1)
    rating: int
    comment: str = Field(..., max_length=2000)
    trade_id: str | None = None


class ReplyRequest(BaseModel):
    reply: str = Field(..., max_length=2000)


class RateTradeRequest(BaseModel):
    rating: int
    comment: str | None = Field(default=None, max_length=2000)


class ReviewReplyOut(BaseModel):
    id: str
    review_id: str
    user_id: str
    user_name: str | None
    reply: str
    created_at: str | None

    @classmethod
    def from_domain(cls, r: ReviewReply) -> "ReviewReplyOut":
        return cls(
            id=r.id,
            review_id=r.review_id,
            user_id=r.user_id,
            user_name=r.user_name,
            reply=r.reply,
            created_at=_iso(r.created_at),
        )


class ReviewOut(BaseModel):
    id: str
    reviewer_id: str
    reviewer_name: str | None
    target_user_id: str
    rating: int
    comment: str
    trade_id: str | None
    created_at: str | None
    replies: list[ReviewReplyOut]

    @classmethod
    def from_domain(cls, r: Review) -> "ReviewOut":
        return cls(
            id=r.id,
            reviewer_id=r.reviewer_id,
            reviewer_name=r.reviewer_name,
            target_user_id=r.target_user_id,
            rating=r.rating,
            comment=r.comment,
            trade_id=r.trade_id,
            created_at=_iso(r.created_at),
            replies=[ReviewReplyOut.from_domain(p) for p in r.replies],
        )


class RatingOut(BaseModel):
    id: str
    rater_id: str
    rater_name: str | None
    rated_id: str
    trade_id: str
    rating: int
    comment: str | None
    created_at: str | None

    @classmethod
    def from_domain(cls, r: Rating) -> "RatingOut":
        return cls(
            id=r.id,
            rater_id=r.rater_id,
            rater_name=r.rater_name,
            rated_id=r.rated_id,
            trade_id=r.trade_id,
            rating=r.rating,
            comment=r.comment,
            created_at=_iso(r.created_at),
        )


class RatingListResponse(BaseModel):
    items: list[RatingOut]
    count: int
    average_rating: float | None

    @classmethod
    def build(cls, ratings: list[Rating], summary: RatingSummary) -> "RatingListResponse":
        return cls(
            items=[RatingOut.from_domain(r) for r in ratings],
            count=summary.count,
            average_rating=summary.average,
        )
