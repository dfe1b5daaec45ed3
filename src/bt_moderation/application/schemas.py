"""Pydantic request/response schemas for bt_moderation."""

from datetime import datetime

from pydantic import BaseModel, Field

from src.bt_moderation.domain.models import ListingReport, UserBan, UserBlock, UserReport


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


class ReportUserRequest(BaseModel):
    reported_user_id: str = Field(..., min_length=1)
    reason: str = Field(..., min_length=1, max_length=1000)


class ReportListingRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=1000)


class BlockUserRequest(BaseModel):
    blocked_user_id: str = Field(..., min_length=1)


class UserReportOut(BaseModel):
    id: str
    reporter_id: str
    reported_user_id: str
    reason: str
    status: str
    created_at: str | None

    @classmethod
    def from_domain(cls, r: UserReport) -> "UserReportOut":
        return cls(
            id=r.id,
            reporter_id=r.reporter_id,
            reported_user_id=r.reported_user_id,
            reason=r.reason,
            status=r.status,
            created_at=_iso(r.created_at),
        )


class ListingReportOut(BaseModel):
    id: str
    listing_id: str
    reporter_id: str
    reason: str
    status: str
    created_at: str | None

    @classmethod
    def from_domain(cls, r: ListingReport) -> "ListingReportOut":
        return cls(
            id=r.id,
            listing_id=r.listing_id,
            reporter_id=r.reporter_id,
            reason=r.reason,
            status=r.status,
            created_at=_iso(r.created_at),
        )


class BlockOut(BaseModel):
    id: str
    user_id: str
    blocked_user_id: str
    created_at: str | None

    @classmethod
    def from_domain(cls, b: UserBlock) -> "BlockOut":
        return cls(
            id=b.id,
            user_id=b.user_id,
            blocked_user_id=b.blocked_user_id,
            created_at=_iso(b.created_at),
        )


class BlockedUsersResponse(BaseModel):
    blocked_user_ids: list[str]


class BanOut(BaseModel):
    id: str
    user_id: str
    reason: str
    banned_by: str | None
    banned_until: str | None
    created_at: str | None

    @classmethod
    def from_domain(cls, b: UserBan) -> "BanOut":
        return cls(
            id=b.id,
            user_id=b.user_id,
            reason=b.reason,
            banned_by=b.banned_by,
            banned_until=_iso(b.banned_until),
            created_at=_iso(b.created_at),
        )
