"""Pydantic schemas for bt_listing.

Cursor format for listings (VARCHAR PK, not sequential):
  {"ts": "<created_at ISO>", "id": "<listing_id>"}
  Encoded as Base64 JSON string.
"""

import base64
import json
from typing import Literal

from pydantic import BaseModel, Field

from src.bt_listing.domain.models import Favorite, Listing

# ---------------------------------------------------------------------------
# Cursor utilities
# ---------------------------------------------------------------------------


def cursor_encode(last_listing: Listing) -> str:
    """Encode composite cursor from last listing in page."""
    payload = {
        "ts": last_listing.created_at.isoformat() if last_listing.created_at else None,
        "id": last_listing.id,
    }
    return base64.b64encode(json.dumps(payload).encode()).decode()


def cursor_decode(cursor: str | None) -> tuple[str | None, str | None]:
    """Decode composite cursor -> (ts_iso, listing_id), or (None, None) on error."""
    if cursor is None:
        return None, None
    try:
        data = json.loads(base64.b64decode(cursor.encode()).decode())
        return data["ts"], data["id"]
    except (ValueError, KeyError, TypeError):
        return None, None


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class CreateListingRequest(BaseModel):
    # Required-ness of title/description/category is enforced by the service
    # so the error carries the listing error code.
    title: str = Field("", max_length=200)
    description: str = Field("", max_length=5000)
    category: str = Field("", max_length=100)
    condition: str | None = Field(None, max_length=50)
    location: str | None = Field(None, max_length=200)
    wanted_items: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    status: Literal["ACTIVE", "DRAFT"] = "ACTIVE"


class UpdateListingRequest(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, min_length=1, max_length=5000)
    category: str | None = Field(None, min_length=1, max_length=100)
    condition: str | None = Field(None, max_length=50)
    location: str | None = Field(None, max_length=200)
    wanted_items: list[str] | None = None
    images: list[str] | None = None
    status: Literal["ACTIVE", "DRAFT"] | None = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class ListingOut(BaseModel):
    id: str
    user_id: str
    title: str
    description: str | None
    category: str
    condition: str | None
    location: str | None
    wanted_items: list[str]
    images: list[str]
    status: str
    flagged: bool
    flag_reasons: list[str]
    views: int
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, listing: Listing) -> "ListingOut":
        return cls(
            id=listing.id,
            user_id=listing.user_id,
            title=listing.title,
            description=listing.description,
            category=listing.category,
            condition=listing.condition,
            location=listing.location,
            wanted_items=listing.wanted_items,
            images=listing.images,
            status=listing.status,
            flagged=listing.flagged,
            flag_reasons=listing.flag_reasons,
            views=listing.views,
            created_at=listing.created_at.isoformat() if listing.created_at else None,
            updated_at=listing.updated_at.isoformat() if listing.updated_at else None,
        )


class ListingListResponse(BaseModel):
    items: list[ListingOut]
    next_cursor: str | None
    has_more: bool


class FavoriteOut(BaseModel):
    id: str
    user_id: str
    listing_id: str
    created_at: str | None

    @classmethod
    def from_domain(cls, fav: Favorite) -> "FavoriteOut":
        return cls(
            id=fav.id,
            user_id=fav.user_id,
            listing_id=fav.listing_id,
            created_at=fav.created_at.isoformat() if fav.created_at else None,
        )


class ViewCountResponse(BaseModel):
    listing_id: str
    views: int
