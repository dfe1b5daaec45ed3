"""Domain models for bt_listing — pure dataclasses, no business logic."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class Listing:
    id: str
    user_id: str
    title: str
    description: str | None
    category: str
    status: str
    condition: str | None = None
    location: str | None = None
    wanted_items: list[str] = field(default_factory=list)   # ordered
    images: list[str] = field(default_factory=list)         # URLs
    flagged: bool = False
    flag_reasons: list[str] = field(default_factory=list)
    views: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class Favorite:
    id: str
    user_id: str
    listing_id: str
    created_at: datetime | None = None
