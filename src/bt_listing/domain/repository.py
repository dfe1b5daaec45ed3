"""Repository Protocols for bt_listing.

Unit tests inject fakes that conform to these Protocols. The trade
lifecycles depend only on ListingReaderProtocol.
"""

from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bt_listing.domain.models import Favorite, Listing


class ListingReaderProtocol(Protocol):
    async def get_by_id(self, db: AsyncSession, listing_id: str) -> Listing | None: ...

    async def set_status(self, db: AsyncSession, listing_id: str, status: str) -> None: ...


class ListingRepositoryProtocol(ListingReaderProtocol, Protocol):
    async def insert(self, db: AsyncSession, listing: Listing) -> Listing: ...

    async def list_active(
        self,
        db: AsyncSession,
        search: str | None,
        category: str | None,
        location: str | None,
        cursor_ts: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Listing]: ...

    async def list_by_user(self, db: AsyncSession, user_id: str) -> list[Listing]: ...

    async def update(
        self, db: AsyncSession, listing_id: str, changes: dict[str, Any]
    ) -> Listing | None: ...

    async def delete(self, db: AsyncSession, listing_id: str) -> bool: ...

    async def increment_views(self, db: AsyncSession, listing_id: str) -> int | None: ...


class FavoriteRepositoryProtocol(Protocol):
    async def insert_if_absent(self, db: AsyncSession, favorite: Favorite) -> Favorite: ...

    async def delete(self, db: AsyncSession, user_id: str, listing_id: str) -> bool: ...

    async def list_listings(self, db: AsyncSession, user_id: str) -> list[Listing]: ...
