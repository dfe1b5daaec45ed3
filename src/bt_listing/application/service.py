"""ListingService — listing CRUD and favorites.

Creation runs the moderation gates before anything is written: banned
owners are refused, the text counts toward the spam threshold, and the
content classifier decides whether the listing goes live or waits for
review.
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.bt_common.enums import ListingStatus
from src.bt_common.errors import (
    ListingForbiddenError,
    ListingNotFoundError,
    ListingValidationError,
    UserBannedError,
)
from src.bt_common.id_generator import generate_id
from src.bt_listing.application.schemas import (
    CreateListingRequest,
    FavoriteOut,
    ListingListResponse,
    ListingOut,
    UpdateListingRequest,
    ViewCountResponse,
    cursor_decode,
    cursor_encode,
)
from src.bt_listing.domain.models import Favorite, Listing
from src.bt_listing.domain.repository import (
    FavoriteRepositoryProtocol,
    ListingRepositoryProtocol,
)
from src.bt_listing.infrastructure.persistence import FavoriteRepository, ListingRepository
from src.bt_moderation.application.service import ModerationService, get_moderation_service
from src.bt_moderation.domain.content_classifier import classify_content
from src.bt_notification.application.service import (
    NotificationService,
    get_notification_service,
)
from src.bt_notification.domain.payloads import ListingPayload

logger = logging.getLogger(__name__)


class ListingService:
    def __init__(
        self,
        repo: ListingRepositoryProtocol | None = None,
        favorites: FavoriteRepositoryProtocol | None = None,
        moderation: ModerationService | None = None,
        notifications: NotificationService | None = None,
    ) -> None:
        self._repo: ListingRepositoryProtocol = repo or ListingRepository()
        self._favorites: FavoriteRepositoryProtocol = favorites or FavoriteRepository()
        self._moderation = moderation or get_moderation_service()
        self._notifications = notifications or get_notification_service()

    async def create(
        self, db: AsyncSession, user_id: str, req: CreateListingRequest
    ) -> ListingOut:
        title = req.title.strip()
        description = req.description.strip()
        category = req.category.strip()
        if not (title and description and category):
            raise ListingValidationError(
                "Missing required fields: title, description, and category are required"
            )

        await self._moderation.ensure_not_banned(db, user_id)
        spam = await self._moderation.tracker.check_spam(db, user_id, f"{title} {description}")
        if spam and await self._moderation.is_banned(db, user_id):
            raise UserBannedError()

        verdict = classify_content(title, description)
        if verdict.flagged:
            status = ListingStatus.PENDING_REVIEW.value
        else:
            status = req.status

        listing = Listing(
            id=generate_id(),
            user_id=user_id,
            title=title,
            description=description,
            category=category,
            status=status,
            condition=req.condition,
            location=req.location,
            wanted_items=list(req.wanted_items),
            images=list(req.images),
            flagged=verdict.flagged,
            flag_reasons=list(verdict.reasons),
        )
        try:
            listing = await self._repo.insert(db, listing)
            if verdict.flagged:
                await self._notifications.dispatch(
                    db,
                    user_id,
                    "Listing Under Review",
                    f'Your listing "{title}" was flagged and is awaiting review',
                    ListingPayload(
                        listing_id=listing.id,
                        listing_title=title,
                        reasons=list(verdict.reasons),
                    ),
                    related_listing_id=listing.id,
                )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        if verdict.flagged:
            logger.info("Listing %s held for review: %s", listing.id, "; ".join(verdict.reasons))
        return ListingOut.from_domain(listing)

    async def get(self, db: AsyncSession, listing_id: str) -> ListingOut:
        listing = await self._repo.get_by_id(db, listing_id)
        if listing is None:
            raise ListingNotFoundError(listing_id)
        return ListingOut.from_domain(listing)

    async def list_listings(
        self,
        db: AsyncSession,
        search: str | None,
        category: str | None,
        location: str | None,
        cursor: str | None,
        limit: int,
    ) -> ListingListResponse:
        # "all" is how clients spell "no filter"
        category = None if category in (None, "", "all") else category
        location = None if location in (None, "", "all") else location
        search = search.strip() if search and search.strip() else None
        cursor_ts, cursor_id = cursor_decode(cursor)

        # Fetch limit+1 to detect has_more without COUNT(*)
        listings = await self._repo.list_active(
            db, search, category, location, cursor_ts, cursor_id, limit + 1
        )
        has_more = len(listings) > limit
        page = listings[:limit]
        next_cursor = cursor_encode(page[-1]) if has_more and page else None
        return ListingListResponse(
            items=[ListingOut.from_domain(item) for item in page],
            next_cursor=next_cursor,
            has_more=has_more,
        )

    async def list_for_user(self, db: AsyncSession, user_id: str) -> list[ListingOut]:
        return [ListingOut.from_domain(item) for item in await self._repo.list_by_user(db, user_id)]

    async def _get_owned(self, db: AsyncSession, listing_id: str, user_id: str) -> Listing:
        listing = await self._repo.get_by_id(db, listing_id)
        if listing is None:
            raise ListingNotFoundError(listing_id)
        if listing.user_id != user_id:
            raise ListingForbiddenError(listing_id)
        return listing

    async def update(
        self, db: AsyncSession, listing_id: str, user_id: str, req: UpdateListingRequest
    ) -> ListingOut:
        changes: dict[str, Any] = req.model_dump(exclude_unset=True, exclude_none=True)
        try:
            listing = await self._get_owned(db, listing_id, user_id)
            if "status" in changes and listing.status in (
                ListingStatus.PENDING_REVIEW.value,
                ListingStatus.COMPLETED.value,
            ):
                raise ListingValidationError(
                    f"Cannot change status of a listing in status {listing.status}"
                )
            updated = await self._repo.update(db, listing_id, changes)
            if updated is None:
                raise ListingNotFoundError(listing_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return ListingOut.from_domain(updated)

    async def delete(self, db: AsyncSession, listing_id: str, user_id: str) -> None:
        try:
            await self._get_owned(db, listing_id, user_id)
            await self._repo.delete(db, listing_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Listing %s deleted by owner %s", listing_id, user_id)

    async def increment_views(self, db: AsyncSession, listing_id: str) -> ViewCountResponse:
        try:
            views = await self._repo.increment_views(db, listing_id)
            if views is None:
                raise ListingNotFoundError(listing_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return ViewCountResponse(listing_id=listing_id, views=views)

    # ------------------------------------------------------------------
    # Favorites
    # ------------------------------------------------------------------

    async def add_favorite(self, db: AsyncSession, user_id: str, listing_id: str) -> FavoriteOut:
        try:
            if await self._repo.get_by_id(db, listing_id) is None:
                raise ListingNotFoundError(listing_id)
            favorite = await self._favorites.insert_if_absent(
                db, Favorite(id=generate_id(), user_id=user_id, listing_id=listing_id)
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return FavoriteOut.from_domain(favorite)

    async def remove_favorite(self, db: AsyncSession, user_id: str, listing_id: str) -> bool:
        try:
            removed = await self._favorites.delete(db, user_id, listing_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return removed

    async def list_favorites(self, db: AsyncSession, user_id: str) -> list[ListingOut]:
        listings = await self._favorites.list_listings(db, user_id)
        return [ListingOut.from_domain(item) for item in listings]


_service: ListingService | None = None


def get_listing_service() -> ListingService:
    global _service  # noqa: PLW0603
    if _service is None:
        _service = ListingService()
    return _service
