"""ReviewRepository Protocol — reviews, replies and per-trade ratings."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bt_review.domain.models import Rating, RatingSummary, Review, ReviewReply


class ReviewRepositoryProtocol(Protocol):
    async def user_exists(self, db: AsyncSession, user_id: str) -> bool: ...

    async def insert_review(self, db: AsyncSession, review: Review) -> None: ...

    async def get_review(self, db: AsyncSession, review_id: str) -> Review | None: ...

    async def list_reviews_for_user(self, db: AsyncSession, user_id: str) -> list[Review]: ...

    async def insert_reply(self, db: AsyncSession, reply: ReviewReply) -> ReviewReply: ...

    async def list_replies(
        self, db: AsyncSession, review_ids: list[str]
    ) -> list[ReviewReply]: ...

    async def insert_rating(self, db: AsyncSession, rating: Rating) -> Rating | None:
        """None when the rater has already rated this trade."""
        ...

    async def list_ratings_for_user(self, db: AsyncSession, user_id: str) -> list[Rating]: ...

    async def rating_summary(self, db: AsyncSession, user_id: str) -> RatingSummary: ...
