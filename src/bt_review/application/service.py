"""ReviewService — member reviews with replies, and per-trade star ratings.

Reviews are free-form and may optionally reference a trade between the two
members. Ratings always belong to a completed trade: each participant rates
the other at most once. A new review notifies the reviewed member; ratings
feed the average shown on a member's profile.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.bt_common.enums import TradeStatus
from src.bt_common.errors import (
    DuplicateRatingError,
    ReviewForbiddenError,
    ReviewNotFoundError,
    ReviewValidationError,
    TradeForbiddenError,
    TradeNotFoundError,
    UserNotFoundError,
)
from src.bt_common.id_generator import generate_id
from src.bt_notification.application.service import (
    NotificationService,
    get_notification_service,
)
from src.bt_notification.domain.payloads import ReviewPayload
from src.bt_review.application.schemas import (
    RatingListResponse,
    RatingOut,
    ReviewOut,
    ReviewReplyOut,
)
from src.bt_review.domain.models import Rating, Review, ReviewReply
from src.bt_review.domain.repository import ReviewRepositoryProtocol
from src.bt_review.infrastructure.persistence import ReviewRepository
from src.bt_trade.domain.repository import TradeRepositoryProtocol
from src.bt_trade.infrastructure.persistence import TradeRepository

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def _check_rating(rating: int) -> None:
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ReviewValidationError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")


class ReviewService:
    def __init__(
        self,
        repo: ReviewRepositoryProtocol | None = None,
        trades: TradeRepositoryProtocol | None = None,
        notifications: NotificationService | None = None,
    ) -> None:
        self._repo: ReviewRepositoryProtocol = repo or ReviewRepository()
        self._trades: TradeRepositoryProtocol = trades or TradeRepository()
        self._notifications = notifications or get_notification_service()

    # ------------------------------------------------------------------
    # Reviews
    # ------------------------------------------------------------------

    async def create_review(
        self,
        db: AsyncSession,
        reviewer_id: str,
        target_user_id: str,
        rating: int,
        comment: str,
        trade_id: str | None = None,
    ) -> ReviewOut:
        if reviewer_id == target_user_id:
            raise ReviewValidationError("Cannot review yourself")
        _check_rating(rating)
        text = (comment or "").strip()
        if not text:
            raise ReviewValidationError("Review comment is required")

        review_id = generate_id()
        try:
            if not await self._repo.user_exists(db, target_user_id):
                raise UserNotFoundError(target_user_id)
            if trade_id:
                trade = await self._trades.get_by_id(db, trade_id)
                if trade is None:
                    raise TradeNotFoundError(trade_id)
                if {trade.initiator_id, trade.receiver_id} != {reviewer_id, target_user_id}:
                    raise ReviewValidationError("Review must be between the trade's participants")

            await self._repo.insert_review(
                db,
                Review(
                    id=review_id,
                    reviewer_id=reviewer_id,
                    target_user_id=target_user_id,
                    rating=rating,
                    comment=text,
                    trade_id=trade_id or None,
                ),
            )
            review = await self._repo.get_review(db, review_id)
            if review is None:
                raise ReviewNotFoundError(review_id)

            reviewer_name = review.reviewer_name or "Someone"
            await self._notifications.dispatch(
                db,
                target_user_id,
                "New Review",
                f"{reviewer_name} left you a {rating}-star review!",
                ReviewPayload(
                    review_id=review_id,
                    reviewer_id=reviewer_id,
                    reviewer_name=reviewer_name,
                    rating=rating,
                ),
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "Review %s: %s -> %s (%d stars)", review_id, reviewer_id, target_user_id, rating
        )
        return ReviewOut.from_domain(review)

    async def list_reviews(self, db: AsyncSession, user_id: str) -> list[ReviewOut]:
        """Reviews received by `user_id`, newest first, each with its replies."""
        reviews = await self._repo.list_reviews_for_user(db, user_id)
        by_id = {r.id: r for r in reviews}
        for reply in await self._repo.list_replies(db, list(by_id)):
            by_id[reply.review_id].replies.append(reply)
        return [ReviewOut.from_domain(r) for r in reviews]

    async def reply(
        self, db: AsyncSession, review_id: str, user_id: str, reply: str
    ) -> ReviewReplyOut:
        text = (reply or "").strip()
        if not text:
            raise ReviewValidationError("Reply cannot be empty")
        try:
            review = await self._repo.get_review(db, review_id)
            if review is None:
                raise ReviewNotFoundError(review_id)
            if not review.is_party(user_id):
                raise ReviewForbiddenError(review_id)
            saved = await self._repo.insert_reply(
                db, ReviewReply(id=generate_id(), review_id=review_id, user_id=user_id, reply=text)
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return ReviewReplyOut.from_domain(saved)

    # ------------------------------------------------------------------
    # Ratings
    # ------------------------------------------------------------------

    async def rate_trade(
        self,
        db: AsyncSession,
        trade_id: str,
        rater_id: str,
        rating: int,
        comment: str | None = None,
    ) -> RatingOut:
        _check_rating(rating)
        try:
            trade = await self._trades.get_by_id(db, trade_id)
            if trade is None:
                raise TradeNotFoundError(trade_id)
            if not trade.is_participant(rater_id):
                raise TradeForbiddenError(trade_id)
            if trade.status != TradeStatus.COMPLETED.value:
                raise ReviewValidationError("Only completed trades can be rated")

            saved = await self._repo.insert_rating(
                db,
                Rating(
                    id=generate_id(),
                    rater_id=rater_id,
                    rated_id=trade.other_party(rater_id),
                    trade_id=trade_id,
                    rating=rating,
                    comment=(comment or "").strip() or None,
                ),
            )
            if saved is None:
                raise DuplicateRatingError(trade_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Trade %s rated %d by %s", trade_id, rating, rater_id)
        return RatingOut.from_domain(saved)

    async def list_ratings(self, db: AsyncSession, user_id: str) -> RatingListResponse:
        ratings = await self._repo.list_ratings_for_user(db, user_id)
        summary = await self._repo.rating_summary(db, user_id)
        return RatingListResponse.build(ratings, summary)


_service: ReviewService | None = None


def get_review_service() -> ReviewService:
    global _service  # noqa: PLW0603
    if _service is None:
        _service = ReviewService()
    return _service
