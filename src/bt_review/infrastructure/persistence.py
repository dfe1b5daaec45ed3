"""ReviewRepository — raw SQL over user_reviews, review_replies and ratings.

A rater may rate a trade once; the repeat insert is absorbed by
ON CONFLICT DO NOTHING and reported to the caller as None.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bt_review.domain.models import Rating, RatingSummary, Review, ReviewReply

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_USER_EXISTS_SQL = text(
    "SELECT EXISTS (SELECT 1 FROM users WHERE CAST(id AS TEXT) = :user_id)"
)

_INSERT_REVIEW_SQL = text("""
    INSERT INTO user_reviews (id, reviewer_id, target_user_id, rating, comment, trade_id)
    VALUES (:id, :reviewer_id, :target_user_id, :rating, :comment, :trade_id)
""")

_REVIEW_SELECT = """
    SELECT r.id, r.reviewer_id, r.target_user_id, r.rating, r.comment, r.trade_id,
           r.created_at, u.name AS reviewer_name
    FROM user_reviews r
    LEFT JOIN users u ON CAST(u.id AS TEXT) = r.reviewer_id
"""

_GET_REVIEW_SQL = text(f"{_REVIEW_SELECT} WHERE r.id = :id")

_LIST_REVIEWS_SQL = text(f"""
    {_REVIEW_SELECT}
    WHERE r.target_user_id = :user_id
    ORDER BY r.created_at DESC, r.id DESC
""")

_INSERT_REPLY_SQL = text("""
    INSERT INTO review_replies (id, review_id, user_id, reply)
    VALUES (:id, :review_id, :user_id, :reply)
    RETURNING created_at
""")

_LIST_REPLIES_SQL = text("""
    SELECT p.id, p.review_id, p.user_id, p.reply, p.created_at, u.name AS user_name
    FROM review_replies p
    LEFT JOIN users u ON CAST(u.id AS TEXT) = p.user_id
    WHERE p.review_id = ANY(CAST(:review_ids AS TEXT[]))
    ORDER BY p.created_at, p.id
""")

_INSERT_RATING_SQL = text("""
    INSERT INTO ratings (id, rater_id, rated_id, trade_id, rating, comment)
    VALUES (:id, :rater_id, :rated_id, :trade_id, :rating, :comment)
    ON CONFLICT (rater_id, trade_id) DO NOTHING
    RETURNING created_at
""")

_LIST_RATINGS_SQL = text("""
    SELECT g.id, g.rater_id, g.rated_id, g.trade_id, g.rating, g.comment, g.created_at,
           u.name AS rater_name
    FROM ratings g
    LEFT JOIN users u ON CAST(u.id AS TEXT) = g.rater_id
    WHERE g.rated_id = :user_id
    ORDER BY g.created_at DESC, g.id DESC
""")

_RATING_SUMMARY_SQL = text("""
    SELECT COUNT(*) AS count, AVG(rating) AS average
    FROM ratings
    WHERE rated_id = :user_id
""")


def _row_to_review(row: Any) -> Review:
    return Review(
        id=row.id,
        reviewer_id=row.reviewer_id,
        target_user_id=row.target_user_id,
        rating=row.rating,
        comment=row.comment,
        trade_id=row.trade_id,
        created_at=row.created_at,
        reviewer_name=row.reviewer_name,
    )


def _row_to_reply(row: Any) -> ReviewReply:
    return ReviewReply(
        id=row.id,
        review_id=row.review_id,
        user_id=row.user_id,
        reply=row.reply,
        created_at=row.created_at,
        user_name=row.user_name,
    )


def _row_to_rating(row: Any) -> Rating:
    return Rating(
        id=row.id,
        rater_id=row.rater_id,
        rated_id=row.rated_id,
        trade_id=row.trade_id,
        rating=row.rating,
        comment=row.comment,
        created_at=row.created_at,
        rater_name=row.rater_name,
    )


class ReviewRepository:
    """Concrete implementation of ReviewRepositoryProtocol."""

    async def user_exists(self, db: AsyncSession, user_id: str) -> bool:
        result = await db.execute(_USER_EXISTS_SQL, {"user_id": user_id})
        return bool(result.scalar_one())

    async def insert_review(self, db: AsyncSession, review: Review) -> None:
        await db.execute(
            _INSERT_REVIEW_SQL,
            {
                "id": review.id,
                "reviewer_id": review.reviewer_id,
                "target_user_id": review.target_user_id,
                "rating": review.rating,
                "comment": review.comment,
                "trade_id": review.trade_id,
            },
        )

    async def get_review(self, db: AsyncSession, review_id: str) -> Review | None:
        row = (await db.execute(_GET_REVIEW_SQL, {"id": review_id})).fetchone()
        return _row_to_review(row) if row else None

    async def list_reviews_for_user(self, db: AsyncSession, user_id: str) -> list[Review]:
        result = await db.execute(_LIST_REVIEWS_SQL, {"user_id": user_id})
        return [_row_to_review(row) for row in result.fetchall()]

    async def insert_reply(self, db: AsyncSession, reply: ReviewReply) -> ReviewReply:
        result = await db.execute(
            _INSERT_REPLY_SQL,
            {
                "id": reply.id,
                "review_id": reply.review_id,
                "user_id": reply.user_id,
                "reply": reply.reply,
            },
        )
        reply.created_at = result.scalar_one()
        return reply

    async def list_replies(self, db: AsyncSession, review_ids: list[str]) -> list[ReviewReply]:
        if not review_ids:
            return []
        result = await db.execute(_LIST_REPLIES_SQL, {"review_ids": review_ids})
        return [_row_to_reply(row) for row in result.fetchall()]

    async def insert_rating(self, db: AsyncSession, rating: Rating) -> Rating | None:
        result = await db.execute(
            _INSERT_RATING_SQL,
            {
                "id": rating.id,
                "rater_id": rating.rater_id,
                "rated_id": rating.rated_id,
                "trade_id": rating.trade_id,
                "rating": rating.rating,
                "comment": rating.comment,
            },
        )
        created_at = result.scalar_one_or_none()
        if created_at is None:
            return None
        rating.created_at = created_at
        return rating

    async def list_ratings_for_user(self, db: AsyncSession, user_id: str) -> list[Rating]:
        result = await db.execute(_LIST_RATINGS_SQL, {"user_id": user_id})
        return [_row_to_rating(row) for row in result.fetchall()]

    async def rating_summary(self, db: AsyncSession, user_id: str) -> RatingSummary:
        row = (await db.execute(_RATING_SUMMARY_SQL, {"user_id": user_id})).one()
        average = round(float(row.average), 2) if row.average is not None else None
        return RatingSummary(count=row.count, average=average)
