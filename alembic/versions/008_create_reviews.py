"""008: create user_reviews, review_replies and ratings tables

Revision ID: 008
Revises: 007
Create Date: 2026-03-09
"""
from typing import Sequence, Union
from alembic import op

revision: str = "008"
down_revision: Union[str, None] = "007"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE user_reviews (
            id              VARCHAR(64)     PRIMARY KEY,
            reviewer_id     VARCHAR(64)     NOT NULL,
            target_user_id  VARCHAR(64)     NOT NULL,
            rating          SMALLINT        NOT NULL,
            comment         TEXT            NOT NULL,
            trade_id        VARCHAR(64)     REFERENCES trades (id) ON DELETE SET NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_user_reviews_rating CHECK (rating BETWEEN 1 AND 5),
            CONSTRAINT ck_user_reviews_diff_users CHECK (reviewer_id <> target_user_id)
        );
    """)
    op.execute(
        "CREATE INDEX idx_user_reviews_target ON user_reviews (target_user_id, created_at DESC);"
    )

    op.execute("""
        CREATE TABLE review_replies (
            id          VARCHAR(64)     PRIMARY KEY,
            review_id   VARCHAR(64)     NOT NULL REFERENCES user_reviews (id) ON DELETE CASCADE,
            user_id     VARCHAR(64)     NOT NULL,
            reply       TEXT            NOT NULL,
            created_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)
    op.execute("CREATE INDEX idx_review_replies_review ON review_replies (review_id, created_at);")

    op.execute("""
        CREATE TABLE ratings (
            id          VARCHAR(64)     PRIMARY KEY,
            rater_id    VARCHAR(64)     NOT NULL,
            rated_id    VARCHAR(64)     NOT NULL,
            trade_id    VARCHAR(64)     NOT NULL REFERENCES trades (id) ON DELETE CASCADE,
            rating      SMALLINT        NOT NULL,
            comment     TEXT,
            created_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_ratings_rating CHECK (rating BETWEEN 1 AND 5),
            CONSTRAINT ck_ratings_diff_users CHECK (rater_id <> rated_id),
            CONSTRAINT uq_ratings_rater_trade UNIQUE (rater_id, trade_id)
        );
    """)
    op.execute("CREATE INDEX idx_ratings_rated ON ratings (rated_id, created_at DESC);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS ratings CASCADE;")
    op.execute("DROP TABLE IF EXISTS review_replies CASCADE;")
    op.execute("DROP TABLE IF EXISTS user_reviews CASCADE;")
