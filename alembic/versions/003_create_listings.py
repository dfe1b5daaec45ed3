"""003: create listings and favorites tables

Revision ID: 003
Revises: 002
Create Date: 2026-03-02
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE listings (
            id              VARCHAR(64)     PRIMARY KEY,
            user_id         VARCHAR(64)     NOT NULL,
            title           VARCHAR(200)    NOT NULL,
            description     TEXT            NOT NULL,
            category        VARCHAR(64)     NOT NULL,
            condition       VARCHAR(64),
            location        VARCHAR(200),
            wanted_items    TEXT[]          NOT NULL DEFAULT '{}',
            images          TEXT[]          NOT NULL DEFAULT '{}',
            status          VARCHAR(20)     NOT NULL DEFAULT 'ACTIVE',
            flagged         BOOLEAN         NOT NULL DEFAULT FALSE,
            flag_reasons    TEXT[]          NOT NULL DEFAULT '{}',
            views           INT             NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_listings_status   CHECK (
                status IN ('DRAFT', 'ACTIVE', 'PENDING_REVIEW', 'COMPLETED')
            ),
            CONSTRAINT ck_listings_views    CHECK (views >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_listings_user ON listings (user_id, created_at DESC);")
    op.execute("CREATE INDEX idx_listings_feed ON listings (status, created_at DESC, id DESC);")
    op.execute("CREATE INDEX idx_listings_category ON listings (category);")
    op.execute("""
        CREATE TRIGGER trg_listings_updated_at
            BEFORE UPDATE ON listings
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE listings IS 'Items offered for barter';")

    op.execute("""
        CREATE TABLE favorites (
            id              VARCHAR(64)     PRIMARY KEY,
            user_id         VARCHAR(64)     NOT NULL,
            listing_id      VARCHAR(64)     NOT NULL REFERENCES listings (id) ON DELETE CASCADE,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_favorites_user_listing UNIQUE (user_id, listing_id)
        );
    """)
    op.execute("CREATE INDEX idx_favorites_user ON favorites (user_id, created_at DESC);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS favorites CASCADE;")
    op.execute("DROP TABLE IF EXISTS listings CASCADE;")
