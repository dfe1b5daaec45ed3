"""007: create user_reports, listing_reports, user_blocks and user_bans tables

Revision ID: 007
Revises: 006
Create Date: 2026-03-02
"""
from typing import Sequence, Union
from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE user_reports (
            id                  VARCHAR(64)     PRIMARY KEY,
            reporter_id         VARCHAR(64)     NOT NULL,
            reported_user_id    VARCHAR(64)     NOT NULL,
            reason              TEXT            NOT NULL,
            status              VARCHAR(16)     NOT NULL DEFAULT 'PENDING',
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_user_reports_status CHECK (
                status IN ('PENDING', 'APPROVED', 'REJECTED')
            ),
            CONSTRAINT ck_user_reports_diff_users CHECK (reporter_id <> reported_user_id)
        );
    """)
    op.execute(
        "CREATE INDEX idx_user_reports_reported ON user_reports (reported_user_id, created_at);"
    )

    op.execute("""
        CREATE TABLE listing_reports (
            id              VARCHAR(64)     PRIMARY KEY,
            listing_id      VARCHAR(64)     NOT NULL REFERENCES listings (id) ON DELETE CASCADE,
            reporter_id     VARCHAR(64)     NOT NULL,
            reason          TEXT            NOT NULL,
            status          VARCHAR(16)     NOT NULL DEFAULT 'PENDING',
            resolved_by     VARCHAR(64),
            resolved_at     TIMESTAMPTZ,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_listing_reports_status CHECK (
                status IN ('PENDING', 'APPROVED', 'REJECTED')
            )
        );
    """)
    op.execute(
        "CREATE INDEX idx_listing_reports_queue ON listing_reports (status, created_at DESC);"
    )

    op.execute("""
        CREATE TABLE user_blocks (
            id              VARCHAR(64)     PRIMARY KEY,
            user_id         VARCHAR(64)     NOT NULL,
            blocked_user_id VARCHAR(64)     NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_user_blocks_pair UNIQUE (user_id, blocked_user_id),
            CONSTRAINT ck_user_blocks_diff_users CHECK (user_id <> blocked_user_id)
        );
    """)

    op.execute("""
        CREATE TABLE user_bans (
            id              VARCHAR(64)     PRIMARY KEY,
            user_id         VARCHAR(64)     NOT NULL,
            reason          TEXT            NOT NULL,
            banned_by       VARCHAR(64),
            banned_until    TIMESTAMPTZ,
            lifted_at       TIMESTAMPTZ,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)
    op.execute(
        "CREATE INDEX idx_user_bans_active ON user_bans (user_id) WHERE lifted_at IS NULL;"
    )
    op.execute("COMMENT ON COLUMN user_bans.banned_until IS 'NULL means indefinite';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS user_bans CASCADE;")
    op.execute("DROP TABLE IF EXISTS user_blocks CASCADE;")
    op.execute("DROP TABLE IF EXISTS listing_reports CASCADE;")
    op.execute("DROP TABLE IF EXISTS user_reports CASCADE;")
