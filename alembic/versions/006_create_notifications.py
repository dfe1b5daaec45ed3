"""006: create notifications table

Revision ID: 006
Revises: 005
Create Date: 2026-03-02
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE notifications (
            id                  VARCHAR(64)     PRIMARY KEY,
            user_id             VARCHAR(64)     NOT NULL,
            type                VARCHAR(32)     NOT NULL,
            title               VARCHAR(200)    NOT NULL,
            message             TEXT            NOT NULL,
            data                JSONB           NOT NULL DEFAULT '{}'::jsonb,
            metadata            JSONB,
            read                BOOLEAN         NOT NULL DEFAULT FALSE,
            related_listing_id  VARCHAR(64)     REFERENCES listings (id) ON DELETE SET NULL,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_notifications_type CHECK (
                type IN (
                    'message', 'trade_request', 'trade_proposal',
                    'exchange_started', 'exchange_declined',
                    'trade_proposal_accepted', 'trade_proposal_declined',
                    'trade', 'review', 'listing'
                )
            )
        );
    """)
    op.execute(
        "CREATE INDEX idx_notifications_user ON notifications (user_id, created_at DESC, id DESC);"
    )
    op.execute(
        "CREATE INDEX idx_notifications_unread ON notifications (user_id) WHERE read = FALSE;"
    )
    op.execute("COMMENT ON TABLE notifications IS 'In-app inbox; data holds the typed payload';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS notifications CASCADE;")
