"""005: create conversations and messages tables

Revision ID: 005
Revises: 004
Create Date: 2026-03-02
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE conversations (
            id                  VARCHAR(64)     PRIMARY KEY,
            user1_id            VARCHAR(64)     NOT NULL,
            user2_id            VARCHAR(64)     NOT NULL,
            exchange_request_id VARCHAR(64)     REFERENCES exchange_requests (id) ON DELETE SET NULL,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_conversations_diff_users CHECK (user1_id <> user2_id)
        );
    """)
    # One conversation per unordered pair; the ON CONFLICT target in
    # ConversationRepository must match this expression index.
    op.execute("""
        CREATE UNIQUE INDEX uq_conversations_pair
            ON conversations ((LEAST(user1_id, user2_id)), (GREATEST(user1_id, user2_id)));
    """)
    op.execute("CREATE INDEX idx_conversations_user1 ON conversations (user1_id);")
    op.execute("CREATE INDEX idx_conversations_user2 ON conversations (user2_id);")
    op.execute("""
        ALTER TABLE exchange_requests
            ADD CONSTRAINT fk_exchange_requests_conversation
            FOREIGN KEY (conversation_id) REFERENCES conversations (id) ON DELETE SET NULL;
    """)

    op.execute("""
        CREATE TABLE messages (
            id              VARCHAR(64)     PRIMARY KEY,
            conversation_id VARCHAR(64)     NOT NULL REFERENCES conversations (id) ON DELETE CASCADE,
            sender_id       VARCHAR(64)     NOT NULL,
            receiver_id     VARCHAR(64)     NOT NULL,
            content         TEXT            NOT NULL DEFAULT '',
            image_url       TEXT,
            read            BOOLEAN         NOT NULL DEFAULT FALSE,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_messages_body CHECK (content <> '' OR image_url IS NOT NULL)
        );
    """)
    op.execute(
        "CREATE INDEX idx_messages_conversation ON messages (conversation_id, created_at, id);"
    )
    op.execute("CREATE INDEX idx_messages_unread ON messages (receiver_id) WHERE read = FALSE;")
    op.execute("COMMENT ON TABLE messages IS 'One row per text body or image';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS messages CASCADE;")
    op.execute(
        "ALTER TABLE exchange_requests DROP CONSTRAINT IF EXISTS fk_exchange_requests_conversation;"
    )
    op.execute("DROP TABLE IF EXISTS conversations CASCADE;")
