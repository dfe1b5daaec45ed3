"""004: create trade_proposals, exchange_requests and trades tables

Revision ID: 004
Revises: 003
Create Date: 2026-03-02
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


_OFFER_TABLE = """
    CREATE TABLE {table} (
        id                  VARCHAR(64)     PRIMARY KEY,
        sender_id           VARCHAR(64)     NOT NULL,
        receiver_id         VARCHAR(64)     NOT NULL,
        target_listing_id   VARCHAR(64)     NOT NULL REFERENCES listings (id) ON DELETE CASCADE,
        offered_listing_id  VARCHAR(64)     NOT NULL REFERENCES listings (id) ON DELETE CASCADE,
        message             TEXT,
        status              VARCHAR(16)     NOT NULL DEFAULT 'pending',{extra}
        responded_at        TIMESTAMPTZ,
        created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
        updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
        CONSTRAINT ck_{table}_status CHECK (status IN ('pending', 'accepted', 'declined')),
        CONSTRAINT ck_{table}_diff_users CHECK (LOWER(sender_id) <> LOWER(receiver_id))
    );
"""


def _create_offer_table(table: str, extra: str = "") -> None:
    op.execute(_OFFER_TABLE.format(table=table, extra=extra))
    op.execute(f"CREATE INDEX idx_{table}_sender ON {table} (sender_id, created_at DESC);")
    op.execute(f"CREATE INDEX idx_{table}_receiver ON {table} (receiver_id, created_at DESC);")
    op.execute(f"CREATE INDEX idx_{table}_target ON {table} (target_listing_id, sender_id);")
    op.execute(f"""
        CREATE TRIGGER trg_{table}_updated_at
            BEFORE UPDATE ON {table}
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def upgrade() -> None:
    _create_offer_table("trade_proposals")
    _create_offer_table(
        "exchange_requests",
        extra="\n        conversation_id     VARCHAR(64),",
    )
    op.execute("COMMENT ON TABLE trade_proposals IS 'Listing-for-listing offers';")
    op.execute("COMMENT ON TABLE exchange_requests IS 'Offers that open a linked conversation';")

    op.execute("""
        CREATE TABLE trades (
            id                  VARCHAR(64)     PRIMARY KEY,
            initiator_id        VARCHAR(64)     NOT NULL,
            receiver_id         VARCHAR(64)     NOT NULL,
            listing_id          VARCHAR(64)     NOT NULL REFERENCES listings (id) ON DELETE CASCADE,
            initiator_item      TEXT            NOT NULL,
            receiver_item       TEXT            NOT NULL,
            status              VARCHAR(16)     NOT NULL DEFAULT 'PENDING',
            initiator_confirmed BOOLEAN         NOT NULL DEFAULT FALSE,
            receiver_confirmed  BOOLEAN         NOT NULL DEFAULT FALSE,
            completion_comment  TEXT,
            completion_rating   SMALLINT,
            completed_at        TIMESTAMPTZ,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_trades_status     CHECK (status IN ('PENDING', 'COMPLETED')),
            CONSTRAINT ck_trades_rating     CHECK (
                completion_rating IS NULL OR completion_rating BETWEEN 1 AND 5
            ),
            CONSTRAINT ck_trades_completed  CHECK (
                status <> 'COMPLETED' OR (initiator_confirmed AND receiver_confirmed)
            )
        );
    """)
    op.execute("CREATE INDEX idx_trades_initiator ON trades (initiator_id, created_at DESC);")
    op.execute("CREATE INDEX idx_trades_receiver ON trades (receiver_id, created_at DESC);")
    op.execute("""
        CREATE TRIGGER trg_trades_updated_at
            BEFORE UPDATE ON trades
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE trades IS 'Two-party completion confirmations';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS trades CASCADE;")
    op.execute("DROP TABLE IF EXISTS exchange_requests CASCADE;")
    op.execute("DROP TABLE IF EXISTS trade_proposals CASCADE;")
