"""Repositories for trade_proposals, exchange_requests and trades — raw text() SQL.

trade_proposals and exchange_requests have the same columns (exchange
requests add conversation_id), so both repositories are built from one
base parameterised by table name.

The response UPDATE is conditional on status = 'pending': of two racing
responders exactly one sees a row come back.
"""

from abc import ABC, abstractmethod
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bt_trade.domain.models import ExchangeRequest, Trade, TradeProposal

_OFFER_COLUMNS = (
    "id, sender_id, receiver_id, target_listing_id, offered_listing_id, "
    "message, status, created_at, responded_at, updated_at"
)


class _OfferRepository(ABC):
    """Shared SQL for the two offer tables."""

    _table: str = ""
    _extra_columns: tuple[str, ...] = ()

    def __init__(self) -> None:
        extra = "".join(f", p.{c}" for c in self._extra_columns)
        select = f"""
            SELECT p.id, p.sender_id, p.receiver_id, p.target_listing_id,
                   p.offered_listing_id, p.message, p.status,
                   p.created_at, p.responded_at, p.updated_at{extra},
                   su.name AS sender_name, ru.name AS receiver_name,
                   tl.title AS target_listing_title, ol.title AS offered_listing_title
            FROM {self._table} p
            LEFT JOIN users su ON CAST(su.id AS TEXT) = p.sender_id
            LEFT JOIN users ru ON CAST(ru.id AS TEXT) = p.receiver_id
            LEFT JOIN listings tl ON tl.id = p.target_listing_id
            LEFT JOIN listings ol ON ol.id = p.offered_listing_id
        """
        self._insert_sql = text(f"""
            INSERT INTO {self._table} (
                id, sender_id, receiver_id, target_listing_id, offered_listing_id,
                message, status
            ) VALUES (
                :id, :sender_id, :receiver_id, :target_listing_id, :offered_listing_id,
                :message, :status
            )
        """)
        self._get_sql = text(f"{select} WHERE p.id = :id")
        self._respond_sql = text(f"""
            UPDATE {self._table}
            SET status = :status, responded_at = NOW(), updated_at = NOW()
            WHERE id = :id AND status = 'pending'
            RETURNING id
        """)
        self._list_by_user_sql = text(f"""
            {select}
            WHERE p.sender_id = :user_id OR p.receiver_id = :user_id
            ORDER BY p.created_at DESC, p.id DESC
        """)
        self._latest_for_listing_sql = text(f"""
            {select}
            WHERE p.target_listing_id = :listing_id AND p.sender_id = :sender_id
            ORDER BY p.created_at DESC, p.id DESC
            LIMIT 1
        """)

    @abstractmethod
    def _row_to_offer(self, row: Any) -> TradeProposal: ...

    @staticmethod
    def _offer_fields(row: Any) -> dict[str, Any]:
        return {
            "id": row.id,
            "sender_id": row.sender_id,
            "receiver_id": row.receiver_id,
            "target_listing_id": row.target_listing_id,
            "offered_listing_id": row.offered_listing_id,
            "message": row.message,
            "status": row.status,
            "created_at": row.created_at,
            "responded_at": row.responded_at,
            "updated_at": row.updated_at,
            "sender_name": row.sender_name,
            "receiver_name": row.receiver_name,
            "target_listing_title": row.target_listing_title,
            "offered_listing_title": row.offered_listing_title,
        }

    async def insert(self, db: AsyncSession, offer: TradeProposal) -> None:
        await db.execute(
            self._insert_sql,
            {
                "id": offer.id,
                "sender_id": offer.sender_id,
                "receiver_id": offer.receiver_id,
                "target_listing_id": offer.target_listing_id,
                "offered_listing_id": offer.offered_listing_id,
                "message": offer.message,
                "status": offer.status,
            },
        )

    async def get_by_id(self, db: AsyncSession, offer_id: str) -> Any:
        row = (await db.execute(self._get_sql, {"id": offer_id})).fetchone()
        return self._row_to_offer(row) if row else None

    async def respond(self, db: AsyncSession, offer_id: str, new_status: str) -> bool:
        result = await db.execute(self._respond_sql, {"id": offer_id, "status": new_status})
        return result.fetchone() is not None

    async def list_by_user(self, db: AsyncSession, user_id: str) -> list[Any]:
        result = await db.execute(self._list_by_user_sql, {"user_id": user_id})
        return [self._row_to_offer(row) for row in result.fetchall()]

    async def latest_for_listing(
        self, db: AsyncSession, listing_id: str, sender_id: str
    ) -> Any:
        row = (
            await db.execute(
                self._latest_for_listing_sql,
                {"listing_id": listing_id, "sender_id": sender_id},
            )
        ).fetchone()
        return self._row_to_offer(row) if row else None


class TradeProposalRepository(_OfferRepository):
    _table = "trade_proposals"

    def _row_to_offer(self, row: Any) -> TradeProposal:
        return TradeProposal(**self._offer_fields(row))


class ExchangeRequestRepository(_OfferRepository):
    _table = "exchange_requests"
    _extra_columns = ("conversation_id",)

    _SET_CONVERSATION_SQL = text("""
        UPDATE exchange_requests SET conversation_id = :conversation_id, updated_at = NOW()
        WHERE id = :id
    """)

    def _row_to_offer(self, row: Any) -> ExchangeRequest:
        return ExchangeRequest(**self._offer_fields(row), conversation_id=row.conversation_id)

    async def set_conversation(
        self, db: AsyncSession, request_id: str, conversation_id: str
    ) -> None:
        await db.execute(
            self._SET_CONVERSATION_SQL, {"id": request_id, "conversation_id": conversation_id}
        )


# ---------------------------------------------------------------------------
# Trades (completion confirmation)
# ---------------------------------------------------------------------------

_TRADE_SELECT = """
    SELECT t.id, t.initiator_id, t.receiver_id, t.listing_id,
           t.initiator_item, t.receiver_item, t.status,
           t.initiator_confirmed, t.receiver_confirmed,
           t.completion_comment, t.completion_rating, t.completed_at,
           t.created_at, t.updated_at,
           l.title AS listing_title,
           iu.name AS initiator_name, ru.name AS receiver_name
    FROM trades t
    LEFT JOIN listings l ON l.id = t.listing_id
    LEFT JOIN users iu ON CAST(iu.id AS TEXT) = t.initiator_id
    LEFT JOIN users ru ON CAST(ru.id AS TEXT) = t.receiver_id
"""

_INSERT_TRADE_SQL = text("""
    INSERT INTO trades (
        id, initiator_id, receiver_id, listing_id, initiator_item, receiver_item, status
    ) VALUES (
        :id, :initiator_id, :receiver_id, :listing_id, :initiator_item, :receiver_item, :status
    )
""")

_GET_TRADE_SQL = text(f"{_TRADE_SELECT} WHERE t.id = :trade_id")

_LIST_TRADES_SQL = text(f"""
    {_TRADE_SELECT}
    WHERE t.initiator_id = :user_id OR t.receiver_id = :user_id
    ORDER BY t.created_at DESC, t.id DESC
""")

# COALESCE keeps an earlier comment/rating when the second party sends none.
_CONFIRM_INITIATOR_SQL = text("""
    UPDATE trades
    SET initiator_confirmed = TRUE,
        completion_comment = COALESCE(CAST(:comment AS TEXT), completion_comment),
        completion_rating = COALESCE(CAST(:rating AS SMALLINT), completion_rating),
        updated_at = NOW()
    WHERE id = :trade_id AND initiator_confirmed = FALSE
    RETURNING id
""")

_CONFIRM_RECEIVER_SQL = text("""
    UPDATE trades
    SET receiver_confirmed = TRUE,
        completion_comment = COALESCE(CAST(:comment AS TEXT), completion_comment),
        completion_rating = COALESCE(CAST(:rating AS SMALLINT), completion_rating),
        updated_at = NOW()
    WHERE id = :trade_id AND receiver_confirmed = FALSE
    RETURNING id
""")

_COMPLETE_TRADE_SQL = text("""
    UPDATE trades SET status = 'COMPLETED', completed_at = NOW(), updated_at = NOW()
    WHERE id = :trade_id
      AND status = 'PENDING'
      AND initiator_confirmed AND receiver_confirmed
    RETURNING id
""")


def _row_to_trade(row: Any) -> Trade:
    return Trade(
        id=row.id,
        initiator_id=row.initiator_id,
        receiver_id=row.receiver_id,
        listing_id=row.listing_id,
        initiator_item=row.initiator_item,
        receiver_item=row.receiver_item,
        status=row.status,
        initiator_confirmed=row.initiator_confirmed,
        receiver_confirmed=row.receiver_confirmed,
        completion_comment=row.completion_comment,
        completion_rating=row.completion_rating,
        completed_at=row.completed_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
        listing_title=row.listing_title,
        initiator_name=row.initiator_name,
        receiver_name=row.receiver_name,
    )


class TradeRepository:
    async def insert(self, db: AsyncSession, trade: Trade) -> None:
        await db.execute(
            _INSERT_TRADE_SQL,
            {
                "id": trade.id,
                "initiator_id": trade.initiator_id,
                "receiver_id": trade.receiver_id,
                "listing_id": trade.listing_id,
                "initiator_item": trade.initiator_item,
                "receiver_item": trade.receiver_item,
                "status": trade.status,
            },
        )

    async def get_by_id(self, db: AsyncSession, trade_id: str) -> Trade | None:
        row = (await db.execute(_GET_TRADE_SQL, {"trade_id": trade_id})).fetchone()
        return _row_to_trade(row) if row else None

    async def confirm(
        self,
        db: AsyncSession,
        trade_id: str,
        as_initiator: bool,
        comment: str | None,
        rating: int | None,
    ) -> bool:
        sql = _CONFIRM_INITIATOR_SQL if as_initiator else _CONFIRM_RECEIVER_SQL
        result = await db.execute(
            sql, {"trade_id": trade_id, "comment": comment, "rating": rating}
        )
        return result.fetchone() is not None

    async def mark_completed(self, db: AsyncSession, trade_id: str) -> bool:
        result = await db.execute(_COMPLETE_TRADE_SQL, {"trade_id": trade_id})
        return result.fetchone() is not None

    async def list_by_user(self, db: AsyncSession, user_id: str) -> list[Trade]:
        result = await db.execute(_LIST_TRADES_SQL, {"user_id": user_id})
        return [_row_to_trade(row) for row in result.fetchall()]
