"""ConversationRepository and MessageRepository — raw text() SQL.

One conversation per unordered user pair is enforced by the unique index
uq_conversations_pair on (LEAST(user1_id, user2_id), GREATEST(user1_id, user2_id)).
Concurrent creators both run INSERT ... ON CONFLICT DO NOTHING and then
re-read, so both observe the same row.

users.id is a UUID while the reference columns here are VARCHAR, hence
the CAST in the name joins.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bt_messaging.domain.models import Conversation, ExchangeRequestSummary, Message

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_CONVERSATION_SELECT = """
    SELECT c.id, c.user1_id, c.user2_id, c.exchange_request_id, c.created_at,
           u1.name AS user1_name, u2.name AS user2_name
    FROM conversations c
    LEFT JOIN users u1 ON CAST(u1.id AS TEXT) = c.user1_id
    LEFT JOIN users u2 ON CAST(u2.id AS TEXT) = c.user2_id
"""

_FIND_BETWEEN_SQL = text(f"""
    {_CONVERSATION_SELECT}
    WHERE LEAST(c.user1_id, c.user2_id) = LEAST(CAST(:user_a AS TEXT), CAST(:user_b AS TEXT))
      AND GREATEST(c.user1_id, c.user2_id) = GREATEST(CAST(:user_a AS TEXT), CAST(:user_b AS TEXT))
""")

_INSERT_CONVERSATION_SQL = text("""
    INSERT INTO conversations (id, user1_id, user2_id, exchange_request_id)
    VALUES (:id, :user1_id, :user2_id, :exchange_request_id)
    ON CONFLICT ((LEAST(user1_id, user2_id)), (GREATEST(user1_id, user2_id))) DO NOTHING
""")

_GET_CONVERSATION_SQL = text(f"""
    {_CONVERSATION_SELECT}
    WHERE c.id = :conversation_id
""")

_LIST_CONVERSATIONS_SQL = text(f"""
    {_CONVERSATION_SELECT}
    WHERE c.user1_id = :user_id OR c.user2_id = :user_id
    ORDER BY c.created_at DESC, c.id DESC
""")

_LINK_EXCHANGE_REQUEST_SQL = text("""
    UPDATE conversations SET exchange_request_id = :exchange_request_id
    WHERE id = :conversation_id AND exchange_request_id IS NULL
""")

_GET_EXCHANGE_SUMMARY_SQL = text("""
    SELECT er.id, er.sender_id, er.receiver_id, er.status, er.message,
           er.offered_listing_id, ol.title AS offered_listing_title,
           er.target_listing_id, tl.title AS target_listing_title,
           er.created_at
    FROM exchange_requests er
    LEFT JOIN listings ol ON ol.id = er.offered_listing_id
    LEFT JOIN listings tl ON tl.id = er.target_listing_id
    WHERE er.id = :exchange_request_id
""")

_INSERT_MESSAGE_SQL = text("""
    INSERT INTO messages (id, conversation_id, sender_id, receiver_id, content, image_url, read)
    VALUES (:id, :conversation_id, :sender_id, :receiver_id, :content, :image_url, FALSE)
    RETURNING created_at
""")

_LIST_MESSAGES_SQL = text("""
    SELECT id, conversation_id, sender_id, receiver_id, content, image_url, read, created_at
    FROM messages
    WHERE conversation_id = :conversation_id
    ORDER BY created_at ASC, id ASC
""")

_LIST_RECENT_MESSAGES_SQL = text("""
    SELECT id, conversation_id, sender_id, receiver_id, content, image_url, read, created_at
    FROM messages
    WHERE conversation_id = :conversation_id
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")

_MARK_READ_SQL = text("""
    UPDATE messages SET read = TRUE
    WHERE receiver_id = :user_id
      AND id = ANY(CAST(:message_ids AS TEXT[]))
      AND read = FALSE
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_conversation(row: Any) -> Conversation:
    return Conversation(
        id=row.id,
        user1_id=row.user1_id,
        user2_id=row.user2_id,
        exchange_request_id=row.exchange_request_id,
        created_at=row.created_at,
        user1_name=row.user1_name,
        user2_name=row.user2_name,
    )


def _row_to_message(row: Any) -> Message:
    return Message(
        id=row.id,
        conversation_id=row.conversation_id,
        sender_id=row.sender_id,
        receiver_id=row.receiver_id,
        content=row.content or "",
        image_url=row.image_url,
        read=row.read,
        created_at=row.created_at,
    )


# ---------------------------------------------------------------------------
# Repositories
# ---------------------------------------------------------------------------


class ConversationRepository:
    async def find_between(
        self, db: AsyncSession, user_a: str, user_b: str
    ) -> Conversation | None:
        row = (
            await db.execute(_FIND_BETWEEN_SQL, {"user_a": user_a, "user_b": user_b})
        ).fetchone()
        return _row_to_conversation(row) if row else None

    async def insert_if_absent(self, db: AsyncSession, conversation: Conversation) -> None:
        await db.execute(
            _INSERT_CONVERSATION_SQL,
            {
                "id": conversation.id,
                "user1_id": conversation.user1_id,
                "user2_id": conversation.user2_id,
                "exchange_request_id": conversation.exchange_request_id,
            },
        )

    async def get_by_id(self, db: AsyncSession, conversation_id: str) -> Conversation | None:
        row = (
            await db.execute(_GET_CONVERSATION_SQL, {"conversation_id": conversation_id})
        ).fetchone()
        return _row_to_conversation(row) if row else None

    async def list_by_user(self, db: AsyncSession, user_id: str) -> list[Conversation]:
        result = await db.execute(_LIST_CONVERSATIONS_SQL, {"user_id": user_id})
        return [_row_to_conversation(row) for row in result.fetchall()]

    async def link_exchange_request(
        self, db: AsyncSession, conversation_id: str, exchange_request_id: str
    ) -> None:
        await db.execute(
            _LINK_EXCHANGE_REQUEST_SQL,
            {"conversation_id": conversation_id, "exchange_request_id": exchange_request_id},
        )

    async def get_exchange_request_summary(
        self, db: AsyncSession, exchange_request_id: str
    ) -> ExchangeRequestSummary | None:
        row = (
            await db.execute(
                _GET_EXCHANGE_SUMMARY_SQL, {"exchange_request_id": exchange_request_id}
            )
        ).fetchone()
        if row is None:
            return None
        return ExchangeRequestSummary(
            id=row.id,
            sender_id=row.sender_id,
            receiver_id=row.receiver_id,
            status=row.status,
            message=row.message,
            offered_listing_id=row.offered_listing_id,
            offered_listing_title=row.offered_listing_title,
            target_listing_id=row.target_listing_id,
            target_listing_title=row.target_listing_title,
            created_at=row.created_at,
        )


class MessageRepository:
    async def insert(self, db: AsyncSession, message: Message) -> Message:
        result = await db.execute(
            _INSERT_MESSAGE_SQL,
            {
                "id": message.id,
                "conversation_id": message.conversation_id,
                "sender_id": message.sender_id,
                "receiver_id": message.receiver_id,
                "content": message.content,
                "image_url": message.image_url,
            },
        )
        message.created_at = result.scalar_one()
        return message

    async def list_by_conversation(
        self, db: AsyncSession, conversation_id: str
    ) -> list[Message]:
        result = await db.execute(_LIST_MESSAGES_SQL, {"conversation_id": conversation_id})
        return [_row_to_message(row) for row in result.fetchall()]

    async def list_recent(
        self, db: AsyncSession, conversation_id: str, limit: int
    ) -> list[Message]:
        """Newest `limit` messages, returned oldest first."""
        result = await db.execute(
            _LIST_RECENT_MESSAGES_SQL, {"conversation_id": conversation_id, "limit": limit}
        )
        return [_row_to_message(row) for row in reversed(result.fetchall())]

    async def mark_read(self, db: AsyncSession, user_id: str, message_ids: list[str]) -> int:
        result = await db.execute(
            _MARK_READ_SQL, {"user_id": user_id, "message_ids": message_ids}
        )
        return int(result.rowcount or 0)
