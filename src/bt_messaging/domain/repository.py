"""Repository Protocols for bt_messaging."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bt_messaging.domain.models import Conversation, ExchangeRequestSummary, Message


class ConversationRepositoryProtocol(Protocol):
    async def find_between(
        self, db: AsyncSession, user_a: str, user_b: str
    ) -> Conversation | None: ...

    async def insert_if_absent(self, db: AsyncSession, conversation: Conversation) -> None: ...

    async def get_by_id(self, db: AsyncSession, conversation_id: str) -> Conversation | None: ...

    async def list_by_user(self, db: AsyncSession, user_id: str) -> list[Conversation]: ...

    async def link_exchange_request(
        self, db: AsyncSession, conversation_id: str, exchange_request_id: str
    ) -> None: ...

    async def get_exchange_request_summary(
        self, db: AsyncSession, exchange_request_id: str
    ) -> ExchangeRequestSummary | None: ...


class MessageRepositoryProtocol(Protocol):
    async def insert(self, db: AsyncSession, message: Message) -> Message: ...

    async def list_by_conversation(
        self, db: AsyncSession, conversation_id: str
    ) -> list[Message]: ...

    async def list_recent(
        self, db: AsyncSession, conversation_id: str, limit: int
    ) -> list[Message]: ...

    async def mark_read(self, db: AsyncSession, user_id: str, message_ids: list[str]) -> int: ...
