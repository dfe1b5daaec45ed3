"""Repository Protocols for bt_trade.

Unit tests inject in-memory fakes that conform to these Protocols.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bt_trade.domain.models import ExchangeRequest, Trade, TradeProposal


class TradeProposalRepositoryProtocol(Protocol):
    async def insert(self, db: AsyncSession, proposal: TradeProposal) -> None: ...

    async def get_by_id(self, db: AsyncSession, proposal_id: str) -> TradeProposal | None: ...

    async def respond(self, db: AsyncSession, proposal_id: str, new_status: str) -> bool:
        """pending -> new_status. False if the row was no longer pending."""
        ...

    async def list_by_user(self, db: AsyncSession, user_id: str) -> list[TradeProposal]: ...

    async def latest_for_listing(
        self, db: AsyncSession, listing_id: str, sender_id: str
    ) -> TradeProposal | None: ...


class ExchangeRequestRepositoryProtocol(Protocol):
    async def insert(self, db: AsyncSession, request: ExchangeRequest) -> None: ...

    async def get_by_id(self, db: AsyncSession, request_id: str) -> ExchangeRequest | None: ...

    async def respond(self, db: AsyncSession, request_id: str, new_status: str) -> bool: ...

    async def set_conversation(
        self, db: AsyncSession, request_id: str, conversation_id: str
    ) -> None: ...

    async def list_by_user(self, db: AsyncSession, user_id: str) -> list[ExchangeRequest]: ...

    async def latest_for_listing(
        self, db: AsyncSession, listing_id: str, sender_id: str
    ) -> ExchangeRequest | None: ...


class TradeRepositoryProtocol(Protocol):
    async def insert(self, db: AsyncSession, trade: Trade) -> None: ...

    async def get_by_id(self, db: AsyncSession, trade_id: str) -> Trade | None: ...

    async def confirm(
        self,
        db: AsyncSession,
        trade_id: str,
        as_initiator: bool,
        comment: str | None,
        rating: int | None,
    ) -> bool:
        """Set the caller's confirmation flag. False if it was already set."""
        ...

    async def mark_completed(self, db: AsyncSession, trade_id: str) -> bool: ...

    async def list_by_user(self, db: AsyncSession, user_id: str) -> list[Trade]: ...
