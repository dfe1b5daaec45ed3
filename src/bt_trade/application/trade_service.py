"""TradeService — two-party completion confirmation.

Each party confirms once. The second confirmation completes the trade and
marks its listing COMPLETED; the other party is notified either way.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.bt_common.enums import ListingStatus, TradeStatus
from src.bt_common.errors import (
    ListingNotAvailableError,
    ListingNotFoundError,
    ProposalValidationError,
    SelfTradeError,
    TradeAlreadyConfirmedError,
    TradeForbiddenError,
    TradeNotFoundError,
)
from src.bt_common.id_generator import generate_id
from src.bt_listing.domain.repository import ListingReaderProtocol
from src.bt_listing.infrastructure.persistence import ListingRepository
from src.bt_notification.application.service import (
    NotificationService,
    get_notification_service,
)
from src.bt_notification.domain.payloads import TradePayload
from src.bt_trade.application.schemas import TradeOut
from src.bt_trade.domain.models import Trade
from src.bt_trade.domain.repository import TradeRepositoryProtocol
from src.bt_trade.domain.rules import is_self_trade
from src.bt_trade.infrastructure.persistence import TradeRepository

logger = logging.getLogger(__name__)


class TradeService:
    def __init__(
        self,
        repo: TradeRepositoryProtocol | None = None,
        listings: ListingReaderProtocol | None = None,
        notifications: NotificationService | None = None,
    ) -> None:
        self._repo: TradeRepositoryProtocol = repo or TradeRepository()
        self._listings: ListingReaderProtocol = listings or ListingRepository()
        self._notifications = notifications or get_notification_service()

    async def create(
        self,
        db: AsyncSession,
        initiator_id: str,
        receiver_id: str,
        listing_id: str,
        initiator_item: str,
        receiver_item: str,
    ) -> TradeOut:
        if is_self_trade(initiator_id, receiver_id):
            raise SelfTradeError()
        if not initiator_item.strip() or not receiver_item.strip():
            raise ProposalValidationError("Both traded items must be described")
        trade_id = generate_id()
        try:
            listing = await self._listings.get_by_id(db, listing_id)
            if listing is None:
                raise ListingNotFoundError(listing_id)
            if listing.user_id not in (initiator_id, receiver_id):
                raise ProposalValidationError("Listing must belong to one of the trading parties")
            if listing.status != ListingStatus.ACTIVE.value:
                raise ListingNotAvailableError(listing.id, listing.status)
            await self._repo.insert(
                db,
                Trade(
                    id=trade_id,
                    initiator_id=initiator_id,
                    receiver_id=receiver_id,
                    listing_id=listing_id,
                    initiator_item=initiator_item.strip(),
                    receiver_item=receiver_item.strip(),
                    status=TradeStatus.PENDING.value,
                ),
            )
            trade = await self._repo.get_by_id(db, trade_id)
            if trade is None:
                raise TradeNotFoundError(trade_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Trade %s created between %s and %s", trade_id, initiator_id, receiver_id)
        return TradeOut.from_domain(trade)

    async def confirm_completion(
        self,
        db: AsyncSession,
        trade_id: str,
        user_id: str,
        comment: str | None = None,
        rating: int | None = None,
    ) -> TradeOut:
        if rating is not None and not 1 <= rating <= 5:
            raise ProposalValidationError("Rating must be between 1 and 5")
        try:
            trade = await self._repo.get_by_id(db, trade_id)
            if trade is None:
                raise TradeNotFoundError(trade_id)
            if not trade.is_participant(user_id):
                raise TradeForbiddenError(trade_id)

            as_initiator = user_id == trade.initiator_id
            if not await self._repo.confirm(db, trade_id, as_initiator, comment or None, rating):
                raise TradeAlreadyConfirmedError()

            completed = await self._repo.mark_completed(db, trade_id)
            if completed:
                await self._listings.set_status(db, trade.listing_id, ListingStatus.COMPLETED.value)

            trade = await self._repo.get_by_id(db, trade_id)
            if trade is None:
                raise TradeNotFoundError(trade_id)

            title = trade.listing_title or "the item"
            if completed:
                heading = "Trade Completed"
                body = f'Your trade for "{title}" has been completed!'
            else:
                name = (trade.initiator_name if as_initiator else trade.receiver_name) or "Someone"
                heading = "Trade Confirmation Received"
                body = f'{name} has confirmed receipt of their item for "{title}"'
            await self._notifications.dispatch(
                db,
                trade.other_party(user_id),
                heading,
                body,
                TradePayload(trade_id=trade_id, listing_id=trade.listing_id, completed=completed),
                related_listing_id=trade.listing_id,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Trade %s confirmed by %s (completed=%s)", trade_id, user_id, completed)
        return TradeOut.from_domain(trade)

    async def list_for_user(self, db: AsyncSession, user_id: str) -> list[TradeOut]:
        return [TradeOut.from_domain(t) for t in await self._repo.list_by_user(db, user_id)]


_service: TradeService | None = None


def get_trade_service() -> TradeService:
    global _service  # noqa: PLW0603
    if _service is None:
        _service = TradeService()
    return _service
