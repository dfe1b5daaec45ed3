"""TradeProposalService — create a proposal, then accept or decline it once.

State machine:
    pending --accept (receiver)--> accepted   (opens the pair's conversation)
    pending --decline (receiver)--> declined
Terminal states are immutable. The transition itself is a conditional
UPDATE, so two racing responses cannot both succeed.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.bt_common.enums import ProposalStatus
from src.bt_common.errors import ProposalAlreadyRespondedError, ProposalNotFoundError
from src.bt_common.id_generator import generate_id
from src.bt_listing.domain.repository import ListingReaderProtocol
from src.bt_listing.infrastructure.persistence import ListingRepository
from src.bt_messaging.application.service import MessagingService, get_messaging_service
from src.bt_notification.application.service import (
    NotificationService,
    get_notification_service,
)
from src.bt_notification.domain.payloads import (
    ProposalAcceptedPayload,
    ProposalDeclinedPayload,
    TradeProposalPayload,
)
from src.bt_trade.application.schemas import ProposalDetails
from src.bt_trade.domain.models import TradeProposal
from src.bt_trade.domain.repository import TradeProposalRepositoryProtocol
from src.bt_trade.domain.rules import (
    check_can_respond,
    check_offer_listings,
    validate_new_offer,
    validate_response_status,
)
from src.bt_trade.infrastructure.persistence import TradeProposalRepository

logger = logging.getLogger(__name__)

KIND = "Trade proposal"


class TradeProposalService:
    def __init__(
        self,
        repo: TradeProposalRepositoryProtocol | None = None,
        listings: ListingReaderProtocol | None = None,
        messaging: MessagingService | None = None,
        notifications: NotificationService | None = None,
    ) -> None:
        self._repo: TradeProposalRepositoryProtocol = repo or TradeProposalRepository()
        self._listings: ListingReaderProtocol = listings or ListingRepository()
        self._messaging = messaging or get_messaging_service()
        self._notifications = notifications or get_notification_service()

    async def create(
        self,
        db: AsyncSession,
        sender_id: str,
        receiver_id: str,
        target_listing_id: str,
        offered_listing_id: str,
        message: str | None = None,
    ) -> ProposalDetails:
        validate_new_offer(sender_id, receiver_id, target_listing_id, offered_listing_id)
        try:
            target = await self._listings.get_by_id(db, target_listing_id)
            offered = await self._listings.get_by_id(db, offered_listing_id)
            check_offer_listings(
                sender_id, receiver_id, target_listing_id, target, offered_listing_id, offered
            )

            proposal_id = generate_id()
            await self._repo.insert(
                db,
                TradeProposal(
                    id=proposal_id,
                    sender_id=sender_id,
                    receiver_id=receiver_id,
                    target_listing_id=target_listing_id,
                    offered_listing_id=offered_listing_id,
                    message=message,
                    status=ProposalStatus.PENDING.value,
                ),
            )
            proposal = await self._repo.get_by_id(db, proposal_id)
            if proposal is None:
                raise ProposalNotFoundError(KIND, proposal_id)

            sender_name = proposal.sender_name or "Someone"
            offered_title = proposal.offered_listing_title or "their item"
            target_title = proposal.target_listing_title or "your listing"
            await self._notifications.dispatch(
                db,
                receiver_id,
                "New Trade Proposal!",
                f'{sender_name} wants to trade "{offered_title}" for "{target_title}"',
                TradeProposalPayload(
                    trade_proposal_id=proposal.id,
                    sender_id=sender_id,
                    sender_name=sender_name,
                    offered_listing_id=offered_listing_id,
                    offered_listing_title=offered_title,
                    target_listing_id=target_listing_id,
                    target_listing_title=target_title,
                    message=message,
                ),
                related_listing_id=target_listing_id,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "Trade proposal %s created: %s offers %s for %s",
            proposal.id,
            sender_id,
            offered_listing_id,
            target_listing_id,
        )
        return ProposalDetails.from_domain(proposal)

    async def update_status(
        self,
        db: AsyncSession,
        proposal_id: str,
        new_status: str,
        acting_user_id: str,
    ) -> ProposalDetails:
        validate_response_status(new_status)
        conversation_id: str | None = None
        try:
            proposal = await self._repo.get_by_id(db, proposal_id)
            if proposal is None:
                raise ProposalNotFoundError(KIND, proposal_id)
            check_can_respond(KIND, proposal, acting_user_id)

            if not await self._repo.respond(db, proposal_id, new_status):
                current = await self._repo.get_by_id(db, proposal_id)
                raise ProposalAlreadyRespondedError(
                    KIND, proposal_id, current.status if current else "responded"
                )
            proposal = await self._repo.get_by_id(db, proposal_id)
            if proposal is None:
                raise ProposalNotFoundError(KIND, proposal_id)

            receiver_name = proposal.receiver_name or "Someone"
            target_title = proposal.target_listing_title or "their item"
            if new_status == ProposalStatus.ACCEPTED.value:
                conversation = await self._messaging.find_or_create(
                    db, proposal.sender_id, proposal.receiver_id
                )
                conversation_id = conversation.id
                await self._notifications.dispatch(
                    db,
                    proposal.sender_id,
                    "Trade Proposal Accepted!",
                    f'{receiver_name} accepted your trade proposal for "{target_title}". '
                    "You can now chat!",
                    ProposalAcceptedPayload(
                        trade_proposal_id=proposal_id,
                        conversation_id=conversation_id,
                        other_user_name=receiver_name,
                        target_listing_title=target_title,
                    ),
                    related_listing_id=proposal.target_listing_id,
                )
            else:
                await self._notifications.dispatch(
                    db,
                    proposal.sender_id,
                    "Trade Proposal Declined",
                    f'{receiver_name} declined your trade proposal for "{target_title}".',
                    ProposalDeclinedPayload(
                        trade_proposal_id=proposal_id,
                        other_user_name=receiver_name,
                        target_listing_title=target_title,
                    ),
                    related_listing_id=proposal.target_listing_id,
                )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Trade proposal %s -> %s by %s", proposal_id, new_status, acting_user_id)
        return ProposalDetails.from_domain(proposal, conversation_id=conversation_id)

    async def list_for_user(self, db: AsyncSession, user_id: str) -> list[ProposalDetails]:
        proposals = await self._repo.list_by_user(db, user_id)
        return [ProposalDetails.from_domain(p) for p in proposals]

    async def get_for_listing(
        self, db: AsyncSession, listing_id: str, user_id: str
    ) -> ProposalDetails | None:
        """The caller's most recent proposal targeting `listing_id`, if any."""
        proposal = await self._repo.latest_for_listing(db, listing_id, user_id)
        return ProposalDetails.from_domain(proposal) if proposal else None


_service: TradeProposalService | None = None


def get_proposal_service() -> TradeProposalService:
    global _service  # noqa: PLW0603
    if _service is None:
        _service = TradeProposalService()
    return _service
