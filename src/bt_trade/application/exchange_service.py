"""ExchangeRequestService — the exchange-request offer lifecycle.

Same transitions as trade proposals. On accept the request is tied to the
pair's conversation in both directions: the request stores
conversation_id, and the conversation records the request unless it was
already opened by an earlier one. The accepted request is returned with
the conversation so the client can go straight to the chat.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.bt_common.enums import ProposalStatus
from src.bt_common.errors import ProposalAlreadyRespondedError, ProposalNotFoundError
from src.bt_common.id_generator import generate_id
from src.bt_listing.domain.repository import ListingReaderProtocol
from src.bt_listing.infrastructure.persistence import ListingRepository
from src.bt_messaging.application.service import MessagingService, get_messaging_service
from src.bt_messaging.domain.models import Conversation
from src.bt_notification.application.service import (
    NotificationService,
    get_notification_service,
)
from src.bt_notification.domain.payloads import (
    ExchangeDeclinedPayload,
    ExchangeStartedPayload,
    TradeRequestPayload,
)
from src.bt_trade.application.schemas import ExchangeRequestDetails
from src.bt_trade.domain.models import ExchangeRequest
from src.bt_trade.domain.repository import ExchangeRequestRepositoryProtocol
from src.bt_trade.domain.rules import (
    check_can_respond,
    check_offer_listings,
    validate_new_offer,
    validate_response_status,
)
from src.bt_trade.infrastructure.persistence import ExchangeRequestRepository

logger = logging.getLogger(__name__)

KIND = "Exchange request"


class ExchangeRequestService:
    def __init__(
        self,
        repo: ExchangeRequestRepositoryProtocol | None = None,
        listings: ListingReaderProtocol | None = None,
        messaging: MessagingService | None = None,
        notifications: NotificationService | None = None,
    ) -> None:
        self._repo: ExchangeRequestRepositoryProtocol = repo or ExchangeRequestRepository()
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
    ) -> ExchangeRequestDetails:
        validate_new_offer(sender_id, receiver_id, target_listing_id, offered_listing_id)
        try:
            target = await self._listings.get_by_id(db, target_listing_id)
            offered = await self._listings.get_by_id(db, offered_listing_id)
            check_offer_listings(
                sender_id, receiver_id, target_listing_id, target, offered_listing_id, offered
            )

            request_id = generate_id()
            await self._repo.insert(
                db,
                ExchangeRequest(
                    id=request_id,
                    sender_id=sender_id,
                    receiver_id=receiver_id,
                    target_listing_id=target_listing_id,
                    offered_listing_id=offered_listing_id,
                    message=message,
                    status=ProposalStatus.PENDING.value,
                ),
            )
            request = await self._repo.get_by_id(db, request_id)
            if request is None:
                raise ProposalNotFoundError(KIND, request_id)

            sender_name = request.sender_name or "Someone"
            offered_title = request.offered_listing_title or "their item"
            target_title = request.target_listing_title or "your listing"
            await self._notifications.dispatch(
                db,
                receiver_id,
                "New Exchange Request!",
                f'{sender_name} wants to exchange "{offered_title}" for "{target_title}"',
                TradeRequestPayload(
                    exchange_request_id=request.id,
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
            "Exchange request %s created: %s offers %s for %s",
            request.id,
            sender_id,
            offered_listing_id,
            target_listing_id,
        )
        return ExchangeRequestDetails.from_request(request)

    async def update_status(
        self,
        db: AsyncSession,
        request_id: str,
        new_status: str,
        acting_user_id: str,
    ) -> ExchangeRequestDetails:
        validate_response_status(new_status)
        conversation: Conversation | None = None
        try:
            request = await self._repo.get_by_id(db, request_id)
            if request is None:
                raise ProposalNotFoundError(KIND, request_id)
            check_can_respond(KIND, request, acting_user_id)

            if not await self._repo.respond(db, request_id, new_status):
                current = await self._repo.get_by_id(db, request_id)
                raise ProposalAlreadyRespondedError(
                    KIND, request_id, current.status if current else "responded"
                )

            if new_status == ProposalStatus.ACCEPTED.value:
                opened = await self._messaging.find_or_create(
                    db, request.sender_id, request.receiver_id
                )
                await self._repo.set_conversation(db, request_id, opened.id)
                conversation = await self._messaging.link_exchange_request(
                    db, opened.id, request_id
                )

            request = await self._repo.get_by_id(db, request_id)
            if request is None:
                raise ProposalNotFoundError(KIND, request_id)

            receiver_name = request.receiver_name or "Someone"
            target_title = request.target_listing_title or "the item"
            if conversation is not None:
                await self._notifications.dispatch(
                    db,
                    request.sender_id,
                    "Exchange Request Accepted!",
                    f'{receiver_name} accepted your exchange request for "{target_title}". '
                    "You can now start chatting!",
                    ExchangeStartedPayload(
                        exchange_request_id=request_id,
                        conversation_id=conversation.id,
                        other_user_name=receiver_name,
                        target_listing_title=target_title,
                    ),
                    related_listing_id=request.target_listing_id,
                )
            else:
                await self._notifications.dispatch(
                    db,
                    request.sender_id,
                    "Exchange Request Declined",
                    f'{receiver_name} declined your exchange request for "{target_title}".',
                    ExchangeDeclinedPayload(
                        exchange_request_id=request_id,
                        other_user_name=receiver_name,
                        target_listing_title=target_title,
                    ),
                    related_listing_id=request.target_listing_id,
                )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Exchange request %s -> %s by %s", request_id, new_status, acting_user_id)
        return ExchangeRequestDetails.from_request(request, conversation)

    async def list_for_user(
        self, db: AsyncSession, user_id: str
    ) -> list[ExchangeRequestDetails]:
        requests = await self._repo.list_by_user(db, user_id)
        return [ExchangeRequestDetails.from_request(r) for r in requests]

    async def get_for_listing(
        self, db: AsyncSession, listing_id: str, user_id: str
    ) -> ExchangeRequestDetails | None:
        request = await self._repo.latest_for_listing(db, listing_id, user_id)
        return ExchangeRequestDetails.from_request(request) if request else None


_service: ExchangeRequestService | None = None


def get_exchange_service() -> ExchangeRequestService:
    global _service  # noqa: PLW0603
    if _service is None:
        _service = ExchangeRequestService()
    return _service
