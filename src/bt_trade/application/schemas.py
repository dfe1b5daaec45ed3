"""Pydantic schemas for bt_trade."""

from pydantic import BaseModel, Field

from src.bt_messaging.application.schemas import ConversationOut
from src.bt_messaging.domain.models import Conversation
from src.bt_trade.domain.models import ExchangeRequest, Trade, TradeProposal

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class CreateOfferRequest(BaseModel):
    """Body for both POST /trade-proposals and POST /exchange-requests.

    Empty ids are rejected by the service, not here, so the error carries
    the trade error code.
    """

    receiver_id: str = ""
    target_listing_id: str = ""
    offered_listing_id: str = ""
    message: str | None = Field(None, max_length=2000)


class RespondOfferRequest(BaseModel):
    status: str = Field(..., description="accepted | declined")


class CreateTradeRequest(BaseModel):
    receiver_id: str = Field(..., min_length=1)
    listing_id: str = Field(..., min_length=1)
    initiator_item: str = Field(..., min_length=1, max_length=200)
    receiver_item: str = Field(..., min_length=1, max_length=200)


class ConfirmTradeRequest(BaseModel):
    comment: str | None = Field(None, max_length=2000)
    rating: int | None = Field(None, ge=1, le=5)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class ProposalDetails(BaseModel):
    """A trade proposal with the display fields the client needs."""

    id: str
    sender_id: str
    receiver_id: str
    sender_name: str | None
    receiver_name: str | None
    target_listing_id: str
    target_listing_title: str | None
    offered_listing_id: str
    offered_listing_title: str | None
    message: str | None
    status: str
    conversation_id: str | None = None
    created_at: str | None
    responded_at: str | None

    @classmethod
    def from_domain(
        cls, p: TradeProposal, conversation_id: str | None = None
    ) -> "ProposalDetails":
        return cls(
            id=p.id,
            sender_id=p.sender_id,
            receiver_id=p.receiver_id,
            sender_name=p.sender_name,
            receiver_name=p.receiver_name,
            target_listing_id=p.target_listing_id,
            target_listing_title=p.target_listing_title,
            offered_listing_id=p.offered_listing_id,
            offered_listing_title=p.offered_listing_title,
            message=p.message,
            status=p.status,
            conversation_id=conversation_id,
            created_at=p.created_at.isoformat() if p.created_at else None,
            responded_at=p.responded_at.isoformat() if p.responded_at else None,
        )


class ExchangeRequestDetails(ProposalDetails):
    conversation: ConversationOut | None = None

    @classmethod
    def from_request(
        cls, r: ExchangeRequest, conversation: Conversation | None = None
    ) -> "ExchangeRequestDetails":
        base = ProposalDetails.from_domain(r, conversation_id=r.conversation_id)
        return cls(
            **base.model_dump(),
            conversation=ConversationOut.from_domain(conversation) if conversation else None,
        )


class TradeOut(BaseModel):
    id: str
    initiator_id: str
    receiver_id: str
    initiator_name: str | None
    receiver_name: str | None
    listing_id: str
    listing_title: str | None
    initiator_item: str
    receiver_item: str
    status: str
    initiator_confirmed: bool
    receiver_confirmed: bool
    completion_comment: str | None
    completion_rating: int | None
    completed_at: str | None
    created_at: str | None

    @classmethod
    def from_domain(cls, t: Trade) -> "TradeOut":
        return cls(
            id=t.id,
            initiator_id=t.initiator_id,
            receiver_id=t.receiver_id,
            initiator_name=t.initiator_name,
            receiver_name=t.receiver_name,
            listing_id=t.listing_id,
            listing_title=t.listing_title,
            initiator_item=t.initiator_item,
            receiver_item=t.receiver_item,
            status=t.status,
            initiator_confirmed=t.initiator_confirmed,
            receiver_confirmed=t.receiver_confirmed,
            completion_comment=t.completion_comment,
            completion_rating=t.completion_rating,
            completed_at=t.completed_at.isoformat() if t.completed_at else None,
            created_at=t.created_at.isoformat() if t.created_at else None,
        )
