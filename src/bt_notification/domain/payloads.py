"""Typed notification payloads — one variant per notification type.

Stored in notifications.data as JSON. The `type` field is the discriminant
and always equals the row's `type` column, so readers can rebuild the
variant with `parse_payload`. Display fields (names, titles) are
denormalised into the payload so rendering a notification never needs a
follow-up fetch.
"""

import logging
from typing import Annotated, Literal

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

logger = logging.getLogger(__name__)


class MessagePayload(BaseModel):
    type: Literal["message"] = "message"
    message_id: str
    sender_id: str
    conversation_id: str


class TradeProposalPayload(BaseModel):
    type: Literal["trade_proposal"] = "trade_proposal"
    trade_proposal_id: str
    sender_id: str
    sender_name: str
    offered_listing_id: str
    offered_listing_title: str
    target_listing_id: str
    target_listing_title: str
    message: str | None = None


class TradeRequestPayload(BaseModel):
    """New exchange request, sent to the owner of the target listing."""

    type: Literal["trade_request"] = "trade_request"
    exchange_request_id: str
    sender_id: str
    sender_name: str
    offered_listing_id: str
    offered_listing_title: str
    target_listing_id: str
    target_listing_title: str
    message: str | None = None


class ProposalAcceptedPayload(BaseModel):
    type: Literal["trade_proposal_accepted"] = "trade_proposal_accepted"
    trade_proposal_id: str
    conversation_id: str
    other_user_name: str
    target_listing_title: str
    status: Literal["accepted"] = "accepted"


class ProposalDeclinedPayload(BaseModel):
    type: Literal["trade_proposal_declined"] = "trade_proposal_declined"
    trade_proposal_id: str
    other_user_name: str
    target_listing_title: str
    status: Literal["declined"] = "declined"


class ExchangeStartedPayload(BaseModel):
    type: Literal["exchange_started"] = "exchange_started"
    exchange_request_id: str
    conversation_id: str
    other_user_name: str
    target_listing_title: str
    status: Literal["accepted"] = "accepted"


class ExchangeDeclinedPayload(BaseModel):
    type: Literal["exchange_declined"] = "exchange_declined"
    exchange_request_id: str
    other_user_name: str
    target_listing_title: str
    status: Literal["declined"] = "declined"


class TradePayload(BaseModel):
    type: Literal["trade"] = "trade"
    trade_id: str
    listing_id: str
    completed: bool


class ReviewPayload(BaseModel):
    type: Literal["review"] = "review"
    review_id: str
    reviewer_id: str
    reviewer_name: str
    rating: int


class ListingPayload(BaseModel):
    """Sent to a listing's owner when it is held for review."""

    type: Literal["listing"] = "listing"
    listing_id: str
    listing_title: str
    reasons: list[str] = Field(default_factory=list)


NotificationPayload = Annotated[
    MessagePayload
    | TradeProposalPayload
    | TradeRequestPayload
    | ProposalAcceptedPayload
    | ProposalDeclinedPayload
    | ExchangeStartedPayload
    | ExchangeDeclinedPayload
    | TradePayload
    | ListingPayload
    | ReviewPayload,
    Field(discriminator="type"),
]

_ADAPTER: TypeAdapter[NotificationPayload] = TypeAdapter(NotificationPayload)


def parse_payload(data: dict[str, object] | None) -> NotificationPayload | None:
    """Rebuild the typed payload from a stored `data` blob.

    Returns None for rows without a recognised discriminant or whose fields
    no longer match their variant.
    """
    if not data or "type" not in data:
        return None
    try:
        return _ADAPTER.validate_python(data)
    except ValidationError:
        logger.debug("Unparseable notification payload type=%s", data.get("type"))
        return None
