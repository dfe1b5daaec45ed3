"""Domain models for bt_trade — pure dataclasses.

TradeProposal and ExchangeRequest are two separate offer lifecycles over
separate tables. They share a shape (and the rules in rules.py); an
exchange request additionally remembers the conversation its acceptance
opened.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class TradeProposal:
    id: str
    sender_id: str
    receiver_id: str
    target_listing_id: str
    offered_listing_id: str
    message: str | None
    status: str                          # pending | accepted | declined
    created_at: datetime | None = None
    responded_at: datetime | None = None
    updated_at: datetime | None = None
    # Joined on read
    sender_name: str | None = None
    receiver_name: str | None = None
    target_listing_title: str | None = None
    offered_listing_title: str | None = None


@dataclass
class ExchangeRequest(TradeProposal):
    conversation_id: str | None = None   # set only on accept


@dataclass
class Trade:
    """Completion confirmation: both parties confirm the swap happened."""

    id: str
    initiator_id: str
    receiver_id: str
    listing_id: str
    initiator_item: str
    receiver_item: str
    status: str                          # PENDING | COMPLETED
    initiator_confirmed: bool = False
    receiver_confirmed: bool = False
    completion_comment: str | None = None
    completion_rating: int | None = None
    completed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    # Joined on read
    listing_title: str | None = None
    initiator_name: str | None = None
    receiver_name: str | None = None

    def is_participant(self, user_id: str) -> bool:
        return user_id in (self.initiator_id, self.receiver_id)

    def other_party(self, user_id: str) -> str:
        return self.receiver_id if user_id == self.initiator_id else self.initiator_id

    @property
    def both_confirmed(self) -> bool:
        return self.initiator_confirmed and self.receiver_confirmed
