"""Domain models for bt_messaging — pure dataclasses."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class Message:
    id: str
    conversation_id: str
    sender_id: str
    receiver_id: str
    content: str                     # "" for image-only rows
    image_url: str | None = None
    read: bool = False
    created_at: datetime | None = None


@dataclass
class ExchangeRequestSummary:
    """Read-only view of the exchange request a conversation was opened by."""

    id: str
    sender_id: str
    receiver_id: str
    status: str
    message: str | None
    offered_listing_id: str
    offered_listing_title: str | None
    target_listing_id: str
    target_listing_title: str | None
    created_at: datetime | None = None


@dataclass
class Conversation:
    id: str
    user1_id: str
    user2_id: str
    exchange_request_id: str | None = None
    created_at: datetime | None = None
    # Joined on read
    user1_name: str | None = None
    user2_name: str | None = None
    exchange_request: ExchangeRequestSummary | None = None
    recent_messages: list[Message] = field(default_factory=list)

    def has_participant(self, user_id: str) -> bool:
        return user_id in (self.user1_id, self.user2_id)

    def other_participant(self, user_id: str) -> str:
        return self.user2_id if user_id == self.user1_id else self.user1_id

    def name_of(self, user_id: str) -> str | None:
        if user_id == self.user1_id:
            return self.user1_name
        if user_id == self.user2_id:
            return self.user2_name
        return None
