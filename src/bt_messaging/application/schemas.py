"""Pydantic schemas for bt_messaging."""

from pydantic import BaseModel, Field

from src.bt_messaging.domain.models import Conversation, ExchangeRequestSummary, Message


class StartConversationRequest(BaseModel):
    other_user_id: str = Field(..., min_length=1)


class SendMessageRequest(BaseModel):
    # Blank content is allowed when images are attached; the service
    # rejects a message with neither.
    content: str = Field("", max_length=5000)
    image_urls: list[str] = Field(default_factory=list, max_length=10)


class MarkMessagesReadRequest(BaseModel):
    message_ids: list[str] = Field(..., min_length=1, max_length=500)


class MessageOut(BaseModel):
    id: str
    conversation_id: str
    sender_id: str
    receiver_id: str
    content: str
    image_url: str | None
    read: bool
    created_at: str | None

    @classmethod
    def from_domain(cls, m: Message) -> "MessageOut":
        return cls(
            id=m.id,
            conversation_id=m.conversation_id,
            sender_id=m.sender_id,
            receiver_id=m.receiver_id,
            content=m.content,
            image_url=m.image_url,
            read=m.read,
            created_at=m.created_at.isoformat() if m.created_at else None,
        )


class ExchangeRequestSummaryOut(BaseModel):
    id: str
    sender_id: str
    receiver_id: str
    status: str
    message: str | None
    offered_listing_id: str
    offered_listing_title: str | None
    target_listing_id: str
    target_listing_title: str | None

    @classmethod
    def from_domain(cls, s: ExchangeRequestSummary) -> "ExchangeRequestSummaryOut":
        return cls(
            id=s.id,
            sender_id=s.sender_id,
            receiver_id=s.receiver_id,
            status=s.status,
            message=s.message,
            offered_listing_id=s.offered_listing_id,
            offered_listing_title=s.offered_listing_title,
            target_listing_id=s.target_listing_id,
            target_listing_title=s.target_listing_title,
        )


class ConversationOut(BaseModel):
    id: str
    user1_id: str
    user2_id: str
    user1_name: str | None
    user2_name: str | None
    exchange_request_id: str | None
    exchange_request: ExchangeRequestSummaryOut | None
    recent_messages: list[MessageOut]
    created_at: str | None

    @classmethod
    def from_domain(cls, c: Conversation) -> "ConversationOut":
        return cls(
            id=c.id,
            user1_id=c.user1_id,
            user2_id=c.user2_id,
            user1_name=c.user1_name,
            user2_name=c.user2_name,
            exchange_request_id=c.exchange_request_id,
            exchange_request=(
                ExchangeRequestSummaryOut.from_domain(c.exchange_request)
                if c.exchange_request
                else None
            ),
            recent_messages=[MessageOut.from_domain(m) for m in c.recent_messages],
            created_at=c.created_at.isoformat() if c.created_at else None,
        )


class MessageListResponse(BaseModel):
    items: list[MessageOut]


class MarkMessagesReadResponse(BaseModel):
    updated: int
