"""MessagingService — conversations between two users and their messages.

`find_or_create` is also used by the trade lifecycles inside their own
transactions, so it never commits. Every other write method owns its
commit/rollback.

send_message order of checks (all before any write):
  1. content or images present        → MessageValidationError
  2. sender not banned                 → UserBannedError
  3. content not spam                  → SpamDetectedError
  4. conversation exists               → ConversationNotFoundError
  5. sender is a participant           → ConversationForbiddenError
  6. receiver has not blocked sender   → BlockedByUserError
Each image row is written in its own SAVEPOINT; a failed image is logged
and skipped. The send fails only if no row was written at all.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.bt_common.errors import (
    BlockedByUserError,
    ConversationForbiddenError,
    ConversationNotFoundError,
    MessageNotSentError,
    MessageValidationError,
    SelfConversationError,
    SpamDetectedError,
)
from src.bt_common.id_generator import generate_id
from src.bt_messaging.domain.models import Conversation, Message
from src.bt_messaging.domain.repository import (
    ConversationRepositoryProtocol,
    MessageRepositoryProtocol,
)
from src.bt_messaging.infrastructure.persistence import (
    ConversationRepository,
    MessageRepository,
)
from src.bt_moderation.application.service import ModerationService, get_moderation_service
from src.bt_notification.application.service import (
    NotificationService,
    get_notification_service,
)
from src.bt_notification.domain.payloads import MessagePayload

logger = logging.getLogger(__name__)

CONVERSATION_PREVIEW_SIZE = 5


class MessagingService:
    def __init__(
        self,
        conversations: ConversationRepositoryProtocol | None = None,
        messages: MessageRepositoryProtocol | None = None,
        moderation: ModerationService | None = None,
        notifications: NotificationService | None = None,
    ) -> None:
        self._conversations: ConversationRepositoryProtocol = (
            conversations or ConversationRepository()
        )
        self._messages: MessageRepositoryProtocol = messages or MessageRepository()
        self._moderation = moderation or get_moderation_service()
        self._notifications = notifications or get_notification_service()

    # ------------------------------------------------------------------
    # Conversations
    # ------------------------------------------------------------------

    async def find_or_create(self, db: AsyncSession, user_a: str, user_b: str) -> Conversation:
        """The conversation between two users, created on first use. Does not commit."""
        if user_a == user_b:
            raise SelfConversationError()
        existing = await self._conversations.find_between(db, user_a, user_b)
        if existing is not None:
            return existing
        await self._conversations.insert_if_absent(
            db, Conversation(id=generate_id(), user1_id=user_a, user2_id=user_b)
        )
        # Re-read: a concurrent creator may have won the unique index.
        conversation = await self._conversations.find_between(db, user_a, user_b)
        if conversation is None:
            raise ConversationNotFoundError(f"{user_a}/{user_b}")
        logger.info("Conversation %s opened: %s <-> %s", conversation.id, user_a, user_b)
        return conversation

    async def open_conversation(
        self, db: AsyncSession, user_id: str, other_user_id: str
    ) -> Conversation:
        try:
            conversation = await self.find_or_create(db, user_id, other_user_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return conversation

    async def link_exchange_request(
        self, db: AsyncSession, conversation_id: str, exchange_request_id: str
    ) -> Conversation:
        """Attach an exchange request if none is linked yet; return the fresh row."""
        await self._conversations.link_exchange_request(db, conversation_id, exchange_request_id)
        conversation = await self._conversations.get_by_id(db, conversation_id)
        if conversation is None:
            raise ConversationNotFoundError(conversation_id)
        return conversation

    async def _get_for_participant(
        self, db: AsyncSession, conversation_id: str, user_id: str
    ) -> Conversation:
        conversation = await self._conversations.get_by_id(db, conversation_id)
        if conversation is None:
            raise ConversationNotFoundError(conversation_id)
        if not conversation.has_participant(user_id):
            raise ConversationForbiddenError()
        return conversation

    async def _attach_exchange_request(self, db: AsyncSession, conversation: Conversation) -> None:
        if conversation.exchange_request_id:
            conversation.exchange_request = (
                await self._conversations.get_exchange_request_summary(
                    db, conversation.exchange_request_id
                )
            )

    async def get_by_id(
        self, db: AsyncSession, conversation_id: str, user_id: str
    ) -> Conversation:
        conversation = await self._get_for_participant(db, conversation_id, user_id)
        await self._attach_exchange_request(db, conversation)
        return conversation

    async def list_for_user(self, db: AsyncSession, user_id: str) -> list[Conversation]:
        conversations = await self._conversations.list_by_user(db, user_id)
        for conversation in conversations:
            conversation.recent_messages = await self._messages.list_recent(
                db, conversation.id, CONVERSATION_PREVIEW_SIZE
            )
            await self._attach_exchange_request(db, conversation)
        return conversations

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    async def send_message(
        self,
        db: AsyncSession,
        sender_id: str,
        conversation_id: str,
        content: str,
        image_urls: list[str] | None = None,
    ) -> list[Message]:
        text = (content or "").strip()
        images = [url.strip() for url in image_urls or [] if url and url.strip()]
        if not text and not images:
            raise MessageValidationError("Message must have content or at least one image")

        await self._moderation.ensure_not_banned(db, sender_id)
        conversation = await self._get_for_participant(db, conversation_id, sender_id)
        if text and await self._moderation.tracker.check_spam(db, sender_id, text):
            raise SpamDetectedError()

        receiver_id = conversation.other_participant(sender_id)
        if sender_id in await self._moderation.get_blocked_users(db, receiver_id):
            raise BlockedByUserError()

        sent: list[Message] = []
        try:
            if text:
                sent.append(
                    await self._messages.insert(
                        db, self._new_message(conversation_id, sender_id, receiver_id, text)
                    )
                )
            for url in images:
                try:
                    async with db.begin_nested():
                        message = await self._messages.insert(
                            db,
                            self._new_message(
                                conversation_id, sender_id, receiver_id, "", image_url=url
                            ),
                        )
                except Exception:
                    logger.warning(
                        "Image message failed: conversation=%s url=%s",
                        conversation_id,
                        url,
                        exc_info=True,
                    )
                    continue
                sent.append(message)

            if not sent:
                raise MessageNotSentError()

            sender_name = conversation.name_of(sender_id) or "someone"
            await self._notifications.dispatch(
                db,
                receiver_id,
                "New Message",
                f"You have a new message from {sender_name}",
                MessagePayload(
                    message_id=sent[-1].id,
                    sender_id=sender_id,
                    conversation_id=conversation_id,
                ),
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.debug(
            "Conversation %s: %d message(s) from %s", conversation_id, len(sent), sender_id
        )
        return sent

    @staticmethod
    def _new_message(
        conversation_id: str,
        sender_id: str,
        receiver_id: str,
        content: str,
        image_url: str | None = None,
    ) -> Message:
        return Message(
            id=generate_id(),
            conversation_id=conversation_id,
            sender_id=sender_id,
            receiver_id=receiver_id,
            content=content,
            image_url=image_url,
        )

    async def list_messages(
        self, db: AsyncSession, conversation_id: str, user_id: str
    ) -> list[Message]:
        await self._get_for_participant(db, conversation_id, user_id)
        return await self._messages.list_by_conversation(db, conversation_id)

    async def mark_as_read(self, db: AsyncSession, user_id: str, message_ids: list[str]) -> int:
        """Mark messages read. Only rows addressed to `user_id` change."""
        if not message_ids:
            return 0
        try:
            updated = await self._messages.mark_read(db, user_id, message_ids)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return updated


_service: MessagingService | None = None


def get_messaging_service() -> MessagingService:
    global _service  # noqa: PLW0603
    if _service is None:
        _service = MessagingService()
    return _service
