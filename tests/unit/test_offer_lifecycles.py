"""Unit tests for the trade-proposal and exchange-request lifecycles."""

import pytest

from src.bt_common.errors import (
    ListingNotAvailableError,
    ProposalAlreadyRespondedError,
    ProposalForbiddenError,
    ProposalNotFoundError,
    SelfTradeError,
)
from src.bt_messaging.application.service import MessagingService
from src.bt_moderation.application.abuse_tracker import AbuseTracker
from src.bt_moderation.application.service import ModerationService
from src.bt_moderation.domain.counters import InMemoryAbuseCounters
from src.bt_notification.application.service import NotificationService
from src.bt_trade.application.exchange_service import ExchangeRequestService
from src.bt_trade.application.proposal_service import TradeProposalService
from tests.unit.fakes import (
    FakeConversationRepo,
    FakeListingRepo,
    FakeMessageRepo,
    FakeModerationRepo,
    FakeNotificationRepo,
    FakeOfferRepo,
    FakeSession,
    make_listing,
)

NAMES = {"alice": "Alice", "bob": "Bob"}


class _World:
    """Alice owns L2 (a bike) and wants Bob's L1 (a guitar)."""

    def __init__(self) -> None:
        self.listings = FakeListingRepo(
            make_listing("L1", "bob", title="Guitar"),
            make_listing("L2", "alice", title="Bike"),
        )
        self.conversations = FakeConversationRepo(names=NAMES)
        self.notifications = FakeNotificationRepo()
        notifier = NotificationService(repo=self.notifications)
        moderation_repo = FakeModerationRepo()
        self.messaging = MessagingService(
            conversations=self.conversations,
            messages=FakeMessageRepo(),
            moderation=ModerationService(
                repo=moderation_repo,
                tracker=AbuseTracker(InMemoryAbuseCounters(3600), repo=moderation_repo),
            ),
            notifications=notifier,
        )
        self.proposal_repo = FakeOfferRepo(self.listings, NAMES)
        self.exchange_repo = FakeOfferRepo(self.listings, NAMES)
        self.proposals = TradeProposalService(
            repo=self.proposal_repo,
            listings=self.listings,
            messaging=self.messaging,
            notifications=notifier,
        )
        self.exchanges = ExchangeRequestService(
            repo=self.exchange_repo,
            listings=self.listings,
            messaging=self.messaging,
            notifications=notifier,
        )


@pytest.fixture
def world() -> _World:
    return _World()


class TestTradeProposals:
    async def test_create_notifies_receiver(self, world: _World) -> None:
        db = FakeSession()
        proposal = await world.proposals.create(db, "alice", "bob", "L1", "L2", "Swap?")

        assert proposal.status == "pending"
        assert proposal.conversation_id is None
        assert db.commits == 1
        [notice] = world.notifications.for_user("bob")
        assert notice.type == "trade_proposal"
        assert notice.title == "New Trade Proposal!"
        assert notice.message == 'Alice wants to trade "Bike" for "Guitar"'
        assert notice.related_listing_id == "L1"

    async def test_self_proposal_rejected(self, world: _World) -> None:
        with pytest.raises(SelfTradeError):
            await world.proposals.create(FakeSession(), "bob", "bob", "L1", "L2")
        assert world.proposal_repo.rows == {}

    async def test_target_must_be_active(self, world: _World) -> None:
        world.listings.rows["L1"].status = "COMPLETED"
        db = FakeSession()
        with pytest.raises(ListingNotAvailableError):
            await world.proposals.create(db, "alice", "bob", "L1", "L2")
        assert db.rollbacks == 1

    async def test_offered_listing_must_be_active(self, world: _World) -> None:
        world.listings.rows["L2"].status = "COMPLETED"
        db = FakeSession()
        with pytest.raises(ListingNotAvailableError):
            await world.proposals.create(db, "alice", "bob", "L1", "L2")
        assert world.proposal_repo.rows == {}
        assert world.notifications.rows == []

    async def test_accept_opens_conversation(self, world: _World) -> None:
        proposal = await world.proposals.create(FakeSession(), "alice", "bob", "L1", "L2")

        accepted = await world.proposals.update_status(
            FakeSession(), proposal.id, "accepted", "bob"
        )

        assert accepted.status == "accepted"
        assert accepted.responded_at is not None
        assert accepted.conversation_id is not None
        assert accepted.conversation_id in world.conversations.rows
        [notice] = world.notifications.for_user("alice")
        assert notice.type == "trade_proposal_accepted"
        assert notice.data["conversation_id"] == accepted.conversation_id
        assert notice.message == (
            'Bob accepted your trade proposal for "Guitar". You can now chat!'
        )

    async def test_decline_opens_nothing(self, world: _World) -> None:
        proposal = await world.proposals.create(FakeSession(), "alice", "bob", "L1", "L2")

        declined = await world.proposals.update_status(
            FakeSession(), proposal.id, "declined", "bob"
        )

        assert declined.status == "declined"
        assert declined.conversation_id is None
        assert world.conversations.rows == {}
        [notice] = world.notifications.for_user("alice")
        assert notice.type == "trade_proposal_declined"

    async def test_only_receiver_may_respond(self, world: _World) -> None:
        proposal = await world.proposals.create(FakeSession(), "alice", "bob", "L1", "L2")
        with pytest.raises(ProposalForbiddenError):
            await world.proposals.update_status(FakeSession(), proposal.id, "accepted", "alice")
        assert world.proposal_repo.rows[proposal.id].status == "pending"

    async def test_single_transition(self, world: _World) -> None:
        proposal = await world.proposals.create(FakeSession(), "alice", "bob", "L1", "L2")
        await world.proposals.update_status(FakeSession(), proposal.id, "declined", "bob")

        with pytest.raises(ProposalAlreadyRespondedError):
            await world.proposals.update_status(FakeSession(), proposal.id, "accepted", "bob")
        assert world.proposal_repo.rows[proposal.id].status == "declined"
        assert world.conversations.rows == {}

    async def test_unknown_proposal(self, world: _World) -> None:
        with pytest.raises(ProposalNotFoundError):
            await world.proposals.update_status(FakeSession(), "nope", "accepted", "bob")

    async def test_accepting_twice_reuses_conversation(self, world: _World) -> None:
        first = await world.proposals.create(FakeSession(), "alice", "bob", "L1", "L2")
        second = await world.proposals.create(FakeSession(), "alice", "bob", "L1", "L2")

        a = await world.proposals.update_status(FakeSession(), first.id, "accepted", "bob")
        b = await world.proposals.update_status(FakeSession(), second.id, "accepted", "bob")

        assert a.conversation_id == b.conversation_id
        assert len(world.conversations.rows) == 1

    async def test_lists_and_latest_for_listing(self, world: _World) -> None:
        proposal = await world.proposals.create(FakeSession(), "alice", "bob", "L1", "L2")

        assert [p.id for p in await world.proposals.list_for_user(FakeSession(), "bob")] == [
            proposal.id
        ]
        latest = await world.proposals.get_for_listing(FakeSession(), "L1", "alice")
        assert latest is not None and latest.id == proposal.id
        assert await world.proposals.get_for_listing(FakeSession(), "L1", "bob") is None


class TestExchangeRequests:
    async def test_create_notifies_receiver(self, world: _World) -> None:
        await world.exchanges.create(FakeSession(), "alice", "bob", "L1", "L2")

        [notice] = world.notifications.for_user("bob")
        assert notice.type == "trade_request"
        assert notice.title == "New Exchange Request!"
        assert notice.message == 'Alice wants to exchange "Bike" for "Guitar"'

    async def test_self_request_rejected(self, world: _World) -> None:
        db = FakeSession()
        with pytest.raises(SelfTradeError):
            await world.exchanges.create(db, "Bob", "bob", "L1", "L2")
        assert world.exchange_repo.rows == {}
        assert world.notifications.rows == []
        assert db.commits == 0

    async def test_offered_listing_must_be_active(self, world: _World) -> None:
        world.listings.rows["L2"].status = "DRAFT"
        with pytest.raises(ListingNotAvailableError):
            await world.exchanges.create(FakeSession(), "alice", "bob", "L1", "L2")
        assert world.exchange_repo.rows == {}

    async def test_accept_links_conversation_both_ways(self, world: _World) -> None:
        request = await world.exchanges.create(FakeSession(), "alice", "bob", "L1", "L2")

        accepted = await world.exchanges.update_status(
            FakeSession(), request.id, "accepted", "bob"
        )

        assert accepted.status == "accepted"
        assert accepted.conversation is not None
        assert accepted.conversation_id == accepted.conversation.id
        assert accepted.conversation.exchange_request_id == request.id
        stored = world.conversations.rows[accepted.conversation.id]
        assert stored.exchange_request_id == request.id
        assert {stored.user1_id, stored.user2_id} == {"alice", "bob"}
        [notice] = world.notifications.for_user("alice")
        assert notice.type == "exchange_started"
        assert notice.data["conversation_id"] == accepted.conversation.id

    async def test_decline(self, world: _World) -> None:
        request = await world.exchanges.create(FakeSession(), "alice", "bob", "L1", "L2")

        declined = await world.exchanges.update_status(
            FakeSession(), request.id, "declined", "bob"
        )

        assert declined.status == "declined"
        assert declined.conversation is None
        assert declined.conversation_id is None
        assert world.conversations.rows == {}
        [notice] = world.notifications.for_user("alice")
        assert notice.type == "exchange_declined"

    async def test_second_request_keeps_first_link(self, world: _World) -> None:
        first = await world.exchanges.create(FakeSession(), "alice", "bob", "L1", "L2")
        second = await world.exchanges.create(FakeSession(), "alice", "bob", "L1", "L2")
        await world.exchanges.update_status(FakeSession(), first.id, "accepted", "bob")

        accepted = await world.exchanges.update_status(
            FakeSession(), second.id, "accepted", "bob"
        )

        assert accepted.conversation is not None
        assert accepted.conversation.exchange_request_id == first.id
        assert accepted.conversation_id == accepted.conversation.id

    async def test_cannot_respond_twice(self, world: _World) -> None:
        request = await world.exchanges.create(FakeSession(), "alice", "bob", "L1", "L2")
        await world.exchanges.update_status(FakeSession(), request.id, "accepted", "bob")
        with pytest.raises(ProposalAlreadyRespondedError):
            await world.exchanges.update_status(FakeSession(), request.id, "declined", "bob")

    async def test_notification_failure_does_not_block_accept(self, world: _World) -> None:
        request = await world.exchanges.create(FakeSession(), "alice", "bob", "L1", "L2")
        world.notifications.fail = True
        db = FakeSession()

        accepted = await world.exchanges.update_status(db, request.id, "accepted", "bob")

        assert accepted.status == "accepted"
        assert db.commits == 1
        assert db.rollbacks == 0
