"""Unit tests for ListingService (in-memory repositories)."""

import pytest

from src.bt_common.errors import (
    ListingForbiddenError,
    ListingNotFoundError,
    ListingValidationError,
    UserBannedError,
)
from src.bt_listing.application.schemas import (
    CreateListingRequest,
    UpdateListingRequest,
    cursor_decode,
)
from src.bt_listing.application.service import ListingService
from src.bt_moderation.application.abuse_tracker import AbuseTracker
from src.bt_moderation.application.service import ModerationService
from src.bt_moderation.domain.counters import InMemoryAbuseCounters
from src.bt_notification.application.service import NotificationService
from tests.unit.fakes import (
    FakeFavoriteRepo,
    FakeListingRepo,
    FakeModerationRepo,
    FakeNotificationRepo,
    FakeSession,
    make_listing,
)


class _World:
    def __init__(self) -> None:
        self.listings = FakeListingRepo()
        self.favorites = FakeFavoriteRepo(self.listings)
        self.moderation_repo = FakeModerationRepo()
        self.notifications = FakeNotificationRepo()
        self.moderation = ModerationService(
            repo=self.moderation_repo,
            tracker=AbuseTracker(
                InMemoryAbuseCounters(window_seconds=3600), repo=self.moderation_repo
            ),
        )
        self.service = ListingService(
            repo=self.listings,
            favorites=self.favorites,
            moderation=self.moderation,
            notifications=NotificationService(repo=self.notifications),
        )


@pytest.fixture
def world() -> _World:
    return _World()


def _req(**kwargs: object) -> CreateListingRequest:
    fields: dict[str, object] = {
        "title": "Mountain bike",
        "description": "21 gears, recently serviced",
        "category": "sports",
        "wanted_items": ["tent", "camping stove"],
    }
    fields.update(kwargs)
    return CreateListingRequest(**fields)


class TestCreate:
    async def test_clean_listing_goes_live(self, world: _World) -> None:
        db = FakeSession()
        out = await world.service.create(db, "alice", _req())

        assert out.status == "ACTIVE"
        assert out.flagged is False
        assert out.wanted_items == ["tent", "camping stove"]
        assert world.notifications.rows == []
        assert db.commits == 1

    async def test_draft_status_is_kept(self, world: _World) -> None:
        out = await world.service.create(FakeSession(), "alice", _req(status="DRAFT"))
        assert out.status == "DRAFT"

    async def test_suspicious_listing_held_for_review(self, world: _World) -> None:
        out = await world.service.create(
            FakeSession(), "alice", _req(description="Will take cash as well")
        )

        assert out.status == "PENDING_REVIEW"
        assert out.flagged is True
        assert "Contains suspicious keyword: cash" in out.flag_reasons
        [notice] = world.notifications.for_user("alice")
        assert notice.type == "listing"
        assert notice.related_listing_id == out.id

    async def test_missing_fields(self, world: _World) -> None:
        with pytest.raises(ListingValidationError):
            await world.service.create(FakeSession(), "alice", _req(category="  "))

    async def test_banned_owner_rejected_before_write(self, world: _World) -> None:
        db = FakeSession()
        await world.moderation.ban_user(db, "alice", "abuse")
        with pytest.raises(UserBannedError):
            await world.service.create(db, "alice", _req())
        assert world.listings.rows == {}

    async def test_third_spam_listing_bans_and_is_rejected(self, world: _World) -> None:
        db = FakeSession()
        spam = _req(description="click here now")
        await world.service.create(db, "alice", spam)
        await world.service.create(db, "alice", spam)
        assert len(world.listings.rows) == 2

        with pytest.raises(UserBannedError):
            await world.service.create(db, "alice", spam)
        assert len(world.listings.rows) == 2
        assert await world.moderation.is_banned(db, "alice") is True


class TestBrowse:
    async def test_only_active_listings_are_listed(self, world: _World) -> None:
        world.listings.add(make_listing("L1", "alice"))
        world.listings.add(make_listing("L2", "bob", status="DRAFT"))

        page = await world.service.list_listings(FakeSession(), None, None, None, None, 20)
        assert [item.id for item in page.items] == ["L1"]
        assert page.has_more is False
        assert page.next_cursor is None

    async def test_all_means_no_category_filter(self, world: _World) -> None:
        world.listings.add(make_listing("L1", "alice", category="music"))
        world.listings.add(make_listing("L2", "bob", category="books"))

        page = await world.service.list_listings(FakeSession(), None, "all", None, None, 20)
        assert {item.id for item in page.items} == {"L1", "L2"}

    async def test_pagination_cursor(self, world: _World) -> None:
        for i in range(3):
            world.listings.add(make_listing(f"L{i}", "alice"))

        first = await world.service.list_listings(FakeSession(), None, None, None, None, 2)
        assert len(first.items) == 2
        assert first.has_more is True
        assert cursor_decode(first.next_cursor)[1] == first.items[-1].id

        second = await world.service.list_listings(
            FakeSession(), None, None, None, first.next_cursor, 2
        )
        assert len(second.items) == 1
        assert second.has_more is False

    async def test_search_matches_title(self, world: _World) -> None:
        world.listings.add(make_listing("L1", "alice", title="Red kayak"))
        world.listings.add(make_listing("L2", "alice", title="Desk lamp"))

        page = await world.service.list_listings(FakeSession(), "kayak", None, None, None, 20)
        assert [item.id for item in page.items] == ["L1"]


class TestOwnerActions:
    async def test_update_by_owner(self, world: _World) -> None:
        world.listings.add(make_listing("L1", "alice"))
        out = await world.service.update(
            FakeSession(), "L1", "alice", UpdateListingRequest(title="Electric guitar")
        )
        assert out.title == "Electric guitar"
        assert out.description == "Acoustic, lightly used"

    async def test_update_by_stranger_forbidden(self, world: _World) -> None:
        world.listings.add(make_listing("L1", "alice"))
        db = FakeSession()
        with pytest.raises(ListingForbiddenError):
            await world.service.update(db, "L1", "bob", UpdateListingRequest(title="x"))
        assert db.rollbacks == 1

    async def test_cannot_release_listing_under_review(self, world: _World) -> None:
        world.listings.add(make_listing("L1", "alice", status="PENDING_REVIEW"))
        with pytest.raises(ListingValidationError):
            await world.service.update(
                FakeSession(), "L1", "alice", UpdateListingRequest(status="ACTIVE")
            )

    async def test_delete(self, world: _World) -> None:
        world.listings.add(make_listing("L1", "alice"))
        await world.service.delete(FakeSession(), "L1", "alice")
        with pytest.raises(ListingNotFoundError):
            await world.service.get(FakeSession(), "L1")

    async def test_increment_views(self, world: _World) -> None:
        world.listings.add(make_listing("L1", "alice"))
        await world.service.increment_views(FakeSession(), "L1")
        result = await world.service.increment_views(FakeSession(), "L1")
        assert result.views == 2


class TestFavorites:
    async def test_add_is_idempotent(self, world: _World) -> None:
        world.listings.add(make_listing("L1", "alice"))
        db = FakeSession()
        first = await world.service.add_favorite(db, "bob", "L1")
        second = await world.service.add_favorite(db, "bob", "L1")
        assert first.id == second.id
        assert [item.id for item in await world.service.list_favorites(db, "bob")] == ["L1"]

    async def test_add_unknown_listing(self, world: _World) -> None:
        with pytest.raises(ListingNotFoundError):
            await world.service.add_favorite(FakeSession(), "bob", "nope")

    async def test_remove(self, world: _World) -> None:
        world.listings.add(make_listing("L1", "alice"))
        db = FakeSession()
        await world.service.add_favorite(db, "bob", "L1")
        assert await world.service.remove_favorite(db, "bob", "L1") is True
        assert await world.service.list_favorites(db, "bob") == []
