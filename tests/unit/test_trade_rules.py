"""Unit tests for bt_trade.domain.rules."""

import pytest

from src.bt_common.errors import (
    ListingNotAvailableError,
    ListingNotFoundError,
    ProposalAlreadyRespondedError,
    ProposalForbiddenError,
    ProposalValidationError,
    SelfTradeError,
)
from src.bt_trade.domain.models import TradeProposal
from src.bt_trade.domain.rules import (
    check_can_respond,
    check_offer_listings,
    is_self_trade,
    validate_new_offer,
    validate_response_status,
)
from tests.unit.fakes import make_listing


def _offer(status: str = "pending") -> TradeProposal:
    return TradeProposal(
        id="p1",
        sender_id="alice",
        receiver_id="bob",
        target_listing_id="L1",
        offered_listing_id="L2",
        message=None,
        status=status,
    )


class TestIsSelfTrade:
    def test_case_insensitive(self) -> None:
        assert is_self_trade("ABC-123", "abc-123") is True

    def test_different_users(self) -> None:
        assert is_self_trade("alice", "bob") is False


class TestValidateNewOffer:
    def test_valid(self) -> None:
        validate_new_offer("alice", "bob", "L1", "L2")

    @pytest.mark.parametrize(
        "args, missing",
        [
            (("alice", "", "L1", "L2"), "receiver_id"),
            (("alice", "bob", " ", "L2"), "target_listing_id"),
            (("alice", "bob", "L1", ""), "offered_listing_id"),
        ],
    )
    def test_missing_field_named(self, args: tuple[str, ...], missing: str) -> None:
        with pytest.raises(ProposalValidationError, match=missing):
            validate_new_offer(*args)

    def test_self_trade(self) -> None:
        with pytest.raises(SelfTradeError):
            validate_new_offer("alice", "ALICE", "L1", "L2")


class TestCheckOfferListings:
    def test_valid(self) -> None:
        check_offer_listings(
            "alice", "bob",
            "L1", make_listing("L1", "bob"),
            "L2", make_listing("L2", "alice"),
        )

    def test_missing_target(self) -> None:
        with pytest.raises(ListingNotFoundError):
            check_offer_listings("alice", "bob", "L1", None, "L2", make_listing("L2", "alice"))

    def test_target_not_owned_by_receiver(self) -> None:
        with pytest.raises(ProposalValidationError):
            check_offer_listings(
                "alice", "bob",
                "L1", make_listing("L1", "carol"),
                "L2", make_listing("L2", "alice"),
            )

    def test_offered_not_owned_by_sender(self) -> None:
        with pytest.raises(ProposalValidationError, match="your own"):
            check_offer_listings(
                "alice", "bob",
                "L1", make_listing("L1", "bob"),
                "L2", make_listing("L2", "bob"),
            )

    def test_target_must_be_active(self) -> None:
        with pytest.raises(ListingNotAvailableError):
            check_offer_listings(
                "alice", "bob",
                "L1", make_listing("L1", "bob", status="COMPLETED"),
                "L2", make_listing("L2", "alice"),
            )

    @pytest.mark.parametrize("status", ["DRAFT", "PENDING_REVIEW", "COMPLETED"])
    def test_offered_listing_must_be_active(self, status: str) -> None:
        with pytest.raises(ListingNotAvailableError) as exc_info:
            check_offer_listings(
                "alice", "bob",
                "L1", make_listing("L1", "bob"),
                "L2", make_listing("L2", "alice", status=status),
            )
        assert "L2" in exc_info.value.message


class TestResponses:
    def test_only_accept_or_decline(self) -> None:
        validate_response_status("accepted")
        validate_response_status("declined")
        with pytest.raises(ProposalValidationError):
            validate_response_status("pending")

    def test_sender_cannot_respond(self) -> None:
        with pytest.raises(ProposalForbiddenError):
            check_can_respond("Trade proposal", _offer(), "alice")

    def test_terminal_offer_cannot_be_answered(self) -> None:
        with pytest.raises(ProposalAlreadyRespondedError):
            check_can_respond("Trade proposal", _offer(status="declined"), "bob")
