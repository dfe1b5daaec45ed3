"""Offer rules shared by trade proposals and exchange requests.

Every check here raises before the caller writes anything.
"""

from src.bt_common.enums import ListingStatus, ProposalStatus
from src.bt_common.errors import (
    ListingNotAvailableError,
    ListingNotFoundError,
    ProposalAlreadyRespondedError,
    ProposalForbiddenError,
    ProposalValidationError,
    SelfTradeError,
)
from src.bt_listing.domain.models import Listing
from src.bt_trade.domain.models import TradeProposal

RESPONSE_STATUSES: frozenset[str] = frozenset(
    {ProposalStatus.ACCEPTED.value, ProposalStatus.DECLINED.value}
)


def is_self_trade(sender_id: str, receiver_id: str) -> bool:
    """UUID comparison is case-insensitive."""
    return str(sender_id).lower() == str(receiver_id).lower()


def validate_new_offer(
    sender_id: str,
    receiver_id: str,
    target_listing_id: str,
    offered_listing_id: str,
) -> None:
    required = {
        "sender_id": sender_id,
        "receiver_id": receiver_id,
        "target_listing_id": target_listing_id,
        "offered_listing_id": offered_listing_id,
    }
    for name, value in required.items():
        if not value or not str(value).strip():
            raise ProposalValidationError(f"{name} is required")
    if is_self_trade(sender_id, receiver_id):
        raise SelfTradeError()


def check_offer_listings(
    sender_id: str,
    receiver_id: str,
    target_listing_id: str,
    target: Listing | None,
    offered_listing_id: str,
    offered: Listing | None,
) -> None:
    """Both listings must be ACTIVE; target is the receiver's, offered the sender's."""
    if target is None:
        raise ListingNotFoundError(target_listing_id)
    if offered is None:
        raise ListingNotFoundError(offered_listing_id)
    if target.user_id != receiver_id:
        raise ProposalValidationError("Target listing does not belong to the receiver")
    if offered.user_id != sender_id:
        raise ProposalValidationError("Please select an item of your own to offer")
    if target.status != ListingStatus.ACTIVE.value:
        raise ListingNotAvailableError(target.id, target.status)
    if offered.status != ListingStatus.ACTIVE.value:
        raise ListingNotAvailableError(offered.id, offered.status)


def validate_response_status(new_status: str) -> None:
    if new_status not in RESPONSE_STATUSES:
        raise ProposalValidationError(
            f"Invalid status {new_status!r}; expected one of {sorted(RESPONSE_STATUSES)}"
        )


def check_can_respond(kind: str, offer: TradeProposal, acting_user_id: str) -> None:
    """Only the receiver responds, and only while the offer is pending."""
    if offer.receiver_id != acting_user_id:
        raise ProposalForbiddenError(kind, offer.id)
    if offer.status != ProposalStatus.PENDING.value:
        raise ProposalAlreadyRespondedError(kind, offer.id, offer.status)
