"""Global enums — must match DB CHECK constraints exactly.

Status casing follows the stored values: listing/report statuses are upper
case, proposal statuses and notification types are lower case.
"""

from enum import Enum


class ListingStatus(str, Enum):
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    PENDING_REVIEW = "PENDING_REVIEW"
    COMPLETED = "COMPLETED"


class ProposalStatus(str, Enum):
    """Shared by trade_proposals and exchange_requests."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class TradeStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"


class ReportStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class NotificationType(str, Enum):
    MESSAGE = "message"
    TRADE_REQUEST = "trade_request"
    TRADE_PROPOSAL = "trade_proposal"
    EXCHANGE_STARTED = "exchange_started"
    EXCHANGE_DECLINED = "exchange_declined"
    TRADE_PROPOSAL_ACCEPTED = "trade_proposal_accepted"
    TRADE_PROPOSAL_DECLINED = "trade_proposal_declined"
    TRADE = "trade"
    REVIEW = "review"
    LISTING = "listing"
