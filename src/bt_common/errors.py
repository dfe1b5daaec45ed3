"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User
  2xxx: Listing
  3xxx: Trade (proposals, exchange requests, trade confirmations)
  4xxx: Messaging
  5xxx: Notification
  6xxx: Moderation
  7xxx: Review
  9xxx: System

HTTP status by kind:
  NOT_FOUND -> 404, UNAUTHORIZED (not owner/participant) -> 403,
  VALIDATION -> 422, DUPLICATE -> 409, RATE_LIMITED -> 429, BANNED -> 403,
  SERVICE_UNAVAILABLE -> 503
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth/User ---

class EmailExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Email already exists", 409)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid email or password", 401)


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Account is disabled", 403)


class InvalidRefreshTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1005, "Refresh token is invalid or expired", 401)


class AdminRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(1006, "Admin role required", 403)


class UserNotFoundError(AppError):
    def __init__(self, user_id: str) -> None:
        super().__init__(1007, f"User not found: {user_id}", 404)


# --- 2xxx: Listing ---

class ListingNotFoundError(AppError):
    def __init__(self, listing_id: str) -> None:
        super().__init__(2001, f"Listing not found: {listing_id}", 404)


class ListingValidationError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2002, detail, 422)


class ListingForbiddenError(AppError):
    def __init__(self, listing_id: str) -> None:
        super().__init__(2003, f"Not the owner of listing {listing_id}", 403)


class ListingNotAvailableError(AppError):
    def __init__(self, listing_id: str, status: str) -> None:
        super().__init__(
            2004, f"Listing {listing_id} in status {status} is not available for trade", 422
        )


# --- 3xxx: Trade ---

class ProposalNotFoundError(AppError):
    def __init__(self, kind: str, proposal_id: str) -> None:
        super().__init__(3001, f"{kind} not found: {proposal_id}", 404)


class SelfTradeError(AppError):
    def __init__(self) -> None:
        super().__init__(3002, "Cannot trade with yourself", 422)


class ProposalValidationError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3003, detail, 422)


class ProposalForbiddenError(AppError):
    def __init__(self, kind: str, proposal_id: str) -> None:
        super().__init__(3004, f"Only the receiver can respond to {kind} {proposal_id}", 403)


class ProposalAlreadyRespondedError(AppError):
    def __init__(self, kind: str, proposal_id: str, status: str) -> None:
        super().__init__(3005, f"{kind} {proposal_id} was already {status}", 422)


class TradeNotFoundError(AppError):
    def __init__(self, trade_id: str) -> None:
        super().__init__(3006, f"Trade not found: {trade_id}", 404)


class TradeForbiddenError(AppError):
    def __init__(self, trade_id: str) -> None:
        super().__init__(3007, f"Not a participant of trade {trade_id}", 403)


class TradeAlreadyConfirmedError(AppError):
    def __init__(self) -> None:
        super().__init__(3008, "You have already confirmed this trade", 422)


# --- 4xxx: Messaging ---

class ConversationNotFoundError(AppError):
    def __init__(self, conversation_id: str) -> None:
        super().__init__(4001, f"Conversation not found: {conversation_id}", 404)


class ConversationForbiddenError(AppError):
    def __init__(self) -> None:
        super().__init__(
            4002, "You are not authorized to send messages in this conversation", 403
        )


class MessageValidationError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(4003, detail, 422)


class MessageNotSentError(AppError):
    def __init__(self) -> None:
        super().__init__(4004, "Failed to send any messages", 500)


class BlockedByUserError(AppError):
    def __init__(self) -> None:
        super().__init__(4005, "You are blocked by this user", 403)


class SelfConversationError(AppError):
    def __init__(self) -> None:
        super().__init__(4006, "Cannot start a conversation with yourself", 422)


# --- 5xxx: Notification ---

class NotificationNotFoundError(AppError):
    def __init__(self, notification_id: str) -> None:
        super().__init__(5001, f"Notification not found: {notification_id}", 404)


# --- 6xxx: Moderation ---

class UserBannedError(AppError):
    def __init__(self) -> None:
        super().__init__(6001, "Your account is suspended", 403)


class SpamDetectedError(AppError):
    def __init__(self) -> None:
        super().__init__(6002, "Message flagged as spam", 429)


class ModerationValidationError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(6003, detail, 422)


class ReportNotFoundError(AppError):
    def __init__(self, report_id: str) -> None:
        super().__init__(6004, f"Report not found: {report_id}", 404)


class ReportAlreadyResolvedError(AppError):
    def __init__(self, report_id: str, status: str) -> None:
        super().__init__(6005, f"Report {report_id} already resolved as {status}", 422)


# --- 7xxx: Review ---

class ReviewValidationError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(7001, detail, 422)


class ReviewNotFoundError(AppError):
    def __init__(self, review_id: str) -> None:
        super().__init__(7002, f"Review not found: {review_id}", 404)


class ReviewForbiddenError(AppError):
    def __init__(self, review_id: str) -> None:
        super().__init__(
            7003, f"Only the reviewer or the reviewed user may reply to review {review_id}", 403
        )


class DuplicateRatingError(AppError):
    def __init__(self, trade_id: str) -> None:
        super().__init__(7004, f"You have already rated trade {trade_id}", 409)


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self) -> None:
        super().__init__(9001, "Rate limit exceeded", 429)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class ServiceUnavailableError(AppError):
    def __init__(self, detail: str = "Service temporarily unavailable") -> None:
        super().__init__(9003, detail, 503)
