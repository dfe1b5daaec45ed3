"""Tests for bt_common.errors and bt_common.response."""

from src.bt_common.errors import (
    AppError,
    BlockedByUserError,
    DuplicateRatingError,
    ListingForbiddenError,
    ListingNotFoundError,
    ProposalAlreadyRespondedError,
    ReportAlreadyResolvedError,
    SelfTradeError,
    ServiceUnavailableError,
    SpamDetectedError,
    UserBannedError,
)
from src.bt_common.response import error_response, success_response


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500
        assert isinstance(err, Exception)


class TestErrorKinds:
    def test_not_found_is_404(self) -> None:
        err = ListingNotFoundError("L-1")
        assert (err.code, err.http_status) == (2001, 404)
        assert "L-1" in err.message

    def test_not_owner_is_403(self) -> None:
        assert ListingForbiddenError("L-1").http_status == 403

    def test_validation_is_422(self) -> None:
        assert SelfTradeError().http_status == 422

    def test_already_responded_names_status(self) -> None:
        err = ProposalAlreadyRespondedError("Trade proposal", "p-1", "accepted")
        assert err.code == 3005
        assert "accepted" in err.message

    def test_report_already_resolved(self) -> None:
        err = ReportAlreadyResolvedError("r-1", "REJECTED")
        assert err.code == 6005
        assert "REJECTED" in err.message

    def test_banned_and_blocked_are_403(self) -> None:
        assert UserBannedError().http_status == 403
        assert BlockedByUserError().http_status == 403

    def test_spam_is_rate_limited(self) -> None:
        assert SpamDetectedError().http_status == 429

    def test_duplicate_rating_is_409(self) -> None:
        err = DuplicateRatingError("t-1")
        assert (err.code, err.http_status) == (7004, 409)

    def test_service_unavailable(self) -> None:
        err = ServiceUnavailableError()
        assert (err.code, err.http_status) == (9003, 503)


class TestApiResponse:
    def test_success(self) -> None:
        resp = success_response({"id": "abc"})
        assert resp.code == 0
        assert resp.message == "success"
        assert resp.data == {"id": "abc"}

    def test_error(self) -> None:
        resp = error_response(2001, "Listing not found: L-1")
        assert resp.code == 2001
        assert resp.data is None

    def test_serialization(self) -> None:
        d = success_response({"title": "Guitar"}).model_dump()
        assert set(d) == {"code", "message", "data", "timestamp", "request_id"}
        assert d["request_id"].startswith("req_")
