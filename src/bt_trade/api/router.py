"""bt_trade REST endpoints.

GET  /trade-proposals                           — sent or received, newest first
POST /trade-proposals                           — propose offered listing for target
GET  /trade-proposals/for-listing/{listing_id}  — caller's latest proposal on a listing
POST /trade-proposals/{proposal_id}/respond     — receiver accepts or declines

GET  /exchange-requests                          (same shape)
POST /exchange-requests
GET  /exchange-requests/for-listing/{listing_id}
POST /exchange-requests/{request_id}/respond    — accept returns the conversation

GET  /trades                                    — caller's trades
POST /trades                                    — start a completion confirmation
POST /trades/{trade_id}/confirm                 — confirm receipt
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.bt_common.database import get_db_session
from src.bt_common.response import ApiResponse, success_response
from src.bt_gateway.auth.dependencies import get_current_user
from src.bt_gateway.user.db_models import UserModel
from src.bt_trade.application.exchange_service import get_exchange_service
from src.bt_trade.application.proposal_service import get_proposal_service
from src.bt_trade.application.schemas import (
    ConfirmTradeRequest,
    CreateOfferRequest,
    CreateTradeRequest,
    RespondOfferRequest,
)
from src.bt_trade.application.trade_service import get_trade_service

proposals_router = APIRouter(prefix="/trade-proposals", tags=["trade-proposals"])
exchange_router = APIRouter(prefix="/exchange-requests", tags=["exchange-requests"])
trades_router = APIRouter(prefix="/trades", tags=["trades"])

_proposals = get_proposal_service()
_exchanges = get_exchange_service()
_trades = get_trade_service()


# ---------------------------------------------------------------------------
# Trade proposals
# ---------------------------------------------------------------------------


@proposals_router.get("")
async def list_proposals(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    items = await _proposals.list_for_user(db, str(current_user.id))
    resp = success_response({"items": [i.model_dump() for i in items]})
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@proposals_router.post("", status_code=201)
async def create_proposal(
    body: CreateOfferRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _proposals.create(
        db,
        str(current_user.id),
        body.receiver_id,
        body.target_listing_id,
        body.offered_listing_id,
        body.message,
    )
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@proposals_router.get("/for-listing/{listing_id}")
async def proposal_for_listing(
    listing_id: str,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _proposals.get_for_listing(db, listing_id, str(current_user.id))
    resp = success_response(result.model_dump() if result else None)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@proposals_router.post("/{proposal_id}/respond")
async def respond_proposal(
    proposal_id: str,
    body: RespondOfferRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _proposals.update_status(db, proposal_id, body.status, str(current_user.id))
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


# ---------------------------------------------------------------------------
# Exchange requests
# ---------------------------------------------------------------------------


@exchange_router.get("")
async def list_exchange_requests(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    items = await _exchanges.list_for_user(db, str(current_user.id))
    resp = success_response({"items": [i.model_dump() for i in items]})
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@exchange_router.post("", status_code=201)
async def create_exchange_request(
    body: CreateOfferRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _exchanges.create(
        db,
        str(current_user.id),
        body.receiver_id,
        body.target_listing_id,
        body.offered_listing_id,
        body.message,
    )
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@exchange_router.get("/for-listing/{listing_id}")
async def exchange_request_for_listing(
    listing_id: str,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _exchanges.get_for_listing(db, listing_id, str(current_user.id))
    resp = success_response(result.model_dump() if result else None)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@exchange_router.post("/{request_id}/respond")
async def respond_exchange_request(
    request_id: str,
    body: RespondOfferRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _exchanges.update_status(db, request_id, body.status, str(current_user.id))
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


# ---------------------------------------------------------------------------
# Trades
# ---------------------------------------------------------------------------


@trades_router.get("")
async def list_trades(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    items = await _trades.list_for_user(db, str(current_user.id))
    resp = success_response({"items": [i.model_dump() for i in items]})
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@trades_router.post("", status_code=201)
async def create_trade(
    body: CreateTradeRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _trades.create(
        db,
        str(current_user.id),
        body.receiver_id,
        body.listing_id,
        body.initiator_item,
        body.receiver_item,
    )
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@trades_router.post("/{trade_id}/confirm")
async def confirm_trade(
    trade_id: str,
    body: ConfirmTradeRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _trades.confirm_completion(
        db, trade_id, str(current_user.id), body.comment, body.rating
    )
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
