"""bt_review REST endpoints.

POST /reviews                      — review another member
POST /reviews/{review_id}/replies  — reply to a review (reviewer or reviewed user)
GET  /users/{user_id}/reviews      — reviews a member has received, with replies
POST /trades/{trade_id}/rating     — rate the other party of a completed trade
GET  /users/{user_id}/ratings      — a member's ratings and average
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.bt_common.database import get_db_session
from src.bt_common.response import ApiResponse, success_response
from src.bt_gateway.auth.dependencies import get_current_user
from src.bt_gateway.user.db_models import UserModel
from src.bt_review.application.schemas import (
    CreateReviewRequest,
    RateTradeRequest,
    ReplyRequest,
)
from src.bt_review.application.service import get_review_service

router = APIRouter(tags=["reviews"])

_service = get_review_service()


@router.post("/reviews", status_code=201)
async def create_review(
    body: CreateReviewRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    review = await _service.create_review(
        db, str(current_user.id), body.target_user_id, body.rating, body.comment, body.trade_id
    )
    resp = success_response(review.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/reviews/{review_id}/replies", status_code=201)
async def reply_to_review(
    review_id: str,
    body: ReplyRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    reply = await _service.reply(db, review_id, str(current_user.id), body.reply)
    resp = success_response(reply.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/users/{user_id}/reviews")
async def list_reviews(
    user_id: str,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    reviews = await _service.list_reviews(db, user_id)
    resp = success_response({"items": [r.model_dump() for r in reviews]})
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/trades/{trade_id}/rating", status_code=201)
async def rate_trade(
    trade_id: str,
    body: RateTradeRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    rating = await _service.rate_trade(
        db, trade_id, str(current_user.id), body.rating, body.comment
    )
    resp = success_response(rating.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/users/{user_id}/ratings")
async def list_ratings(
    user_id: str,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    ratings = await _service.list_ratings(db, user_id)
    resp = success_response(ratings.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
