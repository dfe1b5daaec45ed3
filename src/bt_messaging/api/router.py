"""bt_messaging REST endpoints.

GET  /conversations                              — caller's conversations with previews
POST /conversations                              — find-or-create with another user
GET  /conversations/{conversation_id}            — detail (participants only)
GET  /conversations/{conversation_id}/messages   — full history, oldest first
POST /conversations/{conversation_id}/messages   — send text and/or images
POST /messages/read                              — mark messages addressed to caller as read
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.bt_common.database import get_db_session
from src.bt_common.response import ApiResponse, success_response
from src.bt_gateway.auth.dependencies import get_current_user
from src.bt_gateway.user.db_models import UserModel
from src.bt_messaging.application.schemas import (
    ConversationOut,
    MarkMessagesReadRequest,
    MarkMessagesReadResponse,
    MessageListResponse,
    MessageOut,
    SendMessageRequest,
    StartConversationRequest,
)
from src.bt_messaging.application.service import get_messaging_service

router = APIRouter(prefix="/conversations", tags=["messaging"])
messages_router = APIRouter(prefix="/messages", tags=["messaging"])

_service = get_messaging_service()


@router.get("")
async def list_conversations(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    conversations = await _service.list_for_user(db, str(current_user.id))
    resp = success_response(
        {"items": [ConversationOut.from_domain(c).model_dump() for c in conversations]}
    )
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("", status_code=201)
async def start_conversation(
    body: StartConversationRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    conversation = await _service.open_conversation(db, str(current_user.id), body.other_user_id)
    resp = success_response(ConversationOut.from_domain(conversation).model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{conversation_id}")
async def get_conversation(
    conversation_id: str,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    conversation = await _service.get_by_id(db, conversation_id, str(current_user.id))
    resp = success_response(ConversationOut.from_domain(conversation).model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{conversation_id}/messages")
async def list_messages(
    conversation_id: str,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    messages = await _service.list_messages(db, conversation_id, str(current_user.id))
    result = MessageListResponse(items=[MessageOut.from_domain(m) for m in messages])
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{conversation_id}/messages", status_code=201)
async def send_message(
    conversation_id: str,
    body: SendMessageRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    messages = await _service.send_message(
        db, str(current_user.id), conversation_id, body.content, body.image_urls
    )
    result = MessageListResponse(items=[MessageOut.from_domain(m) for m in messages])
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@messages_router.post("/read")
async def mark_messages_read(
    body: MarkMessagesReadRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    updated = await _service.mark_as_read(db, str(current_user.id), body.message_ids)
    resp = success_response(MarkMessagesReadResponse(updated=updated).model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
