"""Envelope returned by every /api/v1 endpoint.

    {"code": 0, "message": "success", "data": {...},
     "timestamp": "2026-03-02T10:00:00+00:00", "request_id": "req_..."}

`code` is 0 on success and the AppError code otherwise; `data` is null on
error.
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from src.bt_common.errors import AppError


class ApiResponse(BaseModel):
    code: int = 0
    message: str = "success"
    data: Any = None
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    request_id: str = Field(default_factory=lambda: f"req_{uuid.uuid4().hex[:12]}")


def success_response(data: Any = None) -> ApiResponse:
    return ApiResponse(code=0, message="success", data=data)


def error_response(code: int, message: str) -> ApiResponse:
    return ApiResponse(code=code, message=message, data=None)


def error_response_for(exc: AppError, request_id: str | None = None) -> ApiResponse:
    resp = error_response(exc.code, exc.message)
    if request_id:
        resp.request_id = request_id
    return resp
