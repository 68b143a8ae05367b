"""Error envelope for AppError responses.

Successful endpoints return their response model directly; failures raised as
AppError are rendered by the app-level handler as:
{
    "code": 4004,          // AppError code
    "status_code": 404,    // HTTP status mirrored in the body
    "message": "Order not found: ...",
    "data": null,
    "timestamp": "...",
    "request_id": "req_..." // same id as the X-Request-ID header
}
"""

import uuid
from typing import Any

from pydantic import BaseModel, Field

from src.bo_common.datetime_utils import utc_now


def new_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


class ApiResponse(BaseModel):
    code: int = 0
    status_code: int = 200
    message: str = "success"
    data: Any = None
    timestamp: str = Field(default_factory=lambda: utc_now().isoformat())
    request_id: str = Field(default_factory=new_request_id)


def error_response(
    code: int, message: str, status_code: int, request_id: str | None = None
) -> ApiResponse:
    resp = ApiResponse(code=code, status_code=status_code, message=message, data=None)
    if request_id:
        resp.request_id = request_id
    return resp
