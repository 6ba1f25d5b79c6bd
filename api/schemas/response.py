"""
统一响应信封

分子与对话端点直接返回记录本身；
健康检查使用成功信封，所有错误使用错误信封:

    {
        "success": false,
        "code": 40401,
        "message": "Molecule not found",
        "error": {"type": "MoleculeNotFoundError", "detail": "...", "field": null},
        "timestamp": "2025-12-30T10:00:00Z",
        "request_id": "req_abc123"
    }

request_id 与响应头 X-Request-ID 一致。
"""
from datetime import datetime, timezone
from typing import Any, Generic, Optional, TypeVar
import uuid

from pydantic import BaseModel, Field
import structlog

T = TypeVar("T")


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def current_request_id() -> str:
    """当前请求绑定的 ID；不在请求中时生成一个新的"""
    bound = structlog.contextvars.get_contextvars().get("request_id")
    return bound or f"req_{uuid.uuid4().hex[:12]}"


class ErrorDetail(BaseModel):
    type: str = Field(..., description="异常类型")
    detail: str = Field(..., description="错误说明")
    field: Optional[str] = Field(None, description="出错字段")


class APIResponse(BaseModel, Generic[T]):
    """信封结构（用于 OpenAPI 文档）"""
    success: bool
    code: int
    message: str
    data: Optional[T] = None
    error: Optional[ErrorDetail] = None
    timestamp: str = Field(default_factory=_utc_timestamp)
    request_id: str = Field(default_factory=current_request_id)


def success_response(data: Any = None, message: str = "OK", code: int = 200) -> dict:
    return APIResponse[Any](success=True, code=code, message=message, data=data).model_dump(
        exclude={"error"}
    )


def error_response(
    message: str,
    code: int,
    error_type: str = "Error",
    detail: str = "",
    field: Optional[str] = None,
) -> dict:
    return APIResponse[Any](
        success=False,
        code=code,
        message=message,
        error=ErrorDetail(type=error_type, detail=detail, field=field),
    ).model_dump(exclude={"data"})
