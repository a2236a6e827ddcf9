"""错误响应与错误日志共用的上下文采集."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from flask import current_app, has_request_context, request
from werkzeug.exceptions import HTTPException

from inline_morph.constants import HttpStatus
from inline_morph.constants.system_constants import ErrorCategory, ErrorMessages, ErrorSeverity
from inline_morph.errors import AppError
from inline_morph.settings import DEFAULT_ROUTE_RESOURCE_PARAM
from inline_morph.utils.logging.context_vars import request_id_var


@dataclass(slots=True)
class ErrorContext:
    """一次异常的采集结果.

    Attributes:
        error: 捕获的异常.
        request: 产生异常的 Flask 请求,不在请求内时为 None.
        error_id: 对外暴露的错误编号.
        request_id: 取自 contextvars 的请求 ID.
        resource: 路由上的资源标识.

    """

    error: Exception
    request: Any | None = None
    error_id: str = field(default_factory=lambda: uuid4().hex)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    request_id: str | None = field(default_factory=request_id_var.get)
    url: str | None = None
    method: str | None = None
    resource: str | None = None

    def ensure_request(self) -> None:
        """从当前请求补齐 url、method 与资源标识."""
        if self.request is None and has_request_context():
            self.request = request
        if self.request is None:
            return

        self.url = getattr(self.request, "url", self.url)
        self.method = getattr(self.request, "method", self.method)
        view_args = getattr(self.request, "view_args", None) or {}
        param = current_app.config.get("MORPH_ROUTE_RESOURCE_PARAM", DEFAULT_ROUTE_RESOURCE_PARAM)
        resource = view_args.get(param)
        self.resource = None if resource is None else str(resource)


@dataclass(slots=True)
class ErrorMetadata:
    """错误分类结果."""

    status_code: int
    category: ErrorCategory
    severity: ErrorSeverity
    message_key: str
    message: str
    recoverable: bool


def derive_error_metadata(error: Exception) -> ErrorMetadata:
    """推导异常的状态码、分类与严重度.

    AppError 直接取自身元数据;HTTPException 按 4xx/5xx 区分;其余一律视为系统错误.
    """
    if isinstance(error, AppError):
        return ErrorMetadata(
            error.status_code,
            error.category,
            error.severity,
            error.message_key,
            error.message,
            error.recoverable,
        )

    if isinstance(error, HTTPException):
        status_code = int(error.code or HttpStatus.INTERNAL_SERVER_ERROR)
        if status_code < HttpStatus.INTERNAL_SERVER_ERROR:
            message = error.description or ErrorMessages.INVALID_REQUEST
            return ErrorMetadata(
                status_code, ErrorCategory.BUSINESS, ErrorSeverity.MEDIUM, "INVALID_REQUEST", message, True
            )

    return ErrorMetadata(
        HttpStatus.INTERNAL_SERVER_ERROR,
        ErrorCategory.SYSTEM,
        ErrorSeverity.HIGH,
        "INTERNAL_ERROR",
        ErrorMessages.INTERNAL_ERROR,
        False,
    )


def build_public_context(context: ErrorContext) -> dict[str, Any]:
    """返回可以写进响应体的上下文字段."""
    context.ensure_request()
    payload: dict[str, Any] = {"request_id": context.request_id}
    for key in ("url", "method", "resource"):
        value = getattr(context, key)
        if value:
            payload[key] = value
    return payload


__all__ = ["ErrorContext", "ErrorMetadata", "build_public_context", "derive_error_metadata"]
