"""视图层的异常收口与结构化日志.

资源表单接口统一通过 ``safe_route_call`` 执行业务闭包,它同时是一次请求的事务边界:
闭包成功则提交会话,失败则回滚.业务异常记 warning 后原样抛出,交给全局错误处理器渲染;
未预期的异常记 error 并包装为对外文案统一的 AppError.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal, TypedDict, TypeVar, Unpack

from werkzeug.exceptions import HTTPException

from inline_morph import db
from inline_morph.errors import AppError
from inline_morph.utils.structlog_config import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from inline_morph.types import ContextDict, LoggerExtra

R = TypeVar("R")
LogLevel = Literal["debug", "info", "warning", "error", "critical"]
PASSTHROUGH_EXCEPTIONS: tuple[type[BaseException], ...] = (AppError, HTTPException)


class LogContextOptions(TypedDict, total=False):
    context: ContextDict | None
    extra: LoggerExtra | None


class RouteSafetyOptions(LogContextOptions, total=False):
    """safe_route_call 的可选配置."""

    expected_exceptions: tuple[type[BaseException], ...]
    fallback_exception: type[AppError]
    log_event: str


def log_with_context(
    level: LogLevel,
    event: str,
    *,
    module: str,
    action: str,
    **options: Unpack[LogContextOptions],
) -> None:
    """输出带 module/action 字段的结构化日志,context 与 extra 平铺合并."""
    fields: dict[str, Any] = {"module": module, "action": action}
    fields.update(options.get("context") or {})
    fields.update(options.get("extra") or {})
    log_method = getattr(get_logger("app"), level, None) or get_logger("app").error
    log_method(event, **fields)


def safe_route_call(
    func: Callable[..., R],
    *,
    module: str,
    action: str,
    public_error: str,
    func_args: tuple[Any, ...] | None = None,
    func_kwargs: dict[str, Any] | None = None,
    **options: Unpack[RouteSafetyOptions],
) -> R:
    """执行视图业务闭包并收口异常.

    Args:
        func: 业务闭包.
        module: 日志模块名.
        action: 动作名,例如 ``post_form_create``.
        public_error: 未预期异常时对外暴露的文案.
        func_args: 位置参数.
        func_kwargs: 关键字参数.
        **options: context、extra、expected_exceptions、fallback_exception、log_event.

    Returns:
        业务闭包的返回值.

    Raises:
        AppError: 业务异常原样抛出;其它异常(包括提交失败)包装为 fallback_exception(缺省 AppError).

    """
    passthrough = PASSTHROUGH_EXCEPTIONS + tuple(options.get("expected_exceptions") or ())
    event = options.get("log_event") or f"{action}执行失败"
    context: ContextDict = dict(options.get("context") or {})
    extra: dict[str, Any] = dict(options.get("extra") or {})
    fallback = options.get("fallback_exception", AppError)

    try:
        result = func(*(func_args or ()), **(func_kwargs or {}))
    except passthrough as exc:
        db.session.rollback()
        extra.update(error_type=type(exc).__name__, error_message=str(exc))
        log_with_context("warning", event, module=module, action=action, context=context, extra=extra)
        raise
    except Exception as exc:
        db.session.rollback()
        extra.update(error_type=type(exc).__name__, unexpected=True)
        log_with_context("error", event, module=module, action=action, context=context, extra=extra)
        raise fallback(public_error) from exc

    try:
        db.session.commit()
    except Exception as exc:
        db.session.rollback()
        extra.update(error_type=type(exc).__name__, unexpected=True, commit_failed=True)
        log_with_context("error", event, module=module, action=action, context=context, extra=extra)
        raise fallback(public_error) from exc
    return result
