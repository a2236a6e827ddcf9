"""structlog 配置与日志辅助函数.

所有模块通过 ``log_info``/``log_warning``/``log_error``/``log_debug`` 输出结构化日志,
统一带上 module 字段、请求 ID 与应用信息.调试日志受 ``ENABLE_DEBUG_LOG`` 控制.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, cast

import structlog
from flask import Flask, current_app, g, has_request_context

from inline_morph.constants.system_constants import ErrorSeverity
from inline_morph.settings import APP_NAME, APP_VERSION
from inline_morph.types import ContextDict, JsonValue, LoggerExtra, StructlogEventDict
from inline_morph.utils.logging.context_vars import request_id_var
from inline_morph.utils.logging.error_adapter import (
    ErrorContext,
    ErrorMetadata,
    build_public_context,
    derive_error_metadata,
)

if TYPE_CHECKING:
    from structlog.typing import BindableLogger, Processor

LogField = JsonValue | ContextDict | LoggerExtra
ErrorPayload = dict[str, LogField]


class StructlogConfig:
    """structlog 处理器链的一次性配置.

    Attributes:
        debug_enabled: 未处于 Flask 应用上下文时使用的调试日志开关.
        configured: 处理器链是否已安装.

    """

    def __init__(self) -> None:
        self.debug_enabled = False
        self.configured = False

    def configure(self, app: Flask | None = None) -> None:
        """安装处理器链,重复调用只刷新调试开关."""
        if not self.configured:
            processors: list[Processor] = [
                self._drop_disabled_debug,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.stdlib.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                self._add_request_context,
                self._add_app_context,
                self._renderer(),
            ]
            structlog.configure(
                processors=processors,
                context_class=dict,
                logger_factory=structlog.stdlib.LoggerFactory(),
                wrapper_class=structlog.stdlib.BoundLogger,
                cache_logger_on_first_use=True,
            )
            self.configured = True

        if app is not None:
            self.debug_enabled = bool(app.config.get("ENABLE_DEBUG_LOG", False))

    def _drop_disabled_debug(
        self,
        _logger: BindableLogger,
        method_name: str,
        event_dict: StructlogEventDict,
    ) -> StructlogEventDict:
        if method_name == "debug" and not self.debug_enabled:
            raise structlog.DropEvent
        return event_dict

    @staticmethod
    def _add_request_context(
        _logger: BindableLogger,
        _method_name: str,
        event_dict: StructlogEventDict,
    ) -> StructlogEventDict:
        if has_request_context():
            event_dict.setdefault("request_id", request_id_var.get())
            event_dict.setdefault("endpoint", getattr(g, "endpoint", None))
        return event_dict

    @staticmethod
    def _add_app_context(
        logger: BindableLogger,
        _method_name: str,
        event_dict: StructlogEventDict,
    ) -> StructlogEventDict:
        try:
            config = current_app.config
        except RuntimeError:
            event_dict["app_name"] = APP_NAME
            event_dict["app_version"] = APP_VERSION
        else:
            event_dict["app_name"] = config.get("APP_NAME", APP_NAME)
            event_dict["app_version"] = config.get("APP_VERSION", APP_VERSION)
            event_dict["environment"] = config.get("ENV", "development")
        event_dict["logger_name"] = getattr(logger, "name", "unknown")
        return event_dict

    @staticmethod
    def _renderer() -> Processor:
        if sys.stdout.isatty():
            return structlog.dev.ConsoleRenderer(colors=True)
        return structlog.processors.JSONRenderer(ensure_ascii=False)


structlog_config = StructlogConfig()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """获取结构化日志记录器,首次调用时安装处理器链."""
    structlog_config.configure()
    return cast("structlog.stdlib.BoundLogger", structlog.get_logger(name))


def configure_structlog(app: Flask) -> None:
    """按应用配置刷新 structlog,并记录应用上下文销毁时的异常."""
    structlog_config.configure(app)

    @app.teardown_appcontext
    def _log_teardown_error(exception: BaseException | None) -> None:
        if exception is not None:
            get_logger("app").error("应用请求处理异常", module="system", exception=str(exception))


def should_log_debug() -> bool:
    try:
        return bool(current_app.config.get("ENABLE_DEBUG_LOG", False))
    except RuntimeError:
        return structlog_config.debug_enabled


def _emit(level: str, message: str, module: str, exception: BaseException | None, **kwargs: LogField) -> None:
    log_method = getattr(get_logger("app"), level)
    if exception is None:
        log_method(message, module=module, **kwargs)
    elif level in {"error", "critical"}:
        log_method(message, module=module, error=str(exception), exc_info=exception, **kwargs)
    else:
        log_method(message, module=module, exception=str(exception), **kwargs)


def log_info(message: str, module: str = "app", **kwargs: LogField) -> None:
    """记录信息级别日志.

    Example:
        >>> log_info("多态关联已保存", module="inline_morph", resource="video")

    """
    _emit("info", message, module, None, **kwargs)


def log_warning(message: str, module: str = "app", exception: Exception | None = None, **kwargs: LogField) -> None:
    _emit("warning", message, module, exception, **kwargs)


def log_error(message: str, module: str = "app", exception: Exception | None = None, **kwargs: LogField) -> None:
    """记录错误级别日志,传入异常时附带堆栈."""
    _emit("error", message, module, exception, **kwargs)


def log_critical(message: str, module: str = "app", exception: Exception | None = None, **kwargs: LogField) -> None:
    _emit("critical", message, module, exception, **kwargs)


def log_debug(message: str, module: str = "app", **kwargs: LogField) -> None:
    """记录调试日志,未开启 ENABLE_DEBUG_LOG 时直接返回."""
    if should_log_debug():
        _emit("debug", message, module, None, **kwargs)


def get_system_logger() -> structlog.stdlib.BoundLogger:
    return get_logger("system")


_SEVERITY_LOGGERS = {
    ErrorSeverity.CRITICAL: log_critical,
    ErrorSeverity.HIGH: log_error,
}


def enhanced_error_handler(
    error: Exception,
    context: ErrorContext | None = None,
    *,
    extra: LoggerExtra | None = None,
) -> ErrorPayload:
    """把异常整理为错误响应载荷,并按严重度记录日志.

    Args:
        error: 异常对象.
        context: 错误上下文,缺省时自动采集当前请求.
        extra: 附加到载荷上的信息.

    Returns:
        包含错误编号、分类、严重度、文案与公开上下文的字典.

    """
    context = context or ErrorContext(error)
    metadata = derive_error_metadata(error)
    payload: ErrorPayload = {
        "error": True,
        "error_id": context.error_id,
        "category": metadata.category.value,
        "severity": metadata.severity.value,
        "message_code": metadata.message_key,
        "message": metadata.message,
        "timestamp": context.timestamp.isoformat(),
        "recoverable": metadata.recoverable,
        "context": build_public_context(context),
    }
    if extra:
        payload["extra"] = dict(extra)

    _log_error_payload(error, metadata, payload)
    return payload


def _log_error_payload(error: Exception, metadata: ErrorMetadata, payload: ErrorPayload) -> None:
    log = _SEVERITY_LOGGERS.get(metadata.severity, log_warning)
    log(
        str(payload["message"]),
        module="error_handler",
        exception=error,
        error_id=payload["error_id"],
        category=payload["category"],
        severity=payload["severity"],
    )


__all__ = [
    "ErrorContext",
    "ErrorMetadata",
    "configure_structlog",
    "enhanced_error_handler",
    "get_logger",
    "get_system_logger",
    "log_critical",
    "log_debug",
    "log_error",
    "log_info",
    "log_warning",
    "should_log_debug",
]
