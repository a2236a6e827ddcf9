"""inline-morph-to - 统一异常定义.

字段配置、校验、填充与持久化各阶段的异常,连同分类、严重度与 HTTP 状态码.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import TYPE_CHECKING, TypedDict, Unpack

from werkzeug.exceptions import HTTPException

from inline_morph.constants import HttpStatus
from inline_morph.constants.system_constants import ErrorCategory, ErrorMessages, ErrorSeverity

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from inline_morph.types import LoggerExtra


class AppErrorKwargs(TypedDict, total=False):
    message_key: str | None
    extra: LoggerExtra | None
    severity: ErrorSeverity | None
    category: ErrorCategory | None
    status_code: int | None


@dataclass(slots=True)
class ExceptionMetadata:
    """异常类的默认元信息."""

    status_code: int
    category: ErrorCategory
    severity: ErrorSeverity
    default_message_key: str


@dataclass(slots=True)
class AppErrorOptions:
    """覆盖异常默认元信息的可选项,字段为 None 表示沿用默认值."""

    message_key: str | None = None
    extra: LoggerExtra | None = None
    severity: ErrorSeverity | None = None
    category: ErrorCategory | None = None
    status_code: int | None = None


_OPTION_NAMES = frozenset(item.name for item in fields(AppErrorOptions))


class AppError(Exception):
    """项目异常基类.

    Args:
        message: 错误文案,为空时取 ``ErrorMessages`` 中 message_key 对应的文案.
        options: 覆盖默认元信息的配置对象.
        **overrides: 与 AppErrorOptions 同名的关键字参数,优先于 options.

    Raises:
        ValueError: 传入未知的关键字参数时抛出.

    """

    metadata = ExceptionMetadata(
        status_code=HttpStatus.INTERNAL_SERVER_ERROR,
        category=ErrorCategory.SYSTEM,
        severity=ErrorSeverity.HIGH,
        default_message_key="INTERNAL_ERROR",
    )

    def __init__(
        self,
        message: str | None = None,
        *,
        options: AppErrorOptions | None = None,
        **overrides: Unpack[AppErrorKwargs],
    ) -> None:
        unknown = set(overrides) - _OPTION_NAMES
        if unknown:
            msg = f"AppError 不支持的参数: {', '.join(sorted(unknown))}"
            raise ValueError(msg)

        resolved = replace(options or AppErrorOptions(), **overrides)
        self.message_key = resolved.message_key or self.metadata.default_message_key
        self.message = message or getattr(ErrorMessages, self.message_key, ErrorMessages.INTERNAL_ERROR)
        self.extra = dict(resolved.extra or {})
        self.severity = resolved.severity or self.metadata.severity
        self.category = resolved.category or self.metadata.category
        self.status_code = resolved.status_code or self.metadata.status_code
        super().__init__(self.message)

    @property
    def recoverable(self) -> bool:
        """严重度为 LOW 或 MEDIUM 的异常可由调用方修正后重试."""
        return self.severity in (ErrorSeverity.LOW, ErrorSeverity.MEDIUM)


class ConfigurationError(AppError):
    """表示字段或资源的声明不合法.

    例如候选类型标识重复、模型缺少多态关联.属于部署期错误,不应在请求内恢复.
    """

    metadata = ExceptionMetadata(
        status_code=HttpStatus.INTERNAL_SERVER_ERROR,
        category=ErrorCategory.CONFIGURATION,
        severity=ErrorSeverity.CRITICAL,
        default_message_key="CONFIGURATION_ERROR",
    )


class UnregisteredTypeError(ConfigurationError):
    """表示关联对象或提交的类型标识不在候选类型注册表中.

    读路径上说明注册表与已存数据发生漂移;写路径上说明提交了未声明的类型.
    """

    metadata = ExceptionMetadata(
        status_code=HttpStatus.UNPROCESSABLE_ENTITY,
        category=ErrorCategory.CONFIGURATION,
        severity=ErrorSeverity.HIGH,
        default_message_key="UNREGISTERED_TYPE",
    )


class ValidationError(AppError):
    """表示关联对象的字段校验失败.

    ``violations`` 汇总了所有字段级错误,供调用方结构化展示,默认返回 400.
    """

    metadata = ExceptionMetadata(
        status_code=HttpStatus.BAD_REQUEST,
        category=ErrorCategory.VALIDATION,
        severity=ErrorSeverity.LOW,
        default_message_key="VALIDATION_ERROR",
    )

    def __init__(
        self,
        message: str | None = None,
        *,
        violations: Iterable[Mapping[str, str]] | None = None,
        options: AppErrorOptions | None = None,
        **overrides: Unpack[AppErrorKwargs],
    ) -> None:
        self.violations: list[dict[str, str]] = [dict(item) for item in (violations or [])]
        super().__init__(message, options=options, **overrides)

    @property
    def fields(self) -> list[str]:
        """出错的字段名,保持首次出现顺序."""
        seen: list[str] = []
        for violation in self.violations:
            name = violation.get("field", "")
            if name not in seen:
                seen.append(name)
        return seen


class FillError(AppError):
    """表示字段向关联对象写值时失败.

    发生在校验通过之后、持久化之前;已由字段自行保存的嵌套对象不会被回滚.
    """

    metadata = ExceptionMetadata(
        status_code=HttpStatus.INTERNAL_SERVER_ERROR,
        category=ErrorCategory.BUSINESS,
        severity=ErrorSeverity.HIGH,
        default_message_key="FILL_FAILED",
    )


class PersistenceError(AppError):
    """表示存储层拒绝保存关联对象(约束冲突、连接失败等),不自动重试."""

    metadata = ExceptionMetadata(
        status_code=HttpStatus.INTERNAL_SERVER_ERROR,
        category=ErrorCategory.DATABASE,
        severity=ErrorSeverity.HIGH,
        default_message_key="PERSISTENCE_FAILED",
    )


class NotFoundError(AppError):
    """表示客户端请求的资源不存在或被删除,默认返回 404."""

    metadata = ExceptionMetadata(
        status_code=HttpStatus.NOT_FOUND,
        category=ErrorCategory.BUSINESS,
        severity=ErrorSeverity.LOW,
        default_message_key="RESOURCE_NOT_FOUND",
    )


EXCEPTION_STATUS_MAP: dict[type[BaseException], int] = {
    UnregisteredTypeError: UnregisteredTypeError.metadata.status_code,
    ConfigurationError: ConfigurationError.metadata.status_code,
    ValidationError: ValidationError.metadata.status_code,
    FillError: FillError.metadata.status_code,
    PersistenceError: PersistenceError.metadata.status_code,
    NotFoundError: NotFoundError.metadata.status_code,
}


def map_exception_to_status(error: Exception, default: int = HttpStatus.INTERNAL_SERVER_ERROR) -> int:
    """根据异常类型推导 HTTP 状态码.

    Args:
        error: 捕获到的异常对象.
        default: 无法匹配时的默认状态码.

    Returns:
        int: 与异常对应的 HTTP 状态码.

    """
    if isinstance(error, AppError):
        return error.status_code

    if isinstance(error, HTTPException):
        code = getattr(error, "code", None)
        if code is not None:
            return int(code)

    for exc_type, status in EXCEPTION_STATUS_MAP.items():
        if isinstance(error, exc_type):
            return status

    return default


__all__ = [
    "EXCEPTION_STATUS_MAP",
    "AppError",
    "AppErrorOptions",
    "ConfigurationError",
    "FillError",
    "NotFoundError",
    "PersistenceError",
    "UnregisteredTypeError",
    "ValidationError",
    "map_exception_to_status",
]
