"""常量模块。

集中管理系统常量,包括错误消息、HTTP 状态码与操作类型。

主要常量:
- ErrorMessages: 错误消息常量
- HttpStatus: HTTP 状态码常量
- OperationKind: 触发字段解析的管理界面操作类型
"""

# 导入HTTP状态码常量（使用Python标准库）
from http import HTTPStatus as HttpStatus

from .operation_kinds import OperationKind
from .system_constants import (
    ErrorCategory,
    ErrorMessages,
    ErrorSeverity,
    LogLevel,
    SuccessMessages,
)

__all__ = [
    "ErrorCategory",
    "ErrorMessages",
    "ErrorSeverity",
    "HttpStatus",
    "LogLevel",
    "OperationKind",
    "SuccessMessages",
]
