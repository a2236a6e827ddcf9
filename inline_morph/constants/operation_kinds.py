"""触发字段解析的操作类型常量."""

from enum import Enum


class OperationKind(str, Enum):
    """管理界面操作类型.

    决定从资源定义中取哪一组字段:创建、编辑、详情、列表,或兜底的全部可用字段.
    """

    CREATION = "creation"
    UPDATE = "update"
    DETAIL = "detail"
    INDEX = "index"
    GENERIC = "generic"

    @property
    def is_write(self) -> bool:
        """是否为写操作(创建或编辑)."""
        return self in (OperationKind.CREATION, OperationKind.UPDATE)
