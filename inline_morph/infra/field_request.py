"""字段解析使用的请求上下文.

把当前操作类型、提交的 payload 与路由参数收拢为一个对象,核心逻辑只依赖它,
不直接读取 Flask 全局的 ``request``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, cast

from flask import current_app, has_app_context, request

from inline_morph.settings import DEFAULT_ROUTE_RESOURCE_PARAM

if TYPE_CHECKING:
    from inline_morph.constants import OperationKind
    from inline_morph.types import PayloadMapping, PayloadValue

_MISSING = object()


@dataclass(slots=True)
class FieldRequest:
    """一次操作内的请求上下文.

    Attributes:
        operation: 操作信号,可以是 OperationKind 或字符串标签,由 ContextResolver 归类.
        payload: 提交的表单数据(写操作).
        route_params: 路由参数.由 Flask 请求构造时与 ``request.view_args`` 为同一个字典.
        route_resource_param: 路由参数中表示"当前资源"的键名.

    """

    operation: OperationKind | str | None = None
    payload: PayloadMapping = field(default_factory=dict)
    route_params: dict[str, object] = field(default_factory=dict)
    route_resource_param: str = DEFAULT_ROUTE_RESOURCE_PARAM
    _resource_stack: list[object] = field(default_factory=list, repr=False)

    @classmethod
    def from_flask(cls, operation: OperationKind | str | None = None) -> FieldRequest:
        """基于当前 Flask 请求构造上下文.

        Args:
            operation: 调用方显式传入的操作信号.

        Returns:
            FieldRequest: route_params 直接引用 ``request.view_args``.

        """
        if request.is_json:
            payload = cast("PayloadMapping", request.get_json(silent=True) or {})
        else:
            payload = cast("PayloadMapping", request.form.to_dict())

        if request.view_args is None:
            request.view_args = {}
        param = DEFAULT_ROUTE_RESOURCE_PARAM
        if has_app_context():
            param = str(current_app.config.get("MORPH_ROUTE_RESOURCE_PARAM", DEFAULT_ROUTE_RESOURCE_PARAM))
        return cls(
            operation=operation,
            payload=payload,
            route_params=cast("dict[str, object]", request.view_args),
            route_resource_param=param,
        )

    def input(self, key: str, default: PayloadValue = None) -> PayloadValue:
        """读取提交的字段值."""
        return self.payload.get(key, default)

    def exists(self, key: str) -> bool:
        """payload 中是否提交了该字段."""
        return key in self.payload

    @property
    def route_resource(self) -> str | None:
        """当前路由上的资源标识."""
        value = self.route_params.get(self.route_resource_param)
        return None if value is None else str(value)

    @property
    def resource_scope_depth(self) -> int:
        """尚未恢复的资源标识改写层数."""
        return len(self._resource_stack)

    def push_route_resource(self, identifier: str) -> None:
        """记录原值后改写路由上的资源标识,需与 pop_route_resource 成对调用."""
        previous = self.route_params.get(self.route_resource_param, _MISSING)
        self._resource_stack.append(previous)
        self.route_params[self.route_resource_param] = identifier

    def pop_route_resource(self) -> None:
        """恢复最近一次 push 之前的资源标识."""
        previous = self._resource_stack.pop()
        if previous is _MISSING:
            self.route_params.pop(self.route_resource_param, None)
        else:
            self.route_params[self.route_resource_param] = previous
