"""定位父对象当前关联的实体及其候选类型."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from inline_morph.errors import UnregisteredTypeError

if TYPE_CHECKING:
    from inline_morph.morph.candidates import CandidateType, TypeRegistry
    from inline_morph.resources.registry import ResourceRegistry


class ActiveEntityLocator:
    """关联对象定位器.

    Args:
        registry: 字段的候选类型注册表.
        type_resolver: 按模型反查资源的注册表.

    """

    def __init__(self, registry: TypeRegistry, type_resolver: ResourceRegistry) -> None:
        self.registry = registry
        self.type_resolver = type_resolver

    def locate(self, parent: object, attribute: str) -> tuple[Any, CandidateType | None]:
        """返回 (关联对象, 候选类型),关联为空时返回 (None, None).

        Raises:
            UnregisteredTypeError: 关联对象的类型无法反查到资源,或资源不在候选类型中.

        """
        related = getattr(parent, attribute, None)
        if related is None:
            return None, None

        resource_class = self.type_resolver.resource_for_model(related)
        if resource_class is None:
            msg = f"{type(related).__name__} 没有对应的资源定义"
            raise UnregisteredTypeError(msg, extra={"model": type(related).__name__, "attribute": attribute})

        candidate = self.registry.get(resource_class.uri_key())
        if candidate is None:
            msg = f"关联类型 {resource_class.uri_key()} 不在候选类型中"
            raise UnregisteredTypeError(
                msg,
                extra={"identifier": resource_class.uri_key(), "candidates": self.registry.identifiers()},
            )
        return related, candidate
