"""多态字段的候选类型注册表."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

from inline_morph.errors import ConfigurationError, UnregisteredTypeError
from inline_morph.resources.base import Resource
from inline_morph.utils.naming import convert_to_human_case

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator


@dataclass(frozen=True, slots=True)
class CandidateType:
    """一个可选的关联类型.

    Attributes:
        identifier: 资源标识,在同一个字段内唯一.
        label: 展示名称.
        resource_class: 提供字段定义的资源类.

    """

    identifier: str
    label: str
    resource_class: type[Resource]

    @property
    def model(self) -> type[object] | None:
        return self.resource_class.model

    @property
    def class_name(self) -> str:
        return f"{self.resource_class.__module__}.{self.resource_class.__qualname__}"


class TypeRegistry:
    """按声明顺序保存候选类型.

    Example:
        >>> registry = TypeRegistry()
        >>> registry.register([ArticleResource, VideoResource])
        >>> [candidate.label for candidate in registry]
        ['Article Resource', 'Video Resource']

    """

    def __init__(self) -> None:
        self._candidates: dict[str, CandidateType] = {}

    def __iter__(self) -> Iterator[CandidateType]:
        return iter(self._candidates.values())

    def __len__(self) -> int:
        return len(self._candidates)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._candidates

    def register(self, types: Iterable[type[Resource]] | Mapping[str, type[Resource]]) -> list[CandidateType]:
        """登记候选类型.

        传入映射时键作为展示名称原样使用;传入序列时由资源类名生成展示名称.

        Args:
            types: 资源类序列,或 展示名称 -> 资源类 的映射.

        Returns:
            本次登记的候选类型列表.

        Raises:
            ConfigurationError: 条目不是资源类、标识为空或与已有标识重复时抛出.
                出错时本次登记整体不生效.

        """
        if isinstance(types, Mapping):
            entries = [(str(label), resource_class) for label, resource_class in types.items()]
        else:
            entries = [(None, resource_class) for resource_class in types]

        staged: dict[str, CandidateType] = {}
        for label, resource_class in entries:
            if not isinstance(resource_class, type) or not issubclass(resource_class, Resource):
                msg = f"候选类型必须是资源类: {resource_class!r}"
                raise ConfigurationError(msg)

            identifier = resource_class.uri_key().strip()
            if not identifier:
                msg = f"{resource_class.__name__} 的资源标识为空"
                raise ConfigurationError(msg)
            if identifier in self._candidates or identifier in staged:
                msg = f"候选类型标识重复: {identifier}"
                raise ConfigurationError(
                    msg,
                    message_key="DUPLICATE_TYPE_IDENTIFIER",
                    extra={"identifier": identifier},
                )

            staged[identifier] = CandidateType(
                identifier=identifier,
                label=label if label is not None else convert_to_human_case(resource_class),
                resource_class=resource_class,
            )

        self._candidates.update(staged)
        return list(staged.values())

    def get(self, identifier: str | None) -> CandidateType | None:
        if identifier is None:
            return None
        return self._candidates.get(identifier)

    def require(self, identifier: str) -> CandidateType:
        """按标识取候选类型.

        Raises:
            UnregisteredTypeError: 标识未登记时抛出.

        """
        candidate = self.get(identifier)
        if candidate is None:
            msg = f"未登记的关联类型: {identifier}"
            raise UnregisteredTypeError(msg, extra={"identifier": identifier, "candidates": self.identifiers()})
        return candidate

    def identifiers(self) -> list[str]:
        return list(self._candidates)
