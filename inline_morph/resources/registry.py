"""资源注册表.

维护 uri_key -> Resource 与 模型 -> Resource 两个索引,提供按模型实例反查资源的能力.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from inline_morph.errors import ConfigurationError
from inline_morph.utils.structlog_config import log_debug

if TYPE_CHECKING:
    from collections.abc import Iterator

    from inline_morph.resources.base import Resource


class ResourceRegistry:
    """资源注册表."""

    def __init__(self) -> None:
        self._by_key: dict[str, type[Resource]] = {}
        self._by_model: dict[type, type[Resource]] = {}

    def __iter__(self) -> Iterator[type[Resource]]:
        return iter(self._by_key.values())

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def register(self, resource_class: type[Resource]) -> type[Resource]:
        """注册资源,同名或同模型的后注册者覆盖先注册者.

        Raises:
            ConfigurationError: 资源未声明 model 时抛出.

        """
        model = resource_class.model
        if model is None:
            msg = f"{resource_class.__name__} 未声明 model,无法注册"
            raise ConfigurationError(msg)
        key = resource_class.uri_key()
        self._by_key[key] = resource_class
        self._by_model[model] = resource_class
        log_debug("注册资源", module="resources", resource=key, model=model.__name__)
        return resource_class

    def unregister(self, resource_class: type[Resource]) -> None:
        self._by_key.pop(resource_class.uri_key(), None)
        if resource_class.model is not None and self._by_model.get(resource_class.model) is resource_class:
            self._by_model.pop(resource_class.model)

    def resource_for_key(self, key: str) -> type[Resource] | None:
        return self._by_key.get(key)

    def resource_for_model(self, entity: object) -> type[Resource] | None:
        """按模型实例(或模型类)查找资源,沿 MRO 向上匹配."""
        model = entity if isinstance(entity, type) else type(entity)
        for klass in model.__mro__:
            resource_class = self._by_model.get(klass)
            if resource_class is not None:
                return resource_class
        return None


resource_registry = ResourceRegistry()
