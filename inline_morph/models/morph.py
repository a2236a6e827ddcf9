"""多态关联(morph-to)的模型侧实现.

父模型上用两列保存关联: ``<name>_type`` 存放类型键(来自 morph map,缺省为表名),
``<name>_id`` 存放关联对象主键.``MorphTo`` 描述符负责读取、关联与解除关联.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Self

from sqlalchemy import inspect as sa_inspect

from inline_morph import db
from inline_morph.errors import ConfigurationError, UnregisteredTypeError

if TYPE_CHECKING:
    from collections.abc import Callable


def entity_identifier(entity: object) -> Any:
    """返回模型实例的主键,未持久化时返回 None."""
    identity = sa_inspect(entity).identity
    if not identity:
        return None
    return identity[0] if len(identity) == 1 else identity


class MorphMap:
    """类型键与模型类的双向映射."""

    def __init__(self) -> None:
        self._models: dict[str, type[Any]] = {}
        self._keys: dict[type[Any], str] = {}

    def register(self, model: type[Any], key: str | None = None) -> str:
        """登记模型,返回其类型键.

        Raises:
            ConfigurationError: 类型键已被其它模型占用时抛出.

        """
        resolved = key or str(getattr(model, "__tablename__", "") or model.__name__)
        owner = self._models.get(resolved)
        if owner is not None and owner is not model:
            msg = f"多态类型键 {resolved} 已被 {owner.__name__} 使用"
            raise ConfigurationError(msg)
        self._models[resolved] = model
        self._keys[model] = resolved
        return resolved

    def key_for(self, model: type[Any]) -> str:
        """返回模型的类型键,未登记的模型按表名自动登记."""
        for klass in model.__mro__:
            if klass in self._keys:
                return self._keys[klass]
        return self.register(model)

    def model_for(self, key: str) -> type[Any] | None:
        return self._models.get(key)


morph_map = MorphMap()


def morph_type(key: str | None = None) -> Callable[[type[Any]], type[Any]]:
    """类装饰器: 为模型登记自定义的多态类型键.

    Example:
        >>> @morph_type("video")
        ... class Video(db.Model):
        ...     ...

    """

    def decorator(model: type[Any]) -> type[Any]:
        morph_map.register(model, key)
        return model

    return decorator


class MorphTo:
    """多态关联描述符.

    Args:
        type_attribute: 存放类型键的列,缺省为 ``<name>_type``.
        id_attribute: 存放关联主键的列,缺省为 ``<name>_id``.
        registry: 使用的 MorphMap,缺省为模块级 ``morph_map``.

    """

    def __init__(
        self,
        type_attribute: str | None = None,
        id_attribute: str | None = None,
        *,
        registry: MorphMap | None = None,
    ) -> None:
        self.name = ""
        self.type_attribute = type_attribute or ""
        self.id_attribute = id_attribute or ""
        self.registry = registry or morph_map

    def __set_name__(self, owner: type[Any], name: str) -> None:
        self.name = name
        self.type_attribute = self.type_attribute or f"{name}_type"
        self.id_attribute = self.id_attribute or f"{name}_id"

    def __get__(self, instance: object | None, owner: type[Any] | None = None) -> Any:
        if instance is None:
            return self
        return self.load(instance)

    def __set__(self, instance: object, value: object | None) -> None:
        if value is None:
            self.dissociate(instance)
        else:
            self.associate(instance, value)

    @property
    def _cache_key(self) -> str:
        return f"_morph_{self.name}"

    def load(self, instance: object) -> Any:
        """读取关联对象,关联为空时返回 None.

        Raises:
            UnregisteredTypeError: 类型键无法映射到模型时抛出.

        """
        key = getattr(instance, self.type_attribute, None)
        related_id = getattr(instance, self.id_attribute, None)
        if key is None or related_id is None:
            return None

        cached = instance.__dict__.get(self._cache_key)
        if cached is not None and cached[0] == key and cached[1] == related_id:
            return cached[2]

        model = self.registry.model_for(str(key))
        if model is None:
            msg = f"未登记的多态类型: {key}"
            raise UnregisteredTypeError(msg, extra={"morph_type": str(key), "relation": self.name})
        related = db.session.get(model, related_id)
        instance.__dict__[self._cache_key] = (key, related_id, related)
        return related

    def associate(self, instance: object, related: object) -> Self:
        """把父对象关联到已持久化的对象上,只改写父对象的两列,不保存父对象.

        Raises:
            ConfigurationError: 关联对象尚未 flush、没有主键时抛出.

        """
        related_id = entity_identifier(related)
        if related_id is None:
            msg = f"{type(related).__name__} 尚未持久化,无法建立多态关联"
            raise ConfigurationError(msg)
        key = self.registry.key_for(type(related))
        setattr(instance, self.type_attribute, key)
        setattr(instance, self.id_attribute, related_id)
        instance.__dict__[self._cache_key] = (key, related_id, related)
        return self

    def dissociate(self, instance: object) -> Self:
        setattr(instance, self.type_attribute, None)
        setattr(instance, self.id_attribute, None)
        instance.__dict__.pop(self._cache_key, None)
        return self


def morph_relation(model: type[Any], attribute: str) -> MorphTo | None:
    """返回模型类上名为 attribute 的 MorphTo 描述符."""
    for klass in model.__mro__:
        candidate = klass.__dict__.get(attribute)
        if isinstance(candidate, MorphTo):
            return candidate
    return None
