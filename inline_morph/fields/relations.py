"""关系字段.

关系字段只读,展示的是关联对象的主键.它们按"所属资源"查询关联数据:
默认取路由上的当前资源,内联在多态字段里时由多态字段注入 linkage 元数据改写.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, Self

from inline_morph.fields.base import Field, FieldComponent
from inline_morph.models.morph import entity_identifier

if TYPE_CHECKING:
    from inline_morph.infra.field_request import FieldRequest
    from inline_morph.resources.base import Resource
    from inline_morph.types import JsonDict

LINKAGE_META_KEY = "inline_morph"


class RelationKind(str, Enum):
    """关系类型."""

    HAS_ONE = "has_one"
    HAS_MANY = "has_many"
    BELONGS_TO_MANY = "belongs_to_many"


class RelationField(Field):
    """关系字段基类,不参与 fill 与校验."""

    relation_kind: ClassVar[RelationKind]
    fillable: ClassVar[bool] = False

    def __init__(
        self,
        name: str,
        attribute: str | None = None,
        resource: type[Resource] | None = None,
    ) -> None:
        super().__init__(name, attribute)
        self.resource_class = resource
        self.show_on_index = False
        self.show_on_creation = False
        self.show_on_update = False

    def with_linkage(self, via_resource_id: object, via_resource: str) -> Self:
        """注入所属对象信息,使字段按关联对象而不是父对象查询."""
        self.meta[LINKAGE_META_KEY] = {
            "via_resource_id": via_resource_id,
            "via_resource": via_resource,
        }
        return self

    @property
    def linkage(self) -> dict[str, Any] | None:
        linkage = self.meta.get(LINKAGE_META_KEY)
        return dict(linkage) if isinstance(linkage, dict) else None

    def serialize(self, request: FieldRequest) -> JsonDict:
        payload = super().serialize(request)
        linkage = self.linkage or {}
        payload["relation_kind"] = self.relation_kind.value
        payload["resource_name"] = self.resource_class.uri_key() if self.resource_class else None
        payload["via_resource"] = linkage.get("via_resource") or request.route_resource
        payload["via_resource_id"] = linkage.get("via_resource_id")
        return payload


class HasOne(RelationField):
    component: ClassVar[FieldComponent] = FieldComponent.HAS_ONE
    relation_kind: ClassVar[RelationKind] = RelationKind.HAS_ONE

    def resolve_attribute(self, entity: object, attribute: str) -> Any:
        related = getattr(entity, attribute, None)
        return None if related is None else entity_identifier(related)


class HasMany(RelationField):
    component: ClassVar[FieldComponent] = FieldComponent.HAS_MANY
    relation_kind: ClassVar[RelationKind] = RelationKind.HAS_MANY

    def resolve_attribute(self, entity: object, attribute: str) -> Any:
        return [entity_identifier(item) for item in getattr(entity, attribute, None) or []]


class BelongsToMany(HasMany):
    component: ClassVar[FieldComponent] = FieldComponent.BELONGS_TO_MANY
    relation_kind: ClassVar[RelationKind] = RelationKind.BELONGS_TO_MANY
