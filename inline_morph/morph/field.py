"""内联多态关联字段.

父模型通过 ``MorphTo`` 关联到若干类型之一,``InlineMorphTo`` 让使用者在表单上选择类型,
并把所选类型的字段内联展示、校验、写入,最后把父对象关联到保存好的对象上.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, Self

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import SQLAlchemyError

from inline_morph import db
from inline_morph.constants import OperationKind
from inline_morph.errors import AppError, ConfigurationError, FillError, PersistenceError, ValidationError
from inline_morph.fields.base import Field, FieldComponent
from inline_morph.fields.relations import RelationField
from inline_morph.infra.field_request import FieldRequest
from inline_morph.models.morph import entity_identifier, morph_relation
from inline_morph.morph.candidates import CandidateType, TypeRegistry
from inline_morph.morph.context import ContextResolver
from inline_morph.morph.field_sets import FieldSetResolver
from inline_morph.morph.locator import ActiveEntityLocator
from inline_morph.morph.serialization import SerializationAdapter
from inline_morph.repositories.related_entities_repository import RelatedEntitiesRepository
from inline_morph.resources.registry import resource_registry
from inline_morph.utils.route_safety import log_with_context
from inline_morph.utils.structlog_config import log_debug, log_error, log_info

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from inline_morph.models.morph import MorphTo
    from inline_morph.resources.base import Resource
    from inline_morph.resources.registry import ResourceRegistry
    from inline_morph.types import JsonDict

_LOG_MODULE = "inline_morph"


class InlineMorphTo(Field):
    """内联多态关联字段.

    Example:
        >>> InlineMorphTo("Content").types([ArticleResource, VideoResource])
        >>> InlineMorphTo("Content").types({"图文": ArticleResource, "视频": VideoResource})

    Attributes:
        registry: 候选类型注册表.
        type_resolver: 按模型反查资源的注册表,缺省为全局资源注册表.
        repository: 保存关联对象的 Repository.

    """

    component: ClassVar[FieldComponent] = FieldComponent.INLINE_MORPH_TO

    def __init__(
        self,
        name: str,
        attribute: str | None = None,
        *,
        type_resolver: ResourceRegistry | None = None,
        repository: RelatedEntitiesRepository | None = None,
    ) -> None:
        super().__init__(name, attribute)
        self.registry = TypeRegistry()
        self.type_resolver = type_resolver or resource_registry
        self.repository = repository or RelatedEntitiesRepository()
        self.meta.update({"resources": [], "listable": True})
        self._pass: tuple[FieldRequest, FieldSetResolver] | None = None

    def types(self, types: Iterable[type[Resource]] | Mapping[str, type[Resource]]) -> Self:
        """声明候选类型,可多次调用追加."""
        self.registry.register(types)
        return self

    def field_sets(self, request: FieldRequest) -> FieldSetResolver:
        """返回当前请求对应的字段集解析器,换请求即换解析器."""
        if self._pass is None or self._pass[0] is not request:
            self._pass = (request, FieldSetResolver(request))
        return self._pass[1]

    # ------------------------------------------------------------------ #
    # 读取
    # ------------------------------------------------------------------ #
    def resolve(
        self,
        entity: object,
        request: FieldRequest | None = None,
        *,
        attribute: str | None = None,
    ) -> str | None:
        """解析当前关联的类型标识与该类型字段的值.

        关系字段在解析前被注入 linkage 元数据,使其按关联对象查询而不是父对象.

        Returns:
            当前关联的类型标识,没有关联时返回 None.

        Raises:
            UnregisteredTypeError: 已关联对象的类型不在候选类型中.

        """
        request = request or FieldRequest()
        attribute = attribute or self.attribute
        related, candidate = ActiveEntityLocator(self.registry, self.type_resolver).locate(entity, attribute)
        if candidate is None:
            self.value = None
            log_debug("多态关联为空", module=_LOG_MODULE, attribute=attribute)
            return None

        kind = ContextResolver.classify(request.operation)
        related_id = entity_identifier(related)
        for field in self.field_sets(request).resolve(candidate, kind):
            if isinstance(field, RelationField):
                field.with_linkage(related_id, candidate.identifier)
            field.resolve(related, request)

        self.value = candidate.identifier
        log_debug(
            "解析多态关联",
            module=_LOG_MODULE,
            attribute=attribute,
            resource=candidate.identifier,
            related_id=related_id,
            operation=kind.value,
        )
        return self.value

    # ------------------------------------------------------------------ #
    # 写入
    # ------------------------------------------------------------------ #
    def fill(self, request: FieldRequest, entity: object) -> None:
        """按提交的类型标识创建或更新关联对象,并把父对象关联过去.

        顺序: 选择类型 -> 校验 -> 逐字段写入 -> 保存 -> 关联.任一步失败立即中止,
        之后的步骤不会执行.父对象本身不保存,由调用方提交.

        Raises:
            ValidationError: 未提交类型标识,或关联对象字段校验失败.
            UnregisteredTypeError: 提交的类型标识不在候选类型中.
            FillError: 字段写入失败.
            PersistenceError: 存储层拒绝保存关联对象.

        """
        if self.is_readonly:
            return

        context = {"attribute": self.attribute, "parent": type(entity).__name__}
        try:
            candidate = self._selected_candidate(request)
            context["resource"] = candidate.identifier
            relation = self._relation_for(entity)
            related = self._fill_related(request, entity, candidate, relation)
            relation.associate(entity, related)
        except AppError as exc:
            log_with_context(
                "warning",
                "多态关联写入失败",
                module=_LOG_MODULE,
                action="inline_morph_fill",
                context=context,
                extra={"error_type": exc.__class__.__name__, "error_message": str(exc)},
            )
            raise

        log_info(
            "多态关联已保存",
            module=_LOG_MODULE,
            attribute=self.attribute,
            resource=candidate.identifier,
            related_id=entity_identifier(related),
        )

    def _selected_candidate(self, request: FieldRequest) -> CandidateType:
        identifier = request.input(self.attribute)
        if identifier is None or not str(identifier).strip():
            msg = f"请选择{self.name}的类型"
            raise ValidationError(
                msg,
                violations=[{"field": self.attribute, "message": msg}],
                message_key="MORPH_TYPE_REQUIRED",
            )
        return self.registry.require(str(identifier).strip())

    def _relation_for(self, entity: object) -> MorphTo:
        relation = morph_relation(type(entity), self.attribute)
        if relation is None:
            msg = f"{type(entity).__name__} 未声明多态关联 {self.attribute}"
            raise ConfigurationError(msg, message_key="MORPH_RELATION_MISSING")
        return relation

    def _fill_related(
        self,
        request: FieldRequest,
        entity: object,
        candidate: CandidateType,
        relation: MorphTo,
    ) -> Any:
        existing = relation.load(entity)
        model = candidate.model
        if existing is not None and model is not None and isinstance(existing, model):
            related = existing
        else:
            related = candidate.resource_class.new_model()

        resource = candidate.resource_class(related)
        is_update = sa_inspect(related).has_identity
        kind = OperationKind.UPDATE if is_update else OperationKind.CREATION
        log_debug("校验多态关联对象", module=_LOG_MODULE, resource=candidate.identifier, operation=kind.value)
        if is_update:
            resource.validate_for_update(request)
        else:
            resource.validate_for_creation(request)

        fields = self.field_sets(request).resolve(candidate, kind)
        try:
            for field in fields:
                field.fill(request, related)
        except FillError:
            raise
        except Exception as exc:
            msg = f"{candidate.label} 字段写入失败"
            raise FillError(msg, extra={"resource": candidate.identifier, "error": str(exc)}) from exc

        log_debug("保存多态关联对象", module=_LOG_MODULE, resource=candidate.identifier, operation=kind.value)
        try:
            self.repository.save(related)
        except SQLAlchemyError as exc:
            db.session.rollback()
            log_error("保存多态关联对象失败", module=_LOG_MODULE, exception=exc, resource=candidate.identifier)
            msg = f"{candidate.label} 保存失败"
            raise PersistenceError(msg, extra={"resource": candidate.identifier}) from exc
        return related

    # ------------------------------------------------------------------ #
    # 序列化
    # ------------------------------------------------------------------ #
    def serialize(self, request: FieldRequest) -> JsonDict:
        """序列化字段,``resources`` 中按声明顺序列出每个候选类型及其字段."""
        kind = ContextResolver.classify(request.operation)
        resolver = self.field_sets(request)
        field_sets = {candidate.identifier: resolver.resolve(candidate, kind) for candidate in self.registry}
        self.meta["resources"] = SerializationAdapter(request).serialize_all(self.registry, field_sets)
        self.meta["listable"] = True
        return super().serialize(request)
