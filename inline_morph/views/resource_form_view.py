"""通用资源表单视图.

按路由上的资源标识找到资源定义,提供字段集、详情、创建、编辑四个 JSON 接口.
路由参数中的资源标识同时作为字段解析时的"当前资源".
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from flask import Blueprint, current_app, jsonify, request
from flask.views import MethodView
from sqlalchemy.exc import SQLAlchemyError

from inline_morph.constants import HttpStatus, OperationKind
from inline_morph.constants.system_constants import SuccessMessages
from inline_morph.errors import NotFoundError, PersistenceError
from inline_morph.infra.field_request import FieldRequest
from inline_morph.morph.context import ContextResolver
from inline_morph.repositories.related_entities_repository import RelatedEntitiesRepository
from inline_morph.resources.registry import ResourceRegistry, resource_registry
from inline_morph.schemas.resource_forms import FieldSetQuery
from inline_morph.schemas.validation import validate_or_raise
from inline_morph.settings import DEFAULT_ROUTE_RESOURCE_PARAM
from inline_morph.utils.response_utils import unified_success_response
from inline_morph.utils.route_safety import safe_route_call
from inline_morph.utils.structlog_config import log_error

if TYPE_CHECKING:
    from flask import Flask
    from flask.typing import ResponseReturnValue

    from inline_morph.fields.base import Field
    from inline_morph.resources.base import Resource
    from inline_morph.types import JsonDict

_MODULE = "resource_forms"


class _ResourceViewMixin:
    """按路由参数定位资源定义的公共逻辑."""

    registry: ClassVar[ResourceRegistry] = resource_registry

    def _resource_key(self, view_args: dict[str, Any]) -> str:
        param = str(current_app.config.get("MORPH_ROUTE_RESOURCE_PARAM", DEFAULT_ROUTE_RESOURCE_PARAM))
        return str(view_args.get(param, ""))

    def _resource_class(self, key: str) -> type[Resource]:
        resource_class = self.registry.resource_for_key(key)
        if resource_class is None:
            msg = f"资源 {key} 不存在"
            raise NotFoundError(msg, extra={"resource": key})
        return resource_class

    @staticmethod
    def _serialize_fields(fields: list[Field], field_request: FieldRequest) -> list[JsonDict]:
        return [field.serialize(field_request) for field in fields]


class ResourceFieldsView(_ResourceViewMixin, MethodView):
    """``GET /<resource>/fields``: 按操作类型返回空白字段集."""

    def get(self, **view_args: Any) -> ResponseReturnValue:
        key = self._resource_key(view_args)

        def _execute() -> JsonDict:
            resource_class = self._resource_class(key)
            query = validate_or_raise(FieldSetQuery, request.args.to_dict())
            field_request = FieldRequest.from_flask(query.operation)
            kind = ContextResolver.classify(query.operation)
            resource = resource_class(resource_class.new_model())
            fields = resource.fields_for(field_request, kind)
            return {
                "resource": key,
                "operation": kind.value,
                "fields": self._serialize_fields(fields, field_request),
            }

        data = safe_route_call(
            _execute,
            module=_MODULE,
            action="resource_fields",
            public_error="加载字段失败",
            context={"resource": key},
        )
        payload, status = unified_success_response(data)
        return jsonify(payload), status


class ResourceFormView(_ResourceViewMixin, MethodView):
    """资源详情、创建与编辑.

    写操作依次执行: 校验父对象字段 -> 逐字段写入(包括内联多态字段) -> 保存父对象 -> 提交.
    """

    repository: ClassVar[RelatedEntitiesRepository] = RelatedEntitiesRepository()

    def get(self, resource_id: int, **view_args: Any) -> ResponseReturnValue:
        """详情: 解析并序列化详情字段."""
        key = self._resource_key(view_args)

        def _execute() -> JsonDict:
            resource_class = self._resource_class(key)
            entity = self._load(resource_class, resource_id)
            field_request = FieldRequest.from_flask(OperationKind.DETAIL)
            fields = resource_class(entity).detail_fields(field_request)
            for field in fields:
                field.resolve(entity, field_request)
            return {"resource": key, "id": resource_id, "fields": self._serialize_fields(fields, field_request)}

        data = safe_route_call(
            _execute,
            module=_MODULE,
            action=f"{key}_detail",
            public_error="加载失败",
            context={"resource": key, "resource_id": resource_id},
        )
        payload, status = unified_success_response(data)
        return jsonify(payload), status

    def post(self, **view_args: Any) -> ResponseReturnValue:
        """创建资源."""
        key = self._resource_key(view_args)

        def _execute() -> JsonDict:
            resource_class = self._resource_class(key)
            entity = resource_class.new_model()
            return self._save(resource_class(entity), entity, OperationKind.CREATION)

        data = safe_route_call(
            _execute,
            module=_MODULE,
            action=f"{key}_form_create",
            public_error="保存失败",
            context={"resource": key, "form_mode": "create"},
        )
        payload, status = unified_success_response(data, SuccessMessages.DATA_SAVED, status=HttpStatus.CREATED)
        return jsonify(payload), status

    def put(self, resource_id: int, **view_args: Any) -> ResponseReturnValue:
        """编辑资源."""
        key = self._resource_key(view_args)

        def _execute() -> JsonDict:
            resource_class = self._resource_class(key)
            entity = self._load(resource_class, resource_id)
            return self._save(resource_class(entity), entity, OperationKind.UPDATE)

        data = safe_route_call(
            _execute,
            module=_MODULE,
            action=f"{key}_form_update",
            public_error="保存失败",
            context={"resource": key, "resource_id": resource_id, "form_mode": "edit"},
        )
        payload, status = unified_success_response(data, SuccessMessages.DATA_UPDATED)
        return jsonify(payload), status

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def _load(self, resource_class: type[Resource], resource_id: int) -> Any:
        entity = self.repository.get(resource_class.model, resource_id) if resource_class.model else None
        if entity is None:
            msg = f"{resource_class.uri_key()} #{resource_id} 不存在"
            raise NotFoundError(msg, extra={"resource": resource_class.uri_key(), "resource_id": resource_id})
        return entity

    def _save(self, resource: Resource, entity: Any, kind: OperationKind) -> JsonDict:
        field_request = FieldRequest.from_flask(kind)
        if kind is OperationKind.UPDATE:
            resource.validate_for_update(field_request)
            fields = resource.update_fields(field_request)
        else:
            resource.validate_for_creation(field_request)
            fields = resource.creation_fields(field_request)

        for field in fields:
            field.fill(field_request, entity)
        self._persist(entity)
        return {"resource": resource.uri_key(), "id": getattr(entity, "id", None)}

    def _persist(self, entity: Any) -> None:
        """写入父对象,提交与回滚由 safe_route_call 统一处理."""
        try:
            self.repository.save(entity)
        except SQLAlchemyError as exc:
            log_error("保存资源表单失败", module=_MODULE, exception=exc)
            raise PersistenceError from exc


def create_resource_blueprint(route_param: str = DEFAULT_ROUTE_RESOURCE_PARAM) -> Blueprint:
    """构建资源表单蓝图,资源标识使用 route_param 作为路由参数名."""
    blueprint = Blueprint("resources", __name__)
    form_view = ResourceFormView.as_view("resource_form")
    blueprint.add_url_rule(
        f"/<{route_param}>/fields",
        view_func=ResourceFieldsView.as_view("resource_fields"),
        methods=["GET"],
    )
    blueprint.add_url_rule(f"/<{route_param}>", view_func=form_view, methods=["POST"])
    blueprint.add_url_rule(f"/<{route_param}>/<int:resource_id>", view_func=form_view, methods=["GET", "PUT"])
    return blueprint


def register_resource_views(app: Flask, url_prefix: str = "/resources") -> None:
    """在应用上注册资源表单蓝图."""
    route_param = str(app.config.get("MORPH_ROUTE_RESOURCE_PARAM", DEFAULT_ROUTE_RESOURCE_PARAM))
    app.register_blueprint(create_resource_blueprint(route_param), url_prefix=url_prefix)
