"""资源定义基类.

资源描述一类模型在管理界面上的字段,按操作类型筛选出创建/编辑/详情/列表字段,
并在写入前完成校验.声明了 ``model`` 的子类在定义时自动注册到默认的资源注册表.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from inline_morph.constants import OperationKind
from inline_morph.errors import ConfigurationError
from inline_morph.resources.registry import resource_registry
from inline_morph.schemas.validation import validate_field_values
from inline_morph.utils.naming import short_name, snake_case

if TYPE_CHECKING:
    from inline_morph.fields.base import Field
    from inline_morph.infra.field_request import FieldRequest


class Resource:
    """资源定义.

    Attributes:
        model: 资源对应的 SQLAlchemy 模型类.
        uri_key_name: 自定义的资源标识,缺省为类名的下划线形式.
        resource: 当前包装的模型实例.

    Example:
        >>> class VideoResource(Resource):
        ...     model = Video
        ...     uri_key_name = "video"
        ...
        ...     def fields(self, request):
        ...         return [Text("Title").required()]

    """

    model: ClassVar[type[Any] | None] = None
    uri_key_name: ClassVar[str | None] = None

    def __init__(self, resource: object | None = None) -> None:
        self.resource = resource

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "model" in cls.__dict__ and cls.model is not None:
            resource_registry.register(cls)

    @classmethod
    def uri_key(cls) -> str:
        """资源在路由与多态字段中的唯一标识."""
        return cls.uri_key_name or snake_case(short_name(cls))

    @classmethod
    def new_model(cls) -> Any:
        """实例化一个新的空模型.

        Raises:
            ConfigurationError: 未声明 model 时抛出.

        """
        if cls.model is None:
            msg = f"{cls.__name__} 未声明 model"
            raise ConfigurationError(msg)
        return cls.model()

    def fields(self, request: FieldRequest) -> list[Field]:
        """返回资源的全部字段定义,子类必须实现."""
        raise NotImplementedError

    # ------------------------------------------------------------------ #
    # 按操作类型筛选字段
    # ------------------------------------------------------------------ #
    def available_fields(self, request: FieldRequest) -> list[Field]:
        return list(self.fields(request))

    def creation_fields(self, request: FieldRequest) -> list[Field]:
        return [field for field in self.fields(request) if field.show_on_creation]

    def update_fields(self, request: FieldRequest) -> list[Field]:
        return [field for field in self.fields(request) if field.show_on_update]

    def detail_fields(self, request: FieldRequest) -> list[Field]:
        return [field for field in self.fields(request) if field.show_on_detail]

    def index_fields(self, request: FieldRequest) -> list[Field]:
        return [field for field in self.fields(request) if field.show_on_index]

    def fields_for(self, request: FieldRequest, kind: OperationKind) -> list[Field]:
        """按操作类型取字段,未知类型取全部可用字段."""
        producers = {
            OperationKind.CREATION: self.creation_fields,
            OperationKind.UPDATE: self.update_fields,
            OperationKind.DETAIL: self.detail_fields,
            OperationKind.INDEX: self.index_fields,
        }
        return producers.get(kind, self.available_fields)(request)

    # ------------------------------------------------------------------ #
    # 校验
    # ------------------------------------------------------------------ #
    def validate_for_creation(self, request: FieldRequest) -> dict[str, Any]:
        """按创建字段校验 payload.

        Raises:
            ValidationError: 校验失败时抛出,包含全部字段错误.

        """
        return validate_field_values(
            self.creation_fields(request),
            request.payload,
            OperationKind.CREATION,
            model_name=f"{type(self).__name__}Creation",
        )

    def validate_for_update(self, request: FieldRequest) -> dict[str, Any]:
        """按编辑字段校验 payload.

        Raises:
            ValidationError: 校验失败时抛出,包含全部字段错误.

        """
        return validate_field_values(
            self.update_fields(request),
            request.payload,
            OperationKind.UPDATE,
            model_name=f"{type(self).__name__}Update",
        )
