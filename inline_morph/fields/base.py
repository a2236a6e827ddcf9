"""字段基类.

字段同时服务于三件事:从模型解析展示值(resolve)、把提交的值写回模型(fill)、
序列化给前端(serialize).资源定义返回字段列表,字段本身不关心自己属于哪个资源.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, Self

from pydantic import TypeAdapter

from inline_morph.constants import OperationKind
from inline_morph.utils.naming import snake_case

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from inline_morph.infra.field_request import FieldRequest
    from inline_morph.types import FieldMeta, JsonDict, PayloadValue

    Rule = Callable[[Any], None]


class FieldComponent(str, Enum):
    """前端控件类型."""

    TEXT = "text-field"
    TEXTAREA = "textarea-field"
    NUMBER = "number-field"
    BOOLEAN = "boolean-field"
    SELECT = "select-field"
    HAS_ONE = "has-one-field"
    HAS_MANY = "has-many-field"
    BELONGS_TO_MANY = "belongs-to-many-field"
    INLINE_MORPH_TO = "inline-morph-to"


@dataclass(slots=True)
class FieldOption:
    """下拉选项描述."""

    value: object
    label: str


class Field:
    """单个字段的定义与运行期状态.

    Attributes:
        name: 展示名称.
        attribute: 对应的模型属性名,缺省为 name 的下划线形式.
        value: 最近一次 resolve 得到的值.
        meta: 附加到序列化结果上的元数据.

    """

    component: ClassVar[FieldComponent] = FieldComponent.TEXT
    python_type: ClassVar[Any] = str
    fillable: ClassVar[bool] = True

    def __init__(
        self,
        name: str,
        attribute: str | None = None,
        resolve_callback: Callable[[Any], Any] | None = None,
    ) -> None:
        self.name = name
        self.attribute = attribute or snake_case(name)
        self.resolve_callback = resolve_callback
        self.value: Any = None
        self.meta: FieldMeta = {}
        self.show_on_index = True
        self.show_on_detail = True
        self.show_on_creation = True
        self.show_on_update = True
        self.is_readonly = False
        self.is_required = False
        self.is_nullable = False
        self._rules: list[Rule] = []
        self._creation_rules: list[Rule] = []
        self._update_rules: list[Rule] = []

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.attribute!r}>"

    # ------------------------------------------------------------------ #
    # 声明
    # ------------------------------------------------------------------ #
    def hide_from_index(self) -> Self:
        self.show_on_index = False
        return self

    def hide_from_detail(self) -> Self:
        self.show_on_detail = False
        return self

    def hide_when_creating(self) -> Self:
        self.show_on_creation = False
        return self

    def hide_when_updating(self) -> Self:
        self.show_on_update = False
        return self

    def only_on_forms(self) -> Self:
        self.show_on_index = False
        self.show_on_detail = False
        return self

    def except_on_forms(self) -> Self:
        self.show_on_creation = False
        self.show_on_update = False
        return self

    def readonly(self, readonly: bool = True) -> Self:
        self.is_readonly = readonly
        return self

    def required(self, required: bool = True) -> Self:
        self.is_required = required
        return self

    def nullable(self, nullable: bool = True) -> Self:
        self.is_nullable = nullable
        return self

    def rules(self, *rules: Rule) -> Self:
        """追加创建与编辑共用的校验规则.规则接收值,不合法时抛出 ValueError."""
        self._rules.extend(rules)
        return self

    def creation_rules(self, *rules: Rule) -> Self:
        self._creation_rules.extend(rules)
        return self

    def update_rules(self, *rules: Rule) -> Self:
        self._update_rules.extend(rules)
        return self

    def with_meta(self, meta: Mapping[str, object]) -> Self:
        """合并额外的元数据."""
        self.meta.update(meta)
        return self

    # ------------------------------------------------------------------ #
    # 校验
    # ------------------------------------------------------------------ #
    def value_type(self) -> Any:
        """校验与类型转换使用的类型."""
        return self.python_type

    def validation_rules(self, operation: OperationKind) -> list[Rule]:
        """返回当前操作下生效的规则."""
        extra = self._update_rules if operation is OperationKind.UPDATE else self._creation_rules
        return [*self._rules, *extra]

    def is_validatable(self) -> bool:
        """只读字段与不可写字段不参与校验."""
        return self.fillable and not self.is_readonly

    # ------------------------------------------------------------------ #
    # 解析
    # ------------------------------------------------------------------ #
    def resolve(
        self,
        entity: object,
        request: FieldRequest | None = None,
        *,
        attribute: str | None = None,
    ) -> Any:
        """从模型读取值并保存到 ``value``.

        Args:
            entity: 模型实例.
            request: 当前请求上下文,普通字段不使用.
            attribute: 覆盖默认的 attribute.

        Returns:
            解析得到的值.

        """
        del request
        value = self.resolve_attribute(entity, attribute or self.attribute)
        self.value = self.resolve_callback(value) if self.resolve_callback else value
        return self.value

    def resolve_attribute(self, entity: object, attribute: str) -> Any:
        return getattr(entity, attribute, None)

    # ------------------------------------------------------------------ #
    # 写入
    # ------------------------------------------------------------------ #
    def fill(self, request: FieldRequest, entity: object) -> None:
        """把 payload 中的值写回模型,未提交的字段保持原值."""
        if not self.is_validatable() or not request.exists(self.attribute):
            return
        setattr(entity, self.attribute, self.cast_value(request.input(self.attribute)))

    def cast_value(self, raw: PayloadValue) -> Any:
        if raw is None or (isinstance(raw, str) and not raw.strip() and self.python_type is not str):
            return None
        return TypeAdapter(self.value_type()).validate_python(raw)

    # ------------------------------------------------------------------ #
    # 序列化
    # ------------------------------------------------------------------ #
    def serialize_value(self) -> Any:
        return self.value

    def serialize(self, request: FieldRequest) -> JsonDict:
        """序列化为前端可用的字典,meta 平铺在顶层."""
        del request
        payload: JsonDict = {
            "component": self.component.value,
            "name": self.name,
            "attribute": self.attribute,
            "value": self.serialize_value(),
            "readonly": self.is_readonly,
            "required": self.is_required,
            "nullable": self.is_nullable,
        }
        payload.update(self.meta)  # type: ignore[arg-type]
        return payload
