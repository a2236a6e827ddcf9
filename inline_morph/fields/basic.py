"""常用标量字段."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, Self

from inline_morph.fields.base import Field, FieldComponent, FieldOption

if TYPE_CHECKING:
    from collections.abc import Iterable

    from inline_morph.constants import OperationKind
    from inline_morph.fields.base import Rule
    from inline_morph.infra.field_request import FieldRequest
    from inline_morph.types import JsonDict


class Text(Field):
    """单行文本."""

    component: ClassVar[FieldComponent] = FieldComponent.TEXT


class Textarea(Field):
    """多行文本,默认不在列表页展示."""

    component: ClassVar[FieldComponent] = FieldComponent.TEXTAREA

    def __init__(self, name: str, attribute: str | None = None, resolve_callback: Any = None) -> None:
        super().__init__(name, attribute, resolve_callback)
        self.show_on_index = False


class Number(Field):
    """数值字段,``integer=True`` 时按整数校验."""

    component: ClassVar[FieldComponent] = FieldComponent.NUMBER
    python_type: ClassVar[Any] = float

    def __init__(
        self,
        name: str,
        attribute: str | None = None,
        resolve_callback: Any = None,
        *,
        integer: bool = False,
    ) -> None:
        super().__init__(name, attribute, resolve_callback)
        self.integer = integer

    def value_type(self) -> Any:
        return int if self.integer else float


class Boolean(Field):
    component: ClassVar[FieldComponent] = FieldComponent.BOOLEAN
    python_type: ClassVar[Any] = bool


class Select(Field):
    """下拉选择,提交值必须落在 options 内."""

    component: ClassVar[FieldComponent] = FieldComponent.SELECT

    def __init__(self, name: str, attribute: str | None = None, resolve_callback: Any = None) -> None:
        super().__init__(name, attribute, resolve_callback)
        self.field_options: list[FieldOption] = []

    def options(self, options: Iterable[FieldOption | tuple[object, str]]) -> Self:
        for option in options:
            self.field_options.append(option if isinstance(option, FieldOption) else FieldOption(*option))
        return self

    def validation_rules(self, operation: OperationKind) -> list[Rule]:
        return [self._ensure_known_option, *super().validation_rules(operation)]

    def _ensure_known_option(self, value: object) -> None:
        allowed = {option.value for option in self.field_options}
        if allowed and value not in allowed:
            raise ValueError(f"{self.name}取值无效")

    def serialize(self, request: FieldRequest) -> JsonDict:
        payload = super().serialize(request)
        payload["options"] = [{"value": option.value, "label": option.label} for option in self.field_options]
        return payload
