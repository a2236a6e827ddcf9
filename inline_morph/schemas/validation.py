"""Schema 校验与错误映射.

字段声明在运行期转换为 pydantic model,错误统一映射为项目的 ValidationError.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Annotated, Any, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict, create_model
from pydantic import Field as SchemaField
from pydantic import ValidationError as PydanticValidationError

from inline_morph.errors import ValidationError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from pydantic_core import ErrorDetails

    from inline_morph.constants import OperationKind
    from inline_morph.fields.base import Field

ModelT = TypeVar("ModelT", bound=BaseModel)

_DYNAMIC_MODEL_CONFIG = ConfigDict(extra="ignore", populate_by_name=False)


def validate_or_raise(model: type[ModelT], payload: object, *, message_key: str | None = None) -> ModelT:
    """执行 schema 校验并抛出项目的 ValidationError.

    Args:
        model: pydantic model.
        payload: 待校验的 payload.
        message_key: 可选的 message_key.

    Returns:
        校验通过的 model 实例.

    Raises:
        ValidationError: 校验失败时抛出,``violations`` 包含全部字段错误.

    """
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        violations = [_to_violation(error) for error in exc.errors()]
        message = violations[0]["message"] if violations else "参数校验失败"
        raise ValidationError(message, violations=violations, message_key=message_key) from None


def validate_field_values(
    fields: Sequence[Field],
    payload: Mapping[str, Any],
    operation: OperationKind,
    *,
    model_name: str = "FieldValues",
) -> dict[str, Any]:
    """按字段声明校验提交的数据.

    只读字段与关系字段不参与校验;必填字段缺失或为空白字符串时报错.

    Returns:
        以 attribute 为键、校验后的值为值的字典(仅包含提交了的字段).

    """
    model = build_field_model(fields, operation, model_name=model_name)
    validated = validate_or_raise(model, dict(payload))
    return validated.model_dump(by_alias=True, exclude_unset=True)


def build_field_model(
    fields: Iterable[Field],
    operation: OperationKind,
    *,
    model_name: str = "FieldValues",
) -> type[BaseModel]:
    """把字段声明转换为 pydantic model.

    模型字段名使用位置序号,原始 attribute 作为 alias,避免与 BaseModel 的属性冲突.
    """
    definitions: dict[str, Any] = {}
    for index, field in enumerate(item for item in fields if item.is_validatable()):
        validators = [_as_validator(rule) for rule in field.validation_rules(operation)]
        if field.is_required:
            validators.insert(0, _as_validator(_reject_blank(field.name)))
        value_type = field.value_type()
        if field.is_nullable or not field.is_required:
            value_type = value_type | None
        annotated = Annotated[value_type, *validators] if validators else value_type
        if field.is_required:
            definitions[f"field_{index}"] = (annotated, SchemaField(alias=field.attribute))
        else:
            definitions[f"field_{index}"] = (annotated, SchemaField(default=None, alias=field.attribute))
    return create_model(model_name, __config__=_DYNAMIC_MODEL_CONFIG, **definitions)


def _as_validator(rule: Callable[[Any], None]) -> AfterValidator:
    def _check(value: Any) -> Any:
        if value is not None:
            rule(value)
        return value

    return AfterValidator(_check)


def _reject_blank(name: str) -> Callable[[Any], None]:
    def _rule(value: Any) -> None:
        if isinstance(value, str) and not value.strip():
            raise ValueError(f"{name}不能为空")

    return _rule


def _to_violation(error: ErrorDetails) -> dict[str, str]:
    loc = error.get("loc")
    field = str(loc[0]) if loc else ""

    ctx = error.get("ctx")
    if isinstance(ctx, dict) and isinstance(ctx.get("error"), BaseException):
        return {"field": field, "message": str(ctx["error"])}

    msg = error.get("msg")
    return {"field": field, "message": msg if isinstance(msg, str) and msg.strip() else "参数校验失败"}
