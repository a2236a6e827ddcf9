"""字段定义包."""

from .base import Field, FieldComponent, FieldOption
from .basic import Boolean, Number, Select, Text, Textarea
from .relations import BelongsToMany, HasMany, HasOne, RelationField, RelationKind

__all__ = [
    "BelongsToMany",
    "Boolean",
    "Field",
    "FieldComponent",
    "FieldOption",
    "HasMany",
    "HasOne",
    "Number",
    "RelationField",
    "RelationKind",
    "Select",
    "Text",
    "Textarea",
]
