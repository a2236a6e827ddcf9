"""校验 schema 包."""

from .resource_forms import FieldSetQuery
from .validation import build_field_model, validate_field_values, validate_or_raise

__all__ = ["FieldSetQuery", "build_field_model", "validate_field_values", "validate_or_raise"]
