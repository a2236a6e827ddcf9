"""资源表单接口的查询参数 schema."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator


class FieldSetQuery(BaseModel):
    """``GET /<resource>/fields`` 的查询参数."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    operation: str | None = None

    @field_validator("operation")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        return value or None
