"""项目共享类型别名."""

from .structures import (
    ContextDict,
    FieldMeta,
    JsonDict,
    JsonValue,
    LoggerExtra,
    MutablePayloadDict,
    PayloadMapping,
    PayloadValue,
    ScalarValue,
    StructlogEventDict,
    SupportsResourceId,
)

__all__ = [
    "ContextDict",
    "FieldMeta",
    "JsonDict",
    "JsonValue",
    "LoggerExtra",
    "MutablePayloadDict",
    "PayloadMapping",
    "PayloadValue",
    "ScalarValue",
    "StructlogEventDict",
    "SupportsResourceId",
]
