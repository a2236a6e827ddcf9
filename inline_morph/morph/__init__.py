"""内联多态关联字段的核心实现."""

from .candidates import CandidateType, TypeRegistry
from .context import ContextResolver
from .field import InlineMorphTo
from .field_sets import FieldSetResolver
from .locator import ActiveEntityLocator
from .scoping import scoped_route_resource
from .serialization import SerializationAdapter

__all__ = [
    "ActiveEntityLocator",
    "CandidateType",
    "ContextResolver",
    "FieldSetResolver",
    "InlineMorphTo",
    "SerializationAdapter",
    "TypeRegistry",
    "scoped_route_resource",
]
