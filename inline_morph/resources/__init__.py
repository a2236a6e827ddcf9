"""资源定义包."""

from .base import Resource
from .registry import ResourceRegistry, resource_registry

__all__ = ["Resource", "ResourceRegistry", "resource_registry"]
