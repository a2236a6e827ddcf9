"""Repository 层."""

from .related_entities_repository import RelatedEntitiesRepository

__all__ = ["RelatedEntitiesRepository"]
