"""模型层辅助."""

from .morph import MorphMap, MorphTo, entity_identifier, morph_map, morph_relation, morph_type

__all__ = ["MorphMap", "MorphTo", "entity_identifier", "morph_map", "morph_relation", "morph_type"]
