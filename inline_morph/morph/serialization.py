"""多态字段候选类型的序列化."""

from __future__ import annotations

from typing import TYPE_CHECKING

from inline_morph.morph.scoping import scoped_route_resource

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from inline_morph.fields.base import Field
    from inline_morph.infra.field_request import FieldRequest
    from inline_morph.morph.candidates import CandidateType
    from inline_morph.types import JsonDict


class SerializationAdapter:
    """逐个候选类型序列化字段集.

    序列化某个候选类型的字段时,路由上的当前资源被临时改写为该候选类型的标识,
    让嵌套的关系字段按正确的资源生成链接.
    """

    def __init__(self, request: FieldRequest) -> None:
        self.request = request

    def serialize_all(
        self,
        candidates: Iterable[CandidateType],
        field_sets: Mapping[str, Sequence[Field]],
    ) -> list[JsonDict]:
        return [self.serialize_candidate(candidate, field_sets.get(candidate.identifier, ())) for candidate in candidates]

    def serialize_candidate(self, candidate: CandidateType, fields: Sequence[Field]) -> JsonDict:
        with scoped_route_resource(self.request, candidate.identifier):
            serialized = [field.serialize(self.request) for field in fields]
        return {
            "identifier": candidate.identifier,
            "label": candidate.label,
            "class_name": candidate.class_name,
            "fields": serialized,
        }
