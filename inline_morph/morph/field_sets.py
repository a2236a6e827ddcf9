"""候选类型字段集的解析与缓存."""

from __future__ import annotations

from typing import TYPE_CHECKING

from inline_morph.constants import OperationKind
from inline_morph.utils.structlog_config import log_debug

if TYPE_CHECKING:
    from inline_morph.fields.base import Field
    from inline_morph.infra.field_request import FieldRequest
    from inline_morph.morph.candidates import CandidateType


class FieldSetResolver:
    """在一次解析过程内为每个候选类型产出字段集.

    同一个候选类型在同一操作类型下只向资源取一次字段;换一次请求就换一个解析器,缓存不跨请求复用.
    """

    def __init__(self, request: FieldRequest) -> None:
        self.request = request
        self._cache: dict[tuple[str, OperationKind], list[Field]] = {}

    def resolve(self, candidate: CandidateType, kind: OperationKind) -> list[Field]:
        """返回候选类型在给定操作下的有序字段列表.

        资源基于一个新的空模型实例化;资源抛出的异常原样向上传播.
        """
        cached = self._cache.get((candidate.identifier, kind))
        if cached is not None:
            return cached

        resource = candidate.resource_class(candidate.resource_class.new_model())
        fields = resource.fields_for(self.request, kind)
        self._cache[(candidate.identifier, kind)] = fields
        log_debug(
            "解析候选类型字段集",
            module="inline_morph",
            resource=candidate.identifier,
            operation=kind.value,
            field_count=len(fields),
        )
        return fields

    def cached(self, identifier: str, kind: OperationKind) -> list[Field] | None:
        return self._cache.get((identifier, kind))
