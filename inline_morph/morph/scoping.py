"""路由上"当前资源"标识的临时改写."""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from inline_morph.infra.field_request import FieldRequest


@contextmanager
def scoped_route_resource(request: FieldRequest, identifier: str) -> Iterator[FieldRequest]:
    """在 with 块内把当前资源改写为 identifier,退出时(包括异常)恢复原值.

    嵌套使用时按后进先出的顺序恢复.
    """
    request.push_route_resource(identifier)
    try:
        yield request
    finally:
        request.pop_route_resource()
