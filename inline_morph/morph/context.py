"""把调用方传入的操作信号归类为 OperationKind."""

from __future__ import annotations

from inline_morph.constants import OperationKind

_ALIASES: dict[str, OperationKind] = {
    "create": OperationKind.CREATION,
    "store": OperationKind.CREATION,
    "edit": OperationKind.UPDATE,
    "show": OperationKind.DETAIL,
    "list": OperationKind.INDEX,
}


class ContextResolver:
    """操作类型归类器."""

    @staticmethod
    def classify(signal: object) -> OperationKind:
        """归类操作信号,无法识别的信号(包括 None)一律视为 GENERIC.

        Example:
            >>> ContextResolver.classify("Edit")
            <OperationKind.UPDATE: 'update'>

        """
        if isinstance(signal, OperationKind):
            return signal
        if not isinstance(signal, str):
            return OperationKind.GENERIC
        tag = signal.strip().lower()
        try:
            return OperationKind(tag)
        except ValueError:
            return _ALIASES.get(tag, OperationKind.GENERIC)
