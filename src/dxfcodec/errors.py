from __future__ import annotations

from dataclasses import dataclass
from typing import Any

ERROR = "error"
WARNING = "warning"


class DxfError(Exception):
    pass


class DxfReadError(DxfError):
    """Raised when a drawing cannot be read.

    ``document`` holds whatever was parsed before the failure so callers can
    keep the partial drawing.
    """

    def __init__(
        self,
        message: str,
        *,
        section: str | None = None,
        pair_index: int | None = None,
        offset: int | None = None,
        handle: int | None = None,
        document: Any = None,
    ) -> None:
        super().__init__(message)
        self.section = section
        self.pair_index = pair_index
        self.offset = offset
        self.handle = handle
        self.document = document


class MalformedCode(DxfReadError):
    pass


class NotRecognizedSentinel(DxfReadError):
    pass


class NotBinaryDxf(NotRecognizedSentinel):
    pass


class UnexpectedEndOfInput(DxfReadError):
    pass


class UnterminatedSection(DxfReadError):
    pass


class UnterminatedEntity(DxfReadError):
    pass


class MalformedValue(DxfReadError):
    pass


class UnknownSection(DxfReadError):
    pass


class HandleCollision(DxfReadError):
    pass


class DanglingHandle(DxfReadError):
    pass


class DxfWriteError(DxfError):
    pass


class UnsupportedEntity(DxfWriteError):
    def __init__(self, dxftype: str, handle: int | None = None) -> None:
        label = dxftype if handle is None else f"{dxftype} (handle {handle:X})"
        super().__init__(f"entity not supported by the target format: {label}")
        self.dxftype = dxftype
        self.handle = handle


class UnsupportedVersion(DxfWriteError):
    pass


_EXCEPTIONS_BY_KIND: dict[str, type[DxfReadError]] = {
    "MalformedCode": MalformedCode,
    "NotRecognizedSentinel": NotRecognizedSentinel,
    "UnexpectedEndOfInput": UnexpectedEndOfInput,
    "UnterminatedSection": UnterminatedSection,
    "UnterminatedEntity": UnterminatedEntity,
    "MalformedValue": MalformedValue,
    "UnknownSection": UnknownSection,
    "HandleCollision": HandleCollision,
    "DanglingHandle": DanglingHandle,
}


@dataclass(frozen=True)
class Diagnostic:
    kind: str
    message: str
    severity: str = ERROR
    section: str | None = None
    pair_index: int | None = None
    offset: int | None = None
    handle: int | None = None

    def __str__(self) -> str:
        where = []
        if self.section:
            where.append(f"section={self.section}")
        if self.pair_index is not None:
            where.append(f"pair={self.pair_index}")
        if self.offset is not None:
            where.append(f"offset={self.offset}")
        if self.handle is not None:
            where.append(f"handle={self.handle:X}")
        suffix = f" ({' '.join(where)})" if where else ""
        return f"{self.kind}: {self.message}{suffix}"

    def to_exception(self, document: Any = None) -> DxfReadError:
        exc_type = _EXCEPTIONS_BY_KIND.get(self.kind, DxfReadError)
        return exc_type(
            self.message,
            section=self.section,
            pair_index=self.pair_index,
            offset=self.offset,
            handle=self.handle,
            document=document,
        )

