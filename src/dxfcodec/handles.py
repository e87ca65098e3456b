from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Iterator

from .errors import WARNING, Diagnostic, HandleCollision

logger = logging.getLogger(__name__)

ROOT = 0


@dataclass(frozen=True)
class Dangling:
    """Result of resolving a handle no live element carries."""

    handle: int

    def __bool__(self) -> bool:
        return False


class HandleResolver:
    """Handle registry for one document.

    Handles are plain integers; ``0`` names the document root and is never
    allocated.  Allocation always returns a value above every handle observed
    so far, so reading and then editing a drawing never reuses a handle.
    """

    def __init__(self) -> None:
        self._elements: dict[int, Any] = {}
        self._next = 1

    def __contains__(self, handle: int) -> bool:
        return handle in self._elements

    def __len__(self) -> int:
        return len(self._elements)

    def __iter__(self) -> Iterator[int]:
        return iter(self._elements)

    @property
    def next_handle(self) -> int:
        return self._next

    def observe(self, handle: int) -> None:
        if handle >= self._next:
            self._next = handle + 1

    def allocate(self) -> int:
        handle = self._next
        self._next += 1
        return handle

    def register(self, element: Any) -> int:
        """Register ``element`` under its handle, allocating one if it has none."""
        if not element.handle:
            element.handle = self.allocate()
        handle = element.handle
        current = self._elements.get(handle)
        if current is not None and current is not element:
            raise HandleCollision(
                f"handle {handle:X} is already used by {current.dxftype}", handle=handle
            )
        self.observe(handle)
        self._elements[handle] = element
        return handle

    def unregister(self, handle: int) -> Any:
        return self._elements.pop(handle, None)

    def resolve(self, handle: int) -> Any:
        element = self._elements.get(handle)
        if element is None:
            return Dangling(handle)
        return element

    def elements(self) -> Iterator[Any]:
        return iter(self._elements.values())

    def validate(self, pointers: Iterable[tuple[int, str, int]] = ()) -> list[Diagnostic]:
        """Check owner links and ``pointers`` (source, field, target) against the registry."""
        diagnostics: list[Diagnostic] = []
        for handle, element in self._elements.items():
            owner = getattr(element, "owner", ROOT)
            if owner != ROOT and owner not in self._elements:
                diagnostics.append(
                    Diagnostic(
                        "DanglingHandle",
                        f"{element.dxftype} {handle:X} is owned by missing handle {owner:X}",
                        handle=handle,
                    )
                )
        for handle in self._owner_cycles():
            diagnostics.append(
                Diagnostic(
                    "DanglingHandle",
                    f"ownership of {handle:X} loops back on itself",
                    handle=handle,
                )
            )
        for source, name, target in pointers:
            if target and target not in self._elements:
                diagnostics.append(
                    Diagnostic(
                        "DanglingHandle",
                        f"{name} of {source:X} points to missing handle {target:X}",
                        severity=WARNING,
                        handle=source,
                    )
                )
        for diagnostic in diagnostics:
            logger.debug("%s", diagnostic)
        return diagnostics

    def _owner_cycles(self) -> list[int]:
        reported: list[int] = []
        settled: set[int] = set()
        for start in self._elements:
            path: list[int] = []
            on_path: set[int] = set()
            handle = start
            while handle != ROOT and handle in self._elements and handle not in settled:
                if handle in on_path:
                    reported.append(handle)
                    break
                path.append(handle)
                on_path.add(handle)
                handle = getattr(self._elements[handle], "owner", ROOT)
            settled.update(path)
        return reported
