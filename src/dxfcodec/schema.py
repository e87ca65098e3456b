from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator

from .values import ValueKind, kind_for_code
from .versions import NEWEST, OLDEST, Version

ENTITY = "entity"
OBJECT = "object"
TABLE_ENTRY = "table_entry"
TABLE = "table"
CLASS = "class"

# envelope roles; plain fields have no role and live in ``Element.dxf``
HANDLE = "handle"
OWNER = "owner"
GROUPS = "groups"
MARKER = "marker"


@dataclass(frozen=True)
class FieldSpec:
    name: str
    code: int
    min_version: Version = OLDEST
    max_version: Version | None = None
    default: Any = None
    dims: int = 1
    repeated: bool = False
    members: tuple["FieldSpec", ...] = ()
    write_default: bool = True
    pointer: bool = False
    continuation: int | None = None
    tail: bool = False
    role: str | None = None
    mirror: str | None = None
    count_of: str | None = None
    presence_of: str | None = None
    value_kind: ValueKind | None = None

    @property
    def kind(self) -> ValueKind:
        return self.value_kind or kind_for_code(self.code)

    @property
    def is_record(self) -> bool:
        return bool(self.members)

    def visible(self, version: Version) -> bool:
        if version < self.min_version:
            return False
        return self.max_version is None or version <= self.max_version

    def component_codes(self) -> tuple[int, ...]:
        return tuple(self.code + 10 * i for i in range(self.dims))

    def codes(self) -> tuple[int, ...]:
        if self.members:
            out: list[int] = []
            for member in self.members:
                out.extend(member.component_codes())
            return tuple(out)
        if self.tail:
            return (self.code,) if self.code >= 0 else ()
        codes = self.component_codes()
        if self.continuation is not None:
            codes = codes + (self.continuation,)
        return codes

    def overlaps(self, other: "FieldSpec") -> bool:
        low = max(self.min_version, other.min_version)
        high = min(self.max_version or NEWEST, other.max_version or NEWEST)
        return low <= high

    def empty_value(self) -> Any:
        if self.repeated or self.members:
            return []
        return self.default


@dataclass(frozen=True)
class Slot:
    """Where a group code lands inside a variant."""

    field: FieldSpec
    member: FieldSpec | None = None
    component: int = 0
    continuation: bool = False


@dataclass(frozen=True)
class VariantSpec:
    name: str
    category: str
    fields: tuple[FieldSpec, ...]
    min_version: Version = OLDEST
    _index: dict[int, tuple[Slot, ...]] = field(
        default_factory=dict, init=False, compare=False, repr=False
    )
    _kinds: dict[int, ValueKind] = field(default_factory=dict, init=False, compare=False, repr=False)

    def __post_init__(self) -> None:
        index: dict[int, list[Slot]] = {}
        for spec in self.fields:
            if spec.role == MARKER or spec.role == GROUPS:
                continue
            if spec.members:
                for member in spec.members:
                    for i, code in enumerate(member.component_codes()):
                        index.setdefault(code, []).append(Slot(spec, member, i))
                continue
            if spec.tail:
                if spec.code >= 0:
                    index.setdefault(spec.code, []).append(Slot(spec))
                continue
            for i, code in enumerate(spec.component_codes()):
                index.setdefault(code, []).append(Slot(spec, None, i))
            if spec.continuation is not None:
                index.setdefault(spec.continuation, []).append(Slot(spec, continuation=True))
        self._index.update({code: tuple(slots) for code, slots in index.items()})
        self._kinds.update({spec.code: spec.value_kind for spec in self.fields if spec.value_kind is not None})

    def visible(self, version: Version) -> bool:
        return version >= self.min_version

    def value_kinds(self) -> dict[int, ValueKind]:
        """Group codes whose values this variant decodes differently from the code's usual kind."""
        return self._kinds

    def slot_for(self, code: int, version: Version) -> Slot | None:
        slots = self._index.get(code)
        if not slots:
            return None
        for slot in slots:
            if slot.field.visible(version):
                return slot
        # the code belongs to another version of this variant; accept it anyway
        return slots[0]

    def get(self, name: str) -> FieldSpec | None:
        for spec in self.fields:
            if spec.name == name:
                return spec
        return None

    def data_fields(self) -> Iterator[FieldSpec]:
        for spec in self.fields:
            if spec.role is None:
                yield spec

    def markers(self) -> set[str]:
        return {spec.default for spec in self.fields if spec.role == MARKER}

    def tail_field(self) -> FieldSpec | None:
        for spec in self.fields:
            if spec.tail:
                return spec
        return None

    def pointer_fields(self) -> Iterator[FieldSpec]:
        for spec in self.fields:
            if spec.pointer:
                yield spec
            for member in spec.members:
                if member.pointer:
                    yield member


class VersionTable:
    """Static per-variant field schema keyed by (variant, field)."""

    def __init__(
        self,
        variants: Iterable[VariantSpec],
        header_variables: Iterable[FieldSpec] = (),
    ) -> None:
        self._variants: dict[str, VariantSpec] = {}
        for variant in variants:
            if variant.name in self._variants:
                raise ValueError(f"duplicate variant: {variant.name}")
            _check_codes(variant)
            self._variants[variant.name] = variant
        self._header: dict[str, FieldSpec] = {}
        for spec in header_variables:
            self._header[spec.name.upper()] = spec

    def __contains__(self, name: str) -> bool:
        return name in self._variants

    def variant(self, name: str) -> VariantSpec | None:
        return self._variants.get(name)

    def variants(self, category: str | None = None) -> list[VariantSpec]:
        return [v for v in self._variants.values() if category is None or v.category == category]

    def field(self, variant: str, name: str) -> FieldSpec:
        spec = self._variants[variant].get(name)
        if spec is None:
            raise KeyError(f"{variant} has no field {name!r}")
        return spec

    def is_visible(self, variant: str, name: str, version: Version) -> bool:
        return self.field(variant, name).visible(version)

    def default_for(self, variant: str, name: str) -> Any:
        return self.field(variant, name).empty_value()

    def header_variable(self, name: str) -> FieldSpec | None:
        return self._header.get(name.upper())

    def header_variables(self) -> list[FieldSpec]:
        return list(self._header.values())


def _check_codes(variant: VariantSpec) -> None:
    seen: list[tuple[int, FieldSpec]] = []
    for spec in variant.fields:
        if spec.role in (MARKER, GROUPS):
            continue
        for code in spec.codes():
            for other_code, other in seen:
                if other_code == code and other is not spec and spec.overlaps(other):
                    raise ValueError(
                        f"{variant.name}: fields {other.name!r} and {spec.name!r} "
                        f"both use group code {code}"
                    )
            seen.append((code, spec))
