from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .codepairs import CodePair
from .schema import VariantSpec
from .schema_data import VERSION_TABLE
from .xdata import XData

Point3D = tuple[float, float, float]


@dataclass
class Element:
    """Common envelope of every handle-bearing record in a drawing.

    ``dxf`` holds the fields that were read or set explicitly; fields that are
    absent fall back to their schema default through :meth:`get`.
    """

    dxftype: str
    handle: int = 0
    owner: int = 0
    dxf: dict[str, Any] = field(default_factory=dict)
    reactors: list[int] = field(default_factory=list)
    xdictionary: int | None = None
    xdata: list[XData] = field(default_factory=list)
    overflow: list[CodePair] = field(default_factory=list)

    @property
    def variant(self) -> VariantSpec | None:
        return VERSION_TABLE.variant(self.dxftype)

    def get(self, name: str, default: Any = None) -> Any:
        if name in self.dxf:
            return self.dxf[name]
        variant = self.variant
        spec = variant.get(name) if variant is not None else None
        if spec is None:
            return default
        value = spec.empty_value()
        return default if value is None else value

    def set(self, name: str, value: Any) -> None:
        self.dxf[name] = value

    def get_xdata(self, application_name: str) -> XData | None:
        for item in self.xdata:
            if item.application_name.upper() == application_name.upper():
                return item
        return None


@dataclass
class Entity(Element):
    children: list["Entity"] = field(default_factory=list)
    seqend: "Entity | None" = None

    @property
    def layer(self) -> str:
        return self.get("layer", "0")

    def to_points(self) -> list[Point3D]:
        if self.dxftype == "LINE":
            return [self.get("start"), self.get("end")]
        if self.dxftype == "RAY":
            start = self.get("start")
            direction = self.get("unit_vector")
            return [start, (start[0] + direction[0], start[1] + direction[1], start[2] + direction[2])]
        if self.dxftype == "XLINE":
            start = self.get("start")
            direction = self.get("unit_vector")
            return [
                (start[0] - direction[0], start[1] - direction[1], start[2] - direction[2]),
                (start[0] + direction[0], start[1] + direction[1], start[2] + direction[2]),
            ]
        if self.dxftype == "LWPOLYLINE":
            elevation = self.get("elevation", 0.0)
            return [
                (vertex["location"][0], vertex["location"][1], elevation)
                for vertex in self.get("vertices", [])
            ]
        if self.dxftype == "POLYLINE":
            return [vertex.get("location") for vertex in self.children]
        if self.dxftype == "POINT":
            return [self.get("location")]
        if self.dxftype in {"TEXT", "MTEXT", "INSERT"}:
            return [self.get("insert")]
        if self.dxftype in {"CIRCLE", "ARC", "ELLIPSE"}:
            return [self.get("center")]
        if self.dxftype in {"SOLID", "TRACE", "3DFACE"}:
            return [self.get(name) for name in ("first", "second", "third", "fourth")]
        raise NotImplementedError(f"to_points is not supported for {self.dxftype}")


@dataclass
class DxfObject(Element):
    pass


@dataclass
class TableEntry(Element):
    @property
    def name(self) -> str:
        return self.get("name", "")


@dataclass
class Table(Element):
    """A symbol table: its own TABLE record plus the entries it holds."""

    entries: list[Element] = field(default_factory=list)
    _index: dict[str, Element] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.reindex()

    @property
    def name(self) -> str:
        return self.get("name", "")

    def add(self, entry: Element) -> None:
        self.entries.append(entry)
        if isinstance(entry, TableEntry):
            self._index.setdefault(entry.name.casefold(), entry)

    def remove(self, entry: Element) -> None:
        self.entries.remove(entry)
        if isinstance(entry, TableEntry) and self._index.get(entry.name.casefold()) is entry:
            self.reindex()

    def reindex(self) -> None:
        """Rebuild the name index; needed after renaming an entry in place."""
        self._index = {}
        for entry in self.entries:
            if isinstance(entry, TableEntry):
                self._index.setdefault(entry.name.casefold(), entry)

    def get_entry(self, name: str) -> Element | None:
        wanted = name.casefold()
        entry = self._index.get(wanted)
        if entry is not None and entry.name.casefold() != wanted:
            self.reindex()
            entry = self._index.get(wanted)
        return entry

    def __contains__(self, name: str) -> bool:
        return self.get_entry(name) is not None

    def __len__(self) -> int:
        return len(self.entries)


@dataclass
class DxfClass(Element):
    @property
    def name(self) -> str:
        return self.get("record_name", "")


@dataclass
class UnknownElement(Element):
    """A record whose type the codec has no schema for.

    ``pairs`` keeps everything after the ``0/TYPE`` pair so the record can be
    written back unchanged.
    """

    category: str = "entity"
    pairs: list[CodePair] = field(default_factory=list)
    children: list[Entity] = field(default_factory=list)
    seqend: Entity | None = None


@dataclass
class Block:
    begin: Entity
    end: Entity
    entities: list[Entity] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.begin.get("name", "")
