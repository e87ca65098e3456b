from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Iterator

from .codepairs import CodePair
from .entity import Block, DxfClass, Element, Entity, Table, TableEntry
from .errors import Diagnostic
from .handles import ROOT, HandleResolver
from .schema_data import TABLE_NAMES
from .versions import DEFAULT_VERSION, Version

logger = logging.getLogger(__name__)


class Header:
    """Ordered ``$NAME -> value`` mapping of header variables.

    Variables the codec has no schema for are kept as their raw pairs in
    ``raw`` and only written back at the version they were read from.
    """

    def __init__(self, version: Version = DEFAULT_VERSION) -> None:
        self._values: dict[str, Any] = {"$ACADVER": version.acadver}
        self.raw: dict[str, list[CodePair]] = {}

    @property
    def version(self) -> Version:
        return Version.parse(self._values["$ACADVER"])

    @version.setter
    def version(self, value: Version | str) -> None:
        self._values["$ACADVER"] = Version.parse(value).acadver

    @property
    def codepage(self) -> str | None:
        return self._values.get("$DWGCODEPAGE")

    def __getitem__(self, name: str) -> Any:
        return self._values[name.upper()]

    def __setitem__(self, name: str, value: Any) -> None:
        name = name.upper()
        if name == "$ACADVER":
            self.version = value
            return
        self._values[name] = value

    def __delitem__(self, name: str) -> None:
        name = name.upper()
        if name == "$ACADVER":
            raise KeyError("$ACADVER cannot be removed")
        del self._values[name]

    def __contains__(self, name: str) -> bool:
        return name.upper() in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def get(self, name: str, default: Any = None) -> Any:
        return self._values.get(name.upper(), default)

    def items(self) -> Iterator[tuple[str, Any]]:
        return iter(self._values.items())


def _normalize_types(types: str | Iterable[str] | None) -> set[str] | None:
    if types is None:
        return None
    if isinstance(types, str):
        names = types.replace(",", " ").split()
    else:
        names = list(types)
    names = [name.strip().upper() for name in names if name.strip()]
    if not names or "*" in names:
        return None
    return set(names)


@dataclass(frozen=True)
class Layout:
    doc: "Document"
    name: str
    block: Block | None = None

    @property
    def entities(self) -> list[Entity]:
        if self.block is not None:
            return self.block.entities
        return self.doc.entities

    def iter_entities(self, types: str | Iterable[str] | None = None) -> Iterator[Entity]:
        return self.query(types)

    def query(self, types: str | Iterable[str] | None = None) -> Iterator[Entity]:
        type_set = _normalize_types(types)
        for entity in self.entities:
            if type_set is None or entity.dxftype in type_set:
                yield entity


class Document:
    """In-memory drawing: header, classes, tables, blocks, entities and objects.

    Every handle-bearing element is registered with ``handles`` when it is
    inserted.  Insertion never fills in owner handles; an element whose owner
    is not (yet) in the drawing is remembered in ``pending_owners`` until
    :meth:`validate` finds it resolved.
    """

    def __init__(self, version: Version | str = DEFAULT_VERSION) -> None:
        self.header = Header(Version.parse(version))
        self.classes: list[DxfClass] = []
        self.tables: dict[str, Table] = {}
        self.blocks: list[Block] = []
        self.entities: list[Entity] = []
        self.objects: list[Element] = []
        self.thumbnail: list[CodePair] = []
        self.unknown_sections: dict[str, list[CodePair]] = {}
        self.handles = HandleResolver()
        self.diagnostics: list[Diagnostic] = []
        self.pending_owners: set[int] = set()
        self.source_version: Version | None = None
        self.source_format: str | None = None
        # set when the source file carried handles, even before R13 without $HANDLING
        self.source_handles = False

    @property
    def version(self) -> Version:
        return self.header.version

    @version.setter
    def version(self, value: Version | str) -> None:
        self.header.version = value

    def modelspace(self) -> Layout:
        return Layout(self, "MODELSPACE")

    def layout(self, block_name: str) -> Layout:
        block = self.get_block(block_name)
        if block is None:
            raise KeyError(f"no block named {block_name!r}")
        return Layout(self, block.name, block)

    # registration

    def register(self, element: Element) -> None:
        self.handles.register(element)
        if element.owner != ROOT and element.owner not in self.handles:
            self.pending_owners.add(element.handle)
        for child in getattr(element, "children", ()):
            self.register(child)
        seqend = getattr(element, "seqend", None)
        if seqend is not None:
            self.register(seqend)

    def unregister(self, element: Element) -> None:
        self.handles.unregister(element.handle)
        self.pending_owners.discard(element.handle)
        for child in getattr(element, "children", ()):
            self.unregister(child)
        seqend = getattr(element, "seqend", None)
        if seqend is not None:
            self.unregister(seqend)

    # entities

    def add_entity(self, entity: Entity, block: Block | str | None = None) -> Entity:
        if entity.seqend is None and (entity.dxftype == "POLYLINE" or entity.children):
            entity.seqend = Entity("SEQEND", dxf={"layer": entity.layer})
        self.register(entity)
        self._entity_list(block).append(entity)
        return entity

    def remove_entity(self, entity: Entity, block: Block | str | None = None) -> None:
        self._entity_list(block).remove(entity)
        self.unregister(entity)

    def _entity_list(self, block: Block | str | None) -> list[Entity]:
        if block is None:
            return self.entities
        if isinstance(block, str):
            found = self.get_block(block)
            if found is None:
                raise KeyError(f"no block named {block!r}")
            block = found
        return block.entities

    # objects and classes

    def add_object(self, obj: Element) -> Element:
        self.register(obj)
        self.objects.append(obj)
        return obj

    def remove_object(self, obj: Element) -> None:
        self.objects.remove(obj)
        self.unregister(obj)

    def add_class(self, dxf_class: DxfClass) -> DxfClass:
        self.classes.append(dxf_class)
        return dxf_class

    # tables

    def table(self, name: str) -> Table:
        """Return the named table, creating an empty one when missing."""
        name = name.upper()
        table = self.tables.get(name)
        if table is None:
            table = Table("TABLE", dxf={"name": name})
            self.register(table)
            self.tables[name] = table
            self._sort_tables()
        return table

    def _sort_tables(self) -> None:
        order = {name: i for i, name in enumerate(TABLE_NAMES)}
        self.tables = dict(
            sorted(self.tables.items(), key=lambda item: order.get(item[0], len(order)))
        )

    def add_table_entry(self, table_name: str, entry: Element) -> Element:
        table = self.table(table_name)
        if isinstance(entry, TableEntry) and entry.name in table:
            raise ValueError(f"{table.name} already has an entry named {entry.name!r}")
        self.register(entry)
        table.add(entry)
        return entry

    def new_table_entry(self, table_name: str, name: str, **dxf: Any) -> TableEntry:
        table = self.table(table_name)
        entry = TableEntry(table.name, owner=table.handle, dxf={"name": name, **dxf})
        self.add_table_entry(table.name, entry)
        return entry

    def remove_table_entry(self, table_name: str, name: str) -> TableEntry:
        table = self.tables.get(table_name.upper())
        entry = table.get_entry(name) if table is not None else None
        if entry is None:
            raise KeyError(f"no {table_name} entry named {name!r}")
        table.remove(entry)
        self.unregister(entry)
        return entry

    def table_entry(self, table_name: str, name: str) -> Element | None:
        table = self.tables.get(table_name.upper())
        if table is None:
            return None
        return table.get_entry(name)

    def resolve_layer(self, entity: Entity) -> Element | None:
        return self.table_entry("LAYER", entity.layer)

    # blocks

    def add_block(self, block: Block) -> Block:
        self.register(block.begin)
        self.register(block.end)
        for entity in block.entities:
            self.register(entity)
        self.blocks.append(block)
        return block

    def new_block(self, name: str, base_point: tuple[float, float, float] = (0.0, 0.0, 0.0)) -> Block:
        begin = Entity("BLOCK", dxf={"name": name, "base_point": base_point})
        return self.add_block(Block(begin, Entity("ENDBLK")))

    def get_block(self, name: str) -> Block | None:
        wanted = name.casefold()
        for block in self.blocks:
            if block.name.casefold() == wanted:
                return block
        return None

    def remove_block(self, name: str) -> Block:
        block = self.get_block(name)
        if block is None:
            raise KeyError(f"no block named {name!r}")
        self.blocks.remove(block)
        for element in (block.begin, block.end, *block.entities):
            self.unregister(element)
        return block

    # lookup and validation

    def get_by_handle(self, handle: int) -> Element | None:
        element = self.handles.resolve(handle)
        return element or None

    def iter_elements(self) -> Iterator[Element]:
        for table in self.tables.values():
            yield table
            yield from table.entries
        for block in self.blocks:
            yield block.begin
            yield from _walk(block.entities)
            yield block.end
        yield from _walk(self.entities)
        yield from self.objects

    def pointer_edges(self) -> Iterator[tuple[int, str, int]]:
        for element in self.iter_elements():
            variant = element.variant
            if variant is None:
                continue
            for spec in variant.fields:
                if spec.pointer:
                    value = element.dxf.get(spec.name)
                    targets = value if spec.repeated else [value]
                    for target in targets or ():
                        if isinstance(target, int):
                            yield element.handle, spec.name, target
                for member in spec.members:
                    if not member.pointer:
                        continue
                    for record in element.dxf.get(spec.name, ()):
                        target = record.get(member.name)
                        if isinstance(target, int):
                            yield element.handle, f"{spec.name}.{member.name}", target
            for target in element.reactors:
                yield element.handle, "reactors", target
            if element.xdictionary:
                yield element.handle, "xdictionary", element.xdictionary

    def validate(self) -> list[Diagnostic]:
        """Check every owner and pointer handle; returns the problems found."""
        self.pending_owners = {
            handle
            for handle in self.pending_owners
            if handle in self.handles and self.handles.resolve(handle).owner not in self.handles
        }
        diagnostics = self.handles.validate(self.pointer_edges())
        if diagnostics:
            logger.info("validation found %d handle problem(s)", len(diagnostics))
        return diagnostics


def _walk(entities: Iterable[Entity]) -> Iterator[Entity]:
    for entity in entities:
        yield entity
        yield from entity.children
        if entity.seqend is not None:
            yield entity.seqend
