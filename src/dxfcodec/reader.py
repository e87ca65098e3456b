"""Read DXF drawings (ASCII or binary) into a :class:`~dxfcodec.document.Document`."""
from __future__ import annotations

import io
import logging
import os
from pathlib import Path
from typing import Any, BinaryIO

from .codepairs import (
    ASCII,
    BINARY,
    DXB,
    AsciiCodePairReader,
    BinaryCodePairReader,
    CodePair,
    detect_format,
)
from .document import Document
from .entity import (
    Block,
    DxfClass,
    DxfObject,
    Element,
    Entity,
    Table,
    TableEntry,
    UnknownElement,
)
from .errors import (
    ERROR,
    WARNING,
    Diagnostic,
    DxfReadError,
    HandleCollision,
    UnexpectedEndOfInput,
)
from .schema import ENTITY, HANDLE, OBJECT, OWNER, TABLE_ENTRY, FieldSpec, Slot, VariantSpec
from .schema_data import CLASS_VARIANT, TABLE_VARIANT, VERSION_TABLE
from .values import COMMENT_CODE, UnknownCode, ValueKind, decode, text_encoding
from .versions import NEWEST, Version
from .xdata import APPLICATION_CODE, read_xdata

logger = logging.getLogger(__name__)

UTF8_BOM = b"\xef\xbb\xbf"
READ_DEFAULT_VERSION = Version.R12

_ELEMENT_TYPES = {ENTITY: Entity, OBJECT: DxfObject, TABLE_ENTRY: TableEntry}
_SECTION_BREAKS = ("SECTION", "EOF")


def read(source: bytes | BinaryIO | str | os.PathLike, *, strict: bool = False) -> Document:
    """Read a drawing, detecting ASCII DXF, binary DXF or DXB from its first bytes."""
    data = _read_all(source)
    fmt = detect_format(data[:32])
    if fmt == DXB:
        from .dxb import read_dxb

        return read_dxb(data)
    if fmt == BINARY:
        return read_binary(data, strict=strict)
    return read_ascii(data, strict=strict)


def read_ascii(source: bytes | BinaryIO | str | os.PathLike, *, strict: bool = False) -> Document:
    data = _read_all(source)
    encoding = "cp1252"
    if data.startswith(UTF8_BOM):
        data = data[len(UTF8_BOM):]
        encoding = "utf-8"
    pairs = AsciiCodePairReader(io.BytesIO(data), encoding)
    return _DxfReader(pairs, ASCII).run(strict)


def read_binary(source: bytes | BinaryIO | str | os.PathLike, *, strict: bool = False) -> Document:
    pairs = BinaryCodePairReader(_read_all(source))
    return _DxfReader(pairs, BINARY).run(strict)


def _read_all(source: Any) -> bytes:
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)
    if isinstance(source, (str, os.PathLike)):
        return Path(source).read_bytes()
    return source.read()


class _DxfReader:
    def __init__(self, pairs: AsciiCodePairReader | BinaryCodePairReader, source_format: str) -> None:
        self._pairs = pairs
        self._pushed: list[CodePair] = []
        self.version = READ_DEFAULT_VERSION
        self.doc = Document(self.version)
        self.doc.source_format = source_format
        self.section: str | None = None
        self._unhandled: list[Element] = []
        self._class_names: set[str] = set()
        self._kinds: dict[int, ValueKind] = {}

    # pair cursor

    def _next(self) -> CodePair | None:
        if self._pushed:
            return self._pushed.pop()
        while True:
            raw = self._pairs.read_next()
            if raw is None:
                return None
            if raw.code == COMMENT_CODE:
                continue
            text = raw.value if isinstance(raw.value, str) else None
            try:
                value = decode(raw.code, raw.value, self.version, self._kinds.get(raw.code))
            except ValueError:
                self._diagnose(
                    "MalformedValue",
                    f"value {raw.value!r} does not parse for group code {raw.code}",
                    pair=raw,
                )
                value = UnknownCode(raw.code, str(raw.value))
            return CodePair(raw.code, value, offset=raw.offset, raw=text)

    def _push(self, pair: CodePair) -> None:
        self._pushed.append(pair)

    def _collect_body(self) -> list[CodePair]:
        body: list[CodePair] = []
        while True:
            pair = self._next()
            if pair is None:
                return body
            if pair.code == 0:
                self._push(pair)
                return body
            body.append(pair)

    def _diagnose(
        self,
        kind: str,
        message: str,
        *,
        severity: str = ERROR,
        pair: CodePair | None = None,
        handle: int | None = None,
    ) -> None:
        diagnostic = Diagnostic(
            kind,
            message,
            severity=severity,
            section=self.section,
            pair_index=self._pairs.pair_index,
            offset=pair.offset if pair is not None else None,
            handle=handle,
        )
        logger.warning("%s", diagnostic)
        self.doc.diagnostics.append(diagnostic)

    # driver

    def run(self, strict: bool) -> Document:
        try:
            self._read_sections()
        except DxfReadError as exc:
            exc.document = self.doc
            if exc.section is None:
                exc.section = self.section
            raise
        self._finish()
        if strict:
            for diagnostic in self.doc.diagnostics:
                if diagnostic.severity == ERROR:
                    raise diagnostic.to_exception(self.doc)
        return self.doc

    def _read_sections(self) -> None:
        handlers = {
            "HEADER": self._read_header,
            "CLASSES": self._read_classes,
            "TABLES": self._read_tables,
            "BLOCKS": self._read_blocks,
            "ENTITIES": self._read_entities,
            "OBJECTS": self._read_objects,
            "THUMBNAILIMAGE": self._read_thumbnail,
        }
        while True:
            pair = self._next()
            if pair is None or pair.is_marker("EOF"):
                return
            if not pair.is_marker("SECTION"):
                self._diagnose(
                    "UnexpectedPair",
                    f"pair {pair.code}/{pair.value!r} outside of any section",
                    severity=WARNING,
                    pair=pair,
                )
                continue
            name_pair = self._next()
            if name_pair is None:
                raise UnexpectedEndOfInput("section without a name", pair_index=self._pairs.pair_index)
            if name_pair.code != 2:
                self._push(name_pair)
                name = ""
            else:
                name = str(name_pair.value).upper()
            self.section = name
            logger.debug("reading %s section", name or "<unnamed>")
            handler = handlers.get(name)
            if handler is None:
                self._read_unknown_section(name, name_pair)
            else:
                handler()
            self.section = None

    def _end_section(self) -> None:
        pair = self._next()
        if pair is not None and pair.is_marker("ENDSEC"):
            return
        if pair is not None:
            self._push(pair)
        self._unterminated(pair)

    def _unterminated(self, pair: CodePair | None) -> None:
        found = "end of input" if pair is None else f"{pair.code}/{pair.value}"
        self._diagnose(
            "UnterminatedSection",
            f"{self.section or 'section'} ended at {found} without ENDSEC",
            pair=pair,
        )

    def _next_record(self) -> CodePair | None:
        """Return the next ``0/TYPE`` pair of the current section, ``None`` at its end."""
        while True:
            pair = self._next()
            if pair is None:
                self._unterminated(None)
                return None
            if pair.code == 0:
                if pair.value == "ENDSEC":
                    return None
                if pair.value in _SECTION_BREAKS:
                    self._push(pair)
                    self._unterminated(pair)
                    return None
                return pair
            self._stray(pair)

    def _stray(self, pair: CodePair) -> None:
        self._diagnose(
            "UnexpectedPair",
            f"pair {pair.code}/{pair.value!r} does not belong to any record",
            severity=WARNING,
            pair=pair,
        )

    # sections

    def _read_header(self) -> None:
        while True:
            pair = self._next()
            if pair is None or (pair.code == 0 and pair.value in _SECTION_BREAKS):
                if pair is not None:
                    self._push(pair)
                self._unterminated(pair)
                return
            if pair.is_marker("ENDSEC"):
                return
            if pair.code != 9:
                self._stray(pair)
                continue
            values: list[CodePair] = []
            while True:
                value = self._next()
                if value is None:
                    break
                if value.code in (0, 9):
                    self._push(value)
                    break
                values.append(value)
            self._set_header(str(pair.value).upper(), values)

    def _set_header(self, name: str, values: list[CodePair]) -> None:
        header = self.doc.header
        spec = VERSION_TABLE.header_variable(name)
        if spec is None or not _matches_header(spec, values):
            header.raw[name] = values
            return
        if spec.dims == 1:
            value = values[0].value
        else:
            value = tuple(pair.value for pair in values) + (0.0,) * (spec.dims - len(values))
        if name == "$ACADVER":
            try:
                self.version = Version.parse(value)
            except ValueError:
                self.version = NEWEST
                self._diagnose(
                    "MalformedValue",
                    f"unsupported $ACADVER {value!r}, reading as {NEWEST.acadver}",
                    severity=WARNING,
                    pair=values[0],
                )
            header.version = self.version
            self._update_encoding()
            return
        header[name] = value
        if name == "$DWGCODEPAGE":
            self._update_encoding()
        elif name == "$HANDSEED" and isinstance(value, int) and value > 0:
            self.doc.handles.observe(value - 1)

    def _update_encoding(self) -> None:
        self._pairs.encoding = text_encoding(self.version, self.doc.header.codepage)

    def _read_classes(self) -> None:
        while True:
            pair = self._next_record()
            if pair is None:
                return
            body = self._collect_body()
            if pair.value != "CLASS":
                self._stray(pair)
                continue
            dxf_class = DxfClass("CLASS")
            self._populate(dxf_class, CLASS_VARIANT, body)
            self._class_names.add(dxf_class.name.upper())
            self.doc.classes.append(dxf_class)

    def _read_tables(self) -> None:
        while True:
            pair = self._next_record()
            if pair is None:
                return
            if pair.value != "TABLE":
                self._stray(pair)
                self._collect_body()
                continue
            table = Table("TABLE")
            self._populate(table, TABLE_VARIANT, self._collect_body())
            self._track(table)
            name = table.name.upper()
            if name in self.doc.tables:
                self._diagnose(
                    "DuplicateName",
                    f"table {name} appears twice; entries are merged",
                    severity=WARNING,
                    pair=pair,
                    handle=table.handle,
                )
                self._read_table_entries(self.doc.tables[name])
            else:
                self.doc.tables[name] = table
                self._read_table_entries(table)

    def _read_table_entries(self, table: Table) -> None:
        while True:
            pair = self._next()
            if pair is None:
                self._unterminated(None)
                return
            if pair.code != 0:
                self._stray(pair)
                continue
            if pair.value == "ENDTAB":
                table.overflow.extend(self._collect_body())
                return
            if pair.value == "ENDSEC" or pair.value in _SECTION_BREAKS:
                self._push(pair)
                self._diagnose(
                    "UnterminatedSection",
                    f"table {table.name} has no ENDTAB",
                    pair=pair,
                    handle=table.handle,
                )
                return
            entry = self._read_element(str(pair.value), TABLE_ENTRY, pair)
            if isinstance(entry, TableEntry) and entry.name in table:
                self._diagnose(
                    "DuplicateName",
                    f"{table.name} entry {entry.name!r} is defined more than once",
                    severity=WARNING,
                    pair=pair,
                    handle=entry.handle,
                )
            table.add(entry)

    def _read_blocks(self) -> None:
        while True:
            pair = self._next_record()
            if pair is None:
                return
            if pair.value != "BLOCK":
                self._stray(pair)
                self._collect_body()
                continue
            begin = self._read_element("BLOCK", ENTITY, pair)
            entities = self._read_entity_run({"ENDBLK"})
            end_pair = self._next()
            if end_pair is not None and end_pair.is_marker("ENDBLK"):
                end = self._read_element("ENDBLK", ENTITY, end_pair)
            else:
                if end_pair is not None:
                    self._push(end_pair)
                self._diagnose(
                    "UnterminatedEntity",
                    f"block {begin.get('name')!r} has no ENDBLK",
                    pair=end_pair,
                    handle=begin.handle,
                )
                end = Entity("ENDBLK", owner=begin.owner, dxf={"layer": begin.get("layer")})
                self._unhandled.append(end)
            self.doc.blocks.append(Block(begin, end, entities))

    def _read_entities(self) -> None:
        self.doc.entities.extend(self._read_entity_run(set()))
        self._end_section()

    def _read_entity_run(self, stop: set[str]) -> list[Entity]:
        entities: list[Entity] = []
        while True:
            pair = self._next()
            if pair is None:
                return entities
            if pair.code != 0:
                self._stray(pair)
                continue
            if pair.value in stop or pair.value == "ENDSEC" or pair.value in _SECTION_BREAKS:
                self._push(pair)
                return entities
            entity = self._read_element(str(pair.value), ENTITY, pair)
            self._read_children(entity)
            entities.append(entity)

    def _read_children(self, entity: Element) -> None:
        if entity.dxftype == "POLYLINE":
            child_type = "VERTEX"
        elif entity.dxftype == "INSERT" and entity.get("has_attributes"):
            child_type = "ATTRIB"
        else:
            return
        while True:
            pair = self._next()
            if pair is None:
                break
            if pair.is_marker(child_type):
                entity.children.append(self._read_element(child_type, ENTITY, pair))
                continue
            if pair.is_marker("SEQEND"):
                entity.seqend = self._read_element("SEQEND", ENTITY, pair)
                return
            self._push(pair)
            break
        if entity.children or entity.get("vertices_follow", 1):
            self._diagnose(
                "UnterminatedEntity",
                f"{entity.dxftype} {entity.handle:X} has no SEQEND",
                severity=WARNING,
                handle=entity.handle,
            )

    def _read_objects(self) -> None:
        while True:
            pair = self._next_record()
            if pair is None:
                return
            self.doc.objects.append(self._read_element(str(pair.value), OBJECT, pair))

    def _read_thumbnail(self) -> None:
        self.doc.thumbnail = self._read_raw_section()

    def _read_unknown_section(self, name: str, name_pair: CodePair) -> None:
        self._diagnose(
            "UnknownSection",
            f"unknown section {name or '<unnamed>'} kept as raw pairs",
            severity=WARNING,
            pair=name_pair,
        )
        self.doc.unknown_sections[name] = self._read_raw_section()

    def _read_raw_section(self) -> list[CodePair]:
        pairs: list[CodePair] = []
        while True:
            pair = self._next()
            if pair is None:
                self._unterminated(None)
                return pairs
            if pair.is_marker("ENDSEC"):
                return pairs
            if pair.code == 0 and pair.value in _SECTION_BREAKS:
                self._push(pair)
                self._unterminated(pair)
                return pairs
            pairs.append(pair)

    # elements

    def _read_element(self, dxftype: str, category: str, start: CodePair) -> Element:
        variant = VERSION_TABLE.variant(dxftype)
        if variant is not None and variant.category != category:
            variant = None
        self._kinds = variant.value_kinds() if variant is not None else {}
        body = self._collect_body()
        self._kinds = {}
        if variant is not None:
            element = _ELEMENT_TYPES[category](dxftype)
            self._populate(element, variant, body)
        else:
            element = UnknownElement(dxftype, category=category, pairs=body)
            _scan_envelope(element)
            if dxftype.upper() not in self._class_names:
                self._diagnose(
                    "UnknownType",
                    f"unknown {category.replace('_', ' ')} type {dxftype!r} kept as raw pairs",
                    severity=WARNING,
                    pair=start,
                    handle=element.handle or None,
                )
        self._track(element)
        return element

    def _track(self, element: Element) -> None:
        if not element.handle:
            self._unhandled.append(element)
            return
        self.doc.source_handles = True
        try:
            self.doc.handles.register(element)
        except HandleCollision as exc:
            self._diagnose("HandleCollision", str(exc), handle=element.handle)
            self._unhandled.append(element)

    def _populate(self, element: Element, variant: VariantSpec, pairs: list[CodePair]) -> None:
        dxf = element.dxf
        markers = variant.markers()
        tail = variant.tail_field()
        tail_trigger = _field_before(variant, tail) if tail is not None and tail.code < 0 else None
        tail_values: list[CodePair] | None = None
        chunks: list[str] = []
        index = 0
        while index < len(pairs):
            pair = pairs[index]
            if pair.code == APPLICATION_CODE:
                blocks, index = read_xdata(pairs, index)
                element.xdata.extend(blocks)
                continue
            if tail_values is not None:
                tail_values.append(pair)
                index += 1
                continue
            if pair.code == 102:
                index = _read_group(element, pairs, index)
                continue
            index += 1
            if pair.code == 100 and pair.value in markers:
                continue
            slot = None if isinstance(pair.value, UnknownCode) else variant.slot_for(pair.code, self.version)
            if slot is None:
                if tail is not None and tail.code < 0 and not isinstance(pair.value, UnknownCode):
                    tail_values = dxf.setdefault(tail.name, [])
                    tail_values.append(pair)
                else:
                    element.overflow.append(pair)
                continue
            spec = slot.field
            if spec.role == HANDLE:
                element.handle = pair.value
            elif spec.role == OWNER:
                element.owner = pair.value
            elif spec.tail:
                tail_values = dxf.setdefault(spec.name, [])
                tail_values.append(pair)
            elif slot.continuation:
                chunks.append(str(pair.value))
            elif slot.member is not None:
                _set_member(dxf, slot, pair.value)
            else:
                value = pair.value
                if spec.continuation is not None and chunks:
                    value = "".join(chunks) + str(value)
                    chunks = []
                _assign(dxf, spec, slot.component, value)
                if spec is tail_trigger:
                    tail_values = dxf.setdefault(tail.name, [])
        if chunks:
            for spec in variant.fields:
                if spec.continuation is not None:
                    dxf[spec.name] = "".join(chunks) + str(dxf.get(spec.name, ""))

    # post-pass

    def _finish(self) -> None:
        doc = self.doc
        for element in self._unhandled:
            element.handle = 0
            doc.handles.register(element)
        doc.pending_owners = {
            element.handle
            for element in doc.handles.elements()
            if element.owner and element.owner not in doc.handles
        }
        self.section = None
        doc.diagnostics.extend(doc.validate())
        doc.source_version = self.version
        logger.info(
            "read %s drawing %s: %d entities, %d blocks, %d objects, %d diagnostics",
            doc.source_format,
            self.version.acadver,
            len(doc.entities),
            len(doc.blocks),
            len(doc.objects),
            len(doc.diagnostics),
        )


def _matches_header(spec: FieldSpec, values: list[CodePair]) -> bool:
    if not values or len(values) > spec.dims:
        return False
    expected = spec.component_codes()[: len(values)]
    if tuple(pair.code for pair in values) != expected:
        return False
    return not any(isinstance(pair.value, UnknownCode) for pair in values)


def _field_before(variant: VariantSpec, tail: FieldSpec) -> FieldSpec | None:
    previous = None
    for spec in variant.fields:
        if spec is tail:
            return previous
        if spec.role is None:
            previous = spec
    return None


def _read_group(element: Element, pairs: list[CodePair], index: int) -> int:
    opener = str(pairs[index].value)
    if not opener.startswith("{"):
        element.overflow.append(pairs[index])
        return index + 1
    end = index + 1
    while end < len(pairs) and not (pairs[end].code == 102 and str(pairs[end].value).strip() == "}"):
        end += 1
    closed = end < len(pairs)
    inner = pairs[index + 1:end]
    stop = end + 1 if closed else end
    name = opener[1:].upper()
    if closed and name == "ACAD_REACTORS" and all(pair.code == 330 for pair in inner):
        element.reactors.extend(pair.value for pair in inner)
    elif closed and name == "ACAD_XDICTIONARY" and len(inner) == 1 and inner[0].code == 360:
        element.xdictionary = inner[0].value
    else:
        element.overflow.extend(pairs[index:stop])
    return stop


def _blank_point(dims: int) -> tuple[float, ...]:
    return (0.0,) * dims


def _with_component(point: tuple[float, ...], component: int, value: Any) -> tuple[float, ...]:
    return point[:component] + (value,) + point[component + 1:]


def _assign(dxf: dict[str, Any], spec: FieldSpec, component: int, value: Any) -> None:
    if spec.dims == 1:
        if spec.repeated:
            dxf.setdefault(spec.name, []).append(value)
        else:
            dxf[spec.name] = value
        return
    if spec.repeated:
        points = dxf.setdefault(spec.name, [])
        if component == 0 or not points:
            points.append(_blank_point(spec.dims))
        points[-1] = _with_component(points[-1], component, value)
        return
    current = dxf.get(spec.name) if component else None
    if current is None:
        current = _blank_point(spec.dims)
    dxf[spec.name] = _with_component(tuple(current), component, value)


def _set_member(dxf: dict[str, Any], slot: Slot, value: Any) -> None:
    spec = slot.field
    member = slot.member
    records = dxf.setdefault(spec.name, [])
    if not records or (member is spec.members[0] and slot.component == 0):
        records.append({})
    record = records[-1]
    if member.dims == 1:
        record[member.name] = value
        return
    current = record.get(member.name) if slot.component else None
    if current is None:
        current = _blank_point(member.dims)
    record[member.name] = _with_component(tuple(current), slot.component, value)


def _scan_envelope(element: UnknownElement) -> None:
    """Pick the handle and owner out of a record the codec has no schema for."""
    in_group = False
    for pair in element.pairs:
        if pair.code == 102:
            in_group = str(pair.value).startswith("{")
        elif pair.code in (5, 105) and not element.handle and isinstance(pair.value, int):
            element.handle = pair.value
        elif pair.code == 330 and not in_group and not element.owner and isinstance(pair.value, int):
            element.owner = pair.value
        elif pair.code == APPLICATION_CODE:
            return
