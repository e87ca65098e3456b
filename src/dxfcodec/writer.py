"""Serialize a :class:`~dxfcodec.document.Document` as ASCII DXF, binary DXF or DXB."""
from __future__ import annotations

import io
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, BinaryIO

from .codepairs import ASCII, BINARY, DXB, CodePair, open_code_pair_writer
from .document import Document
from .entity import Element, Entity, UnknownElement
from .errors import WARNING, Diagnostic, DxfWriteError, UnsupportedVersion
from .schema import GROUPS, HANDLE, MARKER, OWNER, FieldSpec, VariantSpec
from .schema_data import CLASS_VARIANT, TABLE_VARIANT, VERSION_TABLE
from .values import ValueKind, split_long_string, text_encoding
from .versions import Version
from .xdata import write_xdata

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass(frozen=True)
class WriteResult:
    data: bytes
    version: Version
    encoding: str
    losses: tuple[Diagnostic, ...] = ()
    dropped: dict[str, int] = field(default_factory=dict)

    @property
    def byte_count(self) -> int:
        return len(self.data)


def encode(document: Document, *, version: Version | str | None = None, encoding: str = ASCII) -> WriteResult:
    """Serialize ``document`` in memory.

    Nothing is produced when serialization fails, so callers never see a
    partially written drawing.
    """
    target = _target_version(document, version)
    if encoding == DXB:
        from .dxb import write_dxb

        return WriteResult(write_dxb(document), target, DXB)
    if encoding not in (ASCII, BINARY):
        raise DxfWriteError(f"unsupported encoding: {encoding}")
    writer = _DxfWriter(document, target, encoding)
    data = writer.run()
    losses = tuple(writer.losses.values())
    if losses:
        logger.info("writing %s lost %d field(s) or element type(s)", target.acadver, len(losses))
    return WriteResult(data, target, encoding, losses, dict(writer.dropped))


def write(
    document: Document,
    target: BinaryIO | str | os.PathLike,
    *,
    version: Version | str | None = None,
    encoding: str = ASCII,
) -> WriteResult:
    result = encode(document, version=version, encoding=encoding)
    if isinstance(target, (str, os.PathLike)):
        Path(target).write_bytes(result.data)
    else:
        target.write(result.data)
    return result


def write_bytes(document: Document, *, version: Version | str | None = None, encoding: str = ASCII) -> bytes:
    return encode(document, version=version, encoding=encoding).data


def _target_version(document: Document, version: Version | str | None) -> Version:
    if version is None:
        return document.version
    try:
        return Version.parse(version)
    except ValueError as exc:
        raise UnsupportedVersion(str(exc)) from None


def _polyline_subclass(element: Element) -> str:
    flags = element.get("flags", 0) or 0
    if flags & 8:
        return "AcDb3dPolyline"
    if flags & 16:
        return "AcDbPolygonMesh"
    if flags & 64:
        return "AcDbPolyFaceMesh"
    return "AcDb2dPolyline"


def _vertex_subclass(element: Element) -> str:
    flags = element.get("flags", 0) or 0
    if flags & 128 and flags & 64:
        return "AcDbPolyFaceMeshVertex"
    if flags & 128:
        return "AcDbFaceRecord"
    if flags & 64:
        return "AcDbPolygonMeshVertex"
    if flags & 32:
        return "AcDb3dPolylineVertex"
    return "AcDb2dVertex"


_DERIVED = {
    ("POLYLINE", "subclass"): _polyline_subclass,
    ("VERTEX", "subclass"): _vertex_subclass,
}


class _DxfWriter:
    def __init__(self, document: Document, version: Version, encoding: str) -> None:
        self.doc = document
        self.version = version
        self.encoding = encoding
        self.same_version = (document.source_version or document.version) == version
        self.write_handles = (
            version >= Version.R13
            or bool(document.header.get("$HANDLING"))
            or (self.same_version and document.source_handles)
        )
        self.losses: dict[tuple[str, str | None], Diagnostic] = {}
        self.dropped: dict[str, int] = {}
        self._buffer = io.BytesIO()
        self.pairs = open_code_pair_writer(
            self._buffer, version, encoding, text_encoding(version, document.header.codepage)
        )

    def w(self, code: int, value: Any, kind: ValueKind | None = None) -> None:
        self.pairs.write(code, value, kind)

    def run(self) -> bytes:
        self.pairs.write_header()
        self._write_header()
        if self.doc.classes:
            self._write_classes()
        if self.doc.tables:
            self._write_tables()
        if self.doc.blocks:
            self._write_blocks()
        self._write_entities()
        if self.doc.objects:
            self._write_objects()
        if self.doc.thumbnail:
            self._write_raw_section("THUMBNAILIMAGE", self.doc.thumbnail, Version.R2000)
        for name, pairs in self.doc.unknown_sections.items():
            self._write_raw_section(name, pairs, self.version)
        self.w(0, "EOF")
        return self._buffer.getvalue()

    # losses

    def _loss(self, variant: str, name: str | None, message: str, handle: int | None = None) -> None:
        key = (variant, name)
        if key in self.losses:
            return
        self.losses[key] = Diagnostic(
            "DowngradeLoss", message, severity=WARNING, section=None, handle=handle or None
        )
        logger.warning("%s", self.losses[key])

    def _drop(self, element: Element, reason: str) -> None:
        self.dropped[element.dxftype] = self.dropped.get(element.dxftype, 0) + 1
        self._loss(element.dxftype, None, f"{element.dxftype} dropped: {reason}", element.handle)

    # sections

    def _begin(self, name: str) -> None:
        self.w(0, "SECTION")
        self.w(2, name)

    def _end(self) -> None:
        self.w(0, "ENDSEC")

    def _write_header(self) -> None:
        header = self.doc.header
        self._begin("HEADER")
        self.w(9, "$ACADVER")
        self.w(1, self.version.acadver)
        known = set()
        for spec in VERSION_TABLE.header_variables():
            name = spec.name
            known.add(name)
            if name == "$ACADVER" or name not in header:
                continue
            value = header[name]
            if value is None:
                continue
            if not spec.visible(self.version):
                self._loss("HEADER", name, f"header variable {name} does not exist in {self.version.acadver}")
                continue
            if name == "$HANDSEED":
                value = max(int(value), self.doc.handles.next_handle)
            self.w(9, name)
            self._write_components(spec, value)
        for name, _ in header.items():
            if name not in known:
                self._loss("HEADER", name, f"header variable {name} has no known group code")
        for name, pairs in header.raw.items():
            if not self.same_version:
                self._loss("HEADER", name, f"unrecognized header variable {name} dropped")
                continue
            self.w(9, name)
            for pair in pairs:
                self._write_pair(pair)
        self._end()

    def _write_classes(self) -> None:
        if self.version < Version.R13:
            for dxf_class in self.doc.classes:
                self._drop(dxf_class, f"classes do not exist in {self.version.acadver}")
            return
        self._begin("CLASSES")
        for dxf_class in self.doc.classes:
            self._write_element(dxf_class, CLASS_VARIANT)
        self._end()

    def _write_tables(self) -> None:
        self._begin("TABLES")
        for table in self.doc.tables.values():
            entry_variant = VERSION_TABLE.variant(table.name)
            if entry_variant is not None and not entry_variant.visible(self.version):
                for entry in table.entries:
                    self._drop(entry, f"table {table.name} does not exist in {self.version.acadver}")
                continue
            self._write_element(table, TABLE_VARIANT)
            for entry in table.entries:
                self._write_any(entry)
            self.w(0, "ENDTAB")
        self._end()

    def _write_blocks(self) -> None:
        self._begin("BLOCKS")
        for block in self.doc.blocks:
            self._write_any(block.begin)
            for entity in block.entities:
                self._write_entity(entity)
            self._write_any(block.end)
        self._end()

    def _write_entities(self) -> None:
        self._begin("ENTITIES")
        for entity in self.doc.entities:
            self._write_entity(entity)
        self._end()

    def _write_objects(self) -> None:
        if self.version < Version.R13:
            for obj in self.doc.objects:
                self._drop(obj, f"objects do not exist in {self.version.acadver}")
            return
        self._begin("OBJECTS")
        for obj in self.doc.objects:
            self._write_any(obj)
        self._end()

    def _write_raw_section(self, name: str, pairs: list[CodePair], since: Version) -> None:
        if not self.same_version or self.version < since:
            self._loss("SECTION", name, f"section {name} dropped")
            return
        self._begin(name)
        for pair in pairs:
            self._write_pair(pair)
        self._end()

    # elements

    def _write_entity(self, entity: Element) -> None:
        if not self._write_any(entity):
            return
        children = getattr(entity, "children", [])
        for child in children:
            self._write_any(child)
        seqend = getattr(entity, "seqend", None)
        if seqend is not None:
            self._write_any(seqend)
        elif entity.dxftype == "POLYLINE" or children:
            self._write_element(Entity("SEQEND", dxf={"layer": entity.get("layer", "0")}), VERSION_TABLE.variant("SEQEND"))

    def _write_any(self, element: Element) -> bool:
        if isinstance(element, UnknownElement):
            return self._write_unknown(element)
        variant = element.variant
        if variant is None:
            self._drop(element, "no schema for this type")
            return False
        return self._write_element(element, variant)

    def _write_unknown(self, element: UnknownElement) -> bool:
        if not self.same_version:
            self._drop(element, "unrecognized types are only written at the version they were read from")
            return False
        self.w(0, element.dxftype)
        for pair in element.pairs:
            self._write_pair(pair)
        return True

    def _write_element(self, element: Element, variant: VariantSpec) -> bool:
        if not variant.visible(self.version):
            self._drop(element, f"not available before {variant.min_version.acadver}")
            return False
        self.w(0, element.dxftype)
        for spec in variant.fields:
            if not spec.visible(self.version):
                self._note_invisible(element, variant, spec)
                continue
            if spec.role == HANDLE:
                if self.write_handles and element.handle:
                    self.w(spec.code, element.handle)
            elif spec.role == OWNER:
                if element.owner or spec.write_default:
                    self.w(spec.code, element.owner)
            elif spec.role == GROUPS:
                self._write_groups(element)
            elif spec.role == MARKER:
                self.w(spec.code, spec.default)
            else:
                self._write_field(element, variant, spec)
        if element.overflow:
            if self.same_version:
                for pair in element.overflow:
                    self._write_pair(pair)
            else:
                self._loss(variant.name, "<unrecognized>", f"unrecognized group codes of {variant.name} dropped")
        if element.xdata:
            if self.version >= Version.R2000:
                write_xdata(self.pairs, element.xdata)
            else:
                self._loss(variant.name, "<xdata>", f"extended data of {variant.name} dropped")
        return True

    def _note_invisible(self, element: Element, variant: VariantSpec, spec: FieldSpec) -> None:
        if spec.role == GROUPS:
            if element.reactors or element.xdictionary:
                self._loss(variant.name, spec.name, f"{variant.name} reactors and extension dictionary dropped")
            return
        if spec.role is not None or spec.count_of or spec.presence_of:
            return
        value = element.dxf.get(spec.name)
        if value is None or value == [] or value == spec.default:
            return
        self._loss(
            variant.name,
            spec.name,
            f"{variant.name}.{spec.name} does not exist in {self.version.acadver}",
            element.handle,
        )

    def _write_groups(self, element: Element) -> None:
        if element.reactors:
            self.w(102, "{ACAD_REACTORS")
            for handle in element.reactors:
                self.w(330, handle)
            self.w(102, "}")
        if element.xdictionary:
            self.w(102, "{ACAD_XDICTIONARY")
            self.w(360, element.xdictionary)
            self.w(102, "}")

    def _write_field(self, element: Element, variant: VariantSpec, spec: FieldSpec) -> None:
        if spec.tail:
            for pair in element.dxf.get(spec.name, ()):
                self._write_pair(pair)
            return
        if spec.members:
            for record in element.dxf.get(spec.name, ()):
                self._write_record(variant, spec, record)
            return
        if spec.count_of:
            value = len(_collection(element, spec.count_of))
        elif spec.presence_of:
            value = 1 if _collection(element, spec.presence_of) else 0
        else:
            value = element.dxf.get(spec.name, _MISSING)
            if value is _MISSING or value is None:
                derive = _DERIVED.get((variant.name, spec.name))
                if spec.mirror is not None:
                    value = element.dxf.get(spec.mirror, _MISSING)
                elif derive is not None:
                    value = derive(element)
            if value is _MISSING:
                value = spec.default
        if value is None:
            return
        if spec.repeated:
            for item in value:
                self._write_components(spec, item)
            return
        if not spec.write_default and value == spec.default:
            return
        if spec.continuation is not None:
            chunks, last = split_long_string(str(value))
            for chunk in chunks:
                self.w(spec.continuation, chunk)
            self.w(spec.code, last)
            return
        self._write_components(spec, value)

    def _write_record(self, variant: VariantSpec, spec: FieldSpec, record: dict[str, Any]) -> None:
        for i, member in enumerate(spec.members):
            value = record.get(member.name, member.default)
            if not member.visible(self.version):
                if value is not None and value != member.default:
                    self._loss(
                        variant.name,
                        f"{spec.name}.{member.name}",
                        f"{variant.name}.{spec.name}.{member.name} does not exist in {self.version.acadver}",
                    )
                continue
            if value is None:
                continue
            if i > 0 and not member.write_default and value == member.default:
                continue
            self._write_components(member, value)

    def _write_components(self, spec: FieldSpec, value: Any) -> None:
        if spec.dims == 1:
            self.w(spec.code, value, spec.value_kind)
            return
        components = tuple(value) + (0.0,) * spec.dims
        for i, code in enumerate(spec.component_codes()):
            self.w(code, components[i])

    def _write_pair(self, pair: CodePair) -> None:
        if self.encoding == ASCII and pair.raw is not None:
            self.pairs.write_raw(pair.code, pair.raw)
        else:
            self.w(pair.code, pair.value)


def _collection(element: Element, name: str) -> Any:
    if name in element.dxf:
        return element.dxf[name] or ()
    return getattr(element, name, None) or ()
