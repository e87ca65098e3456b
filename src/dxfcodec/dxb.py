"""DXB, the compact binary drawing-interchange variant.

A DXB file is the sentinel followed by opcode-tagged records.  Coordinates
are doubles in floating-point mode and 16-bit integers multiplied by the
current scale factor in integer mode.  Only a handful of entity kinds exist.
"""
from __future__ import annotations

import io
import logging
import struct
from typing import Any

from .codepairs import DXB, DXB_SENTINEL
from .document import Document
from .entity import Entity
from .errors import MalformedCode, NotRecognizedSentinel, UnexpectedEndOfInput, UnsupportedEntity
from .versions import Version

logger = logging.getLogger(__name__)

END = 0
LINE = 1
POINT = 2
CIRCLE = 3
ARC = 8
TRACE = 9
LINE3D = 10
SOLID = 11
SEQEND = 17
POLYLINE = 19
VERTEX = 20
FACE3D = 22
SCALE_FACTOR = 128
NEW_LAYER = 129
LINE_EXTENSION = 130
BLOCK_BASE = 132
BULGE = 133
WIDTH = 134
NUMBER_MODE = 135
NEW_COLOR = 136

DXB_VERSION = Version.R12
SUPPORTED_TYPES = frozenset({"LINE", "POINT", "CIRCLE", "ARC", "TRACE", "SOLID", "3DFACE", "POLYLINE"})
_CORNERS = ("first", "second", "third", "fourth")
# polygon mesh and polyface mesh flags
_MESH_FLAGS = 16 | 64


def read_dxb(data: bytes) -> Document:
    if not data.startswith(DXB_SENTINEL):
        raise NotRecognizedSentinel("missing DXB sentinel", offset=0)
    return _DxbReader(data).run()


class _DxbReader:
    def __init__(self, data: bytes) -> None:
        self._data = data
        self._index = len(DXB_SENTINEL)
        self.doc = Document(DXB_VERSION)
        self.doc.source_format = DXB
        self.doc.source_version = DXB_VERSION
        self.float_mode = True
        self.scale = 1.0
        self.layer = "0"
        self.color = 256
        self.last_point: tuple[float, float, float] | None = None
        self.polyline: Entity | None = None

    def _unpack(self, fmt: str) -> tuple[Any, ...]:
        size = struct.calcsize(fmt)
        end = self._index + size
        if end > len(self._data):
            raise UnexpectedEndOfInput("truncated DXB record", offset=self._index)
        values = struct.unpack(fmt, self._data[self._index:end])
        self._index = end
        return values

    def _n(self) -> float:
        if self.float_mode:
            return self._unpack("<d")[0]
        return self._unpack("<h")[0] * self.scale

    def _angle(self) -> float:
        if self.float_mode:
            return self._unpack("<d")[0]
        return self._unpack("<i")[0] / 1_000_000

    def _bulge(self) -> float:
        if self.float_mode:
            return self._unpack("<d")[0]
        return self._unpack("<i")[0] / 65536

    def _word(self) -> int:
        return self._unpack("<h")[0]

    def _string(self) -> str:
        end = self._data.find(b"\x00", self._index)
        if end < 0:
            raise UnexpectedEndOfInput("unterminated DXB string", offset=self._index)
        text = self._data[self._index:end].decode("cp1252", errors="surrogateescape")
        self._index = end + 1
        return text

    def _xy(self) -> tuple[float, float, float]:
        x = self._n()
        y = self._n()
        return (x, y, 0.0)

    def _xyz(self) -> tuple[float, float, float]:
        x = self._n()
        y = self._n()
        z = self._n()
        return (x, y, z)

    def _entity(self, dxftype: str, **dxf: Any) -> Entity:
        dxf = {"layer": self.layer, **dxf}
        if self.color != 256:
            dxf["color"] = self.color
        return Entity(dxftype, dxf=dxf)

    def _add(self, dxftype: str, **dxf: Any) -> Entity:
        return self.doc.add_entity(self._entity(dxftype, **dxf))

    def run(self) -> Document:
        handlers = {
            LINE: self._line,
            POINT: lambda: self._add("POINT", location=self._xy()),
            CIRCLE: lambda: self._add("CIRCLE", center=self._xy(), radius=self._n()),
            ARC: self._arc,
            TRACE: lambda: self._quad("TRACE", self._xy),
            LINE3D: self._line3d,
            SOLID: lambda: self._quad("SOLID", self._xy),
            SEQEND: self._seqend,
            POLYLINE: self._polyline,
            VERTEX: self._vertex,
            FACE3D: lambda: self._quad("3DFACE", self._xyz),
            SCALE_FACTOR: self._scale_factor,
            NEW_LAYER: self._new_layer,
            LINE_EXTENSION: self._line_extension,
            BLOCK_BASE: self._block_base,
            BULGE: self._set_bulge,
            WIDTH: self._set_width,
            NUMBER_MODE: self._number_mode,
            NEW_COLOR: self._new_color,
        }
        while self._index < len(self._data):
            offset = self._index
            opcode = self._data[self._index]
            self._index += 1
            if opcode == END:
                break
            handler = handlers.get(opcode)
            if handler is None:
                raise MalformedCode(f"unknown DXB record type {opcode}", offset=offset, document=self.doc)
            handler()
        if self.polyline is not None:
            logger.warning("DXB polyline has no SEQEND record")
            self.doc.add_entity(self.polyline)
            self.polyline = None
        logger.info("read DXB drawing: %d entities", len(self.doc.entities))
        return self.doc

    def _line(self) -> None:
        start = self._xy()
        end = self._xy()
        self._add("LINE", start=start, end=end)
        self.last_point = end

    def _line3d(self) -> None:
        start = self._xyz()
        end = self._xyz()
        self._add("LINE", start=start, end=end)
        self.last_point = end

    def _line_extension(self) -> None:
        dx = self._n()
        dy = self._n()
        start = self.last_point or (0.0, 0.0, 0.0)
        end = (start[0] + dx, start[1] + dy, start[2])
        self._add("LINE", start=start, end=end)
        self.last_point = end

    def _arc(self) -> None:
        center = self._xy()
        radius = self._n()
        start = self._angle()
        end = self._angle()
        self._add("ARC", center=center, radius=radius, start_angle=start, end_angle=end)

    def _quad(self, dxftype: str, point) -> None:
        corners = [point() for _ in _CORNERS]
        self._add(dxftype, **dict(zip(_CORNERS, corners)))

    def _polyline(self) -> None:
        closed = self._word()
        if self.polyline is not None:
            self.doc.add_entity(self.polyline)
        self.polyline = self._entity("POLYLINE", flags=1 if closed else 0)

    def _vertex(self) -> None:
        location = self._xy()
        if self.polyline is None:
            # a vertex outside a polyline is drawn as a point
            self._add("POINT", location=location)
            return
        self.polyline.children.append(self._entity("VERTEX", location=location))

    def _seqend(self) -> None:
        if self.polyline is None:
            return
        self.polyline.seqend = self._entity("SEQEND")
        self.doc.add_entity(self.polyline)
        self.polyline = None

    def _set_bulge(self) -> None:
        bulge = self._bulge()
        if self.polyline is not None and self.polyline.children:
            self.polyline.children[-1].dxf["bulge"] = bulge

    def _set_width(self) -> None:
        start = self._n()
        end = self._n()
        if self.polyline is None:
            return
        if self.polyline.children:
            target, names = self.polyline.children[-1], ("start_width", "end_width")
        else:
            target, names = self.polyline, ("default_start_width", "default_end_width")
        target.dxf[names[0]] = start
        target.dxf[names[1]] = end

    def _scale_factor(self) -> None:
        self.scale = self._unpack("<d")[0]

    def _new_layer(self) -> None:
        self.layer = self._string()

    def _block_base(self) -> None:
        self.doc.header["$INSBASE"] = self._xy()

    def _number_mode(self) -> None:
        self.float_mode = self._word() != 0

    def _new_color(self) -> None:
        self.color = self._word()


def write_dxb(document: Document) -> bytes:
    """Serialize ``document`` as DXB.

    Raises :class:`UnsupportedEntity` for the first element DXB cannot carry;
    no bytes are produced in that case.
    """
    for entity in document.entities:
        if entity.dxftype not in SUPPORTED_TYPES:
            raise UnsupportedEntity(entity.dxftype, entity.handle or None)
        if entity.dxftype == "POLYLINE" and entity.get("flags", 0) & _MESH_FLAGS:
            raise UnsupportedEntity("POLYLINE", entity.handle or None)
    for block in document.blocks:
        if block.entities:
            raise UnsupportedEntity("BLOCK", block.begin.handle or None)
    writer = _DxbWriter()
    for entity in document.entities:
        writer.write_entity(entity)
    return writer.finish()


class _DxbWriter:
    def __init__(self) -> None:
        self._buffer = io.BytesIO()
        self._buffer.write(DXB_SENTINEL)
        self.layer = "0"
        self.color = 256
        self._record(NUMBER_MODE, "<h", 1)

    def _record(self, opcode: int, fmt: str = "", *values: Any) -> None:
        self._buffer.write(bytes([opcode]))
        if fmt:
            self._buffer.write(struct.pack(fmt, *values))

    def _numbers(self, opcode: int, *values: float) -> None:
        self._record(opcode, "<" + "d" * len(values), *values)

    def _attributes(self, entity: Entity) -> None:
        layer = entity.layer
        if layer != self.layer:
            self._record(NEW_LAYER)
            self._buffer.write(layer.encode("cp1252", errors="surrogateescape") + b"\x00")
            self.layer = layer
        color = entity.get("color", 256)
        if color != self.color:
            self._record(NEW_COLOR, "<h", color)
            self.color = color

    def write_entity(self, entity: Entity) -> None:
        self._attributes(entity)
        kind = entity.dxftype
        if kind == "LINE":
            start = _pad3(entity.get("start"))
            end = _pad3(entity.get("end"))
            if start[2] or end[2]:
                self._numbers(LINE3D, *start, *end)
            else:
                self._numbers(LINE, start[0], start[1], end[0], end[1])
        elif kind == "POINT":
            location = _pad3(entity.get("location"))
            self._numbers(POINT, location[0], location[1])
        elif kind == "CIRCLE":
            center = _pad3(entity.get("center"))
            self._numbers(CIRCLE, center[0], center[1], entity.get("radius"))
        elif kind == "ARC":
            center = _pad3(entity.get("center"))
            self._numbers(
                ARC,
                center[0],
                center[1],
                entity.get("radius"),
                entity.get("start_angle"),
                entity.get("end_angle"),
            )
        elif kind in ("TRACE", "SOLID"):
            values = [c for name in _CORNERS for c in _pad3(entity.get(name))[:2]]
            self._numbers(TRACE if kind == "TRACE" else SOLID, *values)
        elif kind == "3DFACE":
            values = [c for name in _CORNERS for c in _pad3(entity.get(name))]
            self._numbers(FACE3D, *values)
        elif kind == "POLYLINE":
            self._polyline(entity)

    def _polyline(self, entity: Entity) -> None:
        self._record(POLYLINE, "<h", 1 if entity.get("flags", 0) & 1 else 0)
        start_width = entity.get("default_start_width", 0.0)
        end_width = entity.get("default_end_width", 0.0)
        if start_width or end_width:
            self._numbers(WIDTH, start_width, end_width)
        for vertex in entity.children:
            location = _pad3(vertex.get("location"))
            self._numbers(VERTEX, location[0], location[1])
            bulge = vertex.get("bulge", 0.0)
            if bulge:
                self._numbers(BULGE, bulge)
            start_width = vertex.get("start_width", 0.0)
            end_width = vertex.get("end_width", 0.0)
            if start_width or end_width:
                self._numbers(WIDTH, start_width, end_width)
        self._record(SEQEND)

    def finish(self) -> bytes:
        self._record(END)
        return self._buffer.getvalue()


def _pad3(value: Any) -> tuple[float, float, float]:
    x, y, z = (tuple(value) + (0.0, 0.0, 0.0))[:3]
    return x, y, z
