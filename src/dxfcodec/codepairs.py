from __future__ import annotations

import io
import struct
from dataclasses import dataclass, field
from typing import Any, BinaryIO

from .errors import MalformedCode, NotBinaryDxf, NotRecognizedSentinel, UnexpectedEndOfInput
from .values import ValueKind, encode_ascii, encode_binary, kind_for_code
from .versions import Version

BINARY_SENTINEL = b"AutoCAD Binary DXF\r\n\x1a\x00"
DXB_SENTINEL = b"AutoCAD DXB 1.0\r\n\x1a\x00"

ASCII = "ascii"
BINARY = "binary"
DXB = "dxb"
ENCODINGS = (ASCII, BINARY)


@dataclass(frozen=True)
class CodePair:
    code: int
    value: Any
    offset: int | None = field(default=None, compare=False)
    raw: str | None = field(default=None, compare=False)

    def is_marker(self, name: str) -> bool:
        return self.code == 0 and self.value == name


def detect_format(head: bytes) -> str:
    if head.startswith(BINARY_SENTINEL):
        return BINARY
    if head.startswith(DXB_SENTINEL):
        return DXB
    return ASCII


class AsciiCodePairReader:
    """Reads ``code``/``value`` line pairs.

    Values are returned raw (the text of the value line); numeric kinds are
    trimmed, string kinds only lose their line terminator.
    """

    def __init__(self, stream: BinaryIO, encoding: str = "cp1252") -> None:
        self._stream = stream
        self.encoding = encoding
        self.offset = 0
        self.pair_index = 0

    def _readline(self) -> bytes:
        line = self._stream.readline()
        self.offset += len(line)
        return line

    def read_next(self) -> CodePair | None:
        start = self.offset
        code_line = self._readline()
        if not code_line:
            return None
        if not code_line.strip() and _at_eof(self._stream):
            # trailing blank lines after the last pair
            return None
        code_text = code_line.decode("ascii", errors="replace").strip()
        try:
            code = int(code_text)
        except ValueError:
            raise MalformedCode(
                f"expected a group code, found {code_text!r}",
                pair_index=self.pair_index,
                offset=start,
            ) from None
        if code < 0:
            raise MalformedCode(
                f"negative group code {code}", pair_index=self.pair_index, offset=start
            )
        value_line = self._readline()
        if not value_line:
            raise UnexpectedEndOfInput(
                f"missing value for group code {code}",
                pair_index=self.pair_index,
                offset=start,
            )
        text = value_line.decode(self.encoding, errors="surrogateescape").rstrip("\r\n")
        kind = kind_for_code(code)
        if kind is not ValueKind.STRING and kind is not ValueKind.UNKNOWN:
            text = text.strip()
        self.pair_index += 1
        return CodePair(code, text, offset=start)


def _at_eof(stream: BinaryIO) -> bool:
    peek = getattr(stream, "peek", None)
    if peek is not None:
        return not peek(1)
    position = stream.tell()
    rest = stream.read()
    stream.seek(position)
    return not rest.strip()


class BinaryCodePairReader:
    """Reads DXF-binary pairs from an in-memory buffer.

    The code width is detected from the first pair: files written before R13
    use one-byte codes (``0xFF`` escapes a 16-bit code), later files always use
    16-bit codes.
    """

    def __init__(self, data: bytes, encoding: str = "cp1252") -> None:
        if not data.startswith(BINARY_SENTINEL):
            raise NotBinaryDxf("missing DXF-binary sentinel", offset=0)
        self._data = data
        self._index = len(BINARY_SENTINEL)
        self.encoding = encoding
        self.pair_index = 0
        self.wide_codes = len(data) > self._index + 1 and data[self._index + 1] == 0

    @property
    def offset(self) -> int:
        return self._index

    def _take(self, size: int, code: int) -> bytes:
        end = self._index + size
        if end > len(self._data):
            raise UnexpectedEndOfInput(
                f"truncated value for group code {code}",
                pair_index=self.pair_index,
                offset=self._index,
            )
        chunk = self._data[self._index:end]
        self._index = end
        return chunk

    def _read_code(self) -> int:
        if self.wide_codes:
            return struct.unpack("<h", self._take(2, -1))[0]
        code = self._take(1, -1)[0]
        if code == 0xFF:
            return struct.unpack("<h", self._take(2, -1))[0]
        return code

    def _read_string(self, code: int) -> str:
        end = self._data.find(b"\x00", self._index)
        if end < 0:
            raise UnexpectedEndOfInput(
                f"unterminated string for group code {code}",
                pair_index=self.pair_index,
                offset=self._index,
            )
        raw = self._data[self._index:end]
        self._index = end + 1
        return raw.decode(self.encoding, errors="surrogateescape")

    def read_next(self) -> CodePair | None:
        if self._index >= len(self._data):
            return None
        start = self._index
        code = self._read_code()
        if code < 0:
            raise MalformedCode(
                f"negative group code {code}", pair_index=self.pair_index, offset=start
            )
        kind = kind_for_code(code)
        value: Any
        if kind is ValueKind.DOUBLE:
            value = struct.unpack("<d", self._take(8, code))[0]
        elif kind is ValueKind.SHORT:
            value = struct.unpack("<h", self._take(2, code))[0]
        elif kind is ValueKind.INTEGER:
            value = struct.unpack("<i", self._take(4, code))[0]
        elif kind is ValueKind.LONG:
            value = struct.unpack("<q", self._take(8, code))[0]
        elif kind is ValueKind.BOOLEAN:
            value = self._take(1, code)[0]
        elif kind is ValueKind.BINARY:
            length = self._take(1, code)[0]
            value = self._take(length, code)
        else:
            value = self._read_string(code)
        self.pair_index += 1
        return CodePair(code, value, offset=start)


class AsciiCodePairWriter:
    def __init__(self, stream: BinaryIO, version: Version, encoding: str = "cp1252") -> None:
        self._stream = stream
        self.version = version
        self.encoding = encoding

    def write_header(self) -> None:
        pass

    def write(self, code: int, value: Any, kind: ValueKind | None = None) -> None:
        self.write_raw(code, encode_ascii(code, value, self.version, kind))

    def write_raw(self, code: int, text: str) -> None:
        line = f"{code:>3}\r\n{text}\r\n"
        self._stream.write(line.encode(self.encoding, errors="surrogateescape"))


class BinaryCodePairWriter:
    def __init__(self, stream: BinaryIO, version: Version, encoding: str = "cp1252") -> None:
        self._stream = stream
        self.version = version
        self.encoding = encoding

    def write_header(self) -> None:
        self._stream.write(BINARY_SENTINEL)

    def _code_bytes(self, code: int) -> bytes:
        if self.version >= Version.R13:
            return struct.pack("<h", code)
        if code >= 0xFF:
            return b"\xff" + struct.pack("<h", code)
        return struct.pack("<B", code)

    def write(self, code: int, value: Any, kind: ValueKind | None = None) -> None:
        self._stream.write(self._code_bytes(code))
        self._stream.write(encode_binary(code, value, self.version, self.encoding, kind))

    def write_raw(self, code: int, text: str) -> None:
        # raw text is only retained for ASCII input; re-encode it as a string
        self._stream.write(self._code_bytes(code))
        self._stream.write(text.encode(self.encoding, errors="surrogateescape") + b"\x00")


def open_code_pair_writer(
    stream: BinaryIO, version: Version, encoding: str, text_encoding: str
) -> AsciiCodePairWriter | BinaryCodePairWriter:
    if encoding == ASCII:
        return AsciiCodePairWriter(stream, version, text_encoding)
    if encoding == BINARY:
        return BinaryCodePairWriter(stream, version, text_encoding)
    raise ValueError(f"unsupported pair encoding: {encoding}")


def open_code_pair_reader(
    data: bytes, encoding: str = "cp1252"
) -> AsciiCodePairReader | BinaryCodePairReader:
    fmt = detect_format(data[:32])
    if fmt == BINARY:
        return BinaryCodePairReader(data, encoding)
    if fmt == DXB:
        raise NotRecognizedSentinel("DXB data is not made of group-code pairs", offset=0)
    return AsciiCodePairReader(io.BytesIO(data), encoding)
