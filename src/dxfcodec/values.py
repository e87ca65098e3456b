from __future__ import annotations

import codecs
import re
import struct
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .versions import Version


class ValueKind(Enum):
    STRING = "string"
    DOUBLE = "double"
    SHORT = "short"
    INTEGER = "integer"
    LONG = "long"
    BOOLEAN = "boolean"
    BINARY = "binary"
    HANDLE = "handle"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class UnknownCode:
    """Raw value of a group code outside every known range."""

    code: int
    raw: str


_S = ValueKind.STRING
_D = ValueKind.DOUBLE
_I16 = ValueKind.SHORT
_I32 = ValueKind.INTEGER
_I64 = ValueKind.LONG
_B = ValueKind.BOOLEAN
_BIN = ValueKind.BINARY
_H = ValueKind.HANDLE

# (first, last, kind); ranges are inclusive and checked in order.
_CODE_RANGES: tuple[tuple[int, int, ValueKind], ...] = (
    (5, 5, _H),
    (0, 9, _S),
    (10, 59, _D),
    (60, 79, _I16),
    (90, 99, _I32),
    (100, 102, _S),
    (105, 105, _H),
    (110, 149, _D),
    (160, 169, _I64),
    (170, 179, _I16),
    (210, 239, _D),
    (270, 289, _I16),
    (290, 299, _B),
    (300, 309, _S),
    (310, 319, _BIN),
    (320, 369, _H),
    (370, 389, _I16),
    (390, 399, _H),
    (400, 409, _I16),
    (410, 419, _S),
    (420, 429, _I32),
    (430, 439, _S),
    (440, 459, _I32),
    (460, 469, _D),
    (470, 479, _S),
    (480, 481, _H),
    (999, 999, _S),
    (1004, 1004, _BIN),
    (1005, 1005, _H),
    (1000, 1009, _S),
    (1010, 1059, _D),
    (1060, 1070, _I16),
    (1071, 1071, _I32),
)

_KIND_CACHE: dict[int, ValueKind] = {}

COMMENT_CODE = 999
MAX_ASCII_STRING = 255
CONTINUATION_CHUNK = 250


def kind_for_code(code: int) -> ValueKind:
    kind = _KIND_CACHE.get(code)
    if kind is not None:
        return kind
    kind = ValueKind.UNKNOWN
    for first, last, range_kind in _CODE_RANGES:
        if first <= code <= last:
            kind = range_kind
            break
    _KIND_CACHE[code] = kind
    return kind


def python_encoding(codepage: str | None) -> str:
    """Map a ``$DWGCODEPAGE`` value such as ``ANSI_1252`` to a Python codec name."""
    if not codepage:
        return "cp1252"
    name = codepage.strip().upper()
    if name.startswith("ANSI_"):
        candidate = f"cp{name[5:]}"
    elif name.startswith("DOS"):
        candidate = f"cp{name[3:]}"
    else:
        candidate = name.lower()
    try:
        codecs.lookup(candidate)
    except LookupError:
        return "cp1252"
    return candidate


def text_encoding(version: Version, codepage: str | None = None) -> str:
    if version >= Version.R2007:
        return "utf-8"
    return python_encoding(codepage)


def decode(code: int, raw: Any, version: Version | None = None, kind: ValueKind | None = None) -> Any:
    """Turn a raw pair value into its typed Python value.

    ``raw`` is the value line for ASCII input or the already unpacked value
    for binary input.  ``kind`` replaces the code's usual kind for fields that
    reuse a code, such as the DIMSTYLE block names on code 5.  Raises
    ``ValueError`` when a value does not parse as its kind.
    """
    kind = kind or kind_for_code(code)
    if kind is ValueKind.UNKNOWN:
        return UnknownCode(code, raw if isinstance(raw, str) else str(raw))
    if not isinstance(raw, str):
        return _normalize_binary(kind, raw)
    if kind is ValueKind.STRING:
        return unescape_string(raw)
    text = raw.strip()
    if kind is ValueKind.DOUBLE:
        return float(text)
    if kind in (ValueKind.SHORT, ValueKind.INTEGER, ValueKind.LONG):
        return _parse_int(text)
    if kind is ValueKind.BOOLEAN:
        return _parse_int(text) != 0
    if kind is ValueKind.HANDLE:
        return parse_handle(text)
    if kind is ValueKind.BINARY:
        return bytes.fromhex(text)
    raise ValueError(f"unhandled value kind {kind} for code {code}")


def _normalize_binary(kind: ValueKind, raw: Any) -> Any:
    if kind is ValueKind.HANDLE:
        if isinstance(raw, bytes):
            raw = raw.decode("ascii", errors="replace")
        return parse_handle(str(raw)) if isinstance(raw, str) else int(raw)
    if kind is ValueKind.BOOLEAN:
        return bool(raw)
    if kind is ValueKind.STRING and isinstance(raw, str):
        return unescape_string(raw)
    return raw


def _parse_int(text: str) -> int:
    try:
        return int(text)
    except ValueError:
        # some writers emit integral values with a fractional part
        return int(float(text))


def parse_handle(text: str) -> int:
    text = text.strip()
    if not text:
        return 0
    return int(text, 16)


def format_handle(handle: int) -> str:
    return f"{handle:X}"


def format_double(value: float) -> str:
    value = float(value)
    magnitude = abs(value)
    if magnitude != 0.0 and (magnitude < 1e-10 or magnitude >= 1e16):
        mantissa, exponent = f"{value:.12E}".split("E")
        mantissa = mantissa.rstrip("0")
        if mantissa.endswith("."):
            mantissa += "0"
        return f"{mantissa}E{exponent}"
    text = f"{value:.12f}".rstrip("0")
    if text.endswith("."):
        text += "0"
    if text == "-0.0":
        text = "0.0"
    return text


def encode_ascii(code: int, value: Any, version: Version, kind: ValueKind | None = None) -> str:
    """Render a typed value as the value line of an ASCII pair."""
    if isinstance(value, UnknownCode):
        return value.raw
    kind = kind or kind_for_code(code)
    if kind is ValueKind.STRING or kind is ValueKind.UNKNOWN:
        return escape_string(str(value), version)
    if kind is ValueKind.DOUBLE:
        return format_double(value)
    if kind is ValueKind.SHORT or kind is ValueKind.BOOLEAN:
        return f"{int(value):>6}"
    if kind is ValueKind.INTEGER:
        return f"{int(value):>9}"
    if kind is ValueKind.LONG:
        return f"{int(value)}"
    if kind is ValueKind.HANDLE:
        return format_handle(int(value))
    if kind is ValueKind.BINARY:
        return bytes(value).hex().upper()
    raise ValueError(f"unhandled value kind {kind} for code {code}")


def encode_binary(code: int, value: Any, version: Version, encoding: str, kind: ValueKind | None = None) -> bytes:
    """Render a typed value as the value bytes of a DXF-binary pair."""
    if isinstance(value, UnknownCode):
        return value.raw.encode(encoding, errors="surrogateescape") + b"\x00"
    kind = kind or kind_for_code(code)
    if kind is ValueKind.STRING or kind is ValueKind.UNKNOWN:
        text = escape_string(str(value), version)
        return text.encode(encoding, errors="surrogateescape") + b"\x00"
    if kind is ValueKind.DOUBLE:
        return struct.pack("<d", float(value))
    if kind is ValueKind.SHORT:
        return struct.pack("<h", int(value))
    if kind is ValueKind.INTEGER:
        return struct.pack("<i", int(value))
    if kind is ValueKind.LONG:
        return struct.pack("<q", int(value))
    if kind is ValueKind.BOOLEAN:
        return struct.pack("<B", 1 if value else 0)
    if kind is ValueKind.HANDLE:
        return format_handle(int(value)).encode("ascii") + b"\x00"
    if kind is ValueKind.BINARY:
        data = bytes(value)
        if len(data) > 255:
            raise ValueError(f"binary chunk on code {code} exceeds 255 bytes")
        return struct.pack("<B", len(data)) + data
    raise ValueError(f"unhandled value kind {kind} for code {code}")


_CARET_DECODE = {chr(ord("@") + i): chr(i) for i in range(0x20)}
_CARET_DECODE[" "] = "^"
_CARET_ENCODE = {value: key for key, value in _CARET_DECODE.items()}
_UNICODE_ESCAPE = re.compile(r"\\U\+([0-9A-Fa-f]{4})")


def escape_string(value: str, version: Version) -> str:
    out: list[str] = []
    for ch in value:
        if ch in _CARET_ENCODE:
            out.append("^" + _CARET_ENCODE[ch])
        elif version < Version.R2007 and ord(ch) >= 0x80:
            out.append(f"\\U+{ord(ch):04X}")
        else:
            out.append(ch)
    return "".join(out)


def unescape_string(value: str) -> str:
    if "^" in value:
        out: list[str] = []
        chars = iter(value)
        for ch in chars:
            if ch != "^":
                out.append(ch)
                continue
            follower = next(chars, None)
            if follower is None:
                out.append(ch)
            else:
                out.append(_CARET_DECODE.get(follower, follower))
        value = "".join(out)
    if "\\U+" in value:
        value = _UNICODE_ESCAPE.sub(lambda m: chr(int(m.group(1), 16)), value)
    return value


def split_long_string(value: str, chunk: int = CONTINUATION_CHUNK) -> tuple[list[str], str]:
    """Split ``value`` into leading continuation chunks and the final piece."""
    chunks: list[str] = []
    while len(value) > chunk:
        chunks.append(value[:chunk])
        value = value[chunk:]
    return chunks, value
