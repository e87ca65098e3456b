from __future__ import annotations

import io
import struct

import pytest

from dxfcodec.codepairs import (
    BINARY_SENTINEL,
    DXB_SENTINEL,
    AsciiCodePairReader,
    AsciiCodePairWriter,
    BinaryCodePairReader,
    BinaryCodePairWriter,
    CodePair,
    open_code_pair_reader,
)
from dxfcodec.errors import MalformedCode, NotBinaryDxf, NotRecognizedSentinel, UnexpectedEndOfInput
from dxfcodec.versions import Version
from tests._dxf_helpers import dxf_text, iter_pairs


def _read_all(reader) -> list[CodePair]:
    pairs = []
    while True:
        pair = reader.read_next()
        if pair is None:
            return pairs
        pairs.append(pair)


def test_ascii_reader_returns_raw_value_lines() -> None:
    data = dxf_text((0, "SECTION"), (2, "HEADER"), (70, "     1"), (1, " padded "))
    pairs = _read_all(AsciiCodePairReader(io.BytesIO(data)))

    assert [pair.code for pair in pairs] == [0, 2, 70, 1]
    assert pairs[2].value == "1"
    assert pairs[3].value == " padded "
    assert pairs[1].offset == len("  0\r\nSECTION\r\n")


def test_ascii_reader_accepts_lf_line_endings_and_trailing_blank_lines() -> None:
    data = b"0\nLINE\n8\n0\n\n\n"
    pairs = _read_all(AsciiCodePairReader(io.BytesIO(data)))

    assert [(pair.code, pair.value) for pair in pairs] == [(0, "LINE"), (8, "0")]


def test_ascii_reader_rejects_non_numeric_code() -> None:
    reader = AsciiCodePairReader(io.BytesIO(b"  0\r\nLINE\r\nabc\r\nvalue\r\n"))
    reader.read_next()

    with pytest.raises(MalformedCode) as excinfo:
        reader.read_next()
    assert excinfo.value.pair_index == 1


def test_ascii_reader_reports_missing_value_line() -> None:
    reader = AsciiCodePairReader(io.BytesIO(b"  0\r\n"))

    with pytest.raises(UnexpectedEndOfInput):
        reader.read_next()


def test_ascii_writer_aligns_codes() -> None:
    stream = io.BytesIO()
    writer = AsciiCodePairWriter(stream, Version.R2000)
    writer.write(0, "LINE")
    writer.write(330, 2)
    writer.write(1001, "APP")

    assert stream.getvalue() == b"  0\r\nLINE\r\n330\r\n2\r\n1001\r\nAPP\r\n"


def test_binary_reader_requires_sentinel() -> None:
    with pytest.raises(NotBinaryDxf):
        BinaryCodePairReader(b"  0\r\nSECTION\r\n")


def test_binary_reader_detects_narrow_codes() -> None:
    data = (
        BINARY_SENTINEL
        + b"\x00SECTION\x00"
        + b"\x0a"
        + struct.pack("<d", 2.5)
        + b"\xff"
        + struct.pack("<h", 1071)
        + struct.pack("<i", 7)
    )
    reader = BinaryCodePairReader(data)
    pairs = _read_all(reader)

    assert not reader.wide_codes
    assert [(pair.code, pair.value) for pair in pairs] == [(0, "SECTION"), (10, 2.5), (1071, 7)]


def test_binary_writer_uses_wide_codes_from_r13() -> None:
    stream = io.BytesIO()
    writer = BinaryCodePairWriter(stream, Version.R2000)
    writer.write_header()
    writer.write(0, "EOF")
    writer.write(70, 3)
    reader = BinaryCodePairReader(stream.getvalue())

    assert stream.getvalue() == BINARY_SENTINEL + b"\x00\x00EOF\x00" + b"\x46\x00" + struct.pack("<h", 3)
    assert reader.wide_codes
    assert [(pair.code, pair.value) for pair in _read_all(reader)] == [(0, "EOF"), (70, 3)]


def test_binary_writer_escapes_large_codes_before_r13() -> None:
    stream = io.BytesIO()
    writer = BinaryCodePairWriter(stream, Version.R12)
    writer.write(1070, 4)

    assert stream.getvalue() == b"\xff" + struct.pack("<h", 1070) + struct.pack("<h", 4)


def test_binary_reader_reports_truncated_value() -> None:
    reader = BinaryCodePairReader(BINARY_SENTINEL + b"\x0a\x00\x00")

    with pytest.raises(UnexpectedEndOfInput):
        reader.read_next()


def test_open_code_pair_reader_picks_framing() -> None:
    ascii_data = dxf_text((0, "EOF"))
    binary_data = BINARY_SENTINEL + b"\x00EOF\x00"

    assert isinstance(open_code_pair_reader(ascii_data), AsciiCodePairReader)
    assert isinstance(open_code_pair_reader(binary_data), BinaryCodePairReader)
    assert list(iter_pairs(binary_data)) == [(0, "EOF")]
    with pytest.raises(NotRecognizedSentinel):
        open_code_pair_reader(DXB_SENTINEL + b"\x00")
