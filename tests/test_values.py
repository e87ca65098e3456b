from __future__ import annotations

import struct

import pytest

from dxfcodec.values import (
    UnknownCode,
    ValueKind,
    decode,
    encode_ascii,
    encode_binary,
    format_double,
    kind_for_code,
    python_encoding,
    split_long_string,
    text_encoding,
)
from dxfcodec.versions import Version


@pytest.mark.parametrize(
    ("code", "kind"),
    [
        (0, ValueKind.STRING),
        (5, ValueKind.HANDLE),
        (10, ValueKind.DOUBLE),
        (70, ValueKind.SHORT),
        (90, ValueKind.INTEGER),
        (105, ValueKind.HANDLE),
        (160, ValueKind.LONG),
        (290, ValueKind.BOOLEAN),
        (310, ValueKind.BINARY),
        (330, ValueKind.HANDLE),
        (1004, ValueKind.BINARY),
        (1005, ValueKind.HANDLE),
        (1071, ValueKind.INTEGER),
        (1999, ValueKind.UNKNOWN),
    ],
)
def test_kind_for_code_follows_group_code_ranges(code: int, kind: ValueKind) -> None:
    assert kind_for_code(code) is kind


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (0.0, "0.0"),
        (-0.0, "0.0"),
        (1.0, "1.0"),
        (0.1, "0.1"),
        (123.456, "123.456"),
        (-2.5, "-2.5"),
        (1e-12, "1.0E-12"),
    ],
)
def test_format_double_trims_trailing_zeros(value: float, expected: str) -> None:
    assert format_double(value) == expected


def test_encode_ascii_pads_integers_by_width() -> None:
    assert encode_ascii(70, 1, Version.R2000) == "     1"
    assert encode_ascii(290, True, Version.R2000) == "     1"
    assert encode_ascii(90, 5, Version.R2000) == "        5"
    assert encode_ascii(160, 5, Version.R2000) == "5"
    assert encode_ascii(5, 26, Version.R2000) == "1A"
    assert encode_ascii(310, b"\x01\xab", Version.R2000) == "01AB"


def test_strings_are_caret_escaped_and_restored() -> None:
    encoded = encode_ascii(1, "a\tb^c", Version.R2000)

    assert encoded == "a^Ib^ c"
    assert decode(1, encoded) == "a\tb^c"


def test_non_ascii_text_is_escaped_before_r2007() -> None:
    assert encode_ascii(1, "é", Version.R2000) == "\\U+00E9"
    assert encode_ascii(1, "é", Version.R2007) == "é"
    assert decode(1, "caf\\U+00E9") == "café"


def test_decode_typed_values() -> None:
    assert decode(10, " 1.5") == 1.5
    assert decode(70, "     3") == 3
    assert decode(70, "3.0") == 3
    assert decode(290, "1") is True
    assert decode(330, "FF") == 255
    assert decode(310, "01AB") == b"\x01\xab"


def test_decode_rejects_malformed_numbers() -> None:
    with pytest.raises(ValueError):
        decode(40, "abc")


def test_unknown_code_keeps_raw_text() -> None:
    value = decode(1999, "hello")

    assert value == UnknownCode(1999, "hello")
    assert encode_ascii(1999, value, Version.R2000) == "hello"


def test_encode_binary_layouts() -> None:
    assert encode_binary(10, 1.0, Version.R2000, "cp1252") == struct.pack("<d", 1.0)
    assert encode_binary(70, 2, Version.R2000, "cp1252") == struct.pack("<h", 2)
    assert encode_binary(90, 2, Version.R2000, "cp1252") == struct.pack("<i", 2)
    assert encode_binary(290, True, Version.R2000, "cp1252") == b"\x01"
    assert encode_binary(8, "0", Version.R2000, "cp1252") == b"0\x00"
    assert encode_binary(5, 26, Version.R2000, "cp1252") == b"1A\x00"
    assert encode_binary(310, b"\x01\x02", Version.R2000, "cp1252") == b"\x02\x01\x02"


def test_split_long_string_uses_250_character_chunks() -> None:
    chunks, last = split_long_string("x" * 600)

    assert [len(chunk) for chunk in chunks] == [250, 250]
    assert len(last) == 100


def test_text_encoding_by_version_and_codepage() -> None:
    assert text_encoding(Version.R2000) == "cp1252"
    assert text_encoding(Version.R2000, "ANSI_1251") == "cp1251"
    assert text_encoding(Version.R2007, "ANSI_1251") == "utf-8"
    assert python_encoding("NOT_A_CODEPAGE") == "cp1252"


@pytest.mark.parametrize(
    ("text", "version"),
    [
        ("AC1015", Version.R2000),
        ("R2000", Version.R2000),
        ("r12", Version.R12),
        ("R11", Version.R12),
        ("AC1032", Version.R2018),
    ],
)
def test_version_parse(text: str, version: Version) -> None:
    assert Version.parse(text) is version


def test_version_parse_rejects_unknown_release() -> None:
    with pytest.raises(ValueError, match="unsupported DXF version"):
        Version.parse("AC9999")
