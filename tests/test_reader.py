from __future__ import annotations

from pathlib import Path

import pytest

from dxfcodec import read, read_ascii, read_binary
from dxfcodec.codepairs import CodePair
from dxfcodec.entity import UnknownElement
from dxfcodec.errors import ERROR, WARNING, DanglingHandle, MalformedCode, NotBinaryDxf
from dxfcodec.values import UnknownCode
from dxfcodec.versions import Version
from tests._dxf_helpers import dxf_text

HEADER_R2000 = ((0, "SECTION"), (2, "HEADER"), (9, "$ACADVER"), (1, "AC1015"), (0, "ENDSEC"))


def _entities(*pairs: tuple[int, str]) -> bytes:
    return dxf_text(
        *HEADER_R2000,
        (0, "SECTION"),
        (2, "ENTITIES"),
        *pairs,
        (0, "ENDSEC"),
        (0, "EOF"),
    )


def _line(handle: str, *extra: tuple[int, str]) -> tuple[tuple[int, str], ...]:
    return (
        (0, "LINE"),
        (5, handle),
        (100, "AcDbEntity"),
        (8, "0"),
        (100, "AcDbLine"),
        (10, "0.0"),
        (20, "0.0"),
        (30, "0.0"),
        (11, "1.0"),
        (21, "2.0"),
        (31, "0.0"),
        *extra,
    )


def test_read_line_fields_and_version() -> None:
    doc = read(_entities(*_line("1A")))

    assert doc.version is Version.R2000
    assert doc.source_format == "ascii"
    line = doc.entities[0]
    assert line.handle == 0x1A
    assert line.get("start") == (0.0, 0.0, 0.0)
    assert line.get("end") == (1.0, 2.0, 0.0)
    assert doc.diagnostics == []


def test_missing_acadver_reads_as_r12_and_allocates_handles() -> None:
    data = dxf_text((0, "SECTION"), (2, "ENTITIES"), (0, "POINT"), (8, "0"), (10, "1.0"), (20, "2.0"), (0, "ENDSEC"), (0, "EOF"))
    doc = read(data)

    assert doc.version is Version.R12
    point = doc.entities[0]
    assert point.handle > 0
    assert doc.get_by_handle(point.handle) is point


def test_unknown_acadver_reads_as_newest_with_warning() -> None:
    data = dxf_text((0, "SECTION"), (2, "HEADER"), (9, "$ACADVER"), (1, "AC9999"), (0, "ENDSEC"), (0, "EOF"))
    doc = read(data)

    assert doc.version is Version.R2018
    assert [(d.kind, d.severity) for d in doc.diagnostics] == [("MalformedValue", WARNING)]


def test_comments_are_skipped() -> None:
    doc = read(_entities((999, "a comment"), *_line("1A")))

    assert [entity.dxftype for entity in doc.entities] == ["LINE"]


def test_unrecognized_codes_go_to_overflow() -> None:
    doc = read(_entities(*_line("1A", (1999, "hello"), (1, "stray"))))

    assert doc.entities[0].overflow == [
        CodePair(1999, UnknownCode(1999, "hello")),
        CodePair(1, "stray"),
    ]


def test_malformed_value_is_diagnosed_and_kept() -> None:
    doc = read(_entities(*_line("1A", (40, "not-a-number"))))

    assert [d.kind for d in doc.diagnostics] == ["MalformedValue"]
    assert doc.entities[0].overflow == [CodePair(40, UnknownCode(40, "not-a-number"))]


def test_dangling_owner_is_diagnosed_and_entity_kept() -> None:
    doc = read(_entities(*_line("1A", (330, "FF"))))

    assert len(doc.entities) == 1
    assert [(d.kind, d.severity, d.handle) for d in doc.diagnostics] == [("DanglingHandle", ERROR, 0x1A)]
    assert doc.pending_owners == {0x1A}


def test_strict_mode_raises_first_error_with_partial_document() -> None:
    with pytest.raises(DanglingHandle) as excinfo:
        read(_entities(*_line("1A", (330, "FF"))), strict=True)

    assert excinfo.value.document is not None
    assert len(excinfo.value.document.entities) == 1


def test_handle_collision_reassigns_a_fresh_handle() -> None:
    doc = read(_entities(*_line("1A"), *_line("1A")))

    first, second = doc.entities
    assert first.handle == 0x1A
    assert second.handle == 0x1B
    assert [d.kind for d in doc.diagnostics] == ["HandleCollision"]


def test_handseed_seeds_the_allocator() -> None:
    data = dxf_text(
        (0, "SECTION"),
        (2, "HEADER"),
        (9, "$ACADVER"),
        (1, "AC1015"),
        (9, "$HANDSEED"),
        (5, "40"),
        (0, "ENDSEC"),
        (0, "EOF"),
    )
    doc = read(data)

    assert doc.handles.allocate() == 0x40


def test_polyline_run_is_folded() -> None:
    doc = read(
        _entities(
            (0, "POLYLINE"),
            (5, "20"),
            (8, "0"),
            (66, "1"),
            (70, "1"),
            (0, "VERTEX"),
            (5, "21"),
            (8, "0"),
            (10, "0.0"),
            (20, "0.0"),
            (42, "0.5"),
            (0, "VERTEX"),
            (5, "22"),
            (8, "0"),
            (10, "3.0"),
            (20, "4.0"),
            (0, "SEQEND"),
            (5, "23"),
            (8, "0"),
        )
    )

    assert [entity.dxftype for entity in doc.entities] == ["POLYLINE"]
    polyline = doc.entities[0]
    assert polyline.get("flags") == 1
    assert [vertex.get("location") for vertex in polyline.children] == [(0.0, 0.0, 0.0), (3.0, 4.0, 0.0)]
    assert polyline.children[0].get("bulge") == 0.5
    assert polyline.seqend.handle == 0x23


def test_missing_seqend_is_a_warning() -> None:
    doc = read(_entities((0, "POLYLINE"), (5, "20"), (8, "0"), (66, "1"), (0, "VERTEX"), (5, "21"), (8, "0")))

    assert len(doc.entities[0].children) == 1
    assert [(d.kind, d.severity) for d in doc.diagnostics] == [("UnterminatedEntity", WARNING)]


def test_lwpolyline_vertices_are_records() -> None:
    doc = read(
        _entities(
            (0, "LWPOLYLINE"),
            (5, "30"),
            (8, "0"),
            (90, "2"),
            (70, "0"),
            (10, "0.0"),
            (20, "0.0"),
            (42, "1.0"),
            (10, "5.0"),
            (20, "0.0"),
        )
    )

    vertices = doc.entities[0].get("vertices")
    assert vertices == [{"location": (0.0, 0.0), "bulge": 1.0}, {"location": (5.0, 0.0)}]
    assert doc.entities[0].to_points() == [(0.0, 0.0, 0.0), (5.0, 0.0, 0.0)]


def test_mtext_continuation_chunks_are_joined() -> None:
    doc = read(_entities((0, "MTEXT"), (5, "40"), (8, "0"), (3, "a" * 250), (1, "tail")))

    assert doc.entities[0].get("text") == "a" * 250 + "tail"


def test_reactors_and_extension_dictionary_are_captured() -> None:
    doc = read(
        _entities(
            *_line(
                "1A",
                (102, "{ACAD_REACTORS"),
                (330, "2B"),
                (102, "}"),
                (102, "{ACAD_XDICTIONARY"),
                (360, "2C"),
                (102, "}"),
                (102, "{OTHER_APP"),
                (1, "kept"),
                (102, "}"),
            )
        )
    )

    line = doc.entities[0]
    assert line.reactors == [0x2B]
    assert line.xdictionary == 0x2C
    assert [pair.code for pair in line.overflow] == [102, 1, 102]
    assert {d.kind for d in doc.diagnostics} == {"DanglingHandle"}
    assert all(d.severity == WARNING for d in doc.diagnostics)


def test_xdata_is_parsed_into_blocks() -> None:
    doc = read(
        _entities(
            *_line(
                "1A",
                (1001, "MYAPP"),
                (1000, "hello"),
                (1002, "{"),
                (1070, "5"),
                (1002, "}"),
                (1010, "1.0"),
                (1020, "2.0"),
                (1030, "3.0"),
            )
        )
    )

    xdata = doc.entities[0].get_xdata("myapp")
    assert xdata is not None
    assert xdata.items[0].value == "hello"
    assert xdata.items[1].items[0].value == 5
    assert xdata.items[2].value == (1.0, 2.0, 3.0)


def test_unknown_entity_type_is_kept_raw() -> None:
    doc = read(_entities((0, "WIPEOUT"), (5, "50"), (8, "0"), (10, "1.0")))

    unknown = doc.entities[0]
    assert isinstance(unknown, UnknownElement)
    assert unknown.handle == 0x50
    assert [pair.code for pair in unknown.pairs] == [5, 8, 10]
    assert [(d.kind, d.severity) for d in doc.diagnostics] == [("UnknownType", WARNING)]


def test_unknown_section_is_kept_with_a_warning() -> None:
    data = dxf_text(*HEADER_R2000, (0, "SECTION"), (2, "ACDSDATA"), (70, "2"), (0, "ENDSEC"), (0, "EOF"))
    doc = read(data)

    assert doc.unknown_sections["ACDSDATA"] == [CodePair(70, 2)]
    assert [d.kind for d in doc.diagnostics] == ["UnknownSection"]


def test_tables_and_duplicate_entries() -> None:
    data = dxf_text(
        *HEADER_R2000,
        (0, "SECTION"),
        (2, "TABLES"),
        (0, "TABLE"),
        (2, "LAYER"),
        (5, "2"),
        (70, "2"),
        (0, "LAYER"),
        (5, "10"),
        (330, "2"),
        (2, "Walls"),
        (62, "1"),
        (0, "LAYER"),
        (5, "11"),
        (330, "2"),
        (2, "WALLS"),
        (0, "ENDTAB"),
        (0, "ENDSEC"),
        (0, "EOF"),
    )
    doc = read(data)

    layers = doc.tables["LAYER"]
    assert len(layers) == 2
    assert layers.get_entry("walls").get("color") == 1
    assert [(d.kind, d.severity) for d in doc.diagnostics] == [("DuplicateName", WARNING)]


def test_missing_endsec_is_diagnosed() -> None:
    data = dxf_text(*HEADER_R2000, (0, "SECTION"), (2, "ENTITIES"), *_line("1A"), (0, "EOF"))
    doc = read(data)

    assert len(doc.entities) == 1
    assert [d.kind for d in doc.diagnostics] == ["UnterminatedSection"]


def test_blocks_section() -> None:
    data = dxf_text(
        *HEADER_R2000,
        (0, "SECTION"),
        (2, "BLOCKS"),
        (0, "BLOCK"),
        (5, "60"),
        (8, "0"),
        (2, "Door"),
        (70, "0"),
        (10, "0.0"),
        (20, "0.0"),
        (30, "0.0"),
        (3, "Door"),
        (0, "CIRCLE"),
        (5, "61"),
        (8, "0"),
        (10, "0.0"),
        (20, "0.0"),
        (40, "2.0"),
        (0, "ENDBLK"),
        (5, "62"),
        (8, "0"),
        (0, "ENDSEC"),
        (0, "EOF"),
    )
    doc = read(data)

    block = doc.get_block("DOOR")
    assert block is not None
    assert [entity.dxftype for entity in block.entities] == ["CIRCLE"]
    assert block.end.handle == 0x62


def test_bad_group_code_raises_with_partial_document() -> None:
    data = _entities(*_line("1A")).replace(b" 21\r\n", b"x21\r\n")

    with pytest.raises(MalformedCode) as excinfo:
        read(data)
    assert excinfo.value.document is not None
    assert excinfo.value.section == "ENTITIES"


def test_utf8_bom_is_accepted(tmp_path: Path) -> None:
    path = tmp_path / "bom.dxf"
    path.write_bytes(b"\xef\xbb\xbf" + _entities(*_line("1A")))

    doc = read_ascii(path)
    assert len(doc.entities) == 1


def test_read_binary_rejects_ascii() -> None:
    with pytest.raises(NotBinaryDxf):
        read_binary(_entities(*_line("1A")))


def test_r12_dimstyle_block_names_and_handle() -> None:
    data = dxf_text(
        (0, "SECTION"),
        (2, "HEADER"),
        (9, "$ACADVER"),
        (1, "AC1009"),
        (0, "ENDSEC"),
        (0, "SECTION"),
        (2, "TABLES"),
        (0, "TABLE"),
        (2, "DIMSTYLE"),
        (70, "1"),
        (0, "DIMSTYLE"),
        (105, "1F"),
        (2, "STANDARD"),
        (70, "0"),
        (5, "ARROW"),
        (6, "DOT"),
        (40, "1.0"),
        (0, "ENDTAB"),
        (0, "ENDSEC"),
        (0, "EOF"),
    )
    doc = read(data, strict=True)

    dimstyle = doc.table_entry("DIMSTYLE", "standard")
    assert doc.diagnostics == []
    assert dimstyle.handle == 0x1F
    assert dimstyle.get("dimblk") == "ARROW"
    assert dimstyle.get("dimblk1") == "DOT"
    assert dimstyle.overflow == []


def test_two_dimensional_xdata_point_keeps_its_components() -> None:
    doc = read(_entities(*_line("1A", (1001, "APP"), (1010, "1.0"), (1020, "2.0"))))

    assert doc.entities[0].get_xdata("APP").items[0].value == (1.0, 2.0)
