from __future__ import annotations

import importlib
import io
from pathlib import Path

import pytest

import dxfcodec
from dxfcodec.document import Document
from dxfcodec.entity import Entity
from dxfcodec.writer import write_bytes
from tests._dxf_helpers import dxf_entities_of_type, group_float, iter_pairs

# the package re-exports the convert function under the module's name
convert_module = importlib.import_module("dxfcodec.convert")


def _drawing() -> Document:
    doc = Document("R2000")
    doc.new_table_entry("LAYER", "0")
    doc.add_entity(Entity("LINE", dxf={"start": (0.0, 0.0, 0.0), "end": (3.0, 4.0, 0.0)}))
    doc.add_entity(Entity("ARC", dxf={"center": (1.0, 1.0, 0.0), "radius": 2.0, "start_angle": 15.0, "end_angle": 75.0}))
    return doc


def test_convert_document_to_file(tmp_path: Path) -> None:
    output = tmp_path / "arc.dxf"

    result = dxfcodec.convert(_drawing(), output, version="R12")

    assert result.source_path == "<document>"
    assert result.target_version == "AC1009"
    assert result.total_entities == 2
    assert result.written_entities == 2
    assert result.skipped_by_type == {}
    arc = dxf_entities_of_type(output, "ARC")[0]
    assert abs(group_float(arc, 50) - 15.0) < 1.0e-9
    assert abs(group_float(arc, 51) - 75.0) < 1.0e-9


def test_convert_path_reports_source_version(tmp_path: Path) -> None:
    source = tmp_path / "in.dxf"
    source.write_bytes(write_bytes(_drawing()))

    result = dxfcodec.convert(source, tmp_path / "out.dxf", version="R2013", encoding="binary")

    assert result.source_path == str(source)
    assert result.source_version == "AC1015"
    assert result.target_version == "AC1027"
    assert result.encoding == "binary"
    assert dxfcodec.read(tmp_path / "out.dxf").version is dxfcodec.Version.R2013


def test_convert_strict_raises_for_dropped_entities(tmp_path: Path) -> None:
    doc = _drawing()
    doc.add_entity(Entity("ELLIPSE", dxf={"ratio": 0.5}))

    with pytest.raises(ValueError, match=r"failed to convert 1 entities \(ELLIPSE:1\)"):
        dxfcodec.convert(doc, tmp_path / "strict.dxf", version="R12", strict=True)


def test_to_ezdxf_requires_ezdxf(monkeypatch) -> None:
    def _missing():
        raise ImportError("ezdxf is required to hand drawings to ezdxf.")

    monkeypatch.setattr(convert_module, "_require_ezdxf", _missing)

    with pytest.raises(ImportError, match="ezdxf is required"):
        convert_module.to_ezdxf(_drawing())


def test_to_ezdxf_loads_r12_output() -> None:
    pytest.importorskip("ezdxf")

    dxf_doc = dxfcodec.to_ezdxf(_drawing(), version="R12")
    lines = list(dxf_doc.modelspace().query("LINE"))

    assert len(lines) == 1
    assert tuple(lines[0].dxf.end) == (3.0, 4.0, 0.0)
    assert len(dxf_doc.modelspace().query("ARC")) == 1


def test_ezdxf_tokenizes_output_like_the_reader() -> None:
    pytest.importorskip("ezdxf")
    from ezdxf.lldxf.tagger import ascii_tags_loader

    data = write_bytes(_drawing())
    codes = [tag.code for tag in ascii_tags_loader(io.StringIO(data.decode("cp1252"), newline=None))]

    assert codes == [code for code, _value in iter_pairs(data)]
