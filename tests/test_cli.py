from __future__ import annotations

from pathlib import Path

import pytest

import dxfcodec
import dxfcodec.cli as cli_module
from dxfcodec.document import Document
from dxfcodec.entity import Entity
from dxfcodec.errors import MalformedCode
from dxfcodec.writer import write_bytes
from tests._dxf_helpers import dxf_entities_of_type


def _write_drawing(path: Path) -> Path:
    doc = Document("R2000")
    doc.new_table_entry("LAYER", "0")
    doc.add_entity(Entity("LINE", dxf={"start": (0.0, 0.0, 0.0), "end": (3.0, 4.0, 0.0), "lineweight": 25}))
    doc.add_entity(Entity("LWPOLYLINE", dxf={"vertices": [{"location": (0.0, 0.0)}, {"location": (1.0, 1.0)}]}))
    doc.add_entity(Entity("CIRCLE", owner=0x99, dxf={"radius": 2.0}))
    path.write_bytes(write_bytes(doc))
    return path


def test_cli_inspect_reports_counts(tmp_path: Path, capsys) -> None:
    path = _write_drawing(tmp_path / "drawing.dxf")

    code = cli_module.main(["inspect", str(path)])
    out = capsys.readouterr().out

    assert code == 0
    assert "format: ascii" in out
    assert "version: AC1015 (R2000)" in out
    assert "table[LAYER]: 1" in out
    assert "total_entities: 3" in out
    assert "LINE: 1" in out
    assert "LWPOLYLINE: 1" in out
    assert "diagnostics: 1" in out
    assert "diagnostic[DanglingHandle]: 1" in out


def test_cli_inspect_verbose_lists_diagnostics(tmp_path: Path, capsys) -> None:
    path = _write_drawing(tmp_path / "drawing.dxf")

    code = cli_module.main(["inspect", str(path), "--verbose"])
    out = capsys.readouterr().out

    assert code == 0
    assert "diagnostic: DanglingHandle: CIRCLE" in out


def test_cli_inspect_missing_file(tmp_path: Path, capsys) -> None:
    code = cli_module.main(["inspect", str(tmp_path / "missing.dxf")])
    captured = capsys.readouterr()

    assert code == 2
    assert "error: file not found" in captured.err


def test_cli_inspect_read_error(monkeypatch, tmp_path: Path, capsys) -> None:
    path = tmp_path / "broken.dxf"
    path.write_bytes(b"junk")

    def _fail(_path):  # noqa: ANN001
        raise MalformedCode("expected a group code")

    monkeypatch.setattr(cli_module, "read", _fail)

    assert cli_module.main(["inspect", str(path)]) == 2
    assert "error: failed to read drawing: expected a group code" in capsys.readouterr().err


def test_cli_convert_downgrades_and_reports_losses(tmp_path: Path, capsys) -> None:
    source = _write_drawing(tmp_path / "drawing.dxf")
    output = tmp_path / "out" / "drawing_r12.dxf"

    code = cli_module.main(["convert", str(source), str(output), "--dxf-version", "R12"])
    out = capsys.readouterr().out

    assert code == 0
    assert output.exists()
    assert "source_version: AC1015" in out
    assert "target_version: AC1009" in out
    assert "total_entities: 3" in out
    assert "written_entities: 2" in out
    assert "skipped[LWPOLYLINE]: 1" in out
    assert "loss: LINE.lineweight does not exist in AC1009" in out
    assert len(dxf_entities_of_type(output, "LINE")) == 1


def test_cli_convert_strict_fails_without_output(tmp_path: Path, capsys) -> None:
    source = _write_drawing(tmp_path / "drawing.dxf")
    output = tmp_path / "strict.dxf"

    code = cli_module.main(["convert", str(source), str(output), "--dxf-version", "R12", "--strict"])

    assert code == 2
    assert not output.exists()
    assert "failed to convert 1 entities (LWPOLYLINE:1)" in capsys.readouterr().err


def test_cli_convert_binary(tmp_path: Path, capsys) -> None:
    source = _write_drawing(tmp_path / "drawing.dxf")
    output = tmp_path / "drawing.bin.dxf"

    assert cli_module.main(["convert", str(source), str(output), "--binary"]) == 0
    assert "encoding: binary" in capsys.readouterr().out
    assert len(list(dxfcodec.read(output).modelspace().query("LINE CIRCLE"))) == 2


def test_cli_convert_dxb_rejects_unsupported_entities(tmp_path: Path, capsys) -> None:
    source = _write_drawing(tmp_path / "drawing.dxf")

    code = cli_module.main(["convert", str(source), str(tmp_path / "drawing.dxb"), "--dxb"])

    assert code == 2
    assert "LWPOLYLINE" in capsys.readouterr().err


def test_cli_convert_missing_file(tmp_path: Path, capsys) -> None:
    code = cli_module.main(["convert", str(tmp_path / "missing.dxf"), str(tmp_path / "out.dxf")])

    assert code == 2
    assert "error: file not found" in capsys.readouterr().err


def test_cli_version_flag(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["--version"])

    assert excinfo.value.code == 0
    assert capsys.readouterr().out.startswith("dxfcodec ")


def test_package_main_delegates_to_cli(capsys) -> None:
    assert dxfcodec.main([]) == 0
    assert "usage: dxfcodec" in capsys.readouterr().out
