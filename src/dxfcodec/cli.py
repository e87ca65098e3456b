from __future__ import annotations

import argparse
import sys
from collections import Counter
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Sequence

from .codepairs import ASCII, BINARY, DXB
from .convert import convert
from .errors import DxfError
from .reader import read


def _package_version() -> str:
    try:
        return version("dxfcodec")
    except PackageNotFoundError:
        return "0.0.0"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dxfcodec", description="Inspect and re-encode DXF and DXB drawings.")
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_package_version()}",
    )
    subparsers = parser.add_subparsers(dest="command")

    inspect_parser = subparsers.add_parser("inspect", help="Show basic drawing information.")
    inspect_parser.add_argument("path", help="Path to a DXF or DXB file.")
    inspect_parser.add_argument(
        "--verbose",
        action="store_true",
        help="List every diagnostic instead of only their counts.",
    )

    convert_parser = subparsers.add_parser(
        "convert",
        help="Re-encode a drawing at another version or framing.",
    )
    convert_parser.add_argument("input_path", help="Path to a DXF or DXB file.")
    convert_parser.add_argument("output_path", help="Path to the output file.")
    convert_parser.add_argument(
        "--dxf-version",
        default=None,
        help="Target version, e.g. R12/R2000/AC1027. Defaults to the input's version.",
    )
    framing = convert_parser.add_mutually_exclusive_group()
    framing.add_argument("--binary", action="store_true", help="Write DXF-binary.")
    framing.add_argument("--dxb", action="store_true", help="Write DXB.")
    convert_parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail if any entity cannot be written at the target version.",
    )
    return parser


def _run_inspect(path: str, *, verbose: bool = False) -> int:
    file_path = Path(path)
    if not file_path.exists():
        print(f"error: file not found: {file_path}", file=sys.stderr)
        return 2

    try:
        doc = read(file_path)
    except DxfError as exc:
        print(f"error: failed to read drawing: {exc}", file=sys.stderr)
        return 2

    counts = Counter(entity.dxftype for entity in doc.modelspace().query())
    print(f"file: {file_path}")
    print(f"format: {doc.source_format}")
    print(f"version: {doc.version.acadver} ({doc.version.name})")
    print(f"header_variables: {len(doc.header)}")
    print(f"classes: {len(doc.classes)}")
    print(f"tables: {len(doc.tables)}")
    for name, table in doc.tables.items():
        print(f"table[{name}]: {len(table)}")
    print(f"blocks: {len(doc.blocks)}")
    print(f"objects: {len(doc.objects)}")
    print(f"total_entities: {sum(counts.values())}")
    for dxftype, count in sorted(counts.items()):
        print(f"{dxftype}: {count}")

    print(f"diagnostics: {len(doc.diagnostics)}")
    if verbose:
        for diagnostic in doc.diagnostics:
            print(f"diagnostic: {diagnostic}")
    else:
        for kind, count in sorted(Counter(d.kind for d in doc.diagnostics).items()):
            print(f"diagnostic[{kind}]: {count}")
    return 0


def _run_convert(
    input_path: str,
    output_path: str,
    *,
    dxf_version: str | None = None,
    encoding: str = ASCII,
    strict: bool = False,
) -> int:
    source = Path(input_path)
    if not source.exists():
        print(f"error: file not found: {source}", file=sys.stderr)
        return 2

    try:
        result = convert(
            source,
            output_path,
            version=dxf_version,
            encoding=encoding,
            strict=strict,
        )
    except (DxfError, ValueError) as exc:
        print(f"error: failed to convert drawing: {exc}", file=sys.stderr)
        return 2

    print(f"input: {result.source_path}")
    print(f"output: {result.output_path}")
    print(f"source_version: {result.source_version}")
    print(f"target_version: {result.target_version}")
    print(f"encoding: {result.encoding}")
    print(f"total_entities: {result.total_entities}")
    print(f"written_entities: {result.written_entities}")
    print(f"skipped_entities: {result.skipped_entities}")
    for dxftype, count in result.skipped_by_type.items():
        print(f"skipped[{dxftype}]: {count}")
    for loss in result.losses:
        print(f"loss: {loss.message}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "inspect":
        return _run_inspect(args.path, verbose=bool(args.verbose))
    if args.command == "convert":
        encoding = ASCII
        if args.binary:
            encoding = BINARY
        elif args.dxb:
            encoding = DXB
        return _run_convert(
            args.input_path,
            args.output_path,
            dxf_version=args.dxf_version,
            encoding=encoding,
            strict=bool(args.strict),
        )

    parser.print_help()
    return 0
