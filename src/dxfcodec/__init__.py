from typing import Sequence

from .convert import ConvertResult, convert, to_ezdxf
from .document import Document, Header, Layout
from .dxb import read_dxb, write_dxb
from .entity import Block, DxfClass, DxfObject, Element, Entity, Table, TableEntry, UnknownElement
from .errors import Diagnostic, DxfError, DxfReadError, DxfWriteError, UnsupportedEntity
from .reader import read, read_ascii, read_binary
from .versions import DEFAULT_VERSION, SUPPORTED_VERSIONS, Version
from .writer import WriteResult, encode, write, write_bytes
from .xdata import ControlGroup, XData, XDataItem

__all__ = [
    "read",
    "read_ascii",
    "read_binary",
    "read_dxb",
    "write",
    "write_bytes",
    "write_dxb",
    "encode",
    "convert",
    "to_ezdxf",
    "Document",
    "Header",
    "Layout",
    "Element",
    "Entity",
    "DxfObject",
    "DxfClass",
    "Table",
    "TableEntry",
    "UnknownElement",
    "Block",
    "XData",
    "XDataItem",
    "ControlGroup",
    "Version",
    "SUPPORTED_VERSIONS",
    "DEFAULT_VERSION",
    "Diagnostic",
    "DxfError",
    "DxfReadError",
    "DxfWriteError",
    "UnsupportedEntity",
    "ConvertResult",
    "WriteResult",
]


def main(argv: Sequence[str] | None = None) -> int:
    from dxfcodec.cli import main as cli_main

    return cli_main(argv)
