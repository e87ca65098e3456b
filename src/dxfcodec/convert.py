from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .codepairs import ASCII
from .document import Document
from .errors import Diagnostic
from .reader import read
from .versions import Version
from .writer import encode


@dataclass(frozen=True)
class ConvertResult:
    source_path: str
    output_path: str
    source_version: str
    target_version: str
    encoding: str
    total_entities: int
    written_entities: int
    skipped_entities: int
    skipped_by_type: dict[str, int]
    losses: tuple[Diagnostic, ...] = ()


def convert(
    source: str | Path | Document,
    output_path: str | Path,
    *,
    version: Version | str | None = None,
    encoding: str = ASCII,
    strict: bool = False,
) -> ConvertResult:
    """Re-encode a drawing, optionally at another version or framing.

    With ``strict`` a conversion that would drop entities raises
    ``ValueError`` and nothing is written.
    """
    if isinstance(source, Document):
        source_path = "<document>"
        doc = source
    else:
        source_path = str(source)
        doc = read(source_path)

    result = encode(doc, version=version, encoding=encoding)

    entity_types = {entity.dxftype for entity in doc.entities}
    skipped_by_type = {
        dxftype: count for dxftype, count in sorted(result.dropped.items()) if dxftype in entity_types
    }
    skipped = sum(skipped_by_type.values())
    total = len(doc.entities)
    if strict and skipped > 0:
        summary = ", ".join(f"{dxftype}:{count}" for dxftype, count in skipped_by_type.items())
        raise ValueError(f"failed to convert {skipped} entities ({summary})")

    out_path = Path(output_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_bytes(result.data)

    return ConvertResult(
        source_path=source_path,
        output_path=str(out_path),
        source_version=(doc.source_version or doc.version).acadver,
        target_version=result.version.acadver,
        encoding=result.encoding,
        total_entities=total,
        written_entities=total - skipped,
        skipped_entities=skipped,
        skipped_by_type=skipped_by_type,
        losses=result.losses,
    )


def to_ezdxf(document: Document, *, version: Version | str | None = None) -> Any:
    """Hand ``document`` to ezdxf, returning an ``ezdxf`` drawing."""
    _require_ezdxf()
    from ezdxf import recover

    data = encode(document, version=version, encoding=ASCII).data
    # recover.read audits and repairs structure ezdxf requires
    dxf_doc, _auditor = recover.read(io.BytesIO(data))
    return dxf_doc


def _require_ezdxf():
    try:
        import ezdxf
    except Exception as exc:
        raise ImportError(
            "ezdxf is required to hand drawings to ezdxf. "
            'Install it with `pip install "dxfcodec[dxf]"`.'
        ) from exc
    return ezdxf
