"""Extended entity data (group codes 1000-1071)."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

APPLICATION_CODE = 1001
CONTROL_CODE = 1002
POINT_CODES = (1010, 1011, 1012, 1013)


@dataclass
class XDataItem:
    """One typed XDATA value.

    Point codes (1010-1013) carry a tuple holding as many components as were
    read, so a 2D point stays 2D when written back.
    """

    code: int
    value: Any


@dataclass
class ControlGroup:
    """A ``1002 {`` ... ``1002 }`` bracketed list."""

    items: list["XDataItem | ControlGroup"] = field(default_factory=list)


@dataclass
class XData:
    application_name: str
    items: list[XDataItem | ControlGroup] = field(default_factory=list)


def read_xdata(pairs: Sequence[Any], start: int) -> tuple[list[XData], int]:
    """Parse XDATA blocks beginning at ``pairs[start]`` (a 1001 pair).

    Returns the parsed blocks and the index of the first pair that is not
    extended data.
    """
    blocks: list[XData] = []
    index = start
    while index < len(pairs) and pairs[index].code == APPLICATION_CODE:
        block = XData(str(pairs[index].value))
        index = _read_items(pairs, index + 1, block.items, nested=False)
        blocks.append(block)
    return blocks, index


def _read_items(pairs: Sequence[Any], index: int, items: list, *, nested: bool) -> int:
    while index < len(pairs):
        pair = pairs[index]
        if pair.code < 1000 or pair.code == APPLICATION_CODE:
            return index
        if pair.code == CONTROL_CODE:
            if str(pair.value).strip() == "}":
                if nested:
                    return index + 1
                # stray close brace; keep it so it is written back
                items.append(XDataItem(pair.code, pair.value))
                index += 1
                continue
            group = ControlGroup()
            index = _read_items(pairs, index + 1, group.items, nested=True)
            items.append(group)
            continue
        if pair.code in POINT_CODES:
            items.append(XDataItem(pair.code, (float(pair.value),)))
        elif _is_point_component(pair.code) and items and _extends_point(items[-1], pair.code):
            last = items[-1]
            axis = 1 if pair.code < 1030 else 2
            point = list(last.value) + [0.0] * (axis + 1 - len(last.value))
            point[axis] = float(pair.value)
            last.value = tuple(point)
        else:
            items.append(XDataItem(pair.code, pair.value))
        index += 1
    return index


def _is_point_component(code: int) -> bool:
    return 1020 <= code <= 1023 or 1030 <= code <= 1033


def _extends_point(item: Any, code: int) -> bool:
    return isinstance(item, XDataItem) and item.code in POINT_CODES and item.code % 10 == code % 10


def write_xdata(writer: Any, blocks: Sequence[XData]) -> None:
    for block in blocks:
        writer.write(APPLICATION_CODE, block.application_name)
        _write_items(writer, block.items)


def _write_items(writer: Any, items: Sequence[XDataItem | ControlGroup]) -> None:
    for item in items:
        if isinstance(item, ControlGroup):
            writer.write(CONTROL_CODE, "{")
            _write_items(writer, item.items)
            writer.write(CONTROL_CODE, "}")
        elif item.code in POINT_CODES:
            for axis, component in enumerate(tuple(item.value)[:3]):
                writer.write(item.code + 10 * axis, component)
        else:
            writer.write(item.code, item.value)
