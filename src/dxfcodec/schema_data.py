"""Field schema for every variant the codec understands.

This module is plain data.  Each variant lists its fields in the order they
are written, with the release that introduced a field and, where the field
was later dropped or replaced, the last release that carried it.
"""
from __future__ import annotations

import math
from typing import Any

from .schema import (
    CLASS,
    ENTITY,
    GROUPS,
    HANDLE,
    MARKER,
    OBJECT,
    OWNER,
    TABLE,
    TABLE_ENTRY,
    FieldSpec,
    VariantSpec,
    VersionTable,
)
from .values import ValueKind
from .versions import Version

R9 = Version.R9
R12 = Version.R12
R13 = Version.R13
R14 = Version.R14
R2000 = Version.R2000
R2004 = Version.R2004
R2007 = Version.R2007
R2010 = Version.R2010
R2013 = Version.R2013

ORIGIN = (0.0, 0.0, 0.0)
ORIGIN_2D = (0.0, 0.0)
Z_AXIS = (0.0, 0.0, 1.0)
X_AXIS = (1.0, 0.0, 0.0)


def _f(name: str, code: int, default: Any = None, since: Version = R9, until: Version | None = None, **kw) -> FieldSpec:
    return FieldSpec(name, code, min_version=since, max_version=until, default=default, **kw)


def _opt(name: str, code: int, default: Any = None, since: Version = R9, until: Version | None = None, **kw) -> FieldSpec:
    return _f(name, code, default, since, until, write_default=False, **kw)


def _pt(name: str, code: int, default: Any = ORIGIN, since: Version = R9, **kw) -> FieldSpec:
    return _f(name, code, default, since, dims=3, **kw)


def _pt2(name: str, code: int, default: Any = ORIGIN_2D, since: Version = R9, **kw) -> FieldSpec:
    return _f(name, code, default, since, dims=2, **kw)


def _marker(value: str, since: Version = R13, name: str | None = None) -> FieldSpec:
    return FieldSpec(name or value, 100, min_version=since, default=value, role=MARKER)


def _extrusion() -> FieldSpec:
    return _opt("extrusion", 210, Z_AXIS, dims=3)


def _thickness() -> FieldSpec:
    return _opt("thickness", 39, 0.0)


_HANDLE = FieldSpec("handle", 5, role=HANDLE)
_GROUPS = FieldSpec("groups", 102, min_version=R2000, role=GROUPS)

_ENTITY_COMMON = (
    _HANDLE,
    _GROUPS,
    FieldSpec("owner", 330, min_version=R2000, default=0, write_default=False, role=OWNER),
    _marker("AcDbEntity"),
    _opt("paperspace", 67, 0),
    _opt("layout_tab", 410, None, R2000),
    _f("layer", 8, "0"),
    _opt("linetype", 6, "BYLAYER"),
    _opt("color", 62, 256),
    _opt("lineweight", 370, -1, R2000),
    _opt("linetype_scale", 48, 1.0, R13),
    _opt("invisible", 60, 0, R13),
    _opt("true_color", 420, None, R2004),
    _opt("color_name", 430, None, R2004),
    _opt("transparency", 440, None, R2004),
)

_OBJECT_COMMON = (
    _HANDLE,
    _GROUPS,
    FieldSpec("owner", 330, min_version=R13, default=0, role=OWNER),
)


def _entity(name: str, *fields: FieldSpec, since: Version = R9) -> VariantSpec:
    return VariantSpec(name, ENTITY, _ENTITY_COMMON + fields, min_version=since)


def _object(name: str, *fields: FieldSpec, since: Version = R13) -> VariantSpec:
    return VariantSpec(name, OBJECT, _OBJECT_COMMON + fields, min_version=since)


def _entry(name: str, marker: str, *fields: FieldSpec, handles: tuple[FieldSpec, ...] = (_HANDLE,), since: Version = R9) -> VariantSpec:
    envelope = handles + (
        _GROUPS,
        FieldSpec("owner", 330, min_version=R2000, default=0, role=OWNER),
        _marker("AcDbSymbolTableRecord"),
        _marker(marker),
        _f("name", 2, ""),
    )
    return VariantSpec(name, TABLE_ENTRY, envelope + fields, min_version=since)


def _flags() -> FieldSpec:
    return _f("flags", 70, 0)


_TEXT_BODY = (
    _thickness(),
    _pt("insert", 10),
    _f("height", 40, 1.0),
    _f("text", 1, ""),
)
_TEXT_STYLE = (
    _opt("rotation", 50, 0.0),
    _opt("width_factor", 41, 1.0),
    _opt("oblique", 51, 0.0),
    _opt("style", 7, "STANDARD"),
    _opt("text_generation", 71, 0),
    _opt("halign", 72, 0),
    _opt("align_point", 11, None, dims=3),
    _extrusion(),
)

ENTITIES = (
    _entity(
        "LINE",
        _marker("AcDbLine"),
        _thickness(),
        _pt("start", 10),
        _pt("end", 11),
        _extrusion(),
    ),
    _entity(
        "POINT",
        _marker("AcDbPoint"),
        _pt("location", 10),
        _thickness(),
        _extrusion(),
        _opt("angle", 50, 0.0),
    ),
    _entity(
        "CIRCLE",
        _marker("AcDbCircle"),
        _thickness(),
        _pt("center", 10),
        _f("radius", 40, 1.0),
        _extrusion(),
    ),
    _entity(
        "ARC",
        _marker("AcDbCircle"),
        _thickness(),
        _pt("center", 10),
        _f("radius", 40, 1.0),
        _extrusion(),
        _marker("AcDbArc"),
        _f("start_angle", 50, 0.0),
        _f("end_angle", 51, 360.0),
    ),
    _entity(
        "ELLIPSE",
        _marker("AcDbEllipse"),
        _pt("center", 10),
        _pt("major_axis", 11, X_AXIS),
        _extrusion(),
        _f("ratio", 40, 1.0),
        _f("start_param", 41, 0.0),
        _f("end_param", 42, math.tau),
        since=R13,
    ),
    _entity(
        "TEXT",
        _marker("AcDbText"),
        *_TEXT_BODY,
        *_TEXT_STYLE,
        _marker("AcDbText", name="AcDbText.2"),
        _opt("valign", 73, 0),
    ),
    _entity(
        "ATTDEF",
        _marker("AcDbText"),
        *_TEXT_BODY,
        *_TEXT_STYLE,
        _marker("AcDbAttributeDefinition"),
        _f("prompt", 3, ""),
        _f("tag", 2, ""),
        _flags(),
        _opt("field_length", 73, 0),
        _opt("valign", 74, 0),
        _opt("locked", 280, 0, R2010),
    ),
    _entity(
        "ATTRIB",
        _marker("AcDbText"),
        *_TEXT_BODY,
        _marker("AcDbAttribute"),
        _f("tag", 2, ""),
        _flags(),
        _opt("field_length", 73, 0),
        *_TEXT_STYLE,
        _opt("valign", 74, 0),
        _opt("locked", 280, 0, R2010),
    ),
    _entity(
        "MTEXT",
        _marker("AcDbMText"),
        _pt("insert", 10),
        _f("height", 40, 1.0),
        _f("reference_width", 41, 0.0),
        _f("attachment", 71, 1),
        _f("drawing_direction", 72, 1),
        _f("text", 1, "", continuation=3),
        _opt("style", 7, "STANDARD"),
        _extrusion(),
        _opt("x_axis", 11, None, dims=3),
        _opt("rotation", 50, 0.0),
        _opt("line_spacing_style", 73, 1),
        _opt("line_spacing", 44, 1.0),
        since=R13,
    ),
    _entity(
        "INSERT",
        _opt("has_attributes", 66, 0, presence_of="children"),
        _marker("AcDbBlockReference"),
        _f("name", 2, ""),
        _pt("insert", 10),
        _opt("xscale", 41, 1.0),
        _opt("yscale", 42, 1.0),
        _opt("zscale", 43, 1.0),
        _opt("rotation", 50, 0.0),
        _opt("column_count", 70, 1),
        _opt("row_count", 71, 1),
        _opt("column_spacing", 44, 0.0),
        _opt("row_spacing", 45, 0.0),
        _extrusion(),
    ),
    _entity(
        "POLYLINE",
        _f("vertices_follow", 66, 1),
        _f("subclass", 100, "AcDb2dPolyline", R13),
        _pt("elevation", 10),
        _thickness(),
        _opt("flags", 70, 0),
        _opt("default_start_width", 40, 0.0),
        _opt("default_end_width", 41, 0.0),
        _opt("mesh_m", 71, 0),
        _opt("mesh_n", 72, 0),
        _opt("smooth_m", 73, 0),
        _opt("smooth_n", 74, 0),
        _opt("curve_type", 75, 0),
        _extrusion(),
    ),
    _entity(
        "VERTEX",
        _marker("AcDbVertex"),
        _f("subclass", 100, "AcDb2dVertex", R13),
        _pt("location", 10),
        _opt("start_width", 40, 0.0),
        _opt("end_width", 41, 0.0),
        _opt("bulge", 42, 0.0),
        _opt("flags", 70, 0),
        _opt("tangent", 50, 0.0),
        _opt("face1", 71, 0),
        _opt("face2", 72, 0),
        _opt("face3", 73, 0),
        _opt("face4", 74, 0),
        _opt("vertex_id", 91, None, R2010),
    ),
    _entity("SEQEND"),
    _entity(
        "LWPOLYLINE",
        _marker("AcDbPolyline"),
        _f("vertex_count", 90, 0, count_of="vertices"),
        _f("flags", 70, 0),
        _opt("constant_width", 43, 0.0),
        _opt("elevation", 38, 0.0),
        _thickness(),
        FieldSpec(
            "vertices",
            10,
            members=(
                _pt2("location", 10),
                _opt("vertex_id", 91, None, R2010),
                _opt("start_width", 40, 0.0),
                _opt("end_width", 41, 0.0),
                _opt("bulge", 42, 0.0),
            ),
        ),
        _extrusion(),
        since=R14,
    ),
    _entity(
        "SOLID",
        _marker("AcDbTrace"),
        _pt("first", 10),
        _pt("second", 11),
        _pt("third", 12),
        _pt("fourth", 13),
        _thickness(),
        _extrusion(),
    ),
    _entity(
        "TRACE",
        _marker("AcDbTrace"),
        _pt("first", 10),
        _pt("second", 11),
        _pt("third", 12),
        _pt("fourth", 13),
        _thickness(),
        _extrusion(),
    ),
    _entity(
        "3DFACE",
        _marker("AcDbFace"),
        _pt("first", 10),
        _pt("second", 11),
        _pt("third", 12),
        _pt("fourth", 13),
        _opt("invisible_edges", 70, 0),
    ),
    _entity(
        "RAY",
        _marker("AcDbRay"),
        _pt("start", 10),
        _pt("unit_vector", 11, X_AXIS),
        since=R13,
    ),
    _entity(
        "XLINE",
        _marker("AcDbXline"),
        _pt("start", 10),
        _pt("unit_vector", 11, X_AXIS),
        since=R13,
    ),
    _entity(
        "SPLINE",
        _marker("AcDbSpline"),
        _extrusion(),
        _f("flags", 70, 0),
        _f("degree", 71, 3),
        _f("knot_count", 72, 0, count_of="knots"),
        _f("control_point_count", 73, 0, count_of="control_points"),
        _f("fit_point_count", 74, 0, count_of="fit_points"),
        _opt("knot_tolerance", 42, 1e-10),
        _opt("control_point_tolerance", 43, 1e-10),
        _opt("fit_tolerance", 44, 1e-10),
        _opt("start_tangent", 12, None, dims=3),
        _opt("end_tangent", 13, None, dims=3),
        _f("knots", 40, repeated=True),
        _f("weights", 41, repeated=True),
        _f("control_points", 10, dims=3, repeated=True),
        _f("fit_points", 11, dims=3, repeated=True),
        since=R13,
    ),
    _entity(
        "DIMENSION",
        _marker("AcDbDimension"),
        _opt("dimension_version", 280, 0, R2010),
        _f("block_name", 2, ""),
        _pt("definition_point", 10),
        _pt("text_midpoint", 11),
        _f("dimension_type", 70, 0),
        _opt("attachment", 71, 5, R2000),
        _opt("line_spacing_style", 72, 1, R2000),
        _opt("line_spacing", 41, 1.0, R2000),
        _opt("actual_measurement", 42, 0.0, R2000),
        _opt("text", 1, ""),
        _opt("text_rotation", 53, 0.0),
        _opt("horizontal_direction", 51, 0.0),
        _extrusion(),
        _f("style", 3, "STANDARD"),
        _f("subclasses", 100, since=R13, repeated=True),
        _opt("defpoint2", 13, None, dims=3),
        _opt("defpoint3", 14, None, dims=3),
        _opt("defpoint4", 15, None, dims=3),
        _opt("defpoint5", 16, None, dims=3),
        _opt("insertion_point", 12, None, dims=3),
        _opt("leader_length", 40, 0.0),
        _opt("angle", 50, 0.0),
        _opt("oblique", 52, 0.0),
    ),
    _entity(
        "LEADER",
        _marker("AcDbLeader"),
        _f("style", 3, "STANDARD"),
        _f("arrowhead", 71, 1),
        _f("path_type", 72, 0),
        _f("creation", 73, 3),
        _opt("hookline_direction", 74, 0),
        _opt("hookline", 75, 0),
        _opt("text_height", 40, 0.0),
        _opt("text_width", 41, 0.0),
        _f("vertex_count", 76, 0, count_of="vertices"),
        _f("vertices", 10, dims=3, repeated=True),
        _opt("override_color", 77, 0),
        _opt("annotation", 340, None, pointer=True),
        _opt("normal", 210, Z_AXIS, dims=3),
        _opt("horizontal_direction", 211, None, dims=3),
        _opt("block_offset", 212, None, dims=3),
        _opt("annotation_offset", 213, None, dims=3),
        since=R13,
    ),
    _entity(
        "HATCH",
        _marker("AcDbHatch"),
        _pt("elevation", 10),
        _f("extrusion", 210, Z_AXIS, dims=3),
        _f("pattern_name", 2, "SOLID"),
        _f("solid_fill", 70, 1),
        _f("associative", 71, 0),
        _f("boundary_data", 91, tail=True),
        since=R14,
    ),
    _entity(
        "VIEWPORT",
        _marker("AcDbViewport"),
        _pt("center", 10),
        _f("width", 40, 1.0),
        _f("height", 41, 1.0),
        _f("status", 68, 0),
        _f("viewport_id", 69, 1),
        _opt("view_center", 12, None, dims=2),
        _opt("snap_base", 13, None, dims=2),
        _opt("snap_spacing", 14, None, dims=2),
        _opt("grid_spacing", 15, None, dims=2),
        _opt("view_direction", 16, None, dims=3),
        _opt("view_target", 17, None, dims=3),
        _opt("lens_length", 42, 50.0),
        _opt("front_clip", 43, 0.0),
        _opt("back_clip", 44, 0.0),
        _opt("view_height", 45, 1.0),
        _opt("snap_angle", 50, 0.0),
        _opt("twist_angle", 51, 0.0),
        _opt("circle_zoom", 72, 100),
        _opt("frozen_layers", 331, pointer=True, repeated=True),
        _opt("flags", 90, 0, R2000),
        since=R13,
    ),
)

BLOCK_DELIMITERS = (
    _entity(
        "BLOCK",
        _marker("AcDbBlockBegin"),
        _f("name", 2, ""),
        _f("flags", 70, 0),
        _pt("base_point", 10),
        _f("name2", 3, None, mirror="name"),
        _f("xref_path", 1, "", R13),
        _opt("description", 4, None, R2000),
    ),
    _entity("ENDBLK", _marker("AcDbBlockEnd")),
)

_DICTIONARY_ENTRIES = FieldSpec(
    "entries",
    3,
    members=(
        _f("name", 3, ""),
        _opt("entry", 350, None, pointer=True),
        _opt("owned_entry", 360, None, pointer=True),
    ),
)

OBJECTS = (
    _object(
        "DICTIONARY",
        _marker("AcDbDictionary"),
        _opt("hard_owner", 280, 0, R2000),
        _f("cloning", 281, 1, R2000),
        _DICTIONARY_ENTRIES,
    ),
    _object(
        "ACDBDICTIONARYWDFLT",
        _marker("AcDbDictionary"),
        _opt("hard_owner", 280, 0, R2000),
        _f("cloning", 281, 1, R2000),
        _DICTIONARY_ENTRIES,
        _marker("AcDbDictionaryWithDefault"),
        _opt("default", 340, None, pointer=True),
        since=R2000,
    ),
    _object(
        "DICTIONARYVAR",
        _marker("DictionaryVariables"),
        _f("schema", 280, 0),
        _f("value", 1, ""),
        since=R2000,
    ),
    _object(
        "GROUP",
        _marker("AcDbGroup"),
        _f("description", 300, ""),
        _f("unnamed", 70, 1),
        _f("selectable", 71, 1),
        _f("entities", 340, pointer=True, repeated=True),
    ),
    _object(
        "XRECORD",
        _marker("AcDbXrecord"),
        _f("cloning", 280, 1, R2000),
        _f("data", -1, tail=True),
    ),
    _object("ACDBPLACEHOLDER"),
)

TABLE_ENTRIES = (
    _entry("APPID", "AcDbRegAppTableRecord", _flags()),
    _entry(
        "BLOCK_RECORD",
        "AcDbBlockTableRecord",
        _opt("layout", 340, None, R2000, pointer=True),
        _f("insert_units", 70, 0, R2000),
        _f("explodable", 280, 1, R2007),
        _f("scalable", 281, 0, R2007),
        _opt("preview", 310, None, R2000, repeated=True),
        since=R13,
    ),
    _entry(
        "DIMSTYLE",
        "AcDbDimStyleTableRecord",
        _flags(),
        _opt("dimpost", 3, ""),
        _opt("dimapost", 4, ""),
        _opt("dimblk", 5, "", until=R14, value_kind=ValueKind.STRING),
        _opt("dimblk1", 6, "", until=R14),
        _opt("dimblk2", 7, "", until=R14),
        _f("dimscale", 40, 1.0),
        _f("dimasz", 41, 0.18),
        _f("dimexo", 42, 0.0625),
        _f("dimdli", 43, 0.38),
        _f("dimexe", 44, 0.18),
        _f("dimrnd", 45, 0.0),
        _f("dimdle", 46, 0.0),
        _f("dimtp", 47, 0.0),
        _f("dimtm", 48, 0.0),
        _f("dimtxt", 140, 0.18),
        _f("dimcen", 141, 0.09),
        _f("dimtsz", 142, 0.0),
        _f("dimaltf", 143, 25.4),
        _f("dimlfac", 144, 1.0),
        _f("dimtvp", 145, 0.0),
        _f("dimtfac", 146, 1.0),
        _f("dimgap", 147, 0.09),
        _f("dimtol", 71, 0),
        _f("dimlim", 72, 0),
        _f("dimtih", 73, 1),
        _f("dimtoh", 74, 1),
        _f("dimse1", 75, 0),
        _f("dimse2", 76, 0),
        _f("dimtad", 77, 0),
        _f("dimzin", 78, 0),
        _f("dimalt", 170, 0),
        _f("dimaltd", 171, 2),
        _f("dimtofl", 172, 0),
        _f("dimsah", 173, 0),
        _f("dimtix", 174, 0),
        _f("dimsoxd", 175, 0),
        _f("dimclrd", 176, 0),
        _f("dimclre", 177, 0),
        _f("dimclrt", 178, 0),
        _opt("dimadec", 179, 0, R2000),
        _f("dimunit", 270, 2, R13, R14),
        _f("dimdec", 271, 4, R13),
        _f("dimtdec", 272, 4, R13),
        _f("dimaltu", 273, 2, R13),
        _f("dimalttd", 274, 2, R13),
        _f("dimaunit", 275, 0, R13),
        _f("dimfrac", 276, 0, R2000),
        _f("dimlunit", 277, 2, R2000),
        _opt("dimtxsty", 340, None, R13, pointer=True),
        _opt("dimldrblk", 341, None, R2000, pointer=True),
        _opt("dimlwd", 371, -2, R2000),
        _opt("dimlwe", 372, -2, R2000),
        handles=(FieldSpec("handle", 105, role=HANDLE),),
    ),
    _entry(
        "LAYER",
        "AcDbLayerTableRecord",
        _flags(),
        _f("color", 62, 7),
        _f("linetype", 6, "CONTINUOUS"),
        _opt("plot", 290, True, R2000),
        _opt("lineweight", 370, -3, R2000),
        _opt("plot_style", 390, None, R2000, pointer=True),
        _opt("material", 347, None, R2007, pointer=True),
    ),
    _entry(
        "LTYPE",
        "AcDbLinetypeTableRecord",
        _flags(),
        _f("description", 3, ""),
        _f("alignment", 72, 65),
        _f("element_count", 73, 0, count_of="dashes"),
        _f("pattern_length", 40, 0.0),
        FieldSpec(
            "dashes",
            49,
            members=(
                _f("length", 49, 0.0),
                _f("element_type", 74, 0, R13),
            ),
        ),
    ),
    _entry(
        "STYLE",
        "AcDbTextStyleTableRecord",
        _flags(),
        _f("height", 40, 0.0),
        _f("width", 41, 1.0),
        _f("oblique", 50, 0.0),
        _f("generation", 71, 0),
        _f("last_height", 42, 0.2),
        _f("font", 3, "txt"),
        _f("bigfont", 4, ""),
    ),
    _entry(
        "UCS",
        "AcDbUCSTableRecord",
        _flags(),
        _pt("origin", 10),
        _pt("x_axis", 11, X_AXIS),
        _pt("y_axis", 12, (0.0, 1.0, 0.0)),
        _opt("ortho_type", 79, 0, R2000),
        _opt("elevation", 146, 0.0, R2000),
    ),
    _entry(
        "VIEW",
        "AcDbViewTableRecord",
        _flags(),
        _f("view_height", 40, 1.0),
        _pt2("center", 10),
        _f("view_width", 41, 1.0),
        _pt("direction", 11, Z_AXIS),
        _pt("target", 12),
        _f("lens_length", 42, 50.0),
        _f("front_clip", 43, 0.0),
        _f("back_clip", 44, 0.0),
        _f("twist", 50, 0.0),
        _f("view_mode", 71, 0),
        _opt("render_mode", 281, 0, R2000),
        _opt("ucs_associated", 72, 0, R2000),
    ),
    _entry(
        "VPORT",
        "AcDbViewportTableRecord",
        _flags(),
        _pt2("lower_left", 10),
        _pt2("upper_right", 11, (1.0, 1.0)),
        _pt2("view_center", 12),
        _pt2("snap_base", 13),
        _pt2("snap_spacing", 14, (1.0, 1.0)),
        _pt2("grid_spacing", 15, (1.0, 1.0)),
        _pt("view_direction", 16, Z_AXIS),
        _pt("view_target", 17),
        _f("view_height", 40, 1.0),
        _f("aspect_ratio", 41, 1.0),
        _f("lens_length", 42, 50.0),
        _f("front_clip", 43, 0.0),
        _f("back_clip", 44, 0.0),
        _f("snap_rotation", 50, 0.0),
        _f("twist", 51, 0.0),
        _f("view_mode", 71, 0),
        _f("circle_zoom", 72, 1000),
        _f("fast_zoom", 73, 1),
        _f("ucs_icon", 74, 3),
        _f("snap_on", 75, 0),
        _f("grid_on", 76, 0),
        _f("snap_style", 77, 0),
        _f("snap_isopair", 78, 0),
        _opt("render_mode", 281, 0, R2000),
    ),
)

TABLE_VARIANT = VariantSpec(
    "TABLE",
    TABLE,
    (
        _f("name", 2, ""),
        _HANDLE,
        _GROUPS,
        FieldSpec("owner", 330, min_version=R2000, default=0, role=OWNER),
        _marker("AcDbSymbolTable"),
        _f("max_entries", 70, 0, count_of="entries"),
    ),
)

CLASS_VARIANT = VariantSpec(
    "CLASS",
    CLASS,
    (
        _f("record_name", 1, ""),
        _f("cpp_class_name", 2, ""),
        _f("application_name", 3, ""),
        _f("proxy_flags", 90, 0),
        _f("instance_count", 91, 0, R2004),
        _f("was_proxy", 280, 0),
        _f("is_entity", 281, 0),
    ),
    min_version=R13,
)

TABLE_NAMES = ("VPORT", "LTYPE", "LAYER", "STYLE", "VIEW", "UCS", "APPID", "DIMSTYLE", "BLOCK_RECORD")


def _h(name: str, code: int, default: Any = None, since: Version = R9, until: Version | None = None, dims: int = 1) -> FieldSpec:
    return FieldSpec(name, code, min_version=since, max_version=until, default=default, dims=dims)


HEADER_VARIABLES = (
    _h("$ACADVER", 1, "AC1009"),
    _h("$ACADMAINTVER", 70, 0, R13),
    _h("$DWGCODEPAGE", 3, "ANSI_1252", R12),
    _h("$LASTSAVEDBY", 1, "", R2004),
    _h("$REQUIREDVERSIONS", 160, 0, R2013),
    _h("$INSBASE", 10, ORIGIN, dims=3),
    _h("$EXTMIN", 10, ORIGIN, dims=3),
    _h("$EXTMAX", 10, ORIGIN, dims=3),
    _h("$LIMMIN", 10, ORIGIN_2D, dims=2),
    _h("$LIMMAX", 10, (12.0, 9.0), dims=2),
    _h("$ORTHOMODE", 70, 0),
    _h("$REGENMODE", 70, 1),
    _h("$FILLMODE", 70, 1),
    _h("$QTEXTMODE", 70, 0),
    _h("$MIRRTEXT", 70, 1),
    _h("$DRAGMODE", 70, 2, R9, R14),
    _h("$LTSCALE", 40, 1.0),
    _h("$OSMODE", 70, 0, R9, R14),
    _h("$ATTMODE", 70, 1),
    _h("$TEXTSIZE", 40, 0.2),
    _h("$TRACEWID", 40, 0.05),
    _h("$TEXTSTYLE", 7, "STANDARD"),
    _h("$CLAYER", 8, "0"),
    _h("$CELTYPE", 6, "BYLAYER"),
    _h("$CECOLOR", 62, 256),
    _h("$CELTSCALE", 40, 1.0, R13),
    _h("$DISPSILH", 70, 0, R13),
    _h("$DIMSCALE", 40, 1.0),
    _h("$DIMASZ", 40, 0.18),
    _h("$DIMTXT", 40, 0.18),
    _h("$DIMSTYLE", 2, "STANDARD"),
    _h("$DIMUNIT", 70, 2, R13, R14),
    _h("$DIMLUNIT", 70, 2, R2000),
    _h("$DIMFRAC", 70, 0, R2000),
    _h("$LUNITS", 70, 2),
    _h("$LUPREC", 70, 4),
    _h("$SKETCHINC", 40, 0.1),
    _h("$FILLETRAD", 40, 0.0),
    _h("$AUNITS", 70, 0),
    _h("$AUPREC", 70, 0),
    _h("$MENU", 1, "."),
    _h("$ELEVATION", 40, 0.0),
    _h("$PELEVATION", 40, 0.0),
    _h("$THICKNESS", 40, 0.0),
    _h("$LIMCHECK", 70, 0),
    _h("$BLIPMODE", 70, 0, R9, R14),
    _h("$CHAMFERA", 40, 0.0),
    _h("$CHAMFERB", 40, 0.0),
    _h("$SKPOLY", 70, 0),
    _h("$TDCREATE", 40, 0.0),
    _h("$TDUPDATE", 40, 0.0),
    _h("$TDINDWG", 40, 0.0),
    _h("$USRTIMER", 70, 1),
    _h("$ANGBASE", 50, 0.0),
    _h("$ANGDIR", 70, 0),
    _h("$PDMODE", 70, 0),
    _h("$PDSIZE", 40, 0.0),
    _h("$PLINEWID", 40, 0.0),
    _h("$SPLINESEGS", 70, 8),
    _h("$HANDLING", 70, 1, R9, R12),
    _h("$HANDSEED", 5, 0),
    _h("$UCSNAME", 2, ""),
    _h("$UCSORG", 10, ORIGIN, dims=3),
    _h("$UCSXDIR", 10, X_AXIS, dims=3),
    _h("$UCSYDIR", 10, (0.0, 1.0, 0.0), dims=3),
    _h("$MEASUREMENT", 70, 0, R14),
    _h("$CELWEIGHT", 370, -1, R2000),
    _h("$ENDCAPS", 280, 0, R2000),
    _h("$JOINSTYLE", 280, 0, R2000),
    _h("$LWDISPLAY", 290, False, R2000),
    _h("$INSUNITS", 70, 0, R2000),
    _h("$PSTYLEMODE", 290, True, R2000),
    _h("$FINGERPRINTGUID", 2, "", R2000),
    _h("$VERSIONGUID", 2, "", R2000),
    _h("$CSHADOW", 280, 0, R2004),
    _h("$DRAGVS", 349, 0, R2007),
    _h("$INTERFEREOBJVS", 345, 0, R2007),
)

VERSION_TABLE = VersionTable(
    ENTITIES + BLOCK_DELIMITERS + OBJECTS + TABLE_ENTRIES + (TABLE_VARIANT, CLASS_VARIANT),
    HEADER_VARIABLES,
)

ENTITY_TYPES = frozenset(v.name for v in ENTITIES)
OBJECT_TYPES = frozenset(v.name for v in OBJECTS)
TABLE_ENTRY_TYPES = frozenset(v.name for v in TABLE_ENTRIES)
