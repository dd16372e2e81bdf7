"""Header builder: positional field schemas for tabular regions.

A *region* is one object, one array of objects, or one array of arrays,
encoded as a header line followed by its data rows. The header fixes the
column position of every field, so rows never repeat key names:

    [root.products#2](id,name,colors#,dimensions{})

    path        root.products      depth = number of segments = 2
    count       2                  arrays only; omitted for objects
    fields      id, name           leaf fields, one inline value per row
                colors#            nested array field, its own region at depth 3
                dimensions{}       nested object field, its own region at depth 3

A list region (array whose elements are arrays of objects) has a count but
no field group: ``[root.matrix#2]``. Each element row is followed by the
element's own region with the path segment ``*``.

Field order is the order in which keys are first encountered scanning the
region's elements front to back, so the first element's key order wins
and keys that only appear later are appended. Encoder and decoder share
nothing but the header line, which is why this order must be
deterministic.

Field roles must agree across all elements of an array region. The rules,
and the error raised when they are broken, are in ``_resolve_role``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

from ploonbench.errors import HeterogeneousRegionError, MalformedHeaderError, UnsupportedValueError
from ploonbench.escaping import (
    find_unescaped,
    is_escaped,
    parse_name,
    render_name,
    split_unescaped,
)
from ploonbench.tree import REGION_ARRAY_SHAPES, Shape, classify

# Path segment for the element arrays of a list region.
ELEMENT = None
ELEMENT_TOKEN = "*"

_COUNT_RE = re.compile(r"[0-9]+")


class Role(Enum):
    """How a field's value is carried."""

    LEAF = "leaf"
    ARRAY = "array"
    OBJECT = "object"


class RegionKind(Enum):
    ARRAY = "array"
    OBJECT = "object"
    LIST = "list"


@dataclass(frozen=True)
class Field:
    name: str
    role: Role = Role.LEAF

    @property
    def nested(self) -> bool:
        return self.role is not Role.LEAF


@dataclass(frozen=True)
class Header:
    """One region declaration.

    Attributes:
        path: Path segments from the root. ``ELEMENT`` (None) marks the
            element arrays of a list region.
        kind: array, object or list.
        fields: Ordered fields; empty for list regions.
        count: Number of elements (array and list regions only).
    """

    path: tuple
    kind: RegionKind
    fields: tuple[Field, ...] = field(default_factory=tuple)
    count: int | None = None

    @property
    def depth(self) -> int:
        return len(self.path)

    @property
    def leaf_fields(self) -> tuple[Field, ...]:
        return tuple(f for f in self.fields if not f.nested)

    @property
    def nested_fields(self) -> tuple[Field, ...]:
        return tuple(f for f in self.fields if f.nested)

    @property
    def expected_rows(self) -> int:
        return 1 if self.kind is RegionKind.OBJECT else self.count

    @property
    def path_text(self) -> str:
        return path_text(self.path)


def path_text(path: tuple) -> str:
    """Human-readable dotted path (unescaped, for messages and logs)."""
    return ".".join(ELEMENT_TOKEN if seg is ELEMENT else seg for seg in path)


# ----------------------------------------------------------------------
# Building
# ----------------------------------------------------------------------

def _value_kind(name: str, value, path: tuple) -> str:
    shape = classify(value)
    if shape is Shape.OBJECT:
        return "object"
    if shape in REGION_ARRAY_SHAPES:
        return "region-array"
    if shape is Shape.ARRAY_OF_MIXED:
        raise HeterogeneousRegionError(
            f"Field {name!r} holds an array mixing objects with other values",
            path=path_text(path),
        )
    if shape is Shape.ARRAY_OF_SCALARS:
        return "inline-array" if value else "empty-array"
    return shape.value


def _resolve_role(name: str, present: list, path: tuple) -> Role:
    """Decide a field's role from every value it takes across the region.

    * any object        -> every value must be an object        -> OBJECT
    * any object array  -> every value must be an object array,
                           an array of arrays, or empty         -> ARRAY
    * otherwise leaf    -> non-null values share one type among
                           boolean, number, string, inline array -> LEAF
    """
    kinds = {_value_kind(name, v, path) for v in present}

    if "object" in kinds:
        if kinds != {"object"}:
            others = ", ".join(sorted(kinds - {"object"}))
            raise HeterogeneousRegionError(
                f"Field {name!r} is an object in some elements and {others} in others",
                path=path_text(path),
            )
        return Role.OBJECT

    if "region-array" in kinds:
        if not kinds <= {"region-array", "empty-array"}:
            others = ", ".join(sorted(kinds - {"region-array", "empty-array"}))
            raise HeterogeneousRegionError(
                f"Field {name!r} is an array of objects in some elements and {others} in others",
                path=path_text(path),
            )
        return Role.ARRAY

    leaf_types = {"inline-array" if k == "empty-array" else k for k in kinds} - {"null"}
    if len(leaf_types) > 1:
        raise HeterogeneousRegionError(
            f"Field {name!r} mixes {' and '.join(sorted(leaf_types))} values",
            path=path_text(path),
        )
    return Role.LEAF


def _build_fields(elements: list[dict], path: tuple) -> tuple[Field, ...]:
    names: dict[str, None] = {}
    for element in elements:
        for key in element:
            names.setdefault(key, None)

    fields = []
    for name in names:
        present = [element[name] for element in elements if name in element]
        role = _resolve_role(name, present, path)
        if role is not Role.LEAF and len(present) < len(elements):
            raise HeterogeneousRegionError(
                f"Nested field {name!r} is missing from "
                f"{len(elements) - len(present)} of {len(elements)} elements",
                path=path_text(path),
            )
        fields.append(Field(name, role))
    return tuple(fields)


def build_header(value, path: tuple) -> Header:
    """Compute the header for a region value at ``path``.

    Args:
        value: An object, an array of objects, an array of arrays of
            objects, or the empty array.
        path: Path segments from the root; its length is the depth.

    Raises:
        HeterogeneousRegionError: if fields disagree in shape across the
            elements of an array, or the array mixes element kinds.
        UnsupportedValueError: if the value is not a region at all.
    """
    shape = classify(value)
    if shape is Shape.OBJECT:
        return Header(path, RegionKind.OBJECT, _build_fields([value], path))
    if shape is Shape.ARRAY_OF_OBJECTS:
        return Header(path, RegionKind.ARRAY, _build_fields(value, path), count=len(value))
    if shape is Shape.ARRAY_OF_ARRAYS:
        return Header(path, RegionKind.LIST, count=len(value))
    if shape is Shape.ARRAY_OF_SCALARS and not value:
        return Header(path, RegionKind.ARRAY, count=0)
    if shape is Shape.ARRAY_OF_MIXED:
        raise HeterogeneousRegionError(
            "Array mixes objects with scalars or arrays", path=path_text(path)
        )
    raise UnsupportedValueError(
        f"A {shape.value} value cannot form a region", path=path_text(path)
    )


# ----------------------------------------------------------------------
# Rendering and parsing
# ----------------------------------------------------------------------

def _render_field(f: Field) -> str:
    suffix = {Role.LEAF: "", Role.ARRAY: "#", Role.OBJECT: "{}"}[f.role]
    return render_name(f.name) + suffix


def render_header(header: Header) -> str:
    """Render ``[path#count](fields)``; list regions omit the field group."""
    path = ".".join(
        ELEMENT_TOKEN if seg is ELEMENT else render_name(seg) for seg in header.path
    )
    count = f"#{header.count}" if header.count is not None else ""
    if header.kind is RegionKind.LIST:
        return f"[{path}{count}]"
    fields = ",".join(_render_field(f) for f in header.fields)
    return f"[{path}{count}]({fields})"


def _parse_field(raw: str, line: int | None) -> Field:
    role = Role.LEAF
    if len(raw) >= 2 and raw.endswith("{}") and not is_escaped(raw, len(raw) - 2):
        raw, role = raw[:-2], Role.OBJECT
    elif raw.endswith("#") and not is_escaped(raw, len(raw) - 1):
        raw, role = raw[:-1], Role.ARRAY
    if raw == "":
        raise MalformedHeaderError("Empty field name in header", line=line)
    return Field(parse_name(raw, line), role)


def parse_header(raw: str, line: int | None = None) -> Header:
    """Parse a header line into a ``Header``.

    Raises:
        MalformedHeaderError: if the line does not follow
            ``[path#count](fields)``, ``[path](fields)`` or ``[path#count]``.
    """
    if not raw.startswith("["):
        raise MalformedHeaderError(f"Header must start with '[': {raw!r}", line=line)
    close = find_unescaped(raw, "]", 1)
    if close == -1:
        raise MalformedHeaderError(f"Unterminated header path: {raw!r}", line=line)
    inside, rest = raw[1:close], raw[close + 1:]

    count = None
    hash_at = find_unescaped(inside, "#")
    if hash_at >= 0:
        count_raw = inside[hash_at + 1:]
        if not _COUNT_RE.fullmatch(count_raw):
            raise MalformedHeaderError(f"Invalid count {count_raw!r} in header {raw!r}", line=line)
        count = int(count_raw)
        inside = inside[:hash_at]
    if inside == "":
        raise MalformedHeaderError(f"Header has no path: {raw!r}", line=line)

    segments = split_unescaped(inside, ".")
    if "" in segments:
        raise MalformedHeaderError(f"Empty path segment in header {raw!r}", line=line)
    path = tuple(
        ELEMENT if seg == ELEMENT_TOKEN else parse_name(seg, line) for seg in segments
    )

    if rest == "":
        if count is None:
            raise MalformedHeaderError(
                f"Object header needs a field list: {raw!r}", line=line, path=path_text(path)
            )
        return Header(path, RegionKind.LIST, count=count)

    if not (rest.startswith("(") and rest.endswith(")") and not is_escaped(rest, len(rest) - 1)):
        raise MalformedHeaderError(
            f"Malformed field list {rest!r}", line=line, path=path_text(path)
        )
    body = rest[1:-1]
    fields = () if body == "" else tuple(_parse_field(tok, line) for tok in split_unescaped(body, ","))

    names = [f.name for f in fields]
    if len(set(names)) != len(names):
        raise MalformedHeaderError(
            f"Duplicate field names in {raw!r}", line=line, path=path_text(path)
        )

    kind = RegionKind.ARRAY if count is not None else RegionKind.OBJECT
    return Header(path, kind, fields, count)
