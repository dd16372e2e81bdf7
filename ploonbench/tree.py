"""Tree model for JSON-like values.

Every codec in the benchmark works on the same universal interchange type:
plain Python values as produced by ``json.loads``::

    Value = None | bool | int | float | str | list[Value] | dict[str, Value]

There is no wrapper class. Instead, ``classify()`` maps any value onto a
closed set of shapes (``Shape``), and the header builder, encoder and
decoder dispatch on that enum rather than on ad-hoc ``isinstance`` checks
scattered through the code. Adding a new shape means adding an enum member
and handling it at each dispatch site.

Shapes:
    NULL, BOOLEAN, NUMBER, STRING -- scalars
    ARRAY_OF_SCALARS  -- arrays whose elements are scalars or, recursively,
                         arrays of scalars (includes the empty array).
                         Rendered inline as a single leaf value.
    ARRAY_OF_OBJECTS  -- non-empty arrays where every element is an object.
                         The homogeneous case that gets a tabular region.
    ARRAY_OF_ARRAYS   -- non-empty arrays where every element is itself a
                         region array (array of objects, array of arrays,
                         or empty) and at least one is not inline.
    ARRAY_OF_MIXED    -- everything else (objects next to scalars, inline
                         arrays next to object arrays, ...). Not encodable.
    OBJECT            -- plain object with string keys.

Booleans are checked before numbers because ``bool`` is a subclass of
``int`` in Python.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Any, Union

from ploonbench.errors import UnsupportedValueError

Value = Union[None, bool, int, float, str, list, dict]


class Shape(Enum):
    """Closed set of value shapes recognized by the codec."""

    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    ARRAY_OF_SCALARS = "array-of-scalars"
    ARRAY_OF_OBJECTS = "array-of-objects"
    ARRAY_OF_ARRAYS = "array-of-arrays"
    ARRAY_OF_MIXED = "array-of-mixed"
    OBJECT = "object"


SCALAR_SHAPES = frozenset({Shape.NULL, Shape.BOOLEAN, Shape.NUMBER, Shape.STRING})
REGION_ARRAY_SHAPES = frozenset({Shape.ARRAY_OF_OBJECTS, Shape.ARRAY_OF_ARRAYS})


def _scalar_shape(value: Any) -> Shape | None:
    if value is None:
        return Shape.NULL
    if isinstance(value, bool):
        return Shape.BOOLEAN
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            raise UnsupportedValueError(f"Non-finite number {value!r} is not a JSON value")
        return Shape.NUMBER
    if isinstance(value, str):
        return Shape.STRING
    return None


def classify(value: Any) -> Shape:
    """Return the ``Shape`` of a JSON-like value.

    Raises:
        UnsupportedValueError: if the value (or, for arrays, one of its
            elements) is not representable as JSON -- tuples, sets, bytes,
            NaN, objects with non-string keys, arbitrary instances.
    """
    shape = _scalar_shape(value)
    if shape is not None:
        return shape

    if isinstance(value, dict):
        for key in value:
            if not isinstance(key, str):
                raise UnsupportedValueError(
                    f"Object keys must be strings, got {type(key).__name__} key {key!r}"
                )
        return Shape.OBJECT

    if not isinstance(value, list):
        raise UnsupportedValueError(
            f"Unsupported value type {type(value).__name__}: {value!r}"
        )

    if not value:
        return Shape.ARRAY_OF_SCALARS

    element_shapes = [classify(item) for item in value]

    if all(s in SCALAR_SHAPES or s is Shape.ARRAY_OF_SCALARS for s in element_shapes):
        return Shape.ARRAY_OF_SCALARS
    if all(s is Shape.OBJECT for s in element_shapes):
        return Shape.ARRAY_OF_OBJECTS
    if all(
        s in REGION_ARRAY_SHAPES or (s is Shape.ARRAY_OF_SCALARS and not item)
        for s, item in zip(element_shapes, value)
    ):
        return Shape.ARRAY_OF_ARRAYS
    return Shape.ARRAY_OF_MIXED


def is_scalar(value: Any) -> bool:
    """True for null, booleans, numbers and strings."""
    return classify(value) in SCALAR_SHAPES


def is_inline(value: Any) -> bool:
    """True when the value is rendered inline in a data row (scalar or scalar array)."""
    shape = classify(value)
    return shape in SCALAR_SHAPES or shape is Shape.ARRAY_OF_SCALARS


def is_region(value: Any) -> bool:
    """True when the value needs its own header + rows block."""
    return classify(value) in (Shape.OBJECT, Shape.ARRAY_OF_OBJECTS, Shape.ARRAY_OF_ARRAYS)


def depth_of(value: Any) -> int:
    """Structural nesting depth of a value counted in regions.

    Scalars and inline arrays have depth 0; an object or array region has
    depth 1 plus the deepest region nested inside it. For a non-empty
    document this is the depth of its deepest region header.
    """
    shape = classify(value)
    if shape is Shape.OBJECT:
        return 1 + max((depth_of(v) for v in value.values()), default=0)
    if shape is Shape.ARRAY_OF_OBJECTS:
        return 1 + max(
            (depth_of(v) for item in value for v in item.values()), default=0
        )
    if shape is Shape.ARRAY_OF_ARRAYS:
        return 1 + max((depth_of(item) for item in value), default=0)
    return 0
