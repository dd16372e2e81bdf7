"""PLOON encoder: JSON-like tree -> pipe-delimited positional text.

PLOON replaces nested delimiters with a depth-and-index address on every
data row. Each object, array of objects, or array of arrays becomes a
*region*: one header line declaring the fields, followed by one row per
element. Rows carry only leaf values, in header order; nested fields are
declared in the header and expanded as child regions.

Example -- the value::

    {"products": [{"id": "P001", "name": "Shirt",
                   "colors": [{"name": "Red",
                               "sizes": [{"size": "M", "stock": 50},
                                         {"size": "L", "stock": 30}]},
                              {"name": "Blue",
                               "sizes": [{"size": "S", "stock": 20}]}]}],
     "specs": {"weight": 2.5, "width": 15.0}}

encodes as::

    [root](products#,specs{})
    1
    [root.products#1](id,name,colors#)
    2:1|P001|Shirt
    [root.products.colors#2](name,sizes#)
    3:1|Red
    [root.products.colors.sizes#2](size,stock)
    4:1|M|50
    4:2|L|30
    3:2|Blue
    [root.products.colors.sizes#1](size,stock)
    4:1|S|20
    [root.specs](weight,width)
    2 |2.5|15.0

Object rows have no index, so their address is the depth and a single
space: the root row above is ``"1 "`` and the specs row ``"2 |2.5|15.0"``.

Region order is part of the protocol: a region's header, then its rows in
index order, with every row immediately followed by the complete child
regions of its nested fields (in header field order) before the next
sibling row. Depth is absolute from the root, which is depth 1.

Minified mode produces the same records joined with ``;`` and drops the
blank index on object rows (``2|2.5|15.0``).

Two properties of the input are not carried through: a root that is a
non-empty array of scalars is rejected with ``UnsupportedValueError``, and
the key order of individual array elements is replaced by header order on
decode (values and key sets are preserved).

The encoder keeps no state between calls; ``PloonEncoder`` only holds its
rendering options, so one instance can be shared across threads.
"""

from __future__ import annotations

import logging

from ploonbench.errors import UnsupportedValueError
from ploonbench.escaping import ABSENT_MARKER, render_value
from ploonbench.header import ELEMENT, Header, RegionKind, build_header, render_header
from ploonbench.tree import SCALAR_SHAPES, Shape, classify

logger = logging.getLogger(__name__)

DEFAULT_ROOT_NAME = "root"

FORMAT_GUIDE = """\
PLOON: pipe-delimited hierarchical data. Field names appear once, in a
header; data rows hold values only, at the same positions as the fields.

Headers:
- [path#N](f1,f2,...)   array of N objects
- [path](f1,f2,...)     single object
- [path#N]              array of N arrays (each element follows as path.*)
- field#                nested array, expanded as its own region below the row
- field{}               nested object, expanded as its own region below the row
- The number of dot-separated path segments is the depth of the region.

Rows:
- depth:index|v1|v2     element of an array (index starts at 1)
- depth |v1|v2          the single row of an object
- Values only for plain fields (not # or {} fields), in header order.
- Empty value = null. "42" in quotes is the text 42, not a number.
- [a,b,c] is a list of values. \\| \\[ \\] \\\\ \\n are escaped characters.

Order: each row is followed directly by the regions of its nested fields,
before the next row at the same depth. To find a parent, look upward for
the nearest row with depth one less.

Constraints:
- The root is an object or an array of objects or arrays. A bare list of
  plain values is not a document on its own; wrap it in an object.
- Keys follow header order, so every element of an array decodes with the
  key order of the header, whatever order its keys had before encoding.
"""


class PloonEncoder:
    """Encodes JSON-like values as PLOON text.

    Args:
        minify: Join records with ``;`` instead of newlines and drop the
            blank index on object rows.
        root_name: Path segment used for the root region.

    Example:
        encoder = PloonEncoder()
        text = encoder.encode([{"id": 1, "tags": ["a", "b"]}])
        # '[root#1](id,tags)\\n1:1|1|[a,b]'
    """

    def __init__(self, minify: bool = False, root_name: str = DEFAULT_ROOT_NAME):
        self.minify = minify
        self.root_name = root_name

    @property
    def record_separator(self) -> str:
        return ";" if self.minify else "\n"

    def encode(self, value) -> str:
        """Encode a root object or array.

        Raises:
            UnsupportedValueError: if the root is a scalar or a non-empty
                array of scalars, or anything in the tree is not JSON.
            HeterogeneousRegionError: if an array of objects disagrees on
                field shapes across its elements.
        """
        shape = classify(value)
        if shape in SCALAR_SHAPES or (shape is Shape.ARRAY_OF_SCALARS and value):
            raise UnsupportedValueError(
                f"Document root must be an object or an array of objects, got {shape.value}"
            )

        records: list[str] = []
        self._emit_region(value, (self.root_name,), records)
        text = self.record_separator.join(records)

        if logger.isEnabledFor(logging.DEBUG):
            regions = sum(1 for r in records if r.startswith("["))
            logger.debug(
                "Encoded %d region(s), %d row(s), %d chars (minify=%s)",
                regions, len(records) - regions, len(text), self.minify,
            )
        return text

    def _row_prefix(self, depth: int, index: int | None) -> str:
        if index is not None:
            return f"{depth}:{index}"
        return str(depth) if self.minify else f"{depth} "

    def _emit_region(self, value, path: tuple, records: list[str]) -> None:
        header = build_header(value, path)
        records.append(render_header(header))

        if header.kind is RegionKind.OBJECT:
            self._emit_record(value, header, None, records)
        elif header.kind is RegionKind.ARRAY:
            for index, element in enumerate(value, start=1):
                self._emit_record(element, header, index, records)
        else:
            for index, element in enumerate(value, start=1):
                records.append(self._row_prefix(header.depth, index))
                self._emit_region(element, path + (ELEMENT,), records)

    def _emit_record(self, record: dict, header: Header, index: int | None, records: list[str]) -> None:
        values = [
            render_value(record[f.name], minify=self.minify) if f.name in record else ABSENT_MARKER
            for f in header.leaf_fields
        ]
        records.append(self._row_prefix(header.depth, index) + "".join("|" + v for v in values))

        for f in header.nested_fields:
            self._emit_region(record[f.name], header.path + (f.name,), records)


def encode(value, minify: bool = False, root_name: str = DEFAULT_ROOT_NAME) -> str:
    """Encode ``value`` as PLOON text. See ``PloonEncoder``."""
    return PloonEncoder(minify=minify, root_name=root_name).encode(value)
