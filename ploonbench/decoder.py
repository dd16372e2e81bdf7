"""PLOON decoder: pipe-delimited positional text -> JSON-like tree.

The decoder replays the encoder's traversal. It reads a header, registers
it as the active header for its depth, then consumes exactly the declared
number of rows; after each row it descends into one child region per
nested field, in header order. Because the region order is fixed by the
protocol, child regions are attached by arrival order and field position,
never by looking up a field name.

Every structural inconsistency is an error, not a guess:

    no header yet / row deeper than any active header  -> OrphanRowError
    row value count != header leaf-field count         -> FieldCountMismatchError
    fewer or more rows than the declared count         -> CountMismatchError
    nested field whose region never shows up           -> MissingRegionError
    header at the wrong depth or of the wrong kind     -> MalformedHeaderError
    bad backslash escape                               -> EscapeSequenceError

Standard (newline separated) and minified (``;`` separated, single line)
documents are both accepted; a single-line document is split on unescaped
semicolons.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from ploonbench.errors import (
    CountMismatchError,
    FieldCountMismatchError,
    MalformedHeaderError,
    MalformedRowError,
    MissingRegionError,
    OrphanRowError,
)
from ploonbench.escaping import ABSENT, parse_value, split_unescaped
from ploonbench.header import Header, RegionKind, Role, parse_header

logger = logging.getLogger(__name__)

_ROW_RE = re.compile(r"([0-9]+)(?::([0-9]+)| ?)")

_KINDS_FOR_ROLE = {
    Role.ARRAY: frozenset({RegionKind.ARRAY, RegionKind.LIST}),
    Role.OBJECT: frozenset({RegionKind.OBJECT}),
}


@dataclass(frozen=True)
class Record:
    """One header or row, with its 1-based position in the document."""

    number: int
    text: str

    @property
    def is_header(self) -> bool:
        return self.text.startswith("[")


@dataclass(frozen=True)
class Row:
    depth: int
    index: int | None
    values: list[str]
    number: int


def split_records(text: str) -> list[Record]:
    """Split a document into non-empty records.

    Multi-line input is split on newlines (a trailing carriage return is
    dropped). Single-line input is split on unescaped semicolons, which
    covers minified documents; a standard document that fits on one line
    never contains an unescaped semicolon.
    """
    if "\n" in text.strip("\r\n"):
        raw = text.split("\n")
    else:
        raw = split_unescaped(text.strip("\r\n"), ";")

    records = []
    for number, item in enumerate(raw, start=1):
        if item.endswith("\r"):
            item = item[:-1]
        if item:
            records.append(Record(number, item))
    return records


def parse_row(record: Record) -> Row:
    """Parse ``depth:index|v1|v2`` or ``depth |v1|v2`` into a ``Row``.

    Values are returned raw (still escaped); ``parse_value`` converts them.
    """
    match = _ROW_RE.match(record.text)
    if match is None:
        raise MalformedRowError(f"Unparsable row {record.text!r}", line=record.number)
    rest = record.text[match.end():]
    if rest == "":
        values = []
    elif rest.startswith("|"):
        values = split_unescaped(rest[1:], "|")
    else:
        raise MalformedRowError(
            f"Expected '|' after the row address in {record.text!r}", line=record.number
        )
    index = int(match.group(2)) if match.group(2) is not None else None
    return Row(int(match.group(1)), index, values, record.number)


class _Cursor:
    """Read position plus the stack of active headers for one decode call."""

    def __init__(self, records: list[Record]):
        self.records = records
        self.pos = 0
        self.active: list[Header] = []

    def peek(self) -> Record | None:
        if self.pos < len(self.records):
            return self.records[self.pos]
        return None

    def advance(self) -> None:
        self.pos += 1

    def is_active_depth(self, depth: int) -> bool:
        return any(h.depth == depth for h in self.active)


class PloonDecoder:
    """Decodes PLOON text back into the original JSON-like value.

    The decoder holds no state between calls; every ``decode`` works on a
    fresh cursor, so one instance can be shared across threads.

    Example:
        value = PloonDecoder().decode("[root#1](id,tags)\\n1:1|1|[a,b]")
        # [{"id": 1, "tags": ["a", "b"]}]
    """

    def decode(self, text: str):
        """Decode a whole document.

        Raises:
            PloonDecodeError: one of its subclasses, describing the first
                structural problem found.
        """
        cursor = _Cursor(split_records(text))
        first = cursor.peek()
        if first is None:
            raise MalformedHeaderError("Empty document")

        value = self._decode_region(cursor, 1, None, "the root region")

        leftover = cursor.peek()
        if leftover is not None:
            if leftover.is_header:
                raise MalformedHeaderError(
                    f"Unexpected region after the root region: {leftover.text!r}",
                    line=leftover.number,
                )
            row = parse_row(leftover)
            raise OrphanRowError(
                f"Row at depth {row.depth} after the root region has no active header",
                line=leftover.number,
            )

        if logger.isEnabledFor(logging.DEBUG):
            regions = sum(1 for r in cursor.records if r.is_header)
            logger.debug(
                "Decoded %d region(s), %d row(s), %d chars",
                regions, len(cursor.records) - regions, len(text),
            )
        return value

    # ------------------------------------------------------------------
    # Regions
    # ------------------------------------------------------------------

    def _decode_region(self, cursor: _Cursor, depth: int, kinds: frozenset | None, what: str):
        record = cursor.peek()
        if record is None:
            raise MissingRegionError(f"Input ends before {what}")
        if not record.is_header:
            row = parse_row(record)
            if cursor.is_active_depth(row.depth):
                raise MissingRegionError(
                    f"Expected the header of {what}, found a depth {row.depth} row",
                    line=record.number,
                )
            raise OrphanRowError(
                f"Row at depth {row.depth} has no active header", line=record.number
            )

        header = parse_header(record.text, record.number)
        if header.depth != depth:
            raise MalformedHeaderError(
                f"Header depth {header.depth} does not match expected depth {depth} for {what}",
                line=record.number,
                path=header.path_text,
            )
        if kinds is not None and header.kind not in kinds:
            raise MalformedHeaderError(
                f"{what} must be {' or '.join(sorted(k.value for k in kinds))}, "
                f"header declares {header.kind.value}",
                line=record.number,
                path=header.path_text,
            )
        cursor.advance()

        cursor.active.append(header)
        if header.kind is RegionKind.OBJECT:
            value = self._decode_record(cursor, header, None)
        elif header.kind is RegionKind.ARRAY:
            # Grown row by row; a corrupt count runs out of input instead of memory.
            value = []
            for i in range(header.count):
                value.append(self._decode_record(cursor, header, i + 1))
        else:
            value = []
            for i in range(header.count):
                row = self._expect_row(cursor, header, i + 1)
                if row.values:
                    raise FieldCountMismatchError(
                        f"List row carries {len(row.values)} value(s), expected none",
                        line=row.number,
                        path=header.path_text,
                    )
                value.append(self._decode_region(
                    cursor, depth + 1, _KINDS_FOR_ROLE[Role.ARRAY], f"element {i + 1} of {header.path_text}"
                ))
        cursor.active.pop()

        following = cursor.peek()
        if following is not None and not following.is_header:
            if parse_row(following).depth == depth:
                raise CountMismatchError(
                    f"Region declares {header.expected_rows} row(s) but has more",
                    line=following.number,
                    path=header.path_text,
                )
        return value

    # ------------------------------------------------------------------
    # Rows
    # ------------------------------------------------------------------

    def _expect_row(self, cursor: _Cursor, header: Header, index: int) -> Row:
        declared = header.expected_rows
        record = cursor.peek()
        if record is None:
            raise CountMismatchError(
                f"Input ends after {index - 1} of {declared} declared row(s)",
                path=header.path_text,
            )
        if record.is_header:
            raise CountMismatchError(
                f"Region has {index - 1} of {declared} declared row(s) before the next header",
                line=record.number,
                path=header.path_text,
            )

        row = parse_row(record)
        if row.depth != header.depth:
            if cursor.is_active_depth(row.depth):
                raise CountMismatchError(
                    f"Region has {index - 1} of {declared} declared row(s) "
                    f"before a depth {row.depth} row",
                    line=record.number,
                    path=header.path_text,
                )
            raise OrphanRowError(
                f"Row at depth {row.depth} has no active header", line=record.number
            )

        if header.kind is RegionKind.OBJECT:
            if row.index is not None:
                raise MalformedRowError(
                    "Object row must not carry an index", line=record.number, path=header.path_text
                )
        elif row.index is None:
            raise MalformedRowError(
                "Array row is missing its index", line=record.number, path=header.path_text
            )
        elif row.index != index:
            raise MalformedRowError(
                f"Row index {row.index} out of sequence, expected {index}",
                line=record.number,
                path=header.path_text,
            )

        cursor.advance()
        return row

    def _decode_record(self, cursor: _Cursor, header: Header, index: int | None) -> dict:
        row = self._expect_row(cursor, header, index or 1)
        leaves = header.leaf_fields
        if len(row.values) != len(leaves):
            raise FieldCountMismatchError(
                f"Row has {len(row.values)} value(s), header declares {len(leaves)} leaf field(s)",
                line=row.number,
                path=header.path_text,
            )

        parsed = iter([parse_value(raw, row.number) for raw in row.values])
        record = {}
        for f in header.fields:
            if f.nested:
                # Placeholder keeps the key in header order.
                record[f.name] = None
                continue
            value = next(parsed)
            if value is not ABSENT:
                record[f.name] = value

        for f in header.nested_fields:
            record[f.name] = self._decode_region(
                cursor,
                header.depth + 1,
                _KINDS_FOR_ROLE[f.role],
                f"nested field {f.name!r} of {header.path_text}",
            )
        return record


def decode(text: str):
    """Decode PLOON text into a JSON-like value. See ``PloonDecoder``."""
    return PloonDecoder().decode(text)
