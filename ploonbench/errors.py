"""Error taxonomy for the PLOON codec.

All codec errors derive from ``PloonError``, itself a ``ValueError``, so
callers that only care about "bad input" can catch the standard exception.

    PloonError
        PloonEncodeError
            HeterogeneousRegionError   -- array region fields disagree in shape
            UnsupportedValueError      -- not a JSON value (NaN, tuple, int key, ...)
        PloonDecodeError
            MalformedHeaderError       -- header line does not parse, or sits at the wrong depth
            MalformedRowError          -- row line does not parse, or index out of sequence
            OrphanRowError             -- row depth has no active header
            FieldCountMismatchError    -- row value count != header leaf-field count
            CountMismatchError         -- region row count != declared count
            MissingRegionError         -- a nested field's region never appears
            EscapeSequenceError        -- malformed backslash escape

Decode errors carry the 1-based record number in ``line`` and the region
path (when one is known) in ``path``; both are folded into the message.
"""

from __future__ import annotations


class PloonError(ValueError):
    """Base class for every error raised by the PLOON codec."""


class PloonEncodeError(PloonError):
    """A value cannot be encoded."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        if path:
            message = f"{message} (at {path})"
        super().__init__(message)


class HeterogeneousRegionError(PloonEncodeError):
    """An array of objects has inconsistent field shapes across elements."""


class UnsupportedValueError(PloonEncodeError):
    """The value is outside the JSON value domain."""


class PloonDecodeError(PloonError):
    """A document cannot be decoded."""

    def __init__(self, message: str, line: int | None = None, path: str | None = None):
        self.line = line
        self.path = path
        where = []
        if line is not None:
            where.append(f"record {line}")
        if path:
            where.append(f"region {path}")
        if where:
            message = f"{message} ({', '.join(where)})"
        super().__init__(message)


class MalformedHeaderError(PloonDecodeError):
    pass


class MalformedRowError(PloonDecodeError):
    pass


class OrphanRowError(PloonDecodeError):
    pass


class FieldCountMismatchError(PloonDecodeError):
    pass


class CountMismatchError(PloonDecodeError):
    pass


class MissingRegionError(PloonDecodeError):
    pass


class EscapeSequenceError(PloonDecodeError):
    pass
