"""Literal rendering and escaping for PLOON values and header names.

A PLOON document is line oriented and pipe delimited, so a handful of
characters are structural and must never appear raw inside a value:

    |        field delimiter in data rows
    [ ]      header brackets, inline array brackets
    \\        escape character
    newline  record separator (standard mode)
    ;        record separator (minified mode)
    ,        element separator (inside inline arrays only)

Header names additionally reserve ``( ) { } , . # *`` because they delimit
the field list, path segments, counts and nested-field markers.

Escaping is a backslash followed by the reserved character, plus ``\\n``
and ``\\r`` for line breaks. The full table lives in ``_UNESCAPES``; any
other backslash sequence is an ``EscapeSequenceError``.

Scalar literals:

    None   -> ""  (empty)           in rows
              "null"                inside inline arrays
    True   -> true
    False  -> false
    42     -> 42
    2.5    -> 2.5       (repr, so 15.0 stays a float)
    "abc"  -> abc
    "42"   -> "42"      (quoted: would otherwise read back as a number)
    ""     -> ""        (quoted empty string, distinct from null)

The absent marker ``\\-`` stands for a key missing from one element of an
array region. It is only valid as a whole row value.
"""

from __future__ import annotations

import re
from typing import Any

from ploonbench.errors import EscapeSequenceError, MalformedRowError, UnsupportedValueError
from ploonbench.tree import SCALAR_SHAPES, Shape, classify

ESCAPE = "\\"
ABSENT_MARKER = "\\-"

NUMBER_RE = re.compile(r"-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][+-]?\d+)?")

_KEYWORDS = {"true": True, "false": False, "null": None}

# Characters escaped in every value.
_ALWAYS = {"\\": "\\\\", "|": "\\|", "[": "\\[", "]": "\\]", "\n": "\\n", "\r": "\\r"}

# Extra characters escaped in header names (on top of _ALWAYS).
NAME_RESERVED = "(){},.#*;"

_UNESCAPES = {
    "\\": "\\",
    "|": "|",
    "[": "[",
    "]": "]",
    "(": "(",
    ")": ")",
    "{": "{",
    "}": "}",
    ",": ",",
    ".": ".",
    "#": "#",
    "*": "*",
    ";": ";",
    '"': '"',
    "n": "\n",
    "r": "\r",
}


class _Absent:
    """Sentinel for a key missing from one element of an array region."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = _Absent()


# ----------------------------------------------------------------------
# Low-level escaping
# ----------------------------------------------------------------------

def escape_text(text: str, extra: str = "") -> str:
    """Escape reserved characters in ``text``.

    Args:
        text: Raw string.
        extra: Additional characters to backslash-escape (for example
            ``","`` inside inline arrays, ``";"`` in minified documents).
    """
    out = []
    for ch in text:
        if ch in _ALWAYS:
            out.append(_ALWAYS[ch])
        elif ch in extra:
            out.append(ESCAPE + ch)
        else:
            out.append(ch)
    return "".join(out)


def unescape(raw: str, line: int | None = None) -> str:
    """Resolve backslash escapes in ``raw``.

    Raises:
        EscapeSequenceError: on an unknown escape or a dangling backslash.
    """
    if ESCAPE not in raw:
        return raw
    out = []
    i = 0
    n = len(raw)
    while i < n:
        ch = raw[i]
        if ch != ESCAPE:
            out.append(ch)
            i += 1
            continue
        if i + 1 >= n:
            raise EscapeSequenceError(f"Dangling backslash at end of {raw!r}", line=line)
        nxt = raw[i + 1]
        if nxt not in _UNESCAPES:
            raise EscapeSequenceError(
                f"Unknown escape sequence '\\{nxt}' in {raw!r}", line=line
            )
        out.append(_UNESCAPES[nxt])
        i += 2
    return "".join(out)


def is_escaped(raw: str, index: int) -> bool:
    """True if the character at ``index`` is preceded by an odd run of backslashes."""
    run = 0
    i = index - 1
    while i >= 0 and raw[i] == ESCAPE:
        run += 1
        i -= 1
    return run % 2 == 1


def find_unescaped(raw: str, char: str, start: int = 0) -> int:
    """Index of the first unescaped ``char`` at or after ``start``, or -1."""
    i = start
    n = len(raw)
    while i < n:
        ch = raw[i]
        if ch == ESCAPE:
            i += 2
            continue
        if ch == char:
            return i
        i += 1
    return -1


def split_unescaped(raw: str, sep: str) -> list[str]:
    """Split ``raw`` on every unescaped ``sep``. Escapes are left in place."""
    parts = []
    current = []
    i = 0
    n = len(raw)
    while i < n:
        ch = raw[i]
        if ch == ESCAPE and i + 1 < n:
            current.append(raw[i:i + 2])
            i += 2
            continue
        if ch == sep:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1
    parts.append("".join(current))
    return parts


# ----------------------------------------------------------------------
# Values
# ----------------------------------------------------------------------

def _render_string(text: str, extra: str) -> str:
    if text == "" or text in _KEYWORDS or NUMBER_RE.fullmatch(text):
        return '"' + escape_text(text, extra) + '"'
    rendered = escape_text(text, extra)
    if rendered.startswith('"'):
        rendered = ESCAPE + rendered
    return rendered


def render_scalar(value: Any, in_array: bool = False, minify: bool = False) -> str:
    """Render one scalar as its canonical literal."""
    extra = ("," if in_array else "") + (";" if minify else "")
    shape = classify(value)
    if shape is Shape.NULL:
        return "null" if in_array else ""
    if shape is Shape.BOOLEAN:
        return "true" if value else "false"
    if shape is Shape.NUMBER:
        if isinstance(value, float):
            return repr(float(value))
        return str(int(value))
    if shape is Shape.STRING:
        return _render_string(value, extra)
    raise UnsupportedValueError(f"Expected a scalar, got {shape.value}")


def render_inline(values: list, minify: bool = False) -> str:
    """Render an array of scalars (possibly nested) as ``[a,b,[c,d]]``."""
    parts = []
    for item in values:
        if isinstance(item, list):
            parts.append(render_inline(item, minify=minify))
        else:
            parts.append(render_scalar(item, in_array=True, minify=minify))
    return "[" + ",".join(parts) + "]"


def render_value(value: Any, minify: bool = False) -> str:
    """Render a leaf value (scalar or inline array) for a data row."""
    shape = classify(value)
    if shape in SCALAR_SHAPES:
        return render_scalar(value, minify=minify)
    if shape is Shape.ARRAY_OF_SCALARS:
        return render_inline(value, minify=minify)
    raise UnsupportedValueError(f"A {shape.value} value cannot be rendered inline")


def _to_number(raw: str) -> int | float:
    if "." in raw or "e" in raw or "E" in raw:
        return float(raw)
    return int(raw)


def _parse_scalar(raw: str, line: int | None) -> Any:
    if raw == "":
        return None
    if raw in _KEYWORDS:
        return _KEYWORDS[raw]
    if NUMBER_RE.fullmatch(raw):
        return _to_number(raw)
    if len(raw) >= 2 and raw[0] == '"' and raw[-1] == '"' and not is_escaped(raw, len(raw) - 1):
        return unescape(raw[1:-1], line=line)
    return unescape(raw, line=line)


def _parse_inline(raw: str, line: int | None) -> list:
    if len(raw) < 2 or raw[-1] != "]" or is_escaped(raw, len(raw) - 1):
        raise MalformedRowError(f"Unterminated inline array {raw!r}", line=line)
    inner = raw[1:-1]
    if inner == "":
        return []

    items = []
    depth = 0
    start = 0
    i = 0
    n = len(inner)
    while i < n:
        ch = inner[i]
        if ch == ESCAPE:
            i += 2
            continue
        if ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
            if depth < 0:
                raise MalformedRowError(f"Unbalanced brackets in inline array {raw!r}", line=line)
        elif ch == "," and depth == 0:
            items.append(inner[start:i])
            start = i + 1
        i += 1
    if depth != 0:
        raise MalformedRowError(f"Unbalanced brackets in inline array {raw!r}", line=line)
    items.append(inner[start:])

    return [
        _parse_inline(item, line) if item.startswith("[") else _parse_scalar(item, line)
        for item in items
    ]


def parse_value(raw: str, line: int | None = None) -> Any:
    """Parse one raw row value back into a Python value.

    Returns ``ABSENT`` for the absent marker. Inline arrays are recognized
    by an unescaped leading ``[`` (a literal bracket is always escaped).
    """
    if raw == ABSENT_MARKER:
        return ABSENT
    if raw.startswith("["):
        return _parse_inline(raw, line)
    return _parse_scalar(raw, line)


# ----------------------------------------------------------------------
# Header names
# ----------------------------------------------------------------------

def render_name(name: str) -> str:
    """Render a field name or path segment for a header line."""
    if name == "":
        return '""'
    rendered = escape_text(name, NAME_RESERVED)
    if rendered.startswith('"'):
        rendered = ESCAPE + rendered
    return rendered


def parse_name(raw: str, line: int | None = None) -> str:
    if raw == '""':
        return ""
    return unescape(raw, line=line)
