"""Serialization formats under benchmark and the explicit format registry.

Each format turns the same JSON-like dataset into the text a model sees:

    json            -- 2-space indented JSON (the baseline)
    yaml            -- block-style YAML, key order kept
    csv             -- flattened: dot-notation columns, arrays of objects
                       denormalized into one row per deepest record with
                       the parent columns repeated, primitive arrays joined
                       with commas
    xml             -- <data> root, lists as repeated elements
    toon            -- TOON, via the toon_format package
    ploon           -- pipe-delimited positional encoding
    ploon-minified  -- same protocol on a single line

There is no module-level mutable table. ``FormatRegistry`` is built
explicitly (``build_registry()`` or ``BenchmarkConfig.build_registry()``)
and handed to whatever needs it -- token profiling, prompt building, the
excluded HTTP harness.
"""

from __future__ import annotations

import csv
import io
import json
import logging
import re
import xml.etree.ElementTree as ET
from functools import partial
from typing import Iterable

import yaml
from toon_format import encode as toon_encode

from ploonbench.base import Formatter, FormatterWrapper
from ploonbench.decoder import decode
from ploonbench.encoder import DEFAULT_ROOT_NAME, encode

logger = logging.getLogger(__name__)


# ----------------------------------------------------------------------
# JSON / YAML
# ----------------------------------------------------------------------

def to_json(data) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def to_yaml(data) -> str:
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False)


# ----------------------------------------------------------------------
# CSV
# ----------------------------------------------------------------------

def _is_object_array(value) -> bool:
    return isinstance(value, list) and bool(value) and all(isinstance(v, dict) for v in value)


def _csv_cell(value):
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def flatten_record(record: dict, exclude: Iterable[str] = (), prefix: str = "") -> dict:
    """Flatten nested objects into dot-notation keys.

    Primitive arrays are joined with commas; objects inside arrays are
    JSON-encoded in place.
    """
    flat = {}
    excluded = set(exclude)
    for key, value in record.items():
        if key in excluded:
            continue
        full_key = prefix + key
        if isinstance(value, dict):
            flat.update(flatten_record(value, prefix=full_key + "."))
        elif isinstance(value, list):
            flat[full_key] = ",".join(
                json.dumps(v, ensure_ascii=False) if isinstance(v, (dict, list)) else str(_csv_cell(v))
                for v in value
            )
        else:
            flat[full_key] = _csv_cell(value)
    return flat


def denormalize_record(record: dict, prefix: str = "") -> list[dict]:
    """Expand the first array-of-objects field into one row per element.

    Recurses into each element, so products -> colors -> sizes yields one
    row per size, each carrying its color and product columns.
    """
    array_key = next((k for k, v in record.items() if _is_object_array(v)), None)
    base = flatten_record(record, exclude=[array_key] if array_key else [], prefix=prefix)
    if array_key is None:
        return [base]

    rows = []
    for item in record[array_key]:
        for sub in denormalize_record(item, prefix=f"{prefix}{array_key}."):
            rows.append({**base, **sub})
    return rows


def to_csv(data) -> str:
    """Flatten a list of records to CSV. Non-list or empty input gives ""."""
    if not isinstance(data, list) or not data:
        return ""

    rows = []
    for record in data:
        if isinstance(record, dict):
            rows.extend(denormalize_record(record))
        else:
            rows.append({"value": _csv_cell(record)})

    columns: dict[str, None] = {}
    for row in rows:
        for key in row:
            columns.setdefault(key, None)

    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=list(columns), lineterminator="\n")
    writer.writeheader()
    writer.writerows(rows)
    return buf.getvalue().rstrip("\n")


# ----------------------------------------------------------------------
# XML
# ----------------------------------------------------------------------

_TAG_INVALID = re.compile(r"[^\w.\-]")


def _xml_tag(name: str) -> str:
    tag = _TAG_INVALID.sub("_", name) or "_"
    if not (tag[0].isalpha() or tag[0] == "_"):
        tag = "_" + tag
    return tag


def _xml_text(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _xml_fill(element: ET.Element, value) -> None:
    if isinstance(value, dict):
        for key, child in value.items():
            _xml_append(element, _xml_tag(key), child)
    elif isinstance(value, list):
        for item in value:
            _xml_append(element, "item", item)
    elif value is not None:
        element.text = _xml_text(value)


def _xml_append(parent: ET.Element, tag: str, value) -> None:
    # A list under a key repeats the key's tag once per element.
    if isinstance(value, list) and tag != "item":
        for item in value:
            _xml_fill(ET.SubElement(parent, tag), item)
        return
    _xml_fill(ET.SubElement(parent, tag), value)


def to_xml(data) -> str:
    root = ET.Element("data")
    _xml_fill(root, data)
    ET.indent(root, space="  ")
    return ET.tostring(root, encoding="unicode")


# ----------------------------------------------------------------------
# TOON
# ----------------------------------------------------------------------

def to_toon(data) -> str:
    return toon_encode(data)


# ----------------------------------------------------------------------
# PLOON
# ----------------------------------------------------------------------

def to_ploon(data, root_name: str = DEFAULT_ROOT_NAME) -> str:
    return encode(data, root_name=root_name)


def to_ploon_minified(data, root_name: str = DEFAULT_ROOT_NAME) -> str:
    return encode(data, minify=True, root_name=root_name)


def default_formatters(root_name: str = DEFAULT_ROOT_NAME) -> list[FormatterWrapper]:
    """Fresh instances of every built-in format, in report order."""
    return [
        FormatterWrapper("json", to_json, parse=json.loads,
                         description="Indented JSON"),
        FormatterWrapper("yaml", to_yaml, parse=yaml.safe_load,
                         description="Block-style YAML"),
        FormatterWrapper("csv", to_csv,
                         description="Flattened, denormalized CSV"),
        FormatterWrapper("xml", to_xml,
                         description="Element-per-field XML"),
        FormatterWrapper("toon", to_toon,
                         description="Token-Oriented Object Notation"),
        FormatterWrapper("ploon", partial(to_ploon, root_name=root_name), parse=decode,
                         description="Pipe-delimited positional encoding"),
        FormatterWrapper("ploon-minified", partial(to_ploon_minified, root_name=root_name),
                         extension="min.ploon", parse=decode,
                         description="Single-line PLOON"),
    ]


class FormatRegistry:
    """Explicit, immutable mapping from format name to Formatter.

    Args:
        formatters: Formatter-compatible objects. Names must be unique.

    Example:
        registry = build_registry(["json", "ploon"])
        outputs = registry.format_all(dataset)["outputs"]
        registry.extension("ploon")    # 'ploon'
    """

    def __init__(self, formatters: Iterable[Formatter]):
        self._formatters: dict[str, Formatter] = {}
        for fmt in formatters:
            if not isinstance(fmt, Formatter):
                raise TypeError(f"{fmt!r} does not satisfy the Formatter protocol")
            if fmt.name in self._formatters:
                raise ValueError(f"Duplicate format name {fmt.name!r}")
            self._formatters[fmt.name] = fmt

    def __contains__(self, name: str) -> bool:
        return name in self._formatters

    def __iter__(self):
        return iter(self._formatters)

    def __len__(self) -> int:
        return len(self._formatters)

    @property
    def names(self) -> list[str]:
        return list(self._formatters)

    def get(self, name: str) -> Formatter:
        try:
            return self._formatters[name]
        except KeyError:
            raise KeyError(
                f"Unknown format {name!r}. Available formats: {self.names}"
            ) from None

    def extension(self, name: str) -> str:
        return self.get(name).extension

    def format(self, name: str, data) -> str:
        text = self.get(name).format(data)
        logger.debug("Formatted %s: %d chars", name, len(text))
        return text

    def format_all(self, data, names: Iterable[str] | None = None, skip_errors: bool = False) -> dict:
        """Serialize ``data`` in several formats.

        Args:
            data: JSON-like dataset.
            names: Formats to produce (default: all, in registry order).
            skip_errors: Record a failing format under "errors" instead of
                raising. The failing format gets no output at all.

        Returns:
            {"outputs": {name: text}, "errors": {name: message}}
        """
        outputs = {}
        errors = {}
        for name in names if names is not None else self.names:
            try:
                outputs[name] = self.format(name, data)
            except ValueError as exc:
                if not skip_errors:
                    raise
                logger.warning("Format %s failed: %s", name, exc)
                errors[name] = str(exc)
        return {"outputs": outputs, "errors": errors}

    def verify_roundtrip(self, name: str, data) -> bool:
        """True if ``parse(format(data)) == data`` for a parseable format."""
        fmt = self.get(name)
        if not getattr(fmt, "can_parse", False):
            raise NotImplementedError(f"Format {name!r} cannot be parsed back")
        return fmt.parse(fmt.format(data)) == data


def build_registry(
    names: Iterable[str] | None = None, root_name: str = DEFAULT_ROOT_NAME
) -> FormatRegistry:
    """Registry of built-in formats, optionally restricted to ``names`` (in that order)."""
    available = {fmt.name: fmt for fmt in default_formatters(root_name)}
    if names is None:
        return FormatRegistry(available.values())
    selected = []
    for name in names:
        if name not in available:
            raise KeyError(f"Unknown format {name!r}. Available formats: {list(available)}")
        selected.append(available[name])
    return FormatRegistry(selected)
