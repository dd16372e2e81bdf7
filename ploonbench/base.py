"""Base types and protocols for ploonbench.

Defines the Formatter protocol that every serialization format in the
benchmark satisfies. The protocol requires:

    name: str
        Registry key, e.g. "json", "ploon-minified".

    extension: str
        File extension used when the harness writes the formatted dataset.

    format(data) -> str
        Serialize a JSON-like value to text.

Formatters may also provide ``parse(text) -> value`` so the harness can
verify that a format round-trips before spending model calls on it.
Formats that are lossy by construction (CSV flattening, XML) do not.
"""

from __future__ import annotations

from typing import Callable, Protocol, runtime_checkable


@runtime_checkable
class Formatter(Protocol):
    """Protocol for any serialization format under benchmark.

    Example:
        class UpperJson:
            name = "json-upper"
            extension = "json"

            def format(self, data) -> str:
                return json.dumps(data).upper()

        assert isinstance(UpperJson(), Formatter)  # True at runtime
    """

    name: str
    extension: str

    def format(self, data) -> str:
        """Serialize ``data`` (a JSON-like value) to text."""
        ...


class FormatterWrapper:
    """Wraps a plain function into a Formatter-compatible object.

    This is the way built-in formats are declared: one function per
    format, plus an optional inverse.

    Example:
        fmt = FormatterWrapper("json", json.dumps, parse=json.loads)
        fmt.format({"a": 1})   # '{"a": 1}'
        fmt.can_parse          # True
    """

    def __init__(
        self,
        name: str,
        format_fn: Callable,
        extension: str | None = None,
        parse: Callable | None = None,
        description: str = "",
    ):
        """Initialize the wrapper.

        Args:
            name: Registry key.
            format_fn: Callable taking a JSON-like value, returning text.
            extension: File extension; defaults to ``name``.
            parse: Optional inverse of ``format_fn``.
            description: One-line human description for reports.
        """
        self.name = name
        self.extension = extension or name
        self.description = description
        self._format = format_fn
        self._parse = parse

    @property
    def can_parse(self) -> bool:
        return self._parse is not None

    def format(self, data) -> str:
        """Serialize ``data`` with the wrapped function."""
        return self._format(data)

    def parse(self, text: str):
        """Invert ``format``. Raises NotImplementedError for lossy formats."""
        if self._parse is None:
            raise NotImplementedError(f"Format {self.name!r} has no parser")
        return self._parse(text)

    def __repr__(self) -> str:
        return f"FormatterWrapper({self.name!r}, extension={self.extension!r})"
