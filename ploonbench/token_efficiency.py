"""Token efficiency profiler: how many tokens each format spends on the same data.

Accuracy alone does not decide between formats; the prompt budget does
too. For one dataset the profiler serializes the data in every registered
format, tokenizes each output, and reports:

    - **tokens** and **chars** per format.
    - **fragmentation rate**: tokens per character. Punctuation-heavy
      formats (JSON, XML) fragment more than positional ones.
    - **savings vs baseline**: ``1 - tokens / baseline_tokens``. With the
      default JSON baseline, 0.4 means the format uses 40% fewer tokens.
    - **ranking**: formats ordered from fewest to most tokens.

Across several datasets ``profile_datasets`` adds the mean savings per
format and a win count (datasets on which a format was the most compact).

**Plugin-based tokenizer architecture**: the profiler accepts any callback
``(str) -> list``. Real model tokenizers plug straight in::

    import tiktoken
    enc = tiktoken.get_encoding("o200k_base")
    profiler = TokenEfficiencyProfiler(registry, tokenize=enc.encode)

Without one, ``_default_tokenize`` gives a tokenizer-agnostic baseline:
word runs, digit runs, and every punctuation character as its own token.
It undercounts real BPE tokenizers on numbers but preserves the ordering
between formats, which is what the comparison needs.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Iterable

import numpy as np

from ploonbench.formats import FormatRegistry

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"[^\W\d_]+|\d+|_+|[^\w\s]")


def _default_tokenize(text: str) -> list[str]:
    """Default fallback tokenizer: letters, digits and punctuation split apart.

    Whitespace separates tokens and is dropped. Within a chunk, runs of
    letters and runs of digits become single tokens; every punctuation
    character is its own token.

    Examples:
        "x=3.14"          -> ["x", "=", "3", ".", "14"]
        "1:1|P001|Shirt"  -> ["1", ":", "1", "|", "P", "001", "|", "Shirt"]
        "hello world"     -> ["hello", "world"]

    Args:
        text: Input string to tokenize.

    Returns:
        List of token strings.
    """
    return _TOKEN_RE.findall(text)


class TokenEfficiencyProfiler:
    """Compares token cost of the same data across formats.

    Args:
        registry: FormatRegistry providing the formats to compare.
        tokenize: Callable ``(str) -> list``. If None, falls back to
            ``_default_tokenize``.
        baseline: Format used as the savings reference. Must be in the
            registry when savings are requested.

    Example:
        profiler = TokenEfficiencyProfiler(build_registry())
        report = profiler.profile(dataset)
        print(report["ranking"][0], report["formats"]["ploon"]["savings"])
    """

    def __init__(
        self,
        registry: FormatRegistry,
        tokenize: Callable[[str], list] | None = None,
        baseline: str = "json",
    ):
        self.registry = registry
        self._tokenize = tokenize if tokenize is not None else _default_tokenize
        self.baseline = baseline

    def count_tokens(self, text: str) -> int:
        if not text:
            return 0
        return len(self._tokenize(text))

    def fragmentation_rate(self, text: str) -> float:
        """Tokens per character; 0.0 for empty text."""
        if not text:
            return 0.0
        return self.count_tokens(text) / len(text)

    def measure(self, text: str) -> dict:
        tokens = self.count_tokens(text)
        return {
            "tokens": tokens,
            "chars": len(text),
            "fragmentation_rate": tokens / len(text) if text else 0.0,
        }

    def profile(
        self,
        data,
        formats: Iterable[str] | None = None,
        skip_errors: bool = False,
    ) -> dict:
        """Token profile of one dataset across formats.

        Args:
            data: JSON-like dataset.
            formats: Formats to include (default: every registered format).
            skip_errors: Leave formats that fail to serialize out of the
                profile and list them under "errors" instead of raising.

        Returns:
            Dict with:
                "baseline": str,
                "formats": {name: {"tokens", "chars", "fragmentation_rate", "savings"}},
                "ranking": [format names, fewest tokens first],
                "errors": {name: message},
        """
        names = list(formats) if formats is not None else self.registry.names
        rendered = self.registry.format_all(data, names, skip_errors=skip_errors)

        per_format = {name: self.measure(text) for name, text in rendered["outputs"].items()}

        baseline_tokens = per_format.get(self.baseline, {}).get("tokens")
        if baseline_tokens is None:
            logger.warning("Baseline format %s not profiled; savings left as None", self.baseline)
        for stats in per_format.values():
            if baseline_tokens:
                stats["savings"] = 1.0 - stats["tokens"] / baseline_tokens
            elif baseline_tokens == 0:
                stats["savings"] = 0.0
            else:
                stats["savings"] = None

        ranking = sorted(per_format, key=lambda n: (per_format[n]["tokens"], names.index(n)))
        return {
            "baseline": self.baseline,
            "formats": per_format,
            "ranking": ranking,
            "errors": rendered["errors"],
        }

    def profile_datasets(
        self,
        datasets: dict,
        formats: Iterable[str] | None = None,
        skip_errors: bool = False,
    ) -> dict:
        """Profile several datasets and aggregate per format.

        Args:
            datasets: Mapping of dataset name to JSON-like data.

        Returns:
            Dict with:
                "datasets": {dataset: profile() result},
                "summary": {format: {"total_tokens", "mean_savings", "wins"}},
        """
        names = list(formats) if formats is not None else self.registry.names
        profiles = {
            ds: self.profile(data, names, skip_errors=skip_errors)
            for ds, data in datasets.items()
        }

        summary = {}
        for name in names:
            tokens = np.array(
                [p["formats"][name]["tokens"] for p in profiles.values() if name in p["formats"]],
                dtype=float,
            )
            savings = np.array(
                [
                    p["formats"][name]["savings"]
                    for p in profiles.values()
                    if name in p["formats"] and p["formats"][name]["savings"] is not None
                ],
                dtype=float,
            )
            wins = sum(1 for p in profiles.values() if p["ranking"] and p["ranking"][0] == name)
            summary[name] = {
                "total_tokens": int(tokens.sum()) if tokens.size else 0,
                "mean_savings": float(np.mean(savings)) if savings.size else None,
                "wins": wins,
            }

        return {"datasets": profiles, "summary": summary}
