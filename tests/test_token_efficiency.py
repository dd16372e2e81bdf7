"""Tests for the token efficiency profiler."""
import logging

import pytest

from ploonbench.formats import build_registry
from ploonbench.token_efficiency import TokenEfficiencyProfiler, _default_tokenize


class TestDefaultTokenizer:
    """Letters, digits and punctuation split apart; whitespace dropped."""

    def test_row(self):
        assert _default_tokenize("1:1|P001|Shirt") == ["1", ":", "1", "|", "P", "001", "|", "Shirt"]

    def test_number(self):
        assert _default_tokenize("x=3.14") == ["x", "=", "3", ".", "14"]

    def test_whitespace(self):
        assert _default_tokenize("hello  world\n") == ["hello", "world"]

    def test_empty(self):
        assert _default_tokenize("") == []


class TestMeasure:
    """Per-text measurements."""

    def test_count_tokens_custom_tokenizer(self):
        profiler = TokenEfficiencyProfiler(build_registry(), tokenize=str.split)
        assert profiler.count_tokens("a b  c") == 3
        assert profiler.count_tokens("") == 0

    def test_fragmentation_rate(self):
        profiler = TokenEfficiencyProfiler(build_registry())
        assert profiler.fragmentation_rate("a|b") == pytest.approx(1.0)
        assert profiler.fragmentation_rate("") == 0.0

    def test_measure(self):
        stats = TokenEfficiencyProfiler(build_registry()).measure("ab cd")
        assert stats == {"tokens": 2, "chars": 5, "fragmentation_rate": pytest.approx(0.4)}


class TestProfile:
    """One dataset across formats."""

    def test_ploon_cheaper_than_json(self, product_catalog):
        report = TokenEfficiencyProfiler(build_registry()).profile(product_catalog)
        formats = report["formats"]
        assert formats["json"]["savings"] == 0.0
        assert formats["ploon"]["tokens"] < formats["json"]["tokens"]
        assert formats["ploon"]["savings"] > 0
        assert report["ranking"][0] != "json"
        assert set(report["ranking"]) == set(formats)

    def test_ranking_sorted_by_tokens(self, product_catalog):
        report = TokenEfficiencyProfiler(build_registry()).profile(product_catalog)
        tokens = [report["formats"][n]["tokens"] for n in report["ranking"]]
        assert tokens == sorted(tokens)

    def test_restricted_formats(self, product_catalog):
        report = TokenEfficiencyProfiler(build_registry()).profile(product_catalog, ["json", "ploon"])
        assert set(report["formats"]) == {"json", "ploon"}

    def test_skip_errors(self):
        profiler = TokenEfficiencyProfiler(build_registry())
        report = profiler.profile([{"a": 1}, {"a": "x"}], ["json", "ploon"], skip_errors=True)
        assert set(report["formats"]) == {"json"}
        assert "ploon" in report["errors"]
        assert report["ranking"] == ["json"]

    def test_missing_baseline(self, product_catalog, caplog):
        profiler = TokenEfficiencyProfiler(build_registry())
        with caplog.at_level(logging.WARNING, logger="ploonbench.token_efficiency"):
            report = profiler.profile(product_catalog, ["ploon"])
        assert report["formats"]["ploon"]["savings"] is None
        assert "Baseline format json" in caplog.text

    def test_custom_baseline(self, product_catalog):
        profiler = TokenEfficiencyProfiler(build_registry(), baseline="ploon")
        report = profiler.profile(product_catalog, ["json", "ploon"])
        assert report["baseline"] == "ploon"
        assert report["formats"]["ploon"]["savings"] == 0.0
        assert report["formats"]["json"]["savings"] < 0


class TestProfileDatasets:
    """Aggregation across datasets."""

    def test_summary(self, all_datasets):
        profiler = TokenEfficiencyProfiler(build_registry())
        result = profiler.profile_datasets(all_datasets, ["json", "ploon"])
        assert set(result["datasets"]) == set(all_datasets)
        summary = result["summary"]
        assert summary["json"]["mean_savings"] == 0.0
        assert summary["ploon"]["mean_savings"] > 0
        assert summary["json"]["wins"] + summary["ploon"]["wins"] == len(all_datasets)
        assert summary["ploon"]["total_tokens"] == sum(
            p["formats"]["ploon"]["tokens"] for p in result["datasets"].values()
        )
