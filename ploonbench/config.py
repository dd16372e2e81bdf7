"""Benchmark run configuration.

A ``BenchmarkConfig`` is a plain frozen value. Nothing reads it implicitly;
callers build one (or take the defaults) and pass it where needed. The
format registry for a run comes from ``config.build_registry()``.

API keys and endpoints belong to the HTTP harness, not to this object.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ploonbench.encoder import DEFAULT_ROOT_NAME
from ploonbench.formats import FormatRegistry, build_registry, default_formatters

logger = logging.getLogger(__name__)

DATASETS = (
    "support-tickets",
    "products",
    "usage-metrics",
    "sales-deals",
    "error-logs",
)

FORMATS = ("json", "yaml", "csv", "xml", "toon", "ploon", "ploon-minified")

EVALUATION_MODELS = (
    "openai/gpt-5",
    "anthropic/claude-sonnet-4.5",
    "google/gemini-2.5-flash",
    "x-ai/grok-4-fast",
)


@dataclass(frozen=True)
class BenchmarkConfig:
    """Settings for one benchmark run.

    Args:
        record_count: Records generated per dataset.
        question_count: Questions generated per dataset.
        datasets: Dataset names to benchmark.
        formats: Format names to benchmark, in report order.
        evaluation_models: Model IDs under evaluation.
        judge_model: Model ID used as the answer judge.
        concurrency: Parallel requests.
        rpm_limit: Requests per minute.
        seed: Seed for reproducible data generation.
        ploon_root_name: Path segment of the PLOON root region.
    """

    record_count: int = 100
    question_count: int = 100
    datasets: tuple[str, ...] = DATASETS
    formats: tuple[str, ...] = FORMATS
    evaluation_models: tuple[str, ...] = EVALUATION_MODELS
    judge_model: str = "openai/gpt-4o-mini"
    concurrency: int = 5
    rpm_limit: int = 100
    seed: int = 12345
    ploon_root_name: str = DEFAULT_ROOT_NAME

    def build_registry(self) -> FormatRegistry:
        """Format registry holding exactly the configured formats."""
        return build_registry(self.formats, root_name=self.ploon_root_name)


def validate_config(config: BenchmarkConfig) -> list[str]:
    """Validate a run configuration.

    Returns a list of error messages. Empty list = valid.
    """
    errors = []
    if not config.evaluation_models:
        errors.append("At least one evaluation model must be configured")
    if config.record_count <= 0 or config.question_count <= 0:
        errors.append("Record count and question count must be positive")
    if config.concurrency <= 0:
        errors.append(f"concurrency must be positive, got {config.concurrency}")
    if config.rpm_limit <= 0:
        errors.append(f"rpm_limit must be positive, got {config.rpm_limit}")
    if not config.formats:
        errors.append("At least one format must be configured")

    known = {fmt.name for fmt in default_formatters()}
    for name in config.formats:
        if name not in known:
            errors.append(f"Unknown format {name!r}")
    if len(set(config.formats)) != len(config.formats):
        errors.append("Duplicate format names")
    if not config.ploon_root_name:
        errors.append("ploon_root_name must be non-empty")

    for message in errors:
        logger.warning("Invalid config: %s", message)
    return errors
