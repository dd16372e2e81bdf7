"""Evaluation result records and per-format summaries.

One ``EvaluationResult`` is produced per (question, format, model) call by
the excluded HTTP harness. Results are stored as JSON lists using the
harness's camelCase keys::

    {
        "questionId": "products-q12",
        "format": "ploon",
        "model": "openai/gpt-5",
        "judgeModel": "openai/gpt-4o-mini",
        "expected": "30",
        "actual": "30",
        "isCorrect": true,
        "judgeAnswer": "YES",
        "inputTokens": 1834,
        "outputTokens": 2,
        "responseTimeMs": 812.4,
        "judgeLatencyMs": 301.9
    }

Usage::

    from ploonbench.results import EvaluationResult, summarize_by_format

    results = [EvaluationResult.from_dict(d) for d in json.load(f)]
    errors = validate_results([r.to_dict() for r in results])
    summary = summarize_by_format(results, pricing={"openai/gpt-5": (1.25, 10.0)})
"""
from __future__ import annotations

import json
from dataclasses import dataclass, fields

import numpy as np


class NumpyEncoder(json.JSONEncoder):
    """JSON encoder that handles numpy types."""

    def default(self, obj):
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, (np.integer,)):
            return int(obj)
        if isinstance(obj, (np.floating,)):
            return float(obj)
        if isinstance(obj, (np.bool_,)):
            return bool(obj)
        return super().default(obj)


_CAMEL_KEYS = {
    "question_id": "questionId",
    "format": "format",
    "model": "model",
    "judge_model": "judgeModel",
    "expected": "expected",
    "actual": "actual",
    "is_correct": "isCorrect",
    "judge_answer": "judgeAnswer",
    "input_tokens": "inputTokens",
    "output_tokens": "outputTokens",
    "response_time_ms": "responseTimeMs",
    "judge_latency_ms": "judgeLatencyMs",
}

_REQUIRED_KEYS = ("questionId", "format", "model", "expected", "actual", "isCorrect")


@dataclass
class EvaluationResult:
    """Outcome of asking one question in one format to one model."""

    question_id: str
    format: str
    model: str
    expected: str
    actual: str
    is_correct: bool
    judge_model: str = ""
    judge_answer: str = ""
    input_tokens: int = 0
    output_tokens: int = 0
    response_time_ms: float = 0.0
    judge_latency_ms: float = 0.0

    def to_dict(self) -> dict:
        """Convert to the harness's camelCase JSON record."""
        return {_CAMEL_KEYS[f.name]: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, d: dict) -> "EvaluationResult":
        """Build from a camelCase (or snake_case) record. Unknown keys are ignored."""
        kwargs = {}
        for snake, camel in _CAMEL_KEYS.items():
            if camel in d:
                kwargs[snake] = d[camel]
            elif snake in d:
                kwargs[snake] = d[snake]
        return cls(**kwargs)


def validate_results(records: list[dict]) -> list[str]:
    """Validate raw result records.

    Returns a list of error messages. Empty list = valid.
    """
    errors = []
    for i, record in enumerate(records):
        for key in _REQUIRED_KEYS:
            if key not in record:
                errors.append(f"Record {i}: missing required key {key}")
        if "isCorrect" in record and not isinstance(record["isCorrect"], bool):
            errors.append(f"Record {i}: isCorrect must be a boolean")
        for key in ("inputTokens", "outputTokens", "responseTimeMs", "judgeLatencyMs"):
            value = record.get(key, 0)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                errors.append(f"Record {i}: {key} must be a number")
            elif value < 0:
                errors.append(f"Record {i}: {key} must be non-negative, got {value}")
    return errors


def _ranks(values: dict[str, float], descending: bool = False) -> dict[str, int]:
    """1-based competition ranks; ties share the better rank."""
    ordered = sorted(values.values(), reverse=descending)
    return {name: ordered.index(v) + 1 for name, v in values.items()}


def summarize_by_format(
    results: list[EvaluationResult],
    pricing: dict[str, tuple[float, float]] | None = None,
) -> dict:
    """Aggregate results per format.

    Args:
        results: EvaluationResult records (any mix of models/datasets).
        pricing: Optional {model: (usd_per_1M_input, usd_per_1M_output)}.
            Models without pricing cost 0.

    Returns:
        Dict keyed by format (first-seen order) with:
            "count", "correct", "accuracy",
            "input_tokens", "output_tokens", "mean_input_tokens",
            "mean_response_ms", "accuracy_per_1k_tokens", "cost",
            "accuracy_rank", "token_rank", "speed_rank", "cost_rank".
    """
    by_format: dict[str, list[EvaluationResult]] = {}
    for r in results:
        by_format.setdefault(r.format, []).append(r)

    pricing = pricing or {}
    summary = {}
    for name, group in by_format.items():
        correct = np.array([r.is_correct for r in group], dtype=bool)
        input_tokens = np.array([r.input_tokens for r in group], dtype=float)
        output_tokens = np.array([r.output_tokens for r in group], dtype=float)
        latency = np.array([r.response_time_ms for r in group], dtype=float)

        accuracy = float(correct.mean())
        mean_input = float(input_tokens.mean())
        cost = 0.0
        for r in group:
            price_in, price_out = pricing.get(r.model, (0.0, 0.0))
            cost += r.input_tokens / 1_000_000 * price_in + r.output_tokens / 1_000_000 * price_out

        summary[name] = {
            "count": len(group),
            "correct": int(correct.sum()),
            "accuracy": accuracy,
            "input_tokens": int(input_tokens.sum()),
            "output_tokens": int(output_tokens.sum()),
            "mean_input_tokens": mean_input,
            "mean_response_ms": float(latency.mean()),
            # Accuracy points (0-100) per 1,000 prompt tokens.
            "accuracy_per_1k_tokens": accuracy * 100 / (mean_input / 1000) if mean_input else 0.0,
            "cost": cost,
        }

    if summary:
        accuracy_ranks = _ranks({n: s["accuracy"] for n, s in summary.items()}, descending=True)
        token_ranks = _ranks({n: s["input_tokens"] for n, s in summary.items()})
        speed_ranks = _ranks({n: s["mean_response_ms"] for n, s in summary.items()})
        cost_ranks = _ranks({n: s["cost"] for n, s in summary.items()})
        for name, stats in summary.items():
            stats["accuracy_rank"] = accuracy_ranks[name]
            stats["token_rank"] = token_ranks[name]
            stats["speed_rank"] = speed_ranks[name]
            stats["cost_rank"] = cost_ranks[name]

    return summary


def compare_formats(summary: dict, baseline: str = "json") -> dict:
    """Deltas of every format against a baseline format.

    Args:
        summary: ``summarize_by_format`` output.
        baseline: Reference format name.

    Returns:
        {format: {"accuracy_delta", "token_savings"}}, or {"error": ...}
        when the baseline is missing.
    """
    if baseline not in summary:
        return {"error": f"Baseline format {baseline!r} not in summary"}

    base = summary[baseline]
    comparison = {}
    for name, stats in summary.items():
        base_tokens = base["input_tokens"]
        comparison[name] = {
            "accuracy_delta": stats["accuracy"] - base["accuracy"],
            "token_savings": 1.0 - stats["input_tokens"] / base_tokens if base_tokens else 0.0,
        }
    return comparison


def results_to_json(results: list[EvaluationResult], **kwargs) -> str:
    """Serialize results as the harness's JSON list."""
    return json.dumps([r.to_dict() for r in results], cls=NumpyEncoder, **kwargs)
