"""PLOON codec and serialization-format benchmark toolkit.

PLOON (Path-Level Object Oriented Notation) is a compact, pipe-delimited
text encoding of JSON-like trees. Each array of objects and each nested
object becomes a region: one header naming the region's path and its
fields, then one row per element carrying only values, in field order.
Keys are written once per region instead of once per record, which is
where the token savings over JSON come from.

Around the codec sits the tooling for comparing formats as LLM input:
an explicit format registry, the extraction prompt builder, a token
efficiency profiler, and result summaries.

Modules:
    tree             -- JSON-like value model and shape classification
    errors           -- Encode/decode exception hierarchy
    escaping         -- Escape table, scalar rendering and parsing
    header           -- Region headers: derivation, rendering, parsing
    encoder          -- Value -> PLOON text (standard and minified)
    decoder          -- PLOON text -> value, with structural validation
    base             -- Formatter protocol and wrapper
    formats          -- json/yaml/csv/xml/toon/ploon formatters and FormatRegistry
    prompts          -- Extraction prompt builder with per-format explanations
    token_efficiency -- Token cost of the same data across formats
    results          -- Evaluation result records and per-format summaries
    config           -- Benchmark run configuration
"""

from ploonbench.errors import (
    PloonError,
    PloonEncodeError,
    PloonDecodeError,
    HeterogeneousRegionError,
    UnsupportedValueError,
    MalformedHeaderError,
    MalformedRowError,
    OrphanRowError,
    FieldCountMismatchError,
    CountMismatchError,
    MissingRegionError,
    EscapeSequenceError,
)
from ploonbench.tree import Shape, classify
from ploonbench.header import Header, Field, Role, RegionKind, build_header, parse_header, render_header
from ploonbench.encoder import PloonEncoder, encode, FORMAT_GUIDE
from ploonbench.decoder import PloonDecoder, decode
from ploonbench.base import Formatter, FormatterWrapper
from ploonbench.formats import FormatRegistry, build_registry, default_formatters
from ploonbench.prompts import PromptBuilder, judge_verdict, fallback_match
from ploonbench.token_efficiency import TokenEfficiencyProfiler
from ploonbench.results import (
    EvaluationResult,
    validate_results,
    summarize_by_format,
    compare_formats,
    NumpyEncoder,
)
from ploonbench.config import BenchmarkConfig, validate_config

__version__ = "0.1.0"

__all__ = [
    "PloonError",
    "PloonEncodeError",
    "PloonDecodeError",
    "HeterogeneousRegionError",
    "UnsupportedValueError",
    "MalformedHeaderError",
    "MalformedRowError",
    "OrphanRowError",
    "FieldCountMismatchError",
    "CountMismatchError",
    "MissingRegionError",
    "EscapeSequenceError",
    "Shape",
    "classify",
    "Header",
    "Field",
    "Role",
    "RegionKind",
    "build_header",
    "parse_header",
    "render_header",
    "PloonEncoder",
    "encode",
    "FORMAT_GUIDE",
    "PloonDecoder",
    "decode",
    "Formatter",
    "FormatterWrapper",
    "FormatRegistry",
    "build_registry",
    "default_formatters",
    "PromptBuilder",
    "judge_verdict",
    "fallback_match",
    "TokenEfficiencyProfiler",
    "EvaluationResult",
    "validate_results",
    "summarize_by_format",
    "compare_formats",
    "NumpyEncoder",
    "BenchmarkConfig",
    "validate_config",
]
