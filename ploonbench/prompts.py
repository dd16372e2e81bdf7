"""Extraction prompt builder for format-comparison runs.

Generalized from the benchmark's evaluation loop. Every question is asked
once per format, with the same structure:

    system: "You are a data extraction tool..." + a short explanation of
            how to read the format + strict answer rules
    user:   the formatted dataset, the question, then "Answer:"

The explanation is the only thing that differs between formats, so it is
the one knob exposed here. PLOON's explanation is generated from the
codec's own ``FORMAT_GUIDE`` plus a live encoding of a small example, so
the prompt can never drift from what the encoder actually emits.

Answers are scored by an LLM judge: ``build_judge`` produces its prompt,
``judge_verdict`` reads its YES/NO reply, and ``fallback_match`` is the
plain comparison used when the judge call fails. The HTTP client that
sends all of these lives outside this package.
"""

from __future__ import annotations

from ploonbench.encoder import FORMAT_GUIDE, encode

# Small value exercising every PLOON construct: array region, nested array
# regions two levels deep, and a nested object.
EXAMPLE_VALUE = {
    "products": [
        {
            "id": "P001",
            "name": "Shirt",
            "colors": [
                {"name": "Red", "sizes": [{"size": "M", "stock": 50}, {"size": "L", "stock": 30}]},
                {"name": "Blue", "sizes": [{"size": "S", "stock": 20}]},
            ],
            "specs": {"weight": 2.5, "width": 15.0},
        }
    ]
}

EXAMPLE_QA = [
    ("Product P001 name?", "Shirt"),
    ("Product weight?", "2.5"),
    ("Stock of size L in Red?", "30"),
]

_STATIC_EXPLANATIONS = {
    "json": (
        "JSON format: nested objects use curly braces {}, arrays use square brackets []. "
        "Access nested values with dot notation."
    ),
    "yaml": (
        "YAML format: indentation-based structure with key: value pairs. Nested objects "
        "shown by increased indentation, arrays use dash notation."
    ),
    "csv": (
        "CSV format (FLATTENED): comma-separated values with headers in first row. Nested "
        "data is flattened into dot notation columns (e.g., contact.email). Records with "
        "nested lists repeat their parent columns on every row."
    ),
    "xml": (
        "XML format: nested tags with opening/closing pairs. Child elements represent "
        "nested objects; repeated elements represent lists."
    ),
    "toon": (
        "TOON format: Indentation-based with key: value pairs. Arrays of objects use "
        "tabular format with headers (e.g., items[2]{id,name}:). Primitive arrays are "
        "comma-separated inline."
    ),
}


def ploon_explanation(minify: bool = False) -> str:
    """Explain PLOON with the format guide and a live encoded example."""
    example = encode(EXAMPLE_VALUE, minify=minify)
    qa = "\n\n".join(f"Q: {q}\nA: {a}" for q, a in EXAMPLE_QA)
    lines = [FORMAT_GUIDE.rstrip()]
    if minify:
        lines.append("Records are separated by ';' instead of line breaks.")
    lines.extend(["", "Example:", example, "", qa, "", "Extract exact value only."])
    return "\n".join(lines)


def default_explanations() -> dict[str, str]:
    explanations = dict(_STATIC_EXPLANATIONS)
    explanations["ploon"] = ploon_explanation()
    explanations["ploon-minified"] = ploon_explanation(minify=True)
    return explanations


class PromptBuilder:
    """Builds the system/user prompt pair for one question in one format.

    Args:
        explanations: Optional mapping of format name to explanation text.
            Entries override (or extend) ``default_explanations()``.
        context: Optional dict of extra sections appended to the system
            prompt (e.g. rounding rules). Keys are used as section headers.

    Example:
        builder = PromptBuilder()
        messages = builder.build_messages("ploon", ploon_text, "How many products?")
        # Send messages to a chat completion endpoint...
    """

    def __init__(self, explanations: dict[str, str] | None = None, context: dict | None = None):
        self.explanations = default_explanations()
        if explanations:
            self.explanations.update(explanations)
        self.context = context or {}

    def explain(self, format_name: str) -> str:
        try:
            return self.explanations[format_name]
        except KeyError:
            raise KeyError(
                f"No explanation for format {format_name!r}. "
                f"Known formats: {sorted(self.explanations)}"
            ) from None

    def _format_context(self) -> str:
        """Format optional context as a string block."""
        if not self.context:
            return ""
        lines = ["", "=== CONTEXT ==="]
        for key, val in self.context.items():
            lines.append(f"{key}:")
            lines.append(f"  {val}")
        return "\n".join(lines)

    def build_system(self, format_name: str) -> str:
        """System prompt: extraction role, format explanation, answer rules."""
        return f"""\
You are a data extraction tool. Output ONLY the raw answer value.

{self.explain(format_name)}
{self._format_context()}
Rules: Single value only. No explanations, markdown, or extra text."""

    def build_user(self, formatted_data: str, question: str) -> str:
        """User prompt: the dataset verbatim, then the question."""
        return f"""\
{formatted_data}

Question: {question}

Answer:"""

    def build_messages(self, format_name: str, formatted_data: str, question: str) -> list[dict]:
        """Chat messages ready for an OpenAI-style completion request."""
        return [
            {"role": "system", "content": self.build_system(format_name)},
            {"role": "user", "content": self.build_user(formatted_data, question)},
        ]

    def build_judge(self, question: str, expected: str, actual: str) -> str:
        """LLM-as-judge prompt asking whether ``actual`` answers ``question``."""
        return f"""\
You are validating answers to questions about structured data.

Question: {question}
Expected answer: {expected}
Actual answer: {actual}

Is the actual answer correct? Consider:
- Exact matches are correct
- Semantically equivalent answers are correct (e.g., "50000" vs "$50,000" vs "50000 dollars")
- Minor formatting differences are acceptable
- Case-insensitive comparison for text

Respond with only "YES" or "NO"."""


def judge_verdict(judge_answer: str) -> bool:
    """True when the judge replied YES (case-insensitive, surrounding space ignored)."""
    return judge_answer.strip().upper() == "YES"


def fallback_match(actual: str, expected: str) -> bool:
    """Plain comparison used when the judge call fails."""
    return actual.strip().lower() == expected.strip().lower()
