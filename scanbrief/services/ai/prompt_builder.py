"""
Prompt building for AI analysis.

Serializes arbitrary scan data to text, enforces the provider's maximum
input length, and substitutes the result into the analysis template.
"""

import json
from dataclasses import dataclass
from typing import Any

from .errors import AnalysisError, ErrorKind

DATA_PLACEHOLDER = "{data}"
TRUNCATION_MARKER = "\n\n[Data truncated for processing...]"


@dataclass(frozen=True)
class BuiltPrompt:
    """
    A prompt ready for normalization.

    Attributes:
        text: Full prompt (template with data substituted)
        data: Serialized data segment, possibly truncated with the marker
        truncated: Whether the data exceeded the length policy
        original_length: Length of the serialized data before truncation
    """

    text: str
    data: str
    truncated: bool
    original_length: int


def serialize_data(raw_data: Any) -> str:
    """
    Convert input data to canonical text.

    Strings are used verbatim; anything else is rendered as indented JSON.
    Key order follows the input, so the result is deterministic for a given
    input instance.
    """
    if isinstance(raw_data, str):
        return raw_data
    return json.dumps(raw_data, indent=2, ensure_ascii=False, default=str)


def build(raw_data: Any, template: str, max_chars: int) -> BuiltPrompt:
    """
    Build the analysis prompt.

    Args:
        raw_data: Scan data (string or JSON-serializable value)
        template: Template containing exactly one ``{data}`` placeholder
        max_chars: Maximum serialized data length before truncation

    Returns:
        BuiltPrompt

    Raises:
        AnalysisError: kind TemplateError if the placeholder is missing or repeated
    """
    occurrences = template.count(DATA_PLACEHOLDER)
    if occurrences != 1:
        raise AnalysisError(
            ErrorKind.TEMPLATE_ERROR,
            detail=f"expected exactly one {DATA_PLACEHOLDER} placeholder, found {occurrences}",
        )

    data = serialize_data(raw_data)
    original_length = len(data)
    truncated = original_length > max_chars
    if truncated:
        data = data[:max_chars] + TRUNCATION_MARKER

    # Literal replacement: braces inside the data must never be interpreted
    text = template.replace(DATA_PLACEHOLDER, data)

    return BuiltPrompt(
        text=text,
        data=data,
        truncated=truncated,
        original_length=original_length,
    )
