"""
Model Output Parsing

Models are asked for JSON only, but sometimes wrap it in prose or code
fences. Parsing is done in two steps:
1. The whole text as JSON
2. The first balanced {...} group found by a bracket-matching scan

The result is tagged: ParsedOutput when a JSON object was found,
MalformedOutput otherwise. Field checks are lenient inside a valid object:
a missing or mistyped field falls back to its default.
"""

import json
import math
from typing import Optional, Union

from pydantic import BaseModel, Field


class ParsedOutput(BaseModel):
    """A JSON object was found in the model text."""

    tags: list[str] = Field(default_factory=list)
    summary: Optional[str] = None
    confidence: Optional[float] = None


class MalformedOutput(BaseModel):
    """No JSON object could be read from the model text."""

    reason: str


ModelOutput = Union[ParsedOutput, MalformedOutput]


def extract_balanced_object(text: str) -> Optional[str]:
    """
    Return the first balanced {...} substring of `text`, or None.

    Braces inside JSON string literals (including escaped quotes) do not
    count towards the balance.
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start:index + 1]
        # Unbalanced from this brace: try the next opening brace
        start = text.find("{", start + 1)
    return None


def _load_object(text: str) -> Optional[dict]:
    try:
        value = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None
    return value if isinstance(value, dict) else None


def _read_tags(value) -> list[str]:
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return value
    return []


def _read_summary(value) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _read_confidence(value) -> Optional[float]:
    # bool is an int subclass; true/false is not a confidence
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        value = float(value)
    except OverflowError:
        # int beyond float range; its sign decides which bound it clamps to
        return 1.0 if value > 0 else 0.0
    if math.isnan(value):
        return None
    return min(max(value, 0.0), 1.0)


def parse_model_output(text: Optional[str]) -> ModelOutput:
    """Read tags, summary and confidence from raw model text."""
    if not text or not text.strip():
        return MalformedOutput(reason="empty response")

    data = _load_object(text)
    if data is None:
        candidate = extract_balanced_object(text)
        if candidate is None:
            return MalformedOutput(reason="no JSON object in response")
        data = _load_object(candidate)
        if data is None:
            return MalformedOutput(reason="invalid JSON object in response")

    return ParsedOutput(
        tags=_read_tags(data.get("tags")),
        summary=_read_summary(data.get("summary")),
        confidence=_read_confidence(data.get("confidence")),
    )
