"""
Tag Gate

The last check before a tag result is written to storage.

Rules, in order:
1. No tags -> EmptyTagsError, whatever the fallback policy
2. Heuristic result and fallbacks not allowed -> FallbackRejectedError
3. Otherwise the result is returned unchanged

DESIGN DECISION: Heuristic results are refused by default. They tend to be
the same generic tags every time, so the user is asked to retry with richer
input instead of silently saving them.
"""

import json
from typing import Any

from infocards.errors import EmptyTagsError, FallbackRejectedError
from infocards.models.item import TagResult

RAW_PREVIEW_LENGTH = 600


def _preview(value: Any, max_length: int = RAW_PREVIEW_LENGTH) -> str:
    if isinstance(value, str):
        text = value
    else:
        try:
            text = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError):
            text = str(value)
    if len(text) > max_length:
        return text[:max_length] + " …(truncated)"
    return text


def _raw_hint(result: TagResult) -> str:
    if result.raw is None:
        return ""
    return f" / raw={_preview(result.raw)}"


def accept(result: TagResult, allow_fallback: bool = False) -> TagResult:
    """
    Decide whether a tag result may be persisted.

    Raises:
        EmptyTagsError: The result has no tags.
        FallbackRejectedError: The result is a heuristic fallback and
            `allow_fallback` is False.
    """
    if not result.tags:
        raise EmptyTagsError(raw_hint=_raw_hint(result))

    if result.fallback and not allow_fallback:
        raise FallbackRejectedError(
            model=result.model or "unknown",
            error=result.error,
            raw_hint=_raw_hint(result),
        )

    return result
