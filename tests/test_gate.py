"""Tests for the tag gate."""

import pytest

from infocards.errors import EmptyTagsError, FallbackRejectedError
from infocards.models.item import TagResult
from infocards.tagging.gate import accept


def make_result(**overrides) -> TagResult:
    values = {
        "tags": ["サブスク", "動画", "解約", "定額", "月額", "定期"],
        "summary": "Netflix 解約",
        "confidence": 0.7,
        "model": "gemini-1.5-flash",
        "fallback": False,
    }
    values.update(overrides)
    return TagResult(**values)


class TestAccept:
    """Gate rules."""

    def test_model_result_is_returned_unchanged(self):
        result = make_result()
        assert accept(result) is result

    @pytest.mark.parametrize("allow_fallback", [True, False])
    def test_empty_tags_always_rejected(self, allow_fallback):
        result = make_result(tags=[], fallback=False)
        with pytest.raises(EmptyTagsError):
            accept(result, allow_fallback=allow_fallback)

    def test_empty_check_comes_first(self):
        """An empty fallback result is an EmptyTagsError."""
        result = make_result(tags=[], fallback=True)
        with pytest.raises(EmptyTagsError):
            accept(result, allow_fallback=False)

    def test_fallback_rejected_by_default(self):
        result = make_result(fallback=True, model="heuristic:fallback", error="HTTP 503")
        with pytest.raises(FallbackRejectedError) as exc_info:
            accept(result)
        assert "heuristic:fallback" in str(exc_info.value)
        assert "HTTP 503" in str(exc_info.value)

    def test_fallback_allowed(self):
        result = make_result(fallback=True, model="heuristic:force")
        assert accept(result, allow_fallback=True) is result

    def test_raw_preview_in_message(self):
        """Traced raw output is shown, truncated."""
        result = make_result(fallback=True, raw="x" * 1000)
        with pytest.raises(FallbackRejectedError) as exc_info:
            accept(result)
        message = str(exc_info.value)
        assert "raw=" in message
        assert "…(truncated)" in message
