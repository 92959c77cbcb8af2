"""Tests for model output parsing."""

from infocards.tagging.parsing import (
    MalformedOutput,
    ParsedOutput,
    extract_balanced_object,
    parse_model_output,
)


class TestExtractBalancedObject:
    """Bracket-matching scan."""

    def test_no_braces(self):
        assert extract_balanced_object("no json here") is None

    def test_unbalanced(self):
        assert extract_balanced_object('{"tags": ["a"]') is None

    def test_nested_braces(self):
        """Nested objects stay inside the first group."""
        text = 'before {"a": {"b": 1}} middle {"c": 2}'
        assert extract_balanced_object(text) == '{"a": {"b": 1}}'

    def test_braces_inside_strings(self):
        """Braces in string literals do not count."""
        text = 'x {"summary": "use } and {", "tags": []} y'
        assert extract_balanced_object(text) == '{"summary": "use } and {", "tags": []}'

    def test_escaped_quote_inside_string(self):
        """An escaped quote does not end the string."""
        text = r'x {"summary": "say \"}\"", "tags": []} y'
        assert extract_balanced_object(text) == r'{"summary": "say \"}\"", "tags": []}'

    def test_skips_unbalanced_prefix(self):
        """An opening brace that never closes is skipped."""
        text = '{ broken {"tags": ["z"]}'
        assert extract_balanced_object(text) == '{"tags": ["z"]}'


class TestParseModelOutput:
    """Tagged parse results."""

    def test_plain_json(self):
        result = parse_model_output('{"tags": ["a", "b"], "summary": "s", "confidence": 0.9}')
        assert isinstance(result, ParsedOutput)
        assert result.tags == ["a", "b"]
        assert result.summary == "s"
        assert result.confidence == 0.9

    def test_json_wrapped_in_prose(self):
        result = parse_model_output('はい、結果です: {"tags": ["x"]} 以上')
        assert isinstance(result, ParsedOutput)
        assert result.tags == ["x"]

    def test_nested_object_in_prose(self):
        """A greedy first-to-last brace match would fail here."""
        text = 'prefix {"tags": ["a"], "meta": {"k": 1}} suffix {"other": 2}'
        result = parse_model_output(text)
        assert isinstance(result, ParsedOutput)
        assert result.tags == ["a"]

    def test_empty_text_is_malformed(self):
        assert isinstance(parse_model_output(""), MalformedOutput)
        assert isinstance(parse_model_output(None), MalformedOutput)

    def test_no_object_is_malformed(self):
        result = parse_model_output("I cannot help with that.")
        assert isinstance(result, MalformedOutput)
        assert "no JSON object" in result.reason

    def test_array_is_malformed(self):
        """A JSON value that is not an object is not a tag object."""
        assert isinstance(parse_model_output('["a", "b"]'), MalformedOutput)

    def test_mixed_tag_list_is_ignored(self):
        """tags must be all strings to count."""
        result = parse_model_output('{"tags": ["a", 1]}')
        assert isinstance(result, ParsedOutput)
        assert result.tags == []

    def test_missing_fields_default(self):
        result = parse_model_output("{}")
        assert isinstance(result, ParsedOutput)
        assert result.tags == []
        assert result.summary is None
        assert result.confidence is None

    def test_blank_summary_is_none(self):
        assert parse_model_output('{"summary": "  "}').summary is None

    def test_bool_confidence_rejected(self):
        assert parse_model_output('{"confidence": true}').confidence is None

    def test_string_confidence_rejected(self):
        assert parse_model_output('{"confidence": "0.8"}').confidence is None

    def test_confidence_clamped(self):
        assert parse_model_output('{"confidence": 1.7}').confidence == 1.0
        assert parse_model_output('{"confidence": -2}').confidence == 0.0

    def test_huge_integer_confidence_clamped(self):
        """Integers too large for a float clamp instead of raising."""
        huge = "9" * 400
        result = parse_model_output('{"tags": ["映画"], "confidence": %s}' % huge)
        assert isinstance(result, ParsedOutput)
        assert result.tags == ["映画"]
        assert result.confidence == 1.0
        assert parse_model_output('{"confidence": -%s}' % huge).confidence == 0.0
