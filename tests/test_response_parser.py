"""
Response Parser Tests
=====================
Tests for fence stripping, JSON parsing and repair fallback.
"""
import json

import pytest

from bugscope.core.errors import ResponseParseError
from bugscope.llm.response_parser import parse_json_response, strip_code_fences


SAMPLE = {
    "summary": "Timer not visible",
    "suggestedSolutions": [{"title": "Fix", "steps": ["a", "b"]}],
    "confidence": "medium",
}


class TestStripCodeFences:
    def test_json_fence(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence(self):
        assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_uppercase_language_tag(self):
        assert strip_code_fences('```JSON\n{"a": 1}\n```') == '{"a": 1}'

    def test_surrounding_whitespace(self):
        assert strip_code_fences('  \n{"a": 1}\n  ') == '{"a": 1}'

    def test_unfenced_text_untouched(self):
        assert strip_code_fences('{"a": "```"}') == '{"a": "```"}'


class TestParseJsonResponse:
    def test_plain_json(self):
        assert parse_json_response(json.dumps(SAMPLE)) == SAMPLE

    def test_fenced_json_roundtrip(self):
        text = "```json\n" + json.dumps(SAMPLE, indent=2) + "\n```"
        assert parse_json_response(text) == SAMPLE

    def test_truncated_json_is_repaired(self):
        data = parse_json_response('```json\n{"summary": "Timer not vis')
        assert data == {"summary": "Timer not vis..."}

    def test_unrepairable_raises_original_error(self):
        text = "The model refused to answer"
        with pytest.raises(json.JSONDecodeError) as original:
            json.loads(text)

        with pytest.raises(ResponseParseError) as exc_info:
            parse_json_response(text)

        assert str(exc_info.value) == str(original.value)
        assert isinstance(exc_info.value.__cause__, json.JSONDecodeError)

    def test_empty_text_raises(self):
        with pytest.raises(ResponseParseError):
            parse_json_response("")

    def test_none_text_raises(self):
        with pytest.raises(ResponseParseError):
            parse_json_response(None)
