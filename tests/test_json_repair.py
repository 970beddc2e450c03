"""
JSON Repair Tests
=================
Tests for the scanner state machine and truncated-output repair.

Covers:
    1. Every scanner transition (NORMAL / IN_STRING / ESCAPED)
    2. Depth tracking ignores brackets inside strings
    3. Mid-value truncation keeps the partial value with a marker
    4. Nested containers close innermost first
    5. Repaired text always has balanced braces and brackets
"""
import json

import pytest

from bugscope.llm.json_repair import ScanState, repair_json, scan, step


# ===================================================================
# Scanner transitions
# ===================================================================
class TestStep:
    def test_normal_quote_enters_string(self):
        assert step(ScanState.NORMAL, '"') == (ScanState.IN_STRING, 0, 0)

    @pytest.mark.parametrize("char,expected", [
        ("{", (ScanState.NORMAL, 1, 0)),
        ("}", (ScanState.NORMAL, -1, 0)),
        ("[", (ScanState.NORMAL, 0, 1)),
        ("]", (ScanState.NORMAL, 0, -1)),
        ("a", (ScanState.NORMAL, 0, 0)),
    ])
    def test_normal_structural_chars(self, char, expected):
        assert step(ScanState.NORMAL, char) == expected

    def test_string_backslash_escapes(self):
        assert step(ScanState.IN_STRING, "\\") == (ScanState.ESCAPED, 0, 0)

    def test_string_quote_closes(self):
        assert step(ScanState.IN_STRING, '"') == (ScanState.NORMAL, 0, 0)

    def test_string_ignores_brackets(self):
        assert step(ScanState.IN_STRING, "{") == (ScanState.IN_STRING, 0, 0)
        assert step(ScanState.IN_STRING, "]") == (ScanState.IN_STRING, 0, 0)

    def test_escaped_returns_to_string(self):
        assert step(ScanState.ESCAPED, '"') == (ScanState.IN_STRING, 0, 0)
        assert step(ScanState.ESCAPED, "n") == (ScanState.IN_STRING, 0, 0)


# ===================================================================
# Whole-text scan
# ===================================================================
class TestScan:
    def test_unterminated_string_is_reported(self):
        result = scan('{"a": "x{[')
        assert result.state is ScanState.IN_STRING
        assert result.brace_depth == 1
        assert result.bracket_depth == 0
        assert result.string_start == 6

    def test_escaped_quote_does_not_close_string(self):
        result = scan('{"a": "say \\"hi')
        assert result.state is ScanState.IN_STRING

    def test_dangling_backslash(self):
        assert scan('{"a": "line\\').state is ScanState.ESCAPED

    def test_balanced_text(self):
        result = scan('{"a": [1, {"b": "]"}]}')
        assert result.state is ScanState.NORMAL
        assert result.brace_depth == 0
        assert result.bracket_depth == 0
        assert result.open_containers == ()

    def test_open_containers_in_order(self):
        assert scan('{"a": [{"b": [1').open_containers == ("{", "[", "{", "[")


# ===================================================================
# Repair
# ===================================================================
class TestRepair:
    def test_truncated_value_keeps_partial_text(self):
        repaired = repair_json('{"summary": "The timer is miss')
        assert json.loads(repaired) == {"summary": "The timer is miss..."}

    def test_truncated_array_element_is_closed(self):
        repaired = repair_json('{"steps": ["one", "tw')
        assert json.loads(repaired) == {"steps": ["one", "tw"]}

    def test_dangling_backslash_dropped(self):
        repaired = repair_json('{"a": "line\\')
        assert json.loads(repaired) == {"a": "line..."}

    def test_nested_containers_close_innermost_first(self):
        repaired = repair_json('{"a": [{"b": 1}, {"c": [1, 2')
        assert json.loads(repaired) == {"a": [{"b": 1}, {"c": [1, 2]}]}

    def test_open_string_and_object_closed(self):
        data = json.loads(repair_json('{"a": "open value'))
        assert data["a"].endswith("...")

    def test_unclosed_array_exact_output(self):
        assert repair_json('{"a":[1,2,3') == '{"a":[1,2,3]}'

    def test_brackets_inside_strings_ignored(self):
        repaired = repair_json('{"a": "[{"')
        assert json.loads(repaired) == {"a": "[{"}

    def test_complete_json_unchanged(self):
        text = '{"a": [1, 2]}'
        assert repair_json(text) == text

    def test_truncated_master_response(self):
        text = (
            '{"summary": "Impersonation banner missing", "suggestedSolutions": '
            '[{"title": "Check banner", "steps": ["Open admin", "Start imper'
        )
        data = json.loads(repair_json(text))
        assert data["summary"] == "Impersonation banner missing"
        assert data["suggestedSolutions"][0]["title"] == "Check banner"
        assert data["suggestedSolutions"][0]["steps"][0] == "Open admin"

    @pytest.mark.parametrize("text", [
        '{"summary": "The timer is miss',
        '{"a": [{"b": [1, 2',
        '{"steps": ["one", "tw',
        '{"a": "b", "ke',
        '[[{"x": "\\',
        '{"a": {"b": {"c": ',
    ])
    def test_repaired_depths_are_balanced(self, text):
        result = scan(repair_json(text))
        assert result.state is ScanState.NORMAL
        assert result.brace_depth == 0
        assert result.bracket_depth == 0
