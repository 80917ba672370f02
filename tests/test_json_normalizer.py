"""Tests for recursive JSON decoding of attribute payloads."""

import json

import pytest

from disclosure_panel.parsing.json_normalizer import MAX_DECODE_DEPTH
from disclosure_panel.parsing.json_normalizer import format_json
from disclosure_panel.parsing.json_normalizer import normalize


def test_plain_text_is_returned_unchanged():
    assert normalize("not json") == "not json"


def test_doubly_encoded_list_is_decoded():
    assert normalize('"[1,2,3]"') == [1, 2, 3]


def test_quoted_string_stops_at_inner_text():
    assert normalize('"hello"') == "hello"


def test_primitives_are_decoded():
    assert normalize("42") == 42
    assert normalize("true") is True
    assert normalize("null") is None


def test_non_string_input_passes_through():
    payload = {"a": 1}
    assert normalize(payload) is payload


def test_malformed_nesting_does_not_raise():
    assert normalize("[[[[") == "[[[["
    deep = "[" * 100000
    assert normalize(deep) == deep


def test_decoding_depth_is_capped():
    value = "x"
    for _ in range(MAX_DECODE_DEPTH + 3):
        value = json.dumps(value)
    decoded = normalize(value)
    assert isinstance(decoded, str)
    assert decoded != "x"


@pytest.mark.parametrize(
    "value",
    [{"query": "weather", "limit": 3}, [1, "two", {"three": None}], {}],
)
def test_format_then_normalize_round_trips(value):
    assert normalize(format_json(json.dumps(value))) == value


def test_format_pretty_prints_with_two_spaces():
    assert format_json('{"a": [1]}') == '{\n  "a": [\n    1\n  ]\n}'


def test_format_quotes_primitives():
    assert format_json("42") == '"42"'
    assert format_json('"\\"done\\""') == '"done"'


def test_format_returns_unparseable_input_verbatim():
    assert format_json("oops {") == "oops {"


def test_format_accepts_structured_values():
    assert format_json({"a": 1}) == '{\n  "a": 1\n}'


def test_format_prints_null_as_quoted_text():
    assert format_json("null") == '"null"'
    assert format_json(None) == '"null"'
