"""Unit tests for model JSON recovery"""

from credit_assessor.utils.json_recovery import (
    extract_json,
    fenced_code_block,
    first_balanced_object,
    line_scan_block,
    repair_common_defects,
)


def test_fenced_json_is_recovered():
    assert extract_json('Sure! ```json\n{"a":1}\n```') == {"a": 1}


def test_text_without_braces_returns_none():
    assert extract_json("I could not read this document, sorry.") is None


def test_empty_and_non_string_input_returns_none():
    assert extract_json("") is None
    assert extract_json("   ") is None
    assert extract_json(None) is None
    assert extract_json(b'{"a": 1}') is None


def test_prose_around_object():
    text = 'Here is the analysis: {"creditScore": 700, "rating": "Fair"} Let me know!'
    assert extract_json(text) == {"creditScore": 700, "rating": "Fair"}


def test_first_balanced_object_ignores_braces_in_strings():
    text = 'prefix {"note": "use {curly} braces", "nested": {"x": 1}} suffix {"second": true}'
    assert first_balanced_object(text) == {"note": "use {curly} braces", "nested": {"x": 1}}


def test_first_balanced_object_skips_malformed_parent():
    """An inner object is not returned in place of its broken parent"""
    text = '{"creditScore": 700, "detail": {"a": 1},} then {"ok": 1}'
    assert first_balanced_object(text) == {"ok": 1}


def test_first_balanced_object_rejects_arrays_and_unbalanced():
    assert first_balanced_object("[1, 2, 3]") is None
    assert first_balanced_object('{"a": 1') is None


def test_fenced_code_block_strategy():
    text = "Result:\n```JSON\n{\"rating\": \"Good\"}\n```\nThanks"
    assert fenced_code_block(text) == {"rating": "Good"}
    assert fenced_code_block('{"rating": "Good"}') is None


def test_line_scan_strategy():
    text = 'Answer below\n  {\n  "a": 1,\n  "b": {"c": 2}\n  }\ntrailing words'
    assert line_scan_block(text) == {"a": 1, "b": {"c": 2}}


def test_line_scan_single_line_object():
    assert line_scan_block('noise\n{"a": 1}\nmore noise') == {"a": 1}


def test_repair_trailing_commas_and_bare_tokens():
    text = "Result: {creditScore: 720, rating: Good, keyFactors: [\"Stable income\",],}"

    assert extract_json(text) == {"creditScore": 720, "rating": "Good", "keyFactors": ["Stable income"]}


def test_repair_keeps_json_literals_unquoted():
    text = "```json\n{approved: true, limit: null, rate: -1.5e2, note: pending review}\n```"

    assert repair_common_defects(text) == {"approved": True, "limit": None, "rate": -150.0, "note": "pending review"}


def test_repair_leaves_string_contents_alone():
    text = '{note: "a, b: c", status: pending, tags: ["x, y",],}'

    assert repair_common_defects(text) == {"note": "a, b: c", "status": "pending", "tags": ["x, y"]}


def test_unrecoverable_text_returns_none():
    assert extract_json("{this is: {not, json") is None
