import json

from response_parser import INCOMPLETE, UNPARSEABLE, extract_json, strip_code_fences

REQUIRED = ("components", "ecoScore", "summary")


def test_fenced_payload_is_parsed():
    payload = {"components": [{"name": "lid"}], "ecoScore": 7, "summary": {"material": "PP"}}
    raw = "```json\n" + json.dumps(payload) + "\n```"
    result = extract_json(raw, required_fields=REQUIRED)
    assert result.ok
    assert result.value == payload


def test_missing_required_fields_is_incomplete():
    result = extract_json('Sure! {"ecoScore":7}', required_fields=REQUIRED)
    assert not result.ok
    assert result.reason == INCOMPLETE


def test_null_required_field_is_incomplete():
    result = extract_json('{"components": [], "ecoScore": null, "summary": {}}', required_fields=REQUIRED)
    assert result.reason == INCOMPLETE


def test_prose_around_object_is_ignored():
    result = extract_json('Here you go:\n{"response": "hi"}\nHope that helps!')
    assert result.ok
    assert result.value == {"response": "hi"}


def test_text_without_braces_is_unparseable():
    result = extract_json("I cannot help with that.")
    assert result.reason == UNPARSEABLE


def test_broken_json_is_unparseable():
    assert extract_json('{"ecoScore": 7,,}').reason == UNPARSEABLE


def test_empty_and_none_input_is_unparseable():
    assert extract_json("").reason == UNPARSEABLE
    assert extract_json(None).reason == UNPARSEABLE


def test_sequence_field_must_be_a_list():
    ok = extract_json('{"quiz": {"questions": [{"id": 1}]}}', sequence_fields=("quiz.questions",))
    assert ok.ok
    missing = extract_json('{"quiz": {"title": "x"}}', sequence_fields=("quiz.questions",))
    assert missing.reason == INCOMPLETE
    wrong_type = extract_json('{"quiz": {"questions": "none"}}', sequence_fields=("quiz.questions",))
    assert wrong_type.reason == INCOMPLETE


def test_strip_code_fences_leaves_plain_text_alone():
    assert strip_code_fences('{"a": 1}') == '{"a": 1}'
    assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'
