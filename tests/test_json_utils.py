import json

import pytest

from frailearn.utils.json_utils import parse_model_json, parse_model_object, unwrap_key


def test_plain_json():
    assert parse_model_json('{"a": 1}') == {"a": 1}


def test_code_fences_are_stripped():
    assert parse_model_json('```json\n{"a": [1, 2]}\n```') == {"a": [1, 2]}
    assert parse_model_json('```\n[1, 2]\n```') == [1, 2]


def test_first_embedded_object_is_extracted():
    raw = 'Voici le JSON: {"title": "Les {accolades}", "n": 2} merci'
    assert parse_model_json(raw) == {"title": "Les {accolades}", "n": 2}


def test_bracketed_prose_before_the_payload_is_skipped():
    raw = '[note] le modèle répond: {"chapters": []}'
    assert parse_model_json(raw) == {"chapters": []}


def test_unparseable_input_raises():
    with pytest.raises(json.JSONDecodeError):
        parse_model_json("no json here")
    with pytest.raises(ValueError):
        parse_model_json(None)


def test_parse_model_object_wraps_arrays_and_rejects_scalars():
    assert parse_model_object('[{"id": 1}]') == {"items": [{"id": 1}]}
    assert parse_model_object('{"finalTest": {}}') == {"finalTest": {}}
    with pytest.raises(ValueError):
        parse_model_object('"just a string"')


def test_unwrap_key():
    payload = {"progressTest": {"questionsData": [1, 2]}}
    assert unwrap_key(payload, "progressTest", "questionsData") == [1, 2]
    assert unwrap_key(payload, "finalTest", "questionsData") is None
    assert unwrap_key([1], "progressTest") is None
