import copy

import pytest

from provider_bridge.gateway.schema import MappingRecord, ParameterSchema
from provider_bridge.gateway.transform import (
    MISSING,
    apply_transformation,
    fallback_paths,
    get_nested,
    resolve_value,
    set_nested,
    transform_request,
)


def mapping(from_field, to_field, field_type="body", transformation=None):
    data = {"fromField": from_field, "toField": to_field, "fieldType": field_type}
    if transformation:
        data["transformation"] = transformation
    return MappingRecord.model_validate(data)


def test_round_trip_through_identity_mapping():
    inbound = {"body": {"data": {"prompt": "Write a haiku"}}}

    result = transform_request(inbound, [mapping("body.data.prompt", "body.data.prompt")])

    assert result.get_field("body.data.prompt") == "Write a haiku"
    assert result.body == {"prompt": "Write a haiku"}


def test_fallback_paths_order():
    assert fallback_paths("body.data.temperature") == ["temperature", "data.temperature"]
    assert fallback_paths("body.top_p") == ["top_p"]
    assert fallback_paths("temperature") == []


def test_flat_inbound_resolves_through_fallback():
    result = transform_request(
        {"temperature": 0.5},
        [mapping("body.data.temperature", "body.data.temperature")],
    )

    assert result.body == {"temperature": 0.5}


def test_resolve_value_keeps_null_distinct_from_missing():
    assert resolve_value({"seed": None}, "body.data.seed") == (None, "seed")
    assert resolve_value({}, "body.data.seed") == (MISSING, None)


def test_passthrough_does_not_duplicate_mapped_fields():
    messages = [{"role": "user", "content": "hello"}]
    inbound = {
        "provider": "openai",
        "provider_function": "responses",
        "model": "gpt-4.1",
        "messages": messages,
        "stream": False,
    }

    result = transform_request(inbound, [mapping("body.data.input", "body.data.messages")])

    assert result.body == {"input": messages, "model": "gpt-4.1", "stream": False}
    assert result.headers == {}
    assert result.parameters == {}
    assert result.query == {}


def test_passthrough_never_overwrites_mapped_values():
    result = transform_request(
        {"name": "mapped", "model": "passthrough"},
        [mapping("body.data.model", "body.data.name")],
    )

    assert result.body == {"model": "mapped"}


def test_field_type_selects_bucket():
    inbound = {"trace": "abc", "model": "gemini-2.0-flash", "limit": 3}

    result = transform_request(inbound, [
        mapping("headers.x-trace-id", "body.data.trace", "header"),
        mapping("parameters.model", "body.data.model", "parameter"),
        mapping("query.pageSize", "body.data.limit", "query"),
    ])

    assert result.headers == {"x-trace-id": "abc"}
    assert result.parameters == {"model": "gemini-2.0-flash"}
    assert result.query == {"pageSize": 3}
    assert result.body == {}


def test_nested_provider_path_is_created():
    result = transform_request(
        {"temperature": 0.2},
        [mapping("body.data.generationConfig.temperature", "body.data.temperature")],
    )

    assert result.body == {"generationConfig": {"temperature": 0.2}}


def test_unresolved_mapping_is_skipped():
    canonical = ParameterSchema.from_catalog({
        "body": {"data": {"messages": {"type": "array", "required": True}}},
    })

    result = transform_request(
        {"model": "x"},
        [mapping("body.data.input", "body.data.messages")],
        canonical,
    )

    assert "input" not in result.body
    assert result.body == {"model": "x"}


def test_default_transformation_fills_missing_value():
    result = transform_request(
        {},
        [mapping("body.data.temperature", "body.data.temperature", transformation="default:0.7")],
    )

    assert result.body == {"temperature": 0.7}


def test_inbound_is_not_mutated():
    inbound = {"messages": [{"role": "user", "content": "hi"}], "provider": "openai"}
    before = copy.deepcopy(inbound)

    transform_request(inbound, [mapping("body.data.input", "body.data.messages")])

    assert inbound == before


def test_last_mapping_wins_for_same_target():
    result = transform_request(
        {"a": 1, "b": 2},
        [mapping("body.data.value", "body.data.a"), mapping("body.data.value", "body.data.b")],
    )

    assert result.body == {"value": 2}


@pytest.mark.parametrize("value, spec, expected", [
    ([1, 2, 3], "first", 1),
    ([1, 2, 3], "last", 3),
    ([1, 2, 3], "length", 3),
    (["a", "b"], "join:-", "a-b"),
    (["a", "b"], "join", "a,b"),
    ({"a": 1}, "json", '{"a": 1}'),
    ("12", "number", 12),
    ("1.5", "number", 1.5),
    ("true", "boolean", True),
    (5, "string", "5"),
    ("hello", "wrap_array", ["hello"]),
    (None, "default:\"x\"", "x"),
    ("kept", "default:x", "kept"),
    ("value", "no_such_filter", "value"),
    (None, None, None),
])
def test_transformations(value, spec, expected):
    assert apply_transformation(value, spec) == expected


def test_failing_filter_returns_value():
    assert apply_transformation(42, "join") == 42


def test_nested_helpers():
    target = {"a": "scalar"}
    set_nested(target, "a.b.c", 1)

    assert target == {"a": {"b": {"c": 1}}}
    assert get_nested(target, "a.b.c") == 1
    assert get_nested(target, "a.x") is MISSING
    assert get_nested({"a": [1]}, "a.0") is MISSING
