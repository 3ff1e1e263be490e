import pytest

from provider_bridge.gateway.errors import MappingValidationError
from provider_bridge.gateway.mapping import (
    check_mapping_types,
    compile_mappings,
    find_duplicate_parameters,
    find_duplicates_within_categories,
    validate_schema,
)

PROVIDER = {
    "headers": {"x-trace-id": {"type": "string"}},
    "body": {
        "type": "json",
        "data": {
            "input": {"type": "array", "required": True},
            "temperature": {"type": "string"},
            "metadata": {"type": "any"},
        },
    },
}

CANONICAL = {
    "body": {
        "type": "json",
        "data": {
            "messages": {"type": "array", "required": True},
            "temperature": {"type": "number"},
            "trace": {"type": "text"},
        },
    },
}


def test_duplicate_across_categories_is_named():
    schema = {
        "headers": {"model": {"type": "string"}},
        "body": {"data": {"prompt": {"type": "text"}}},
        "query": {"model": {"type": "string"}},
    }

    assert find_duplicate_parameters(schema) == ["model"]

    with pytest.raises(MappingValidationError) as exc_info:
        validate_schema(schema)

    assert exc_info.value.status_code == 400
    assert any("'model'" in error for error in exc_info.value.errors)


def test_duplicate_within_one_category():
    schema = {"headers": [{"name": "x-key"}, {"name": "x-key"}, {"name": "x-other"}]}

    assert find_duplicate_parameters(schema) == []
    assert find_duplicates_within_categories(schema)["headers"] == ["x-key"]

    with pytest.raises(MappingValidationError) as exc_info:
        validate_schema(schema)
    assert exc_info.value.errors == ["Duplicate parameter names in headers: x-key"]


def test_validate_schema_returns_parsed_schema():
    schema = validate_schema(PROVIDER)
    assert list(schema.body.data) == ["input", "temperature", "metadata"]


def test_type_checks():
    assert check_mapping_types("string", "number") is not None
    assert check_mapping_types("any", "number") is None
    assert check_mapping_types("array", "array") is None


def test_compile_valid_mappings():
    compiled = compile_mappings(
        [
            {"fromField": "body.data.input", "toField": "body.data.messages", "fieldType": "body"},
            {"fromField": "body.data.metadata", "toField": "body.data.temperature", "fieldType": "body"},
            {"fromField": "headers.x-trace-id", "toField": "body.data.trace", "fieldType": "header"},
        ],
        PROVIDER,
        CANONICAL,
    )

    assert len(compiled.mappings) == 3
    assert compiled.warnings == []
    assert compiled.to_dict()["mappings"][2]["fieldType"] == "header"


def test_string_to_number_is_rejected():
    with pytest.raises(MappingValidationError) as exc_info:
        compile_mappings(
            [{"fromField": "body.data.temperature", "toField": "body.data.temperature", "fieldType": "body"}],
            PROVIDER,
            CANONICAL,
        )

    assert len(exc_info.value.errors) == 1
    assert "Cannot map string to number" in exc_info.value.errors[0]


def test_all_errors_are_collected():
    with pytest.raises(MappingValidationError) as exc_info:
        compile_mappings(
            [
                {"fromField": "body.data.nope", "toField": "body.data.messages", "fieldType": "body"},
                {"fromField": "body.data.input", "toField": "body.data.missing", "fieldType": "body"},
                {"fromField": "body.data.input", "toField": "body.data.messages", "fieldType": "header"},
            ],
            PROVIDER,
            CANONICAL,
        )

    errors = exc_info.value.errors
    assert len(errors) == 3
    assert "provider field 'body.data.nope' does not exist" in errors[0]
    assert "default parameter 'body.data.missing' does not exist" in errors[1]
    assert "fieldType 'header'" in errors[2]


def test_schema_duplicates_reported_with_mapping_errors():
    provider = {
        "headers": {"input": {"type": "string"}},
        "body": {"data": {"input": {"type": "array"}}},
    }
    with pytest.raises(MappingValidationError) as exc_info:
        compile_mappings([], provider, CANONICAL)

    assert exc_info.value.errors[0].startswith("Provider schema: Parameter name 'input'")


def test_repeated_from_field_is_a_warning():
    compiled = compile_mappings(
        [
            {"fromField": "body.data.input", "toField": "body.data.messages"},
            {"fromField": "body.data.input", "toField": "body.data.messages"},
        ],
        PROVIDER,
        CANONICAL,
    )

    assert len(compiled.warnings) == 1
    assert "body.data.input" in compiled.warnings[0]


def test_path_below_object_field_is_accepted():
    compiled = compile_mappings(
        [{"fromField": "body.data.metadata.user", "toField": "body.data.trace", "fieldType": "body"}],
        PROVIDER,
        CANONICAL,
    )
    assert compiled.mappings[0].from_field == "body.data.metadata.user"
