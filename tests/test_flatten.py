from provider_bridge.gateway.schema import (
    FieldType,
    NormalizedType,
    ParameterSchema,
    TransformedRequest,
    flatten_schema,
    wire_path,
)


def test_flatten_all_categories_in_catalog_order():
    schema = ParameterSchema.from_catalog({
        "headers": {"x-trace": {"type": "text"}},
        "body": {
            "type": "json",
            "data": {
                "prompt": {"type": "text", "required": True},
                "temperature": {"type": "float"},
                "stop": {"type": "array"},
            },
        },
        "query": {"limit": {"type": "integer"}},
        "parameters": {"id": {"type": "string", "required": True}},
    })

    flat = flatten_schema(schema)

    assert [f.path for f in flat.body] == [
        "body.data.prompt", "body.data.temperature", "body.data.stop",
    ]
    assert [f.path for f in flat.headers] == ["headers.x-trace"]
    assert [f.path for f in flat.query] == ["query.limit"]
    assert [f.path for f in flat.parameters] == ["parameters.id"]
    assert flat.find("body.data.prompt").required is True
    assert flat.find("body.data.temperature").type == NormalizedType.NUMBER
    assert flat.find("query.limit").type == NormalizedType.NUMBER
    assert flat.field_type_of("parameters.id") == FieldType.PARAMETER


def test_required_from_parent_array():
    schema = ParameterSchema.from_catalog({
        "body": {
            "properties": {
                "prompt": {"type": "text"},
                "temperature": {"type": "float"},
                "seed": {"type": "integer", "required": True},
            },
            "required": ["prompt"],
        },
    })

    flat = flatten_schema(schema)
    required = {f.name: f.required for f in flat.body}

    assert required == {"prompt": True, "temperature": False, "seed": True}
    assert flat.body[0].path == "body.properties.prompt"


def test_list_style_categories_and_type_shorthand():
    schema = ParameterSchema.from_catalog({
        "headers": [{"name": "x-region", "type": "text", "required": True}],
        "query": {"verbose": "boolean"},
    })

    flat = flatten_schema(schema)

    assert flat.headers[0].name == "x-region"
    assert flat.headers[0].required is True
    assert flat.query[0].type == NormalizedType.BOOLEAN


def test_empty_schema_flattens_to_empty_lists():
    flat = flatten_schema(ParameterSchema.from_catalog(None))
    assert list(flat.all_fields()) == []


def test_wire_path_and_get_field():
    assert wire_path("body.data.input", FieldType.BODY) == "input"
    assert wire_path("body.config.top_p", FieldType.BODY) == "config.top_p"
    assert wire_path("headers.x-trace", FieldType.HEADER) == "x-trace"
    assert wire_path("parameters.id", FieldType.PARAMETER) == "id"
    assert wire_path("limit", FieldType.QUERY) == "limit"

    request = TransformedRequest(body={"prompt": "hi"}, query={"limit": 5})
    assert request.get_field("body.data.prompt") == "hi"
    assert request.get_field("query.limit") == 5
    assert request.get_field("body.data.missing", "x") == "x"
