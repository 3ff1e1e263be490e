import asyncio
import json

import httpx

from provider_bridge.gateway.repair import (
    NoopRepairer,
    OpenAIStructuralRepairer,
    ProviderMeta,
    parse_repair_response,
    unwrap_data_envelope,
)
from provider_bridge.gateway.schema import ParameterSchema, TransformedRequest

META = ProviderMeta(
    provider_name="gemini",
    endpoint_url="https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent",
    display_name="Google Gemini",
)

SCHEMA = ParameterSchema.from_catalog({
    "body": {"type": "json", "data": {"contents": {"type": "array", "required": True}}},
})


def make_request() -> TransformedRequest:
    return TransformedRequest(body={"contents": "Hello"}, parameters={"model": "gemini-2.0-flash"})


def tool_call_response(arguments) -> httpx.Response:
    return httpx.Response(200, json={
        "choices": [{
            "message": {
                "role": "assistant",
                "tool_calls": [{
                    "id": "call_1",
                    "type": "function",
                    "function": {
                        "name": "fix_request_structure",
                        "arguments": json.dumps(arguments),
                    },
                }],
            },
        }],
    })


def repairer_with(handler, api_key="sk-repair") -> OpenAIStructuralRepairer:
    return OpenAIStructuralRepairer(
        api_key=api_key,
        transport=httpx.MockTransport(handler),
    )


def test_noop_returns_input():
    request = make_request()
    assert asyncio.run(NoopRepairer().repair(request, META, SCHEMA)) is request


def test_missing_api_key_skips_call():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={})

    request = make_request()
    result = asyncio.run(repairer_with(handler, api_key=None).repair(request, META, SCHEMA))

    assert result is request
    assert calls == []


def test_transport_failure_fails_open():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    request = make_request()
    result = asyncio.run(repairer_with(handler).repair(request, META, SCHEMA))

    assert result is request


def test_error_status_fails_open():
    request = make_request()
    result = asyncio.run(
        repairer_with(lambda r: httpx.Response(500, text="boom")).repair(request, META, SCHEMA)
    )
    assert result is request


def test_unparsable_arguments_fail_open():
    def handler(request):
        return httpx.Response(200, json={
            "choices": [{"message": {"tool_calls": [{
                "function": {"name": "fix_request_structure", "arguments": "{not json"},
            }]}}],
        })

    request = make_request()
    assert asyncio.run(repairer_with(handler).repair(request, META, SCHEMA)) is request


def test_repair_applies_function_arguments_and_unwraps_data():
    sent = []
    contents = [{"role": "user", "parts": [{"text": "Hello"}]}]

    def handler(request):
        sent.append(request)
        return tool_call_response({
            "body": {"data": {"contents": contents}},
            "headers": {},
            "parameters": {"model": "gemini-2.0-flash"},
            "query": {},
        })

    result = asyncio.run(repairer_with(handler).repair(make_request(), META, SCHEMA))

    assert result.body == {"contents": contents}
    assert result.parameters == {"model": "gemini-2.0-flash"}

    request = sent[0]
    payload = json.loads(request.content)
    assert request.url.path == "/v1/chat/completions"
    assert request.headers["authorization"] == "Bearer sk-repair"
    assert payload["model"] == "gpt-4"
    assert payload["temperature"] == 0.1
    assert payload["tool_choice"]["function"]["name"] == "fix_request_structure"
    assert payload["tools"][0]["function"]["parameters"]["required"] == [
        "body", "headers", "parameters", "query",
    ]

    user_prompt = json.loads(payload["messages"][1]["content"])
    assert user_prompt["current_request_data"]["body"] == {"contents": "Hello"}
    assert "contents" in user_prompt["target_schema"]["body"]["data"]
    assert user_prompt["provider"]["display_name"] == "Google Gemini"


def test_parse_legacy_function_call():
    payload = {
        "choices": [{"message": {"function_call": {
            "name": "fix_request_structure",
            "arguments": json.dumps({"body": {"a": 1}, "headers": {}, "parameters": {}, "query": {}}),
        }}}],
    }

    repaired = parse_repair_response(payload)

    assert repaired is not None
    assert repaired.body == {"a": 1}


def test_parse_requires_all_buckets():
    payload = {
        "choices": [{"message": {"function_call": {
            "name": "fix_request_structure",
            "arguments": json.dumps({"body": {"a": 1}}),
        }}}],
    }
    assert parse_repair_response(payload) is None
    assert parse_repair_response({"choices": []}) is None


def test_unwrap_only_removes_envelope():
    assert unwrap_data_envelope({"data": {"a": 1}}) == {"a": 1}
    assert unwrap_data_envelope({"type": "json", "data": {"a": 1}}) == {"a": 1}
    assert unwrap_data_envelope({"data": {"a": 1}, "model": "x"}) == {"data": {"a": 1}, "model": "x"}
    assert unwrap_data_envelope({"data": "plain"}) == {"data": "plain"}
    assert unwrap_data_envelope(None) == {}
