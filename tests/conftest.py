import json
from typing import Any, Callable, Dict, List

import httpx
import pytest
from fastapi.testclient import TestClient

from provider_bridge.core.dependencies import (
    get_catalog,
    get_dispatcher,
    get_repairer_dependency,
    get_token_validator,
)
from provider_bridge.gateway.catalog import InMemoryCatalog
from provider_bridge.gateway.dispatch import ProviderDispatcher
from provider_bridge.gateway.middleware.auth import StaticTokenValidator
from provider_bridge.gateway.repair import NoopRepairer
from provider_bridge.main import app

CALLER_TOKEN = "test-token"
PROVIDER_SECRET = "sk-provider-secret"


def catalog_data() -> Dict[str, Any]:
    return {
        "providers": [
            {"id": "prov-openai", "name": "openai", "displayName": "OpenAI"},
            {"id": "prov-gemini", "name": "gemini", "displayName": "Google Gemini"},
            {"id": "prov-retired", "name": "retired", "isActive": False},
        ],
        "models": [
            {"id": "m-gpt41", "name": "gpt-4.1", "providerId": "prov-openai"},
            {"id": "m-flash", "name": "gemini-2.0-flash", "providerId": "prov-gemini"},
        ],
        "endpoints": [
            {
                "id": "ep-responses",
                "name": "responses",
                "providerId": "prov-openai",
                "url": "https://api.openai.com/v1/responses",
                "parameters": {
                    "body": {
                        "type": "json",
                        "data": {
                            "model": {"type": "string", "required": True},
                            "input": {"type": "array", "required": True},
                        },
                    },
                },
            },
            {
                "id": "ep-broken",
                "name": "broken",
                "providerId": "prov-openai",
                "url": "",
            },
            {
                "id": "ep-unmapped",
                "name": "embeddings",
                "providerId": "prov-openai",
                "url": "https://api.openai.com/v1/embeddings",
            },
            {
                "id": "ep-generate",
                "name": "generateContent",
                "providerId": "prov-gemini",
                "url": "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent",
                "parameters": {
                    "body": {"type": "json", "data": {"contents": {"type": "array"}}},
                    "parameters": {"model": {"type": "string", "required": True}},
                },
            },
        ],
        "defaultParameters": [
            {
                "id": "dp-chat",
                "name": "chat",
                "parameters": {
                    "body": {
                        "type": "json",
                        "data": {
                            "model": {"type": "string", "required": True},
                            "messages": {"type": "array", "required": True},
                        },
                    },
                },
            },
        ],
        "mappingSets": [
            {
                "id": "ad-responses",
                "providerEndpointId": "ep-responses",
                "defaultParameterId": "dp-chat",
                "mappings": [
                    {"fromField": "body.data.input", "toField": "body.data.messages", "fieldType": "body"},
                ],
            },
            {
                "id": "ad-generate",
                "providerEndpointId": "ep-generate",
                "defaultParameterId": "dp-chat",
                "mappings": [
                    {"fromField": "parameters.model", "toField": "body.data.model", "fieldType": "parameter"},
                    {"fromField": "body.data.contents", "toField": "body.data.messages", "fieldType": "body"},
                ],
            },
        ],
    }


@pytest.fixture
def catalog() -> InMemoryCatalog:
    return InMemoryCatalog.from_dict(catalog_data())


@pytest.fixture
def provider_calls() -> List[httpx.Request]:
    return []


@pytest.fixture
def provider_handler(provider_calls) -> Dict[str, Callable]:
    """Mutable holder for the fake provider's behaviour."""

    def default(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"id": "resp_123", "output": []})

    return {"handle": default}


@pytest.fixture
def client(catalog, provider_calls, provider_handler, monkeypatch):
    monkeypatch.setenv("PROVIDER_API_KEY_OPENAI", PROVIDER_SECRET)
    monkeypatch.setenv("PROVIDER_API_KEY_GEMINI", PROVIDER_SECRET)

    def handler(request: httpx.Request) -> httpx.Response:
        provider_calls.append(request)
        return provider_handler["handle"](request)

    app.dependency_overrides[get_catalog] = lambda: catalog
    app.dependency_overrides[get_token_validator] = lambda: StaticTokenValidator({CALLER_TOKEN: "user-1"})
    app.dependency_overrides[get_repairer_dependency] = lambda: NoopRepairer()
    app.dependency_overrides[get_dispatcher] = lambda: ProviderDispatcher(
        timeout_ms=5000, transport=httpx.MockTransport(handler)
    )
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def sent_json(request: httpx.Request) -> Any:
    return json.loads(request.content)
