import asyncio
import json
from pathlib import Path

from provider_bridge.gateway.catalog import InMemoryCatalog
from provider_bridge.gateway.mapping import compile_mappings
from tests.conftest import catalog_data

EXAMPLE_CATALOG = Path(__file__).resolve().parent.parent / "catalog.example.yaml"


def test_example_catalog_loads_and_compiles():
    catalog = InMemoryCatalog.from_file(EXAMPLE_CATALOG)

    async def lookup():
        provider = await catalog.get_provider("OpenAI")
        endpoint = await catalog.get_endpoint(provider.id, "responses")
        mapping_set = await catalog.get_active_mapping_set(endpoint.id)
        provider_schema = await catalog.get_endpoint_schema(endpoint.id)
        canonical = await catalog.get_canonical_schema(mapping_set.default_parameter_id)
        return provider, mapping_set, provider_schema, canonical

    provider, mapping_set, provider_schema, canonical = asyncio.run(lookup())

    assert provider.label == "OpenAI"
    compiled = compile_mappings(mapping_set.mappings, provider_schema, canonical)
    assert len(compiled.mappings) == 3


def test_json_catalog_file(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(catalog_data()), encoding="utf-8")

    catalog = InMemoryCatalog.from_file(path)

    assert asyncio.run(catalog.get_model("prov-openai", "gpt-4.1")).id == "m-gpt41"


def test_inactive_records_are_hidden():
    data = catalog_data()
    data["mappingSets"].insert(0, {
        "id": "ad-old",
        "providerEndpointId": "ep-responses",
        "defaultParameterId": "dp-chat",
        "isActive": False,
        "mappings": [],
    })
    catalog = InMemoryCatalog.from_dict(data)

    assert asyncio.run(catalog.get_provider("retired")) is None
    assert asyncio.run(catalog.get_active_mapping_set("ep-responses")).id == "ad-responses"


def test_lookups_return_snapshots():
    catalog = InMemoryCatalog.from_dict(catalog_data())

    first = asyncio.run(catalog.get_active_mapping_set("ep-responses"))
    first.mappings.clear()
    second = asyncio.run(catalog.get_active_mapping_set("ep-responses"))

    assert len(second.mappings) == 1
