"""
In-memory Catalog Store.

Holds a catalog snapshot loaded from a YAML or JSON file:

    providers:
      - {id: p1, name: openai, displayName: OpenAI}
    models:
      - {id: m1, name: gpt-4.1, providerId: p1}
    endpoints:
      - id: e1
        name: responses
        providerId: p1
        url: https://api.openai.com/v1/responses
        parameters:
          body: {type: json, data: {input: {type: array, required: true}}}
    defaultParameters:
      - id: d1
        name: chat
        parameters:
          body: {type: json, data: {messages: {type: array, required: true}}}
    mappingSets:
      - id: a1
        providerEndpointId: e1
        defaultParameterId: d1
        mappings:
          - {fromField: body.data.input, toField: body.data.messages, fieldType: body}
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import structlog
import yaml

from provider_bridge.gateway.catalog.base import (
    AiModel,
    CatalogStore,
    DefaultParameterSet,
    Provider,
    ProviderEndpoint,
)
from provider_bridge.gateway.schema import MappingSet, ParameterSchema

logger = structlog.get_logger(__name__)


def _section(data: Dict[str, Any], *keys: str) -> List[Dict[str, Any]]:
    for key in keys:
        value = data.get(key)
        if isinstance(value, list):
            return value
    return []


class InMemoryCatalog(CatalogStore):
    """Catalog backed by plain Python lists."""

    def __init__(
        self,
        providers: Optional[List[Provider]] = None,
        models: Optional[List[AiModel]] = None,
        endpoints: Optional[List[ProviderEndpoint]] = None,
        default_parameters: Optional[List[DefaultParameterSet]] = None,
        mapping_sets: Optional[List[MappingSet]] = None
    ):
        self.providers = list(providers or [])
        self.models = list(models or [])
        self.endpoints = list(endpoints or [])
        self.default_parameters = list(default_parameters or [])
        self.mapping_sets = list(mapping_sets or [])

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "InMemoryCatalog":
        data = data or {}
        return cls(
            providers=[Provider.model_validate(item) for item in _section(data, "providers")],
            models=[AiModel.model_validate(item) for item in _section(data, "models")],
            endpoints=[
                ProviderEndpoint.model_validate(item) for item in _section(data, "endpoints")
            ],
            default_parameters=[
                DefaultParameterSet.model_validate(item)
                for item in _section(data, "defaultParameters", "default_parameters")
            ],
            mapping_sets=[
                MappingSet.model_validate(item)
                for item in _section(data, "mappingSets", "mapping_sets", "adapters")
            ],
        )

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "InMemoryCatalog":
        """Load a catalog snapshot. JSON files are read by the YAML parser as well."""
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        catalog = cls.from_dict(data)
        logger.info(
            "Catalog loaded",
            path=str(path),
            providers=len(catalog.providers),
            endpoints=len(catalog.endpoints),
            mapping_sets=len(catalog.mapping_sets),
        )
        return catalog

    async def get_provider(self, slug: str) -> Optional[Provider]:
        slug = slug.lower()
        for provider in self.providers:
            if provider.is_active and provider.slug == slug:
                return provider
        return None

    async def get_model(self, provider_id: str, name: str) -> Optional[AiModel]:
        for model in self.models:
            if model.is_active and model.provider_id == provider_id and model.name == name:
                return model
        return None

    async def get_endpoint(self, provider_id: str, name: str) -> Optional[ProviderEndpoint]:
        for endpoint in self.endpoints:
            if (
                endpoint.is_active
                and endpoint.provider_id == provider_id
                and endpoint.name == name
            ):
                return endpoint
        return None

    async def get_endpoint_schema(self, endpoint_id: str) -> Optional[ParameterSchema]:
        for endpoint in self.endpoints:
            if endpoint.id == endpoint_id:
                return endpoint.parameters.model_copy(deep=True)
        return None

    async def get_active_mapping_set(self, endpoint_id: str) -> Optional[MappingSet]:
        for mapping_set in self.mapping_sets:
            if mapping_set.is_active and mapping_set.provider_endpoint_id == endpoint_id:
                return mapping_set.model_copy(deep=True)
        return None

    async def get_canonical_schema(self, default_parameter_id: str) -> Optional[ParameterSchema]:
        for parameter_set in self.default_parameters:
            if parameter_set.is_active and parameter_set.id == default_parameter_id:
                return parameter_set.parameters.model_copy(deep=True)
        return None
