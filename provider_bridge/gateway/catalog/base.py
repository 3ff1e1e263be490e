"""
Catalog Store Interface.

The catalog (providers, models, endpoints, parameter schemas and mapping
sets) is maintained outside the gateway. The engine only reads it, once
per request, and works on the snapshots it gets back.
"""

from abc import ABC, abstractmethod
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from provider_bridge.gateway.schema import MappingSet, ParameterSchema


class CatalogEntity(BaseModel):
    """Common fields of catalog records."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    id: str
    name: str
    is_active: bool = Field(
        default=True,
        validation_alias=AliasChoices("isActive", "is_active"),
    )


class Provider(CatalogEntity):
    """An AI provider. `name` is the slug callers use (e.g. `openai`)."""

    display_name: str = Field(
        default="",
        validation_alias=AliasChoices("displayName", "display_name"),
    )

    @property
    def slug(self) -> str:
        return self.name.lower()

    @property
    def label(self) -> str:
        return self.display_name or self.name


class AiModel(CatalogEntity):
    """A model offered by a provider."""

    provider_id: str = Field(validation_alias=AliasChoices("providerId", "provider_id"))


class ProviderEndpoint(CatalogEntity):
    """A callable provider function, e.g. `responses` or `generateContent`."""

    provider_id: str = Field(validation_alias=AliasChoices("providerId", "provider_id"))
    url: str = Field(
        default="",
        validation_alias=AliasChoices("url", "pathToApi", "path_to_api"),
    )
    method: str = "POST"
    parameters: ParameterSchema = Field(default_factory=ParameterSchema)


class DefaultParameterSet(CatalogEntity):
    """A canonical parameter schema callers speak."""

    parameters: ParameterSchema = Field(default_factory=ParameterSchema)


class CatalogStore(ABC):
    """
    Read-only catalog lookups.

    Every method returns None on a miss; the caller decides which error
    that is. Inactive records are never returned.
    """

    @abstractmethod
    async def get_provider(self, slug: str) -> Optional[Provider]:
        """Active provider by slug (case-insensitive)."""
        pass

    @abstractmethod
    async def get_model(self, provider_id: str, name: str) -> Optional[AiModel]:
        """Active model by name for one provider."""
        pass

    @abstractmethod
    async def get_endpoint(self, provider_id: str, name: str) -> Optional[ProviderEndpoint]:
        """Active endpoint by function name for one provider."""
        pass

    @abstractmethod
    async def get_endpoint_schema(self, endpoint_id: str) -> Optional[ParameterSchema]:
        """Parameter schema the endpoint accepts."""
        pass

    @abstractmethod
    async def get_active_mapping_set(self, endpoint_id: str) -> Optional[MappingSet]:
        """First active mapping set for the endpoint."""
        pass

    @abstractmethod
    async def get_canonical_schema(self, default_parameter_id: str) -> Optional[ParameterSchema]:
        """Canonical schema referenced by a mapping set."""
        pass
