"""
Catalog Package.

Usage:
    from provider_bridge.gateway.catalog import InMemoryCatalog

    catalog = InMemoryCatalog.from_file("catalog.yaml")
    provider = await catalog.get_provider("openai")
"""

from provider_bridge.gateway.catalog.base import (
    AiModel,
    CatalogStore,
    DefaultParameterSet,
    Provider,
    ProviderEndpoint,
)
from provider_bridge.gateway.catalog.memory import InMemoryCatalog

__all__ = [
    "AiModel",
    "CatalogStore",
    "DefaultParameterSet",
    "InMemoryCatalog",
    "Provider",
    "ProviderEndpoint",
]
