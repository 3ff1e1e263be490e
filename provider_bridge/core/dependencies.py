"""
Dependency injection utilities for FastAPI.

Collaborators are built once from settings and shared by every request.
Tests replace them with `app.dependency_overrides`.
"""

from typing import Annotated, Optional

from fastapi import Depends, Request

from provider_bridge.core.config import settings
from provider_bridge.gateway.catalog import CatalogStore, InMemoryCatalog
from provider_bridge.gateway.dispatch import ProviderDispatcher
from provider_bridge.gateway.middleware.auth import (
    CallerIdentity,
    StaticTokenValidator,
    TokenValidator,
    authenticate_caller,
)
from provider_bridge.gateway.repair import StructuralRepairer, get_repairer
from provider_bridge.gateway.service import GatewayEngine


# ============================================================================
# Collaborators
# ============================================================================

# Catalog snapshot, loaded on first use
_catalog: Optional[CatalogStore] = None


def get_catalog() -> CatalogStore:
    """Get the shared catalog store, loading it from GATEWAY_CATALOG_PATH on first use."""
    global _catalog

    if _catalog is None:
        if settings.gateway.catalog_path:
            _catalog = InMemoryCatalog.from_file(settings.gateway.catalog_path)
        else:
            _catalog = InMemoryCatalog()
    return _catalog


def get_token_validator() -> TokenValidator:
    return StaticTokenValidator(settings.gateway.api_keys_map)


def get_repairer_dependency() -> StructuralRepairer:
    return get_repairer(settings.repair)


def get_dispatcher() -> ProviderDispatcher:
    return ProviderDispatcher(timeout_ms=settings.gateway.dispatch_timeout_ms)


def get_engine(
    catalog: Annotated[CatalogStore, Depends(get_catalog)],
    repairer: Annotated[StructuralRepairer, Depends(get_repairer_dependency)],
    dispatcher: Annotated[ProviderDispatcher, Depends(get_dispatcher)],
) -> GatewayEngine:
    return GatewayEngine(catalog=catalog, repairer=repairer, dispatcher=dispatcher)


# ============================================================================
# Caller Authentication
# ============================================================================

async def get_caller(
    request: Request,
    validator: Annotated[TokenValidator, Depends(get_token_validator)],
) -> CallerIdentity:
    """
    Authenticate the caller from x-api-key, Authorization or apikey headers.

    Raises:
        UnauthorizedError: Token missing or rejected
    """
    return await authenticate_caller(request.headers, validator)


# Type aliases for cleaner dependency injection
Caller = Annotated[CallerIdentity, Depends(get_caller)]
Engine = Annotated[GatewayEngine, Depends(get_engine)]
