"""
Gateway Request Flow.

Runs one caller request through the gateway:

    AUTHENTICATED -> CATALOG_RESOLVED -> MAPPED -> REPAIRED
        -> DISPATCHED -> SUCCEEDED

Any catalog miss stops the request with NOT_FOUND before mapping.
Provider failures surface as PROVIDER_ERROR, unusable endpoint data as
CONFIGURATION_ERROR. Only the repair stage absorbs its own failures.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import structlog

from provider_bridge.gateway.catalog import (
    CatalogStore,
    Provider,
    ProviderEndpoint,
)
from provider_bridge.gateway.dispatch import ProviderDispatcher
from provider_bridge.gateway.errors import BadRequestError, NotFoundError
from provider_bridge.gateway.middleware.auth import CallerIdentity
from provider_bridge.gateway.middleware.trace import RequestTimer
from provider_bridge.gateway.repair import ProviderMeta, StructuralRepairer
from provider_bridge.gateway.schema import MappingSet, ParameterSchema
from provider_bridge.gateway.transform import transform_request

logger = structlog.get_logger(__name__)

AUTO_MODEL = "auto"


class RequestState(str, Enum):
    """Stages a gateway request passes through."""

    AUTHENTICATED = "authenticated"
    CATALOG_RESOLVED = "catalog_resolved"
    MAPPED = "mapped"
    REPAIRED = "repaired"
    DISPATCHED = "dispatched"
    SUCCEEDED = "succeeded"


@dataclass
class ResolvedRoute:
    """Catalog snapshot for one request."""

    provider: Provider
    endpoint: ProviderEndpoint
    provider_schema: ParameterSchema
    mapping_set: MappingSet
    canonical_schema: ParameterSchema


@dataclass
class GatewayResult:
    """Outcome of a successful request."""

    message: str
    data: Any


def _required_string(body: Dict[str, Any], key: str) -> Optional[str]:
    value = body.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


class GatewayEngine:
    """
    Orchestrates catalog resolution, transformation, repair and dispatch.

    Holds no per-request state; one instance serves every request.
    """

    def __init__(
        self,
        catalog: CatalogStore,
        repairer: StructuralRepairer,
        dispatcher: ProviderDispatcher
    ):
        self.catalog = catalog
        self.repairer = repairer
        self.dispatcher = dispatcher

    async def resolve(self, provider_slug: str, model_name: str, function: str) -> ResolvedRoute:
        """
        Look up every catalog record a request needs.

        Raises:
            NotFoundError: A record is missing or inactive
            BadRequestError: The endpoint has no URL configured
        """
        provider = await self.catalog.get_provider(provider_slug)
        if provider is None:
            raise NotFoundError(f"Provider with slug '{provider_slug}' not found or not active")

        model = await self.catalog.get_model(provider.id, model_name)
        if model is None:
            raise NotFoundError(f"Model with name '{model_name}' not found or not active")

        endpoint = await self.catalog.get_endpoint(provider.id, function)
        if endpoint is None:
            raise NotFoundError(f"Provider endpoint '{function}' not configured")

        if not endpoint.url or not endpoint.url.strip():
            raise BadRequestError("Provider endpoint URL is missing")

        provider_schema = await self.catalog.get_endpoint_schema(endpoint.id)
        if provider_schema is None:
            raise NotFoundError("Provider endpoint parameters not configured")

        mapping_set = await self.catalog.get_active_mapping_set(endpoint.id)
        if mapping_set is None:
            raise NotFoundError("Provider endpoint adapter not configured")

        canonical_schema = await self.catalog.get_canonical_schema(mapping_set.default_parameter_id)
        if canonical_schema is None:
            raise NotFoundError("Default parameters for the adapter not found")

        return ResolvedRoute(
            provider=provider,
            endpoint=endpoint,
            provider_schema=provider_schema,
            mapping_set=mapping_set,
            canonical_schema=canonical_schema,
        )

    async def handle(self, body: Any, caller: CallerIdentity) -> GatewayResult:
        """
        Process one authenticated caller request.

        Args:
            body: Decoded JSON request body
            caller: Verified caller identity

        Returns:
            GatewayResult with the provider's decoded response

        Raises:
            GatewayError: For every non-repair failure
        """
        timer = RequestTimer()
        timer.start()
        log = logger.bind(user_id=caller.user_id, key_prefix=caller.key_prefix)
        log.debug("Gateway request state", state=RequestState.AUTHENTICATED.value)

        if not isinstance(body, dict):
            raise BadRequestError("Request body must be a JSON object")

        model_name = _required_string(body, "model")
        if model_name is None:
            raise BadRequestError("Model is required")

        if model_name == AUTO_MODEL:
            log.info("Automatic model selection requested, nothing dispatched")
            return GatewayResult(
                message="Request processed successfully",
                data={"model": AUTO_MODEL, "dispatched": False},
            )

        provider_slug = _required_string(body, "provider")
        function = _required_string(body, "provider_function")
        if provider_slug is None or function is None:
            raise BadRequestError("Provider and provider function are required")

        log = log.bind(provider=provider_slug, provider_function=function, model=model_name)

        route = await self.resolve(provider_slug, model_name, function)
        timer.mark(RequestState.CATALOG_RESOLVED.value)
        log.debug(
            "Gateway request state",
            state=RequestState.CATALOG_RESOLVED.value,
            endpoint_id=route.endpoint.id,
            mapping_set_id=route.mapping_set.id,
        )

        transformed = transform_request(
            body, route.mapping_set.mappings, route.canonical_schema
        )
        timer.mark(RequestState.MAPPED.value)
        log.debug("Gateway request state", state=RequestState.MAPPED.value)

        meta = ProviderMeta(
            provider_name=route.provider.name,
            endpoint_url=route.endpoint.url,
            display_name=route.provider.label,
        )
        try:
            transformed = await self.repairer.repair(
                transformed, meta, route.provider_schema
            )
        except Exception as e:
            log.warning("Structural repair error, using mapped request", error=str(e))
        timer.mark(RequestState.REPAIRED.value)
        log.debug("Gateway request state", state=RequestState.REPAIRED.value)

        data = await self.dispatcher.dispatch(
            route.endpoint.url, transformed, route.provider.slug
        )
        timer.mark(RequestState.DISPATCHED.value)
        timer.stop()

        log.info(
            "Gateway request succeeded",
            state=RequestState.SUCCEEDED.value,
            duration_ms=timer.total_ms,
            stages=timer.stages,
        )
        return GatewayResult(
            message=f"Request processed successfully by {route.provider.label}",
            data=data,
        )
