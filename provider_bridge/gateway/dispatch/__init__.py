"""
Provider Dispatch Package.

Usage:
    from provider_bridge.gateway.dispatch import ProviderDispatcher

    dispatcher = ProviderDispatcher(timeout_ms=settings.gateway.dispatch_timeout_ms)
    data = await dispatcher.dispatch(endpoint.url, transformed, provider.slug)
"""

from provider_bridge.gateway.dispatch.auth_placement import (
    AuthPlacement,
    AuthStyle,
    apply_credentials,
    get_auth_placement,
    register_auth_placement,
)
from provider_bridge.gateway.dispatch.dispatcher import (
    ProviderDispatcher,
    substitute_path_parameters,
)

__all__ = [
    "AuthPlacement",
    "AuthStyle",
    "ProviderDispatcher",
    "apply_credentials",
    "get_auth_placement",
    "register_auth_placement",
    "substitute_path_parameters",
]
