"""
Provider Gateway Package.

Translates one canonical request shape into the wire format of a
configured AI provider endpoint and dispatches it.

Architecture:
- schema: normalized parameter schemas, type normalizer, flattener
- mapping: authoring-time validation of schemas, mappings and URL templates
- transform: request-time mapping onto the provider shape
- repair: optional model-assisted structural repair (fail-open)
- dispatch: credential placement and the outbound provider call
- catalog: read-only catalog lookups
- service: the per-request flow tying the stages together

Usage:
    from provider_bridge.gateway.routers import ai_router, authoring_router

    app.include_router(ai_router)
    app.include_router(authoring_router)
"""
