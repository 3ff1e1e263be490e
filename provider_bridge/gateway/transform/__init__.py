"""
Transformation Package.

Request-time mapping of canonical requests onto provider request shapes.

Usage:
    from provider_bridge.gateway.transform import transform_request

    transformed = transform_request(body, mapping_set.mappings, canonical_schema)
"""

from provider_bridge.gateway.transform.filters import ALLOWED_FILTERS, apply_transformation
from provider_bridge.gateway.transform.paths import MISSING, get_nested, set_nested
from provider_bridge.gateway.transform.pipeline import (
    CONTROL_FIELDS,
    fallback_paths,
    resolve_value,
    transform_request,
)

__all__ = [
    "ALLOWED_FILTERS",
    "CONTROL_FIELDS",
    "MISSING",
    "apply_transformation",
    "fallback_paths",
    "get_nested",
    "resolve_value",
    "set_nested",
    "transform_request",
]
