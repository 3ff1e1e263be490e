"""
Runtime Transformation Pipeline.

Turns an inbound canonical request into a provider-shaped request using
a compiled mapping table:

1. For each mapping, read the value at `toField` from the inbound body.
2. When that path does not resolve, try the fallback paths: without the
   `body.data.` prefix, without the leading `body.` prefix, then the bare
   field name. A mapping that resolves nowhere is skipped.
3. Write the value into the bucket named by `fieldType` at `fromField`
   (a schema address such as `body.data.input` lands at `input`).
4. Copy every unconsumed top-level inbound key into the body, except the
   control fields used to select the provider and endpoint.
"""

from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

import structlog

from provider_bridge.gateway.schema import (
    MappingRecord,
    ParameterSchema,
    TransformedRequest,
    flatten_schema,
    wire_path,
)
from provider_bridge.gateway.transform.filters import apply_transformation, parse_transformation
from provider_bridge.gateway.transform.paths import MISSING, get_nested, set_nested, split_path

logger = structlog.get_logger(__name__)

# Fields that select the provider/endpoint and are never forwarded
CONTROL_FIELDS = frozenset({"provider", "provider_function"})


def fallback_paths(to_field: str) -> List[str]:
    """
    Ordered alternative paths for a canonical field.

    `body.data.temperature` -> [`temperature`, `data.temperature`]
    (the bare name is already covered by the first entry).
    """
    candidates = []
    if to_field.startswith("body.data."):
        candidates.append(to_field[len("body.data."):])
    if to_field.startswith("body."):
        candidates.append(to_field[len("body."):])
    parts = split_path(to_field)
    if parts:
        candidates.append(parts[-1])

    result: List[str] = []
    for candidate in candidates:
        if candidate and candidate != to_field and candidate not in result:
            result.append(candidate)
    return result


def resolve_value(inbound: Dict[str, Any], to_field: str) -> Tuple[Any, Optional[str]]:
    """
    Resolve a canonical field, falling back to alternative paths.

    Returns:
        (value, path that resolved) or (MISSING, None)
    """
    value = get_nested(inbound, to_field)
    if value is not MISSING:
        return value, to_field

    for path in fallback_paths(to_field):
        value = get_nested(inbound, path)
        if value is not MISSING:
            return value, path

    return MISSING, None


def _required_canonical_paths(canonical_schema: Optional[ParameterSchema]) -> Set[str]:
    if canonical_schema is None:
        return set()
    return {item.path for item in flatten_schema(canonical_schema).all_fields() if item.required}


def transform_request(
    inbound: Dict[str, Any],
    mappings: Iterable[MappingRecord],
    canonical_schema: Optional[ParameterSchema] = None,
) -> TransformedRequest:
    """
    Map an inbound canonical request onto the provider's request shape.

    Args:
        inbound: Caller's JSON body
        mappings: Mapping records, applied in order (last write wins)
        canonical_schema: Default-parameter schema, used to flag skipped
            required fields in the logs

    Returns:
        TransformedRequest with body/headers/parameters/query buckets
    """
    result = TransformedRequest()
    consumed: Set[str] = set()
    required_paths = _required_canonical_paths(canonical_schema)

    for mapping in mappings:
        value, resolved_path = resolve_value(inbound, mapping.to_field)

        if resolved_path is None:
            name, arg = parse_transformation(mapping.transformation or "")
            if name == "default" and arg is not None:
                value = apply_transformation(None, mapping.transformation)
            else:
                log = logger.warning if mapping.to_field in required_paths else logger.debug
                log(
                    "Mapping skipped, canonical field not present",
                    to_field=mapping.to_field,
                    from_field=mapping.from_field,
                )
                continue
        else:
            consumed.add(split_path(resolved_path)[0])
            value = apply_transformation(value, mapping.transformation)
            if resolved_path != mapping.to_field:
                logger.debug(
                    "Mapping resolved through fallback path",
                    to_field=mapping.to_field,
                    fallback=resolved_path,
                )

        set_nested(
            result.bucket(mapping.field_type.bucket),
            wire_path(mapping.from_field, mapping.field_type),
            value,
        )

    for key, value in inbound.items():
        if key in CONTROL_FIELDS or key in consumed:
            continue
        if key not in result.body:
            result.body[key] = value

    return result
