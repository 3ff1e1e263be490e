"""
Parameter Schema Package.

Normalized parameter schemas, the type normalizer and the flattener.

Usage:
    from provider_bridge.gateway.schema import ParameterSchema, flatten_schema

    schema = ParameterSchema.from_catalog(raw_catalog_json)
    flat = flatten_schema(schema)
    flat.find("body.data.prompt")
"""

from provider_bridge.gateway.schema.flatten import FlattenedSchema, flatten_schema
from provider_bridge.gateway.schema.models import (
    REQUEST_BUCKETS,
    BodyKind,
    BodySpec,
    FieldType,
    FlattenedField,
    MappingRecord,
    MappingSet,
    ParameterField,
    ParameterSchema,
    TransformedRequest,
    field_type_for_path,
    wire_path,
)
from provider_bridge.gateway.schema.types import (
    NormalizedType,
    is_valid_mapping,
    normalize_type,
    type_mismatch_message,
)

__all__ = [
    # Models
    "BodyKind",
    "BodySpec",
    "FieldType",
    "FlattenedField",
    "MappingRecord",
    "MappingSet",
    "ParameterField",
    "ParameterSchema",
    "REQUEST_BUCKETS",
    "TransformedRequest",
    "field_type_for_path",
    "wire_path",
    # Flattening
    "FlattenedSchema",
    "flatten_schema",
    # Types
    "NormalizedType",
    "is_valid_mapping",
    "normalize_type",
    "type_mismatch_message",
]
