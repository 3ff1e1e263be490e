"""
Mapping Compiler and Validator.

Checks the parameter schemas and mapping tables authored by catalog
administrators before they are stored:

- A parameter name must be unique across headers/body/query/path
  parameters of one schema.
- A name may not repeat inside one category (list-style catalog input).
- A mapping may only connect fields of compatible types.
- Every mapping must point at fields that exist on both sides, and its
  fieldType must match the section of the provider field.

All problems are collected and raised together so an operator can fix
everything in one pass.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

import structlog

from provider_bridge.gateway.errors import MappingValidationError
from provider_bridge.gateway.schema import (
    FieldType,
    FlattenedField,
    FlattenedSchema,
    MappingRecord,
    NormalizedType,
    ParameterSchema,
    field_type_for_path,
    flatten_schema,
    is_valid_mapping,
    type_mismatch_message,
)

logger = structlog.get_logger(__name__)

SchemaInput = Union[ParameterSchema, Dict[str, Any], None]

CATEGORY_LABELS = {
    "headers": "headers",
    "body": "body",
    "query": "query",
    "parameters": "URL parameters",
}


def _names(section: Any) -> List[str]:
    if isinstance(section, dict):
        return [str(name) for name in section.keys()]
    if isinstance(section, list):
        return [
            str(item["name"]) for item in section
            if isinstance(item, dict) and item.get("name")
        ]
    return []


def category_names(schema: SchemaInput) -> Dict[str, List[str]]:
    """Parameter names per category, in catalog order, repeats kept."""
    if schema is None:
        return {category: [] for category in CATEGORY_LABELS}

    if isinstance(schema, ParameterSchema):
        return {
            "headers": list(schema.headers),
            "body": list(schema.body.data),
            "query": list(schema.query),
            "parameters": list(schema.path_params),
        }

    body = schema.get("body") or {}
    if isinstance(body, dict):
        body_section = body.get("data") or body.get("properties") or {}
    else:
        body_section = body

    path_section = schema.get("parameters")
    if path_section is None:
        path_section = schema.get("pathParams")

    return {
        "headers": _names(schema.get("headers")),
        "body": _names(body_section),
        "query": _names(schema.get("query")),
        "parameters": _names(path_section),
    }


def find_duplicate_parameters(schema: SchemaInput) -> List[str]:
    """
    Names used in more than one category of the same schema.

    Args:
        schema: Parsed schema or raw catalog JSON

    Returns:
        Every offending name, in first-seen order
    """
    seen_in: Dict[str, set] = {}
    order: List[str] = []
    for category, names in category_names(schema).items():
        for name in names:
            if name not in seen_in:
                seen_in[name] = set()
                order.append(name)
            seen_in[name].add(category)
    return [name for name in order if len(seen_in[name]) > 1]


def find_duplicates_within_categories(schema: SchemaInput) -> Dict[str, List[str]]:
    """Names repeated inside a single category."""
    result: Dict[str, List[str]] = {}
    for category, names in category_names(schema).items():
        counts = Counter(names)
        repeated: List[str] = []
        for name in names:
            if counts[name] > 1 and name not in repeated:
                repeated.append(name)
        result[category] = repeated
    return result


def duplicate_parameter_errors(schema: SchemaInput) -> List[str]:
    errors = [
        f"Parameter name '{name}' is used in multiple parameter types "
        f"(headers, body, query, or parameters). Each parameter name must be unique."
        for name in find_duplicate_parameters(schema)
    ]
    for category, names in find_duplicates_within_categories(schema).items():
        if names:
            errors.append(
                f"Duplicate parameter names in {CATEGORY_LABELS[category]}: {', '.join(names)}"
            )
    return errors


def validate_schema(schema: SchemaInput) -> ParameterSchema:
    """
    Validate a schema for duplicate names and parse it.

    Raises:
        MappingValidationError: listing every duplicate found
    """
    errors = duplicate_parameter_errors(schema)
    if errors:
        raise MappingValidationError("Duplicate parameter names found", errors)
    if isinstance(schema, ParameterSchema):
        return schema
    return ParameterSchema.from_catalog(schema)


def check_mapping_types(source_type: Any, target_type: Any) -> Optional[str]:
    """Return an error message when two field types cannot be mapped, else None."""
    if is_valid_mapping(source_type, target_type):
        return None
    return type_mismatch_message(source_type, target_type)


@dataclass
class CompiledMappings:
    """Result of a successful compilation."""

    mappings: List[MappingRecord]
    provider: FlattenedSchema
    canonical: FlattenedSchema
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mappings": [record.to_dict() for record in self.mappings],
            "provider": self.provider.to_dict(),
            "canonical": self.canonical.to_dict(),
            "warnings": list(self.warnings),
        }


def _resolve_field(flat: FlattenedSchema, path: str) -> Optional[FlattenedField]:
    """
    Find the schema field a mapping path addresses.

    A path may reach below a declared object/any field
    (`body.data.config.temperature` under `body.data.config`); the nested
    part is untyped.
    """
    exact = flat.find(path)
    if exact is not None:
        return exact

    best: Optional[FlattenedField] = None
    for item in flat.all_fields():
        if not path.startswith(item.path + "."):
            continue
        if item.type not in (NormalizedType.OBJECT, NormalizedType.ANY):
            continue
        if best is None or len(item.path) > len(best.path):
            best = item

    if best is None:
        return None
    return FlattenedField(
        name=path.rsplit(".", 1)[-1],
        path=path,
        type=NormalizedType.ANY,
        required=False,
    )


def _section_of(flat: FlattenedSchema, path: str) -> Optional[FieldType]:
    field_type = flat.field_type_of(path)
    if field_type is not None:
        return field_type
    return field_type_for_path(path)


def compile_mappings(
    records: Iterable[Union[MappingRecord, Dict[str, Any]]],
    provider_schema: SchemaInput,
    canonical_schema: SchemaInput,
) -> CompiledMappings:
    """
    Validate a mapping table against the schemas it connects.

    Args:
        records: Mapping records (models or raw `{fromField, toField, fieldType}`)
        provider_schema: Schema of the provider endpoint
        canonical_schema: Default-parameter schema callers speak

    Returns:
        CompiledMappings with flattened schemas and non-fatal warnings

    Raises:
        MappingValidationError: with every schema and mapping problem found
    """
    errors: List[str] = []
    errors.extend(f"Provider schema: {msg}" for msg in duplicate_parameter_errors(provider_schema))
    errors.extend(f"Default parameters: {msg}" for msg in duplicate_parameter_errors(canonical_schema))

    provider = flatten_schema(
        provider_schema if isinstance(provider_schema, ParameterSchema)
        else ParameterSchema.from_catalog(provider_schema)
    )
    canonical = flatten_schema(
        canonical_schema if isinstance(canonical_schema, ParameterSchema)
        else ParameterSchema.from_catalog(canonical_schema)
    )

    mappings: List[MappingRecord] = []
    for index, raw in enumerate(records, start=1):
        try:
            record = raw if isinstance(raw, MappingRecord) else MappingRecord.model_validate(raw)
        except ValueError as e:
            errors.append(f"Mapping #{index}: invalid record ({e})")
            continue
        mappings.append(record)

        provider_field = _resolve_field(provider, record.from_field)
        canonical_field = _resolve_field(canonical, record.to_field)

        if provider_field is None:
            errors.append(
                f"Mapping #{index}: provider field '{record.from_field}' does not exist"
            )
        if canonical_field is None:
            errors.append(
                f"Mapping #{index}: default parameter '{record.to_field}' does not exist"
            )
        if provider_field is None or canonical_field is None:
            continue

        mismatch = check_mapping_types(provider_field.type, canonical_field.type)
        if mismatch:
            errors.append(f"Mapping #{index}: {mismatch}")

        section = _section_of(provider, record.from_field)
        if section is not None and section != record.field_type:
            errors.append(
                f"Mapping #{index}: fieldType '{record.field_type.value}' does not match "
                f"provider field section '{section.value}'"
            )

    warnings: List[str] = []
    counts = Counter(record.from_field for record in mappings)
    for from_field, count in counts.items():
        if count > 1:
            warnings.append(
                f"Provider field '{from_field}' is mapped {count} times; the last mapping wins"
            )

    if errors:
        logger.info("Mapping compilation failed", error_count=len(errors))
        raise MappingValidationError("Mapping validation failed", errors)

    return CompiledMappings(
        mappings=mappings,
        provider=provider,
        canonical=canonical,
        warnings=warnings,
    )
