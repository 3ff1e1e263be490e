"""
Schema Flattener.

Turns a nested ParameterSchema into flat per-category lists of fields
addressed by dotted paths (`headers.authorization`, `body.data.prompt`,
`query.limit`, `parameters.id`). Mapping validation and fallback-path
lookup work against this flat view.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from provider_bridge.gateway.schema.models import (
    FieldType,
    FlattenedField,
    ParameterField,
    ParameterSchema,
)


@dataclass
class FlattenedSchema:
    """Flat view of a schema, one list per category, catalog order preserved."""

    headers: List[FlattenedField] = field(default_factory=list)
    parameters: List[FlattenedField] = field(default_factory=list)
    body: List[FlattenedField] = field(default_factory=list)
    query: List[FlattenedField] = field(default_factory=list)

    def all_fields(self) -> Iterator[FlattenedField]:
        yield from self.headers
        yield from self.parameters
        yield from self.body
        yield from self.query

    def find(self, path: str) -> Optional[FlattenedField]:
        """Find a field by its dotted path."""
        for item in self.all_fields():
            if item.path == path:
                return item
        return None

    def field_type_of(self, path: str) -> Optional[FieldType]:
        """Mapping category implied by the section a path belongs to."""
        if any(item.path == path for item in self.headers):
            return FieldType.HEADER
        if any(item.path == path for item in self.body):
            return FieldType.BODY
        if any(item.path == path for item in self.query):
            return FieldType.QUERY
        if any(item.path == path for item in self.parameters):
            return FieldType.PARAMETER
        return None

    def to_dict(self) -> Dict[str, List[Dict]]:
        return {
            "headers": [item.to_dict() for item in self.headers],
            "parameters": [item.to_dict() for item in self.parameters],
            "body": [item.to_dict() for item in self.body],
            "query": [item.to_dict() for item in self.query],
        }


def _flatten_section(
    fields: Dict[str, ParameterField],
    prefix: str,
) -> List[FlattenedField]:
    return [
        FlattenedField(
            name=name,
            path=f"{prefix}.{name}",
            type=item.type,
            required=item.required,
            description=item.description,
        )
        for name, item in fields.items()
    ]


def flatten_schema(schema: ParameterSchema) -> FlattenedSchema:
    """
    Flatten a parameter schema into addressable fields.

    Body entries come from `body.data` (or `body.properties` for the
    object-style variant). A body field is required when its own flag is
    set or when it is listed in the parent-level `required` array.
    """
    body_prefix = f"body.{schema.body.style}"
    body = [
        FlattenedField(
            name=name,
            path=f"{body_prefix}.{name}",
            type=item.type,
            required=schema.body.is_required(name),
            description=item.description,
        )
        for name, item in schema.body.data.items()
    ]

    return FlattenedSchema(
        headers=_flatten_section(schema.headers, "headers"),
        parameters=_flatten_section(schema.path_params, "parameters"),
        body=body,
        query=_flatten_section(schema.query, "query"),
    )
