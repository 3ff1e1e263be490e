"""
Parameter Schema Models.

Normalized representation of the parameter sets stored in the catalog.
The same shape describes both what a provider endpoint accepts (the
provider schema) and what callers speak (the canonical schema, a.k.a.
"default parameters").

Catalog JSON is loose; these models accept it as stored:

    {
        "headers": {"Authorization": {"type": "string", "required": true}},
        "body": {
            "type": "json",
            "data": {"prompt": {"type": "text", "required": true}}
        },
        "query": {},
        "parameters": {"id": {"type": "string", "required": true}}
    }

Types are normalized on ingestion, field names default to their map key,
and a category may also be given as a list of fields.
"""

import copy
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from provider_bridge.gateway.schema.types import NormalizedType, normalize_type


class ParameterField(BaseModel):
    """A single typed parameter."""

    model_config = ConfigDict(extra="ignore")

    name: str = ""
    type: NormalizedType = NormalizedType.STRING
    required: bool = False
    placeholder: Optional[str] = None
    description: Optional[str] = None

    @field_validator("type", mode="before")
    @classmethod
    def _normalize(cls, value: Any) -> NormalizedType:
        return normalize_type(value)

    @field_validator("required", mode="before")
    @classmethod
    def _coerce_required(cls, value: Any) -> bool:
        return bool(value) if value is not None else False


def _coerce_fields(value: Any) -> Dict[str, Any]:
    """Accept a name -> field map, a list of fields, or a name -> type-name map."""
    if value is None:
        return {}

    if isinstance(value, list):
        fields: Dict[str, Any] = {}
        for item in value:
            if isinstance(item, dict) and item.get("name"):
                fields[str(item["name"])] = item
        return fields

    if not isinstance(value, dict):
        return {}

    fields = {}
    for key, raw in value.items():
        if isinstance(raw, ParameterField):
            item = raw.model_dump()
        elif isinstance(raw, dict):
            item = dict(raw)
        elif isinstance(raw, str):
            item = {"type": raw}
        else:
            item = {}
        if not item.get("name"):
            item["name"] = key
        fields[key] = item
    return fields


class BodyKind(str, Enum):
    """Encoding of the request body."""

    JSON = "json"
    FORM = "form"
    URLENCODED = "urlencoded"


_BODY_KIND_ALIASES: Dict[str, BodyKind] = {
    "json": BodyKind.JSON,
    "raw": BodyKind.JSON,
    "application/json": BodyKind.JSON,
    "form": BodyKind.FORM,
    "form-data": BodyKind.FORM,
    "multipart": BodyKind.FORM,
    "multipart/form-data": BodyKind.FORM,
    "urlencoded": BodyKind.URLENCODED,
    "x-www-form-urlencoded": BodyKind.URLENCODED,
    "application/x-www-form-urlencoded": BodyKind.URLENCODED,
}


class BodySpec(BaseModel):
    """
    Body section of a parameter schema.

    Entries live under `data`. The object-style variant
    (`properties` + parent-level `required: [names]`) is accepted as well;
    `style` records which one the catalog used so flattened paths match
    what the catalog author sees.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    kind: Optional[BodyKind] = Field(
        default=None,
        validation_alias=AliasChoices("type", "kind", "bodyKind"),
    )
    data: Dict[str, ParameterField] = Field(default_factory=dict)
    required: List[str] = Field(default_factory=list)
    style: str = "data"

    @model_validator(mode="before")
    @classmethod
    def _accept_properties(cls, value: Any) -> Any:
        if isinstance(value, BaseModel):
            value = value.model_dump()
        if not isinstance(value, dict):
            return {}
        value = dict(value)
        if not value.get("data") and isinstance(value.get("properties"), dict):
            value["data"] = value.pop("properties")
            value["style"] = "properties"
        if not isinstance(value.get("required"), list):
            value.pop("required", None)
        return value

    @field_validator("kind", mode="before")
    @classmethod
    def _normalize_kind(cls, value: Any) -> Optional[BodyKind]:
        if isinstance(value, BodyKind):
            return value
        if not isinstance(value, str):
            return None
        return _BODY_KIND_ALIASES.get(value.strip().lower())

    @field_validator("data", mode="before")
    @classmethod
    def _coerce_data(cls, value: Any) -> Dict[str, Any]:
        return _coerce_fields(value)

    def is_required(self, name: str) -> bool:
        entry = self.data.get(name)
        return name in self.required or bool(entry and entry.required)


class ParameterSchema(BaseModel):
    """Headers, body, query and path parameters accepted by one endpoint."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    headers: Dict[str, ParameterField] = Field(default_factory=dict)
    body: BodySpec = Field(default_factory=BodySpec)
    query: Dict[str, ParameterField] = Field(default_factory=dict)
    path_params: Dict[str, ParameterField] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("parameters", "pathParams", "path_params"),
    )

    @field_validator("headers", "query", "path_params", mode="before")
    @classmethod
    def _coerce_category(cls, value: Any) -> Dict[str, Any]:
        return _coerce_fields(value)

    @field_validator("body", mode="before")
    @classmethod
    def _coerce_body(cls, value: Any) -> Any:
        return value if value is not None else {}

    @classmethod
    def from_catalog(cls, raw: Optional[Dict[str, Any]]) -> "ParameterSchema":
        return cls.model_validate(raw or {})

    def to_catalog_dict(self) -> Dict[str, Any]:
        """Render back into the catalog's JSON shape."""

        def dump(fields: Dict[str, ParameterField]) -> Dict[str, Any]:
            return {
                name: item.model_dump(mode="json", exclude_none=True)
                for name, item in fields.items()
            }

        body: Dict[str, Any] = {
            "type": self.body.kind.value if self.body.kind else None,
            "data": dump(self.body.data),
        }
        if self.body.required:
            body["required"] = list(self.body.required)

        return {
            "headers": dump(self.headers),
            "body": body,
            "query": dump(self.query),
            "parameters": dump(self.path_params),
        }


@dataclass
class FlattenedField:
    """A schema field addressed by its dotted path, e.g. `body.data.temperature`."""

    name: str
    path: str
    type: NormalizedType
    required: bool
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["type"] = self.type.value
        return data


class FieldType(str, Enum):
    """Mapping target category."""

    PARAMETER = "parameter"
    HEADER = "header"
    BODY = "body"
    QUERY = "query"

    @property
    def bucket(self) -> str:
        """Name of the TransformedRequest bucket this category writes to."""
        return _BUCKETS[self]


_BUCKETS = {
    FieldType.PARAMETER: "parameters",
    FieldType.HEADER: "headers",
    FieldType.BODY: "body",
    FieldType.QUERY: "query",
}

_SECTION_PREFIXES = {
    FieldType.PARAMETER: ("parameters", "pathParams", "parameter"),
    FieldType.HEADER: ("headers", "header"),
    FieldType.BODY: ("body",),
    FieldType.QUERY: ("query",),
}

_BODY_WRAPPERS = ("data", "properties")


def field_type_for_path(path: str) -> Optional[FieldType]:
    """Category implied by the first segment of a schema address."""
    head = path.split(".", 1)[0]
    for field_type, prefixes in _SECTION_PREFIXES.items():
        if head in prefixes:
            return field_type
    return None


def wire_path(path: str, field_type: FieldType) -> str:
    """
    Convert a schema address into a location inside a request bucket.

    `body.data.input` -> `input`, `headers.x-trace` -> `x-trace`,
    `query.limit` -> `limit`. Paths without a section prefix are already
    bucket-relative.

    The schema address is not the wire location: a value mapped to
    `body.data.prompt` is sent as `{"prompt": ...}` and read back with
    `TransformedRequest.get_field("body.data.prompt")`.
    """
    parts = [part for part in path.split(".") if part]
    if len(parts) > 1 and parts[0] in _SECTION_PREFIXES[field_type]:
        parts = parts[1:]
        if field_type == FieldType.BODY and len(parts) > 1 and parts[0] in _BODY_WRAPPERS:
            parts = parts[1:]
    return ".".join(parts)


class MappingRecord(BaseModel):
    """
    One field correspondence.

    `from_field` is the provider-side dotted path (where the value is
    written), `to_field` the canonical-side dotted path (where the value
    is read from the inbound request).
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    from_field: str = Field(validation_alias=AliasChoices("fromField", "from_field"))
    to_field: str = Field(validation_alias=AliasChoices("toField", "to_field"))
    field_type: FieldType = Field(
        default=FieldType.BODY,
        validation_alias=AliasChoices("fieldType", "field_type"),
    )
    transformation: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "fromField": self.from_field,
            "toField": self.to_field,
            "fieldType": self.field_type.value,
        }
        if self.transformation:
            data["transformation"] = self.transformation
        return data


class MappingSet(BaseModel):
    """An adapter: ordered mapping records between one endpoint and one canonical schema."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    name: str = ""
    provider_endpoint_id: str = Field(
        validation_alias=AliasChoices("providerEndpointId", "provider_endpoint_id")
    )
    default_parameter_id: str = Field(
        validation_alias=AliasChoices("defaultParameterId", "default_parameter_id")
    )
    mappings: List[MappingRecord] = Field(default_factory=list)
    is_active: bool = Field(
        default=True,
        validation_alias=AliasChoices("isActive", "is_active"),
    )


REQUEST_BUCKETS = ("body", "headers", "parameters", "query")


@dataclass
class TransformedRequest:
    """Provider-shaped request under construction."""

    body: Dict[str, Any] = field(default_factory=dict)
    headers: Dict[str, Any] = field(default_factory=dict)
    parameters: Dict[str, Any] = field(default_factory=dict)
    query: Dict[str, Any] = field(default_factory=dict)

    def bucket(self, name: str) -> Dict[str, Any]:
        if name not in REQUEST_BUCKETS:
            raise KeyError(f"Unknown request bucket: {name}")
        return getattr(self, name)

    def get_field(self, path: str, default: Any = None) -> Any:
        """
        Read a value by its schema address, e.g. `body.data.prompt`.

        Returns `default` when the address does not resolve.
        """
        field_type = field_type_for_path(path)
        if field_type is None:
            return default
        value: Any = self.bucket(field_type.bucket)
        for part in wire_path(path, field_type).split("."):
            if not isinstance(value, dict) or part not in value:
                return default
            value = value[part]
        return value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "body": self.body,
            "headers": self.headers,
            "parameters": self.parameters,
            "query": self.query,
        }

    def copy(self) -> "TransformedRequest":
        return TransformedRequest(**copy.deepcopy(self.to_dict()))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TransformedRequest":
        return cls(**{
            name: dict(data.get(name) or {}) for name in REQUEST_BUCKETS
        })
