"""
Mapping Authoring Routes.

Stateless checks used while a catalog administrator edits schemas and
mapping tables. Nothing here writes to the catalog.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from provider_bridge.core.dependencies import Caller
from provider_bridge.gateway.errors import BadRequestError, success_envelope
from provider_bridge.gateway.mapping import (
    UrlParameterSnapshot,
    apply_url_parameters,
    compile_mappings,
    find_duplicate_url_parameters,
)
from provider_bridge.gateway.schema import ParameterSchema

router = APIRouter(prefix="/api/v1", tags=["authoring"])


class MappingValidationRequest(BaseModel):
    """Schemas and mapping table to check."""

    model_config = ConfigDict(populate_by_name=True)

    provider_schema: Dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("providerSchema", "provider_schema"),
    )
    canonical_schema: Dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("canonicalSchema", "canonical_schema", "defaultParameters"),
    )
    mappings: List[Dict[str, Any]] = Field(default_factory=list)


class PreviousUrlParameters(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    path_params: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("pathParams", "path_params", "parameters"),
    )
    query: List[str] = Field(default_factory=list)


class UrlDetectionRequest(BaseModel):
    """URL template to inspect, with what was known before the edit."""

    model_config = ConfigDict(populate_by_name=True)

    url: str
    previous: Optional[PreviousUrlParameters] = None
    provider_schema: Optional[Dict[str, Any]] = Field(
        default=None,
        validation_alias=AliasChoices("providerSchema", "provider_schema", "schema"),
    )


@router.post("/mappings/validate")
async def validate_mappings(payload: MappingValidationRequest, caller: Caller):
    """
    Validate schemas and mappings.

    Every duplicate name, unknown field and type mismatch is reported in
    one response.
    """
    compiled = compile_mappings(
        payload.mappings,
        payload.provider_schema,
        payload.canonical_schema,
    )
    return success_envelope(compiled.to_dict(), "Mappings are valid")


@router.post("/url-parameters/detect")
async def detect_url_parameters_route(payload: UrlDetectionRequest, caller: Caller):
    """
    Detect path and query parameters in a URL template.

    Returns the detected parameters, the updated provider schema and the
    names added or removed relative to `previous` (or to the schema).
    """
    duplicates = find_duplicate_url_parameters(payload.url)
    if duplicates:
        raise BadRequestError(
            f"Duplicate URL parameters: {', '.join(duplicates)}",
            details={"duplicates": duplicates},
        )

    schema = (
        ParameterSchema.from_catalog(payload.provider_schema)
        if payload.provider_schema is not None else None
    )
    previous = (
        UrlParameterSnapshot(
            path_params=list(payload.previous.path_params),
            query=list(payload.previous.query),
        )
        if payload.previous is not None else None
    )

    result = apply_url_parameters(payload.url, schema=schema, previous=previous)
    return success_envelope(result.to_dict(), "URL parameters detected")
