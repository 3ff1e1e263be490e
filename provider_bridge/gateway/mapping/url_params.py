"""
URL Parameter Detection.

Recognizes parameters embedded in an endpoint URL template:

- path placeholders at the start of a segment: `/users/:userId` or `/users/{userId}`
- query-string keys after `?`: `/search?limit=10&page=1`

Detection is pure and idempotent. Reconciling a template change against
the parameters already configured is an explicit two-snapshot diff: the
caller passes the previously known parameter names, gets back what was
added and what was removed, and decides what to do with the removals.
Added parameters are created in the schema (path parameters required,
query parameters optional, both typed "string"); removed ones are only
reported.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qsl, urlsplit

import structlog

from provider_bridge.gateway.errors import BadRequestError
from provider_bridge.gateway.schema import (
    NormalizedType,
    ParameterField,
    ParameterSchema,
)

logger = structlog.get_logger(__name__)

# `:name` must open a path segment so that verbs like `models/x:generateContent` are not parameters
COLON_PARAM_PATTERN = re.compile(r"(?<=/):([A-Za-z][A-Za-z0-9_]*)")
BRACE_PARAM_PATTERN = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")
PATH_PARAM_PATTERN = re.compile(f"{COLON_PARAM_PATTERN.pattern}|{BRACE_PARAM_PATTERN.pattern}")

PATH_PARAMETER = "parameter"
QUERY_PARAMETER = "query"


@dataclass
class DetectedParameter:
    """A parameter found in a URL template."""

    name: str
    request_type: str  # parameter / query
    type: str = NormalizedType.STRING.value
    required: bool = True
    placeholder: str = ""
    description: str = ""

    def to_field(self) -> ParameterField:
        return ParameterField(
            name=self.name,
            type=self.type,
            required=self.required,
            placeholder=self.placeholder,
            description=self.description,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "required": self.required,
            "placeholder": self.placeholder,
            "description": self.description,
            "requestType": self.request_type,
        }


def _humanize(name: str) -> str:
    return re.sub(r"([A-Z])", r" \1", name).replace("_", " ").strip().lower()


def is_valid_url(url: Optional[str]) -> bool:
    """
    Check that a URL template is well formed.

    Absolute templates need an http(s) scheme and a host; relative ones
    must start with "/". Placeholders are allowed anywhere in the path.
    """
    if not url or not isinstance(url, str):
        return False
    if any(ch.isspace() for ch in url):
        return False

    try:
        parts = urlsplit(url)
        # Accessing .port validates it
        parts.port
    except ValueError:
        return False

    if parts.scheme:
        return parts.scheme in ("http", "https") and bool(parts.hostname)
    return url.startswith("/") and not url.startswith("//")


def _require_valid(url: str) -> None:
    if not is_valid_url(url):
        raise BadRequestError(
            "Invalid URL format",
            details={"url": url},
        )


def extract_path_parameter_names(url: str) -> List[str]:
    """Path placeholder names in template order, repeats kept."""
    return [
        match.group(1) or match.group(2)
        for match in PATH_PARAM_PATTERN.finditer(urlsplit(url).path)
    ]


def find_duplicate_url_parameters(url: str) -> List[str]:
    """Path placeholders that appear more than once in one template."""
    _require_valid(url)
    seen = set()
    duplicates: List[str] = []
    for name in extract_path_parameter_names(url):
        if name in seen and name not in duplicates:
            duplicates.append(name)
        seen.add(name)
    return duplicates


def detect_url_parameters(url: str) -> List[DetectedParameter]:
    """
    Detect path and query parameters in a URL template.

    Args:
        url: Endpoint URL template

    Returns:
        Path parameters (required) followed by query parameters (optional),
        each name once

    Raises:
        BadRequestError: If the template is not a valid URL
    """
    _require_valid(url)

    detected: List[DetectedParameter] = []
    names = set()

    for name in extract_path_parameter_names(url):
        if name in names:
            continue
        names.add(name)
        label = _humanize(name)
        detected.append(DetectedParameter(
            name=name,
            request_type=PATH_PARAMETER,
            required=True,
            placeholder=f"Enter {label}",
            description=f"{label} parameter from URL path",
        ))

    for key, _ in parse_qsl(urlsplit(url).query, keep_blank_values=True):
        if key in names:
            continue
        names.add(key)
        detected.append(DetectedParameter(
            name=key,
            request_type=QUERY_PARAMETER,
            required=False,
            placeholder=f"Enter {key}",
            description=f"{key} query parameter",
        ))

    return detected


@dataclass
class UrlParameterSnapshot:
    """Parameter names known at one point in time."""

    path_params: List[str] = field(default_factory=list)
    query: List[str] = field(default_factory=list)

    @classmethod
    def from_url(cls, url: str) -> "UrlParameterSnapshot":
        detected = detect_url_parameters(url)
        return cls(
            path_params=[p.name for p in detected if p.request_type == PATH_PARAMETER],
            query=[p.name for p in detected if p.request_type == QUERY_PARAMETER],
        )

    @classmethod
    def from_schema(cls, schema: ParameterSchema) -> "UrlParameterSnapshot":
        return cls(path_params=list(schema.path_params), query=list(schema.query))


@dataclass
class UrlParameterDiff:
    """Symmetric difference between two snapshots."""

    added_path_params: List[str] = field(default_factory=list)
    removed_path_params: List[str] = field(default_factory=list)
    added_query: List[str] = field(default_factory=list)
    removed_query: List[str] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(
            self.added_path_params or self.removed_path_params
            or self.added_query or self.removed_query
        )

    def to_dict(self) -> Dict[str, Dict[str, List[str]]]:
        return {
            "added": {"parameters": self.added_path_params, "query": self.added_query},
            "removed": {"parameters": self.removed_path_params, "query": self.removed_query},
        }


def diff_url_parameters(
    old: UrlParameterSnapshot,
    new: UrlParameterSnapshot,
) -> UrlParameterDiff:
    """Compare two snapshots; order follows the snapshot each name comes from."""
    return UrlParameterDiff(
        added_path_params=[n for n in new.path_params if n not in old.path_params],
        removed_path_params=[n for n in old.path_params if n not in new.path_params],
        added_query=[n for n in new.query if n not in old.query],
        removed_query=[n for n in old.query if n not in new.query],
    )


@dataclass
class UrlDetectionResult:
    """Outcome of reconciling a template with a schema."""

    schema: ParameterSchema
    detected: List[DetectedParameter]
    diff: UrlParameterDiff

    def to_dict(self) -> Dict[str, Any]:
        data = self.diff.to_dict()
        data["detected"] = [p.to_dict() for p in self.detected]
        data["schema"] = self.schema.to_catalog_dict()
        return data


def apply_url_parameters(
    url: str,
    schema: Optional[ParameterSchema] = None,
    previous: Optional[UrlParameterSnapshot] = None,
) -> UrlDetectionResult:
    """
    Reconcile a (possibly changed) URL template with a provider schema.

    Newly detected parameters are added to a copy of the schema. Parameters
    present in `previous` but gone from the template are reported in the
    diff and left in the schema for the operator to confirm.

    Args:
        url: The current URL template
        schema: Provider schema to update (empty when omitted)
        previous: Prior snapshot; derived from the schema when omitted

    Raises:
        BadRequestError: If the template is not a valid URL
    """
    detected = detect_url_parameters(url)
    schema = schema.model_copy(deep=True) if schema is not None else ParameterSchema()
    if previous is None:
        previous = UrlParameterSnapshot.from_schema(schema)

    current = UrlParameterSnapshot(
        path_params=[p.name for p in detected if p.request_type == PATH_PARAMETER],
        query=[p.name for p in detected if p.request_type == QUERY_PARAMETER],
    )
    diff = diff_url_parameters(previous, current)

    for param in detected:
        target = schema.path_params if param.request_type == PATH_PARAMETER else schema.query
        if param.name not in target:
            target[param.name] = param.to_field()

    if diff.has_changes:
        logger.info(
            "URL parameters changed",
            added_path_params=diff.added_path_params,
            removed_path_params=diff.removed_path_params,
            added_query=diff.added_query,
            removed_query=diff.removed_query,
        )

    return UrlDetectionResult(schema=schema, detected=detected, diff=diff)
