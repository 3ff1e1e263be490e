"""
Mapping Package.

Authoring-time validation of parameter schemas and mapping tables, and
detection of parameters embedded in endpoint URL templates.

Usage:
    from provider_bridge.gateway.mapping import compile_mappings, apply_url_parameters

    compiled = compile_mappings(records, provider_schema, canonical_schema)
    result = apply_url_parameters("https://api.example.com/v1/{id}/run", provider_schema)
"""

from provider_bridge.gateway.mapping.compiler import (
    CompiledMappings,
    check_mapping_types,
    compile_mappings,
    duplicate_parameter_errors,
    find_duplicate_parameters,
    find_duplicates_within_categories,
    validate_schema,
)
from provider_bridge.gateway.mapping.url_params import (
    DetectedParameter,
    UrlDetectionResult,
    UrlParameterDiff,
    UrlParameterSnapshot,
    apply_url_parameters,
    detect_url_parameters,
    diff_url_parameters,
    extract_path_parameter_names,
    find_duplicate_url_parameters,
    is_valid_url,
)

__all__ = [
    # Compiler
    "CompiledMappings",
    "check_mapping_types",
    "compile_mappings",
    "duplicate_parameter_errors",
    "find_duplicate_parameters",
    "find_duplicates_within_categories",
    "validate_schema",
    # URL parameters
    "DetectedParameter",
    "UrlDetectionResult",
    "UrlParameterDiff",
    "UrlParameterSnapshot",
    "apply_url_parameters",
    "detect_url_parameters",
    "diff_url_parameters",
    "extract_path_parameter_names",
    "find_duplicate_url_parameters",
    "is_valid_url",
]
