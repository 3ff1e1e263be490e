"""
Parameter Type Normalization.

Catalog data describes parameter types loosely ("json", "integer",
"email", "timestamp", ...). Everything is folded into six canonical
types before it is stored or compared. Unrecognized names fall back to
"string" so that malformed catalog entries never break a request.
"""

from enum import Enum
from typing import Any, Dict, Optional


class NormalizedType(str, Enum):
    """The canonical parameter types."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    ANY = "any"


_TYPE_MAP: Dict[str, NormalizedType] = {
    "json": NormalizedType.OBJECT,
    "object": NormalizedType.OBJECT,
    "array": NormalizedType.ARRAY,
    "string": NormalizedType.STRING,
    "number": NormalizedType.NUMBER,
    "boolean": NormalizedType.BOOLEAN,
    "any": NormalizedType.ANY,
    "integer": NormalizedType.NUMBER,
    "float": NormalizedType.NUMBER,
    "double": NormalizedType.NUMBER,
    "text": NormalizedType.STRING,
    "email": NormalizedType.STRING,
    "url": NormalizedType.STRING,
    "date": NormalizedType.STRING,
    "datetime": NormalizedType.STRING,
    "timestamp": NormalizedType.STRING,
}


def normalize_type(raw_type: Optional[Any]) -> NormalizedType:
    """
    Canonicalize a loosely-specified type name.

    Args:
        raw_type: Type name from catalog data (any case), or None

    Returns:
        One of the six NormalizedType members; "string" when unrecognized
    """
    if isinstance(raw_type, NormalizedType):
        return raw_type
    if not isinstance(raw_type, str):
        return NormalizedType.STRING
    return _TYPE_MAP.get(raw_type.strip().lower(), NormalizedType.STRING)


def is_valid_mapping(source_type: Any, target_type: Any) -> bool:
    """Two fields may be mapped when either side is "any" or both types match."""
    source = normalize_type(source_type)
    target = normalize_type(target_type)
    return (
        source == NormalizedType.ANY
        or target == NormalizedType.ANY
        or source == target
    )


def type_mismatch_message(source_type: Any, target_type: Any) -> str:
    source = normalize_type(source_type).value
    target = normalize_type(target_type).value
    return (
        f"Type mismatch: Cannot map {source} to {target}. "
        f"Both fields must have the same type or one must be \"any\"."
    )
