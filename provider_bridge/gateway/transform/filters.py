"""
Value transformations for mapping records.

A mapping record may name one transformation, written `name` or
`name:arg`, applied to the resolved value before it is written. Only the
filters in ALLOWED_FILTERS exist; there is no expression evaluation.
"""

import json
from typing import Any, Callable, Dict, Optional, Tuple

import structlog

logger = structlog.get_logger(__name__)


def _parse_literal(arg: Optional[str]) -> Any:
    if arg is None:
        return None
    try:
        return json.loads(arg)
    except json.JSONDecodeError:
        return arg


def _to_string(value: Any, _: Optional[str]) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def _to_number(value: Any, _: Optional[str]) -> Any:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    try:
        text = str(value).strip()
        return int(text) if text.lstrip("-").isdigit() else float(text)
    except (TypeError, ValueError):
        return value


def _to_boolean(value: Any, _: Optional[str]) -> Any:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    return bool(value)


ALLOWED_FILTERS: Dict[str, Callable[[Any, Optional[str]], Any]] = {
    "default": lambda v, arg: v if v is not None else _parse_literal(arg),
    "json": lambda v, _: json.dumps(v),
    "first": lambda v, _: v[0] if v else None,
    "last": lambda v, _: v[-1] if v else None,
    "length": lambda v, _: len(v) if v else 0,
    "join": lambda v, arg: (arg or ",").join(str(x) for x in v) if v else "",
    "string": _to_string,
    "number": _to_number,
    "boolean": _to_boolean,
    "wrap_array": lambda v, _: v if isinstance(v, list) else [v],
}


def parse_transformation(transformation: str) -> Tuple[str, Optional[str]]:
    if ":" in transformation:
        name, arg = transformation.split(":", 1)
        return name.strip(), arg
    return transformation.strip(), None


def apply_transformation(value: Any, transformation: Optional[str]) -> Any:
    """
    Apply a named transformation to a value.

    Unknown names and filters that fail on the given value leave the value
    unchanged.
    """
    if not transformation:
        return value

    name, arg = parse_transformation(transformation)
    func = ALLOWED_FILTERS.get(name)
    if func is None:
        logger.warning("Unknown mapping transformation", transformation=name)
        return value

    try:
        return func(value, arg)
    except (TypeError, ValueError, KeyError, IndexError) as e:
        logger.warning("Mapping transformation failed", transformation=name, error=str(e))
        return value
