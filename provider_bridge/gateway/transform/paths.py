"""
Dotted-path access over loosely-typed JSON trees.

Each segment is an object-key traversal; arrays are not indexed.
"""

from typing import Any, Dict, List


class _Missing:
    """Sentinel for a path that does not resolve (distinct from a JSON null)."""

    _instance = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()


def split_path(path: str) -> List[str]:
    return [part for part in path.split(".") if part]


def get_nested(obj: Any, path: str) -> Any:
    """
    Resolve a dotted path.

    Returns:
        The value (which may be None for a JSON null), or MISSING when any
        segment is absent or traverses a non-object
    """
    parts = split_path(path)
    if not parts:
        return MISSING

    value = obj
    for part in parts:
        if isinstance(value, dict) and part in value:
            value = value[part]
        else:
            return MISSING
    return value


def set_nested(obj: Dict[str, Any], path: str, value: Any) -> None:
    """Set a value at a dotted path, creating intermediate objects on demand."""
    parts = split_path(path)
    if not parts:
        raise ValueError("Empty path")

    current = obj
    for part in parts[:-1]:
        if not isinstance(current.get(part), dict):
            current[part] = {}
        current = current[part]

    current[parts[-1]] = value
