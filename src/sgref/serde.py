"""Shared validation utilities for to_dict / from_dict round-trips."""

from collections.abc import Mapping


def as_str_object_dict(value: object, *, field_name: str) -> dict[str, object]:
    """Validate and normalize a mapping value into ``dict[str, object]``."""
    if not isinstance(value, Mapping):
        msg = f"{field_name} must be a mapping."
        raise TypeError(msg)
    return {str(key): item for key, item in value.items()}


def require_string(value: object, *, field_name: str) -> str:
    """Validate a required string field."""
    if not isinstance(value, str):
        msg = f"{field_name} must be a string."
        raise TypeError(msg)
    return value


def optional_string(value: object, *, field_name: str) -> str | None:
    """Validate an optional string field."""
    if value is None:
        return None
    if not isinstance(value, str):
        msg = f"{field_name} must be a string or None."
        raise TypeError(msg)
    return value


def optional_int(value: object, *, field_name: str) -> int | None:
    """Validate an optional integer field (rejects booleans)."""
    if value is None:
        return None
    if not isinstance(value, int) or isinstance(value, bool):
        msg = f"{field_name} must be an int or None."
        raise TypeError(msg)
    return value


def optional_float(value: object, *, field_name: str) -> float | None:
    """Validate an optional float field (rejects booleans)."""
    if value is None:
        return None
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        msg = f"{field_name} must be a float or None."
        raise TypeError(msg)
    return float(value)


def string_mapping(value: object, *, field_name: str) -> dict[str, str] | None:
    """Validate an optional mapping of strings to strings."""
    if value is None:
        return None
    if not isinstance(value, Mapping):
        msg = f"{field_name} must be a mapping or None."
        raise TypeError(msg)

    result: dict[str, str] = {}
    for key, item in value.items():
        if not isinstance(item, str):
            msg = f"{field_name}[{key!r}] must be a string."
            raise TypeError(msg)
        result[str(key)] = item
    return result
