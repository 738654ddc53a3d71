"""Argument checks shared by the tool functions."""

from __future__ import annotations

from typing import Any

from ctx_memory.errors import MalformedArgumentsError


def require_text(field: str, value: Any) -> str:
    """Return ``value`` if it is a non-empty string."""
    if not isinstance(value, str) or not value.strip():
        raise MalformedArgumentsError(f"'{field}' is required and must be a non-empty string")
    return value


def require_str(field: str, value: Any) -> str:
    """Return ``value`` if it is a non-empty string; whitespace is kept as given."""
    if not isinstance(value, str) or value == "":
        raise MalformedArgumentsError(f"'{field}' is required and must be a non-empty string")
    return value


def optional_text(field: str, value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise MalformedArgumentsError(f"'{field}' must be a string")
    return value or None


def optional_text_list(field: str, value: Any) -> list[str] | None:
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise MalformedArgumentsError(f"'{field}' must be an array of strings")
    return value


def optional_mapping(field: str, value: Any) -> dict[str, Any] | None:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise MalformedArgumentsError(f"'{field}' must be an object")
    return value
