"""Serialization utilities."""

from dataclasses import asdict, is_dataclass
from datetime import datetime
from enum import Enum


def _serialize_value(value):
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _serialize_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_serialize_value(v) for v in value]
    return value


def serialize_dataclass(obj) -> dict:
    """Serialize a dataclass to dict, converting datetimes to ISO strings.

    Nested dataclasses, lists and dicts are walked recursively; enums are
    replaced by their values.
    """
    if not is_dataclass(obj):
        raise TypeError(f"Expected a dataclass instance, got {type(obj).__name__}")
    return {key: _serialize_value(value) for key, value in asdict(obj).items()}


def to_camel_case(name: str) -> str:
    """Convert a snake_case field name to the camelCase used by the article API."""
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)
