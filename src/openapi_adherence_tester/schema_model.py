"""Recognised JSON-Schema vocabulary and shape helpers shared by all engines."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any, Optional

from .json_types import JSONValue, Schema

MAX_SAFE_INTEGER = 2**53 - 1
MIN_SAFE_INTEGER = -MAX_SAFE_INTEGER


class DataType(str, Enum):
    """Values of ``schema.type`` the engines understand."""

    BOOLEAN = "boolean"
    INTEGER = "integer"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"


class SchemaFormat(str, Enum):
    """String formats with generation and validation support."""

    EMAIL = "email"
    UUID = "uuid"
    URI = "uri"
    IPV4 = "ipv4"
    IPV6 = "ipv6"


SUPPORTED_FORMATS = ", ".join(item.value for item in SchemaFormat)
SUPPORTED_TYPES = ", ".join(item.value for item in DataType)


def schema_type(schema: Schema) -> Optional[DataType]:
    """Return the declared type of a schema node, or ``None`` if unknown."""
    raw = schema.get("type")
    if not isinstance(raw, str):
        return None
    try:
        return DataType(raw)
    except ValueError:
        return None


def schema_format(schema: Schema) -> Optional[SchemaFormat]:
    """Return the declared string format, or ``None`` if unsupported or absent."""
    raw = schema.get("format")
    if not isinstance(raw, str):
        return None
    try:
        return SchemaFormat(raw)
    except ValueError:
        return None


def one_of(schema: Schema) -> Optional[list[Schema]]:
    """Return the ``oneOf`` alternatives that are schema mappings."""
    raw = schema.get("oneOf")
    if not isinstance(raw, list):
        return None
    return [item for item in raw if isinstance(item, Mapping)]


def enum_values(schema: Schema) -> Optional[list[JSONValue]]:
    """Return the ``enum`` list when a non-empty one is declared."""
    raw = schema.get("enum")
    if not isinstance(raw, list) or not raw:
        return None
    return list(raw)


def properties(schema: Schema) -> Optional[Mapping[str, Schema]]:
    """Return ``properties`` when it is a mapping."""
    raw = schema.get("properties")
    if not isinstance(raw, Mapping):
        return None
    return raw


def required_keys(schema: Schema) -> list[str]:
    """Return the names listed in ``required``."""
    raw = schema.get("required")
    if not isinstance(raw, list):
        return []
    return [name for name in raw if isinstance(name, str)]


def items_schema(schema: Schema) -> Optional[Schema]:
    """Return the ``items`` schema of an array node."""
    raw = schema.get("items")
    if not isinstance(raw, Mapping):
        return None
    return raw


def numeric_bound(schema: Schema, key: str) -> Optional[float]:
    """Return a numeric bound, treating ``0`` as a defined bound."""
    raw = schema.get(key)
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return None
    return raw


def length_bound(schema: Schema, key: str) -> Optional[int]:
    """Return ``minLength``/``maxLength`` when declared as a non-negative integer."""
    raw = schema.get(key)
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 0:
        return None
    return raw


def is_number(value: Any) -> bool:
    """Return whether a value is a JSON number (booleans excluded)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_whole_number(value: Any) -> bool:
    """Return whether a value is a JSON number without a fractional part."""
    if not is_number(value):
        return False
    if isinstance(value, float):
        return value.is_integer()
    return True


def is_sequence(value: Any) -> bool:
    """Return whether a value is a JSON array."""
    return isinstance(value, (list, tuple))


def json_type_name(value: Any) -> str:
    """Name the JSON shape of a runtime value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return DataType.BOOLEAN.value
    if isinstance(value, int):
        return DataType.INTEGER.value
    if isinstance(value, float):
        return DataType.NUMBER.value
    if isinstance(value, str):
        return DataType.STRING.value
    if is_sequence(value):
        return DataType.ARRAY.value
    if isinstance(value, Mapping):
        return DataType.OBJECT.value
    return type(value).__name__


def matches_type(value: Any, data_type: DataType) -> bool:
    """Return whether ``value`` has the JSON shape declared by ``data_type``."""
    if data_type is DataType.BOOLEAN:
        return isinstance(value, bool)
    if data_type is DataType.INTEGER:
        return is_whole_number(value)
    if data_type is DataType.NUMBER:
        return is_number(value)
    if data_type is DataType.STRING:
        return isinstance(value, str)
    if data_type is DataType.ARRAY:
        return is_sequence(value)
    return isinstance(value, Mapping)


def strict_equals(left: Any, right: Any) -> bool:
    """Compare two JSON values without letting booleans equal numbers."""
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    return left == right
