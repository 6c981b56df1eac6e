"""Structured error and deficiency records."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .json_types import JSONValue, MutableJSONObject


class ErrorKind(str, Enum):
    """Taxonomy of validation findings."""

    DATA_TYPE_MISMATCH = "data_type_mismatch"
    OUT_OF_RANGE = "out_of_range"
    REQUIRED_KEY_MISSING = "required_key_missing"
    LIMITED_SUPPORT = "limited_support"
    ENUM = "enum"
    ONE_OF = "one_of"
    LACK_OF_DATA = "lack_of_data"
    EXCESS_OF_DATA = "excess_of_data"
    FORMAT_VIOLATION = "format_violation"
    PATTERN_VIOLATION = "pattern_violation"
    SCHEMA_ERROR = "schema_error"


class DeficiencyCategory(str, Enum):
    """Kinds of single-constraint faults the deficient generator produces."""

    DATA_TYPE = "data_type"
    ENUM = "enum"
    NUMBER_RANGE = "number_range"
    OPTIONAL_KEY = "optional_key"
    REQUIRED_KEY = "required_key"
    STRING_LENGTH = "string_length"


@dataclass(frozen=True)
class ErrorRecord:
    """One constraint violation found by the validator."""

    kind: ErrorKind
    path: str
    value: JSONValue
    details: MutableJSONObject = field(default_factory=dict)

    def to_dict(self) -> MutableJSONObject:
        """Render the record as plain JSON data."""
        return {
            "kind": self.kind.value,
            "path": self.path,
            "value": self.value,
            "details": dict(self.details),
        }


@dataclass(frozen=True)
class Deficiency:
    """A value that differs from a conformant one by exactly one constraint."""

    category: DeficiencyCategory
    path: str
    value: JSONValue
    details: MutableJSONObject = field(default_factory=dict)
