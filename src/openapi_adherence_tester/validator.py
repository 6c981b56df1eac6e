"""Validation of JSON values against the recognised schema subset."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

from jsonschema import FormatChecker

from .errors import ErrorKind, ErrorRecord
from .json_types import Schema
from .paths import ROOT, element_path, member_path
from .schema_model import (
    SUPPORTED_FORMATS,
    SUPPORTED_TYPES,
    DataType,
    enum_values,
    items_schema,
    json_type_name,
    length_bound,
    matches_type,
    numeric_bound,
    one_of,
    properties,
    required_keys,
    schema_format,
    schema_type,
    strict_equals,
)

logger = logging.getLogger(__name__)

_FORMAT_CHECKER = FormatChecker()


@dataclass(frozen=True)
class ValidationOptions:
    """Validation switches.

    Attributes:
        strict_validation (bool): Report values that have no schema as
            ``EXCESS_OF_DATA`` instead of accepting them.
    """

    strict_validation: bool = False


class Validator:
    """Check values against schemas and report every violation with its path."""

    def __init__(self, options: Optional[ValidationOptions] = None) -> None:
        self._options = options if options is not None else ValidationOptions()

    def validate(self, value: Any, schema: Optional[Schema], path: str = ROOT) -> list[ErrorRecord]:
        """Validate ``value`` located at ``path`` against ``schema``.

        Args:
            value (Any): Decoded JSON value.
            schema (Optional[Schema]): Dereferenced schema node.
            path (str): Location of ``value`` inside the document.

        Returns:
            list[ErrorRecord]: Violations found; empty when the value conforms.
        """
        if schema is None:
            if self._options.strict_validation:
                return [ErrorRecord(kind=ErrorKind.EXCESS_OF_DATA, path=path, value=value)]
            logger.debug("No schema for %s; accepting undeclared data", path)
            return []

        if value is None:
            return [ErrorRecord(kind=ErrorKind.LACK_OF_DATA, path=path, value=None)]

        alternatives = one_of(schema)
        if alternatives:
            return self._validate_one_of(value, alternatives, path)

        data_type = schema_type(schema)
        if data_type is not None and not matches_type(value, data_type):
            return [
                ErrorRecord(
                    kind=ErrorKind.DATA_TYPE_MISMATCH,
                    path=path,
                    value=value,
                    details={"expected": data_type.value, "actual": json_type_name(value)},
                )
            ]

        members = enum_values(schema)
        if members:
            if any(strict_equals(value, member) for member in members):
                return []
            return [
                ErrorRecord(
                    kind=ErrorKind.ENUM,
                    path=path,
                    value=value,
                    details={"enum": members},
                )
            ]

        if data_type is DataType.BOOLEAN:
            return self._validate_boolean(value, path)
        if data_type in (DataType.INTEGER, DataType.NUMBER):
            return self._validate_number(value, schema, data_type, path)
        if data_type is DataType.STRING:
            return self._validate_string(value, schema, path)
        if data_type is DataType.ARRAY:
            return self._validate_array(value, schema, path)
        if data_type is DataType.OBJECT:
            return self._validate_object(value, schema, path)

        if "type" in schema:
            logger.warning(
                "Limited support at %s: type %r is not one of %s",
                path,
                schema.get("type"),
                SUPPORTED_TYPES,
            )
        return []

    def _validate_one_of(
        self,
        value: Any,
        alternatives: list[Schema],
        path: str,
    ) -> list[ErrorRecord]:
        for index, alternative in enumerate(alternatives):
            errors = self.validate(value, alternative, path)
            if not errors:
                return []
            logger.debug("oneOf alternative %d rejected %s: %d error(s)", index, path, len(errors))
        return [
            ErrorRecord(
                kind=ErrorKind.ONE_OF,
                path=path,
                value=value,
                details={"alternatives": len(alternatives)},
            )
        ]

    @staticmethod
    def _validate_boolean(value: Any, path: str) -> list[ErrorRecord]:
        if value is True or value is False:
            return []
        return [
            ErrorRecord(
                kind=ErrorKind.DATA_TYPE_MISMATCH,
                path=path,
                value=value,
                details={"expected": DataType.BOOLEAN.value, "actual": json_type_name(value)},
            )
        ]

    @staticmethod
    def _validate_number(
        value: Any,
        schema: Schema,
        data_type: DataType,
        path: str,
    ) -> list[ErrorRecord]:
        if data_type is DataType.INTEGER and not matches_type(value, DataType.INTEGER):
            return [
                ErrorRecord(
                    kind=ErrorKind.DATA_TYPE_MISMATCH,
                    path=path,
                    value=value,
                    details={"expected": DataType.INTEGER.value, "actual": json_type_name(value)},
                )
            ]
        minimum = numeric_bound(schema, "minimum")
        maximum = numeric_bound(schema, "maximum")
        below = minimum is not None and value < minimum
        above = maximum is not None and value > maximum
        if below or above:
            return [
                ErrorRecord(
                    kind=ErrorKind.OUT_OF_RANGE,
                    path=path,
                    value=value,
                    details={"minimum": minimum, "maximum": maximum},
                )
            ]
        return []

    @staticmethod
    def _validate_string(value: str, schema: Schema, path: str) -> list[ErrorRecord]:
        # Only the first declared rule applies: format, then pattern, then length.
        raw_format = schema.get("format")
        if raw_format is not None:
            supported = schema_format(schema)
            if supported is None:
                record = ErrorRecord(
                    kind=ErrorKind.LIMITED_SUPPORT,
                    path=path,
                    value=value,
                    details={"format": raw_format, "supported_formats": SUPPORTED_FORMATS},
                )
                logger.warning("Limited support at %s: format %r is not checked", path, raw_format)
                return [record]
            if _FORMAT_CHECKER.conforms(value, supported.value):
                return []
            return [
                ErrorRecord(
                    kind=ErrorKind.FORMAT_VIOLATION,
                    path=path,
                    value=value,
                    details={"format": supported.value},
                )
            ]

        pattern = schema.get("pattern")
        if pattern is not None:
            return _validate_pattern(value, pattern, path)

        min_length = length_bound(schema, "minLength")
        max_length = length_bound(schema, "maxLength")
        too_short = min_length is not None and len(value) < min_length
        too_long = max_length is not None and len(value) > max_length
        if too_short or too_long:
            return [
                ErrorRecord(
                    kind=ErrorKind.OUT_OF_RANGE,
                    path=path,
                    value=value,
                    details={
                        "min_length": min_length,
                        "max_length": max_length,
                        "length": len(value),
                    },
                )
            ]
        return []

    def _validate_array(self, value: Any, schema: Schema, path: str) -> list[ErrorRecord]:
        item_schema = items_schema(schema)
        errors: list[ErrorRecord] = []
        for index, item in enumerate(value):
            errors.extend(self.validate(item, item_schema, element_path(path, index)))
        return errors

    def _validate_object(
        self,
        value: Mapping[str, Any],
        schema: Schema,
        path: str,
    ) -> list[ErrorRecord]:
        missing = [key for key in required_keys(schema) if value.get(key) is None]
        if missing:
            return [
                ErrorRecord(
                    kind=ErrorKind.REQUIRED_KEY_MISSING,
                    path=member_path(path, key),
                    value=None,
                    details={"key": key},
                )
                for key in missing
            ]

        declared = properties(schema)
        additional = schema.get("additionalProperties")
        if declared is None and additional is None:
            logger.error("Object schema at %s declares no properties", path)
            return [
                ErrorRecord(
                    kind=ErrorKind.SCHEMA_ERROR,
                    path=path,
                    value=None,
                    details={"message": "object schema declares no properties"},
                )
            ]

        errors: list[ErrorRecord] = []
        for key, member in value.items():
            key_path = member_path(path, key)
            if declared is not None and key in declared:
                errors.extend(self.validate(member, declared[key], key_path))
            elif isinstance(additional, Mapping):
                errors.extend(self.validate(member, additional, key_path))
            elif additional is True:
                continue
            else:
                errors.extend(self.validate(member, None, key_path))
        return errors


def _validate_pattern(value: str, pattern: Any, path: str) -> list[ErrorRecord]:
    try:
        compiled = re.compile(pattern)
    except (re.error, TypeError) as exc:
        logger.error("Invalid pattern %r at %s: %s", pattern, path, exc)
        return [
            ErrorRecord(
                kind=ErrorKind.SCHEMA_ERROR,
                path=path,
                value=value,
                details={"pattern": pattern, "message": "invalid pattern"},
            )
        ]
    if compiled.search(value) is None:
        return [
            ErrorRecord(
                kind=ErrorKind.PATTERN_VIOLATION,
                path=path,
                value=value,
                details={"pattern": pattern},
            )
        ]
    return []


def validate(
    value: Any,
    schema: Optional[Schema],
    path: str = ROOT,
    options: Optional[ValidationOptions] = None,
) -> list[ErrorRecord]:
    """Validate with a throwaway validator."""
    return Validator(options).validate(value, schema, path)
