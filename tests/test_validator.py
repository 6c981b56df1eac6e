"""Unit tests for value validation."""

from __future__ import annotations

import logging
from typing import Any

import pytest

from openapi_adherence_tester.errors import ErrorKind
from openapi_adherence_tester.validator import ValidationOptions, Validator, validate
from .schemas import ARRAY, ONE_OF, REQUIRED

_CONFORMING: list[tuple[Any, dict[str, Any]]] = [
    ("Dingo", {"type": "string", "enum": ["Dingo", "Husky"]}),
    (True, {"type": "boolean"}),
    (3.50, {"type": "number", "minimum": 1.05, "maximum": 4.65}),
    (3, {"type": "integer", "minimum": 1, "maximum": 4}),
    (3.0, {"type": "integer"}),
    ([123, 400, 456], ARRAY),
    ("abilash@gmail.com", {"type": "string", "format": "email"}),
    ("43c13c2e-c3d6-11ea-87d0-0242ac130003", {"type": "string", "format": "uuid"}),
    ("https://www.guru99.com/page", {"type": "string", "format": "uri"}),
    ("69.89.31.226", {"type": "string", "format": "ipv4"}),
    ("2002:4559:1FE2::4559:1FE2", {"type": "string", "format": "ipv6"}),
    ("123-12-1234", {"type": "string", "pattern": r"(\d{3}-\d{2}-\d{4})$"}),
    ("abilash", {"type": "string", "minLength": 5, "maxLength": 9}),
    ({"id": 123}, REQUIRED),
    ([1, [3]], {"type": "multidimensional-array"}),
    ({"bark": "yes", "breed": "Husky"}, ONE_OF),
]

_VIOLATING: list[tuple[Any, dict[str, Any]]] = [
    (None, {"type": "boolean"}),
    ("true", {"type": "boolean"}),
    ({}, {"type": "array"}),
    (1.50, {"type": "integer"}),
    ("1.s5", {"type": "number"}),
    ([1, 2, 3], {"type": "string"}),
    ("[1, 2, 3]", {"type": "object"}),
    ("Dino", {"type": "string", "enum": ["Dingo", "Husky"]}),
    ("TRUE", {"type": "boolean"}),
    (5.005, {"type": "number", "minimum": 1.05, "maximum": 4.90}),
    (9, {"type": "integer", "minimum": 1, "maximum": 4}),
    ([123, 500, 456], ARRAY),
    ("abilashgmail.com", {"type": "string", "format": "email"}),
    ("43c13c2ec3d6-11ea-87d0-0242ac130003", {"type": "string", "format": "uuid"}),
    ("wwwguru99com", {"type": "string", "format": "uri"}),
    ("69.8901226", {"type": "string", "format": "ipv4"}),
    ("2002:454559:1FE2::4559:1FE2", {"type": "string", "format": "ipv6"}),
    ("9876543210", {"type": "string", "format": "phone"}),
    ("123--12-1234", {"type": "string", "pattern": r"(\d{3}-\d{2}-\d{4})$"}),
    ("[", {"type": "string", "pattern": "["}),
    ("abilash", {"type": "string", "minLength": 5, "maxLength": 6}),
    ({"username": "gabil"}, REQUIRED),
    ({"bark": True, "breed": "Husky"}, ONE_OF),
]


@pytest.mark.parametrize(("value", "schema"), _CONFORMING)
def test_conforming_values_have_no_errors(value: Any, schema: dict[str, Any]) -> None:
    assert validate(value, schema) == []


@pytest.mark.parametrize(("value", "schema"), _VIOLATING)
def test_violating_values_are_reported(value: Any, schema: dict[str, Any]) -> None:
    assert validate(value, schema) != []


def test_booleans_are_not_numbers() -> None:
    errors = validate(True, {"type": "integer"})
    assert [error.kind for error in errors] == [ErrorKind.DATA_TYPE_MISMATCH]
    assert errors[0].details == {"expected": "integer", "actual": "boolean"}
    assert validate(1, {"type": "boolean"})[0].kind is ErrorKind.DATA_TYPE_MISMATCH


def test_enum_uses_strict_equality() -> None:
    schema = {"type": "integer", "enum": [1, 2]}
    assert validate(2, schema) == []
    errors = validate(3, schema)
    assert [error.kind for error in errors] == [ErrorKind.ENUM]
    assert errors[0].details == {"enum": [1, 2]}
    assert validate(True, {"enum": [1]})[0].kind is ErrorKind.ENUM


def test_enum_short_circuits_other_constraints() -> None:
    schema = {"type": "string", "enum": ["ab"], "minLength": 5}
    assert validate("ab", schema) == []


def test_range_is_inclusive_and_zero_bound_is_honoured() -> None:
    schema = {"type": "integer", "minimum": 0, "maximum": 10}
    assert validate(0, schema) == []
    assert validate(10, schema) == []
    below = validate(-1, schema)
    assert [error.kind for error in below] == [ErrorKind.OUT_OF_RANGE]
    assert below[0].details == {"minimum": 0, "maximum": 10}
    assert validate(11, schema)[0].kind is ErrorKind.OUT_OF_RANGE


def test_zero_max_length_is_honoured() -> None:
    schema = {"type": "string", "maxLength": 0}
    assert validate("", schema) == []
    assert validate("a", schema)[0].kind is ErrorKind.OUT_OF_RANGE


def test_format_takes_priority_over_length() -> None:
    schema = {"type": "string", "format": "ipv4", "minLength": 50}
    assert validate("10.0.0.1", schema) == []


def test_pattern_takes_priority_over_length() -> None:
    schema = {"type": "string", "pattern": "^a+$", "maxLength": 2}
    assert validate("aaaa", schema) == []
    errors = validate("b", schema)
    assert [error.kind for error in errors] == [ErrorKind.PATTERN_VIOLATION]


def test_invalid_pattern_is_a_schema_error() -> None:
    errors = validate("[", {"type": "string", "pattern": "["})
    assert [error.kind for error in errors] == [ErrorKind.SCHEMA_ERROR]


def test_unsupported_format_reports_limited_support(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        errors = validate("9876543210", {"type": "string", "format": "phone"})
    assert [error.kind for error in errors] == [ErrorKind.LIMITED_SUPPORT]
    assert errors[0].details["format"] == "phone"
    assert "phone" in caplog.text


def test_unknown_type_is_only_logged(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        assert validate([1, [3]], {"type": "multidimensional-array"}) == []
    assert "multidimensional-array" in caplog.text


def test_format_violation_kind() -> None:
    errors = validate("not-an-email", {"type": "string", "format": "email"})
    assert [error.kind for error in errors] == [ErrorKind.FORMAT_VIOLATION]
    assert errors[0].details == {"format": "email"}


def test_one_of_reports_single_error() -> None:
    errors = validate({"bark": True, "breed": "Husky"}, ONE_OF)
    assert [error.kind for error in errors] == [ErrorKind.ONE_OF]
    assert errors[0].path == "$"
    assert errors[0].details == {"alternatives": 2}


def test_required_keys_are_checked_before_members() -> None:
    schema = {
        "type": "object",
        "properties": {"a": {"type": "integer"}, "b": {"type": "integer"}},
        "required": ["a"],
    }
    errors = validate({"b": "x"}, schema)
    assert [error.kind for error in errors] == [ErrorKind.REQUIRED_KEY_MISSING]
    assert errors[0].path == "$.a"
    assert errors[0].value is None


def test_null_required_member_counts_as_missing() -> None:
    errors = validate({"id": None}, REQUIRED)
    assert [(error.kind, error.path) for error in errors] == [
        (ErrorKind.REQUIRED_KEY_MISSING, "$.id")
    ]


def test_missing_required_key_stops_strict_member_checks() -> None:
    schema = {
        "type": "object",
        "properties": {"a": {"type": "integer"}},
        "required": ["a"],
    }
    errors = Validator(ValidationOptions(strict_validation=True)).validate({"zzz": 1}, schema)
    assert [(error.kind, error.path) for error in errors] == [
        (ErrorKind.REQUIRED_KEY_MISSING, "$.a")
    ]


def test_array_type_mismatch_is_reported_per_element() -> None:
    errors = validate([1, "x", 3], {"type": "array", "items": {"type": "integer"}})
    assert [(error.kind, error.path) for error in errors] == [
        (ErrorKind.DATA_TYPE_MISMATCH, "$[1]")
    ]


def test_empty_enum_is_not_enforced() -> None:
    assert validate("anything", {"type": "string", "enum": []}) == []


def test_arrays_are_validated_exhaustively() -> None:
    errors = validate([100, 200, 500, 1], ARRAY)
    assert [(error.kind, error.path) for error in errors] == [
        (ErrorKind.OUT_OF_RANGE, "$[0]"),
        (ErrorKind.OUT_OF_RANGE, "$[2]"),
        (ErrorKind.OUT_OF_RANGE, "$[3]"),
    ]


def test_nested_paths() -> None:
    schema = {
        "type": "object",
        "properties": {
            "reviews": {
                "type": "array",
                "items": {"type": "object", "properties": {"age": {"type": "integer"}}},
            }
        },
    }
    errors = validate({"reviews": [{"age": 1}, {"age": "old"}]}, schema)
    assert [error.path for error in errors] == ["$.reviews[1].age"]


def test_null_member_is_lack_of_data() -> None:
    errors = validate({"username": None, "id": 1}, REQUIRED)
    assert [(error.kind, error.path) for error in errors] == [
        (ErrorKind.LACK_OF_DATA, "$.username")
    ]


def test_undeclared_members_depend_on_strict_mode() -> None:
    value = {"id": 1, "nickname": "rex"}
    assert validate(value, REQUIRED) == []

    strict = Validator(ValidationOptions(strict_validation=True))
    errors = strict.validate(value, REQUIRED)
    assert [(error.kind, error.path) for error in errors] == [
        (ErrorKind.EXCESS_OF_DATA, "$.nickname")
    ]


def test_additional_properties_schema_applies_to_undeclared_members() -> None:
    schema = {"type": "object", "additionalProperties": {"type": "integer"}}
    assert validate({"a": 1, "b": 2}, schema) == []
    errors = validate({"a": "one"}, schema)
    assert [(error.kind, error.path) for error in errors] == [
        (ErrorKind.DATA_TYPE_MISMATCH, "$.a")
    ]


def test_object_without_properties_is_a_schema_error() -> None:
    errors = validate({"a": 1}, {"type": "object"})
    assert [error.kind for error in errors] == [ErrorKind.SCHEMA_ERROR]


def test_records_render_as_plain_data() -> None:
    record = validate(9, {"type": "integer", "maximum": 4})[0]
    assert record.to_dict() == {
        "kind": "out_of_range",
        "path": "$",
        "value": 9,
        "details": {"minimum": None, "maximum": 4},
    }


def test_custom_root_path_prefixes_errors() -> None:
    errors = validate("x", {"type": "integer"}, "$.headers.X-Limit")
    assert errors[0].path == "$.headers.X-Limit"
