"""Unit tests for conformant value generation."""

from __future__ import annotations

import logging
import random
from typing import Any

import pytest

from openapi_adherence_tester.conformant import (
    ConformantGenerator,
    generate_conformant,
    generate_headers,
)
from openapi_adherence_tester.validator import validate
from .schemas import ARRAY, COMPLEX, FORMAT, ONE_OF, REQUIRED, SIMPLE, HEADER_PARAMETERS

_ROUND_TRIP_SCHEMAS: dict[str, dict[str, Any]] = {
    "array": ARRAY,
    "one_of": ONE_OF,
    "required": REQUIRED,
    "format": FORMAT,
    "simple": SIMPLE,
    "complex": COMPLEX,
    "zero_bounds": {
        "type": "object",
        "properties": {
            "count": {"type": "integer", "minimum": 0, "maximum": 0},
            "ratio": {"type": "number", "minimum": -1.5, "maximum": 0},
            "code": {"type": "string", "minLength": 0, "maxLength": 0},
        },
    },
    "pattern": {"type": "string", "pattern": "^[A-Z]{3}-[0-9]{4}$"},
}


@pytest.mark.parametrize("seed", range(5))
@pytest.mark.parametrize("name", sorted(_ROUND_TRIP_SCHEMAS))
def test_generated_values_validate(name: str, seed: int) -> None:
    schema = _ROUND_TRIP_SCHEMAS[name]
    value = generate_conformant(schema, rng=random.Random(seed))
    assert validate(value, schema) == [], value


def test_same_seed_reproduces_values() -> None:
    first = generate_conformant(COMPLEX, rng=random.Random(42))
    second = generate_conformant(COMPLEX, rng=random.Random(42))
    assert first == second

    formatted_first = generate_conformant(FORMAT, rng=random.Random(7))
    formatted_second = generate_conformant(FORMAT, rng=random.Random(7))
    assert formatted_first == formatted_second


def test_missing_schema_yields_no_value() -> None:
    assert generate_conformant(None) is None


def test_zero_bound_is_honoured() -> None:
    generator = ConformantGenerator(random.Random(3))
    for _ in range(20):
        assert generator.generate({"type": "integer", "minimum": 0, "maximum": 0}) == 0
        assert generator.generate({"type": "string", "maxLength": 0}) == ""


def test_enum_members_are_chosen() -> None:
    generator = ConformantGenerator(random.Random(5))
    values = {generator.generate({"type": "string", "enum": ["a", "b"]}) for _ in range(30)}
    assert values == {"a", "b"}


def test_string_length_defaults() -> None:
    generator = ConformantGenerator(random.Random(11))
    for _ in range(30):
        value = generator.generate({"type": "string", "minLength": 4})
        assert 4 <= len(value) <= 14
        assert value.isalnum()


def test_arrays_have_one_to_ten_items() -> None:
    generator = ConformantGenerator(random.Random(9))
    for _ in range(30):
        value = generator.generate(ARRAY)
        assert 1 <= len(value) <= 10


def test_objects_include_every_declared_property() -> None:
    value = generate_conformant(COMPLEX, rng=random.Random(1))
    assert set(value) == set(COMPLEX["properties"])


def test_overrides_are_returned_verbatim() -> None:
    overrides = {"$.recObject.shipDate": "not-checked", "$.reviews[0].age": 999}
    value = generate_conformant(COMPLEX, overrides=overrides, rng=random.Random(2))
    assert value["recObject"]["shipDate"] == "not-checked"
    assert value["reviews"][0]["age"] == 999


def test_override_at_root_replaces_whole_value() -> None:
    pinned = {"status": "placed", "complete": True}
    value = generate_conformant(COMPLEX, overrides={"$": pinned})
    assert value == pinned
    assert value is not pinned


def test_unsupported_format_yields_empty_string() -> None:
    assert generate_conformant({"type": "string", "format": "phone"}) == ""


def test_invalid_pattern_yields_empty_string() -> None:
    assert generate_conformant({"type": "string", "pattern": "["}) == ""


@pytest.mark.parametrize("pattern", ["^a++$", "^(?>ab)$", "^(a)?(?(1)b|c)$"])
def test_unsupported_pattern_construct_yields_empty_string(
    pattern: str, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.WARNING):
        value = generate_conformant({"type": "string", "pattern": pattern}, path="$.code")
    assert value == ""
    assert "$.code" in caplog.text


def test_empty_enum_counts_as_absent() -> None:
    schema = {"type": "string", "enum": [], "minLength": 2, "maxLength": 4}
    value = generate_conformant(schema, rng=random.Random(3))
    assert isinstance(value, str)
    assert validate(value, schema) == []


def test_unknown_type_yields_no_value() -> None:
    assert generate_conformant({"type": "multidimensional-array"}) is None


def test_object_without_properties_yields_empty_object() -> None:
    assert generate_conformant({"type": "object"}) == {}


def test_headers_cover_header_parameters_only() -> None:
    headers = generate_headers(HEADER_PARAMETERS, rng=random.Random(4))
    assert set(headers) == {"X-Request-Id", "X-Priority", "X-Channel"}
    assert 8 <= len(headers["X-Request-Id"]) <= 16
    assert 1 <= headers["X-Priority"] <= 5
    assert headers["X-Channel"] in ("web", "mobile")


def test_header_overrides_use_member_paths() -> None:
    headers = generate_headers(HEADER_PARAMETERS, overrides={"$.X-Priority": 3})
    assert headers["X-Priority"] == 3


def test_no_parameters_yields_no_headers() -> None:
    assert generate_headers(None) == {}
