"""Generation of values that satisfy a schema."""

from __future__ import annotations

import logging
import math
import random
import re
import string
from collections.abc import Iterable, Mapping
from typing import Optional

import rstr
from faker import Faker

from .json_types import JSONValue, MutableJSONObject, Overrides, Schema
from .paths import ROOT, element_path, is_overridden, member_path, override_value
from .schema_model import (
    MAX_SAFE_INTEGER,
    MIN_SAFE_INTEGER,
    SUPPORTED_FORMATS,
    SUPPORTED_TYPES,
    DataType,
    SchemaFormat,
    enum_values,
    items_schema,
    length_bound,
    numeric_bound,
    one_of,
    properties,
    schema_type,
)

logger = logging.getLogger(__name__)

_ALPHANUMERIC = string.ascii_letters + string.digits
_MIN_ARRAY_LENGTH = 1
_MAX_ARRAY_LENGTH = 10
_DEFAULT_EXTRA_LENGTH = 10


class ConformantGenerator:
    """Generate random values guaranteed to pass validation against their schema.

    The generator never raises for a structurally valid schema. Unsupported
    formats, broken patterns and unknown types are logged and degrade to an
    empty string or ``None``.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng if rng is not None else random.Random()
        self._faker = Faker()
        self._faker.seed_instance(self._rng.getrandbits(64))
        self._xeger = rstr.Rstr(self._rng)

    def generate(
        self,
        schema: Optional[Schema],
        path: str = ROOT,
        overrides: Optional[Overrides] = None,
    ) -> JSONValue:
        """Generate a value for ``schema`` located at ``path``.

        Args:
            schema (Optional[Schema]): Dereferenced schema node.
            path (str): Location of the value inside the payload.
            overrides (Optional[Overrides]): Values pinned by path.

        Returns:
            JSONValue: A conformant value, or ``None`` when there is no schema.
        """
        if schema is None:
            return None
        if is_overridden(path, overrides):
            return override_value(path, overrides)

        alternatives = one_of(schema)
        if alternatives:
            return self.generate(self._rng.choice(alternatives), path, overrides)

        members = enum_values(schema)
        if members:
            return self._rng.choice(members)

        data_type = schema_type(schema)
        if data_type is DataType.BOOLEAN:
            return self._rng.random() < 0.5
        if data_type is DataType.INTEGER:
            return self._integer(schema, path)
        if data_type is DataType.NUMBER:
            return self._number(schema)
        if data_type is DataType.STRING:
            return self._string(schema, path)
        if data_type is DataType.ARRAY:
            return self._array(schema, path, overrides)
        if data_type is DataType.OBJECT:
            return self._object(schema, path, overrides)

        logger.error(
            "Limited support at %s: type %r is not one of %s",
            path,
            schema.get("type"),
            SUPPORTED_TYPES,
        )
        return None

    def generate_headers(
        self,
        parameters: Optional[Iterable[Mapping[str, JSONValue]]],
        path: str = ROOT,
        overrides: Optional[Overrides] = None,
    ) -> MutableJSONObject:
        """Generate a value for every ``in: header`` parameter.

        Query, path and cookie parameters are ignored.
        """
        headers: MutableJSONObject = {}
        for parameter in parameters or ():
            if parameter.get("in") != "header":
                continue
            name = parameter.get("name")
            if not isinstance(name, str) or not name:
                continue
            header_schema = parameter.get("schema")
            headers[name] = self.generate(
                header_schema if isinstance(header_schema, Mapping) else None,
                member_path(path, name),
                overrides,
            )
        return headers

    def random_string(self, length: int) -> str:
        """Return a random alphanumeric string of ``length`` characters."""
        return "".join(self._rng.choices(_ALPHANUMERIC, k=max(length, 0)))

    def _integer(self, schema: Schema, path: str) -> int:
        low, high = _numeric_range(schema)
        lowest = math.ceil(low)
        highest = math.floor(high)
        if lowest > highest:
            logger.error("No integer fits [%s, %s] at %s", low, high, path)
            return lowest
        return self._rng.randint(lowest, highest)

    def _number(self, schema: Schema) -> float:
        low, high = _numeric_range(schema)
        value = self._rng.uniform(low, high)
        return min(max(value, low), high)

    def _string(self, schema: Schema, path: str) -> str:
        raw_format = schema.get("format")
        if raw_format is not None:
            return self._formatted_string(raw_format, path)

        pattern = schema.get("pattern")
        if isinstance(pattern, str):
            return self._pattern_string(pattern, path)

        minimum = length_bound(schema, "minLength")
        maximum = length_bound(schema, "maxLength")
        low = minimum if minimum is not None else 1
        high = maximum if maximum is not None else low + _DEFAULT_EXTRA_LENGTH
        if low > high:
            logger.error("minLength %s exceeds maxLength %s at %s", low, high, path)
            return self.random_string(low)
        return self.random_string(self._rng.randint(low, high))

    def _formatted_string(self, raw_format: JSONValue, path: str) -> str:
        if raw_format == SchemaFormat.EMAIL.value:
            return self._faker.email()
        if raw_format == SchemaFormat.UUID.value:
            return self._faker.uuid4()
        if raw_format == SchemaFormat.URI.value:
            return self._faker.url()
        if raw_format == SchemaFormat.IPV4.value:
            return self._faker.ipv4()
        if raw_format == SchemaFormat.IPV6.value:
            return self._faker.ipv6()
        logger.warning(
            "Limited support at %s: format %r is not one of %s",
            path,
            raw_format,
            SUPPORTED_FORMATS,
        )
        return ""

    def _pattern_string(self, pattern: str, path: str) -> str:
        try:
            compiled = re.compile(pattern)
        except re.error as exc:
            logger.warning("Invalid pattern %r at %s: %s", pattern, path, exc)
            return ""
        try:
            return self._xeger.xeger(compiled)
        except KeyError as exc:
            # rstr has no generator for some constructs, e.g. possessive or atomic groups.
            logger.warning(
                "Limited support at %s: pattern %r uses unsupported construct %s",
                path,
                pattern,
                exc,
            )
            return ""

    def _array(self, schema: Schema, path: str, overrides: Optional[Overrides]) -> list[JSONValue]:
        item_schema = items_schema(schema)
        length = self._rng.randint(_MIN_ARRAY_LENGTH, _MAX_ARRAY_LENGTH)
        return [
            self.generate(item_schema, element_path(path, index), overrides)
            for index in range(length)
        ]

    def _object(
        self,
        schema: Schema,
        path: str,
        overrides: Optional[Overrides],
    ) -> MutableJSONObject:
        members = properties(schema)
        if members is None:
            logger.error("Object schema at %s declares no properties", path)
            return {}
        return {
            key: self.generate(member_schema, member_path(path, key), overrides)
            for key, member_schema in members.items()
        }


def _numeric_range(schema: Schema) -> tuple[float, float]:
    minimum = numeric_bound(schema, "minimum")
    maximum = numeric_bound(schema, "maximum")
    low = minimum if minimum is not None else MIN_SAFE_INTEGER
    high = maximum if maximum is not None else MAX_SAFE_INTEGER
    if minimum is not None and maximum is None and low > high:
        high = low
    if maximum is not None and minimum is None and high < low:
        low = high
    return low, high


def generate_conformant(
    schema: Optional[Schema],
    path: str = ROOT,
    *,
    overrides: Optional[Overrides] = None,
    rng: Optional[random.Random] = None,
) -> JSONValue:
    """Generate one conformant value with a throwaway generator."""
    return ConformantGenerator(rng).generate(schema, path, overrides)


def generate_headers(
    parameters: Optional[Iterable[Mapping[str, JSONValue]]],
    path: str = ROOT,
    *,
    overrides: Optional[Overrides] = None,
    rng: Optional[random.Random] = None,
) -> MutableJSONObject:
    """Generate conformant request headers with a throwaway generator."""
    return ConformantGenerator(rng).generate_headers(parameters, path, overrides)
