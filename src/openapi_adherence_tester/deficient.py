"""Generation of values that break exactly one schema constraint.

Every category shares one walk over the schema: ``oneOf`` alternatives are
unioned at the same path, array items are recursed into at ``path[0]`` and
wrapped back into a one-element array, and object members are recursed into
at ``path.key`` and placed into an otherwise conformant object. Only the leaf
rule differs between categories.
"""

from __future__ import annotations

import logging
import math
import random
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Optional, TypeAlias

from .conformant import ConformantGenerator
from .errors import Deficiency, DeficiencyCategory
from .json_types import JSONValue, Overrides, Schema
from .paths import ROOT, element_path, is_overridden, member_path
from .schema_model import (
    DataType,
    enum_values,
    items_schema,
    length_bound,
    numeric_bound,
    one_of,
    properties,
    required_keys,
    schema_type,
    strict_equals,
)

logger = logging.getLogger(__name__)

LeafRule: TypeAlias = Callable[[Schema, str, Optional[Overrides]], Iterable[Deficiency]]

# Shape pairs a schema of the first type does not reject as a cross-type fault.
_COMPATIBLE_SHAPES: frozenset[tuple[DataType, DataType]] = frozenset(
    {
        (DataType.NUMBER, DataType.INTEGER),
        (DataType.STRING, DataType.INTEGER),
        (DataType.STRING, DataType.NUMBER),
        (DataType.STRING, DataType.BOOLEAN),
        (DataType.OBJECT, DataType.ARRAY),
    }
)


@dataclass(frozen=True)
class DeficiencyOptions:
    """Which bounds the range and length categories should break."""

    check_minimum: bool = False
    check_maximum: bool = False
    check_minimum_length: bool = False
    check_maximum_length: bool = False


ALL_BOUNDS = DeficiencyOptions(
    check_minimum=True,
    check_maximum=True,
    check_minimum_length=True,
    check_maximum_length=True,
)


def _dummy_values() -> list[tuple[DataType, JSONValue]]:
    return [
        (DataType.INTEGER, 1),
        (DataType.NUMBER, 1.1),
        (DataType.STRING, "ats"),
        (DataType.OBJECT, {"name": "ats"}),
        (DataType.ARRAY, [1, 2, 3]),
        (DataType.BOOLEAN, False),
    ]


def _enum_candidate(data_type: DataType, index: int) -> Optional[JSONValue]:
    if data_type is DataType.BOOLEAN:
        return (False, True)[index] if index < 2 else None
    if data_type is DataType.INTEGER:
        return 1 + index
    if data_type is DataType.NUMBER:
        return 1.1 + index
    if data_type is DataType.STRING:
        return "ats" if index == 0 else f"ats{index}"
    if data_type is DataType.ARRAY:
        return [1, 2, 3, *range(index)]
    return {"name": "ats" if index == 0 else f"ats{index}"}


def _value_outside_enum(data_type: DataType, members: list[JSONValue]) -> Optional[JSONValue]:
    for index in range(len(members) + 2):
        candidate = _enum_candidate(data_type, index)
        if candidate is None:
            return None
        if not any(strict_equals(candidate, member) for member in members):
            return candidate
    return None


class DeficientGenerator:
    """Produce single-fault variants of conformant values, one category at a time."""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        conformant: Optional[ConformantGenerator] = None,
    ) -> None:
        self._conformant = conformant if conformant is not None else ConformantGenerator(rng)

    def by_data_type(
        self,
        schema: Optional[Schema],
        path: str = ROOT,
        overrides: Optional[Overrides] = None,
    ) -> list[Deficiency]:
        """Replace one value with a value of a different JSON shape."""
        return self._walk(schema, path, overrides, self._data_type_leaf)

    def by_enum(
        self,
        schema: Optional[Schema],
        path: str = ROOT,
        overrides: Optional[Overrides] = None,
    ) -> list[Deficiency]:
        """Replace one enumerated value with a same-shape value outside the list."""
        return self._walk(schema, path, overrides, self._enum_leaf)

    def by_number_range(
        self,
        schema: Optional[Schema],
        path: str = ROOT,
        overrides: Optional[Overrides] = None,
        options: Optional[DeficiencyOptions] = None,
    ) -> list[Deficiency]:
        """Push one number just below ``minimum`` or just above ``maximum``."""
        selected = options if options is not None else DeficiencyOptions()

        def leaf(node: Schema, node_path: str, _: Optional[Overrides]) -> list[Deficiency]:
            return self._number_range_leaf(node, node_path, selected)

        return self._walk(schema, path, overrides, leaf)

    def by_optional_key(
        self,
        schema: Optional[Schema],
        path: str = ROOT,
        overrides: Optional[Overrides] = None,
    ) -> list[Deficiency]:
        """Drop one optional member from an otherwise conformant object."""

        def leaf(
            node: Schema, node_path: str, node_overrides: Optional[Overrides]
        ) -> list[Deficiency]:
            return self._missing_key_leaf(node, node_path, node_overrides, required=False)

        return self._walk(schema, path, overrides, leaf)

    def by_required_key(
        self,
        schema: Optional[Schema],
        path: str = ROOT,
        overrides: Optional[Overrides] = None,
    ) -> list[Deficiency]:
        """Drop one required member from an otherwise conformant object."""

        def leaf(
            node: Schema, node_path: str, node_overrides: Optional[Overrides]
        ) -> list[Deficiency]:
            return self._missing_key_leaf(node, node_path, node_overrides, required=True)

        return self._walk(schema, path, overrides, leaf)

    def by_string_length(
        self,
        schema: Optional[Schema],
        path: str = ROOT,
        overrides: Optional[Overrides] = None,
        options: Optional[DeficiencyOptions] = None,
    ) -> list[Deficiency]:
        """Make one string a character shorter than ``minLength`` or longer than ``maxLength``."""
        selected = options if options is not None else DeficiencyOptions()

        def leaf(node: Schema, node_path: str, _: Optional[Overrides]) -> list[Deficiency]:
            return self._string_length_leaf(node, node_path, selected)

        return self._walk(schema, path, overrides, leaf)

    def _walk(
        self,
        schema: Optional[Schema],
        path: str,
        overrides: Optional[Overrides],
        leaf: LeafRule,
    ) -> list[Deficiency]:
        if schema is None or is_overridden(path, overrides):
            return []

        alternatives = one_of(schema)
        if alternatives:
            return [
                deficiency
                for alternative in alternatives
                for deficiency in self._walk(alternative, path, overrides, leaf)
            ]

        found: list[Deficiency] = []
        # Members of an enumerated value are never checked individually.
        if not enum_values(schema):
            data_type = schema_type(schema)
            if data_type is DataType.ARRAY:
                found.extend(self._wrap_items(schema, path, overrides, leaf))
            elif data_type is DataType.OBJECT:
                found.extend(self._wrap_members(schema, path, overrides, leaf))
        found.extend(leaf(schema, path, overrides))
        return found

    def _wrap_items(
        self,
        schema: Schema,
        path: str,
        overrides: Optional[Overrides],
        leaf: LeafRule,
    ) -> list[Deficiency]:
        item_deficiencies = self._walk(items_schema(schema), element_path(path, 0), overrides, leaf)
        return [
            Deficiency(
                category=item.category,
                path=item.path,
                value=[item.value],
                details=item.details,
            )
            for item in item_deficiencies
        ]

    def _wrap_members(
        self,
        schema: Schema,
        path: str,
        overrides: Optional[Overrides],
        leaf: LeafRule,
    ) -> list[Deficiency]:
        members = properties(schema)
        if members is None:
            return []
        wrapped: list[Deficiency] = []
        for key, member_schema in members.items():
            for member in self._walk(member_schema, member_path(path, key), overrides, leaf):
                base = self._conformant.generate(schema, path, overrides)
                if not isinstance(base, dict):
                    continue
                base[key] = member.value
                wrapped.append(
                    Deficiency(
                        category=member.category,
                        path=member.path,
                        value=base,
                        details=member.details,
                    )
                )
        return wrapped

    def _data_type_leaf(
        self,
        schema: Schema,
        path: str,
        overrides: Optional[Overrides],
    ) -> list[Deficiency]:
        expected = schema_type(schema)
        if expected is None:
            return []
        return [
            Deficiency(
                category=DeficiencyCategory.DATA_TYPE,
                path=path,
                value=value,
                details={"expected": expected.value, "actual": actual.value},
            )
            for actual, value in _dummy_values()
            if actual is not expected and (expected, actual) not in _COMPATIBLE_SHAPES
        ]

    def _enum_leaf(
        self,
        schema: Schema,
        path: str,
        overrides: Optional[Overrides],
    ) -> list[Deficiency]:
        members = enum_values(schema)
        if members is None:
            return []
        data_type = schema_type(schema)
        if data_type is None:
            logger.debug("Enum at %s has no usable type; no deficient value produced", path)
            return []
        value = _value_outside_enum(data_type, members)
        if value is None:
            return []
        return [
            Deficiency(
                category=DeficiencyCategory.ENUM,
                path=path,
                value=value,
                details={"enum": list(members)},
            )
        ]

    def _number_range_leaf(
        self,
        schema: Schema,
        path: str,
        options: DeficiencyOptions,
    ) -> list[Deficiency]:
        data_type = schema_type(schema)
        if data_type not in (DataType.INTEGER, DataType.NUMBER):
            return []
        if enum_values(schema) is not None:
            return []

        found: list[Deficiency] = []
        minimum = numeric_bound(schema, "minimum")
        if options.check_minimum and minimum is not None:
            below = math.ceil(minimum) - 1 if data_type is DataType.INTEGER else minimum - 1
            found.append(
                Deficiency(
                    category=DeficiencyCategory.NUMBER_RANGE,
                    path=path,
                    value=below,
                    details={"minimum": minimum},
                )
            )
        maximum = numeric_bound(schema, "maximum")
        if options.check_maximum and maximum is not None:
            above = math.floor(maximum) + 1 if data_type is DataType.INTEGER else maximum + 1
            found.append(
                Deficiency(
                    category=DeficiencyCategory.NUMBER_RANGE,
                    path=path,
                    value=above,
                    details={"maximum": maximum},
                )
            )
        return found

    def _missing_key_leaf(
        self,
        schema: Schema,
        path: str,
        overrides: Optional[Overrides],
        *,
        required: bool,
    ) -> list[Deficiency]:
        if schema_type(schema) is not DataType.OBJECT or enum_values(schema) is not None:
            return []
        members = properties(schema)
        if members is None:
            return []

        category = DeficiencyCategory.REQUIRED_KEY if required else DeficiencyCategory.OPTIONAL_KEY
        required_names = set(required_keys(schema))
        found: list[Deficiency] = []
        for key in members:
            if (key in required_names) is not required:
                continue
            key_path = member_path(path, key)
            if is_overridden(key_path, overrides):
                continue
            base = self._conformant.generate(schema, path, overrides)
            if not isinstance(base, dict):
                continue
            base.pop(key, None)
            found.append(
                Deficiency(category=category, path=key_path, value=base, details={"key": key})
            )
        return found

    def _string_length_leaf(
        self,
        schema: Schema,
        path: str,
        options: DeficiencyOptions,
    ) -> list[Deficiency]:
        if schema_type(schema) is not DataType.STRING or enum_values(schema) is not None:
            return []
        # Format and pattern take priority over length during validation.
        if schema.get("format") is not None or schema.get("pattern") is not None:
            return []

        found: list[Deficiency] = []
        min_length = length_bound(schema, "minLength")
        if options.check_minimum_length and min_length is not None and min_length > 0:
            found.append(
                Deficiency(
                    category=DeficiencyCategory.STRING_LENGTH,
                    path=path,
                    value=self._conformant.random_string(min_length - 1),
                    details={"min_length": min_length},
                )
            )
        max_length = length_bound(schema, "maxLength")
        if options.check_maximum_length and max_length is not None:
            found.append(
                Deficiency(
                    category=DeficiencyCategory.STRING_LENGTH,
                    path=path,
                    value=self._conformant.random_string(max_length + 1),
                    details={"max_length": max_length},
                )
            )
        return found


def generate_deficient_by_data_type(
    schema: Optional[Schema],
    path: str = ROOT,
    *,
    overrides: Optional[Overrides] = None,
    rng: Optional[random.Random] = None,
) -> list[Deficiency]:
    """Data-type deficiencies from a throwaway generator."""
    return DeficientGenerator(rng).by_data_type(schema, path, overrides)


def generate_deficient_by_enum(
    schema: Optional[Schema],
    path: str = ROOT,
    *,
    overrides: Optional[Overrides] = None,
    rng: Optional[random.Random] = None,
) -> list[Deficiency]:
    """Enum deficiencies from a throwaway generator."""
    return DeficientGenerator(rng).by_enum(schema, path, overrides)


def generate_deficient_by_number_range(
    schema: Optional[Schema],
    path: str = ROOT,
    *,
    overrides: Optional[Overrides] = None,
    options: Optional[DeficiencyOptions] = None,
    rng: Optional[random.Random] = None,
) -> list[Deficiency]:
    """Number-range deficiencies from a throwaway generator."""
    return DeficientGenerator(rng).by_number_range(schema, path, overrides, options)


def generate_deficient_by_optional_key(
    schema: Optional[Schema],
    path: str = ROOT,
    *,
    overrides: Optional[Overrides] = None,
    rng: Optional[random.Random] = None,
) -> list[Deficiency]:
    """Optional-key-missing variants from a throwaway generator."""
    return DeficientGenerator(rng).by_optional_key(schema, path, overrides)


def generate_deficient_by_required_key(
    schema: Optional[Schema],
    path: str = ROOT,
    *,
    overrides: Optional[Overrides] = None,
    rng: Optional[random.Random] = None,
) -> list[Deficiency]:
    """Required-key-missing variants from a throwaway generator."""
    return DeficientGenerator(rng).by_required_key(schema, path, overrides)


def generate_deficient_by_string_length(
    schema: Optional[Schema],
    path: str = ROOT,
    *,
    overrides: Optional[Overrides] = None,
    options: Optional[DeficiencyOptions] = None,
    rng: Optional[random.Random] = None,
) -> list[Deficiency]:
    """String-length deficiencies from a throwaway generator."""
    return DeficientGenerator(rng).by_string_length(schema, path, overrides, options)
