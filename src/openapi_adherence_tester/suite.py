"""Assembly of request test cases and whole-document test suites.

Positive cases are requests a conformant server must accept (answer ``2xx``);
negative cases must be rejected (``4xx`` or ``5xx``). Body cases vary only the
request body, header cases vary one header while sending the full conformant
header set alongside it.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, TypeAlias

from .conformant import ConformantGenerator
from .deficient import ALL_BOUNDS, DeficientGenerator
from .errors import Deficiency, DeficiencyCategory
from .json_types import JSONObject, JSONValue, MutableJSONObject, Overrides, Schema
from .model_types import (
    AdherenceSuite,
    CaseTarget,
    Expectation,
    OperationSpec,
    OperationSuite,
    RequestCase,
    RequestExamples,
)
from .operations import resolve_operations
from .paths import ROOT, member_path, normalize_overrides
from .resolver import OperationSchemas, Resolver
from .writer import write_json

logger = logging.getLogger(__name__)

_REQUEST_BODY_KEY = "requestBody"
_REQUEST_HEADERS_KEY = "requestHeaders"

Parameters: TypeAlias = Iterable[Mapping[str, Any]]


def _header_parameters(parameters: Optional[Parameters]) -> list[Mapping[str, Any]]:
    return [
        parameter
        for parameter in parameters or ()
        if parameter.get("in") == "header" and isinstance(parameter.get("name"), str)
    ]


def _parameter_schema(parameter: Mapping[str, Any]) -> Optional[Schema]:
    schema = parameter.get("schema")
    return schema if isinstance(schema, Mapping) else None


def _body_cases(deficiencies: Iterable[Deficiency], expectation: Expectation) -> list[RequestCase]:
    # A request body is always sent as a JSON object.
    return [
        RequestCase(
            target=CaseTarget.BODY,
            expectation=expectation,
            category=deficiency.category,
            path=deficiency.path,
            data=deficiency.value,
            details=deficiency.details,
        )
        for deficiency in deficiencies
        if isinstance(deficiency.value, dict)
    ]


def _operation_overrides(overrides: Optional[JSONObject], operation: OperationSpec) -> JSONObject:
    if not overrides:
        return {}
    by_method = overrides.get(operation.path)
    if not isinstance(by_method, Mapping):
        return {}
    for method in (operation.method, operation.method.upper()):
        selected = by_method.get(method)
        if isinstance(selected, Mapping):
            return selected
    return {}


class SuiteBuilder:
    """Build request test cases from resolved operation schemas."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._conformant = ConformantGenerator(rng)
        self._deficient = DeficientGenerator(conformant=self._conformant)

    def positive_body_cases(
        self,
        schema: Optional[Schema],
        overrides: Optional[Overrides] = None,
    ) -> list[RequestCase]:
        """Bodies with one optional member left out."""
        deficiencies = self._deficient.by_optional_key(schema, ROOT, overrides)
        return _body_cases(deficiencies, Expectation.POSITIVE)

    def negative_body_cases(
        self,
        schema: Optional[Schema],
        overrides: Optional[Overrides] = None,
    ) -> list[RequestCase]:
        """Bodies that break exactly one constraint."""
        deficiencies = self._negative_deficiencies(schema, ROOT, overrides)
        return _body_cases(deficiencies, Expectation.NEGATIVE)

    def positive_header_cases(
        self,
        parameters: Optional[Parameters],
        overrides: Optional[Overrides] = None,
    ) -> list[RequestCase]:
        """Header sets a server must accept, one header under test per case."""
        cases: list[RequestCase] = []
        for parameter in _header_parameters(parameters):
            name = parameter["name"]
            deficiencies = self._deficient.by_optional_key(
                _parameter_schema(parameter), member_path(ROOT, name), overrides
            )
            cases.extend(
                self._header_case(parameters, overrides, name, deficiency, Expectation.POSITIVE)
                for deficiency in deficiencies
            )
            if parameter.get("required") is not True:
                cases.append(
                    self._missing_header_case(
                        parameters,
                        overrides,
                        name,
                        DeficiencyCategory.OPTIONAL_KEY,
                        Expectation.POSITIVE,
                    )
                )
        return cases

    def negative_header_cases(
        self,
        parameters: Optional[Parameters],
        overrides: Optional[Overrides] = None,
    ) -> list[RequestCase]:
        """Header sets a server must reject, one header under test per case."""
        cases: list[RequestCase] = []
        for parameter in _header_parameters(parameters):
            name = parameter["name"]
            deficiencies = self._negative_deficiencies(
                _parameter_schema(parameter), member_path(ROOT, name), overrides
            )
            cases.extend(
                self._header_case(parameters, overrides, name, deficiency, Expectation.NEGATIVE)
                for deficiency in deficiencies
            )
            if parameter.get("required") is True:
                cases.append(
                    self._missing_header_case(
                        parameters,
                        overrides,
                        name,
                        DeficiencyCategory.REQUIRED_KEY,
                        Expectation.NEGATIVE,
                    )
                )
        return cases

    def build_operation_suite(
        self,
        operation: OperationSpec,
        schemas: OperationSchemas,
        overrides: Optional[JSONObject] = None,
    ) -> OperationSuite:
        """Build examples and cases for one operation.

        Args:
            operation (OperationSpec): Operation being tested.
            schemas (OperationSchemas): Its resolved schemas.
            overrides (Optional[JSONObject]): ``{"requestBody": ..., "requestHeaders": ...}``,
                each nested like the payload or keyed by path.

        Returns:
            OperationSuite: Conformant examples plus positive and negative cases.
        """
        selected = overrides or {}
        body_overrides = normalize_overrides(selected.get(_REQUEST_BODY_KEY))
        header_overrides = normalize_overrides(selected.get(_REQUEST_HEADERS_KEY))
        parameters = schemas.header_parameters
        body_schema = schemas.request_body

        examples = RequestExamples(
            request_body=self._conformant.generate(body_schema, ROOT, body_overrides),
            request_headers=self._conformant.generate_headers(parameters, ROOT, header_overrides),
        )
        positive = [
            *self.positive_body_cases(body_schema, body_overrides),
            *self.positive_header_cases(parameters, header_overrides),
        ]
        negative = [
            *self.negative_body_cases(body_schema, body_overrides),
            *self.negative_header_cases(parameters, header_overrides),
        ]
        logger.info(
            "Test suite for %s created: %d positive, %d negative case(s)",
            operation.key,
            len(positive),
            len(negative),
        )
        return OperationSuite(
            path=operation.path,
            method=operation.method,
            operation_id=operation.operation_id,
            examples=examples,
            positive_cases=tuple(positive),
            negative_cases=tuple(negative),
        )

    def build_test_suite(
        self,
        document: JSONObject,
        overrides: Optional[JSONObject] = None,
    ) -> AdherenceSuite:
        """Build operation suites for every operation of ``document``."""
        resolver = Resolver(dict(document))
        operation_suites = [
            self.build_operation_suite(
                operation,
                resolver.build_operation_schemas(operation),
                _operation_overrides(overrides, operation),
            )
            for operation in resolve_operations(document)
        ]
        return AdherenceSuite(
            created_at=datetime.now(timezone.utc).isoformat(),
            document=document,
            operations=tuple(operation_suites),
        )

    def _negative_deficiencies(
        self,
        schema: Optional[Schema],
        path: str,
        overrides: Optional[Overrides],
    ) -> list[Deficiency]:
        return [
            *self._deficient.by_data_type(schema, path, overrides),
            *self._deficient.by_enum(schema, path, overrides),
            *self._deficient.by_number_range(schema, path, overrides, ALL_BOUNDS),
            *self._deficient.by_required_key(schema, path, overrides),
            *self._deficient.by_string_length(schema, path, overrides, ALL_BOUNDS),
        ]

    def _header_case(
        self,
        parameters: Optional[Parameters],
        overrides: Optional[Overrides],
        name: str,
        deficiency: Deficiency,
        expectation: Expectation,
    ) -> RequestCase:
        headers = self._conformant.generate_headers(parameters, ROOT, overrides)
        headers[name] = deficiency.value
        return RequestCase(
            target=CaseTarget.HEADERS,
            expectation=expectation,
            category=deficiency.category,
            path=deficiency.path,
            data=headers,
            details=deficiency.details,
            header_name=name,
        )

    def _missing_header_case(
        self,
        parameters: Optional[Parameters],
        overrides: Optional[Overrides],
        name: str,
        category: DeficiencyCategory,
        expectation: Expectation,
    ) -> RequestCase:
        headers: MutableJSONObject = self._conformant.generate_headers(parameters, ROOT, overrides)
        headers.pop(name, None)
        return RequestCase(
            target=CaseTarget.HEADERS,
            expectation=expectation,
            category=category,
            path=member_path(ROOT, name),
            data=headers,
            details={"key": name},
            header_name=name,
        )


def positive_body_cases(
    schema: Optional[Schema],
    overrides: Optional[Overrides] = None,
    *,
    rng: Optional[random.Random] = None,
) -> list[RequestCase]:
    """Positive body cases from a throwaway builder."""
    return SuiteBuilder(rng).positive_body_cases(schema, overrides)


def negative_body_cases(
    schema: Optional[Schema],
    overrides: Optional[Overrides] = None,
    *,
    rng: Optional[random.Random] = None,
) -> list[RequestCase]:
    """Negative body cases from a throwaway builder."""
    return SuiteBuilder(rng).negative_body_cases(schema, overrides)


def positive_header_cases(
    parameters: Optional[Parameters],
    overrides: Optional[Overrides] = None,
    *,
    rng: Optional[random.Random] = None,
) -> list[RequestCase]:
    """Positive header cases from a throwaway builder."""
    return SuiteBuilder(rng).positive_header_cases(parameters, overrides)


def negative_header_cases(
    parameters: Optional[Parameters],
    overrides: Optional[Overrides] = None,
    *,
    rng: Optional[random.Random] = None,
) -> list[RequestCase]:
    """Negative header cases from a throwaway builder."""
    return SuiteBuilder(rng).negative_header_cases(parameters, overrides)


def build_operation_suite(
    operation: OperationSpec,
    schemas: OperationSchemas,
    overrides: Optional[JSONObject] = None,
    *,
    rng: Optional[random.Random] = None,
) -> OperationSuite:
    """Operation suite from a throwaway builder."""
    return SuiteBuilder(rng).build_operation_suite(operation, schemas, overrides)


def build_test_suite(
    document: JSONObject,
    overrides: Optional[JSONObject] = None,
    *,
    rng: Optional[random.Random] = None,
) -> AdherenceSuite:
    """Whole-document suite from a throwaway builder."""
    return SuiteBuilder(rng).build_test_suite(document, overrides)


def write_test_suite(suite: AdherenceSuite, path: Path, *, overwrite: bool = False) -> None:
    """Write ``suite`` to ``path`` as JSON."""
    payload: JSONValue = suite.to_dict()
    write_json(path, payload, overwrite=overwrite)
