"""Internal datatypes for operations, test suites and response verdicts."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .errors import DeficiencyCategory, ErrorRecord
from .json_types import JSONObject, JSONValue, MutableJSONObject


class CaseTarget(str, Enum):
    """Which part of the request a test case varies."""

    BODY = "body"
    HEADERS = "headers"


class Expectation(str, Enum):
    """Status class a server is expected to answer a test case with."""

    POSITIVE = "positive"
    NEGATIVE = "negative"

    @property
    def status_classes(self) -> tuple[str, ...]:
        """Expected status classes, e.g. ``("2xx",)``."""
        if self is Expectation.POSITIVE:
            return ("2xx",)
        return ("4xx", "5xx")


@dataclass(frozen=True)
class OperationSpec:
    """Normalized operation metadata extracted from OpenAPI paths."""

    path: str
    method: str
    operation_id: Optional[str]
    operation: JSONObject
    path_item: JSONObject

    @property
    def key(self) -> str:
        """Human readable operation key, e.g. ``POST /pets``."""
        return f"{self.method.upper()} {self.path}"


@dataclass(frozen=True)
class RequestCase:
    """One request input expected to be accepted or rejected by the server.

    ``data`` is the complete request body for body cases and the complete
    header set for header cases; ``header_name`` names the header under test.
    """

    target: CaseTarget
    expectation: Expectation
    category: DeficiencyCategory
    path: str
    data: JSONValue
    details: MutableJSONObject = field(default_factory=dict)
    header_name: Optional[str] = None

    def to_dict(self) -> MutableJSONObject:
        """Render the case as plain JSON data."""
        rendered: MutableJSONObject = {
            "target": self.target.value,
            "expectation": self.expectation.value,
            "category": self.category.value,
            "path": self.path,
            "data": self.data,
            "details": dict(self.details),
        }
        if self.header_name is not None:
            rendered["header_name"] = self.header_name
        return rendered


@dataclass(frozen=True)
class RequestExamples:
    """Conformant request inputs used when a case varies the other part."""

    request_body: JSONValue
    request_headers: MutableJSONObject


@dataclass(frozen=True)
class OperationSuite:
    """Examples and test cases for one HTTP operation."""

    path: str
    method: str
    operation_id: Optional[str]
    examples: RequestExamples
    positive_cases: tuple[RequestCase, ...]
    negative_cases: tuple[RequestCase, ...]

    def to_dict(self) -> MutableJSONObject:
        """Render the operation suite as plain JSON data."""
        return {
            "path": self.path,
            "method": self.method,
            "operation_id": self.operation_id,
            "examples": {
                "request_body": self.examples.request_body,
                "request_headers": dict(self.examples.request_headers),
            },
            "positive_cases": [case.to_dict() for case in self.positive_cases],
            "negative_cases": [case.to_dict() for case in self.negative_cases],
        }


@dataclass(frozen=True)
class AdherenceSuite:
    """Test suite for a whole OpenAPI document.

    The source document travels with the suite so that responses can later
    be checked against the schemas it declares.
    """

    created_at: str
    document: JSONObject
    operations: tuple[OperationSuite, ...]

    @property
    def case_count(self) -> int:
        """Total number of positive and negative cases."""
        return sum(
            len(operation.positive_cases) + len(operation.negative_cases)
            for operation in self.operations
        )

    def to_dict(self) -> MutableJSONObject:
        """Render the suite as plain JSON data."""
        return {
            "created_at": self.created_at,
            "document": self.document,
            "operations": [operation.to_dict() for operation in self.operations],
        }


@dataclass(frozen=True)
class ResponseVerdict:
    """Outcome of checking one received response.

    ``status_passed`` compares only the status class; ``passed`` additionally
    requires the body and the documented headers to validate.
    """

    received_status: int
    expected_status_classes: tuple[str, ...]
    status_passed: bool
    passed: bool
    body_errors: tuple[ErrorRecord, ...] = ()
    header_errors: tuple[ErrorRecord, ...] = ()
    skipped_body: bool = False
    skipped_headers: bool = False

    def to_dict(self) -> MutableJSONObject:
        """Render the verdict as plain JSON data."""
        return {
            "received_status": self.received_status,
            "expected_status_classes": list(self.expected_status_classes),
            "status_passed": self.status_passed,
            "passed": self.passed,
            "body_errors": [error.to_dict() for error in self.body_errors],
            "header_errors": [error.to_dict() for error in self.header_errors],
            "skipped_body": self.skipped_body,
            "skipped_headers": self.skipped_headers,
        }
