"""Verdicts for responses received while running a test case."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from typing import Any, Optional

from .errors import ErrorRecord
from .json_types import Schema
from .model_types import ResponseVerdict
from .paths import ROOT, member_path
from .resolver import OperationSchemas, ResponseSchemas
from .schema_model import DataType, schema_type
from .validator import ValidationOptions, Validator

logger = logging.getLogger(__name__)

_DECODED_HEADER_TYPES = frozenset({DataType.INTEGER, DataType.NUMBER, DataType.BOOLEAN})


def status_class(status_code: int) -> str:
    """Return the class of ``status_code``, e.g. ``"2xx"`` for ``201``."""
    return f"{status_code // 100}xx"


def status_matches(status_code: int, expected: Sequence[str]) -> bool:
    """Return whether ``status_code`` falls in any expected class or equals an expected code."""
    received_class = status_class(status_code)
    return any(
        item.lower() == received_class or item == str(status_code) for item in expected
    )


def _decode_header(value: Any, schema: Schema) -> Any:
    # Header values travel as text; scalar schemas describe the decoded value.
    if not isinstance(value, str) or schema_type(schema) not in _DECODED_HEADER_TYPES:
        return value
    try:
        return json.loads(value)
    except ValueError:
        return value


def _lookup_header(headers: Mapping[str, Any], name: str) -> Any:
    if name in headers:
        return headers[name]
    lowered = name.lower()
    for key, value in headers.items():
        if key.lower() == lowered:
            return value
    return None


def _check_headers(
    validator: Validator,
    response: ResponseSchemas,
    headers: Mapping[str, Any],
) -> list[ErrorRecord]:
    errors: list[ErrorRecord] = []
    for name, schema in response.headers.items():
        value = _lookup_header(headers, name)
        if value is None and name not in response.required_headers:
            continue
        errors.extend(
            validator.validate(_decode_header(value, schema), schema, member_path(ROOT, name))
        )
    return errors


def check_response(
    schemas: OperationSchemas,
    expected_status_classes: Sequence[str],
    status_code: int,
    body: Any = None,
    headers: Optional[Mapping[str, Any]] = None,
    options: Optional[ValidationOptions] = None,
) -> ResponseVerdict:
    """Judge one response against the operation that produced it.

    The status class decides the initial verdict. Only when it passes are the
    body and the documented response headers validated; any error fails the
    final verdict. Parts the document gives no schema for are skipped.

    Args:
        schemas (OperationSchemas): Resolved schemas of the operation.
        expected_status_classes (Sequence[str]): Accepted classes such as ``"2xx"``.
        status_code (int): Received HTTP status code.
        body (Any): Decoded JSON response body.
        headers (Optional[Mapping[str, Any]]): Received response headers.
        options (Optional[ValidationOptions]): Validation switches.

    Returns:
        ResponseVerdict: Status, body and header outcome.
    """
    expected = tuple(expected_status_classes)
    if not status_matches(status_code, expected):
        logger.info("Status %d is outside %s", status_code, ", ".join(expected))
        return ResponseVerdict(
            received_status=status_code,
            expected_status_classes=expected,
            status_passed=False,
            passed=False,
        )

    validator = Validator(options)
    response = schemas.response_for(status_code)

    skipped_body = response is None or response.body is None
    body_errors: list[ErrorRecord] = []
    if response is not None and response.body is not None:
        body_errors = validator.validate(body, response.body, ROOT)

    skipped_headers = response is None or not response.headers
    header_errors: list[ErrorRecord] = []
    if response is not None and response.headers:
        header_errors = _check_headers(validator, response, headers or {})

    if skipped_body or skipped_headers:
        logger.debug(
            "Skipped validation for status %d: body=%s headers=%s",
            status_code,
            skipped_body,
            skipped_headers,
        )

    return ResponseVerdict(
        received_status=status_code,
        expected_status_classes=expected,
        status_passed=True,
        passed=not body_errors and not header_errors,
        body_errors=tuple(body_errors),
        header_errors=tuple(header_errors),
        skipped_body=skipped_body,
        skipped_headers=skipped_headers,
    )
