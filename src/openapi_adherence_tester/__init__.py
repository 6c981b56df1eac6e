"""OpenAPI API adherence test generator package."""

from __future__ import annotations

from .cli import main
from .conformant import ConformantGenerator, generate_conformant, generate_headers
from .deficient import (
    DeficiencyOptions,
    DeficientGenerator,
    generate_deficient_by_data_type,
    generate_deficient_by_enum,
    generate_deficient_by_number_range,
    generate_deficient_by_optional_key,
    generate_deficient_by_required_key,
    generate_deficient_by_string_length,
)
from .errors import Deficiency, DeficiencyCategory, ErrorKind, ErrorRecord
from .response_check import check_response
from .suite import SuiteBuilder, build_test_suite, write_test_suite
from .validator import ValidationOptions, Validator, validate

__all__ = [
    "ConformantGenerator",
    "Deficiency",
    "DeficiencyCategory",
    "DeficiencyOptions",
    "DeficientGenerator",
    "ErrorKind",
    "ErrorRecord",
    "SuiteBuilder",
    "ValidationOptions",
    "Validator",
    "build_test_suite",
    "check_response",
    "generate_conformant",
    "generate_deficient_by_data_type",
    "generate_deficient_by_enum",
    "generate_deficient_by_number_range",
    "generate_deficient_by_optional_key",
    "generate_deficient_by_required_key",
    "generate_deficient_by_string_length",
    "generate_headers",
    "main",
    "validate",
]
