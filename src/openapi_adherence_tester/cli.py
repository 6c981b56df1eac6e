"""Command line interface for building test suites and checking responses."""

from __future__ import annotations

import argparse
import json
import logging
import random
from pathlib import Path
from typing import Any, Optional

from .loader import OpenAPILoadError, load_openapi_document, load_overrides
from .model_types import Expectation
from .operations import find_operation
from .resolver import ResolveError, Resolver
from .response_check import check_response
from .suite import build_test_suite, write_test_suite
from .validator import ValidationOptions
from .writer import WriteError

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


class CLIError(RuntimeError):
    """Raised when CLI execution fails."""


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser."""
    parser = argparse.ArgumentParser(
        prog="openapi-adherence-tester",
        description="Generate API adherence test suites from OpenAPI documents",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Log debug details")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Log errors only")
    subcommands = parser.add_subparsers(dest="command", required=True)

    build = subcommands.add_parser("build", help="Build a JSON test suite")
    build.add_argument("--input", required=True, help="Path to an OpenAPI YAML or JSON file")
    build.add_argument("--output", required=True, help="Path of the test suite JSON to write")
    build.add_argument(
        "--overrides",
        help="YAML or JSON file pinning values per path, method, requestBody and requestHeaders",
    )
    build.add_argument("--seed", type=int, help="Seed for reproducible test data")
    build.add_argument("--force", action="store_true", help="Overwrite an existing output file")

    check = subcommands.add_parser("check", help="Check one received response")
    check.add_argument("--input", required=True, help="Path to an OpenAPI YAML or JSON file")
    check.add_argument("--path", required=True, help="Operation path, e.g. /pets/{petId}")
    check.add_argument("--method", required=True, help="HTTP method of the operation")
    check.add_argument("--status", required=True, type=int, help="Received status code")
    check.add_argument("--body", help="File holding the received JSON body")
    check.add_argument(
        "--header",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Received response header; repeatable",
    )
    check.add_argument(
        "--expect",
        choices=[item.value for item in Expectation],
        default=Expectation.POSITIVE.value,
        help="Whether the request was a positive or a negative case",
    )
    check.add_argument(
        "--strict",
        action="store_true",
        help="Report response data that the document does not describe",
    )
    return parser


def configure_logging(*, verbose: bool, quiet: bool) -> None:
    """Route library logging to stderr at the requested level."""
    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    logging.basicConfig(level=level, format=_LOG_FORMAT)


def _run_build(args: argparse.Namespace) -> int:
    document = load_openapi_document(Path(args.input))
    overrides = load_overrides(Path(args.overrides)) if args.overrides else None
    rng = random.Random(args.seed) if args.seed is not None else None

    suite = build_test_suite(document, overrides, rng=rng)
    output_path = Path(args.output)
    write_test_suite(suite, output_path, overwrite=bool(args.force))
    print(
        f"Wrote {suite.case_count} test case(s) for {len(suite.operations)} "
        f"operation(s) to {output_path}"
    )
    return 0


def _parse_headers(raw_headers: list[str]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for raw in raw_headers:
        name, separator, value = raw.partition("=")
        if not separator or not name.strip():
            raise CLIError(f"Invalid header {raw!r}; expected NAME=VALUE")
        headers[name.strip()] = value
    return headers


def _read_body(raw_path: Optional[str]) -> Any:
    if raw_path is None:
        return None
    path = Path(raw_path)
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise CLIError(f"Failed to read response body {path}: {exc}") from exc
    except ValueError as exc:
        raise CLIError(f"Response body {path} is not valid JSON: {exc}") from exc


def _run_check(args: argparse.Namespace) -> int:
    document = load_openapi_document(Path(args.input))
    operation = find_operation(document, args.path, args.method)
    if operation is None:
        raise CLIError(f"No operation {args.method.upper()} {args.path} in {args.input}")

    schemas = Resolver(document).build_operation_schemas(operation)
    verdict = check_response(
        schemas,
        Expectation(args.expect).status_classes,
        args.status,
        body=_read_body(args.body),
        headers=_parse_headers(args.header),
        options=ValidationOptions(strict_validation=bool(args.strict)),
    )
    print(json.dumps(verdict.to_dict(), indent=2))
    return 0 if verdict.passed else 1


def main(argv: Optional[list[str]] = None) -> int:
    """Run CLI and return process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=bool(args.verbose), quiet=bool(args.quiet))

    try:
        if args.command == "build":
            return _run_build(args)
        return _run_check(args)
    except (OpenAPILoadError, ResolveError, WriteError, CLIError) as exc:
        parser.error(str(exc))
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
