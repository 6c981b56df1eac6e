"""Operation discovery over the ``paths`` section of a document."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Optional

from .json_types import JSONObject, JSONValue
from .model_types import OperationSpec

logger = logging.getLogger(__name__)

HTTP_METHODS: tuple[str, ...] = (
    "get",
    "put",
    "post",
    "delete",
    "patch",
    "head",
    "options",
    "trace",
)


def _normalize_operation_id(operation_id_raw: JSONValue) -> Optional[str]:
    if isinstance(operation_id_raw, str) and operation_id_raw.strip():
        return operation_id_raw.strip()
    return None


def resolve_operations(document: JSONObject) -> list[OperationSpec]:
    """Extract every operation of ``document`` in declaration order.

    Duplicate ``operationId`` values are reported once as a warning; the
    affected operations are still returned, keyed by method and path.
    """
    raw_paths = document.get("paths")
    if not isinstance(raw_paths, dict):
        return []

    operations: list[OperationSpec] = []
    for path, path_item in raw_paths.items():
        if not isinstance(path_item, dict):
            continue
        for method in HTTP_METHODS:
            operation = path_item.get(method)
            if not isinstance(operation, dict):
                continue
            operations.append(
                OperationSpec(
                    path=path,
                    method=method,
                    operation_id=_normalize_operation_id(operation.get("operationId")),
                    operation=operation,
                    path_item=path_item,
                )
            )

    counts = Counter(op.operation_id for op in operations if op.operation_id is not None)
    conflicting = sorted(name for name, count in counts.items() if count > 1)
    if conflicting:
        logger.warning("Conflicting operationId values detected: %s", ", ".join(conflicting))

    return operations


def find_operation(document: JSONObject, path: str, method: str) -> Optional[OperationSpec]:
    """Return the operation declared for ``method`` on ``path``, if any."""
    wanted = method.lower()
    for operation in resolve_operations(document):
        if operation.path == path and operation.method == wanted:
            return operation
    return None
