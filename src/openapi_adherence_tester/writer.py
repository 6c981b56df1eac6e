"""Filesystem writer for generated test suites."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from .json_types import JSONValue

logger = logging.getLogger(__name__)


class WriteError(RuntimeError):
    """Raised when output files cannot be written."""


def write_json(path: Path, payload: JSONValue, *, overwrite: bool = False) -> None:
    """Serialize ``payload`` to ``path`` as indented JSON.

    Args:
        path (Path): Destination file; missing parent directories are created.
        payload (JSONValue): Data to serialize.
        overwrite (bool): Replace an existing file instead of refusing.
    """
    if path.exists() and not overwrite:
        raise WriteError(f"Output file already exists: {path}")

    try:
        # YAML documents may carry dates; they are written as ISO strings.
        content = json.dumps(payload, indent=2, ensure_ascii=False, default=str)
    except (TypeError, ValueError) as exc:
        raise WriteError(f"Failed to serialize output for {path}: {exc}") from exc

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content + "\n", encoding="utf-8")
    except OSError as exc:
        raise WriteError(f"Failed to write file {path}: {exc}") from exc
    logger.info("Wrote %s", path)
