"""Path construction and path-keyed overrides.

A path is a ``$``-rooted locator: ``.key`` addresses an object member and
``[i]`` an array element, e.g. ``$.reviews[0].name``. Every engine extends
paths through these helpers so that a validator path and a generator path for
the same location compare equal.
"""

from __future__ import annotations

from copy import deepcopy
from typing import Optional

from .json_types import JSONValue, Overrides

ROOT = "$"


def member_path(path: str, key: str) -> str:
    """Return the path of member ``key`` of the object at ``path``."""
    return f"{path}.{key}"


def element_path(path: str, index: int) -> str:
    """Return the path of element ``index`` of the array at ``path``."""
    return f"{path}[{index}]"


def is_overridden(path: str, overrides: Optional[Overrides]) -> bool:
    """Return whether ``path`` carries a pinned value."""
    return overrides is not None and path in overrides


def override_value(path: str, overrides: Overrides) -> JSONValue:
    """Return a private copy of the value pinned at ``path``."""
    return deepcopy(overrides[path])


def flatten_overrides(tree: JSONValue, path: str = ROOT) -> dict[str, JSONValue]:
    """Turn a nested overrides document into a path-keyed mapping.

    Leaves and arrays become entries; nested mappings are descended into.
    ``{"user": {"id": 7}}`` becomes ``{"$.user.id": 7}``.

    Args:
        tree (JSONValue): Nested overrides, shaped like the payload.
        path (str): Path of ``tree`` inside the payload.

    Returns:
        dict[str, JSONValue]: Overrides keyed by path.
    """
    if not isinstance(tree, dict):
        return {path: tree}
    flat: dict[str, JSONValue] = {}
    for key, value in tree.items():
        flat.update(flatten_overrides(value, member_path(path, str(key))))
    return flat


def normalize_overrides(raw: JSONValue) -> dict[str, JSONValue]:
    """Accept overrides either keyed by path or nested like the payload."""
    if not isinstance(raw, dict) or not raw:
        return {}
    if all(isinstance(key, str) and key.startswith(ROOT) for key in raw):
        return dict(raw)
    return flatten_overrides(raw)
