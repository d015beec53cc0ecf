"""
Comparison-only canonical form of a project manifest.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, Mapping

DEPENDENCY_FIELDS = frozenset(
    {
        "dependencies",
        "devDependencies",
        "optionalDependencies",
        "peerDependencies",
    }
)


def normalize_manifest(manifest: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Return a deep copy of ``manifest`` suitable for equality checks.

    Dependency fields are key-sorted and dropped entirely when empty; every
    other field is copied as-is, in its original order. The result is never
    written to disk.
    """

    result: Dict[str, Any] = {}
    for key, value in manifest.items():
        if key not in DEPENDENCY_FIELDS:
            result[key] = copy.deepcopy(value)
        elif value is None:
            continue
        elif isinstance(value, Mapping):
            if value:
                result[key] = {name: copy.deepcopy(value[name]) for name in sorted(value)}
        else:
            result[key] = copy.deepcopy(value)
    return result


def manifests_equal(left: Any, right: Any) -> bool:
    """
    Deep equality that, unlike ``==``, tells ``True``, ``1`` and ``1.0`` apart.

    Mapping key order is ignored; sequence order is not.
    """

    if isinstance(left, Mapping) or isinstance(right, Mapping):
        if not (isinstance(left, Mapping) and isinstance(right, Mapping)):
            return False
        if left.keys() != right.keys():
            return False
        return all(manifests_equal(left[key], right[key]) for key in left)
    if isinstance(left, (list, tuple)) or isinstance(right, (list, tuple)):
        if not (isinstance(left, (list, tuple)) and isinstance(right, (list, tuple))):
            return False
        if len(left) != len(right):
            return False
        return all(manifests_equal(a, b) for a, b in zip(left, right))
    return type(left) is type(right) and left == right
