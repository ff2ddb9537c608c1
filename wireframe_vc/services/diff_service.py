"""Structural diff between two wireframe snapshots.

Pure functions with no database access. ``diff`` walks two JSON trees in
parallel and reports leaf-level differences; ``summarize`` turns a change
list into one line of prose for the editor's history panel.

Paths use dotted keys for objects and ``[i]`` for array positions, for
example ``sections[2].title``. The root path is the empty string.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Sequence, Tuple

# Paths mentioning these are always worth naming in a summary.
SIGNIFICANT_KEYWORDS = ("sections", "title", "layout")

# Paths at most this deep are always worth naming in a summary.
SIGNIFICANT_MAX_DEPTH = 2

_PATH_SEGMENT = re.compile(r"[^.\[\]]+|\[\d+\]")


class ChangeType(str, Enum):
    """Kind of leaf-level difference."""
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"


@dataclass(frozen=True)
class Change:
    """A single difference at ``path``. ``values`` is ``(old, new)``."""
    type: ChangeType
    path: str
    values: Tuple[Any, Any]


def _kind(value: Any) -> str:
    # bool before number: True must never equal 1.
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def diff(a: Any, b: Any, path: str = "") -> List[Change]:
    """Return the leaf-level differences turning ``a`` into ``b``.

    Arrays are compared by position. Object keys are visited in ``a``'s
    order followed by keys that only ``b`` has. A value whose kind differs
    between the two sides is reported as one modification, never split
    into removal plus addition.

    The result is empty exactly when ``a`` and ``b`` are deeply equal.
    """
    changes: List[Change] = []
    _diff_into(changes, a, b, path)
    return changes


def _diff_into(changes: List[Change], a: Any, b: Any, path: str) -> None:
    kind_a, kind_b = _kind(a), _kind(b)

    if kind_a == "object" and kind_b == "object":
        keys = list(a) + [key for key in b if key not in a]
        for key in keys:
            child = f"{path}.{key}" if path else str(key)
            if key not in a:
                changes.append(Change(ChangeType.ADDED, child, (None, b[key])))
            elif key not in b:
                changes.append(Change(ChangeType.REMOVED, child, (a[key], None)))
            else:
                _diff_into(changes, a[key], b[key], child)
        return

    if kind_a == "array" and kind_b == "array":
        for i in range(max(len(a), len(b))):
            child = f"{path}[{i}]"
            if i >= len(a):
                changes.append(Change(ChangeType.ADDED, child, (None, b[i])))
            elif i >= len(b):
                changes.append(Change(ChangeType.REMOVED, child, (a[i], None)))
            else:
                _diff_into(changes, a[i], b[i], child)
        return

    if kind_a != kind_b or a != b:
        changes.append(Change(ChangeType.MODIFIED, path, (a, b)))


def path_depth(path: str) -> int:
    """Number of segments in a change path (``a.b[0]`` has three)."""
    return len(_PATH_SEGMENT.findall(path))


def is_significant(change: Change) -> bool:
    """Shallow changes and anything touching sections, titles or layout."""
    if path_depth(change.path) <= SIGNIFICANT_MAX_DEPTH:
        return True
    return any(keyword in change.path for keyword in SIGNIFICANT_KEYWORDS)


def _leaf_name(path: str) -> str:
    if not path:
        return "document"
    return path.rsplit(".", 1)[-1]


_VERBS = {
    ChangeType.ADDED: "added",
    ChangeType.REMOVED: "removed",
    ChangeType.MODIFIED: "changed",
}


def summarize(changes: Sequence[Change], max_significant: int = 3) -> str:
    """Describe a change list in one sentence.

    Example: ``"4 changes detected: 1 additions, 3 modifications. Key
    changes: title changed, sections[1] added, and 1 others."``
    """
    if not changes:
        return "No changes detected."

    counts = {change_type: 0 for change_type in ChangeType}
    for change in changes:
        counts[change.type] += 1

    labels = (
        (ChangeType.ADDED, "additions"),
        (ChangeType.REMOVED, "removals"),
        (ChangeType.MODIFIED, "modifications"),
    )
    parts = [f"{counts[t]} {label}" for t, label in labels if counts[t]]
    summary = f"{len(changes)} changes detected: " + ", ".join(parts)

    significant = [change for change in changes if is_significant(change)]
    if significant and max_significant > 0:
        named = [
            f"{_leaf_name(change.path)} {_VERBS[change.type]}"
            for change in significant[:max_significant]
        ]
        summary += ". Key changes: " + ", ".join(named)
        remaining = len(significant) - len(named)
        if remaining > 0:
            summary += f", and {remaining} others"

    return summary + "."


def compare(a: Any, b: Any, max_significant: int = 3) -> Tuple[List[Change], str]:
    """Diff two snapshots and summarize the result."""
    changes = diff(a, b)
    return changes, summarize(changes, max_significant=max_significant)
