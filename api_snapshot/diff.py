"""Diff Renderer - Human-readable structural diffs between JSON values.

Output is ASCII, one JSON line per output line, with a one-character marker
in front:

     {
    -  "name": "old",
    +  "name": "new",
       "tags": [
         0: "a",
    +    1: "b"
       ]
     }

" " is unchanged, "-" exists only in the baseline, "+" only in the candidate.
Array elements carry their index. Elements are aligned with difflib so an
insertion in the middle of an array shows as one added element instead of a
cascade of changes.

The output is for failure messages only and is never parsed back.
"""

from __future__ import annotations

import difflib
import json
from typing import Any

from api_snapshot.errors import UnsupportedShapeError
from api_snapshot.models import JsonKind, json_kind

SAME = " "
REMOVED = "-"
ADDED = "+"
INDENT = "  "


def diff_objects(a: dict[str, Any], b: dict[str, Any]) -> str:
    """Render the diff from baseline object a to candidate object b."""
    _require(a, JsonKind.OBJECT, "object diff")
    _require(b, JsonKind.OBJECT, "object diff")
    return diff_values(a, b)


def diff_arrays(a: list[Any], b: list[Any]) -> str:
    """Render the diff from baseline array a to candidate array b."""
    _require(a, JsonKind.ARRAY, "array diff")
    _require(b, JsonKind.ARRAY, "array diff")
    return diff_values(a, b)


def diff_values(a: Any, b: Any) -> str:
    """Render the diff between any two JSON values."""
    renderer = _Renderer()
    renderer.node(0, "", a, b, False)
    return "\n".join(renderer.lines) + "\n"


def _require(value: Any, kind: JsonKind, context: str) -> None:
    actual = json_kind(value)
    if actual != kind:
        raise UnsupportedShapeError(actual.value, context)


def _scalar(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def _key_label(key: str) -> str:
    return f"{_scalar(key)}: "


def _index_label(index: int) -> str:
    return f"{index}: "


def _fingerprint(value: Any) -> str:
    return json.dumps(value, sort_keys=True, ensure_ascii=False)


class _Renderer:
    """Accumulates diff lines while walking two values in parallel."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    def _emit(self, marker: str, depth: int, text: str) -> None:
        self.lines.append(f"{marker}{INDENT * depth}{text}")

    def value(self, marker: str, depth: int, label: str, value: Any, comma: bool) -> None:
        """Render a whole value with a single marker."""
        end = "," if comma else ""
        kind = json_kind(value)
        if kind == JsonKind.OBJECT and value:
            self._emit(marker, depth, label + "{")
            items = sorted(value.items())
            for i, (key, child) in enumerate(items):
                self.value(marker, depth + 1, _key_label(key), child, i < len(items) - 1)
            self._emit(marker, depth, "}" + end)
        elif kind == JsonKind.ARRAY and value:
            self._emit(marker, depth, label + "[")
            for i, child in enumerate(value):
                self.value(marker, depth + 1, _index_label(i), child, i < len(value) - 1)
            self._emit(marker, depth, "]" + end)
        else:
            self._emit(marker, depth, f"{label}{_scalar(value)}{end}")

    def node(self, depth: int, label: str, old: Any, new: Any, comma: bool) -> None:
        """Render the difference between two values at the same position."""
        old_kind = json_kind(old)
        new_kind = json_kind(new)
        if old_kind == JsonKind.OBJECT and new_kind == JsonKind.OBJECT:
            self.objects(depth, label, old, new, comma)
        elif old_kind == JsonKind.ARRAY and new_kind == JsonKind.ARRAY:
            self.arrays(depth, label, old, new, comma)
        elif _fingerprint(old) == _fingerprint(new):
            self.value(SAME, depth, label, new, comma)
        else:
            self.value(REMOVED, depth, label, old, comma)
            self.value(ADDED, depth, label, new, comma)

    def objects(
        self, depth: int, label: str, old: dict[str, Any], new: dict[str, Any], comma: bool
    ) -> None:
        self._emit(SAME, depth, label + "{")
        keys = sorted(set(old) | set(new))
        for i, key in enumerate(keys):
            child_comma = i < len(keys) - 1
            child_label = _key_label(key)
            if key not in new:
                self.value(REMOVED, depth + 1, child_label, old[key], child_comma)
            elif key not in old:
                self.value(ADDED, depth + 1, child_label, new[key], child_comma)
            else:
                self.node(depth + 1, child_label, old[key], new[key], child_comma)
        self._emit(SAME, depth, "}" + ("," if comma else ""))

    def arrays(self, depth: int, label: str, old: list[Any], new: list[Any], comma: bool) -> None:
        self._emit(SAME, depth, label + "[")
        entries = _align(old, new)
        for n, (op, i, j) in enumerate(entries):
            child_comma = n < len(entries) - 1
            if op == "same":
                self.value(SAME, depth + 1, _index_label(j), new[j], child_comma)
            elif op == "modify":
                self.node(depth + 1, _index_label(j), old[i], new[j], child_comma)
            elif op == "remove":
                self.value(REMOVED, depth + 1, _index_label(i), old[i], child_comma)
            else:
                self.value(ADDED, depth + 1, _index_label(j), new[j], child_comma)
        self._emit(SAME, depth, "]" + ("," if comma else ""))


def _align(old: list[Any], new: list[Any]) -> list[tuple[str, int | None, int | None]]:
    """Pair up array elements.

    Returns (op, old_index, new_index) tuples in display order, where op is
    "same", "modify", "remove" or "add". Replaced runs pair elements
    position by position so nested changes are diffed in place.
    """
    matcher = difflib.SequenceMatcher(
        None,
        [_fingerprint(v) for v in old],
        [_fingerprint(v) for v in new],
        autojunk=False,
    )
    entries: list[tuple[str, int | None, int | None]] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            entries.extend(("same", i1 + k, j1 + k) for k in range(i2 - i1))
        elif tag == "delete":
            entries.extend(("remove", i, None) for i in range(i1, i2))
        elif tag == "insert":
            entries.extend(("add", None, j) for j in range(j1, j2))
        else:
            paired = min(i2 - i1, j2 - j1)
            entries.extend(("modify", i1 + k, j1 + k) for k in range(paired))
            entries.extend(("remove", i, None) for i in range(i1 + paired, i2))
            entries.extend(("add", None, j) for j in range(j1 + paired, j2))
    return entries
