"""Field Path Resolver - Locates and removes fields inside decoded JSON bodies.

Paths are dot-separated object keys ("user.address.city"). They only descend
through objects: there is no array indexing. When a body is an array, callers
apply a path to each object element independently (see iter_objects).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from api_snapshot.errors import InvalidPathError, PathNotFoundError, UnsupportedShapeError
from api_snapshot.models import JsonKind, json_kind

SEPARATOR = "."


# =============================================================================
# Sentinel for Missing Fields
# =============================================================================


class _Missing:
    """Sentinel for an absent final key (distinct from JSON null)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "<MISSING>"


MISSING = _Missing()


# =============================================================================
# Paths
# =============================================================================


@dataclass(frozen=True)
class FieldPath:
    """A parsed dot-separated field path."""

    segments: tuple[str, ...]

    @classmethod
    def parse(cls, path: str) -> FieldPath:
        """Split a path on dots.

        Raises:
            InvalidPathError: If the path or any segment is empty.
        """
        if not path:
            raise InvalidPathError("field path cannot be empty")
        segments = tuple(path.split(SEPARATOR))
        if any(segment == "" for segment in segments):
            raise InvalidPathError(f"field path has an empty segment: {path!r}")
        return cls(segments)

    @property
    def parents(self) -> tuple[str, ...]:
        return self.segments[:-1]

    @property
    def last(self) -> str:
        return self.segments[-1]

    def __str__(self) -> str:
        return SEPARATOR.join(self.segments)


def parse_path(path: str | FieldPath) -> FieldPath:
    if isinstance(path, FieldPath):
        return path
    return FieldPath.parse(path)


# =============================================================================
# Resolution
# =============================================================================


def resolve(root: Any, path: str | FieldPath) -> tuple[dict[str, Any], str]:
    """Walk to the object that holds the path's final key.

    Every value visited on the way, root included, must be an object.

    Returns:
        Tuple of (parent object, final segment). The final key may be absent
        from the parent.

    Raises:
        PathNotFoundError: If an intermediate key is missing or not an object.
    """
    field_path = parse_path(path)
    current = root
    for segment in field_path.parents:
        if not isinstance(current, dict):
            raise PathNotFoundError(str(field_path))
        current = current.get(segment, MISSING)
    if not isinstance(current, dict):
        raise PathNotFoundError(str(field_path))
    return current, field_path.last


def extract(root: Any, path: str | FieldPath) -> Any:
    """Return the value at path, or MISSING if only the final key is absent."""
    parent, last = resolve(root, path)
    return parent.get(last, MISSING)


def redact(root: Any, path: str | FieldPath) -> None:
    """Remove the path's final key in place. Absent final keys are ignored."""
    parent, last = resolve(root, path)
    parent.pop(last, None)


# =============================================================================
# Top-level Shapes
# =============================================================================


def iter_objects(data: Any, context: str) -> list[dict[str, Any]]:
    """Return the objects field paths apply to.

    An object body is its own single item. For an array body, each object
    element is an item; other elements are skipped.

    Raises:
        UnsupportedShapeError: If data is neither an object nor an array.
    """
    kind = json_kind(data)
    if kind == JsonKind.OBJECT:
        return [data]
    if kind == JsonKind.ARRAY:
        return [item for item in data if isinstance(item, dict)]
    raise UnsupportedShapeError(kind.value, context)


def redact_all(data: Any, paths: Iterable[str | FieldPath], context: str = "body snap") -> None:
    """Redact every path from every object item of data, in place."""
    parsed = [parse_path(path) for path in paths]
    for item in iter_objects(data, context):
        for field_path in parsed:
            redact(item, field_path)
