"""Snapshot Engine - Records and compares JSON values against stored baselines.

The engine owns the record-or-compare decision. All file access goes through
the SnapshotStore; all byte comparisons use the canonical encoding.

Decision per shot:
    1. No snapshot yet, or update mode: write the candidate, report a match.
    2. Otherwise compare canonical bytes. Equal bytes match without touching
       the file. Different bytes produce a rendered diff.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from api_snapshot.canonical import canonicalize, decode, encode
from api_snapshot.diff import diff_arrays, diff_objects
from api_snapshot.errors import SnapshotIOError, SnapshotNotFoundError, UnsupportedShapeError
from api_snapshot.models import JsonKind, ShotResult, SnapshotConfig, json_kind
from api_snapshot.store import SnapshotStore


class SnapshotEngine:
    """Compares candidate JSON values with recorded snapshots.

    Usage:
        engine = SnapshotEngine(SnapshotConfig(directory=Path("__snapshots__")))
        result = engine.shot("users-body", data)
        if not result.matched:
            print(result.diff)

    Errors (encode/decode failures, filesystem errors, unsupported shapes)
    are raised, never reported through ShotResult.
    """

    def __init__(
        self,
        config: SnapshotConfig | None = None,
        store: SnapshotStore | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            config: Engine configuration. Defaults to SnapshotConfig().
            store: Store to use. Defaults to one built from config.
        """
        self._config = config or SnapshotConfig()
        self._store = store or SnapshotStore(self._config.directory, self._config.suffix)

    @property
    def config(self) -> SnapshotConfig:
        return self._config

    @property
    def store(self) -> SnapshotStore:
        return self._store

    def shot(self, key: str, candidate: Any, update: bool | None = None) -> ShotResult:
        """Match candidate against the snapshot for key, recording it if needed.

        Args:
            key: Snapshot key.
            candidate: Decoded JSON value.
            update: Overwrite the baseline instead of comparing. None uses
                config.update_all.

        Returns:
            ShotResult; diff is non-empty only when matched is False.
        """
        update_mode = self._config.update_all if update is None else update

        if update_mode or not self._store.exists(key):
            self.record(key, candidate)
            return ShotResult(key=key, matched=True, recorded=True)

        try:
            stored = self._store.read(key)
        except SnapshotNotFoundError as e:
            raise SnapshotIOError(f"snapshot for key {key!r} disappeared during comparison") from e

        encoded = encode(candidate)
        if stored == encoded:
            return ShotResult(key=key, matched=True)

        return ShotResult(key=key, matched=False, diff=self._render_diff(stored, candidate))

    def record(self, key: str, value: Any) -> Path:
        """Write value as the baseline for key, replacing any existing one."""
        return self._store.write(key, encode(value))

    def _render_diff(self, stored: bytes, candidate: Any) -> str:
        """Diff the stored baseline against the candidate.

        A baseline whose shape differs from the candidate's is diffed as an
        empty object/array, so the diff reads as everything added or removed.
        The candidate is shown as it would be stored.
        """
        baseline = decode(stored)
        candidate = canonicalize(candidate)
        kind = json_kind(candidate)

        if kind == JsonKind.OBJECT:
            return diff_objects(baseline if isinstance(baseline, dict) else {}, candidate)
        if kind == JsonKind.ARRAY:
            return diff_arrays(baseline if isinstance(baseline, list) else [], candidate)
        if kind == JsonKind.NULL:
            return diff_objects(baseline if isinstance(baseline, dict) else {}, {})
        raise UnsupportedShapeError(kind.value, "snapshot diff")
