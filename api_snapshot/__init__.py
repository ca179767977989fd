"""api-snapshot: snapshot assertions for JSON HTTP response bodies."""

from api_snapshot.engine import SnapshotEngine
from api_snapshot.models import ShotResult, SnapshotConfig
from api_snapshot.store import SnapshotStore

__all__ = ["SnapshotConfig", "SnapshotEngine", "SnapshotStore", "ShotResult"]
