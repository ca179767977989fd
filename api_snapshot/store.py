"""Snapshot Store - File-backed storage for snapshot baselines.

Each key is one file at <directory>/<key><suffix>. Keys may contain "/" to
group snapshots in sub-directories. The store creates directories lazily on
the first write.

There is no locking. Writes to distinct keys are independent; concurrent
writes to the same key are unsupported.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path, PurePosixPath

from api_snapshot.errors import InvalidKeyError, SnapshotIOError, SnapshotNotFoundError
from api_snapshot.models import DEFAULT_DIRECTORY, DEFAULT_SUFFIX


class SnapshotStore:
    """Reads and writes snapshot files.

    Usage:
        store = SnapshotStore(Path("__snapshots__"))
        if not store.exists("users-body"):
            store.write("users-body", canonical_bytes)
        data = store.read("users-body")
    """

    def __init__(
        self,
        directory: Path | str = DEFAULT_DIRECTORY,
        suffix: str = DEFAULT_SUFFIX,
    ) -> None:
        self._directory = Path(directory)
        self._suffix = suffix

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        """Return the file path for key.

        Raises:
            InvalidKeyError: If key is empty, absolute, or has "." / ".." parts.
        """
        if not key:
            raise InvalidKeyError("snapshot key cannot be empty")
        parts = PurePosixPath(key).parts
        if key.startswith("/") or "\\" in key or any(part in (".", "..") for part in parts):
            raise InvalidKeyError(f"snapshot key must stay inside the snapshot directory: {key!r}")
        return self._directory.joinpath(*parts[:-1], parts[-1] + self._suffix)

    def exists(self, key: str) -> bool:
        return self.path_for(key).is_file()

    def read(self, key: str) -> bytes:
        """Read the stored bytes for key.

        Raises:
            SnapshotNotFoundError: If nothing is stored for key.
            SnapshotIOError: On any other filesystem failure.
        """
        path = self.path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise SnapshotNotFoundError(key) from e
        except OSError as e:
            raise SnapshotIOError(f"failed to read snapshot {path}: {e}") from e

    def write(self, key: str, data: bytes) -> Path:
        """Write data for key, replacing any existing snapshot.

        Returns:
            Path to the snapshot file.

        Raises:
            SnapshotIOError: If the directory or file cannot be written.
        """
        path = self.path_for(key)
        # Write to temp file first, then rename for atomicity
        temp_path = path.with_name(path.name + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_bytes(data)
            os.replace(temp_path, path)
        except OSError as e:
            if temp_path.exists():
                temp_path.unlink()
            raise SnapshotIOError(f"failed to write snapshot {path}: {e}") from e
        print(f"[api-snapshot]: Added snapshot for key: {key}")
        return path

    def delete(self, key: str) -> bool:
        """Remove the snapshot for key. Returns False if there was none."""
        path = self.path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise SnapshotIOError(f"failed to delete snapshot {path}: {e}") from e
        return True

    def keys(self) -> list[str]:
        """List stored keys, sorted. Nested keys use "/" separators."""
        if not self._directory.is_dir():
            return []
        keys = []
        for path in self._directory.rglob("*" + self._suffix):
            if not path.is_file():
                continue
            relative = path.relative_to(self._directory).as_posix()
            keys.append(relative[: -len(self._suffix)])
        return sorted(keys)

    def clear(self) -> None:
        """Remove the snapshot directory and everything in it."""
        if not self._directory.exists():
            return
        try:
            shutil.rmtree(self._directory)
        except OSError as e:
            raise SnapshotIOError(f"failed to remove {self._directory}: {e}") from e
