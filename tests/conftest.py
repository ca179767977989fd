"""Pytest configuration and fixtures for api-snapshot tests.

Every fixture that touches the filesystem works under tmp_path, so tests never
see each other's snapshots.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from api_snapshot.engine import SnapshotEngine
from api_snapshot.models import SnapshotConfig
from api_snapshot.store import SnapshotStore

DEFAULT_URL = "http://api.example.test/users"


def make_response(
    body: Any = None,
    content: bytes | None = None,
    status_code: int = 200,
    headers: dict[str, str] | None = None,
    url: str | None = DEFAULT_URL,
) -> httpx.Response:
    """Create an httpx.Response for testing assertions.

    body is JSON-encoded unless raw content is given. Pass url=None to build a
    response with no request attached.
    """
    if content is None:
        content = json.dumps(body).encode("utf-8")
    request = httpx.Request("GET", url) if url is not None else None
    return httpx.Response(status_code, content=content, headers=headers, request=request)


@pytest.fixture
def response_factory() -> Callable[..., httpx.Response]:
    return make_response


@pytest.fixture
def snapshot_dir(tmp_path: Path) -> Path:
    return tmp_path / "__snapshots__"


@pytest.fixture
def config(snapshot_dir: Path) -> SnapshotConfig:
    return SnapshotConfig(directory=snapshot_dir)


@pytest.fixture
def store(config: SnapshotConfig) -> SnapshotStore:
    return SnapshotStore(config.directory, config.suffix)


@pytest.fixture
def engine(config: SnapshotConfig, store: SnapshotStore) -> SnapshotEngine:
    return SnapshotEngine(config, store)


@pytest.fixture
def update_engine(config: SnapshotConfig, store: SnapshotStore) -> SnapshotEngine:
    """Engine sharing the same store but with update mode on."""
    return SnapshotEngine(config.model_copy(update={"update_all": True}), store)
