"""Internal data models for api-snapshot.

Configuration and results use Pydantic v2. JSON values themselves stay as the
plain Python objects produced by json.loads; JsonKind classifies them so every
shape decision is an explicit match over the six JSON kinds.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from api_snapshot.errors import UnsupportedShapeError

DEFAULT_DIRECTORY = "__snapshots__"
DEFAULT_SUFFIX = ".snap"
DEFAULT_BODY_KEY_SUFFIX = "-body"


# =============================================================================
# JSON Kinds
# =============================================================================


class JsonKind(str, Enum):
    """The six kinds of JSON value."""

    NULL = "null"
    BOOL = "bool"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"


def json_kind(value: Any) -> JsonKind:
    """Classify a decoded JSON value.

    Raises:
        UnsupportedShapeError: If value is not something json.loads can produce.
    """
    if value is None:
        return JsonKind.NULL
    # bool before number: bool is an int subclass
    if isinstance(value, bool):
        return JsonKind.BOOL
    if isinstance(value, (int, float)):
        return JsonKind.NUMBER
    if isinstance(value, str):
        return JsonKind.STRING
    if isinstance(value, list):
        return JsonKind.ARRAY
    if isinstance(value, dict):
        return JsonKind.OBJECT
    raise UnsupportedShapeError(type(value).__name__, "JSON value")


# =============================================================================
# Configuration
# =============================================================================


class SnapshotConfig(BaseModel):
    """Snapshot engine configuration.

    Replaces process-wide globals: the snapshot directory and the update flag
    travel with the engine that uses them.
    """

    model_config = ConfigDict(extra="forbid")

    directory: Path = Field(
        default=Path(DEFAULT_DIRECTORY), description="Directory holding snapshot files"
    )
    update_all: bool = Field(
        default=False, description="Overwrite every baseline instead of comparing"
    )
    suffix: str = Field(default=DEFAULT_SUFFIX, description="Snapshot file extension")
    body_key_suffix: str = Field(
        default=DEFAULT_BODY_KEY_SUFFIX,
        description="Appended to a snapshot name to form the body snapshot key",
    )

    @field_validator("suffix")
    @classmethod
    def validate_suffix(cls, v: str) -> str:
        if not v.startswith(".") or len(v) < 2 or "/" in v:
            raise ValueError("suffix must look like a file extension, e.g. '.snap'")
        return v


# =============================================================================
# Results
# =============================================================================


class ShotResult(BaseModel):
    """Outcome of one snapshot comparison."""

    model_config = ConfigDict(extra="forbid")

    key: str = Field(description="Snapshot key")
    matched: bool = Field(description="Whether the candidate matched (or was recorded)")
    recorded: bool = Field(
        default=False, description="Whether this call wrote the baseline"
    )
    diff: str = Field(default="", description="Rendered diff (empty unless mismatched)")
