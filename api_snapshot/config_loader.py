"""Config Loader - Loads snapshot configuration.

Configuration comes from an optional YAML file (with ${ENV_VAR} substitution)
and the API_SNAPSHOT_UPDATE environment variable, which overrides the file's
update_all setting. Callers such as the CLI apply their own flags on top.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Mapping

import yaml

from api_snapshot.models import SnapshotConfig

UPDATE_ENV_VAR = "API_SNAPSHOT_UPDATE"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}
_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")


class ConfigError(Exception):
    """Raised when configuration loading fails."""


def load_snapshot_config(
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> SnapshotConfig:
    """Build a SnapshotConfig from an optional YAML file and the environment.

    Args:
        config_path: YAML file with SnapshotConfig fields. None uses defaults.
            An empty file also means defaults.
        environ: Environment mapping. Defaults to os.environ.
    """
    env = os.environ if environ is None else environ
    fields: dict[str, Any] = {}

    if config_path is not None:
        try:
            text = config_path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise ConfigError(f"Config file not found: {config_path}") from e
        except OSError as e:
            raise ConfigError(f"Cannot read config file {config_path}: {e}") from e
        try:
            loaded = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in config file: {e}") from e
        if loaded is not None and not isinstance(loaded, dict):
            raise ConfigError("Config file must be a YAML mapping")
        fields = {name: _expand_env(value, env) for name, value in (loaded or {}).items()}

    if UPDATE_ENV_VAR in env:
        fields["update_all"] = parse_bool(env[UPDATE_ENV_VAR], UPDATE_ENV_VAR)

    try:
        return SnapshotConfig.model_validate(fields)
    except Exception as e:
        raise ConfigError(f"Invalid config structure: {e}") from e


def parse_bool(value: str, name: str) -> bool:
    """Parse a boolean environment value. Raises ConfigError if unrecognized."""
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean (1/0, true/false, yes/no, on/off), got '{value}'")


def _expand_env(value: Any, env: Mapping[str, str]) -> Any:
    """Replace ${NAME} in every string inside value. Unset names are errors."""
    if isinstance(value, dict):
        return {k: _expand_env(v, env) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env(v, env) for v in value]
    if not isinstance(value, str):
        return value

    missing = [name for name in _ENV_PATTERN.findall(value) if name not in env]
    if missing:
        raise ConfigError(f"Environment variable '{missing[0]}' is not set")
    return _ENV_PATTERN.sub(lambda m: env[m.group(1)], value)
